"""Expansion of ``#import`` directives.

Import lines sit in the leading comment block of a document:

    #import "./fragments/user.graphql"
    #import "./fragments/post.graphql"

    query Feed { ... }

Each referenced module is resolved to a parsed document and its fragment
definitions are appended to the importing document. A fragment name that
was already merged earlier in the same pass is dropped.
"""

import logging
import re
from collections.abc import Iterable
from copy import copy

from graphql import DefinitionNode, DocumentNode, FragmentDefinitionNode

from .parser import ModuleResolver, ResolutionError

logger = logging.getLogger(__name__)

LINE_BREAK = re.compile(r"\r\n|\r|\n")
IMPORT_KEYWORD = "import"


def _unquote(token: str) -> str:
    if len(token) >= 2 and token[0] == token[-1] and token[0] in "\"'":
        return token[1:-1]
    return token


def scan_imports(source: str) -> list[str]:
    """Return the import references in the leading comment block.

    Scanning stops after the first non-empty line that is not a comment.
    """
    references = []
    for line in LINE_BREAK.split(source):
        if line.startswith("#"):
            tokens = line[1:].split(" ")
            if tokens[0] == IMPORT_KEYWORD:
                if len(tokens) < 2 or not tokens[1]:
                    raise ResolutionError(f"Import directive without a reference: {line!r}")
                references.append(_unquote(tokens[1]))
        elif line:
            break
    return references


def unique_fragments(
    definitions: Iterable[DefinitionNode], seen: set[str]
) -> list[FragmentDefinitionNode]:
    """Return fragment definitions whose names are not in ``seen`` yet.

    ``seen`` is updated, so the first occurrence of a name wins across calls.
    """
    fragments = []
    for definition in definitions:
        if not isinstance(definition, FragmentDefinitionNode):
            continue
        name = definition.name.value
        if name in seen:
            logger.debug("Dropping duplicate imported fragment %s", name)
            continue
        seen.add(name)
        fragments.append(definition)
    return fragments


def expand_imports(
    source: str,
    document: DocumentNode,
    resolver: ModuleResolver,
    origin: str | None = None,
) -> DocumentNode:
    """Merge the fragments of every imported module into ``document``.

    Args:
        source: Raw source text the document was parsed from
        document: The parsed document
        resolver: Turns import references into parsed documents
        origin: Name of the importing file, passed on to the resolver

    Returns:
        A shallow copy of ``document`` with the imported fragments appended,
        or ``document`` itself if it has no imports.

    Raises:
        ResolutionError: If any import cannot be resolved
    """
    references = scan_imports(source)
    if not references:
        return document

    local_fragments = {
        d.name.value for d in document.definitions if isinstance(d, FragmentDefinitionNode)
    }
    seen: set[str] = set()
    definitions = list(document.definitions)

    for reference in references:
        imported = resolver.resolve(reference, origin)
        fragments = unique_fragments(imported.definitions, seen)
        for fragment in fragments:
            # Imported names are deduplicated against each other, not against local ones
            if fragment.name.value in local_fragments:
                logger.warning(
                    "Imported fragment %s from %s collides with a local fragment; the local one is used",
                    fragment.name.value,
                    reference,
                )
        logger.debug("Merged %d fragment(s) from %s", len(fragments), reference)
        definitions.extend(fragments)

    expanded = copy(document)
    expanded.definitions = tuple(definitions)
    return expanded
