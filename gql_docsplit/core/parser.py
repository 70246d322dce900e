"""Parsing and module resolution for GraphQL documents.

Wraps graphql-core's parser and defines how ``#import`` references are
turned into parsed documents.
"""

import logging
import os
from collections.abc import Callable, Mapping
from typing import Protocol, runtime_checkable

from graphql import DocumentNode, GraphQLSyntaxError, Source, parse

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_NAME = "GraphQL request"


class ParseError(Exception):
    """Raised when source text is not valid GraphQL syntax."""

    def __init__(self, message: str, source_name: str = DEFAULT_SOURCE_NAME):
        self.source_name = source_name
        super().__init__(message)


class ResolutionError(Exception):
    """Raised when an #import reference cannot be located or parsed."""

    def __init__(self, message: str, reference: str | None = None):
        self.reference = reference
        super().__init__(message)


class ImportCycleError(ResolutionError):
    """Raised when a file is imported while it is still being loaded."""

    def __init__(self, chain: list[str]):
        self.chain = chain
        super().__init__(
            f"Circular import: {' -> '.join(chain)}", reference=chain[-1]
        )


def parse_document(text: str, source_name: str | None = None) -> DocumentNode:
    """Parse ``text`` into a DocumentNode.

    The source name ends up in ``document.loc.source.name`` so derived
    documents keep their provenance.
    """
    name = source_name or DEFAULT_SOURCE_NAME
    try:
        return parse(Source(text, name))
    except GraphQLSyntaxError as e:
        raise ParseError(f"Error parsing {name}: {e.message}", name) from e


@runtime_checkable
class ModuleResolver(Protocol):
    """Protocol for turning an #import reference into a parsed document.

    Example:
        class StaticResolver:
            def resolve(self, reference, origin=None):
                return parse_document(SOURCES[reference], reference)
    """

    def resolve(self, reference: str, origin: str | None = None) -> DocumentNode:
        """Resolve ``reference`` as written in the file named ``origin``.

        Args:
            reference: The reference token of the import line, unquoted
            origin: Source name of the importing document, if known

        Returns:
            The whole-document export of the referenced module

        Raises:
            ResolutionError: If the reference cannot be located or parsed
        """
        ...


# Loads a file and returns its whole-document export
LoadFunction = Callable[[str], DocumentNode]


class FileResolver:
    """Resolves references as file paths relative to the importing file.

    Every resolved file goes through ``load`` so its own imports are
    expanded before its fragments are merged into the importer.
    """

    def __init__(self, load: LoadFunction, root_dir: str | None = None):
        self.load = load
        self.root_dir = root_dir or os.getcwd()
        self._loading: list[str] = []

    def resolve_path(self, reference: str, origin: str | None = None) -> str:
        """Return the absolute path for ``reference``."""
        if os.path.isabs(reference):
            return os.path.normpath(reference)
        base_dir = self.root_dir
        if origin and os.path.isfile(origin):
            base_dir = os.path.dirname(os.path.abspath(origin))
        return os.path.normpath(os.path.join(base_dir, reference))

    def resolve(self, reference: str, origin: str | None = None) -> DocumentNode:
        path = self.resolve_path(reference, origin)
        if not os.path.isfile(path):
            raise ResolutionError(
                f"Cannot resolve import '{reference}' from {origin or self.root_dir}",
                reference,
            )
        if path in self._loading:
            raise ImportCycleError(self._loading + [path])

        logger.debug("Resolving %s -> %s", reference, path)
        self._loading.append(path)
        try:
            return self.load(path)
        except ParseError as e:
            raise ResolutionError(
                f"Cannot parse import '{reference}': {e}", reference
            ) from e
        finally:
            self._loading.pop()


class MappingResolver:
    """Resolves references against an in-memory table of source texts.

    Example:
        resolver = MappingResolver({"./frag.graphql": "fragment F on T { x }"})
    """

    def __init__(
        self,
        sources: Mapping[str, str],
        load: Callable[[str, str], DocumentNode] | None = None,
    ):
        self.sources = dict(sources)
        # (text, source_name) -> whole document; plain parsing if not given
        self.load = load or parse_document
        self._loading: list[str] = []

    def resolve(self, reference: str, origin: str | None = None) -> DocumentNode:
        if reference not in self.sources:
            raise ResolutionError(f"Cannot resolve import '{reference}'", reference)
        if reference in self._loading:
            raise ImportCycleError(self._loading + [reference])

        self._loading.append(reference)
        try:
            return self.load(self.sources[reference], reference)
        except ParseError as e:
            raise ResolutionError(
                f"Cannot parse import '{reference}': {e}", reference
            ) from e
        finally:
            self._loading.pop()
