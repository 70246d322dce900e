"""Loads GraphQL source text into whole and per-operation documents.

Example:
    loader = DocumentLoader()
    loaded = loader.load_file("queries/feed.graphql")

    loaded.document           # every definition, imports merged in
    loaded["FeedQuery"]       # FeedQuery plus the fragments it uses
"""

import logging
import os
from collections.abc import Mapping

from graphql import DocumentNode

from .hooks import HookRunner
from .importer import expand_imports, scan_imports
from .ir import LoadedDocuments
from .parser import FileResolver, MappingResolver, ModuleResolver, parse_document
from .splitter import check_operation_names, count_operations, split_operations

logger = logging.getLogger(__name__)


class DocumentLoader:
    """Expands imports and splits operations for GraphQL sources.

    Args:
        resolver: Turns #import references into parsed documents.
                  Defaults to a FileResolver that loads files through this
                  loader, so nested imports are expanded too.
        hooks: Optional HookRunner whose pre-load hooks see every result
    """

    def __init__(
        self,
        resolver: ModuleResolver | None = None,
        hooks: HookRunner | None = None,
    ):
        self.resolver = resolver or FileResolver(self._export_file)
        self.hooks = hooks or HookRunner()

    @classmethod
    def with_sources(
        cls, sources: Mapping[str, str], hooks: HookRunner | None = None
    ) -> "DocumentLoader":
        """Create a loader resolving imports from an in-memory table."""
        loader = cls(hooks=hooks)
        loader.resolver = MappingResolver(sources, load=loader._export_text)
        return loader

    def load(self, source: str, source_name: str | None = None) -> LoadedDocuments:
        """Load ``source`` into a LoadedDocuments and run pre-load hooks.

        Raises:
            ParseError: If the source is not valid GraphQL
            ResolutionError: If an #import cannot be resolved
            MissingOperationNameError: If several operations are present
                and one of them is anonymous
        """
        return self.hooks.run_pre_hooks(self._load(source, source_name))

    def _load(self, source: str, source_name: str | None) -> LoadedDocuments:
        document = parse_document(source, source_name)
        name = document.loc.source.name if document.loc else source_name

        # Names are checked before any import is resolved
        if count_operations(document) > 1:
            check_operation_names(document, name)

        document = expand_imports(source, document, self.resolver, source_name)
        loaded = LoadedDocuments(
            document=document,
            operations=split_operations(document, name),
            source_name=name,
            imports=scan_imports(source),
        )
        logger.debug(
            "Loaded %s: %d definition(s), %d operation document(s)",
            name,
            len(document.definitions),
            len(loaded.operations),
        )
        return loaded

    def load_file(self, path: str) -> LoadedDocuments:
        """Read and load the file at ``path``."""
        return self.load(self._read(path), path)

    @staticmethod
    def _read(path: str) -> str:
        with open(path, encoding="utf-8") as f:
            return f.read()

    def _export_file(self, path: str) -> DocumentNode:
        return self._load(self._read(path), path).document

    def _export_text(self, source: str, source_name: str) -> DocumentNode:
        return self._load(source, source_name).document


def load(source: str, source_name: str | None = None) -> LoadedDocuments:
    """Load ``source`` with a default DocumentLoader."""
    return DocumentLoader().load(source, source_name)


def load_file(path: str) -> LoadedDocuments:
    """Load the file at ``path`` with a default DocumentLoader."""
    return DocumentLoader().load_file(os.fspath(path))
