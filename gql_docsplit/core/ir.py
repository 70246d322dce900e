"""Result types for loaded GraphQL documents.

The document model itself is graphql-core's AST (DocumentNode and friends).
This module defines the value handed back to callers once a source text has
had its imports expanded and its operations split.
"""

from dataclasses import dataclass, field

from graphql import DocumentNode, OperationDefinitionNode

# Definition name -> names it references directly, in discovery order
ReferenceMap = dict[str, list[str]]


@dataclass
class LoadedDocuments:
    """Whole-document export plus one minimal document per named operation.

    ``operations`` is empty when the source holds zero or one operation;
    in that case ``document`` is the only export.
    """
    document: DocumentNode
    operations: dict[str, DocumentNode] = field(default_factory=dict)
    source_name: str = "GraphQL request"
    # References expanded by #import directives, in file order
    imports: list[str] = field(default_factory=list)

    def __getitem__(self, name: str) -> DocumentNode:
        return self.operations[name]

    def __contains__(self, name: object) -> bool:
        return name in self.operations

    def get(self, name: str, default: DocumentNode | None = None) -> DocumentNode | None:
        """Return the document for ``name``, or ``default``."""
        return self.operations.get(name, default)

    @property
    def operation_names(self) -> list[str]:
        """Names of the split operations, in document order."""
        return list(self.operations)

    @property
    def is_split(self) -> bool:
        """True if the source held more than one operation."""
        return bool(self.operations)

    def document_for(self, name: str | None = None) -> DocumentNode:
        """Return the minimal document for ``name``.

        Returns the whole document when ``name`` is None, or when the source
        was not split and ``name`` is its single operation.

        Raises:
            KeyError: If ``name`` is not an operation of this source
        """
        if name is None:
            return self.document
        if name in self.operations:
            return self.operations[name]
        if not self.operations and self.single_operation_name == name:
            return self.document
        raise KeyError(f"Unknown operation: {name}")

    @property
    def single_operation_name(self) -> str | None:
        """Name of the only operation of an unsplit document, if it has one."""
        operations = [
            d for d in self.document.definitions if isinstance(d, OperationDefinitionNode)
        ]
        if len(operations) != 1 or operations[0].name is None:
            return None
        return operations[0].name.value
