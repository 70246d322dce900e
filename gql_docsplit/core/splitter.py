"""Splitting of multi-operation documents.

For a document holding several named operations, builds a reference map
over every named definition and produces one minimal document per
operation: the operation followed by every definition it reaches through
fragment spreads or named variable types.
"""

import logging
from copy import copy

from graphql import (
    DefinitionNode,
    DocumentNode,
    FragmentSpreadNode,
    NamedTypeNode,
    Node,
    OperationDefinitionNode,
    VariableDefinitionNode,
)

from .ir import ReferenceMap

logger = logging.getLogger(__name__)


class MissingOperationNameError(ValueError):
    """Raised when a multi-operation document has an anonymous operation."""

    def __init__(self, source_name: str | None = None):
        self.source_name = source_name
        message = "Query/mutation names are required for a document with multiple definitions"
        if source_name:
            message = f"{message} ({source_name})"
        super().__init__(message)


def count_operations(document: DocumentNode) -> int:
    """Return the number of operation definitions in ``document``."""
    return sum(1 for d in document.definitions if isinstance(d, OperationDefinitionNode))


def check_operation_names(document: DocumentNode, source_name: str | None = None):
    """Raise MissingOperationNameError if any operation is anonymous."""
    for definition in document.definitions:
        if isinstance(definition, OperationDefinitionNode) and not (
            definition.name and definition.name.value
        ):
            raise MissingOperationNameError(source_name)


def collect_references(node: Node, refs: list[str]):
    """Add the names ``node`` references to ``refs``, depth-first.

    Fragment spreads contribute the fragment name and variable definitions
    with a bare named type contribute the type name. Nested selection sets,
    variable definitions and definition lists are walked; anything else is
    a leaf.
    """
    name = None
    if isinstance(node, FragmentSpreadNode):
        name = node.name.value
    elif isinstance(node, VariableDefinitionNode) and isinstance(node.type, NamedTypeNode):
        name = node.type.name.value
    if name is not None and name not in refs:
        refs.append(name)

    selection_set = getattr(node, "selection_set", None)
    if selection_set:
        for selection in selection_set.selections:
            collect_references(selection, refs)

    for variable in getattr(node, "variable_definitions", None) or ():
        collect_references(variable, refs)

    for definition in getattr(node, "definitions", None) or ():
        collect_references(definition, refs)


def build_reference_map(document: DocumentNode) -> ReferenceMap:
    """Map every named definition to the names it references directly.

    When several definitions share a name, the first one in document order
    is kept, matching find_definition.
    """
    reference_map: ReferenceMap = {}
    for definition in document.definitions:
        if getattr(definition, "name", None) and definition.name.value not in reference_map:
            refs: list[str] = []
            collect_references(definition, refs)
            reference_map[definition.name.value] = refs
    return reference_map


def find_definition(document: DocumentNode, name: str) -> DefinitionNode | None:
    """Return the first definition named ``name``, or None."""
    for definition in document.definitions:
        if getattr(definition, "name", None) and definition.name.value == name:
            return definition
    return None


def transitive_closure(name: str, reference_map: ReferenceMap) -> list[str]:
    """Return every name reachable from ``name``, in breadth-first order.

    Names without an entry in ``reference_map`` are kept but not expanded.
    ``name`` itself only appears if something references it back.
    """
    closure: dict[str, None] = {}
    frontier = list(reference_map.get(name, ()))
    while frontier:
        next_frontier = []
        for ref in frontier:
            if ref in closure:
                continue
            closure[ref] = None
            next_frontier.extend(reference_map.get(ref, ()))
        frontier = next_frontier
    return list(closure)


def separate_operation(
    document: DocumentNode, name: str, reference_map: ReferenceMap
) -> DocumentNode:
    """Return a copy of ``document`` holding only ``name`` and its closure.

    Definitions are shared with ``document``, not copied.
    """
    operation = find_definition(document, name)
    if operation is None:
        raise KeyError(f"Unknown operation: {name}")

    definitions = [operation]
    for ref in transitive_closure(name, reference_map):
        definition = find_definition(document, ref)
        if definition is not None and definition is not operation:
            definitions.append(definition)

    separated = copy(document)
    separated.definitions = tuple(definitions)
    return separated


def split_operations(
    document: DocumentNode, source_name: str | None = None
) -> dict[str, DocumentNode]:
    """Split ``document`` into one minimal document per operation.

    Returns an empty dict when the document holds zero or one operation.

    Raises:
        MissingOperationNameError: If there are several operations and
            one of them has no name
    """
    if count_operations(document) <= 1:
        return {}
    check_operation_names(document, source_name)

    reference_map = build_reference_map(document)
    operations: dict[str, DocumentNode] = {}
    for definition in document.definitions:
        if isinstance(definition, OperationDefinitionNode):
            op_name = definition.name.value
            operations[op_name] = separate_operation(document, op_name, reference_map)
            logger.debug(
                "Split %s with %d definition(s)",
                op_name,
                len(operations[op_name].definitions),
            )
    return operations
