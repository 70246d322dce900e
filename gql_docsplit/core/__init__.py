"""Core modules for loading and splitting GraphQL documents."""

from .executor import GraphQLExecutor, GraphQLResponseError
from .generator import ModuleGenerator
from .hooks import (
    AddHeaderHook,
    FilterOperationsHook,
    HookRunner,
    PostGenerateHook,
    PreLoadHook,
)
from .importer import expand_imports, scan_imports, unique_fragments
from .ir import LoadedDocuments, ReferenceMap
from .loader import DocumentLoader, load, load_file
from .parser import (
    FileResolver,
    ImportCycleError,
    MappingResolver,
    ModuleResolver,
    ParseError,
    ResolutionError,
    parse_document,
)
from .splitter import (
    MissingOperationNameError,
    build_reference_map,
    collect_references,
    count_operations,
    find_definition,
    separate_operation,
    split_operations,
    transitive_closure,
)

__all__ = [
    # Loader
    "DocumentLoader",
    "LoadedDocuments",
    "load",
    "load_file",
    # Parsing and resolution
    "ModuleResolver",
    "FileResolver",
    "MappingResolver",
    "parse_document",
    # Import expansion
    "expand_imports",
    "scan_imports",
    "unique_fragments",
    # Splitting
    "ReferenceMap",
    "build_reference_map",
    "collect_references",
    "count_operations",
    "find_definition",
    "separate_operation",
    "split_operations",
    "transitive_closure",
    # Errors
    "ParseError",
    "ResolutionError",
    "ImportCycleError",
    "MissingOperationNameError",
    # Hooks
    "PreLoadHook",
    "PostGenerateHook",
    "AddHeaderHook",
    "FilterOperationsHook",
    "HookRunner",
    # Generator
    "ModuleGenerator",
    # Executor
    "GraphQLExecutor",
    "GraphQLResponseError",
]
