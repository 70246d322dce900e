"""Tests for DocumentLoader and file-based import resolution."""

import pytest
from graphql import FragmentDefinitionNode, parse, print_ast

from gql_docsplit.core.hooks import FilterOperationsHook, HookRunner
from gql_docsplit.core.loader import DocumentLoader, load, load_file
from gql_docsplit.core.parser import (
    FileResolver,
    ImportCycleError,
    ModuleResolver,
    ParseError,
    ResolutionError,
)
from gql_docsplit.core.splitter import MissingOperationNameError


def names(document):
    return [d.name.value for d in document.definitions if getattr(d, "name", None)]


def fragment_names(document):
    return [d.name.value for d in document.definitions if isinstance(d, FragmentDefinitionNode)]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def write(tmp_path):
    """Write a file below tmp_path and return its path."""

    def _write(relative: str, content: str) -> str:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return str(path)

    return _write


# =============================================================================
# Tests: Loading text
# =============================================================================


class TestLoad:
    """Tests for loading source text."""

    def test_single_operation_is_parser_output(self):
        source = "fragment F on T { x }\nquery A { ...F }"
        loaded = load(source)

        assert loaded.document == parse(source)
        assert loaded.operations == {}
        assert not loaded.is_split

    def test_no_operations(self):
        loaded = load("fragment F on T { x }")
        assert loaded.operations == {}
        assert names(loaded.document) == ["F"]

    def test_scenario_split(self):
        loaded = load(
            """
            fragment F on T { x }
            query A { f { ...F } }
            query B { y }
            """
        )
        assert len(loaded.document.definitions) == 3
        assert set(names(loaded["A"])) == {"A", "F"}
        assert names(loaded["B"]) == ["B"]
        assert loaded.operation_names == ["A", "B"]
        assert "A" in loaded
        assert loaded.get("C") is None

    def test_mutations_and_queries(self):
        loaded = load(
            """
            fragment PostFields on Post { id title }
            query Post($id: ID!) { post(id: $id) { ...PostFields } }
            mutation AddPost($title: String!) { addPost(title: $title) { ...PostFields } }
            subscription OnPost { postAdded { id } }
            """
        )
        assert set(names(loaded["AddPost"])) == {"AddPost", "PostFields"}
        assert names(loaded["OnPost"]) == ["OnPost"]

    def test_source_name_recorded(self):
        loaded = load("query A { a } query B { b }", "feed.graphql")
        assert loaded.source_name == "feed.graphql"
        assert loaded["A"].loc.source.name == "feed.graphql"

    def test_document_for(self):
        loaded = load("query A { a } query B { b }")
        assert loaded.document_for("A") is loaded["A"]
        assert loaded.document_for() is loaded.document
        with pytest.raises(KeyError, match="Unknown operation"):
            loaded.document_for("C")

    def test_document_for_unsplit(self):
        loaded = load("fragment F on T { x }\nquery A { ...F }")
        assert loaded.document_for("A") is loaded.document
        with pytest.raises(KeyError, match="Unknown operation: Typo"):
            loaded.document_for("Typo")

    def test_document_for_anonymous_or_empty(self):
        anonymous = load("{ a }")
        assert anonymous.document_for() is anonymous.document
        with pytest.raises(KeyError):
            anonymous.document_for("A")
        with pytest.raises(KeyError):
            load("fragment F on T { x }").document_for("F")

    def test_derived_documents_print(self):
        loaded = load("fragment F on T { x }\nquery A { f { ...F } }\nquery B { y }")
        assert isinstance(loaded["A"].definitions, tuple)
        assert print_ast(loaded["A"]) == print_ast(parse("query A { f { ...F } } fragment F on T { x }"))

    def test_parse_error(self):
        with pytest.raises(ParseError, match="Syntax Error"):
            load("query A { a ")

    def test_missing_name(self):
        with pytest.raises(MissingOperationNameError):
            load("query A { a }\n{ b }")

    def test_missing_name_checked_before_imports(self):
        class FailingResolver:
            def resolve(self, reference, origin=None):
                raise AssertionError("imports must not be resolved")

        loader = DocumentLoader(resolver=FailingResolver())
        with pytest.raises(MissingOperationNameError):
            loader.load('#import "a"\nquery A { a }\n{ b }')


class TestLoadWithSources:
    """Tests for in-memory import resolution."""

    def test_import_scenario(self):
        loader = DocumentLoader.with_sources(
            {"./frag.graphql": "fragment Shared on T { z }"}
        )
        loaded = loader.load(
            '#import "./frag.graphql"\n'
            "query One { a { ...Shared } }\n"
            "query Two { b { ...Shared } }\n"
        )

        assert loaded.imports == ["./frag.graphql"]
        assert fragment_names(loaded.document) == ["Shared"]
        assert fragment_names(loaded["One"]) == ["Shared"]
        assert fragment_names(loaded["Two"]) == ["Shared"]

    def test_diamond_imports(self):
        loader = DocumentLoader.with_sources(
            {
                "left": '#import "base"\nfragment Left on T { ...Base }',
                "right": '#import "base"\nfragment Right on T { ...Base }',
                "base": "fragment Base on T { id }",
            }
        )
        loaded = loader.load(
            '#import "left"\n#import "right"\n'
            "query L { ...Left }\n"
            "query R { ...Right }\n"
        )

        assert sorted(fragment_names(loaded.document)) == ["Base", "Left", "Right"]
        assert set(names(loaded["L"])) == {"L", "Left", "Base"}
        assert set(names(loaded["R"])) == {"R", "Right", "Base"}

    def test_local_fragment_wins_over_import(self):
        loader = DocumentLoader.with_sources(
            {"a": "fragment F on T { ...H } fragment H on T { h }"}
        )
        loaded = loader.load(
            '#import "a"\n'
            "fragment F on T { ...G }\n"
            "fragment G on T { g }\n"
            "query A { ...F }\n"
            "query B { b }\n"
        )

        assert set(names(loaded["A"])) == {"A", "F", "G"}
        assert loaded["A"].definitions[1] is loaded.document.definitions[0]

    def test_repeated_local_fragment_keeps_its_references(self):
        loaded = load(
            "fragment F on T { ...G }\n"
            "fragment G on T { g }\n"
            "fragment F on T { x }\n"
            "query A { ...F }\n"
            "query B { b }\n"
        )
        assert set(names(loaded["A"])) == {"A", "F", "G"}

    def test_expanded_documents_print(self):
        loader = DocumentLoader.with_sources({"frag": "fragment Shared on T { z }"})
        loaded = loader.load('#import "frag"\nquery One { ...Shared }\nquery Two { b }')

        assert isinstance(loaded.document.definitions, tuple)
        assert "fragment Shared on T" in print_ast(loaded.document)
        assert "fragment Shared on T" in print_ast(loaded["One"])

    def test_imported_file_with_several_operations(self):
        loader = DocumentLoader.with_sources(
            {"ops": "query X { a } query Y { b } fragment F on T { c }"}
        )
        loaded = loader.load('#import "ops"\nquery Q { ...F }')
        assert names(loaded.document) == ["Q", "F"]

    def test_cycle(self):
        loader = DocumentLoader.with_sources(
            {
                "a": '#import "b"\nfragment A on T { x }',
                "b": '#import "a"\nfragment B on T { y }',
            }
        )
        with pytest.raises(ImportCycleError) as exc_info:
            loader.load('#import "a"\n{ a }')
        assert exc_info.value.chain == ["a", "b", "a"]

    def test_import_parse_error(self):
        loader = DocumentLoader.with_sources({"bad": "fragment {"})
        with pytest.raises(ResolutionError, match="Cannot parse import 'bad'") as exc_info:
            loader.load('#import "bad"\n{ a }')
        assert isinstance(exc_info.value.__cause__, ParseError)

    def test_hooks_run_on_top_level_only(self):
        hooks = HookRunner()
        hooks.add_pre_hook(FilterOperationsHook(exclude_prefix="Debug"))
        loader = DocumentLoader.with_sources(
            {"ops": "query DebugX { a } query DebugY { b } fragment F on T { c }"},
            hooks=hooks,
        )
        loaded = loader.load('#import "ops"\nquery Q { ...F }\nquery DebugQ { a }')

        assert loaded.operation_names == ["Q"]
        assert names(loaded.document) == ["Q", "DebugQ", "F"]


# =============================================================================
# Tests: Files
# =============================================================================


class TestLoadFile:
    """Tests for loading files with relative imports."""

    def test_relative_import(self, write):
        write("frag.graphql", "fragment Shared on T { z }")
        main = write(
            "main.graphql",
            '#import "./frag.graphql"\n'
            "query One { a { ...Shared } }\n"
            "query Two { b { ...Shared } }\n",
        )

        loaded = load_file(main)

        assert loaded.source_name == main
        assert fragment_names(loaded["One"]) == ["Shared"]
        assert fragment_names(loaded["Two"]) == ["Shared"]

    def test_nested_relative_imports(self, write):
        write("fragments/base.graphql", "fragment Base on T { id }")
        write(
            "fragments/user.graphql",
            '#import "./base.graphql"\nfragment User on T { ...Base name }',
        )
        main = write(
            "queries/main.graphql",
            '#import "../fragments/user.graphql"\n'
            "query Me { me { ...User } }\n"
            "query Ping { ping }\n",
        )

        loaded = load_file(main)

        assert set(names(loaded["Me"])) == {"Me", "User", "Base"}
        assert names(loaded["Ping"]) == ["Ping"]

    def test_missing_file(self, write):
        main = write("main.graphql", '#import "./missing.graphql"\n{ a }')
        with pytest.raises(ResolutionError, match="Cannot resolve import"):
            load_file(main)

    def test_self_import(self, write):
        main = write("main.graphql", '#import "./main.graphql"\nfragment F on T { x }')
        with pytest.raises(ImportCycleError):
            load_file(main)


class TestFileResolver:
    """Tests for FileResolver."""

    def test_is_module_resolver(self):
        assert isinstance(FileResolver(lambda path: None), ModuleResolver)

    def test_relative_to_origin(self, tmp_path, write):
        origin = write("sub/main.graphql", "{ a }")
        resolver = FileResolver(lambda path: None, root_dir=str(tmp_path))
        assert resolver.resolve_path("./frag.graphql", origin) == str(
            tmp_path / "sub" / "frag.graphql"
        )

    def test_relative_to_root_without_origin(self, tmp_path):
        resolver = FileResolver(lambda path: None, root_dir=str(tmp_path))
        assert resolver.resolve_path("frag.graphql") == str(tmp_path / "frag.graphql")

    def test_calls_load(self, write):
        path = write("frag.graphql", "fragment F on T { x }")
        calls = []

        def fake_load(p):
            calls.append(p)
            return parse("fragment F on T { x }")

        resolver = FileResolver(fake_load)
        resolver.resolve(path)
        assert calls == [path]
