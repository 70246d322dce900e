#!/usr/bin/env python3
"""Demonstration of import expansion and operation splitting.

This script shows how to:
1. Load a GraphQL file that imports shared fragments
2. Inspect the minimal document of each operation
3. Generate a Python module holding the split documents

Note: This demo doesn't make real API calls - it only prints documents.
"""

import tempfile
from pathlib import Path

from graphql import print_ast

from gql_docsplit.core import DocumentLoader, ModuleGenerator

FRAGMENTS = """\
fragment Author on User { id name }
fragment PostFields on Post { id title author { ...Author } }
"""

FEED = """\
#import "./fragments.graphql"

query Feed($first: Int) { posts(first: $first) { ...PostFields } }
query Me { me { ...Author } }
mutation Like($id: ID!) { like(postId: $id) { id } }
"""


def main():
    print("=== gql-docsplit Demo ===\n")

    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "fragments.graphql").write_text(FRAGMENTS)
        (root / "feed.graphql").write_text(FEED)

        print("1. Loading feed.graphql...")
        loaded = DocumentLoader().load_file(str(root / "feed.graphql"))
        print(f"   Definitions: {len(loaded.document.definitions)}")
        print(f"   Operations: {', '.join(loaded.operation_names)}\n")

        print("2. Minimal documents:")
        for name, document in loaded.operations.items():
            print(f"\n--- {name} ---")
            print(print_ast(document))

        print("\n3. Generating module...")
        code = ModuleGenerator(loaded).render()
        print(f"   {len(code.splitlines())} lines generated")


if __name__ == "__main__":
    main()
