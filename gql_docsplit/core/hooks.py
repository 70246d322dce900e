"""Extension points around loading and module generation.

Two kinds of hook exist:

- pre-load hooks see each top-level LoadedDocuments after its imports are
  expanded and its operations split, and return the value handed to the
  caller;
- post-generate hooks see the source text of a generated Python module and
  return the text that is written.

A HookRunner holds both lists and is shared by DocumentLoader and
ModuleGenerator:

    runner = HookRunner()
    runner.add_pre_hook(FilterOperationsHook(exclude_prefix="Debug"))
    runner.add_post_hook(AddHeaderHook("# Generated by gql-docsplit"))

    loaded = DocumentLoader(hooks=runner).load_file("feed.graphql")
    ModuleGenerator(loaded, hooks=runner).write("feed_queries.py")
"""

import logging
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from .ir import LoadedDocuments

logger = logging.getLogger(__name__)


@runtime_checkable
class PreLoadHook(Protocol):
    """Receives a LoadedDocuments before the loader returns it.

    Documents pulled in through ``#import`` are never passed to hooks.
    """

    def pre_load(self, loaded: LoadedDocuments) -> LoadedDocuments:
        """Return the LoadedDocuments to hand to the caller.

        Args:
            loaded: Whole document plus the per-operation documents

        Returns:
            ``loaded`` itself, modified or not, or a replacement
        """
        ...


@runtime_checkable
class PostGenerateHook(Protocol):
    """Receives generated module source before it is written.

    Example:
        class StripTrailingSpace(PostGenerateHook):
            def post_generate(self, filename: str, content: str) -> str:
                return "\\n".join(line.rstrip() for line in content.splitlines()) + "\\n"
    """

    def post_generate(self, filename: str, content: str) -> str:
        """Return the text to write for ``filename``.

        Args:
            filename: Base name of the target file, e.g. "feed_queries.py"
            content: Rendered module source
        """
        ...


class AddHeaderHook:
    """Prepends a header, followed by one blank line, to generated modules."""

    def __init__(self, header: str):
        self.header = header

    def post_generate(self, _filename: str, content: str) -> str:
        return self.header.rstrip("\n") + "\n\n" + content


class FilterOperationsHook:
    """Keeps only the split operations whose names pass every rule.

    An operation is dropped when its name starts with ``exclude_prefix`` or
    ends with ``exclude_suffix``, or lacks ``include_prefix`` or
    ``include_suffix``. Rules left as None do not apply. The whole document
    is not filtered.

    Example:
        hook = FilterOperationsHook(exclude_prefix="Debug", include_suffix="Query")
    """

    def __init__(
        self,
        exclude_prefix: str | None = None,
        exclude_suffix: str | None = None,
        include_prefix: str | None = None,
        include_suffix: str | None = None,
    ):
        self.rules: list[Callable[[str], bool]] = []
        if exclude_prefix:
            self.rules.append(lambda name: not name.startswith(exclude_prefix))
        if exclude_suffix:
            self.rules.append(lambda name: not name.endswith(exclude_suffix))
        if include_prefix:
            self.rules.append(lambda name: name.startswith(include_prefix))
        if include_suffix:
            self.rules.append(lambda name: name.endswith(include_suffix))

    def accepts(self, name: str) -> bool:
        return all(rule(name) for rule in self.rules)

    def pre_load(self, loaded: LoadedDocuments) -> LoadedDocuments:
        kept = {}
        for name, document in loaded.operations.items():
            if self.accepts(name):
                kept[name] = document
            else:
                logger.debug("Filtered out operation %s", name)
        loaded.operations = kept
        return loaded


class HookRunner:
    """Ordered pre-load and post-generate hooks.

    Each hook receives the value returned by the one before it.
    """

    def __init__(self):
        self.pre_hooks: list[PreLoadHook] = []
        self.post_hooks: list[PostGenerateHook] = []

    def add_pre_hook(self, hook: PreLoadHook):
        self.pre_hooks.append(hook)

    def add_post_hook(self, hook: PostGenerateHook):
        self.post_hooks.append(hook)

    def run_pre_hooks(self, loaded: LoadedDocuments) -> LoadedDocuments:
        for hook in self.pre_hooks:
            loaded = hook.pre_load(loaded)
        return loaded

    def run_post_hooks(self, filename: str, content: str) -> str:
        for hook in self.post_hooks:
            content = hook.post_generate(filename, content)
        return content
