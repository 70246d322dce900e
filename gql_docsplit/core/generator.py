"""Python module generator for loaded GraphQL documents.

Renders a Jinja2 template into a module exposing the whole document and
each per-operation document, both as printed GraphQL and parsed ASTs.

Supports custom templates via the template_dir parameter:
    generator = ModuleGenerator(loaded, template_dir="./my_templates")

Template lookup order:
1. User's template directory (if provided)
2. Package default templates
"""

import ast
import logging
import os
import re
from pathlib import Path

from graphql import print_ast
from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape

from .hooks import HookRunner
from .ir import LoadedDocuments

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "documents.py.j2"


def safe_docstring(text: str) -> str:
    """Escape text for use in docstrings."""
    if not text:
        return ""
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text += " "
    return text


def safe_comment(text: str) -> str:
    """Make text safe for a single-line Python comment."""
    if not text:
        return ""
    text = re.sub(r"\s+", " ", text)
    return text.strip()


def py_string(text: str) -> str:
    """Render ``text`` as a Python string literal.

    Multi-line GraphQL is emitted as a triple-quoted string when that can
    be done without escaping; anything else falls back to repr().
    """
    if "\n" in text and '"""' not in text and "\\" not in text and not text.endswith('"'):
        return f'"""\\\n{text}"""'
    return repr(text)


class ModuleGenerator:
    """Generates a Python module from a LoadedDocuments.

    Templates in template_dir take precedence over built-in templates.

    Available templates to override:
        - documents.py.j2: the generated module

    Example:
        generator = ModuleGenerator(
            loaded,
            template_dir="./my_templates",
        )
        generator.write("generated/feed_queries.py")
    """

    def __init__(
        self,
        loaded: LoadedDocuments,
        template_dir: str | None = None,
        hooks: HookRunner | None = None,
    ):
        """Initialize the generator.

        Args:
            loaded: The documents to render
            template_dir: Optional directory with custom Jinja2 templates.
                          Templates here override the built-in templates.
            hooks: Optional HookRunner whose post hooks see the rendered code
        """
        self.loaded = loaded
        self.template_dir = template_dir
        self.hooks = hooks or HookRunner()

        loaders = []
        if template_dir:
            template_path = Path(template_dir)
            if template_path.is_dir():
                loaders.append(FileSystemLoader(str(template_path)))
        loaders.append(PackageLoader("gql_docsplit", "templates"))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["repr"] = repr
        self.env.filters["py_string"] = py_string
        self.env.filters["safe_docstring"] = safe_docstring
        self.env.filters["safe_comment"] = safe_comment

    def _context(self) -> dict:
        return {
            "source_name": self.loaded.source_name,
            "source": print_ast(self.loaded.document),
            "imports": self.loaded.imports,
            "operations": {
                name: print_ast(document)
                for name, document in self.loaded.operations.items()
            },
        }

    def render(self, template_name: str = DEFAULT_TEMPLATE) -> str:
        """Render the module source.

        Raises:
            ValueError: If the rendered code is not valid Python
        """
        template = self.env.get_template(template_name)
        content = template.render(self._context())

        try:
            ast.parse(content)
        except SyntaxError as e:
            raise ValueError(
                f"Generated invalid Python for {self.loaded.source_name}: {e}\n"
                f"Template: {template_name}"
            )
        return content

    def write(self, output_path: str, template_name: str = DEFAULT_TEMPLATE) -> str:
        """Render, run post hooks and write the module to ``output_path``.

        Returns:
            The content that was written
        """
        content = self.render(template_name)
        content = self.hooks.run_post_hooks(os.path.basename(output_path), content)

        directory = os.path.dirname(output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(output_path, "w") as f:
            f.write(content)
        logger.debug("Wrote %s", output_path)
        return content
