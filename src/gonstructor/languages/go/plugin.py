"""
Go language plugin.

Parses Go source with tree-sitter and exposes the syntactic queries used by
the package loader and the field extractor.
"""

import logging
import string
from pathlib import Path
from typing import Any, Iterator

from gonstructor.config.models import ImportSpec
from gonstructor.errors import ParseError
from gonstructor.languages.base.plugin import LanguagePlugin

logger = logging.getLogger(__name__)


def node_text(node: Any) -> str:
    """Source text of a tree-sitter node."""
    return node.text.decode("utf-8")


_SIMPLE_ESCAPES = {
    "a": "\a", "b": "\b", "f": "\f", "n": "\n", "r": "\r",
    "t": "\t", "v": "\v", "\\": "\\", '"': '"',
}
_HEX_WIDTHS = {"x": 2, "u": 4, "U": 8}


def unquote_string(literal: str) -> str:
    """
    Value of a Go string literal, following strconv.Unquote.

    \\x and octal escapes denote bytes; the result is decoded as UTF-8.

    Raises:
        ValueError: If the literal is not a valid raw or interpreted string
    """
    if len(literal) < 2 or literal[0] != literal[-1] or literal[0] not in '"`':
        raise ValueError(f"not a string literal: {literal}")
    body = literal[1:-1]

    if literal[0] == "`":
        if "`" in body:
            raise ValueError(f"unexpected backquote in raw string: {literal}")
        return body.replace("\r", "")

    out = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch in '"\n':
            raise ValueError(f"unexpected {ch!r} in string literal: {literal}")
        if ch != "\\":
            out += ch.encode("utf-8")
            i += 1
            continue

        esc = body[i + 1 : i + 2]
        if esc in _SIMPLE_ESCAPES:
            out += _SIMPLE_ESCAPES[esc].encode("utf-8")
            i += 2
        elif esc in _HEX_WIDTHS:
            width = _HEX_WIDTHS[esc]
            digits = body[i + 2 : i + 2 + width]
            if len(digits) != width or not all(c in string.hexdigits for c in digits):
                raise ValueError(f"invalid escape \\{esc}{digits} in {literal}")
            value = int(digits, 16)
            if esc == "x":
                out.append(value)
            elif value > 0x10FFFF or 0xD800 <= value < 0xE000:
                raise ValueError(f"escape \\{esc}{digits} is not a valid code point")
            else:
                out += chr(value).encode("utf-8")
            i += 2 + width
        elif esc and esc in "01234567":
            digits = body[i + 1 : i + 4]
            if len(digits) != 3 or not all(c in "01234567" for c in digits) or int(digits, 8) > 255:
                raise ValueError(f"invalid octal escape \\{digits} in {literal}")
            out.append(int(digits, 8))
            i += 4
        else:
            raise ValueError(f"unknown escape sequence \\{esc} in {literal}")

    return out.decode("utf-8", errors="replace")


class GoPlugin(LanguagePlugin):
    """Go language plugin using tree-sitter for parsing."""

    def __init__(self):
        self._parser = None

    # =========================================================================
    # Plugin Metadata
    # =========================================================================

    @property
    def language_name(self) -> str:
        return "go"

    @property
    def file_extensions(self) -> list[str]:
        return [".go"]

    # =========================================================================
    # AST Parsing (using tree-sitter)
    # =========================================================================

    def _get_parser(self):
        """Lazy initialization of tree-sitter parser."""
        if self._parser is None:
            try:
                import tree_sitter_go as tsgo
                from tree_sitter import Language, Parser

                GO_LANGUAGE = Language(tsgo.language())
                self._parser = Parser(GO_LANGUAGE)
            except ImportError:
                raise RuntimeError(
                    "tree-sitter-go not installed. Run: pip install tree-sitter-go"
                )
        return self._parser

    def parse_file(self, file_path: Path) -> Any:
        """Parse a Go file into a tree-sitter tree, rejecting syntax errors."""
        try:
            with open(file_path, "rb") as f:
                source = f.read()
        except OSError as e:
            raise ParseError(file_path, 0, 0, f"cannot read file: {e}") from e

        logger.debug(f"Parsing {file_path}")
        tree = self._get_parser().parse(source)

        error = self.find_syntax_error(tree)
        if error:
            line, column, detail = error
            raise ParseError(file_path, line, column, detail)
        return tree

    def parse_source(self, source_code: str) -> Any:
        """Parse Go source code into a tree-sitter tree."""
        parser = self._get_parser()
        return parser.parse(bytes(source_code, "utf-8"))

    def find_syntax_error(self, tree: Any) -> tuple[int, int, str] | None:
        root = tree.root_node
        if not root.has_error:
            return None

        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "ERROR" or node.is_missing:
                row, column = node.start_point[0], node.start_point[1]
                if node.is_missing:
                    detail = f"missing {node.type}"
                else:
                    snippet = node_text(node).splitlines()[0] if node.text else ""
                    detail = f"unexpected {snippet[:40]!r}"
                return row + 1, column + 1, detail
            # depth-first, source order
            stack.extend(reversed([c for c in node.children if c.has_error or c.is_missing]))

        # has_error without a locatable node; report the root
        return 1, 1, "syntax error"

    # =========================================================================
    # Declaration Queries
    # =========================================================================

    def package_name(self, tree: Any) -> str | None:
        for node in tree.root_node.children:
            if node.type == "package_clause":
                for child in node.children:
                    if child.type == "package_identifier":
                        return node_text(child)
        return None

    def build_constraint_comments(self, tree: Any) -> list[str]:
        """
        Line comments of the file header that can hold build constraints.

        As with go/build, the header is the run of comments before the
        package clause, cut at the last blank line; comments directly
        attached to the package clause are package documentation.
        """
        comments: list[Any] = []
        package_row = None
        for node in tree.root_node.children:
            if node.type == "package_clause":
                package_row = node.start_point[0]
                break
            if node.type == "comment":
                comments.append(node)
        if package_row is None:
            return []

        header_end = 0
        for i, comment in enumerate(comments):
            next_row = comments[i + 1].start_point[0] if i + 1 < len(comments) else package_row
            if next_row > comment.end_point[0] + 1:
                header_end = i + 1

        return [node_text(c) for c in comments[:header_end] if node_text(c).startswith("//")]

    def extract_imports(self, tree: Any) -> list[ImportSpec]:
        """
        Extract all import specs of a Go file.

        Handles:
        - import "fmt"
        - import t "time"
        - import ( "a"; b "c" )
        """
        imports: list[ImportSpec] = []

        for node in tree.root_node.children:
            if node.type != "import_declaration":
                continue
            for spec in self._iter_import_specs(node):
                path_node = spec.child_by_field_name("path")
                if path_node is None:
                    continue
                name_node = spec.child_by_field_name("name")
                imports.append(
                    ImportSpec(
                        path=unquote_string(node_text(path_node)),
                        alias=node_text(name_node) if name_node is not None else None,
                    )
                )
        return imports

    def _iter_import_specs(self, node: Any) -> Iterator[Any]:
        for child in node.children:
            if child.type == "import_spec":
                yield child
            elif child.type == "import_spec_list":
                yield from self._iter_import_specs(child)

    def iter_type_specs(self, tree: Any) -> Iterator[Any]:
        """Yield top-level type_spec nodes, grouped declarations included."""
        for node in tree.root_node.children:
            if node.type != "type_declaration":
                continue
            for child in node.children:
                if child.type == "type_spec":
                    yield child
