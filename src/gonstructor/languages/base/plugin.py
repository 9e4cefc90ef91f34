"""
Base language plugin interface.

A plugin is the Source Parser collaborator of the generator: it turns source
text into a syntax tree and answers the few syntactic questions the analyzer
needs (package name, imports, top-level type declarations).
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterator

from gonstructor.config.models import ImportSpec


class LanguagePlugin(ABC):
    """Abstract base class for language plugins."""

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the language name (e.g., 'go')."""
        pass

    @property
    @abstractmethod
    def file_extensions(self) -> list[str]:
        """Return file extensions for this language (e.g., ['.go'])."""
        pass

    # =========================================================================
    # AST Parsing
    # =========================================================================

    @abstractmethod
    def parse_file(self, file_path: Path) -> Any:
        """
        Parse a source file into a syntax tree.

        Args:
            file_path: Path to the source file

        Returns:
            Language-specific syntax tree

        Raises:
            ParseError: If the file cannot be read or contains syntax errors
        """
        pass

    @abstractmethod
    def parse_source(self, source_code: str) -> Any:
        """
        Parse source code string into a syntax tree, without validating it.

        Args:
            source_code: Source code as string

        Returns:
            Language-specific syntax tree
        """
        pass

    @abstractmethod
    def find_syntax_error(self, tree: Any) -> tuple[int, int, str] | None:
        """
        Locate the first syntax error of a tree.

        Returns:
            (line, column, description), 1-based, or None for a clean tree
        """
        pass

    # =========================================================================
    # Declaration Queries
    # =========================================================================

    @abstractmethod
    def package_name(self, tree: Any) -> str | None:
        """Return the package a file belongs to, if it declares one."""
        pass

    @abstractmethod
    def build_constraint_comments(self, tree: Any) -> list[str]:
        """Return the header comments that may carry build constraints."""
        pass

    @abstractmethod
    def extract_imports(self, tree: Any) -> list[ImportSpec]:
        """Return the imports of a file in source order."""
        pass

    @abstractmethod
    def iter_type_specs(self, tree: Any) -> Iterator[Any]:
        """Yield top-level type declarations in source order."""
        pass
