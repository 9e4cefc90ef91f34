"""
Per-invocation cache of parsed source files.

The orchestrator owns one ParseCache and threads it through the package
loader and the field extractor, so a file reached through several input
patterns is parsed only once.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from gonstructor.languages.base.plugin import LanguagePlugin

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedFile:
    """A source file together with its syntax tree."""

    path: Path
    tree: Any


class ParseCache:
    """Maps source file path to its already-parsed tree."""

    def __init__(self, plugin: LanguagePlugin):
        self.plugin = plugin
        self._trees: dict[Path, Any] = {}

    def __len__(self) -> int:
        return len(self._trees)

    def __contains__(self, file_path: Path) -> bool:
        return self._key(file_path) in self._trees

    @staticmethod
    def _key(file_path: Path) -> Path:
        return Path(file_path).resolve()

    def parse(self, file_path: Path) -> ParsedFile:
        """
        Parse a file, reusing an earlier result for the same path.

        Raises:
            ParseError: Propagated unchanged from the plugin; failures are not cached
        """
        file_path = Path(file_path)
        key = self._key(file_path)

        tree = self._trees.get(key)
        if tree is None:
            tree = self.plugin.parse_file(file_path)
            self._trees[key] = tree
        else:
            logger.debug(f"Parse cache hit: {file_path}")

        return ParsedFile(path=file_path, tree=tree)

    def parse_all(self, file_paths: list[Path]) -> list[ParsedFile]:
        """Parse files in order; the first failure aborts."""
        return [self.parse(p) for p in file_paths]
