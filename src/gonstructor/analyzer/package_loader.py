"""
Package loader.

Resolves command-line patterns to exactly one Go package. Mirrors what
`go list` does for the patterns a go:generate directive passes:

- a directory contributes its non-test .go files
- `dir/...` contributes every package below dir
- a file contributes itself

Files found through a directory are subject to build constraints (file name
suffix and //go:build header); files named explicitly are always used.
"""

import logging
from pathlib import Path

from gonstructor.analyzer.build_constraints import (
    BuildContext,
    ConstraintSyntaxError,
    matches_file_name,
    should_build,
)
from gonstructor.analyzer.parse_cache import ParseCache
from gonstructor.config.models import GoPackage
from gonstructor.errors import LoadError

logger = logging.getLogger(__name__)

RECURSIVE_SUFFIX = "..."
SKIPPED_DIRS = {"vendor", "testdata"}


class PackageLoader:
    """Resolves patterns into a single GoPackage."""

    def __init__(self, cache: ParseCache, context: BuildContext | None = None):
        self.cache = cache
        self.extensions = cache.plugin.file_extensions
        self.context = context or BuildContext.from_environment()

    def load(self, patterns: list[str]) -> GoPackage:
        """
        Load the package denoted by the given patterns.

        Args:
            patterns: File, directory or `dir/...` patterns

        Returns:
            The single resolved package

        Raises:
            LoadError: If a pattern does not exist, a build constraint is
                malformed, or zero or several packages resolve
            ParseError: If a file's package clause cannot be read
        """
        files = self._expand_patterns(patterns or ["."])

        # (directory, package name) -> files, in discovery order
        packages: dict[tuple[Path, str], list[Path]] = {}
        for file_path, explicit in files:
            parsed = self.cache.parse(file_path)
            if not explicit and not self._satisfies_constraints(file_path, parsed.tree):
                logger.debug(f"Excluded by build constraints: {file_path}")
                continue
            name = self.cache.plugin.package_name(parsed.tree)
            if name is None:
                raise LoadError(f"failed to load package: {file_path}: missing package clause")
            if name.endswith("_test"):
                continue
            key = (file_path.parent.resolve(), name)
            packages.setdefault(key, []).append(file_path)

        if len(packages) != 1:
            found = ", ".join(f"{name} ({directory})" for directory, name in packages)
            detail = f": {found}" if found else ""
            raise LoadError(f"ambiguous error; {len(packages)} packages found{detail}")

        (directory, name), package_files = next(iter(packages.items()))
        logger.debug(f"Loaded package {name} with {len(package_files)} files from {directory}")
        return GoPackage(name=name, directory=directory, files=package_files)

    def _satisfies_constraints(self, file_path: Path, tree) -> bool:
        try:
            return should_build(self.cache.plugin.build_constraint_comments(tree), self.context)
        except ConstraintSyntaxError as e:
            raise LoadError(f"failed to load package: {file_path}: {e}") from e

    def _expand_patterns(self, patterns: list[str]) -> list[tuple[Path, bool]]:
        seen: set[Path] = set()
        files: list[tuple[Path, bool]] = []

        for pattern in patterns:
            explicit = self._is_file_pattern(pattern)
            for file_path in self._expand_pattern(pattern):
                key = file_path.resolve()
                if key in seen:
                    continue
                seen.add(key)
                files.append((file_path, explicit))

        return files

    @staticmethod
    def _is_file_pattern(pattern: str) -> bool:
        return not pattern.endswith(RECURSIVE_SUFFIX) and Path(pattern).is_file()

    def _expand_pattern(self, pattern: str) -> list[Path]:
        if pattern.endswith(RECURSIVE_SUFFIX):
            root = Path(pattern[: -len(RECURSIVE_SUFFIX)].rstrip("/") or ".")
            if not root.is_dir():
                raise LoadError(f"failed to load package: directory not found: {root}")
            files: list[Path] = []
            for directory in [root, *sorted(p for p in root.rglob("*") if p.is_dir())]:
                if self._is_skipped_dir(directory, root):
                    continue
                files.extend(self._source_files_in(directory))
            return files

        path = Path(pattern)
        if path.is_dir():
            return self._source_files_in(path)
        if path.is_file():
            if path.suffix not in self.extensions:
                raise LoadError(f"failed to load package: not a Go source file: {path}")
            return [path]
        raise LoadError(f"failed to load package: no such file or directory: {pattern}")

    def _source_files_in(self, directory: Path) -> list[Path]:
        return sorted(
            p
            for p in directory.iterdir()
            if p.is_file()
            and p.suffix in self.extensions
            and not p.name.endswith("_test.go")
            and not p.name.startswith((".", "_"))
            and matches_file_name(p.name, self.context)
        )

    @staticmethod
    def _is_skipped_dir(directory: Path, root: Path) -> bool:
        for part in directory.relative_to(root).parts:
            if part in SKIPPED_DIRS or part.startswith((".", "_")):
                return True
        return False
