"""
Unit tests for package resolution and the parse cache.
"""

import tempfile
from pathlib import Path

import pytest

from gonstructor.analyzer.build_constraints import BuildContext
from gonstructor.analyzer.package_loader import PackageLoader
from gonstructor.analyzer.parse_cache import ParseCache
from gonstructor.errors import LoadError, ParseError
from gonstructor.languages.go.plugin import GoPlugin


@pytest.fixture
def temp_dir():
    """Create a temporary directory for Go sources."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def cache():
    return ParseCache(GoPlugin())


@pytest.fixture
def loader(cache):
    return PackageLoader(cache)


def write_go(path: Path, package: str, body: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"package {package}\n\n{body}")
    return path


class TestPackageLoader:
    """Test resolving patterns to one package."""

    def test_directory_pattern(self, temp_dir, loader):
        write_go(temp_dir / "b.go", "models")
        write_go(temp_dir / "a.go", "models")
        write_go(temp_dir / "a_test.go", "models")
        (temp_dir / "notes.txt").write_text("not go")

        package = loader.load([str(temp_dir)])

        assert package.name == "models"
        assert [p.name for p in package.files] == ["a.go", "b.go"]
        assert package.directory == temp_dir.resolve()

    def test_file_patterns(self, temp_dir, loader):
        a = write_go(temp_dir / "a.go", "models")
        write_go(temp_dir / "b.go", "models")

        package = loader.load([str(a)])

        assert package.files == [a]

    def test_overlapping_patterns_are_deduplicated(self, temp_dir, loader, cache):
        a = write_go(temp_dir / "a.go", "models")
        write_go(temp_dir / "b.go", "models")

        package = loader.load([str(temp_dir), str(a)])

        assert [p.name for p in package.files] == ["a.go", "b.go"]
        assert len(cache) == 2

    def test_two_packages_in_one_directory(self, temp_dir, loader):
        write_go(temp_dir / "a.go", "models")
        write_go(temp_dir / "b.go", "other")

        with pytest.raises(LoadError, match="2 packages found"):
            loader.load([str(temp_dir)])

    def test_recursive_pattern_with_several_packages(self, temp_dir, loader):
        write_go(temp_dir / "one" / "a.go", "one")
        write_go(temp_dir / "two" / "b.go", "two")

        with pytest.raises(LoadError, match="ambiguous"):
            loader.load([f"{temp_dir}/..."])

    def test_recursive_pattern_skips_vendor_and_testdata(self, temp_dir, loader):
        write_go(temp_dir / "a.go", "root")
        write_go(temp_dir / "vendor" / "dep" / "d.go", "dep")
        write_go(temp_dir / "testdata" / "t.go", "fixture")

        package = loader.load([f"{temp_dir}/..."])

        assert package.name == "root"

    def test_empty_directory(self, temp_dir, loader):
        with pytest.raises(LoadError, match="0 packages found"):
            loader.load([str(temp_dir)])

    def test_missing_pattern(self, temp_dir, loader):
        with pytest.raises(LoadError, match="no such file or directory"):
            loader.load([str(temp_dir / "nope")])

    def test_non_go_file(self, temp_dir, loader):
        readme = temp_dir / "README.md"
        readme.write_text("# hi")

        with pytest.raises(LoadError, match="not a Go source file"):
            loader.load([str(readme)])

    def test_parse_error_propagates(self, temp_dir, loader):
        broken = temp_dir / "broken.go"
        broken.write_text("package models\n\ntype T struct {\n\tA int\n")

        with pytest.raises(ParseError) as exc_info:
            loader.load([str(temp_dir)])

        assert exc_info.value.file_path == broken


class TestBuildConstraints:
    """Test that files excluded from the build do not form packages."""

    @pytest.fixture
    def linux_loader(self, cache):
        return PackageLoader(cache, BuildContext(goos="linux", goarch="amd64"))

    def test_ignored_generator_script(self, temp_dir, linux_loader):
        write_go(temp_dir / "person.go", "people")
        (temp_dir / "gen.go").write_text("//go:build ignore\n\npackage main\n\nfunc main() {}\n")

        package = linux_loader.load([str(temp_dir)])

        assert package.name == "people"
        assert [p.name for p in package.files] == ["person.go"]

    def test_tools_file_with_legacy_constraint(self, temp_dir, linux_loader):
        write_go(temp_dir / "person.go", "people")
        (temp_dir / "tools.go").write_text(
            "//go:build tools\n// +build tools\n\npackage tools\n\nimport _ \"golang.org/x/tools/cmd/stringer\"\n"
        )
        (temp_dir / "legacy.go").write_text("// +build ignore\n\npackage main\n")

        package = linux_loader.load([str(temp_dir)])

        assert [p.name for p in package.files] == ["person.go"]

    def test_satisfied_constraint_is_kept(self, temp_dir, linux_loader):
        write_go(temp_dir / "person.go", "people")
        (temp_dir / "unix.go").write_text("//go:build unix && !windows\n\npackage people\n")

        package = linux_loader.load([str(temp_dir)])

        assert [p.name for p in package.files] == ["person.go", "unix.go"]

    def test_comment_attached_to_package_clause_is_not_a_constraint(self, temp_dir, linux_loader):
        (temp_dir / "doc.go").write_text("//go:build ignore\npackage people\n")

        package = linux_loader.load([str(temp_dir)])

        assert [p.name for p in package.files] == ["doc.go"]

    def test_platform_file_name_suffix(self, temp_dir, linux_loader):
        write_go(temp_dir / "person.go", "people")
        write_go(temp_dir / "person_linux.go", "people")
        write_go(temp_dir / "syscall_windows.go", "winonly")
        write_go(temp_dir / "asm_arm64.go", "armonly")
        write_go(temp_dir / "zerrors_darwin_amd64.go", "darwinonly")

        package = linux_loader.load([str(temp_dir)])

        assert package.name == "people"
        assert [p.name for p in package.files] == ["person.go", "person_linux.go"]

    def test_explicit_file_ignores_constraints(self, temp_dir, linux_loader):
        gen = temp_dir / "gen.go"
        gen.write_text("//go:build ignore\n\npackage main\n")

        package = linux_loader.load([str(gen)])

        assert package.name == "main"

    def test_malformed_constraint_is_load_error(self, temp_dir, linux_loader):
        (temp_dir / "bad.go").write_text("//go:build linux &&\n\npackage people\n")

        with pytest.raises(LoadError, match="bad.go"):
            linux_loader.load([str(temp_dir)])


class TestParseCache:
    """Test the per-invocation parse cache."""

    def test_reuses_parsed_tree(self, temp_dir, cache):
        a = write_go(temp_dir / "a.go", "models")

        first = cache.parse(a)
        second = cache.parse(temp_dir / "." / "a.go")

        assert first.tree is second.tree
        assert len(cache) == 1
        assert a in cache

    def test_failures_are_not_cached(self, temp_dir, cache):
        with pytest.raises(ParseError):
            cache.parse(temp_dir / "missing.go")

        assert len(cache) == 0
