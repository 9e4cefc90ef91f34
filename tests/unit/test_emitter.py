"""
Unit tests for composition and Go emission.
"""

import subprocess

import pytest

from gonstructor.config.models import (
    ConstructorType,
    FieldDeclaration,
    FormatterMode,
    ImportSpec,
    TypeDeclaration,
)
from gonstructor.emitter import go_emitter
from gonstructor.emitter.composer import build_banner, compose
from gonstructor.emitter.go_emitter import GoEmitter, normalize_imports, render_unit
from gonstructor.errors import EmissionError
from gonstructor.languages.go.plugin import GoPlugin
from gonstructor.synthesizer import synthesize
from gonstructor.synthesizer.declarations import (
    GeneratedArtifact,
    StructDecl,
    StructField,
)

PERSON_EXPECTED = """\
// Code generated by gonstructor --type=Person --constructorTypes=allArgs,builder; DO NOT EDIT.

package people

func NewPerson(name string, age int) *Person {
\treturn &Person{Name: name, Age: age}
}

type PersonBuilder struct {
\tname string
\tage  int
}

func NewPersonBuilder() *PersonBuilder {
\treturn &PersonBuilder{}
}

func (b *PersonBuilder) Name(name string) *PersonBuilder {
\tb.name = name
\treturn b
}

func (b *PersonBuilder) Age(age int) *PersonBuilder {
\tb.age = age
\treturn b
}

func (b *PersonBuilder) Build() *Person {
\treturn &Person{Name: b.name, Age: b.age}
}
"""


@pytest.fixture
def person():
    return TypeDeclaration(
        name="Person",
        fields=(
            FieldDeclaration(name="Name", type_signature="string"),
            FieldDeclaration(name="Age", type_signature="int"),
            FieldDeclaration(name="internalID", type_signature="string", excluded=True),
        ),
    )


@pytest.fixture
def emitter():
    return GoEmitter(GoPlugin(), formatter=FormatterMode.NONE)


def _unit(type_decl, kinds, args=("--type=Person",)):
    artifacts = [synthesize(type_decl, kind) for kind in kinds]
    return compose(build_banner(list(args)), "people", artifacts, imports=type_decl.imports)


# =============================================================================
# Composer Tests
# =============================================================================


class TestComposer:
    """Test banner and canonical ordering."""

    def test_banner_records_arguments(self):
        assert build_banner(["--type=Person", "."]) == (
            "Code generated by gonstructor --type=Person .; DO NOT EDIT."
        )

    def test_banner_without_arguments(self):
        assert build_banner([]) == "Code generated by gonstructor; DO NOT EDIT."

    def test_all_args_always_first(self, person):
        unit = _unit(person, [ConstructorType.BUILDER, ConstructorType.ALL_ARGS])

        assert [a.kind for a in unit.artifacts] == [
            ConstructorType.ALL_ARGS,
            ConstructorType.BUILDER,
        ]
        assert unit.package_name == "people"

    def test_request_order_does_not_change_output(self, person):
        forward = _unit(person, [ConstructorType.ALL_ARGS, ConstructorType.BUILDER])
        backward = _unit(person, [ConstructorType.BUILDER, ConstructorType.ALL_ARGS])

        assert render_unit(forward) == render_unit(backward)


# =============================================================================
# Rendering Tests
# =============================================================================


class TestRendering:
    """Test the textual form of the generated file."""

    def test_person_example(self, person, emitter):
        unit = _unit(
            person,
            [ConstructorType.ALL_ARGS, ConstructorType.BUILDER],
            args=("--type=Person", "--constructorTypes=allArgs,builder"),
        )

        assert emitter.emit(unit) == PERSON_EXPECTED

    def test_excluded_field_absent_from_text(self, person, emitter):
        code = emitter.emit(_unit(person, list(ConstructorType)))

        assert "internalID" not in code
        assert "InternalID" not in code

    def test_only_referenced_imports_are_kept(self, emitter):
        decl = TypeDeclaration(
            name="Event",
            fields=(
                FieldDeclaration(name="At", type_signature="time.Time"),
                FieldDeclaration(name="Log", type_signature="*zap.Logger", excluded=True),
            ),
            imports=(
                ImportSpec(path="fmt"),
                ImportSpec(path="time"),
                ImportSpec(path="go.uber.org/zap"),
                ImportSpec(path="embed", alias="_"),
            ),
        )
        code = emitter.emit(_unit(decl, [ConstructorType.ALL_ARGS]))

        assert 'import "time"\n' in code
        assert "fmt" not in code
        assert "zap" not in code
        assert "embed" not in code

    def test_versioned_and_prefixed_import_paths(self, emitter):
        decl = TypeDeclaration(
            name="Server",
            fields=(
                FieldDeclaration(name="R", type_signature="chi.Router"),
                FieldDeclaration(name="DB", type_signature="*sqlite3.SQLiteConn"),
                FieldDeclaration(name="Node", type_signature="yaml.Node"),
            ),
            imports=(
                ImportSpec(path="github.com/go-chi/chi/v5"),
                ImportSpec(path="github.com/mattn/go-sqlite3"),
                ImportSpec(path="gopkg.in/yaml.v3"),
                ImportSpec(path="github.com/stretchr/testify/v2/assert"),
            ),
        )
        code = emitter.emit(_unit(decl, [ConstructorType.ALL_ARGS]))

        assert (
            'import (\n\t"github.com/go-chi/chi/v5"\n\t"github.com/mattn/go-sqlite3"\n\t"gopkg.in/yaml.v3"\n)\n'
        ) in code
        assert "testify" not in code

    @pytest.mark.parametrize(
        "path, qualifier",
        [
            ("time", "time"),
            ("net/http", "http"),
            ("github.com/go-chi/chi/v5", "chi"),
            ("gopkg.in/yaml.v3", "yaml"),
            ("github.com/mattn/go-sqlite3", "sqlite3"),
            ("github.com/google/go-cmp/cmp", "cmp"),
            ("example.com/v2", "example"),
        ],
    )
    def test_assumed_package_names(self, path, qualifier):
        assert ImportSpec(path=path).qualifier == qualifier

    def test_import_block_is_sorted(self):
        decl = TypeDeclaration(
            name="Req",
            fields=(
                FieldDeclaration(name="URL", type_signature="*url.URL"),
                FieldDeclaration(name="Header", type_signature="nethttp.Header"),
                FieldDeclaration(name="Conf", type_signature="yaml.Node"),
            ),
            imports=(
                ImportSpec(path="net/url"),
                ImportSpec(path="gopkg.in/yaml.v3"),
                ImportSpec(path="net/http", alias="nethttp"),
            ),
        )
        unit = _unit(decl, [ConstructorType.ALL_ARGS])

        assert [s.path for s in normalize_imports(unit)] == ["gopkg.in/yaml.v3", "net/http", "net/url"]
        assert (
            'import (\n\t"gopkg.in/yaml.v3"\n\tnethttp "net/http"\n\t"net/url"\n)\n'
            in render_unit(unit)
        )

    def test_empty_builder_struct(self, emitter):
        decl = TypeDeclaration(name="Empty")
        code = emitter.emit(_unit(decl, [ConstructorType.BUILDER]))

        assert "type EmptyBuilder struct {\n}\n" in code
        assert "func (b *EmptyBuilder) Build() *Empty {\n\treturn &Empty{}\n}\n" in code

    def test_generic_declarations(self, emitter):
        decl = TypeDeclaration(
            name="Pair",
            type_parameters="[K comparable, V any]",
            type_arguments=("K", "V"),
            fields=(
                FieldDeclaration(name="Key", type_signature="K"),
                FieldDeclaration(name="Value", type_signature="V"),
            ),
        )
        code = emitter.emit(_unit(decl, list(ConstructorType)))

        assert "func NewPair[K comparable, V any](key K, value V) *Pair[K, V] {" in code
        assert "type PairBuilder[K comparable, V any] struct {" in code
        assert "func (b *PairBuilder[K, V]) Key(key K) *PairBuilder[K, V] {" in code


# =============================================================================
# Emitter Validation & Formatting Tests
# =============================================================================


class TestGoEmitter:
    """Test syntax checking and the external formatter."""

    def test_invalid_structure_is_rejected(self, emitter):
        broken = GeneratedArtifact(
            kind=ConstructorType.BUILDER,
            declarations=(StructDecl("Broken", (StructField("x", "map[string"),)),),
        )
        unit = compose(build_banner([]), "p", [broken])

        with pytest.raises(EmissionError):
            emitter.emit(unit)

    def test_missing_explicit_formatter(self, person, monkeypatch):
        monkeypatch.setattr(go_emitter.shutil, "which", lambda name: None)
        emitter = GoEmitter(GoPlugin(), formatter=FormatterMode.GOFMT)

        with pytest.raises(EmissionError, match="gofmt"):
            emitter.emit(_unit(person, [ConstructorType.ALL_ARGS]))

    def test_auto_without_formatter_returns_rendered_code(self, person, monkeypatch):
        monkeypatch.setattr(go_emitter.shutil, "which", lambda name: None)
        emitter = GoEmitter(GoPlugin(), formatter=FormatterMode.AUTO)
        unit = _unit(person, [ConstructorType.ALL_ARGS])

        assert emitter.emit(unit) == render_unit(unit)

    def test_formatter_output_is_used(self, person, monkeypatch):
        calls = []

        def fake_run(cmd, input, capture_output, text, timeout):
            calls.append(cmd)
            return subprocess.CompletedProcess(cmd, 0, stdout="formatted\n", stderr="")

        monkeypatch.setattr(go_emitter.shutil, "which", lambda name: f"/usr/bin/{name}")
        monkeypatch.setattr(go_emitter.subprocess, "run", fake_run)
        emitter = GoEmitter(GoPlugin(), formatter=FormatterMode.AUTO)

        assert emitter.emit(_unit(person, [ConstructorType.ALL_ARGS])) == "formatted\n"
        assert calls == [["/usr/bin/goimports"]]

    def test_formatter_failure(self, person, monkeypatch):
        def fake_run(cmd, input, capture_output, text, timeout):
            return subprocess.CompletedProcess(cmd, 2, stdout="", stderr="<standard input>:1:1: boom")

        monkeypatch.setattr(go_emitter.shutil, "which", lambda name: f"/usr/bin/{name}")
        monkeypatch.setattr(go_emitter.subprocess, "run", fake_run)
        emitter = GoEmitter(GoPlugin(), formatter=FormatterMode.GOFMT)

        with pytest.raises(EmissionError, match="boom"):
            emitter.emit(_unit(person, [ConstructorType.ALL_ARGS]))

    def test_formatter_timeout(self, person, monkeypatch):
        def fake_run(cmd, input, capture_output, text, timeout):
            raise subprocess.TimeoutExpired(cmd, timeout)

        monkeypatch.setattr(go_emitter.shutil, "which", lambda name: f"/usr/bin/{name}")
        monkeypatch.setattr(go_emitter.subprocess, "run", fake_run)
        emitter = GoEmitter(GoPlugin(), formatter=FormatterMode.GOFMT, timeout=3)

        with pytest.raises(EmissionError, match="timed out"):
            emitter.emit(_unit(person, [ConstructorType.ALL_ARGS]))
