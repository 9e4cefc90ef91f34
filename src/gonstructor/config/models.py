"""
Core models for gonstructor.

Settings and the extracted declaration data are defined with Pydantic so
they are validated once, at the edge, and read-only afterwards.
"""

import re
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConstructorType(str, Enum):
    """Kinds of constructor the generator can synthesize."""

    ALL_ARGS = "allArgs"
    BUILDER = "builder"


# Canonical emission order, independent of the order flags were given in
CONSTRUCTOR_ORDER: tuple[ConstructorType, ...] = (
    ConstructorType.ALL_ARGS,
    ConstructorType.BUILDER,
)


class FormatterMode(str, Enum):
    """External formatter applied after rendering."""

    AUTO = "auto"  # goimports, then gofmt, whichever is on PATH
    GOIMPORTS = "goimports"
    GOFMT = "gofmt"
    NONE = "none"


# ============================================================================
# Generator Configuration
# ============================================================================


class GeneratorConfig(BaseModel):
    """Settings for a single gonstructor invocation."""

    type_name: str = Field(min_length=1, description="Name of the struct to generate for")
    output: Path | None = Field(default=None, description="Explicit output file path")
    constructor_types: list[ConstructorType] = Field(
        default_factory=lambda: [ConstructorType.ALL_ARGS],
        description="Constructor kinds to generate",
    )
    patterns: list[str] = Field(
        default_factory=lambda: ["."], description="Files or directories to analyze"
    )
    formatter: FormatterMode = Field(default=FormatterMode.AUTO, description="External formatter")
    formatter_timeout: int = Field(default=30, gt=0, description="Formatter timeout in seconds")
    tag_key: str = Field(
        default="gonstructor", min_length=1, description="Struct tag key holding the skip directive"
    )
    generated_suffix: str = Field(
        default="_gen.go", min_length=1, description="Suffix of the generated file name"
    )
    invocation_args: list[str] = Field(
        default_factory=list, description="Literal CLI arguments recorded in the banner"
    )

    @field_validator("constructor_types")
    @classmethod
    def _reject_duplicates(cls, value: list[ConstructorType]) -> list[ConstructorType]:
        seen: set[ConstructorType] = set()
        for kind in value:
            if kind in seen:
                raise ValueError(f"duplicated constructor type [given={kind.value}]")
            seen.add(kind)
        return value

    @field_validator("patterns")
    @classmethod
    def _default_patterns(cls, value: list[str]) -> list[str]:
        return value or ["."]


# ============================================================================
# Declaration Models (produced by the field extractor)
# ============================================================================


_MAJOR_VERSION = re.compile(r"v[0-9]+")
_IDENTIFIER_PREFIX = re.compile(r"\w*")


class ImportSpec(BaseModel):
    """One import of a Go source file."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="Import path without quotes (e.g., 'net/http')")
    alias: str | None = Field(default=None, description="Explicit package name, '_' or '.'")

    @property
    def qualifier(self) -> str:
        """
        Name the package is referred to by in source code.

        Without an alias this is the name goimports assumes for the path:
        github.com/go-chi/chi/v5 -> chi, gopkg.in/yaml.v3 -> yaml,
        github.com/mattn/go-sqlite3 -> sqlite3.
        """
        if self.alias:
            return self.alias
        elements = self.path.rstrip("/").split("/")
        base = elements[-1]
        if len(elements) > 1 and _MAJOR_VERSION.fullmatch(base):
            base = elements[-2]
        base = base.removeprefix("go-")
        return _IDENTIFIER_PREFIX.match(base).group(0)


class FieldDeclaration(BaseModel):
    """One named, typed member of a struct plus its exclusion status."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    type_signature: str = Field(description="Verbatim Go type expression")
    excluded: bool = False


class TypeDeclaration(BaseModel):
    """A struct declaration located by the field extractor."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    fields: tuple[FieldDeclaration, ...] = ()
    type_parameters: str = Field(default="", description="Verbatim type parameter list")
    type_arguments: tuple[str, ...] = Field(
        default=(), description="Type parameter names in declared order"
    )
    source_file: Path | None = None
    imports: tuple[ImportSpec, ...] = ()

    @property
    def included_fields(self) -> list[FieldDeclaration]:
        """Fields that take part in generated constructors, in declared order."""
        return [f for f in self.fields if not f.excluded]


class GoPackage(BaseModel):
    """A resolved Go package: name, directory and its source files."""

    name: str
    directory: Path
    files: list[Path] = Field(default_factory=list)
