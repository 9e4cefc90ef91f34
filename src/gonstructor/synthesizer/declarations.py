"""
Abstract Go declarations produced by the constructor synthesizer.

These are plain structure: names, types and statements. Turning them into
text is the emitter's job.
"""

from dataclasses import dataclass
from typing import Union

from gonstructor.config.models import ConstructorType


@dataclass(frozen=True)
class Parameter:
    name: str
    type: str


@dataclass(frozen=True)
class StructField:
    name: str
    type: str


@dataclass(frozen=True)
class Receiver:
    name: str
    type: str  # e.g. "*PersonBuilder"


@dataclass(frozen=True)
class CompositeLiteral:
    """`&T{Key: value, ...}`, or `T{...}` when address is False."""

    type: str
    elements: tuple[tuple[str, str], ...] = ()
    address: bool = True


@dataclass(frozen=True)
class AssignStatement:
    target: str
    value: str


@dataclass(frozen=True)
class ReturnStatement:
    value: Union[str, CompositeLiteral]


Statement = Union[AssignStatement, ReturnStatement]


@dataclass(frozen=True)
class StructDecl:
    name: str
    fields: tuple[StructField, ...] = ()
    type_parameters: str = ""


@dataclass(frozen=True)
class FuncDecl:
    name: str
    parameters: tuple[Parameter, ...] = ()
    results: tuple[str, ...] = ()
    body: tuple[Statement, ...] = ()
    receiver: Receiver | None = None
    type_parameters: str = ""


Declaration = Union[StructDecl, FuncDecl]


@dataclass(frozen=True)
class GeneratedArtifact:
    """Output of one constructor strategy."""

    kind: ConstructorType
    declarations: tuple[Declaration, ...]
