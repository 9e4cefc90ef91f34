"""
Emission composer.

Assembles the provenance banner, the package header and the synthesized
artifacts into one CompilationUnit. The composer decides structure and
order only; rendering belongs to the emitter.
"""

from dataclasses import dataclass
from typing import Sequence

from gonstructor.config.models import CONSTRUCTOR_ORDER, ImportSpec
from gonstructor.synthesizer.declarations import GeneratedArtifact

GENERATOR_NAME = "gonstructor"


@dataclass(frozen=True)
class CompilationUnit:
    """The complete generated file, before rendering."""

    banner: str
    package_name: str
    artifacts: tuple[GeneratedArtifact, ...]
    imports: tuple[ImportSpec, ...] = ()


def build_banner(invocation_args: Sequence[str]) -> str:
    """Single-line provenance comment text recording the literal CLI arguments."""
    args = " ".join(invocation_args)
    if args:
        return f"Code generated by {GENERATOR_NAME} {args}; DO NOT EDIT."
    return f"Code generated by {GENERATOR_NAME}; DO NOT EDIT."


def compose(
    banner: str,
    package_name: str,
    artifacts: Sequence[GeneratedArtifact],
    imports: Sequence[ImportSpec] = (),
) -> CompilationUnit:
    """
    Compose a compilation unit.

    Artifacts are placed allArgs first and builder second, whatever order
    they were requested in.

    Args:
        banner: Provenance comment text (see build_banner)
        package_name: Package clause of the generated file
        artifacts: Synthesized artifacts, at most one per kind
        imports: Imports available to type signatures; the emitter keeps the used ones

    Returns:
        The composed unit
    """
    rank = {kind: i for i, kind in enumerate(CONSTRUCTOR_ORDER)}
    ordered = sorted(artifacts, key=lambda artifact: rank[artifact.kind])

    return CompilationUnit(
        banner=banner,
        package_name=package_name,
        artifacts=tuple(ordered),
        imports=tuple(imports),
    )
