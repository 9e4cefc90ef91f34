"""
Constructor synthesizer.

Turns a TypeDeclaration into the declarations of one constructor strategy:

- allArgs: `func NewT(a A, b B) *T`
- builder: `TBuilder` struct, `NewTBuilder()`, one fluent setter per field
  and `Build() *T`

Synthesis is a pure function of its inputs. Excluded fields never appear in
any output and the remaining fields keep their declared order.
"""

import logging
from typing import Callable

from gonstructor.config.models import ConstructorType, TypeDeclaration
from gonstructor.errors import StructuralError
from gonstructor.synthesizer.declarations import (
    AssignStatement,
    CompositeLiteral,
    FuncDecl,
    GeneratedArtifact,
    Parameter,
    Receiver,
    ReturnStatement,
    StructDecl,
    StructField,
)
from gonstructor.synthesizer.naming import to_camel, to_parameter_name

logger = logging.getLogger(__name__)

RECEIVER_CANDIDATES = ("b", "bldr", "builder")


def _instance_type(name: str, type_decl: TypeDeclaration) -> str:
    """`Name` or `Name[K, V]` for generic structs."""
    if type_decl.type_arguments:
        return f"{name}[{', '.join(type_decl.type_arguments)}]"
    return name


def _parameters(type_decl: TypeDeclaration) -> tuple[Parameter, ...]:
    """
    One parameter per included field.

    Raises:
        StructuralError: If two fields map to the same parameter name
    """
    owners: dict[str, str] = {}
    parameters: list[Parameter] = []
    for field in type_decl.included_fields:
        name = to_parameter_name(field.name)
        if name in owners:
            raise StructuralError(
                f"fields {owners[name]} and {field.name} of struct {type_decl.name} "
                f"both map to the parameter name {name}"
            )
        owners[name] = field.name
        parameters.append(Parameter(name, field.type_signature))
    return tuple(parameters)


def _choose_receiver(parameters: tuple[Parameter, ...]) -> str:
    taken = {p.name for p in parameters}
    for candidate in RECEIVER_CANDIDATES:
        if candidate not in taken:
            return candidate
    suffix = 1
    while f"b{suffix}" in taken:
        suffix += 1
    return f"b{suffix}"


def generate_all_args_constructor(type_decl: TypeDeclaration) -> GeneratedArtifact:
    """Synthesize `New<T>` taking one argument per included field."""
    fields = type_decl.included_fields
    parameters = _parameters(type_decl)
    target = _instance_type(type_decl.name, type_decl)

    constructor = FuncDecl(
        name=f"New{to_camel(type_decl.name)}",
        type_parameters=type_decl.type_parameters,
        parameters=parameters,
        results=(f"*{target}",),
        body=(
            ReturnStatement(
                CompositeLiteral(
                    type=target,
                    elements=tuple((f.name, p.name) for f, p in zip(fields, parameters)),
                )
            ),
        ),
    )
    return GeneratedArtifact(kind=ConstructorType.ALL_ARGS, declarations=(constructor,))


def generate_builder_constructor(type_decl: TypeDeclaration) -> GeneratedArtifact:
    """Synthesize `<T>Builder`, its constructor, fluent setters and `Build`."""
    fields = type_decl.included_fields
    parameters = _parameters(type_decl)
    target = _instance_type(type_decl.name, type_decl)

    setter_owners: dict[str, str] = {"Build": "the Build method"}
    for field in fields:
        setter = to_camel(field.name)
        if setter in setter_owners:
            raise StructuralError(
                f"builder setter {setter} for field {field.name} of struct {type_decl.name} "
                f"collides with {setter_owners[setter]}"
            )
        setter_owners[setter] = f"the setter of field {field.name}"

    builder_name = f"{to_camel(type_decl.name)}Builder"
    builder_type = _instance_type(builder_name, type_decl)
    receiver = Receiver(_choose_receiver(parameters), f"*{builder_type}")

    builder_struct = StructDecl(
        name=builder_name,
        type_parameters=type_decl.type_parameters,
        fields=tuple(StructField(p.name, p.type) for p in parameters),
    )

    builder_constructor = FuncDecl(
        name=f"New{builder_name}",
        type_parameters=type_decl.type_parameters,
        results=(f"*{builder_type}",),
        body=(ReturnStatement(CompositeLiteral(type=builder_type)),),
    )

    setters = tuple(
        FuncDecl(
            name=to_camel(field.name),
            receiver=receiver,
            parameters=(param,),
            results=(f"*{builder_type}",),
            body=(
                AssignStatement(f"{receiver.name}.{param.name}", param.name),
                ReturnStatement(receiver.name),
            ),
        )
        for field, param in zip(fields, parameters)
    )

    build = FuncDecl(
        name="Build",
        receiver=receiver,
        results=(f"*{target}",),
        body=(
            ReturnStatement(
                CompositeLiteral(
                    type=target,
                    elements=tuple(
                        (f.name, f"{receiver.name}.{p.name}") for f, p in zip(fields, parameters)
                    ),
                )
            ),
        ),
    )

    return GeneratedArtifact(
        kind=ConstructorType.BUILDER,
        declarations=(builder_struct, builder_constructor, *setters, build),
    )


SYNTHESIZERS: dict[ConstructorType, Callable[[TypeDeclaration], GeneratedArtifact]] = {
    ConstructorType.ALL_ARGS: generate_all_args_constructor,
    ConstructorType.BUILDER: generate_builder_constructor,
}


def synthesize(type_decl: TypeDeclaration, kind: ConstructorType) -> GeneratedArtifact:
    """
    Synthesize one constructor strategy for a struct.

    Args:
        type_decl: The extracted struct
        kind: Constructor strategy

    Returns:
        The abstract declarations of that strategy
    """
    artifact = SYNTHESIZERS[kind](type_decl)
    logger.debug(
        f"Synthesized {kind.value} for {type_decl.name}: "
        f"{len(artifact.declarations)} declarations, "
        f"{len(type_decl.included_fields)}/{len(type_decl.fields)} fields"
    )
    return artifact
