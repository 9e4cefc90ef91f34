"""
Go code emitter.

Renders a CompilationUnit as gofmt-style Go source, keeps only the imports
the emitted type signatures refer to, and rejects output that does not parse.
When goimports or gofmt is available it is run over the result.
"""

import logging
import re
import shutil
import subprocess

from gonstructor.config.models import FormatterMode, ImportSpec
from gonstructor.emitter.composer import CompilationUnit
from gonstructor.errors import EmissionError
from gonstructor.languages.base.plugin import LanguagePlugin
from gonstructor.synthesizer.declarations import (
    AssignStatement,
    CompositeLiteral,
    Declaration,
    FuncDecl,
    ReturnStatement,
    Statement,
    StructDecl,
)

logger = logging.getLogger(__name__)

INDENT = "\t"

_QUALIFIER = re.compile(r"\b([A-Za-z_][A-Za-z0-9_]*)\.[A-Za-z_]")


# =============================================================================
# Rendering
# =============================================================================


def render_expression(value: str | CompositeLiteral) -> str:
    if isinstance(value, CompositeLiteral):
        elements = ", ".join(f"{key}: {val}" for key, val in value.elements)
        prefix = "&" if value.address else ""
        return f"{prefix}{value.type}{{{elements}}}"
    return value


def render_statement(statement: Statement) -> str:
    if isinstance(statement, AssignStatement):
        return f"{statement.target} = {statement.value}"
    if isinstance(statement, ReturnStatement):
        return f"return {render_expression(statement.value)}"
    raise EmissionError(f"unexpected statement has come [given={statement!r}]")


def render_struct(decl: StructDecl) -> str:
    lines = [f"type {decl.name}{decl.type_parameters} struct {{"]
    # multi-line types (anonymous structs) do not take part in alignment
    width = max((len(f.name) for f in decl.fields if "\n" not in f.type), default=0)
    for field in decl.fields:
        name = field.name.ljust(width) if "\n" not in field.type else field.name
        lines.append(f"{INDENT}{name} {field.type}")
    lines.append("}")
    return "\n".join(lines)


def render_func(decl: FuncDecl) -> str:
    receiver = f"({decl.receiver.name} {decl.receiver.type}) " if decl.receiver else ""
    params = ", ".join(f"{p.name} {p.type}" for p in decl.parameters)

    if len(decl.results) == 1:
        results = f" {decl.results[0]}"
    elif decl.results:
        results = f" ({', '.join(decl.results)})"
    else:
        results = ""

    lines = [f"func {receiver}{decl.name}{decl.type_parameters}({params}){results} {{"]
    lines.extend(f"{INDENT}{render_statement(s)}" for s in decl.body)
    lines.append("}")
    return "\n".join(lines)


def render_declaration(decl: Declaration) -> str:
    if isinstance(decl, StructDecl):
        return render_struct(decl)
    if isinstance(decl, FuncDecl):
        return render_func(decl)
    raise EmissionError(f"unexpected declaration has come [given={decl!r}]")


def _declaration_types(decl: Declaration) -> list[str]:
    if isinstance(decl, StructDecl):
        return [f.type for f in decl.fields]
    types = [p.type for p in decl.parameters] + list(decl.results)
    if decl.receiver:
        types.append(decl.receiver.type)
    return types


def normalize_imports(unit: CompilationUnit) -> list[ImportSpec]:
    """
    Imports referenced by the unit's type signatures, sorted by path.

    Blank and dot imports are never carried over.
    """
    referenced: set[str] = set()
    for artifact in unit.artifacts:
        for decl in artifact.declarations:
            for type_text in _declaration_types(decl):
                referenced.update(_QUALIFIER.findall(type_text))

    kept: dict[tuple[str, str | None], ImportSpec] = {}
    for spec in unit.imports:
        if spec.alias in ("_", "."):
            continue
        if spec.qualifier in referenced:
            kept.setdefault((spec.path, spec.alias), spec)

    unresolved = referenced - {spec.qualifier for spec in kept.values()}
    if unresolved:
        logger.warning(
            f"No import found for {', '.join(sorted(unresolved))}; "
            f"the generated code relies on the formatter to add it"
        )

    return sorted(kept.values(), key=lambda s: (s.path, s.alias or ""))


def _render_import(spec: ImportSpec) -> str:
    if spec.alias:
        return f'{spec.alias} "{spec.path}"'
    return f'"{spec.path}"'


def render_unit(unit: CompilationUnit) -> str:
    """Render a compilation unit as Go source text."""
    sections = [f"// {unit.banner}", f"package {unit.package_name}"]

    imports = normalize_imports(unit)
    if len(imports) == 1:
        sections.append(f"import {_render_import(imports[0])}")
    elif imports:
        body = "\n".join(f"{INDENT}{_render_import(s)}" for s in imports)
        sections.append(f"import (\n{body}\n)")

    for artifact in unit.artifacts:
        sections.extend(render_declaration(d) for d in artifact.declarations)

    return "\n\n".join(sections) + "\n"


# =============================================================================
# Emitter
# =============================================================================


class GoEmitter:
    """Turns a CompilationUnit into validated, formatted Go source."""

    def __init__(
        self,
        plugin: LanguagePlugin,
        formatter: FormatterMode = FormatterMode.AUTO,
        timeout: int = 30,
    ):
        self.plugin = plugin
        self.formatter = formatter
        self.timeout = timeout

    def emit(self, unit: CompilationUnit) -> str:
        """
        Render, syntax-check and format a compilation unit.

        Raises:
            EmissionError: If the rendered code is not valid Go or the formatter fails
        """
        code = render_unit(unit)

        error = self.plugin.find_syntax_error(self.plugin.parse_source(code))
        if error:
            line, column, detail = error
            raise EmissionError(
                f"synthesized code is not valid Go source at {line}:{column}: {detail}\n{code}"
            )

        executable = self._resolve_formatter()
        if executable is None:
            return code
        return self._run_formatter(executable, code)

    def _resolve_formatter(self) -> str | None:
        if self.formatter == FormatterMode.NONE:
            return None

        if self.formatter == FormatterMode.AUTO:
            for candidate in (FormatterMode.GOIMPORTS, FormatterMode.GOFMT):
                found = shutil.which(candidate.value)
                if found:
                    return found
            logger.debug("No Go formatter found on PATH, emitting unformatted output")
            return None

        found = shutil.which(self.formatter.value)
        if not found:
            raise EmissionError(f"formatter not found on PATH: {self.formatter.value}")
        return found

    def _run_formatter(self, executable: str, code: str) -> str:
        logger.debug(f"Formatting generated code with {executable}")
        try:
            result = subprocess.run(
                [executable],
                input=code,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise EmissionError(f"formatter timed out after {self.timeout}s: {executable}")
        except OSError as e:
            raise EmissionError(f"failed to run formatter {executable}: {e}") from e

        if result.returncode != 0:
            raise EmissionError(f"formatter rejected generated code:\n{result.stderr}\n{code}")
        return result.stdout
