"""
Output resolver.

Decides where the generated file goes and writes it. An existing file at
that path is overwritten unconditionally.
"""

import logging
import os
from pathlib import Path

from gonstructor.errors import WriteError
from gonstructor.synthesizer.naming import to_snake

logger = logging.getLogger(__name__)

GENERATED_SUFFIX = "_gen.go"


def resolve_output_path(
    explicit_output: Path | str | None,
    input_args: list[str],
    type_name: str,
    suffix: str = GENERATED_SUFFIX,
) -> Path:
    """
    Compute the destination of the generated file.

    An explicit output is used verbatim. Otherwise the file goes into the
    single directory argument, or next to the first argument, and is named
    `<snake_case(type_name)><suffix>`.
    """
    if explicit_output:
        return Path(explicit_output)

    args = input_args or ["."]
    if len(args) == 1 and Path(args[0]).is_dir():
        directory = Path(args[0])
    else:
        directory = Path(args[0]).parent

    return directory / f"{to_snake(type_name)}{suffix}"


def write_generated_file(path: Path, code: str) -> Path:
    """
    Write generated code, replacing any existing file.

    Raises:
        WriteError: Wrapping the underlying OSError
    """
    try:
        path.write_text(code, encoding="utf-8")
        os.chmod(path, 0o644)
    except OSError as e:
        raise WriteError(path, e) from e

    logger.debug(f"Wrote {len(code)} bytes to {path}")
    return path
