"""
Error taxonomy for gonstructor.

Every failure is terminal for the invocation. The CLI maps the first error
it sees to the process exit code carried by the exception class.
"""

from pathlib import Path


class GonstructorError(Exception):
    """Base class for all gonstructor failures."""

    exit_code: int = 1


class UsageError(GonstructorError):
    """Missing required flag or unrecognized constructor type."""

    exit_code = 2


class LoadError(GonstructorError):
    """Package resolution produced zero or several packages."""

    pass


class ParseError(GonstructorError):
    """A Go source file could not be parsed."""

    def __init__(self, file_path: Path | str, line: int, column: int, detail: str = ""):
        self.file_path = Path(file_path)
        self.line = line
        self.column = column
        message = f"failed to parse file: {self.file_path}:{line}:{column}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class NotFoundError(GonstructorError):
    """No struct with the requested name exists in the analyzed files."""

    def __init__(self, type_name: str, files_scanned: int):
        self.type_name = type_name
        self.files_scanned = files_scanned
        super().__init__(
            f"there is no suitable struct that matches given typeName "
            f"[given={type_name}, files scanned={files_scanned}]"
        )


class StructuralError(GonstructorError):
    """A field of the matched struct cannot be represented (e.g. embedded)."""

    pass


class EmissionError(GonstructorError):
    """Synthesized code was rejected as invalid Go source."""

    pass


class WriteError(GonstructorError):
    """The generated file could not be written."""

    def __init__(self, path: Path, cause: OSError):
        self.path = path
        super().__init__(f"[error] failed output generated code to a file: {path}: {cause}")
