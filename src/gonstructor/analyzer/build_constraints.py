"""
Go build constraints.

Decides, the way go/build does for the default build context, whether a
file takes part in its package:

- a `_GOOS`, `_GOARCH` or `_GOOS_GOARCH` file name suffix
- a `//go:build` line in the file header, or failing that the legacy
  `// +build` lines

Tags that are satisfied: the target GOOS and GOARCH (from the environment,
else the host), `unix` on Unix-like systems, `gc`, `cgo` unless
CGO_ENABLED=0, and every `go1.N` release tag. Any other tag, `ignore`
included, is not satisfied.
"""

import os
import platform
import re
import sys
from dataclasses import dataclass, field

KNOWN_OS = frozenset(
    {
        "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos", "ios",
        "js", "linux", "nacl", "netbsd", "openbsd", "plan9", "solaris", "wasip1",
        "windows", "zos",
    }
)

UNIX_OS = frozenset(
    {
        "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos", "ios",
        "linux", "netbsd", "openbsd", "solaris",
    }
)

KNOWN_ARCH = frozenset(
    {
        "386", "amd64", "amd64p32", "arm", "armbe", "arm64", "arm64be", "loong64",
        "mips", "mipsle", "mips64", "mips64le", "mips64p32", "mips64p32le", "ppc",
        "ppc64", "ppc64le", "riscv", "riscv64", "s390", "s390x", "sparc", "sparc64",
        "wasm",
    }
)

_MACHINE_ARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "ppc64le": "ppc64le",
    "ppc64": "ppc64",
    "s390x": "s390x",
    "riscv64": "riscv64",
    "loongarch64": "loong64",
    "mips64": "mips64",
}

# GOOS values that imply another one
_IMPLIED_OS = {"android": "linux", "illumos": "solaris", "ios": "darwin"}

_RELEASE_TAG = re.compile(r"go1\.[0-9]+")
_TOKEN = re.compile(r"\s*(\(|\)|!|&&|\|\||[A-Za-z0-9_.]+)")


class ConstraintSyntaxError(ValueError):
    """A //go:build expression that cannot be parsed."""

    pass


def _host_os() -> str:
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "win32":
        return "windows"
    for name in ("darwin", "freebsd", "openbsd", "netbsd", "dragonfly", "aix"):
        if sys.platform.startswith(name):
            return name
    if sys.platform.startswith("sunos"):
        return "solaris"
    return sys.platform


def _host_arch() -> str:
    machine = platform.machine().lower()
    return _MACHINE_ARCH.get(machine, machine)


@dataclass(frozen=True)
class BuildContext:
    """Target platform and tags that build constraints are evaluated against."""

    goos: str
    goarch: str
    cgo: bool = True
    tags: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_environment(cls) -> "BuildContext":
        """GOOS/GOARCH/CGO_ENABLED from the environment, defaulting to the host."""
        return cls(
            goos=os.environ.get("GOOS") or _host_os(),
            goarch=os.environ.get("GOARCH") or _host_arch(),
            cgo=os.environ.get("CGO_ENABLED", "1") != "0",
        )

    def match_tag(self, tag: str) -> bool:
        if tag in self.tags:
            return True
        if tag == self.goos or tag == self.goarch:
            return True
        if tag == "unix":
            return self.goos in UNIX_OS
        if tag == "gc":
            return True
        if tag == "cgo":
            return self.cgo
        if _RELEASE_TAG.fullmatch(tag):
            return True
        return _IMPLIED_OS.get(self.goos) == tag


# =============================================================================
# File names
# =============================================================================


def matches_file_name(name: str, context: BuildContext) -> bool:
    """
    Whether a file name's _GOOS/_GOARCH suffix, if any, selects this platform.

    The part before the first underscore never counts, so `linux.go` is
    built everywhere while `x_linux.go` is built on linux only.
    """
    stem = name.split(".", 1)[0]
    if "_" not in stem:
        return True
    parts = stem[stem.index("_") :].split("_")
    if parts and parts[-1] == "test":
        parts = parts[:-1]

    if len(parts) >= 2 and parts[-2] in KNOWN_OS and parts[-1] in KNOWN_ARCH:
        return context.match_tag(parts[-2]) and context.match_tag(parts[-1])
    if parts and (parts[-1] in KNOWN_OS or parts[-1] in KNOWN_ARCH):
        return context.match_tag(parts[-1])
    return True


# =============================================================================
# Constraint lines
# =============================================================================


def _tokenize(expr: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    expr = expr.rstrip()
    while pos < len(expr):
        match = _TOKEN.match(expr, pos)
        if match is None:
            raise ConstraintSyntaxError(f"unexpected character in build constraint: {expr[pos:]!r}")
        tokens.append(match.group(1))
        pos = match.end()
    return tokens


class _ExpressionParser:
    """Recursive descent over `||`, `&&`, `!` and parentheses."""

    def __init__(self, tokens: list[str], context: BuildContext):
        self.tokens = tokens
        self.pos = 0
        self.context = context

    def parse(self) -> bool:
        if not self.tokens:
            raise ConstraintSyntaxError("empty build constraint")
        value = self._or()
        if self.pos != len(self.tokens):
            raise ConstraintSyntaxError(f"unexpected {self.tokens[self.pos]!r} in build constraint")
        return value

    def _peek(self) -> str | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise ConstraintSyntaxError("unexpected end of build constraint")
        self.pos += 1
        return token

    def _or(self) -> bool:
        value = self._and()
        while self._peek() == "||":
            self.pos += 1
            right = self._and()
            value = value or right
        return value

    def _and(self) -> bool:
        value = self._not()
        while self._peek() == "&&":
            self.pos += 1
            right = self._not()
            value = value and right
        return value

    def _not(self) -> bool:
        if self._peek() == "!":
            self.pos += 1
            return not self._not()
        return self._atom()

    def _atom(self) -> bool:
        token = self._next()
        if token == "(":
            value = self._or()
            if self._next() != ")":
                raise ConstraintSyntaxError("missing ) in build constraint")
            return value
        if token in (")", "&&", "||"):
            raise ConstraintSyntaxError(f"unexpected {token!r} in build constraint")
        return self.context.match_tag(token)


def evaluate_go_build(expr: str, context: BuildContext) -> bool:
    """Evaluate the expression of a `//go:build` line."""
    return _ExpressionParser(_tokenize(expr), context).parse()


def evaluate_plus_build(args: str, context: BuildContext) -> bool:
    """Evaluate a legacy `// +build` line: space-separated OR of comma-separated AND."""
    for option in args.split():
        terms = option.split(",")
        if all(
            not context.match_tag(term[1:]) if term.startswith("!") else context.match_tag(term)
            for term in terms
        ):
            return True
    return False


def _go_build_expression(comment: str) -> str | None:
    text = comment[2:]
    if text.startswith("go:build") and (len(text) == 8 or text[8] in " \t"):
        return text[8:]
    return None


def _plus_build_arguments(comment: str) -> str | None:
    text = comment[2:].strip()
    if text == "+build" or text.startswith(("+build ", "+build\t")):
        return text[6:]
    return None


def should_build(header_comments: list[str], context: BuildContext) -> bool:
    """
    Whether the header comments of a file allow it in this build.

    A //go:build line takes precedence over // +build lines, which must all
    be satisfied.

    Raises:
        ConstraintSyntaxError: If a //go:build expression is malformed
    """
    comments = [c.strip() for c in header_comments]

    for comment in comments:
        expr = _go_build_expression(comment)
        if expr is not None:
            return evaluate_go_build(expr, context)

    for comment in comments:
        args = _plus_build_arguments(comment)
        if args is not None and not evaluate_plus_build(args, context):
            return False
    return True
