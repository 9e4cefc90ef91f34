"""
Identifier case conversions used for generated Go names.

to_camel("person") == "Person", to_lower_camel("InternalID") == "internalID",
to_snake("HTTPServer") == "http_server".
"""

import re

GO_KEYWORDS = frozenset(
    {
        "break", "case", "chan", "const", "continue", "default", "defer", "else",
        "fallthrough", "for", "func", "go", "goto", "if", "import", "interface",
        "map", "package", "range", "return", "select", "struct", "switch", "type", "var",
    }
)

_SEPARATORS = "_- ."

# lower->Upper, ACRONYMWord, letter<->digit
_WORD_BOUNDARY = re.compile(
    r"(?<=[a-z])(?=[A-Z])"
    r"|(?<=[A-Z])(?=[A-Z][a-z])"
    r"|(?<=[A-Za-z])(?=[0-9])"
    r"|(?<=[0-9])(?=[A-Za-z])"
)


def _camel(name: str, capitalize_first: bool) -> str:
    out: list[str] = []
    cap_next = capitalize_first
    for ch in name.strip():
        if ch.isalpha():
            out.append(ch.upper() if cap_next else ch)
            cap_next = False
        elif ch.isdigit():
            out.append(ch)
            cap_next = True
        else:
            cap_next = ch in _SEPARATORS
    return "".join(out)


def to_camel(name: str) -> str:
    """UpperCamelCase; existing inner capitals (acronyms) are preserved."""
    return _camel(name, capitalize_first=True)


def to_lower_camel(name: str) -> str:
    """lowerCamelCase; a leading acronym is lowered as a whole ("URLPath" -> "urlPath")."""
    name = name.strip()
    if not name:
        return name

    run = len(name) - len(name.lstrip("ABCDEFGHIJKLMNOPQRSTUVWXYZ"))
    if run == len(name):
        name = name.lower()
    elif run > 1 and name[run].islower():
        # keep the capital that starts the next word
        name = name[: run - 1].lower() + name[run - 1 :]
    elif run:
        name = name[:run].lower() + name[run:]

    return _camel(name, capitalize_first=False)


def to_snake(name: str) -> str:
    """snake_case, splitting on case changes, digits and separators."""
    words: list[str] = []
    for chunk in re.split(r"[_\-\s.]+", name.strip()):
        if chunk:
            words.extend(w for w in _WORD_BOUNDARY.split(chunk) if w)
    return "_".join(w.lower() for w in words)


def to_parameter_name(field_name: str) -> str:
    """lowerCamel form usable as a Go identifier; keywords get a trailing underscore."""
    name = to_lower_camel(field_name)
    if name in GO_KEYWORDS:
        return f"{name}_"
    return name
