"""
Field extractor.

Finds the struct to generate constructors for and turns its field list into
FieldDeclarations. Files are scanned in the order given and declarations in
source order; the first struct with the requested name wins.

A field is excluded from every generated constructor when its tag carries
the skip directive:

    type Person struct {
        Name       string
        internalID string `gonstructor:"-"`
    }
"""

import logging
from typing import Any, Sequence

from gonstructor.analyzer.parse_cache import ParsedFile
from gonstructor.config.models import FieldDeclaration, TypeDeclaration
from gonstructor.errors import NotFoundError, StructuralError
from gonstructor.languages.base.plugin import LanguagePlugin
from gonstructor.languages.go.plugin import node_text, unquote_string

logger = logging.getLogger(__name__)

DEFAULT_TAG_KEY = "gonstructor"
SKIP_DIRECTIVE = "-"


# =============================================================================
# Struct tags
# =============================================================================


def tag_literal_value(literal: str) -> str:
    """Contents of a raw (`...`) or interpreted ("...") tag literal."""
    try:
        return unquote_string(literal)
    except ValueError as e:
        raise StructuralError(f"cannot decode struct tag {literal}: {e}") from e


def lookup_struct_tag(tag: str, key: str) -> str | None:
    """
    Look up a key in a conventional `key:"value" key2:"value2"` tag string.

    Follows reflect.StructTag.Lookup: scanning stops at the first malformed
    pair, and a value that is not a valid quoted string counts as absent.

    Returns:
        The unquoted value, or None when the key is not present
    """
    while tag:
        # skip leading space
        i = 0
        while i < len(tag) and tag[i] == " ":
            i += 1
        tag = tag[i:]
        if not tag:
            break

        # name is a run of printable characters other than space, colon and quote
        i = 0
        while i < len(tag) and tag[i] > " " and tag[i] not in ':"' and tag[i] != "\x7f":
            i += 1
        if i == 0 or i + 1 >= len(tag) or tag[i] != ":" or tag[i + 1] != '"':
            break
        name = tag[:i]
        tag = tag[i + 1 :]

        # scan quoted string to find value
        i = 1
        while i < len(tag) and tag[i] != '"':
            if tag[i] == "\\":
                i += 1
            i += 1
        if i >= len(tag):
            break
        quoted = tag[: i + 1]
        tag = tag[i + 1 :]

        if name == key:
            try:
                return unquote_string(quoted)
            except ValueError:
                return None
    return None


def is_excluded(tag_node: Any, tag_key: str = DEFAULT_TAG_KEY) -> bool:
    """Whether a field's tag marks it as skipped."""
    if tag_node is None:
        return False
    tag = tag_literal_value(node_text(tag_node))
    return lookup_struct_tag(tag, tag_key) == SKIP_DIRECTIVE


# =============================================================================
# Extraction
# =============================================================================


def _type_arguments(type_parameters: Any) -> tuple[str, ...]:
    names: list[str] = []
    for decl in type_parameters.named_children:
        if decl.type == "type_parameter_declaration":
            names.extend(node_text(n) for n in decl.children_by_field_name("name"))
    return tuple(names)


def _field_list(struct_node: Any) -> list[Any]:
    for child in struct_node.children:
        if child.type == "field_declaration_list":
            return [c for c in child.named_children if c.type == "field_declaration"]
    return []


def extract_fields(
    struct_node: Any, parsed: ParsedFile, type_name: str, tag_key: str = DEFAULT_TAG_KEY
) -> list[FieldDeclaration]:
    """
    Convert the field declarations of a struct_type node.

    A group such as `X, Y int` yields one FieldDeclaration per name.

    Raises:
        StructuralError: On an embedded field, which has no name to pass
    """
    fields: list[FieldDeclaration] = []

    for field_node in _field_list(struct_node):
        names = field_node.children_by_field_name("name")
        type_node = field_node.child_by_field_name("type")
        tag_node = field_node.child_by_field_name("tag")

        if not names:
            embedded = node_text(field_node)
            if tag_node is not None:
                embedded = embedded[: tag_node.start_byte - field_node.start_byte].rstrip()
            raise StructuralError(
                f"struct {type_name} has an embedded field `{embedded}` "
                f"({parsed.path}:{field_node.start_point[0] + 1}); "
                f"embedded fields are not supported"
            )

        type_signature = node_text(type_node)
        excluded = is_excluded(tag_node, tag_key)
        for name_node in names:
            fields.append(
                FieldDeclaration(
                    name=node_text(name_node),
                    type_signature=type_signature,
                    excluded=excluded,
                )
            )

    return fields


def extract_type_declaration(
    type_name: str,
    parsed_files: Sequence[ParsedFile],
    plugin: LanguagePlugin,
    tag_key: str = DEFAULT_TAG_KEY,
) -> TypeDeclaration:
    """
    Locate a struct by name and extract its ordered field list.

    Args:
        type_name: Name of the struct
        parsed_files: Parsed files, in package file order
        plugin: Plugin that produced the trees
        tag_key: Struct tag key holding the skip directive

    Returns:
        The first matching struct declaration

    Raises:
        NotFoundError: If no file declares a struct with that name
        StructuralError: If the struct has an embedded field
    """
    for parsed in parsed_files:
        for spec in plugin.iter_type_specs(parsed.tree):
            name_node = spec.child_by_field_name("name")
            if name_node is None or node_text(name_node) != type_name:
                continue

            struct_node = spec.child_by_field_name("type")
            if struct_node is None or struct_node.type != "struct_type":
                logger.debug(
                    f"Skipping non-struct type {type_name} in {parsed.path} "
                    f"({struct_node.type if struct_node is not None else 'unknown'})"
                )
                continue

            logger.debug(f"Found struct {type_name} in {parsed.path}:{spec.start_point[0] + 1}")

            type_params_node = spec.child_by_field_name("type_parameters")
            return TypeDeclaration(
                name=type_name,
                fields=tuple(extract_fields(struct_node, parsed, type_name, tag_key)),
                type_parameters=node_text(type_params_node) if type_params_node is not None else "",
                type_arguments=_type_arguments(type_params_node) if type_params_node is not None else (),
                source_file=parsed.path,
                imports=tuple(plugin.extract_imports(parsed.tree)),
            )

    raise NotFoundError(type_name, len(parsed_files))
