"""
Configuration loader for gonstructor.

Builds a validated GeneratorConfig from CLI arguments, optionally layered
over defaults read from a YAML file.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from gonstructor.errors import UsageError

from .models import ConstructorType, FormatterMode, GeneratorConfig

YAML_KEYS = {
    "type_name",
    "output",
    "constructor_types",
    "patterns",
    "formatter",
    "formatter_timeout",
    "tag_key",
    "generated_suffix",
}


class ConfigurationError(UsageError):
    """Raised when configuration is invalid."""

    pass


def parse_constructor_types(value: str | list[str]) -> list[ConstructorType]:
    """
    Parse a comma-separated list of constructor types.

    Args:
        value: CSV string such as "allArgs,builder", or an already split list

    Returns:
        Constructor types in the order given

    Raises:
        ConfigurationError: On unknown or duplicated tokens
    """
    tokens = value.split(",") if isinstance(value, str) else list(value)

    kinds: list[ConstructorType] = []
    for token in tokens:
        try:
            kind = ConstructorType(str(token))
        except ValueError:
            raise ConfigurationError(
                f"unexpected constructor type has come [given={token}]; "
                f"it expects `{ConstructorType.ALL_ARGS.value}` and `{ConstructorType.BUILDER.value}`"
            )
        if kind in kinds:
            raise ConfigurationError(f"duplicated constructor type [given={token}]")
        kinds.append(kind)
    return kinds


def load_config_from_yaml(config_path: Path) -> dict[str, Any]:
    """
    Load generator defaults from a YAML file.

    Only the top-level keys in YAML_KEYS are accepted. The result is a plain
    mapping meant to be layered under CLI arguments by create_config_from_args.
    """
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if raw_config is None:
        return {}
    if not isinstance(raw_config, dict):
        raise ConfigurationError(f"Configuration file must contain a mapping: {config_path}")

    unknown = sorted(set(raw_config) - YAML_KEYS)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys in {config_path}: {unknown}")

    if "constructor_types" in raw_config:
        raw_config["constructor_types"] = parse_constructor_types(raw_config["constructor_types"])

    return raw_config


def create_config_from_args(
    type_name: str | None,
    output: str | None = None,
    constructor_types: str | None = None,
    patterns: list[str] | None = None,
    formatter: str | None = None,
    invocation_args: list[str] | None = None,
    defaults: dict[str, Any] | None = None,
) -> GeneratorConfig:
    """Create configuration from CLI arguments; explicit arguments win over defaults."""
    config_dict: dict[str, Any] = dict(defaults or {})

    if type_name:
        config_dict["type_name"] = type_name
    if output:
        config_dict["output"] = Path(output)
    if constructor_types is not None:
        config_dict["constructor_types"] = parse_constructor_types(constructor_types)
    if patterns:
        config_dict["patterns"] = patterns
    if formatter is not None:
        try:
            config_dict["formatter"] = FormatterMode(formatter.lower())
        except ValueError:
            valid = [m.value for m in FormatterMode]
            raise ConfigurationError(f"Invalid formatter '{formatter}'. Valid formatters: {valid}")
    if invocation_args is not None:
        config_dict["invocation_args"] = invocation_args

    if not config_dict.get("type_name"):
        raise ConfigurationError("a type name is mandatory; use --type")

    try:
        return GeneratorConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed:\n{e}")
