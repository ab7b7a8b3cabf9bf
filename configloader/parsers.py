"""Format parsers for staged configuration artifacts.

The parser is picked by file suffix. Every parser returns a plain nested
``dict`` with lower-cased keys so lookups and binding are case-insensitive.
"""

from __future__ import annotations

import configparser
import json
import tomllib
from pathlib import Path
from typing import Any, Callable, Dict

import yaml

from .errors import ParseError, ReadError
from .log import get_logger
from .rules import SUPPORTED_SUFFIXES

logger = get_logger(__name__)


def _parse_json(text: str) -> Any:
    return json.loads(text)


def _parse_toml(text: str) -> Any:
    return tomllib.loads(text)


def _parse_yaml(text: str) -> Any:
    data = yaml.safe_load(text)
    # An empty YAML document is an empty config, not an error.
    return {} if data is None else data


def _parse_ini(text: str) -> Any:
    parser = configparser.ConfigParser(interpolation=None)
    parser.read_string(text)
    # [DEFAULT] keys land at top level and are inherited by each section.
    tree: Dict[str, Any] = dict(parser.defaults())
    for section in parser.sections():
        tree[section] = dict(parser.items(section))
    return tree


_PARSERS: Dict[str, Callable[[str], Any]] = {
    ".json": _parse_json,
    ".toml": _parse_toml,
    ".yaml": _parse_yaml,
    ".yml": _parse_yaml,
    ".ini": _parse_ini,
    ".cfg": _parse_ini,
}

_PARSE_ERRORS = (
    json.JSONDecodeError,
    tomllib.TOMLDecodeError,
    yaml.YAMLError,
    configparser.Error,
)


def is_supported(suffix: str) -> bool:
    return suffix.lower() in SUPPORTED_SUFFIXES


def lower_keys(value: Any) -> Any:
    """Recursively lower-case mapping keys, descending into lists."""
    if isinstance(value, dict):
        return {str(k).lower(): lower_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [lower_keys(v) for v in value]
    return value


def parse_text(text: str, suffix: str) -> Dict[str, Any]:
    """Parse ``text`` as the format implied by ``suffix``.

    Raises:
        ParseError: If the suffix is unsupported, the content is malformed,
            or the document is not a key/value mapping.
    """
    parser = _PARSERS.get(suffix.lower())
    if parser is None:
        raise ParseError(
            f"Unsupported config type: {suffix or '(none)'}. Supported: {', '.join(SUPPORTED_SUFFIXES)}"
        )

    try:
        tree = parser(text)
    except _PARSE_ERRORS as e:
        raise ParseError(f"Failed to parse {suffix} config: {e}") from e

    if not isinstance(tree, dict):
        raise ParseError(f"{suffix} config must contain a mapping at top level, got {type(tree).__name__}")

    return lower_keys(tree)


def parse_file(path: str | Path) -> Dict[str, Any]:
    """Read a UTF-8 file and parse it by its suffix."""
    path = Path(path)
    logger.debug(f"Parsing {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ReadError(f"Failed to read config file {path}: {e}") from e
    return parse_text(text, path.suffix)
