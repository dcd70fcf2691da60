"""Utility functions for the settings page builder"""

import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def canonicalify(p: Path | str) -> Path:
    return Path(p).expanduser().resolve()


def ensure_path(p: Path | str) -> Path:
    path = canonicalify(p)
    path.mkdir(parents=True, exist_ok=True)
    return path


def parse_args(args: Mapping[str, Any] | None, defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Merge user supplied arguments over a defaults record.

    Args:
        args: User arguments; keys present here win
        defaults: Default record

    Returns:
        New dict with every default key plus every user key

    Examples:
        >>> parse_args({"id": "color"}, {"id": "", "type": "text"})
        {'id': 'color', 'type': 'text'}
    """
    merged = dict(defaults)
    if args:
        merged.update(args)
    return merged


def storage_key(section: str, field_id: str) -> str:
    """Build the composite form name and storage key for a field.

    Examples:
        >>> storage_key("general", "site_name")
        'general[site_name]'
    """
    return f"{section}[{field_id}]"


def is_numeric(value: Any) -> bool:
    """Check whether a submitted value looks like a number.

    Accepts ints, floats and numeric strings with optional sign, decimals and
    exponent. Booleans are not numbers here.

    Examples:
        >>> is_numeric("42")
        True
        >>> is_numeric(" -1.5e3 ")
        True
        >>> is_numeric("abc")
        False
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if not isinstance(value, str):
        return False
    return NUMERIC_RE.match(value) is not None
