"""
Shared utilities for uploads: text decoding, field cleaning, header name
normalisation and numeric coercion.
"""

import logging
import math
import re
from typing import Any

logger = logging.getLogger(__name__)

_BOM = "\ufeff"


def decode_upload(raw: bytes | str) -> str:
    """Decode uploaded file bytes to text.

    UTF-8 (with or without BOM) is tried first, then latin-1, which accepts
    any byte sequence. A leading BOM is removed so it does not end up in the
    first header name.
    """
    if isinstance(raw, str):
        return raw.lstrip(_BOM)
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.warning("Upload is not valid UTF-8, decoding as latin-1")
        text = raw.decode("latin-1")
    return text.lstrip(_BOM)


def clean_field(raw: str) -> str:
    """Trim whitespace and one layer of surrounding double quotes."""
    value = raw.strip()
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def to_snake_case(name: str) -> str:
    """Convert a column name or label to snake_case.

    Handles spaces, parentheses, slashes, and percent signs.
    """
    s = str(name).strip()
    s = s.replace("%", "pct").replace("/", "_per_").replace("(", "").replace(")", "")
    s = s.replace("-", "_").replace(".", "_")
    s = re.sub(r"[^a-zA-Z0-9]+", "_", s)
    # CamelCase to snake_case
    s = re.sub(r"([a-z])([A-Z])", r"\1_\2", s)
    s = s.lower().strip("_")
    s = re.sub(r"_+", "_", s)
    return s


def parse_decimal(val: Any) -> float | None:
    """Coerce a value to a finite float, returning None when it is not one.

    Strings are stripped first. NaN and infinities count as unparseable so a
    bad cell can never turn into a plottable value.
    """
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, str):
        val = val.strip()
        if not val:
            return None
    try:
        number = float(val)
    except (ValueError, TypeError):
        return None
    if not math.isfinite(number):
        return None
    return number
