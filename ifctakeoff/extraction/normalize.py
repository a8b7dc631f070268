"""Key normalization and lenient number parsing for exporter-supplied values."""

from __future__ import annotations

import math
import re
import unicodedata
from typing import Any

from ifctakeoff.config import VALUE_HOLDER_KEYS

_SEPARATORS_RE = re.compile(r"[\s_\-.]")
_NUMBER_RE = re.compile(r"[-+]?\d*\.?\d+(?:[eE][-+]?\d+)?")


def _unwrap(raw: Any) -> Any:
    """Return the value held by a wrapper dict, or *raw* itself."""
    if isinstance(raw, dict):
        for key in VALUE_HOLDER_KEYS:
            if raw.get(key) is not None:
                return raw[key]
    return raw


def norm_str(raw: Any) -> str:
    """Stringify and strip *raw*; ``None`` becomes ``""``."""
    if raw is None:
        return ""
    value = _unwrap(raw)
    if value is None:
        return ""
    return value.strip() if isinstance(value, str) else str(value).strip()


def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_key(raw: Any) -> str:
    """Canonicalize a property or type *name* for comparison.

    Lower-cases, removes diacritics and drops whitespace, ``_``, ``-`` and
    ``.``.  Idempotent.  Only for names and lookup keys, never for values.
    """
    text = strip_accents(norm_str(raw).lower())
    return _SEPARATORS_RE.sub("", text)


def to_number(raw: Any) -> float | None:
    """Parse *raw* into a float, or return ``None``.

    * numbers pass through (non-finite values and booleans are rejected);
    * strings use the first signed float-like substring, accepting a
      decimal comma (``"12,5 m2"`` -> ``12.5``);
    * dicts are probed recursively through the value-holder keys.

    Never raises.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        try:
            value = float(raw)
        except OverflowError:
            return None
        return value if math.isfinite(value) else None
    if isinstance(raw, str):
        match = _NUMBER_RE.search(raw.replace(",", ".", 1))
        if match is None:
            return None
        try:
            value = float(match.group(0))
        except ValueError:
            return None
        return value if math.isfinite(value) else None
    if isinstance(raw, dict):
        for key in VALUE_HOLDER_KEYS:
            if key in raw:
                value = to_number(raw[key])
                if value is not None:
                    return value
    return None
