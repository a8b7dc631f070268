"""Metadata extraction: key normalization, property lookup, IFC loading."""

from ifctakeoff.extraction.normalize import norm_str, normalize_key, to_number
from ifctakeoff.extraction.properties import (
    ResolvedProperty,
    find_number,
    find_text,
    get_comments,
    get_tag,
    iter_properties,
)

__all__ = [
    "ResolvedProperty",
    "find_number",
    "find_text",
    "get_comments",
    "get_tag",
    "iter_properties",
    "norm_str",
    "normalize_key",
    "to_number",
]
