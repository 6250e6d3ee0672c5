"""
Unit-aware scaling helpers for SVG attribute and inline style values.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import math
import re
from typing import Optional

# <number><unit>, e.g. "12px", "3.5", "10%"
DIMENSION_PATTERN = re.compile(r'^([0-9.]+)([a-z%]*)$', re.IGNORECASE)
NUMBER_PATTERN = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')


def format_number(value: float) -> str:
    """Format a number the shortest way, dropping the fraction of integral values."""
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return repr(value)


def _parse_number(text: str) -> Optional[float]:
    try:
        number = float(text)
    except ValueError:
        return None
    if math.isnan(number):
        return None
    return number


def scale_dimension(value: Optional[str], factor: float) -> Optional[str]:
    """Scale a dimension value such as ``"12px"`` by ``factor``.

    The unit suffix is kept exactly as written. Values that are empty, do not
    look like ``<number><unit>`` or whose number cannot be parsed are returned
    unchanged. A number with more than one dot (``"1.2.3px"``) counts as
    unparsable; its ``1.2`` prefix is not scaled.

    The number itself is re-emitted in its shortest form, so non-canonical
    spellings change even at factor 1: ``"3.50px"`` becomes ``"3.5px"``,
    ``"007"`` becomes ``"7"`` and ``"1."`` becomes ``"1"``.
    """
    if not value:
        return value

    match = DIMENSION_PATTERN.match(value)
    if not match:
        return value

    number = _parse_number(match.group(1))
    if number is None:
        return value

    unit = match.group(2) or ''
    return f"{format_number(number * factor)}{unit}"


def scale_style_property(style: str, prop: str, factor: float) -> str:
    """Scale every ``<prop>: <number>px`` occurrence inside a style string.

    Only the targeted property is rewritten, everything else in the
    declaration string is left byte-for-byte intact. This is a narrow pattern
    match, not a CSS parser.
    """
    pattern = re.compile(rf'{re.escape(prop)}\s*:\s*([0-9.]+)px', re.IGNORECASE)

    def _scale(match: re.Match) -> str:
        number = _parse_number(match.group(1))
        if number is None:
            return match.group(0)
        return f"{prop}: {format_number(number * factor)}px"

    return pattern.sub(_scale, style)


def scale_viewbox(viewbox: str, factor: float) -> str:
    """Divide the width and height of a ``viewBox`` by ``factor``.

    Anything other than exactly four numeric tokens is returned unchanged.
    """
    tokens = viewbox.split()
    if len(tokens) != 4:
        return viewbox

    if not all(NUMBER_PATTERN.match(token) for token in tokens):
        return viewbox

    x, y, width, height = (float(token) for token in tokens)
    return " ".join(format_number(n) for n in (x, y, width / factor, height / factor))
