"""Coercion helpers shared by the condition evaluator and validation.

Answers arrive as JSON scalars or string lists. Comparisons are done on
the string form a JSON client would produce (`5.0` -> "5", `True` ->
"true", `["a", "b"]` -> "a,b"), and numeric comparisons only succeed when
both sides parse as finite numbers.
"""

import math
import re
from typing import Any

# Number literal forms a JSON client accepts; no digit separators or nan/inf words
DECIMAL_REGEX = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
RADIX_REGEX = re.compile(r"^0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")


def stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(v) for v in value)
    return str(value)


def to_number(value: Any) -> float | None:
    """Parse `value` as a finite number, or return None.

    Booleans, lists and blank strings are never numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if DECIMAL_REGEX.match(text):
            number = float(text)
        elif RADIX_REGEX.match(text):
            number = float(int(text, 0))
        else:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def is_empty(value: Any) -> bool:
    """Absent, empty string and empty list count as empty."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False
