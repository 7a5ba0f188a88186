# utils.py
import math
import re
from typing import Any, Optional


_INT_PREFIX_RE = re.compile(r"^\s*([+-]?[0-9]+)")


def parse_score(raw: Any) -> Optional[int]:
    """
    Lenient integer parsing for submitted scores.

    Takes the integer prefix of a string ("42" -> 42, " 7px" -> 7, "3.9" -> 3),
    truncates finite floats toward zero and keeps ints as they are.
    Returns None for anything without a numeric prefix (the "not a number"
    case), which is stored rather than rejected.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if math.isnan(raw) or math.isinf(raw):
            return None
        return int(raw)
    if not isinstance(raw, str):
        return None
    m = _INT_PREFIX_RE.match(raw)
    if not m:
        return None
    return int(m.group(1))


def env_flag(value: Optional[str]) -> bool:
    """'1', 'true', 'yes', 'on' (any case) -> True."""
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}
