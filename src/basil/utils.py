from __future__ import annotations

import math
import os

from .types import BasilTypeError, Kind, Value

DEFAULT_MAX_DEPTH = 200

_TRUTHY_FLAGS = {"1", "true", "yes", "on"}


def debug_py_trace_enabled() -> bool:
    """BASIL_DEBUG_PY_TRACE: also print the Python traceback for Basil errors."""
    return os.environ.get("BASIL_DEBUG_PY_TRACE", "").strip().lower() in _TRUTHY_FLAGS


def max_call_depth() -> int:
    """BASIL_MAX_DEPTH: maximum proc call / import nesting."""
    raw = os.environ.get("BASIL_MAX_DEPTH", "").strip()
    if not raw:
        return DEFAULT_MAX_DEPTH

    try:
        depth = int(raw)
    except ValueError:
        raise ValueError(f"BASIL_MAX_DEPTH must be an integer, got {raw!r}") from None

    if depth < 1:
        raise ValueError(f"BASIL_MAX_DEPTH must be positive, got {depth}")
    return depth


def to_number(value: Value) -> float:
    """Numeric view of a Number or Boolean value."""
    if value.kind not in (Kind.NUMBER, Kind.BOOLEAN):
        raise BasilTypeError(f"expected a Number or Boolean, got {value.kind.value} {value.text!r}")

    if value.text == "true":
        return 1.0
    if value.text == "false":
        return 0.0

    try:
        return float(value.text)
    except ValueError:
        raise BasilTypeError(f"{value.text!r} is not numeric") from None


def is_truthy(value: Value) -> bool:
    """Only Numbers and Booleans are ever truthy."""
    if value.kind not in (Kind.NUMBER, Kind.BOOLEAN):
        return False

    num = to_number(value)
    return not math.isnan(num) and num != 0


def values_equal(left: Value, right: Value) -> bool:
    """`is` compares the full (kind, text) pair."""
    return left.kind == right.kind and left.text == right.text
