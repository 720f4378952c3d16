from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Tuple

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from basil.lexer_rd import LexError, Lexer
from basil.parser_rd import ParseError, parse_source
from basil.runner import run as run_program
from basil.runtime import (
    BasilArityError,
    BasilBindingError,
    BasilError,
    BasilImportError,
    BasilRecursionError,
    BasilRuntimeError,
    BasilTypeError,
    Frame,
    Kind,
    Value,
)

RuntimeExpectation = Optional[Tuple[str, object]]

KEYWORDS = Lexer.KEYWORDS

_KINDS = {
    "string": Kind.STRING,
    "number": Kind.NUMBER,
    "bool": Kind.BOOLEAN,
    "null": Kind.NULL,
}


def parse_one(code: str):
    """Parse `code` and return its single top-level statement."""
    program = parse_source(code)
    assert len(program.children) == 1, f"expected one statement, got {len(program.children)}"
    return program.children[0]


def verify_result(value: Value, kind: str, expected: object) -> None:
    """Assert a resolved value has the expected kind and text."""
    if kind not in _KINDS:
        raise AssertionError(f"unknown expectation kind {kind}")

    assert value.kind is _KINDS[kind], f"expected {kind}, got {value!r}"

    if kind == "null":
        return

    if kind == "number" and not isinstance(expected, str):
        assert abs(float(value.text) - float(expected)) <= 1e-9, f"expected {expected}, got {value.text}"
        return

    assert value.text == str(expected), f"expected {expected!r}, got {value.text!r}"


def run_runtime_case(
    source: str,
    expectation: RuntimeExpectation,
    expected_exc: Optional[type],
) -> None:
    """Execute one runtime scenario (no `main` required) with optional expected exception."""
    if expected_exc is not None:
        with pytest.raises(expected_exc):
            run_program(source, require_main=False)
        return

    result = run_program(source, require_main=False)
    if expectation is not None:
        verify_result(result, expectation[0], expectation[1])


def run_output_case(
    source: str,
    expected_out: str,
    expected_exc: Optional[type],
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Execute one scenario and compare everything it wrote to stdout."""
    if expected_exc is not None:
        with pytest.raises(expected_exc):
            run_program(source, require_main=False)
    else:
        run_program(source, require_main=False)

    assert capsys.readouterr().out == expected_out


__all__ = [
    "BasilArityError",
    "BasilBindingError",
    "BasilError",
    "BasilImportError",
    "BasilRecursionError",
    "BasilRuntimeError",
    "BasilTypeError",
    "Frame",
    "KEYWORDS",
    "LexError",
    "ParseError",
    "parse_one",
    "parse_source",
    "run_output_case",
    "run_program",
    "run_runtime_case",
    "verify_result",
]
