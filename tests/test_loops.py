from __future__ import annotations

import logging
from textwrap import dedent

import pytest

from tests.support.harness import BasilBindingError, Kind, run_output_case, run_program

from basil.types import format_number

SCENARIOS = [
    pytest.param("for i = 0 to 3 then builtin.printval(i) end", "012", None, id="for-basic"),
    pytest.param("for i = 3 to 0 then builtin.printval(i) end", "", None, id="for-empty-range"),
    pytest.param("for i = 0.5f to 3.9f then builtin.printval(i) end", "012", None, id="for-floors-bounds"),
    pytest.param("for i = -2 to 0 then builtin.printval(i) end", "-2-1", None, id="for-negative"),
    pytest.param('for i = "a" to 3 then builtin.printval(i) end', "", None, id="for-string-bound-skips"),
    pytest.param("for i = true to 3 then builtin.printval(i) end", "", None, id="for-boolean-bound-skips"),
    pytest.param(
        dedent(
            """\
            let total = 0
            for i = 0 to 4 then
                total = total + i
            end
            builtin.printval(total)
            """
        ),
        "6",
        None,
        id="for-accumulates-into-outer",
    ),
    pytest.param(
        dedent(
            """\
            let i = 9
            for i = 0 to 2 then
                builtin.printval(i)
            end
            builtin.printval(i)
            """
        ),
        "011",
        None,
        id="for-variable-merged-back",
    ),
    pytest.param(
        dedent(
            """\
            for i = 0 to 2 then
                let seen = i
            end
            builtin.printval(seen)
            """
        ),
        "",
        BasilBindingError,
        id="for-body-let-does-not-leak",
    ),
    pytest.param(
        dedent(
            """\
            for i = 0 to 2 then
                let fresh = i
                builtin.printval(fresh)
            end
            """
        ),
        "01",
        None,
        id="for-body-let-fresh-each-iteration",
    ),
    pytest.param(
        dedent(
            """\
            let n = 0
            while n < 3 then
                builtin.printval(n)
                n = n + 1
            end
            """
        ),
        "012",
        None,
        id="while-basic",
    ),
    pytest.param('while "yes" then builtin.printval(1) end', "", None, id="while-string-is-falsy"),
    pytest.param("while null then builtin.printval(1) end", "", None, id="while-null-is-falsy"),
    pytest.param(
        dedent(
            """\
            for i = 1 to 3 then
                for j = 0 to i then
                    builtin.printval(j)
                end
            end
            """
        ),
        "001",
        None,
        id="nested-for",
    ),
]


@pytest.mark.parametrize("source, expected_out, expected_exc", SCENARIOS)
def test_loops(source: str, expected_out: str, expected_exc, capsys) -> None:
    run_output_case(source, expected_out, expected_exc, capsys)


def test_skipped_for_loop_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="basil.eval.loops"):
        run_program('for i = "a" to 3 then end', require_main=False)

    assert any("skipped" in record.getMessage() for record in caplog.records)


def test_loop_counter_is_an_integral_number() -> None:
    value = run_program("let seen = 0\nfor i = 0 to 3 then seen = i end\nreturn seen", require_main=False)

    assert value.kind is Kind.NUMBER
    assert value.text == "2"


@pytest.mark.parametrize("num, text", [(3, "3"), (3.0, "3"), (-2, "-2"), (0, "0"), (2.5, "2.5")])
def test_format_number_accepts_ints(num, text: str) -> None:
    assert format_number(num) == text
