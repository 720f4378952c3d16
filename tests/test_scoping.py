from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import BasilBindingError, run_output_case, run_runtime_case

SCENARIOS = [
    pytest.param(
        dedent(
            """\
            let x = 1
            x = x + 4
            return x
            """
        ),
        ("number", "5"),
        None,
        id="set-rebinds",
    ),
    pytest.param(
        dedent(
            """\
            let x = 1
            let y = x
            x = 10
            return y
            """
        ),
        ("number", "1"),
        None,
        id="let-resolves-eagerly",
    ),
    pytest.param("x = 1", None, BasilBindingError, id="set-undeclared"),
    pytest.param("return missing", None, BasilBindingError, id="undefined-identifier"),
    pytest.param("let x = 1\nlet x = 2", None, BasilBindingError, id="let-redeclare"),
    pytest.param("const k = 1\nk = 2", None, BasilBindingError, id="assign-constant"),
    pytest.param("const k = 1\nlet k = 2", None, BasilBindingError, id="let-over-constant"),
    pytest.param(
        dedent(
            """\
            let flag = 1
            if flag then
                let inner = 2
            end
            return inner
            """
        ),
        None,
        BasilBindingError,
        id="if-body-let-does-not-leak",
    ),
    pytest.param(
        dedent(
            """\
            let total = 1
            if total then
                total = total + 1
            end
            return total
            """
        ),
        ("number", "2"),
        None,
        id="if-body-mutation-visible",
    ),
    pytest.param(
        dedent(
            """\
            namespace geo
                const k = 2
                proc twice(x) then
                    return x * geo.k
                end
            end
            return geo.twice(4)
            """
        ),
        ("number", "8"),
        None,
        id="namespace-qualifies-const-and-proc",
    ),
    pytest.param(
        dedent(
            """\
            namespace outer
                namespace inner
                    const depth = 2
                end
            end
            return outer.inner.depth
            """
        ),
        ("number", "2"),
        None,
        id="nested-namespaces",
    ),
    pytest.param(
        dedent(
            """\
            namespace geo
                let scratch = 1
            end
            return scratch
            """
        ),
        None,
        BasilBindingError,
        id="namespace-let-is-dropped",
    ),
    pytest.param(
        dedent(
            """\
            namespace geo
                const k = 2
            end
            return k
            """
        ),
        None,
        BasilBindingError,
        id="no-prefix-search",
    ),
    pytest.param(
        dedent(
            """\
            namespace geo
                const k = 2
            end
            geo.k = 3
            """
        ),
        None,
        BasilBindingError,
        id="namespaced-constant",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_scoping(source, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_redeclaration_stops_before_later_statements(capsys) -> None:
    source = dedent(
        """\
        builtin.printval("a")
        let x = 1
        let x = 2
        builtin.printval("b")
        """
    )
    run_output_case(source, "a", BasilBindingError, capsys)
