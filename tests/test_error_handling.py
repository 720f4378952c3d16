from __future__ import annotations

from textwrap import dedent

import pytest

from basil.runtime import BasilReturnSignal
from basil.tree import Loc
from tests.support.harness import (
    BasilArityError,
    BasilBindingError,
    BasilError,
    BasilImportError,
    BasilRecursionError,
    BasilRuntimeError,
    BasilTypeError,
    LexError,
    ParseError,
    run_program,
)

KIND_CASES = [
    pytest.param('"open', LexError, "LexError", id="lex"),
    pytest.param("let = 1", ParseError, "ParseError", id="parse"),
    pytest.param("return nope", BasilBindingError, "BindingError", id="binding"),
    pytest.param("proc f() then end\nf(1)", BasilArityError, "BindingError", id="arity"),
    pytest.param('return "a" * 2', BasilTypeError, "TypeError", id="type"),
    pytest.param("import nolib", BasilImportError, "ImportError", id="import"),
]


@pytest.mark.parametrize("source, exc_type, kind", KIND_CASES)
def test_error_kinds(source: str, exc_type: type, kind: str) -> None:
    with pytest.raises(exc_type) as exc_info:
        run_program(source, require_main=False)

    err = exc_info.value
    assert isinstance(err, BasilError)
    assert err.kind == kind


def test_runtime_errors_share_a_base() -> None:
    for cls in (BasilBindingError, BasilArityError, BasilTypeError, BasilImportError, BasilRecursionError):
        assert issubclass(cls, BasilRuntimeError)

    assert not issubclass(BasilReturnSignal, BasilError)


def test_error_message_format() -> None:
    err = BasilBindingError("'x' is not defined", Loc("prog.bs", 3, 7))

    assert str(err) == "At prog.bs:3:7: 'x' is not defined"
    assert err.report() == "[ERROR]: At prog.bs:3:7: 'x' is not defined"
    assert (err.line, err.column) == (3, 7)


def test_error_without_location_is_bare_message() -> None:
    err = BasilTypeError("division by zero")

    assert str(err) == "division by zero"
    assert err.line is None


def test_innermost_node_location_is_attached() -> None:
    source = dedent(
        """\
        let a = 1
        builtin.printval(a + missing)
        """
    )

    with pytest.raises(BasilBindingError) as exc_info:
        run_program(source, filename="inner.bs", require_main=False)

    err = exc_info.value
    assert str(err) == "At inner.bs:2:22: 'missing' is not defined"


def test_redeclaration_is_located_at_the_second_declaration() -> None:
    with pytest.raises(BasilBindingError) as exc_info:
        run_program("let x = 1\n  let x = 2", require_main=False)

    assert (exc_info.value.line, exc_info.value.column) == (2, 3)
    assert "'x' is already defined" in str(exc_info.value)


def test_errors_inside_libraries_point_at_library_source() -> None:
    with pytest.raises(BasilTypeError) as exc_info:
        run_program('import math\nreturn math.abs("x")', require_main=False)

    assert exc_info.value.loc is not None
    assert exc_info.value.loc.file == "<math>"


def test_missing_main_is_located_at_program_start() -> None:
    with pytest.raises(BasilBindingError) as exc_info:
        run_program("let x = 1", filename="nomain.bs")

    assert str(exc_info.value) == "At nomain.bs:1:1: no 'main' proc defined"


def test_main_must_be_a_proc() -> None:
    with pytest.raises(BasilBindingError) as exc_info:
        run_program("let main = 1")

    assert "'main' is not a proc" in str(exc_info.value)


def test_output_before_an_error_stays_written(capsys) -> None:
    with pytest.raises(BasilTypeError):
        run_program('builtin.printval("before")\nreturn 1 / 0', require_main=False)

    assert capsys.readouterr().out == "before"
