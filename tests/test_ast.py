from __future__ import annotations

import pytest

from basil.printer import dump, quote_string, render
from tests.support.harness import parse_one, parse_source


def test_multiplication_binds_tighter_than_addition() -> None:
    node = parse_one("1 + 2 * 3")

    assert node.data == "binary"
    left, op, right = node.children
    assert left.data == "literal"
    assert op.type == "PLUS"
    assert right.data == "binary"
    assert right.children[1].type == "STAR"


def test_binary_levels_are_left_associative() -> None:
    node = parse_one("10 - 4 - 3")

    left, op, right = node.children
    assert op.type == "MINUS"
    assert left.data == "binary"
    assert right.data == "literal"


PRECEDENCE_CASES = [
    pytest.param("a or b and c", "OR", id="and-over-or"),
    pytest.param("a and b is c", "AND", id="is-over-and"),
    pytest.param("a is b < c", "IS", id="compare-over-is"),
    pytest.param("a < b + c", "LT", id="add-over-compare"),
    pytest.param("a + b % c", "PLUS", id="mod-over-add"),
]


@pytest.mark.parametrize("code, root_op", PRECEDENCE_CASES)
def test_precedence_levels(code: str, root_op: str) -> None:
    assert parse_one(code).children[1].type == root_op


def test_unary_binds_tighter_than_binary() -> None:
    node = parse_one("-a * b")

    assert node.data == "binary"
    assert node.children[0].data == "unary"


RENDER_CASES = [
    pytest.param("(1 + 2) * 3", id="group-kept"),
    pytest.param("1 + 2 * 3", id="no-group"),
    pytest.param("not (a is b)", id="not-group"),
    pytest.param("-x", id="negate"),
    pytest.param("1.5f * 2", id="float-suffix"),
    pytest.param('std.println("a\\tb")', id="string-escape"),
    pytest.param("let x = y", id="let"),
    pytest.param("x = x + 1", id="set"),
    pytest.param("proc add(a, b) then return a + b end", id="proc"),
    pytest.param("let f = proc (x) then return x end", id="anonymous-proc"),
    pytest.param("for i = 0 to 3 then builtin.printval(i) end", id="for"),
    pytest.param("namespace geo const k = 2 end", id="namespace"),
    pytest.param("import math", id="import"),
]


@pytest.mark.parametrize("code", RENDER_CASES)
def test_render_reproduces_source(code: str) -> None:
    assert render(parse_one(code)) == code


def test_render_is_reparseable() -> None:
    source = "if a < 2 then b = (a + 1) * 2; builtin.printval(b) end"
    once = render(parse_source(source))

    assert render(parse_source(once)) == once


def test_quote_string_escapes_controls() -> None:
    assert quote_string('a"b\n') == '"a\\"b\\n"'


DUMP_CASES = [
    pytest.param("1 + 2", 'Binary(Literal(Number, "1"), +, Literal(Number, "2"))', id="binary"),
    pytest.param('"hi"', 'Literal(String, "hi")', id="string"),
    pytest.param("true", 'Literal(Boolean, "true")', id="boolean"),
    pytest.param("std.print(x)", "Call(std.print, [Identifier(x)])", id="call"),
    pytest.param("let x = 1", 'VariableDeclaration(x, Literal(Number, "1"))', id="let"),
    pytest.param("const x = 1", 'ConstantDeclaration(x, Literal(Number, "1"))', id="const"),
    pytest.param("x = 1", 'VariableSet(x, Literal(Number, "1"))', id="set"),
    pytest.param("proc (a) then end", "Proc(<anonymous>, [a], [])", id="anonymous-proc"),
]


@pytest.mark.parametrize("code, expected", DUMP_CASES)
def test_dump(code: str, expected: str) -> None:
    assert dump(parse_one(code)) == expected
