"""Render Basil trees back to source text, or to the debug dump used by `builtin.debug`."""

from __future__ import annotations

from typing import List

from lark import Token

from .tree import Node, is_token, tree_children, tree_label
from .types import Kind

_ESCAPES = {
    '\\': '\\\\',
    '"': '\\"',
    '\n': '\\n',
    '\t': '\\t',
    '\r': '\\r',
    '\x07': '\\a',
    '\x08': '\\b',
    '\x1b': '\\e',
    '\x0c': '\\f',
    '\x0b': '\\v',
}

_DUMP_NAMES = {
    'program': 'Program',
    'identifier': 'Identifier',
    'group': 'Group',
    'unary': 'Unary',
    'binary': 'Binary',
    'call': 'Call',
    'import': 'Import',
    'proc': 'Proc',
    'if': 'If',
    'for': 'For',
    'while': 'While',
    'return': 'Return',
    'let': 'VariableDeclaration',
    'const': 'ConstantDeclaration',
    'set': 'VariableSet',
    'namespace': 'Namespace',
}

_LIST_NODES = {'args', 'params', 'body'}


def quote_string(text: str) -> str:
    return '"' + "".join(_ESCAPES.get(ch, ch) for ch in text) + '"'


def _render_literal(tok: Token) -> str:
    match tok.type:
        case 'STRING':
            return quote_string(str(tok))
        case 'NUMBER':
            text = str(tok)
            return text + 'f' if '.' in text else text
        case _:
            return str(tok)


def _render_body(body: Node) -> str:
    stmts = [render(stmt) for stmt in tree_children(body)]
    if not stmts:
        return " "
    return " " + "; ".join(stmts) + " "


def render(node: Node) -> str:
    """Re-render a tree as Basil source. Groups stay explicit."""
    if is_token(node):
        return str(node)

    label = tree_label(node)
    kids = tree_children(node)

    match label:
        case 'program':
            return "\n".join(render(stmt) for stmt in kids)
        case 'literal':
            return _render_literal(kids[0])
        case 'identifier':
            return str(kids[0])
        case 'group':
            return f"({render(kids[0])})"
        case 'unary':
            op, operand = kids
            if op.type == 'NOT':
                return f"not {render(operand)}"
            return f"-{render(operand)}"
        case 'binary':
            left, op, right = kids
            return f"{render(left)} {op} {render(right)}"
        case 'call':
            path, args = kids
            return f"{path}({', '.join(render(a) for a in tree_children(args))})"
        case 'import':
            target = kids[0]
            if target.type == 'RELATIVE':
                return f"import {quote_string(str(target))}"
            return f"import {target}"
        case 'proc':
            name, params, body = kids
            head = f"proc {name}(" if name.type == 'IDENT' else "proc ("
            return f"{head}{', '.join(str(p) for p in tree_children(params))}) then{_render_body(body)}end"
        case 'if':
            cond, body = kids
            return f"if {render(cond)} then{_render_body(body)}end"
        case 'for':
            name, start, stop, body = kids
            return f"for {name} = {render(start)} to {render(stop)} then{_render_body(body)}end"
        case 'while':
            cond, body = kids
            return f"while {render(cond)} then{_render_body(body)}end"
        case 'return':
            return f"return {render(kids[0])}"
        case 'let' | 'const':
            name, value = kids
            return f"{label} {name} = {render(value)}"
        case 'set':
            name, value = kids
            return f"{name} = {render(value)}"
        case 'namespace':
            name, body = kids
            return f"namespace {name}{_render_body(body)}end"
        case _:
            raise ValueError(f"Cannot render node {label!r}")


def dump(node: Node) -> str:
    """Debug dump: `Binary(Literal(Number, "1"), +, Literal(Number, "2"))`."""
    if is_token(node):
        return str(node) if node.type != 'ANON' else '<anonymous>'

    label = tree_label(node)
    kids = tree_children(node)

    if label == 'literal':
        tok = kids[0]
        return f"Literal({Kind.from_token_type(tok.type).value}, {quote_string(str(tok))})"

    parts: List[str] = [dump(ch) for ch in kids]

    if label in _LIST_NODES:
        return "[" + ", ".join(parts) + "]"

    return f"{_DUMP_NAMES.get(label, label)}({', '.join(parts)})"
