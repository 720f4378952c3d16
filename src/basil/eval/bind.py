from __future__ import annotations

from lark import Tree

from ..runtime import NULL, BasilTypeError, Frame, Value
from ..tree import join_path, path_of, tree_label
from .blocks import run_body
from .common import EvalFunc, bindable, literal_value

def eval_identifier(n: Tree, frame: Frame, eval_func: EvalFunc) -> Value:
    """Resolve the node bound to `n`; a bound identifier or expression is resolved in turn."""
    path = path_of(n)
    bound = frame.get(path)

    if tree_label(bound) == 'proc':
        raise BasilTypeError(f"'{join_path(path)}' is a proc, not a value")

    return eval_func(bound, frame)

def eval_let(n: Tree, frame: Frame, eval_func: EvalFunc) -> Value:
    # `let` keys are never namespace-qualified.
    name, value_node = n.children
    key = path_of(name)

    frame.require_unbound(key)
    frame.declare(key, bindable(value_node, frame, eval_func))
    return NULL

def eval_const(n: Tree, frame: Frame, eval_func: EvalFunc) -> Value:
    name, value_node = n.children
    key = frame.qualify(path_of(name))

    frame.require_unbound(key)
    frame.declare(key, bindable(value_node, frame, eval_func), constant=True)
    return NULL

def eval_set(n: Tree, frame: Frame, eval_func: EvalFunc) -> Value:
    name, value_node = n.children
    key = path_of(name)

    frame.require_assignable(key)
    bound = bindable(value_node, frame, eval_func)
    frame.assign(key, bound)

    if tree_label(bound) == 'literal':
        return literal_value(bound)
    return NULL

def eval_namespace(n: Tree, frame: Frame, eval_func: EvalFunc) -> Value:
    name, body = n.children
    prefix = frame.qualify(path_of(name))
    inner = frame.child(prefix=prefix)

    try:
        run_body(body, inner, eval_func)
    finally:
        frame.merge_prefixed(inner, prefix)

    return NULL
