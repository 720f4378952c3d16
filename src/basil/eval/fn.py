from __future__ import annotations

from typing import List, Set

from lark import Tree

from ..runtime import (
    NULL,
    BasilArityError,
    BasilBindingError,
    BasilReturnSignal,
    BasilTypeError,
    Frame,
    Value,
    is_builtin_path,
    lookup_builtin,
)
from ..tree import Node, Path, join_path, node_loc, path_of, tree_children, tree_label
from .blocks import child_scope, run_body
from .common import EvalFunc, bound_proc, literal_node, referenced_paths

def extract_param_names(params_node: Tree) -> List[str]:
    return [str(p) for p in tree_children(params_node)]

def eval_proc(n: Tree, frame: Frame, eval_func: EvalFunc) -> Value:
    name = n.children[0]

    if name.type == 'ANON':
        raise BasilTypeError("a proc literal is not a value; bind it with let or pass it to a call")

    frame.declare(frame.qualify(path_of(name)), n)
    return NULL

def eval_call(n: Tree, frame: Frame, eval_func: EvalFunc) -> Value:
    name, args_node = n.children
    path = path_of(name)
    args = tree_children(args_node)

    if is_builtin_path(path):
        builtin = lookup_builtin(path)

        if builtin.arity is not None and len(args) != builtin.arity:
            raise BasilArityError(
                f"'{join_path(path)}' expects exactly {builtin.arity} argument(s); got {len(args)}"
            )
        return builtin.fn(frame, args, eval_func)

    proc = frame.get(path)

    if tree_label(proc) != 'proc':
        raise BasilBindingError(f"'{join_path(path)}' is not a proc")

    params = {(param,) for param in extract_param_names(proc.children[1])}
    bound_args = [bind_argument(arg, params, frame, eval_func) for arg in args]
    return invoke_proc(proc, path, bound_args, frame, eval_func)

def bind_argument(arg: Node, params: Set[Path], frame: Frame, eval_func: EvalFunc) -> Tree:
    """Node a parameter is bound to.

    Arguments stay unresolved, so reading the parameter reads whatever the
    argument names at that moment. An argument that calls something, or
    that leads back to one of `params`, is resolved in the caller instead.
    """
    proc = bound_proc(arg, frame)
    if proc is not None:
        return proc

    refs = referenced_paths(arg, frame)
    if refs is not None and refs.isdisjoint(params):
        return arg

    return literal_node(eval_func(arg, frame), node_loc(arg))

def invoke_proc(proc: Tree, path: Path, args: List[Tree], frame: Frame, eval_func: EvalFunc) -> Value:
    """Run `proc` in a copy of the caller's frame with parameters bound by position.

    Keys the caller already had are copied back afterwards, so mutation of
    existing names is visible to the caller; everything new is dropped.
    """
    _, params_node, body = proc.children
    params = extract_param_names(params_node)

    if len(args) != len(params):
        raise BasilArityError(f"'{join_path(path)}' expects {len(params)} argument(s); got {len(args)}")

    keys = [(param,) for param in params]

    with child_scope(frame, prefix=path, call=True) as inner:
        for key, arg in zip(keys, args):
            inner.bind(key, arg)

        try:
            run_body(body, inner, eval_func)
            result = NULL
        except BasilReturnSignal as signal:
            result = signal.value

        settle_params(inner, keys, frame, eval_func)

    return result

def settle_params(inner: Frame, keys: List[Path], caller: Frame, eval_func: EvalFunc) -> None:
    # Parameters the caller also has are copied back, so they must not stay unresolved.
    for key in keys:
        bound = inner.lookup(key)
        if caller.has(key) and tree_label(bound) not in ('literal', 'proc'):
            inner.bind(key, literal_node(eval_func(bound, inner), node_loc(bound)))
