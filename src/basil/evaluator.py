from __future__ import annotations

from typing import Callable, Optional

from lark import Tree

from .runtime import (
    BasilBindingError,
    BasilError,
    BasilRecursionError,
    BasilRuntimeError,
    Frame,
    Value,
    init_builtins,
)
from .tree import Loc, Node, node_loc, tree_label
from .utils import max_call_depth

from .eval.bind import eval_const, eval_identifier, eval_let, eval_namespace, eval_set
from .eval.blocks import eval_return, run_module
from .eval.common import literal_value
from .eval.expr import eval_binary, eval_unary
from .eval.fn import eval_call, eval_proc, invoke_proc
from .eval.imports import eval_import
from .eval.loops import eval_for_stmt, eval_if_stmt, eval_while_stmt

MAIN_PATH = ("main",)

def _maybe_attach_location(exc: BasilError, node: Node) -> None:
    # Innermost node wins: only fill in a location nobody set yet.
    if exc.loc is not None:
        return

    loc = node_loc(node)
    if loc is not None:
        exc.loc = loc

def eval_node(n: Node, frame: Frame) -> Value:
    try:
        return _eval_node_inner(n, frame)
    except BasilError as e:
        _maybe_attach_location(e, n)
        raise

def _eval_node_inner(n: Node, frame: Frame) -> Value:
    d = tree_label(n)
    handler = _NODE_DISPATCH.get(d) if d is not None else None

    if handler is None:
        raise BasilRuntimeError(f"Unknown node: {d or n!r}")

    return handler(n, frame)

def _eval_group(n: Tree, frame: Frame) -> Value:
    return eval_node(n.children[0], frame)

def eval_program(program: Tree, frame: Optional[Frame] = None, require_main: bool = True) -> Optional[Value]:
    """Run a parsed program.

    With `require_main` the top-level statements only set things up and the
    result is whatever `main()` returns. Without it the result is the value
    of a top-level `return`, or None.
    """
    init_builtins()

    if frame is None:
        loc = node_loc(program) or Loc("<input>", 1, 1)
        frame = Frame(max_depth=max_call_depth(), filename=loc.file)

    try:
        result = run_module(program, frame, eval_node)

        if not require_main:
            return result

        main = frame.lookup(MAIN_PATH)
        if main is None:
            raise BasilBindingError("no 'main' proc defined", node_loc(program))
        if tree_label(main) != 'proc':
            raise BasilBindingError("'main' is not a proc", node_loc(main))

        return invoke_proc(main, MAIN_PATH, [], frame, eval_node)
    except RecursionError:
        raise BasilRecursionError("maximum recursion depth exceeded", node_loc(program)) from None

_NODE_DISPATCH: dict[str, Callable[[Tree, Frame], Value]] = {
    'literal': lambda n, frame: literal_value(n),
    'group': _eval_group,
    'identifier': lambda n, frame: eval_identifier(n, frame, eval_node),
    'unary': lambda n, frame: eval_unary(n, frame, eval_node),
    'binary': lambda n, frame: eval_binary(n, frame, eval_node),
    'call': lambda n, frame: eval_call(n, frame, eval_node),
    'proc': lambda n, frame: eval_proc(n, frame, eval_node),
    'import': lambda n, frame: eval_import(n, frame, eval_node),
    'if': lambda n, frame: eval_if_stmt(n, frame, eval_node),
    'for': lambda n, frame: eval_for_stmt(n, frame, eval_node),
    'while': lambda n, frame: eval_while_stmt(n, frame, eval_node),
    'return': lambda n, frame: eval_return(n, frame, eval_node),
    'let': lambda n, frame: eval_let(n, frame, eval_node),
    'const': lambda n, frame: eval_const(n, frame, eval_node),
    'set': lambda n, frame: eval_set(n, frame, eval_node),
    'namespace': lambda n, frame: eval_namespace(n, frame, eval_node),
}
