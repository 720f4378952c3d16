from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Optional

from lark import Tree

from ..runtime import BasilReturnSignal, Frame, Value
from ..tree import Node, Path, tree_children
from .common import EvalFunc

@contextmanager
def child_scope(
    frame: Frame,
    prefix: Optional[Path] = None,
    call: bool = False,
) -> Iterator[Frame]:
    """Run in a copy of `frame`; afterwards keys `frame` already had are copied back."""
    inner = frame.child(prefix=prefix, call=call)

    try:
        yield inner
    finally:
        frame.merge_existing(inner)

def run_statements(stmts: List[Node], frame: Frame, eval_func: EvalFunc) -> None:
    for stmt in stmts:
        eval_func(stmt, frame)

def run_body(body: Tree, frame: Frame, eval_func: EvalFunc) -> None:
    run_statements(tree_children(body), frame, eval_func)

def run_module(program: Tree, frame: Frame, eval_func: EvalFunc) -> Optional[Value]:
    """Run top-level statements; a top-level `return` stops them and yields its value."""
    try:
        run_statements(tree_children(program), frame, eval_func)
    except BasilReturnSignal as signal:
        return signal.value

    return None

def eval_return(n: Tree, frame: Frame, eval_func: EvalFunc) -> Value:
    raise BasilReturnSignal(eval_func(n.children[0], frame))
