from __future__ import annotations

import logging
import math

from lark import Tree

from ..runtime import NULL, BasilTypeError, Frame, Kind, Value, number
from ..tree import node_loc, path_of
from ..utils import is_truthy, to_number
from .blocks import child_scope, run_body
from .common import EvalFunc, literal_node

logger = logging.getLogger(__name__)

def eval_if_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> Value:
    cond, body = n.children

    if is_truthy(eval_func(cond, frame)):
        with child_scope(frame) as inner:
            run_body(body, inner, eval_func)

    return NULL

def eval_while_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> Value:
    cond, body = n.children

    while is_truthy(eval_func(cond, frame)):
        with child_scope(frame) as inner:
            run_body(body, inner, eval_func)

    return NULL

def eval_for_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> Value:
    name, start_node, stop_node, body = n.children
    start = eval_func(start_node, frame)
    stop = eval_func(stop_node, frame)

    # Non-Number bounds run zero iterations rather than failing.
    if start.kind is not Kind.NUMBER or stop.kind is not Kind.NUMBER:
        logger.debug("for loop at %s skipped: bounds %r and %r are not both Numbers", node_loc(n), start, stop)
        return NULL

    lo = to_number(start)
    hi = to_number(stop)

    if not (math.isfinite(lo) and math.isfinite(hi)):
        raise BasilTypeError(f"for loop bounds must be finite, got {start.text} to {stop.text}")

    key = path_of(name)
    loc = node_loc(n)

    for i in range(math.floor(lo), math.floor(hi)):
        with child_scope(frame) as inner:
            inner.bind(key, literal_node(number(float(i)), loc))
            run_body(body, inner, eval_func)

    return NULL
