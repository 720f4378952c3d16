from __future__ import annotations

import math
import operator
from typing import Callable, Dict

from lark import Tree

from ..runtime import FALSE, TRUE, BasilRuntimeError, BasilTypeError, Frame, Kind, Value, boolean, number
from ..utils import is_truthy, to_number, values_equal
from .common import EvalFunc

def _divide(left: float, right: float) -> float:
    if right == 0:
        raise BasilTypeError("division by zero")
    return left / right

def _modulo(left: float, right: float) -> float:
    if right == 0:
        raise BasilTypeError("modulo by zero")
    return math.fmod(left, right)

_ARITHMETIC: Dict[str, Callable[[float, float], float]] = {
    'PLUS': operator.add,
    'MINUS': operator.sub,
    'STAR': operator.mul,
    'SLASH': _divide,
    'MOD': _modulo,
}

_ORDERING: Dict[str, Callable[[float, float], bool]] = {
    'LT': operator.lt,
    'GT': operator.gt,
    'LTE': operator.le,
    'GTE': operator.ge,
}

def _round_half_away(num: float) -> float:
    return math.copysign(math.floor(abs(num) + 0.5), num)

def eval_unary(n: Tree, frame: Frame, eval_func: EvalFunc) -> Value:
    op, operand_node = n.children
    operand = eval_func(operand_node, frame)

    match op.type:
        case 'MINUS':
            return number(-to_number(operand))
        case 'NOT':
            return boolean(_round_half_away(to_number(operand)) == 0)
        case _:
            raise BasilRuntimeError(f"Unsupported unary op {op}")

def eval_binary(n: Tree, frame: Frame, eval_func: EvalFunc) -> Value:
    left_node, op, right_node = n.children
    kind = op.type

    if kind in ('AND', 'OR'):
        return _eval_logical(kind, left_node, right_node, frame, eval_func)

    left = eval_func(left_node, frame)
    right = eval_func(right_node, frame)

    if kind in ('IS', 'ISNT'):
        same = values_equal(left, right)
        return boolean(same if kind == 'IS' else not same)

    lhs = to_number(left)
    rhs = to_number(right)

    # Ordering results are Number-kind "true"/"false", not Booleans.
    if kind in _ORDERING:
        return Value(Kind.NUMBER, "true" if _ORDERING[kind](lhs, rhs) else "false")

    arith = _ARITHMETIC.get(kind)
    if arith is None:
        raise BasilRuntimeError(f"Unsupported binary op {op}")

    return number(arith(lhs, rhs))

def _eval_logical(kind: str, left_node, right_node, frame: Frame, eval_func: EvalFunc) -> Value:
    left = is_truthy(eval_func(left_node, frame))

    if kind == 'AND' and not left:
        return FALSE
    if kind == 'OR' and left:
        return TRUE

    return boolean(is_truthy(eval_func(right_node, frame)))
