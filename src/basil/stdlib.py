"""Built-in functions (`builtin.printval`, etc.) registered via basil.runtime."""

from __future__ import annotations

import sys
from typing import List

from .printer import dump
from .runtime import NULL, EvalFunc, Frame, Value, register_builtin
from .tree import Node

@register_builtin("printval", arity=1)
def builtin_printval(frame: Frame, args: List[Node], eval_func: EvalFunc) -> Value:
    value = eval_func(args[0], frame)
    sys.stdout.write(value.text)
    return NULL

@register_builtin("debug", arity=1)
def builtin_debug(_frame: Frame, args: List[Node], _eval_func: EvalFunc) -> Value:
    sys.stdout.write(dump(args[0]) + "\n")
    return NULL

@register_builtin("debugval", arity=1)
def builtin_debugval(frame: Frame, args: List[Node], eval_func: EvalFunc) -> Value:
    value = eval_func(args[0], frame)
    sys.stdout.write(repr(value) + "\n")
    return NULL
