from __future__ import annotations

import importlib
from typing import Optional

from .tree import Path, join_path
from .types import (
    Kind, Value, NULL, TRUE, FALSE, number, boolean, format_number,
    Frame, EvalFunc, BuiltinFn, BuiltinFunction, Builtins,
    BasilError, BasilRuntimeError, BasilBindingError, BasilArityError,
    BasilTypeError, BasilImportError, BasilRecursionError, BasilReturnSignal,
)

BUILTIN_NAMESPACE = "builtin"

_BUILTINS_INITIALIZED = False

def init_builtins() -> None:
    """Load the builtin module (idempotent) so register_builtin hooks run."""
    global _BUILTINS_INITIALIZED

    if _BUILTINS_INITIALIZED:
        return

    importlib.import_module("basil.stdlib")
    _BUILTINS_INITIALIZED = True

def register_builtin(name: str, *, arity: Optional[int] = None):
    """Register `builtin.<name>`. Builtins receive the unevaluated argument nodes."""
    def dec(fn: BuiltinFn):
        Builtins.functions[f"{BUILTIN_NAMESPACE}.{name}"] = BuiltinFunction(fn=fn, arity=arity)
        return fn

    return dec

def is_builtin_path(path: Path) -> bool:
    return bool(path) and path[0] == BUILTIN_NAMESPACE

def lookup_builtin(path: Path) -> BuiltinFunction:
    init_builtins()
    name = join_path(path)
    builtin = Builtins.functions.get(name)

    if builtin is None:
        raise BasilBindingError(f"unknown builtin '{name}'")

    return builtin
