from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Set

from .tree import Loc, Node, Path, join_path

# ---------- Value Model ----------

class Kind(Enum):
    STRING = "String"
    NUMBER = "Number"
    BOOLEAN = "Boolean"
    NULL = "Null"

    @classmethod
    def from_token_type(cls, token_type: str) -> 'Kind':
        return cls[token_type]

@dataclass(frozen=True)
class Value:
    """A resolved (kind, text) pair. Numbers and booleans stay textual."""
    kind: Kind
    text: str

    def __repr__(self) -> str:
        return f'({self.kind.value}, "{self.text}")'

NULL = Value(Kind.NULL, "null")
TRUE = Value(Kind.BOOLEAN, "true")
FALSE = Value(Kind.BOOLEAN, "false")

def format_number(num: float) -> str:
    num = float(num)
    if num != num:
        return "nan"
    if num in (float("inf"), float("-inf")):
        return "inf" if num > 0 else "-inf"
    if num.is_integer():
        return str(int(num))
    return repr(num)

def number(num: float) -> Value:
    return Value(Kind.NUMBER, format_number(num))

def boolean(flag: bool) -> Value:
    return TRUE if flag else FALSE

# ---------- Exceptions ----------

class BasilError(Exception):
    """Root of every fatal Basil condition: kind + location + message."""
    kind = "Error"

    def __init__(self, message: str, loc: Optional[Loc] = None):
        super().__init__(message)
        self.message = message
        self.loc = loc

    @property
    def line(self) -> Optional[int]:
        return self.loc.line if self.loc is not None else None

    @property
    def column(self) -> Optional[int]:
        return self.loc.column if self.loc is not None else None

    def __str__(self) -> str:
        if self.loc is None:
            return self.message
        return f"At {self.loc}: {self.message}"

    def report(self) -> str:
        return f"[ERROR]: {self}"

class BasilRuntimeError(BasilError):
    kind = "RuntimeError"

class BasilBindingError(BasilRuntimeError):
    kind = "BindingError"

class BasilArityError(BasilBindingError):
    pass

class BasilTypeError(BasilRuntimeError):
    kind = "TypeError"

class BasilImportError(BasilRuntimeError):
    kind = "ImportError"

class BasilRecursionError(BasilRuntimeError):
    kind = "RecursionError"

class BasilReturnSignal(Exception):
    """Internal control-flow exception used to implement `return`."""
    def __init__(self, value: Value):
        self.value = value

# ---------- Frames ----------

class Frame:
    """One flat binding map from qualified path to bound node.

    There is no parent chain: a call, loop iteration or namespace body works
    on a copy (``child``) and selected keys are merged back afterwards.
    """

    def __init__(
        self,
        bindings: Optional[Dict[Path, Node]] = None,
        constants: Optional[Set[Path]] = None,
        prefix: Path = (),
        depth: int = 0,
        max_depth: Optional[int] = None,
        filename: str = "<input>",
    ):
        self.bindings: Dict[Path, Node] = dict(bindings) if bindings else {}
        self.constants: Set[Path] = set(constants) if constants else set()
        self.prefix = prefix
        self.depth = depth
        self.max_depth = max_depth
        self.filename = filename

    def qualify(self, path: Path) -> Path:
        return self.prefix + path

    def has(self, path: Path) -> bool:
        return path in self.bindings

    def lookup(self, path: Path) -> Optional[Node]:
        return self.bindings.get(path)

    def get(self, path: Path) -> Node:
        bound = self.bindings.get(path)
        if bound is None:
            raise BasilBindingError(f"'{join_path(path)}' is not defined")
        return bound

    def require_unbound(self, path: Path) -> None:
        if path in self.bindings:
            raise BasilBindingError(f"'{join_path(path)}' is already defined")

    def require_assignable(self, path: Path) -> None:
        if path not in self.bindings:
            raise BasilBindingError(f"'{join_path(path)}' is not defined")
        if path in self.constants:
            raise BasilBindingError(f"cannot assign to constant '{join_path(path)}'")

    def declare(self, path: Path, bound: Node, constant: bool = False) -> None:
        self.require_unbound(path)
        self.bindings[path] = bound
        if constant:
            self.constants.add(path)

    def bind(self, path: Path, bound: Node) -> None:
        """Bind without the redeclaration check (parameters, loop variables)."""
        self.bindings[path] = bound
        self.constants.discard(path)

    def assign(self, path: Path, bound: Node) -> None:
        self.require_assignable(path)
        self.bindings[path] = bound

    def child(self, prefix: Optional[Path] = None, call: bool = False) -> 'Frame':
        depth = self.depth + 1 if call else self.depth

        if call and self.max_depth is not None and depth > self.max_depth:
            raise BasilRecursionError(f"maximum call depth of {self.max_depth} exceeded")

        return Frame(
            bindings=self.bindings,
            constants=self.constants,
            prefix=self.prefix if prefix is None else prefix,
            depth=depth,
            max_depth=self.max_depth,
            filename=self.filename,
        )

    def merge_existing(self, inner: 'Frame') -> None:
        """Copy back every key this frame already had; keys new in `inner` are dropped."""
        for key in self.bindings:
            if key in inner.bindings:
                self.bindings[key] = inner.bindings[key]

    def merge_prefixed(self, inner: 'Frame', prefix: Path) -> None:
        """Copy back every key of `inner` that lives under `prefix`."""
        size = len(prefix)

        for key, bound in inner.bindings.items():
            if key[:size] == prefix:
                self.bindings[key] = bound
                if key in inner.constants:
                    self.constants.add(key)

# ---------- Builtins ----------

EvalFunc = Callable[[Node, Frame], Value]
BuiltinFn = Callable[[Frame, List[Node], EvalFunc], Value]

@dataclass
class BuiltinFunction:
    fn: BuiltinFn
    arity: Optional[int] = None

class Builtins:
    functions: Dict[str, BuiltinFunction] = {}
