"""
Token Types for the Basil Parser

Shared between lexer and parser to avoid circular dependencies.
"""

from typing import Any
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types"""

    # Literals
    NUMBER = auto()
    STRING = auto()
    IDENT = auto()
    LIBRARY_PATH = auto()  # <name>, only after `import`

    # Keywords
    IMPORT = auto()
    NAMESPACE = auto()
    LET = auto()
    CONST = auto()
    IF = auto()
    THEN = auto()
    END = auto()
    FOR = auto()
    TO = auto()
    WHILE = auto()
    PROC = auto()
    RETURN = auto()

    # Keyword literals
    TRUE = auto()
    FALSE = auto()
    NULL = auto()

    # Logical
    AND = auto()
    OR = auto()
    NOT = auto()

    # Equality
    IS = auto()
    ISNT = auto()

    # Comparison
    LT = auto()
    LTE = auto()
    GT = auto()
    GTE = auto()

    # Arithmetic
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    MOD = auto()

    # Assignment
    ASSIGN = auto()

    # Punctuation
    LPAR = auto()
    RPAR = auto()
    COMMA = auto()
    SEMI = auto()
    COLON = auto()  # alias for `then`

    # Special
    EOF = auto()


@dataclass
class Tok:
    """Token with position info"""

    type: TT
    value: Any
    line: int = 0
    column: int = 0
    file: str = "<input>"

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"
