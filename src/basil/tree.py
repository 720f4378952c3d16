"""Shared helpers for working with the lark Tree/Token nodes that make up the Basil AST.

Every node the parser builds carries a lark ``Meta`` with ``filename``,
``line`` and ``column`` of its leading token; ``node_loc`` reads it back.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from lark import Token, Tree
from lark.tree import Meta
from typing_extensions import TypeAlias, TypeGuard


Node: TypeAlias = Tree | Token
Path: TypeAlias = Tuple[str, ...]


@dataclass(frozen=True)
class Loc:
    """Source location: file name plus 1-based line and column."""

    file: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


def make_meta(loc: Loc) -> Meta:
    meta = Meta()
    meta.empty = False
    meta.filename = loc.file
    meta.line = loc.line
    meta.column = loc.column
    return meta


def make_node(label: str, children: List[Node], loc: Loc) -> Tree:
    return Tree(label, children, make_meta(loc))


def make_token(type_: str, value: str, loc: Loc) -> Token:
    return Token(type_, value, line=loc.line, column=loc.column)


def node_loc(node: Node) -> Optional[Loc]:
    if is_tree(node):
        meta = node.meta
        line = getattr(meta, "line", None)
        if line is None:
            return None
        return Loc(getattr(meta, "filename", "<input>"), line, getattr(meta, "column", 0))

    return None


def is_tree(node: object) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: object) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_label(node: object) -> Optional[str]:
    return node.data if is_tree(node) else None

def tree_children(node: object) -> List[Node]:
    if not is_tree(node):
        return []

    return list(node.children)

# ---------------- Paths ----------------

def split_path(text: str) -> Path:
    return tuple(text.split("."))

def join_path(path: Path) -> str:
    return ".".join(path)

def path_of(node: Node) -> Path:
    """Path named by an IDENT token or the leading IDENT child of a tree."""
    if is_token(node):
        return split_path(str(node))

    for ch in tree_children(node):
        if is_token(ch) and ch.type == 'IDENT':
            return split_path(str(ch))

    return ()
