from __future__ import annotations

from typing import Optional, Set

from lark import Tree

from ..runtime import EvalFunc, Frame, Kind, Value
from ..tree import Loc, Node, Path, make_node, make_token, node_loc, path_of, tree_children, tree_label

_RUNTIME_LOC = Loc("<runtime>", 0, 0)

def literal_value(node: Tree) -> Value:
    tok = node.children[0]
    return Value(Kind.from_token_type(tok.type), str(tok))

def literal_node(value: Value, loc: Optional[Loc]) -> Tree:
    """Wrap a resolved value back into a `literal` node for storage in a frame."""
    loc = loc or _RUNTIME_LOC
    return make_node('literal', [make_token(value.kind.name, value.text, loc)], loc)

def bound_proc(node: Node, frame: Frame) -> Optional[Tree]:
    """The `proc` node an expression names directly, if any."""
    match tree_label(node):
        case 'proc':
            return node
        case 'group':
            return bound_proc(node.children[0], frame)
        case 'identifier':
            bound = frame.lookup(path_of(node))
            if tree_label(bound) == 'proc':
                return bound

    return None

def bindable(node: Node, frame: Frame, eval_func: EvalFunc) -> Tree:
    """Node to store for `node`: procs stay procs, everything else is resolved now."""
    proc = bound_proc(node, frame)
    if proc is not None:
        return proc

    return literal_node(eval_func(node, frame), node_loc(node))

def referenced_paths(node: Node, frame: Frame) -> Optional[Set[Path]]:
    """Paths an expression reads, followed through unresolved bindings in `frame`.

    None when the expression calls something or names an undefined path.
    """
    seen: Set[Path] = set()
    pending = [node]

    while pending:
        current = pending.pop()
        label = tree_label(current)

        if label in ('call', 'proc'):
            return None

        if label == 'identifier':
            path = path_of(current)
            if path in seen:
                continue
            seen.add(path)

            bound = frame.lookup(path)
            if bound is None:
                return None
            if tree_label(bound) not in ('literal', 'proc'):
                pending.append(bound)
            continue

        pending.extend(tree_children(current))

    return seen
