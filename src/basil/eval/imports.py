from __future__ import annotations

import logging

from lark import Tree

from ..lexer_rd import tokenize
from ..libraries import library_source
from ..parser_rd import parse_tokens
from ..runtime import NULL, BasilImportError, BasilRecursionError, Frame, Value
from ..tree import join_path, node_loc
from .blocks import run_module
from .common import EvalFunc

logger = logging.getLogger(__name__)

def eval_import(n: Tree, frame: Frame, eval_func: EvalFunc) -> Value:
    target = n.children[0]
    name = str(target)

    if target.type == 'RELATIVE':
        logger.warning("%s: relative import %r ignored, relative imports are not implemented", node_loc(n), name)
        return NULL

    source = library_source(name)
    if source is None:
        raise BasilImportError(f"unknown library '{name}'")

    module = load_library(name, source, frame, eval_func)

    collisions = [frame.qualify(key) for key in module.bindings if frame.has(frame.qualify(key))]
    if collisions:
        names = ", ".join(f"'{join_path(key)}'" for key in collisions)
        raise BasilImportError(f"importing '{name}' would redefine {names}")

    for key, bound in module.bindings.items():
        qualified = frame.qualify(key)
        frame.bind(qualified, bound)
        if key in module.constants:
            frame.constants.add(qualified)

    return NULL

def load_library(name: str, source: str, frame: Frame, eval_func: EvalFunc) -> Frame:
    """Lex, parse and run a library as an independent program; returns its top-level frame."""
    depth = frame.depth + 1
    if frame.max_depth is not None and depth > frame.max_depth:
        raise BasilRecursionError(f"maximum call depth of {frame.max_depth} exceeded importing '{name}'")

    filename = f"<{name}>"
    program = parse_tokens(tokenize(source, filename=filename))
    module = Frame(depth=depth, max_depth=frame.max_depth, filename=filename)

    logger.debug("running library %s", name)
    run_module(program, module, eval_func)
    return module
