from __future__ import annotations

import logging
import sys
import traceback
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from lark import Tree

from .evaluator import eval_node, eval_program
from .lexer_rd import tokenize
from .parser_rd import ParseError, parse_tokens
from .runtime import NULL, BasilError, BasilRecursionError, Frame, Value, init_builtins
from .tree import Loc, tree_children, tree_label
from .utils import debug_py_trace_enabled, max_call_depth

logger = logging.getLogger(__name__)

# Statement forms the REPL echoes the value of.
_EXPRESSION_LABELS = {'literal', 'identifier', 'group', 'unary', 'binary', 'call', 'set'}

# Python frames consumed per Basil call, roughly.
_FRAMES_PER_CALL = 50

@contextmanager
def _recursion_headroom(max_depth: int) -> Iterator[None]:
    needed = max_depth * _FRAMES_PER_CALL + 1000
    previous = sys.getrecursionlimit()

    if needed > previous:
        sys.setrecursionlimit(needed)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)

def _parse(src: str, filename: str) -> Tree:
    try:
        return parse_tokens(tokenize(src, filename=filename))
    except RecursionError:
        raise ParseError("expression nesting is too deep to parse", loc=Loc(filename, 1, 1)) from None

def run(
    src: str,
    filename: str = "<input>",
    require_main: bool = True,
    frame: Optional[Frame] = None,
    max_depth: Optional[int] = None,
) -> Value:
    """Lex, parse and evaluate `src`; returns main's result (or Null)."""
    init_builtins()

    if max_depth is None:
        max_depth = frame.max_depth if frame is not None and frame.max_depth else max_call_depth()
    if frame is None:
        frame = Frame(max_depth=max_depth, filename=filename)

    program = _parse(src, filename)

    with _recursion_headroom(max_depth):
        result = eval_program(program, frame, require_main=require_main)

    return NULL if result is None else result

def repl_eval(text: str, frame: Frame) -> Tuple[Value, bool]:
    """Evaluate one REPL submission in a persistent frame.

    Returns ``(value, stmt)``; `stmt` is False when the input was a lone
    expression whose value should be echoed.
    """
    init_builtins()
    program = _parse(text, frame.filename)
    stmts = tree_children(program)

    with _recursion_headroom(frame.max_depth or max_call_depth()):
        if len(stmts) == 1 and tree_label(stmts[0]) in _EXPRESSION_LABELS:
            try:
                return eval_node(stmts[0], frame), False
            except RecursionError:
                raise BasilRecursionError("maximum recursion depth exceeded", Loc(frame.filename, 1, 1)) from None

        result = eval_program(program, frame, require_main=False)

    return (NULL if result is None else result), True

def _load_source(arg: Optional[str]) -> Tuple[str, str]:
    """
    Resolve CLI input into (source text, file name).
    - None or "-" => read stdin.
    - Otherwise read the file as UTF-8 with carriage returns dropped.
    """
    if arg is None or arg == "-":
        return sys.stdin.read(), "<stdin>"

    try:
        text = Path(arg).read_text(encoding="utf-8")
    except OSError as exc:
        raise SystemExit(f"cannot read {arg}: {exc.strerror or exc}") from None

    return text.replace("\r", ""), arg

def _parse_depth(raw: str) -> int:
    try:
        depth = int(raw)
    except ValueError:
        raise SystemExit(f"--max-depth expects an integer, got {raw!r}") from None

    if depth < 1:
        raise SystemExit(f"--max-depth must be positive, got {depth}")
    return depth

def _report(exc: BasilError) -> None:
    print(exc.report(), file=sys.stderr)

    if debug_py_trace_enabled():
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), file=sys.stderr, end="")

def main(argv: Optional[List[str]] = None) -> int:
    arg = None
    start_repl = False
    verbose = False
    max_depth: Optional[int] = None
    it = iter(sys.argv[1:] if argv is None else argv)

    for token in it:
        if token == "--repl":
            start_repl = True
            continue

        if token == "--verbose":
            verbose = True
            continue

        if token.startswith("--max-depth="):
            max_depth = _parse_depth(token.split("=", 1)[1])
            continue

        if token == "--max-depth":
            try:
                max_depth = _parse_depth(next(it))
            except StopIteration:
                raise SystemExit("--max-depth flag requires a value") from None
            continue

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if start_repl:
        from .repl import repl

        repl(max_depth=max_depth)
        return 0

    if max_depth is None:
        try:
            max_depth = max_call_depth()
        except ValueError as exc:
            raise SystemExit(str(exc)) from None

    source, filename = _load_source(arg)
    logger.debug("running %s", filename)

    try:
        run(source, filename=filename, max_depth=max_depth)
    except BasilError as exc:
        sys.stdout.flush()
        _report(exc)
        return 1

    return 0

def cli() -> None:
    sys.exit(main())

if __name__ == "__main__":
    cli()
