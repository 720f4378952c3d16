"""Interactive REPL for Basil, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
import traceback
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .lexer_rd import LexError, tokenize
from .repl_highlight import BasilLexer
from .runner import repl_eval
from .runtime import NULL, BasilError, Frame, init_builtins
from .token_types import TT
from .utils import debug_py_trace_enabled, max_call_depth

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Reset the REPL environment", ""),
}

# `namespace` opens a block on its own; every other block opens at `then`/`:`.
_BLOCK_OPEN = {TT.NAMESPACE, TT.THEN, TT.COLON}

_INDENT = "    "

_TRACE_ENV = "BASIL_DEBUG_PY_TRACE"


def open_blocks(text: str) -> int:
    """Number of blocks `text` opens without closing; 0 when it is complete.

    Text that fails to lex counts as complete so the error gets reported.
    """
    try:
        tokens = tokenize(text)
    except LexError:
        return 0

    depth = 0
    for tok in tokens:
        if tok.type in _BLOCK_OPEN:
            depth += 1
        elif tok.type == TT.END:
            depth -= 1

    return max(depth, 0)


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )


def new_frame(max_depth: Optional[int] = None) -> Frame:
    return Frame(max_depth=max_depth or max_call_depth(), filename="<repl>")


def handle_slash(line: str, frame_box: list[Frame]) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/py-traceback":
        if arg.lower() in ("on", "1", "true", "yes"):
            os.environ[_TRACE_ENV] = "1"
        elif arg.lower() in ("off", "0", "false", "no"):
            os.environ.pop(_TRACE_ENV, None)
        elif arg == "":
            # Toggle.
            if debug_py_trace_enabled():
                os.environ.pop(_TRACE_ENV, None)
            else:
                os.environ[_TRACE_ENV] = "1"
        else:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state}")
        return True

    if cmd == "/reset":
        frame_box[0] = new_frame(frame_box[0].max_depth)
        print("Environment reset.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def _report(exc: BasilError) -> None:
    print(exc.report(), file=sys.stderr)

    if debug_py_trace_enabled():
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")


def repl(max_depth: Optional[int] = None) -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    init_builtins()
    # Use a mutable box so /reset can swap the frame.
    frame_box: list[Frame] = [new_frame(max_depth)]

    bindings = KeyBindings()

    @bindings.add("backspace")
    def _backspace(event):
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        if buf.text.startswith("/"):
            buf.start_completion()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        text = buf.text

        if text.strip().startswith("/"):
            buf.validate_and_handle()
            return

        depth = open_blocks(text)
        if depth == 0:
            buf.validate_and_handle()
            return

        buf.insert_text("\n" + _INDENT * depth)

    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=BasilLexer(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("basil repl: Ctrl-D to exit, / for commands")

    while True:
        try:
            text = session.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        if handle_slash(text, frame_box):
            continue

        try:
            result, stmt = repl_eval(text, frame_box[0])
        except BasilError as exc:
            sys.stdout.flush()
            _report(exc)
            continue

        if not stmt and result != NULL:
            print(result.text)
