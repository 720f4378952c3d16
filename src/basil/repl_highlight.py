"""prompt_toolkit lexer for live Basil syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import LexError, tokenize
from .token_types import TT, Tok

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "path": "ansiyellow",
    "identifier": "",
    "builtin": "bold ansiyellow",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
}

_KEYWORDS = {
    TT.IMPORT, TT.NAMESPACE, TT.LET, TT.CONST, TT.IF, TT.THEN, TT.END,
    TT.FOR, TT.TO, TT.WHILE, TT.PROC, TT.RETURN,
    TT.AND, TT.OR, TT.NOT, TT.IS, TT.ISNT,
}

_TT_GROUP = {tt: "keyword" for tt in _KEYWORDS}
_TT_GROUP.update({
    TT.TRUE: "boolean",
    TT.FALSE: "boolean",
    TT.NULL: "constant",
    TT.NUMBER: "number",
    TT.STRING: "string",
    TT.LIBRARY_PATH: "path",
    TT.IDENT: "identifier",
    TT.PLUS: "operator",
    TT.MINUS: "operator",
    TT.STAR: "operator",
    TT.SLASH: "operator",
    TT.MOD: "operator",
    TT.LT: "operator",
    TT.LTE: "operator",
    TT.GT: "operator",
    TT.GTE: "operator",
    TT.ASSIGN: "operator",
    TT.LPAR: "punctuation",
    TT.RPAR: "punctuation",
    TT.COMMA: "punctuation",
    TT.SEMI: "punctuation",
    TT.COLON: "punctuation",
})


def _string_end(text: str, start: int) -> int:
    """Index just past the closing quote of the string starting at `start`."""
    i = start + 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == '"':
            return i + 1
        i += 1
    return len(text)


def _token_end(text: str, tok: Tok, start: int) -> int:
    if tok.type == TT.STRING:
        return _string_end(text, start)

    end = start + len(str(tok.value))

    # Source spelling differs from the token value for these two.
    if tok.type == TT.NUMBER and text[end:end + 1] == "f":
        end += 1
    elif tok.type == TT.LIBRARY_PATH:
        end += 2

    return end


def _gap_spans(gap: str) -> StyleAndTextTuples:
    hash_at = gap.find("#")
    if hash_at < 0:
        return [("", gap)] if gap else []

    spans: StyleAndTextTuples = []
    if hash_at:
        spans.append(("", gap[:hash_at]))
    spans.append((GROUP_STYLE["comment"], gap[hash_at:]))
    return spans


def _token_style(tok: Tok) -> str:
    group = _TT_GROUP.get(tok.type, "")
    if tok.type == TT.IDENT and str(tok.value).startswith("builtin."):
        group = "builtin"
    return GROUP_STYLE.get(group, "")


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    try:
        tokens = tokenize(text)
    except LexError:
        return [("", text)]

    result: StyleAndTextTuples = []
    pos = 0

    for tok in tokens:
        if tok.type == TT.EOF:
            continue

        start = tok.column - 1
        if start < pos:
            continue

        result.extend(_gap_spans(text[pos:start]))
        end = _token_end(text, tok, start)
        result.append((_token_style(tok), text[start:end]))
        pos = end

    # Trailing text: whitespace or a comment.
    result.extend(_gap_spans(text[pos:]))

    return result if result else [("", text)]


class BasilLexer(Lexer):
    """prompt_toolkit Lexer that highlights Basil source using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        # Pre-compute highlights for all lines.
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
