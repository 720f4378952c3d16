"""
Lexer for Basil - Recursive Descent Parser

Tokenizes Basil source code into a stream of tokens.

Features:
- Single-pass tokenization
- Position tracking (file, line, column)
- Dotted identifier paths (`a.b.c` is one token)
- String literals with backslash escapes
"""

from typing import List, Optional

from .token_types import TT, Tok
from .tree import Loc
from .types import BasilError

# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """
    Basil lexer.

    Whitespace (including newlines) only separates tokens; statements are
    delimited by the grammar, not by line breaks.
    """

    # Keyword mapping
    KEYWORDS = {
        'import': TT.IMPORT,
        'namespace': TT.NAMESPACE,
        'let': TT.LET,
        'const': TT.CONST,
        'if': TT.IF,
        'then': TT.THEN,
        'end': TT.END,
        'for': TT.FOR,
        'to': TT.TO,
        'while': TT.WHILE,
        'proc': TT.PROC,
        'return': TT.RETURN,
        'true': TT.TRUE,
        'false': TT.FALSE,
        'null': TT.NULL,
        'and': TT.AND,
        'or': TT.OR,
        'not': TT.NOT,
        'is': TT.IS,
        'isnt': TT.ISNT,
    }

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('<=', TT.LTE),
        ('>=', TT.GTE),

        # Single-character operators
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('*', TT.STAR),
        ('/', TT.SLASH),
        ('%', TT.MOD),
        ('<', TT.LT),
        ('>', TT.GT),
        ('=', TT.ASSIGN),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        (',', TT.COMMA),
        (';', TT.SEMI),
        (':', TT.COLON),
    ]

    ESCAPES = {
        'n': '\n',
        't': '\t',
        'r': '\r',
        '\\': '\\',
        '"': '"',
        "'": "'",
        'a': '\x07',
        'b': '\x08',
        'e': '\x1b',
        'f': '\x0c',
        'v': '\x0b',
    }

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []

        # Start of the token being scanned
        self.start_line = 1
        self.start_column = 1

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_token()

        self.mark()
        self.emit(TT.EOF, None)
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        # Skip whitespace (newlines included)
        if self.skip_whitespace():
            return

        self.mark()

        # Comments
        if self.peek() == '#':
            self.skip_comment()
            return

        # String literals
        if self.peek() == '"':
            self.scan_string()
            return

        # Numbers
        if self.peek().isdigit():
            self.scan_number()
            return

        # Identifiers and keywords
        if self.peek().isalpha() or self.peek() == '_':
            self.scan_identifier()
            return

        # <name> right after `import`
        if self.peek() == '<' and self.last_type() == TT.IMPORT:
            self.scan_library_path()
            return

        # Operators and punctuation
        self.scan_operator()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_string(self):
        """Scan string literal: "..." with backslash escapes"""
        self.advance()  # Opening quote
        value = ''

        while self.pos < len(self.source) and self.peek() != '"':
            if self.peek() == '\\':
                esc_line, esc_col = self.line, self.column
                self.advance()
                if self.pos >= len(self.source):
                    break
                ch = self.advance()
                if ch not in self.ESCAPES:
                    raise LexError(
                        f"Invalid escape character '\\{ch}'",
                        Loc(self.filename, esc_line, esc_col),
                    )
                value += self.ESCAPES[ch]
            else:
                value += self.advance()

        if self.pos >= len(self.source):
            raise LexError("Unterminated string", self.start_loc())

        self.advance()  # Closing quote
        self.emit(TT.STRING, value)

    def scan_number(self):
        """Scan number literal: digits, or digits.digits followed by `f`"""
        value = ''

        # Integer part
        while self.peek().isdigit():
            value += self.advance()

        # Fraction requires the `f` suffix
        if self.peek() == '.' and self.peek(1).isdigit():
            value += self.advance()  # .
            while self.peek().isdigit():
                value += self.advance()

            if self.peek() != 'f':
                raise LexError(
                    f"\"{value}\" is not a valid token (floating point literals end in 'f')",
                    self.start_loc(),
                )
            self.advance()  # f

        if self.peek().isalnum() or self.peek() in ('_', '.'):
            raise LexError(f"\"{value}{self.peek()}\" is not a valid token", self.start_loc())

        # Keep as string; numbers are textual until arithmetic needs them
        self.emit(TT.NUMBER, value)

    def scan_identifier(self):
        """Scan keyword or dotted identifier path"""
        value = self.scan_word()

        while self.peek() == '.':
            value += self.advance()
            segment = self.scan_word()
            if not segment:
                raise LexError(f"\"{value}\" is not a valid token (empty path segment)", self.start_loc())
            value += segment

        # Check if keyword
        token_type = self.KEYWORDS.get(value, TT.IDENT)
        self.emit(token_type, value)

    def scan_word(self) -> str:
        word = ''
        while self.peek().isalnum() or self.peek() == '_':
            word += self.advance()
        return word

    def scan_library_path(self):
        """Scan <name> library path"""
        self.advance()  # <
        name = self.scan_word()

        if not name or self.peek() != '>':
            raise LexError(f"\"<{name}\" is not a valid library path", self.start_loc())

        self.advance()  # >
        self.emit(TT.LIBRARY_PATH, name)

    def scan_operator(self):
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.emit(op_type, op_str)
                return

        ch = self.peek()
        raise LexError(f"\"{ch}\" is not a valid token", self.start_loc())

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")
        result = ''
        for _ in range(n):
            ch = self.source[self.pos] if self.pos < len(self.source) else '\0'
            result += ch
            self.pos += 1
            if ch == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return result

    def skip_whitespace(self) -> bool:
        """Skip whitespace, return True if any skipped"""
        skipped = False
        while self.peek() in (' ', '\t', '\n', '\r'):
            self.advance()
            skipped = True
        return skipped

    def skip_comment(self):
        """Skip comment until end of line"""
        while self.peek() not in ('\n', '\0'):
            self.advance()

    def last_type(self) -> Optional[TT]:
        return self.tokens[-1].type if self.tokens else None

    def mark(self):
        self.start_line = self.line
        self.start_column = self.column

    def start_loc(self) -> Loc:
        return Loc(self.filename, self.start_line, self.start_column)

    def emit(self, token_type: TT, value):
        """Emit a token located at the start of its text"""
        tok = Tok(
            type=token_type,
            value=value,
            line=self.start_line,
            column=self.start_column,
            file=self.filename,
        )
        self.tokens.append(tok)

class LexError(BasilError):
    """Lexical analysis error"""
    kind = "LexError"

def tokenize(source: str, filename: str = "<input>") -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source, filename=filename)
    return lexer.tokenize()
