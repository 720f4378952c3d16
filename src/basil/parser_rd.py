"""
Recursive Descent Parser for Basil

Structure:
- Lexer: Token stream from source
- Parser: Recursive descent with precedence climbing for expressions and
  explicit `end`-closed blocks for statements
- AST: lark Trees labelled by node kind, each carrying the location of its
  leading token in `meta`
"""

from typing import List, Optional

from lark import Token, Tree

from .token_types import TT, Tok
from .tree import Loc, make_node, make_token
from .types import BasilError

# ============================================================================
# Parser
# ============================================================================

class ParseError(BasilError):
    """Parse error with position info"""
    kind = "ParseError"

    def __init__(self, message: str, token: Optional[Tok] = None, loc: Optional[Loc] = None):
        if loc is None and token is not None:
            loc = tok_loc(token)
        super().__init__(message, loc)
        self.token = token

def tok_loc(tok: Tok) -> Loc:
    return Loc(tok.file, tok.line, tok.column)

def describe(tok: Tok) -> str:
    if tok.type == TT.EOF:
        return "end of input"
    return f"'{tok.value}'"

# Literal token kinds as stored in `literal` nodes
_KEYWORD_LITERALS = {
    TT.TRUE: 'BOOLEAN',
    TT.FALSE: 'BOOLEAN',
    TT.NULL: 'NULL',
}

class Parser:
    """
    Recursive descent parser for Basil.

    Expression precedence (lowest to highest):
    1. or
    2. and
    3. equality (is, isnt)
    4. comparison (<, >, <=, >=)
    5. additive (+, -)
    6. multiplicative (*, /, %)
    7. unary (-, not)
    8. primary (literals, identifiers, calls, groups, proc literals)
    """

    def __init__(self, tokens: List[Tok]):
        self.tokens = tokens
        self.pos = 0
        self.current = tokens[0] if tokens else Tok(TT.EOF, None, 0, 0)

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token"""
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1] if self.tokens else Tok(TT.EOF, None, 0, 0)

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
            self.current = self.tokens[self.pos]
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: Optional[str] = None) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            msg = message or f"Expected {token_type.name.lower()}, got {describe(self.current)}"
            raise ParseError(msg, self.current)
        return self.advance()

    def expect_then(self, opener: Tok) -> None:
        if self.match(TT.THEN, TT.COLON):
            return
        raise ParseError(
            f"Expected 'then' after '{opener.value}' header, got {describe(self.current)}",
            self.current,
        )

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> Tree:
        """Parse entire program"""
        start = self.current
        stmts = []

        while not self.check(TT.EOF):
            if self.match(TT.SEMI):
                continue
            stmts.append(self.parse_statement())

        return make_node('program', stmts, Loc(start.file, 1, 1))

    def parse_block(self, opener: Tok) -> Tree:
        """
        Parse statements up to the matching `end`.

        Running out of tokens is reported at the opening keyword so the
        unclosed block can be found.
        """
        body_start = self.current
        stmts = []

        while not self.check(TT.END):
            if self.check(TT.EOF):
                raise ParseError(
                    f"Unterminated '{opener.value}' block: reached end of input at "
                    f"{self.current.line}:{self.current.column} without 'end'",
                    opener,
                )
            if self.match(TT.SEMI):
                continue
            stmts.append(self.parse_statement())

        self.expect(TT.END)
        return make_node('body', stmts, tok_loc(body_start))

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Tree:
        """
        Parse a single statement, dispatching on the leading token.
        Anything that is not a keyword statement or `path = expr` is an expression.
        """
        if self.check(TT.IMPORT):
            return self.parse_import_stmt()
        if self.check(TT.NAMESPACE):
            return self.parse_namespace_stmt()
        if self.check(TT.LET, TT.CONST):
            return self.parse_decl_stmt()
        if self.check(TT.IF):
            return self.parse_if_stmt()
        if self.check(TT.FOR):
            return self.parse_for_stmt()
        if self.check(TT.WHILE):
            return self.parse_while_stmt()
        if self.check(TT.RETURN):
            return self.parse_return_stmt()
        if self.check(TT.PROC) and self.peek(1).type == TT.IDENT:
            return self.parse_proc(named=True)
        if self.check(TT.IDENT) and self.peek(1).type == TT.ASSIGN:
            return self.parse_set_stmt()

        return self.parse_expr()

    def parse_set_stmt(self) -> Tree:
        """Parse assignment: path = expr"""
        name = self.expect(TT.IDENT)
        self.expect(TT.ASSIGN)
        value = self.parse_expr()
        return make_node('set', [self.ident(name), value], tok_loc(name))

    def parse_import_stmt(self) -> Tree:
        """
        Parse import statement:
        import name | import <name>   (library)
        import "path"                 (relative)
        """
        import_tok = self.expect(TT.IMPORT)
        loc = tok_loc(import_tok)

        if self.check(TT.IDENT, TT.LIBRARY_PATH):
            target = self.advance()
            return make_node('import', [make_token('LIBRARY', target.value, tok_loc(target))], loc)

        if self.check(TT.STRING):
            target = self.advance()
            return make_node('import', [make_token('RELATIVE', target.value, tok_loc(target))], loc)

        raise ParseError(f"Expected library name or path after 'import', got {describe(self.current)}", self.current)

    def parse_namespace_stmt(self) -> Tree:
        """Parse namespace: namespace name ... end"""
        ns_tok = self.expect(TT.NAMESPACE)
        name = self.expect(TT.IDENT, f"Expected namespace name, got {describe(self.current)}")
        body = self.parse_block(ns_tok)
        return make_node('namespace', [self.ident(name), body], tok_loc(ns_tok))

    def parse_decl_stmt(self) -> Tree:
        """Parse let/const declaration: let name = expr"""
        decl_tok = self.advance()
        label = 'let' if decl_tok.type == TT.LET else 'const'
        name = self.expect(TT.IDENT, f"Expected name after '{decl_tok.value}', got {describe(self.current)}")
        self.expect(TT.ASSIGN, f"Expected '=' after '{decl_tok.value} {name.value}', got {describe(self.current)}")
        value = self.parse_expr()
        return make_node(label, [self.ident(name), value], tok_loc(decl_tok))

    def parse_if_stmt(self) -> Tree:
        """Parse if statement: if expr then body end"""
        if_tok = self.expect(TT.IF)
        cond = self.parse_expr()
        self.expect_then(if_tok)
        body = self.parse_block(if_tok)
        return make_node('if', [cond, body], tok_loc(if_tok))

    def parse_for_stmt(self) -> Tree:
        """Parse counted loop: for name = start to end then body end"""
        for_tok = self.expect(TT.FOR)
        name = self.expect(TT.IDENT, f"Expected loop variable after 'for', got {describe(self.current)}")
        self.expect(TT.ASSIGN, f"Expected '=' after loop variable, got {describe(self.current)}")
        start = self.parse_expr()
        self.expect(TT.TO, f"Expected 'to' in for loop, got {describe(self.current)}")
        stop = self.parse_expr()
        self.expect_then(for_tok)
        body = self.parse_block(for_tok)
        return make_node('for', [self.ident(name), start, stop, body], tok_loc(for_tok))

    def parse_while_stmt(self) -> Tree:
        """Parse while loop: while expr then body end"""
        while_tok = self.expect(TT.WHILE)
        cond = self.parse_expr()
        self.expect_then(while_tok)
        body = self.parse_block(while_tok)
        return make_node('while', [cond, body], tok_loc(while_tok))

    def parse_return_stmt(self) -> Tree:
        """Parse return: return [expr]"""
        ret_tok = self.expect(TT.RETURN)
        loc = tok_loc(ret_tok)

        if self.check(TT.END, TT.SEMI, TT.EOF):
            value = make_node('literal', [make_token('NULL', 'null', loc)], loc)
        else:
            value = self.parse_expr()

        return make_node('return', [value], loc)

    def parse_proc(self, named: bool) -> Tree:
        """
        Parse procedure:
        proc name(a, b) then body end   (declaration)
        proc (a, b) then body end       (literal)
        """
        proc_tok = self.expect(TT.PROC)
        loc = tok_loc(proc_tok)

        if named:
            name = self.ident(self.expect(TT.IDENT))
        else:
            name = make_token('ANON', '', loc)

        self.expect(TT.LPAR, f"Expected '(' to open parameter list, got {describe(self.current)}")
        params_start = self.current
        params: List[Token] = []

        while not self.check(TT.RPAR):
            param = self.expect(TT.IDENT, f"Expected parameter name, got {describe(self.current)}")
            if '.' in param.value:
                raise ParseError(f"Parameter name '{param.value}' must not be a path", param)
            params.append(self.ident(param))
            if not self.match(TT.COMMA):
                break

        self.expect(TT.RPAR, f"Expected ')' to close parameter list, got {describe(self.current)}")
        self.expect_then(proc_tok)
        body = self.parse_block(proc_tok)
        params_node = make_node('params', params, tok_loc(params_start))
        return make_node('proc', [name, params_node, body], loc)

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_expr(self) -> Tree:
        """Parse expression (lowest precedence)"""
        return self.parse_or_expr()

    def parse_binary_level(self, operand, *ops: TT) -> Tree:
        """Left-associative precedence climbing for one level"""
        left = operand()

        while self.check(*ops):
            op = self.advance()
            right = operand()
            op_token = make_token(op.type.name, op.value, tok_loc(op))
            left = make_node('binary', [left, op_token, right], self.loc_of(left, op))

        return left

    def parse_or_expr(self) -> Tree:
        return self.parse_binary_level(self.parse_and_expr, TT.OR)

    def parse_and_expr(self) -> Tree:
        return self.parse_binary_level(self.parse_equality_expr, TT.AND)

    def parse_equality_expr(self) -> Tree:
        return self.parse_binary_level(self.parse_compare_expr, TT.IS, TT.ISNT)

    def parse_compare_expr(self) -> Tree:
        return self.parse_binary_level(self.parse_add_expr, TT.LT, TT.GT, TT.LTE, TT.GTE)

    def parse_add_expr(self) -> Tree:
        return self.parse_binary_level(self.parse_mul_expr, TT.PLUS, TT.MINUS)

    def parse_mul_expr(self) -> Tree:
        return self.parse_binary_level(self.parse_unary_expr, TT.STAR, TT.SLASH, TT.MOD)

    def parse_unary_expr(self) -> Tree:
        """Parse unary: -expr | not expr"""
        if self.check(TT.MINUS, TT.NOT):
            op = self.advance()
            operand = self.parse_unary_expr()
            op_token = make_token(op.type.name, op.value, tok_loc(op))
            return make_node('unary', [op_token, operand], tok_loc(op))

        return self.parse_primary_expr()

    def parse_primary_expr(self) -> Tree:
        """
        Parse primary expressions:
        - Literals (numbers, strings, true, false, null)
        - Identifier paths and calls
        - Parenthesized expressions
        - proc literals
        """
        tok = self.current
        loc = tok_loc(tok)

        if self.match(TT.NUMBER):
            return make_node('literal', [make_token('NUMBER', tok.value, loc)], loc)

        if self.match(TT.STRING):
            return make_node('literal', [make_token('STRING', tok.value, loc)], loc)

        if tok.type in _KEYWORD_LITERALS:
            self.advance()
            return make_node('literal', [make_token(_KEYWORD_LITERALS[tok.type], tok.value, loc)], loc)

        if self.match(TT.LPAR):
            inner = self.parse_expr()
            self.expect(TT.RPAR, f"Expected ')' to close group opened at {tok.line}:{tok.column}, got {describe(self.current)}")
            return make_node('group', [inner], loc)

        if self.check(TT.PROC):
            return self.parse_proc(named=False)

        if self.match(TT.IDENT):
            if self.check(TT.LPAR) and self.is_adjacent(tok, self.current):
                return self.parse_call(tok)

            return make_node('identifier', [self.ident(tok)], loc)

        raise ParseError(f"Unexpected token {describe(tok)}", tok)

    def parse_call(self, name: Tok) -> Tree:
        """Parse call arguments: path(a, b, ...)"""
        lpar = self.expect(TT.LPAR)
        args = []

        while not self.check(TT.RPAR):
            args.append(self.parse_expr())
            if not self.match(TT.COMMA):
                break

        self.expect(TT.RPAR, f"Expected ')' to close call to '{name.value}', got {describe(self.current)}")
        args_node = make_node('args', args, tok_loc(lpar))
        return make_node('call', [self.ident(name), args_node], tok_loc(name))

    # ========================================================================
    # Helpers
    # ========================================================================

    def ident(self, tok: Tok) -> Token:
        return make_token('IDENT', tok.value, tok_loc(tok))

    def loc_of(self, node: Tree, fallback: Tok) -> Loc:
        meta = node.meta
        line = getattr(meta, 'line', None)
        if line is None:
            return tok_loc(fallback)
        return Loc(getattr(meta, 'filename', fallback.file), line, meta.column)

    def is_adjacent(self, left: Tok, right: Tok) -> bool:
        """True when `right` starts immediately after `left` on the same line"""
        return left.line == right.line and left.column + len(left.value) == right.column

# ============================================================================
# Convenience entry points
# ============================================================================

def parse_tokens(tokens: List[Tok]) -> Tree:
    return Parser(tokens).parse()

def parse_source(source: str, filename: str = "<input>") -> Tree:
    """
    Parse Basil source code to a `program` tree.

    Args:
        source: Source code to parse
        filename: Name reported in diagnostics
    """
    from .lexer_rd import tokenize

    tokens = tokenize(source, filename=filename)
    return parse_tokens(tokens)

def parse_expr_fragment(source: str, filename: str = "<input>") -> Tree:
    """
    Parse a standalone expression fragment.
    """
    from .lexer_rd import tokenize

    parser = Parser(tokenize(source, filename=filename))
    expr = parser.parse_expr()

    # Ensure we've consumed the entire fragment
    if not parser.check(TT.EOF):
        raise ParseError(f"Unexpected {describe(parser.current)} after expression", parser.current)
    return expr
