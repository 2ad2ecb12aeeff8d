"""
Recursive Descent Parser for the infix calculator language

Structure:
- Lexer: Token stream from source (lexer_rd)
- Parser: Recursive descent, one method per precedence level
- AST: lark Tree/Token nodes built through the helpers in tree.py

Grammar switches come from Config: with tuples disabled every ',', '.' and
'append' is rejected; with tuples_require_parens a bare `a, b` tuple on the
right of a statement is rejected.
"""

from typing import List, Optional

from lark import Token, Tree

from .config import Config
from .token_types import TT, Tok
from . import tree as ast

# ============================================================================
# Parser
# ============================================================================

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None):
        self.message = message
        self.token = token
        self.line = token.line if token else None
        self.column = token.column if token else None
        super().__init__(
            f"{message} at line {token.line}, col {token.column}" if token else message
        )

class Parser:
    """
    Recursive descent parser for infix programs.

    Expression precedence (lowest to highest):
    1. tuple literal (a, b) -- bare only directly right of '=' / print label
    2. add (+, -)
    3. mul (*, /)
    4. tuple index (.)
    5. primary (literals, identifiers, parens, append(...))

    All binary operators are left associative.
    """

    ADD_OPS = {TT.PLUS: ast.ADD, TT.MINUS: ast.SUBTRACT}
    MUL_OPS = {TT.STAR: ast.MULTIPLY, TT.SLASH: ast.DIVIDE}

    def __init__(self, tokens: List[Tok], config: Optional[Config] = None):
        self.tokens = tokens
        self.pos = 0
        self.current = tokens[0] if tokens else Tok(TT.EOF, None, 0, 0)
        self.config = config if config is not None else Config()

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        self.pos += 1
        if self.pos < len(self.tokens):
            self.current = self.tokens[self.pos]
        else:
            self.current = Tok(TT.EOF, None, 0, 0)
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
            msg = message or f"Expected {token_type.name}, got {self.current.type.name}"
            raise ParseError(msg, self.current)
        return self.advance()

    def require_tuples(self, tok: Tok) -> None:
        if not self.config.enable_tuples:
            raise ParseError(f"Tuples are disabled, unexpected {tok.value!r}", tok)

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> Tree:
        """Parse entire program"""
        stmts = []
        while not self.check(TT.EOF):
            stmts.append(self.parse_statement())
        return ast.calculation(stmts)

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Tree:
        """
        Parse a single statement:
        - IDENT = rhs ;
        - print STRING rhs ;
        """
        if self.match(TT.PRINT):
            label = self.expect(TT.STRING, "Expected string label after print")
            value = self.parse_rhs()
            self.expect(TT.SEMI, "Expected ';' after print statement")
            return ast.output(Token(ast.STRING, label.value), value)

        name = self.expect(TT.IDENT, f"Expected statement, got {self.current.type.name}")
        self.expect(TT.ASSIGN, "Expected '=' after assignment target")
        value = self.parse_rhs()
        self.expect(TT.SEMI, "Expected ';' after assignment")
        return ast.assign(Token(ast.IDENT, name.value), value)

    def parse_rhs(self) -> Tree:
        """Statement value: an expression, or a bare tuple of two or more."""
        first = self.parse_expr()
        if not self.check(TT.COMMA):
            return first

        comma = self.current
        self.require_tuples(comma)
        if self.config.tuples_require_parens:
            raise ParseError("Tuple literal requires parentheses", comma)

        items = self.parse_tuple_tail(first, TT.SEMI)
        if len(items) < 2:
            raise ParseError("Single-element tuple requires parentheses", comma)
        return ast.expression(ast.tuple_lit(items))

    def parse_tuple_tail(self, first: Tree, closer: TT) -> List[Tree]:
        """Parse `, expr` repeats after first; a comma right before closer is allowed."""
        items = [first]
        while self.match(TT.COMMA):
            if self.check(closer):
                break
            items.append(self.parse_expr())
        return items

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_expr(self) -> Tree:
        return self.parse_add_expr()

    def parse_add_expr(self) -> Tree:
        """Parse addition/subtraction: expr + expr"""
        left = self.parse_mul_expr()

        while self.check(*self.ADD_OPS):
            op = self.advance()
            right = self.parse_mul_expr()
            left = ast.expression(ast.binop(self.ADD_OPS[op.type], left, right, op.value))

        return left

    def parse_mul_expr(self) -> Tree:
        """Parse multiplication/division: expr * expr"""
        left = self.parse_index_expr()

        while self.check(*self.MUL_OPS):
            op = self.advance()
            right = self.parse_index_expr()
            left = ast.expression(ast.binop(self.MUL_OPS[op.type], left, right, op.value))

        return left

    def parse_index_expr(self) -> Tree:
        """Parse tuple indexing: expr . expr"""
        left = self.parse_primary_expr()

        while self.check(TT.DOT):
            self.require_tuples(self.current)
            op = self.advance()
            right = self.parse_primary_expr()
            left = ast.expression(ast.binop(ast.TUPLE_IDX, left, right, op.value))

        return left

    def parse_primary_expr(self) -> Tree:
        """
        Parse primary expressions:
        - Literals (int, float, string)
        - Identifiers (variable references)
        - Parenthesized expressions and tuple literals
        - append(...)
        """
        if self.check(TT.INT):
            return ast.expression(ast.int_lit(self.advance().value))
        if self.check(TT.FLOAT):
            return ast.expression(ast.float_lit(self.advance().value))
        if self.check(TT.STRING):
            return ast.expression(ast.string_lit(self.advance().value))
        if self.check(TT.IDENT):
            return ast.expression(ast.ref(self.advance().value))

        if self.check(TT.APPEND):
            self.require_tuples(self.current)
            self.advance()
            self.expect(TT.LPAR, "Expected '(' after append")
            items = self.parse_append_args()
            self.expect(TT.RPAR, "Expected ')' to close append")
            return ast.expression(ast.append_lit(items))

        if self.check(TT.LPAR):
            return self.parse_paren_expr()

        raise ParseError(f"Expected expression, got {self.current.type.name}", self.current)

    def parse_paren_expr(self) -> Tree:
        """
        '(' ')' and '(' ',' ')'   -> empty tuple
        '(' expr ')'              -> grouping, no node of its own
        '(' expr ',' ... ')'      -> tuple, trailing comma optional
        """
        self.expect(TT.LPAR)

        if self.check(TT.RPAR, TT.COMMA):
            self.require_tuples(self.current)
            self.match(TT.COMMA)
            self.expect(TT.RPAR, "Expected ')' to close empty tuple")
            return ast.expression(ast.tuple_lit([]))

        first = self.parse_expr()
        if self.match(TT.RPAR):
            return first

        if not self.check(TT.COMMA):
            raise ParseError(f"Expected ')', got {self.current.type.name}", self.current)

        self.require_tuples(self.current)
        items = self.parse_tuple_tail(first, TT.RPAR)
        self.expect(TT.RPAR, "Expected ')' to close tuple")
        return ast.expression(ast.tuple_lit(items))

    def parse_append_args(self) -> List[Tree]:
        if self.check(TT.RPAR):
            return []
        if self.match(TT.COMMA):
            return []
        return self.parse_tuple_tail(self.parse_expr(), TT.RPAR)

# ============================================================================
# Entry points
# ============================================================================

def parse_source(source: str, config: Optional[Config] = None) -> Tree:
    """
    Parse infix source code to a calculation tree.

    Raises LexError or ParseError; symbol resolution is left to symtab.
    """
    from .lexer_rd import tokenize

    tokens = tokenize(source)
    parser = Parser(tokens, config=config)
    return parser.parse()
