"""
Lexer for the infix calculator language

Tokenizes source text into a flat list of tokens for the recursive descent
parser.

Features:
- Single-pass tokenization
- Position tracking (line, column of each token's first character)
- Whitespace (including newlines) and // line comments are skipped
"""

from typing import List

from .token_types import TT, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================

class LexError(Exception):
    """Lexical analysis error with position info"""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"{message} at line {line}, col {column}")


class Lexer:
    """Infix lexer. Statements are ';'-terminated, so newlines carry no meaning."""

    KEYWORDS = {
        'print': TT.PRINT,
        'append': TT.APPEND,
    }

    OPERATORS = [
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('*', TT.STAR),
        ('/', TT.SLASH),
        ('=', TT.ASSIGN),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('.', TT.DOT),
        (',', TT.COMMA),
        (';', TT.SEMI),
    ]

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []

        # Start of the token being scanned
        self.tok_line = 1
        self.tok_column = 1

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
        if self.skip_whitespace():
            return

        # Line comments; a lone '/' is division
        if self.peek() == '/' and self.peek(1) == '/':
            self.skip_comment()
            return

        self.mark()

        if self.peek() == '"':
            self.scan_string()
            return

        if self.peek().isdigit():
            self.scan_number()
            return

        if self.peek().isalpha() or self.peek() == '_':
            self.scan_identifier()
            return

        self.scan_operator()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_string(self):
        """Scan string literal: "..." (no escapes; text keeps its quotes)"""
        value = self.advance()

        while self.pos < len(self.source) and self.peek() != '"':
            value += self.advance()

        if self.pos >= len(self.source):
            raise LexError("Unterminated string", self.tok_line, self.tok_column)

        value += self.advance()
        self.emit(TT.STRING, value)

    def scan_number(self):
        """Scan INT or FLOAT literal"""
        value = ''

        while self.peek().isdigit():
            value += self.advance()

        # "1.5" is a float, "1 . 5" and "(1).(5)" are tuple indexing
        if not (self.peek() == '.' and self.peek(1).isdigit()):
            self.emit(TT.INT, value)
            return

        value += self.advance()
        while self.peek().isdigit():
            value += self.advance()

        if self.peek() == 'e':
            exp = 'e'
            offset = 1
            if self.peek(offset) in ('+', '-'):
                exp += self.peek(offset)
                offset += 1
            if not self.peek(offset).isdigit():
                raise LexError("Malformed exponent in float literal", self.tok_line, self.tok_column)
            value += self.advance(offset)
            while self.peek().isdigit():
                value += self.advance()

        self.emit(TT.FLOAT, value)

    def scan_identifier(self):
        """Scan identifier or keyword"""
        value = ''

        while self.peek().isalnum() or self.peek() == '_':
            value += self.advance()

        token_type = self.KEYWORDS.get(value, TT.IDENT)
        self.emit(token_type, value)

    def scan_operator(self):
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.emit(op_type, op_str)
                return

        ch = self.peek()
        raise LexError(f"Unexpected character '{ch}'", self.line, self.column)

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
        """Skip whitespace and newlines, return True if any skipped"""
        skipped = False
        while self.pos < len(self.source) and self.peek() in (' ', '\t', '\n', '\r'):
            if self.peek() == '\r' and self.peek(1) == '\n':
                self.pos += 1
            elif self.peek() == '\r':
                # lone CR still ends a line
                self.pos += 1
                self.line += 1
                self.column = 1
                skipped = True
                continue
            self.advance()
            skipped = True
        return skipped

    def skip_comment(self):
        """Skip comment until end of line"""
        while self.peek() not in ('\n', '\r', '\0'):
            self.advance()

    def mark(self):
        self.tok_line = self.line
        self.tok_column = self.column

    def emit(self, token_type: TT, value):
        """Emit a token positioned at the last mark()"""
        tok = Tok(
            type=token_type,
            value=value,
            line=self.tok_line,
            column=self.tok_column
        )
        self.tokens.append(tok)


def tokenize(source: str) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source)
    return lexer.tokenize()
