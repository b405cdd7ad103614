"""Lexer for the TypeCake language.

Produces the complete token stream for a source text, including template
literal chunks and ``${ ... }`` holes. Lexing stops at the first malformed
token with a :class:`LexError`.
"""

from __future__ import annotations

from typecake.errors import LexError
from typecake.source import Span
from typecake.tokens import KEYWORDS, Token, TokenKind

_SIMPLE_ESCAPES = {
    'n': '\n', 't': '\t', 'r': '\r', 'b': '\b',
    'f': '\f', 'v': '\v', '0': '\0',
}

_DIGITS = '0123456789'

_RADIX_DIGITS = {
    'x': '0123456789abcdefABCDEF_',
    'o': '01234567_',
    'b': '01_',
}


class Lexer:
    """Tokenizes TypeCake source code."""

    def __init__(self, source: str, filename: str = "<stdin>") -> None:
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.col = 1
        self.tokens: list[Token] = []
        # One brace depth per open `${` hole, innermost last.
        self._template_braces: list[int] = []

    def lex(self) -> list[Token]:
        """Tokenize the entire source and return the token list."""
        while True:
            self._skip_trivia()
            if self.pos >= len(self.source):
                break
            ch = self.source[self.pos]
            if ch == '`':
                self._lex_template_start()
            elif ch == '}' and self._template_braces and self._template_braces[-1] == 0:
                self._template_braces.pop()
                self._lex_punct(TokenKind.RBRACE, 1)
                self._lex_template_chunk()
            elif ch in ('"', "'"):
                self._lex_string()
            elif ch in _DIGITS or (ch == '.' and self._peek(1) in _DIGITS):
                self._lex_number()
            elif ch.isalpha() or ch in ('_', '$'):
                self._lex_identifier()
            else:
                self._lex_operator_or_punct()

        if self._template_braces:
            self._error("Unterminated template literal.", self.line, self.col)

        self._emit(TokenKind.EOF, None, self.pos, self.line, self.col)
        return self.tokens

    # ── Helpers ───────────────────────────────────────────────────

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _emit(
        self, kind: TokenKind, value: object,
        start: int, start_line: int, start_col: int,
    ) -> Token:
        span = Span(self.filename, start_line, start_col, self.line, self.col)
        tok = Token(kind, value, start, self.pos, span)
        self.tokens.append(tok)
        return tok

    def _error(self, message: str, line: int, col: int) -> None:
        span = Span(self.filename, line, col, line, col + 1)
        raise LexError(message, span, self.source)

    # ── Whitespace and comments ──────────────────────────────────

    def _skip_trivia(self) -> None:
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch.isspace():
                self._advance()
            elif ch == '/' and self._peek(1) == '/':
                while self.pos < len(self.source) and self.source[self.pos] != '\n':
                    self._advance()
            elif ch == '/' and self._peek(1) == '*':
                start_line, start_col = self.line, self.col
                self._advance()
                self._advance()
                while not (self._peek() == '*' and self._peek(1) == '/'):
                    if self.pos >= len(self.source):
                        self._error("Unterminated comment.", start_line, start_col)
                    self._advance()
                self._advance()
                self._advance()
            else:
                return

    # ── Strings ──────────────────────────────────────────────────

    def _lex_string(self) -> None:
        start, start_line, start_col = self.pos, self.line, self.col
        quote = self._advance()
        text: list[str] = []
        while True:
            if self.pos >= len(self.source) or self.source[self.pos] == '\n':
                self._error("Unterminated string constant.", start_line, start_col)
            ch = self.source[self.pos]
            if ch == quote:
                self._advance()
                break
            if ch == '\\':
                text.append(self._lex_escape_sequence())
            else:
                text.append(self._advance())
        self._emit(TokenKind.STRING, ''.join(text), start, start_line, start_col)

    def _lex_escape_sequence(self) -> str:
        line, col = self.line, self.col
        self._advance()  # skip backslash
        if self.pos >= len(self.source):
            self._error("Unexpected end of escape sequence.", line, col)
        ch = self._advance()
        if ch in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[ch]
        if ch == '\r':
            if self._peek() == '\n':
                self._advance()
            return ''
        if ch == '\n':
            return ''
        if ch == 'x':
            return chr(self._read_hex(2, line, col))
        if ch == 'u':
            if self._peek() == '{':
                self._advance()
                digits: list[str] = []
                while self._peek() != '}':
                    if self.pos >= len(self.source):
                        self._error("Bad character escape sequence.", line, col)
                    digits.append(self._advance())
                self._advance()
                try:
                    code = int(''.join(digits), 16)
                except ValueError:
                    code = -1
                if not 0 <= code <= 0x10FFFF:
                    self._error("Code point out of bounds.", line, col)
                return chr(code)
            return chr(self._read_hex(4, line, col))
        return ch

    def _read_hex(self, count: int, line: int, col: int) -> int:
        digits = self.source[self.pos:self.pos + count]
        if len(digits) != count or any(d not in '0123456789abcdefABCDEF' for d in digits):
            self._error("Bad character escape sequence.", line, col)
        for _ in range(count):
            self._advance()
        return int(digits, 16)

    # ── Template literals ────────────────────────────────────────

    def _lex_template_start(self) -> None:
        self._lex_punct(TokenKind.BACKQUOTE, 1)
        self._lex_template_chunk()

    def _lex_template_chunk(self) -> None:
        """Lex raw template text up to the closing backquote or the next hole."""
        start, start_line, start_col = self.pos, self.line, self.col
        text: list[str] = []
        while True:
            if self.pos >= len(self.source):
                self._error("Unterminated template.", start_line, start_col)
            ch = self.source[self.pos]
            if ch == '`':
                self._emit(TokenKind.TEMPLATE, ''.join(text), start, start_line, start_col)
                self._lex_punct(TokenKind.BACKQUOTE, 1)
                return
            if ch == '$' and self._peek(1) == '{':
                self._emit(TokenKind.TEMPLATE, ''.join(text), start, start_line, start_col)
                self._lex_punct(TokenKind.DOLLAR_BRACE, 2)
                self._template_braces.append(0)
                return
            if ch == '\\':
                text.append(self._lex_escape_sequence())
            else:
                text.append(self._advance())

    # ── Numbers ──────────────────────────────────────────────────

    def _lex_number(self) -> None:
        start, start_line, start_col = self.pos, self.line, self.col
        is_float = False

        prefix = self._peek(1).lower()
        if self._peek() == '0' and prefix in _RADIX_DIGITS:
            self._advance()
            self._advance()
            allowed = _RADIX_DIGITS[prefix]
            if self._peek() not in allowed or self._peek() == '_':
                self._error("Expected number in radix.", start_line, start_col)
            while self.pos < len(self.source) and self.source[self.pos] in allowed:
                self._advance()
        else:
            self._lex_digits()
            if self._peek() == '.' and self._peek(1) in _DIGITS:
                is_float = True
                self._advance()
                self._lex_digits()
            if self._peek() in ('e', 'E') and (
                self._peek(1) in _DIGITS
                or (self._peek(1) in ('+', '-') and self._peek(2) in _DIGITS)
            ):
                is_float = True
                self._advance()
                if self._peek() in ('+', '-'):
                    self._advance()
                self._lex_digits()

        text = self.source[start:self.pos].replace('_', '')
        if not is_float and self._peek() == 'n':
            self._advance()

        nxt = self._peek()
        if nxt.isalnum() or nxt in ('_', '$'):
            self._error("Identifier directly after number.", self.line, self.col)

        value: int | float
        if is_float:
            value = float(text)
        elif text[:2].lower() in ('0x', '0o', '0b'):
            value = int(text, 0)
        else:
            value = int(text)
        self._emit(TokenKind.NUMBER, value, start, start_line, start_col)

    def _lex_digits(self) -> None:
        while self.pos < len(self.source) and (
            self.source[self.pos] in _DIGITS or self.source[self.pos] == '_'
        ):
            self._advance()

    # ── Identifiers and keywords ─────────────────────────────────

    def _lex_identifier(self) -> None:
        start, start_line, start_col = self.pos, self.line, self.col
        while self.pos < len(self.source) and (
            self.source[self.pos].isalnum() or self.source[self.pos] in ('_', '$')
        ):
            self._advance()
        word = self.source[start:self.pos]

        kind = KEYWORDS.get(word, TokenKind.IDENTIFIER)
        value: object = word
        if kind == TokenKind.TRUE:
            value = True
        elif kind == TokenKind.FALSE:
            value = False
        elif kind == TokenKind.NULL:
            value = None
        self._emit(kind, value, start, start_line, start_col)

    # ── Operators and punctuation ────────────────────────────────

    def _lex_punct(self, kind: TokenKind, length: int) -> None:
        start, start_line, start_col = self.pos, self.line, self.col
        for _ in range(length):
            self._advance()
        self._emit(kind, self.source[start:self.pos], start, start_line, start_col)

    def _lex_operator_or_punct(self) -> None:
        ch = self.source[self.pos]

        # Multi-character operators
        if self.source.startswith('...', self.pos):
            self._lex_punct(TokenKind.ELLIPSIS, 3)
            return
        if self.source.startswith('&&', self.pos):
            self._lex_punct(TokenKind.AND_AND, 2)
            return
        if self.source.startswith('==', self.pos):
            self._lex_punct(TokenKind.EQ_EQ, 2)
            return

        match ch:
            case '{':
                if self._template_braces:
                    self._template_braces[-1] += 1
                self._lex_punct(TokenKind.LBRACE, 1)
            case '}':
                if self._template_braces:
                    self._template_braces[-1] -= 1
                self._lex_punct(TokenKind.RBRACE, 1)
            case '[':
                self._lex_punct(TokenKind.LBRACKET, 1)
            case ']':
                self._lex_punct(TokenKind.RBRACKET, 1)
            case '(':
                self._lex_punct(TokenKind.LPAREN, 1)
            case ')':
                self._lex_punct(TokenKind.RPAREN, 1)
            case ',':
                self._lex_punct(TokenKind.COMMA, 1)
            case ':':
                self._lex_punct(TokenKind.COLON, 1)
            case ';':
                self._lex_punct(TokenKind.SEMICOLON, 1)
            case '.':
                self._lex_punct(TokenKind.DOT, 1)
            case '?':
                self._lex_punct(TokenKind.QUESTION, 1)
            case '&':
                self._lex_punct(TokenKind.AMP, 1)
            case '|':
                self._lex_punct(TokenKind.PIPE, 1)
            case '>':
                self._lex_punct(TokenKind.GREATER, 1)
            case '-':
                self._lex_punct(TokenKind.MINUS, 1)
            case '=':
                self._lex_punct(TokenKind.ASSIGN, 1)
            case '!':
                self._lex_punct(TokenKind.BANG, 1)
            case '*':
                self._lex_punct(TokenKind.STAR, 1)
            case _:
                self._error(f"Unexpected character {ch!r}.", self.line, self.col)
