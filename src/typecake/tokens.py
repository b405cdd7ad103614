"""Token kinds and token representation for the TypeCake lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typecake.source import Span


class TokenKind(Enum):
    # Keywords
    SWITCH = auto()
    IF = auto()
    ELSE = auto()
    CONST = auto()
    IN = auto()
    FOR = auto()
    IMPORT = auto()

    # Literals
    NUMBER = auto()
    STRING = auto()
    TEMPLATE = auto()
    TRUE = auto()
    FALSE = auto()
    NULL = auto()

    # Operators
    AMP = auto()
    AND_AND = auto()
    PIPE = auto()
    GREATER = auto()
    MINUS = auto()
    EQ_EQ = auto()
    ASSIGN = auto()
    BANG = auto()
    STAR = auto()

    # Punctuation
    LBRACE = auto()
    RBRACE = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LPAREN = auto()
    RPAREN = auto()
    COMMA = auto()
    COLON = auto()
    SEMICOLON = auto()
    DOT = auto()
    ELLIPSIS = auto()
    QUESTION = auto()
    BACKQUOTE = auto()
    DOLLAR_BRACE = auto()

    # Identifiers
    IDENTIFIER = auto()

    # Special
    EOF = auto()


@dataclass(frozen=True)
class Token:
    """A lexed token.

    ``value`` is the decoded value (string contents without quotes, numbers
    as ``int``/``float``); ``start``/``end`` are offsets into the source so
    ``source[start:end]`` is always the exact spelling.
    """

    kind: TokenKind
    value: object
    start: int
    end: int
    span: Span


# `fn`, `from` and `as` are contextual and lex as identifiers.
KEYWORDS: dict[str, TokenKind] = {
    "switch": TokenKind.SWITCH,
    "if": TokenKind.IF,
    "else": TokenKind.ELSE,
    "const": TokenKind.CONST,
    "in": TokenKind.IN,
    "for": TokenKind.FOR,
    "import": TokenKind.IMPORT,
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
    "null": TokenKind.NULL,
}

LITERALS: frozenset[TokenKind] = frozenset({
    TokenKind.NUMBER,
    TokenKind.STRING,
    TokenKind.TRUE,
    TokenKind.FALSE,
    TokenKind.NULL,
})

_DESCRIPTIONS: dict[TokenKind, str] = {
    TokenKind.AMP: "'&'",
    TokenKind.AND_AND: "'&&'",
    TokenKind.PIPE: "'|'",
    TokenKind.GREATER: "'>'",
    TokenKind.MINUS: "'-'",
    TokenKind.EQ_EQ: "'=='",
    TokenKind.ASSIGN: "'='",
    TokenKind.BANG: "'!'",
    TokenKind.STAR: "'*'",
    TokenKind.LBRACE: "'{'",
    TokenKind.RBRACE: "'}'",
    TokenKind.LBRACKET: "'['",
    TokenKind.RBRACKET: "']'",
    TokenKind.LPAREN: "'('",
    TokenKind.RPAREN: "')'",
    TokenKind.COMMA: "','",
    TokenKind.COLON: "':'",
    TokenKind.SEMICOLON: "';'",
    TokenKind.DOT: "'.'",
    TokenKind.ELLIPSIS: "'...'",
    TokenKind.QUESTION: "'?'",
    TokenKind.BACKQUOTE: "'`'",
    TokenKind.DOLLAR_BRACE: "'${'",
    TokenKind.EOF: "end of input",
}


def describe(kind: TokenKind, text: str | None = None) -> str:
    """Human-readable name for a token kind, used in error messages."""
    if text is not None:
        return repr(text)
    if kind in _DESCRIPTIONS:
        return _DESCRIPTIONS[kind]
    return kind.name.lower()
