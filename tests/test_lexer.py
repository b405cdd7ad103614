"""Tests for the TypeCake lexer."""

from __future__ import annotations

import pytest

from typecake.errors import LexError
from typecake.lexer import Lexer
from typecake.tokens import TokenKind


def lex(source: str) -> list[tuple[TokenKind, object]]:
    """Helper: lex source and return (kind, value) pairs, excluding EOF."""
    tokens = Lexer(source).lex()
    return [(t.kind, t.value) for t in tokens if t.kind != TokenKind.EOF]


def kinds(source: str) -> list[TokenKind]:
    """Helper: lex source and return just the token kinds, excluding EOF."""
    tokens = Lexer(source).lex()
    return [t.kind for t in tokens if t.kind != TokenKind.EOF]


class TestLexerBasic:
    def test_empty_source(self):
        tokens = Lexer("").lex()
        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.EOF

    def test_function_declaration(self):
        assert lex("fn Id(x) = x;") == [
            (TokenKind.IDENTIFIER, "fn"),
            (TokenKind.IDENTIFIER, "Id"),
            (TokenKind.LPAREN, "("),
            (TokenKind.IDENTIFIER, "x"),
            (TokenKind.RPAREN, ")"),
            (TokenKind.ASSIGN, "="),
            (TokenKind.IDENTIFIER, "x"),
            (TokenKind.SEMICOLON, ";"),
        ]

    def test_contextual_words_are_identifiers(self):
        for word in ["fn", "from", "as"]:
            assert kinds(word) == [TokenKind.IDENTIFIER]

    def test_keywords(self):
        expected = {
            "switch": TokenKind.SWITCH,
            "if": TokenKind.IF,
            "else": TokenKind.ELSE,
            "const": TokenKind.CONST,
            "in": TokenKind.IN,
            "for": TokenKind.FOR,
            "import": TokenKind.IMPORT,
        }
        for word, kind in expected.items():
            assert lex(word) == [(kind, word)]

    def test_keyword_prefix_is_identifier(self):
        assert kinds("iffy inner") == [TokenKind.IDENTIFIER, TokenKind.IDENTIFIER]

    def test_identifier_with_dollar(self):
        assert lex("$_a1") == [(TokenKind.IDENTIFIER, "$_a1")]

    def test_constants(self):
        assert lex("true false null") == [
            (TokenKind.TRUE, True),
            (TokenKind.FALSE, False),
            (TokenKind.NULL, None),
        ]


class TestOperators:
    def test_pipeline_is_two_tokens(self):
        assert kinds("a |> F") == [
            TokenKind.IDENTIFIER, TokenKind.PIPE, TokenKind.GREATER, TokenKind.IDENTIFIER,
        ]

    def test_arrow_is_two_tokens(self):
        assert kinds("->") == [TokenKind.MINUS, TokenKind.GREATER]

    def test_multi_char_operators(self):
        assert kinds("... && ==") == [TokenKind.ELLIPSIS, TokenKind.AND_AND, TokenKind.EQ_EQ]

    def test_single_char_operators(self):
        assert kinds("& | = ! * ? . : ;") == [
            TokenKind.AMP, TokenKind.PIPE, TokenKind.ASSIGN, TokenKind.BANG,
            TokenKind.STAR, TokenKind.QUESTION, TokenKind.DOT, TokenKind.COLON,
            TokenKind.SEMICOLON,
        ]

    def test_brackets(self):
        assert kinds("{}[]()") == [
            TokenKind.LBRACE, TokenKind.RBRACE, TokenKind.LBRACKET,
            TokenKind.RBRACKET, TokenKind.LPAREN, TokenKind.RPAREN,
        ]


class TestNumbers:
    @pytest.mark.parametrize("source, value", [
        ("42", 42),
        ("1_000", 1000),
        ("0x1F", 31),
        ("0o17", 15),
        ("0b101", 5),
        ("1.5", 1.5),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("2.5E-1", 0.25),
        ("10n", 10),
    ])
    def test_number_values(self, source, value):
        assert lex(source) == [(TokenKind.NUMBER, value)]

    def test_raw_text_is_recoverable(self):
        source = "0x1F"
        tok = Lexer(source).lex()[0]
        assert source[tok.start:tok.end] == "0x1F"

    def test_identifier_after_number(self):
        with pytest.raises(LexError, match="Identifier directly after number"):
            Lexer("12abc").lex()

    def test_empty_radix(self):
        with pytest.raises(LexError, match="Expected number in radix"):
            Lexer("0x").lex()

    def test_non_ascii_digit_is_rejected(self):
        with pytest.raises(LexError, match="Unexpected character"):
            Lexer("\u00b2").lex()

    def test_non_ascii_digit_after_number(self):
        with pytest.raises(LexError, match="Identifier directly after number"):
            Lexer("1\u00b2").lex()


class TestStrings:
    def test_double_quoted(self):
        assert lex('"hello"') == [(TokenKind.STRING, "hello")]

    def test_single_quoted(self):
        assert lex("'hi'") == [(TokenKind.STRING, "hi")]

    def test_escapes(self):
        assert lex(r'"a\nb\t\"c\""') == [(TokenKind.STRING, 'a\nb\t"c"')]

    def test_unicode_escapes(self):
        assert lex(r'"\x41B\u{1F600}"') == [(TokenKind.STRING, "AB\U0001F600")]

    def test_unterminated(self):
        with pytest.raises(LexError, match="Unterminated string constant"):
            Lexer('"abc').lex()

    def test_newline_in_string(self):
        with pytest.raises(LexError, match="Unterminated string constant"):
            Lexer('"ab\nc"').lex()

    def test_bad_escape(self):
        with pytest.raises(LexError, match="Bad character escape sequence"):
            Lexer(r'"\xZZ"').lex()


class TestTemplates:
    def test_plain_template(self):
        assert lex("`abc`") == [
            (TokenKind.BACKQUOTE, "`"),
            (TokenKind.TEMPLATE, "abc"),
            (TokenKind.BACKQUOTE, "`"),
        ]

    def test_template_with_hole(self):
        assert lex("`a${b}c`") == [
            (TokenKind.BACKQUOTE, "`"),
            (TokenKind.TEMPLATE, "a"),
            (TokenKind.DOLLAR_BRACE, "${"),
            (TokenKind.IDENTIFIER, "b"),
            (TokenKind.RBRACE, "}"),
            (TokenKind.TEMPLATE, "c"),
            (TokenKind.BACKQUOTE, "`"),
        ]

    def test_object_inside_hole(self):
        assert kinds("`${ {a: 1} }`") == [
            TokenKind.BACKQUOTE,
            TokenKind.TEMPLATE,
            TokenKind.DOLLAR_BRACE,
            TokenKind.LBRACE,
            TokenKind.IDENTIFIER,
            TokenKind.COLON,
            TokenKind.NUMBER,
            TokenKind.RBRACE,
            TokenKind.RBRACE,
            TokenKind.TEMPLATE,
            TokenKind.BACKQUOTE,
        ]

    def test_nested_template(self):
        result = lex("`x${`y`}`")
        assert [v for _, v in result] == ["`", "x", "${", "`", "y", "`", "}", "", "`"]

    def test_unterminated_template(self):
        with pytest.raises(LexError, match="Unterminated template"):
            Lexer("`abc").lex()


class TestTrivia:
    def test_line_comment(self):
        assert kinds("a // comment\nb") == [TokenKind.IDENTIFIER, TokenKind.IDENTIFIER]

    def test_block_comment(self):
        assert kinds("a /* x\n y */ b") == [TokenKind.IDENTIFIER, TokenKind.IDENTIFIER]

    def test_unterminated_block_comment(self):
        with pytest.raises(LexError, match="Unterminated comment"):
            Lexer("/* x").lex()

    def test_unexpected_character(self):
        with pytest.raises(LexError, match="Unexpected character") as exc:
            Lexer("a\n  #").lex()
        assert exc.value.span.start_line == 2
        assert exc.value.span.start_col == 3


class TestPositions:
    def test_offsets_and_span(self):
        tokens = Lexer("a\n  bc").lex()
        bc = tokens[1]
        assert (bc.start, bc.end) == (4, 6)
        assert (bc.span.start_line, bc.span.start_col) == (2, 3)
        assert (bc.span.end_line, bc.span.end_col) == (2, 5)

    def test_eof_position(self):
        tokens = Lexer("ab").lex()
        eof = tokens[-1]
        assert eof.kind == TokenKind.EOF
        assert eof.start == eof.end == 2

    def test_filename_in_span(self):
        tokens = Lexer("x", "main.tc").lex()
        assert tokens[0].span.file == "main.tc"
