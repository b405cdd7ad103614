"""Tests for code frames and diagnostic rendering."""

from __future__ import annotations

import pytest

from typecake.errors import CompileError, DiagnosticRenderer, LexError, ParseError
from typecake.lexer import Lexer
from typecake.parser import parse
from typecake.source import CodeFrameRangeError, Span, code_frame


class TestCodeFrame:
    def test_context_lines(self):
        frame = code_frame("a\nb\nc\nd\ne", 3, 1)
        assert frame == (
            "   1 | a\n"
            "   2 | b\n"
            " > 3 | c\n"
            "       ^\n"
            "   4 | d"
        )

    def test_first_line(self):
        frame = code_frame("let x = 1\nnext", 1, 5, 6)
        assert frame == (
            " > 1 | let x = 1\n"
            "           ^\n"
            "   2 | next"
        )

    def test_caret_run_length(self):
        frame = code_frame("abcdef", 1, 2, 5)
        assert frame.splitlines()[1] == "        ^^^"

    def test_end_equal_to_column_gives_one_caret(self):
        frame = code_frame("abcdef", 1, 3, 3)
        assert frame.splitlines()[1].strip() == "^"

    def test_width_follows_last_shown_line(self):
        source = "\n".join(f"line{i}" for i in range(1, 11))
        lines = code_frame(source, 9, 1).splitlines()
        assert lines[0] == "    7 | line7"
        assert lines[2] == " >  9 | line9"
        assert lines[4] == "   10 | line10"

    def test_crlf_line_breaks(self):
        frame = code_frame("a\r\nb", 2, 1)
        assert frame.splitlines()[1] == " > 2 | b"

    def test_end_column_at_line_end(self):
        frame = code_frame("abc", 1, 1, 4)
        assert frame.splitlines()[1].endswith("^^^")

    @pytest.mark.parametrize("line, column, end_column", [
        (0, 1, None),
        (3, 1, None),
        (1, 3, 2),
        (1, 1, 5),
    ])
    def test_out_of_range(self, line, column, end_column):
        with pytest.raises(CodeFrameRangeError):
            code_frame("abc\ndef", line, column, end_column)

    def test_range_error_is_value_error(self):
        with pytest.raises(ValueError):
            code_frame("abc", 2, 1)


class TestCompileError:
    def test_parse_error_payload(self):
        with pytest.raises(ParseError) as exc:
            parse("fn A() = 1\nx", "a.tc")
        err = exc.value
        assert isinstance(err, CompileError)
        assert err.diagnostic.code == "E200"
        assert err.span == err.token.span
        assert err.last_token.value == 1
        assert str(err) == f"{err.message} (2:1)"

    def test_lex_error_code(self):
        with pytest.raises(LexError) as exc:
            Lexer("#").lex()
        assert exc.value.diagnostic.code == "E100"
        assert exc.value.source == "#"


class TestDiagnosticRenderer:
    def _parse_error(self, source: str) -> ParseError:
        with pytest.raises(ParseError) as exc:
            parse(source, "<test>")
        return exc.value

    def test_plain_rendering(self):
        err = self._parse_error("x = 1")
        output = DiagnosticRenderer(color=False).render(err)
        assert output == (
            f"error[E200]: {err.message}\n"
            "  --> <test>:1:1\n"
            " > 1 | x = 1\n"
            "       ^"
        )

    def test_underline_spans_token(self):
        err = self._parse_error("fn A() = 1 fn B() = 2")
        output = DiagnosticRenderer(color=False).render(err)
        assert output.splitlines()[-1] == " " * 18 + "^^"

    def test_color_rendering(self):
        err = self._parse_error("x = 1")
        output = DiagnosticRenderer(color=True).render(err)
        assert "\033[1;31m" in output
        assert "error[E200]" in output

    def test_error_deep_in_file(self):
        err = self._parse_error("fn A() = 1\nfn B() = 2\nfn C() = 3\nfn D() = )\n")
        lines = DiagnosticRenderer(color=False).render(err).splitlines()
        assert lines[1] == "  --> <test>:4:10"
        assert lines[4] == " > 4 | fn D() = )"
        assert lines[5] == " " * 16 + "^"

    def test_span_str(self):
        assert str(Span("main.tc", 3, 7, 3, 9)) == "main.tc:3:7"
