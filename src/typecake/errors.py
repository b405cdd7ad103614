"""Compile errors and Rust-style colored diagnostic rendering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from typecake.source import code_frame

if TYPE_CHECKING:
    from typecake.source import Span
    from typecake.tokens import Token


# ANSI color codes
_RED = "\033[1;31m"    # bold red
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class Diagnostic:
    """A single located error message."""

    code: str
    message: str
    span: Span


class CompileError(Exception):
    """Base class for errors raised while compiling TypeCake source.

    Every compile error carries exactly one diagnostic together with the
    complete source text, so a code frame can be rendered without
    re-reading or re-parsing the input.
    """

    def __init__(self, diagnostic: Diagnostic, source: str) -> None:
        self.diagnostic = diagnostic
        self.source = source
        span = diagnostic.span
        super().__init__(
            f"{diagnostic.message} ({span.start_line}:{span.start_col})"
        )

    @property
    def message(self) -> str:
        return self.diagnostic.message

    @property
    def span(self) -> Span:
        return self.diagnostic.span

    @property
    def filename(self) -> str:
        return self.diagnostic.span.file


class LexError(CompileError):
    """Raised by the lexer on the first malformed token."""

    def __init__(self, message: str, span: Span, source: str) -> None:
        super().__init__(Diagnostic("E100", message, span), source)


class ParseError(CompileError):
    """Raised by the parser on the first grammar mismatch.

    ``token`` is the offending token and ``last_token`` the one consumed
    just before it (``None`` if the error is on the very first token).
    """

    def __init__(
        self,
        message: str,
        token: Token,
        last_token: Token | None,
        source: str,
    ) -> None:
        self.token = token
        self.last_token = last_token
        super().__init__(Diagnostic("E200", message, token.span), source)


class DiagnosticRenderer:
    """Renders compile errors in Rust-style format with colors."""

    def __init__(self, *, color: bool = True) -> None:
        self.color = color

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def render(self, error: CompileError) -> str:
        diag = error.diagnostic
        span = diag.span
        lines = [
            f"{self._c(_RED)}error[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}",
            f"  {self._c(_BLUE)}-->{self._c(_RESET)} {span}",
        ]

        end_column = None
        if span.start_line == span.end_line and span.end_col > span.start_col:
            end_column = span.end_col
        frame = code_frame(error.source, span.start_line, span.start_col, end_column)

        underline = span.start_line - max(1, span.start_line - 2) + 1
        for index, text in enumerate(frame.split("\n")):
            if index == underline:
                stripped = text.lstrip(" ")
                text = (
                    text[: len(text) - len(stripped)]
                    + f"{self._c(_RED)}{stripped}{self._c(_RESET)}"
                )
            lines.append(text)

        return "\n".join(lines)
