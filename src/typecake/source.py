"""Source span tracking and code-frame rendering for diagnostics."""

from __future__ import annotations

import re
from dataclasses import dataclass

_LINE_BREAK = re.compile(r"\r?\n")


@dataclass(frozen=True)
class Span:
    """A range within a source file.

    Lines and columns are 1-indexed. ``end_col`` is exclusive: it is the
    column just past the last character covered, so a one-character
    token at column 5 has ``start_col=5, end_col=6``.
    """

    file: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    def __str__(self) -> str:
        return f"{self.file}:{self.start_line}:{self.start_col}"


class CodeFrameRangeError(ValueError):
    """Raised when a code frame is requested for a location outside the source."""


def code_frame(
    source: str, line: int, column: int, end_column: int | None = None,
) -> str:
    """Render an annotated excerpt of *source* around *line*.

    Shows up to two lines before and one line after the error line. Each
    line is prefixed with a focus marker (``" >"`` on the error line) and a
    right-aligned line number. An underline of carets is inserted directly
    below the error line, starting at *column* and spanning
    ``end_column - column`` characters (at least one).
    """
    lines = _LINE_BREAK.split(source)
    if not 1 <= line <= len(lines):
        raise CodeFrameRangeError(
            f"line {line} is outside the source (1..{len(lines)})"
        )

    error_line = lines[line - 1]
    if end_column is not None and (
        end_column < column or end_column > len(error_line) + 1
    ):
        raise CodeFrameRangeError(
            "'end_column' must not be less than 'column' "
            "or past the end of the line."
        )

    top = max(1, line - 2)
    bottom = min(len(lines), line + 1)
    width = len(str(bottom)) + 1

    frame: list[str] = []
    for number in range(top, bottom + 1):
        focus = " >" if number == line else "  "
        frame.append(f"{focus}{number:>{width}} | {lines[number - 1]}")
        if number == line:
            carets = 1 if end_column is None else max(1, end_column - column)
            padding = " " * (max(1, column) + width + 4)
            frame.append(padding + "^" * carets)

    return "\n".join(frame)
