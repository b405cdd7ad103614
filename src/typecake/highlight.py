"""Syntax highlighting: a Pygments lexer for TypeCake and output coloring."""

from __future__ import annotations

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexer import RegexLexer, include, words
from pygments.lexers import TypeScriptLexer
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
)


class TypeCakeLexer(RegexLexer):
    """Pygments lexer for TypeCake sources."""

    name = "TypeCake"
    aliases = ["typecake", "tc"]
    filenames = ["*.tc"]
    mimetypes = ["text/x-typecake"]

    tokens = {
        "root": [
            (r"\s+", Text),
            (r"//.*$", Comment.Single),
            (r"/\*[\s\S]*?\*/", Comment.Multiline),
            (r"`", String.Backtick, "template"),
            (r'"', String.Double, "dqs"),
            (r"'", String.Single, "sqs"),
            # Numbers
            (r"0[xX][0-9a-fA-F][0-9a-fA-F_]*n?", Number.Hex),
            (r"0[bB][01][01_]*n?", Number.Bin),
            (r"0[oO][0-7][0-7_]*n?", Number.Oct),
            (r"([0-9][0-9_]*)?\.[0-9][0-9_]*([eE][+-]?[0-9]+)?", Number.Float),
            (r"[0-9][0-9_]*[eE][+-]?[0-9]+", Number.Float),
            (r"[0-9][0-9_]*n?", Number.Integer),
            # Declarations
            (r"\b(fn)(?=\s)", Keyword.Declaration),
            (
                words(("from", "import", "as"), prefix=r"\b", suffix=r"\b"),
                Keyword.Namespace,
            ),
            (
                words(
                    ("switch", "if", "else", "const", "in", "for"),
                    prefix=r"\b",
                    suffix=r"\b",
                ),
                Keyword,
            ),
            (r"\b(true|false|null)\b", Keyword.Constant),
            # Infer captures (&name) in patterns
            (r"&(?=[A-Za-z_$])", Keyword.Pseudo),
            # Macro calls (name!)
            (r"[A-Za-z_$][\w$]*(?=!)", Name.Function.Magic),
            (r"!", Operator),
            # Operators (multi-char before single-char)
            (r"\|>|->|&&|==|\.\.\.", Operator),
            (r"[&|=*]", Operator),
            (r"\.", Operator),
            # Type names (PascalCase)
            (r"[A-Z][\w$]*", Name.Class),
            (r"[A-Za-z_$][\w$]*", Name),
            (r"[(),;\[\]{}:?]", Punctuation),
        ],
        "dqs": [
            (r"\\.", String.Escape),
            (r'[^"\\\n]+', String.Double),
            (r'"', String.Double, "#pop"),
        ],
        "sqs": [
            (r"\\.", String.Escape),
            (r"[^'\\\n]+", String.Single),
            (r"'", String.Single, "#pop"),
        ],
        "template": [
            (r"\\.", String.Escape),
            (r"\$\{", String.Interpol, "interp"),
            (r"[^`\\$]+", String.Backtick),
            (r"\$", String.Backtick),
            (r"`", String.Backtick, "#pop"),
        ],
        "interp": [
            (r"\}", String.Interpol, "#pop"),
            (r"\{", Punctuation, "braces"),
            include("root"),
        ],
        "braces": [
            (r"\}", Punctuation, "#pop"),
            (r"\{", Punctuation, "#push"),
            include("root"),
        ],
    }


def highlight_output(text: str) -> str:
    """Color emitted TypeScript for display in a terminal."""
    return highlight(text, TypeScriptLexer(), TerminalFormatter())
