"""Shared test helpers for the TypeCake compiler test suite."""

from __future__ import annotations

from typecake.ast_nodes import Expression, FunctionDeclaration, Program
from typecake.emitter import Emitter
from typecake.lexer import Lexer
from typecake.parser import Parser


def parse(source: str) -> Program:
    """Lex and parse source, return the Program."""
    tokens = Lexer(source, "test.tc").lex()
    return Parser(tokens, source, "test.tc").parse()


def parse_body(source: str) -> Expression:
    """Parse ``fn T() = <source>`` and return the function body."""
    program = parse(f"fn T() = {source}")
    decl = program.statements[0]
    assert isinstance(decl, FunctionDeclaration)
    return decl.body


def emit(source: str) -> str:
    """Compile a whole program to TypeScript."""
    return Emitter().emit(parse(source))


def emit_body(source: str) -> str:
    """Compile ``fn T() = <source>`` and return only the emitted body text."""
    return Emitter().emit_node(parse_body(source))
