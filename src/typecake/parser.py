"""Parser for the TypeCake language.

Transforms a token stream into an AST by recursive descent with one token
of lookahead. Expressions bind, from loosest to tightest: union (``|``),
intersection (``&``), postfix subscripts, atoms. The first grammar
mismatch raises :class:`ParseError`; there is no recovery.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import NoReturn

from typecake.ast_nodes import (
    ArrayExpression,
    CallExpression,
    ConstInBinding,
    ConstInExpression,
    Expression,
    ForExpression,
    FunctionDeclaration,
    Identifier,
    IfExpression,
    ImportDeclaration,
    ImportDefaultSpecifier,
    ImportNamedSpecifier,
    ImportNamespaceSpecifier,
    ImportSpecifier,
    IndexedAccessExpression,
    IndexedPropertyKey,
    InferReference,
    IntersectionExpression,
    Literal,
    MacroCallExpression,
    NamespaceAccessExpression,
    Node,
    ObjectExpression,
    ObjectExpressionProperty,
    Parameter,
    ParenthesizedExpression,
    PipelineExpression,
    Program,
    Relation,
    RestElement,
    Statement,
    SubtypeRelation,
    SwitchExpression,
    SwitchExpressionArm,
    TemplateElement,
    TemplateLiteralExpression,
    TupleExpression,
    UnionExpression,
)
from typecake.errors import ParseError
from typecake.lexer import Lexer
from typecake.source import Span
from typecake.tokens import LITERALS, Token, TokenKind, describe


class Parser:
    """Parses a list of tokens into a TypeCake AST.

    The parser holds the ``current`` token and the previously consumed
    ``last`` token. A node's start comes from the token current when its
    production begins and its end from ``last`` once the production is
    complete, so every node covers exactly the tokens it consumed.
    """

    def __init__(self, tokens: list[Token], source: str, filename: str = "<stdin>") -> None:
        self.tokens = tokens
        self.source = source
        self.filename = filename
        self.pos = 0
        self.current = tokens[0]
        self.last: Token | None = None
        self._pattern_depth = 0

    # ── Token access ─────────────────────────────────────────────

    def _peek(self, offset: int = 1) -> Token:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]  # EOF

    def _at(self, kind: TokenKind, text: str | None = None) -> bool:
        return self.current.kind == kind and (text is None or self.current.value == text)

    def _advance(self) -> Token:
        tok = self.current
        self.last = tok
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        self.current = self.tokens[self.pos]
        return tok

    def _expect(self, kind: TokenKind, text: str | None = None, message: str | None = None) -> Token:
        if self._at(kind, text):
            return self._advance()
        if message is None:
            message = f"Unexpected token, expected {describe(kind, text)}."
        self._raise(message)

    def _eat(self, kind: TokenKind, text: str | None = None) -> bool:
        if self._at(kind, text):
            self._advance()
            return True
        return False

    def _raise(self, message: str = "Unexpected token.", token: Token | None = None) -> NoReturn:
        raise ParseError(message, token or self.current, self.last, self.source)

    def _close(self, opening: Token | Node) -> dict:
        """Location fields for a node opened at *opening* and ending at ``last``."""
        last = self.last if self.last is not None else opening
        return {
            "start": opening.start,
            "end": last.end,
            "span": Span(
                self.filename,
                opening.span.start_line, opening.span.start_col,
                last.span.end_line, last.span.end_col,
            ),
        }

    @contextmanager
    def _pattern_mode(self) -> Iterator[None]:
        """Allow infer captures (``&name``) for the duration of the block."""
        self._pattern_depth += 1
        try:
            yield
        finally:
            self._pattern_depth -= 1

    # ── Program and statements ───────────────────────────────────

    def parse(self) -> Program:
        """Parse the entire token stream into a Program."""
        start = self.current
        statements: list[Statement] = []
        while not self._eat(TokenKind.EOF):
            if not self._eat(TokenKind.SEMICOLON):
                statements.append(self._parse_statement())
                self._semicolon()
        return Program(statements, **self._close(start))

    def _semicolon(self) -> None:
        """A statement ends at `;`, end of input, or a line break."""
        if self._eat(TokenKind.SEMICOLON) or self._eat(TokenKind.EOF):
            return
        last = self.last if self.last is not None else self.current
        if self.current.span.start_line <= last.span.end_line:
            self._raise("Expect a semicolon.")

    def _parse_statement(self) -> Statement:
        if self._at(TokenKind.IDENTIFIER, "fn"):
            return self._parse_function_declaration()
        if self._at(TokenKind.IDENTIFIER, "from"):
            return self._parse_import_declaration()
        self._raise("Unexpected token, expected a declaration.")

    def _parse_function_declaration(self) -> FunctionDeclaration:
        start = self.current
        self._expect(TokenKind.IDENTIFIER, "fn")
        name = self._parse_identifier()
        self._expect(TokenKind.LPAREN)
        parameters: list[Parameter] = []
        while not self._eat(TokenKind.RPAREN):
            parameters.append(self._parse_parameter())
            if not self._at(TokenKind.RPAREN):
                self._expect(TokenKind.COMMA)
        self._expect(TokenKind.ASSIGN)
        body = self._parse_expression()
        return FunctionDeclaration(name, parameters, body, **self._close(start))

    def _parse_parameter(self) -> Parameter:
        start = self.current
        name = self._parse_identifier()
        constraint = self._parse_expression() if self._eat(TokenKind.COLON) else None
        default = self._parse_expression() if self._eat(TokenKind.ASSIGN) else None
        return Parameter(name, constraint, default, **self._close(start))

    # ── Imports ──────────────────────────────────────────────────

    def _parse_import_declaration(self) -> ImportDeclaration:
        start = self.current
        self._expect(TokenKind.IDENTIFIER, "from")
        if not self._at(TokenKind.STRING):
            self._raise("Unexpected token, expected a module path string.")
        source = self._parse_literal()
        self._expect(TokenKind.IMPORT)

        specifiers: list[ImportSpecifier] = []
        if self._at(TokenKind.STAR):
            specifiers.append(self._parse_import_namespace_specifier())
        elif self._at(TokenKind.LBRACE):
            specifiers.extend(self._parse_import_named_specifiers())
        elif self._at(TokenKind.IDENTIFIER):
            default_start = self.current
            local = self._parse_identifier()
            specifiers.append(ImportDefaultSpecifier(local, **self._close(default_start)))
            if self._eat(TokenKind.COMMA):
                specifiers.extend(self._parse_import_named_specifiers())
        else:
            self._raise("Unexpected token, expected an import clause.")

        return ImportDeclaration(source, specifiers, **self._close(start))

    def _parse_import_namespace_specifier(self) -> ImportNamespaceSpecifier:
        start = self.current
        self._expect(TokenKind.STAR)
        self._expect(TokenKind.IDENTIFIER, "as")
        local = self._parse_identifier()
        return ImportNamespaceSpecifier(local, **self._close(start))

    def _parse_import_named_specifiers(self) -> list[ImportNamedSpecifier]:
        self._expect(TokenKind.LBRACE)
        specifiers: list[ImportNamedSpecifier] = []
        while not self._eat(TokenKind.RBRACE):
            start = self.current
            imported = self._parse_identifier()
            local = self._parse_identifier() if self._eat(TokenKind.IDENTIFIER, "as") else None
            specifiers.append(ImportNamedSpecifier(imported, local, **self._close(start)))
            if not self._at(TokenKind.RBRACE):
                self._expect(TokenKind.COMMA)
        return specifiers

    # ── Binary levels ────────────────────────────────────────────

    def _parse_expression(self) -> Expression:
        """Parse a union: intersections separated by `|` (but not `|>`)."""
        first = self._parse_intersection()
        if not self._at_union_separator():
            return first
        types = [first]
        while self._at_union_separator():
            self._advance()
            types.append(self._parse_intersection())
        return UnionExpression(types, **self._close(first))

    def _at_union_separator(self) -> bool:
        return self._at(TokenKind.PIPE) and self._peek().kind != TokenKind.GREATER

    def _parse_intersection(self) -> Expression:
        first = self._parse_atom()
        if not self._at(TokenKind.AMP):
            return first
        types = [first]
        while self._at(TokenKind.AMP) and not self._at_infer_capture():
            self._advance()
            types.append(self._parse_atom())
        if len(types) == 1:
            return first
        return IntersectionExpression(types, **self._close(first))

    def _at_infer_capture(self) -> bool:
        """In a pattern, `&name` with no space in between is a capture."""
        nxt = self._peek()
        return (
            self._pattern_depth > 0
            and nxt.kind == TokenKind.IDENTIFIER
            and nxt.start == self.current.end
        )

    # ── Atoms ────────────────────────────────────────────────────

    def _parse_atom(self) -> Expression:
        kind = self.current.kind

        if kind == TokenKind.IDENTIFIER:
            identifier = self._parse_identifier()
            if self._eat(TokenKind.BANG):
                return self._parse_macro_call(identifier)
            return self._parse_subscripts(identifier)
        if kind == TokenKind.SWITCH:
            return self._parse_switch_expression()
        if kind == TokenKind.IF:
            return self._parse_if_expression()
        if kind == TokenKind.CONST:
            return self._parse_const_in_expression()
        if kind == TokenKind.FOR:
            return self._parse_for_expression()
        if kind == TokenKind.LBRACKET:
            return self._parse_subscripts(self._parse_tuple_expression())
        if kind == TokenKind.LBRACE:
            return self._parse_subscripts(self._parse_object_expression())
        if kind == TokenKind.LPAREN:
            return self._parse_subscripts(self._parse_parenthesized_expression())
        if kind == TokenKind.BACKQUOTE:
            return self._parse_subscripts(self._parse_template_literal())
        if kind in LITERALS:
            return self._parse_subscripts(self._parse_literal())
        if kind == TokenKind.AMP:
            if self._pattern_depth == 0:
                self._raise("Inferring type is only allowed in patterns.")
            return self._parse_subscripts(self._parse_infer_reference())

        self._raise()

    def _parse_identifier(self) -> Identifier:
        tok = self._expect(TokenKind.IDENTIFIER, message="Unexpected token, expected an identifier.")
        return Identifier(tok.value, **self._close(tok))

    def _parse_literal(self) -> Literal:
        tok = self._advance()
        raw = self.source[tok.start:tok.end]
        return Literal(tok.value, raw, **self._close(tok))

    def _parse_infer_reference(self) -> InferReference:
        start = self.current
        self._expect(TokenKind.AMP)
        name = self._parse_identifier()
        return InferReference(name, **self._close(start))

    def _parse_parenthesized_expression(self) -> ParenthesizedExpression:
        start = self.current
        self._expect(TokenKind.LPAREN)
        expression = self._parse_expression()
        self._expect(TokenKind.RPAREN)
        return ParenthesizedExpression(expression, **self._close(start))

    def _parse_template_literal(self) -> TemplateLiteralExpression:
        start = self.current
        self._expect(TokenKind.BACKQUOTE)
        quasis: list[TemplateElement] = []
        expressions: list[Expression] = []
        while not self._eat(TokenKind.BACKQUOTE):
            if self._at(TokenKind.TEMPLATE):
                tok = self._advance()
                raw = self.source[tok.start:tok.end]
                quasis.append(TemplateElement(tok.value, raw, **self._close(tok)))
            else:
                self._expect(TokenKind.DOLLAR_BRACE)
                expressions.append(self._parse_expression())
                self._expect(TokenKind.RBRACE)
        return TemplateLiteralExpression(quasis, expressions, **self._close(start))

    def _parse_tuple_expression(self) -> TupleExpression:
        start = self.current
        self._expect(TokenKind.LBRACKET)
        elements: list[Expression] = []
        while not self._eat(TokenKind.RBRACKET):
            if self._at(TokenKind.ELLIPSIS):
                elements.append(self._parse_rest_element())
            else:
                elements.append(self._parse_expression())
            if not self._at(TokenKind.RBRACKET):
                self._expect(TokenKind.COMMA)
        return TupleExpression(elements, **self._close(start))

    def _parse_rest_element(self) -> RestElement:
        start = self.current
        self._expect(TokenKind.ELLIPSIS)
        expression = self._parse_expression()
        return RestElement(expression, **self._close(start))

    def _parse_object_expression(self) -> ObjectExpression:
        start = self.current
        self._expect(TokenKind.LBRACE)
        properties: list[ObjectExpressionProperty] = []
        while not self._eat(TokenKind.RBRACE):
            properties.append(self._parse_object_property())
            if not self._at(TokenKind.RBRACE):
                self._expect(TokenKind.COMMA)
        return ObjectExpression(properties, **self._close(start))

    def _parse_object_property(self) -> ObjectExpressionProperty:
        start = self.current
        key: Identifier | IndexedPropertyKey
        if self._at(TokenKind.LBRACKET):
            key = self._parse_indexed_property_key()
        else:
            key = self._parse_identifier()
        optional = self._eat(TokenKind.QUESTION)
        self._expect(TokenKind.COLON)
        value = self._parse_expression()
        return ObjectExpressionProperty(key, value, optional, **self._close(start))

    def _parse_indexed_property_key(self) -> IndexedPropertyKey:
        start = self.current
        self._expect(TokenKind.LBRACKET)
        name = self._parse_identifier()
        self._expect(TokenKind.COLON)
        expression = self._parse_expression()
        self._expect(TokenKind.RBRACKET)
        return IndexedPropertyKey(name, expression, **self._close(start))

    # ── Subscripts ───────────────────────────────────────────────

    def _parse_subscripts(self, base: Expression) -> Expression:
        """Apply postfix calls, member access, indexing, `[]` and `|>` to *base*."""
        while True:
            if self._at(TokenKind.LPAREN) and isinstance(base, Identifier):
                base = self._parse_call_expression(base)
            elif self._at(TokenKind.DOT) and isinstance(base, Identifier):
                self._advance()
                key = self._parse_identifier()
                base = NamespaceAccessExpression(base, key, **self._close(base))
            elif self._eat(TokenKind.LBRACKET):
                if self._eat(TokenKind.RBRACKET):
                    base = ArrayExpression(base, **self._close(base))
                else:
                    index = self._parse_expression()
                    self._expect(TokenKind.RBRACKET)
                    base = IndexedAccessExpression(base, index, **self._close(base))
            elif self._at(TokenKind.PIPE) and self._peek().kind == TokenKind.GREATER:
                base = self._parse_pipeline_expression(base)
            else:
                return base

    def _parse_call_expression(self, callee: Identifier) -> CallExpression:
        arguments = self._parse_arguments()
        return CallExpression(callee, arguments, **self._close(callee))

    def _parse_macro_call(self, name: Identifier) -> MacroCallExpression:
        arguments = self._parse_arguments()
        return MacroCallExpression(name, arguments, **self._close(name))

    def _parse_arguments(self) -> list[Expression]:
        self._expect(TokenKind.LPAREN)
        arguments: list[Expression] = []
        while not self._eat(TokenKind.RPAREN):
            arguments.append(self._parse_expression())
            if not self._at(TokenKind.RPAREN):
                self._expect(TokenKind.COMMA)
        return arguments

    def _parse_pipeline_expression(self, source: Expression) -> PipelineExpression:
        self._expect(TokenKind.PIPE)
        self._expect(TokenKind.GREATER)
        name = self._parse_identifier()
        transformer: Identifier | CallExpression = name
        if self._at(TokenKind.LPAREN):
            transformer = self._parse_call_expression(name)
        return PipelineExpression(source, transformer, **self._close(source))

    # ── Control forms ────────────────────────────────────────────

    def _parse_switch_expression(self) -> SwitchExpression:
        start = self.current
        self._expect(TokenKind.SWITCH)
        expression = self._parse_expression()
        self._expect(TokenKind.LBRACE)
        arms: list[SwitchExpressionArm] = []
        while not self._eat(TokenKind.RBRACE):
            arms.append(self._parse_switch_arm())
            if not self._at(TokenKind.RBRACE):
                self._expect(TokenKind.COMMA)
        if not arms:
            self._raise("Switch expression must have at least one arm.", self.last)
        return SwitchExpression(expression, arms, **self._close(start))

    def _parse_switch_arm(self) -> SwitchExpressionArm:
        start = self.current
        with self._pattern_mode():
            pattern = self._parse_expression()
        self._expect(TokenKind.MINUS, message="Unexpected token, expected '->'.")
        self._expect(TokenKind.GREATER, message="Unexpected token, expected '->'.")
        body = self._parse_expression()
        return SwitchExpressionArm(pattern, body, **self._close(start))

    def _parse_if_expression(self) -> IfExpression:
        start = self.current
        self._expect(TokenKind.IF)
        conditions = [self._parse_subtype_relation()]
        while self._eat(TokenKind.AND_AND):
            conditions.append(self._parse_subtype_relation())
        self._expect(TokenKind.LBRACE)
        consequent = self._parse_expression()
        self._expect(TokenKind.RBRACE)
        self._expect(TokenKind.ELSE, message="Unexpected token, `if` requires an `else` branch.")

        alternate: Expression
        if self._at(TokenKind.IF):
            alternate = self._parse_if_expression()
        elif self._eat(TokenKind.LBRACE):
            alternate = self._parse_expression()
            self._expect(TokenKind.RBRACE)
        else:
            self._raise("Unexpected token, expected `if` or '{' after `else`.")

        return IfExpression(conditions, consequent, alternate, **self._close(start))

    def _parse_subtype_relation(self) -> SubtypeRelation:
        start = self.current
        expression = self._parse_expression()
        if self._eat(TokenKind.COLON):
            relation = Relation.SUBTYPE
        elif self._eat(TokenKind.EQ_EQ):
            relation = Relation.EQUALITY
        else:
            self._raise("Unexpected token, expected ':' or '=='.")
        with self._pattern_mode():
            constraint = self._parse_expression()
        return SubtypeRelation(expression, constraint, relation, **self._close(start))

    def _parse_const_in_expression(self) -> ConstInExpression:
        start = self.current
        self._expect(TokenKind.CONST)
        bindings: list[ConstInBinding] = []
        while True:
            bindings.append(self._parse_const_in_binding())
            if self._eat(TokenKind.IN):
                break
            self._expect(TokenKind.COMMA)
        body = self._parse_expression()
        return ConstInExpression(bindings, body, **self._close(start))

    def _parse_const_in_binding(self) -> ConstInBinding:
        start = self.current
        name = self._parse_identifier()
        self._expect(TokenKind.ASSIGN)
        expression = self._parse_expression()
        return ConstInBinding(name, expression, **self._close(start))

    def _parse_for_expression(self) -> ForExpression:
        start = self.current
        self._expect(TokenKind.FOR)
        each = self._parse_identifier()
        self._expect(TokenKind.IN)
        collection = self._parse_expression()
        mapper = self._parse_expression() if self._eat(TokenKind.IDENTIFIER, "as") else None
        self._expect(TokenKind.LBRACE)
        body = self._parse_expression()
        self._expect(TokenKind.RBRACE)
        return ForExpression(each, collection, mapper, body, **self._close(start))


def parse(source: str, filename: str = "<stdin>") -> Program:
    """Lex and parse *source* into a Program."""
    tokens = Lexer(source, filename).lex()
    return Parser(tokens, source, filename).parse()
