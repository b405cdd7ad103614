"""AST node definitions for the TypeCake language.

Every node records its source offsets (``start``/``end``, so that
``source[node.start:node.end]`` is the text the node was parsed from) and
its line/column ``span``. Those three fields are keyword-only and live on
the :class:`Node` base so positional construction only lists the payload.
Nodes are plain mutable dataclasses: the parser never touches a node after
finishing it, but traversal callbacks may update fields in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from typecake.source import Span


@dataclass(kw_only=True)
class Node:
    start: int
    end: int
    span: Span


# ── Leaves ───────────────────────────────────────────────────────


@dataclass
class Identifier(Node):
    name: str


@dataclass
class Literal(Node):
    value: str | int | float | bool | None
    raw: str  # exact source spelling, used verbatim by the emitter


@dataclass
class TemplateElement(Node):
    value: str
    raw: str


# ── Expressions ──────────────────────────────────────────────────


@dataclass
class TemplateLiteralExpression(Node):
    quasis: list[TemplateElement]  # always one more than expressions
    expressions: list[Expression]


@dataclass
class TupleExpression(Node):
    elements: list[Expression]


@dataclass
class RestElement(Node):
    expression: Expression


@dataclass
class ArrayExpression(Node):
    element: Expression


@dataclass
class IntersectionExpression(Node):
    types: list[Expression]


@dataclass
class UnionExpression(Node):
    types: list[Expression]


@dataclass
class IndexedPropertyKey(Node):
    name: Identifier
    expression: Expression


@dataclass
class ObjectExpressionProperty(Node):
    key: Identifier | IndexedPropertyKey
    value: Expression
    optional: bool


@dataclass
class ObjectExpression(Node):
    properties: list[ObjectExpressionProperty]


@dataclass
class NamespaceAccessExpression(Node):
    namespace: Identifier
    key: Identifier


@dataclass
class CallExpression(Node):
    callee: Identifier
    arguments: list[Expression]


@dataclass
class MacroCallExpression(Node):
    name: Identifier
    arguments: list[Expression]


@dataclass
class PipelineExpression(Node):
    source: Expression
    transformer: Identifier | CallExpression


@dataclass
class IndexedAccessExpression(Node):
    obj: Expression
    index: Expression


@dataclass
class ParenthesizedExpression(Node):
    expression: Expression


@dataclass
class SwitchExpressionArm(Node):
    pattern: Expression
    body: Expression


@dataclass
class SwitchExpression(Node):
    expression: Expression
    arms: list[SwitchExpressionArm]


class Relation(Enum):
    SUBTYPE = ":"
    EQUALITY = "=="


@dataclass
class SubtypeRelation(Node):
    expression: Expression
    constraint: Expression
    relation: Relation


@dataclass
class IfExpression(Node):
    conditions: list[SubtypeRelation]  # never empty
    consequent: Expression
    alternate: Expression


@dataclass
class ConstInBinding(Node):
    name: Identifier
    expression: Expression


@dataclass
class ConstInExpression(Node):
    bindings: list[ConstInBinding]  # never empty
    body: Expression


@dataclass
class ForExpression(Node):
    each: Identifier
    collection: Expression
    mapper: Expression | None
    body: Expression


@dataclass
class InferReference(Node):
    name: Identifier


@dataclass
class TypeOperator(Node):
    """Prefix type operator such as ``keyof``; no surface syntax produces it yet."""

    operator: str
    expression: Expression


Expression = Union[
    Identifier, Literal, TemplateLiteralExpression,
    TupleExpression, RestElement, ArrayExpression,
    IntersectionExpression, UnionExpression, ObjectExpression,
    NamespaceAccessExpression, CallExpression, MacroCallExpression,
    PipelineExpression, IndexedAccessExpression, ParenthesizedExpression,
    SwitchExpression, IfExpression, ConstInExpression, ForExpression,
    InferReference, TypeOperator,
]


# ── Declarations ─────────────────────────────────────────────────


@dataclass
class Parameter(Node):
    name: Identifier
    constraint: Expression | None
    default: Expression | None


@dataclass
class FunctionDeclaration(Node):
    name: Identifier
    parameters: list[Parameter]
    body: Expression


@dataclass
class ImportDefaultSpecifier(Node):
    local: Identifier


@dataclass
class ImportNamespaceSpecifier(Node):
    local: Identifier


@dataclass
class ImportNamedSpecifier(Node):
    imported: Identifier
    local: Identifier | None  # None when there is no `as` alias


ImportSpecifier = Union[
    ImportDefaultSpecifier, ImportNamespaceSpecifier, ImportNamedSpecifier,
]


@dataclass
class ImportDeclaration(Node):
    source: Literal
    specifiers: list[ImportSpecifier]


Statement = Union[ImportDeclaration, FunctionDeclaration]


@dataclass
class Program(Node):
    statements: list[Statement]
