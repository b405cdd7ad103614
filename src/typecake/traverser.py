"""Generic depth-first traversal over TypeCake ASTs.

Callers register a :class:`NodeVisitor` per node class. For every node the
walk fires ``enter``, descends into the children left to right, then fires
``exit``. Nodes without a registered visitor are still descended into::

    names = []
    traverse = create_traverser({
        Identifier: NodeVisitor(enter=lambda node: names.append(node.name)),
    })
    traverse(program)

Callbacks may update fields of the node they receive. Return values are
ignored; the walk never replaces or removes nodes.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass

from typecake.ast_nodes import (
    ArrayExpression,
    CallExpression,
    ConstInBinding,
    ConstInExpression,
    ForExpression,
    FunctionDeclaration,
    Identifier,
    IfExpression,
    ImportDeclaration,
    ImportDefaultSpecifier,
    ImportNamedSpecifier,
    ImportNamespaceSpecifier,
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
    RestElement,
    SubtypeRelation,
    SwitchExpression,
    SwitchExpressionArm,
    TemplateElement,
    TemplateLiteralExpression,
    TupleExpression,
    TypeOperator,
    UnionExpression,
)


@dataclass(frozen=True)
class NodeVisitor:
    """Optional callbacks fired before and after a node's children."""

    enter: Callable[[Node], object] | None = None
    exit: Callable[[Node], object] | None = None


Visitors = Mapping[type[Node], NodeVisitor]


def iter_children(node: Node) -> Iterator[Node]:
    """Yield the direct children of *node* in source order."""
    match node:
        case Program(statements=statements):
            yield from statements
        case Identifier() | Literal() | TemplateElement():
            pass
        case TemplateLiteralExpression(quasis=quasis, expressions=expressions):
            for i, quasi in enumerate(quasis):
                yield quasi
                if i < len(expressions):
                    yield expressions[i]
        case TupleExpression(elements=elements):
            yield from elements
        case RestElement(expression=expression):
            yield expression
        case ArrayExpression(element=element):
            yield element
        case IntersectionExpression(types=types) | UnionExpression(types=types):
            yield from types
        case ObjectExpression(properties=properties):
            yield from properties
        case ObjectExpressionProperty(key=key, value=value):
            yield key
            yield value
        case IndexedPropertyKey(name=name, expression=expression):
            yield name
            yield expression
        case NamespaceAccessExpression(namespace=namespace, key=key):
            yield namespace
            yield key
        case CallExpression(callee=callee, arguments=arguments):
            yield callee
            yield from arguments
        case MacroCallExpression(name=name, arguments=arguments):
            yield name
            yield from arguments
        case PipelineExpression(source=source, transformer=transformer):
            yield source
            yield transformer
        case IndexedAccessExpression(obj=obj, index=index):
            yield obj
            yield index
        case ParenthesizedExpression(expression=expression):
            yield expression
        case SwitchExpression(expression=expression, arms=arms):
            yield expression
            yield from arms
        case SwitchExpressionArm(pattern=pattern, body=body):
            yield pattern
            yield body
        case IfExpression(conditions=conditions, consequent=consequent, alternate=alternate):
            yield from conditions
            yield consequent
            yield alternate
        case SubtypeRelation(expression=expression, constraint=constraint):
            yield expression
            yield constraint
        case ConstInExpression(bindings=bindings, body=body):
            yield from bindings
            yield body
        case ConstInBinding(name=name, expression=expression):
            yield name
            yield expression
        case ForExpression(each=each, collection=collection, mapper=mapper, body=body):
            yield each
            yield collection
            if mapper is not None:
                yield mapper
            yield body
        case InferReference(name=name):
            yield name
        case TypeOperator(expression=expression):
            yield expression
        case FunctionDeclaration(name=name, parameters=parameters, body=body):
            yield name
            yield from parameters
            yield body
        case Parameter(name=name, constraint=constraint, default=default):
            yield name
            if constraint is not None:
                yield constraint
            if default is not None:
                yield default
        case ImportDeclaration(source=source, specifiers=specifiers):
            yield source
            yield from specifiers
        case ImportDefaultSpecifier(local=local) | ImportNamespaceSpecifier(local=local):
            yield local
        case ImportNamedSpecifier(imported=imported, local=local):
            yield imported
            if local is not None:
                yield local
        case _:
            raise TypeError(f"unknown node type {type(node).__name__}")


def visit_node(node: Node, visitors: Visitors) -> None:
    """Visit *node* and, recursively, everything below it."""
    visitor = visitors.get(type(node))
    if visitor is not None and visitor.enter is not None:
        visitor.enter(node)
    visit_each_child(node, visitors)
    if visitor is not None and visitor.exit is not None:
        visitor.exit(node)


def visit_each_child(node: Node, visitors: Visitors) -> None:
    for child in iter_children(node):
        visit_node(child, visitors)


def create_traverser(visitors: Visitors) -> Callable[[Node], None]:
    """Bind *visitors* into a single-argument walk function."""

    def traverse(node: Node) -> None:
        visit_node(node, visitors)

    return traverse
