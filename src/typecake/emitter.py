"""Lower a TypeCake AST to TypeScript type-level source text."""

from __future__ import annotations

from typecake.ast_nodes import (
    ArrayExpression,
    CallExpression,
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
    TemplateLiteralExpression,
    TupleExpression,
    TypeOperator,
    UnionExpression,
)

_INDENT = "  "

# Objects with at least this many properties are laid out one per line.
_MULTILINE_PROPERTIES = 3


class Emitter:
    """Emit TypeScript type declarations from a parsed TypeCake program.

    The emitter is a fixed-rule printer: it appends text fragments to a
    buffer and tracks one indentation level, used by multi-line objects.
    It assumes a well-formed tree and performs no validation.
    """

    def __init__(self) -> None:
        self._out: list[str] = []
        self._indent = 0

    # ── Public API ─────────────────────────────────────────────

    def emit(self, program: Program) -> str:
        """Emit a whole program. The result always ends with a newline."""
        self._out = []
        self._indent = 0
        statements = program.statements
        for i, stmt in enumerate(statements):
            self._emit(stmt)
            if i + 1 < len(statements):
                gap = statements[i + 1].span.start_line - stmt.span.end_line
                self._write("\n" * max(1, gap))
        self._write("\n")
        return "".join(self._out)

    def emit_node(self, node: Node) -> str:
        """Emit a single statement or expression without a trailing newline."""
        self._out = []
        self._indent = 0
        self._emit(node)
        return "".join(self._out)

    # ── Buffer ─────────────────────────────────────────────────

    def _write(self, text: str) -> None:
        self._out.append(text)

    def _newline(self) -> None:
        self._out.append("\n" + _INDENT * self._indent)

    def _emit_list(self, nodes: list, separator: str = ", ") -> None:
        for i, node in enumerate(nodes):
            if i:
                self._write(separator)
            self._emit(node)

    def _emit_type_arguments(self, callee: Identifier, arguments: list) -> None:
        self._emit(callee)
        if arguments:
            self._write("<")
            self._emit_list(arguments)
            self._write(">")

    # ── Dispatch ───────────────────────────────────────────────

    def _emit(self, node: Node) -> None:
        match node:
            case FunctionDeclaration():
                self._emit_function_declaration(node)
            case ImportDeclaration():
                self._emit_import_declaration(node)
            case Parameter(name=name, constraint=constraint, default=default):
                self._emit(name)
                if constraint is not None:
                    self._write(" extends ")
                    self._emit(constraint)
                if default is not None:
                    self._write(" = ")
                    self._emit(default)
            case Identifier(name=name):
                self._write(name)
            case Literal(raw=raw):
                self._write(raw)
            case TemplateLiteralExpression():
                self._emit_template_literal(node)
            case TupleExpression(elements=elements):
                self._write("[")
                self._emit_list(elements)
                self._write("]")
            case RestElement(expression=expression):
                self._write("...")
                self._emit(expression)
            case ArrayExpression(element=element):
                if isinstance(element, (Identifier, Literal)):
                    self._emit(element)
                else:
                    self._write("(")
                    self._emit(element)
                    self._write(")")
                self._write("[]")
            case IntersectionExpression(types=types):
                self._emit_list(types, " & ")
            case UnionExpression(types=types):
                self._emit_list(types, " | ")
            case ObjectExpression():
                self._emit_object(node)
            case ObjectExpressionProperty():
                self._emit_object_property(node)
            case IndexedPropertyKey(name=name, expression=expression):
                self._write("[")
                self._emit(name)
                self._write(": ")
                self._emit(expression)
                self._write("]")
            case NamespaceAccessExpression(namespace=namespace, key=key):
                self._emit(namespace)
                self._write(".")
                self._emit(key)
            case CallExpression(callee=callee, arguments=arguments):
                self._emit_type_arguments(callee, arguments)
            case MacroCallExpression(name=name, arguments=arguments):
                self._emit_type_arguments(name, arguments)
            case PipelineExpression():
                self._emit_pipeline(node)
            case IndexedAccessExpression(obj=obj, index=index):
                self._emit(obj)
                self._write("[")
                self._emit(index)
                self._write("]")
            case ParenthesizedExpression(expression=expression):
                self._write("(")
                self._emit(expression)
                self._write(")")
            case SwitchExpression():
                self._emit_switch(node)
            case IfExpression():
                self._emit_if(node)
            case SubtypeRelation(expression=expression, constraint=constraint):
                self._emit(expression)
                self._write(" extends ")
                self._emit(constraint)
            case ConstInExpression():
                self._emit_const_in(node)
            case ForExpression():
                self._emit_for(node)
            case InferReference(name=name):
                self._write("infer ")
                self._emit(name)
            case TypeOperator(operator=operator, expression=expression):
                self._write(f"{operator} ")
                self._emit(expression)
            case _:
                raise TypeError(f"cannot emit {type(node).__name__}")

    # ── Statements ─────────────────────────────────────────────

    def _emit_function_declaration(self, fd: FunctionDeclaration) -> None:
        self._write("type ")
        self._emit(fd.name)
        if fd.parameters:
            self._write("<")
            self._emit_list(fd.parameters)
            self._write(">")
        self._write(" = ")
        self._emit(fd.body)
        self._write(";")

    def _emit_import_declaration(self, decl: ImportDeclaration) -> None:
        clause: list[str] = []
        named: list[ImportNamedSpecifier] = []
        for spec in decl.specifiers:
            match spec:
                case ImportDefaultSpecifier(local=local):
                    clause.append(local.name)
                case ImportNamespaceSpecifier(local=local):
                    clause.append(f"* as {local.name}")
                case ImportNamedSpecifier():
                    named.append(spec)
        if named or not clause:
            names = ", ".join(
                s.imported.name if s.local is None else f"{s.imported.name} as {s.local.name}"
                for s in named
            )
            clause.append(f"{{ {names} }}" if names else "{}")
        self._write(f"import {', '.join(clause)} from ")
        self._emit(decl.source)
        self._write(";")

    # ── Compound expressions ───────────────────────────────────

    def _emit_template_literal(self, tpl: TemplateLiteralExpression) -> None:
        self._write("`")
        for i, quasi in enumerate(tpl.quasis):
            self._write(quasi.raw)
            if i < len(tpl.expressions):
                self._write("${")
                self._emit(tpl.expressions[i])
                self._write("}")
        self._write("`")

    def _emit_object(self, obj: ObjectExpression) -> None:
        props = obj.properties
        if len(props) < _MULTILINE_PROPERTIES:
            self._write("{ ")
            self._emit_list(props)
            self._write(" }")
            return

        self._write("{")
        self._indent += 1
        for i, prop in enumerate(props):
            self._newline()
            self._emit(prop)
            if i + 1 < len(props):
                self._write(",")
        self._indent -= 1
        self._newline()
        self._write("}")

    def _emit_object_property(self, prop: ObjectExpressionProperty) -> None:
        self._emit(prop.key)
        if prop.optional:
            self._write("?")
        self._write(": ")
        self._emit(prop.value)

    def _emit_pipeline(self, pipe: PipelineExpression) -> None:
        """``src |> f(a, b)`` becomes ``f<a, b, src>``."""
        transformer = pipe.transformer
        if isinstance(transformer, CallExpression):
            callee, arguments = transformer.callee, [*transformer.arguments, pipe.source]
        else:
            callee, arguments = transformer, [pipe.source]
        self._emit_type_arguments(callee, arguments)

    def _emit_switch(self, sw: SwitchExpression) -> None:
        # The last arm's pattern is never tested: its body is the fallback.
        # A single arm is still tested, with its body on both branches.
        arms = sw.arms
        tested = arms[:-1] if len(arms) > 1 else arms
        for arm in tested:
            self._emit(sw.expression)
            self._write(" extends ")
            self._emit(arm.pattern)
            self._write(" ? ")
            self._emit(arm.body)
            self._write(" : ")
        self._emit(arms[-1].body)

    def _emit_if(self, node: IfExpression) -> None:
        for condition in node.conditions:
            self._emit(condition)
            self._write(" ? ")
        self._emit(node.consequent)
        for _ in node.conditions:
            self._write(" : ")
            self._emit(node.alternate)

    def _emit_const_in(self, node: ConstInExpression) -> None:
        for binding in node.bindings:
            self._emit(binding.expression)
            self._write(" extends infer ")
            self._emit(binding.name)
            self._write(" ? ")
        self._emit(node.body)
        self._write(" : never" * len(node.bindings))

    def _emit_for(self, node: ForExpression) -> None:
        self._write("{ [")
        self._emit(node.each)
        self._write(" in ")
        self._emit(node.collection)
        if node.mapper is not None:
            self._write(" as ")
            self._emit(node.mapper)
        self._write("]: ")
        self._emit(node.body)
        self._write(" }")


def compile_source(source: str, filename: str = "<stdin>") -> str:
    """Lex, parse and emit *source* in one step."""
    from typecake.parser import parse

    return Emitter().emit(parse(source, filename))
