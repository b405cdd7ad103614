"""Tests for the TypeScript emitter."""

from __future__ import annotations

from typecake.ast_nodes import Identifier, TypeOperator
from typecake.emitter import Emitter, compile_source
from typecake.source import Span
from tests.helpers import emit, emit_body, parse


class TestScenarios:
    def test_identity(self):
        assert compile_source("fn Id(x) = x;") == "type Id<x> = x;\n"

    def test_switch_with_infer_fallback(self):
        source = 'fn F(x: string) = switch x { "a" -> 1, &_ -> 0 };'
        assert compile_source(source) == 'type F<x extends string> = x extends "a" ? 1 : 0;\n'

    def test_pipeline_appends_source(self):
        assert emit("fn T(x) = x |> F(1)") == "type T<x> = F<1, x>;\n"

    def test_named_import(self):
        source = 'from "mod" import { a, b as c };'
        assert compile_source(source) == 'import { a, b as c } from "mod";\n'

    def test_if_duplicates_alternate(self):
        output = emit("fn T(a, c) = if a : b && c : d { y } else { z };")
        assert output == "type T<a, c> = a extends b ? c extends d ? y : z : z;\n"
        assert output.count("z") == 2


class TestStatements:
    def test_no_parameters(self):
        assert emit("fn T() = 1") == "type T = 1;\n"

    def test_parameter_constraint_and_default(self):
        output = emit('fn T(x: string = "a", y = 1) = x')
        assert output == 'type T<x extends string = "a", y = 1> = x;\n'

    def test_namespace_import(self):
        assert emit('from "m" import * as ns') == 'import * as ns from "m";\n'

    def test_default_and_named_import(self):
        assert emit("from 'm' import D, { a }") == "import D, { a } from 'm';\n"

    def test_default_import(self):
        assert emit('from "m" import D') == 'import D from "m";\n'

    def test_blank_lines_preserved(self):
        source = "fn A() = 1\n\n\nfn B() = 2\n"
        assert emit(source) == "type A = 1;\n\n\ntype B = 2;\n"

    def test_same_line_statements_split(self):
        assert emit("fn A() = 1; fn B() = 2") == "type A = 1;\ntype B = 2;\n"

    def test_empty_program(self):
        assert emit("") == "\n"

    def test_emit_is_repeatable(self):
        program = parse("fn A(x) = { a: 1, b: 2, c: x }\nfn B() = A(1)")
        emitter = Emitter()
        assert emitter.emit(program) == emitter.emit(program)


class TestSwitch:
    def test_single_arm(self):
        assert emit_body("switch x { string -> 1 }") == "x extends string ? 1 : 1"

    def test_last_arm_is_fallback(self):
        output = emit_body('switch x { 1 -> "a", 2 -> "b", 3 -> "c" }')
        assert output == 'x extends 1 ? "a" : x extends 2 ? "b" : "c"'
        assert "extends 3" not in output

    def test_tuple_pattern(self):
        output = emit_body("switch x { [&h, ...&t] -> t, &_ -> never }")
        assert output == "x extends [infer h, ...infer t] ? t : never"


class TestConditionals:
    def test_equality_relation(self):
        assert emit_body("if a == b { 1 } else { 2 }") == "a extends b ? 1 : 2"

    def test_else_if(self):
        output = emit_body("if a : b { 1 } else if a : c { 2 } else { 3 }")
        assert output == "a extends b ? 1 : a extends c ? 2 : 3"

    def test_three_conditions(self):
        output = emit_body("if a : A && b : B && c : C { 1 } else { [0] }")
        assert output == "a extends A ? b extends B ? c extends C ? 1 : [0] : [0] : [0]"

    def test_const_in(self):
        output = emit_body("const a = x, b = a in [a, b]")
        assert output == "x extends infer a ? a extends infer b ? [a, b] : never : never"

    def test_single_binding(self):
        assert emit_body("const a = x in a") == "x extends infer a ? a : never"


class TestExpressions:
    def test_union_and_intersection(self):
        assert emit_body("a | b & c") == "a | b & c"

    def test_call_and_macro_call(self):
        assert emit_body("F(a, b)") == "F<a, b>"
        assert emit_body("Assert!(a, b)") == "Assert<a, b>"

    def test_call_without_arguments(self):
        assert emit_body("F()") == "F"

    def test_pipeline_without_call(self):
        assert emit_body("x |> F") == "F<x>"

    def test_pipeline_chain(self):
        assert emit_body("x |> F |> G(1)") == "G<1, F<x>>"

    def test_indexed_access_and_namespace(self):
        assert emit_body('ns.T["k"]') == 'ns.T["k"]'

    def test_array_of_identifier(self):
        assert emit_body("string[]") == "string[]"

    def test_array_of_literal(self):
        assert emit_body('"a"[]') == '"a"[]'

    def test_array_of_compound_is_parenthesized(self):
        assert emit_body("[a, b][]") == "([a, b])[]"
        assert emit_body("F(a)[]") == "(F<a>)[]"

    def test_tuple_and_rest(self):
        assert emit_body("[a, ...b]") == "[a, ...b]"

    def test_parenthesized(self):
        assert emit_body("(a | b)") == "(a | b)"

    def test_literals_keep_source_spelling(self):
        assert emit_body("0x1F") == "0x1F"
        assert emit_body("1_000") == "1_000"
        assert emit_body("'single'") == "'single'"
        assert emit_body('"esc\\n"') == '"esc\\n"'

    def test_template_literal(self):
        assert emit_body("`Hello, ${n}!`") == "`Hello, ${n}!`"

    def test_template_keeps_raw_escapes(self):
        assert emit_body("`a\\tb`") == "`a\\tb`"

    def test_for(self):
        assert emit_body("for k in Keys { T[k] }") == "{ [k in Keys]: T[k] }"

    def test_for_with_mapper(self):
        output = emit_body("for k in Keys as Upper(k) { T[k] }")
        assert output == "{ [k in Keys as Upper<k>]: T[k] }"

    def test_type_operator(self):
        span = Span("<test>", 1, 1, 1, 2)
        node = TypeOperator(
            "keyof",
            Identifier("T", start=0, end=1, span=span),
            start=0, end=1, span=span,
        )
        assert Emitter().emit_node(node) == "keyof T"


class TestObjects:
    def test_empty_object(self):
        assert emit_body("{}") == "{  }"

    def test_single_line(self):
        assert emit_body("{ a: 1, b?: string }") == "{ a: 1, b?: string }"

    def test_indexed_key(self):
        assert emit_body("{ [k: string]: number }") == "{ [k: string]: number }"

    def test_multi_line(self):
        assert emit_body("{ a: 1, b: 2, c: 3 }") == "{\n  a: 1,\n  b: 2,\n  c: 3\n}"

    def test_nested_multi_line(self):
        output = emit_body("{ a: { x: 1, y: 2, z: 3 }, b: 2, c: 3 }")
        assert output == (
            "{\n"
            "  a: {\n"
            "    x: 1,\n"
            "    y: 2,\n"
            "    z: 3\n"
            "  },\n"
            "  b: 2,\n"
            "  c: 3\n"
            "}"
        )

    def test_multi_line_in_program(self):
        output = emit("fn T() = { a: 1, b: 2, c: 3 }")
        assert output == "type T = {\n  a: 1,\n  b: 2,\n  c: 3\n};\n"


class TestModuleBoundary:
    def test_emitter_does_not_import_parser(self):
        import typecake.emitter as emitter_module

        assert not hasattr(emitter_module, "parse")
        assert not hasattr(emitter_module, "Parser")
