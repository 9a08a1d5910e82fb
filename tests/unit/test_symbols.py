"""Tests for rendering nodes to fragments and mapping nodes back to fragment ranges."""

import pytest

from stepper.errors import UnsupportedNode
from stepper.highlight import tag_tokens
from stepper.nodes import (
    add_assign,
    and_,
    assign,
    block,
    constant,
    equal,
    for_loop,
    identifier,
    if_statement,
    increment,
    int_constant,
    int_declaration,
    invoke,
    jump,
    less_than_or_equal,
    null_statement,
    statement,
    string_constant,
    string_declaration,
    void_constant,
)
from stepper.render_types import Fragment, HighlightRange
from stepper.symbols import (
    character_range,
    find_range,
    render_program,
    stringify,
    symbol_list,
    symbol_map,
    transform_range,
)
from stepper.tree import flatten


def _text(node):
    return stringify(symbol_list(node))


def _printf(*arguments):
    return invoke(identifier("printf"), *arguments)


def _loop_program():
    """Helper: ``for (int i = 0; i <= 2; i++) { printf("%d", i); }`` sharing one ``i``."""
    i = identifier("i")
    return for_loop(
        int_declaration(i, int_constant(0)),
        statement(less_than_or_equal(i, int_constant(2))),
        statement(increment(i)),
        block(statement(_printf(string_constant("%d"), i))),
    )


class TestSymbolList:
    def test_fragments_carry_originating_node(self):
        x = identifier("x")
        five = int_constant(5)
        node = assign(x, five)
        stmt = statement(node)
        assert symbol_list(stmt) == [
            Fragment("x", x),
            Fragment(" = ", node),
            Fragment("5", five),
            Fragment(";", stmt),
        ]

    def test_binary_operators(self):
        a, b = identifier("a"), identifier("b")
        assert _text(and_(a, b)) == "a && b"
        assert _text(less_than_or_equal(a, b)) == "a <= b"
        assert _text(equal(a, b)) == "a == b"

    def test_assignments(self):
        assert _text(add_assign(identifier("x"), int_constant(1))) == "x += 1"
        assert _text(increment(identifier("x"))) == "x++"

    def test_negative_int(self):
        assert _text(int_constant(-4)) == "-4"

    def test_bool_int_constant_renders_as_number(self):
        assert _text(statement(constant(True, "int"))) == "1;"

    def test_invoke(self):
        call = _printf(string_constant("%d"), identifier("x"))
        assert _text(call) == 'printf("%d", x)'
        assert _text(invoke(identifier("f"))) == "f()"

    def test_string_escaping(self):
        assert _text(string_constant('say "hi"\n')) == '"say \\"hi\\"\\n"'

    def test_null_string(self):
        assert _text(string_constant(None)) == "NULL"

    def test_void_renders_nothing(self):
        assert symbol_list(void_constant()) == []
        assert _text(statement(void_constant())) == ";"

    def test_null_statement(self):
        assert _text(null_statement()) == ";"

    def test_declarations(self):
        assert _text(int_declaration(identifier("n"), int_constant(5))) == "int n = 5;"
        assert _text(string_declaration(identifier("s"))) == "char* s;"
        assert (
            _text(string_declaration(identifier("s"), string_constant("hi")))
            == 'char* s = "hi";'
        )

    def test_if_with_statement_body(self):
        node = if_statement(
            less_than_or_equal(identifier("i"), int_constant(3)),
            statement(increment(identifier("i"))),
        )
        assert _text(node) == "if (i <= 3)\n  i++;"

    def test_if_with_block_body(self):
        node = if_statement(identifier("c"), block(statement(identifier("a"))))
        assert _text(node) == "if (c) {\n  a;\n}"

    def test_for_loop(self):
        assert (
            _text(_loop_program())
            == 'for (int i = 0; i <= 2; i++) {\n  printf("%d", i);\n}'
        )

    def test_for_loop_with_empty_clauses(self):
        node = for_loop(
            null_statement(), null_statement(), null_statement(), null_statement()
        )
        assert _text(node) == "for (; ; )\n  ;"

    def test_nested_blocks_indent(self):
        node = block(block(statement(identifier("x"))), statement(identifier("y")))
        assert _text(node) == "{\n  {\n    x;\n  }\n  y;\n}"

    def test_empty_block(self):
        assert _text(block()) == "{\n\n}"

    def test_ir_only_nodes_are_not_rendered(self):
        with pytest.raises(UnsupportedNode):
            symbol_list(jump("somewhere"))


class TestRenderProgram:
    def test_one_statement_per_line(self):
        program = [
            int_declaration(identifier("x"), int_constant(5)),
            statement(increment(identifier("x"))),
        ]
        fragments = render_program(program)
        assert stringify(fragments) == "int x = 5;\nx++;\n"
        assert fragments[-1] == Fragment("\n", None)

    def test_empty_program(self):
        assert render_program([]) == []


class TestFindRange:
    def test_single_fragment(self):
        name = identifier("name")
        assert find_range([Fragment("name", name)], name) == HighlightRange(
            start=0, end=0
        )

    def test_statement_within_program(self):
        target = statement(increment(identifier("x")))
        program = [int_declaration(identifier("x"), int_constant(5)), target]
        fragments = render_program(program)
        found = find_range(fragments, target)
        assert stringify(fragments[found.start : found.end + 1]) == "x++;"

    def test_shared_identifier_does_not_anchor(self):
        loop = _loop_program()
        fragments = symbol_list(loop)
        found = find_range(fragments, loop.condition)
        assert stringify(fragments[found.start : found.end + 1]) == "i <= 2;"

    def test_bare_identifier_anchors_on_itself(self):
        x = identifier("x")
        call = _printf(string_constant("%d"), x)
        fragments = symbol_list(statement(call))
        assert find_range(fragments, x) == HighlightRange(start=4, end=4)

    def test_range_matches_standalone_rendering(self):
        loop = _loop_program()
        fragments = render_program([loop])
        checked = [
            loop,
            loop.initializer,
            loop.condition,
            loop.condition.value,
            loop.update.value,
            loop.body,
            loop.body.statements[0],
            loop.body.statements[0].value,
        ]
        for node in checked:
            found = find_range(fragments, node)
            assert stringify(fragments[found.start : found.end + 1]) == _text(node)

    def test_every_expression_in_program(self):
        x = identifier("x")
        program = [
            int_declaration(x, int_constant(1)),
            statement(assign(x, and_(equal(x, int_constant(1)), string_constant("s")))),
        ]
        fragments = render_program(program)
        for node in flatten(program[1]):
            if node is x:
                continue
            found = find_range(fragments, node)
            assert stringify(fragments[found.start : found.end + 1]) == _text(node)

    def test_unrendered_node(self):
        fragments = symbol_list(statement(identifier("x")))
        assert find_range(fragments, jump("end")) is None


class TestTransformRange:
    def test_prefix_offset(self):
        result = transform_range(
            HighlightRange(start=1, end=2), ["a", "b", "c"], lambda xs: ["#", *xs]
        )
        assert result == HighlightRange(start=2, end=3)

    def test_doubling(self):
        result = transform_range(
            HighlightRange(start=1, end=2),
            ["a", "b", "c"],
            lambda xs: [x for x in xs for _ in range(2)],
        )
        assert result == HighlightRange(start=2, end=5)

    def test_identity(self):
        result = transform_range(
            HighlightRange(start=0, end=1), ["a", "b"], lambda xs: list(xs)
        )
        assert result == HighlightRange(start=0, end=1)

    def test_onto_tagged_tokens(self):
        x = identifier("x")
        call = _printf(string_constant("%d"), x)
        fragments = symbol_list(statement(call))
        tokens = tag_tokens(fragments)

        x_range = transform_range(find_range(fragments, x), fragments, tag_tokens)
        assert tokens[x_range.start].text == "x"
        assert x_range.start == x_range.end

        call_range = transform_range(find_range(fragments, call), fragments, tag_tokens)
        highlighted = tokens[call_range.start : call_range.end + 1]
        assert "".join(t.text for t in highlighted) == 'printf("%d", x)'


class TestSymbolMap:
    def test_int_declaration(self):
        n = identifier("n")
        five = int_constant(5)
        decl = int_declaration(n, five)
        assert symbol_map(decl, symbol_list(decl)) == [(decl, 0, 10), (five, 8, 9)]

    def test_identifiers_excluded(self):
        node = statement(increment(identifier("x")))
        mapped = symbol_map(node, symbol_list(node))
        assert [type(n).__name__ for n, _, _ in mapped] == [
            "ExpressionStatement",
            "Increment",
        ]

    def test_character_range(self):
        target = statement(increment(identifier("x")))
        fragments = render_program(
            [int_declaration(identifier("x"), int_constant(5)), target]
        )
        assert character_range(fragments, target) == (11, 15)

    def test_character_range_of_missing_node(self):
        fragments = symbol_list(null_statement())
        assert character_range(fragments, jump("end")) is None
