"""Tests for the composable API: lowering, IR dumps, traced runs and source highlighting."""

import re

from stepper.api import (
    dump_ir,
    execute_program,
    get_highlighted_symbols,
    lower_program,
    render_state,
)
from stepper.evaluator import initial_state, step
from stepper.nodes import (
    assign,
    block,
    for_loop,
    identifier,
    if_statement,
    increment,
    int_constant,
    int_declaration,
    invoke,
    jump,
    less_than_or_equal,
    statement,
    string_constant,
    undeclaration,
)
from stepper.render_types import SymbolState


def _printf(*arguments):
    return invoke(identifier("printf"), *arguments)


def _loop_tree():
    """Helper: ``for (int i = 0; i <= 2; i++) { printf("%d", i); }``."""
    i = identifier("i")
    return [
        for_loop(
            int_declaration(i, int_constant(0)),
            statement(less_than_or_equal(i, int_constant(2))),
            statement(increment(i)),
            block(statement(_printf(string_constant("%d"), i))),
        )
    ]


def _highlighted(symbols):
    """Helper: text of the highlighted token range."""
    tokens = symbols.tokens[symbols.range.start : symbols.range.end + 1]
    return "".join(t.text for t in tokens)


def _rendered(symbols):
    return "".join(t.text for t in symbols.tokens)


class TestLowerProgram:
    def test_returns_ir_list(self):
        program = lower_program(_loop_tree())
        assert isinstance(program, list)
        assert type(program[0]).__name__ == "Declaration"


class TestDumpIr:
    def test_if_dump(self):
        text = dump_ir([if_statement(int_constant(1), statement(identifier("a")))])
        lines = text.split("\n")
        assert re.fullmatch(r"  branch_if 1 if_true_\d+,if_false_\d+", lines[0])
        assert re.fullmatch(r"if_true_\d+:", lines[1])
        assert lines[2] == "  a;"
        assert re.fullmatch(r"  jump if_end_\d+", lines[3])
        assert len(lines) == 7

    def test_loop_dump_ends_with_undeclaration(self):
        lines = dump_ir(_loop_tree()).split("\n")
        assert lines[0] == "  int i = 0;"
        assert lines[-1] == "  undeclare i"
        assert '  printf("%d", i);' in lines
        assert "  i++;" in lines


class TestExecuteProgram:
    def test_trace_reaches_termination(self):
        trace = execute_program(_loop_tree())
        assert trace.stats.terminated
        assert trace.steps[-1].state.output == "012"
        assert trace.steps[-1].state.environment == {}

    def test_step_limit(self):
        trace = execute_program(_loop_tree(), max_steps=4)
        assert len(trace.steps) == 4
        assert not trace.stats.terminated


class TestGetHighlightedSymbols:
    def test_statement_range(self):
        x = identifier("x")
        target = statement(assign(x, int_constant(2)))
        tree = [int_declaration(x, int_constant(1)), target]
        symbols = get_highlighted_symbols(tree, target, target)
        assert isinstance(symbols, SymbolState)
        assert _rendered(symbols) == "int x = 1;\nx = 2;\n"
        assert _highlighted(symbols) == "x = 2;"

    def test_partially_reduced_node_is_rendered(self):
        x = identifier("x")
        y = identifier("y")
        target = statement(assign(x, y))
        tree = [target]
        active = statement(assign(x, int_constant(8)))
        symbols = get_highlighted_symbols(tree, target, active)
        assert _rendered(symbols) == "x = 8;\n"
        assert _highlighted(symbols) == "x = 8;"

    def test_tree_not_modified(self):
        target = statement(identifier("y"))
        tree = [target]
        get_highlighted_symbols(tree, target, statement(int_constant(4)))
        assert tree[0] is target

    def test_jump_has_no_range(self):
        tree = _loop_tree()
        symbols = get_highlighted_symbols(tree, jump("for_begin_0"), jump("for_begin_0"))
        assert symbols.range is None
        assert symbols.tokens

    def test_undeclaration_has_no_range(self):
        tree = _loop_tree()
        marker = undeclaration(tree[0].initializer.identifier)
        assert get_highlighted_symbols(tree, marker, marker).range is None

    def test_serializes(self):
        target = statement(identifier("y"))
        dumped = get_highlighted_symbols([target], target, target).model_dump()
        assert dumped["range"] == {"start": 0, "end": 1}


class TestRenderState:
    def test_walks_a_loop(self):
        tree = _loop_tree()
        state = initial_state(lower_program(tree))
        assert _highlighted(render_state(tree, state)) == "int i = 0;"

        state = step(state)
        symbols = render_state(tree, state)
        assert _highlighted(symbols) == "i <= 2"

        state = step(state)
        symbols = render_state(tree, state)
        assert _highlighted(symbols) == "0 <= 2"
        assert "for (int i = 0; 0 <= 2; i++)" in _rendered(symbols)

        state = step(state)
        assert _highlighted(render_state(tree, state)) == "1"

        state = step(state)
        assert _highlighted(render_state(tree, state)) == 'printf("%d", i);'

        state = step(state)
        assert _highlighted(render_state(tree, state)) == 'printf("%d", 0);'

    def test_if_condition_displayed_through_original(self):
        c = identifier("c")
        tree = [
            int_declaration(c, int_constant(1)),
            if_statement(c, statement(int_constant(7))),
        ]
        state = step(initial_state(lower_program(tree)))
        assert _highlighted(render_state(tree, state)) == "c"

        state = step(state)
        symbols = render_state(tree, state)
        assert _highlighted(symbols) == "1"
        assert "if (1)" in _rendered(symbols)

    def test_terminated_state_has_no_range(self):
        tree = [statement(int_constant(1))]
        state = initial_state(lower_program(tree))
        while not state.terminated:
            state = step(state)
        symbols = render_state(tree, state)
        assert symbols.range is None
        assert _rendered(symbols) == "1;\n"
