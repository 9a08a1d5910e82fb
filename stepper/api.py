"""Composable API functions for the program stepper.

The presentation layer lowers a program once, calls ``step`` per user action,
and calls ``render_state`` (or ``get_highlighted_symbols``) whenever it needs
to paint the source view.
"""

from __future__ import annotations

import logging
from typing import Sequence

from .errors import UnsupportedNode
from .highlight import tag_tokens
from .ir_stats import count_statement_kinds
from .lowering import lower
from .nodes import ConditionalJump, IRStatement, Label, Node, Statement
from .render_types import HighlightRange, SymbolState
from .run import execute_traced
from .run_types import StepperConfig
from .state_types import EvaluationState
from .symbols import find_range, render_program, stringify, symbol_list, transform_range
from .trace_types import ExecutionTrace
from .tree import has_condition, has_value, substitute, with_condition, with_value

logger = logging.getLogger(__name__)


def lower_program(program: Sequence[Statement]) -> list[IRStatement]:
    """Lower a source-shaped program to IR statements.

    Args:
        program: Top-level statements as produced by the parser.

    Returns:
        A list of IR statements.
    """
    logger.info("Lowering program of %d statements", len(program))
    return lower(program)


def _format_ir(stmt: IRStatement) -> str:
    if isinstance(stmt, ConditionalJump):
        condition = stringify(symbol_list(stmt.condition))
        return f"branch_if {condition} {stmt.true_label},{stmt.false_label}"
    if has_value(stmt):
        return stringify(symbol_list(stmt))
    return str(stmt)


def dump_ir(program: Sequence[Statement]) -> str:
    """Lower a program and return a human-readable text dump.

    Args:
        program: Top-level statements.

    Returns:
        A multi-line string with one IR statement per line; labels are not
        indented.
    """
    return "\n".join(
        str(stmt) if isinstance(stmt, Label) else f"  {_format_ir(stmt)}"
        for stmt in lower_program(program)
    )


def ir_stats(program: Sequence[Statement]) -> dict[str, int]:
    """Lower a program and return IR statement kind frequency counts."""
    return count_statement_kinds(lower_program(program))


def execute_program(
    program: Sequence[Statement], max_steps: int = 1000
) -> ExecutionTrace:
    """Lower and run a program, recording every intermediate state.

    Composes: lower_program → execute_traced. The trace's states can be
    replayed one by one, together with ``render_state``, to build an undo
    history for the stepper view.
    """
    logger.info("execute_program: max_steps=%d", max_steps)
    _state, trace = execute_traced(
        lower_program(program), StepperConfig(max_steps=max_steps)
    )
    return trace


def _highlight(
    tree: Sequence[Statement], statement: Node, replacement: Node, active: Node
) -> SymbolState:
    evaluated_tree = [substitute(stmt, statement, replacement) for stmt in tree]
    fragments = render_program(evaluated_tree)
    tokens = tag_tokens(fragments)

    fragment_range = find_range(fragments, replacement)
    if fragment_range is not None and active is not replacement:
        # The active node is searched for inside its own statement only
        offset = fragment_range.start
        inner = find_range(fragments[offset : fragment_range.end + 1], active)
        fragment_range = None
        if inner is not None:
            fragment_range = HighlightRange(
                start=offset + inner.start, end=offset + inner.end
            )

    if fragment_range is None:
        return SymbolState(tokens=tokens)
    return SymbolState(
        tokens=tokens, range=transform_range(fragment_range, fragments, tag_tokens)
    )


def get_highlighted_symbols(
    tree: Sequence[Statement], statement: Node, active: Node
) -> SymbolState:
    """Render *tree* with *active* in place of *statement* and locate *active*.

    The range is computed on the substituted tree, so it covers whatever the
    partially reduced node currently looks like. It is None when *active* is
    not visible in the source (a jump or a scope-exit marker).

    Args:
        tree: The original, source-shaped program.
        statement: The node as it appears in *tree*.
        active: Its current, possibly partially reduced, replacement.

    Returns:
        A SymbolState with tagged tokens and the highlighted token range.
    """
    return _highlight(tree, statement, active, active)


def _with_displayed_condition(original: Statement, condition: Node) -> Statement:
    """*original* (an if or a loop condition) showing *condition* in place."""
    if has_value(original):
        return with_value(original, condition)
    if has_condition(original):
        return with_condition(original, condition)
    raise UnsupportedNode(f"Cannot display {original!r}", original)


def render_state(tree: Sequence[Statement], state: EvaluationState) -> SymbolState:
    """Render the source view for an evaluation state.

    A conditional jump is shown through the statement it was lowered from:
    its (partially reduced) condition replaces the if-condition or the loop
    condition expression, and only that condition is highlighted.
    """
    if state.terminated:
        return SymbolState(tokens=tag_tokens(render_program(tree)))

    statement = state.statement
    active = state.active_node
    if isinstance(statement, ConditionalJump):
        original = statement.original_statement
        shown = _with_displayed_condition(original, active.condition)
        return _highlight(tree, original, shown, active.condition)
    return get_highlighted_symbols(tree, statement, active)
