"""Small-step evaluator. Each call to step() performs exactly one primitive reduction."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional, Sequence

from . import constants
from .errors import (
    AlreadyDeclared,
    InvalidOperand,
    MissingLabel,
    ProgramTerminated,
    UndeclaredIdentifier,
    UnsupportedFunction,
    UnsupportedNode,
)
from .nodes import (
    AddAssign,
    Assign,
    BinaryOp,
    BinaryOperator,
    ConditionalJump,
    Constant,
    Declaration,
    Expression,
    ExpressionStatement,
    Identifier,
    Increment,
    Invoke,
    IRStatement,
    Jump,
    Label,
    Undeclaration,
    constant,
    int_constant,
    void_constant,
)
from .state_types import Environment, EvaluationState, Reduction
from .tree import (
    is_and,
    is_constant,
    is_false,
    is_invoke,
    is_true,
    numerical_value,
    with_argument,
    with_condition,
    with_left,
    with_right,
    with_value,
)

logger = logging.getLogger(__name__)


# ── Program counter helpers ──────────────────────────────────────


def _next_executable(program: Sequence[IRStatement], start: int) -> Optional[int]:
    """Index of the first non-label statement at or after *start*, or None."""
    return next(
        (i for i in range(start, len(program)) if not isinstance(program[i], Label)),
        None,
    )


def _resolve_label(program: Sequence[IRStatement], name: str, node) -> Optional[int]:
    index = next(
        (
            i
            for i, stmt in enumerate(program)
            if isinstance(stmt, Label) and stmt.name == name
        ),
        None,
    )
    if index is None:
        raise MissingLabel(name, node)
    return _next_executable(program, index)


def _move_to(
    state: EvaluationState,
    program_counter: Optional[int],
    environment: Optional[Environment] = None,
) -> EvaluationState:
    active = None if program_counter is None else state.program[program_counter]
    return replace(
        state,
        program_counter=program_counter,
        active_node=active,
        environment=state.environment if environment is None else environment,
    )


def _advance(
    state: EvaluationState, environment: Optional[Environment] = None
) -> EvaluationState:
    return _move_to(
        state, _next_executable(state.program, state.program_counter + 1), environment
    )


def _rewrite(state: EvaluationState, active, reduction: Reduction) -> EvaluationState:
    return replace(
        state,
        active_node=active,
        environment=reduction.environment,
        output=state.output + reduction.output,
    )


# ── Environment helpers ──────────────────────────────────────────


def _lookup(environment: Environment, identifier: Identifier) -> Constant:
    if identifier.name not in environment:
        raise UndeclaredIdentifier(identifier.name, identifier)
    bound = environment[identifier.name]
    # Fresh node: a reduced value never shares identity with a tree position
    return constant(bound.value, bound.datatype)


def _require_bound(environment: Environment, identifier: Identifier):
    if identifier.name not in environment:
        raise UndeclaredIdentifier(identifier.name, identifier)


def _bind(environment: Environment, name: str, value: Constant) -> Environment:
    return {**environment, name: value}


def _zero_value(datatype: str) -> Constant:
    if datatype == constants.INT_TYPE:
        return int_constant(0)
    return constant(None, datatype)


# ── Expression reduction ─────────────────────────────────────────


def _reduce_into(
    node, child: Expression, rebuild: Callable, environment: Environment
) -> Reduction:
    """Reduce *child* one step and rebuild *node* around the result."""
    inner = reduce_expression(child, environment)
    return Reduction(rebuild(node, inner.node), inner.environment, inner.output)


def _reduce_identifier(node: Identifier, environment: Environment) -> Reduction:
    return Reduction(_lookup(environment, node), environment)


def _reduce_binary(node: BinaryOp, environment: Environment) -> Reduction:
    if not is_constant(node.left):
        return _reduce_into(node, node.left, with_left, environment)
    if is_and(node) and is_false(node.left):
        return Reduction(int_constant(False), environment)
    if not is_constant(node.right):
        return _reduce_into(node, node.right, with_right, environment)

    if node.operator == BinaryOperator.AND:
        result = is_true(node.right)
    elif node.operator == BinaryOperator.LESS_THAN_OR_EQUAL:
        result = numerical_value(node.left) <= numerical_value(node.right)
    else:
        result = numerical_value(node.left) == numerical_value(node.right)
    return Reduction(int_constant(result), environment)


def _reduce_assign(node: Assign, environment: Environment) -> Reduction:
    _require_bound(environment, node.identifier)
    if not is_constant(node.value):
        return _reduce_into(node, node.value, with_value, environment)
    return Reduction(node.value, _bind(environment, node.identifier.name, node.value))


def _reduce_add_assign(node: AddAssign, environment: Environment) -> Reduction:
    _require_bound(environment, node.identifier)
    if not is_constant(node.value):
        return _reduce_into(node, node.value, with_value, environment)
    current = _lookup(environment, node.identifier)
    total = numerical_value(current) + numerical_value(node.value)
    return Reduction(
        int_constant(total),
        _bind(environment, node.identifier.name, int_constant(total)),
    )


def _reduce_increment(node: Increment, environment: Environment) -> Reduction:
    original = numerical_value(_lookup(environment, node.identifier))
    return Reduction(
        int_constant(original),
        _bind(environment, node.identifier.name, int_constant(original + 1)),
    )


def _format_argument(argument: Constant) -> str:
    if argument.datatype == constants.STRING_TYPE:
        if argument.value is None:
            return constants.NULL_LITERAL
        return argument.value
    if argument.datatype == constants.INT_TYPE:
        return str(argument.value)
    raise InvalidOperand("printf cannot format a void value", argument)


def _call_printf(node: Invoke, environment: Environment) -> Reduction:
    if not node.arguments:
        raise InvalidOperand("printf needs a format string", node)
    template = node.arguments[0]
    if template.datatype != constants.STRING_TYPE or template.value is None:
        raise InvalidOperand("printf format is not a string constant", node)

    text = template.value
    if len(node.arguments) > 1:
        text = text.replace(
            constants.FORMAT_PLACEHOLDER, _format_argument(node.arguments[1]), 1
        )
    return Reduction(void_constant(), environment, text)


def _reduce_invoke(node: Invoke, environment: Environment) -> Reduction:
    pending = next(
        (i for i, arg in enumerate(node.arguments) if not is_constant(arg)), None
    )
    if pending is not None:
        inner = reduce_expression(node.arguments[pending], environment)
        return Reduction(
            with_argument(node, inner.node, pending), inner.environment, inner.output
        )
    if not is_invoke(node, constants.PRINTF):
        raise UnsupportedFunction(node.identifier.name, node)
    return _call_printf(node, environment)


_EXPR_DISPATCH: dict[type, Callable[..., Reduction]] = {
    Identifier: _reduce_identifier,
    BinaryOp: _reduce_binary,
    Assign: _reduce_assign,
    AddAssign: _reduce_add_assign,
    Increment: _reduce_increment,
    Invoke: _reduce_invoke,
}


def reduce_expression(node: Expression, environment: Environment) -> Reduction:
    """Perform one reduction on the innermost-leftmost reducible subterm of *node*."""
    handler = _EXPR_DISPATCH.get(type(node))
    if handler is None:
        raise UnsupportedNode(f"Cannot reduce {node!r}", node)
    return handler(node, environment)


# ── Statement transitions ────────────────────────────────────────


def _step_expression_statement(
    state: EvaluationState, node: ExpressionStatement
) -> EvaluationState:
    if node.value is None or is_constant(node.value):
        return _advance(state)
    reduction = reduce_expression(node.value, state.environment)
    return _rewrite(state, with_value(node, reduction.node), reduction)


def _step_declaration(state: EvaluationState, node: Declaration) -> EvaluationState:
    if node.value is not None and not is_constant(node.value):
        reduction = reduce_expression(node.value, state.environment)
        return _rewrite(state, with_value(node, reduction.node), reduction)

    name = node.identifier.name
    if name in state.environment:
        raise AlreadyDeclared(name, node)
    value = node.value if node.value is not None else _zero_value(node.datatype)
    return _advance(state, _bind(state.environment, name, value))


def _step_undeclaration(state: EvaluationState, node: Undeclaration) -> EvaluationState:
    name = node.identifier.name
    if name not in state.environment:
        raise UndeclaredIdentifier(name, node)
    environment = {k: v for k, v in state.environment.items() if k != name}
    return _advance(state, environment)


def _step_jump(state: EvaluationState, node: Jump) -> EvaluationState:
    return _move_to(state, _resolve_label(state.program, node.target, node))


def _step_conditional_jump(
    state: EvaluationState, node: ConditionalJump
) -> EvaluationState:
    if not is_constant(node.condition):
        reduction = reduce_expression(node.condition, state.environment)
        return _rewrite(state, with_condition(node, reduction.node), reduction)
    target = node.true_label if is_true(node.condition) else node.false_label
    return _move_to(state, _resolve_label(state.program, target, node))


_STMT_DISPATCH: dict[type, Callable[..., EvaluationState]] = {
    ExpressionStatement: _step_expression_statement,
    Declaration: _step_declaration,
    Undeclaration: _step_undeclaration,
    Jump: _step_jump,
    ConditionalJump: _step_conditional_jump,
}


def initial_state(program: Sequence[IRStatement]) -> EvaluationState:
    """State positioned on the first executable statement of a lowered program."""
    statements = tuple(program)
    program_counter = _next_executable(statements, 0)
    active = None if program_counter is None else statements[program_counter]
    return EvaluationState(
        program=statements, program_counter=program_counter, active_node=active
    )


def is_terminated(state: EvaluationState) -> bool:
    return state.program_counter is None


def step(state: EvaluationState) -> EvaluationState:
    """Return the state after exactly one reduction; *state* is left untouched."""
    if state.program_counter is None:
        raise ProgramTerminated()

    node = state.active_node
    handler = _STMT_DISPATCH.get(type(node))
    if handler is None:
        raise UnsupportedNode(f"Cannot execute {node!r}", node)
    new_state = handler(state, node)
    logger.debug(
        "step pc=%s -> pc=%s (%s)",
        state.program_counter,
        new_state.program_counter,
        type(node).__name__,
    )
    return new_state
