"""Structural queries and rebuilders over tree nodes.

Rebuilders (``with_*``) never mutate: each returns a new node of the same
variant with one field replaced, and fails with ``UnsupportedNode`` when the
variant has no such field.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional, Sequence

from . import constants
from .errors import InvalidOperand, UnsupportedNode
from .nodes import (
    EXPRESSION_TYPES,
    IR_STATEMENT_TYPES,
    STATEMENT_TYPES,
    AddAssign,
    Assign,
    BinaryOp,
    BinaryOperator,
    Block,
    ConditionalJump,
    Constant,
    Declaration,
    Expression,
    ExpressionStatement,
    ForLoop,
    Identifier,
    If,
    Increment,
    Invoke,
    Jump,
    Label,
    Node,
    Statement,
    Undeclaration,
)

# ── Predicates ───────────────────────────────────────────────────


def is_identifier(node: Any) -> bool:
    return isinstance(node, Identifier)


def is_constant(node: Any) -> bool:
    return isinstance(node, Constant)


def is_expression(node: Any) -> bool:
    return isinstance(node, EXPRESSION_TYPES)


def is_statement(node: Any) -> bool:
    return isinstance(node, STATEMENT_TYPES)


def is_ir_statement(node: Any) -> bool:
    return isinstance(node, IR_STATEMENT_TYPES)


def is_declaration(node: Any) -> bool:
    return isinstance(node, Declaration)


def is_binary(node: Any) -> bool:
    return isinstance(node, BinaryOp)


def is_and(node: Any) -> bool:
    return is_binary(node) and node.operator == BinaryOperator.AND


def is_less_than_or_equal(node: Any) -> bool:
    return is_binary(node) and node.operator == BinaryOperator.LESS_THAN_OR_EQUAL


def is_equal(node: Any) -> bool:
    return is_binary(node) and node.operator == BinaryOperator.EQUAL


def is_assign(node: Any) -> bool:
    return isinstance(node, Assign)


def is_add_assign(node: Any) -> bool:
    return isinstance(node, AddAssign)


def is_increment(node: Any) -> bool:
    return isinstance(node, Increment)


def is_invoke(node: Any, name: str = "") -> bool:
    if not isinstance(node, Invoke):
        return False
    return not name or node.identifier.name == name


def is_expression_statement(node: Any) -> bool:
    return isinstance(node, ExpressionStatement)


def is_for_loop(node: Any) -> bool:
    return isinstance(node, ForLoop)


def is_if(node: Any) -> bool:
    return isinstance(node, If)


def is_block(node: Any) -> bool:
    return isinstance(node, Block)


def is_label(node: Any) -> bool:
    return isinstance(node, Label)


def is_jump(node: Any) -> bool:
    return isinstance(node, Jump)


def is_conditional_jump(node: Any) -> bool:
    return isinstance(node, ConditionalJump)


def is_undeclaration(node: Any) -> bool:
    return isinstance(node, Undeclaration)


def has_left(node: Any) -> bool:
    return is_binary(node)


def has_right(node: Any) -> bool:
    return is_binary(node)


def has_value(node: Any) -> bool:
    return isinstance(node, (Assign, AddAssign, ExpressionStatement, Declaration))


def has_condition(node: Any) -> bool:
    return isinstance(node, (ForLoop, If, ConditionalJump))


# ── Constant semantics ───────────────────────────────────────────


def is_false(node: Constant) -> bool:
    """C truthiness: int 0 is false, a null string is false."""
    if not is_constant(node):
        raise InvalidOperand(f"node is not a constant: {node!r}", node)
    if node.datatype == constants.INT_TYPE:
        return node.value == 0
    if node.datatype == constants.STRING_TYPE:
        return node.value is None
    raise InvalidOperand(f"Constant of type {node.datatype!r} has no truth value", node)


def is_true(node: Constant) -> bool:
    return not is_false(node)


def numerical_value(node: Constant) -> int:
    """Value of a constant when used in a comparison.

    Strings have no real numeric value; a null string counts as 0 and any
    other string as 99.
    """
    if not is_constant(node):
        raise InvalidOperand(f"node is not a constant: {node!r}", node)
    if node.datatype == constants.INT_TYPE:
        return node.value
    if node.datatype == constants.STRING_TYPE:
        if node.value is None:
            return constants.NULL_STRING_NUMERIC
        return constants.STRING_NUMERIC
    raise InvalidOperand(f"Constant of type {node.datatype!r} has no numeric value", node)


# ── Rebuilders ───────────────────────────────────────────────────


def _unsupported(node: Any, field_name: str) -> UnsupportedNode:
    return UnsupportedNode(
        f"{type(node).__name__} has no '{field_name}' to replace", node
    )


def with_identifier(node: Node, identifier: Identifier) -> Node:
    if isinstance(node, (Declaration, Assign, AddAssign, Increment, Invoke, Undeclaration)):
        return replace(node, identifier=identifier)
    raise _unsupported(node, "identifier")


def with_value(node: Node, value: Optional[Expression]) -> Node:
    if has_value(node):
        return replace(node, value=value)
    raise _unsupported(node, "value")


def with_left(node: Node, left: Expression) -> BinaryOp:
    if has_left(node):
        return replace(node, left=left)
    raise _unsupported(node, "left")


def with_right(node: Node, right: Expression) -> BinaryOp:
    if has_right(node):
        return replace(node, right=right)
    raise _unsupported(node, "right")


def with_argument(node: Node, argument: Expression, position: int) -> Invoke:
    if not is_invoke(node):
        raise _unsupported(node, "arguments")
    if not 0 <= position < len(node.arguments):
        raise InvalidOperand(f"No argument at position {position}", node)
    arguments = (
        node.arguments[:position] + (argument,) + node.arguments[position + 1 :]
    )
    return replace(node, arguments=arguments)


def with_arguments(node: Node, arguments: Sequence[Expression]) -> Invoke:
    if is_invoke(node):
        return replace(node, arguments=tuple(arguments))
    raise _unsupported(node, "arguments")


def with_condition(node: Node, condition: Node) -> Node:
    if has_condition(node):
        return replace(node, condition=condition)
    raise _unsupported(node, "condition")


def with_initializer(node: Node, initializer: Statement) -> ForLoop:
    if is_for_loop(node):
        return replace(node, initializer=initializer)
    raise _unsupported(node, "initializer")


def with_update(node: Node, update: Statement) -> ForLoop:
    if is_for_loop(node):
        return replace(node, update=update)
    raise _unsupported(node, "update")


def with_body(node: Node, body: Statement) -> Node:
    if isinstance(node, (ForLoop, If)):
        return replace(node, body=body)
    raise _unsupported(node, "body")


def with_statements(node: Node, statements: Sequence[Statement]) -> Block:
    if is_block(node):
        return replace(node, statements=tuple(statements))
    raise _unsupported(node, "statements")


# ── Traversal ────────────────────────────────────────────────────

# Child-bearing fields per variant, in declaration (= rendering) order.
# A ConditionalJump's original_statement is a back-reference for display,
# not a child.
_CHILD_FIELDS: dict[type, tuple[str, ...]] = {
    Identifier: (),
    Constant: (),
    BinaryOp: ("left", "right"),
    Assign: ("identifier", "value"),
    AddAssign: ("identifier", "value"),
    Increment: ("identifier",),
    Invoke: ("identifier", "arguments"),
    ExpressionStatement: ("value",),
    Declaration: ("identifier", "value"),
    Block: ("statements",),
    ForLoop: ("initializer", "condition", "update", "body"),
    If: ("condition", "body"),
    Label: (),
    Jump: (),
    ConditionalJump: ("condition",),
    Undeclaration: ("identifier",),
}


def _child_fields(node: Any) -> tuple[str, ...]:
    fields = _CHILD_FIELDS.get(type(node))
    if fields is None:
        raise UnsupportedNode(f"Unsupported node {node!r}", node)
    return fields


def children(node: Node) -> list[Node]:
    """Direct children of *node* in declaration order (absent values skipped)."""
    result: list[Node] = []
    for name in _child_fields(node):
        child = getattr(node, name)
        if child is None:
            continue
        if isinstance(child, tuple):
            result.extend(child)
        else:
            result.append(child)
    return result


def flatten(node: Optional[Node]) -> list[Node]:
    """*node* followed by all of its descendants, pre-order."""
    if node is None:
        return []
    return [node] + [n for child in children(node) for n in flatten(child)]


def substitute(root: Node, target: Node, replacement: Node) -> Node:
    """Replace the first occurrence (by identity) of *target* under *root*.

    Every ancestor on the path to *target* is rebuilt; subtrees that do not
    contain *target* are returned as-is.
    """
    new_root, _found = _substitute(root, target, replacement)
    return new_root


def _substitute(node: Node, target: Node, replacement: Node) -> tuple[Node, bool]:
    if node is target:
        return replacement, True

    for name in _child_fields(node):
        child = getattr(node, name)
        if child is None:
            continue
        if isinstance(child, tuple):
            for i, item in enumerate(child):
                new_item, found = _substitute(item, target, replacement)
                if found:
                    items = child[:i] + (new_item,) + child[i + 1 :]
                    return replace(node, **{name: items}), True
            continue
        new_child, found = _substitute(child, target, replacement)
        if found:
            return replace(node, **{name: new_child}), True
    return node, False


def contains(root: Node, target: Node) -> bool:
    return any(n is target for n in flatten(root))
