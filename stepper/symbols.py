"""Renderer: tree nodes to text fragments, and fragment ranges back to nodes."""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from . import constants
from .errors import UnsupportedNode
from .nodes import (
    AddAssign,
    Assign,
    BinaryOp,
    BinaryOperator,
    Block,
    Constant,
    Declaration,
    ExpressionStatement,
    ForLoop,
    Identifier,
    If,
    Increment,
    Invoke,
    Node,
    Statement,
)
from .render_types import Fragment, HighlightRange
from .tree import flatten, is_identifier

_BINARY_SYMBOLS: dict[BinaryOperator, str] = {
    BinaryOperator.AND: "&&",
    BinaryOperator.LESS_THAN_OR_EQUAL: "<=",
    BinaryOperator.EQUAL: "==",
}


def _indentation(depth: int) -> str:
    return constants.INDENT * depth


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


# ── Per-variant rendering ────────────────────────────────────────


def _render_identifier(node: Identifier, depth: int) -> list[Fragment]:
    return [Fragment(node.name, node)]


def _render_constant(node: Constant, depth: int) -> list[Fragment]:
    if node.datatype == constants.INT_TYPE:
        return [Fragment(str(node.value), node)]
    if node.datatype == constants.STRING_TYPE:
        if node.value is None:
            return [Fragment(constants.NULL_LITERAL, node)]
        return [Fragment(f'"{_escape(node.value)}"', node)]
    # void: the result of a call renders as nothing
    return []


def _render_binary(node: BinaryOp, depth: int) -> list[Fragment]:
    return [
        *symbol_list(node.left, depth),
        Fragment(f" {_BINARY_SYMBOLS[node.operator]} ", node),
        *symbol_list(node.right, depth),
    ]


def _render_assign(node: Assign, depth: int) -> list[Fragment]:
    return [
        *symbol_list(node.identifier, depth),
        Fragment(" = ", node),
        *symbol_list(node.value, depth),
    ]


def _render_add_assign(node: AddAssign, depth: int) -> list[Fragment]:
    return [
        *symbol_list(node.identifier, depth),
        Fragment(" += ", node),
        *symbol_list(node.value, depth),
    ]


def _render_increment(node: Increment, depth: int) -> list[Fragment]:
    return [*symbol_list(node.identifier, depth), Fragment("++", node)]


def _render_invoke(node: Invoke, depth: int) -> list[Fragment]:
    if not node.arguments:
        return [*symbol_list(node.identifier, depth), Fragment("()", node)]

    arguments: list[Fragment] = []
    for i, arg in enumerate(node.arguments):
        if i:
            arguments.append(Fragment(", ", node))
        arguments.extend(symbol_list(arg, depth))
    return [
        *symbol_list(node.identifier, depth),
        Fragment("(", node),
        *arguments,
        Fragment(")", node),
    ]


def _render_expression_statement(
    node: ExpressionStatement, depth: int
) -> list[Fragment]:
    if node.value is None:
        return [Fragment(";", node)]
    return [*symbol_list(node.value, depth), Fragment(";", node)]


def _render_declaration(node: Declaration, depth: int) -> list[Fragment]:
    head = [
        Fragment(constants.C_TYPE_NAMES[node.datatype] + " ", node),
        *symbol_list(node.identifier, depth),
    ]
    if node.value is None:
        return [*head, Fragment(";", node)]
    return [
        *head,
        Fragment(" = ", node),
        *symbol_list(node.value, depth),
        Fragment(";", node),
    ]


def _body_separator(node: ForLoop | If, depth: int) -> Fragment:
    """``) `` before a block body, otherwise a newline and one more indent."""
    if isinstance(node.body, Block):
        return Fragment(") ", node)
    return Fragment(")\n" + _indentation(depth + 1), node)


def _render_for_loop(node: ForLoop, depth: int) -> list[Fragment]:
    update = symbol_list(node.update, depth)
    # The update clause carries no terminating semicolon
    if update and update[-1].text == ";":
        update.pop()
    return [
        Fragment("for (", node),
        *symbol_list(node.initializer, depth),
        Fragment(" ", node),
        *symbol_list(node.condition, depth),
        Fragment(" ", node),
        *update,
        _body_separator(node, depth),
        *symbol_list(node.body, depth),
    ]


def _render_if(node: If, depth: int) -> list[Fragment]:
    return [
        Fragment("if (", node),
        *symbol_list(node.condition, depth),
        _body_separator(node, depth),
        *symbol_list(node.body, depth),
    ]


def _render_block(node: Block, depth: int) -> list[Fragment]:
    inner = depth + 1
    statements: list[Fragment] = []
    for i, stmt in enumerate(node.statements):
        newline = "\n" if i else ""
        statements.append(Fragment(newline + _indentation(inner), node))
        statements.extend(symbol_list(stmt, inner))
    return [
        Fragment("{\n", node),
        *statements,
        Fragment("\n" + _indentation(depth) + "}", node),
    ]


_RENDER_DISPATCH: dict[type, Callable[[Node, int], list[Fragment]]] = {
    Identifier: _render_identifier,
    Constant: _render_constant,
    BinaryOp: _render_binary,
    Assign: _render_assign,
    AddAssign: _render_add_assign,
    Increment: _render_increment,
    Invoke: _render_invoke,
    ExpressionStatement: _render_expression_statement,
    Declaration: _render_declaration,
    ForLoop: _render_for_loop,
    If: _render_if,
    Block: _render_block,
}


def symbol_list(node: Node, depth: int = 0) -> list[Fragment]:
    """Pretty-print *node* as fragments, each tagged with its originating node."""
    handler = _RENDER_DISPATCH.get(type(node))
    if handler is None:
        raise UnsupportedNode(f"Cannot render {node!r}", node)
    return handler(node, depth)


def render_program(statements: Sequence[Statement]) -> list[Fragment]:
    """Render top-level statements, one per line."""
    fragments: list[Fragment] = []
    for stmt in statements:
        fragments.extend(symbol_list(stmt))
        fragments.append(Fragment("\n"))
    return fragments


def stringify(fragments: Sequence[Fragment]) -> str:
    return "".join(f.text for f in fragments)


# ── Range mapping ────────────────────────────────────────────────


def find_range(
    fragments: Sequence[Fragment], node: Node
) -> Optional[HighlightRange]:
    """Inclusive index range of the fragments that render *node*.

    Identifier objects are shared between positions, so they cannot anchor
    the search: the anchor is the first fragment produced by a non-identifier
    descendant. From there the range grows over any descendant, identifiers
    included. Returns None when *node* is not rendered in *fragments*.
    """
    descendants = flatten(node)
    members = {id(n) for n in descendants}
    anchors = {id(n) for n in descendants if not is_identifier(n)}
    if not anchors:
        # A bare identifier can only anchor on itself
        anchors = {id(node)}

    middle = next(
        (i for i, f in enumerate(fragments) if id(f.node) in anchors), None
    )
    if middle is None:
        return None

    start = middle
    while start > 0 and id(fragments[start - 1].node) in members:
        start -= 1

    end = middle
    while end + 1 < len(fragments) and id(fragments[end + 1].node) in members:
        end += 1

    return HighlightRange(start=start, end=end)


def transform_range(
    range_: HighlightRange,
    fragments: Sequence,
    transform: Callable[[Sequence], Sequence],
) -> HighlightRange:
    """Re-express *range_* in the indexing of ``transform(fragments)``.

    *transform* must map a prefix of its input to a prefix of its output,
    which holds for any per-item expansion such as syntax tagging.
    """
    start = len(transform(fragments[: range_.start]))
    end = len(transform(fragments[: range_.end + 1]))
    return HighlightRange(start=start, end=end - 1)


def symbol_map(node: Node, fragments: Sequence[Fragment]) -> list[tuple[Node, int, int]]:
    """Character span ``[start, end)`` of every non-identifier node under *node*."""
    offsets: list[tuple[Fragment, int, int]] = []
    counter = 0
    for fragment in fragments:
        offsets.append((fragment, counter, counter + len(fragment.text)))
        counter += len(fragment.text)

    result: list[tuple[Node, int, int]] = []
    for target in flatten(node):
        if is_identifier(target):
            continue
        members = {id(n) for n in flatten(target) if not is_identifier(n)}
        spans = [(s, e) for f, s, e in offsets if id(f.node) in members]
        if spans:
            result.append(
                (target, min(s for s, _ in spans), max(e for _, e in spans))
            )
    return result


def character_range(
    fragments: Sequence[Fragment], node: Node
) -> Optional[tuple[int, int]]:
    """Character span ``[start, end)`` of *node* within ``stringify(fragments)``."""
    found = find_range(fragments, node)
    if found is None:
        return None
    start = len(stringify(fragments[: found.start]))
    end = len(stringify(fragments[: found.end + 1]))
    return start, end
