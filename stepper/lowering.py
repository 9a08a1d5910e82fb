"""Lowering — structured statements to a flat, label-addressed IR sequence."""

from __future__ import annotations

import itertools
import logging
from typing import Callable, Sequence

from . import constants
from .errors import UnsupportedNode
from .nodes import (
    Block,
    Declaration,
    ExpressionStatement,
    ForLoop,
    If,
    IRStatement,
    Statement,
    conditional_jump,
    jump,
    label,
    undeclaration,
)

logger = logging.getLogger(__name__)

# Shared across Lowerer instances so no two lowering calls produce the same label.
_label_ids = itertools.count()


class Lowerer:
    """Turns nested block / if / for structure into a linear IR sequence.

    ``ExpressionStatement`` and ``Declaration`` nodes are emitted as-is (the
    same objects), so the evaluator's current statement can always be found
    again in the source-shaped tree by identity.
    """

    def __init__(self):
        self._statements: list[IRStatement] = []
        self._STMT_DISPATCH: dict[type, Callable] = {
            ExpressionStatement: self._lower_simple,
            Declaration: self._lower_simple,
            Block: self._lower_block,
            If: self._lower_if,
            ForLoop: self._lower_for,
        }

    # ── helpers ──────────────────────────────────────────────────

    def _fresh_label(self, prefix: str) -> str:
        return f"{prefix}_{next(_label_ids)}"

    def _emit(self, stmt: IRStatement) -> IRStatement:
        self._statements.append(stmt)
        return stmt

    # ── entry point ──────────────────────────────────────────────

    def lower(self, program: Sequence[Statement]) -> list[IRStatement]:
        self._statements = []
        for stmt in program:
            self._lower_stmt(stmt)
        logger.info(
            "Lowered %d statements into %d IR statements",
            len(program),
            len(self._statements),
        )
        return self._statements

    # ── dispatchers ──────────────────────────────────────────────

    def _lower_stmt(self, node: Statement):
        handler = self._STMT_DISPATCH.get(type(node))
        if handler is None:
            raise UnsupportedNode(f"Cannot lower {node!r}", node)
        handler(node)

    def _lower_simple(self, node: Statement):
        self._emit(node)

    def _lower_block(self, node: Block):
        for child in node.statements:
            self._lower_stmt(child)
        # Identifiers declared directly in the block leave scope with it
        for child in node.statements:
            if isinstance(child, Declaration):
                self._emit(undeclaration(child.identifier))

    def _lower_if(self, node: If):
        true_label = self._fresh_label(constants.IF_TRUE_LABEL_PREFIX)
        false_label = self._fresh_label(constants.IF_FALSE_LABEL_PREFIX)
        end_label = self._fresh_label(constants.IF_END_LABEL_PREFIX)

        self._emit(conditional_jump(node.condition, true_label, false_label, node))
        self._emit(label(true_label))
        self._lower_stmt(node.body)
        self._emit(jump(end_label))
        # No else branch: the false path falls straight through to the end
        self._emit(label(false_label))
        self._emit(jump(end_label))
        self._emit(label(end_label))

    def _lower_for(self, node: ForLoop):
        begin_label = self._fresh_label(constants.FOR_BEGIN_LABEL_PREFIX)
        body_label = self._fresh_label(constants.FOR_BODY_LABEL_PREFIX)
        end_label = self._fresh_label(constants.FOR_END_LABEL_PREFIX)

        self._lower_stmt(node.initializer)
        self._emit(label(begin_label))
        condition = node.condition
        if isinstance(condition, ExpressionStatement) and condition.value is not None:
            self._emit(conditional_jump(condition.value, body_label, end_label, condition))
        else:
            self._emit(jump(body_label))
        self._emit(label(body_label))
        self._lower_stmt(node.body)
        self._lower_stmt(node.update)
        # Loops back to the condition check, not the body
        self._emit(jump(begin_label))
        self._emit(label(end_label))
        if isinstance(node.initializer, Declaration):
            self._emit(undeclaration(node.initializer.identifier))


def lower(program: Sequence[Statement]) -> list[IRStatement]:
    """Lower a program (a sequence of source-shaped statements) to IR."""
    return Lowerer().lower(program)
