"""Tree nodes: source-shaped statements, expressions and the lowered IR pseudo-statements.

Nodes are frozen dataclasses. Two nodes that print the same are still
different positions in the tree: every structural operation that needs to find
"this node" (substitution, range lookup, jump resolution by statement) compares
with ``is``, never with ``==``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from . import constants
from .errors import InvalidOperand


class BinaryOperator(str, Enum):
    AND = "and"
    LESS_THAN_OR_EQUAL = "less-than-or-equal"
    EQUAL = "equal"


# ── Expressions ──────────────────────────────────────────────────


@dataclass(frozen=True)
class Identifier:
    name: str

    def __post_init__(self):
        if not isinstance(self.name, str):
            raise InvalidOperand("name is not a string", self)


@dataclass(frozen=True)
class Constant:
    value: Any
    datatype: str

    def __post_init__(self):
        if self.datatype not in constants.DATATYPES:
            raise InvalidOperand(f"Unsupported datatype {self.datatype!r}", self)
        if self.datatype == constants.INT_TYPE and isinstance(self.value, bool):
            object.__setattr__(self, "value", int(self.value))
        if self.datatype == constants.INT_TYPE and not isinstance(self.value, int):
            raise InvalidOperand(f"{self.value!r} is not an int value", self)
        if self.datatype == constants.STRING_TYPE and not (
            self.value is None or isinstance(self.value, str)
        ):
            raise InvalidOperand(f"{self.value!r} is not a string value", self)


@dataclass(frozen=True)
class BinaryOp:
    operator: BinaryOperator
    left: Expression
    right: Expression

    def __post_init__(self):
        try:
            operator = BinaryOperator(self.operator)
        except ValueError as exc:
            raise InvalidOperand(f"Unknown operator {self.operator!r}", self) from exc
        object.__setattr__(self, "operator", operator)
        _require_expression(self.left, "left", self)
        _require_expression(self.right, "right", self)


@dataclass(frozen=True)
class Assign:
    identifier: Identifier
    value: Expression

    def __post_init__(self):
        _require_identifier(self.identifier, self)
        _require_expression(self.value, "value", self)


@dataclass(frozen=True)
class AddAssign:
    identifier: Identifier
    value: Expression

    def __post_init__(self):
        _require_identifier(self.identifier, self)
        _require_expression(self.value, "value", self)


@dataclass(frozen=True)
class Increment:
    identifier: Identifier

    def __post_init__(self):
        _require_identifier(self.identifier, self)


@dataclass(frozen=True)
class Invoke:
    identifier: Identifier
    arguments: tuple[Expression, ...] = ()

    def __post_init__(self):
        _require_identifier(self.identifier, self)
        object.__setattr__(self, "arguments", tuple(self.arguments))
        for arg in self.arguments:
            _require_expression(arg, "argument", self)


# ── Source-shaped statements ─────────────────────────────────────


@dataclass(frozen=True)
class ExpressionStatement:
    value: Optional[Expression] = None

    def __post_init__(self):
        if self.value is not None:
            _require_expression(self.value, "value", self)


@dataclass(frozen=True)
class Declaration:
    datatype: str
    identifier: Identifier
    value: Optional[Expression] = None

    def __post_init__(self):
        if self.datatype not in constants.C_TYPE_NAMES:
            raise InvalidOperand(f"Unsupported datatype {self.datatype!r}", self)
        _require_identifier(self.identifier, self)
        if self.value is not None:
            _require_expression(self.value, "value", self)


@dataclass(frozen=True)
class Block:
    statements: tuple[Statement, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "statements", tuple(self.statements))
        for stmt in self.statements:
            _require_statement(stmt, "statement", self)


@dataclass(frozen=True)
class ForLoop:
    initializer: Statement
    condition: Statement
    update: Statement
    body: Statement

    def __post_init__(self):
        _require_statement(self.initializer, "initializer", self)
        _require_statement(self.condition, "condition", self)
        _require_statement(self.update, "update", self)
        _require_statement(self.body, "body", self)


@dataclass(frozen=True)
class If:
    condition: Expression
    body: Statement

    def __post_init__(self):
        _require_expression(self.condition, "condition", self)
        _require_statement(self.body, "body", self)


# ── Lowered IR pseudo-statements ─────────────────────────────────


@dataclass(frozen=True)
class Label:
    name: str

    def __str__(self) -> str:
        return f"{self.name}:"


@dataclass(frozen=True)
class Jump:
    target: str

    def __str__(self) -> str:
        return f"jump {self.target}"


@dataclass(frozen=True)
class ConditionalJump:
    condition: Expression
    true_label: str
    false_label: str
    original_statement: Statement

    def __post_init__(self):
        _require_expression(self.condition, "condition", self)
        _require_statement(self.original_statement, "original_statement", self)


@dataclass(frozen=True)
class Undeclaration:
    identifier: Identifier

    def __post_init__(self):
        _require_identifier(self.identifier, self)

    def __str__(self) -> str:
        return f"undeclare {self.identifier.name}"


Expression = Union[Identifier, Constant, BinaryOp, Assign, AddAssign, Increment, Invoke]
Statement = Union[ExpressionStatement, Declaration, Block, ForLoop, If]
IRStatement = Union[
    ExpressionStatement, Declaration, Label, Jump, ConditionalJump, Undeclaration
]
Node = Union[Expression, Statement, Label, Jump, ConditionalJump, Undeclaration]

EXPRESSION_TYPES: tuple[type, ...] = (
    Identifier,
    Constant,
    BinaryOp,
    Assign,
    AddAssign,
    Increment,
    Invoke,
)
STATEMENT_TYPES: tuple[type, ...] = (
    ExpressionStatement,
    Declaration,
    Block,
    ForLoop,
    If,
)
IR_STATEMENT_TYPES: tuple[type, ...] = (
    ExpressionStatement,
    Declaration,
    Label,
    Jump,
    ConditionalJump,
    Undeclaration,
)


def _require_expression(node: Any, role: str, owner: Any):
    if not isinstance(node, EXPRESSION_TYPES):
        raise InvalidOperand(f"{role} is not an expression: {node!r}", owner)


def _require_statement(node: Any, role: str, owner: Any):
    if not isinstance(node, STATEMENT_TYPES):
        raise InvalidOperand(f"{role} is not a statement: {node!r}", owner)


def _require_identifier(node: Any, owner: Any):
    if not isinstance(node, Identifier):
        raise InvalidOperand(f"identifier is not an identifier: {node!r}", owner)


# ── Factories ────────────────────────────────────────────────────


def identifier(name: str) -> Identifier:
    return Identifier(name)


def constant(value: Any, datatype: str) -> Constant:
    return Constant(value, datatype)


def int_constant(value: int | bool) -> Constant:
    """Build an int constant; booleans become C truth values (1 / 0)."""
    if isinstance(value, bool):
        return Constant(1 if value else 0, constants.INT_TYPE)
    return Constant(value, constants.INT_TYPE)


def string_constant(value: Optional[str]) -> Constant:
    return Constant(value, constants.STRING_TYPE)


def void_constant() -> Constant:
    """The 'no value' result of a call; a fresh node each time."""
    return Constant(None, constants.VOID_TYPE)


def and_(left: Expression, right: Expression) -> BinaryOp:
    return BinaryOp(BinaryOperator.AND, left, right)


def less_than_or_equal(left: Expression, right: Expression) -> BinaryOp:
    return BinaryOp(BinaryOperator.LESS_THAN_OR_EQUAL, left, right)


def equal(left: Expression, right: Expression) -> BinaryOp:
    return BinaryOp(BinaryOperator.EQUAL, left, right)


def assign(identifier: Identifier, value: Expression) -> Assign:
    return Assign(identifier, value)


def add_assign(identifier: Identifier, value: Expression) -> AddAssign:
    return AddAssign(identifier, value)


def increment(identifier: Identifier) -> Increment:
    return Increment(identifier)


def invoke(identifier: Identifier, *arguments: Expression) -> Invoke:
    return Invoke(identifier, arguments)


def statement(value: Expression) -> ExpressionStatement:
    if value is None:
        raise InvalidOperand("value is not an expression: None")
    return ExpressionStatement(value)


def null_statement() -> ExpressionStatement:
    return ExpressionStatement(None)


def declaration(
    datatype: str, identifier: Identifier, value: Optional[Expression] = None
) -> Declaration:
    return Declaration(datatype, identifier, value)


def int_declaration(
    identifier: Identifier, value: Optional[Expression] = None
) -> Declaration:
    return Declaration(constants.INT_TYPE, identifier, value)


def string_declaration(
    identifier: Identifier, value: Optional[Expression] = None
) -> Declaration:
    return Declaration(constants.STRING_TYPE, identifier, value)


def block(*statements: Statement) -> Block:
    return Block(statements)


def for_loop(
    initializer: Statement, condition: Statement, update: Statement, body: Statement
) -> ForLoop:
    return ForLoop(initializer, condition, update, body)


def if_statement(condition: Expression, body: Statement) -> If:
    return If(condition, body)


def label(name: str) -> Label:
    return Label(name)


def jump(target: str) -> Jump:
    return Jump(target)


def conditional_jump(
    condition: Expression,
    true_label: str,
    false_label: str,
    original_statement: Statement,
) -> ConditionalJump:
    return ConditionalJump(condition, true_label, false_label, original_statement)


def undeclaration(identifier: Identifier) -> Undeclaration:
    return Undeclaration(identifier)
