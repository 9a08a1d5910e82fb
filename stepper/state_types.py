"""Evaluator data types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .nodes import Constant, IRStatement, Node

# identifier name -> bound value; never mutated, always rebuilt
Environment = dict[str, Constant]


@dataclass(frozen=True)
class EvaluationState:
    """One snapshot of a stepping session.

    ``program_counter`` indexes ``program``; ``None`` means the program has
    terminated. ``active_node`` is the current statement as reduced so far; it
    starts out as the statement itself and is replaced by a progressively more
    constant copy on each step.
    """

    program: tuple[IRStatement, ...]
    program_counter: Optional[int]
    active_node: Optional[Node]
    environment: Environment = field(default_factory=dict)
    output: str = ""

    @property
    def statement(self) -> Optional[IRStatement]:
        if self.program_counter is None:
            return None
        return self.program[self.program_counter]

    @property
    def terminated(self) -> bool:
        return self.program_counter is None


@dataclass(frozen=True)
class Reduction:
    """Result of reducing an expression by one primitive step."""

    node: Node
    environment: Environment
    output: str = ""
