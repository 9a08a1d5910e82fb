"""Trace data types for step-by-step execution replay."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .run_types import ExecutionStats


@dataclass(frozen=True)
class TraceStep:
    """A single step in the execution trace.

    States are immutable, so ``state`` is the evaluator's own return value
    rather than a copy; the trace doubles as an undo history.
    """

    step_index: int
    program_counter: Optional[int]
    statement: Any  # IR statement that was stepped
    state: Any  # EvaluationState after the step


@dataclass(frozen=True)
class ExecutionTrace:
    """Complete trace of an execution run.

    Contains the initial EvaluationState (before any step) and a TraceStep
    for every step that was taken.
    """

    steps: list[TraceStep] = field(default_factory=list)
    stats: ExecutionStats = field(default_factory=ExecutionStats)
    initial_state: Any = None
