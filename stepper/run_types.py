"""Run loop data types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StepperConfig:
    """Groups run loop configuration."""

    max_steps: int = 1000
    verbose: bool = False


@dataclass
class ExecutionStats:
    """Returned execution metrics from execute."""

    steps: int = 0
    terminated: bool = False
    output_length: int = 0
    final_variable_count: int = 0
