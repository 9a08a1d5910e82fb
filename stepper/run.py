"""Orchestrator — drive the evaluator until termination or the step limit."""

from __future__ import annotations

import logging
from typing import Sequence

from .evaluator import initial_state, step
from .nodes import IRStatement
from .run_types import ExecutionStats, StepperConfig
from .state_types import EvaluationState
from .trace_types import ExecutionTrace, TraceStep

logger = logging.getLogger(__name__)


def _log_step(step_index: int, before: EvaluationState, after: EvaluationState):
    """Print verbose step-by-step execution info."""
    print(f"[step {step_index}] pc={before.program_counter}  {before.active_node!r}")
    if after.output != before.output:
        print(f"    stdout += {after.output[len(before.output):]!r}")
    if after.environment != before.environment:
        for name, value in after.environment.items():
            print(f"    {name} = {value.value!r}")
    if after.program_counter != before.program_counter:
        print(f"    → pc={after.program_counter}")


def _stats(steps: int, state: EvaluationState) -> ExecutionStats:
    return ExecutionStats(
        steps=steps,
        terminated=state.terminated,
        output_length=len(state.output),
        final_variable_count=len(state.environment),
    )


def execute(
    program: Sequence[IRStatement],
    config: StepperConfig = StepperConfig(),
) -> tuple[EvaluationState, ExecutionStats]:
    """Step a lowered program from its initial state until it terminates.

    Stops early after ``config.max_steps`` steps; the returned stats say
    whether the program actually terminated.

    Args:
        program: Lowered IR statements.
        config: Execution configuration (max_steps, verbose).

    Returns:
        Tuple of (final EvaluationState, ExecutionStats).
    """
    final_state, trace = execute_traced(program, config)
    return final_state, trace.stats


def execute_traced(
    program: Sequence[IRStatement],
    config: StepperConfig = StepperConfig(),
) -> tuple[EvaluationState, ExecutionTrace]:
    """Step a lowered program and record every intermediate state.

    Args:
        program: Lowered IR statements.
        config: Execution configuration (max_steps, verbose).

    Returns:
        Tuple of (final EvaluationState, ExecutionTrace).
    """
    logger.info(
        "Executing %d IR statements (max_steps=%d)", len(program), config.max_steps
    )
    start = initial_state(program)
    state = start
    trace_steps: list[TraceStep] = []

    for step_index in range(config.max_steps):
        if state.terminated:
            break
        new_state = step(state)
        if config.verbose:
            _log_step(step_index, state, new_state)
        trace_steps.append(
            TraceStep(
                step_index=step_index,
                program_counter=state.program_counter,
                statement=state.statement,
                state=new_state,
            )
        )
        state = new_state

    stats = _stats(len(trace_steps), state)
    if not state.terminated:
        logger.warning("Stopped after %d steps without terminating", stats.steps)
    logger.info("Execution finished: %d steps, terminated=%s", stats.steps, stats.terminated)

    if config.verbose:
        print(f"\n({stats.steps} steps)")

    return state, ExecutionTrace(steps=trace_steps, stats=stats, initial_state=start)
