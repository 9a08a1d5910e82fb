"""Pure functions for computing statistics over lowered IR programs."""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from stepper.nodes import IRStatement


def count_statement_kinds(program: Sequence[IRStatement]) -> dict[str, int]:
    """Return a frequency map of IR statement kinds in the given program.

    Args:
        program: A lowered IR statement sequence.

    Returns:
        A dict mapping class names (``"Label"``, ``"Jump"``, ...) to their
        occurrence counts. Empty dict for an empty program.
    """
    return dict(Counter(type(stmt).__name__ for stmt in program))
