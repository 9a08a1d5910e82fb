"""Error taxonomy for tree construction, lowering and evaluation.

Every error here signals an inconsistent tree or lowered program (or misuse of
the stepping API), never a runtime condition of the interpreted program.
Nothing in the package catches them; they propagate to the caller.
"""

from __future__ import annotations

from typing import Any


class StepperError(Exception):
    """Base class for all stepper errors."""

    def __init__(self, message: str, node: Any = None):
        super().__init__(message)
        self.message = message
        self.node = node

    def __str__(self) -> str:
        return self.message


class InvalidOperand(StepperError):
    """A constructor received the wrong kind of node or value."""


class UnsupportedNode(StepperError):
    """A rebuilder or reduction rule was applied to a variant it does not handle."""


class UndeclaredIdentifier(StepperError):
    """A name was read, assigned or incremented while not in scope."""

    def __init__(self, name: str, node: Any = None):
        super().__init__(f"Identifier '{name}' has not been declared", node)
        self.name = name


class AlreadyDeclared(StepperError):
    """A name was declared while already in scope."""

    def __init__(self, name: str, node: Any = None):
        super().__init__(f"Identifier '{name}' is already declared", node)
        self.name = name


class UnsupportedFunction(StepperError):
    """An invocation targeted something other than the built-in printf."""

    def __init__(self, name: str, node: Any = None):
        super().__init__(f"Unsupported function '{name}'", node)
        self.name = name


class MissingLabel(StepperError):
    """A jump target does not exist in the lowered program."""

    def __init__(self, name: str, node: Any = None):
        super().__init__(f"Label '{name}' does not exist in the lowered program", node)
        self.name = name


class ProgramTerminated(StepperError):
    """step() was called on a state that has no current statement."""

    def __init__(self):
        super().__init__("Program has terminated; there is nothing left to step")
