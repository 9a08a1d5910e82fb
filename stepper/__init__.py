"""Program stepper package."""

from .evaluator import initial_state, step  # noqa: F401
from .lowering import lower  # noqa: F401
from .run import execute, execute_traced  # noqa: F401
from .api import (  # noqa: F401
    lower_program,
    dump_ir,
    ir_stats,
    execute_program,
    get_highlighted_symbols,
    render_state,
)
