"""
Verbosity-gated logging for the render pipeline

main() connects its ProgramState once; after that the parser, renderer
and CLI stages call LOG() without being handed the state. Messages go
to stderr through loguru so rendered posts on stdout stay clean.

Usage:
    from pagewright.lib.log import LOG, WARN, state_connectToLogger

    # In main(), before pipeline(state, env_check, site_load, ...):
    state_connectToLogger(state)

    # In any stage or library call made under that state:
    LOG(f"Loaded {len(partials)} partials from {directory}", level=1)
    LOG(f"{source_name}: 3 directives found", level=2)
    WARN(f"{source_name}:7: leaving unsupported directive '<%= link_to ... %>'")
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

# One stderr sink; rendered output never goes through loguru
logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <7}</level> │ "
    "<cyan>{function: <20}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """Make a ProgramState's verbosity visible to LOG() and WARN() in this context"""
    _program_state.set(state)


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log a pipeline message if the connected state's verbosity reaches level

    Nothing is logged while no state is connected, so library calls made
    outside the CLI (tests, embedding callers) stay quiet.

    Args:
        message: Log message to display
        level: Minimum verbosity required (1 = stage summaries,
               2 = per-post detail with -v, 3 = scanner trace with -vv)
        **kwargs: Additional loguru metadata
    """
    state = _program_state.get()

    if state and hasattr(state, 'verbosity') and state.verbosity >= level:
        logger.opt(depth=1).debug(message, **kwargs)


def WARN(message: str, **kwargs: Any) -> None:
    """
    Warn about a directive left unrendered

    Emitted when no state is connected or verbosity is at least 1;
    a state with verbosity 0 silences it.
    """
    state = _program_state.get()

    if state is None or getattr(state, 'verbosity', 1) >= 1:
        logger.opt(depth=1).warning(message, **kwargs)
