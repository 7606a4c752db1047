"""
Centralized logging using Loguru with context-aware verbosity.

This module provides a LOG() function that respects the current ProgramState's
verbosity level without requiring explicit state passing.

Features:
- Context-aware logging tied to ProgramState verbosity
- Verbosity levels mapped onto loguru levels (INFO, DEBUG, TRACE)
- Thread-safe using contextvars; worker threads see the state as long as
  tasks run inside a copied context (see lib.site.tasks_run)
- Works throughout lib modules without passing state

Usage:
    from lib.log import LOG, state_connectToLogger

    # Once, at the start of the pipeline:
    state_connectToLogger(state)

    # Anywhere in that context:
    LOG("This message appears if verbosity >= 1", level=1)
    LOG("Debug details appear if verbosity >= 2", level=2)
    LOG("Per-document trace appears if verbosity >= 3", level=3)
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

# loguru level used for each verbosity level
_LEVEL_NAMES = {1: "INFO", 2: "DEBUG", 3: "TRACE"}

# Configure loguru with docweave-specific format
logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<cyan>{thread.name: <12}</cyan> │ "
    "<cyan>{function: <20}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.add(sys.stderr, format=logger_format, level="TRACE")


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    Call this once at the start of the pipeline to make the state's
    verbosity setting available to LOG() calls throughout that context.

    Args:
        state: ProgramState instance with verbosity attribute
    """
    _program_state.set(state)


def verbosity_get() -> int:
    """Verbosity of the connected state (0 when nothing is connected)"""
    state = _program_state.get()
    return getattr(state, 'verbosity', 0) if state is not None else 0


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=trace)
        **kwargs: Additional loguru formatting arguments

    Verbosity levels:
        1 = Normal output (default)
        2 = Verbose (-v)
        3 = Trace (-vv or higher)

    Example:
        LOG("Parsed 12 documents", level=1)
        LOG("Resolving 48 cross-references", level=2)
        LOG("guide/install.md: 9 top-level blocks", level=3)
    """
    if verbosity_get() >= level:
        level_name = _LEVEL_NAMES.get(level, "TRACE")
        # depth=1 reports the caller's function and line, not LOG itself
        logger.opt(depth=1).log(level_name, message, **kwargs)
