#
# Vardump Tools: call-site location for dump headers
#

# Standard library -----------------------------------------------------------------------------------------------------
import os
import sys
from types import FrameType

# Local ----------------------------------------------------------------------------------------------------------------
from .formatters import escape_control

MAX_FRAMES = 10
"""Frames examined when looking for the first caller outside vardump."""

PACKAGE = __name__.partition(".")[0]

# Frame accessor, replaceable in tests
_getframe = sys._getframe


# Methods --------------------------------------------------------------------------------------------------------------

def caller_location(skip: int = 0) -> tuple[str, int] | None:
    """
    File and line of a frame on the call stack.

    Args:
        skip: Number of frames to skip above the caller of this function;
              0 is the immediate caller.

    Returns:
        (filename, lineno), or None when the stack is not that deep.

    Raises:
        TypeError: If `skip` is not an int.
        ValueError: If `skip` is negative.
    """
    if not isinstance(skip, int) or isinstance(skip, bool):
        raise TypeError(f"skip must be an int, but got {type(skip).__name__}")
    if skip < 0:
        raise ValueError(f"skip must be >= 0, but got {skip}")

    frame = _frame(skip + 2)
    if frame is None:
        return None
    return frame.f_code.co_filename, frame.f_lineno


def find_external_caller(max_frames: int = MAX_FRAMES) -> tuple[str, int] | None:
    """
    Location of the nearest frame that does not belong to the vardump package.

    Walks outward from the caller of this function, looking at no more than
    `max_frames` frames.

    Returns:
        (filename, lineno) of the first external frame, or None if none was found
        within the lookback.
    """
    frame = _frame(2)
    for _ in range(max_frames):
        if frame is None:
            break
        if not _is_internal(frame):
            return frame.f_code.co_filename, frame.f_lineno
        frame = frame.f_back
    return None


def relative_path(path: str) -> str:
    """Path relative to the current working directory when resolvable, else unchanged."""
    try:
        return os.path.relpath(path, os.getcwd())
    except (OSError, ValueError):
        return path


def dump_header(location: tuple[str, int] | None) -> str | None:
    """
    Header line announcing where a dump was invoked from.

    Examples:
        >>> dump_header(("app/main.py", 12))
        '<#dump // app/main.py:12'
        >>> dump_header(None) is None
        True
    """
    if location is None:
        return None
    file, line = location
    return f"<#dump // {escape_control(relative_path(file))}:{line}"


# Private Methods ------------------------------------------------------------------------------------------------------

def _frame(depth: int) -> FrameType | None:
    try:
        return _getframe(depth)
    except ValueError:
        return None


def _is_internal(frame: FrameType) -> bool:
    module = frame.f_globals.get("__name__", "")
    if not isinstance(module, str):
        return False
    return module == PACKAGE or module.startswith(PACKAGE + ".")
