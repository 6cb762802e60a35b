"""location.py - Call-site labels for tap output.

``get_location()`` walks up the interpreter stack and renders the frame of
interest as ``"- file.py:42"``, which the tap helper appends to its log line
so the output says where ``tap`` was called from.

The lookup is positional: callers must know how many wrapper frames sit
between themselves and the user code, and pass that as ``depth``.
"""

import os
import sys

UNKNOWN_LOCATION = "- <unknown>"


def get_location(depth: int = 0) -> str:
    """Return ``"- <basename>:<lineno>"`` for a frame above the caller.

    Args:
        depth: Number of frames to skip above the caller of this function.
            ``0`` describes the caller itself, ``1`` the caller's caller,
            and so on.

    Returns:
        The base name of the frame's file and its current line number, or
        ``UNKNOWN_LOCATION`` when the stack is not that deep.

    Example:
        >>> get_location()   # called from line 3 of app.py
        '- app.py:3'
    """
    if depth < 0:
        raise ValueError(f"depth must be >= 0, got {depth}")
    try:
        frame = sys._getframe(depth + 1)
    except ValueError:
        return UNKNOWN_LOCATION
    try:
        filename = os.path.basename(frame.f_code.co_filename)
        return f"- {filename}:{frame.f_lineno}"
    finally:
        del frame
