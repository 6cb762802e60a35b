"""logtap/__init__.py - Public API for the logtap package.

logtap logs values inline: a tap logs its argument and returns it unchanged,
so an expression can be observed without being broken into statements.

Quick start:
    import logging
    from logtap import log_tap, console

    logging.basicConfig(level=logging.DEBUG)

    # 1. Log a value in the middle of an expression (INFO, with call-site)
    total = sum(log_tap([1, 2, 3]))

    # 2. Add a label (a string label turns the call-site off)
    total = sum(log_tap([1, 2, 3], "items"))

    # 3. Pick a level through the console wrapper
    rows = console.debug.tap(load_rows(), "rows")

    # 4. Or expand tap() call-sites at build time so the shipped code calls
    #    logging directly (see logtap.macro and `python -m logtap`)
    from logtap.macro import tap
    total = sum(tap([1, 2, 3], "items"))

Exported names:
    log_tap:      Default tap, logs at INFO to the "logtap" logger.
    make_tap:     Build a tap bound to another logger method or logger.
    TapOptions:   Label/location options for a tap call.
    Console:      Logger wrapper whose level methods each carry a ``tap``.
    console:      Default Console instance.
    get_location: ``"- file.py:line"`` for a frame on the current stack.
"""

from .console import Console, TapMethod, console
from .location import get_location
from .tap import TapOptions, log_tap, make_tap

__all__ = [
    "log_tap",
    "make_tap",
    "TapOptions",
    "Console",
    "TapMethod",
    "console",
    "get_location",
]
__version__ = "0.1.0"
