"""tap.py - Log a value and hand it straight back.

Logging calls return ``None``, so logging an intermediate value normally
means breaking an expression apart into statements. A tap function logs its
argument and returns it unchanged, which lets it sit inline::

    from logtap import log_tap

    total = sum(log_tap([p.price for p in cart], "prices"))

Output format:
    ``[label] value [- file.py:line]``, joined by single spaces. The label is
    omitted when empty, the location when disabled.

Taps log through the standard ``logging`` module. Each record is attributed
to the caller of the tap (``stacklevel=2``), so ``%(filename)s`` and
``%(lineno)d`` in a formatter point at user code rather than this module.
"""

import logging
from typing import Any, Callable, Optional, Union

from .location import get_location

DEFAULT_LOGGER_NAME = "logtap"
DEFAULT_METHOD = "info"

# Logger methods a tap can be bound to, with the level each one emits at.
TAP_METHODS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "exception": logging.ERROR,
}


class TapOptions:
    """Label and location settings for a single tap call.

    Attributes:
        label (str): Text logged before the value. Empty means no label.
        location (bool): Whether to append the caller's ``file:line``.
    """

    __slots__ = ("label", "location")

    def __init__(self, label: str = "", location: bool = True) -> None:
        self.label = label
        self.location = location

    @classmethod
    def coerce(cls, options: Union[None, str, "TapOptions"]) -> "TapOptions":
        """Normalise the ``options`` argument accepted by tap functions.

        ``None`` gives the defaults (no label, location on). A bare string is
        taken as the label and turns the location off.
        """
        if options is None:
            return cls()
        if isinstance(options, str):
            return cls(label=options, location=False)
        if isinstance(options, cls):
            return options
        raise TypeError(
            f"tap options must be a str or TapOptions, got {type(options).__name__}"
        )

    def __repr__(self) -> str:  # pragma: no cover
        return f"TapOptions(label={self.label!r}, location={self.location!r})"


def check_method(method: str) -> str:
    """Return ``method`` if a tap can be bound to it, else raise ValueError."""
    if method not in TAP_METHODS:
        choices = ", ".join(sorted(TAP_METHODS))
        raise ValueError(f"unsupported logger method {method!r} (expected one of: {choices})")
    return method


def make_tap(
    method: str = DEFAULT_METHOD, logger: Optional[logging.Logger] = None
) -> Callable[..., Any]:
    """Build a tap function bound to one logger method.

    Args:
        method: Name of the ``logging.Logger`` method used to emit the value,
            e.g. ``"debug"`` or ``"warning"``. Defaults to ``"info"``.
        logger: Logger to write to. When omitted, ``logging.getLogger("logtap")``
            is looked up on every call, so later logging configuration applies.

    Returns:
        ``tap(value, options=None)``, which logs ``value`` and returns it.

    Raises:
        ValueError: If ``method`` is not one of ``TAP_METHODS``.

    Example:
        >>> warn_tap = make_tap("warning")
        >>> warn_tap(3, "retries left")
        3
    """
    check_method(method)

    def tap(value: Any, options: Union[None, str, TapOptions] = None) -> Any:
        opts = TapOptions.coerce(options)
        parts = [value]
        if opts.label:
            parts.insert(0, opts.label)
        if opts.location:
            # depth=1 skips this function and lands on whoever called tap().
            parts.append(get_location(depth=1))

        log = logger if logger is not None else logging.getLogger(DEFAULT_LOGGER_NAME)
        getattr(log, method)(" ".join(["%s"] * len(parts)), *parts, stacklevel=2)
        return value

    tap.__name__ = f"{method}_tap"
    tap.__qualname__ = tap.__name__
    return tap


log_tap = make_tap()
