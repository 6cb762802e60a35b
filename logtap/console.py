"""console.py - A logger wrapper whose methods each carry a tap.

``Console`` wraps a ``logging.Logger`` (delegation, the logger does all the
work) and exposes its level methods as ``TapMethod`` objects. Each one logs
like the underlying method when called, and has a ``tap`` attribute that logs
a value at that level and returns it::

    from logtap import console

    console.info("starting")                      # plain log call
    rows = console.debug.tap(fetch_rows(), "rows")  # log inline, keep value
"""

import logging
from typing import Any, Optional

from .tap import DEFAULT_LOGGER_NAME, TAP_METHODS, make_tap


class TapMethod:
    """One logger method plus its ``tap`` variant.

    Attributes:
        name (str): The logger method this forwards to, e.g. ``"warning"``.
        tap: A tap function from ``make_tap(name, logger)``.
    """

    __slots__ = ("name", "tap", "_logger")

    def __init__(self, name: str, logger: Optional[logging.Logger] = None) -> None:
        self.name = name
        self._logger = logger
        self.tap = make_tap(name, logger)

    def __call__(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        """Forward to the logger method, attributing the record to the caller."""
        kwargs.setdefault("stacklevel", 2)
        logger = self._logger if self._logger is not None else logging.getLogger(DEFAULT_LOGGER_NAME)
        getattr(logger, self.name)(msg, *args, **kwargs)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<TapMethod {self.name}>"


class Console:
    """Delegating wrapper exposing ``debug``/``info``/... with taps attached.

    Args:
        logger: The logger to delegate to. Defaults to the ``"logtap"``
            logger, looked up on each call.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger
        for name in TAP_METHODS:
            setattr(self, name, TapMethod(name, logger))

    @property
    def logger(self) -> logging.Logger:
        if self._logger is not None:
            return self._logger
        return logging.getLogger(DEFAULT_LOGGER_NAME)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Console logger={self.logger.name!r}>"


console = Console()
