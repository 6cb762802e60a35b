"""test_console.py - Unit tests for Console and TapMethod.

Covers:
    - every supported level is exposed as a TapMethod with a tap attribute
    - calling a method forwards to the logger (args, kwargs, level)
    - records from plain calls point at the caller
    - method.tap logs at that method's level and returns the value
    - a wrapped logger receives everything; the default is "logtap"
"""

import logging
import sys

import pytest

from logtap import Console, TapMethod, console
from logtap.tap import TAP_METHODS


@pytest.fixture(autouse=True)
def _capture(caplog):
    caplog.set_level(logging.DEBUG, logger="logtap")
    caplog.set_level(logging.DEBUG, logger="console.custom")


class TestConsoleShape:
    def test_every_level_has_a_tap_method(self):
        for name in TAP_METHODS:
            method = getattr(console, name)
            assert isinstance(method, TapMethod)
            assert callable(method.tap)

    def test_default_logger(self):
        assert console.logger is logging.getLogger("logtap")

    def test_wrapped_logger(self):
        logger = logging.getLogger("console.custom")
        assert Console(logger).logger is logger


class TestPlainCalls:
    def test_forwards_message_and_args(self, caplog):
        console.info("loaded %d rows", 3)
        assert caplog.records[0].getMessage() == "loaded 3 rows"
        assert caplog.records[0].levelno == logging.INFO

    def test_forwards_keyword_arguments(self, caplog):
        console.warning("slow", extra={"elapsed": 2.5})
        assert caplog.records[0].elapsed == 2.5
        assert caplog.records[0].levelno == logging.WARNING

    def test_record_points_at_the_caller(self, caplog):
        _, line = console.debug("here"), sys._getframe().f_lineno
        assert caplog.records[0].filename == "test_console.py"
        assert caplog.records[0].lineno == line

    def test_exception_includes_traceback(self, caplog):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            console.exception("failed")
        assert caplog.records[0].levelno == logging.ERROR
        assert caplog.records[0].exc_info[0] is RuntimeError


class TestTaps:
    @pytest.mark.parametrize("name", ["debug", "info", "warning", "error", "critical"])
    def test_tap_logs_at_the_method_level(self, caplog, name):
        value = {"id": 7}
        assert getattr(console, name).tap(value, "row") is value
        assert caplog.records[0].levelno == TAP_METHODS[name]
        assert caplog.records[0].getMessage() == "row {'id': 7}"

    def test_tap_location_points_at_the_caller(self, caplog):
        _, line = console.info.tap("v"), sys._getframe().f_lineno
        assert caplog.records[0].getMessage() == f"v - test_console.py:{line}"
        assert caplog.records[0].lineno == line

    def test_tap_uses_the_wrapped_logger(self, caplog):
        custom = Console(logging.getLogger("console.custom"))
        assert custom.error.tap(0, "count") == 0
        assert caplog.records[0].name == "console.custom"
        assert caplog.records[0].getMessage() == "count 0"
