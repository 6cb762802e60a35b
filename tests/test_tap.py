"""test_tap.py - Unit tests for make_tap() / log_tap.

Covers:
    - the tap returns the very same object it was given
    - the value is logged at INFO to the "logtap" logger by default
    - default options append the caller's location
    - a string option is a label and disables the location
    - TapOptions combines label and location explicitly
    - falsy values are still logged
    - the record is attributed to the caller (filename / lineno)
    - make_tap() binds other levels and loggers, and rejects unknown methods
"""

import logging
import sys

import pytest

from logtap.tap import TAP_METHODS, TapOptions, log_tap, make_tap


@pytest.fixture(autouse=True)
def _capture_taps(caplog):
    caplog.set_level(logging.DEBUG, logger="logtap")


# ---------------------------------------------------------------------------
# Return value
# ---------------------------------------------------------------------------


class TestReturnValue:
    def test_returns_the_value(self, caplog):
        """tap(x) evaluates to x."""
        assert log_tap("value") == "value"

    def test_returns_the_same_object(self, caplog):
        """The value is passed through, not copied."""
        items = [1, 2, 3]
        assert log_tap(items) is items

    def test_works_inline_in_an_expression(self, caplog):
        """A tap can sit in the middle of an expression chain."""
        result = max(n for n in log_tap([1, 2, 3, 4, 5], "numbers") if n % 2)
        assert result == 5
        assert caplog.records[0].getMessage() == "numbers [1, 2, 3, 4, 5]"


# ---------------------------------------------------------------------------
# Message format
# ---------------------------------------------------------------------------


class TestMessage:
    def test_logs_the_value_with_location_by_default(self, caplog):
        """No options: value followed by '- file:line'."""
        _, line = log_tap("value"), sys._getframe().f_lineno
        assert caplog.records[0].getMessage() == f"value - test_tap.py:{line}"

    def test_string_option_is_a_label_without_location(self, caplog):
        """A bare string prefixes the value and turns the location off."""
        log_tap(42, "answer")
        assert caplog.records[0].getMessage() == "answer 42"

    def test_options_label_and_location(self, caplog):
        """TapOptions can ask for both a label and a location."""
        _, line = log_tap(42, TapOptions(label="answer")), sys._getframe().f_lineno
        assert caplog.records[0].getMessage() == f"answer 42 - test_tap.py:{line}"

    def test_options_without_location(self, caplog):
        log_tap(42, TapOptions(location=False))
        assert caplog.records[0].getMessage() == "42"

    @pytest.mark.parametrize("value", [0, "", None, False, []])
    def test_falsy_values_are_still_logged(self, caplog, value):
        """Only the label and location are optional, never the value."""
        log_tap(value, TapOptions(location=False))
        assert caplog.records[0].args == (value,)

    def test_value_is_a_lazy_logging_argument(self, caplog):
        """Values containing % are not treated as format directives."""
        log_tap("100%", "progress")
        assert caplog.records[0].msg == "%s %s"
        assert caplog.records[0].getMessage() == "progress 100%"

    def test_invalid_options_type(self, caplog):
        with pytest.raises(TypeError, match="tap options must be"):
            log_tap(1, {"label": "x"})


# ---------------------------------------------------------------------------
# Logger routing
# ---------------------------------------------------------------------------


class TestRouting:
    def test_default_logger_and_level(self, caplog):
        log_tap("value")
        assert caplog.records[0].name == "logtap"
        assert caplog.records[0].levelno == logging.INFO

    def test_record_points_at_the_caller(self, caplog):
        """stacklevel makes %(filename)s/%(lineno)d name the tap call-site."""
        _, line = log_tap("value", "x"), sys._getframe().f_lineno
        assert caplog.records[0].filename == "test_tap.py"
        assert caplog.records[0].lineno == line
        assert caplog.records[0].funcName == "test_record_points_at_the_caller"

    @pytest.mark.parametrize("method", ["debug", "info", "warning", "error", "critical"])
    def test_make_tap_binds_the_level(self, caplog, method):
        tap = make_tap(method)
        assert tap("v", "label") == "v"
        assert caplog.records[0].levelno == TAP_METHODS[method]

    def test_make_tap_with_custom_logger(self, caplog):
        logger = logging.getLogger("myapp.taps")
        caplog.set_level(logging.DEBUG, logger="myapp.taps")
        make_tap("debug", logger)("v", "label")
        assert caplog.records[0].name == "myapp.taps"
        assert caplog.records[0].levelno == logging.DEBUG

    def test_tap_name_reflects_the_method(self):
        assert make_tap("warning").__name__ == "warning_tap"

    def test_unknown_method_rejected(self):
        """Misconfiguration fails when the tap is built, not when it is used."""
        with pytest.raises(ValueError, match="unsupported logger method 'log'"):
            make_tap("log")

    def test_respects_logger_level(self, caplog):
        """Below the logger's level nothing is emitted, the value still returns."""
        caplog.set_level(logging.WARNING, logger="logtap")
        assert log_tap("quiet") == "quiet"
        assert caplog.records == []
