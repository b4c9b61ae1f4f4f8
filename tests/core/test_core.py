"""Tests for errors, settings and logging."""

import json
import logging

import pytest

from numtower.core import config
from numtower.core.config import Settings
from numtower.core.errors import (
    CoercionError,
    DivisionByZeroError,
    NonTerminatingDecimalError,
    NotCoprimeError,
    NumericError,
    PrecisionError,
    UnsupportedOperationError,
)
from numtower.core.logging import StructuredFormatter, TextFormatter, get_context_logger, get_logger, setup_logging
from numtower.numerics import IntegerImpl, NumericHierarchy


class TestErrors:
    """Error hierarchy and structured details."""

    def test_hierarchy(self):
        """Errors also subclass the matching builtin exceptions."""
        assert issubclass(DivisionByZeroError, ZeroDivisionError)
        assert issubclass(NonTerminatingDecimalError, ArithmeticError)
        assert issubclass(PrecisionError, ValueError)
        assert issubclass(NotCoprimeError, ArithmeticError)
        for error in (CoercionError, UnsupportedOperationError, DivisionByZeroError, PrecisionError):
            assert issubclass(error, NumericError)

    def test_coercion_message_names_both_kinds(self):
        """The message and details name both kinds."""
        error = CoercionError("Cannot coerce", IntegerImpl(3), NumericHierarchy.REAL)
        assert error.message == "Cannot coerce (from IntegerImpl to REAL)"
        assert error.details == {"source": "IntegerImpl", "target": "REAL"}
        assert error.source == IntegerImpl(3)

    def test_coercion_to_unknown_target(self):
        """A missing target is reported as unknown."""
        error = CoercionError("Cannot coerce", IntegerImpl(3), None)
        assert error.details["target"] == "unknown"

    def test_default_division_message(self):
        """Division errors have a default message."""
        assert str(DivisionByZeroError()) == "Cannot divide by zero"

    def test_non_terminating_details(self):
        """The dividend and divisor are kept as strings."""
        error = NonTerminatingDecimalError(1, 3)
        assert error.details == {"dividend": "1", "divisor": "3"}
        assert "1/3" in error.message

    def test_precision_error_names_algorithm(self):
        """The message starts with the algorithm name."""
        assert str(PrecisionError("Square root")).startswith("Square root requires")


class TestSettings:
    """Environment-driven settings."""

    def test_defaults(self):
        """Defaults without any environment."""
        settings = Settings()
        assert settings.DEFAULT_PRECISION == 34
        assert settings.DIVISION_BY_ZERO_POLICY == "throw"
        assert settings.COMPLEX_EQUALITY_GUARD_DIGITS == 2

    def test_environment_overrides(self, monkeypatch):
        """NUMTOWER_ variables override the defaults."""
        monkeypatch.setenv("NUMTOWER_DEFAULT_PRECISION", "50")
        monkeypatch.setenv("NUMTOWER_DIVISION_BY_ZERO_POLICY", "signed_infinity")
        settings = Settings()
        assert settings.DEFAULT_PRECISION == 50
        assert settings.DIVISION_BY_ZERO_POLICY == "signed_infinity"

    def test_settings_are_cached(self):
        """get_settings() builds the settings once."""
        assert config.get_settings() is config.get_settings()


class TestLogging:
    """Library logging and formatters."""

    def test_context_logger_merges_extra_data(self, caplog):
        """Fixed context and per-call data end up on the record."""
        caplog.set_level(logging.DEBUG, logger="numtower")
        logger = get_context_logger("numtower.tests", constant="pi")
        logger.debug("Computed constant", extra_data={"precision": 10})

        record = caplog.records[-1]
        assert record.getMessage() == "Computed constant"
        assert record.extra_data == {"constant": "pi", "precision": 10}

    def test_structured_formatter(self):
        """Context fields sit at the top level of the JSON."""
        record = logging.LogRecord("numtower.tests", logging.INFO, __file__, 1, "hello", None, None)
        record.extra_data = {"precision": 10}
        payload = json.loads(StructuredFormatter().format(record))
        assert payload["message"] == "hello"
        assert payload["level"] == "INFO"
        assert payload["precision"] == 10

    def test_text_formatter_appends_context(self):
        """Context is appended as key=value pairs."""
        record = logging.LogRecord("numtower.tests", logging.DEBUG, __file__, 1, "Computed constant", None, None)
        record.extra_data = {"constant": "e", "terms": 12}
        line = TextFormatter().format(record)
        assert line.endswith("Computed constant [constant=e terms=12]")

    def test_loggers_are_nested_under_the_package(self):
        """Foreign names are moved under numtower."""
        assert get_logger("numtower.numerics.real").name == "numtower.numerics.real"
        assert get_logger("scratch").name == "numtower.scratch"

    @pytest.mark.parametrize("log_format,formatter", [("json", StructuredFormatter), ("text", TextFormatter)])
    def test_setup_logging(self, monkeypatch, log_format, formatter):
        """The configured format picks the formatter."""
        monkeypatch.setattr(config.settings, "LOG_FORMAT", log_format)
        monkeypatch.setattr(config.settings, "LOG_LEVEL", "DEBUG")
        root = logging.getLogger("numtower")
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            setup_logging()
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, formatter)
            assert root.level == logging.DEBUG
        finally:
            for handler in list(root.handlers):
                root.removeHandler(handler)
            for handler in saved_handlers:
                root.addHandler(handler)
            root.setLevel(saved_level)

    def test_constant_creation_is_logged(self, caplog):
        """Creating a constant emits a debug record."""
        from numtower.numerics import Pi

        caplog.set_level(logging.DEBUG, logger="numtower")
        Pi.get_instance(8)
        assert any("Created Pi" in record.getMessage() for record in caplog.records)
