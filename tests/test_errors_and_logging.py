# tests/test_errors_and_logging.py

"""
Tests for the ambient layers: the diagnostic report format shared by all
errors, and the package logging setup.
"""

import io
import logging

import pytest

from dspace_core import DesignSpaceError
from dspace_core.errors import Diagnosable, format_diagnostic_report
from dspace_core.log_config import PACKAGE_LOGGER_NAME, setup_logging
from dspace_core.mapping import MappingError, MappingErrorKind, MappingParsingError
from dspace_core.parameters import CircularParameterDependencyError, ParameterLookupError


def test_report_contains_context_and_sections():
    report = format_diagnostic_report(
        error_type="Mapping Not Found",
        details="line one\nline two",
        suggestion="Fix it.",
        context={'param_id': 'Mutation', 'class_name': 'x.Y'},
    )
    assert "Error Type:     Mapping Not Found" in report
    assert "Parameter:      Mutation" in report
    assert "Class:          x.Y" in report
    assert "  line two" in report
    assert "Suggestion:" in report


def test_mapping_error_converts_to_user_error():
    error = MappingError(param_id="p", kind=MappingErrorKind.CONSTRUCTOR_NOT_FOUND, details="none", class_name="Point")
    user_error = error.to_user_error()
    assert isinstance(user_error, DesignSpaceError)
    assert "Constructor Not Found" in str(user_error)


@pytest.mark.parametrize("error", [
    MappingError(param_id="p", kind=MappingErrorKind.ARGUMENT_MISMATCH, details="d"),
    MappingParsingError(details="d"),
    ParameterLookupError(param_id="p", details="d"),
    CircularParameterDependencyError(cycle=["a"]),
])
def test_every_error_family_is_diagnosable(error):
    assert isinstance(error, Diagnosable)
    assert "Details:" in error.get_diagnostic_report()


def test_cycle_message_closes_the_loop():
    error = CircularParameterDependencyError(cycle=["a", "b"])
    assert str(error) == "Circular dependency detected: a -> b -> a"


def test_setup_logging_configures_package_logger_only():
    stream = io.StringIO()
    root_handlers = list(logging.getLogger().handlers)

    package_logger = setup_logging("debug", stream=stream)
    logging.getLogger(f"{PACKAGE_LOGGER_NAME}.mapping").debug("hello from the resolver")

    assert package_logger.level == logging.DEBUG
    assert len(package_logger.handlers) == 1
    assert "hello from the resolver" in stream.getvalue()
    assert logging.getLogger().handlers == root_handlers
    setup_logging("WARNING")


def test_level_from_environment(monkeypatch):
    monkeypatch.setenv("DSPACE_CORE_LOG_LEVEL", "error")
    assert setup_logging().level == logging.ERROR
    setup_logging("WARNING")


def test_unknown_level_is_rejected():
    with pytest.raises(ValueError):
        setup_logging("chatty")
