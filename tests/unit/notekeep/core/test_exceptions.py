"""
Unit Tests for Custom Exceptions.
"""

import pytest

from notekeep.core.exceptions import (
    ApplicationError,
    StorageError,
    ValidationError,
)


class TestApplicationError:
    """Tests for the base exception."""

    def test_message_and_default_code(self):
        error = ApplicationError("boom")
        assert error.message == "boom"
        assert error.code == "SYS_INTERNAL_ERROR"
        assert str(error) == "boom"


class TestSubclasses:
    """Tests for the specific error types."""

    @pytest.mark.parametrize(
        ("error", "code", "message"),
        [
            (StorageError(), "SYS_STORAGE_ERROR", "Storage error"),
            (ValidationError(), "VAL_VALIDATION_ERROR", "Validation failed"),
        ],
    )
    def test_default_message_and_code(self, error, code, message):
        assert isinstance(error, ApplicationError)
        assert error.code == code
        assert error.message == message

    def test_validation_error_details(self):
        error = ValidationError("Empty", details={"missing_fields": ["title"]})
        assert error.details == {"missing_fields": ["title"]}

    def test_validation_error_details_default_empty(self):
        assert ValidationError("Empty").details == {}
