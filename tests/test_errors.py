"""Tests for the error taxonomy."""

from __future__ import annotations

from docustyle.errors import (
    CapabilityError,
    ConfigurationRequiredError,
    CredentialInvalidError,
    DocuStyleError,
    ErrorCode,
    NotFoundError,
    OperationInProgressError,
    TransientOperationFailure,
)


def test_errors_carry_codes_and_render_consistently() -> None:
    error = ConfigurationRequiredError()

    assert isinstance(error, DocuStyleError)
    assert error.error_code == ErrorCode.CONFIGURATION_REQUIRED
    assert str(error) == f"[{ErrorCode.CONFIGURATION_REQUIRED}] {error.message}"
    assert error.to_dict()["suggestion"]


def test_capability_errors_are_tagged() -> None:
    invalid = CredentialInvalidError(capability="refine", details={"status_code": 401})
    transient = TransientOperationFailure(message="boom", capability="restructure")

    assert isinstance(invalid, CapabilityError)
    assert invalid.capability == "refine"
    assert invalid.to_dict()["details"] == {"status_code": 401}
    assert transient.error_code == ErrorCode.TRANSIENT_FAILURE
    assert transient.severity == "warning"
    assert invalid.severity == "error"


def test_not_found_for_project_names_the_id() -> None:
    error = NotFoundError.for_project("42")

    assert "42" in error.message
    assert error.details == {"project_id": "42"}


def test_operation_in_progress_is_raisable() -> None:
    try:
        raise OperationInProgressError()
    except DocuStyleError as exc:
        assert exc.error_code == ErrorCode.OPERATION_IN_PROGRESS
