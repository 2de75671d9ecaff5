"""Error taxonomy shared by the AI orchestrator and the project store.

Every error carries a machine-readable ``error_code`` plus a human-readable
message and serializes consistently through :meth:`DocuStyleError.to_dict`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar


# -----------------------------------------------------------------------------
# Error Code Constants
# -----------------------------------------------------------------------------

class ErrorCode:
    """Constants for error codes surfaced to callers."""

    # Credential errors
    CONFIGURATION_REQUIRED = "configuration_required"
    CREDENTIAL_INVALID = "credential_invalid"

    # Operation errors
    TRANSIENT_FAILURE = "transient_failure"
    OPERATION_IN_PROGRESS = "operation_in_progress"

    # Project store errors
    INVALID_NAME = "invalid_name"
    NOT_FOUND = "not_found"
    PERSISTED_STATE_CORRUPT = "persisted_state_corrupt"


# -----------------------------------------------------------------------------
# Base Error Class
# -----------------------------------------------------------------------------

@dataclass
class DocuStyleError(Exception):
    """Base exception class for all DocuStyle errors.

    Attributes:
        error_code: Machine-readable error identifier.
        message: Human-readable error description.
        details: Additional structured error information.
        suggestion: Actionable guidance for recovery.
    """

    error_code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = ""

    severity: ClassVar[str] = "error"

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = dict(self.details)
        if self.suggestion:
            result["suggestion"] = self.suggestion
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# -----------------------------------------------------------------------------
# Credential / AI Errors
# -----------------------------------------------------------------------------

@dataclass
class ConfigurationRequiredError(DocuStyleError):
    """No usable AI credential is configured; raised before any network call."""

    error_code: str = field(default=ErrorCode.CONFIGURATION_REQUIRED)
    message: str = field(default="Configure an API key before using AI features")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Open the API configuration and select a key")


@dataclass
class CapabilityError(DocuStyleError):
    """Tagged failure reported by an AI capability."""

    capability: str = ""


@dataclass
class CredentialInvalidError(CapabilityError):
    """The configured credential was rejected by the AI backend."""

    error_code: str = field(default=ErrorCode.CREDENTIAL_INVALID)
    message: str = field(default="The API key is no longer valid or has expired")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Select the API key again")


@dataclass
class TransientOperationFailure(CapabilityError):
    """Any non-credential capability failure (network, quota, bad response)."""

    error_code: str = field(default=ErrorCode.TRANSIENT_FAILURE)
    message: str = field(default="The AI request failed")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Check the connection and retry the operation")

    severity: ClassVar[str] = "warning"


@dataclass
class OperationInProgressError(DocuStyleError):
    """A content-clobbering action was attempted while an AI call is in flight."""

    error_code: str = field(default=ErrorCode.OPERATION_IN_PROGRESS)
    message: str = field(default="An AI operation is already in progress")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Wait for the current operation to finish")


# -----------------------------------------------------------------------------
# Project Store Errors
# -----------------------------------------------------------------------------

@dataclass
class InvalidNameError(DocuStyleError):
    error_code: str = field(default=ErrorCode.INVALID_NAME)
    message: str = field(default="Project name must not be empty")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Provide a non-empty project name")


@dataclass
class NotFoundError(DocuStyleError):
    error_code: str = field(default=ErrorCode.NOT_FOUND)
    message: str = field(default="Project not found")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="List saved projects to find a valid id")

    @classmethod
    def for_project(cls, project_id: str) -> "NotFoundError":
        return cls(
            message=f"Project '{project_id}' not found",
            details={"project_id": project_id},
        )


@dataclass
class PersistedStateCorruptError(DocuStyleError):
    """Stored projects could not be parsed; the store recovers with an empty list."""

    error_code: str = field(default=ErrorCode.PERSISTED_STATE_CORRUPT)
    message: str = field(default="Saved projects could not be read")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="")

    severity: ClassVar[str] = "warning"


__all__ = [
    "CapabilityError",
    "ConfigurationRequiredError",
    "CredentialInvalidError",
    "DocuStyleError",
    "ErrorCode",
    "InvalidNameError",
    "NotFoundError",
    "OperationInProgressError",
    "PersistedStateCorruptError",
    "TransientOperationFailure",
]
