"""AI client, capabilities, credential tracking and orchestration."""

from .capabilities import DocumentCapabilities, ImagePayload
from .client import AIClient, ClientSettings
from .credentials import CredentialManager, CredentialState, SettingsCredentialProvider
from .orchestrator import AIOperationOrchestrator, Capability, OperationOutcome, OperationStatus

__all__ = [
    "AIClient",
    "AIOperationOrchestrator",
    "Capability",
    "ClientSettings",
    "CredentialManager",
    "CredentialState",
    "DocumentCapabilities",
    "ImagePayload",
    "OperationOutcome",
    "OperationStatus",
    "SettingsCredentialProvider",
]
