"""Service layer helpers (project persistence, settings)."""

from .projects import JsonFileStorage, KeyValueStorage, MemoryStorage, Project, ProjectStore
from .settings import SecretVault, Settings, SettingsStore

__all__ = [
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "Project",
    "ProjectStore",
    "SecretVault",
    "Settings",
    "SettingsStore",
]
