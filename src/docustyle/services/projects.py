"""Saved-project persistence backed by a durable key-value storage."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Protocol

from ..errors import InvalidNameError, NotFoundError, PersistedStateCorruptError
from ..layout.models import LayoutModel
from ..utils import file_io

__all__ = [
    "PROJECTS_KEY",
    "Project",
    "KeyValueStorage",
    "JsonFileStorage",
    "MemoryStorage",
    "ProjectStore",
]

LOGGER = logging.getLogger(__name__)
PROJECTS_KEY = "docustyle_projects"


class KeyValueStorage(Protocol):
    """Minimal durable storage used by :class:`ProjectStore`."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStorage:
    """In-process storage, handy for tests and throwaway sessions."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonFileStorage:
    """Stores each key as ``<directory>/<key>.json`` with atomic writes."""

    def __init__(self, directory: Path | str | None = None) -> None:
        self._directory = file_io.ensure_data_dir(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return file_io.read_text(path)
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        file_io.write_text(self.path_for(key), value)


@dataclass(slots=True, frozen=True)
class Project:
    """Named snapshot of a layout and its content."""

    id: str
    name: str
    settings: LayoutModel
    content: str
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "settings": self.settings.to_dict(),
            "content": self.content,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Project":
        settings = payload.get("settings")
        if not isinstance(settings, Mapping):
            raise ValueError("Project payload missing 'settings'")
        return cls(
            id=str(payload["id"]),
            name=str(payload["name"]),
            settings=LayoutModel.from_dict(settings),
            content=str(payload.get("content") or ""),
            timestamp=int(payload.get("timestamp") or 0),
        )


class ProjectStore:
    """Newest-first list of saved projects, persisted as one JSON blob."""

    def __init__(
        self,
        storage: KeyValueStorage | None = None,
        *,
        key: str = PROJECTS_KEY,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._storage = storage or MemoryStorage()
        self._key = key
        self._clock = clock or time.time_ns
        self._last_id = 0
        self._projects: List[Project] = self._read_projects()

    def list(self) -> List[Project]:
        return list(self._projects)

    def save(self, name: str, settings: LayoutModel, content: str) -> Project:
        cleaned = (name or "").strip()
        if not cleaned:
            raise InvalidNameError()
        now_ns = self._clock()
        project = Project(
            id=self._next_id(now_ns),
            name=cleaned,
            settings=settings,
            content=content,
            timestamp=now_ns // 1_000_000,
        )
        self._projects.insert(0, project)
        self._persist()
        LOGGER.debug("Saved project %s (%s); %d stored", project.id, project.name, len(self._projects))
        return project

    def get(self, project_id: str) -> Project:
        for project in self._projects:
            if project.id == project_id:
                return project
        raise NotFoundError.for_project(project_id)

    def load(self, project_id: str) -> tuple[LayoutModel, str]:
        project = self.get(project_id)
        return project.settings, project.content

    def delete(self, project_id: str) -> None:
        remaining = [project for project in self._projects if project.id != project_id]
        if len(remaining) == len(self._projects):
            return
        self._projects = remaining
        self._persist()
        LOGGER.debug("Deleted project %s; %d stored", project_id, len(self._projects))

    def _next_id(self, now_ns: int) -> str:
        candidate = max(now_ns // 1_000, self._last_id + 1)
        self._last_id = candidate
        return str(candidate)

    def _persist(self) -> None:
        payload = [project.to_dict() for project in self._projects]
        self._storage.set(self._key, json.dumps(payload, ensure_ascii=False))

    def _read_projects(self) -> List[Project]:
        try:
            raw = self._storage.get(self._key)
        except OSError as exc:
            self._report_corrupt(f"storage read failed: {exc}")
            return []
        if not raw:
            return []
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            self._report_corrupt(f"invalid JSON: {exc}")
            return []
        if not isinstance(payload, list):
            self._report_corrupt(f"expected a list, found {type(payload).__name__}")
            return []

        projects: List[Project] = []
        for index, entry in enumerate(payload):
            if not isinstance(entry, Mapping):
                LOGGER.warning("Skipping saved project #%d: not an object", index)
                continue
            try:
                projects.append(Project.from_dict(entry))
            except (KeyError, TypeError, ValueError) as exc:
                LOGGER.warning("Skipping saved project #%d: %s", index, exc)
        for project in projects:
            if project.id.isdigit():
                self._last_id = max(self._last_id, int(project.id))
        return projects

    def _report_corrupt(self, reason: str) -> None:
        error = PersistedStateCorruptError(details={"key": self._key, "reason": reason})
        LOGGER.warning("%s; starting with an empty project list (%s)", error, reason)
