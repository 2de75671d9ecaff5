"""Data structure describing a document template."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

from ..layout.models import LayoutModel


@dataclass(slots=True, frozen=True)
class Template:
    """Immutable named pairing of a layout and seed content."""

    id: str
    name: str
    description: str
    icon: str
    settings: LayoutModel
    initial_content: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "settings": self.settings.to_dict(),
            "initialContent": self.initial_content,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Template":
        if "id" not in payload:
            raise ValueError("Template payload missing 'id'")
        settings = payload.get("settings")
        return cls(
            id=str(payload["id"]).strip().lower(),
            name=str(payload.get("name") or payload["id"]),
            description=str(payload.get("description") or ""),
            icon=str(payload.get("icon") or "fa-file"),
            settings=LayoutModel.from_dict(settings) if isinstance(settings, Mapping) else LayoutModel(),
            initial_content=str(payload.get("initialContent") or ""),
        )


__all__ = ["Template"]
