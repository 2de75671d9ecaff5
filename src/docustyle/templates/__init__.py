"""Template catalog consolidating the predefined document presets."""

from .models import Template
from .catalog import (
    TemplateCatalog,
    apply_layout_only,
    apply_template,
    build_professional_template,
    build_simple_template,
    build_thesis_template,
    predefined_templates,
    template_catalog,
)

__all__ = [
    "Template",
    "TemplateCatalog",
    "apply_layout_only",
    "apply_template",
    "build_professional_template",
    "build_simple_template",
    "build_thesis_template",
    "predefined_templates",
    "template_catalog",
]
