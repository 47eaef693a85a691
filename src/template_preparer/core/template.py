"""Template descriptor model and parsing."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from template_preparer.errors import ConfigurationError

LOCATION_ANNOTATION = "backstage.io/managed-by-location"


@dataclass
class TemplateDescriptor:
    """A scaffolder template as seen by the preparer stage.

    Attributes:
        name: Template name from ``metadata.name``
        annotations: Entity annotations, including the location annotation
        path: Optional path into the fetched tree (``spec.path``)
    """

    name: str
    annotations: dict[str, str] = field(default_factory=dict)
    path: Optional[str] = None

    def __post_init__(self):
        """Reject names that cannot be used as a directory prefix."""
        if not self.name:
            raise ConfigurationError("Template is missing metadata.name")
        if "/" in self.name or "\\" in self.name or self.name in (".", ".."):
            raise ConfigurationError(
                f"Template name '{self.name}' cannot be used as a directory name"
            )

    @property
    def location(self) -> Optional[str]:
        """Raw value of the location annotation, if present."""
        return self.annotations.get(LOCATION_ANNOTATION)

    def with_location(self, location: str) -> "TemplateDescriptor":
        """Return a copy with the location annotation set."""
        annotations = dict(self.annotations)
        annotations[LOCATION_ANNOTATION] = location
        return TemplateDescriptor(name=self.name, annotations=annotations, path=self.path)

    @classmethod
    def from_entity(cls, entity: dict[str, Any]) -> "TemplateDescriptor":
        """Create a descriptor from a Template entity mapping."""
        if not isinstance(entity, dict):
            raise ConfigurationError("Template entity must be a mapping")

        metadata = entity.get("metadata") or {}
        spec = entity.get("spec") or {}
        annotations = metadata.get("annotations") or {}

        return cls(
            name=metadata.get("name", ""),
            annotations={str(k): str(v) for k, v in annotations.items()},
            path=spec.get("path"),
        )

    @classmethod
    def from_yaml_file(cls, file_path: Path) -> "TemplateDescriptor":
        """Load a descriptor from a Template entity YAML file."""
        with open(file_path, "r") as f:
            entity = yaml.safe_load(f)
        return cls.from_entity(entity or {})
