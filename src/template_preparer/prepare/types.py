"""Shared preparer types."""

import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from template_preparer.core.template import TemplateDescriptor


def _default_working_directory() -> Path:
    return Path(tempfile.gettempdir())


@dataclass
class PreparerOptions:
    """Per-invocation preparer configuration.

    Attributes:
        working_directory: Root under which checkout directories are created
        logger: Logger handle for progress messages
    """

    working_directory: Path = field(default_factory=_default_working_directory)
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("template_preparer")
    )


class PreparerBase(Protocol):
    """A pipeline stage that turns a template into a local directory."""

    async def prepare(self, template: TemplateDescriptor, opts: PreparerOptions) -> Path:
        """Materialize the template and return the directory holding it."""
        ...
