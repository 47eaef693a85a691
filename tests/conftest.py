"""Shared pytest fixtures for template preparer tests."""

import logging
from pathlib import Path
from typing import Optional

import pytest

from template_preparer.core.credentials import Credentials
from template_preparer.core.template import LOCATION_ANNOTATION, TemplateDescriptor
from template_preparer.prepare.types import PreparerOptions

BITBUCKET_LOCATION = (
    "url:https://bitbucket.org/my-workspace/templates/src/main/react-app/template.yaml"
)


class FakeCloner:
    """Records clone calls and writes a marker file instead of cloning."""

    def __init__(
        self,
        error: Optional[Exception] = None,
        files: Optional[dict] = None,
        symlinks: Optional[dict] = None,
    ):
        self.error = error
        self.files = files if files is not None else {"react-app/template.yaml": "kind: Template\n"}
        self.symlinks = symlinks or {}
        self.calls = []

    async def clone(
        self,
        url: str,
        target_directory: Path,
        credentials: Optional[Credentials] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.calls.append(
            {"url": url, "target_directory": target_directory, "credentials": credentials}
        )
        if self.error is not None:
            raise self.error
        for name, content in self.files.items():
            file_path = target_directory / name
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content)
        for name, target in self.symlinks.items():
            (target_directory / name).symlink_to(target, target_is_directory=True)


@pytest.fixture
def fake_cloner():
    """Provide a fake clone primitive."""
    return FakeCloner()


@pytest.fixture
def make_cloner():
    """Factory for fake clone primitives, optionally failing."""
    return FakeCloner


@pytest.fixture
def bitbucket_location():
    """Provide the default location annotation value."""
    return BITBUCKET_LOCATION


@pytest.fixture
def working_dir(tmp_path):
    """Provide an isolated working directory for checkouts."""
    work = tmp_path / "work"
    work.mkdir()
    return work


@pytest.fixture
def preparer_options(working_dir):
    """Provide options pointing at the sandboxed working directory."""
    return PreparerOptions(
        working_directory=working_dir,
        logger=logging.getLogger("template_preparer.tests"),
    )


@pytest.fixture
def make_template():
    """Factory for template descriptors with a location annotation."""

    def _make(
        name: str = "my-template",
        location: Optional[str] = BITBUCKET_LOCATION,
        path: Optional[str] = None,
    ) -> TemplateDescriptor:
        annotations = {LOCATION_ANNOTATION: location} if location is not None else {}
        return TemplateDescriptor(name=name, annotations=annotations, path=path)

    return _make


@pytest.fixture
def template_entity():
    """Provide a Template entity mapping."""
    return {
        "apiVersion": "backstage.io/v1alpha1",
        "kind": "Template",
        "metadata": {
            "name": "react-app",
            "annotations": {LOCATION_ANNOTATION: BITBUCKET_LOCATION},
        },
        "spec": {
            "type": "website",
            "path": "skeleton",
        },
    }
