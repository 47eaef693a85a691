"""Repository fetching."""

from template_preparer.fetch.git import GitCloner
from template_preparer.fetch.protocols import RepositoryCloner

__all__ = ["GitCloner", "RepositoryCloner"]
