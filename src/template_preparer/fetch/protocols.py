"""Abstract interface for cloning template repositories."""

import logging
from pathlib import Path
from typing import Optional, Protocol

from template_preparer.core.credentials import Credentials


class RepositoryCloner(Protocol):
    """Abstract interface for fetching a repository snapshot into a directory."""

    async def clone(
        self,
        url: str,
        target_directory: Path,
        credentials: Optional[Credentials] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Clone ``url`` into ``target_directory``.

        Args:
            url: Transport URL of the repository
            target_directory: Existing, empty directory to clone into
            credentials: Optional username/secret pair; None for anonymous access
            logger: Logger for progress messages

        Raises:
            FetchError: If the repository cannot be fetched
        """
        ...
