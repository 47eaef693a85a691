"""Git clone primitive built on GitPython."""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import quote, urlsplit, urlunsplit

import git
from anyio import to_thread

from template_preparer.core.credentials import Credentials
from template_preparer.errors import FetchError

module_logger = logging.getLogger(__name__)

SECRET_MASK = "***"


def with_credentials(url: str, credentials: Optional[Credentials]) -> str:
    """Embed credentials into an http(s) URL as percent-encoded userinfo."""
    if credentials is None:
        return url

    parts = urlsplit(url)
    if parts.scheme not in ("http", "https"):
        return url

    host = parts.netloc.rpartition("@")[2]
    userinfo = f"{quote(credentials.username, safe='')}:{quote(credentials.secret, safe='')}"
    return urlunsplit(parts._replace(netloc=f"{userinfo}@{host}"))


def mask_secret(message: str, credentials: Optional[Credentials]) -> str:
    """Replace every occurrence of the secret (plain or URL-encoded) in a message."""
    if credentials is None or not credentials.secret:
        return message
    for value in {credentials.secret, quote(credentials.secret, safe="")}:
        message = message.replace(value, SECRET_MASK)
    return message


class GitCloner:
    """Clone repositories with the git command line through GitPython."""

    def __init__(self, depth: Optional[int] = 1):
        """Initialize git cloner.

        Args:
            depth: Clone depth; None for a full clone
        """
        self.depth = depth
        self._env = {"GIT_TERMINAL_PROMPT": "0"}

    async def clone(
        self,
        url: str,
        target_directory: Path,
        credentials: Optional[Credentials] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Clone a repository into an existing directory.

        Raises:
            FetchError: If git fails, with any secret masked from the message
        """
        log = logger or module_logger
        log.info("Cloning %s into %s", url, target_directory)

        options = {}
        if self.depth is not None:
            options["depth"] = self.depth

        clone_url = with_credentials(url, credentials)

        def _clone() -> None:
            repo = git.Repo.clone_from(
                clone_url, str(target_directory), env=self._env, **options
            )
            # The remote must not keep the credentialed URL in .git/config
            if clone_url != url:
                repo.remotes.origin.set_url(url)

        try:
            await to_thread.run_sync(_clone)
        except (git.GitCommandError, OSError) as e:
            raise FetchError(mask_secret(f"Failed to clone {url}: {e}", credentials)) from None

        log.info("Cloned %s", url)
