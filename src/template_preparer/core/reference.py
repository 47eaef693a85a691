"""Parser for remote repository references.

This module turns the target of a location annotation into its components:
- Host, owner and repository name
- Git reference (branch/tag/commit) when the URL names one
- Path of the referenced file inside the repository
- A canonical transport URL for cloning
"""

import re
from dataclasses import dataclass
from typing import Literal, Optional
from urllib.parse import parse_qs, urlparse

from template_preparer.errors import ConfigurationError

# Path segments that separate "<owner>/<repo>" from "<ref>/<filepath>"
BROWSE_MARKERS = ("src", "raw", "tree", "blob")

# scp-like syntax: [user@]host:path, but not scheme://
_SCP_PATTERN = re.compile(r"^(?:[\w.+-]+@)?(?P<host>[\w.-]+):(?!//)(?!\d+/)(?P<path>.+)$")

TRANSPORT_SCHEMES = ("https", "http", "ssh")


@dataclass(frozen=True)
class RepositoryReference:
    """A parsed remote repository reference.

    Attributes:
        source: The reference string as given
        host: Host name, including a port if one was given
        owner: Owner, workspace, group path or Bitbucket Server project key
        name: Repository name without ``.git``
        ref: Branch/tag/commit named by the URL, if any; clones use the default branch
        filepath: Path of the referenced file inside the repository
        git_suffix: Whether the source spelled the repository with ``.git``
        kind: ``bitbucket-server`` for ``/projects/.../repos/...`` URLs
    """

    source: str
    host: str
    owner: str
    name: str
    ref: Optional[str] = None
    filepath: str = ""
    git_suffix: bool = False
    kind: Literal["generic", "bitbucket-server"] = "generic"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def to_transport_url(self, scheme: str = "https") -> str:
        """Render the canonical clone URL for this repository.

        Any credentials present in the source reference are dropped.

        Raises:
            ConfigurationError: If the scheme is not supported
        """
        if scheme not in TRANSPORT_SCHEMES:
            raise ConfigurationError(f"Unsupported transport scheme: {scheme}")

        if self.kind == "bitbucket-server":
            repo_path = f"scm/{self.owner}/{self.name}.git"
        else:
            suffix = ".git" if self.git_suffix else ""
            repo_path = f"{self.full_name}{suffix}"

        if scheme == "ssh":
            return f"ssh://git@{self.host}/{repo_path}"
        return f"{scheme}://{self.host}/{repo_path}"


def _split_name(name: str) -> tuple[str, bool]:
    if name.endswith(".git"):
        return name[: -len(".git")], True
    return name, False


def _from_parts(
    source: str, host: str, parts: list[str], query: str = ""
) -> RepositoryReference:
    # Bitbucket Server: /projects/<KEY>/repos/<repo>[/browse|raw/<filepath>]
    if len(parts) >= 4 and parts[0] == "projects" and parts[2] == "repos":
        rest = parts[4:]
        filepath = "/".join(rest[1:]) if rest and rest[0] in ("browse", "raw") else ""
        ref = None
        at = parse_qs(query).get("at")
        if at:
            ref = re.sub(r"^refs/(heads|tags)/", "", at[0])
        name, _ = _split_name(parts[3])
        return RepositoryReference(
            source=source,
            host=host,
            owner=parts[1],
            name=name,
            ref=ref,
            filepath=filepath,
            git_suffix=True,
            kind="bitbucket-server",
        )

    # Bitbucket Server clone URL: /scm/<key>/<repo>.git
    if len(parts) == 3 and parts[0] == "scm":
        name, _ = _split_name(parts[2])
        return RepositoryReference(
            source=source,
            host=host,
            owner=parts[1],
            name=name,
            git_suffix=True,
            kind="bitbucket-server",
        )

    repo_parts = parts
    ref = None
    filepath = ""

    if "-" in parts:
        # GitLab: /<group>/<subgroup>/<repo>/-/blob/<ref>/<filepath>
        idx = parts.index("-")
        repo_parts = parts[:idx]
        rest = parts[idx + 1 :]
        if len(rest) >= 2 and rest[0] in BROWSE_MARKERS:
            ref = rest[1]
            filepath = "/".join(rest[2:])
    else:
        for i in range(2, len(parts) - 1):
            if parts[i] in BROWSE_MARKERS:
                repo_parts = parts[:i]
                ref = parts[i + 1]
                filepath = "/".join(parts[i + 2 :])
                break

    if len(repo_parts) < 2:
        raise ConfigurationError(
            f"Invalid repository reference: {source}. Expected owner/repo at minimum"
        )

    name, git_suffix = _split_name(repo_parts[-1])
    return RepositoryReference(
        source=source,
        host=host,
        owner="/".join(repo_parts[:-1]),
        name=name,
        ref=ref,
        filepath=filepath,
        git_suffix=git_suffix,
    )


def parse_repository_reference(location: str) -> RepositoryReference:
    """Parse a remote repository reference.

    Handles these formats:
    - https://bitbucket.org/workspace/repo/src/main/path/to/template.yaml
    - https://host/projects/KEY/repos/repo/browse/path/to/template.yaml
    - https://github.com/owner/repo/blob/main/template.yaml
    - https://gitlab.com/group/repo/-/blob/main/template.yaml
    - https://host/owner/repo.git
    - git@host:owner/repo.git

    Args:
        location: Reference string to parse

    Returns:
        RepositoryReference with components extracted

    Raises:
        ConfigurationError: If the reference cannot be parsed
    """
    location = location.strip()
    if not location:
        raise ConfigurationError("Empty repository reference")

    scp = _SCP_PATTERN.match(location)
    if scp:
        parts = [p for p in scp.group("path").split("/") if p]
        return _from_parts(location, scp.group("host"), parts)

    url = location
    if "://" not in url:
        url = f"https://{url}"

    parsed = urlparse(url)
    if not parsed.hostname:
        raise ConfigurationError(f"Invalid repository reference: {location}")

    try:
        port = parsed.port
    except ValueError as e:
        raise ConfigurationError(f"Invalid repository reference: {location}") from e

    host = parsed.hostname
    if port:
        host = f"{host}:{port}"

    parts = [p for p in parsed.path.split("/") if p]
    return _from_parts(location, host, parts, parsed.query)
