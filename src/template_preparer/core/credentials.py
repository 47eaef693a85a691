"""Credential selection for repository checkouts."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

TOKEN_USERNAME = "x-token-auth"


class CredentialMode(str, Enum):
    """How a checkout authenticates against the remote."""

    APP_PASSWORD = "app_password"
    TOKEN = "token"
    ANONYMOUS = "anonymous"


@dataclass(frozen=True)
class Credentials:
    """A username/secret pair for a single fetch."""

    username: str
    secret: str = field(repr=False)


def select_credential_mode(
    username: Optional[str] = None,
    token: Optional[str] = None,
    app_password: Optional[str] = None,
) -> CredentialMode:
    """Pick the credential mode from the configured identity fields.

    Precedence: username + app password, then token, then anonymous.
    Empty strings count as unset.
    """
    if username and app_password:
        return CredentialMode.APP_PASSWORD
    if token:
        return CredentialMode.TOKEN
    return CredentialMode.ANONYMOUS


def select_credentials(
    username: Optional[str] = None,
    token: Optional[str] = None,
    app_password: Optional[str] = None,
) -> Optional[Credentials]:
    """Build the credentials to fetch with, or None for an anonymous fetch."""
    mode = select_credential_mode(username, token, app_password)

    if mode is CredentialMode.APP_PASSWORD:
        return Credentials(username=username, secret=app_password)
    if mode is CredentialMode.TOKEN:
        return Credentials(username=TOKEN_USERNAME, secret=token)
    return None
