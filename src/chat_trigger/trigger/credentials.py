from dataclasses import dataclass
from typing import Protocol

from ..config import BASIC_AUTH_PASSWORD, BASIC_AUTH_USER


@dataclass(frozen=True)
class BasicCredentials:
    username: str
    password: str


class CredentialProvider(Protocol):
    async def get_credentials(self) -> BasicCredentials | None: ...


class StaticCredentialProvider:
    """Serves a single credential pair, by default the one from the environment."""

    def __init__(self, username: str = BASIC_AUTH_USER, password: str = BASIC_AUTH_PASSWORD) -> None:
        self._credentials = BasicCredentials(username, password) if username else None

    async def get_credentials(self) -> BasicCredentials | None:
        return self._credentials
