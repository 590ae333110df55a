"""Port: credential collaborator used by the pre-flight readiness check."""
from __future__ import annotations

from typing import Protocol


class CredentialProvider(Protocol):
    async def check_token(self) -> None:
        """Make sure a usable access token is available.

        Raises CredentialApiError when the authorization server answers with a
        structured error body; any other exception means the request itself failed.
        """
        ...
