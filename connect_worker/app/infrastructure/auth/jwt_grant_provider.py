"""Credential provider using the OAuth JWT bearer grant (client side only).

Builds an RS256 assertion signed with the integration's private key, exchanges
it at the authorization server's token endpoint and caches the access token
until shortly before it expires.
"""
from __future__ import annotations

import time
from typing import Any, Callable

import jwt
from loguru import logger

from connect_worker.app.core import SERVICE_NAME
from connect_worker.app.core.errors import CredentialApiError
from connect_worker.app.ports.http_client import AbstractHttpClient, RequestTimeout

JWT_BEARER_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
JWT_SCOPES = "signature impersonation"
ASSERTION_LIFETIME_SECONDS = 3600
# Tokens expiring within this window are replaced before use.
TOKEN_REPLACE_MARGIN_SECONDS = 600


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class JwtGrantCredentialProvider:
    """CredentialProvider implementation backed by the JWT bearer grant."""

    def __init__(
        self,
        http_client: AbstractHttpClient,
        *,
        client_id: str,
        impersonated_user_guid: str,
        auth_server: str,
        private_key_loader: Callable[[], str],
        timeout: RequestTimeout,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._http_client = http_client
        self._client_id = client_id
        self._impersonated_user_guid = impersonated_user_guid
        self._auth_server = auth_server
        self._private_key_loader = private_key_loader
        self._timeout = timeout
        self._clock = clock
        self._access_token: str | None = None
        self._expires_at = 0.0

    @property
    def access_token(self) -> str | None:
        return self._access_token

    @property
    def token_url(self) -> str:
        return f"https://{self._auth_server}/oauth/token"

    def _token_is_fresh(self, now: float) -> bool:
        return self._access_token is not None and now + TOKEN_REPLACE_MARGIN_SECONDS < self._expires_at

    def _build_assertion(self, now: float) -> str:
        private_key = self._private_key_loader()
        if not private_key:
            raise ValueError("private key is not configured")
        claims = {
            "iss": self._client_id,
            "sub": self._impersonated_user_guid,
            "aud": self._auth_server,
            "iat": int(now),
            "exp": int(now) + ASSERTION_LIFETIME_SECONDS,
            "scope": JWT_SCOPES,
        }
        return jwt.encode(claims, private_key, algorithm="RS256")

    async def check_token(self) -> None:
        now = self._clock()
        if self._token_is_fresh(now):
            return

        _log("token_requesting", auth_server=self._auth_server)
        response = await self._http_client.post(
            self.token_url,
            timeout=self._timeout,
            data={"grant_type": JWT_BEARER_GRANT_TYPE, "assertion": self._build_assertion(now)},
        )
        if response.status_code >= 400:
            raise CredentialApiError(response.status_code, _structured_body(response))

        payload = response.json()
        self._access_token = str(payload["access_token"])
        self._expires_at = now + int(payload.get("expires_in", ASSERTION_LIFETIME_SECONDS))
        _log("token_received", expires_in=int(self._expires_at - now))


def _structured_body(response: Any) -> dict[str, Any] | None:
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) and body else None
