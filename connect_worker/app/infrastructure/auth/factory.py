"""Credential provider factory."""
from __future__ import annotations

from connect_worker.app.config.settings import Settings
from connect_worker.app.ports.credential_provider import CredentialProvider
from connect_worker.app.ports.http_client import AbstractHttpClient
from connect_worker.app.infrastructure.auth.jwt_grant_provider import JwtGrantCredentialProvider
from connect_worker.app.infrastructure.http.factory import request_timeout_from_settings


def create_credential_provider(
    settings: Settings,
    http_client: AbstractHttpClient,
) -> CredentialProvider:
    return JwtGrantCredentialProvider(
        http_client,
        client_id=settings.client_id,
        impersonated_user_guid=settings.impersonated_user_guid,
        auth_server=settings.auth_server,
        private_key_loader=settings.resolve_private_key,
        timeout=request_timeout_from_settings(settings),
    )
