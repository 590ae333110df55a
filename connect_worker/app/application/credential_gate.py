"""Pre-flight credential check: make sure an access token can be obtained before listening.

Failures are classified so the operator gets an actionable diagnostic:
configuration missing, consent required (with the consent URL to open) or any
other structured API error. Errors without a structured body are not ours to
classify and are re-raised unchanged.
"""
from __future__ import annotations

import json
from typing import Any, Callable

from loguru import logger

from connect_worker.app.config.settings import CLIENT_ID_PLACEHOLDER
from connect_worker.app.constants import CONSENT_REQUIRED_ERROR_CODE, CONSENT_SCOPES, READINESS_STATUS
from connect_worker.app.core import SERVICE_NAME
from connect_worker.app.core.errors import CredentialApiError
from connect_worker.app.domain.models import ReadinessResult
from connect_worker.app.ports.credential_provider import CredentialProvider


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def build_consent_url(auth_server: str, client_id: str, redirect_uri: str) -> str:
    return (
        f"https://{auth_server}/oauth/auth?response_type=code&"
        f"scope={CONSENT_SCOPES}&client_id={client_id}&"
        f"redirect_uri={redirect_uri}"
    )


class CredentialGate:
    def __init__(
        self,
        provider: CredentialProvider,
        *,
        client_id: str,
        auth_server: str,
        consent_redirect_uri: str,
    ) -> None:
        self._provider = provider
        self._client_id = client_id
        self._auth_server = auth_server
        self._consent_redirect_uri = consent_redirect_uri

    @property
    def client_id_configured(self) -> bool:
        return bool(self._client_id) and self._client_id != CLIENT_ID_PLACEHOLDER

    async def check_readiness(self) -> ReadinessResult:
        if not self.client_id_configured:
            return ReadinessResult(status=READINESS_STATUS.CONFIGURATION_MISSING)

        try:
            await self._provider.check_token()
        except CredentialApiError as exc:
            if not exc.body:
                raise
            if exc.body.get("error") == CONSENT_REQUIRED_ERROR_CODE:
                return ReadinessResult(
                    status=READINESS_STATUS.CONSENT_REQUIRED,
                    consent_url=build_consent_url(
                        self._auth_server,
                        self._client_id,
                        self._consent_redirect_uri,
                    ),
                )
            return ReadinessResult(
                status=READINESS_STATUS.API_ERROR,
                status_code=exc.status_code,
                body=dict(exc.body),
            )
        return ReadinessResult(status=READINESS_STATUS.READY)


def describe_readiness_failure(result: ReadinessResult) -> str:
    if result.status == READINESS_STATUS.CONFIGURATION_MISSING:
        return (
            "\nProblem: the worker is not configured.\n"
            "         Set DS_CLIENT_ID and the other DS_* settings through environment\n"
            "         variables or the .env file. See the README for details.\n"
        )
    if result.status == READINESS_STATUS.CONSENT_REQUIRED:
        return (
            "\nProblem:   C O N S E N T   R E Q U I R E D\n"
            "    Ask the user who will be impersonated to open the following URL:\n"
            f"        {result.consent_url}\n\n"
            "    They will be asked to log in and approve access by this application.\n\n"
            "    Alternatively, an administrator can use Organization Administration to\n"
            "    pre-approve one or more users.\n"
        )
    return (
        f"\nAPI problem: status code {result.status_code}, message body:\n"
        f"{json.dumps(result.body, indent=4)}\n"
    )


async def ensure_ready(
    gate: CredentialGate,
    *,
    exit_code: int,
    emit: Callable[[str], None] = print,
) -> None:
    """Run the credential check; on a classified failure emit the diagnostic and exit."""
    result = await gate.check_readiness()
    if result.ready:
        _log("credential_check_passed")
        return
    _log("credential_check_failed", status=result.status, exit_code=exit_code)
    emit(describe_readiness_failure(result))
    raise SystemExit(exit_code)
