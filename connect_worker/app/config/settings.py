from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CLIENT_ID_PLACEHOLDER = "{CLIENT_ID}"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    broker_connection_string: str = Field(..., validation_alias="BROKER_CONNECTION_STRING")
    queue_name: str = Field(..., validation_alias="QUEUE_NAME")
    prefetch_count: int = Field(10, validation_alias="PREFETCH_COUNT")
    consumer_backend: str = Field("rabbitmq", validation_alias="CONSUMER_BACKEND")

    client_id: str = Field(CLIENT_ID_PLACEHOLDER, validation_alias="DS_CLIENT_ID")
    impersonated_user_guid: str = Field("", validation_alias="DS_IMPERSONATED_USER_GUID")
    auth_server: str = Field("account-d.docusign.com", validation_alias="DS_AUTH_SERVER")
    oauth_consent_redirect_uri: str = Field(
        "https://www.docusign.com",
        validation_alias="DS_OAUTH_CONSENT_REDIRECT_URI",
    )
    private_key_path: str = Field("", validation_alias="DS_PRIVATE_KEY_PATH")
    private_key: str = Field("", validation_alias="DS_PRIVATE_KEY")

    debug: bool = Field(False, validation_alias="DEBUG")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")

    # Listener loop timing, in seconds.
    poll_interval_seconds: float = Field(5.0, validation_alias="POLL_INTERVAL_SECONDS")
    settle_delay_seconds: float = Field(5.0, validation_alias="SETTLE_DELAY_SECONDS")
    start_failure_delay_seconds: float = Field(5.0, validation_alias="START_FAILURE_DELAY_SECONDS")

    # Exit code when the credential check fails. 0 reproduces the legacy behaviour.
    readiness_failure_exit_code: int = Field(1, validation_alias="READINESS_FAILURE_EXIT_CODE")

    notification_forward_url: str = Field("", validation_alias="NOTIFICATION_FORWARD_URL")
    http_connect_timeout_seconds: float = Field(5.0, validation_alias="HTTP_CONNECT_TIMEOUT_SECONDS")
    http_read_timeout_seconds: float = Field(15.0, validation_alias="HTTP_READ_TIMEOUT_SECONDS")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    def resolve_private_key(self) -> str:
        """Return the RSA private key, preferring the inline value over the key file."""
        if self.private_key:
            return self.private_key.replace("\\n", "\n")
        if self.private_key_path:
            return Path(self.private_key_path).read_text(encoding="utf-8")
        return ""
