"""Worker-level constants shared across modules."""
from __future__ import annotations


class READINESS_STATUS:
    READY = "READY"
    CONFIGURATION_MISSING = "CONFIGURATION_MISSING"
    CONSENT_REQUIRED = "CONSENT_REQUIRED"
    API_ERROR = "API_ERROR"


class DEAD_LETTER_REASON:
    NULL_BODY = "Null body"
    MALFORMED_BODY = "Malformed body"


CONSENT_REQUIRED_ERROR_CODE = "consent_required"
# Pre-encoded: appended verbatim to the consent URL query string.
CONSENT_SCOPES = "signature%20impersonation"
