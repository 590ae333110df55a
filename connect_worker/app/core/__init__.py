"""Worker core: shared identity used by log helpers across modules."""
from __future__ import annotations

SERVICE_NAME = "connect-worker"
