"""Run identifiers; a run id is also the stem of its log file under ``run_meta/``."""

from __future__ import annotations

import secrets
from datetime import datetime, timezone


def generate_run_id(now: datetime | None = None) -> str:
    """Sortable by start time; the random suffix separates runs started in the same second."""
    started_at = now or datetime.now(tz=timezone.utc)
    return f"run-{started_at:%Y%m%dT%H%M%SZ}-{secrets.token_hex(3)}"
