"""Hashing of identifiers before they reach log lines."""

from __future__ import annotations

import hashlib
from typing import Any

_DIGEST_LENGTH = 12


def safe_log_identifier(value: Any, *, prefix: str) -> str:
    """Return ``<prefix>-<digest>`` for a user id, resource id or email.

    Values are case-folded first so ``Jane@X`` and ``jane@x`` correlate in logs.
    """
    text = str(value or "").strip().casefold()
    if not text:
        return f"{prefix}-missing"
    return f"{prefix}-{hashlib.sha256(text.encode('utf-8')).hexdigest()[:_DIGEST_LENGTH]}"
