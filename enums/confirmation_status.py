from __future__ import annotations

from enum import Enum


class ConfirmationStatus(str, Enum):
    """Terminal status of a submitted transaction."""

    CONFIRMED = "confirmed"
    FAILED = "failed"
