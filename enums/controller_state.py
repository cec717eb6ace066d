"""
States of the swap orchestrator loop.

IDLE -> EVALUATING -> (TRADING | IDLE) -> IDLE ..., with STOPPED terminal.
"""

from __future__ import annotations

from enum import Enum


class ControllerState(str, Enum):
    IDLE = "idle"
    EVALUATING = "evaluating"
    TRADING = "trading"
    STOPPED = "stopped"
