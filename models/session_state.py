"""
Mutable run state of the swap orchestrator.

Created when the orchestrator is built and discarded with it; nothing is
persisted. ``trade_count`` counts successful trades of the current run only.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SessionState:
    trade_count: int = 0
    running: bool = False
