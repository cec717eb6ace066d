"""
Error taxonomy for the swap bot.

Every error raised on the trade path derives from ``TradeError`` so the
orchestrator can turn it into a logged, non-fatal outcome. ``CredentialError``
is the only fatal condition and is raised before the loop starts.
"""

from __future__ import annotations

from typing import Optional


class BotError(Exception):
    """Root of every error raised by the bot."""

    kind = "bot error"

    def __str__(self) -> str:
        msg = super().__str__()
        return msg or self.kind

    def describe(self) -> str:
        return f"{self.kind}: {self}"


class CredentialError(BotError):
    kind = "credential error"


class TradeError(BotError):
    """Non-fatal failure of a quote, balance, build, submit or confirm step."""

    kind = "trade error"


class QuoteError(TradeError):
    kind = "quote error"


class SwapBuildError(TradeError):
    kind = "swap build error"


class SubmissionError(TradeError):
    kind = "submission error"


class LedgerUnavailable(TradeError):
    kind = "ledger unavailable"


class ConfirmationError(TradeError):
    kind = "confirmation error"

    def __init__(self, message: str, tx_id: str, receipt: Optional[object] = None) -> None:
        super().__init__(message)
        self.tx_id = tx_id
        self.receipt = receipt


class ConfirmationTimeout(TradeError):
    kind = "confirmation timeout"

    def __init__(self, message: str, tx_id: str) -> None:
        super().__init__(message)
        self.tx_id = tx_id
