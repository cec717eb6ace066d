from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from enums.confirmation_status import ConfirmationStatus


class SwapReceipt(BaseModel):
    """Outcome of a submitted swap as reported by the ledger."""

    model_config = ConfigDict(frozen=True)

    tx_id: str
    status: ConfirmationStatus
    reason: Optional[str] = None
    settled_amount: Optional[int] = None

    @property
    def confirmed(self) -> bool:
        return self.status is ConfirmationStatus.CONFIRMED
