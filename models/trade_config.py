"""
Immutable trading configuration.

Amounts are expressed in the smallest unit of their asset (lamports for SOL,
raw token units for the destination mint). Durations are in seconds.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

SOL_MINT = "11111111111111111111111111111111"
PUMP_MINT = "pumpCmXqMfrsAkQ5r49WcJnRayYRqmXz6ae8H7H9Dfn"


class TradeConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    from_token: str = SOL_MINT
    to_token: str = PUMP_MINT
    amount: int = Field(100_000_000, gt=0)
    min_expected_amount: int = Field(1_000_000, ge=0)
    slippage: str = "2"
    check_interval: float = Field(60.0, ge=0)
    trade_cooldown: float = Field(300.0, ge=0)
    max_daily_trades: int = Field(20, ge=0)

    fee_reserve: int = Field(10_000_000, ge=0)
    failure_backoff: float = Field(15.0, ge=0)
    error_backoff: float = Field(30.0, ge=0)

    chain_id: str = "501"
    api_base_url: str = "https://www.okx.com/api/v5/dex/aggregator"
    rpc_url: str = "https://api.mainnet-beta.solana.com"
    commitment: str = "confirmed"
    confirm_poll_interval: float = Field(2.0, ge=0)
    confirm_max_attempts: int = Field(30, gt=0)
    request_timeout: float = Field(10.0, gt=0)
    wallet_path: str = "account.txt"
    explorer_url: str = "https://solscan.io/tx/"

    @field_validator("slippage", mode="before")
    @classmethod
    def _check_slippage(cls, v):
        try:
            pct = float(v)
        except (TypeError, ValueError):
            raise ValueError(f"slippage must be a number, got {v!r}")
        if not 0 < pct <= 100:
            raise ValueError(f"slippage must be in (0, 100], got {pct}")
        return str(v).strip()

    @field_validator("commitment")
    @classmethod
    def _check_commitment(cls, v: str) -> str:
        v = v.lower()
        if v not in ("processed", "confirmed", "finalized"):
            raise ValueError(f"unsupported commitment {v!r}")
        return v

    @property
    def required_balance(self) -> int:
        """Lamports the wallet must hold before a trade is attempted."""
        return self.amount + self.fee_reserve
