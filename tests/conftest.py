from __future__ import annotations

from typing import Callable, List, Optional

import pytest
from solders.keypair import Keypair

from enums.confirmation_status import ConfirmationStatus
from models.quote import Quote
from models.swap_receipt import SwapReceipt
from models.trade_config import TradeConfig


class FakeTimer:
    """Records requested waits; never sleeps. ``on_wait`` may request a stop."""

    def __init__(self, on_wait: Optional[Callable[[int, float], None]] = None) -> None:
        self.waits: List[float] = []
        self.cancelled = False
        self.on_wait = on_wait

    def wait(self, seconds: float) -> bool:
        self.waits.append(seconds)
        if self.on_wait:
            self.on_wait(len(self.waits), seconds)
        return self.cancelled

    def cancel(self) -> None:
        self.cancelled = True

    def reset(self) -> None:
        self.cancelled = False


class FakeQuotes:
    def __init__(self, to_amount: int = 2_000_000, error: Optional[Exception] = None) -> None:
        self.to_amount = to_amount
        self.error = error
        self.calls = 0

    def get_quote(self, from_token, to_token, amount, slippage) -> Quote:
        self.calls += 1
        if self.error:
            raise self.error
        return Quote(from_token=from_token, to_token=to_token, from_amount=amount, to_amount=self.to_amount)


class FakeLedger:
    def __init__(self, balance: int = 5_000_000_000, error: Optional[Exception] = None) -> None:
        self.balance = balance
        self.error = error
        self.calls = 0

    def get_balance(self, account) -> int:
        self.calls += 1
        if self.error:
            raise self.error
        return self.balance


class FakeTrader:
    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.calls = 0

    def execute(self, config, keypair) -> SwapReceipt:
        self.calls += 1
        if self.error:
            raise self.error
        return SwapReceipt(tx_id=f"tx{self.calls}", status=ConfirmationStatus.CONFIRMED, settled_amount=2_000_000)


@pytest.fixture
def config() -> TradeConfig:
    return TradeConfig(
        amount=100_000_000,
        min_expected_amount=1_000_000,
        slippage="2",
        check_interval=60,
        trade_cooldown=300,
        max_daily_trades=5,
        fee_reserve=10_000_000,
        failure_backoff=15,
        error_backoff=30,
        confirm_poll_interval=2,
        confirm_max_attempts=4,
    )


@pytest.fixture
def keypair() -> Keypair:
    return Keypair()
