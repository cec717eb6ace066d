import pytest

from enums.controller_state import ControllerState
from orchestrators.swap_orchestrator import SwapOrchestrator
from utils.errors import ConfirmationTimeout, LedgerUnavailable, QuoteError, SubmissionError

from conftest import FakeLedger, FakeQuotes, FakeTimer, FakeTrader


def _orch(config, keypair, quotes=None, ledger=None, trader=None, timer=None):
    return SwapOrchestrator(
        config,
        keypair,
        quote_service=quotes or FakeQuotes(),
        ledger_service=ledger or FakeLedger(),
        trade_controller=trader or FakeTrader(),
        timer=timer or FakeTimer(),
    )


# ---------- should_trade ----------

@pytest.mark.parametrize("count", [5, 6, 50])
def test_limit_reached_makes_no_network_call(config, keypair, count):
    quotes, ledger = FakeQuotes(), FakeLedger()
    orch = _orch(config, keypair, quotes=quotes, ledger=ledger)
    orch.session.trade_count = count

    assert orch.should_trade() is False
    assert ledger.calls == 0
    assert quotes.calls == 0


@pytest.mark.parametrize("balance", [0, 100_000_000, 109_999_999])
def test_insufficient_balance_blocks_even_a_good_quote(config, keypair, balance):
    quotes = FakeQuotes(to_amount=10**12)
    orch = _orch(config, keypair, quotes=quotes, ledger=FakeLedger(balance=balance))

    assert orch.should_trade() is False
    assert quotes.calls == 0


def test_exact_required_balance_is_enough(config, keypair):
    orch = _orch(config, keypair, ledger=FakeLedger(balance=110_000_000))
    assert orch.should_trade() is True


def test_balance_failure_is_false_and_skips_quote(config, keypair, caplog):
    quotes = FakeQuotes()
    orch = _orch(config, keypair, quotes=quotes, ledger=FakeLedger(error=LedgerUnavailable("rpc down")))

    assert orch.should_trade() is False
    assert quotes.calls == 0
    assert "ledger unavailable: rpc down" in caplog.text


def test_quote_failure_is_false(config, keypair, caplog):
    orch = _orch(config, keypair, quotes=FakeQuotes(error=QuoteError("API error 50011: rate limited")))

    assert orch.should_trade() is False
    assert "quote error" in caplog.text


def test_unexpected_failure_does_not_escape(config, keypair):
    orch = _orch(config, keypair, ledger=FakeLedger(error=RuntimeError("boom")))
    assert orch.should_trade() is False


@pytest.mark.parametrize("to_amount,expected", [(2_000_000, True), (1_000_000, True), (999_999, False)])
def test_threshold_decision(config, keypair, to_amount, expected):
    orch = _orch(config, keypair, quotes=FakeQuotes(to_amount=to_amount))
    assert orch.should_trade() is expected


def test_quote_is_fetched_fresh_each_evaluation(config, keypair):
    quotes = FakeQuotes()
    orch = _orch(config, keypair, quotes=quotes)
    orch.should_trade()
    orch.should_trade()
    assert quotes.calls == 2


# ---------- tick / trading ----------

def test_successful_tick_counts_once_and_cools_down(config, keypair):
    trader, timer = FakeTrader(), FakeTimer()
    orch = _orch(config, keypair, trader=trader, timer=timer)

    orch.tick()

    assert trader.calls == 1
    assert orch.session.trade_count == 1
    assert timer.waits == [config.check_interval, config.trade_cooldown]
    assert orch.state is ControllerState.IDLE


@pytest.mark.parametrize("error", [
    SubmissionError("blockhash not found"),
    ConfirmationTimeout("no terminal status", "sig"),
    QuoteError("stale"),
])
def test_failed_trade_keeps_count_and_uses_short_backoff(config, keypair, error):
    timer = FakeTimer()
    orch = _orch(config, keypair, trader=FakeTrader(error=error), timer=timer)

    orch.tick()

    assert orch.session.trade_count == 0
    assert timer.waits == [config.check_interval, config.failure_backoff]
    assert config.trade_cooldown not in timer.waits


def test_negative_decision_goes_back_to_idle_without_trading(config, keypair):
    trader, timer = FakeTrader(), FakeTimer()
    orch = _orch(config, keypair, quotes=FakeQuotes(to_amount=1), trader=trader, timer=timer)

    orch.tick()

    assert trader.calls == 0
    assert timer.waits == [config.check_interval]
    assert orch.state is ControllerState.IDLE


def test_stop_during_evaluation_prevents_trading(config, keypair):
    trader = FakeTrader()
    orch = None

    class StoppingLedger(FakeLedger):
        def get_balance(self, account):
            orch.stop()
            return super().get_balance(account)

    orch = _orch(config, keypair, ledger=StoppingLedger(), trader=trader)
    orch.tick()

    assert trader.calls == 0
    assert orch.session.trade_count == 0


def test_count_never_exceeds_limit(config, keypair):
    trader = FakeTrader()
    orch = _orch(config, keypair, trader=trader)

    for _ in range(config.max_daily_trades + 3):
        orch.tick()

    assert orch.session.trade_count == config.max_daily_trades
    assert trader.calls == config.max_daily_trades


def test_scenario_single_trade(keypair, config):
    assert config.amount == 100_000_000 and config.min_expected_amount == 1_000_000
    trader = FakeTrader()
    orch = _orch(config, keypair, quotes=FakeQuotes(to_amount=2_000_000), trader=trader)

    assert orch.should_trade() is True
    orch.tick()

    assert trader.calls == 1
    assert orch.session.trade_count == 1


# ---------- run loop ----------

def test_run_recovers_from_unexpected_errors_until_stopped(config, keypair):
    orch = None

    def on_wait(n, seconds):
        if n == 3:
            orch.stop()

    class ExplodingTrader(FakeTrader):
        def execute(self, config, keypair):
            self.calls += 1
            raise RuntimeError("unexpected")

    timer = FakeTimer(on_wait=on_wait)
    orch = _orch(config, keypair, trader=ExplodingTrader(), timer=timer)
    orch.run()

    assert timer.waits[:2] == [config.check_interval, config.error_backoff]
    assert orch.session.trade_count == 0
    assert orch.session.running is False
    assert orch.state is ControllerState.STOPPED


def test_stop_before_run_never_ticks(config, keypair):
    quotes, ledger, timer = FakeQuotes(), FakeLedger(), FakeTimer()
    orch = _orch(config, keypair, quotes=quotes, ledger=ledger, timer=timer)

    orch.stop()
    orch.run()

    assert timer.waits == []
    assert ledger.calls == 0
    assert orch.state is ControllerState.STOPPED


def test_stop_never_raises(config, keypair):
    class BrokenTimer(FakeTimer):
        def cancel(self):
            raise RuntimeError("cannot cancel")

    orch = _orch(config, keypair, timer=BrokenTimer())
    orch.stop()
    assert orch.stopping is True


def test_run_until_limit_then_stop(config, keypair):
    orch = None
    trader = FakeTrader()

    def on_wait(n, seconds):
        if n >= 40:
            orch.stop()

    orch = _orch(config, keypair, trader=trader, timer=FakeTimer(on_wait=on_wait))
    orch.run()

    assert orch.session.trade_count == config.max_daily_trades
    assert trader.calls == config.max_daily_trades


def test_start_after_stop_runs_the_loop_again(config, keypair):
    orch = None

    def on_wait(n, seconds):
        if n == 2:
            orch.stop()

    timer = FakeTimer(on_wait=on_wait)
    orch = _orch(config, keypair, quotes=FakeQuotes(to_amount=1), timer=timer)
    orch.stop()
    assert timer.cancelled is True

    orch.start()
    orch.join(timeout=5)

    assert timer.waits == [config.check_interval, config.check_interval]
    assert orch.state is ControllerState.STOPPED
    assert orch.session.running is False

