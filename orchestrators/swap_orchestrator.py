# orchestrators/swap_orchestrator.py
from __future__ import annotations
import threading
from typing import Optional

from solders.keypair import Keypair

from controllers.trade_controller import TradeController
from enums.controller_state import ControllerState
from models.session_state import SessionState
from models.trade_config import TradeConfig
from services.ledger_service import LedgerService
from services.quote_service import QuoteService
from utils.errors import BotError, TradeError
from utils.log_config import logger_manager, log_function
from utils.timer import StopTimer, Timer

logger = logger_manager.setup_logger(__name__)


class SwapOrchestrator:
    """
    Control loop:
      IDLE (wait check_interval) -> EVALUATING (should_trade)
        -> TRADING (one execute, then cooldown or failure backoff) -> IDLE
      STOPPED once stop() has been requested and the current step finished.

    The trade counter lives in ``self.session`` and is only touched here.
    It counts successful trades of this run; there is no day rollover.
    """

    def __init__(
        self,
        config: TradeConfig,
        keypair: Keypair,
        quote_service: QuoteService,
        ledger_service: LedgerService,
        trade_controller: Optional[TradeController] = None,
        timer: Optional[Timer] = None,
    ) -> None:
        self.config = config
        self.keypair = keypair
        self.quotes = quote_service
        self.ledger = ledger_service
        self.trader = trade_controller or TradeController(quote_service, ledger_service)
        self.timer = timer or StopTimer()

        self.session = SessionState()
        self.state = ControllerState.IDLE
        self._stop_requested = False
        self._thread: Optional[threading.Thread] = None

    # --------- lifecycle ----------
    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        # a restart after stop() begins with a fresh stop flag
        self._stop_requested = False
        self.timer.reset()
        self.state = ControllerState.IDLE
        self._thread = threading.Thread(target=self.run, name="SwapLoop", daemon=True)
        self._thread.start()
        logger.info("SwapOrchestrator started.")

    def stop(self) -> None:
        """Request a stop. Safe from signal handlers; never aborts a submitted trade."""
        self._stop_requested = True
        self.session.running = False
        try:
            self.timer.cancel()
        except Exception as e:  # a stop request must not raise
            logger.warning(f"Timer cancel failed: {e}")
        logger.info("🛑 Stop requested.")

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread:
            self._thread.join(timeout)

    @property
    def stopping(self) -> bool:
        return self._stop_requested

    def _wait(self, seconds: float) -> bool:
        """Wait ``seconds``; True when a stop arrived meanwhile."""
        return bool(self.timer.wait(seconds)) or self._stop_requested

    # --------- loop ----------
    def run(self) -> None:
        logger.info("🤖 Starting swap loop...")
        self.session.running = not self._stop_requested
        while self.session.running and not self._stop_requested:
            try:
                self.tick()
            except Exception as e:
                logger.exception(f"❌ Error in main loop: {type(e).__name__}: {e}")
                logger.info(f"🔄 Retrying in {self.config.error_backoff:.0f} seconds...")
                self._wait(self.config.error_backoff)
        self.session.running = False
        self.state = ControllerState.STOPPED
        logger.info(f"Swap loop stopped after {self.session.trade_count} trade(s).")

    def tick(self) -> None:
        """One IDLE -> EVALUATING -> (TRADING) pass."""
        self.state = ControllerState.IDLE
        if self._stop_requested or self._wait(self.config.check_interval):
            return

        self.state = ControllerState.EVALUATING
        if not self.should_trade():
            logger.info("⏳ Conditions not met, waiting...")
            self.state = ControllerState.IDLE
            return
        if self._stop_requested:
            logger.info("Stop requested during evaluation; trade skipped.")
            return

        self.state = ControllerState.TRADING
        self._trade_once()
        self.state = ControllerState.IDLE

    def _trade_once(self) -> bool:
        try:
            receipt = self.trader.execute(self.config, self.keypair)
        except TradeError as e:
            logger.error(f"❌ Swap failed ({e.describe()}); trade count unchanged")
            logger.info(f"Backing off {self.config.failure_backoff:.0f} seconds before next check")
            self._wait(self.config.failure_backoff)
            return False

        self.session.trade_count += 1
        logger.info(f"📊 Trades this run: {self.session.trade_count}/{self.config.max_daily_trades} (tx {receipt.tx_id})")
        logger.info(f"😴 Cooldown for {self.config.trade_cooldown:.0f} seconds...")
        self._wait(self.config.trade_cooldown)
        return True

    # --------- decision ----------
    @log_function
    def should_trade(self) -> bool:
        """
        Decide on fresh data whether to trade now.

        Order: trade limit (no network), balance, quote, threshold. The
        balance check runs before any quote request. Never raises.
        """
        try:
            return self._evaluate()
        except BotError as e:
            logger.warning(f"Decision: no trade ({e.describe()})")
        except Exception as e:
            logger.error(f"Decision: no trade (unexpected {type(e).__name__}: {e})")
        return False

    def _evaluate(self) -> bool:
        cfg = self.config
        if self.session.trade_count >= cfg.max_daily_trades:
            logger.info(f"⏰ Trade limit reached ({self.session.trade_count}/{cfg.max_daily_trades})")
            return False

        balance = self.ledger.get_balance(self.keypair.pubkey())
        if balance < cfg.required_balance:
            logger.info(f"💸 Insufficient balance for trade ({balance} < {cfg.required_balance} lamports)")
            return False

        quote = self.quotes.get_quote(cfg.from_token, cfg.to_token, cfg.amount, cfg.slippage)
        if quote.to_amount >= cfg.min_expected_amount:
            return True
        logger.info(f"Quote below minimum ({quote.to_amount} < {cfg.min_expected_amount})")
        return False
