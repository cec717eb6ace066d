# main.py
from __future__ import annotations
import os
import signal
import sys
import time

from dotenv import load_dotenv

load_dotenv()

from orchestrators.swap_orchestrator import SwapOrchestrator
from services.ledger_service import LedgerService, lamports_to_sol
from services.quote_service import QuoteService
from utils.config import PROJECT_ROOT, load_trade_config
from utils.errors import CredentialError
from utils.log_config import logger_manager
from utils.wallet_loader import load_keypair

logger = logger_manager.setup_logger(__name__)


def _banner(cfg, wallet: str) -> str:
    return (
        "\n🤖 OKX Auto Swap Bot started!\n"
        f"   - Wallet: {wallet}\n"
        f"   - Pair: {cfg.from_token} → {cfg.to_token}\n"
        f"   - Amount per trade: {lamports_to_sol(cfg.amount)} SOL\n"
        f"   - Check interval: {cfg.check_interval:.0f} seconds\n"
        f"   - Max trades per run: {cfg.max_daily_trades}\n"
        f"   - Slippage tolerance: {cfg.slippage}%\n"
        "Press Ctrl+C to stop the bot"
    )


def main() -> int:
    try:
        cfg = load_trade_config()
    except ValueError as e:
        logger.error(f"❌ {e}")
        return 1

    wallet_path = cfg.wallet_path
    if not os.path.isabs(wallet_path):
        wallet_path = str(PROJECT_ROOT / wallet_path)
    try:
        keypair = load_keypair(wallet_path)
    except CredentialError as e:
        logger.error(f"❌ {e.describe()}")
        logger.info("💡 account.txt must hold the secret key as a JSON array, comma separated bytes or base64")
        return 1

    quotes = QuoteService(cfg)
    ledger = LedgerService(cfg, quotes)
    orch = SwapOrchestrator(cfg, keypair, quotes, ledger)

    def shutdown(signum, _frame):
        logger.info(f"🛑 Received {signal.Signals(signum).name}, shutting down gracefully...")
        orch.stop()

    logger.info(_banner(cfg, str(keypair.pubkey())))
    orch.start()
    # start() clears the stop flag, so handlers are installed after it
    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)
    # main thread stays free for signals; an in-flight trade is allowed to finish
    while not orch.stopping:
        time.sleep(0.5)
    orch.join()
    logger.info("✅ Shutdown complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
