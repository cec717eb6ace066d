"""
Controller for one complete swap attempt.

quote -> build/sign/submit from that exact quote -> confirmation. Any failure
aborts the attempt and propagates to the caller; the ledger stays the source
of truth for whether funds moved.
"""

from __future__ import annotations

from solders.keypair import Keypair

from models.swap_receipt import SwapReceipt
from models.trade_config import TradeConfig
from services.ledger_service import LedgerService, lamports_to_sol
from services.quote_service import QuoteService, to_ui_amount
from utils.log_config import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)


class TradeController:
    """Execute swaps through the aggregator and the ledger. No retries."""

    def __init__(self, quote_service: QuoteService, ledger_service: LedgerService) -> None:
        self.quote_service = quote_service
        self.ledger_service = ledger_service

    @log_function
    def execute(self, config: TradeConfig, keypair: Keypair) -> SwapReceipt:
        logger.info("🔄 Starting swap process...")
        quote = self.quote_service.get_quote(config.from_token, config.to_token, config.amount, config.slippage)
        logger.info(
            f"💱 Swapping {lamports_to_sol(quote.from_amount)} SOL → "
            f"{to_ui_amount(quote.to_amount, quote.to_decimals)} (estimated)"
        )

        tx_id = self.ledger_service.build_and_submit_swap(quote, keypair, config.slippage)
        receipt = self.ledger_service.confirm_transaction(tx_id)

        settled = self.ledger_service.get_settled_amount(tx_id, keypair.pubkey(), config.to_token)
        if settled is not None:
            receipt = receipt.model_copy(update={"settled_amount": settled})
            logger.info(f"✅ Swap settled: received {to_ui_amount(settled, quote.to_decimals)} (raw {settled})")
        else:
            logger.info(f"✅ Swap confirmed; settled amount unknown (quoted raw {quote.to_amount})")
        logger.info(f"🔗 {config.explorer_url}{tx_id}")
        return receipt
