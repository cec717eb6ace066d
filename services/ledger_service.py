from __future__ import annotations
import base64
import binascii
from time import sleep
from typing import Any, Callable, Optional

from solana.exceptions import SolanaRpcException
from solana.rpc.api import Client
from solana.rpc.commitment import Commitment
from solana.rpc.core import RPCException
from solana.rpc.types import TxOpts
from solders.keypair import Keypair
from solders.message import to_bytes_versioned
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction
from solders.transaction_status import TransactionConfirmationStatus

from enums.confirmation_status import ConfirmationStatus
from models.quote import Quote
from models.swap_receipt import SwapReceipt
from models.trade_config import SOL_MINT, TradeConfig
from services.quote_service import QuoteService
from utils.errors import (
    ConfirmationError,
    ConfirmationTimeout,
    LedgerUnavailable,
    SubmissionError,
    SwapBuildError,
)
from utils.log_config import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)

LAMPORTS_PER_SOL = 1_000_000_000

_RPC_ERRORS = (RPCException, SolanaRpcException, OSError)

_COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}


def _status_rank(conf) -> int:
    if conf == TransactionConfirmationStatus.Finalized:
        return 2
    if conf == TransactionConfirmationStatus.Confirmed:
        return 1
    return 0


def lamports_to_sol(lamports: int) -> float:
    return lamports / LAMPORTS_PER_SOL


class LedgerService:
    """
    Thin wrapper over the Solana RPC: balance, submission, confirmation.

    The keypair is only ever used for the local signing step; it is never
    serialized or sent anywhere.
    """

    def __init__(
        self,
        config: TradeConfig,
        quote_service: QuoteService,
        client: Optional[Client] = None,
        sleep_fn: Callable[[float], None] = sleep,
    ) -> None:
        self.commitment = config.commitment
        self.client = client or Client(config.rpc_url, commitment=Commitment(config.commitment),
                                       timeout=config.request_timeout)
        self.quote_service = quote_service
        self.poll_interval = config.confirm_poll_interval
        self.max_attempts = config.confirm_max_attempts
        self._sleep = sleep_fn

    # ---------- balance ----------
    @log_function
    def get_balance(self, account: Pubkey) -> int:
        try:
            resp = self.client.get_balance(account)
        except _RPC_ERRORS as e:
            raise LedgerUnavailable(f"balance lookup failed: {e}") from e
        value = getattr(resp, "value", None)
        if value is None:
            raise LedgerUnavailable(f"balance lookup returned no value: {resp}")
        lamports = int(value)
        logger.info(f"💰 Current SOL balance: {lamports_to_sol(lamports):.4f} SOL")
        return lamports

    # ---------- build / sign / send ----------
    def _decode_tx(self, swap_data: dict) -> VersionedTransaction:
        payload: Any = swap_data.get("tx")
        if isinstance(payload, dict):
            payload = payload.get("data")
        if not isinstance(payload, str) or not payload:
            raise SwapBuildError("swap response carries no serialized transaction")
        try:
            return VersionedTransaction.from_bytes(base64.b64decode(payload, validate=True))
        except (binascii.Error, ValueError) as e:
            raise SwapBuildError(f"cannot deserialize swap transaction: {e}") from e

    def _sign(self, tx: VersionedTransaction, keypair: Keypair) -> VersionedTransaction:
        """Fill the wallet's signature slot, leaving any other signers untouched."""
        msg = tx.message
        required = msg.header.num_required_signatures
        signers = list(msg.account_keys[:required])
        try:
            idx = signers.index(keypair.pubkey())
        except ValueError:
            raise SwapBuildError(f"wallet {keypair.pubkey()} is not a signer of the swap transaction") from None
        signatures = list(tx.signatures)
        signatures[idx] = keypair.sign_message(to_bytes_versioned(msg))
        return VersionedTransaction.populate(msg, signatures)

    @log_function
    def build_and_submit_swap(self, quote: Quote, keypair: Keypair, slippage: str) -> str:
        swap_data = self.quote_service.build_swap(quote, str(keypair.pubkey()), slippage)
        signed = self._sign(self._decode_tx(swap_data), keypair)

        opts = TxOpts(skip_preflight=False, preflight_commitment=Commitment(self.commitment))
        try:
            resp = self.client.send_raw_transaction(bytes(signed), opts=opts)
        except _RPC_ERRORS as e:
            raise SubmissionError(f"transaction rejected: {e}") from e
        value = getattr(resp, "value", None)
        if value is None:
            raise SubmissionError(f"transaction rejected: {resp}")
        tx_id = str(value)
        logger.info(f"📤 Transaction sent: {tx_id}")
        return tx_id

    # ---------- confirmation ----------
    def _is_terminal_ok(self, status) -> bool:
        conf = getattr(status, "confirmation_status", None)
        if conf is None:
            # no confirmation_status and no confirmations count means rooted
            return getattr(status, "confirmations", 0) is None
        return _status_rank(conf) >= _COMMITMENT_RANK[self.commitment]

    @log_function
    def confirm_transaction(self, tx_id: str) -> SwapReceipt:
        try:
            signature = Signature.from_string(tx_id)
        except ValueError as e:
            raise ConfirmationError(f"invalid transaction id: {e}", tx_id) from e

        for attempt in range(1, self.max_attempts + 1):
            try:
                resp = self.client.get_signature_statuses([signature])
                statuses = getattr(resp, "value", None) or [None]
                status = statuses[0]
            except _RPC_ERRORS as e:
                logger.warning(f"[confirm] attempt {attempt}/{self.max_attempts} RPC error: {e}")
                status = None

            if status is not None:
                if status.err is not None:
                    reason = str(status.err)
                    receipt = SwapReceipt(tx_id=tx_id, status=ConfirmationStatus.FAILED, reason=reason)
                    raise ConfirmationError(f"transaction failed on-chain: {reason}", tx_id, receipt)
                if self._is_terminal_ok(status):
                    logger.debug(f"[confirm] {tx_id} reached {self.commitment} after {attempt} polls")
                    return SwapReceipt(tx_id=tx_id, status=ConfirmationStatus.CONFIRMED)

            if attempt < self.max_attempts:
                self._sleep(self.poll_interval)

        raise ConfirmationTimeout(
            f"no terminal status after {self.max_attempts} polls ({self.max_attempts * self.poll_interval:.0f}s)",
            tx_id,
        )

    # ---------- settlement ----------
    def get_settled_amount(self, tx_id: str, owner: Pubkey, mint: str) -> Optional[int]:
        """Net destination-token amount received by ``owner``; None when unknown."""
        if mint == SOL_MINT:
            return None

        def _total(balances) -> int:
            total = 0
            for b in balances or []:
                if str(b.mint) == mint and b.owner is not None and b.owner == owner:
                    total += int(b.ui_token_amount.amount)
            return total

        try:
            resp = self.client.get_transaction(
                Signature.from_string(tx_id), max_supported_transaction_version=0
            )
            meta = resp.value.transaction.meta if resp.value is not None else None
            if meta is None:
                return None
            return _total(meta.post_token_balances) - _total(meta.pre_token_balances)
        except (*_RPC_ERRORS, ValueError, AttributeError, TypeError) as e:
            logger.warning(f"Settled amount unavailable for {tx_id}: {e}")
            return None
