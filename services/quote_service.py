# services/quote_service.py
from __future__ import annotations
from typing import Any, Dict, Optional

import requests

from models.quote import Quote
from models.trade_config import TradeConfig
from utils.errors import QuoteError, SwapBuildError, TradeError
from utils.log_config import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)

_HEADERS = {"Accept": "application/json", "Content-Type": "application/json"}


def to_ui_amount(raw: int, decimals: int) -> float:
    return raw / (10 ** decimals)


class QuoteService:
    """
    Client for the OKX DEX aggregator.

    Stateless: every call is one request, with no retries and no caching.
    Envelope: {"code": "0", "msg": "", "data": [...]}; any code other than
    "0" is an application error even on HTTP 200.
    """

    def __init__(self, config: TradeConfig, session: Optional[requests.Session] = None) -> None:
        self.base_url = config.api_base_url.rstrip("/")
        self.chain_id = config.chain_id
        self.timeout = config.request_timeout
        self.session = session or requests.Session()

    def _first_result(self, resp: requests.Response, error_cls: type[TradeError], label: str) -> Dict[str, Any]:
        if resp.status_code != 200:
            raise error_cls(f"{label} HTTP {resp.status_code}: {resp.text[:200]}")
        try:
            body = resp.json()
        except ValueError:
            raise error_cls(f"{label} returned a non-JSON body") from None
        if not isinstance(body, dict):
            raise error_cls(f"{label} returned an unexpected body")
        if str(body.get("code")) != "0":
            raise error_cls(f"API error {body.get('code')}: {body.get('msg') or 'no message'}")
        data = body.get("data") or []
        if not data or not isinstance(data[0], dict):
            raise error_cls(f"{label} returned no result")
        return data[0]

    @log_function
    def get_quote(self, from_token: str, to_token: str, amount: int, slippage: str) -> Quote:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValueError(f"amount must be a positive integer in smallest units, got {amount!r}")

        params = {
            "chainId": self.chain_id,
            "fromTokenAddress": from_token,
            "toTokenAddress": to_token,
            "amount": str(amount),
            "slippage": str(slippage),
        }
        try:
            resp = self.session.get(f"{self.base_url}/quote", params=params, headers=_HEADERS, timeout=self.timeout)
        except requests.RequestException as e:
            raise QuoteError(f"quote request failed: {e}") from e

        result = self._first_result(resp, QuoteError, "quote")
        try:
            quote = Quote.from_okx(result, from_token=from_token, to_token=to_token)
        except KeyError as e:
            raise QuoteError(f"quote result is missing {e}") from e
        except (TypeError, ValueError) as e:
            raise QuoteError(f"malformed quote: {e}") from e
        if quote.from_amount <= 0:
            raise QuoteError(f"quote has no input amount (raw {quote.from_amount})")
        logger.info(f"📈 Quote: {to_ui_amount(quote.from_amount, quote.from_decimals)} → "
                    f"{to_ui_amount(quote.to_amount, quote.to_decimals)} (raw {quote.to_amount})")
        return quote

    @log_function
    def build_swap(self, quote: Quote, user_address: str, slippage: str) -> Dict[str, Any]:
        """Request the prebuilt swap transaction for ``quote``."""
        body = {
            "chainId": self.chain_id,
            "fromTokenAddress": quote.from_token,
            "toTokenAddress": quote.to_token,
            "amount": str(quote.from_amount),
            "slippage": str(slippage),
            "userWalletAddress": user_address,
            "referrer": "",
        }
        try:
            resp = self.session.post(f"{self.base_url}/swap", json=body, headers=_HEADERS, timeout=self.timeout)
        except requests.RequestException as e:
            raise SwapBuildError(f"swap request failed: {e}") from e

        result = self._first_result(resp, SwapBuildError, "swap")
        if not result.get("tx"):
            raise SwapBuildError("swap response carries no transaction")
        return result
