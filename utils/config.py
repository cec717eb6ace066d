"""
Configuration loading for the swap bot.

Settings come from the ``trade:`` mapping of ``config.yaml`` in the project
root, overlaid by ``SWAP_*`` environment variables (a ``.env`` file is loaded
by ``main``). The merged mapping is validated into a frozen ``TradeConfig``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml  # type: ignore
from pydantic import ValidationError

from models.trade_config import TradeConfig
from utils.log_config import logger_manager

logger = logger_manager.setup_logger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# env var -> TradeConfig field
_ENV_OVERRIDES = {
    "SWAP_FROM_TOKEN": "from_token",
    "SWAP_TO_TOKEN": "to_token",
    "SWAP_AMOUNT": "amount",
    "SWAP_MIN_EXPECTED_AMOUNT": "min_expected_amount",
    "SWAP_SLIPPAGE": "slippage",
    "SWAP_CHECK_INTERVAL": "check_interval",
    "SWAP_TRADE_COOLDOWN": "trade_cooldown",
    "SWAP_MAX_DAILY_TRADES": "max_daily_trades",
    "SWAP_FEE_RESERVE": "fee_reserve",
    "SWAP_RPC_URL": "rpc_url",
    "SWAP_API_BASE_URL": "api_base_url",
    "SWAP_WALLET_PATH": "wallet_path",
}


def load_config(config_path: str | Path | None = None) -> Dict[str, Any]:
    """Load the raw YAML document.

    :returns: A dictionary representing the configuration. A missing file
        quietly yields an empty dictionary.
    """
    path = Path(config_path) if config_path else PROJECT_ROOT / "config.yaml"
    if not path.exists():
        logger.warning(f"Config file not found at {path}; using defaults")
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a YAML mapping; got {type(data).__name__}")
    return data


def _apply_env_overrides(trade: Dict[str, Any], environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    env = os.environ if environ is None else environ
    merged = dict(trade)
    for var, field in _ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            merged[field] = value.strip()
    return merged


def load_trade_config(config_path: str | Path | None = None,
                      environ: Optional[Dict[str, str]] = None) -> TradeConfig:
    raw = load_config(config_path)
    trade = raw.get("trade") or {}
    if not isinstance(trade, dict):
        raise ValueError("'trade' section must be a mapping")
    trade = _apply_env_overrides(trade, environ)
    try:
        cfg = TradeConfig(**trade)
    except ValidationError as e:
        raise ValueError(f"Invalid trade configuration: {e}") from e
    logger.debug(f"Trade config loaded: {cfg.from_token} -> {cfg.to_token}, amount={cfg.amount}")
    return cfg
