import pytest

from models.trade_config import PUMP_MINT, SOL_MINT, TradeConfig
from utils.config import load_trade_config

YAML = """
trade:
  amount: 50000000
  min_expected_amount: 1000
  slippage: 1.5
  check_interval: 10
  trade_cooldown: 120
  max_daily_trades: 3
"""


def test_yaml_values_are_loaded(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(YAML, encoding="utf-8")

    cfg = load_trade_config(path, environ={})

    assert cfg.amount == 50_000_000
    assert cfg.slippage == "1.5"
    assert cfg.max_daily_trades == 3
    assert cfg.from_token == SOL_MINT
    assert cfg.to_token == PUMP_MINT
    assert cfg.required_balance == 50_000_000 + cfg.fee_reserve


def test_env_overrides_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(YAML, encoding="utf-8")

    cfg = load_trade_config(path, environ={"SWAP_AMOUNT": "75000000", "SWAP_RPC_URL": "http://localhost:8899"})

    assert cfg.amount == 75_000_000
    assert cfg.rpc_url == "http://localhost:8899"


def test_missing_file_uses_defaults(tmp_path):
    cfg = load_trade_config(tmp_path / "nope.yaml", environ={})
    assert cfg == TradeConfig()


@pytest.mark.parametrize("override", [
    {"SWAP_AMOUNT": "0"},
    {"SWAP_SLIPPAGE": "150"},
    {"SWAP_SLIPPAGE": "abc"},
    {"SWAP_MAX_DAILY_TRADES": "-1"},
])
def test_invalid_values_are_rejected(tmp_path, override):
    with pytest.raises(ValueError):
        load_trade_config(tmp_path / "nope.yaml", environ=override)


def test_non_mapping_yaml_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_trade_config(path, environ={})


def test_config_is_immutable():
    cfg = TradeConfig()
    with pytest.raises(Exception):
        cfg.amount = 1
