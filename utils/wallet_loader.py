"""
Loading of the trading keypair from a local secret file.

The file may hold the 64-byte secret key as a JSON array of integers, as
comma separated integers or as base64. Only the resulting ``Keypair``
leaves this module.
"""

from __future__ import annotations

import base64
import binascii
import json
from pathlib import Path

from solders.keypair import Keypair

from utils.errors import CredentialError
from utils.log_config import logger_manager

logger = logger_manager.setup_logger(__name__)


def _decode_secret(raw: str) -> bytes:
    if raw.startswith("[") and raw.endswith("]"):
        values = json.loads(raw)
        return bytes(int(v) for v in values)
    if "," in raw:
        return bytes(int(v.strip()) for v in raw.split(",") if v.strip())
    return base64.b64decode(raw, validate=True)


def parse_keypair(raw: str) -> Keypair:
    raw = (raw or "").strip()
    if not raw:
        raise CredentialError("secret key is empty")
    try:
        secret = _decode_secret(raw)
    except (ValueError, TypeError, binascii.Error) as e:
        # ValueError also covers json.JSONDecodeError and bytes() range errors
        raise CredentialError(f"unrecognised secret key format ({type(e).__name__})") from None
    if len(secret) != 64:
        raise CredentialError(f"secret key must be 64 bytes, got {len(secret)}")
    try:
        return Keypair.from_bytes(secret)
    except ValueError:
        raise CredentialError("secret key bytes do not form a valid keypair") from None


def load_keypair(path: str | Path) -> Keypair:
    """Read and decode the keypair stored at ``path``."""
    p = Path(path)
    if not p.is_file():
        raise CredentialError(f"wallet file not found: {p}")
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as e:
        raise CredentialError(f"cannot read wallet file {p}: {e}") from None
    keypair = parse_keypair(raw)
    logger.info(f"Wallet loaded: {keypair.pubkey()}")
    return keypair
