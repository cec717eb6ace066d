"""
Aggregator price quote for one swap.

A quote is a non-binding estimate valid only for the build and submit that
immediately follows it; it is never cached.
"""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class Quote(BaseModel):
    model_config = ConfigDict(frozen=True)

    from_token: str
    to_token: str
    from_amount: int
    to_amount: int
    from_decimals: int = 9
    to_decimals: int = 6
    route: Dict[str, Any] = {}

    @classmethod
    def from_okx(cls, raw: dict, from_token: str = "", to_token: str = "") -> "Quote":
        from_tok = raw.get("fromToken") or {}
        to_tok = raw.get("toToken") or {}
        return cls(
            from_token=from_tok.get("tokenContractAddress") or from_token,
            to_token=to_tok.get("tokenContractAddress") or to_token,
            from_amount=int(raw["fromTokenAmount"]),
            to_amount=int(raw["toTokenAmount"]),
            from_decimals=int(from_tok.get("decimal", 9)),
            to_decimals=int(to_tok.get("decimal", 6)),
            route=raw,
        )
