# restake_validator/models/position.py
"""Liquidity position data models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from web3 import Web3


def normalize_position_id(value: Any) -> str:
    """Canonical lowercase ``0x`` bytes32 hex; raises ``ValueError`` otherwise."""
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 32:
            raise ValueError(f"position id must be 32 bytes, got {len(value)}")
        return "0x" + bytes(value).hex()
    if not isinstance(value, str):
        raise ValueError("position id must be a hex string or 32 raw bytes")
    v = value.strip().lower()
    if not v.startswith("0x"):
        v = "0x" + v
    if len(v) != 66:
        raise ValueError(f"position id must be 32 bytes (64 hex chars), got {len(v) - 2}")
    try:
        bytes.fromhex(v[2:])
    except ValueError as e:
        raise ValueError("position id is not valid hex") from e
    return v


class Position(BaseModel):
    """Snapshot of a concentrated-liquidity position as seen by the validator.

    The validator never mutates positions; it only reads a snapshot and
    returns a decision about it.
    """

    id: str = Field(..., description="bytes32 position id, 0x…")
    owner: str = Field(..., description="EVM owner address")
    lower_tick: int = Field(..., alias="lowerTick")
    upper_tick: int = Field(..., alias="upperTick")
    is_restaked: bool = Field(False, alias="isRestaked")
    last_active_timestamp: int = Field(..., alias="lastActiveTimestamp")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("id", mode="before")
    @classmethod
    def _check_id(cls, value: Any) -> str:
        return normalize_position_id(value)

    @field_validator("owner", mode="before")
    @classmethod
    def _check_owner(cls, value: Any) -> str:
        if not isinstance(value, str) or not Web3.is_address(value):
            raise ValueError(f"owner is not a valid address: {value!r}")
        return Web3.to_checksum_address(value)

    @model_validator(mode="after")
    def _check_range(self) -> "Position":
        if self.lower_tick >= self.upper_tick:
            raise ValueError(
                f"lower_tick ({self.lower_tick}) must be below upper_tick ({self.upper_tick})"
            )
        return self


__all__ = ["Position", "normalize_position_id"]
