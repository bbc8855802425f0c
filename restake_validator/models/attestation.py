# restake_validator/models/attestation.py
"""Attestation data models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from restake_validator.models.position import Position


class AttestationAction(str, Enum):
    """Movements a validator can attest to.

    The value is the exact string that goes into the signed digest.
    """

    RESTAKE = "restake"
    RETURN_TO_POOL = "returnToPool"

    @classmethod
    def _missing_(cls, value: object) -> Optional["AttestationAction"]:
        # accept "Restake", "RETURN_TO_POOL", "return_to_pool", …
        if isinstance(value, str):
            key = value.replace("_", "").replace("-", "").lower()
            for member in cls:
                if member.value.lower() == key or member.name.replace("_", "").lower() == key:
                    return member
        return None


class ValidationDetails(BaseModel):
    """Position fields the decision was based on."""

    lower_tick: int = Field(..., alias="lowerTick")
    upper_tick: int = Field(..., alias="upperTick")
    is_restaked: bool = Field(..., alias="isRestaked")
    last_active_timestamp: int = Field(..., alias="lastActiveTimestamp")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @classmethod
    def from_position(cls, position: Position) -> "ValidationDetails":
        return cls(
            lower_tick=position.lower_tick,
            upper_tick=position.upper_tick,
            is_restaked=position.is_restaked,
            last_active_timestamp=position.last_active_timestamp,
        )


class Attestation(BaseModel):
    """Signed record of a validated position movement.

    Immutable: a re-validation produces a new attestation. An attestation
    without ``signature`` is provisional and proves nothing.
    """

    position_id: str = Field(..., alias="positionId")
    owner: str
    action: AttestationAction
    timestamp: int
    price_at_validation: float = Field(..., alias="priceAtValidation")
    validator_address: Optional[str] = Field(None, alias="validatorAddress")
    validation_details: ValidationDetails = Field(..., alias="validationDetails")
    signature: Optional[str] = None
    external_validation: Optional[Any] = Field(None, alias="externalValidation")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def is_signed(self) -> bool:
        return bool(self.signature)

    def to_payload(self) -> Dict[str, Any]:
        """camelCase JSON-safe dict, the shape stored and sent over the wire."""
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "Attestation":
        return cls.model_validate(data)


__all__ = ["AttestationAction", "ValidationDetails", "Attestation"]
