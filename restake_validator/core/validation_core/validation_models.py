from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from restake_validator.models.attestation import Attestation


class PriceSource(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


class FailureCode(str, Enum):
    PRICE_DISAGREEMENT = "PRICE_DISAGREEMENT"
    INVALID_PRICE = "INVALID_PRICE"
    PRECONDITION_FAILED = "PRECONDITION_FAILED"
    UNSUPPORTED_ACTION = "UNSUPPORTED_ACTION"
    SOURCE_UNAVAILABLE = "SOURCE_UNAVAILABLE"
    VALIDATION_ERROR = "VALIDATION_ERROR"


@dataclass(frozen=True)
class PriceQuote:
    value: float
    source: PriceSource
    observed_at: int  # unix seconds

    def __post_init__(self) -> None:
        if not self.value > 0:
            raise ValueError(f"{self.source.value} price must be positive, got {self.value!r}")


@dataclass
class ValidationResult:
    success: bool
    reason: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    code: Optional[FailureCode] = None
    attestation: Optional[Attestation] = None

    @classmethod
    def ok(cls, details: Optional[Dict[str, Any]] = None) -> "ValidationResult":
        return cls(success=True, details=details)

    @classmethod
    def fail(
        cls,
        code: FailureCode,
        reason: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> "ValidationResult":
        return cls(success=False, reason=reason, details=details, code=code)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"success": self.success}
        if self.reason is not None:
            d["reason"] = self.reason
        if self.code is not None:
            d["code"] = self.code.value
        if self.details is not None:
            d["details"] = self.details
        if self.attestation is not None:
            d["attestation"] = self.attestation.to_payload()
        return d


@dataclass
class PriceCheckResult:
    """Outcome of the standalone two-source price check."""

    success: bool
    average_price: Optional[float] = None
    sources: Dict[str, float] = field(default_factory=dict)
    validation: Optional[ValidationResult] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "success": self.success,
            "averagePrice": self.average_price,
            "sources": dict(self.sources),
        }
        if self.validation is not None:
            d["validation"] = self.validation.to_dict()
        if self.error is not None:
            d["error"] = self.error
        return d


@dataclass
class VerificationResult:
    valid: bool
    signer: Optional[str] = None
    reason: Optional[str] = None
    is_approved_validator: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "signer": self.signer,
            "reason": self.reason,
            "isApprovedValidator": self.is_approved_validator,
        }


__all__ = [
    "PriceSource",
    "FailureCode",
    "PriceQuote",
    "ValidationResult",
    "PriceCheckResult",
    "VerificationResult",
]
