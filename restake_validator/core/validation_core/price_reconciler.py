from __future__ import annotations

from .validation_models import FailureCode, ValidationResult


def price_difference(primary: float, secondary: float) -> float:
    """Relative difference of ``primary`` against ``secondary``."""
    return abs(primary - secondary) / secondary


def reconcile_prices(primary: float, secondary: float, tolerance_fraction: float) -> ValidationResult:
    """Certify that two independent price observations agree within tolerance.

    Disagreement is a normal outcome and is returned, not raised.
    """
    if not secondary > 0 or not primary > 0:
        return ValidationResult.fail(
            FailureCode.INVALID_PRICE,
            "Price validation failed: non-positive price",
            {"primaryPrice": primary, "secondaryPrice": secondary},
        )

    diff = price_difference(primary, secondary)
    if diff > tolerance_fraction:
        return ValidationResult.fail(
            FailureCode.PRICE_DISAGREEMENT,
            "Price validation failed",
            {
                "primaryPrice": primary,
                "secondaryPrice": secondary,
                "difference": diff,
                "threshold": tolerance_fraction,
            },
        )
    return ValidationResult.ok({"difference": diff, "threshold": tolerance_fraction})


__all__ = ["price_difference", "reconcile_prices"]
