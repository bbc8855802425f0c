"""Validation orchestrator.

``validate_position_movement`` runs price reconciliation, position-state
evaluation and attestation in that order, stopping at the first failing step.
It is the boundary where internal failures turn into a ``ValidationResult``;
the one exception it lets through is :class:`AttestationPersistenceError`,
because a decision that was validated but not stored must not look complete.

The service holds no per-call state, so one instance can serve concurrent
validations for different positions.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Union

from restake_validator.core.logging import log
from restake_validator.models.attestation import AttestationAction
from restake_validator.models.position import Position

from .attestation_repository import AttestationRepository, AttestationStore
from .attestation_signer import AttestationSigner, ValidatorIdentity
from .clients import BinancePriceClient, ChainlinkPriceClient, ExternalValidationClient
from .errors import AttestationPersistenceError, PriceSourceUnavailable
from .position_evaluator import PositionStateEvaluator
from .price_reconciler import reconcile_prices
from .validation_config import ValidationConfig
from .validation_models import FailureCode, PriceCheckResult, ValidationResult


class PrimaryPriceSource(Protocol):
    def get_price(self, symbol: str) -> Dict[str, Any]: ...


class SecondaryPriceSource(Protocol):
    def get_latest_round_data(self) -> Dict[str, Any]: ...

    def get_price(self) -> float: ...


def _coerce_action(action: Union[AttestationAction, str]) -> Union[AttestationAction, str]:
    try:
        return AttestationAction(action)
    except ValueError:
        return action


class ValidationService:
    def __init__(
        self,
        cfg: ValidationConfig,
        primary: PrimaryPriceSource,
        secondary: SecondaryPriceSource,
        signer: AttestationSigner,
        evaluator: Optional[PositionStateEvaluator] = None,
    ):
        self.cfg = cfg
        self.primary = primary
        self.secondary = secondary
        self.signer = signer
        self.evaluator = evaluator or PositionStateEvaluator()

    @classmethod
    def from_config(
        cls,
        cfg: Optional[ValidationConfig] = None,
        store: Optional[AttestationStore] = None,
    ) -> "ValidationService":
        cfg = cfg or ValidationConfig.from_env()
        signer = AttestationSigner(
            identity=ValidatorIdentity.from_config(cfg),
            store=store or AttestationRepository.from_config(cfg),
            external=ExternalValidationClient.from_config(cfg),
        )
        return cls(
            cfg,
            primary=BinancePriceClient.from_config(cfg),
            secondary=ChainlinkPriceClient.from_config(cfg),
            signer=signer,
        )

    # ───────────────────────── public API ─────────────────────────

    def validate_position_movement(
        self,
        position: Position,
        action: Union[AttestationAction, str],
        current_price: float,
        now: Optional[int] = None,
    ) -> ValidationResult:
        action = _coerce_action(action)
        action_name = action.value if isinstance(action, AttestationAction) else action
        log.info(
            f"Validating {action_name} for {position.id}",
            source="ValidationService",
            payload={"price": current_price},
        )
        if not isinstance(action, AttestationAction):
            return ValidationResult.fail(
                FailureCode.UNSUPPORTED_ACTION,
                f"Unsupported action: {action_name}",
                {"supportedActions": [a.value for a in AttestationAction]},
            )

        try:
            secondary_price = self.secondary.get_price()
            price_check = reconcile_prices(current_price, secondary_price, self.cfg.tolerance_fraction)
            if not price_check.success:
                log.warning(price_check.reason, source="ValidationService", payload=price_check.details)
                return price_check

            state_check = self.evaluator.evaluate(
                position,
                action,
                current_price,
                self.cfg.inactivity_threshold_seconds,
                now=now,
            )
            if not state_check.success:
                log.info(state_check.reason, source="ValidationService", payload=state_check.details)
                return state_check

            attestation = self.signer.generate_attestation(position, action, current_price, now=now)
            return ValidationResult(success=True, attestation=attestation)

        except AttestationPersistenceError:
            log.error("❌ Attestation could not be stored", source="ValidationService")
            raise
        except PriceSourceUnavailable as e:
            log.error(f"Validation error: {e}", source="ValidationService")
            return ValidationResult.fail(FailureCode.SOURCE_UNAVAILABLE, "Validation error", {"message": str(e)})
        except Exception as e:  # noqa: BLE001
            log.error(f"Validation error: {e}", source="ValidationService")
            return ValidationResult.fail(FailureCode.VALIDATION_ERROR, "Validation error", {"message": str(e)})

    def validate_multiple_prices(self, symbol: Optional[str] = None) -> PriceCheckResult:
        """Fetch both sources and check they agree, outside any position decision."""
        symbol = symbol or self.cfg.price_symbol
        try:
            primary_price = float(self.primary.get_price(symbol)["price"])
            secondary_price = self.secondary.get_price()
        except Exception as e:  # noqa: BLE001
            log.error(f"Error validating prices: {e}", source="ValidationService")
            return PriceCheckResult(success=False, error=str(e))

        validation = reconcile_prices(primary_price, secondary_price, self.cfg.tolerance_fraction)
        return PriceCheckResult(
            success=validation.success,
            average_price=(primary_price + secondary_price) / 2,
            sources={"primary": primary_price, "secondary": secondary_price},
            validation=validation,
        )


__all__ = ["PrimaryPriceSource", "SecondaryPriceSource", "ValidationService"]
