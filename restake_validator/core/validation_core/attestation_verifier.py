from __future__ import annotations

from typing import Any, Dict, Union

from restake_validator.core.logging import log
from restake_validator.models.attestation import Attestation

from .attestation_codec import attestation_digest, recover_signer
from .validation_models import VerificationResult
from .validator_registry import ValidatorRegistry


class AttestationVerifier:
    """Recover the signer of a stored attestation and check it is approved."""

    def __init__(self, registry: ValidatorRegistry):
        self.registry = registry

    def verify_attestation(self, attestation: Union[Attestation, Dict[str, Any]]) -> VerificationResult:
        try:
            if isinstance(attestation, dict):
                if not attestation.get("signature"):
                    return VerificationResult(valid=False, reason="No signature on attestation")
                attestation = Attestation.from_payload(attestation)

            if not attestation.signature:
                return VerificationResult(valid=False, reason="No signature on attestation")

            signer = recover_signer(attestation_digest(attestation), attestation.signature)
            approved = bool(self.registry.is_approved_validator(signer))
        except Exception as e:  # noqa: BLE001
            log.error(f"Error verifying attestation: {e}", source="AttestationVerifier")
            return VerificationResult(valid=False, reason=str(e))

        return VerificationResult(
            valid=approved,
            signer=signer,
            reason=None if approved else "Signer is not an approved validator",
            is_approved_validator=approved,
        )


__all__ = ["AttestationVerifier"]
