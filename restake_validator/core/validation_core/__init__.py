"""
validation_core – restake/return validation and attestation.
Price reconciliation → position state → signed attestation, plus the
inverse verification path.
"""
__all__ = [
    "validation_config",
    "validation_models",
    "tick_math",
    "price_reconciler",
    "position_evaluator",
    "attestation_codec",
    "attestation_signer",
    "attestation_verifier",
    "attestation_repository",
    "validator_registry",
    "validation_service",
]
