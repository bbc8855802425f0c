from __future__ import annotations


class ValidationCoreError(RuntimeError):
    """Base class for validator infrastructure failures."""


class PriceSourceUnavailable(ValidationCoreError):
    """A price source could not be reached or returned an unusable answer."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source} price source unavailable: {message}")
        self.source = source


class AttestationPersistenceError(ValidationCoreError):
    """The attestation store rejected a write. Always fatal."""


class ExternalValidationError(ValidationCoreError):
    pass


__all__ = [
    "ValidationCoreError",
    "PriceSourceUnavailable",
    "AttestationPersistenceError",
    "ExternalValidationError",
]
