from __future__ import annotations

from typing import FrozenSet, Iterable, Protocol

from web3 import Web3

from .validation_config import ValidationConfig


class ValidatorRegistry(Protocol):
    def is_approved_validator(self, address: str) -> bool: ...


class StaticValidatorRegistry:
    """Allow-list of approved validator addresses, compared in checksum form."""

    def __init__(self, addresses: Iterable[str] = ()):
        self._approved: FrozenSet[str] = frozenset(Web3.to_checksum_address(a) for a in addresses)

    @classmethod
    def from_config(cls, cfg: ValidationConfig) -> "StaticValidatorRegistry":
        return cls(cfg.approved_validators)

    @property
    def approved(self) -> FrozenSet[str]:
        return self._approved

    def is_approved_validator(self, address: str) -> bool:
        if not address or not Web3.is_address(address):
            return False
        return Web3.to_checksum_address(address) in self._approved


__all__ = ["ValidatorRegistry", "StaticValidatorRegistry"]
