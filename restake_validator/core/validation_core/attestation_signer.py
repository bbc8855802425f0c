from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional, Protocol

from eth_account import Account
from web3 import Web3

from restake_validator.core.logging import log
from restake_validator.models.attestation import Attestation, AttestationAction, ValidationDetails
from restake_validator.models.position import Position

from .attestation_codec import compute_digest, sign_digest
from .attestation_repository import AttestationStore
from .errors import AttestationPersistenceError
from .validation_config import ValidationConfig


class ExternalValidator(Protocol):
    def submit(self, payload: dict): ...


@dataclass(frozen=True)
class ValidatorIdentity:
    """Who signs. Without a private key attestations come out unsigned."""

    private_key: Optional[str] = field(default=None, repr=False)
    declared_address: Optional[str] = None

    @classmethod
    def from_config(cls, cfg: ValidationConfig) -> "ValidatorIdentity":
        return cls(private_key=cfg.validator_private_key, declared_address=cfg.validator_address)

    @property
    def can_sign(self) -> bool:
        return bool(self.private_key)

    @property
    def address(self) -> Optional[str]:
        if self.private_key:
            return Account.from_key(self.private_key).address
        if self.declared_address:
            return Web3.to_checksum_address(self.declared_address)
        return None


class AttestationSigner:
    """Builds, signs, forwards and stores attestations.

    Only called after price reconciliation and position-state validation
    both succeeded.
    """

    def __init__(
        self,
        identity: ValidatorIdentity,
        store: AttestationStore,
        external: Optional[ExternalValidator] = None,
    ):
        self.identity = identity
        self.store = store
        self.external = external

    def generate_attestation(
        self,
        position: Position,
        action: AttestationAction,
        current_price: float,
        identity: Optional[ValidatorIdentity] = None,
        now: Optional[int] = None,
    ) -> Attestation:
        ident = identity or self.identity
        action = AttestationAction(action)
        timestamp = int(time.time()) if now is None else int(now)

        signature: Optional[str] = None
        if ident.can_sign:
            digest = compute_digest(position.id, position.owner, action, timestamp, current_price)
            signature = sign_digest(digest, ident.private_key)
            log.debug(f"Signed digest {Web3.to_hex(digest)}", source="AttestationSigner")
        else:
            log.warning(
                "No validator key configured; attestation is unsigned and provisional",
                source="AttestationSigner",
                payload={"positionId": position.id},
            )

        attestation = Attestation(
            position_id=position.id,
            owner=position.owner,
            action=action,
            timestamp=timestamp,
            price_at_validation=current_price,
            validator_address=ident.address,
            validation_details=ValidationDetails.from_position(position),
            signature=signature,
        )

        if self.external is not None:
            try:
                response = self.external.submit(attestation.to_payload())
                attestation = attestation.model_copy(update={"external_validation": response})
            except Exception as e:  # noqa: BLE001
                log.warning(f"Failed to get external validation: {e}", source="AttestationSigner")

        try:
            self.store.store(attestation)
        except AttestationPersistenceError:
            raise
        except Exception as e:  # noqa: BLE001
            raise AttestationPersistenceError(f"attestation store failed: {e}") from e

        log.success(
            f"✅ Attestation {action.value} for {position.id}",
            source="AttestationSigner",
            payload={"signed": attestation.is_signed},
        )
        return attestation


__all__ = ["ValidatorIdentity", "AttestationSigner"]
