"""Canonical attestation digest.

Signer and verifier both hash through :func:`attestation_digest`. The field
order and the price scaling below are part of the signature format; the
verifier does not raise on a mismatch, it just recovers a different address.

    keccak256(abi.encodePacked(
        string  "RESTAKING_ATTESTATION",
        bytes32 positionId,
        address owner,
        string  action,
        uint256 timestamp,
        uint256 priceAtValidation * 10**18,
    ))
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, List, Tuple, Union

from eth_account import Account
from eth_account.messages import SignableMessage, encode_defunct
from hexbytes import HexBytes
from web3 import Web3

from restake_validator.core.core_constants import ATTESTATION_DOMAIN_TAG, PRICE_DECIMALS
from restake_validator.models.attestation import Attestation, AttestationAction

DIGEST_TYPES: Tuple[str, ...] = ("string", "bytes32", "address", "string", "uint256", "uint256")


def scale_price(price: Union[float, str, Decimal]) -> int:
    """Fixed-point integer with 18 decimals, from the price's decimal string."""
    d = price if isinstance(price, Decimal) else Decimal(str(price))
    if d < 0:
        raise ValueError(f"price must be non-negative, got {price!r}")
    return int(d.scaleb(PRICE_DECIMALS))


def digest_values(
    position_id: str,
    owner: str,
    action: Union[AttestationAction, str],
    timestamp: int,
    price: Union[float, str, Decimal],
) -> List[Any]:
    action_str = action.value if isinstance(action, AttestationAction) else str(action)
    return [
        ATTESTATION_DOMAIN_TAG,
        HexBytes(position_id),
        Web3.to_checksum_address(owner),
        action_str,
        int(timestamp),
        scale_price(price),
    ]


def compute_digest(
    position_id: str,
    owner: str,
    action: Union[AttestationAction, str],
    timestamp: int,
    price: Union[float, str, Decimal],
) -> HexBytes:
    values = digest_values(position_id, owner, action, timestamp, price)
    return HexBytes(Web3.solidity_keccak(list(DIGEST_TYPES), values))


def attestation_digest(attestation: Attestation) -> HexBytes:
    return compute_digest(
        attestation.position_id,
        attestation.owner,
        attestation.action,
        attestation.timestamp,
        attestation.price_at_validation,
    )


def signable_message(digest: bytes) -> SignableMessage:
    """EIP-191 personal message over the raw 32 digest bytes."""
    return encode_defunct(primitive=bytes(digest))


def sign_digest(digest: bytes, private_key: str) -> str:
    signed = Account.sign_message(signable_message(digest), private_key=private_key)
    return "0x" + bytes(signed.signature).hex()


def recover_signer(digest: bytes, signature: Union[str, bytes]) -> str:
    return Account.recover_message(signable_message(digest), signature=HexBytes(signature))


__all__ = [
    "DIGEST_TYPES",
    "scale_price",
    "digest_values",
    "compute_digest",
    "attestation_digest",
    "signable_message",
    "sign_digest",
    "recover_signer",
]
