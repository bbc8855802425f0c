import json

import pytest
from eth_account import Account

from conftest import NOW, OTHER_KEY, VALIDATOR_KEY

from restake_validator.core.validation_core.attestation_codec import (
    attestation_digest,
    compute_digest,
    scale_price,
    sign_digest,
)
from restake_validator.core.validation_core.attestation_repository import (
    AttestationRepository,
    InMemoryAttestationStore,
)
from restake_validator.core.validation_core.attestation_signer import AttestationSigner, ValidatorIdentity
from restake_validator.core.validation_core.attestation_verifier import AttestationVerifier
from restake_validator.core.validation_core.errors import AttestationPersistenceError, ExternalValidationError
from restake_validator.core.validation_core.validator_registry import StaticValidatorRegistry
from restake_validator.models.attestation import Attestation, AttestationAction


class FailingStore:
    def __init__(self, exc):
        self.exc = exc

    def store(self, attestation):
        raise self.exc


class FakeExternal:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.payloads = []

    def submit(self, payload):
        self.payloads.append(payload)
        if self.error:
            raise self.error
        return self.response


def _attest(signer, position, price=1000.0, action=AttestationAction.RESTAKE):
    return signer.generate_attestation(position, action, price, now=NOW)


# ---------------- codec ----------------

def test_scale_price_uses_decimal_string():
    assert scale_price(2500.5) == 2500_500000000000000000
    assert scale_price(1000) == 1000 * 10**18
    assert scale_price(0.1) == 10**17
    assert scale_price(1e-7) == 10**11


def test_digest_is_deterministic_and_field_sensitive(make_position):
    pos = make_position()
    base = compute_digest(pos.id, pos.owner, "restake", NOW, 1000.0)
    assert len(base) == 32
    assert base == compute_digest(pos.id, pos.owner.lower(), AttestationAction.RESTAKE, NOW, 1000.0)
    assert base != compute_digest(pos.id, pos.owner, "returnToPool", NOW, 1000.0)
    assert base != compute_digest(pos.id, pos.owner, "restake", NOW + 1, 1000.0)
    assert base != compute_digest(pos.id, pos.owner, "restake", NOW, 1000.000001)


# ---------------- signer ----------------

def test_signed_attestation(signer, store, make_position, validator_address):
    pos = make_position()
    att = _attest(signer, pos)
    assert att.is_signed
    assert att.signature.startswith("0x") and len(att.signature) == 2 + 130
    assert att.validator_address == validator_address
    assert att.action is AttestationAction.RESTAKE
    assert att.timestamp == NOW
    assert att.validation_details.lower_tick == pos.lower_tick
    assert att.validation_details.last_active_timestamp == pos.last_active_timestamp
    assert list(store.records.values()) == [att]


def test_unsigned_when_no_key(store, make_position):
    declared = "0x" + "cd" * 20
    signer = AttestationSigner(ValidatorIdentity(declared_address=declared), store)
    att = _attest(signer, make_position())
    assert att.signature is None
    assert not att.is_signed
    assert att.validator_address.lower() == declared
    assert store.list_for_position(att.position_id) == [att]


def test_attestation_is_immutable(signer, make_position):
    att = _attest(signer, make_position())
    with pytest.raises(Exception):
        att.price_at_validation = 2.0


def test_external_validation_is_attached(store, make_position):
    external = FakeExternal(response={"accepted": True})
    signer = AttestationSigner(ValidatorIdentity(private_key=VALIDATOR_KEY), store, external=external)
    att = _attest(signer, make_position())
    assert att.external_validation == {"accepted": True}
    assert external.payloads[0]["positionId"] == att.position_id
    assert external.payloads[0]["signature"] == att.signature


def test_external_validation_failure_is_not_fatal(store, make_position):
    external = FakeExternal(error=ExternalValidationError("timeout"))
    signer = AttestationSigner(ValidatorIdentity(private_key=VALIDATOR_KEY), store, external=external)
    att = _attest(signer, make_position())
    assert att.external_validation is None
    assert att.is_signed
    assert len(store.records) == 1


def test_external_network_error_is_not_fatal(store, make_position):
    external = FakeExternal(error=ConnectionError("endpoint unreachable"))
    signer = AttestationSigner(ValidatorIdentity(private_key=VALIDATOR_KEY), store, external=external)
    att = _attest(signer, make_position())
    assert att.external_validation is None
    assert att.is_signed
    assert list(store.records.values()) == [att]


@pytest.mark.parametrize(
    "exc",
    [AttestationPersistenceError("disk full"), OSError("read-only filesystem")],
)
def test_store_failure_propagates(make_position, exc):
    signer = AttestationSigner(ValidatorIdentity(private_key=VALIDATOR_KEY), FailingStore(exc))
    with pytest.raises(AttestationPersistenceError):
        _attest(signer, make_position())


# ---------------- verifier ----------------

def test_round_trip_recovers_signing_address(signer, registry, make_position, validator_address):
    att = _attest(signer, make_position())
    result = AttestationVerifier(registry).verify_attestation(att)
    assert result.valid
    assert result.signer == validator_address
    assert result.is_approved_validator
    assert result.reason is None


def test_valid_only_if_signer_is_approved(store, make_position):
    other = Account.from_key(OTHER_KEY).address
    signer = AttestationSigner(ValidatorIdentity(private_key=OTHER_KEY), store)
    att = _attest(signer, make_position())

    result = AttestationVerifier(StaticValidatorRegistry([])).verify_attestation(att)
    assert not result.valid
    assert result.signer == other
    assert result.is_approved_validator is False

    approved = AttestationVerifier(StaticValidatorRegistry([other.lower()])).verify_attestation(att)
    assert approved.valid


def test_rejects_missing_signature(registry, store, make_position):
    signer = AttestationSigner(ValidatorIdentity(), store)
    att = _attest(signer, make_position())
    result = AttestationVerifier(registry).verify_attestation(att)
    assert not result.valid
    assert result.reason == "No signature on attestation"
    assert result.signer is None


def test_rejects_tampered_price(signer, registry, make_position, validator_address):
    att = _attest(signer, make_position())
    tampered = att.model_copy(update={"price_at_validation": 1001.0})
    result = AttestationVerifier(registry).verify_attestation(tampered)
    assert not result.valid
    assert result.signer != validator_address


def test_malformed_signature_does_not_raise(signer, registry, make_position):
    att = _attest(signer, make_position())
    broken = att.model_copy(update={"signature": "0x1234"})
    result = AttestationVerifier(registry).verify_attestation(broken)
    assert not result.valid
    assert result.reason


def test_verifies_stored_payload(signer, registry, make_position):
    att = _attest(signer, make_position())
    payload = json.loads(json.dumps(att.to_payload()))
    assert payload["action"] == "restake"
    assert payload["priceAtValidation"] == 1000.0
    verifier = AttestationVerifier(registry)
    assert verifier.verify_attestation(payload).valid
    assert not verifier.verify_attestation({**payload, "signature": None}).valid
    assert not verifier.verify_attestation({"signature": "0xdead"}).valid


def test_signature_matches_shared_digest(signer, make_position):
    att = _attest(signer, make_position())
    assert att.signature == sign_digest(attestation_digest(att), VALIDATOR_KEY)


# ---------------- repository ----------------

def test_repository_writes_one_file_per_attestation(tmp_path, make_position):
    repo = AttestationRepository(tmp_path / "att")
    signer = AttestationSigner(ValidatorIdentity(private_key=VALIDATOR_KEY), repo)
    first = signer.generate_attestation(make_position(), AttestationAction.RESTAKE, 1000.0, now=NOW)
    second = signer.generate_attestation(
        make_position(is_restaked=True), AttestationAction.RETURN_TO_POOL, 2500.0, now=NOW + 60
    )

    stored = repo.list_for_position(first.position_id)
    assert stored == [first, second]
    assert len(list((tmp_path / "att").glob("*.json"))) == 2


def test_repository_keeps_same_second_attestations(tmp_path, make_position):
    repo = AttestationRepository(tmp_path / "att")
    signer = AttestationSigner(ValidatorIdentity(private_key=VALIDATOR_KEY), repo)
    first = _attest(signer, make_position(), price=1000.0)
    second = _attest(signer, make_position(), price=1001.0)

    stored = repo.list_for_position(first.position_id)
    assert sorted(a.price_at_validation for a in stored) == [1000.0, 1001.0]
    assert {a.signature for a in stored} == {first.signature, second.signature}


def test_repository_rejects_malformed_position_id(tmp_path, signer, make_position):
    repo = AttestationRepository(tmp_path)
    repo.store(_attest(signer, make_position()))
    with pytest.raises(ValueError):
        repo.list_for_position("*")


def test_repository_missing_dir_lists_nothing(tmp_path):
    assert AttestationRepository(tmp_path / "nope").list_for_position("0x" + "00" * 32) == []


def test_in_memory_store_lists_by_position(signer, store, make_position):
    att = _attest(signer, make_position())
    assert store.list_for_position(att.position_id.upper().replace("0X", "0x")) == [att]
    assert Attestation.from_payload(att.to_payload()) == att


def test_in_memory_store_keeps_same_second_attestations(signer, store, make_position):
    _attest(signer, make_position())
    _attest(signer, make_position())
    assert len(store.records) == 2
    assert len(store.list_for_position(make_position().id)) == 2
