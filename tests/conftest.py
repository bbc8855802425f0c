import os
import sys

import pytest
from eth_account import Account

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from restake_validator.core.core_constants import SECONDS_PER_DAY
from restake_validator.core.validation_core.attestation_repository import InMemoryAttestationStore
from restake_validator.core.validation_core.attestation_signer import AttestationSigner, ValidatorIdentity
from restake_validator.core.validation_core.errors import PriceSourceUnavailable
from restake_validator.core.validation_core.tick_math import price_to_tick
from restake_validator.core.validation_core.validation_config import ValidationConfig
from restake_validator.core.validation_core.validation_service import ValidationService
from restake_validator.core.validation_core.validator_registry import StaticValidatorRegistry
from restake_validator.models.position import Position

NOW = 1_700_000_000
VALIDATOR_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
OTHER_KEY = "0x" + "22" * 32
POSITION_ID = "0x" + "01" * 32
OWNER = "0x" + "ab" * 20

CONFIG_ENV_VARS = (
    "VALIDATION_THRESHOLD",
    "POSITION_INACTIVITY_DAYS",
    "VALIDATOR_PRIVATE_KEY",
    "VALIDATOR_ADDRESS",
    "APPROVED_VALIDATORS",
    "VALIDATION_API_URL",
    "CHAINLINK_ETH_USD_ADDRESS",
    "ETH_RPC_URL",
    "PRIMARY_PRICE_URL",
    "PRICE_SYMBOL",
    "ATTESTATION_STORE_DIR",
    "VALIDATION_HTTP_TIMEOUT_SEC",
    "RESTAKE_VALIDATOR_CONFIG_PATH",
)


class FakePrimary:
    def __init__(self, price=None, error=None):
        self.price = price
        self.error = error
        self.calls = []

    def get_price(self, symbol):
        self.calls.append(symbol)
        if self.error:
            raise self.error
        return {"symbol": symbol, "price": str(self.price)}


class FakeSecondary:
    def __init__(self, price=None, error=None):
        self.price = price
        self.error = error

    def get_latest_round_data(self):
        if self.error:
            raise self.error
        return {"roundId": 1, "answer": int(self.price * 10**8), "updatedAt": NOW}

    def get_price(self):
        if self.error:
            raise self.error
        return float(self.price)


def unreachable(source="chainlink"):
    return PriceSourceUnavailable(source, "connection refused")


@pytest.fixture
def validator_address():
    return Account.from_key(VALIDATOR_KEY).address


@pytest.fixture
def make_position():
    def _make(**overrides):
        data = {
            "id": POSITION_ID,
            "owner": OWNER,
            "lower_tick": price_to_tick(2000),
            "upper_tick": price_to_tick(3000),
            "is_restaked": False,
            "last_active_timestamp": NOW - 8 * SECONDS_PER_DAY,
        }
        data.update(overrides)
        return Position(**data)

    return _make


@pytest.fixture
def cfg(tmp_path, validator_address):
    return ValidationConfig(
        validator_private_key=VALIDATOR_KEY,
        approved_validators=(validator_address,),
        attestation_store_dir=str(tmp_path / "attestations"),
    )


@pytest.fixture
def store():
    return InMemoryAttestationStore()


@pytest.fixture
def signer(store):
    return AttestationSigner(ValidatorIdentity(private_key=VALIDATOR_KEY), store)


@pytest.fixture
def registry(validator_address):
    return StaticValidatorRegistry([validator_address])


@pytest.fixture
def make_service(cfg, signer):
    def _make(primary_price=1000.0, secondary_price=1000.0, primary=None, secondary=None):
        return ValidationService(
            cfg,
            primary=primary or FakePrimary(primary_price),
            secondary=secondary or FakeSecondary(secondary_price),
            signer=signer,
        )

    return _make


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
