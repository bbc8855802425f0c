from pathlib import Path
import os

# resolve the package root from this file (…/restake_validator/core/core_constants.py -> restake_validator/)
_PACKAGE_DIR = Path(__file__).resolve().parents[1]

BASE_DIR = _PACKAGE_DIR
CONFIG_DIR = Path(os.getenv("RESTAKE_VALIDATOR_CONFIG_DIR", "config"))
REPORTS_DIR = Path(os.getenv("RESTAKE_VALIDATOR_REPORTS_DIR", "reports"))
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attestation wire constants. Changing any of these invalidates every
# signature produced so far.
ATTESTATION_DOMAIN_TAG = "RESTAKING_ATTESTATION"
PRICE_DECIMALS = 18

# Uniswap v3 style tick spacing: price = 1.0001 ** tick
TICK_BASE = 1.0001

# Chainlink ETH/USD feeds answer with 8 decimals
AGGREGATOR_DECIMALS = 8

SECONDS_PER_DAY = 24 * 60 * 60

__all__ = [
    "BASE_DIR",
    "CONFIG_DIR",
    "REPORTS_DIR",
    "LOG_DATE_FORMAT",
    "ATTESTATION_DOMAIN_TAG",
    "PRICE_DECIMALS",
    "TICK_BASE",
    "AGGREGATOR_DECIMALS",
    "SECONDS_PER_DAY",
]
