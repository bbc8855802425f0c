from .core_constants import (
    BASE_DIR,
    CONFIG_DIR,
    REPORTS_DIR,
    LOG_DATE_FORMAT,
    ATTESTATION_DOMAIN_TAG,
    TICK_BASE,
    PRICE_DECIMALS,
    AGGREGATOR_DECIMALS,
    SECONDS_PER_DAY,
)
from .logging import log, configure_console_log

__all__ = [
    "BASE_DIR",
    "CONFIG_DIR",
    "REPORTS_DIR",
    "LOG_DATE_FORMAT",
    "ATTESTATION_DOMAIN_TAG",
    "TICK_BASE",
    "PRICE_DECIMALS",
    "AGGREGATOR_DECIMALS",
    "SECONDS_PER_DAY",
    "log",
    "configure_console_log",
]
