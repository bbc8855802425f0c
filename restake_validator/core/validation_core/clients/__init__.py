"""Collaborator clients: price sources and the external validation endpoint."""

from .binance_client import BinancePriceClient
from .chainlink_client import ChainlinkPriceClient
from .external_validation_client import ExternalValidationClient

__all__ = ["BinancePriceClient", "ChainlinkPriceClient", "ExternalValidationClient"]
