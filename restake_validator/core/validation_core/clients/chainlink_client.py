from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from web3 import Web3

from restake_validator.core.core_constants import AGGREGATOR_DECIMALS

from ..errors import PriceSourceUnavailable
from ..validation_config import ValidationConfig
from ..validation_models import PriceQuote, PriceSource

log = logging.getLogger(__name__)

# Only latestRoundData from AggregatorV3Interface
AGGREGATOR_ABI = [
    {
        "inputs": [],
        "name": "latestRoundData",
        "outputs": [
            {"internalType": "uint80", "name": "roundId", "type": "uint80"},
            {"internalType": "int256", "name": "answer", "type": "int256"},
            {"internalType": "uint256", "name": "startedAt", "type": "uint256"},
            {"internalType": "uint256", "name": "updatedAt", "type": "uint256"},
            {"internalType": "uint80", "name": "answeredInRound", "type": "uint80"},
        ],
        "stateMutability": "view",
        "type": "function",
    }
]

_ROUND_FIELDS = ("roundId", "answer", "startedAt", "updatedAt", "answeredInRound")


class ChainlinkPriceClient:
    """Secondary price source: on-chain aggregator read over JSON-RPC."""

    SOURCE = "chainlink"

    def __init__(
        self,
        rpc_url: str,
        aggregator_address: str,
        timeout: int = 10,
        w3: Optional[Web3] = None,
    ):
        self.w3 = w3 or Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
        self.aggregator_address = Web3.to_checksum_address(aggregator_address)
        self.contract = self.w3.eth.contract(address=self.aggregator_address, abi=AGGREGATOR_ABI)

    @classmethod
    def from_config(cls, cfg: ValidationConfig) -> "ChainlinkPriceClient":
        return cls(cfg.eth_rpc_url, cfg.aggregator_address, timeout=cfg.http_timeout_sec)

    def get_latest_round_data(self) -> Dict[str, Any]:
        try:
            raw = self.contract.functions.latestRoundData().call()
        except Exception as e:  # noqa: BLE001
            raise PriceSourceUnavailable(self.SOURCE, str(e)) from e
        return dict(zip(_ROUND_FIELDS, raw))

    def get_price(self) -> float:
        return self.fetch_quote().value

    def fetch_quote(self) -> PriceQuote:
        data = self.get_latest_round_data()
        answer = data["answer"]
        if answer <= 0:
            raise PriceSourceUnavailable(self.SOURCE, f"non-positive answer {answer}")
        value = float(Decimal(answer).scaleb(-AGGREGATOR_DECIMALS))
        log.debug("Chainlink round %s = %s", data.get("roundId"), value)
        return PriceQuote(value=value, source=PriceSource.SECONDARY, observed_at=int(data["updatedAt"]))
