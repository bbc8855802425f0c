from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import requests

from ..errors import PriceSourceUnavailable
from ..validation_config import ValidationConfig
from ..validation_models import PriceQuote, PriceSource

log = logging.getLogger(__name__)


class BinancePriceClient:
    """Primary price source: exchange spot ticker (``/api/v3/ticker/price``)."""

    SOURCE = "binance"

    def __init__(self, url: str, timeout: int = 10, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, cfg: ValidationConfig) -> "BinancePriceClient":
        return cls(cfg.primary_price_url, timeout=cfg.http_timeout_sec)

    def get_price(self, symbol: str) -> Dict[str, Any]:
        """Return the raw ticker, ``{"symbol": "ETHUSDT", "price": "2500.01"}``."""
        try:
            r = self.session.get(self.url, params={"symbol": symbol}, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except requests.RequestException as e:
            raise PriceSourceUnavailable(self.SOURCE, str(e)) from e
        except ValueError as e:
            raise PriceSourceUnavailable(self.SOURCE, f"bad JSON: {e}") from e

        if not isinstance(data, dict) or "price" not in data:
            raise PriceSourceUnavailable(self.SOURCE, f"unexpected payload: {str(data)[:200]}")
        return data

    def fetch_quote(self, symbol: str) -> PriceQuote:
        data = self.get_price(symbol)
        try:
            value = float(data["price"])
            quote = PriceQuote(value=value, source=PriceSource.PRIMARY, observed_at=int(time.time()))
        except (TypeError, ValueError) as e:
            raise PriceSourceUnavailable(self.SOURCE, f"unusable price {data.get('price')!r}") from e
        log.debug("Binance %s = %s", symbol, value)
        return quote
