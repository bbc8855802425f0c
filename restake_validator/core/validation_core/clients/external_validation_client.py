from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from ..errors import ExternalValidationError
from ..validation_config import ValidationConfig

log = logging.getLogger(__name__)


class ExternalValidationClient:
    """Best-effort submission of attestation payloads to a third-party validator."""

    def __init__(self, url: str, timeout: int = 10, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    @classmethod
    def from_config(cls, cfg: ValidationConfig) -> Optional["ExternalValidationClient"]:
        if not cfg.validation_api_url:
            return None
        return cls(cfg.validation_api_url, timeout=cfg.http_timeout_sec)

    def submit(self, payload: Dict[str, Any]) -> Any:
        try:
            r = self.session.post(self.url, json=payload, timeout=self.timeout)
            r.raise_for_status()
            return r.json()
        except requests.RequestException as e:
            raise ExternalValidationError(f"external validation failed: {e}") from e
        except ValueError as e:
            raise ExternalValidationError(f"bad JSON from external validation: {e}") from e
