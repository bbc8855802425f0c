from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from restake_validator.core.core_constants import CONFIG_DIR, REPORTS_DIR, SECONDS_PER_DAY
from restake_validator.utils.env_utils import _resolve_env, env_str

log = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.05
DEFAULT_INACTIVITY_DAYS = 7.0
DEFAULT_AGGREGATOR_ADDRESS = "0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419"
DEFAULT_RPC_URL = "https://rpc.ankr.com/eth_sepolia"
DEFAULT_PRIMARY_PRICE_URL = "https://api.binance.com/api/v3/ticker/price"
DEFAULT_PRICE_SYMBOL = "ETHUSDT"
DEFAULT_HTTP_TIMEOUT_SEC = 10


def _first_existing(paths: list[str | Path | None]) -> Optional[Path]:
    for p in paths:
        if not p:
            continue
        path = Path(p)
        if path.is_file():
            return path
    return None


def _load_json_config() -> Tuple[Dict[str, Any], Optional[str]]:
    """
    Search order:
      1) RESTAKE_VALIDATOR_CONFIG_PATH (env)
      2) ./config/restake_validator.json
      3) ./restake_validator.json
    Returns (config_dict, path_str|None)
    """
    candidates: list[str | Path | None] = [
        env_str("RESTAKE_VALIDATOR_CONFIG_PATH"),
        CONFIG_DIR / "restake_validator.json",
        Path("restake_validator.json"),
    ]
    path = _first_existing(candidates)
    if not path:
        return {}, None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("root JSON must be an object")
        return data, str(path)
    except Exception as e:  # noqa: BLE001
        log.warning("Failed to load validator JSON config at %s: %s", path, e)
        return {}, str(path)


def _section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    sec = cfg.get(name, {})
    return sec if isinstance(sec, dict) else {}


def _pick(env_name: str, json_value: Any, default: Any = None) -> Any:
    """Env wins over JSON, JSON wins over the default."""
    v = env_str(env_name)
    if v is not None:
        return v
    v = _resolve_env(json_value)
    if v is None or v == "":
        return default
    return v


def _as_float(name: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be a number, got {value!r}") from e


def _as_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e


def _as_address_list(value: Any) -> Tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    return tuple(str(a).strip() for a in items if str(a).strip())


@dataclass(frozen=True)
class ValidationConfig:
    """Runtime config for position validation and attestation."""

    # —— Decision thresholds ——
    tolerance_fraction: float = DEFAULT_TOLERANCE
    inactivity_days: float = DEFAULT_INACTIVITY_DAYS

    # —— Validator identity ——
    validator_private_key: Optional[str] = field(default=None, repr=False)
    validator_address: Optional[str] = None
    approved_validators: Tuple[str, ...] = ()

    # —— Price sources ——
    price_symbol: str = DEFAULT_PRICE_SYMBOL
    primary_price_url: str = DEFAULT_PRIMARY_PRICE_URL
    eth_rpc_url: str = DEFAULT_RPC_URL
    aggregator_address: str = DEFAULT_AGGREGATOR_ADDRESS

    # —— Collaborators ——
    validation_api_url: Optional[str] = None
    attestation_store_dir: str = str(REPORTS_DIR / "attestations")

    # —— Tunables ——
    http_timeout_sec: int = DEFAULT_HTTP_TIMEOUT_SEC

    # —— Debug ——
    source_json_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.tolerance_fraction < 0:
            raise ValueError("tolerance_fraction must be >= 0")
        if self.inactivity_days < 0:
            raise ValueError("inactivity_days must be >= 0")
        if self.http_timeout_sec <= 0:
            raise ValueError("http_timeout_sec must be > 0")

    @property
    def inactivity_threshold_seconds(self) -> int:
        return int(self.inactivity_days * SECONDS_PER_DAY)

    @property
    def signing_enabled(self) -> bool:
        return bool(self.validator_private_key)

    @staticmethod
    def from_env() -> "ValidationConfig":
        """
        Layering (highest → lowest):
          1) Process env vars
          2) restake_validator.json (see search order above)
          3) Defaults
        JSON shape (example):
        {
          "validation": {"tolerance": 0.05, "inactivity_days": 7},
          "validator": {
            "private_key": "${VALIDATOR_PRIVATE_KEY}",
            "address": "0x…",
            "approved": ["0x…"]
          },
          "prices": {
            "symbol": "ETHUSDT",
            "primary_url": "https://api.binance.com/api/v3/ticker/price",
            "rpc_url": "https://rpc.ankr.com/eth_sepolia",
            "aggregator_address": "0x5f4e…8419"
          },
          "attestations": {"store_dir": "reports/attestations", "validation_api_url": null},
          "http_timeout_sec": 10
        }
        """
        jcfg, jpath = _load_json_config()
        val = _section(jcfg, "validation")
        ident = _section(jcfg, "validator")
        prices = _section(jcfg, "prices")
        att = _section(jcfg, "attestations")

        tolerance = _as_float(
            "VALIDATION_THRESHOLD", _pick("VALIDATION_THRESHOLD", val.get("tolerance"), DEFAULT_TOLERANCE)
        )
        days = _as_float(
            "POSITION_INACTIVITY_DAYS",
            _pick("POSITION_INACTIVITY_DAYS", val.get("inactivity_days"), DEFAULT_INACTIVITY_DAYS),
        )
        timeout = _as_int(
            "VALIDATION_HTTP_TIMEOUT_SEC",
            _pick("VALIDATION_HTTP_TIMEOUT_SEC", jcfg.get("http_timeout_sec"), DEFAULT_HTTP_TIMEOUT_SEC),
        )

        return ValidationConfig(
            tolerance_fraction=tolerance,
            inactivity_days=days,
            validator_private_key=_pick("VALIDATOR_PRIVATE_KEY", ident.get("private_key")),
            validator_address=_pick("VALIDATOR_ADDRESS", ident.get("address")),
            approved_validators=_as_address_list(_pick("APPROVED_VALIDATORS", ident.get("approved"))),
            price_symbol=_pick("PRICE_SYMBOL", prices.get("symbol"), DEFAULT_PRICE_SYMBOL),
            primary_price_url=_pick("PRIMARY_PRICE_URL", prices.get("primary_url"), DEFAULT_PRIMARY_PRICE_URL),
            eth_rpc_url=_pick("ETH_RPC_URL", prices.get("rpc_url"), DEFAULT_RPC_URL),
            aggregator_address=_pick(
                "CHAINLINK_ETH_USD_ADDRESS", prices.get("aggregator_address"), DEFAULT_AGGREGATOR_ADDRESS
            ),
            validation_api_url=_pick("VALIDATION_API_URL", att.get("validation_api_url")),
            attestation_store_dir=str(
                _pick("ATTESTATION_STORE_DIR", att.get("store_dir"), str(REPORTS_DIR / "attestations"))
            ),
            http_timeout_sec=timeout,
            source_json_path=jpath,
        )


__all__ = ["ValidationConfig"]
