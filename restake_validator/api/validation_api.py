from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from restake_validator.core.validation_core.attestation_repository import AttestationRepository
from restake_validator.core.validation_core.attestation_verifier import AttestationVerifier
from restake_validator.core.validation_core.errors import AttestationPersistenceError
from restake_validator.core.validation_core.validation_config import ValidationConfig
from restake_validator.core.validation_core.validation_service import ValidationService
from restake_validator.core.validation_core.validator_registry import StaticValidatorRegistry
from restake_validator.models.attestation import AttestationAction
from restake_validator.models.position import Position

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/validation", tags=["validation"])


@lru_cache(maxsize=1)
def get_config() -> ValidationConfig:
    return ValidationConfig.from_env()


# one service per process, so its HTTP sessions are reused across requests
@lru_cache(maxsize=1)
def get_service(cfg: ValidationConfig = Depends(get_config)) -> ValidationService:
    return ValidationService.from_config(cfg)


@lru_cache(maxsize=1)
def get_verifier(cfg: ValidationConfig = Depends(get_config)) -> AttestationVerifier:
    return AttestationVerifier(StaticValidatorRegistry.from_config(cfg))


@lru_cache(maxsize=1)
def get_repository(cfg: ValidationConfig = Depends(get_config)) -> AttestationRepository:
    return AttestationRepository.from_config(cfg)


class ValidateRequest(BaseModel):
    position: Position
    action: AttestationAction = Field(..., description="'restake' or 'returnToPool'")
    current_price: float = Field(..., alias="currentPrice", gt=0)

    model_config = ConfigDict(populate_by_name=True)


# ---------------- prices ----------------

@router.get("/prices")
def api_prices(
    symbol: Optional[str] = Query(None, description="Exchange symbol, e.g. ETHUSDT"),
    service: ValidationService = Depends(get_service),
) -> Dict[str, Any]:
    return service.validate_multiple_prices(symbol).to_dict()


# ---------------- positions ----------------

@router.post("/positions/validate")
def api_validate_position(
    req: ValidateRequest,
    service: ValidationService = Depends(get_service),
) -> Dict[str, Any]:
    try:
        result = service.validate_position_movement(req.position, req.action, req.current_price)
    except AttestationPersistenceError as e:
        log.error("Attestation not stored: %s", e)
        raise HTTPException(status_code=503, detail=str(e))
    return result.to_dict()


# ---------------- attestations ----------------

@router.post("/attestations/verify")
def api_verify_attestation(
    payload: Dict[str, Any],
    verifier: AttestationVerifier = Depends(get_verifier),
) -> Dict[str, Any]:
    return verifier.verify_attestation(payload).to_dict()


@router.get("/attestations/{position_id}")
def api_list_attestations(
    position_id: str,
    repo: AttestationRepository = Depends(get_repository),
) -> List[Dict[str, Any]]:
    try:
        items = repo.list_for_position(position_id)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if not items:
        raise HTTPException(status_code=404, detail="No attestations for position")
    return [a.to_payload() for a in items]
