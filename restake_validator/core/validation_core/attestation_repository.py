from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import Dict, List, Protocol

from restake_validator.models.attestation import Attestation
from restake_validator.models.position import normalize_position_id

from .errors import AttestationPersistenceError
from .validation_config import ValidationConfig

log = logging.getLogger(__name__)


class AttestationStore(Protocol):
    def store(self, attestation: Attestation) -> None: ...


def _record_name(attestation: Attestation) -> str:
    # several attestations for one position may share a timestamp
    suffix = uuid.uuid4().hex[:12]
    return f"{attestation.position_id}-{attestation.timestamp}-{attestation.action.value}-{suffix}.json"


class AttestationRepository:
    """Persist attestations as one JSON document each under ``store_dir``.

    Files are written once and never rewritten; every attestation gets its
    own file, even two for the same position in the same second.
    """

    def __init__(self, store_dir: str | Path):
        self._dir = Path(store_dir)

    @classmethod
    def from_config(cls, cfg: ValidationConfig) -> "AttestationRepository":
        return cls(cfg.attestation_store_dir)

    @property
    def store_dir(self) -> Path:
        return self._dir

    def store(self, attestation: Attestation) -> Path:
        path = self._dir / _record_name(attestation)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            # "x" refuses to overwrite an existing record
            with path.open("x", encoding="utf-8") as fh:
                json.dump(attestation.to_payload(), fh, indent=2)
        except OSError as e:
            raise AttestationPersistenceError(f"could not store attestation at {path}: {e}") from e
        log.info("Stored attestation %s", path.name)
        return path

    def load(self, path: str | Path) -> Attestation:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return Attestation.from_payload(data)

    def list_for_position(self, position_id: str) -> List[Attestation]:
        pid = normalize_position_id(position_id)
        if not self._dir.is_dir():
            return []
        out: List[Attestation] = []
        for p in sorted(self._dir.glob(f"{pid}-*.json")):
            try:
                out.append(self.load(p))
            except Exception as e:  # noqa: BLE001
                log.warning("Skipping unreadable attestation %s: %s", p, e)
        out.sort(key=lambda a: a.timestamp)
        return out


class InMemoryAttestationStore:
    """Store for dry runs and tests; keeps everything in a dict."""

    def __init__(self) -> None:
        self.records: Dict[str, Attestation] = {}

    def store(self, attestation: Attestation) -> None:
        self.records[_record_name(attestation)] = attestation

    def list_for_position(self, position_id: str) -> List[Attestation]:
        pid = normalize_position_id(position_id)
        return sorted(
            (a for a in self.records.values() if a.position_id == pid),
            key=lambda a: a.timestamp,
        )


__all__ = ["AttestationStore", "AttestationRepository", "InMemoryAttestationStore"]
