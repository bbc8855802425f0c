"""Restake / return-to-pool state machine.

A position is always conceptually in exactly one of two states, active in the
pool or restaked out. Each movement between them is an *action rule*: an
ordered list of preconditions over a :class:`PositionSnapshot`. The evaluator
checks them in order and stops at the first one that fails.

New actions are added by registering another rule, the evaluator itself does
not change::

    evaluator.register_action_rule("emergencyExit", [Precondition(...), ...])

Only members of :class:`AttestationAction` can be attested, so an action that
should end in an attestation also needs a member there.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union

from restake_validator.core.core_constants import SECONDS_PER_DAY
from restake_validator.models.attestation import AttestationAction
from restake_validator.models.position import Position

from .tick_math import tick_to_price
from .validation_models import FailureCode, ValidationResult

ActionKey = Union[AttestationAction, str]


@dataclass(frozen=True)
class PositionSnapshot:
    """Derived values every precondition is evaluated against."""

    current_price: float
    lower_price: float
    upper_price: float
    is_active: bool
    is_restaked: bool
    inactive_duration: int
    inactivity_threshold: int


def _range_details(s: PositionSnapshot) -> Dict[str, Any]:
    return {
        "currentPrice": s.current_price,
        "lowerPrice": s.lower_price,
        "upperPrice": s.upper_price,
        "priceRange": f"{s.lower_price}-{s.upper_price}",
    }


def _duration_details(s: PositionSnapshot) -> Dict[str, Any]:
    return {
        "inactiveDuration": s.inactive_duration,
        "requiredDuration": s.inactivity_threshold,
        "inactiveDays": s.inactive_duration // SECONDS_PER_DAY,
        "requiredDays": s.inactivity_threshold / SECONDS_PER_DAY,
    }


def _restake_details(s: PositionSnapshot) -> Dict[str, Any]:
    return {"isRestaked": s.is_restaked}


@dataclass(frozen=True)
class Precondition:
    predicate: Callable[[PositionSnapshot], bool]
    reason: str
    details: Callable[[PositionSnapshot], Dict[str, Any]] = field(default=lambda _s: {})


DEFAULT_ACTION_RULES: Dict[str, Tuple[Precondition, ...]] = {
    AttestationAction.RESTAKE.value: (
        Precondition(
            lambda s: not s.is_active,
            "Position is currently active and cannot be restaked",
            _range_details,
        ),
        Precondition(
            lambda s: s.inactive_duration >= s.inactivity_threshold,
            "Position has not been inactive long enough to be restaked",
            _duration_details,
        ),
        Precondition(
            lambda s: not s.is_restaked,
            "Position is already restaked",
            _restake_details,
        ),
    ),
    AttestationAction.RETURN_TO_POOL.value: (
        Precondition(
            lambda s: s.is_active,
            "Position is not active and should remain restaked",
            _range_details,
        ),
        Precondition(
            lambda s: s.is_restaked,
            "Position is not currently restaked",
            _restake_details,
        ),
    ),
}


def _key(action: ActionKey) -> str:
    return action.value if isinstance(action, AttestationAction) else str(action)


def snapshot_position(
    position: Position,
    current_price: float,
    inactivity_threshold_seconds: int,
    now: Optional[int] = None,
) -> PositionSnapshot:
    lower_price = tick_to_price(position.lower_tick)
    upper_price = tick_to_price(position.upper_tick)
    now = int(time.time()) if now is None else int(now)
    return PositionSnapshot(
        current_price=current_price,
        lower_price=lower_price,
        upper_price=upper_price,
        is_active=lower_price <= current_price <= upper_price,
        is_restaked=position.is_restaked,
        inactive_duration=now - position.last_active_timestamp,
        inactivity_threshold=int(inactivity_threshold_seconds),
    )


class PositionStateEvaluator:
    def __init__(self, rules: Optional[Dict[str, Iterable[Precondition]]] = None):
        source = DEFAULT_ACTION_RULES if rules is None else rules
        self._rules: Dict[str, Tuple[Precondition, ...]] = {
            _key(k): tuple(v) for k, v in source.items()
        }

    def register_action_rule(self, action: ActionKey, preconditions: Iterable[Precondition]) -> None:
        self._rules[_key(action)] = tuple(preconditions)

    def supported_actions(self) -> Tuple[str, ...]:
        return tuple(self._rules)

    def evaluate(
        self,
        position: Position,
        action: ActionKey,
        current_price: float,
        inactivity_threshold_seconds: int,
        now: Optional[int] = None,
    ) -> ValidationResult:
        rule = self._rules.get(_key(action))
        if rule is None:
            return ValidationResult.fail(
                FailureCode.UNSUPPORTED_ACTION,
                f"Unsupported action: {_key(action)}",
                {"supportedActions": list(self._rules)},
            )

        snap = snapshot_position(position, current_price, inactivity_threshold_seconds, now)
        for pre in rule:
            if not pre.predicate(snap):
                return ValidationResult.fail(
                    FailureCode.PRECONDITION_FAILED,
                    pre.reason,
                    {"action": _key(action), **pre.details(snap)},
                )
        return ValidationResult.ok({"action": _key(action), "isActive": snap.is_active})


_default_evaluator = PositionStateEvaluator()


def evaluate_position_state(
    position: Position,
    action: ActionKey,
    current_price: float,
    inactivity_threshold_seconds: int,
    now: Optional[int] = None,
) -> ValidationResult:
    """Evaluate ``action`` for ``position`` with the default restake/return rules."""
    return _default_evaluator.evaluate(
        position, action, current_price, inactivity_threshold_seconds, now=now
    )


__all__ = [
    "PositionSnapshot",
    "Precondition",
    "DEFAULT_ACTION_RULES",
    "PositionStateEvaluator",
    "snapshot_position",
    "evaluate_position_state",
]
