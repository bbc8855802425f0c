from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from restake_validator.core.logging import configure_console_log
from restake_validator.models.attestation import AttestationAction
from restake_validator.models.position import Position

from ..tick_math import tick_to_price
from ..validation_service import ValidationService

console = Console()


def suggest_action(position: Position, price: float) -> Optional[AttestationAction]:
    """Which movement the position calls for at ``price``, if any."""
    active = tick_to_price(position.lower_tick) <= price <= tick_to_price(position.upper_tick)
    if not active and not position.is_restaked:
        return AttestationAction.RESTAKE
    if active and position.is_restaked:
        return AttestationAction.RETURN_TO_POOL
    return None


def load_positions(path: str | Path) -> List[Position]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("positions", [])
    return [Position.model_validate(p) for p in data]


def scan_positions(
    service: ValidationService,
    positions: List[Position],
    price: float,
    validate: bool = False,
) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for pos in positions:
        lower = tick_to_price(pos.lower_tick)
        upper = tick_to_price(pos.upper_tick)
        action = suggest_action(pos, price)
        row: Dict[str, Any] = {
            "id": pos.id,
            "range": (lower, upper),
            "active": lower <= price <= upper,
            "restaked": pos.is_restaked,
            "action": action.value if action else None,
            "outcome": None,
        }
        if validate and action is not None:
            result = service.validate_position_movement(pos, action, price)
            row["outcome"] = "attested" if result.success else (result.reason or "failed")
        rows.append(row)
    return rows


def _print_rows(rows: List[Dict[str, Any]], price: float) -> None:
    table = Table(title=f"Liquidity Positions @ {price:,.2f}")
    table.add_column("Position")
    table.add_column("Range", justify="right")
    table.add_column("State")
    table.add_column("Restaked")
    table.add_column("Suggested")
    table.add_column("Outcome")
    for r in rows:
        lower, upper = r["range"]
        table.add_row(
            f"{r['id'][:10]}…",
            f"{lower:,.2f} – {upper:,.2f}",
            "[green]Active[/green]" if r["active"] else "[yellow]Inactive[/yellow]",
            "yes" if r["restaked"] else "no",
            r["action"] or "-",
            r["outcome"] or "-",
        )
    console.print(table)


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Scan liquidity positions and optionally attest movements.")
    ap.add_argument("positions", help="JSON file with a list of positions")
    ap.add_argument("--price", type=float, help="Use this price instead of fetching the primary source")
    ap.add_argument("--validate", action="store_true", help="Run validation for positions that need a move")
    ap.add_argument("--debug", action="store_true")
    args = ap.parse_args(argv)

    configure_console_log(args.debug)
    service = ValidationService.from_config()
    positions = load_positions(args.positions)

    price = args.price
    if price is None:
        price = float(service.primary.get_price(service.cfg.price_symbol)["price"])
    console.print(f"[bold]Current price:[/bold] {price:,.4f} ({service.cfg.price_symbol})")

    rows = scan_positions(service, positions, price, validate=args.validate)
    _print_rows(rows, price)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
