"""Small utilities for IO operations."""
import json
from pathlib import Path
from typing import Any, Dict, Optional

from core.models import Account, PortfolioSnapshot, scale_value
from core.renderer import format_symbol


def safe_write_json(path: Path, obj: Any, indent: int = 2) -> None:
    """Atomically write JSON to path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=indent, default=str)
        f.flush()
    tmp.replace(path)


def snapshot_to_dict(snapshot: PortfolioSnapshot, account: Optional[Account] = None) -> Dict[str, Any]:
    """JSON-friendly view of a snapshot. Decimals are written as strings."""
    payload: Dict[str, Any] = {
        "generated_at": snapshot.generated_at.isoformat(),
        "total_value": str(snapshot.total_value),
        "positions": [
            {
                "symbol": format_symbol(p.security),
                "ticker": p.security.ticker,
                "type": p.security.security_type.value,
                "quantity": str(p.quantity),
                "mark_price": str(p.mark_price),
                "market_value": str(p.market_value),
                "strike": str(p.security.strike) if p.security.strike is not None else None,
                "time_to_maturity": (str(p.security.time_to_maturity)
                                     if p.security.time_to_maturity is not None else None),
            }
            for p in snapshot.positions
        ],
    }
    if account is not None:
        payload["account"] = {
            "account_id": account.account_id,
            "name": account.name,
            "status": account.status.value,
            "cash_balance": str(account.cash_balance),
            "created_at": account.created_at.isoformat(),
            "total_value": str(scale_value(snapshot.total_value + account.cash_balance)),
        }
    return payload
