"""Stock ledger for inventory products and reception amenities."""

from __future__ import annotations

from typing import Collection, Dict, List, Mapping, Optional

import structlog

from app.core.errors import NotFoundError, ValidationError
from app.schemas.shop_schema import ConsumableItem, StockInfo

logger = structlog.get_logger(__name__)


def apply_consumption(
    items: List[ConsumableItem],
    branch: str,
    usage: Mapping[str, int],
) -> List[ConsumableItem]:
    """Return a new item list with ``usage`` subtracted from ``branch`` stock.

    Items that were not used come back as the very same objects. Stock floors
    at zero; a branch without a record starts from the default ``StockInfo``.
    """
    result = []
    for item in items:
        used = usage.get(item.id, 0)
        if not used:
            result.append(item)
            continue

        current = item.stock_for(branch)
        branch_stock = dict(item.branch_stock)
        branch_stock[branch] = StockInfo(stock=max(0, current.stock - used), min_stock=current.min_stock)
        result.append(item.model_copy(update={"branch_stock": branch_stock}))
        logger.info(
            "stock_consumed",
            item_id=item.id,
            branch=branch,
            used=used,
            stock=branch_stock[branch].stock,
        )
    return result


def set_stock(
    items: List[ConsumableItem],
    item_id: str,
    branch: str,
    stock: int,
    min_stock: int | None = None,
) -> List[ConsumableItem]:
    """Admin stock adjustment for one item in one branch."""
    if stock < 0:
        raise ValidationError("El stock no puede ser negativo")

    result = []
    found = False
    for item in items:
        if item.id != item_id:
            result.append(item)
            continue
        found = True
        current = item.stock_for(branch)
        branch_stock = dict(item.branch_stock)
        branch_stock[branch] = StockInfo(
            stock=stock,
            min_stock=current.min_stock if min_stock is None else min_stock,
        )
        result.append(item.model_copy(update={"branch_stock": branch_stock}))

    if not found:
        raise NotFoundError("Ítem no encontrado")
    return result


def low_stock(
    items: List[ConsumableItem],
    branch: str | None = None,
    existing_branches: Optional[Collection[str]] = None,
) -> List[Dict[str, object]]:
    """Active items whose stock in a branch is at or below its minimum.

    Only branches with a stock record are checked; ``branch`` narrows to one.
    Records of removed branches are skipped when ``existing_branches`` is given.
    """
    alerts = []
    for item in items:
        if not item.active:
            continue
        for branch_name, info in item.branch_stock.items():
            if branch is not None and branch_name != branch:
                continue
            if existing_branches is not None and branch_name not in existing_branches:
                continue
            if info.stock <= info.min_stock:
                alerts.append(
                    {
                        "item_id": item.id,
                        "name": item.name,
                        "branch": branch_name,
                        "stock": info.stock,
                        "min_stock": info.min_stock,
                    }
                )
    return alerts
