"""Branch management.

Branches are referenced by name from schedules, per-branch stock and barbers,
so a rename has to reach all of them in the same write.
"""

from __future__ import annotations

from typing import List
from uuid import uuid4

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.schemas.shop_schema import DEFAULT_BRANCH, Branch, BranchCreate, BranchUpdate, DaySchedule, Shop


def _check_name(shop: Shop, name: str, branch_id: str | None = None) -> str:
    name = name.strip()
    if not name:
        raise ValidationError("El nombre de la sucursal es obligatorio")
    if name.lower() == DEFAULT_BRANCH.lower():
        raise ValidationError(f"'{DEFAULT_BRANCH}' es la sucursal principal y no puede usarse")
    for branch in shop.branches:
        if branch.id != branch_id and branch.name.lower() == name.lower():
            raise ConflictError(f"Ya existe la sucursal '{name}'")
    return name


def _find(shop: Shop, branch_id: str) -> Branch:
    for branch in shop.branches:
        if branch.id == branch_id:
            return branch
    raise NotFoundError("Sucursal no encontrada")


def add_branch(shop: Shop, payload: BranchCreate) -> Branch:
    name = _check_name(shop, payload.name)
    branch = Branch(id=uuid4().hex, **{**payload.model_dump(), "name": name})
    shop.branches.append(branch)
    return branch


def _rename_keys(stock_by_branch: dict, old: str, new: str) -> dict:
    return {new if key == old else key: value for key, value in stock_by_branch.items()}


def update_branch(shop: Shop, branch_id: str, payload: BranchUpdate) -> Branch:
    current = _find(shop, branch_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in changes:
        changes["name"] = _check_name(shop, changes["name"], branch_id)

    updated = current.model_copy(update=changes)
    shop.branches = [updated if branch.id == branch_id else branch for branch in shop.branches]

    old_name, new_name = current.name, updated.name
    if old_name != new_name:
        if old_name in shop.branch_schedules:
            shop.branch_schedules = _rename_keys(shop.branch_schedules, old_name, new_name)
        for items in (shop.inventory, shop.receptions):
            for index, item in enumerate(items):
                if old_name in item.branch_stock:
                    items[index] = item.model_copy(
                        update={"branch_stock": _rename_keys(item.branch_stock, old_name, new_name)}
                    )
        shop.barbers = [
            barber.model_copy(update={"branch": new_name}) if barber.branch == old_name else barber
            for barber in shop.barbers
        ]
    return updated


def remove_branch(shop: Shop, branch_id: str) -> Branch:
    """Drop a branch and its schedule; stock records under its name are kept for history."""
    branch = _find(shop, branch_id)
    if any(barber.branch == branch.name for barber in shop.barbers):
        raise ValidationError("La sucursal tiene barberos asignados")
    shop.branches = [current for current in shop.branches if current.id != branch_id]
    shop.branch_schedules.pop(branch.name, None)
    return branch


def set_branch_schedule(shop: Shop, branch_name: str, schedule: List[DaySchedule]) -> None:
    """Weekly schedule of one branch; Casa Central writes the shop opening hours."""
    if branch_name == DEFAULT_BRANCH:
        shop.opening_hours = schedule
        return
    if branch_name not in shop.branch_names():
        raise NotFoundError("Sucursal no encontrada")
    shop.branch_schedules[branch_name] = schedule
