"""Services, barbers and consumable items of a shop."""

from __future__ import annotations

from typing import List
from uuid import uuid4

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.security import get_password_hash
from app.schemas.catalog_schema import (
    BarberCreate,
    BarberUpdate,
    ConsumableCreate,
    ConsumableUpdate,
    ServiceCreate,
    ServiceUpdate,
)
from app.schemas.shop_schema import DEFAULT_BRANCH, Barber, ConsumableItem, Service, Shop, StockInfo


def _replace(items: list, updated) -> None:
    for index, item in enumerate(items):
        if item.id == updated.id:
            items[index] = updated
            return


def add_service(shop: Shop, payload: ServiceCreate) -> Service:
    service = Service(id=uuid4().hex, **payload.model_dump())
    shop.services.append(service)
    return service


def update_service(shop: Shop, service_id: str, payload: ServiceUpdate) -> Service:
    service = shop.find_service(service_id)
    if service is None:
        raise NotFoundError("Servicio no encontrado")
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    updated = Service.model_validate({**service.model_dump(), **changes})
    _replace(shop.services, updated)
    return updated


def _check_barber(shop: Shop, barber_id: str | None, username: str | None, branch: str | None) -> None:
    if branch is not None and branch not in shop.branch_names():
        raise ValidationError(f"La sucursal '{branch}' no existe")
    if username:
        if username == shop.admin_user:
            raise ConflictError("El usuario ya está en uso")
        for barber in shop.barbers:
            if barber.id != barber_id and barber.username == username:
                raise ConflictError("El usuario ya está en uso")


def add_barber(shop: Shop, payload: BarberCreate) -> Barber:
    _check_barber(shop, None, payload.username, payload.branch)
    data = payload.model_dump(exclude={"password"})
    if data["branch"] == DEFAULT_BRANCH:
        data["branch"] = None
    barber = Barber(
        id=uuid4().hex,
        password_hash=get_password_hash(payload.password) if payload.password else None,
        **data,
    )
    shop.barbers.append(barber)
    return barber


def update_barber(shop: Shop, barber_id: str, payload: BarberUpdate) -> Barber:
    barber = shop.find_barber(barber_id)
    if barber is None:
        raise NotFoundError("Barbero no encontrado")
    changes = payload.model_dump(exclude_unset=True, exclude_none=True, exclude={"password"})
    # branch: null vuelve a Casa Central
    if "branch" in payload.model_fields_set and payload.branch is None:
        changes["branch"] = None
    _check_barber(shop, barber_id, changes.get("username"), changes.get("branch"))
    if changes.get("branch") == DEFAULT_BRANCH:
        changes["branch"] = None
    if payload.password:
        changes["password_hash"] = get_password_hash(payload.password)
    updated = Barber.model_validate({**barber.model_dump(), **changes})
    _replace(shop.barbers, updated)
    return updated


def barber_out(barber: Barber) -> dict:
    return {
        "id": barber.id,
        "name": barber.name,
        "specialties": barber.specialties,
        "avatar": barber.avatar,
        "active": barber.active,
        "username": barber.username,
        "branch": barber.branch_name,
    }


def add_item(items: List[ConsumableItem], payload: ConsumableCreate) -> ConsumableItem:
    item = ConsumableItem(
        id=uuid4().hex,
        name=payload.name,
        active=True,
        branch_stock={DEFAULT_BRANCH: StockInfo(stock=0, min_stock=5)},
    )
    items.append(item)
    return item


def update_item(items: List[ConsumableItem], item_id: str, payload: ConsumableUpdate) -> ConsumableItem:
    for item in items:
        if item.id == item_id:
            updated = item.model_copy(update=payload.model_dump(exclude_unset=True, exclude_none=True))
            _replace(items, updated)
            return updated
    raise NotFoundError("Ítem no encontrado")
