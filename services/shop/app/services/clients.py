from __future__ import annotations

import csv
import io
from datetime import date
from typing import Iterable, List, Optional
from uuid import uuid4

from app.core.errors import NotFoundError, ValidationError
from app.schemas.client_schema import ClientCreate, ClientFilter, ClientUpdate, MembershipFilter
from app.schemas.shop_schema import Client, ClientType, Shop
from app.services import identity, memberships

CSV_HEADERS = ["Nombre", "Apellido", "Telefono", "Tipo", "Ultima Visita", "Membresia"]


def get_client(shop: Shop, client_id: str) -> Client:
    client = shop.find_client(client_id)
    if client is None:
        raise NotFoundError("Cliente no encontrado")
    return client


def replace_client(shop: Shop, client: Client) -> None:
    for index, current in enumerate(shop.clients):
        if current.id == client.id:
            shop.clients[index] = client
            return
    raise NotFoundError("Cliente no encontrado")


def create_client(shop: Shop, payload: ClientCreate, today: date) -> Client:
    """Register a client; a REGULAR client may get a membership in the same step."""
    phone = identity.ensure_unique_phone(shop.clients, payload.phone)

    client = Client(
        id=uuid4().hex,
        shop_slug=shop.slug,
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=phone,
        type=payload.type,
        notes=payload.notes,
    )

    if payload.plan_id:
        if payload.type != ClientType.REGULAR:
            raise ValidationError("Solo los clientes REGULAR pueden tener membresía")
        if not shop.features.memberships:
            raise ValidationError("El plan del local no incluye membresías")
        plan = shop.find_plan(payload.plan_id)
        if plan is None:
            raise NotFoundError("Plan no encontrado")
        client = memberships.issue(client, plan, today)

    shop.clients.append(client)
    return client


def update_client(shop: Shop, client_id: str, payload: ClientUpdate) -> Client:
    client = get_client(shop, client_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)

    if "phone" in changes:
        changes["phone"] = identity.ensure_unique_phone(shop.clients, changes["phone"], client_id=client.id)
    if changes.get("type") == ClientType.EXPRESS and client.active_membership is not None:
        raise ValidationError("Cancele la membresía antes de pasar el cliente a EXPRESS")

    updated = client.model_copy(update=changes)
    replace_client(shop, updated)
    return updated


def _matches(client: Client, filters: ClientFilter) -> bool:
    if filters.search:
        term = filters.search.strip().lower()
        if not (
            term in client.first_name.lower()
            or term in client.last_name.lower()
            or term in client.phone
        ):
            return False

    if filters.type and client.type != filters.type:
        return False

    if filters.membership == MembershipFilter.WITH and client.active_membership is None:
        return False
    if filters.membership == MembershipFilter.WITHOUT and client.active_membership is not None:
        return False

    if filters.last_visit_from or filters.last_visit_to:
        if client.last_visit is None:
            return False
        if filters.last_visit_from and client.last_visit < filters.last_visit_from:
            return False
        if filters.last_visit_to and client.last_visit > filters.last_visit_to:
            return False

    return True


def filter_clients(clients: Iterable[Client], filters: Optional[ClientFilter] = None) -> List[Client]:
    if filters is None:
        return list(clients)
    return [client for client in clients if _matches(client, filters)]


def export_csv(clients: Iterable[Client]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for client in clients:
        writer.writerow(
            [
                client.first_name,
                client.last_name,
                client.phone,
                client.type,
                client.last_visit.isoformat() if client.last_visit else "",
                client.active_membership.plan_name if client.active_membership else "",
            ]
        )
    return buffer.getvalue()
