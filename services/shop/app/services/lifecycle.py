"""Booking creation and status transitions.

``CONFIRMED`` is the only non-terminal state. Completing a booking is the one
transition with side effects on the shop document: stock is consumed in the
attendant's branch and the client's last visit moves forward. The shop is
written first (compare-and-swap on its revision) and the booking second; the
two writes are independent, so a failure of the second one leaves consumed
stock behind a booking that still reads ``CONFIRMED``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping, Optional
from uuid import uuid4

import redis
import structlog
from sqlalchemy.orm import Session

from app.core.errors import InvalidTransitionError, NotFoundError, ValidationError
from app.routers import crud
from app.schemas.booking_schema import (
    Booking,
    BookingCompletion,
    BookingCreate,
    BookingStatus,
    PaymentStatus,
)
from app.schemas.shop_schema import DEFAULT_BRANCH, ConsumableItem, Shop
from app.services import identity
from app.services.consumption import apply_consumption
from shared import EventPublisher

logger = structlog.get_logger(__name__)


def _publish_event(
    publisher: Optional[EventPublisher],
    event_type: str,
    booking: Booking,
    **extra,
) -> None:
    if not publisher:
        return
    payload = {
        "booking_id": booking.id,
        "status": booking.status,
        "payment_status": booking.payment_status,
        "barber_id": booking.barber_id,
        "date": booking.date.isoformat(),
        "time": booking.time,
        **extra,
    }
    publisher.publish_shop_event(event_type, booking.shop_slug, payload)


def create_booking(
    db: Session,
    shop: Shop,
    payload: BookingCreate,
    publisher: Optional[EventPublisher] = None,
) -> Booking:
    """Register a public booking; the same barber/date/time may be booked twice."""
    if shop.find_service(payload.service_id) is None:
        raise ValidationError("Servicio inexistente")
    barber = shop.find_barber(payload.barber_id)
    if barber is None or not barber.active:
        raise ValidationError("Barbero inexistente")
    if not payload.client_name.strip():
        raise ValidationError("El nombre del cliente es obligatorio")
    if not payload.client_phone.strip():
        raise ValidationError("El teléfono del cliente es obligatorio")

    phone = identity.normalize_phone(payload.client_phone)
    client = identity.find_by_phone(shop.clients, payload.client_phone)

    booking = Booking(
        id=uuid4().hex,
        shop_slug=shop.slug,
        service_id=payload.service_id,
        barber_id=payload.barber_id,
        client_id=client.id if client else f"guest-{uuid4().hex[:12]}",
        date=payload.date,
        time=payload.time,
        client_name=payload.client_name.strip(),
        client_phone=phone,
        status=BookingStatus.CONFIRMED,
        payment_status=PaymentStatus.PENDING,
        created_at=datetime.now(timezone.utc).isoformat(),
    )
    crud.save_booking(db, booking)
    logger.info(
        "booking_created",
        booking_id=booking.id,
        barber_id=booking.barber_id,
        date=booking.date.isoformat(),
        time=booking.time,
        registered_client=client is not None,
    )
    _publish_event(publisher, "booking.created", booking)
    return booking


def _load_booking(db: Session, slug: str, booking_id: str) -> Booking:
    booking = crud.get_booking(db, slug, booking_id)
    if booking is None:
        raise NotFoundError("Turno no encontrado")
    return booking


def _check_usage(items: list[ConsumableItem], usage: Mapping[str, int], enabled: bool, label: str) -> None:
    used = {item_id: quantity for item_id, quantity in usage.items() if quantity}
    if not used:
        return
    if not enabled:
        raise ValidationError(f"El plan del local no incluye {label}")
    known = {item.id for item in items}
    unknown = sorted(set(used) - known)
    if unknown:
        raise ValidationError(f"Ítems desconocidos en {label}: {', '.join(unknown)}")


def complete(
    db: Session,
    slug: str,
    booking_id: str,
    completion: BookingCompletion,
    *,
    publisher: Optional[EventPublisher] = None,
    cache: Optional[redis.Redis] = None,
) -> Booking:
    booking = _load_booking(db, slug, booking_id)
    if booking.status != BookingStatus.CONFIRMED:
        raise InvalidTransitionError(f"Un turno {booking.status} no puede completarse")

    shop = crud.get_shop(db, slug)
    if shop is None:
        raise NotFoundError("Local no encontrado")

    original = shop.find_barber(booking.barber_id)
    origin_branch = original.branch_name if original else DEFAULT_BRANCH
    attendant = shop.find_barber(completion.attendant_barber_id)
    if attendant is None:
        raise ValidationError("Barbero inexistente")
    if attendant.branch_name != origin_branch:
        raise ValidationError(f"El barbero debe pertenecer a la sucursal {origin_branch}")

    _check_usage(shop.inventory, completion.inventory_usage, shop.features.inventory, "inventario")
    _check_usage(shop.receptions, completion.reception_usage, shop.features.receptions, "recepción")

    branch = attendant.branch_name
    shop.inventory = apply_consumption(shop.inventory, branch, completion.inventory_usage)
    shop.receptions = apply_consumption(shop.receptions, branch, completion.reception_usage)

    client = shop.find_client(booking.client_id)
    if client is not None and (client.last_visit is None or client.last_visit < booking.date):
        shop.clients = [
            current.model_copy(update={"last_visit": booking.date}) if current.id == client.id else current
            for current in shop.clients
        ]

    expected = completion.revision if completion.revision is not None else shop.revision
    crud.save_shop(db, shop, expected_revision=expected, cache=cache)

    completed = booking.model_copy(
        update={
            "status": BookingStatus.COMPLETED,
            "payment_status": PaymentStatus.PAID,
            "barber_id": attendant.id,
        }
    )
    crud.save_booking(db, completed)
    logger.info(
        "booking_completed",
        booking_id=booking.id,
        attendant_barber_id=attendant.id,
        branch=branch,
    )
    _publish_event(
        publisher,
        "booking.completed",
        completed,
        branch=branch,
        inventory_usage=dict(completion.inventory_usage),
        reception_usage=dict(completion.reception_usage),
    )
    return completed


def transition(
    db: Session,
    slug: str,
    booking_id: str,
    new_status: str,
    completion: Optional[BookingCompletion] = None,
    *,
    publisher: Optional[EventPublisher] = None,
    cache: Optional[redis.Redis] = None,
) -> Booking:
    """Move a ``CONFIRMED`` booking to one of the terminal states."""
    booking = _load_booking(db, slug, booking_id)
    if new_status not in BookingStatus.TERMINAL or booking.status != BookingStatus.CONFIRMED:
        raise InvalidTransitionError(f"Transición inválida: {booking.status} -> {new_status}")

    if new_status == BookingStatus.COMPLETED:
        if completion is None:
            raise ValidationError("Completar un turno requiere barbero y consumos")
        return complete(db, slug, booking_id, completion, publisher=publisher, cache=cache)

    updated = booking.model_copy(update={"status": new_status})
    crud.save_booking(db, updated)
    logger.info("booking_status_changed", booking_id=booking.id, status=new_status)
    _publish_event(publisher, "booking.status_changed", updated, previous_status=booking.status)
    return updated
