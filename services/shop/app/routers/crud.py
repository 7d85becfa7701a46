"""Store access for shop documents and bookings.

The shop aggregate is read and written as a whole. Writes that pass an
``expected_revision`` are compare-and-swap: if somebody saved the shop in
between, the write is rejected with ``ConflictError`` and the caller reloads.
"""

from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Optional

import redis
import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import CloudUnavailableError, ConflictError, NotFoundError
from app.models.store import BookingRecord, ShopRecord
from app.schemas.booking_schema import Booking
from app.schemas.shop_schema import Shop
from shared.cache import invalidate_profile_cache
from shared.health import check_database_health

logger = structlog.get_logger(__name__)


@contextmanager
def _store_errors(db: Session) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("store_error", error=str(exc))
        raise CloudUnavailableError(str(exc.__cause__ or exc)) from exc


def _shop_data(shop: Shop) -> dict:
    return shop.model_dump(mode="json", exclude={"revision"})


def _to_shop(record: ShopRecord) -> Shop:
    shop = Shop.model_validate(record.data)
    shop.revision = record.revision
    return shop


def get_shop(db: Session, slug: str) -> Optional[Shop]:
    with _store_errors(db):
        record = db.get(ShopRecord, slug)
        if record is None:
            return None
        # siempre el documento vigente, no el del identity map
        db.refresh(record)
        return _to_shop(record)


def list_shops(db: Session) -> List[Shop]:
    with _store_errors(db):
        records = db.execute(select(ShopRecord).order_by(ShopRecord.name)).scalars().all()
        return [_to_shop(record) for record in records]


def create_shop(db: Session, shop: Shop) -> Shop:
    with _store_errors(db):
        existing = db.get(ShopRecord, shop.slug)
    if existing is not None:
        raise ConflictError(f"Ya existe un local con el slug '{shop.slug}'")

    record = ShopRecord(slug=shop.slug, name=shop.name, data=_shop_data(shop), revision=1)
    try:
        db.add(record)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(f"Ya existe un local con el slug '{shop.slug}'") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise CloudUnavailableError(str(exc)) from exc
    shop.revision = record.revision
    return shop


def save_shop(
    db: Session,
    shop: Shop,
    expected_revision: Optional[int] = None,
    cache: Optional[redis.Redis] = None,
) -> Shop:
    """Persist the whole shop document and return it with its new revision.

    ``expected_revision=None`` is last-writer-wins.
    """
    statement = update(ShopRecord).where(ShopRecord.slug == shop.slug)
    if expected_revision is not None:
        statement = statement.where(ShopRecord.revision == expected_revision)
    statement = statement.execution_options(synchronize_session=False).values(
        name=shop.name,
        data=_shop_data(shop),
        revision=ShopRecord.revision + 1,
    )

    with _store_errors(db):
        result = db.execute(statement)
        if result.rowcount == 0:
            db.rollback()
            if db.get(ShopRecord, shop.slug) is None:
                raise NotFoundError("Local no encontrado")
            logger.info("shop_revision_conflict", shop_slug=shop.slug, expected_revision=expected_revision)
            raise ConflictError("El local fue modificado por otra sesión. Recargue e intente de nuevo.")
        db.commit()
        shop.revision = db.execute(
            select(ShopRecord.revision).where(ShopRecord.slug == shop.slug)
        ).scalar_one()

    invalidate_profile_cache(cache, shop.slug)
    return shop


def get_bookings(
    db: Session,
    slug: str,
    *,
    on_date: Optional[date] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    barber_id: Optional[str] = None,
    client_id: Optional[str] = None,
) -> List[Booking]:
    """Bookings of a shop ordered by date and time."""
    query = select(BookingRecord).where(BookingRecord.shop_slug == slug)
    if on_date is not None:
        query = query.where(BookingRecord.date == on_date.isoformat())
    if date_from is not None:
        query = query.where(BookingRecord.date >= date_from.isoformat())
    if date_to is not None:
        query = query.where(BookingRecord.date <= date_to.isoformat())

    with _store_errors(db):
        records = db.execute(query).scalars().all()

    bookings = [Booking.model_validate(record.data) for record in records]
    if barber_id is not None:
        bookings = [booking for booking in bookings if booking.barber_id == barber_id]
    if client_id is not None:
        bookings = [booking for booking in bookings if booking.client_id == client_id]
    return sorted(bookings, key=lambda booking: (booking.date, booking.time))


def get_booking(db: Session, slug: str, booking_id: str) -> Optional[Booking]:
    with _store_errors(db):
        record = db.get(BookingRecord, booking_id)
        if record is None or record.shop_slug != slug:
            return None
        db.refresh(record)
        return Booking.model_validate(record.data)


def save_booking(db: Session, booking: Booking) -> Booking:
    data = booking.model_dump(mode="json")
    with _store_errors(db):
        record = db.get(BookingRecord, booking.id)
        if record is None:
            record = BookingRecord(id=booking.id, shop_slug=booking.shop_slug)
            db.add(record)
        record.date = booking.date.isoformat()
        record.data = data
        db.commit()
    return booking


def ping(db: Session) -> bool:
    return check_database_health(db.get_bind())
