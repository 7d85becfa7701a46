from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from app.core.auth_dependencies import Session as AuthSession, require_shop_admin, require_shop_staff
from app.core.database import get_db
from app.schemas.booking_schema import (
    Booking,
    BookingCompletion,
    BookingStatus,
    BookingStatusUpdate,
    DashboardOut,
)
from app.services import lifecycle, reports
from shared import local_now, local_today
from . import crud
from .validators import get_cache, get_publisher, load_shop

router = APIRouter(prefix="/shops/{slug}", tags=["Bookings"])


def _check_barber_owns(session: AuthSession, booking: Booking) -> None:
    # un barbero solo opera sus propios turnos
    if session.is_barber and booking.barber_id != session.sub:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Solo puede modificar sus propios turnos",
        )


def _load_booking(db: Session, slug: str, booking_id: str) -> Booking:
    booking = crud.get_booking(db, slug, booking_id)
    if booking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Turno no encontrado")
    return booking


@router.get("/bookings", response_model=List[Booking])
def list_bookings(
    slug: str,
    on_date: Optional[date] = Query(default=None, alias="date"),
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    barber_id: Optional[str] = Query(default=None),
    include_cancelled: bool = Query(default=True),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    bookings = crud.get_bookings(
        db,
        slug,
        on_date=on_date,
        date_from=date_from,
        date_to=date_to,
        barber_id=barber_id,
    )
    if not include_cancelled:
        bookings = [booking for booking in bookings if booking.status != BookingStatus.CANCELLED]
    return bookings


@router.get("/agenda", response_model=List[Booking])
def agenda(
    slug: str,
    on_date: Optional[date] = Query(default=None, alias="date"),
    include_cancelled: bool = Query(default=False),
    db: Session = Depends(get_db),
    session: AuthSession = Depends(require_shop_staff),
):
    """Admin: day agenda (today by default). Barber: own bookings for today."""
    shop = load_shop(db, slug)
    today = local_today(shop.timezone)

    if session.is_barber:
        return reports.barber_agenda(crud.get_bookings(db, slug, on_date=today), session.sub, today)

    target = on_date or today
    return reports.admin_agenda(crud.get_bookings(db, slug, on_date=target), include_cancelled)


@router.patch("/bookings/{booking_id}/status", response_model=Booking)
def change_status(
    slug: str,
    booking_id: str,
    payload: BookingStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    session: AuthSession = Depends(require_shop_staff),
):
    _check_barber_owns(session, _load_booking(db, slug, booking_id))
    return lifecycle.transition(
        db,
        slug,
        booking_id,
        payload.status,
        publisher=get_publisher(request),
        cache=get_cache(request),
    )


@router.post("/bookings/{booking_id}/complete", response_model=Booking)
def complete_booking(
    slug: str,
    booking_id: str,
    payload: BookingCompletion,
    request: Request,
    db: Session = Depends(get_db),
    session: AuthSession = Depends(require_shop_staff),
):
    _check_barber_owns(session, _load_booking(db, slug, booking_id))
    return lifecycle.transition(
        db,
        slug,
        booking_id,
        BookingStatus.COMPLETED,
        payload,
        publisher=get_publisher(request),
        cache=get_cache(request),
    )


@router.get("/dashboard", response_model=DashboardOut)
def dashboard(
    slug: str,
    time_range: str = Query(default=reports.TimeRange.MONTH, alias="range"),
    branch: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    return reports.dashboard(
        shop,
        crud.get_bookings(db, slug),
        local_now(shop.timezone),
        time_range=time_range,
        branch=branch,
    )
