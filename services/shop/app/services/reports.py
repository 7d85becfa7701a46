"""Dashboard figures and daily agendas computed from the shop bookings."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List, Optional

from app.core.errors import ValidationError
from app.schemas.booking_schema import Booking, BookingStatus, PaymentStatus
from app.schemas.shop_schema import DEFAULT_BRANCH, Shop
from app.services.consumption import low_stock

WEEKDAY_LABELS = ["Dom", "Lun", "Mar", "Mie", "Jue", "Vie", "Sab"]


class TimeRange:
    TODAY = "TODAY"
    WEEK = "WEEK"
    MONTH = "MONTH"
    ALL = "ALL"

    CHOICES = {TODAY, WEEK, MONTH, ALL}


def booking_branch(shop: Shop, booking: Booking) -> str:
    barber = shop.find_barber(booking.barber_id)
    return barber.branch_name if barber else DEFAULT_BRANCH


def _in_range(booking_date: date, time_range: str, today: date) -> bool:
    if time_range == TimeRange.ALL:
        return True
    if time_range == TimeRange.TODAY:
        return booking_date == today
    if time_range == TimeRange.WEEK:
        # semana de domingo a sábado
        start = today - timedelta(days=(today.weekday() + 1) % 7)
        return start <= booking_date <= start + timedelta(days=6)
    return booking_date.year == today.year and booking_date.month == today.month


def dashboard(
    shop: Shop,
    bookings: List[Booking],
    now: datetime,
    *,
    time_range: str = TimeRange.MONTH,
    branch: Optional[str] = None,
) -> dict:
    """Figures for ``time_range`` around ``now`` (shop wall clock). Cancelled bookings never count."""
    if time_range not in TimeRange.CHOICES:
        raise ValidationError("Rango inválido")

    today = now.date()
    visible = [
        booking
        for booking in bookings
        if booking.status != BookingStatus.CANCELLED
        and (branch is None or booking_branch(shop, booking) == branch)
    ]
    in_period = [booking for booking in visible if _in_range(booking.date, time_range, today)]

    prices = {service.id: service.price for service in shop.services}
    revenue = sum(
        prices.get(booking.service_id, 0)
        for booking in in_period
        if booking.payment_status == PaymentStatus.PAID
    )

    by_weekday = [0] * 7
    for booking in in_period:
        by_weekday[(booking.date.weekday() + 1) % 7] += 1

    alerts = []
    live_branches = set(shop.branch_names())
    if shop.features.inventory:
        alerts += [
            {"kind": "inventory", **alert} for alert in low_stock(shop.inventory, branch, live_branches)
        ]
    if shop.features.receptions:
        alerts += [
            {"kind": "reception", **alert} for alert in low_stock(shop.receptions, branch, live_branches)
        ]

    current = now.strftime("%H:%M")
    upcoming = sorted(
        (
            booking
            for booking in visible
            if booking.date > today or (booking.date == today and booking.time >= current)
        ),
        key=lambda booking: (booking.date, booking.time),
    )[:5]

    return {
        "range": time_range,
        "branch": branch,
        "total_bookings": len(in_period),
        "completed_bookings": sum(1 for booking in in_period if booking.status == BookingStatus.COMPLETED),
        "revenue": revenue,
        "unique_clients": len({booking.client_phone for booking in in_period}),
        "bookings_by_weekday": [
            {"day": label, "count": count} for label, count in zip(WEEKDAY_LABELS, by_weekday)
        ],
        "low_stock": alerts,
        "upcoming": upcoming,
    }


def admin_agenda(bookings: List[Booking], include_cancelled: bool = False) -> List[Booking]:
    """Bookings of one day sorted by time; cancelled ones are hidden by default."""
    visible = [
        booking
        for booking in bookings
        if include_cancelled or booking.status != BookingStatus.CANCELLED
    ]
    return sorted(visible, key=lambda booking: booking.time)


def barber_agenda(bookings: List[Booking], barber_id: str, today: date) -> List[Booking]:
    return sorted(
        (booking for booking in bookings if booking.barber_id == barber_id and booking.date == today),
        key=lambda booking: booking.time,
    )
