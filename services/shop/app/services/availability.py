from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional, Sequence

from app.schemas.shop_schema import DaySchedule, Shop
from shared import local_now

SLOT_GRID = [
    "09:00",
    "10:00",
    "11:00",
    "12:00",
    "14:00",
    "15:00",
    "16:00",
    "17:00",
    "18:00",
    "19:00",
]


def _within_hours(slot: str, day_schedule: DaySchedule) -> bool:
    if not day_schedule.open:
        return False
    if slot < day_schedule.open_time or slot >= day_schedule.close_time:
        return False
    if day_schedule.break_start and day_schedule.break_start <= slot < day_schedule.break_end:
        return False
    return True


def compute_available_slots(
    day_schedule: Optional[DaySchedule],
    slot_grid: Sequence[str],
    target_date: date,
    now: datetime,
    *,
    respect_opening_hours: bool = False,
) -> List[str]:
    """Slots offered for ``target_date``, in grid order.

    ``now`` must already be on the shop's wall clock. On the current day every
    slot at or before the current minute is gone; any other date gets the whole
    grid. The day schedule only filters when ``respect_opening_hours`` is set.
    """
    slots = list(slot_grid)

    if respect_opening_hours and day_schedule is not None:
        slots = [slot for slot in slots if _within_hours(slot, day_schedule)]

    if target_date == now.date():
        current = now.strftime("%H:%M")
        slots = [slot for slot in slots if slot > current]

    return slots


def available_slots_for_shop(
    shop: Shop,
    target_date: date,
    *,
    branch: Optional[str] = None,
    now: Optional[datetime] = None,
    respect_opening_hours: bool = False,
) -> dict:
    shop_now = local_now(shop.timezone, now)
    slots = compute_available_slots(
        shop.schedule_for(target_date, branch),
        SLOT_GRID,
        target_date,
        shop_now,
        respect_opening_hours=respect_opening_hours,
    )
    return {
        "shop_slug": shop.slug,
        "date": target_date,
        "timezone": shop.timezone,
        "branch": branch,
        "slots": slots,
    }
