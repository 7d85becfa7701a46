from datetime import date as date_type
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from app.schemas.shop_schema import check_hhmm


class BookingStatus:
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    ABSENT = "ABSENT"
    CANCELLED = "CANCELLED"

    ALL = {CONFIRMED, COMPLETED, ABSENT, CANCELLED}
    TERMINAL = {COMPLETED, ABSENT, CANCELLED}


class PaymentStatus:
    PENDING = "PENDING"
    PAID = "PAID"

    ALL = {PENDING, PAID}


class Booking(BaseModel):
    id: str
    shop_slug: str
    service_id: str
    barber_id: str
    client_id: str = Field(description="ID del cliente o guest-<hex> si no está registrado")
    date: date_type
    time: str = Field(examples=["10:00"])
    client_name: str
    client_phone: str
    status: str = BookingStatus.CONFIRMED
    payment_status: str = PaymentStatus.PENDING
    created_at: Optional[str] = None

    @field_validator("time")
    @classmethod
    def validar_hora(cls, value):
        return check_hhmm(value)

    @field_validator("status")
    @classmethod
    def validar_status(cls, value):
        if value not in BookingStatus.ALL:
            raise ValueError("Estado inválido")
        return value

    @field_validator("payment_status")
    @classmethod
    def validar_pago(cls, value):
        if value not in PaymentStatus.ALL:
            raise ValueError("Estado de pago inválido")
        return value


class BookingCreate(BaseModel):
    """Public booking request from the shop page."""

    service_id: str
    barber_id: str
    date: date_type = Field(examples=["2025-06-10"])
    time: str = Field(examples=["10:00"])
    client_name: str = Field(description="Nombre y apellido", examples=["Juan Pérez"])
    client_phone: str = Field(examples=["351-1111111"])

    @field_validator("time")
    @classmethod
    def validar_hora(cls, value):
        return check_hhmm(value)


class BookingStatusUpdate(BaseModel):
    status: str = Field(examples=["ABSENT"])

    @field_validator("status")
    @classmethod
    def validar_status(cls, value):
        if value not in BookingStatus.ALL:
            raise ValueError("Estado inválido")
        return value


class BookingCompletion(BaseModel):
    """Attendant and consumption recorded when a booking is completed."""

    attendant_barber_id: str
    inventory_usage: Dict[str, int] = Field(default_factory=dict, description="item id -> unidades usadas")
    reception_usage: Dict[str, int] = Field(default_factory=dict, description="item id -> unidades servidas")
    revision: Optional[int] = Field(default=None, description="Revisión del local leída por el cliente")

    @field_validator("inventory_usage", "reception_usage")
    @classmethod
    def validar_uso(cls, value):
        if any(quantity < 0 for quantity in value.values()):
            raise ValueError("Las cantidades no pueden ser negativas")
        return value


class AvailabilityOut(BaseModel):
    shop_slug: str
    date: date_type
    timezone: str
    branch: Optional[str] = None
    slots: List[str]


class WeekdayCount(BaseModel):
    day: str
    count: int


class LowStockAlert(BaseModel):
    kind: str = Field(description="inventory o reception")
    item_id: str
    name: str
    branch: str
    stock: int
    min_stock: int


class DashboardOut(BaseModel):
    range: str
    branch: Optional[str] = None
    total_bookings: int
    completed_bookings: int
    revenue: float
    unique_clients: int
    bookings_by_weekday: List[WeekdayCount]
    low_stock: List[LowStockAlert]
    upcoming: List[Booking]
