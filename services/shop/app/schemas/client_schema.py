from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from app.schemas.booking_schema import Booking
from app.schemas.shop_schema import Client, ClientType


class MembershipFilter:
    WITH = "WITH"
    WITHOUT = "WITHOUT"

    ALL = {WITH, WITHOUT}


class ClientCreate(BaseModel):
    first_name: str = Field(min_length=1, examples=["Juan"])
    last_name: str = Field(min_length=1, examples=["Pérez"])
    phone: str = Field(min_length=1, examples=["351-1111111"])
    type: str = Field(default=ClientType.REGULAR, examples=["REGULAR"])
    notes: str = ""
    plan_id: Optional[str] = Field(default=None, description="Plan a asignar al crear el cliente")

    @field_validator("first_name", "last_name", "phone")
    @classmethod
    def no_vacio(cls, value):
        if not value.strip():
            raise ValueError("Campo obligatorio")
        return value.strip()

    @field_validator("type")
    @classmethod
    def validar_tipo(cls, value):
        if value not in ClientType.ALL:
            raise ValueError("Tipo de cliente inválido")
        return value


class ClientUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = Field(default=None, min_length=1)
    type: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("first_name", "last_name", "phone")
    @classmethod
    def no_vacio(cls, value):
        if value is None:
            return value
        if not value.strip():
            raise ValueError("Campo obligatorio")
        return value.strip()

    @field_validator("type")
    @classmethod
    def validar_tipo(cls, value):
        if value is not None and value not in ClientType.ALL:
            raise ValueError("Tipo de cliente inválido")
        return value


class ClientFilter(BaseModel):
    search: Optional[str] = None
    type: Optional[str] = None
    membership: Optional[str] = None
    last_visit_from: Optional[date] = None
    last_visit_to: Optional[date] = None

    @field_validator("membership")
    @classmethod
    def validar_membresia(cls, value):
        if value is not None and value not in MembershipFilter.ALL:
            raise ValueError("Filtro de membresía inválido")
        return value


class MembershipAssign(BaseModel):
    plan_id: str


class ClientDetail(BaseModel):
    client: Client
    bookings: List[Booking]


class ClientLookupOut(BaseModel):
    """Minimal data the public booking page needs to prefill the form."""

    id: str
    first_name: str
    last_name: str
    phone: str
