from typing import List, Optional
from pydantic import BaseModel, Field


class ServiceCreate(BaseModel):
    name: str = Field(min_length=1, examples=["Corte clásico"])
    description: str = ""
    price: float = Field(ge=0, examples=[8000])
    duration: int = Field(gt=0, examples=[30])


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    duration: Optional[int] = Field(default=None, gt=0)


class BarberCreate(BaseModel):
    name: str = Field(min_length=1, examples=["Lucas"])
    specialties: List[str] = Field(default_factory=list)
    avatar: str = ""
    active: bool = True
    username: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=4)
    branch: Optional[str] = None


class BarberUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    specialties: Optional[List[str]] = None
    avatar: Optional[str] = None
    active: Optional[bool] = None
    username: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=4)
    branch: Optional[str] = None


class BarberOut(BaseModel):
    """Barber without the password hash."""

    id: str
    name: str
    specialties: List[str]
    avatar: str
    active: bool
    username: Optional[str] = None
    branch: str


class ConsumableCreate(BaseModel):
    name: str = Field(min_length=1, examples=["Shampoo"])


class ConsumableUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    active: Optional[bool] = None


class StockUpdate(BaseModel):
    branch: str = Field(examples=["Casa Central"])
    stock: int = Field(ge=0)
    min_stock: Optional[int] = Field(default=None, ge=0)


class MembershipPlanCreate(BaseModel):
    name: str = Field(min_length=1, examples=["Pack 4 cortes"])
    sessions: int = Field(gt=0)
    price: float = Field(ge=0)
    validity_days: int = Field(gt=0, examples=[30])
    description: str = ""
    active: bool = True


class MembershipPlanUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    sessions: Optional[int] = Field(default=None, gt=0)
    price: Optional[float] = Field(default=None, ge=0)
    validity_days: Optional[int] = Field(default=None, gt=0)
    description: Optional[str] = None
    active: Optional[bool] = None


