from datetime import date
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shared.timezones import DEFAULT_TIMEZONE, is_valid_timezone

DEFAULT_BRANCH = "Casa Central"
WEEKDAYS = ["Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado", "Domingo"]
DEFAULT_LOGO = "https://placehold.co/200x200?text=Logo"
DEFAULT_THEME_COLOR = "#0ea5e9"


class Plan:
    FREE = "FREE"
    BASIC = "BASIC"
    PRO = "PRO"

    ALL = {FREE, BASIC, PRO}


class ClientType:
    REGULAR = "REGULAR"
    EXPRESS = "EXPRESS"

    ALL = {REGULAR, EXPRESS}


def check_hhmm(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    parts = value.split(":")
    if len(parts) != 2 or not all(part.isdigit() and len(part) == 2 for part in parts):
        raise ValueError("El horario debe tener formato HH:MM")
    hours, minutes = int(parts[0]), int(parts[1])
    if hours > 23 or minutes > 59:
        raise ValueError("Horario inválido")
    return value


class StockInfo(BaseModel):
    stock: int = Field(default=0, ge=0)
    min_stock: int = Field(default=5, ge=0)


class ConsumableItem(BaseModel):
    """Inventory product or reception amenity; stock is tracked per branch name."""

    id: str
    name: str
    active: bool = True
    branch_stock: Dict[str, StockInfo] = Field(default_factory=dict)

    def stock_for(self, branch: str) -> StockInfo:
        return self.branch_stock.get(branch) or StockInfo()


InventoryItem = ConsumableItem
ReceptionItem = ConsumableItem


class Service(BaseModel):
    id: str
    name: str
    description: str = ""
    price: float = Field(ge=0, description="Precio en pesos", examples=[8000])
    duration: int = Field(gt=0, description="Duración en minutos", examples=[30])


class Branch(BaseModel):
    id: str
    name: str
    address: str = ""
    city: str = ""
    province: str = ""
    phone: str = ""


class Barber(BaseModel):
    id: str
    name: str
    specialties: List[str] = Field(default_factory=list)
    avatar: str = ""
    active: bool = True
    username: Optional[str] = None
    password_hash: Optional[str] = None
    branch: Optional[str] = Field(default=None, description="Sucursal; vacío significa Casa Central")

    @property
    def branch_name(self) -> str:
        return self.branch or DEFAULT_BRANCH


class MembershipPlan(BaseModel):
    id: str
    name: str
    sessions: int = Field(gt=0)
    price: float = Field(ge=0)
    validity_days: int = Field(gt=0)
    description: str = ""
    active: bool = True


class ClientMembership(BaseModel):
    """Snapshot of a plan at issue time; later plan edits never reach it."""

    plan_id: str
    plan_name: str
    sessions_total: int = Field(gt=0)
    sessions_used: int = Field(default=0, ge=0)
    start_date: str
    # "YYYY-MM-DD" o "YYYY-MM-DD (Cancelada)" una vez archivada por cancelación
    expiry_date: str

    @model_validator(mode="after")
    def validar_sesiones(self):
        if self.sessions_used > self.sessions_total:
            raise ValueError("sessions_used no puede superar sessions_total")
        return self

    @property
    def remaining_sessions(self) -> int:
        return self.sessions_total - self.sessions_used


class Client(BaseModel):
    id: str
    shop_slug: str
    first_name: str
    last_name: str
    phone: str = Field(description="Teléfono canónico (+549...)")
    type: str = ClientType.REGULAR
    notes: str = ""
    active_membership: Optional[ClientMembership] = None
    past_memberships: List[ClientMembership] = Field(default_factory=list)
    last_visit: Optional[date] = None

    @model_validator(mode="after")
    def express_sin_membresia(self):
        if self.type == ClientType.EXPRESS and self.active_membership is not None:
            raise ValueError("Un cliente EXPRESS no puede tener membresía")
        return self

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class DaySchedule(BaseModel):
    day: str
    open: bool = True
    open_time: str = "09:00"
    close_time: str = "20:00"
    break_start: Optional[str] = None
    break_end: Optional[str] = None

    @field_validator("open_time", "close_time", "break_start", "break_end")
    @classmethod
    def validar_horario(cls, value):
        return check_hhmm(value)

    @model_validator(mode="after")
    def validar_intervalos(self):
        if self.close_time <= self.open_time:
            raise ValueError("El cierre debe ser posterior a la apertura")
        if (self.break_start is None) != (self.break_end is None):
            raise ValueError("El descanso necesita inicio y fin")
        if self.break_start is not None and self.break_end <= self.break_start:
            raise ValueError("El fin del descanso debe ser posterior al inicio")
        return self


def default_opening_hours() -> List[DaySchedule]:
    week = [
        DaySchedule(day=day, open_time="09:00", close_time="20:00", break_start="13:00", break_end="14:00")
        for day in WEEKDAYS[:5]
    ]
    week.append(DaySchedule(day="Sábado", open_time="10:00", close_time="18:00"))
    week.append(DaySchedule(day="Domingo", open=False, open_time="09:00", close_time="18:00"))
    return week


class NotificationPreferences(BaseModel):
    email_new_booking: bool = True
    email_cancellation: bool = True
    push_daily_summary: bool = True
    sms_reminders: bool = False


class ShopFeatures(BaseModel):
    """Closed set of capabilities granted by the plan tier."""

    model_config = ConfigDict(extra="forbid")

    payment_gateway: bool = False
    payment_gateway_token: Optional[str] = None
    whatsapp: bool = False
    multi_branch: bool = False
    memberships: bool = False
    inventory: bool = False
    receptions: bool = False


class Shop(BaseModel):
    slug: str
    name: str
    logo: str = DEFAULT_LOGO
    theme_color: str = DEFAULT_THEME_COLOR
    description: str = ""
    address: str = ""
    city: str = ""
    province: str = ""
    phone: str = ""
    email: str = ""
    instagram: str = ""
    custom_domain: Optional[str] = None
    active: bool = True
    plan: str = Plan.FREE
    features: ShopFeatures = Field(default_factory=ShopFeatures)
    admin_user: str
    admin_password_hash: str
    timezone: str = DEFAULT_TIMEZONE
    opening_hours: List[DaySchedule] = Field(default_factory=default_opening_hours)
    branch_schedules: Dict[str, List[DaySchedule]] = Field(default_factory=dict)
    notification_prefs: NotificationPreferences = Field(default_factory=NotificationPreferences)
    branches: List[Branch] = Field(default_factory=list)
    services: List[Service] = Field(default_factory=list)
    barbers: List[Barber] = Field(default_factory=list)
    clients: List[Client] = Field(default_factory=list)
    membership_plans: List[MembershipPlan] = Field(default_factory=list)
    inventory: List[ConsumableItem] = Field(default_factory=list)
    receptions: List[ConsumableItem] = Field(default_factory=list)
    created_at: Optional[str] = None
    revision: int = Field(default=0, description="Lo administra el store; no se persiste dentro del documento")

    @field_validator("plan")
    @classmethod
    def validar_plan(cls, value):
        if value not in Plan.ALL:
            raise ValueError("Plan inválido")
        return value

    @field_validator("timezone")
    @classmethod
    def validar_timezone(cls, value):
        if not is_valid_timezone(value):
            raise ValueError("Zona horaria inválida")
        return value

    def branch_names(self) -> List[str]:
        return [DEFAULT_BRANCH] + [branch.name for branch in self.branches]

    def find_service(self, service_id: str) -> Optional[Service]:
        return next((service for service in self.services if service.id == service_id), None)

    def find_barber(self, barber_id: str) -> Optional[Barber]:
        return next((barber for barber in self.barbers if barber.id == barber_id), None)

    def find_client(self, client_id: str) -> Optional[Client]:
        return next((client for client in self.clients if client.id == client_id), None)

    def find_plan(self, plan_id: str) -> Optional[MembershipPlan]:
        return next((plan for plan in self.membership_plans if plan.id == plan_id), None)

    def schedule_for(self, target: date, branch: Optional[str] = None) -> DaySchedule:
        """Day schedule of ``target``: the branch override first, then the shop hours."""
        week = self.opening_hours
        if branch and branch in self.branch_schedules:
            week = self.branch_schedules[branch]
        return week[target.weekday()]


class ShopPublic(BaseModel):
    """What an anonymous visitor of the booking page sees."""

    slug: str
    name: str
    logo: str
    theme_color: str
    description: str
    address: str
    city: str
    province: str
    phone: str
    email: str
    instagram: str
    timezone: str
    features: Dict[str, bool]
    opening_hours: List[DaySchedule]
    branches: List[Branch]
    services: List[Service]
    barbers: List[Dict[str, object]]

    @classmethod
    def from_shop(cls, shop: Shop) -> "ShopPublic":
        features = shop.features.model_dump(exclude={"payment_gateway_token"})
        return cls(
            slug=shop.slug,
            name=shop.name,
            logo=shop.logo,
            theme_color=shop.theme_color,
            description=shop.description,
            address=shop.address,
            city=shop.city,
            province=shop.province,
            phone=shop.phone,
            email=shop.email,
            instagram=shop.instagram,
            timezone=shop.timezone,
            features=features,
            opening_hours=shop.opening_hours,
            branches=shop.branches,
            services=shop.services,
            barbers=[
                {
                    "id": barber.id,
                    "name": barber.name,
                    "specialties": barber.specialties,
                    "avatar": barber.avatar,
                    "branch": barber.branch_name,
                }
                for barber in shop.barbers
                if barber.active
            ],
        )


class ShopSummary(BaseModel):
    """Row of the super-admin shop list."""

    slug: str
    name: str
    plan: str
    active: bool
    admin_user: str
    city: str
    created_at: Optional[str] = None
    barbers: int
    clients: int

    @classmethod
    def from_shop(cls, shop: Shop) -> "ShopSummary":
        return cls(
            slug=shop.slug,
            name=shop.name,
            plan=shop.plan,
            active=shop.active,
            admin_user=shop.admin_user,
            city=shop.city,
            created_at=shop.created_at,
            barbers=len(shop.barbers),
            clients=len(shop.clients),
        )


class ShopCreate(BaseModel):
    name: str = Field(min_length=1, description="Nombre comercial", examples=["Barbería El Tano"])
    plan: str = Field(default=Plan.FREE, examples=["BASIC"])
    city: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    admin_user: Optional[str] = Field(default=None, description="Por defecto admin-<slug>")
    admin_password: Optional[str] = Field(default=None, description="Si falta se genera una de 8 caracteres")

    @field_validator("plan")
    @classmethod
    def validar_plan(cls, value):
        if value not in Plan.ALL:
            raise ValueError("Plan inválido")
        return value


class ShopCreated(BaseModel):
    shop: ShopSummary
    admin_user: str
    admin_password: str = Field(description="Se muestra una única vez")


class PlanChange(BaseModel):
    plan: str

    @field_validator("plan")
    @classmethod
    def validar_plan(cls, value):
        if value not in Plan.ALL:
            raise ValueError("Plan inválido")
        return value


class ActiveChange(BaseModel):
    active: bool


class ShopSettingsUpdate(BaseModel):
    """Partial update of the shop profile; ``revision`` must match the stored one."""

    revision: Optional[int] = None
    name: Optional[str] = Field(default=None, min_length=1)
    logo: Optional[str] = None
    theme_color: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    instagram: Optional[str] = None
    custom_domain: Optional[str] = None
    timezone: Optional[str] = None
    notification_prefs: Optional[NotificationPreferences] = None
    opening_hours: Optional[List[DaySchedule]] = None
    payment_gateway_token: Optional[str] = None

    @field_validator("opening_hours")
    @classmethod
    def validar_semana(cls, value):
        if value is not None and len(value) != 7:
            raise ValueError("Se requieren los 7 días de la semana")
        return value

    @field_validator("timezone")
    @classmethod
    def validar_timezone(cls, value):
        if value is not None and not is_valid_timezone(value):
            raise ValueError("Zona horaria inválida")
        return value


class BranchCreate(BaseModel):
    name: str = Field(min_length=1)
    address: str = ""
    city: str = ""
    province: str = ""
    phone: str = ""


class BranchUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    phone: Optional[str] = None


class BranchScheduleUpdate(BaseModel):
    schedule: List[DaySchedule]

    @field_validator("schedule")
    @classmethod
    def validar_semana(cls, value):
        if len(value) != 7:
            raise ValueError("Se requieren los 7 días de la semana")
        return value
