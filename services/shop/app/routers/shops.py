from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.core.auth_dependencies import Session as AuthSession, require_shop_admin, require_superadmin
from app.core.database import get_db
from app.schemas.booking_schema import AvailabilityOut, Booking, BookingCreate
from app.schemas.shop_schema import (
    ActiveChange,
    Branch,
    BranchCreate,
    BranchScheduleUpdate,
    BranchUpdate,
    PlanChange,
    ShopCreate,
    ShopCreated,
    ShopPublic,
    ShopSettingsUpdate,
    ShopSummary,
)
from app.services import availability, branches, lifecycle, provisioning
from shared.cache import get_cache_ttl, get_cached_profile, set_cached_profile
from . import crud
from .validators import (
    get_cache,
    get_publisher,
    load_active_shop,
    load_shop,
    persist_shop,
    require_feature,
    shop_out,
)

router = APIRouter(prefix="/shops", tags=["Shops"])


# --- plataforma (super-admin) ---

@router.get("/", response_model=List[ShopSummary])
def list_shops(db: Session = Depends(get_db), _: AuthSession = Depends(require_superadmin)):
    return [ShopSummary.from_shop(shop) for shop in crud.list_shops(db)]


@router.post("/", response_model=ShopCreated, status_code=status.HTTP_201_CREATED)
def create_shop(
    payload: ShopCreate,
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_superadmin),
):
    shop, password = provisioning.create_shop(db, payload)
    return ShopCreated(shop=ShopSummary.from_shop(shop), admin_user=shop.admin_user, admin_password=password)


@router.get("/status")
def cloud_status(db: Session = Depends(get_db), _: AuthSession = Depends(require_superadmin)):
    return {"status": "online" if crud.ping(db) else "offline"}


@router.put("/{slug}/plan", response_model=ShopSummary)
def change_plan(
    slug: str,
    payload: PlanChange,
    request: Request,
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_superadmin),
):
    shop = provisioning.change_plan(db, slug, payload.plan, cache=get_cache(request))
    return ShopSummary.from_shop(shop)


@router.patch("/{slug}/active", response_model=ShopSummary)
def set_active(
    slug: str,
    payload: ActiveChange,
    request: Request,
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_superadmin),
):
    shop = provisioning.set_active(db, slug, payload.active, cache=get_cache(request))
    return ShopSummary.from_shop(shop)


# --- público ---

@router.get("/{slug}/public", response_model=ShopPublic)
def public_profile(slug: str, request: Request, db: Session = Depends(get_db)):
    cache = get_cache(request)
    cached = get_cached_profile(cache, slug)
    if cached is not None:
        return cached

    profile = ShopPublic.from_shop(load_active_shop(db, slug))
    set_cached_profile(cache, slug, profile.model_dump(mode="json"), ttl=get_cache_ttl("profile"))
    return profile


@router.get("/{slug}/availability", response_model=AvailabilityOut)
def get_availability(
    slug: str,
    on_date: date = Query(alias="date", description="Fecha YYYY-MM-DD"),
    branch: Optional[str] = Query(default=None),
    respect_opening_hours: bool = Query(default=False),
    db: Session = Depends(get_db),
):
    shop = load_active_shop(db, slug)
    return availability.available_slots_for_shop(
        shop,
        on_date,
        branch=branch,
        respect_opening_hours=respect_opening_hours,
    )


@router.post("/{slug}/bookings", response_model=Booking, status_code=status.HTTP_201_CREATED)
def create_booking(
    slug: str,
    payload: BookingCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    shop = load_active_shop(db, slug)
    return lifecycle.create_booking(db, shop, payload, publisher=get_publisher(request))


# --- administración del local ---

@router.get("/{slug}")
def get_shop(slug: str, db: Session = Depends(get_db), _: AuthSession = Depends(require_shop_admin)):
    return shop_out(load_shop(db, slug))


@router.put("/{slug}/settings")
def update_settings(
    slug: str,
    payload: ShopSettingsUpdate,
    request: Request,
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True, exclude={"revision", "payment_gateway_token"})
    for field in changes:
        setattr(shop, field, getattr(payload, field))
    if "payment_gateway_token" in payload.model_fields_set:
        require_feature(shop, "payment_gateway")
        shop.features = shop.features.model_copy(
            update={"payment_gateway_token": payload.payment_gateway_token}
        )
    shop = persist_shop(db, shop, payload.revision, get_cache(request))
    return shop_out(shop)


@router.post("/{slug}/branches", response_model=Branch, status_code=status.HTTP_201_CREATED)
def add_branch(
    slug: str,
    payload: BranchCreate,
    request: Request,
    revision: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    require_feature(shop, "multi_branch")
    branch = branches.add_branch(shop, payload)
    persist_shop(db, shop, revision, get_cache(request))
    return branch


@router.put("/{slug}/branches/{branch_id}", response_model=Branch)
def update_branch(
    slug: str,
    branch_id: str,
    payload: BranchUpdate,
    request: Request,
    revision: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    require_feature(shop, "multi_branch")
    branch = branches.update_branch(shop, branch_id, payload)
    persist_shop(db, shop, revision, get_cache(request))
    return branch


@router.delete("/{slug}/branches/{branch_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_branch(
    slug: str,
    branch_id: str,
    request: Request,
    revision: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    branches.remove_branch(shop, branch_id)
    persist_shop(db, shop, revision, get_cache(request))
    return None


@router.put("/{slug}/schedules/{branch_name}")
def set_schedule(
    slug: str,
    branch_name: str,
    payload: BranchScheduleUpdate,
    request: Request,
    revision: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    branches.set_branch_schedule(shop, branch_name, payload.schedule)
    shop = persist_shop(db, shop, revision, get_cache(request))
    return {"branch": branch_name, "schedule": payload.schedule, "revision": shop.revision}
