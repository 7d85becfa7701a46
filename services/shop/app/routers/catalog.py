from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.core.auth_dependencies import Session as AuthSession, require_shop_admin
from app.core.database import get_db
from app.core.errors import ValidationError
from app.schemas.catalog_schema import (
    BarberCreate,
    BarberOut,
    BarberUpdate,
    ConsumableCreate,
    ConsumableUpdate,
    MembershipPlanCreate,
    MembershipPlanUpdate,
    ServiceCreate,
    ServiceUpdate,
    StockUpdate,
)
from app.schemas.shop_schema import ConsumableItem, MembershipPlan, Service
from app.services import catalog, consumption, memberships
from .validators import get_cache, load_shop, persist_shop, require_feature

router = APIRouter(prefix="/shops/{slug}", tags=["Catalog"])


# --- servicios ---

@router.get("/services", response_model=List[Service])
def list_services(slug: str, db: Session = Depends(get_db), _: AuthSession = Depends(require_shop_admin)):
    return load_shop(db, slug).services


@router.post("/services", response_model=Service, status_code=status.HTTP_201_CREATED)
def add_service(
    slug: str,
    payload: ServiceCreate,
    request: Request,
    revision: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    service = catalog.add_service(shop, payload)
    persist_shop(db, shop, revision, get_cache(request))
    return service


@router.put("/services/{service_id}", response_model=Service)
def update_service(
    slug: str,
    service_id: str,
    payload: ServiceUpdate,
    request: Request,
    revision: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    service = catalog.update_service(shop, service_id, payload)
    persist_shop(db, shop, revision, get_cache(request))
    return service


# --- barberos ---

@router.get("/barbers", response_model=List[BarberOut])
def list_barbers(slug: str, db: Session = Depends(get_db), _: AuthSession = Depends(require_shop_admin)):
    return [catalog.barber_out(barber) for barber in load_shop(db, slug).barbers]


@router.post("/barbers", response_model=BarberOut, status_code=status.HTTP_201_CREATED)
def add_barber(
    slug: str,
    payload: BarberCreate,
    request: Request,
    revision: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    barber = catalog.add_barber(shop, payload)
    persist_shop(db, shop, revision, get_cache(request))
    return catalog.barber_out(barber)


@router.put("/barbers/{barber_id}", response_model=BarberOut)
def update_barber(
    slug: str,
    barber_id: str,
    payload: BarberUpdate,
    request: Request,
    revision: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    barber = catalog.update_barber(shop, barber_id, payload)
    persist_shop(db, shop, revision, get_cache(request))
    return catalog.barber_out(barber)


# --- insumos y recepción ---

def _register_item_routes(kind: str) -> None:
    """CRUD and stock routes for one consumable list; ``kind`` is also its feature flag."""

    @router.get(f"/{kind}", response_model=List[ConsumableItem], name=f"list_{kind}")
    def list_items(slug: str, db: Session = Depends(get_db), _: AuthSession = Depends(require_shop_admin)):
        shop = load_shop(db, slug)
        require_feature(shop, kind)
        return getattr(shop, kind)

    @router.post(
        f"/{kind}",
        response_model=ConsumableItem,
        status_code=status.HTTP_201_CREATED,
        name=f"add_{kind}",
    )
    def add_item(
        slug: str,
        payload: ConsumableCreate,
        request: Request,
        revision: Optional[int] = Query(default=None),
        db: Session = Depends(get_db),
        _: AuthSession = Depends(require_shop_admin),
    ):
        shop = load_shop(db, slug)
        require_feature(shop, kind)
        item = catalog.add_item(getattr(shop, kind), payload)
        persist_shop(db, shop, revision, get_cache(request))
        return item

    @router.put(f"/{kind}/{{item_id}}", response_model=ConsumableItem, name=f"update_{kind}")
    def update_item(
        slug: str,
        item_id: str,
        payload: ConsumableUpdate,
        request: Request,
        revision: Optional[int] = Query(default=None),
        db: Session = Depends(get_db),
        _: AuthSession = Depends(require_shop_admin),
    ):
        shop = load_shop(db, slug)
        require_feature(shop, kind)
        item = catalog.update_item(getattr(shop, kind), item_id, payload)
        persist_shop(db, shop, revision, get_cache(request))
        return item

    @router.put(f"/{kind}/{{item_id}}/stock", response_model=ConsumableItem, name=f"set_{kind}_stock")
    def set_stock(
        slug: str,
        item_id: str,
        payload: StockUpdate,
        request: Request,
        revision: Optional[int] = Query(default=None),
        db: Session = Depends(get_db),
        _: AuthSession = Depends(require_shop_admin),
    ):
        shop = load_shop(db, slug)
        require_feature(shop, kind)
        if payload.branch not in shop.branch_names():
            raise ValidationError(f"La sucursal '{payload.branch}' no existe")
        items = consumption.set_stock(getattr(shop, kind), item_id, payload.branch, payload.stock, payload.min_stock)
        setattr(shop, kind, items)
        persist_shop(db, shop, revision, get_cache(request))
        return next(item for item in items if item.id == item_id)


_register_item_routes("inventory")
_register_item_routes("receptions")


# --- planes de membresía ---

@router.get("/membership-plans", response_model=List[MembershipPlan])
def list_plans(slug: str, db: Session = Depends(get_db), _: AuthSession = Depends(require_shop_admin)):
    shop = load_shop(db, slug)
    require_feature(shop, "memberships")
    return memberships.sorted_plans(shop.membership_plans)


@router.post("/membership-plans", response_model=MembershipPlan, status_code=status.HTTP_201_CREATED)
def add_plan(
    slug: str,
    payload: MembershipPlanCreate,
    request: Request,
    revision: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    require_feature(shop, "memberships")
    plan = memberships.add_plan(shop, payload)
    persist_shop(db, shop, revision, get_cache(request))
    return plan


@router.put("/membership-plans/{plan_id}", response_model=MembershipPlan)
def update_plan(
    slug: str,
    plan_id: str,
    payload: MembershipPlanUpdate,
    request: Request,
    revision: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    require_feature(shop, "memberships")
    plan = memberships.update_plan(shop, plan_id, payload)
    persist_shop(db, shop, revision, get_cache(request))
    return plan
