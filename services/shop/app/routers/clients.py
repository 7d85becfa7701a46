from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import Response
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.auth_dependencies import Session as AuthSession, require_shop_admin
from app.core.database import get_db
from app.schemas.client_schema import (
    ClientCreate,
    ClientDetail,
    ClientFilter,
    ClientLookupOut,
    ClientUpdate,
    MembershipAssign,
)
from app.schemas.shop_schema import Client
from app.services import clients as client_service
from app.services import identity, memberships
from shared import local_today
from . import crud
from .validators import get_cache, load_active_shop, load_shop, persist_shop, require_feature

router = APIRouter(prefix="/shops/{slug}/clients", tags=["Clients"])


def client_filters(
    search: Optional[str] = Query(default=None, description="Nombre, apellido o teléfono"),
    type: Optional[str] = Query(default=None, description="REGULAR o EXPRESS"),
    membership: Optional[str] = Query(default=None, description="WITH o WITHOUT"),
    last_visit_from: Optional[date] = Query(default=None),
    last_visit_to: Optional[date] = Query(default=None),
) -> ClientFilter:
    try:
        return ClientFilter(
            search=search,
            type=type,
            membership=membership,
            last_visit_from=last_visit_from,
            last_visit_to=last_visit_to,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Filtro inválido") from exc


@router.get("/lookup", response_model=ClientLookupOut)
def lookup_client(
    slug: str,
    phone: str = Query(description="Teléfono completo o parcial (mínimo 7 dígitos)"),
    db: Session = Depends(get_db),
):
    """Public: recognise a returning client from the booking form."""
    shop = load_active_shop(db, slug)
    client = identity.find_by_phone(shop.clients, phone)
    if client is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cliente no encontrado")
    return client


@router.get("/", response_model=List[Client])
def list_clients(
    slug: str,
    filters: ClientFilter = Depends(client_filters),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    return client_service.filter_clients(load_shop(db, slug).clients, filters)


@router.get("/export.csv")
def export_clients(
    slug: str,
    filters: ClientFilter = Depends(client_filters),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    content = client_service.export_csv(client_service.filter_clients(shop.clients, filters))
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="clientes-{slug}.csv"'},
    )


@router.post("/", response_model=Client, status_code=status.HTTP_201_CREATED)
def create_client(
    slug: str,
    payload: ClientCreate,
    request: Request,
    revision: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    client = client_service.create_client(shop, payload, local_today(shop.timezone))
    persist_shop(db, shop, revision, get_cache(request))
    return client


@router.get("/{client_id}", response_model=ClientDetail)
def get_client(
    slug: str,
    client_id: str,
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    client = client_service.get_client(load_shop(db, slug), client_id)
    history = crud.get_bookings(db, slug, client_id=client.id)
    history.sort(key=lambda booking: (booking.date, booking.time), reverse=True)
    return {"client": client, "bookings": history}


@router.put("/{client_id}", response_model=Client)
def update_client(
    slug: str,
    client_id: str,
    payload: ClientUpdate,
    request: Request,
    revision: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    client = client_service.update_client(shop, client_id, payload)
    persist_shop(db, shop, revision, get_cache(request))
    return client


@router.post("/{client_id}/convert", response_model=Client)
def convert_to_regular(
    slug: str,
    client_id: str,
    request: Request,
    revision: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    client = memberships.convert_to_regular(client_service.get_client(shop, client_id))
    client_service.replace_client(shop, client)
    persist_shop(db, shop, revision, get_cache(request))
    return client


@router.post("/{client_id}/membership", response_model=Client)
def assign_membership(
    slug: str,
    client_id: str,
    payload: MembershipAssign,
    request: Request,
    revision: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    require_feature(shop, "memberships")
    plan = shop.find_plan(payload.plan_id)
    if plan is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Plan no encontrado")
    client = memberships.issue(client_service.get_client(shop, client_id), plan, local_today(shop.timezone))
    client_service.replace_client(shop, client)
    persist_shop(db, shop, revision, get_cache(request))
    return client


@router.delete("/{client_id}/membership", response_model=Client)
def cancel_membership(
    slug: str,
    client_id: str,
    request: Request,
    revision: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    client = memberships.cancel(client_service.get_client(shop, client_id), local_today(shop.timezone))
    client_service.replace_client(shop, client)
    persist_shop(db, shop, revision, get_cache(request))
    return client


@router.post("/{client_id}/membership/sessions", response_model=Client)
def consume_session(
    slug: str,
    client_id: str,
    request: Request,
    revision: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthSession = Depends(require_shop_admin),
):
    shop = load_shop(db, slug)
    require_feature(shop, "memberships")
    client = memberships.consume_session(client_service.get_client(shop, client_id), local_today(shop.timezone))
    client_service.replace_client(shop, client)
    persist_shop(db, shop, revision, get_cache(request))
    return client
