from typing import Optional

import redis
from fastapi import HTTPException, Request, status
from sqlalchemy.orm import Session

from app.schemas.shop_schema import Shop
from app.services.capabilities import FEATURE_LABELS
from shared import EventPublisher
from . import crud


def load_shop(db: Session, slug: str) -> Shop:
    shop = crud.get_shop(db, slug)
    if shop is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Local no encontrado")
    return shop


def load_active_shop(db: Session, slug: str) -> Shop:
    """Shop visible to the public; inactive shops look like missing ones."""
    shop = load_shop(db, slug)
    if not shop.active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Local no encontrado")
    return shop


def require_feature(shop: Shop, feature: str) -> None:
    if not getattr(shop.features, feature):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Requiere Plan Superior ({FEATURE_LABELS[feature]})",
        )


def get_publisher(request: Request) -> Optional[EventPublisher]:
    return getattr(request.app.state, "event_publisher", None)


def get_cache(request: Request) -> Optional[redis.Redis]:
    return getattr(request.app.state, "redis_cache", None)


def persist_shop(
    db: Session,
    shop: Shop,
    revision: Optional[int],
    cache: Optional[redis.Redis] = None,
) -> Shop:
    """Save a shop read in this request; ``revision`` comes from the client when it sends one."""
    expected = revision if revision is not None else shop.revision
    return crud.save_shop(db, shop, expected_revision=expected, cache=cache)


def shop_out(shop: Shop) -> dict:
    """Full shop document for its staff, without password hashes."""
    data = shop.model_dump(mode="json", exclude={"admin_password_hash"})
    for barber in data["barbers"]:
        barber.pop("password_hash", None)
    return data
