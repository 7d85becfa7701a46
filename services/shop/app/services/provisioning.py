"""Shop provisioning and subscription management for the platform super-admin."""

from __future__ import annotations

import re
import unicodedata
from datetime import datetime, timezone
from typing import Optional, Tuple

import redis
import structlog
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.core.security import generate_password, get_password_hash
from app.routers import crud
from app.schemas.shop_schema import Shop, ShopCreate
from app.services.capabilities import features_for_plan

logger = structlog.get_logger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """``"Barbería El Taño"`` -> ``"barberia-el-tano"``."""
    normalized = unicodedata.normalize("NFD", name.lower())
    without_accents = "".join(char for char in normalized if unicodedata.category(char) != "Mn")
    return _NON_ALNUM.sub("-", without_accents).strip("-")


def create_shop(db: Session, payload: ShopCreate) -> Tuple[Shop, str]:
    """Create a shop with default hours and plan features.

    Returns the shop and the admin password in clear text, which is shown once.
    """
    slug = slugify(payload.name)
    if not slug:
        raise ValidationError("El nombre debe contener letras o números")

    password = payload.admin_password or generate_password()
    shop = Shop(
        slug=slug,
        name=payload.name.strip(),
        plan=payload.plan,
        features=features_for_plan(payload.plan),
        city=payload.city,
        address=payload.address,
        phone=payload.phone,
        email=payload.email,
        admin_user=payload.admin_user or f"admin-{slug}",
        admin_password_hash=get_password_hash(password),
        created_at=datetime.now(timezone.utc).isoformat(),
    )
    shop = crud.create_shop(db, shop)
    logger.info("shop_created", shop_slug=slug, plan=shop.plan)
    return shop, password


def _load(db: Session, slug: str) -> Shop:
    shop = crud.get_shop(db, slug)
    if shop is None:
        raise NotFoundError("Local no encontrado")
    return shop


def change_plan(db: Session, slug: str, plan: str, cache: Optional[redis.Redis] = None) -> Shop:
    shop = _load(db, slug)
    shop.plan = plan
    shop.features = features_for_plan(plan, shop.features)
    shop = crud.save_shop(db, shop, cache=cache)
    logger.info("shop_plan_changed", shop_slug=slug, plan=plan)
    return shop


def set_active(db: Session, slug: str, active: bool, cache: Optional[redis.Redis] = None) -> Shop:
    shop = _load(db, slug)
    shop.active = active
    shop = crud.save_shop(db, shop, cache=cache)
    logger.info("shop_active_changed", shop_slug=slug, active=active)
    return shop
