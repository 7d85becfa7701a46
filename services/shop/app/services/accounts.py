from __future__ import annotations

from typing import Optional

import structlog
from sqlalchemy.orm import Session

from app.core.auth_dependencies import Role
from app.core.security import create_access_token, superadmin_credentials, verify_password
from app.routers import crud

logger = structlog.get_logger(__name__)


def login(db: Session, slug: str, username: str, password: str) -> Optional[dict]:
    """Shop admin first, then active barbers with credentials. None if nothing matches."""
    shop = crud.get_shop(db, slug)
    if shop is None or not shop.active:
        return None

    if username == shop.admin_user and verify_password(password, shop.admin_password_hash):
        user_id = f"admin-{shop.slug}"
        return _token(user_id, Role.ADMIN, shop.name, shop.slug)

    for barber in shop.barbers:
        if not barber.active or not barber.username or barber.username != username:
            continue
        if verify_password(password, barber.password_hash):
            return _token(barber.id, Role.BARBER, barber.name, shop.slug)

    logger.info("login_rejected", shop_slug=slug)
    return None


def super_admin_login(username: str, password: str) -> Optional[dict]:
    expected_user, expected_password = superadmin_credentials()
    if username != expected_user or password != expected_password:
        logger.info("superadmin_login_rejected")
        return None
    return _token("superadmin", Role.SUPERADMIN, "Super Admin", None)


def _token(user_id: str, role: str, name: str, shop_slug: Optional[str]) -> dict:
    return {
        "access_token": create_access_token(user_id, role, name, shop_slug),
        "token_type": "bearer",
        "role": role,
        "name": name,
        "shop_slug": shop_slug,
        "user_id": user_id,
    }
