from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from app.core.security import JWT_ALGORITHM, SECRET_KEY

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


class Role:
    SUPERADMIN = "SUPERADMIN"
    ADMIN = "ADMIN"
    BARBER = "BARBER"

    ALL = {SUPERADMIN, ADMIN, BARBER}


class Session(BaseModel):
    """Authenticated actor decoded from the bearer token."""

    sub: str
    role: str
    name: str
    shop_slug: Optional[str] = None

    @property
    def is_superadmin(self) -> bool:
        return self.role == Role.SUPERADMIN

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_barber(self) -> bool:
        return self.role == Role.BARBER


def get_current_session(token: str = Depends(oauth2_scheme)) -> Session:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
        session = Session(**payload)
    except (JWTError, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciales inválidas",
        )
    if session.role not in Role.ALL:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Credenciales inválidas")
    return session


def require_superadmin(session: Session = Depends(get_current_session)) -> Session:
    if not session.is_superadmin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Solo el administrador de la plataforma puede realizar esta acción",
        )
    return session


def require_shop_admin(slug: str, session: Session = Depends(get_current_session)) -> Session:
    """Admin of the shop in the path; the platform super-admin is allowed everywhere."""
    if session.is_superadmin:
        return session
    if not session.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Solo administradores pueden realizar esta acción",
        )
    if session.shop_slug != slug:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No tiene permiso sobre este local",
        )
    return session


def require_shop_staff(slug: str, session: Session = Depends(get_current_session)) -> Session:
    """Admin or barber of the shop in the path."""
    if session.is_superadmin:
        return session
    if session.shop_slug != slug:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No tiene permiso sobre este local",
        )
    return session
