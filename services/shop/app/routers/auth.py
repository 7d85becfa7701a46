from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.auth_dependencies import Session as AuthSession, get_current_session
from app.core.database import get_db
from app.schemas.auth_schema import LoginRequest, SuperAdminLoginRequest, TokenOut
from app.services import accounts

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=TokenOut)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    token = accounts.login(db, payload.slug, payload.username, payload.password)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Credenciales inválidas")
    return token


@router.post("/superadmin/login", response_model=TokenOut)
def superadmin_login(payload: SuperAdminLoginRequest):
    token = accounts.super_admin_login(payload.username, payload.password)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Credenciales inválidas")
    return token


@router.get("/me", response_model=AuthSession)
def me(session: AuthSession = Depends(get_current_session)):
    return session
