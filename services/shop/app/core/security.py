import os
import secrets
import string
from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from shared.config import validate_no_insecure_password

# bcrypt queda fuera: passlib no soporta las versiones actuales del backend
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "sha256_crypt"], deprecated="auto")

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS512")
ACCESS_TOKEN_EXPIRE_HOURS = int(os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", "24"))

_PASSWORD_ALPHABET = string.ascii_lowercase + string.digits


def superadmin_credentials() -> tuple[str, str]:
    """Par usuario/contraseña de la plataforma (``admin``/``123456`` solo en desarrollo)."""
    user = os.getenv("SUPERADMIN_USER", "admin")
    password = os.getenv("SUPERADMIN_PASSWORD", "123456")
    validate_no_insecure_password(password, "SUPERADMIN_PASSWORD")
    return user, password


def create_access_token(subject: str, role: str, name: str, shop_slug: str | None = None) -> str:
    expire = datetime.now(timezone.utc) + timedelta(hours=ACCESS_TOKEN_EXPIRE_HOURS)
    to_encode = {
        "exp": expire,
        "sub": subject,
        "role": role,  # SUPERADMIN, ADMIN o BARBER
        "name": name,
        "shop_slug": shop_slug,
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def generate_password(length: int = 8) -> str:
    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))
