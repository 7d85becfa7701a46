from typing import Optional
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    slug: str = Field(examples=["barberia-el-tano"])
    username: str
    password: str


class SuperAdminLoginRequest(BaseModel):
    username: str
    password: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str
    name: str
    shop_slug: Optional[str] = None
    user_id: str
