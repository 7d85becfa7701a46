# app/models/store.py
from sqlalchemy import Column, DateTime, Integer, JSON, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from app.core.database import Base


class ShopRecord(Base):
    """One row per shop; the whole aggregate lives in ``data``."""

    __tablename__ = "shops"

    slug = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    data = Column(JSONB().with_variant(JSON, "sqlite"), nullable=False)
    revision = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class BookingRecord(Base):
    __tablename__ = "bookings"

    id = Column(String, primary_key=True)
    shop_slug = Column(String, nullable=False, index=True)
    date = Column(String(10), nullable=False, index=True)
    data = Column(JSONB().with_variant(JSON, "sqlite"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
