from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from shared import load_service_config

_config = load_service_config("shop")

_connect_args = {"check_same_thread": False} if _config.database.url.startswith("sqlite") else {}

engine = create_engine(
    _config.database.url,
    future=True,
    pool_pre_ping=True,
    connect_args=_connect_args,
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
