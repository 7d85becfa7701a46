import os
import sys
from datetime import date
from pathlib import Path
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

SERVICE_DIR = Path(__file__).resolve().parents[1]
ROOT_DIR = SERVICE_DIR.parent.parent

service_path = str(SERVICE_DIR)
shared_path = str(ROOT_DIR / "services")
for path in (service_path, shared_path):
    if path in sys.path:
        sys.path.remove(path)
    sys.path.insert(0, path)

for module_name in list(sys.modules):
    if module_name == "app" or module_name.startswith("app."):
        sys.modules.pop(module_name)

os.environ.setdefault("SHOP_DATABASE_URL", f"sqlite:///{SERVICE_DIR / 'test_shop.db'}")
os.environ["REDIS_URL"] = ""
os.environ.setdefault("SECRET_KEY", "pruebas-" + "x" * 56)
os.environ.setdefault("SUPERADMIN_USER", "root-turnolibre")
os.environ.setdefault("SUPERADMIN_PASSWORD", "plataforma-segura-2025")

from app.main import app  # noqa: E402
from app.core.auth_dependencies import Role  # noqa: E402
from app.core.database import Base, SessionLocal, engine  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.routers import crud  # noqa: E402
from app.schemas.catalog_schema import BarberCreate, ConsumableCreate, ServiceCreate  # noqa: E402
from app.schemas.client_schema import ClientCreate  # noqa: E402
from app.schemas.shop_schema import DEFAULT_BRANCH, BranchCreate, Plan, ShopCreate  # noqa: E402
from app.services import branches, catalog, clients, consumption, provisioning  # noqa: E402

ADMIN_PASSWORD = "tijeras-2025"


@pytest.fixture(autouse=True)
def prepare_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded(db):
    """PRO shop with two branches, three barbers, stock and one registered client.

    Shampoo starts at 3 units in Casa Central, Café at 10.
    """
    shop, _ = provisioning.create_shop(
        db,
        ShopCreate(name="Barbería El Taño", plan=Plan.PRO, city="Córdoba", admin_password=ADMIN_PASSWORD),
    )
    branches.add_branch(shop, BranchCreate(name="Centro"))
    corte = catalog.add_service(shop, ServiceCreate(name="Corte clásico", price=8000, duration=30))
    barba = catalog.add_service(shop, ServiceCreate(name="Barba", price=5000, duration=20))
    lucas = catalog.add_barber(shop, BarberCreate(name="Lucas", username="lucas", password="navaja"))
    marta = catalog.add_barber(shop, BarberCreate(name="Marta", username="marta", password="peine"))
    sofia = catalog.add_barber(shop, BarberCreate(name="Sofía", username="sofia", password="tijera", branch="Centro"))
    shampoo = catalog.add_item(shop.inventory, ConsumableCreate(name="Shampoo"))
    shop.inventory = consumption.set_stock(shop.inventory, shampoo.id, DEFAULT_BRANCH, 3)
    cafe = catalog.add_item(shop.receptions, ConsumableCreate(name="Café"))
    shop.receptions = consumption.set_stock(shop.receptions, cafe.id, DEFAULT_BRANCH, 10)
    juan = clients.create_client(
        shop,
        ClientCreate(first_name="Juan", last_name="Pérez", phone="351-1111111"),
        date(2025, 6, 1),
    )
    shop = crud.save_shop(db, shop)

    return SimpleNamespace(
        slug=shop.slug,
        revision=shop.revision,
        service_id=corte.id,
        beard_service_id=barba.id,
        lucas_id=lucas.id,
        marta_id=marta.id,
        sofia_id=sofia.id,
        shampoo_id=shampoo.id,
        cafe_id=cafe.id,
        juan_id=juan.id,
    )


def bearer(subject, role, name, shop_slug=None):
    return {"Authorization": f"Bearer {create_access_token(subject, role, name, shop_slug)}"}


@pytest.fixture
def superadmin_headers():
    return bearer("superadmin", Role.SUPERADMIN, "Super Admin")


@pytest.fixture
def admin_headers(seeded):
    return bearer(f"admin-{seeded.slug}", Role.ADMIN, "Barbería El Taño", seeded.slug)


@pytest.fixture
def lucas_headers(seeded):
    return bearer(seeded.lucas_id, Role.BARBER, "Lucas", seeded.slug)


@pytest.fixture
def token_headers():
    return bearer


@pytest.fixture
def admin_credentials(seeded):
    return f"admin-{seeded.slug}", ADMIN_PASSWORD
