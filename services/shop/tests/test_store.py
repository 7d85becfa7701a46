from unittest.mock import MagicMock

import pytest

from app.core.database import SessionLocal
from app.core.errors import ConflictError, NotFoundError
from app.routers import crud
from app.schemas.shop_schema import Plan, Shop, ShopCreate
from app.services import provisioning
from shared.cache import PROFILE_CACHE_PREFIX


def test_missing_shop_is_none(db):
    assert crud.get_shop(db, "no-existe") is None
    assert crud.get_booking(db, "no-existe", "b1") is None


def test_create_assigns_first_revision(db, seeded):
    shop = crud.get_shop(db, seeded.slug)

    assert shop.revision == seeded.revision
    assert shop.admin_user == f"admin-{seeded.slug}"
    assert [summary.slug for summary in crud.list_shops(db)] == [seeded.slug]


def test_duplicate_slug_is_a_conflict(db, seeded):
    with pytest.raises(ConflictError):
        provisioning.create_shop(db, ShopCreate(name="Barberia el tano", plan=Plan.FREE))


def test_stale_revision_is_rejected(db, seeded):
    other = SessionLocal()
    try:
        mine = crud.get_shop(db, seeded.slug)
        theirs = crud.get_shop(other, seeded.slug)

        theirs.description = "Cortes desde 1998"
        saved = crud.save_shop(other, theirs, expected_revision=theirs.revision)
        assert saved.revision == seeded.revision + 1

        mine.description = "Otra descripción"
        with pytest.raises(ConflictError):
            crud.save_shop(db, mine, expected_revision=mine.revision)
    finally:
        other.close()

    assert crud.get_shop(db, seeded.slug).description == "Cortes desde 1998"


def test_last_writer_wins_without_revision(db, seeded):
    shop = crud.get_shop(db, seeded.slug)
    crud.save_shop(db, shop.model_copy(update={"city": "Rosario"}))

    shop.city = "Mendoza"
    crud.save_shop(db, shop)

    assert crud.get_shop(db, seeded.slug).city == "Mendoza"


def test_save_unknown_shop_is_not_found(db):
    ghost = Shop(slug="fantasma", name="Fantasma", admin_user="admin-fantasma", admin_password_hash="x")

    with pytest.raises(NotFoundError):
        crud.save_shop(db, ghost, expected_revision=1)


def test_save_invalidates_public_profile(db, seeded):
    cache = MagicMock()
    shop = crud.get_shop(db, seeded.slug)

    crud.save_shop(db, shop, expected_revision=shop.revision, cache=cache)

    cache.delete.assert_called_once_with(f"{PROFILE_CACHE_PREFIX}{seeded.slug}")
