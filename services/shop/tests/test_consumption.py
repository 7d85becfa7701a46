import pytest

from app.core.errors import NotFoundError, ValidationError
from app.schemas.shop_schema import ConsumableItem, StockInfo
from app.services.consumption import apply_consumption, low_stock, set_stock


def _items():
    return [
        ConsumableItem(id="shampoo", name="Shampoo", branch_stock={"Casa Central": StockInfo(stock=3, min_stock=5)}),
        ConsumableItem(id="cera", name="Cera", branch_stock={"Casa Central": StockInfo(stock=12, min_stock=2)}),
    ]


def test_usage_is_subtracted_in_branch():
    items = _items()

    first = apply_consumption(items, "Casa Central", {"shampoo": 2})
    assert first[0].stock_for("Casa Central").stock == 1

    second = apply_consumption(first, "Casa Central", {"shampoo": 5})
    assert second[0].stock_for("Casa Central").stock == 0


def test_unused_items_are_the_same_objects():
    items = _items()

    result = apply_consumption(items, "Casa Central", {"shampoo": 1, "cera": 0})

    assert result[1] is items[1]
    assert result[0] is not items[0]
    # la lista original no cambia
    assert items[0].stock_for("Casa Central").stock == 3


def test_all_zero_usage_returns_an_equal_list():
    items = _items()

    result = apply_consumption(items, "Casa Central", {"shampoo": 0, "cera": 0})

    assert result == items
    assert all(after is before for after, before in zip(result, items))


def test_branch_without_record_starts_from_default():
    result = apply_consumption(_items(), "Centro", {"cera": 1})

    assert result[1].branch_stock["Centro"] == StockInfo(stock=0, min_stock=5)
    assert result[1].branch_stock["Casa Central"].stock == 12


def test_overuse_floors_at_zero():
    result = apply_consumption(_items(), "Casa Central", {"cera": 20})

    assert result[1].stock_for("Casa Central").stock == 0


def test_set_stock_keeps_min_stock_when_not_given():
    result = set_stock(_items(), "cera", "Casa Central", 7)

    assert result[1].branch_stock["Casa Central"] == StockInfo(stock=7, min_stock=2)


def test_set_stock_rejects_unknown_item_and_negative():
    with pytest.raises(NotFoundError):
        set_stock(_items(), "gel", "Casa Central", 1)
    with pytest.raises(ValidationError):
        set_stock(_items(), "cera", "Casa Central", -1)


def test_low_stock_alerts():
    items = _items()
    items.append(
        ConsumableItem(id="viejo", name="Viejo", active=False, branch_stock={"Casa Central": StockInfo(stock=0)})
    )

    alerts = low_stock(items)

    assert [alert["item_id"] for alert in alerts] == ["shampoo"]
    assert low_stock(items, "Centro") == []


def test_low_stock_skips_records_of_removed_branches():
    items = _items()
    items[0] = items[0].model_copy(
        update={"branch_stock": {**items[0].branch_stock, "Norte": StockInfo(stock=0, min_stock=5)}}
    )

    alerts = low_stock(items, existing_branches={"Casa Central"})

    assert [(alert["item_id"], alert["branch"]) for alert in alerts] == [("shampoo", "Casa Central")]
