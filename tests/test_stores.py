import pytest

from packing.draft_store import InMemoryDraftStore
from utils.draft_store import DbDraftStore
from utils.ids import normalize_id
from utils.lookups import DbCatalogLookup, DbCustomerLookup


@pytest.mark.parametrize("value, expected", [
    (7, 7), ("7", 7), (" 12 ", 12), ({"id": 3}, 3), ({"_id": "4"}, 4), ({"_id": {"id": 5}}, 5),
    (None, None), ("", None),
])
def test_normalize_id(value, expected):
    assert normalize_id(value) == expected


@pytest.mark.parametrize("value", ["abc", True, {"name": "x"}, 1.5])
def test_normalize_id_rejects_other_shapes(value):
    with pytest.raises(ValueError):
        normalize_id(value)


def test_in_memory_store_copies_values():
    store = InMemoryDraftStore()
    value = [{"boxNo": "1"}]
    store.set("tempBoxes", value)
    value[0]["boxNo"] = "9"
    assert store.get("tempBoxes") == [{"boxNo": "1"}]
    assert store.keys() == ["tempBoxes"]
    store.remove("tempBoxes")
    store.remove("tempBoxes")
    assert store.get("tempBoxes") is None


def test_db_store_round_trips_per_key(db_session):
    store = DbDraftStore(db_session)
    store.set("user:1:tempBoxes", [{"boxNo": "1"}])
    store.set("user:2:tempBoxes", [])
    store.set("user:1:tempBoxes", [{"boxNo": "1"}, {"boxNo": "2"}])

    assert len(store.get("user:1:tempBoxes")) == 2
    assert store.get("user:2:tempBoxes") == []
    store.remove("user:1:tempBoxes")
    assert store.get("user:1:tempBoxes") is None


def test_db_lookups(db_session, users):
    catalog = DbCatalogLookup(db_session)
    assert catalog.resolve_sku(" prod001 ").id == 1
    assert catalog.resolve_sku("OLD001").product_name == "Retired Product"
    assert catalog.resolve_sku("") is None

    customers = DbCustomerLookup(db_session)
    assert customers.resolve_customer(2).code == "CUST002"
    assert customers.resolve_customer("cust001").id == 1
    assert customers.resolve_customer("404") is None
