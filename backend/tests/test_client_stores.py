import pytest

from medora.client.auth_store import AuthStore
from medora.client.cart import CartItem, CartStore
from medora.client.storage import JsonFileStorage


@pytest.fixture
def storage(tmp_path):
    return JsonFileStorage(tmp_path / "cart.json")


def napa(quantity=1):
    return CartItem(medicine_id=1, name="Napa", price=2.5, quantity=quantity)


def azithro(quantity=1):
    return CartItem(
        medicine_id=2, name="Azithrocin", price=40.0, discount_price=35.0,
        quantity=quantity, prescription_required=True,
    )


def test_adding_same_medicine_merges_quantity(storage):
    cart = CartStore(storage)
    cart.add_item(napa(1))
    cart.add_item(napa(2))

    assert len(cart.items) == 1
    assert cart.items[0].quantity == 3
    assert cart.total_items() == 3


def test_totals_use_discount_price(storage):
    cart = CartStore(storage)
    cart.add_item(napa(4))
    cart.add_item(azithro(2))

    assert cart.total_items() == 6
    assert cart.total_price() == pytest.approx(4 * 2.5 + 2 * 35.0)
    assert cart.requires_prescription is True


def test_update_and_remove(storage):
    cart = CartStore(storage)
    cart.add_item(napa())
    cart.add_item(azithro())

    cart.update_quantity(1, 5)
    assert cart.items[0].quantity == 5

    cart.update_quantity(1, 0)
    assert [i.medicine_id for i in cart.items] == [2]

    # unknown ids are ignored
    cart.remove_item(99)
    cart.update_quantity(99, 3)
    assert [i.medicine_id for i in cart.items] == [2]

    cart.clear()
    assert cart.items == []
    assert cart.total_price() == 0
    assert cart.requires_prescription is False


def test_cart_survives_reload(storage):
    cart = CartStore(storage)
    cart.add_item(azithro(2))

    reloaded = CartStore(JsonFileStorage(storage.path))
    assert len(reloaded.items) == 1
    item = reloaded.items[0]
    assert item.medicine_id == 2
    assert item.discount_price == 35.0
    assert item.quantity == 2
    assert item.prescription_required is True


def test_cart_is_stored_in_camel_case(storage):
    CartStore(storage).add_item(azithro())
    saved = storage.load()["items"][0]
    assert saved["medicineId"] == 2
    assert saved["prescriptionRequired"] is True


def test_corrupt_or_missing_file_loads_empty(tmp_path):
    path = tmp_path / "state.json"
    assert CartStore(JsonFileStorage(path)).items == []

    path.write_text("{not json", encoding="utf-8")
    assert JsonFileStorage(path).load() == {}
    assert CartStore(JsonFileStorage(path)).items == []


def test_storage_clear(storage):
    storage.save({"items": []})
    assert storage.path.exists()
    storage.clear()
    assert not storage.path.exists()
    storage.clear()


def test_auth_store_round_trip(tmp_path):
    storage = JsonFileStorage(tmp_path / "auth.json")
    auth = AuthStore(storage)
    assert auth.is_authenticated is False

    auth.set_auth({"id": 1, "name": "Rahim"}, "access-1", "refresh-1")
    auth.set_access_token("access-2")

    restored = AuthStore(JsonFileStorage(storage.path))
    assert restored.is_authenticated is True
    assert restored.user["name"] == "Rahim"
    assert restored.access_token == "access-2"
    assert restored.refresh_token == "refresh-1"

    restored.logout()
    assert AuthStore(JsonFileStorage(storage.path)).is_authenticated is False


def test_zero_discount_price_is_used(storage):
    cart = CartStore(storage)
    cart.add_item(CartItem(medicine_id=3, name="Free sample", price=12.0, discount_price=0.0, quantity=2))
    assert cart.items[0].unit_price == 0.0
    assert cart.total_price() == 0.0
