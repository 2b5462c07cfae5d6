"""Tests for the server cart API client (transport mocked)."""

from unittest.mock import MagicMock

import pytest
from requests import ConnectionError as RequestsConnectionError

from storefront_cart.domain.errors import CartSyncError
from storefront_cart.domain.schemas import CartLine, VariantOption
from storefront_cart.services.cart_api_client import CartApiClient

LINE = {
    "productId": 1,
    "name": "Keyboard",
    "price": 80000,
    "originalPrice": 100000,
    "discount": 20,
    "quantity": 2,
    "variantOptions": [{"name": "color", "value": "red"}],
    "basePrice": 100000,
    "productDiscount": 20,
}


def _response(payload, status_code=200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    return CartApiClient(base_url="http://shop/api/", session=session, timeout=2)


def test_upsert_sends_absolute_quantity_and_parses_snapshot(client, session):
    session.request.return_value = _response(
        {"success": True, "data": {"items": [LINE], "totalPrice": 160000}}
    )

    snapshot = client.upsert_item(7, 1, 2, [VariantOption(name="color", value="red")])

    assert snapshot.total_price == 160000
    assert snapshot.items[0].quantity == 2
    session.request.assert_called_once_with(
        "POST",
        "http://shop/api/cart/item",
        params={"user_id": 7},
        json={"productId": 1, "quantity": 2, "variantOptions": [{"name": "color", "value": "red"}]},
        timeout=2,
    )


def test_remove_sends_variants_to_disambiguate(client, session):
    session.request.return_value = _response({"success": True, "data": {"items": [], "totalPrice": 0}})

    client.remove_item(7, 1, [{"name": "size", "value": "M"}])

    args, kwargs = session.request.call_args
    assert args == ("DELETE", "http://shop/api/cart/item/1")
    assert kwargs["json"] == {"variantOptions": [{"name": "size", "value": "M"}]}


def test_clear_without_data_returns_empty_snapshot(client, session):
    session.request.return_value = _response({"success": True, "message": "ok"})

    snapshot = client.clear(7)

    assert snapshot.items == []
    assert snapshot.total_price == 0


def test_unsuccessful_envelope_raises(client, session):
    session.request.return_value = _response({"success": False, "message": "Produkt 9 nie istnieje"}, 400)

    with pytest.raises(CartSyncError, match="Produkt 9 nie istnieje"):
        client.upsert_item(7, 9, 1)


def test_non_json_body_raises(client, session):
    resp = _response(None, 200)
    resp.json.side_effect = ValueError("no json")
    session.request.return_value = resp

    with pytest.raises(CartSyncError):
        client.get_cart(7)


def test_transport_error_is_retried_then_raised(client, session):
    session.request.side_effect = RequestsConnectionError("down")

    with pytest.raises(CartSyncError):
        client.get_cart(7)
    assert session.request.call_count == 3


def test_sync_sends_all_lines(client, session):
    session.request.return_value = _response({"success": True, "data": {"items": [LINE], "totalPrice": 160000}})
    line = CartLine.model_validate(LINE)

    client.sync(7, [line])

    assert session.request.call_args.kwargs["json"] == {
        "items": [{"productId": 1, "quantity": 2, "variantOptions": [{"name": "color", "value": "red"}]}]
    }
