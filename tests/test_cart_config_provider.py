"""Tests for the cart persistence policy provider."""

from unittest.mock import MagicMock

from requests import ConnectionError as RequestsConnectionError

from storefront_cart.domain.errors import SettingsFetchError
from storefront_cart.domain.schemas import CartConfig
from storefront_cart.services.cart_config_provider import CartConfigProvider
from storefront_cart.services.settings_client import SettingsClient

from conftest import FakeSettingsClient


def test_fetches_once_and_caches():
    client = FakeSettingsClient(CartConfig(persist_cart=True, cart_expiration_days=7))
    provider = CartConfigProvider(client)

    assert provider.get().cart_expiration_days == 7
    assert provider.get().cart_expiration_days == 7
    assert client.calls == 1


def test_refresh_always_refetches():
    client = FakeSettingsClient(CartConfig(cart_expiration_days=7))
    provider = CartConfigProvider(client)
    provider.get()

    client.config = CartConfig(persist_cart=False, cart_expiration_days=1)

    assert provider.refresh().persist_cart is False
    assert provider.get().cart_expiration_days == 1
    assert client.calls == 2


def test_fetch_error_degrades_to_defaults():
    provider = CartConfigProvider(FakeSettingsClient(error=SettingsFetchError("boom")))

    config = provider.get()

    assert config.persist_cart is True
    assert config.cart_expiration_days == 30


def test_missing_config_object_degrades_to_defaults():
    provider = CartConfigProvider(FakeSettingsClient(config=None))

    assert provider.get() == CartConfig(persist_cart=True, cart_expiration_days=30)


def _response(payload):
    resp = MagicMock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


def test_settings_client_parses_cart_config():
    session = MagicMock()
    session.request.return_value = _response(
        {"success": True, "data": {"cartConfig": {"persistCart": False, "cartExpirationDays": 3}}}
    )

    config = SettingsClient(base_url="http://shop", session=session).fetch_cart_config()

    assert config == CartConfig(persist_cart=False, cart_expiration_days=3)
    session.request.assert_called_once_with("GET", "http://shop/settings/public", timeout=5.0)


def test_settings_client_without_cart_config_returns_none():
    session = MagicMock()
    session.request.return_value = _response({"success": True, "data": {}})

    assert SettingsClient(base_url="http://shop", session=session).fetch_cart_config() is None


def test_provider_survives_transport_and_shape_errors():
    broken = MagicMock()
    broken.request.side_effect = RequestsConnectionError("down")
    assert CartConfigProvider(SettingsClient(session=broken)).get() == CartConfig()

    malformed = MagicMock()
    malformed.request.return_value = _response(
        {"success": True, "data": {"cartConfig": {"persistCart": True, "cartExpirationDays": -4}}}
    )
    assert CartConfigProvider(SettingsClient(session=malformed)).get() == CartConfig()
