# storefront_cart/services/cart_api_client.py
from typing import List

import requests
from requests import RequestException

from storefront_cart.domain.errors import CartSyncError
from storefront_cart.domain.schemas import CartEnvelope, CartLine, CartSnapshot, VariantOption
from storefront_cart.utils.retry import http_retry
from storefront_cart.utils.settings import CART_API_URL, HTTP_TIMEOUT_SECONDS
from storefront_cart.utils.logging import get_logger

logger = get_logger(__name__)


def _variants_wire(variant_options) -> list:
    return [
        VariantOption.model_validate(option).to_wire() if isinstance(option, dict) else option.to_wire()
        for option in (variant_options or ())
    ]


class CartApiClient:
    """
    Klient koszyka na serwerze (uzytkownik zalogowany).

    Kazda odpowiedz to koperta {success, message?, data?: {items, totalPrice}};
    success=false albo blad transportu -> CartSyncError.
    Ilosc w upsert jest absolutna, wiec ponowienie (tenacity) jest bezpieczne.
    """

    def __init__(
        self,
        base_url: str | None = None,
        session: requests.Session | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ):
        self.base_url = (base_url or CART_API_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    @http_retry()
    def _send(self, method: str, path: str, user_id: int, body: dict | None = None):
        url = f"{self.base_url}{path}"
        logger.info(f"CartApiClient {method} {url} user={user_id}")

        resp = self.session.request(
            method,
            url,
            params={"user_id": user_id},
            json=body,
            timeout=self.timeout,
        )
        # 5xx ponawiamy, 4xx niesie koperte z komunikatem
        if resp.status_code >= 500:
            resp.raise_for_status()
        return resp

    def _call(self, method: str, path: str, user_id: int, body: dict | None = None) -> CartSnapshot:
        try:
            resp = self._send(method, path, user_id, body)
        except RequestException as e:
            logger.error(f"Cart api {method} {path} nieudane: {e}")
            raise CartSyncError(f"Blad polaczenia z serwerem koszyka: {e}") from e

        try:
            envelope = CartEnvelope.model_validate(resp.json())
        except ValueError as e:
            logger.error(f"Niepoprawna odpowiedz cart api HTTP {resp.status_code}: {e}")
            raise CartSyncError(f"Niepoprawna odpowiedz serwera koszyka (HTTP {resp.status_code})") from e

        if not envelope.success:
            message = envelope.message or f"Serwer koszyka odrzucil zadanie (HTTP {resp.status_code})"
            logger.error(f"Cart api {method} {path}: {message}")
            raise CartSyncError(message)

        return envelope.data or CartSnapshot()

    def get_cart(self, user_id: int) -> CartSnapshot:
        return self._call("GET", "/cart", user_id)

    def sync(self, user_id: int, items: List[CartLine]) -> CartSnapshot:
        logger.info(f"Synchronizacja {len(items)} pozycji dla uzytkownika {user_id}")
        body = {
            "items": [
                {
                    "productId": line.product_id,
                    "quantity": line.quantity,
                    "variantOptions": _variants_wire(line.variant_options),
                }
                for line in items
            ]
        }
        return self._call("POST", "/cart/sync", user_id, body)

    def upsert_item(self, user_id: int, product_id: int, quantity: int, variant_options=None) -> CartSnapshot:
        body = {
            "productId": product_id,
            "quantity": quantity,
            "variantOptions": _variants_wire(variant_options),
        }
        return self._call("POST", "/cart/item", user_id, body)

    def remove_item(self, user_id: int, product_id: int, variant_options=None) -> CartSnapshot:
        body = {"variantOptions": None if variant_options is None else _variants_wire(variant_options)}
        return self._call("DELETE", f"/cart/item/{product_id}", user_id, body)

    def clear(self, user_id: int) -> CartSnapshot:
        return self._call("DELETE", "/cart", user_id)
