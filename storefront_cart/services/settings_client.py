# storefront_cart/services/settings_client.py
import requests
from requests import RequestException

from storefront_cart.domain.errors import SettingsFetchError
from storefront_cart.domain.schemas import CartConfig, SettingsEnvelope
from storefront_cart.utils.retry import http_retry
from storefront_cart.utils.settings import CART_API_URL, HTTP_TIMEOUT_SECONDS
from storefront_cart.utils.logging import get_logger

logger = get_logger(__name__)


class SettingsClient:
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
    def _get_public(self):
        url = f"{self.base_url}/settings/public"
        logger.info(f"SettingsClient GET {url}")

        resp = self.session.request("GET", url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def fetch_cart_config(self) -> CartConfig | None:
        """Zwraca cartConfig albo None, gdy serwer go nie zwrocil."""
        try:
            envelope = SettingsEnvelope.model_validate(self._get_public())
        except (RequestException, ValueError) as e:
            raise SettingsFetchError(f"Nie udalo sie pobrac ustawien: {e}") from e

        if not envelope.success or envelope.data is None:
            return None
        return envelope.data.cart_config
