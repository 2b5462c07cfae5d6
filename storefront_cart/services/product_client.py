# storefront_cart/services/product_client.py
import requests

from storefront_cart.domain.schemas import Product
from storefront_cart.utils.retry import http_retry
from storefront_cart.utils.settings import PRODUCT_SERVICE_URL, HTTP_TIMEOUT_SECONDS
from storefront_cart.utils.logging import get_logger

logger = get_logger(__name__)


class ProductClient:
    def __init__(
        self,
        base_url: str | None = None,
        session: requests.Session | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    @http_retry()
    def _get(self, url: str):
        resp = self.session.get(url, timeout=self.timeout)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.json()

    def fetch_product(self, product_id: int) -> Product | None:
        url = f"{self.base_url}/products/{product_id}"
        logger.info(f"ProductClient GET {url}")

        data = self._get(url)
        if data is None:
            logger.info(f"Produkt {product_id} nie istnieje w product-service")
            return None
        return Product.model_validate(data)
