# storefront_cart/services/cart_config_provider.py
from storefront_cart.domain.errors import SettingsFetchError
from storefront_cart.domain.schemas import CartConfig
from storefront_cart.services.settings_client import SettingsClient
from storefront_cart.utils.logging import get_logger

logger = get_logger(__name__)


class CartConfigProvider:
    """
    Polityka trwalosci koszyka goscia.

    get() pobiera raz i trzyma w cache, refresh() zawsze pobiera od nowa.
    Bledy nigdy nie blokuja koszyka - wtedy domyslne {persist: true, 30 dni}.
    """

    def __init__(self, client: SettingsClient | None = None):
        self.client = client or SettingsClient()
        self._cached: CartConfig | None = None

    def get(self) -> CartConfig:
        if self._cached is None:
            return self.refresh()
        return self._cached

    def refresh(self) -> CartConfig:
        try:
            config = self.client.fetch_cart_config()
        except SettingsFetchError as e:
            logger.warning(f"{e} - uzywam domyslnej polityki koszyka")
            config = None

        if config is None:
            config = CartConfig()

        self._cached = config
        logger.info(
            f"Polityka koszyka: persist={config.persist_cart}, "
            f"expiration_days={config.cart_expiration_days}"
        )
        return config
