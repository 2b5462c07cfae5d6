# storefront_cart/domain/errors.py
from storefront_cart.domain.schemas import MutationResult


class CartError(Exception):
    """Bazowy wyjatek domeny koszyka."""


class CartSyncError(CartError):
    """
    Blad transportu albo odpowiedz {success: false} z cart api.

    Silnik koszyka dolacza `lines` - stan po wycofaniu optymistycznej zmiany.
    """

    def __init__(self, message: str, lines=None):
        super().__init__(message)
        self.message = message
        self.lines = lines

    @property
    def result(self):
        return MutationResult(status="rolled_back", lines=list(self.lines or []), error=self.message)


class CartPersistenceError(CartError):
    """Nie udalo sie zapisac koszyka goscia w lokalnym store."""


class SettingsFetchError(CartError):
    """Nie udalo sie pobrac ustawien sklepu."""
