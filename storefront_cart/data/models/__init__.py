#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from storefront_cart.data.models.cart import CartModel
from storefront_cart.data.models.cart_item import CartItemModel
from storefront_cart.data.models.store_settings import StoreSettingsModel

__all__ = ["CartModel", "CartItemModel", "StoreSettingsModel"]
