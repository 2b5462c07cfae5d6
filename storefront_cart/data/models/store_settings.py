from datetime import datetime, timezone

from sqlalchemy import Column, Integer, Boolean, DateTime

from storefront_cart.data.database import Base
from storefront_cart.utils.settings import DEFAULT_PERSIST_CART, DEFAULT_CART_EXPIRATION_DAYS


class StoreSettingsModel(Base):
    """Jeden wiersz z ustawieniami sklepu istotnymi dla koszyka."""

    __tablename__ = "store_settings"

    id = Column(Integer, primary_key=True)
    persist_cart = Column(Boolean, nullable=False, default=DEFAULT_PERSIST_CART)
    cart_expiration_days = Column(Integer, nullable=False, default=DEFAULT_CART_EXPIRATION_DAYS)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
