# storefront_cart/repos/settings_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront_cart.data.models.store_settings import StoreSettingsModel


class SettingsRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_or_create(self) -> StoreSettingsModel:
        settings = self.db.execute(
            select(StoreSettingsModel).order_by(StoreSettingsModel.id).limit(1)
        ).scalar_one_or_none()

        if settings is None:
            settings = StoreSettingsModel()
            self.db.add(settings)
            self.db.commit()
            self.db.refresh(settings)
        return settings

    def update_cart_config(self, persist_cart: bool, cart_expiration_days: int) -> StoreSettingsModel:
        settings = self.get_or_create()
        settings.persist_cart = persist_cart
        settings.cart_expiration_days = cart_expiration_days
        self.db.commit()
        self.db.refresh(settings)
        return settings
