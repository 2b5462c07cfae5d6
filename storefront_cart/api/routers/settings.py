#storefront_cart/api/routers/settings.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront_cart.data.database import get_db
from storefront_cart.domain.schemas import CartConfig, CartConfigIn, PublicSettings, SettingsEnvelope
from storefront_cart.repos.settings_repo import SettingsRepo
from storefront_cart.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


def _envelope(settings) -> SettingsEnvelope:
    config = CartConfig(
        persist_cart=settings.persist_cart,
        cart_expiration_days=settings.cart_expiration_days,
    )
    return SettingsEnvelope(success=True, data=PublicSettings(cart_config=config))


@router.get("/public", response_model=SettingsEnvelope, response_model_exclude_none=True)
def get_public_settings(db: Session = Depends(get_db)):
    """Ustawienia dostepne bez logowania (takze dla gosci)."""
    return _envelope(SettingsRepo(db).get_or_create())


@router.put("/cart", response_model=SettingsEnvelope, response_model_exclude_none=True)
def update_cart_settings(payload: CartConfigIn, db: Session = Depends(get_db)):
    settings = SettingsRepo(db).update_cart_config(payload.persist_cart, payload.cart_expiration_days)
    logger.info(
        f"Zmieniono polityke koszyka: persist={settings.persist_cart}, "
        f"expiration_days={settings.cart_expiration_days}"
    )
    return _envelope(settings)
