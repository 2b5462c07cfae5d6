# storefront_cart/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List, Literal

from storefront_cart.utils.settings import DEFAULT_PERSIST_CART, DEFAULT_CART_EXPIRATION_DAYS


class CamelModel(BaseModel):
    """Na drucie camelCase (jak front), w pythonie snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class VariantOption(CamelModel):
    """Para wariantu, np. color=red."""

    name: str
    value: str


class CampaignInfo(CamelModel):
    """Kopie flag i terminow kampanii, potrzebne do odliczania bez pobierania produktu."""

    is_flash_deal: bool = False
    flash_deal_end_time: str | None = None
    is_special_offer: bool = False
    special_offer_end_time: str | None = None
    campaign_label: str | None = None


class Product(CamelModel):
    """Fakty cenowe produktu, tak jak zwraca je product-service."""

    id: int = Field(..., gt=0)
    name: str
    price: int = Field(..., ge=0, description="Cena bazowa w pelnych jednostkach waluty")
    discount: int = Field(0, ge=0, le=100)
    compare_at_price: int | None = None
    is_flash_deal: bool = False
    flash_deal_end_time: str | None = None
    is_special_offer: bool = False
    special_offer_end_time: str | None = None
    campaign_label: str | None = None
    image: str | None = None

    @property
    def campaign(self) -> CampaignInfo:
        return CampaignInfo(
            is_flash_deal=self.is_flash_deal,
            flash_deal_end_time=self.flash_deal_end_time,
            is_special_offer=self.is_special_offer,
            special_offer_end_time=self.special_offer_end_time,
            campaign_label=self.campaign_label,
        )


class PricingResult(CamelModel):
    """Jedyny artefakt cenowy, ktory wolno wyswietlac albo zapisywac."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    final_price: int
    original_price: int | None = None
    discount: int = 0
    flash_active: bool = False
    special_active: bool = False
    flash_deal_end_time: str | None = None
    special_offer_end_time: str | None = None
    campaign_label: str | None = None
    has_active_promotion: bool = False


class CartLine(CamelModel):
    """Pozycja koszyka z cena rozwiazana w momencie dodania."""

    product_id: int = Field(..., gt=0)
    name: str
    price: int = Field(..., ge=0)
    original_price: int | None = None
    discount: int = Field(0, ge=0, le=100)
    quantity: int = Field(..., ge=1)
    variant_options: List[VariantOption] = Field(default_factory=list)
    base_price: int = Field(..., ge=0)
    # rabat zapisany w produkcie; `discount` to rabat faktycznie naliczony
    product_discount: int = Field(0, ge=0, le=100)
    compare_at_price: int | None = None
    campaign: CampaignInfo | None = None
    image: str | None = None


class CartConfig(CamelModel):
    """Polityka trwalosci koszyka goscia (0 dni = bez wygasania)."""

    persist_cart: bool = DEFAULT_PERSIST_CART
    cart_expiration_days: int = Field(DEFAULT_CART_EXPIRATION_DAYS, ge=0)


class CartSnapshot(CamelModel):
    items: List[CartLine] = Field(default_factory=list)
    total_price: int = 0


class CartEnvelope(CamelModel):
    """Koperta odpowiedzi cart api."""

    success: bool
    message: str | None = None
    data: CartSnapshot | None = None


class PublicSettings(CamelModel):
    cart_config: CartConfig | None = None


class SettingsEnvelope(CamelModel):
    success: bool
    message: str | None = None
    data: PublicSettings | None = None


class MutationResult(BaseModel):
    """Wynik mutacji koszyka, bez stanow posrednich."""

    status: Literal["committed", "rolled_back", "skipped"]
    lines: List[CartLine] = Field(default_factory=list)
    persisted: bool = True
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "committed"


class ItemIn(CamelModel):
    """Schema dla dodania/aktualizacji pozycji (ilosc absolutna)."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    quantity: int = Field(..., ge=0, description="Ilość; 0 usuwa pozycje")
    variant_options: List[VariantOption] = Field(default_factory=list)


class SyncIn(CamelModel):
    """Schema dla hurtowej synchronizacji koszyka goscia po zalogowaniu."""

    items: List[ItemIn] = Field(default_factory=list)


class RemoveItemIn(CamelModel):
    # brak wariantow = usun wszystkie pozycje produktu
    variant_options: List[VariantOption] | None = None


class CartConfigIn(CamelModel):
    """Schema dla zmiany polityki koszyka przez admina."""

    persist_cart: bool
    cart_expiration_days: int = Field(..., ge=0, le=365)
