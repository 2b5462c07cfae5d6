from datetime import datetime, timezone, timedelta
from typing import List

from sqlalchemy.orm import Session

from storefront_cart.data.models.cart import CartModel
from storefront_cart.data.models.cart_item import CartItemModel
from storefront_cart.domain.cart_line import cart_total, find_line, normalize_variants, same_line
from storefront_cart.domain.pricing import resolve_pricing
from storefront_cart.domain.schemas import CampaignInfo, CartLine, CartSnapshot, ItemIn, Product
from storefront_cart.repos.cart_repo import CartRepo
from storefront_cart.services.product_client import ProductClient
from storefront_cart.utils.settings import SERVER_CART_TTL_SECONDS
from storefront_cart.utils.logging import get_logger

logger = get_logger(__name__)


def _aware(value: datetime | None) -> datetime | None:
    # sqlite oddaje naive, zapisujemy zawsze UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CartService:
    """
    Koszyk zalogowanego uzytkownika (zrodlo prawdy dla klienta).
    commands (upsert, sync, remove, clear) modyfikuja stan
    query (get) tylko odczyt

    Koszyk powstaje leniwie przy pierwszej zmianie. Ceny liczymy przy kazdym
    odczycie tym samym resolverem co klient, z faktow zapisanych przy upsert.
    """

    def __init__(self, db: Session, product_client: ProductClient, ttl_seconds: int = SERVER_CART_TTL_SECONDS):
        self.repo = CartRepo(db)
        self.product_client = product_client
        self.ttl_seconds = ttl_seconds

    #query - odczyt
    def get_cart(self, user_id: int, now: datetime | None = None) -> CartSnapshot:
        now = now or datetime.now(timezone.utc)
        cart = self.repo.get_active_cart_by_user(user_id)

        if not cart or self._is_expired(cart, now):
            return CartSnapshot()

        return self._snapshot(cart, now)

    #commands
    def upsert_item(self, user_id: int, product_id: int, quantity: int, variant_options=None) -> CartSnapshot:
        if quantity < 1:
            return self.remove_item(user_id, product_id, variant_options or [])

        variants = normalize_variants(variant_options)
        product = self._fetch_product(product_id)
        cart = self._get_or_create_cart(user_id)

        try:
            items = self.repo.get_cart_items(cart.id)
            index = find_line(items, product_id, variants)

            if index is not None:
                item = items[index]
                logger.info(
                    f"Produkt {product_id} juz jest w koszyku {cart.id}, ilosc "
                    f"{item.quantity} -> {quantity}"
                )
                item.quantity = quantity
                self._apply_product(item, product)
            else:
                logger.info(f"Dodaje nowy produkt {product_id} do koszyka {cart.id}")
                item = CartItemModel(
                    cart_id=cart.id,
                    product_id=product_id,
                    variant_options=[v.model_dump() for v in variants],
                    quantity=quantity,
                )
                self._apply_product(item, product)
                self.repo.add_cart_item(item)

            self._touch(cart)
            self.repo.commit()
        except Exception as e:
            logger.error(f"Blad podczas zapisu pozycji: {e}")
            self.repo.rollback()
            raise

        return self.get_cart(user_id)

    def sync_items(self, user_id: int, items: List[ItemIn]) -> CartSnapshot:
        """Hurtowy upsert; przy konflikcie zostaje wieksza ilosc."""
        cart = self._get_or_create_cart(user_id)
        products: dict[int, Product] = {}

        try:
            existing = self.repo.get_cart_items(cart.id)
            for incoming in items:
                if incoming.quantity < 1:
                    continue

                index = find_line(existing, incoming.product_id, incoming.variant_options)
                if index is not None:
                    existing[index].quantity = max(existing[index].quantity, incoming.quantity)
                    continue

                if incoming.product_id not in products:
                    products[incoming.product_id] = self._fetch_product(incoming.product_id)

                item = CartItemModel(
                    cart_id=cart.id,
                    product_id=incoming.product_id,
                    variant_options=[v.model_dump() for v in incoming.variant_options],
                    quantity=incoming.quantity,
                )
                self._apply_product(item, products[incoming.product_id])
                self.repo.add_cart_item(item)
                existing.append(item)

            self._touch(cart)
            self.repo.commit()
        except Exception as e:
            logger.error(f"Blad podczas synchronizacji koszyka {cart.id}: {e}")
            self.repo.rollback()
            raise

        logger.info(f"Zsynchronizowano {len(items)} pozycji do koszyka {cart.id}")
        return self.get_cart(user_id)

    def remove_item(self, user_id: int, product_id: int, variant_options=None) -> CartSnapshot:
        cart = self.repo.get_active_cart_by_user(user_id)

        if not cart:
            return CartSnapshot()

        cart_id = cart.id
        logger.info(f"Usuwanie produktu {product_id} z koszyka {cart_id}")

        try:
            for item in self.repo.get_cart_items(cart.id):
                # bez wariantow = wszystkie pozycje produktu
                if variant_options is None:
                    matches = item.product_id == product_id
                else:
                    matches = same_line(item, product_id, variant_options)
                if matches:
                    self.repo.delete_cart_item(item)

            self._touch(cart)
            self.repo.commit()
        except Exception as e:
            logger.error(f"Blad podczas usuwania produktu {product_id} z koszyka {cart_id}: {e}")
            self.repo.rollback()
            raise

        return self.get_cart(user_id)

    def clear_cart(self, user_id: int) -> CartSnapshot:
        cart = self.repo.get_active_cart_by_user(user_id)

        if cart:
            self.repo.delete_cart_items(cart.id)
            self.repo.commit()
            logger.info(f"Koszyk {cart.id} wyczyszczony")

        return CartSnapshot()

    def _fetch_product(self, product_id: int) -> Product:
        logger.info(f"Pobieranie danych produktu {product_id} z product-service")
        product = self.product_client.fetch_product(product_id)
        if product is None:
            raise ValueError(f"Produkt {product_id} nie istnieje")
        return product

    def _get_or_create_cart(self, user_id: int) -> CartModel:
        now = datetime.now(timezone.utc)
        cart = self.repo.get_active_cart_by_user(user_id)

        if cart and self._is_expired(cart, now):
            # zadanie expire jeszcze nie przeszlo, koszyk traktujemy jak pusty
            logger.info(f"Koszyk {cart.id} wygasl, czyszcze przed uzyciem")
            self.repo.delete_cart_items(cart.id)
            self._touch(cart)
            return cart

        if cart:
            return cart

        created = self.repo.create_cart(CartModel(user_id=user_id, status="ACTIVE", expires_at=self._expiry(now)))
        logger.info(f"Utworzono nowy koszyk {created.id} dla uzytkownika {user_id}")
        return created

    def _expiry(self, now: datetime) -> datetime | None:
        if not self.ttl_seconds:
            return None
        return now + timedelta(seconds=self.ttl_seconds)

    def _touch(self, cart: CartModel) -> None:
        # kazda zmiana przedluza waznosc koszyka
        cart.expires_at = self._expiry(datetime.now(timezone.utc))

    @staticmethod
    def _is_expired(cart: CartModel, now: datetime) -> bool:
        expires_at = _aware(cart.expires_at)
        return expires_at is not None and expires_at <= now

    @staticmethod
    def _apply_product(item: CartItemModel, product: Product) -> None:
        item.name = product.name
        item.base_price = product.price
        item.product_discount = product.discount
        item.compare_at_price = product.compare_at_price
        item.image = product.image
        item.is_flash_deal = product.is_flash_deal
        item.flash_deal_end_time = product.flash_deal_end_time
        item.is_special_offer = product.is_special_offer
        item.special_offer_end_time = product.special_offer_end_time
        item.campaign_label = product.campaign_label

    @staticmethod
    def _to_line(item: CartItemModel, now: datetime) -> CartLine:
        campaign = CampaignInfo(
            is_flash_deal=item.is_flash_deal,
            flash_deal_end_time=item.flash_deal_end_time,
            is_special_offer=item.is_special_offer,
            special_offer_end_time=item.special_offer_end_time,
            campaign_label=item.campaign_label,
        )
        pricing = resolve_pricing(
            price=item.base_price,
            discount=item.product_discount,
            compare_at_price=item.compare_at_price,
            campaign=campaign,
            now=now,
        )
        return CartLine(
            product_id=item.product_id,
            name=item.name,
            price=pricing.final_price,
            original_price=pricing.original_price,
            discount=pricing.discount,
            quantity=item.quantity,
            variant_options=normalize_variants(item.variant_options),
            base_price=item.base_price,
            product_discount=item.product_discount,
            compare_at_price=item.compare_at_price,
            campaign=campaign,
            image=item.image,
        )

    def _snapshot(self, cart: CartModel, now: datetime) -> CartSnapshot:
        lines = [self._to_line(item, now) for item in self.repo.get_cart_items(cart.id)]
        return CartSnapshot(items=lines, total_price=cart_total(lines))
