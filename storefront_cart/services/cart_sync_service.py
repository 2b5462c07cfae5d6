# storefront_cart/services/cart_sync_service.py
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List

from storefront_cart.domain.cart_line import (
    build_line,
    cart_total,
    drop_line,
    find_line,
    merge_line,
    normalize_variants,
    reprice_line,
    set_line_quantity,
)
from storefront_cart.domain.errors import CartPersistenceError, CartSyncError
from storefront_cart.domain.schemas import CartConfig, CartLine, CartSnapshot, MutationResult, Product
from storefront_cart.services.cart_api_client import CartApiClient
from storefront_cart.services.cart_config_provider import CartConfigProvider
from storefront_cart.services.local_cart_store import LocalCartStore
from storefront_cart.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CartState:
    lines: List[CartLine] = field(default_factory=list)
    is_mutating: bool = False
    initialized: bool = False
    cart_config: CartConfig | None = None
    error: str | None = None


class CartSyncEngine:
    """
    Koszyk po stronie klienta, w dwoch trybach:

    -gosc: stan w pamieci + LocalCartStore (bez rollbacku, blad zapisu tylko raportujemy)
    -zalogowany: optymistyczna zmiana, potem serwer jest zrodlem prawdy;
     blad serwera = przywrocenie snapshotu i CartSyncError dalej

    Naraz moze trwac jedna mutacja. Druga w tym czasie to no-op (status "skipped"),
    bez kolejki - podwojne klikniecia ma odfiltrowac UI.
    Tryb sprawdzamy przy kazdym wywolaniu (current_user() -> id albo None).
    """

    def __init__(
        self,
        local_store: LocalCartStore,
        server_store: CartApiClient,
        config_provider: CartConfigProvider,
        current_user: Callable[[], int | None],
    ):
        self.local_store = local_store
        self.server_store = server_store
        self.config_provider = config_provider
        self.current_user = current_user
        self.state = CartState()
        self._gate = threading.Lock()

    @property
    def lines(self) -> List[CartLine]:
        return list(self.state.lines)

    #commands
    def add(self, product: Product, quantity: int = 1, variant_options=None) -> MutationResult:
        if quantity < 1:
            raise ValueError("Ilosc musi byc wieksza niz 0")

        variants = normalize_variants(variant_options)

        def optimistic(lines):
            return merge_line(lines, build_line(product, quantity, variants))

        def remote(user_id, lines):
            merged = lines[find_line(lines, product.id, variants)]
            return self.server_store.upsert_item(user_id, product.id, merged.quantity, variants)

        return self._mutate(f"add {product.id}", optimistic, remote)

    def update_quantity(self, product_id: int, quantity: int, variant_options=None) -> MutationResult:
        if quantity < 1:
            return self.remove(product_id, variant_options)

        variants = normalize_variants(variant_options)

        def optimistic(lines):
            return set_line_quantity(lines, product_id, quantity, variants)

        def remote(user_id, lines):
            return self.server_store.upsert_item(user_id, product_id, quantity, variants)

        def missing(lines):
            return find_line(lines, product_id, variants) is None

        return self._mutate(f"update {product_id}", optimistic, remote, skip_if=missing)

    def remove(self, product_id: int, variant_options=None) -> MutationResult:
        variants = normalize_variants(variant_options)

        def optimistic(lines):
            return drop_line(lines, product_id, variants)

        def remote(user_id, lines):
            return self.server_store.remove_item(user_id, product_id, variants)

        return self._mutate(f"remove {product_id}", optimistic, remote)

    def clear(self) -> MutationResult:
        return self._mutate(
            "clear",
            lambda lines: [],
            lambda user_id, lines: self.server_store.clear(user_id),
            persist=lambda lines, config: self.local_store.clear(),
        )

    def refresh_cart(self) -> List[CartLine]:
        """Przeladowanie koszyka; polityke pobieramy zawsze od nowa."""
        config = self.config_provider.refresh()
        self.state.cart_config = config

        user_id = self.current_user()
        if user_id is None:
            lines = self.local_store.load(config)
        else:
            try:
                lines = self.server_store.get_cart(user_id).items
            except CartSyncError as e:
                self.state.error = e.message
                self.state.initialized = True
                raise

        self.state.lines = list(lines)
        self.state.error = None
        self.state.initialized = True
        logger.info(
            f"Koszyk przeladowany ({'user ' + str(user_id) if user_id else 'gosc'}), "
            f"{len(lines)} pozycji"
        )
        return self.lines

    def _config(self) -> CartConfig:
        if self.state.cart_config is None:
            self.state.cart_config = self.config_provider.get()
        return self.state.cart_config

    def _mutate(
        self,
        name: str,
        optimistic: Callable[[List[CartLine]], List[CartLine]],
        remote: Callable[[int, List[CartLine]], CartSnapshot],
        persist: Callable[[List[CartLine], CartConfig], None] | None = None,
        skip_if: Callable[[List[CartLine]], bool] | None = None,
    ) -> MutationResult:
        if not self._gate.acquire(blocking=False):
            logger.info(f"{name}: inna mutacja w toku, pomijam")
            return MutationResult(status="skipped", lines=self.lines)

        self.state.is_mutating = True
        try:
            # pod lockiem: w trakcie innej mutacji wynik to zawsze "skipped"
            if skip_if is not None and skip_if(self.state.lines):
                logger.info(f"{name}: brak pozycji w koszyku, nic do zmiany")
                return MutationResult(status="committed", lines=self.lines)

            user_id = self.current_user()
            if user_id is None:
                return self._commit_local(name, optimistic, persist)
            return self._commit_remote(name, user_id, optimistic, remote)
        finally:
            self.state.is_mutating = False
            self._gate.release()

    def _commit_local(self, name, optimistic, persist) -> MutationResult:
        config = self._config()
        self.state.lines = optimistic(self.lines)
        self.state.error = None

        try:
            if persist is None:
                self.local_store.save(self.state.lines, config)
            else:
                persist(self.state.lines, config)
        except CartPersistenceError as e:
            # koszyk dziala dalej w pamieci
            logger.warning(f"{name}: koszyk goscia niezapisany: {e}")
            self.state.error = str(e)
            return MutationResult(status="committed", lines=self.lines, persisted=False, error=str(e))

        logger.info(f"{name}: koszyk goscia zapisany, {len(self.state.lines)} pozycji")
        return MutationResult(status="committed", lines=self.lines)

    def _commit_remote(self, name, user_id, optimistic, remote) -> MutationResult:
        snapshot = self.lines
        self.state.lines = optimistic(snapshot)
        self.state.error = None

        try:
            result = remote(user_id, self.lines)
        except CartSyncError as e:
            self.state.lines = snapshot
            self.state.error = e.message
            logger.error(f"{name}: serwer odrzucil zmiane, wycofuje ({e.message})")
            raise CartSyncError(e.message, lines=list(snapshot)) from e
        except Exception:
            self.state.lines = snapshot
            logger.exception(f"{name}: nieoczekiwany blad, wycofuje")
            raise

        self.state.lines = list(result.items)
        logger.info(f"{name}: koszyk user {user_id} zsynchronizowany, {len(result.items)} pozycji")
        return MutationResult(status="committed", lines=self.lines)

    #query
    def priced_lines(self, now: datetime | None = None) -> List[CartLine]:
        """Ceny liczone na nowo, zeby wygasle odliczanie od razu wrocilo do ceny bazowej."""
        return [reprice_line(line, now) for line in self.state.lines]

    def total_price(self, now: datetime | None = None) -> int:
        return cart_total(self.priced_lines(now))

    def total_original_price(self, now: datetime | None = None) -> int:
        return sum(
            (line.original_price or line.price) * line.quantity
            for line in self.priced_lines(now)
        )

    def total_profit(self, now: datetime | None = None) -> int:
        return max(0, self.total_original_price(now) - self.total_price(now))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.state.lines)

    @property
    def is_empty(self) -> bool:
        return not self.state.lines

    def is_in_cart(self, product_id: int) -> bool:
        return any(line.product_id == product_id for line in self.state.lines)

    def get_item_quantity(self, product_id: int) -> int:
        # wszystkie warianty produktu razem
        return sum(line.quantity for line in self.state.lines if line.product_id == product_id)
