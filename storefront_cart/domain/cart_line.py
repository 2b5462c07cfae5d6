# storefront_cart/domain/cart_line.py
"""
Tozsamosc pozycji koszyka: (product_id, zbior par wariantow).

Jedyne miejsce, w ktorym porownujemy pozycje. Uzywaja go: scalanie przy
dodawaniu, szukanie przy zmianie ilosci i usuwaniu, zarowno w koszyku goscia,
w optymistycznej zmianie koszyka zalogowanego, jak i w serwisie serwera.
"""
from collections import Counter
from datetime import datetime
from typing import Iterable, List

from storefront_cart.domain.pricing import resolve_line_pricing, resolve_product_pricing
from storefront_cart.domain.schemas import CartLine, Product, VariantOption


def _pair(option) -> tuple[str, str]:
    if isinstance(option, dict):
        return str(option.get("name", "")), str(option.get("value", ""))
    return option.name, option.value


def variant_key(options: Iterable | None) -> Counter:
    return Counter(_pair(option) for option in (options or ()))


def same_variants(a: Iterable | None, b: Iterable | None) -> bool:
    """Te same pary (name, value), niezaleznie od kolejnosci."""
    return variant_key(a) == variant_key(b)


def same_line(line, product_id: int, variant_options: Iterable | None) -> bool:
    # dziala dla CartLine i dla CartItemModel
    return line.product_id == product_id and same_variants(line.variant_options, variant_options)


def find_line(lines: List, product_id: int, variant_options: Iterable | None) -> int | None:
    for index, line in enumerate(lines):
        if same_line(line, product_id, variant_options):
            return index
    return None


def normalize_variants(options: Iterable | None) -> List[VariantOption]:
    return [VariantOption(name=name, value=value) for name, value in map(_pair, options or ())]


def build_line(
    product: Product,
    quantity: int,
    variant_options: Iterable | None = None,
    now: datetime | None = None,
) -> CartLine:
    pricing = resolve_product_pricing(product, now)
    return CartLine(
        product_id=product.id,
        name=product.name,
        price=pricing.final_price,
        original_price=pricing.original_price,
        discount=pricing.discount,
        quantity=quantity,
        variant_options=normalize_variants(variant_options),
        base_price=product.price,
        product_discount=product.discount,
        compare_at_price=product.compare_at_price,
        campaign=product.campaign,
        image=product.image,
    )


def reprice_line(line: CartLine, now: datetime | None = None) -> CartLine:
    pricing = resolve_line_pricing(line, now)
    return line.model_copy(
        update={
            "price": pricing.final_price,
            "original_price": pricing.original_price,
            "discount": pricing.discount,
        }
    )


def merge_line(lines: List[CartLine], new_line: CartLine) -> List[CartLine]:
    """Dodaje pozycje; ta sama tozsamosc = suma ilosci, nigdy duplikat."""
    result = list(lines)
    index = find_line(result, new_line.product_id, new_line.variant_options)
    if index is None:
        result.append(new_line)
        return result

    existing = result[index]
    result[index] = new_line.model_copy(
        update={
            "quantity": existing.quantity + new_line.quantity,
            "variant_options": existing.variant_options,
        }
    )
    return result


def set_line_quantity(
    lines: List[CartLine],
    product_id: int,
    quantity: int,
    variant_options: Iterable | None = None,
) -> List[CartLine]:
    if quantity < 1:
        return drop_line(lines, product_id, variant_options)

    result = list(lines)
    index = find_line(result, product_id, variant_options)
    if index is not None:
        result[index] = result[index].model_copy(update={"quantity": quantity})
    return result


def drop_line(
    lines: List[CartLine],
    product_id: int,
    variant_options: Iterable | None = None,
) -> List[CartLine]:
    return [line for line in lines if not same_line(line, product_id, variant_options)]


def cart_total(lines: Iterable[CartLine]) -> int:
    return sum(line.price * line.quantity for line in lines)
