# storefront_cart/domain/pricing.py
"""
Rozwiazywanie ceny produktu i pozycji koszyka.

Jedna funkcja liczy cene dla strony produktu, koszyka goscia, optymistycznej
zmiany koszyka zalogowanego i dla serwera, wiec rabat w koszyku nigdy nie
rozjezdza sie z rabatem na karcie produktu.

Kolejnosc (stala, dane potrafia miec obie flagi naraz):
    special offer > flash deal > zwykly rabat > sama cena "compare at"

Funkcja jest totalna: zle daty traktujemy jako nieaktywna kampanie, zle
liczby jako 0. Kwoty zaokraglamy half-up do pelnych jednostek waluty.
"""
import math
import re
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from storefront_cart.domain.schemas import CampaignInfo, CartLine, PricingResult, Product

# etykiety kampanii "flash deal" (admin wpisuje je recznie, w roznych zapisach)
FLASH_LABELS = (
    "پیشنهاد لحظه‌ای",
    "پیشنهاد لحظه ای",
    "Flash Deal",
    "Flash Offer",
)

_LABEL_NOISE = re.compile(r"[\s\u200c]+")


def _normalize_label(label: str) -> str:
    return (
        _LABEL_NOISE.sub("", label)
        .replace("ي", "ی")
        .replace("ك", "ک")
        .lower()
    )


_FLASH_TARGETS = frozenset(_normalize_label(label) for label in FLASH_LABELS)


def is_flash_deal_label(label: str | None) -> bool:
    if not label:
        return False
    normalized = _normalize_label(label)
    if normalized in _FLASH_TARGETS:
        return True
    return "flashdeal" in normalized or "flashoffer" in normalized


def parse_timestamp(value) -> datetime | None:
    """ISO-8601 albo datetime -> aware datetime (UTC dla naive); inaczej None."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def is_window_active(flag: bool, end_time, now: datetime | None = None) -> bool:
    # koniec == now to juz koniec kampanii
    if not flag:
        return False
    end = parse_timestamp(end_time)
    return end is not None and end > _now(now)


def is_flash_deal_active(campaign: CampaignInfo | None, now: datetime | None = None) -> bool:
    if campaign is None:
        return False
    return is_window_active(campaign.is_flash_deal, campaign.flash_deal_end_time, now)


def has_expired_flash_label(campaign: CampaignInfo | None, now: datetime | None = None) -> bool:
    if campaign is None:
        return False
    return is_flash_deal_label(campaign.campaign_label) and not is_flash_deal_active(campaign, now)


def _decimal(value) -> Decimal:
    if value is None or isinstance(value, bool):
        return Decimal(0)
    if isinstance(value, float) and not math.isfinite(value):
        return Decimal(0)
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal(0)
    if not amount.is_finite() or amount < 0:
        return Decimal(0)
    return amount


def _round(amount: Decimal) -> int:
    return int(amount.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _apply_discount(base: int, discount: int) -> int:
    return _round(Decimal(base) * (100 - discount) / 100)


def _markdown_discount(base: int, compare_at: int) -> int:
    return _round(Decimal(compare_at - base) * 100 / Decimal(compare_at))


def resolve_pricing(
    price,
    discount=0,
    compare_at_price=None,
    campaign: CampaignInfo | None = None,
    now: datetime | None = None,
) -> PricingResult:
    now = _now(now)
    campaign = campaign or CampaignInfo()

    base = _round(_decimal(price))
    pct = min(_round(_decimal(discount)), 100)
    compare_at = _round(_decimal(compare_at_price)) or None
    # compare-at liczy sie tylko powyzej ceny bazowej (rabat nigdy ujemny)
    has_markdown = compare_at is not None and compare_at > base

    special_active = is_window_active(
        campaign.is_special_offer, campaign.special_offer_end_time, now
    )
    flash_active = not special_active and is_window_active(
        campaign.is_flash_deal, campaign.flash_deal_end_time, now
    )

    if pct > 0:
        final, original = _apply_discount(base, pct), base
    elif has_markdown:
        final, original = base, compare_at
        pct = _markdown_discount(base, compare_at)
    else:
        final, original = base, None

    if original == final:
        original = None

    label = campaign.campaign_label
    if has_expired_flash_label(campaign, now):
        label = None

    return PricingResult(
        final_price=final,
        original_price=original,
        discount=pct,
        flash_active=flash_active,
        special_active=special_active,
        flash_deal_end_time=campaign.flash_deal_end_time if flash_active else None,
        special_offer_end_time=campaign.special_offer_end_time if special_active else None,
        campaign_label=label,
        has_active_promotion=flash_active or special_active or bool(label),
    )


def resolve_product_pricing(product: Product, now: datetime | None = None) -> PricingResult:
    return resolve_pricing(
        price=product.price,
        discount=product.discount,
        compare_at_price=product.compare_at_price,
        campaign=product.campaign,
        now=now,
    )


def resolve_line_pricing(line: CartLine, now: datetime | None = None) -> PricingResult:
    return resolve_pricing(
        price=line.base_price,
        discount=line.product_discount,
        compare_at_price=line.compare_at_price,
        campaign=line.campaign,
        now=now,
    )
