"""Tests for promotional pricing resolution."""

from datetime import timedelta

from storefront_cart.domain.pricing import (
    has_expired_flash_label,
    is_flash_deal_label,
    parse_timestamp,
    resolve_pricing,
    resolve_product_pricing,
)
from storefront_cart.domain.schemas import CampaignInfo, Product

from conftest import iso


def test_plain_discount_end_to_end(now):
    result = resolve_pricing(price=100_000, discount=20, now=now)

    assert result.final_price == 80_000
    assert result.original_price == 100_000
    assert result.discount == 20
    assert result.flash_active is False
    assert result.special_active is False


def test_active_flash_deal_sets_flag_and_reprices(now):
    campaign = CampaignInfo(is_flash_deal=True, flash_deal_end_time=iso(now + timedelta(hours=1)))

    result = resolve_pricing(price=100_000, discount=20, campaign=campaign, now=now)

    assert result.final_price == 80_000
    assert result.flash_active is True
    assert result.special_active is False
    assert result.flash_deal_end_time == campaign.flash_deal_end_time
    assert result.has_active_promotion is True


def test_special_offer_wins_when_both_flags_active(now):
    campaign = CampaignInfo(
        is_flash_deal=True,
        flash_deal_end_time=iso(now + timedelta(hours=1)),
        is_special_offer=True,
        special_offer_end_time=iso(now + timedelta(days=2)),
    )

    result = resolve_pricing(price=100_000, discount=10, campaign=campaign, now=now)

    assert result.special_active is True
    assert result.flash_active is False
    assert result.flash_deal_end_time is None
    assert result.special_offer_end_time == campaign.special_offer_end_time


def test_flash_still_active_when_special_expired(now):
    campaign = CampaignInfo(
        is_flash_deal=True,
        flash_deal_end_time=iso(now + timedelta(hours=1)),
        is_special_offer=True,
        special_offer_end_time=iso(now - timedelta(hours=1)),
    )

    result = resolve_pricing(price=100_000, discount=10, campaign=campaign, now=now)

    assert result.flash_active is True
    assert result.special_active is False
    assert result.special_offer_end_time is None


def test_end_time_equal_to_now_is_inactive(now):
    campaign = CampaignInfo(is_flash_deal=True, flash_deal_end_time=iso(now))

    result = resolve_pricing(price=100_000, discount=20, campaign=campaign, now=now)

    assert result.flash_active is False
    assert result.flash_deal_end_time is None


def test_invalid_or_missing_end_time_is_inactive(now):
    for end_time in ("not-a-date", "", None):
        campaign = CampaignInfo(is_special_offer=True, special_offer_end_time=end_time)
        result = resolve_pricing(price=100_000, campaign=campaign, now=now)
        assert result.special_active is False


def test_resolution_is_idempotent(now):
    campaign = CampaignInfo(is_flash_deal=True, flash_deal_end_time=iso(now + timedelta(minutes=5)))

    first = resolve_pricing(price=123_457, discount=33, compare_at_price=150_000, campaign=campaign, now=now)
    second = resolve_pricing(price=123_457, discount=33, compare_at_price=150_000, campaign=campaign, now=now)

    assert first == second
    assert first.model_dump() == second.model_dump()


def test_compare_at_price_only(now):
    result = resolve_pricing(price=90_000, compare_at_price=120_000, now=now)

    assert result.final_price == 90_000
    assert result.original_price == 120_000
    assert result.discount == 25


def test_compare_at_price_equal_to_base_is_ignored(now):
    result = resolve_pricing(price=90_000, compare_at_price=90_000, now=now)

    assert result.final_price == 90_000
    assert result.original_price is None
    assert result.discount == 0


def test_compare_at_price_below_base_is_ignored(now):
    result = resolve_pricing(price=90_000, compare_at_price=60_000, now=now)

    assert result.final_price == 90_000
    assert result.original_price is None
    assert result.discount == 0
    assert result.has_active_promotion is False


def test_no_discount_no_original_price(now):
    result = resolve_pricing(price=90_000, now=now)

    assert result.final_price == 90_000
    assert result.original_price is None
    assert result.has_active_promotion is False


def test_rounds_half_up_to_whole_units(now):
    # 333 * 0.85 = 283.05 ; 999 * 0.5 = 499.5
    assert resolve_pricing(price=333, discount=15, now=now).final_price == 283
    assert resolve_pricing(price=999, discount=50, now=now).final_price == 500


def test_garbage_numbers_are_coerced(now):
    result = resolve_pricing(price=float("nan"), discount=-5, compare_at_price="abc", now=now)

    assert result.final_price == 0
    assert result.discount == 0
    assert result.original_price is None


def test_discount_is_clamped_to_100(now):
    result = resolve_pricing(price=1_000, discount=250, now=now)

    assert result.final_price == 0
    assert result.discount == 100
    assert result.original_price == 1_000


def test_product_helper_uses_product_facts(now):
    product = Product(
        id=7,
        name="Lamp",
        price=200_000,
        discount=10,
        is_special_offer=True,
        special_offer_end_time=iso(now + timedelta(days=1)),
    )

    result = resolve_product_pricing(product, now=now)

    assert result.final_price == 180_000
    assert result.special_active is True


def test_flash_deal_label_normalization():
    assert is_flash_deal_label("Flash Deal")
    assert is_flash_deal_label("  flash   offer ")
    assert is_flash_deal_label("پیشنهاد لحظه اي")
    assert not is_flash_deal_label("Summer Sale")
    assert not is_flash_deal_label(None)


def test_expired_flash_label_is_not_displayed(now):
    campaign = CampaignInfo(
        is_flash_deal=True,
        flash_deal_end_time=iso(now - timedelta(minutes=1)),
        campaign_label="Flash Deal",
    )

    assert has_expired_flash_label(campaign, now)
    result = resolve_pricing(price=10_000, campaign=campaign, now=now)
    assert result.campaign_label is None
    assert result.has_active_promotion is False


def test_parse_timestamp_accepts_zulu_and_naive():
    assert parse_timestamp("2026-03-01T12:00:00Z").tzinfo is not None
    assert parse_timestamp("2026-03-01T12:00:00").utcoffset() == timedelta(0)
    assert parse_timestamp(12345) is None
