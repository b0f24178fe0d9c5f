"""Tests for tr_pricing.domain.engine — the pure price-suggestion computation."""

import random
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from src.tr_common.enums import OfferStatus
from src.tr_pricing.domain.engine import (
    PriceSuggestionEngine,
    base_price,
    compute_suggestion,
    matches_sections,
    percentile_index,
    select_working_set,
)
from src.tr_pricing.domain.models import EventAggregateStats, OfferRecord, PriceRange


def _offer(price, status=OfferStatus.ACTIVE, sections=()) -> OfferRecord:
    return OfferRecord(
        max_price=Decimal(str(price)),
        status=status,
        section_ids=frozenset(sections),
        created_at=datetime(2026, 3, 1, tzinfo=UTC),
    )


def _offers(*prices) -> list[OfferRecord]:
    return [_offer(p) for p in prices]


NO_STATS = EventAggregateStats()


class TestPercentileIndex:
    def test_single_element_always_zero(self) -> None:
        for q in ("0", "0.25", "0.5", "0.75", "0.9", "1"):
            assert percentile_index(1, Decimal(q)) == 0

    def test_nearest_rank_floor(self) -> None:
        assert percentile_index(10, Decimal("0.25")) == 2
        assert percentile_index(10, Decimal("0.75")) == 7
        assert percentile_index(10, Decimal("0.9")) == 9
        assert percentile_index(7, Decimal("0.75")) == 5  # floor(5.25)

    def test_clamped_to_bounds(self) -> None:
        assert percentile_index(10, Decimal("1")) == 9
        assert percentile_index(10, Decimal("-0.5")) == 0


class TestWorkingSet:
    def test_sorted_ascending(self) -> None:
        prices = select_working_set(_offers(90, 10, 50))
        assert prices == [Decimal(10), Decimal(50), Decimal(90)]

    def test_excludes_non_active(self) -> None:
        offers = [
            _offer(10),
            _offer(20, OfferStatus.EXPIRED),
            _offer(30, OfferStatus.CANCELLED),
            _offer(40, OfferStatus.ACCEPTED),
        ]
        assert select_working_set(offers) == [Decimal(10)]

    def test_offer_without_sections_matches_any_filter(self) -> None:
        assert matches_sections(_offer(10), {"SEC-A"}) is True

    def test_empty_filter_matches_everything(self) -> None:
        assert matches_sections(_offer(10, sections=["SEC-B"]), set()) is True
        assert matches_sections(_offer(10, sections=["SEC-B"]), None) is True

    def test_disjoint_sections_do_not_match(self) -> None:
        assert matches_sections(_offer(10, sections=["SEC-B"]), {"SEC-A"}) is False

    def test_any_overlap_matches(self) -> None:
        assert matches_sections(_offer(10, sections=["SEC-A", "SEC-B"]), {"SEC-B", "SEC-C"})


class TestBasePrice:
    def test_prefers_listing_average(self) -> None:
        stats = EventAggregateStats(average_listing_price=Decimal(200), average_offer_price=Decimal(80))
        assert base_price(stats) == Decimal(200)

    def test_falls_back_to_offer_average(self) -> None:
        stats = EventAggregateStats(average_listing_price=Decimal(0), average_offer_price=Decimal(80))
        assert base_price(stats) == Decimal(80)

    def test_negative_listing_average_ignored(self) -> None:
        stats = EventAggregateStats(average_listing_price=Decimal(-5), average_offer_price=Decimal(80))
        assert base_price(stats) == Decimal(80)

    def test_default_when_nothing_positive(self) -> None:
        assert base_price(NO_STATS) == Decimal(100)


class TestFallback:
    def test_listing_average_200(self) -> None:
        stats = EventAggregateStats(
            total_offers=0,
            average_listing_price=Decimal(200),
            average_offer_price=Decimal(0),
        )
        s = compute_suggestion([], stats)
        assert s.suggested_price == 170
        assert s.average_price == 200
        assert s.median_price == 200
        assert s.min_price == 100
        assert s.max_price == 300
        assert s.price_range == PriceRange(low=120, high=240)
        assert s.recent_offers_considered == 0
        assert s.total_offers == 0

    def test_defaults_with_zeroed_stats(self) -> None:
        s = compute_suggestion([], NO_STATS)
        assert (s.suggested_price, s.average_price, s.median_price) == (85, 100, 100)
        assert (s.min_price, s.max_price) == (50, 150)
        assert s.price_range == PriceRange(low=60, high=120)

    def test_offer_average_base(self) -> None:
        stats = EventAggregateStats(total_offers=12, average_offer_price=Decimal(80))
        s = compute_suggestion([], stats)
        assert s.suggested_price == 68
        assert s.average_price == 80
        assert (s.min_price, s.max_price) == (40, 120)
        assert s.price_range == PriceRange(low=48, high=96)
        assert s.total_offers == 12

    def test_fractional_base_rounds_half_up(self) -> None:
        # 150.5 * 0.85 = 127.925 → 128; 150.5 → 151; 150.5 * 0.5 = 75.25 → 75
        stats = EventAggregateStats(average_listing_price=Decimal("150.5"))
        s = compute_suggestion([], stats)
        assert s.suggested_price == 128
        assert s.average_price == 151
        assert s.min_price == 75

    def test_no_section_match_uses_fallback(self) -> None:
        offers = [_offer(p, sections=["SEC-A"]) for p in (50, 60, 70)]
        stats = EventAggregateStats(total_offers=3, average_listing_price=Decimal(200))
        s = compute_suggestion(offers, stats, {"SEC-Z"})
        assert s.recent_offers_considered == 0
        assert s.suggested_price == 170
        assert s.total_offers == 3

    def test_only_inactive_offers_uses_fallback(self) -> None:
        offers = [_offer(500, OfferStatus.EXPIRED), _offer(600, OfferStatus.CANCELLED)]
        s = compute_suggestion(offers, NO_STATS)
        assert s.recent_offers_considered == 0
        assert s.suggested_price == 85


class TestDataDriven:
    def test_ten_offers(self) -> None:
        prices = [50, 60, 70, 80, 90, 100, 110, 120, 130, 140]
        shuffled = prices[:]
        random.Random(7).shuffle(shuffled)
        s = compute_suggestion(_offers(*shuffled), EventAggregateStats(total_offers=250))

        assert s.min_price == 50
        assert s.max_price == 140
        assert s.median_price == 100
        assert s.average_price == 95
        assert s.suggested_price == 120
        assert s.price_range == PriceRange(low=70, high=140)
        assert s.recent_offers_considered == 10
        assert s.total_offers == 250

    def test_single_offer(self) -> None:
        s = compute_suggestion(_offers(75), NO_STATS)
        assert s.min_price == s.max_price == s.median_price == 75
        assert s.average_price == s.suggested_price == 75
        assert s.price_range == PriceRange(low=75, high=75)
        assert s.recent_offers_considered == 1

    def test_even_count_median_is_upper_middle(self) -> None:
        s = compute_suggestion(_offers(10, 20, 30, 40), NO_STATS)
        assert s.median_price == 30
        assert s.average_price == 25
        assert s.suggested_price == 40
        assert s.price_range == PriceRange(low=20, high=40)

    def test_mixed_statuses_count_only_active(self) -> None:
        offers = [
            _offer(100),
            _offer(120),
            _offer(999, OfferStatus.EXPIRED),
            _offer(1, OfferStatus.CANCELLED),
            _offer(140),
            _offer(500, OfferStatus.ACCEPTED),
        ]
        s = compute_suggestion(offers, EventAggregateStats(total_offers=6))
        assert s.recent_offers_considered == 3
        assert s.min_price == 100
        assert s.max_price == 140
        assert s.total_offers == 6

    def test_section_filter_keeps_unsectioned_offers(self) -> None:
        offers = [
            _offer(100, sections=["SEC-A"]),
            _offer(50),
            _offer(200, sections=["SEC-B"]),
        ]
        s = compute_suggestion(offers, NO_STATS, {"SEC-A"})
        assert s.recent_offers_considered == 2
        assert s.min_price == 50
        assert s.median_price == 100

    def test_round_half_up_not_bankers(self) -> None:
        s = compute_suggestion(_offers("2.5"), NO_STATS)
        assert s.suggested_price == 3
        assert s.min_price == 3

    def test_average_rounds_half_up(self) -> None:
        s = compute_suggestion(_offers(1, 2), NO_STATS)
        assert s.average_price == 2
        assert s.median_price == 2
        assert s.price_range == PriceRange(low=1, high=2)

    def test_float_prices_do_not_leak_binary_error(self) -> None:
        offers = [
            OfferRecord(max_price=19.99, status=OfferStatus.ACTIVE),  # type: ignore[arg-type]
            OfferRecord(max_price=20.01, status=OfferStatus.ACTIVE),  # type: ignore[arg-type]
        ]
        s = compute_suggestion(offers, NO_STATS)
        assert s.average_price == 20
        assert s.min_price == 20
        assert s.max_price == 20

    def test_identical_prices(self) -> None:
        s = compute_suggestion(_offers(*[80] * 7), NO_STATS)
        assert s.price_range.low == s.suggested_price == s.price_range.high == 80
        assert s.min_price == s.median_price == s.max_price == 80

    def test_inputs_not_mutated(self) -> None:
        offers = _offers(30, 10, 20)
        before = list(offers)
        compute_suggestion(offers, NO_STATS)
        assert offers == before

    def test_accepts_generator(self) -> None:
        s = compute_suggestion((o for o in _offers(10, 20, 30)), NO_STATS)
        assert s.recent_offers_considered == 3

    def test_deterministic(self) -> None:
        offers = _offers(55, 12, 99, 40, 40)
        assert compute_suggestion(offers, NO_STATS) == compute_suggestion(offers, NO_STATS)

    def test_engine_class_delegates(self) -> None:
        offers = _offers(10, 20, 30)
        assert PriceSuggestionEngine().compute(offers, NO_STATS, None) == compute_suggestion(
            offers, NO_STATS
        )

    def test_negative_lifetime_total_clamped(self) -> None:
        s = compute_suggestion(_offers(10), EventAggregateStats(total_offers=-3))
        assert s.total_offers == 0


class TestProperties:
    @pytest.mark.parametrize("seed", range(25))
    def test_bounds_and_band_ordering(self, seed: int) -> None:
        rng = random.Random(seed)
        n = rng.randint(1, 60)
        prices = [Decimal(rng.randint(100, 50000)) / 100 for _ in range(n)]
        s = compute_suggestion(_offers(*prices), NO_STATS)

        assert s.recent_offers_considered == n
        assert s.min_price <= s.median_price <= s.max_price
        assert s.min_price <= s.average_price <= s.max_price
        assert s.price_range.low <= s.suggested_price <= s.price_range.high

    @pytest.mark.parametrize("k", [2, 3, Decimal("2.5"), Decimal("0.5")])
    def test_scaling_prices_scales_outputs(self, k) -> None:
        prices = [Decimal(p) for p in ("10.4", "20.6", "33.3", "47.9", "61.2")]
        base = compute_suggestion(_offers(*prices), NO_STATS)
        scaled = compute_suggestion(_offers(*[p * k for p in prices]), NO_STATS)

        tolerance = Decimal("0.5") * k + Decimal("0.5")
        for field in ("suggested_price", "average_price", "median_price", "min_price", "max_price"):
            assert abs(getattr(scaled, field) - k * getattr(base, field)) <= tolerance
        assert abs(scaled.price_range.low - k * base.price_range.low) <= tolerance
        assert abs(scaled.price_range.high - k * base.price_range.high) <= tolerance

    def test_very_large_prices_on_data_path(self) -> None:
        offers = [
            OfferRecord(max_price=1e30, status=OfferStatus.ACTIVE),  # type: ignore[arg-type]
            OfferRecord(max_price=Decimal("2.5E+35"), status=OfferStatus.ACTIVE),
        ]
        s = compute_suggestion(offers, NO_STATS)
        assert s.min_price == 10**30
        assert s.max_price == 25 * 10**34
        assert s.price_range.low <= s.suggested_price <= s.price_range.high
        assert s.min_price <= s.average_price <= s.max_price

    def test_average_of_long_prices_stays_in_bounds(self) -> None:
        long_price = Decimal("123456789012345678901234567890.5")
        s = compute_suggestion([_offer(long_price), _offer(long_price)], NO_STATS)
        assert s.average_price == s.min_price == s.max_price

    def test_very_large_listing_average_on_fallback_path(self) -> None:
        s = compute_suggestion([], EventAggregateStats(average_listing_price=Decimal("1e40")))
        assert s.suggested_price == 85 * 10**38
        assert s.average_price == 10**40
        assert s.max_price == 15 * 10**39
        assert s.price_range == PriceRange(low=6 * 10**39, high=12 * 10**39)

    def test_totality_on_empty_inputs(self) -> None:
        s = compute_suggestion([], EventAggregateStats(total_offers=None))
        for value in (
            s.suggested_price, s.average_price, s.median_price, s.min_price,
            s.max_price, s.total_offers, s.recent_offers_considered,
            s.price_range.low, s.price_range.high,
        ):
            assert isinstance(value, int)
