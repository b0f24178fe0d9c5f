"""Price-suggestion engine — pure function over an offer history.

Given recent buyer offers for an event and the event's aggregate stats,
derive the maximum price a new buyer should offer plus supporting
statistics. Total over its input domain: never raises, never mutates its
arguments, holds no state between calls.

Working set W = ACTIVE offers whose section_ids intersect the filter
(offers with no sections, or an empty filter, always match), sorted by
max_price ascending.

  |W| == 0  → estimates from base price (listing avg → offer avg → 100)
  |W| >  0  → nearest-rank order statistics over W:
      median    p[⌊n/2⌋]      (upper-middle element for even n)
      suggested p[⌊0.75n⌋]
      range     p[⌊0.25n⌋] .. p[⌊0.9n⌋]

All monetary outputs are rounded half-up to whole currency units.
"""

import math
from collections.abc import Iterable
from decimal import Decimal

from src.tr_common.enums import OfferStatus
from src.tr_common.money import round_half_up, to_decimal
from src.tr_pricing.domain.models import (
    EventAggregateStats,
    OfferRecord,
    PriceRange,
    PriceSuggestion,
)

DEFAULT_BASE_PRICE = Decimal(100)

# Empty-data multipliers of the base price
FALLBACK_SUGGESTED_FACTOR = Decimal("0.85")  # an offer should undercut asking price
FALLBACK_MIN_FACTOR = Decimal("0.5")
FALLBACK_MAX_FACTOR = Decimal("1.5")
FALLBACK_RANGE_LOW_FACTOR = Decimal("0.6")
FALLBACK_RANGE_HIGH_FACTOR = Decimal("1.2")

MEDIAN_PERCENTILE = Decimal("0.5")
SUGGESTED_PERCENTILE = Decimal("0.75")
RANGE_LOW_PERCENTILE = Decimal("0.25")
RANGE_HIGH_PERCENTILE = Decimal("0.9")


def matches_sections(offer: OfferRecord, section_filter: Iterable[str] | None) -> bool:
    """True when the offer is comparable under the given section filter."""
    if not section_filter or not offer.section_ids:
        return True
    return not offer.section_ids.isdisjoint(section_filter)


def select_working_set(
    offers: Iterable[OfferRecord],
    section_filter: Iterable[str] | None = None,
) -> list[Decimal]:
    """Filter to comparable ACTIVE offers and return their prices ascending."""
    wanted = frozenset(section_filter) if section_filter else frozenset()
    prices = [
        to_decimal(o.max_price)
        for o in offers
        if o.status == OfferStatus.ACTIVE and matches_sections(o, wanted)
    ]
    prices.sort()
    return prices


def percentile_index(n: int, q: Decimal) -> int:
    """Nearest-rank index ⌊n·q⌋ clamped to [0, n-1]. Requires n > 0."""
    idx = math.floor(n * q)
    return min(max(idx, 0), n - 1)


def base_price(aggregate: EventAggregateStats) -> Decimal:
    """Listing average if positive, else offer average if positive, else 100."""
    listing = to_decimal(aggregate.average_listing_price)
    if listing > 0:
        return listing
    offer = to_decimal(aggregate.average_offer_price)
    if offer > 0:
        return offer
    return DEFAULT_BASE_PRICE


def _lifetime_total(aggregate: EventAggregateStats) -> int:
    total = aggregate.total_offers or 0
    return max(int(total), 0)


def _fallback_suggestion(aggregate: EventAggregateStats) -> PriceSuggestion:
    base = base_price(aggregate)
    return PriceSuggestion(
        suggested_price=round_half_up(base * FALLBACK_SUGGESTED_FACTOR),
        average_price=round_half_up(base),
        median_price=round_half_up(base),
        min_price=round_half_up(base * FALLBACK_MIN_FACTOR),
        max_price=round_half_up(base * FALLBACK_MAX_FACTOR),
        total_offers=_lifetime_total(aggregate),
        recent_offers_considered=0,
        price_range=PriceRange(
            low=round_half_up(base * FALLBACK_RANGE_LOW_FACTOR),
            high=round_half_up(base * FALLBACK_RANGE_HIGH_FACTOR),
        ),
    )


def compute_suggestion(
    offers: Iterable[OfferRecord],
    aggregate: EventAggregateStats,
    section_filter: Iterable[str] | None = None,
) -> PriceSuggestion:
    """Derive a PriceSuggestion from an offer history. Never raises."""
    prices = select_working_set(offers, section_filter)
    n = len(prices)
    if n == 0:
        return _fallback_suggestion(aggregate)

    # Context precision may round the sum of very long prices; keep avg within [min, max]
    average = min(max(sum(prices, Decimal(0)) / n, prices[0]), prices[-1])
    return PriceSuggestion(
        suggested_price=round_half_up(prices[percentile_index(n, SUGGESTED_PERCENTILE)]),
        average_price=round_half_up(average),
        median_price=round_half_up(prices[percentile_index(n, MEDIAN_PERCENTILE)]),
        min_price=round_half_up(prices[0]),
        max_price=round_half_up(prices[-1]),
        total_offers=_lifetime_total(aggregate),
        recent_offers_considered=n,
        price_range=PriceRange(
            low=round_half_up(prices[percentile_index(n, RANGE_LOW_PERCENTILE)]),
            high=round_half_up(prices[percentile_index(n, RANGE_HIGH_PERCENTILE)]),
        ),
    )


class PriceSuggestionEngine:
    """Stateless wrapper so callers can inject an engine instance."""

    def compute(
        self,
        offers: Iterable[OfferRecord],
        aggregate: EventAggregateStats,
        section_filter: Iterable[str] | None = None,
    ) -> PriceSuggestion:
        return compute_suggestion(offers, aggregate, section_filter)
