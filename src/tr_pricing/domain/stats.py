"""Offer rollups — counts by status and mean offer price."""

from collections import Counter
from collections.abc import Iterable
from decimal import Decimal

from src.tr_common.enums import OfferStatus
from src.tr_common.money import round_half_up, to_decimal
from src.tr_pricing.domain.models import EventAggregateStats, OfferRecord, OfferStats


def summarize_offers(offers: Iterable[OfferRecord]) -> OfferStats:
    """Count offers by status and average max_price over all of them."""
    counts: Counter[OfferStatus] = Counter()
    total = Decimal(0)
    n = 0
    for offer in offers:
        counts[offer.status] += 1
        total += to_decimal(offer.max_price)
        n += 1

    return OfferStats(
        total_offers=n,
        active_offers=counts[OfferStatus.ACTIVE],
        accepted_offers=counts[OfferStatus.ACCEPTED],
        average_price=round_half_up(total / n) if n else 0,
    )


def aggregate_from_offers(
    offers: Iterable[OfferRecord],
    average_listing_price: Decimal | None = None,
) -> EventAggregateStats:
    """Build EventAggregateStats from raw offers when no upstream rollup exists."""
    stats = summarize_offers(offers)
    return EventAggregateStats(
        total_offers=stats.total_offers,
        average_listing_price=average_listing_price,
        average_offer_price=Decimal(stats.average_price) if stats.total_offers else None,
    )
