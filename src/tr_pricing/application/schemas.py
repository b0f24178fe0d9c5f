"""Pydantic schemas for tr_pricing API responses.

All prices are whole currency units (int). `total_offers` is the lifetime
count from upstream stats; `recent_offers_considered` is the size of the
working set the suggestion was computed from. They are intentionally
different numbers.
"""

from pydantic import BaseModel

from src.tr_common.money import money_to_display
from src.tr_pricing.domain.models import OfferStats, PriceSuggestion


class PriceRangeOut(BaseModel):
    low: int
    high: int


class PriceSuggestionResponse(BaseModel):
    event_id: str
    section_ids: list[str]
    suggested_price: int
    suggested_price_display: str
    average_price: int
    median_price: int
    min_price: int
    max_price: int
    total_offers: int
    recent_offers_considered: int
    price_range: PriceRangeOut
    is_fallback: bool  # True when upstream data could not be fetched

    @classmethod
    def from_domain(
        cls,
        event_id: str,
        section_ids: frozenset[str],
        s: PriceSuggestion,
        is_fallback: bool = False,
    ) -> "PriceSuggestionResponse":
        return cls(
            event_id=event_id,
            section_ids=sorted(section_ids),
            suggested_price=s.suggested_price,
            suggested_price_display=money_to_display(s.suggested_price),
            average_price=s.average_price,
            median_price=s.median_price,
            min_price=s.min_price,
            max_price=s.max_price,
            total_offers=s.total_offers,
            recent_offers_considered=s.recent_offers_considered,
            price_range=PriceRangeOut(low=s.price_range.low, high=s.price_range.high),
            is_fallback=is_fallback,
        )


class OfferStatsResponse(BaseModel):
    event_id: str
    total_offers: int
    active_offers: int
    accepted_offers: int
    average_price: int
    average_price_display: str

    @classmethod
    def from_domain(cls, event_id: str, stats: OfferStats) -> "OfferStatsResponse":
        return cls(
            event_id=event_id,
            total_offers=stats.total_offers,
            active_offers=stats.active_offers,
            accepted_offers=stats.accepted_offers,
            average_price=stats.average_price,
            average_price_display=money_to_display(stats.average_price),
        )
