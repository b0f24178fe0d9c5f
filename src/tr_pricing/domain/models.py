"""Domain models for tr_pricing — pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.tr_common.enums import OfferStatus

# Optional set of section ids; None / empty means "all sections".
SectionFilter = frozenset[str]


@dataclass(frozen=True)
class OfferRecord:
    """One historical buyer offer. Empty section_ids means "any section"."""

    max_price: Decimal
    status: OfferStatus
    section_ids: frozenset[str] = field(default_factory=frozenset)
    created_at: datetime | None = None


@dataclass(frozen=True)
class EventAggregateStats:
    """Event-level rollup maintained upstream. Zero / None means "no data"."""

    total_offers: int | None = 0
    average_listing_price: Decimal | None = None
    average_offer_price: Decimal | None = None


@dataclass(frozen=True)
class PriceRange:
    """Competitive bidding band."""

    low: int
    high: int


@dataclass(frozen=True)
class PriceSuggestion:
    suggested_price: int
    average_price: int
    median_price: int
    min_price: int
    max_price: int
    total_offers: int              # lifetime count from aggregate stats
    recent_offers_considered: int  # offers actually used in this computation
    price_range: PriceRange


@dataclass(frozen=True)
class OfferStats:
    """Status counts and mean max_price over a set of offers."""

    total_offers: int
    active_offers: int
    accepted_offers: int
    average_price: int
