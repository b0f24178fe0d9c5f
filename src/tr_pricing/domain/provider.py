# src/tr_pricing/domain/provider.py
"""Offer history provider Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementations (remote REST API,
in-memory store).
"""

from typing import Protocol

from src.tr_pricing.domain.models import EventAggregateStats, OfferRecord, OfferStats


class OfferHistoryProviderProtocol(Protocol):
    async def list_active_offers(
        self,
        event_id: str,
        limit: int,
    ) -> list[OfferRecord]: ...

    async def get_event_stats(
        self,
        event_id: str,
    ) -> EventAggregateStats: ...

    async def get_offer_stats(
        self,
        event_id: str,
    ) -> OfferStats: ...
