"""InMemoryOfferHistoryProvider — in-process store, selected with OFFERS_PROVIDER=memory.

Offers are kept per event in insertion order. When no upstream rollup was
seeded for an event, its aggregate stats are derived from the stored offers.

Seed file (OFFERS_SEED_FILE) uses the upstream payload shapes, keyed by event:
    {
      "EVT-1": {
        "offers": [{"maxPrice": 120, "status": "ACTIVE", "sections": [{"sectionId": "A"}]}],
        "stats": {"totalOffers": 40, "averageListingPrice": 210}
      }
    }
"""

import json
from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

from src.tr_common.enums import OfferStatus
from src.tr_common.errors import OfferProviderResponseError
from src.tr_pricing.domain.models import EventAggregateStats, OfferRecord, OfferStats
from src.tr_pricing.domain.stats import aggregate_from_offers, summarize_offers
from src.tr_pricing.infrastructure.http_provider import payload_to_event_stats, payload_to_offer

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class InMemoryOfferHistoryProvider:
    def __init__(self) -> None:
        self._offers: dict[str, list[OfferRecord]] = defaultdict(list)
        self._event_stats: dict[str, EventAggregateStats] = {}

    @classmethod
    def from_seed_file(cls, path: str | Path) -> "InMemoryOfferHistoryProvider":
        """Load offers and stats per event from a JSON seed file."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except ValueError as exc:
            raise OfferProviderResponseError(f"seed file {path} is not valid JSON") from exc
        if not isinstance(data, dict):
            raise OfferProviderResponseError(f"seed file {path} must map event ids to objects")

        provider = cls()
        for event_id, entry in data.items():
            if not isinstance(entry, dict):
                raise OfferProviderResponseError(f"seed entry for {event_id} is not an object")
            offers = entry.get("offers") or []
            if not isinstance(offers, list):
                raise OfferProviderResponseError(f"seed offers for {event_id} is not a list")
            provider.add_offers(event_id, (payload_to_offer(item) for item in offers))
            if "stats" in entry:
                provider.set_event_stats(event_id, payload_to_event_stats(entry["stats"]))
        return provider

    def add_offers(self, event_id: str, offers: Iterable[OfferRecord]) -> None:
        self._offers[event_id].extend(offers)

    def set_event_stats(self, event_id: str, stats: EventAggregateStats) -> None:
        self._event_stats[event_id] = stats

    async def list_active_offers(self, event_id: str, limit: int) -> list[OfferRecord]:
        """ACTIVE offers, newest first, at most `limit` of them."""
        active = [o for o in self._offers.get(event_id, []) if o.status == OfferStatus.ACTIVE]
        active.sort(key=lambda o: o.created_at or _EPOCH, reverse=True)
        return active[:limit]

    async def get_event_stats(self, event_id: str) -> EventAggregateStats:
        seeded = self._event_stats.get(event_id)
        if seeded is not None:
            return seeded
        return aggregate_from_offers(self._offers.get(event_id, []))

    async def get_offer_stats(self, event_id: str) -> OfferStats:
        return summarize_offers(self._offers.get(event_id, []))
