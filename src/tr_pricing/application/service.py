"""PriceSuggestionService — fetch offer history, run the engine, cache results.

The engine is pure; everything stateful lives here:
  - upstream fetches go through an OfferHistoryProviderProtocol
  - upstream failures degrade to engine defaults (empty offers, zeroed stats)
    instead of failing the request
  - results are cached per (event_id, section filter) for cache_ttl_seconds
"""

import asyncio
import logging
import time
from collections.abc import Callable, Iterable

from config.settings import settings
from src.tr_common.errors import InvalidEventIdError, OfferProviderError
from src.tr_pricing.application.schemas import OfferStatsResponse, PriceSuggestionResponse
from src.tr_pricing.domain.engine import PriceSuggestionEngine
from src.tr_pricing.domain.models import EventAggregateStats, SectionFilter
from src.tr_pricing.domain.provider import OfferHistoryProviderProtocol
from src.tr_pricing.infrastructure.http_provider import HttpOfferHistoryProvider
from src.tr_pricing.infrastructure.memory_provider import InMemoryOfferHistoryProvider

logger = logging.getLogger("tr.pricing")

_CacheKey = tuple[str, SectionFilter]


def build_offer_provider() -> OfferHistoryProviderProtocol:
    """Pick the offer history provider named by OFFERS_PROVIDER."""
    if settings.OFFERS_PROVIDER == "memory":
        if settings.OFFERS_SEED_FILE:
            return InMemoryOfferHistoryProvider.from_seed_file(settings.OFFERS_SEED_FILE)
        return InMemoryOfferHistoryProvider()
    return HttpOfferHistoryProvider()


def _normalize_event_id(event_id: str) -> str:
    cleaned = (event_id or "").strip()
    if not cleaned:
        raise InvalidEventIdError(event_id)
    return cleaned


class PriceSuggestionService:
    def __init__(
        self,
        provider: OfferHistoryProviderProtocol | None = None,
        engine: PriceSuggestionEngine | None = None,
        cache_ttl_seconds: float | None = None,
        recent_limit: int | None = None,
        clock: Callable[[], float] = time.monotonic,
        max_cache_entries: int | None = None,
    ) -> None:
        self._provider: OfferHistoryProviderProtocol = provider or build_offer_provider()
        self._engine = engine or PriceSuggestionEngine()
        self._ttl = (
            settings.SUGGESTION_CACHE_TTL_SECONDS if cache_ttl_seconds is None else cache_ttl_seconds
        )
        self._recent_limit = recent_limit or settings.RECENT_OFFERS_LIMIT
        self._clock = clock
        self._max_entries = max(max_cache_entries or settings.SUGGESTION_CACHE_MAX_ENTRIES, 1)
        self._cache: dict[_CacheKey, tuple[float, PriceSuggestionResponse]] = {}

    async def get_price_suggestion(
        self,
        event_id: str,
        section_ids: Iterable[str] | None = None,
    ) -> PriceSuggestionResponse:
        event_id = _normalize_event_id(event_id)
        sections = frozenset(s for s in (section_ids or []) if s)
        key = (event_id, sections)

        cached = self._cache_get(key)
        if cached is not None:
            return cached

        try:
            offers, aggregate = await asyncio.gather(
                self._provider.list_active_offers(event_id, self._recent_limit),
                self._provider.get_event_stats(event_id),
            )
        except OfferProviderError as exc:
            logger.warning(
                "Price suggestion for %s using defaults: [%d] %s",
                event_id,
                exc.code,
                exc.message,
            )
            suggestion = self._engine.compute([], EventAggregateStats(), sections)
            return PriceSuggestionResponse.from_domain(
                event_id, sections, suggestion, is_fallback=True
            )

        suggestion = self._engine.compute(offers, aggregate, sections)
        logger.debug(
            "Suggestion for %s sections=%s: %d from %d offers",
            event_id,
            sorted(sections),
            suggestion.suggested_price,
            suggestion.recent_offers_considered,
        )
        result = PriceSuggestionResponse.from_domain(event_id, sections, suggestion)
        self._cache_put(key, result)
        return result

    async def get_offer_stats(self, event_id: str) -> OfferStatsResponse:
        event_id = _normalize_event_id(event_id)
        stats = await self._provider.get_offer_stats(event_id)
        return OfferStatsResponse.from_domain(event_id, stats)

    def invalidate(self, event_id: str) -> None:
        """Drop every cached suggestion for one event."""
        for key in [k for k in self._cache if k[0] == event_id]:
            del self._cache[key]

    # ------------------------------------------------------------------
    # Keyed TTL cache
    # ------------------------------------------------------------------

    def _cache_get(self, key: _CacheKey) -> PriceSuggestionResponse | None:
        if self._ttl <= 0:
            return None
        entry = self._cache.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._cache[key]
            return None
        return value

    def _cache_put(self, key: _CacheKey, value: PriceSuggestionResponse) -> None:
        if self._ttl <= 0:
            return
        now = self._clock()
        self._sweep_expired(now)
        if key not in self._cache and len(self._cache) >= self._max_entries:
            # dicts keep insertion order; the first entry is the oldest
            del self._cache[next(iter(self._cache))]
        self._cache[key] = (now + self._ttl, value)

    def _sweep_expired(self, now: float) -> None:
        for stale in [k for k, (expires_at, _) in self._cache.items() if now >= expires_at]:
            del self._cache[stale]
