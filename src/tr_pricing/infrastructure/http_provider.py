"""HttpOfferHistoryProvider — concrete OfferHistoryProviderProtocol over REST.

Upstream endpoints (relative to OFFERS_API_BASE_URL):
  GET /offers/events/{event_id}?limit=&status=ACTIVE  → {"offers": [...], "total": n}
  GET /events/{event_id}/stats                        → {"totalOffers", "averageListingPrice", ...}
  GET /offers/stats?eventId=                          → {"totalOffers", "activeOffers", ...}

Bodies may be wrapped in {"success": true, "data": {...}}; the envelope is
unwrapped before mapping. Prices may be JSON numbers or decimal strings.
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from src.tr_common.datetime_utils import parse_iso
from src.tr_common.enums import OfferStatus
from src.tr_common.errors import OfferProviderResponseError, OfferProviderUnavailableError
from src.tr_common.http_client import get_http_client
from src.tr_common.money import round_half_up, to_decimal
from src.tr_pricing.domain.models import EventAggregateStats, OfferRecord, OfferStats

logger = logging.getLogger("tr.provider")


# ---------------------------------------------------------------------------
# Payload mappers
# ---------------------------------------------------------------------------

def _unwrap(payload: Any) -> Any:
    if isinstance(payload, dict) and "data" in payload and (
        "success" in payload or "message" in payload
    ):
        return payload["data"]
    return payload


def _path_segment(value: str) -> str:
    """Escape an id for use as one URL path segment ('/', '?', '#' included)."""
    return quote(value, safe="")


def _as_int(value: Any) -> int:
    return max(int(to_decimal(value)), 0)


def payload_to_offer(item: Any) -> OfferRecord:
    if not isinstance(item, dict) or "maxPrice" not in item:
        raise OfferProviderResponseError(f"offer entry without maxPrice: {item!r}")
    try:
        status = OfferStatus(item.get("status", OfferStatus.ACTIVE.value))
    except ValueError as exc:
        raise OfferProviderResponseError(f"unknown offer status {item.get('status')!r}") from exc

    sections = item.get("sections") or []
    # Some payloads send the flat id list used by the create-offer request
    flat_ids = item.get("sectionIds") or []
    if not isinstance(sections, list) or not isinstance(flat_ids, list):
        raise OfferProviderResponseError(f"offer sections must be lists: {item!r}")

    section_ids = frozenset(
        str(s["sectionId"]) for s in sections if isinstance(s, dict) and s.get("sectionId")
    )
    section_ids |= frozenset(str(s) for s in flat_ids if s)

    return OfferRecord(
        max_price=to_decimal(item["maxPrice"]),
        status=status,
        section_ids=section_ids,
        created_at=parse_iso(item.get("createdAt")),
    )


def payload_to_event_stats(data: Any) -> EventAggregateStats:
    if not isinstance(data, dict):
        raise OfferProviderResponseError(f"event stats is not an object: {data!r}")
    return EventAggregateStats(
        total_offers=_as_int(data.get("totalOffers")),
        average_listing_price=to_decimal(data.get("averageListingPrice")),
        average_offer_price=to_decimal(data.get("averageOfferPrice")),
    )


def _payload_to_offer_stats(data: Any) -> OfferStats:
    if not isinstance(data, dict):
        raise OfferProviderResponseError(f"offer stats is not an object: {data!r}")
    return OfferStats(
        total_offers=_as_int(data.get("totalOffers")),
        active_offers=_as_int(data.get("activeOffers")),
        accepted_offers=_as_int(data.get("acceptedOffers")),
        average_price=round_half_up(to_decimal(data.get("averagePrice"))),
    )


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------


class HttpOfferHistoryProvider:
    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        client = self._client or await get_http_client()
        try:
            resp = await client.get(path, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning("Upstream %s → %d", path, exc.response.status_code)
            raise OfferProviderUnavailableError(
                f"{path} returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Upstream %s failed: %s", path, exc)
            raise OfferProviderUnavailableError(f"{path}: {exc}") from exc

        try:
            return _unwrap(resp.json())
        except ValueError as exc:
            logger.warning("Upstream %s returned non-JSON body", path)
            raise OfferProviderResponseError(f"{path} returned non-JSON body") from exc

    async def list_active_offers(self, event_id: str, limit: int) -> list[OfferRecord]:
        data = await self._get_json(
            f"/offers/events/{_path_segment(event_id)}",
            params={"limit": limit, "status": OfferStatus.ACTIVE.value},
        )
        offers = data.get("offers") if isinstance(data, dict) else data
        if not isinstance(offers, list):
            raise OfferProviderResponseError(f"offers list missing for event {event_id}")
        return [payload_to_offer(item) for item in offers]

    async def get_event_stats(self, event_id: str) -> EventAggregateStats:
        data = await self._get_json(f"/events/{_path_segment(event_id)}/stats")
        return payload_to_event_stats(data)

    async def get_offer_stats(self, event_id: str) -> OfferStats:
        data = await self._get_json("/offers/stats", params={"eventId": event_id})
        return _payload_to_offer_stats(data)
