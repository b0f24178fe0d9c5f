"""tr_pricing REST endpoints.

GET /events/{event_id}/price-suggestion   — suggested max offer + supporting stats
GET /events/{event_id}/offer-stats        — offer counts by status, mean offer price
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.tr_common.response import ApiResponse, success_response
from src.tr_pricing.application.service import PriceSuggestionService

router = APIRouter(prefix="/events", tags=["pricing"])

# Provider is chosen from settings (OFFERS_PROVIDER) when the service is built
_service = PriceSuggestionService()


def get_price_suggestion_service() -> PriceSuggestionService:
    """FastAPI dependency; tests override it to inject a provider."""
    return _service


@router.get("/{event_id}/price-suggestion")
async def get_price_suggestion(
    event_id: str,
    request: Request,
    service: Annotated[PriceSuggestionService, Depends(get_price_suggestion_service)],
    section_ids: Annotated[
        list[str] | None,
        Query(description="Restrict to offers for these sections. Repeat for several."),
    ] = None,
) -> ApiResponse:
    result = await service.get_price_suggestion(event_id, section_ids)
    return success_response(result, request)


@router.get("/{event_id}/offer-stats")
async def get_offer_stats(
    event_id: str,
    request: Request,
    service: Annotated[PriceSuggestionService, Depends(get_price_suggestion_service)],
) -> ApiResponse:
    result = await service.get_offer_stats(event_id)
    return success_response(result, request)
