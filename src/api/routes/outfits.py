"""Outfit rating and swap suggestion endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from api.models import AlternativesRequest, RateOutfitRequest
from core.logging import get_logger
from services.outfit_rating import OutfitRatingService, get_outfit_rating_service

logger = get_logger(__name__)

router = APIRouter(prefix="/api/outfits", tags=["Outfits"])


def get_rating_service() -> OutfitRatingService:
    return get_outfit_rating_service()


@router.post("/rate", summary="Rate an outfit")
def rate_outfit(
    request: RateOutfitRequest,
    service: OutfitRatingService = Depends(get_rating_service),
) -> Dict[str, Any]:
    rating = service.rate_outfit(request.outfit.to_selection())
    return rating.to_dict()


@router.post("/alternatives", summary="Suggest better items for the weakest piece")
def suggest_alternatives(
    request: AlternativesRequest,
    service: OutfitRatingService = Depends(get_rating_service),
) -> Dict[str, Any]:
    """
    Rate the outfit, then try every same-category wardrobe garment in place
    of the weakest piece. Returns at most the configured number of swaps.
    """
    outfit = request.outfit.to_selection()
    wardrobe = [g.to_attributes() for g in request.wardrobe]
    rating = service.rate_outfit(outfit)
    result = service.suggest_alternatives(
        outfit,
        wardrobe,
        current_rating=rating,
        problematic_item_id=request.problematic_item_id,
    )
    return {
        "rating": rating.to_dict(),
        **result.to_dict(),
    }


@router.get("/tables", summary="Compatibility table metadata")
def table_metadata(
    service: OutfitRatingService = Depends(get_rating_service),
) -> Dict[str, Any]:
    return service.engine.tables.describe()
