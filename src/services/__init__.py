"""
Services module for business logic.

Provides the outfit rating service used by the API.
"""

from services.outfit_rating import (
    GarmentRepository,
    OutfitRatingService,
    get_outfit_rating_service,
)

__all__ = [
    "GarmentRepository",
    "OutfitRatingService",
    "get_outfit_rating_service",
]
