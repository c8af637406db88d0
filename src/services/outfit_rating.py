"""
Outfit rating service.

Thin application seam between callers (HTTP routes, scripts) and the
rating engine. Wardrobe storage lives elsewhere; the service only needs
something that can list a user's garments.
"""

import threading
from typing import Optional, Protocol, Sequence

from config.settings import get_settings
from core.logging import LoggerMixin
from scoring.garments import GarmentAttributes, OutfitSelection
from scoring.rating_engine import RatingEngine
from scoring.results import AlternativesResult, RatingResult
from scoring.tables import CompatibilityTables, get_compatibility_tables


class GarmentRepository(Protocol):
    """Read-only access to a user's wardrobe."""

    def list_garments(self, user_id: str) -> Sequence[GarmentAttributes]:
        ...


class OutfitRatingService(LoggerMixin):
    """
    Rates outfits and suggests swaps.

    Usage:
        service = get_outfit_rating_service()

        rating = service.rate_outfit(outfit)
        swaps = service.suggest_alternatives(outfit, wardrobe, rating)
    """

    def __init__(self, engine: RatingEngine):
        self._engine = engine

    @classmethod
    def from_tables(
        cls,
        tables: CompatibilityTables,
        max_alternatives: int = 3,
        min_improvement: float = 0.3,
    ) -> "OutfitRatingService":
        return cls(RatingEngine(
            tables,
            max_alternatives=max_alternatives,
            min_improvement=min_improvement,
        ))

    @property
    def engine(self) -> RatingEngine:
        return self._engine

    def rate_outfit(self, outfit: OutfitSelection) -> RatingResult:
        return self._engine.rate(outfit)

    def suggest_alternatives(
        self,
        outfit: OutfitSelection,
        wardrobe: Sequence[GarmentAttributes],
        current_rating: Optional[RatingResult] = None,
        problematic_item_id: Optional[str] = None,
    ) -> AlternativesResult:
        """
        Suggest up to K swaps for the weakest garment.

        Args:
            outfit: Current selection
            wardrobe: Garments the user owns
            current_rating: Rating of ``outfit``; computed when omitted
            problematic_item_id: Garment to replace instead of the detected one

        Returns:
            AlternativesResult, empty when nothing improves the outfit
        """
        if current_rating is None:
            current_rating = self._engine.rate(outfit)

        problematic_item = None
        if problematic_item_id is not None:
            problematic_item = next(
                (g for g in outfit.garments() if g.id == problematic_item_id), None,
            )
            if problematic_item is None:
                self.logger.warning(
                    "Requested garment not in outfit",
                    garment_id=problematic_item_id,
                )
                return AlternativesResult(
                    problematic_item=None, current_score=current_rating.score,
                )

        return self._engine.find_alternatives(
            outfit, current_rating, wardrobe, problematic_item=problematic_item,
        )

    def suggest_from_repository(
        self,
        user_id: str,
        outfit: OutfitSelection,
        repository: GarmentRepository,
    ) -> AlternativesResult:
        """Same as suggest_alternatives, with the wardrobe read from a repository."""
        wardrobe = list(repository.list_garments(user_id))
        self.logger.debug("Loaded wardrobe", user_id=user_id, garments=len(wardrobe))
        return self.suggest_alternatives(outfit, wardrobe)


# =============================================================================
# SINGLETON
# =============================================================================

_service: Optional[OutfitRatingService] = None
_service_lock = threading.Lock()


def get_outfit_rating_service() -> OutfitRatingService:
    """Get or create the OutfitRatingService singleton (thread-safe)."""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                settings = get_settings()
                _service = OutfitRatingService.from_tables(
                    get_compatibility_tables(),
                    max_alternatives=settings.max_alternatives,
                    min_improvement=settings.min_improvement,
                )
    return _service
