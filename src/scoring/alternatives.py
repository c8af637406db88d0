"""
Single-item swap suggestions.

Finds the garment most responsible for a weak rating, re-rates the outfit
with every same-category wardrobe garment in its place and keeps the swaps
that clear the improvement threshold, best first.
"""

from typing import Callable, List, Optional, Sequence

from core.logging import get_logger
from scoring.garments import GarmentAttributes, OutfitSelection
from scoring.results import (
    AlternativeCandidate,
    AlternativesResult,
    RatingResult,
    average_pair_scores,
)

logger = get_logger(__name__)

RateFn = Callable[[OutfitSelection], RatingResult]


def _resolve(outfit: OutfitSelection, garment: GarmentAttributes) -> Optional[GarmentAttributes]:
    """Find the outfit's own instance of ``garment`` (identity first, then id)."""
    garments = outfit.garments()
    for worn in garments:
        if worn is garment:
            return worn
    for worn in garments:
        if worn.id == garment.id:
            return worn
    return None


def identify_problematic_item(
    outfit: OutfitSelection, rating: RatingResult,
) -> Optional[GarmentAttributes]:
    """
    Pick the garment to replace.

    The garment involved in the most clashing pairs wins (ties: lower
    average pair score, then outfit order). Without any clash, the garment
    with the lowest average pair score. None for outfits under two pieces.
    """
    garments = outfit.garments()
    if len(garments) < 2:
        return None

    # problematic_items is already ordered worst first
    for item in rating.problematic_items:
        if item.clash_count > 0:
            return _resolve(outfit, item.garment)

    averages = average_pair_scores(rating.pair_scores)
    if not averages:
        return None
    worst = min(averages, key=lambda idx: (averages[idx], idx))
    if worst >= len(garments):
        return None
    return garments[worst]


def search_alternatives(
    rate: RateFn,
    outfit: OutfitSelection,
    current_rating: RatingResult,
    wardrobe: Sequence[GarmentAttributes],
    problematic_item: Optional[GarmentAttributes] = None,
    min_improvement: float = 0.3,
    limit: int = 3,
) -> AlternativesResult:
    """Rate every same-category swap and keep the best ``limit`` improvements."""
    current_score = current_rating.score

    if len(outfit.garments()) < 2:
        return AlternativesResult(problematic_item=None, current_score=current_score)

    if problematic_item is not None:
        target = _resolve(outfit, problematic_item)
        if target is None:
            logger.warning(
                "Problematic item is not part of the outfit",
                garment_id=problematic_item.id,
            )
            return AlternativesResult(
                problematic_item=problematic_item, current_score=current_score,
            )
    else:
        target = identify_problematic_item(outfit, current_rating)
        if target is None:
            return AlternativesResult(problematic_item=None, current_score=current_score)

    worn_ids = {g.id for g in outfit.garments()}
    candidates = [
        g for g in wardrobe
        if g.category == target.category and g.id not in worn_ids
    ]

    scored: List[AlternativeCandidate] = []
    for candidate in candidates:
        predicted = rate(outfit.replace(target, candidate)).score
        delta = round(predicted - current_score, 2)
        if delta > min_improvement:
            scored.append(AlternativeCandidate(
                candidate=candidate,
                predicted_score=predicted,
                improvement_delta=delta,
            ))

    # sort is stable, wardrobe order breaks ties
    scored.sort(key=lambda alt: alt.predicted_score, reverse=True)
    alternatives = scored[:limit]

    logger.info(
        "Alternatives search complete",
        problematic_id=target.id,
        category=target.category.value,
        candidates=len(candidates),
        improving=len(scored),
        returned=len(alternatives),
        current_score=current_score,
    )

    return AlternativesResult(
        problematic_item=target,
        current_score=current_score,
        alternatives=alternatives,
    )
