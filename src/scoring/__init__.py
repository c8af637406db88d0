"""
Outfit Scoring Module.

Table-driven compatibility scoring for hand-picked outfits, plus
single-item swap suggestions.

Quick start::

    from scoring import RatingEngine, OutfitSelection, get_compatibility_tables

    engine = RatingEngine(get_compatibility_tables())
    outfit = OutfitSelection(top=shirt, bottom=jeans, footwear=sneakers)

    rating = engine.rate(outfit)
    swaps = engine.find_alternatives(outfit, rating, wardrobe)
"""

from scoring.garments import GarmentAttributes, GarmentCategory, OutfitSelection
from scoring.results import (
    AlternativeCandidate,
    AlternativesResult,
    PairScore,
    ProblematicItem,
    RatingResult,
)
from scoring.tables import (
    CompatibilityTableError,
    CompatibilityTables,
    RatingRules,
    get_compatibility_tables,
    load_compatibility_tables,
)
from scoring.alternatives import identify_problematic_item
from scoring.rating_engine import RatingEngine

__all__ = [
    "GarmentAttributes",
    "GarmentCategory",
    "OutfitSelection",
    "AlternativeCandidate",
    "AlternativesResult",
    "PairScore",
    "ProblematicItem",
    "RatingResult",
    "CompatibilityTableError",
    "CompatibilityTables",
    "RatingRules",
    "get_compatibility_tables",
    "load_compatibility_tables",
    "identify_problematic_item",
    "RatingEngine",
]
