"""
Output value objects produced by the rating engine.

All of them are frozen; a rating is rendered and discarded, never patched.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from scoring.garments import GarmentAttributes

EMPTY_OUTFIT_MESSAGE = "Please select at least one clothing item"


@dataclass(frozen=True)
class PairScore:
    """Score breakdown for one unordered garment pair (first_index < second_index)."""
    first_index: int
    second_index: int
    first_id: str
    second_id: str
    color_score: float
    pattern_score: float
    type_score: float
    pair_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "first_id": self.first_id,
            "second_id": self.second_id,
            "color_score": round(self.color_score, 2),
            "pattern_score": round(self.pattern_score, 2),
            "type_score": round(self.type_score, 2),
            "pair_score": round(self.pair_score, 2),
        }


def average_pair_scores(pairs: List[PairScore]) -> Dict[int, float]:
    """Mean pair score per garment index, over every pair the garment is in."""
    totals: Dict[int, List[float]] = {}
    for pair in pairs:
        totals.setdefault(pair.first_index, []).append(pair.pair_score)
        totals.setdefault(pair.second_index, []).append(pair.pair_score)
    return {idx: sum(scores) / len(scores) for idx, scores in totals.items()}


@dataclass(frozen=True)
class ProblematicItem:
    """A garment dragging the outfit score down, with the worst reason found."""
    garment: GarmentAttributes
    reason: str
    severity: str                   # high / medium / low
    potential_improvement: float
    clash_count: int = 0            # pairs recorded under suggestions
    average_pair_score: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "garment": self.garment.to_dict(),
            "reason": self.reason,
            "severity": self.severity,
            "potential_improvement": self.potential_improvement,
            "clash_count": self.clash_count,
            "average_pair_score": (
                round(self.average_pair_score, 2)
                if self.average_pair_score is not None else None
            ),
        }


@dataclass(frozen=True)
class RatingResult:
    score: float
    matrix_score: float
    color_score: float
    pattern_score: float
    type_score: float
    formality_bonus: float
    tag_bonus: float
    feedback: List[str] = field(default_factory=list)
    strengths: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    pair_scores: List[PairScore] = field(default_factory=list)
    problematic_items: List[ProblematicItem] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "RatingResult":
        """Result for an outfit with no garments selected."""
        return cls(
            score=0.0,
            matrix_score=0.0,
            color_score=0.0,
            pattern_score=0.0,
            type_score=0.0,
            formality_bonus=0.0,
            tag_bonus=0.0,
            feedback=[EMPTY_OUTFIT_MESSAGE],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "matrix_score": self.matrix_score,
            "color_score": self.color_score,
            "pattern_score": self.pattern_score,
            "type_score": self.type_score,
            "formality_bonus": self.formality_bonus,
            "tag_bonus": self.tag_bonus,
            "feedback": list(self.feedback),
            "strengths": list(self.strengths),
            "suggestions": list(self.suggestions),
            "pair_scores": [p.to_dict() for p in self.pair_scores],
            "problematic_items": [p.to_dict() for p in self.problematic_items],
        }


@dataclass(frozen=True)
class AlternativeCandidate:
    candidate: GarmentAttributes
    predicted_score: float
    improvement_delta: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "candidate": self.candidate.to_dict(),
            "predicted_score": self.predicted_score,
            "improvement_delta": self.improvement_delta,
        }


@dataclass(frozen=True)
class AlternativesResult:
    """Ranked swaps (best first) for the single most problematic garment."""
    problematic_item: Optional[GarmentAttributes]
    current_score: float
    alternatives: List[AlternativeCandidate] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "problematic_item": (
                self.problematic_item.to_dict() if self.problematic_item else None
            ),
            "current_score": self.current_score,
            "alternatives": [a.to_dict() for a in self.alternatives],
        }
