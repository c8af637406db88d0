"""
Outfit Rating Engine
====================

Rule-based compatibility score for a hand-picked outfit.

Every unordered garment pair is scored on three table-driven dimensions:

  1. Color    - mean affinity over both garments' colors, bent by pattern presence
  2. Pattern  - pattern x pattern affinity
  3. Type     - garment type x garment type affinity

The pair averages are weighted into a matrix score, then two outfit-level
adjustments are added:

  - Formality  - spread (max - min) of the user's formality ratings
  - Tags       - shared occasion / style tags, summer-with-winter penalty

The final score is clamped to 0-10 and rounded to one decimal. The engine
is pure: same outfit + same tables => equal result.
"""

from collections import Counter
from itertools import combinations
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from core.logging import get_logger
from scoring.alternatives import search_alternatives
from scoring.garments import GarmentAttributes, OutfitSelection
from scoring.results import (
    AlternativesResult,
    PairScore,
    ProblematicItem,
    RatingResult,
    average_pair_scores,
)
from scoring.tables import (
    MAX_SCORE,
    CompatibilityTables,
    PatternInteraction,
    clamp_score,
    normalize_label,
    round_half_up,
)

logger = get_logger(__name__)

DEFAULT_MAX_ALTERNATIVES = 3
DEFAULT_MIN_IMPROVEMENT = 0.3

TOO_FORMAL = "Too formal for outfit"
TOO_CASUAL = "Too casual for outfit"
SEASON_MISMATCH = "Mixing summer and winter items - check weather appropriateness"


# ---------------------------------------------------------------------------
# Pair helpers
# ---------------------------------------------------------------------------

def apply_pattern_interaction(
    color_score: float,
    first_patterned: bool,
    second_patterned: bool,
    rules: PatternInteraction,
) -> float:
    """
    Adjust a weak color score for pattern presence.

    One patterned piece next to a solid softens a color clash; two
    patterned pieces make it worse. Scores at or above the clash
    threshold are left alone.
    """
    if color_score >= rules.clash_threshold:
        return color_score
    if first_patterned != second_patterned:
        return color_score + (MAX_SCORE - color_score) * rules.single_pattern_relief
    if first_patterned and second_patterned:
        return color_score - color_score * rules.double_pattern_penalty
    return color_score


def _mean(values: Sequence[float], default: float) -> float:
    return sum(values) / len(values) if values else default


def _first_shared(tags: Iterable[str], counts: Counter, min_shared: int) -> Optional[str]:
    for tag in tags:
        if counts[normalize_label(tag)] >= min_shared:
            return tag
    return None


def _severity_label(mean_severity: float) -> str:
    if mean_severity >= 2.5:
        return "high"
    if mean_severity >= 1.5:
        return "medium"
    return "low"


def _rank_problematic_items(
    garments: List[GarmentAttributes],
    pairs: List[PairScore],
    formality_outliers: List[Tuple[int, str]],
    suggestion_below: float,
) -> List[ProblematicItem]:
    """Collect per-garment issues and order worst first.

    Order: clash count (desc), average pair score (asc), outfit position.
    """
    issues: Dict[int, List[Tuple[str, int]]] = {}
    clash_counts: Counter = Counter()

    for pair in pairs:
        if pair.pair_score >= suggestion_below:
            continue
        severity = 3 if pair.pair_score < 4 else 2
        first = garments[pair.first_index]
        second = garments[pair.second_index]
        issues.setdefault(pair.first_index, []).append(
            (f"Clashes with {second.garment_type}", severity)
        )
        issues.setdefault(pair.second_index, []).append(
            (f"Clashes with {first.garment_type}", severity)
        )
        clash_counts[pair.first_index] += 1
        clash_counts[pair.second_index] += 1

    for idx, reason in formality_outliers:
        issues.setdefault(idx, []).append((reason, 2))

    averages = average_pair_scores(pairs)
    ranked: List[Tuple[Tuple[int, float, int], ProblematicItem]] = []
    for idx, entries in issues.items():
        mean_severity = sum(s for _, s in entries) / len(entries)
        # max() keeps the first of equally severe reasons
        reason = max(entries, key=lambda entry: entry[1])[0]
        average = averages.get(idx)
        item = ProblematicItem(
            garment=garments[idx],
            reason=reason,
            severity=_severity_label(mean_severity),
            potential_improvement=round_half_up(mean_severity * 0.5 + len(entries) * 0.3),
            clash_count=clash_counts[idx],
            average_pair_score=average,
        )
        sort_key = (-clash_counts[idx], average if average is not None else MAX_SCORE, idx)
        ranked.append((sort_key, item))

    ranked.sort(key=lambda entry: entry[0])
    return [item for _, item in ranked]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class RatingEngine:
    """
    Scores outfits against an injected set of compatibility tables.

    Holds no mutable state; one instance can serve concurrent requests.
    """

    def __init__(
        self,
        tables: CompatibilityTables,
        max_alternatives: int = DEFAULT_MAX_ALTERNATIVES,
        min_improvement: float = DEFAULT_MIN_IMPROVEMENT,
    ) -> None:
        self._tables = tables
        self._rules = tables.rules
        self.max_alternatives = max_alternatives
        self.min_improvement = min_improvement

    @property
    def tables(self) -> CompatibilityTables:
        return self._tables

    def score_pair(
        self,
        first: GarmentAttributes,
        second: GarmentAttributes,
        first_index: int = 0,
        second_index: int = 1,
    ) -> PairScore:
        """Color / pattern / type breakdown and weighted score for one pair."""
        color = self._tables.color_affinity_multi(first, second)
        pattern = self._tables.pattern_affinity(first.pattern, second.pattern)
        color = apply_pattern_interaction(
            color, first.is_patterned, second.is_patterned,
            self._rules.pattern_interaction,
        )
        type_score = self._tables.type_affinity(first.garment_type, second.garment_type)
        return PairScore(
            first_index=first_index,
            second_index=second_index,
            first_id=first.id,
            second_id=second.id,
            color_score=color,
            pattern_score=pattern,
            type_score=type_score,
            # 9 decimals so a weighted 5.0 does not land at 4.999999999999999
            pair_score=round(self._rules.weights.combine(color, pattern, type_score), 9),
        )

    def rate(self, outfit: OutfitSelection) -> RatingResult:
        """Compute the full rating for an outfit."""
        garments = outfit.garments()
        if not garments:
            return RatingResult.empty()

        thresholds = self._rules.pair_feedback
        feedback: List[str] = []
        strengths: List[str] = []
        suggestions: List[str] = []
        pairs: List[PairScore] = []

        for i, j in combinations(range(len(garments)), 2):
            pair = self.score_pair(garments[i], garments[j], i, j)
            pairs.append(pair)

            first_type = garments[i].garment_type
            second_type = garments[j].garment_type
            if pair.pair_score >= thresholds.strength_min:
                strengths.append(f"{first_type} and {second_type} pair excellently")
            elif pair.pair_score >= thresholds.feedback_min:
                feedback.append(f"{first_type} and {second_type} work well together")
            elif pair.pair_score < thresholds.suggestion_below:
                suggestions.append(
                    f"{first_type} and {second_type} don't match well - consider swapping one"
                )

        neutral = self._tables.neutral_score
        avg_color = _mean([p.color_score for p in pairs], neutral)
        avg_pattern = _mean([p.pattern_score for p in pairs], neutral)
        avg_type = _mean([p.type_score for p in pairs], neutral)
        matrix_score = self._rules.weights.combine(avg_color, avg_pattern, avg_type)

        formality_bonus, outliers = self._formality_bonus(garments, feedback, suggestions)
        matrix_score += formality_bonus

        tag_bonus = self._tag_bonus(garments, feedback, suggestions)
        matrix_score += tag_bonus

        score = round_half_up(clamp_score(matrix_score))
        feedback.append(self._rules.band_message(score))

        problematic = _rank_problematic_items(
            garments, pairs, outliers, thresholds.suggestion_below,
        )

        logger.debug(
            "Outfit rated",
            garments=len(garments),
            pairs=len(pairs),
            score=score,
            formality_bonus=formality_bonus,
            tag_bonus=tag_bonus,
        )

        return RatingResult(
            score=score,
            matrix_score=round_half_up(matrix_score),
            color_score=round_half_up(avg_color),
            pattern_score=round_half_up(avg_pattern),
            type_score=round_half_up(avg_type),
            formality_bonus=round_half_up(formality_bonus),
            tag_bonus=round_half_up(tag_bonus),
            feedback=feedback,
            strengths=strengths,
            suggestions=suggestions,
            pair_scores=pairs,
            problematic_items=problematic,
        )

    def find_alternatives(
        self,
        outfit: OutfitSelection,
        current_rating: RatingResult,
        wardrobe: Sequence[GarmentAttributes],
        problematic_item: Optional[GarmentAttributes] = None,
    ) -> AlternativesResult:
        """Rank same-category swaps for the weakest garment (best first)."""
        return search_alternatives(
            self.rate,
            outfit,
            current_rating,
            wardrobe,
            problematic_item=problematic_item,
            min_improvement=self.min_improvement,
            limit=self.max_alternatives,
        )

    # -----------------------------------------------------------------------
    # Outfit-level adjustments
    # -----------------------------------------------------------------------

    def _formality_bonus(
        self,
        garments: List[GarmentAttributes],
        feedback: List[str],
        suggestions: List[str],
    ) -> Tuple[float, List[Tuple[int, str]]]:
        """Bonus from the formality spread, plus outliers in the worst bucket."""
        rules = self._rules.formality
        rated = [
            (idx, g.formality_level)
            for idx, g in enumerate(garments)
            if g.formality_level is not None and not rules.is_exempt(g.garment_type)
        ]
        if len(rated) < 2:
            return 0.0, []

        levels = [level for _, level in rated]
        variance = max(levels) - min(levels)
        bucket = rules.bucket_for(variance)
        if bucket.message:
            target = feedback if bucket.kind == "feedback" else suggestions
            target.append(bucket.message)

        outliers: List[Tuple[int, str]] = []
        if bucket.max_variance is None:
            mean_level = sum(levels) / len(levels)
            for idx, level in rated:
                if abs(level - mean_level) > rules.outlier_distance:
                    outliers.append((idx, TOO_FORMAL if level > mean_level else TOO_CASUAL))
        return bucket.bonus, outliers

    def _tag_bonus(
        self,
        garments: List[GarmentAttributes],
        feedback: List[str],
        suggestions: List[str],
    ) -> float:
        rules = self._rules.tags
        # one count per garment, whatever the spelling
        counts: Counter = Counter()
        for garment in garments:
            counts.update({normalize_label(tag) for tag in garment.tags})

        bonus = 0.0
        occasion = _first_shared(rules.occasion_tags, counts, rules.min_shared)
        if occasion is not None:
            bonus += rules.occasion_bonus
            feedback.append(f"Pieces share the {occasion} occasion")

        style = _first_shared(rules.style_tags, counts, rules.min_shared)
        if style is not None:
            bonus += rules.style_bonus
            feedback.append(f"Consistent {style} style")

        has_summer = any(counts[normalize_label(t)] for t in rules.summer_tags)
        has_winter = any(counts[normalize_label(t)] for t in rules.winter_tags)
        if has_summer and has_winter:
            bonus -= rules.season_penalty
            suggestions.append(SEASON_MISMATCH)

        return bonus
