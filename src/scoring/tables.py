"""
Compatibility tables for outfit rating.

Three symmetric 0-10 affinity matrices (color x color, garment type x
garment type, pattern x pattern) plus the rule weights that combine them.
The tables are plain JSON so they can be regenerated offline; the engine
only ever reads whatever was loaded at startup.

File layout::

    {
      "version": "...",
      "neutral_score": 5,
      "colors":   {"Black": {"White": 10, ...}, ...},
      "types":    {"T-shirt": {"Jeans": 10, ...}, ...},
      "patterns": {"Solid": {"Striped": 9, ...}, ...},
      "rules":    {...}          # see RatingRules
    }

A pair may be listed in one direction only; it is mirrored on load.
Listing both directions with different values is an error. Pairs that are
never listed, and labels that are unknown at lookup time, score
``neutral_score``.
"""

import json
import math
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from config.settings import get_settings
from core.logging import get_logger
from scoring.garments import GarmentAttributes

logger = get_logger(__name__)

DEFAULT_TABLES_PATH = Path(__file__).parent / "data" / "compatibility_tables.json"

MIN_SCORE = 0.0
MAX_SCORE = 10.0
NEUTRAL_SCORE = 5.0


class CompatibilityTableError(ValueError):
    """Raised when a compatibility table cannot be loaded or fails validation."""


def normalize_label(label: Optional[str]) -> str:
    """Case-fold and collapse whitespace so 'T-Shirt ' and 't-shirt' match."""
    return " ".join(str(label or "").split()).casefold()


def round_half_up(value: float, digits: int = 1) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def clamp_score(value: float) -> float:
    return max(MIN_SCORE, min(MAX_SCORE, value))


# =============================================================================
# RULE WEIGHTS
# =============================================================================

class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class PairWeights(_FrozenModel):
    """Weights of the three pair dimensions. Must sum to 1."""
    color: float = Field(0.35, ge=0.0, le=1.0)
    pattern: float = Field(0.25, ge=0.0, le=1.0)
    type: float = Field(0.40, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def check_sum(self):
        total = self.color + self.pattern + self.type
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"pair weights must sum to 1.0 (got {total:.4f})")
        return self

    def combine(self, color: float, pattern: float, type_score: float) -> float:
        return self.color * color + self.pattern * pattern + self.type * type_score


class PatternInteraction(_FrozenModel):
    """How pattern presence bends a weak color score."""
    clash_threshold: float = Field(7.0, ge=MIN_SCORE, le=MAX_SCORE)
    single_pattern_relief: float = Field(0.2, ge=0.0, le=1.0)
    double_pattern_penalty: float = Field(0.1, ge=0.0, le=1.0)


class PairFeedbackThresholds(_FrozenModel):
    strength_min: float = Field(8.0, ge=MIN_SCORE, le=MAX_SCORE)
    feedback_min: float = Field(6.0, ge=MIN_SCORE, le=MAX_SCORE)
    suggestion_below: float = Field(5.0, ge=MIN_SCORE, le=MAX_SCORE)

    @model_validator(mode="after")
    def check_order(self):
        if not self.suggestion_below <= self.feedback_min <= self.strength_min:
            raise ValueError(
                "pair feedback thresholds must satisfy "
                "suggestion_below <= feedback_min <= strength_min"
            )
        return self


class FormalityBucket(_FrozenModel):
    max_variance: Optional[float] = Field(None, ge=0.0)   # None = open-ended
    bonus: float
    kind: Literal["feedback", "suggestion"] = "feedback"
    message: str = ""


_DEFAULT_FORMALITY_BUCKETS = (
    FormalityBucket(max_variance=0.5, bonus=1.0, kind="feedback",
                    message="Excellent formality consistency across the outfit"),
    FormalityBucket(max_variance=1.0, bonus=0.0, kind="feedback",
                    message="Formality levels are well aligned"),
    FormalityBucket(max_variance=1.5, bonus=-0.2, kind="suggestion",
                    message="Formality levels are slightly mismatched"),
    FormalityBucket(max_variance=None, bonus=-0.5, kind="suggestion",
                    message="Mix of formal and casual items - try matching formality levels"),
)


class FormalityRules(_FrozenModel):
    exempt_types: Tuple[str, ...] = ("Underwear",)
    outlier_distance: float = Field(1.5, ge=0.0)
    buckets: Tuple[FormalityBucket, ...] = _DEFAULT_FORMALITY_BUCKETS

    @model_validator(mode="after")
    def check_buckets(self):
        if not self.buckets or self.buckets[-1].max_variance is not None:
            raise ValueError("the last formality bucket must be open-ended (max_variance: null)")
        bounds = [b.max_variance for b in self.buckets[:-1]]
        if any(b is None for b in bounds) or bounds != sorted(bounds):
            raise ValueError("formality bucket bounds must be ascending")
        return self

    def is_exempt(self, garment_type: str) -> bool:
        key = normalize_label(garment_type)
        return any(normalize_label(t) == key for t in self.exempt_types)

    def bucket_for(self, variance: float) -> FormalityBucket:
        for bucket in self.buckets:
            if bucket.max_variance is None or variance <= bucket.max_variance:
                return bucket
        return self.buckets[-1]


class TagRules(_FrozenModel):
    """Ordered tag lists. Order matters: only the first shared tag counts."""
    min_shared: int = Field(2, ge=1)
    occasion_tags: Tuple[str, ...] = (
        "Work/Office", "Formal Event", "Party/Night Out", "Business Casual", "Date Night",
    )
    occasion_bonus: float = 2.0
    style_tags: Tuple[str, ...] = ("Classic", "Minimalist", "Trendy", "Streetwear")
    style_bonus: float = 1.0
    summer_tags: Tuple[str, ...] = ("Summer", "Hot Weather")
    winter_tags: Tuple[str, ...] = ("Winter", "Cold Weather")
    season_penalty: float = 1.0


class ScoreBand(_FrozenModel):
    min_score: float = Field(..., ge=MIN_SCORE, le=MAX_SCORE)
    message: str


_DEFAULT_SCORE_BANDS = (
    ScoreBand(min_score=8.5, message="Excellent outfit!"),
    ScoreBand(min_score=7.0, message="Good outfit - these pieces work well together"),
    ScoreBand(min_score=5.5, message="Decent outfit with some room for improvement"),
    ScoreBand(min_score=0.0, message="This combination could use some improvements"),
)


class RatingRules(_FrozenModel):
    weights: PairWeights = Field(default_factory=PairWeights)
    pattern_interaction: PatternInteraction = Field(default_factory=PatternInteraction)
    pair_feedback: PairFeedbackThresholds = Field(default_factory=PairFeedbackThresholds)
    formality: FormalityRules = Field(default_factory=FormalityRules)
    tags: TagRules = Field(default_factory=TagRules)
    score_bands: Tuple[ScoreBand, ...] = _DEFAULT_SCORE_BANDS

    @model_validator(mode="after")
    def check_bands(self):
        mins = [b.min_score for b in self.score_bands]
        if not mins or mins != sorted(mins, reverse=True) or mins[-1] > MIN_SCORE:
            raise ValueError("score bands must be descending and end at 0")
        return self

    def band_message(self, score: float) -> str:
        for band in self.score_bands:
            if score >= band.min_score:
                return band.message
        return self.score_bands[-1].message


class _TableDocument(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    version: str = "unversioned"
    neutral_score: float = Field(NEUTRAL_SCORE, ge=MIN_SCORE, le=MAX_SCORE)
    colors: Dict[str, Dict[str, float]]
    types: Dict[str, Dict[str, float]]
    patterns: Dict[str, Dict[str, float]]
    rules: RatingRules = Field(default_factory=RatingRules)


# =============================================================================
# MATRICES
# =============================================================================

class CompatibilityMatrix:
    """Symmetric label x label score matrix with a neutral fallback."""

    def __init__(
        self, name: str, labels: Sequence[str], values: np.ndarray,
        neutral_score: float = NEUTRAL_SCORE,
    ) -> None:
        if values.shape != (len(labels), len(labels)):
            raise CompatibilityTableError(
                f"{name}: matrix shape {values.shape} does not match {len(labels)} labels"
            )
        self.name = name
        self._labels = tuple(labels)
        self._index = {normalize_label(label): i for i, label in enumerate(self._labels)}
        self._values = values.astype(float, copy=True)
        self._values.setflags(write=False)
        self._neutral = float(neutral_score)

    @classmethod
    def from_nested(
        cls, name: str, rows: Mapping[str, Mapping[str, float]],
        neutral_score: float = NEUTRAL_SCORE,
    ) -> "CompatibilityMatrix":
        """Build from ``{row_label: {col_label: score}}``, mirroring one-way entries."""
        labels: List[str] = []
        index: Dict[str, int] = {}
        for row, cols in rows.items():
            for label in (row, *cols.keys()):
                key = normalize_label(label)
                if not key:
                    raise CompatibilityTableError(f"{name}: empty label")
                if key not in index:
                    index[key] = len(labels)
                    labels.append(label.strip())

        values = np.full((len(labels), len(labels)), np.nan)
        for row, cols in rows.items():
            i = index[normalize_label(row)]
            for col, raw in cols.items():
                j = index[normalize_label(col)]
                score = float(raw)
                if not MIN_SCORE <= score <= MAX_SCORE:
                    raise CompatibilityTableError(
                        f"{name}: score for ({row}, {col}) must be within "
                        f"[{MIN_SCORE:g}, {MAX_SCORE:g}], got {raw}"
                    )
                for a, b in ((i, j), (j, i)):
                    existing = values[a, b]
                    if not np.isnan(existing) and existing != score:
                        raise CompatibilityTableError(
                            f"{name}: asymmetric entry ({labels[i]}, {labels[j]}): "
                            f"{existing:g} vs {score:g}"
                        )
                    values[a, b] = score

        values[np.isnan(values)] = neutral_score
        return cls(name, labels, values, neutral_score)

    @property
    def labels(self) -> Tuple[str, ...]:
        return self._labels

    def __len__(self) -> int:
        return len(self._labels)

    def __contains__(self, label: object) -> bool:
        return isinstance(label, str) and normalize_label(label) in self._index

    def is_symmetric(self) -> bool:
        return bool(np.array_equal(self._values, self._values.T))

    def lookup(self, a: Optional[str], b: Optional[str]) -> float:
        i = self._index.get(normalize_label(a))
        j = self._index.get(normalize_label(b))
        if i is None or j is None:
            return self._neutral
        return float(self._values[i, j])


class CompatibilityTables:
    """
    Read-only lookup object injected into the rating engine.

    Stateless after construction, safe to share across threads.
    """

    def __init__(
        self,
        colors: CompatibilityMatrix,
        types: CompatibilityMatrix,
        patterns: CompatibilityMatrix,
        rules: Optional[RatingRules] = None,
        neutral_score: float = NEUTRAL_SCORE,
        version: str = "unversioned",
    ) -> None:
        self.colors = colors
        self.types = types
        self.patterns = patterns
        self.rules = rules or RatingRules()
        self.neutral_score = float(neutral_score)
        self.version = version

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def color_affinity(self, a: Optional[str], b: Optional[str]) -> float:
        return self.colors.lookup(a, b)

    def type_affinity(self, a: Optional[str], b: Optional[str]) -> float:
        return self.types.lookup(a, b)

    def pattern_affinity(self, a: Optional[str], b: Optional[str]) -> float:
        return self.patterns.lookup(a, b)

    def color_affinity_multi(self, item_a: GarmentAttributes, item_b: GarmentAttributes) -> float:
        """
        Mean color affinity over the cross product of both garments' colors.

        Rounded to one decimal. Values are summed in sorted order so that
        swapping the two garments cannot change the float result.
        """
        scores = [
            self.color_affinity(ca, cb)
            for ca in item_a.colors
            for cb in item_b.colors
        ]
        if not scores:
            return self.neutral_score
        return round_half_up(sum(sorted(scores)) / len(scores))

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CompatibilityTables":
        try:
            doc = _TableDocument.model_validate(data)
        except ValidationError as e:
            raise CompatibilityTableError(f"Invalid compatibility table: {e}") from e

        neutral = doc.neutral_score
        return cls(
            colors=CompatibilityMatrix.from_nested("colors", doc.colors, neutral),
            types=CompatibilityMatrix.from_nested("types", doc.types, neutral),
            patterns=CompatibilityMatrix.from_nested("patterns", doc.patterns, neutral),
            rules=doc.rules,
            neutral_score=neutral,
            version=doc.version,
        )

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "CompatibilityTables":
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise CompatibilityTableError(f"Cannot read compatibility table {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise CompatibilityTableError(f"Compatibility table {path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise CompatibilityTableError(f"Compatibility table {path} must be a JSON object")
        return cls.from_dict(data)

    def describe(self) -> Dict[str, Any]:
        """Metadata for the API and tooling."""
        return {
            "version": self.version,
            "neutral_score": self.neutral_score,
            "colors": list(self.colors.labels),
            "types": list(self.types.labels),
            "patterns": list(self.patterns.labels),
            "weights": self.rules.weights.model_dump(),
        }


def load_compatibility_tables(path: Optional[Union[str, Path]] = None) -> CompatibilityTables:
    """Load a table file, or the packaged default when ``path`` is None."""
    source = Path(path) if path else DEFAULT_TABLES_PATH
    try:
        tables = CompatibilityTables.from_json_file(source)
    except CompatibilityTableError as e:
        logger.error("Failed to load compatibility tables", path=str(source), error=str(e))
        raise

    logger.info(
        "Loaded compatibility tables",
        path=str(source),
        version=tables.version,
        colors=len(tables.colors),
        types=len(tables.types),
        patterns=len(tables.patterns),
    )
    return tables


@lru_cache(maxsize=1)
def get_compatibility_tables() -> CompatibilityTables:
    """Process-wide tables, loaded once from the configured path."""
    return load_compatibility_tables(get_settings().compatibility_tables_file)
