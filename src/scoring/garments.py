"""
Garment and outfit value objects consumed by the rating engine.

Garments arrive already classified into a category by the wardrobe layer;
nothing here inspects garment types to guess a slot.
"""

import json
from dataclasses import dataclass, field, replace as dc_replace
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

SOLID = "Solid"


class GarmentCategory(Enum):
    """Wardrobe category, used to pick substitution candidates."""
    TOP = "top"
    BOTTOM = "bottom"
    FOOTWEAR = "footwear"
    OUTERWEAR = "outerwear"
    ACCESSORY = "accessory"

    @classmethod
    def parse(cls, value: Any) -> "GarmentCategory":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        if key == "accessories":
            key = "accessory"
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown garment category: {value!r}") from None


def _to_list(val) -> List[str]:
    """Safely convert a value to a list of non-empty strings."""
    if val is None:
        return []
    if isinstance(val, (list, tuple, set, frozenset)):
        return [str(v).strip() for v in val if v and str(v).strip()]
    if isinstance(val, str):
        try:
            parsed = json.loads(val)
            if isinstance(parsed, list):
                return [str(v).strip() for v in parsed if v and str(v).strip()]
        except (json.JSONDecodeError, TypeError):
            pass
        return [val.strip()] if val.strip() else []
    return []


def _first(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


@dataclass(frozen=True)
class GarmentAttributes:
    """Attribute tuple for one garment. Immutable for the duration of a rating."""

    id: str
    category: GarmentCategory
    garment_type: str
    primary_color: str
    secondary_colors: Tuple[str, ...] = ()
    pattern: str = SOLID
    formality_level: Optional[float] = None
    tags: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        # Lists, sets and bare strings all become tuples / frozensets of labels
        object.__setattr__(self, "category", GarmentCategory.parse(self.category))
        object.__setattr__(self, "secondary_colors", tuple(_to_list(self.secondary_colors)))
        object.__setattr__(self, "tags", frozenset(_to_list(self.tags)))
        if not (self.pattern or "").strip():
            object.__setattr__(self, "pattern", SOLID)

    @property
    def colors(self) -> Tuple[str, ...]:
        """Primary color followed by the secondary colors."""
        return (self.primary_color,) + self.secondary_colors

    @property
    def is_patterned(self) -> bool:
        return self.pattern.strip().lower() != SOLID.lower()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GarmentAttributes":
        """Build from a wardrobe record. Accepts snake_case or camelCase keys."""
        formality = _first(data, "formality_level", "formalityLevel")
        return cls(
            id=str(data["id"]),
            category=GarmentCategory.parse(data.get("category")),
            garment_type=str(_first(data, "garment_type", "garmentType", "type", default="Other")),
            primary_color=str(_first(data, "primary_color", "primaryColor", "color", default="Other")),
            secondary_colors=_first(data, "secondary_colors", "secondaryColors", "colors"),
            pattern=str(data.get("pattern") or SOLID),
            formality_level=float(formality) if formality is not None else None,
            tags=data.get("tags"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category.value,
            "garment_type": self.garment_type,
            "primary_color": self.primary_color,
            "secondary_colors": list(self.secondary_colors),
            "pattern": self.pattern,
            "formality_level": self.formality_level,
            "tags": sorted(self.tags),
        }


@dataclass(frozen=True)
class OutfitSelection:
    """
    The garments currently picked for each body slot.

    At most one top, bottom, footwear and outerwear piece, plus any
    number of accessories. Built fresh by the caller for every request.
    """

    top: Optional[GarmentAttributes] = None
    bottom: Optional[GarmentAttributes] = None
    footwear: Optional[GarmentAttributes] = None
    outerwear: Optional[GarmentAttributes] = None
    accessories: Tuple[GarmentAttributes, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "accessories", tuple(self.accessories or ()))

    def garments(self) -> List[GarmentAttributes]:
        """Flatten to a list: top, bottom, footwear, outerwear, accessories."""
        slots = [self.top, self.bottom, self.footwear, self.outerwear]
        return [g for g in slots if g is not None] + list(self.accessories)

    @property
    def is_empty(self) -> bool:
        return not self.garments()

    def contains(self, garment_id: str) -> bool:
        return any(g.id == garment_id for g in self.garments())

    def replace(
        self, target: GarmentAttributes, candidate: GarmentAttributes,
    ) -> "OutfitSelection":
        """Return a copy with ``target`` swapped for ``candidate`` in the same slot."""
        for slot in ("top", "bottom", "footwear", "outerwear"):
            if getattr(self, slot) is target:
                return dc_replace(self, **{slot: candidate})
        accessories = list(self.accessories)
        for idx, accessory in enumerate(accessories):
            if accessory is target:
                accessories[idx] = candidate
                return dc_replace(self, accessories=tuple(accessories))
        raise ValueError(f"Garment {target.id!r} is not part of this outfit")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutfitSelection":
        def _one(key: str) -> Optional[GarmentAttributes]:
            raw = data.get(key)
            return GarmentAttributes.from_dict(raw) if raw else None

        return cls(
            top=_one("top"),
            bottom=_one("bottom"),
            footwear=_one("footwear"),
            outerwear=_one("outerwear"),
            accessories=tuple(
                GarmentAttributes.from_dict(a) for a in (data.get("accessories") or [])
            ),
        )


def wardrobe_from_dicts(records: Iterable[Dict[str, Any]]) -> List[GarmentAttributes]:
    """Convert raw wardrobe records, preserving order."""
    return [GarmentAttributes.from_dict(r) for r in records]
