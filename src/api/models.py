"""
Request models for the outfit endpoints.

Bodies accept camelCase (web client) or snake_case keys.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from scoring.garments import SOLID, GarmentAttributes, GarmentCategory, OutfitSelection


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GarmentIn(_CamelModel):
    id: str = Field(..., min_length=1, description="Wardrobe item id")
    category: str = Field(..., description="top, bottom, footwear, outerwear or accessory")
    garment_type: str = Field("Other", description="e.g. T-shirt, Jeans, Sneakers")
    primary_color: str = Field("Other")
    secondary_colors: List[str] = Field(default_factory=list)
    pattern: str = Field(SOLID)
    formality_level: Optional[float] = Field(None, ge=0, le=10)
    tags: List[str] = Field(default_factory=list)

    @field_validator("category")
    @classmethod
    def check_category(cls, v: str) -> str:
        return GarmentCategory.parse(v).value

    def to_attributes(self) -> GarmentAttributes:
        return GarmentAttributes(
            id=self.id,
            category=GarmentCategory.parse(self.category),
            garment_type=self.garment_type,
            primary_color=self.primary_color,
            secondary_colors=tuple(self.secondary_colors),
            pattern=self.pattern,
            formality_level=self.formality_level,
            tags=frozenset(self.tags),
        )


class OutfitIn(_CamelModel):
    top: Optional[GarmentIn] = None
    bottom: Optional[GarmentIn] = None
    footwear: Optional[GarmentIn] = None
    outerwear: Optional[GarmentIn] = None
    accessories: List[GarmentIn] = Field(default_factory=list)

    def to_selection(self) -> OutfitSelection:
        def _one(garment: Optional[GarmentIn]) -> Optional[GarmentAttributes]:
            return garment.to_attributes() if garment else None

        return OutfitSelection(
            top=_one(self.top),
            bottom=_one(self.bottom),
            footwear=_one(self.footwear),
            outerwear=_one(self.outerwear),
            accessories=tuple(a.to_attributes() for a in self.accessories),
        )


class RateOutfitRequest(_CamelModel):
    outfit: OutfitIn


class AlternativesRequest(_CamelModel):
    outfit: OutfitIn
    wardrobe: List[GarmentIn] = Field(default_factory=list, description="The user's garments")
    problematic_item_id: Optional[str] = Field(
        None, description="Garment to replace; detected automatically when omitted",
    )
