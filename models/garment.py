"""Structured garment description extracted from an uploaded product photo."""

from __future__ import annotations

from typing import Any, List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

GENDER_LABELS = ("Male", "Female", "Unisex")


class GarmentAnalysis(BaseModel):
    """Garment attributes that condition every generation prompt.

    ``color_palette`` is ordered: index 0 is the primary colour and every later
    entry is a secondary or accent colour. ``uniqueness_level`` holds an
    exhaustive free-text description of patterns, embroidery and
    embellishments rather than a category label.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    garment_type: str = Field(alias="garmentType", min_length=1)
    fabric: str
    color_palette: List[str] = Field(
        alias="colorPalette",
        min_length=1,
        description="Primary color at index 0, followed by all secondary/accent colors.",
    )
    style: str
    gender: Literal["Male", "Female", "Unisex"]
    uniqueness_level: str = Field(
        alias="uniquenessLevel",
        description="Exhaustive description of patterns, embroidery, and unique design elements.",
    )

    @field_validator("color_palette", mode="before")
    @classmethod
    def _clean_palette(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return [str(color).strip() for color in value if color is not None and str(color).strip()]

    @field_validator("gender", mode="before")
    @classmethod
    def _normalise_gender(cls, value: Any) -> Any:
        if isinstance(value, str):
            lookup = {label.lower(): label for label in GENDER_LABELS}
            return lookup.get(value.strip().lower(), value)
        return value

    @property
    def primary_color(self) -> str:
        return self.color_palette[0]

    @property
    def accent_colors(self) -> List[str]:
        return list(self.color_palette[1:])

    def to_wire(self) -> dict:
        """Serialise with the camelCase keys used on the HTTP boundary."""

        return self.model_dump(by_alias=True)


__all__ = ["GENDER_LABELS", "GarmentAnalysis"]
