"""Pydantic models for Digimon data."""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Digimon(BaseModel):
    """Schema representing a single Digimon record."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(..., min_length=1, description="Digimon name")
    level: str = Field(..., min_length=1, description="Level category (e.g. Rookie, Champion)")
    image_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("img", "image_url"),
        description="URL to the Digimon image",
    )

    @field_validator("name", "level", mode="before")
    @classmethod
    def _strip_text(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("image_url", mode="before")
    @classmethod
    def _blank_image_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class DigimonListResponse(BaseModel):
    """Response schema for a filtered list of Digimon."""

    success: bool = True
    data: list[Digimon]
    count: int = Field(..., description="Number of records after filtering")
    total: int = Field(..., description="Number of records fetched from the source")
    search: str = Field("", description="Name filter as applied")
    level: str = Field("all", description="Level filter as applied")


class DigimonDetailResponse(BaseModel):
    """Response schema for a single Digimon."""

    success: bool = True
    data: Digimon


class LevelListResponse(BaseModel):
    """Response schema for the distinct level categories."""

    success: bool = True
    data: list[str]
    count: int


class RefreshResponse(BaseModel):
    """Response schema for a catalogue refresh."""

    success: bool = True
    total: int


class ErrorResponse(BaseModel):
    """Response schema for errors."""

    success: bool = False
    error: str
    detail: Optional[str] = None
