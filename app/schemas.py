from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.utils.logger import setup_logger

logger = setup_logger("schemas")


# ===== Read models =====


class EntityRead(BaseModel):
    """Fields shared by every stored entity."""

    id: int
    name: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class PromotionRead(EntityRead):
    image_url: str | None = None


class FactionRead(EntityRead):
    image_url: str | None = None


class ChampionshipRead(EntityRead):
    pass


class WrestlerRead(EntityRead):
    image_url: str | None = None
    promotions: list[PromotionRead] = Field(default_factory=list)
    factions: list[FactionRead] = Field(default_factory=list)
    championships: list[ChampionshipRead] = Field(default_factory=list)


class PromotionWithCount(PromotionRead):
    wrestler_count: int = 0


class FactionWithCount(FactionRead):
    wrestler_count: int = 0


class ChampionshipWithCount(ChampionshipRead):
    wrestler_count: int = 0


# ===== Write models =====


class EntityForm(BaseModel):
    """Create/update payload for promotions, factions and championships.

    ``image_data`` is a base64 data URL produced by the browser; when present
    it is uploaded and replaces ``image_url``.
    """

    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    image_url: str | None = Field(default=None, description="Existing image URL")
    image_data: str | None = Field(
        default=None, description="Base64 data URL of a newly selected image"
    )

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class WrestlerForm(EntityForm):
    promotions: list[int] = Field(default_factory=list, description="Promotion ids")
    factions: list[int] = Field(default_factory=list, description="Faction ids")
    championships: list[int] = Field(
        default_factory=list, description="Championship ids"
    )


# ===== Misc responses =====


class FilterOptions(BaseModel):
    promotions: list[str] = Field(default_factory=list)
    factions: list[str] = Field(default_factory=list)
    championships: list[str] = Field(default_factory=list)


class CapabilitiesResponse(BaseModel):
    image_columns: dict[str, bool]
    image_uploads_enabled: bool


class ImageUploadResponse(BaseModel):
    url: str
    filename: str | None = None


class MessageResponse(BaseModel):
    message: str = Field(..., description="Response message")
