from datetime import datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator


def _as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC so stored and incoming values compare."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _reject_explicit_nulls(model: BaseModel, fields: tuple[str, ...]) -> None:
    for name in fields:
        if name in model.model_fields_set and getattr(model, name) is None:
            raise ValueError(f"{name} cannot be null")


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    id: str
    name: str | None
    email: str
    image: str | None

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Influencer
# ---------------------------------------------------------------------------


class InfluencerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    follower_count: int = Field(..., gt=0)
    engagement_rate: Decimal = Field(..., ge=0, max_digits=5, decimal_places=2)


class InfluencerUpdate(BaseModel):
    """Partial update: only fields present in the payload are applied."""

    name: str | None = Field(default=None, min_length=1, max_length=256)
    follower_count: int | None = Field(default=None, gt=0)
    engagement_rate: Decimal | None = Field(
        default=None, ge=0, max_digits=5, decimal_places=2
    )

    @model_validator(mode="after")
    def reject_nulls(self) -> "InfluencerUpdate":
        _reject_explicit_nulls(self, ("name", "follower_count", "engagement_rate"))
        return self


class InfluencerResponse(BaseModel):
    id: int
    name: str
    follower_count: int
    engagement_rate: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Campaign
# ---------------------------------------------------------------------------


class CampaignCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=256)
    description: str | None = None
    budget: int = Field(..., gt=0)
    start_date: datetime
    end_date: datetime

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class CampaignUpdate(BaseModel):
    """Partial update.

    ``model_fields_set`` marks which fields were sent. ``description`` may be
    sent as null to clear it; every other field must carry a value if present.
    """

    title: str | None = Field(default=None, min_length=1, max_length=256)
    description: str | None = None
    budget: int | None = Field(default=None, gt=0)
    start_date: datetime | None = None
    end_date: datetime | None = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @model_validator(mode="after")
    def reject_nulls(self) -> "CampaignUpdate":
        _reject_explicit_nulls(self, ("title", "budget", "start_date", "end_date"))
        return self


class CampaignResponse(BaseModel):
    id: int
    owner_id: str
    title: str
    description: str | None
    budget: int
    start_date: datetime
    end_date: datetime
    created_at: datetime

    model_config = {"from_attributes": True}


class CampaignDetailResponse(CampaignResponse):
    influencers: list[InfluencerResponse] = []


class AssignInfluencerRequest(BaseModel):
    influencer_id: int
