"""Pydantic models for Places."""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)


class PlaceCategory(str, Enum):
    """Place categories."""
    RESTAURANT = "RESTAURANT"
    BAR = "BAR"
    CAFE = "CAFE"


class OpeningHoursPeriod(BaseModel):
    """A single open/close interval within one weekday.

    Closing fields stay at 0 when the provider gave no close time.
    """
    model_config = ConfigDict(populate_by_name=True)

    open_hour: int = Field(0, alias="openingHour")
    open_minute: int = Field(0, alias="openingMinute")
    close_hour: int = Field(0, alias="closingHour")
    close_minute: int = Field(0, alias="closingMinute")


class Place(BaseModel):
    """A tracked venue, as stored and as returned to clients."""
    model_config = ConfigDict(populate_by_name=True)

    place_id: UUID = Field(..., alias="placeId")
    name: str
    cuisine: Optional[str] = None
    category: Optional[PlaceCategory] = Field(None, alias="type")
    location_text: Optional[str] = Field(None, alias="location")
    influence_text: Optional[str] = Field(None, alias="influence")
    notes: Optional[str] = None
    rating: Optional[float] = None
    website: Optional[str] = None
    social_media: Optional[str] = Field(None, alias="socialMedia")
    visited: Optional[bool] = None

    # Provider-enriched
    provider_id: Optional[str] = Field(None, alias="googlePlaceId")
    full_address: Optional[str] = Field(None, alias="fullAddress")
    is_permanently_closed: Optional[bool] = Field(None, alias="isPermanentlyClosed")
    opening_hours: Dict[str, List[OpeningHoursPeriod]] = Field(
        default_factory=dict, alias="openingHours"
    )

    created_at: Optional[datetime] = Field(None, alias="createdDateTime")
    last_updated_at: Optional[datetime] = Field(None, alias="lastUpdatedDateTime")


class ProviderPeriodPoint(BaseModel):
    """Day/time point of a provider schedule (day: 0=Sunday..6=Saturday)."""
    day: int
    hour: int = 0
    minute: int = 0


class ProviderPeriod(BaseModel):
    """Raw provider period; ``close`` is absent for always-open places."""
    open: ProviderPeriodPoint
    close: Optional[ProviderPeriodPoint] = None


class ProviderDetails(BaseModel):
    """Raw place details returned by the provider for one enrichment call."""
    name: Optional[str] = None
    provider_id: Optional[str] = None
    formatted_address: Optional[str] = None
    phone_number: Optional[str] = None
    website: Optional[str] = None
    business_status: Optional[str] = None
    periods: Optional[List[ProviderPeriod]] = None
    open_now: Optional[bool] = None
    types: List[str] = Field(default_factory=list)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "ProviderDetails":
        """Map a Places API v1 place resource onto ProviderDetails."""
        display_name = payload.get("displayName")
        if isinstance(display_name, dict):
            name = display_name.get("text")
        else:
            name = payload.get("name")

        periods = None
        opening_hours = payload.get("regularOpeningHours")
        if isinstance(opening_hours, dict):
            periods = [
                ProviderPeriod.model_validate(period)
                for period in opening_hours.get("periods") or []
                if period.get("open")
            ]

        return cls(
            name=name,
            provider_id=payload.get("id"),
            formatted_address=payload.get("formattedAddress"),
            phone_number=payload.get("nationalPhoneNumber"),
            website=payload.get("websiteUri"),
            business_status=payload.get("businessStatus"),
            periods=periods,
            open_now=(opening_hours or {}).get("openNow"),
            types=payload.get("types") or [],
        )


class AddPlaceRequest(BaseModel):
    """Request model for adding a place. ``type`` and ``visited`` are free text."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, description="Place name")
    cuisine: Optional[str] = None
    category: Optional[str] = Field(None, alias="type", description="Place category name")
    location_text: Optional[str] = Field(None, alias="location")
    influence_text: Optional[str] = Field(None, alias="influence")
    visited: Optional[Union[bool, str]] = Field(None, description="'true' or 'false'")
    notes: Optional[str] = None
    website: Optional[str] = None
    social_media: Optional[str] = Field(None, alias="socialMedia")
    rating: Optional[float] = None
    provider_id: Optional[str] = Field(None, alias="googlePlaceId")


class UpdatePlaceRequest(BaseModel):
    """Partial update; only fields present in the body are applied."""
    rating: Optional[float] = None
    notes: Optional[str] = None


class RefreshPlacesResponse(BaseModel):
    """Result of a bulk refresh."""
    refreshed: List[Place]
    failed: Dict[str, str] = Field(default_factory=dict)
