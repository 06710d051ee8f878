"""Location schemas."""
import re
from typing import Any

from pydantic import BaseModel, Field, field_validator

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class StoreHoursInput(BaseModel):
    """Hours for one day of the week (0 = Sunday)."""

    day_of_week: int = Field(..., ge=0, le=6)
    open_time: str | None = None
    close_time: str | None = None
    is_closed: bool = False

    @field_validator("open_time", "close_time")
    @classmethod
    def validate_time(cls, v: str | None) -> str | None:
        if v is not None and not _TIME_PATTERN.match(v):
            raise ValueError("Time must be HH:MM (24-hour)")
        return v


class StoreHoursResponse(BaseModel):
    id: str
    day_of_week: int
    open_time: str | None = None
    close_time: str | None = None
    is_closed: bool

    @field_validator("is_closed", mode="before")
    @classmethod
    def coerce_bool(cls, v: Any) -> bool:
        return bool(v)

    class Config:
        from_attributes = True


class DistrictSummary(BaseModel):
    id: str
    district_number: str
    district_name: str

    class Config:
        from_attributes = True


class ManagerSummary(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str | None = None
    phone_number: str | None = None
    role: str

    class Config:
        from_attributes = True


class LocationCreate(BaseModel):
    """Request to create a location."""

    store_number: str = Field(..., min_length=1)
    store_name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    phone_number: str | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    google_place_id: str | None = None
    district_id: str | None = None
    store_manager_id: str | None = None
    district_manager_id: str | None = None
    is_active: bool = True
    hours: list[StoreHoursInput] | None = None


class LocationUpdate(BaseModel):
    """Partial update; only fields present in the request are applied."""

    store_number: str | None = Field(None, min_length=1)
    store_name: str | None = Field(None, min_length=1)
    address: str | None = Field(None, min_length=1)
    city: str | None = Field(None, min_length=1)
    state: str | None = Field(None, min_length=1)
    zip_code: str | None = Field(None, min_length=1)
    phone_number: str | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    google_place_id: str | None = None
    district_id: str | None = None
    store_manager_id: str | None = None
    district_manager_id: str | None = None
    is_active: bool | None = None
    hours: list[StoreHoursInput] | None = None


class LocationResponse(BaseModel):
    id: str
    store_number: str
    store_name: str
    address: str
    city: str
    state: str
    zip_code: str
    phone_number: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    google_place_id: str | None = None
    is_active: bool
    created_at: str
    updated_at: str
    district: DistrictSummary | None = None
    store_manager: ManagerSummary | None = None
    district_manager: ManagerSummary | None = None

    @field_validator("is_active", mode="before")
    @classmethod
    def coerce_bool(cls, v: Any) -> bool:
        return bool(v)

    class Config:
        from_attributes = True


class LocationDetail(LocationResponse):
    hours: list[StoreHoursResponse] = []


class LocationListResponse(BaseModel):
    success: bool = True
    data: list[LocationResponse]
    count: int


class LocationDetailResponse(BaseModel):
    success: bool = True
    data: LocationDetail
    message: str | None = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str
