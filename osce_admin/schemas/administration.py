from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AdministrationCreate(BaseModel):
    """Schema for creating an administration."""

    name: str = Field(..., min_length=1, max_length=255)


class AdministrationUpdate(BaseModel):
    """Schema for updating an administration.

    track_ids is not writable here; it follows track create, move and delete.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=255)


class AdministrationResponse(BaseModel):
    """Schema for administration response."""

    id: int
    name: str
    track_ids: list[int]
    created_at: datetime
    updated_at: datetime


class TrackCreate(BaseModel):
    """Schema for creating a track."""

    name: str = Field(..., min_length=1, max_length=255)
    administration_id: int


class TrackUpdate(BaseModel):
    """Schema for updating a track."""

    name: str | None = Field(None, min_length=1, max_length=255)
    administration_id: int | None = None


class TrackResponse(BaseModel):
    """Schema for track response."""

    id: int
    name: str
    administration_id: int
    created_at: datetime
    updated_at: datetime


class StationCreate(BaseModel):
    """Schema for creating a station."""

    name: str = Field(..., min_length=1, max_length=255)
    track_id: int


class StationUpdate(BaseModel):
    """Schema for updating a station."""

    name: str | None = Field(None, min_length=1, max_length=255)
    track_id: int | None = None


class StationResponse(BaseModel):
    """Schema for station response."""

    id: int
    name: str
    track_id: int
    created_at: datetime
    updated_at: datetime
