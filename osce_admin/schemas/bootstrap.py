from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TrackTemplate(BaseModel):
    """Track entry of a bootstrap template."""

    model_config = ConfigDict(populate_by_name=True)

    track_id: str = Field(..., alias="trackId", min_length=1)
    stations: list[str] = Field(default_factory=list)


class AdministrationTemplate(BaseModel):
    """Administration entry of a bootstrap template."""

    model_config = ConfigDict(populate_by_name=True)

    admin_id: str = Field(..., alias="adminId", min_length=1)
    tracks: list[TrackTemplate] = Field(default_factory=list)


class BootstrapTemplate(BaseModel):
    """Nested administrations -> tracks -> stations template.

    Accepts either {"administrations": [...]} or a bare list of administration items.
    """

    administrations: list[AdministrationTemplate]

    @model_validator(mode="before")
    @classmethod
    def wrap_bare_list(cls, data: Any) -> Any:
        if isinstance(data, list):
            return {"administrations": data}
        return data
