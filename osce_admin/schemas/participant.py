from datetime import datetime

from pydantic import BaseModel, Field


class ExaminerCreate(BaseModel):
    """Schema for creating an examiner."""

    examiner_id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)


class ExaminerUpdate(BaseModel):
    """Schema for updating an examiner."""

    examiner_id: str | None = Field(None, min_length=1, max_length=50)
    name: str | None = Field(None, min_length=1, max_length=255)


class ExaminerResponse(ExaminerCreate):
    """Schema for examiner response."""

    id: int
    created_at: datetime
    updated_at: datetime


class ExamineeCreate(BaseModel):
    """Schema for creating an examinee."""

    examinee_id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)


class ExamineeUpdate(BaseModel):
    """Schema for updating an examinee."""

    examinee_id: str | None = Field(None, min_length=1, max_length=50)
    name: str | None = Field(None, min_length=1, max_length=255)


class ExamineeResponse(ExamineeCreate):
    """Schema for examinee response."""

    id: int
    created_at: datetime
    updated_at: datetime


class ClientCreate(BaseModel):
    """Schema for creating a standardized client."""

    client_id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)


class ClientUpdate(BaseModel):
    """Schema for updating a standardized client."""

    client_id: str | None = Field(None, min_length=1, max_length=50)
    name: str | None = Field(None, min_length=1, max_length=255)


class ClientResponse(ClientCreate):
    """Schema for standardized client response."""

    id: int
    created_at: datetime
    updated_at: datetime


class ParticipantUploadRecord(BaseModel):
    """A CSV row that was reconciled."""

    row_number: int
    natural_key: str
    name: str


class ParticipantUploadFailure(ParticipantUploadRecord):
    """A CSV row that could not be reconciled, with the reason."""

    reason: str


class ParticipantUploadResponse(BaseModel):
    """Schema for participant CSV upload report."""

    message: str
    total_processed: int
    success_count: int
    failure_count: int
    inserted_count: int
    updated_count: int
    successes: list[ParticipantUploadRecord]
    failures: list[ParticipantUploadFailure]
