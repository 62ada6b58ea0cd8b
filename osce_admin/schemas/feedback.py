from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class FeedbackCreate(BaseModel):
    """Schema for submitting feedback."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    feedback: str = Field(..., min_length=1)
    rate: int = Field(..., ge=1, le=5, strict=True)


class FeedbackUpdate(BaseModel):
    """Schema for updating feedback. Only supplied fields are changed."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    feedback: str | None = Field(None, min_length=1)
    rate: int | None = Field(None, ge=1, le=5, strict=True)


class FeedbackResponse(BaseModel):
    """Schema for feedback response."""

    id: int
    name: str
    email: str
    feedback: str
    rate: int
    created_at: datetime
    updated_at: datetime


class RatingDistribution(BaseModel):
    """Number of feedback entries per rating."""

    rating5: int = 0
    rating4: int = 0
    rating3: int = 0
    rating2: int = 0
    rating1: int = 0


class FeedbackStats(BaseModel):
    """Schema for feedback rating statistics."""

    total_feedbacks: int
    average_rating: float
    rating_distribution: RatingDistribution
