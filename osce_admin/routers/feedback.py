from fastapi import APIRouter, HTTPException, status

from osce_admin.dependencies.collections import CollectionsDep
from osce_admin.schemas.feedback import FeedbackCreate, FeedbackResponse, FeedbackStats, FeedbackUpdate
from osce_admin.utils.statistics_utils import calculate_rating_summary

router = APIRouter(prefix="/api/feedback", tags=["feedback"])


@router.post("", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
async def create_feedback(feedback: FeedbackCreate, collections: CollectionsDep) -> FeedbackResponse:
    """Submit feedback."""
    document = await collections.feedback.insert(feedback.model_dump())
    return FeedbackResponse.model_validate(document)


@router.get("", response_model=list[FeedbackResponse])
async def list_feedback(collections: CollectionsDep) -> list[FeedbackResponse]:
    """List feedback, newest first."""
    documents = await collections.feedback.find_many()
    documents.sort(key=lambda document: (document["created_at"], document["id"]), reverse=True)
    return [FeedbackResponse.model_validate(document) for document in documents]


@router.get("/stats", response_model=FeedbackStats)
async def get_feedback_stats(collections: CollectionsDep) -> FeedbackStats:
    """Get total count, average rating, and rating distribution."""
    documents = await collections.feedback.find_many()
    return FeedbackStats.model_validate(calculate_rating_summary([document["rate"] for document in documents]))


@router.get("/{feedback_id}", response_model=FeedbackResponse)
async def get_feedback(feedback_id: int, collections: CollectionsDep) -> FeedbackResponse:
    """Get feedback details."""
    document = await collections.feedback.find_by_id(feedback_id)
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Feedback not found")
    return FeedbackResponse.model_validate(document)


@router.put("/{feedback_id}", response_model=FeedbackResponse)
async def update_feedback(feedback_id: int, feedback_update: FeedbackUpdate, collections: CollectionsDep) -> FeedbackResponse:
    """Update feedback."""
    patch = feedback_update.model_dump(exclude_unset=True, exclude_none=True)
    if not patch:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No data provided for update")

    document = await collections.feedback.update_by_id(feedback_id, patch)
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Feedback not found")
    return FeedbackResponse.model_validate(document)


@router.delete("/{feedback_id}", status_code=status.HTTP_200_OK)
async def delete_feedback(feedback_id: int, collections: CollectionsDep) -> dict[str, str]:
    """Delete feedback."""
    document = await collections.feedback.delete_by_id(feedback_id)
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Feedback not found")
    return {"message": "Feedback deleted successfully"}
