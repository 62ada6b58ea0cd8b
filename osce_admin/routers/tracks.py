from fastapi import APIRouter, HTTPException, status

from osce_admin.dependencies.collections import CollectionsDep
from osce_admin.schemas.administration import TrackCreate, TrackResponse, TrackUpdate
from osce_admin.services.collections.base import Document
from osce_admin.services.collections.factory import CollectionSet

router = APIRouter(prefix="/api/track", tags=["tracks"])


async def _get_administration_or_404(collections: CollectionSet, administration_id: int) -> Document:
    administration = await collections.administrations.find_by_id(administration_id)
    if not administration:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Administration not found")
    return administration


async def _attach_track(collections: CollectionSet, administration: Document, track_id: int) -> None:
    track_ids = [*administration["track_ids"], track_id]
    await collections.administrations.update_by_id(administration["id"], {"track_ids": track_ids})


async def _detach_track(collections: CollectionSet, administration_id: int, track_id: int) -> None:
    administration = await collections.administrations.find_by_id(administration_id)
    if administration and track_id in administration["track_ids"]:
        track_ids = [existing for existing in administration["track_ids"] if existing != track_id]
        await collections.administrations.update_by_id(administration_id, {"track_ids": track_ids})


@router.post("", response_model=TrackResponse, status_code=status.HTTP_201_CREATED)
async def create_track(track: TrackCreate, collections: CollectionsDep) -> TrackResponse:
    """Create a new track and append it to its administration's track list."""
    administration = await _get_administration_or_404(collections, track.administration_id)

    document = await collections.tracks.insert({"name": track.name.strip(), "administration_id": administration["id"]})
    await _attach_track(collections, administration, document["id"])
    return TrackResponse.model_validate(document)


@router.get("", response_model=list[TrackResponse])
async def list_tracks(collections: CollectionsDep, administration_id: int | None = None) -> list[TrackResponse]:
    """List tracks, optionally only those of one administration."""
    filter = {"administration_id": administration_id} if administration_id is not None else None
    documents = await collections.tracks.find_many(filter)
    return [TrackResponse.model_validate(document) for document in documents]


@router.get("/{track_id}", response_model=TrackResponse)
async def get_track(track_id: int, collections: CollectionsDep) -> TrackResponse:
    """Get track details."""
    document = await collections.tracks.find_by_id(track_id)
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Track not found")
    return TrackResponse.model_validate(document)


@router.put("/{track_id}", response_model=TrackResponse)
async def update_track(track_id: int, track_update: TrackUpdate, collections: CollectionsDep) -> TrackResponse:
    """Update track. Moving it to another administration moves its id between track lists."""
    existing = await collections.tracks.find_by_id(track_id)
    if not existing:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Track not found")

    patch = track_update.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in patch:
        patch["name"] = patch["name"].strip()

    new_administration = None
    if patch.get("administration_id", existing["administration_id"]) != existing["administration_id"]:
        new_administration = await _get_administration_or_404(collections, patch["administration_id"])

    document = await collections.tracks.update_by_id(track_id, patch)
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Track not found")

    if new_administration is not None:
        await _detach_track(collections, existing["administration_id"], track_id)
        await _attach_track(collections, new_administration, track_id)
    return TrackResponse.model_validate(document)


@router.delete("/{track_id}", status_code=status.HTTP_200_OK)
async def delete_track(track_id: int, collections: CollectionsDep) -> dict[str, str]:
    """Delete track and remove it from its administration's track list. Its stations must be deleted first."""
    document = await collections.tracks.find_by_id(track_id)
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Track not found")

    if await collections.stations.count({"track_id": track_id}):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Track still has stations. Delete its stations first."
        )

    await collections.tracks.delete_by_id(track_id)
    await _detach_track(collections, document["administration_id"], track_id)
    return {"message": "Track deleted successfully"}
