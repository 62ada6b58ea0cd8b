from fastapi import APIRouter, HTTPException, status

from osce_admin.dependencies.collections import CollectionsDep
from osce_admin.schemas.administration import (
    AdministrationCreate,
    AdministrationResponse,
    AdministrationUpdate,
)

router = APIRouter(prefix="/api/administration", tags=["administrations"])


@router.post("", response_model=AdministrationResponse, status_code=status.HTTP_201_CREATED)
async def create_administration(administration: AdministrationCreate, collections: CollectionsDep) -> AdministrationResponse:
    """Create a new administration."""
    name = administration.name.strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name is required and cannot be empty")

    document = await collections.administrations.insert({"name": name, "track_ids": []})
    return AdministrationResponse.model_validate(document)


@router.get("", response_model=list[AdministrationResponse])
async def list_administrations(collections: CollectionsDep) -> list[AdministrationResponse]:
    """List all administrations."""
    documents = await collections.administrations.find_many()
    return [AdministrationResponse.model_validate(document) for document in documents]


@router.get("/{administration_id}", response_model=AdministrationResponse)
async def get_administration(administration_id: int, collections: CollectionsDep) -> AdministrationResponse:
    """Get administration details."""
    document = await collections.administrations.find_by_id(administration_id)
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Administration not found")
    return AdministrationResponse.model_validate(document)


@router.put("/{administration_id}", response_model=AdministrationResponse)
async def update_administration(
    administration_id: int, administration_update: AdministrationUpdate, collections: CollectionsDep
) -> AdministrationResponse:
    """Update administration."""
    patch = administration_update.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in patch:
        patch["name"] = patch["name"].strip()

    document = await collections.administrations.update_by_id(administration_id, patch)
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Administration not found")
    return AdministrationResponse.model_validate(document)


@router.delete("/{administration_id}", status_code=status.HTTP_200_OK)
async def delete_administration(administration_id: int, collections: CollectionsDep) -> dict[str, str]:
    """Delete administration. Its tracks must be deleted first."""
    document = await collections.administrations.find_by_id(administration_id)
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Administration not found")

    if await collections.tracks.count({"administration_id": administration_id}):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Administration still has tracks. Delete its tracks first.",
        )

    await collections.administrations.delete_by_id(administration_id)
    return {"message": "Administration deleted successfully"}
