from fastapi import APIRouter, HTTPException, status

from osce_admin.dependencies.collections import CollectionsDep
from osce_admin.schemas.administration import StationCreate, StationResponse, StationUpdate

router = APIRouter(prefix="/api/station", tags=["stations"])


@router.post("", response_model=StationResponse, status_code=status.HTTP_201_CREATED)
async def create_station(station: StationCreate, collections: CollectionsDep) -> StationResponse:
    """Create a new station."""
    if not await collections.tracks.find_by_id(station.track_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Track not found")

    document = await collections.stations.insert({"name": station.name.strip(), "track_id": station.track_id})
    return StationResponse.model_validate(document)


@router.get("", response_model=list[StationResponse])
async def list_stations(collections: CollectionsDep, track_id: int | None = None) -> list[StationResponse]:
    """List stations, optionally only those of one track."""
    filter = {"track_id": track_id} if track_id is not None else None
    documents = await collections.stations.find_many(filter)
    return [StationResponse.model_validate(document) for document in documents]


@router.get("/{station_id}", response_model=StationResponse)
async def get_station(station_id: int, collections: CollectionsDep) -> StationResponse:
    """Get station details."""
    document = await collections.stations.find_by_id(station_id)
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Station not found")
    return StationResponse.model_validate(document)


@router.put("/{station_id}", response_model=StationResponse)
async def update_station(station_id: int, station_update: StationUpdate, collections: CollectionsDep) -> StationResponse:
    """Update station."""
    patch = station_update.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in patch:
        patch["name"] = patch["name"].strip()
    if "track_id" in patch and not await collections.tracks.find_by_id(patch["track_id"]):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Track not found")

    document = await collections.stations.update_by_id(station_id, patch)
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Station not found")
    return StationResponse.model_validate(document)


@router.delete("/{station_id}", status_code=status.HTTP_200_OK)
async def delete_station(station_id: int, collections: CollectionsDep) -> dict[str, str]:
    """Delete station."""
    document = await collections.stations.delete_by_id(station_id)
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Station not found")
    return {"message": "Station deleted successfully"}
