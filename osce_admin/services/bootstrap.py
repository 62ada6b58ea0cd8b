"""Service for creating and tearing down the administration / track / station hierarchy."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from osce_admin.config import settings
from osce_admin.schemas.bootstrap import BootstrapTemplate
from osce_admin.services.collections.base import CollectionError, Document
from osce_admin.services.collections.factory import CollectionSet

logger = logging.getLogger(__name__)


class HierarchyCreationFailure(Exception):
    """Raised when a create or update step of the bootstrap fails.

    Entities committed before the failure are left in place.
    """

    pass


@dataclass
class StationSpec:
    name: str


@dataclass
class TrackSpec:
    name: str
    stations: list[StationSpec] = field(default_factory=list)


@dataclass
class AdministrationSpec:
    name: str
    tracks: list[TrackSpec] = field(default_factory=list)


@dataclass
class BootstrapSummary:
    """Counts of entities created by one bootstrap run."""

    administrations: int = 0
    tracks: int = 0
    stations: int = 0
    administration_ids: list[int] = field(default_factory=list)


def _id_suffix(raw_id: str) -> str:
    """Return the part of a template id after its first underscore ("track_3" -> "3")."""
    _, sep, suffix = raw_id.partition("_")
    return suffix if sep else raw_id


def administrations_from_template(template: BootstrapTemplate, year: int | None = None) -> list[AdministrationSpec]:
    """
    Build administration specs from a template, synthesising display names.

    The first administration is the Spring sitting and every later one a Fall sitting;
    track and station numbers come from the suffix of their template ids.

    Args:
        template: Parsed bootstrap template
        year: Year used in names. Defaults to settings.bootstrap_year

    Returns:
        Administration specs in template order
    """
    year = year or settings.bootstrap_year
    specs = []
    for index, admin in enumerate(template.administrations):
        term = "Spring" if index == 0 else "Fall"
        tracks = []
        for track in admin.tracks:
            track_number = _id_suffix(track.track_id)
            tracks.append(
                TrackSpec(
                    name=f"Track {track_number} - {term} {year}",
                    stations=[
                        StationSpec(name=f"Station {_id_suffix(station_id)} - Track {track_number}")
                        for station_id in track.stations
                    ],
                )
            )
        specs.append(AdministrationSpec(name=f"{term} {year} Administration", tracks=tracks))
    return specs


async def _create_stations(collections: CollectionSet, track: Document, stations: Sequence[StationSpec]) -> int:
    # Sibling stations share no state, so they are created as one concurrent batch.
    created = await asyncio.gather(
        *(collections.stations.insert({"name": station.name, "track_id": track["id"]}) for station in stations)
    )
    logger.info(f"Created {len(created)} stations for {track['name']}")
    return len(created)


async def _create_tracks(
    collections: CollectionSet, administration: Document, tracks: Sequence[TrackSpec], summary: BootstrapSummary
) -> None:
    # Tracks are created one at a time so the id list is complete and ordered
    # before the single administration update below.
    track_ids = []
    for track_spec in tracks:
        track = await collections.tracks.insert(
            {"name": track_spec.name, "administration_id": administration["id"]}
        )
        track_ids.append(track["id"])
        summary.tracks += 1
        logger.info(f"Created track: {track['name']} ({track['id']})")
        summary.stations += await _create_stations(collections, track, track_spec.stations)

    # Tracks from earlier runs stay listed ahead of the new ones
    all_track_ids = [*administration.get("track_ids", []), *track_ids]
    await collections.administrations.update_by_id(administration["id"], {"track_ids": all_track_ids})
    logger.info(f"Updated administration {administration['name']} with {len(track_ids)} new tracks")


async def create_hierarchy(collections: CollectionSet, administrations: Sequence[AdministrationSpec]) -> BootstrapSummary:
    """
    Create administrations, their tracks, and the tracks' stations in parent-before-child order.

    Args:
        collections: Collection set to write to
        administrations: Administration specs, created in order

    Returns:
        BootstrapSummary of what was created

    Raises:
        HierarchyCreationFailure: If any create or update fails. Nothing is rolled back.
    """
    summary = BootstrapSummary()
    try:
        for admin_spec in administrations:
            administration = await collections.administrations.insert({"name": admin_spec.name, "track_ids": []})
            summary.administrations += 1
            summary.administration_ids.append(administration["id"])
            logger.info(f"Created administration: {administration['name']} ({administration['id']})")
            await _create_tracks(collections, administration, admin_spec.tracks, summary)
    except CollectionError as e:
        raise HierarchyCreationFailure(f"Failed to create hierarchy: {e}") from e
    return summary


async def fan_out_hierarchy(
    collections: CollectionSet, tracks_per_administration: int = 2, stations_per_track: int = 3
) -> BootstrapSummary:
    """
    Give every existing administration a fixed number of tracks and stations.

    Tracks are named "Track {i} - {administration name}" and stations
    "Station {j} - {track name}", both counting from 1.

    Raises:
        HierarchyCreationFailure: If no administration exists or any create or update fails
    """
    summary = BootstrapSummary()
    try:
        administrations = await collections.administrations.find_many()
        if not administrations:
            raise HierarchyCreationFailure("No administrations found. Please create administrations first.")
        logger.info(f"Found {len(administrations)} administrations")

        for administration in administrations:
            tracks = []
            for i in range(1, tracks_per_administration + 1):
                track_name = f"Track {i} - {administration['name']}"
                tracks.append(
                    TrackSpec(
                        name=track_name,
                        stations=[StationSpec(name=f"Station {j} - {track_name}") for j in range(1, stations_per_track + 1)],
                    )
                )
            summary.administration_ids.append(administration["id"])
            await _create_tracks(collections, administration, tracks, summary)
    except CollectionError as e:
        raise HierarchyCreationFailure(f"Failed to fan out hierarchy: {e}") from e
    summary.administrations = len(summary.administration_ids)
    return summary


async def clear_tracks_and_stations(collections: CollectionSet) -> None:
    """Delete every station and track and empty each administration's track list.

    Administrations themselves are kept. Destructive; callers must opt in explicitly.
    """
    stations = await collections.stations.delete_many()
    tracks = await collections.tracks.delete_many()
    await collections.administrations.update_many({}, {"track_ids": []})
    logger.info(f"Cleared {tracks} tracks and {stations} stations")


async def wipe_all(collections: CollectionSet) -> None:
    """Delete the whole hierarchy and every participant. Destructive; callers must opt in explicitly."""
    # Children before parents
    await collections.stations.delete_many()
    await collections.tracks.delete_many()
    await collections.administrations.delete_many()
    await collections.clients.delete_many()
    await collections.examiners.delete_many()
    await collections.examinees.delete_many()
    logger.info("All existing data cleared")


async def count_entities(collections: CollectionSet) -> dict[str, int]:
    """Return the number of stored documents per collection."""
    return {
        "administrations": await collections.administrations.count(),
        "tracks": await collections.tracks.count(),
        "stations": await collections.stations.count(),
        "clients": await collections.clients.count(),
        "examiners": await collections.examiners.count(),
        "examinees": await collections.examinees.count(),
    }
