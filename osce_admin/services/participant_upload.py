"""Service for parsing participant CSV uploads and reconciling them against stored participants."""

import io
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from osce_admin.config import settings
from osce_admin.models import ParticipantKind
from osce_admin.services.collections.base import Collection, CollectionError, StorageUnavailableError

logger = logging.getLogger(__name__)


class InvalidInputFormat(Exception):
    """Raised when an upload is not CSV or cannot be parsed as CSV."""

    pass


class RecordReconciliationFailure(Exception):
    """Raised when a single CSV row cannot be reconciled."""

    pass


@dataclass(frozen=True)
class ParticipantLayout:
    """Where a participant kind's natural key and name live in the CSV and in storage."""

    kind: ParticipantKind
    key_column: str
    key_field: str
    name_column: str = "Name"


PARTICIPANT_LAYOUTS: dict[ParticipantKind, ParticipantLayout] = {
    ParticipantKind.EXAMINER: ParticipantLayout(ParticipantKind.EXAMINER, "ExaminerID", "examiner_id"),
    ParticipantKind.EXAMINEE: ParticipantLayout(ParticipantKind.EXAMINEE, "ExamineeID", "examinee_id"),
    ParticipantKind.CLIENT: ParticipantLayout(ParticipantKind.CLIENT, "ClientID", "client_id"),
}


@dataclass(frozen=True)
class ParticipantRow:
    """One candidate record parsed from a CSV row."""

    row_number: int
    natural_key: str
    name: str


@dataclass
class IngestionReport:
    """Outcome of one ingestion call. Built fresh per call, never persisted."""

    successes: list[ParticipantRow] = field(default_factory=list)
    failures: list[tuple[ParticipantRow, str]] = field(default_factory=list)
    inserted_count: int = 0
    updated_count: int = 0

    @property
    def total_processed(self) -> int:
        return len(self.successes) + len(self.failures)


def ensure_csv_media_type(content_type: str | None) -> None:
    """
    Check that the declared media type of an upload indicates CSV.

    Args:
        content_type: Declared media type, possibly with parameters (e.g. "text/csv; charset=utf-8")

    Raises:
        InvalidInputFormat: If the media type is missing or not a CSV type
    """
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if media_type not in settings.csv_media_types:
        raise InvalidInputFormat(f"Please upload a CSV file (got media type '{content_type or 'unknown'}')")


def _clean_cell(value: Any) -> str:
    if value is None or pd.isna(value):
        return ""
    return str(value).strip()


def iter_csv_rows(file_content: bytes, chunk_size: int | None = None) -> Iterator[tuple[int, dict[str, str]]]:
    """
    Lazily parse CSV bytes into row dicts keyed by lower-cased, trimmed header names.

    Rows are read in pandas chunks so the row count need not be known up front.
    Blank lines and rows whose cells are all empty are not yielded, but they still
    count towards the row numbers of the rows after them.

    Args:
        file_content: Raw upload bytes, UTF-8 encoded (a BOM is tolerated)
        chunk_size: Rows per pandas chunk. Defaults to settings.csv_chunk_size

    Yields:
        (row_number, row) per data row in file order, where row_number is the
        1-based spreadsheet row with the header as row 1

    Raises:
        InvalidInputFormat: If the bytes are not UTF-8 or the CSV cannot be parsed
    """
    try:
        text = file_content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise InvalidInputFormat(f"File is not valid UTF-8 text: {e}") from e

    row_number = 1  # header
    try:
        reader = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
            chunksize=chunk_size or settings.csv_chunk_size,
        )
        with reader:
            for chunk in reader:
                chunk.columns = [str(column).strip().lower() for column in chunk.columns]
                for row in chunk.to_dict(orient="records"):
                    row_number += 1
                    cleaned = {column: _clean_cell(value) for column, value in row.items()}
                    if not any(cleaned.values()):
                        continue
                    yield row_number, cleaned
    except pd.errors.EmptyDataError as e:
        raise InvalidInputFormat("File is empty or contains no data") from e
    except pd.errors.ParserError as e:
        raise InvalidInputFormat(f"Failed to parse CSV file: {e}") from e


def parse_participant_rows(file_content: bytes, layout: ParticipantLayout) -> Iterator[ParticipantRow]:
    """
    Parse CSV bytes into participant rows for one participant kind.

    Unrecognized columns are ignored; a missing recognized column yields an empty value.
    """
    key_column = layout.key_column.lower()
    name_column = layout.name_column.lower()
    for row_number, row in iter_csv_rows(file_content):
        yield ParticipantRow(
            row_number=row_number,
            natural_key=row.get(key_column, ""),
            name=row.get(name_column, ""),
        )


async def reconcile_participant(collection: Collection, layout: ParticipantLayout, row: ParticipantRow) -> str:
    """
    Insert or update one participant by natural key.

    Returns:
        "inserted" or "updated"

    Raises:
        RecordReconciliationFailure: If a required field is empty or the record vanished mid-update
        CollectionError: If the storage write fails
    """
    if not row.natural_key:
        raise RecordReconciliationFailure(f"{layout.key_column} is required")
    if not row.name:
        raise RecordReconciliationFailure(f"{layout.name_column} is required")

    fields = {layout.key_field: row.natural_key, "name": row.name}
    existing = await collection.find_one({layout.key_field: row.natural_key})
    if existing is not None:
        updated = await collection.update_by_id(existing["id"], fields)
        if updated is None:
            raise RecordReconciliationFailure(
                f"{layout.kind.value} '{row.natural_key}' was removed while being updated"
            )
        return "updated"

    await collection.insert(fields)
    return "inserted"


async def ingest_participants(
    collection: Collection,
    layout: ParticipantLayout,
    file_content: bytes,
    content_type: str | None,
) -> IngestionReport:
    """
    Ingest a participant CSV upload into a participant collection.

    The media type is checked and the whole file is parsed before any row is written,
    so a malformed upload does no partial work. Rows are then reconciled one at a time
    in file order; a failing row is recorded in the report and processing continues.

    Args:
        collection: Participant collection to reconcile against
        layout: Column and field mapping of the participant kind
        file_content: Raw upload bytes
        content_type: Declared media type of the upload

    Returns:
        IngestionReport with successes and failures in input order

    Raises:
        InvalidInputFormat: If the upload is not CSV or cannot be parsed
        StorageUnavailableError: If storage cannot be reached; the remaining rows are not processed
    """
    ensure_csv_media_type(content_type)
    rows = list(parse_participant_rows(file_content, layout))

    report = IngestionReport()
    # Rows must be reconciled sequentially: two rows with the same key in one file
    # must see each other's writes.
    for row in rows:
        try:
            action = await reconcile_participant(collection, layout, row)
        except StorageUnavailableError:
            raise
        except (RecordReconciliationFailure, CollectionError) as e:
            reason = str(e) or "Unknown error occurred"
            logger.warning(
                "Participant row failed",
                extra={"kind": layout.kind.value, "row_number": row.row_number, "reason": reason},
            )
            report.failures.append((row, reason))
            continue

        report.successes.append(row)
        if action == "inserted":
            report.inserted_count += 1
        else:
            report.updated_count += 1

    logger.info(
        "Participant CSV processed",
        extra={
            "kind": layout.kind.value,
            "total_processed": report.total_processed,
            "success_count": len(report.successes),
            "failure_count": len(report.failures),
        },
    )
    return report
