import pytest

from osce_admin.models import ParticipantKind
from osce_admin.services.collections.base import CollectionError, StorageUnavailableError
from osce_admin.services.collections.memory_backend import InMemoryCollection
from osce_admin.services.participant_upload import (
    PARTICIPANT_LAYOUTS,
    InvalidInputFormat,
    ParticipantRow,
    RecordReconciliationFailure,
    ensure_csv_media_type,
    ingest_participants,
    iter_csv_rows,
    parse_participant_rows,
    reconcile_participant,
)

EXAMINER = PARTICIPANT_LAYOUTS[ParticipantKind.EXAMINER]
CLIENT = PARTICIPANT_LAYOUTS[ParticipantKind.CLIENT]


def examiner_collection() -> InMemoryCollection:
    return InMemoryCollection("examiners", unique_fields=("examiner_id",), required_fields=("examiner_id", "name"))


class FailingInsertCollection(InMemoryCollection):
    """Rejects inserts for one natural key."""

    def __init__(self, failing_key: str, error: Exception):
        super().__init__("examiners", unique_fields=("examiner_id",))
        self.failing_key = failing_key
        self.error = error

    async def insert(self, fields):
        if fields.get("examiner_id") == self.failing_key:
            raise self.error
        return await super().insert(fields)


async def test_ingest_inserts_new_examiners():
    collection = examiner_collection()
    report = await ingest_participants(
        collection, EXAMINER, b"ExaminerID,Name\nE1,Ann\nE2,Bob\n", "text/csv"
    )

    assert report.total_processed == 2
    assert report.inserted_count == 2
    assert report.updated_count == 0
    assert [row.natural_key for row in report.successes] == ["E1", "E2"]
    assert report.failures == []
    stored = await collection.find_many()
    assert {(doc["examiner_id"], doc["name"]) for doc in stored} == {("E1", "Ann"), ("E2", "Bob")}


async def test_ingest_updates_existing_by_natural_key():
    collection = examiner_collection()
    await collection.insert({"examiner_id": "E1", "name": "Ann"})

    report = await ingest_participants(collection, EXAMINER, b"ExaminerID,Name\nE1,Ann B\nE2,Bob\n", "text/csv")

    assert report.updated_count == 1
    assert report.inserted_count == 1
    assert await collection.count() == 2
    assert (await collection.find_one({"examiner_id": "E1"}))["name"] == "Ann B"


async def test_ingest_same_file_twice_is_idempotent():
    collection = examiner_collection()
    content = b"ExaminerID,Name\nE1,Ann\nE2,Bob\n"

    await ingest_participants(collection, EXAMINER, content, "text/csv")
    second = await ingest_participants(collection, EXAMINER, content, "text/csv")

    assert second.inserted_count == 0
    assert second.updated_count == 2
    assert await collection.count() == 2


async def test_duplicate_key_within_file_last_row_wins():
    collection = examiner_collection()
    report = await ingest_participants(
        collection, EXAMINER, b"ExaminerID,Name\nE1,Ann\nE1,Ann B\nE2,Bob\n", "text/csv"
    )

    assert len(report.successes) == 3
    assert report.failures == []
    assert report.inserted_count == 2
    assert report.updated_count == 1
    stored = {doc["examiner_id"]: doc["name"] for doc in await collection.find_many()}
    assert stored == {"E1": "Ann B", "E2": "Bob"}


async def test_failing_row_does_not_stop_remaining_rows():
    collection = FailingInsertCollection("E2", CollectionError("write rejected"))
    report = await ingest_participants(
        collection, EXAMINER, b"ExaminerID,Name\nE1,Ann\nE2,Bob\nE3,Cat\n", "text/csv"
    )

    assert [row.natural_key for row in report.successes] == ["E1", "E3"]
    assert len(report.failures) == 1
    row, reason = report.failures[0]
    assert row == ParticipantRow(row_number=3, natural_key="E2", name="Bob")
    assert reason == "write rejected"
    assert await collection.count() == 2


async def test_storage_unavailable_aborts_ingestion():
    collection = FailingInsertCollection("E2", StorageUnavailableError("database unreachable"))

    with pytest.raises(StorageUnavailableError):
        await ingest_participants(collection, EXAMINER, b"ExaminerID,Name\nE1,Ann\nE2,Bob\nE3,Cat\n", "text/csv")

    # Rows before the outage stay committed
    assert await collection.count() == 1


async def test_empty_key_and_name_are_row_failures():
    collection = examiner_collection()
    report = await ingest_participants(
        collection, EXAMINER, b"ExaminerID,Name\n,Ann\nE2,\nE3,Cat\n", "text/csv"
    )

    assert [reason for _, reason in report.failures] == ["ExaminerID is required", "Name is required"]
    assert [row.row_number for row, _ in report.failures] == [2, 3]
    assert [row.natural_key for row in report.successes] == ["E3"]


async def test_non_csv_media_type_is_rejected_before_any_write():
    collection = examiner_collection()

    with pytest.raises(InvalidInputFormat):
        await ingest_participants(collection, EXAMINER, b"ExaminerID,Name\nE1,Ann\n", "text/plain")

    assert await collection.count() == 0


async def test_unparseable_file_is_rejected_before_any_write():
    collection = examiner_collection()
    content = b'ExaminerID,Name\nE1,Ann\nE2,"Bob\n'

    with pytest.raises(InvalidInputFormat):
        await ingest_participants(collection, EXAMINER, content, "text/csv")

    assert await collection.count() == 0


async def test_header_only_file_yields_empty_report():
    report = await ingest_participants(examiner_collection(), EXAMINER, b"ExaminerID,Name\n", "text/csv")

    assert report.total_processed == 0
    assert report.successes == []
    assert report.failures == []


@pytest.mark.parametrize(
    "content_type",
    ["text/csv", "text/csv; charset=utf-8", "application/csv", "TEXT/CSV", "application/x-csv"],
)
def test_ensure_csv_media_type_accepts(content_type):
    ensure_csv_media_type(content_type)


@pytest.mark.parametrize("content_type", [None, "", "text/plain", "application/json", "application/vnd.ms-excel"])
def test_ensure_csv_media_type_rejects(content_type):
    with pytest.raises(InvalidInputFormat):
        ensure_csv_media_type(content_type)


def test_iter_csv_rows_normalizes_headers_and_cells():
    content = b"  ExaminerID , NAME \n  E1 ,  Ann  \n"

    assert list(iter_csv_rows(content)) == [(2, {"examinerid": "E1", "name": "Ann"})]


def test_iter_csv_rows_skips_blank_lines_and_empty_rows():
    content = b"ExaminerID,Name\nE1,Ann\n\n,\n  ,  \nE2,Bob\n"

    rows = [(row_number, row["examinerid"]) for row_number, row in iter_csv_rows(content)]

    # Skipped lines still count, so E2 keeps its spreadsheet row
    assert rows == [(2, "E1"), (6, "E2")]


def test_iter_csv_rows_tolerates_utf8_bom():
    content = "\ufeffExaminerID,Name\nE1,Zoë\n".encode("utf-8")

    assert list(iter_csv_rows(content)) == [(2, {"examinerid": "E1", "name": "Zoë"})]


def test_iter_csv_rows_reads_across_chunks():
    lines = ["ExaminerID,Name"] + [f"E{i},Person {i}" for i in range(7)]
    content = "\n".join(lines).encode("utf-8")

    rows = list(iter_csv_rows(content, chunk_size=3))

    assert [row["examinerid"] for _, row in rows] == [f"E{i}" for i in range(7)]
    assert [row_number for row_number, _ in rows] == list(range(2, 9))


def test_iter_csv_rows_empty_file():
    with pytest.raises(InvalidInputFormat, match="empty"):
        list(iter_csv_rows(b""))


def test_iter_csv_rows_invalid_utf8():
    with pytest.raises(InvalidInputFormat):
        list(iter_csv_rows(b"ExaminerID,Name\nE1,\xff\xfe\n"))


def test_parse_participant_rows_ignores_extra_columns_and_defaults_missing():
    rows = list(parse_participant_rows(b"ClientID,Notes\nC1,early\n", CLIENT))

    assert rows == [ParticipantRow(row_number=2, natural_key="C1", name="")]


async def test_failure_row_number_counts_skipped_rows():
    report = await ingest_participants(
        examiner_collection(), EXAMINER, b"ExaminerID,Name\nE1,Ann\n,\nE3,\n", "text/csv"
    )

    assert [(row.row_number, row.natural_key) for row, _ in report.failures] == [(4, "E3")]


async def test_reconcile_participant_raises_for_missing_key():
    with pytest.raises(RecordReconciliationFailure, match="ExaminerID is required"):
        await reconcile_participant(examiner_collection(), EXAMINER, ParticipantRow(2, "", "Ann"))


async def test_reconcile_participant_returns_action():
    collection = examiner_collection()

    assert await reconcile_participant(collection, EXAMINER, ParticipantRow(2, "E1", "Ann")) == "inserted"
    assert await reconcile_participant(collection, EXAMINER, ParticipantRow(3, "E1", "Ann B")) == "updated"
