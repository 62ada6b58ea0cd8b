"""CRUD and CSV upload routes shared by examiners, examinees, and standardized clients."""

from fastapi import APIRouter, File, HTTPException, UploadFile, status
from pydantic import BaseModel

from osce_admin.dependencies.collections import CollectionsDep
from osce_admin.models import ParticipantKind
from osce_admin.schemas.participant import (
    ClientCreate,
    ClientResponse,
    ClientUpdate,
    ExamineeCreate,
    ExamineeResponse,
    ExamineeUpdate,
    ExaminerCreate,
    ExaminerResponse,
    ExaminerUpdate,
    ParticipantUploadFailure,
    ParticipantUploadRecord,
    ParticipantUploadResponse,
)
from osce_admin.services.collections.base import DuplicateKeyError
from osce_admin.services.participant_upload import (
    PARTICIPANT_LAYOUTS,
    InvalidInputFormat,
    IngestionReport,
    ingest_participants,
)


def build_upload_response(report: IngestionReport) -> ParticipantUploadResponse:
    return ParticipantUploadResponse(
        message="CSV processed successfully",
        total_processed=report.total_processed,
        success_count=len(report.successes),
        failure_count=len(report.failures),
        inserted_count=report.inserted_count,
        updated_count=report.updated_count,
        successes=[
            ParticipantUploadRecord(row_number=row.row_number, natural_key=row.natural_key, name=row.name)
            for row in report.successes
        ],
        failures=[
            ParticipantUploadFailure(
                row_number=row.row_number, natural_key=row.natural_key, name=row.name, reason=reason
            )
            for row, reason in report.failures
        ],
    )


def build_participant_router(
    kind: ParticipantKind,
    label: str,
    create_schema: type[BaseModel],
    update_schema: type[BaseModel],
    response_schema: type[BaseModel],
) -> APIRouter:
    """
    Build the router for one participant kind.

    Args:
        kind: Participant kind; selects the collection and CSV layout
        label: Human-readable singular name used in messages (e.g. "Examiner")
        create_schema: Request body schema for create
        update_schema: Request body schema for update
        response_schema: Response schema for a single participant

    Returns:
        APIRouter mounted at /api/<kind>
    """
    layout = PARTICIPANT_LAYOUTS[kind]
    router = APIRouter(prefix=f"/api/{kind.value}", tags=[f"{kind.value}s"])

    async def create_participant(participant: create_schema, collections: CollectionsDep):
        try:
            document = await collections.participants(kind).insert(participant.model_dump())
        except DuplicateKeyError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{label} with {layout.key_field} '{getattr(participant, layout.key_field)}' already exists",
            )
        return response_schema.model_validate(document)

    async def list_participants(collections: CollectionsDep):
        documents = await collections.participants(kind).find_many()
        return [response_schema.model_validate(document) for document in documents]

    async def get_participant(participant_id: int, collections: CollectionsDep):
        document = await collections.participants(kind).find_by_id(participant_id)
        if not document:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
        return response_schema.model_validate(document)

    async def update_participant(participant_id: int, participant_update: update_schema, collections: CollectionsDep):
        patch = participant_update.model_dump(exclude_unset=True, exclude_none=True)
        try:
            document = await collections.participants(kind).update_by_id(participant_id, patch)
        except DuplicateKeyError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{label} with {layout.key_field} '{patch.get(layout.key_field)}' already exists",
            )
        if not document:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
        return response_schema.model_validate(document)

    async def delete_participant(participant_id: int, collections: CollectionsDep) -> dict[str, str]:
        document = await collections.participants(kind).delete_by_id(participant_id)
        if not document:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
        return {"message": f"{label} deleted successfully"}

    async def upload_participants_csv(
        collections: CollectionsDep, file: UploadFile | None = File(None)
    ) -> ParticipantUploadResponse:
        if file is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

        file_content = await file.read()
        try:
            report = await ingest_participants(
                collections.participants(kind), layout, file_content, file.content_type
            )
        except InvalidInputFormat as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        return build_upload_response(report)

    router.add_api_route(
        "/upload-csv",
        upload_participants_csv,
        methods=["POST"],
        response_model=ParticipantUploadResponse,
        summary=f"Upload {label.lower()}s from a CSV file",
    )
    router.add_api_route(
        "",
        create_participant,
        methods=["POST"],
        response_model=response_schema,
        status_code=status.HTTP_201_CREATED,
        summary=f"Create a new {label.lower()}",
    )
    router.add_api_route("", list_participants, methods=["GET"], response_model=list[response_schema])
    router.add_api_route("/{participant_id}", get_participant, methods=["GET"], response_model=response_schema)
    router.add_api_route("/{participant_id}", update_participant, methods=["PUT"], response_model=response_schema)
    router.add_api_route("/{participant_id}", delete_participant, methods=["DELETE"])
    return router


examiner_router = build_participant_router(
    ParticipantKind.EXAMINER, "Examiner", ExaminerCreate, ExaminerUpdate, ExaminerResponse
)
examinee_router = build_participant_router(
    ParticipantKind.EXAMINEE, "Examinee", ExamineeCreate, ExamineeUpdate, ExamineeResponse
)
client_router = build_participant_router(ParticipantKind.CLIENT, "Client", ClientCreate, ClientUpdate, ClientResponse)
