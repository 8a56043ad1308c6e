"""Upload endpoint: thin transport adapter over IngestionService."""

from __future__ import annotations

from typing import Iterator

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import JSONResponse

from loanflow.ingest.session import IngestionService
from loanflow.persistence import open_persistence

router = APIRouter(tags=["upload"])


def get_ingestion_service(request: Request) -> Iterator[IngestionService]:
    """One set of backends per request, released when the response is done."""
    settings = request.app.state.settings
    with open_persistence(settings) as (store, _cache, file_store):
        yield IngestionService(store=store, settings=settings, file_store=file_store)


@router.post("/upload")
def upload_file(
    loan_file: UploadFile | None = File(None, alias="loanFile"),
    service: IngestionService = Depends(get_ingestion_service),
) -> JSONResponse:
    if loan_file is None:
        return JSONResponse(status_code=400, content={"error": "No file uploaded"})

    result = service.ingest(loan_file.file.read(), loan_file.filename or "upload")
    status_code = 200 if result.status == "success" else 400
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))
