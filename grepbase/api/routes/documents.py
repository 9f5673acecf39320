"""Document submission and status endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from grepbase.api.dependencies import get_grepbase
from grepbase.models import EatResult
from grepbase.service import Grepbase

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["documents"])


class SourceCountsResponse(BaseModel):
    raw: int
    processed: int
    unprocessed: int


class HealthResponse(BaseModel):
    status: str
    workers_running: bool
    queue_size: int
    in_flight: int


@router.post("/documents", response_model=EatResult, status_code=201)
async def submit_document(
    payload: Dict[str, Any] = Body(..., description="Document to ingest"),
    grepbase: Grepbase = Depends(get_grepbase),
):
    """
    Store a text document in the raw layer and queue it for enrichment.

    Responds immediately; enrichment happens in the background. A document whose
    reference already exists answers 409 unless ``overwrite`` is set.
    """

    result = await grepbase.eat(payload)
    if result.success:
        return result

    status_code = 409 if result.duplicate else 422
    logger.info("Rejected document submission: %s", result.message)
    return JSONResponse(status_code=status_code, content=result.model_dump())


@router.get("/documents/counts", response_model=Dict[str, SourceCountsResponse])
async def document_counts(grepbase: Grepbase = Depends(get_grepbase)) -> Dict[str, SourceCountsResponse]:
    counts = await grepbase.get_document_counts()
    return {
        source: SourceCountsResponse(raw=entry.raw, processed=entry.processed, unprocessed=entry.unprocessed)
        for source, entry in counts.items()
    }


@router.get("/health", response_model=HealthResponse)
async def health(grepbase: Grepbase = Depends(get_grepbase)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        workers_running=grepbase.running,
        queue_size=grepbase.queue.size(),
        in_flight=grepbase.in_flight,
    )
