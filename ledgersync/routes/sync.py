"""
Sync API endpoints.

The UI records entities through these routes. Single-entity writes go
through the kind's domain service, so the local cache only changes after a
verified remote write. Failed syncs are not HTTP errors: the response is
the SyncOutcome with success=false, mirroring what event subscribers see.
"""

import logging
from typing import Annotated, Dict, Literal

from fastapi import APIRouter, Body, Depends, Path, Query, status

from ledgersync.context import SyncContext
from ledgersync.routes.dependencies import get_sync_context
from ledgersync.schemas.api import BatchUpsertRequest, EntityUpsertRequest
from ledgersync.schemas.entities import EntityKind
from ledgersync.schemas.results import BatchResult, SyncOutcome, VerificationVerdict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sync", tags=["sync"])


@router.post(
    "/push",
    response_model=Dict[str, BatchResult],
    status_code=status.HTTP_200_OK,
    summary="Push every local collection to the remote store",
)
async def push_all(
    context: Annotated[SyncContext, Depends(get_sync_context)],
) -> Dict[str, BatchResult]:
    results = await context.domains.push_all(context.sync)
    return {kind.value: result for kind, result in results.items()}


@router.post(
    "/{kind}",
    response_model=SyncOutcome,
    status_code=status.HTTP_200_OK,
    summary="Create or update one entity",
)
async def upsert_entity(
    context: Annotated[SyncContext, Depends(get_sync_context)],
    kind: Annotated[EntityKind, Path(description="Entity kind")],
    request: Annotated[EntityUpsertRequest, Body()],
) -> SyncOutcome:
    logger.info(f"Upsert request for {kind.value} ({request.intent.value})")
    return await context.domains[kind].save(request.entity, request.intent)


@router.post(
    "/{kind}/batch",
    response_model=BatchResult,
    status_code=status.HTTP_200_OK,
    summary="Save several entities of one kind",
)
async def upsert_batch(
    context: Annotated[SyncContext, Depends(get_sync_context)],
    kind: Annotated[EntityKind, Path(description="Entity kind")],
    request: Annotated[BatchUpsertRequest, Body()],
) -> BatchResult:
    logger.info(f"Batch request for {len(request.entities)} {kind.value} records")
    return await context.domains[kind].save_batch(request.entities, request.intent)


@router.delete(
    "/{kind}/{entity_id}",
    response_model=SyncOutcome,
    status_code=status.HTTP_200_OK,
    summary="Delete one entity (accounts are deactivated)",
)
async def delete_entity(
    context: Annotated[SyncContext, Depends(get_sync_context)],
    kind: Annotated[EntityKind, Path(description="Entity kind")],
    entity_id: Annotated[str, Path(description="Entity identifier")],
) -> SyncOutcome:
    logger.info(f"Delete request for {kind.value} {entity_id}")
    return await context.domains[kind].remove(entity_id)


@router.get(
    "/{kind}/{entity_id}/verify",
    response_model=VerificationVerdict,
    status_code=status.HTTP_200_OK,
    summary="Re-read the remote store for one entity",
)
async def verify_entity(
    context: Annotated[SyncContext, Depends(get_sync_context)],
    kind: Annotated[EntityKind, Path(description="Entity kind")],
    entity_id: Annotated[str, Path(description="Entity identifier")],
    expect: Literal["present", "absent"] = Query("present", description="Expected remote state"),
) -> VerificationVerdict:
    if expect == "absent":
        return await context.sync.verify_deleted(kind, entity_id)
    return await context.sync.verify_exists(kind, entity_id)
