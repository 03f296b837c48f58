"""Bootcamp API endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..auth.auth import Caller, require_publisher
from ..models.documents import Bootcamp
from ..models.schemas import (
    BootcampCreate,
    BootcampUpdate,
    BootcampResponse,
    BootcampEnvelope,
    BootcampListEnvelope,
    BootcampStatsEnvelope,
    DeletedEnvelope,
    ErrorResponse,
)
from ..services.advanced_results import (
    ListQuery,
    ListQueryError,
    advanced_results,
    field_types,
    parse_list_query,
)
from ..services.bootcamps import (
    BootcampError,
    create_bootcamp,
    delete_bootcamp,
    get_bootcamp,
    get_bootcamp_stats,
    update_bootcamp,
)

router = APIRouter(prefix="/api/v1/bootcamps", tags=["bootcamps"])

LISTABLE_FIELDS = field_types(Bootcamp)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    401: {"model": ErrorResponse, "description": "Not authenticated, or not the bootcamp owner"},
    403: {"model": ErrorResponse, "description": "Role not allowed"},
    404: {"model": ErrorResponse, "description": "Bootcamp not found"},
}


def list_query(
    request: Request,
    select: Optional[str] = Query(None, description="Comma-separated fields to return"),
    sort: Optional[str] = Query(None, description="Comma-separated sort fields, '-' for descending"),
    page: int = Query(1, description="Page number, from 1"),
    limit: Optional[int] = Query(None, description="Page size"),
) -> ListQuery:
    """Parse filter, projection, sort and paging parameters for listings."""
    try:
        return parse_list_query(
            request.query_params.multi_items(),
            LISTABLE_FIELDS,
            select=select,
            sort=sort,
            page=page,
            limit=limit,
        )
    except ListQueryError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get(
    "/stat",
    response_model=BootcampStatsEnvelope,
    summary="Bootcamp statistics",
    description="Career counts grouped by job assistance, job guarantee and housing",
)
async def bootcamp_stats():
    return BootcampStatsEnvelope(data=await get_bootcamp_stats())


@router.get(
    "",
    response_model=BootcampListEnvelope,
    responses={400: ERROR_RESPONSES[400]},
    summary="List bootcamps",
)
async def list_bootcamps(query: ListQuery = Depends(list_query)):
    """Filtered, sorted and paginated bootcamps."""
    return await advanced_results(Bootcamp, query)


@router.get(
    "/{bootcamp_id}",
    response_model=BootcampEnvelope,
    responses={404: ERROR_RESPONSES[404]},
    summary="Get a bootcamp",
)
async def read_bootcamp(bootcamp_id: str):
    try:
        bootcamp = await get_bootcamp(bootcamp_id)
    except BootcampError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return BootcampEnvelope(data=BootcampResponse.from_document(bootcamp))


@router.post(
    "",
    response_model=BootcampEnvelope,
    status_code=201,
    responses={k: ERROR_RESPONSES[k] for k in (400, 401, 403)},
    summary="Create a bootcamp",
    description="Non-admin publishers may own a single bootcamp",
)
async def add_bootcamp(
    data: BootcampCreate,
    caller: Caller = Depends(require_publisher()),
):
    try:
        bootcamp = await create_bootcamp(data, caller)
    except BootcampError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return BootcampEnvelope(data=BootcampResponse.from_document(bootcamp))


@router.put(
    "/{bootcamp_id}",
    response_model=BootcampEnvelope,
    responses=ERROR_RESPONSES,
    summary="Update a bootcamp",
    description="Only the owner or an admin may update a bootcamp",
)
async def edit_bootcamp(
    bootcamp_id: str,
    data: BootcampUpdate,
    caller: Caller = Depends(require_publisher()),
):
    try:
        bootcamp = await update_bootcamp(bootcamp_id, data, caller)
    except BootcampError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return BootcampEnvelope(data=BootcampResponse.from_document(bootcamp))


@router.delete(
    "/{bootcamp_id}",
    response_model=DeletedEnvelope,
    responses={k: ERROR_RESPONSES[k] for k in (401, 403, 404)},
    summary="Delete a bootcamp",
    description="Only the owner or an admin may delete a bootcamp",
)
async def remove_bootcamp(
    bootcamp_id: str,
    caller: Caller = Depends(require_publisher()),
):
    try:
        await delete_bootcamp(bootcamp_id, caller)
    except BootcampError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return DeletedEnvelope()
