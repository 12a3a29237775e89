"""REST API for ingesting, searching and sampling resources."""

import logging
from typing import NoReturn

from fastapi import APIRouter, HTTPException, Query

from catalog.config import settings
from catalog.dependencies import StoreDep
from catalog.errors import (
    ConnectivityError,
    ResourceValidationError,
    StoreError,
    StoreErrorKind,
)
from catalog.models import ChatMessage
from catalog.normalization import build_resource

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resources", tags=["Resources"])

_STATUS_BY_KIND = {
    StoreErrorKind.VALIDATION: 422,
    StoreErrorKind.CONNECTIVITY: 503,
    StoreErrorKind.QUERY_FAILURE: 500,
}


def _raise_store_error(e: StoreError) -> NoReturn:
    logger.error(f"Resource store error: {e}")
    if isinstance(e, ConnectivityError):
        raise HTTPException(status_code=503, detail="Database unavailable") from e
    raise HTTPException(status_code=500, detail="Database query failed") from e


_READ_FIELDS = {"user_id", "channel_id", "url", "description"}


def _serialize(resource) -> dict:
    # shash and type_id are not populated on read
    return resource.model_dump(include=_READ_FIELDS)


@router.get("/")
async def search_resources(
    store: StoreDep,
    q: str = "",
    limit: int = Query(settings.SEARCH_DEFAULT_LIMIT, ge=0, le=settings.SEARCH_MAX_LIMIT),
    page: int = Query(0, ge=0),
):
    """Search resource descriptions, newest first."""
    try:
        result = await store.search_page(q, limit=limit, page=page)
    except StoreError as e:
        _raise_store_error(e)

    return {
        "resources": [_serialize(r) for r in result.items],
        "page": result.page,
        "limit": result.limit,
        "total": result.total,
        "has_more": result.has_more,
    }


@router.get("/random")
async def random_resource(store: StoreDep, q: str = ""):
    """Pick one random resource matching q, if any."""
    try:
        resources = await store.sample(q)
    except StoreError as e:
        _raise_store_error(e)

    return {
        "resources": [_serialize(r) for r in resources],
    }


@router.post("/", status_code=201)
async def ingest_message(message: ChatMessage, store: StoreDep):
    """Build a resource from a chat message and store it."""
    try:
        resource = build_resource(message)
    except ResourceValidationError as e:
        raise HTTPException(
            status_code=422,
            detail={"error": StoreErrorKind.VALIDATION.value, "message": str(e)},
        )

    # Check for duplicates
    if resource.is_insertable():
        try:
            duplicate = await store.has_fingerprint(resource.shash)
        except StoreError as e:
            _raise_store_error(e)
        if duplicate:
            return {"duplicate": True, "shash": resource.shash, "url": resource.url}

    result = await store.insert(resource)
    if not result:
        raise HTTPException(
            status_code=_STATUS_BY_KIND[result.error],
            detail={"error": result.error.value, "message": result.detail},
        )

    return {"duplicate": False, "shash": resource.shash, "url": resource.url}
