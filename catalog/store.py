"""Resource store: validated inserts and description lookups.

A ResourceStore owns one pooled engine. Each operation borrows a session
for its own duration, so a single store can be shared between concurrent
callers. There are no retries: a backend failure ends that call.
"""

import logging
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from catalog.db.connection import create_engine, create_session_factory, session_scope
from catalog.db.repositories.resources import ResourceRepository
from catalog.errors import (
    ConnectivityError,
    InsertResult,
    StoreErrorKind,
    is_connectivity_error,
    translate_backend_error,
)
from catalog.models import Resource, ResourcePage

logger = logging.getLogger(__name__)

_BACKEND_ERRORS = (OSError, SQLAlchemyError)


def _check_paging(limit: int, page: int) -> None:
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    if page < 0:
        raise ValueError(f"page must be >= 0, got {page}")


class ResourceStore:
    """Access to the resources table."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_factory = create_session_factory(engine)

    def session(self):
        """Context manager yielding a session from the store's pool."""
        return session_scope(self._session_factory)

    async def ping(self) -> None:
        """Round-trip to the backend; raises ConnectivityError if it is down."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except _BACKEND_ERRORS as e:
            raise ConnectivityError(f"Cannot reach database: {e}") from e

    async def close(self) -> None:
        await self.engine.dispose()

    async def insert(self, resource: Resource) -> InsertResult:
        """Store one resource.

        Never raises for backend problems; the result says whether the row
        was rejected up front (empty url or description) or by the backend.
        No duplicate check is made here, see has_fingerprint().
        """
        if not resource.is_insertable():
            missing = [f for f in ("url", "description") if not getattr(resource, f)]
            logger.info(f"Rejected resource from channel {resource.channel_id}: empty {', '.join(missing)}")
            return InsertResult.failure(
                StoreErrorKind.VALIDATION, f"empty {', '.join(missing)}"
            )

        try:
            async with self.session() as session:
                await ResourceRepository(session).add(resource)
                await session.commit()
        except _BACKEND_ERRORS as e:
            kind = (
                StoreErrorKind.CONNECTIVITY
                if is_connectivity_error(e)
                else StoreErrorKind.QUERY_FAILURE
            )
            logger.error(f"Failed to insert resource {resource.shash}: {e}")
            return InsertResult.failure(kind, str(e))

        logger.debug(f"Inserted resource {resource.shash} ({resource.url})")
        return InsertResult.success()

    async def search(self, term: str, limit: int, page: int) -> List[Resource]:
        """Resources whose description contains term, newest first.

        page is zero-based; page * limit rows are skipped. An empty term
        matches everything.
        """
        _check_paging(limit, page)
        if limit == 0:
            return []
        try:
            async with self.session() as session:
                return await ResourceRepository(session).search(
                    term, limit=limit, offset=page * limit
                )
        except _BACKEND_ERRORS as e:
            raise translate_backend_error(e) from e

    async def sample(self, term: str) -> List[Resource]:
        """A random resource whose description contains term, as a 0-or-1 list."""
        try:
            async with self.session() as session:
                return await ResourceRepository(session).random_match(term)
        except _BACKEND_ERRORS as e:
            raise translate_backend_error(e) from e

    async def count(self, term: str) -> int:
        """Number of resources whose description contains term."""
        try:
            async with self.session() as session:
                return await ResourceRepository(session).count_matching(term)
        except _BACKEND_ERRORS as e:
            raise translate_backend_error(e) from e

    async def search_page(self, term: str, limit: int, page: int) -> ResourcePage:
        """search() plus the match total, so callers know if more pages exist."""
        _check_paging(limit, page)
        total = await self.count(term)
        items = await self.search(term, limit, page)
        return ResourcePage(
            items=items,
            page=page,
            limit=limit,
            total=total,
            has_more=limit > 0 and (page + 1) * limit < total,
        )

    async def has_fingerprint(self, shash: str) -> bool:
        """Whether a resource with this fingerprint is already stored."""
        try:
            async with self.session() as session:
                return await ResourceRepository(session).exists_by_shash(shash)
        except _BACKEND_ERRORS as e:
            raise translate_backend_error(e) from e


async def connect(
    uri: str,
    tls_insecure: Optional[bool] = None,
    pool_size: Optional[int] = None,
    max_overflow: Optional[int] = None,
) -> ResourceStore:
    """Open a store on uri and check that the database answers.

    Raises ConnectivityError if it does not.
    """
    engine = create_engine(
        uri,
        tls_insecure=tls_insecure,
        pool_size=pool_size,
        max_overflow=max_overflow,
    )
    store = ResourceStore(engine)
    try:
        await store.ping()
    except ConnectivityError:
        await engine.dispose()
        raise
    logger.info("Resource store connected")
    return store
