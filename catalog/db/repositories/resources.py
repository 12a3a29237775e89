"""Repository for catalog resources."""

from typing import List

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.db.models import ResourceRecord
from catalog.db.repositories.base import BaseRepository
from catalog.models import Resource

LIKE_ESCAPE = "\\"


def substring_pattern(term: str) -> str:
    """LIKE pattern matching term anywhere, with wildcards in term escaped."""
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )
    return f"%{escaped}%"


def to_resource(record: ResourceRecord) -> Resource:
    """Rebuild the readable part of a Resource from a row.

    Quotes are stripped from the url; older rows were stored with the
    link wrapped in double quotes.
    """
    return Resource(
        user_id=record.user_id,
        channel_id=record.channel_id,
        url=record.url.replace('"', ""),
        description=record.description,
    )


class ResourceRepository(BaseRepository[ResourceRecord]):
    """Repository for resource inserts and description searches."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ResourceRecord)

    def _matching(self, term: str):
        return ResourceRecord.description.ilike(
            substring_pattern(term), escape=LIKE_ESCAPE
        )

    async def add(self, resource: Resource) -> ResourceRecord:
        """Insert one resource row."""
        return await self.create(
            user_id=resource.user_id,
            channel_id=resource.channel_id,
            url=resource.url,
            description=resource.description,
            type_id=resource.type_id,
            shash=resource.shash,
        )

    async def search(self, term: str, limit: int, offset: int) -> List[Resource]:
        """Resources whose description contains term, newest first."""
        stmt = (
            select(ResourceRecord)
            .where(self._matching(term))
            .order_by(desc(ResourceRecord.id))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [to_resource(r) for r in result.scalars().all()]

    async def random_match(self, term: str) -> List[Resource]:
        """At most one random resource whose description contains term."""
        stmt = (
            select(ResourceRecord)
            .where(self._matching(term))
            .order_by(func.random())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return [to_resource(r) for r in result.scalars().all()]

    async def count_matching(self, term: str) -> int:
        """Number of resources whose description contains term."""
        stmt = (
            select(func.count())
            .select_from(ResourceRecord)
            .where(self._matching(term))
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def exists_by_shash(self, shash: str) -> bool:
        """Check whether a resource with this fingerprint was stored already."""
        stmt = select(ResourceRecord.id).where(ResourceRecord.shash == shash).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None
