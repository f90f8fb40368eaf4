"""Routes for political groups."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from parlascope.database import get_db
from parlascope.models import Chamber, Legislator, PoliticalGroup
from parlascope.serializers import group_to_dict
from parlascope.services.cache_config import CacheTTL
from parlascope.services.cache_service import CacheSection, cache_key, get_or_compute

router = APIRouter(prefix="/groups", tags=["groups"])


async def _list_groups(db: AsyncSession, chamber: Optional[Chamber]) -> list[dict]:
    member_count = (
        select(func.count(Legislator.id))
        .where(Legislator.group_id == PoliticalGroup.id, Legislator.active == True)
        .scalar_subquery()
    )
    statement = (
        select(PoliticalGroup, member_count)
        .where(PoliticalGroup.active == True)
        .order_by(PoliticalGroup.chamber, PoliticalGroup.order, PoliticalGroup.name)
    )
    if chamber is not None:
        statement = statement.where(PoliticalGroup.chamber == chamber.value)

    result = await db.execute(statement)
    return [
        {**group_to_dict(group), "members": members}
        for group, members in result.all()
    ]


@router.get("")
async def list_groups(
    chamber: Optional[Chamber] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    """Active political groups with their number of sitting members."""
    key = cache_key(CacheSection.GROUPS, chamber.value if chamber else "all")
    return {"data": await get_or_compute(db, key, CacheTTL.GROUPS, lambda: _list_groups(db, chamber))}
