"""Routes for vote analytics: dissent, group cohesion, activity, close ballots."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from parlascope.database import get_db
from parlascope.models import Chamber
from parlascope.serializers import ballot_to_dict, group_to_dict, legislator_summary
from parlascope.services import analytics
from parlascope.services.analytics import Period, period_start
from parlascope.services.cache_config import CacheTTL
from parlascope.services.cache_service import CacheSection, cache_key, get_or_compute

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/dissidents")
async def dissidents(
    period: Period = Query(default=Period.ALL),
    chamber: Optional[Chamber] = Query(default=None),
    limit: int = Query(default=20, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    """Legislators voting most often against their group's majority."""

    async def build() -> list[dict]:
        rows = await analytics.find_dissidents(
            db, period_start(period), chamber.value if chamber else None, limit
        )
        return [
            {
                "legislator": legislator_summary(row.legislator),
                "dissents": row.dissents,
                "total_votes": row.total_votes,
                "dissent_rate": row.rate,
            }
            for row in rows
        ]

    key = cache_key(
        CacheSection.ANALYTICS, "dissidents", period.value, chamber.value if chamber else "all", limit
    )
    return {"data": await get_or_compute(db, key, CacheTTL.ANALYTICS, build)}


@router.get("/groups")
async def groups(
    period: Period = Query(default=Period.ALL),
    chamber: Optional[Chamber] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    """Size and voting cohesion of each active group."""

    async def build() -> list[dict]:
        rows = await analytics.group_cohesion(
            db, period_start(period), chamber.value if chamber else None
        )
        return [
            {
                **group_to_dict(row.group),
                "members": row.members,
                "ballots": row.ballots,
                "votes": row.votes,
                "cohesion": row.cohesion,
            }
            for row in rows
        ]

    key = cache_key(CacheSection.ANALYTICS, "groups", period.value, chamber.value if chamber else "all")
    return {"data": await get_or_compute(db, key, CacheTTL.ANALYTICS, build)}


@router.get("/top-legislators")
async def top_legislators(
    period: Period = Query(default=Period.ALL),
    group: Optional[str] = Query(default=None, description="Political group slug"),
    limit: int = Query(default=15, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    """Legislators who cast the most votes."""
    rows = await analytics.most_active_legislators(db, period_start(period), group, limit)
    return {
        "data": [
            {"legislator": legislator_summary(legislator), "votes": votes}
            for legislator, votes in rows
        ]
    }


@router.get("/controversial")
async def controversial(
    period: Period = Query(default=Period.ALL),
    limit: int = Query(default=10, ge=1, le=30),
    db: AsyncSession = Depends(get_db),
):
    """Most evenly split recent ballots."""
    rows = await analytics.controversial_ballots(db, period_start(period), limit)
    return {
        "data": [
            {**ballot_to_dict(ballot), "controversy": score}
            for ballot, score in rows
        ]
    }
