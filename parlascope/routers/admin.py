"""Back-office routes: candidate management, scoring and moderation."""

import logging
import re
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from parlascope.database import get_db
from parlascope.exceptions import ConflictError, InvalidStateTransitionError, NotFoundError
from parlascope.models import Candidate, IngestionLog, IngestionStatus, Legislator, Position
from parlascope.schemas import (
    CandidateCreate,
    CandidateUpdate,
    LinkLegislatorRequest,
    ValidatePositionRequest,
    pagination_meta,
)
from parlascope.serializers import (
    candidate_to_dict,
    ingestion_log_to_dict,
    legislator_to_dict,
    position_to_dict,
)
from parlascope.services.candidate_scoring import (
    compute_and_store_candidate_scores,
    recalculate_all_candidates,
)
from parlascope.services.cache_service import invalidate_legislator
from parlascope.services.coherence import fetch_positions
from parlascope.services.name_search import fold, search_by_name

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

PUBLISHABLE = {IngestionStatus.READY.value, IngestionStatus.PUBLISHED.value}


def slugify(text: str) -> str:
    """ "Marine Le Pen" -> "marine-le-pen", accents folded."""
    return re.sub(r"[^a-z0-9]+", "-", fold(text)).strip("-")


async def unique_candidate_slug(db: AsyncSession, base: str) -> str:
    slug = base
    suffix = 2
    while (await db.execute(select(Candidate.id).where(Candidate.slug == slug))).first():
        slug = f"{base}-{suffix}"
        suffix += 1
    return slug


async def get_candidate_or_404(db: AsyncSession, candidate_id: int) -> Candidate:
    candidate = await db.get(Candidate, candidate_id)
    if candidate is None:
        raise NotFoundError(f"Candidate {candidate_id} not found")
    return candidate


async def ensure_legislator_free(
    db: AsyncSession, legislator_id: int, candidate_id: Optional[int] = None
) -> None:
    """Raise ConflictError if another candidate is already linked to the legislator."""
    result = await db.execute(
        select(Candidate).where(Candidate.legislator_id == legislator_id)
    )
    linked = result.scalar_one_or_none()
    if linked is not None and linked.id != candidate_id:
        raise ConflictError(
            f"Legislator already linked to candidate '{linked.slug}'",
            details={"candidate_id": linked.id},
        )


@router.get("/candidates")
async def list_candidates(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    status: Optional[IngestionStatus] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    """All candidates, whatever their publication status."""
    conditions = []
    if status is not None:
        conditions.append(Candidate.ingestion_status == status.value)

    total = (await db.execute(select(func.count(Candidate.id)).where(*conditions))).scalar_one()
    result = await db.execute(
        select(Candidate)
        .where(*conditions)
        .order_by(Candidate.last_name, Candidate.first_name)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return {
        "data": [candidate_to_dict(c) for c in result.scalars().all()],
        "meta": pagination_meta(total, page, limit),
    }


@router.post("/candidates", status_code=201)
async def create_candidate(body: CandidateCreate, db: AsyncSession = Depends(get_db)):
    """Create a candidate in ``pending`` status.

    A candidate linked to a legislator on creation is scored from their votes
    right away.
    """
    legislator = None
    if body.legislator_slug:
        result = await db.execute(
            select(Legislator).where(Legislator.slug == body.legislator_slug)
        )
        legislator = result.scalar_one_or_none()
        if legislator is None:
            raise NotFoundError(f"Legislator '{body.legislator_slug}' not found")
        await ensure_legislator_free(db, legislator.id)

    candidate = Candidate(
        slug=await unique_candidate_slug(db, slugify(f"{body.first_name} {body.last_name}")),
        first_name=body.first_name,
        last_name=body.last_name,
        party=body.party,
        photo_url=str(body.photo_url) if body.photo_url else None,
        programme_url=str(body.programme_url) if body.programme_url else None,
        legislator_id=legislator.id if legislator else None,
        ingestion_status=IngestionStatus.PENDING.value,
    )
    db.add(candidate)
    await db.commit()

    if legislator is not None:
        await compute_and_store_candidate_scores(db, candidate.id)

    await db.refresh(candidate, ["legislator"])

    logger.info("Created candidate %s", candidate.slug)
    return {"data": candidate_to_dict(candidate)}


@router.post("/candidates/recalculate-all")
async def recalculate_all(db: AsyncSession = Depends(get_db)):
    """Rescore every active candidate."""
    summary = await recalculate_all_candidates(db)
    logger.info(
        "Recalculated %d candidate(s): %d ok, %d failed",
        summary["processed"], summary["success"], summary["failed"],
    )
    return summary


@router.get("/candidates/{candidate_id}")
async def get_candidate(candidate_id: int, db: AsyncSession = Depends(get_db)):
    """Candidate with every declared position and the latest ingestion runs."""
    candidate = await get_candidate_or_404(db, candidate_id)
    positions = await fetch_positions(db, candidate.id)
    logs = await db.execute(
        select(IngestionLog)
        .where(IngestionLog.candidate_id == candidate.id)
        .order_by(IngestionLog.started_at.desc(), IngestionLog.id.desc())
        .limit(10)
    )
    return {
        "data": {
            **candidate_to_dict(candidate),
            "positions": [position_to_dict(p) for p in positions],
            "ingestion_logs": [ingestion_log_to_dict(log) for log in logs.scalars().all()],
        }
    }


@router.put("/candidates/{candidate_id}")
async def update_candidate(
    candidate_id: int, body: CandidateUpdate, db: AsyncSession = Depends(get_db)
):
    candidate = await get_candidate_or_404(db, candidate_id)

    for field, value in body.model_dump(exclude_unset=True).items():
        if field in ("photo_url", "programme_url") and value is not None:
            value = str(value)
        elif field == "ingestion_status" and value is not None:
            value = IngestionStatus(value).value
        setattr(candidate, field, value)

    await db.commit()
    await db.refresh(candidate, ["legislator"])
    return {"data": candidate_to_dict(candidate)}


@router.post("/candidates/{candidate_id}/recalculate")
async def recalculate_candidate(candidate_id: int, db: AsyncSession = Depends(get_db)):
    """Recompute axis and coherence scores of one candidate."""
    candidate = await get_candidate_or_404(db, candidate_id)
    candidate.ingestion_status = IngestionStatus.PROCESSING.value
    await db.commit()

    result = await compute_and_store_candidate_scores(db, candidate_id)
    return {"data": result.to_dict()}


@router.post("/candidates/{candidate_id}/publish")
async def publish_candidate(candidate_id: int, db: AsyncSession = Depends(get_db)):
    """Make a scored candidate visible to the quiz."""
    candidate = await get_candidate_or_404(db, candidate_id)
    if candidate.ingestion_status not in PUBLISHABLE:
        raise InvalidStateTransitionError(
            f"Candidate is {candidate.ingestion_status}, only scored candidates can be published"
        )

    if candidate.ingestion_status != IngestionStatus.PUBLISHED.value:
        candidate.ingestion_status = IngestionStatus.PUBLISHED.value
        candidate.published_at = datetime.utcnow()
        await db.commit()
        logger.info("Published candidate %s", candidate.slug)

    return {"data": candidate_to_dict(candidate)}


@router.post("/candidates/{candidate_id}/link-legislator")
async def link_legislator(
    candidate_id: int, body: LinkLegislatorRequest, db: AsyncSession = Depends(get_db)
):
    """Attach a sitting legislator, then rescore from their votes."""
    candidate = await get_candidate_or_404(db, candidate_id)
    legislator = await db.get(Legislator, body.legislator_id)
    if legislator is None:
        raise NotFoundError(f"Legislator {body.legislator_id} not found")
    await ensure_legislator_free(db, legislator.id, candidate.id)

    candidate.legislator_id = legislator.id
    await db.commit()

    result = await compute_and_store_candidate_scores(db, candidate_id)
    await db.refresh(candidate, ["legislator"])
    return {"data": {**candidate_to_dict(candidate), **result.to_dict()}}


@router.get("/legislators/search")
async def search_legislators(
    q: str = Query(..., min_length=2, description="Name, typos and missing accents tolerated"),
    limit: int = Query(default=10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    """Find the legislator to link to a candidate."""
    result = await db.execute(select(Legislator).where(Legislator.active == True))
    matches = search_by_name(q, list(result.scalars().all()), lambda legislator: legislator.full_name, limit=limit)
    return {
        "query": q,
        "data": [
            {**legislator_to_dict(legislator), "relevance": round(score, 2)}
            for legislator, score in matches
        ],
    }


@router.post("/legislators/{slug}/invalidate-cache")
async def invalidate_legislator_cache(slug: str, db: AsyncSession = Depends(get_db)):
    """Drop cached profile, statistics and listings after a data correction."""
    result = await db.execute(select(Legislator).where(Legislator.slug == slug))
    legislator = result.scalar_one_or_none()
    if legislator is None:
        raise NotFoundError(f"Legislator '{slug}' not found")

    await invalidate_legislator(db, legislator.id, legislator.slug)
    logger.info("Invalidated cache for legislator %s", slug)
    return {"invalidated": True, "slug": slug}


@router.get("/validation-queue")
async def validation_queue(
    limit: int = Query(default=50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
):
    """Declared positions flagged as contradicting a vote, awaiting review."""
    result = await db.execute(
        select(Position)
        .where(Position.coherent == False)
        .order_by(Position.created_at.desc(), Position.id.desc())
        .limit(limit)
    )
    return {
        "data": [
            {
                **position_to_dict(p),
                "candidate": {"id": p.candidate.id, "slug": p.candidate.slug, "full_name": p.candidate.full_name},
            }
            for p in result.scalars().all()
        ]
    }


@router.post("/positions/{position_id}/validate")
async def validate_position(
    position_id: int, body: ValidatePositionRequest, db: AsyncSession = Depends(get_db)
):
    """Confirm or clear an incoherence flag by hand."""
    position = await db.get(Position, position_id)
    if position is None:
        raise NotFoundError(f"Position {position_id} not found")

    position.coherent = body.coherent
    if body.explanation is not None:
        position.explanation = body.explanation
    elif body.coherent:
        position.explanation = None
    await db.commit()
    return {"data": position_to_dict(position)}


@router.get("/ingestion-logs")
async def ingestion_logs(
    candidate_id: Optional[int] = Query(default=None),
    status: Optional[str] = Query(default=None, description="started, completed or failed"),
    limit: int = Query(default=50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
):
    statement = select(IngestionLog)
    if candidate_id is not None:
        statement = statement.where(IngestionLog.candidate_id == candidate_id)
    if status:
        statement = statement.where(IngestionLog.status == status)

    result = await db.execute(
        statement.order_by(IngestionLog.started_at.desc(), IngestionLog.id.desc()).limit(limit)
    )
    return {"data": [ingestion_log_to_dict(log) for log in result.scalars().all()]}
