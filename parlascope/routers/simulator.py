"""Routes for the political quiz ("simulateur").

Flow: ``/start`` returns a session token and the questions, ``/answer`` is
called once per question, ``/complete`` scores the answers and returns the
ranked candidates.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parlascope.database import get_db
from parlascope.exceptions import NotFoundError
from parlascope.models import Candidate, IngestionStatus, SessionStatus
from parlascope.schemas import (
    AnswerRequest,
    CompleteRequest,
    StartSessionRequest,
    parse_slug_list,
)
from parlascope.serializers import candidate_to_dict, position_to_dict, question_to_dict
from parlascope.services import simulator
from parlascope.services.axes import AXES, AXIS_LABELS, AXIS_POLARITY
from parlascope.services.coherence import fetch_positions

router = APIRouter(prefix="/simulator", tags=["simulator"])

MIN_COMPARE = 2
MAX_COMPARE = 4


async def get_published_candidate(db: AsyncSession, slug: str) -> Candidate:
    result = await db.execute(
        select(Candidate).where(
            Candidate.slug == slug,
            Candidate.active == True,
            Candidate.ingestion_status == IngestionStatus.PUBLISHED.value,
        )
    )
    candidate = result.scalar_one_or_none()
    if candidate is None:
        raise NotFoundError(f"Candidate '{slug}' not found")
    return candidate


@router.post("/start")
async def start(body: StartSessionRequest, db: AsyncSession = Depends(get_db)):
    """Open a quiz session."""
    session = await simulator.start_session(
        db, age_bracket=body.age_bracket, situation=body.situation, location=body.location
    )
    questions = await simulator.get_active_questions(db)
    return {
        "session_token": session.token,
        "questions": [question_to_dict(q) for q in questions],
    }


@router.post("/answer")
async def answer(body: AnswerRequest, db: AsyncSession = Depends(get_db)):
    """Record (or replace) the answer to one question."""
    saved = await simulator.submit_answer(
        db,
        body.session_token,
        body.question_id,
        body.answer,
        response_time_ms=body.response_time_ms,
    )
    session = await simulator.get_session(db, body.session_token)
    return {
        "saved": True,
        "question_id": saved.question_id,
        "answered": await simulator.count_answers(db, session),
    }


@router.post("/complete")
async def complete(body: CompleteRequest, db: AsyncSession = Depends(get_db)):
    """Score the session and rank the published candidates."""
    return await simulator.run_quiz_completion(db, body.session_token)


@router.get("/session/{token}")
async def get_session(token: str, db: AsyncSession = Depends(get_db)):
    """Progress of a session, with its results once complete."""
    session = await simulator.get_session(db, token)
    payload = {
        "session_token": session.token,
        "status": session.status,
        "answered": await simulator.count_answers(db, session),
        "created_at": session.created_at.isoformat() if session.created_at else None,
    }

    if session.status == SessionStatus.COMPLETE.value:
        results = await simulator.get_session_results(db, session)
        payload.update({
            "completed_at": session.completed_at.isoformat() if session.completed_at else None,
            "profile": session.profile,
            "scores": session.axis_scores,
            "priorities": session.priorities,
            "axis_labels": AXIS_LABELS,
            "results": [
                {
                    "candidate_id": r.candidate_id,
                    "candidate": simulator.candidate_summary(r.candidate),
                    "match_score": r.match_score,
                    "per_axis_similarity": r.axis_similarity,
                    "strengths": r.strengths,
                    "divergences": r.divergences,
                }
                for r in results
            ],
        })
    return payload


@router.get("/questions")
async def list_questions(db: AsyncSession = Depends(get_db)):
    """Active questions and the meaning of both ends of each axis."""
    questions = await simulator.get_active_questions(db)
    return {
        "data": [question_to_dict(q) for q in questions],
        "axes": [
            {
                "key": axis,
                "label": AXIS_LABELS[axis],
                "negative": AXIS_POLARITY[axis][0],
                "positive": AXIS_POLARITY[axis][1],
            }
            for axis in AXES
        ],
    }


@router.get("/candidates")
async def list_candidates(db: AsyncSession = Depends(get_db)):
    """Published candidates with their axis scores."""
    candidates = await simulator.get_published_candidates(db)
    return {
        "data": [candidate_to_dict(c) for c in sorted(candidates, key=lambda c: c.last_name)],
        "axis_labels": AXIS_LABELS,
    }


@router.get("/candidates/{slug}")
async def get_candidate(slug: str, db: AsyncSession = Depends(get_db)):
    """Published candidate with declared positions."""
    candidate = await get_published_candidate(db, slug)
    positions = await fetch_positions(db, candidate.id)
    return {
        "data": {
            **candidate_to_dict(candidate),
            "positions": [position_to_dict(p) for p in positions],
        },
        "axis_labels": AXIS_LABELS,
    }


@router.get("/compare")
async def compare_candidates(
    candidates: str = Query(..., description="Comma-separated slugs, 2 to 4"),
    db: AsyncSession = Depends(get_db),
):
    """Axis scores of several published candidates side by side."""
    entries = [
        candidate_to_dict(await get_published_candidate(db, slug))
        for slug in parse_slug_list(candidates, MIN_COMPARE, MAX_COMPARE)
    ]
    return {"data": entries, "axis_labels": AXIS_LABELS}


@router.get("/stats")
async def stats(db: AsyncSession = Depends(get_db)):
    return await simulator.simulator_stats(db)
