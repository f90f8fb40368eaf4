"""Quiz session lifecycle: start, answer, complete.

A session is ``in_progress`` until completion, then ``complete``. Completing
computes the user's axis vector and profile and stores one match result per
published candidate; answers are rejected from then on. Completing twice
recomputes and overwrites the stored results.
"""

import logging
import secrets
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from parlascope.exceptions import BadRequestError, InvalidStateTransitionError, NotFoundError
from parlascope.models import (
    Answer,
    Candidate,
    IngestionStatus,
    MatchResult,
    Question,
    QuizSession,
    SessionStatus,
)
from parlascope.services.axes import AXIS_LABELS, AxisScores
from parlascope.services.quiz_matcher import (
    AnsweredQuestion,
    answer_error,
    calculate_user_scores,
    determine_profile,
    rank_candidates,
)

logger = logging.getLogger(__name__)


def generate_session_token() -> str:
    """Opaque, URL-safe 32-character token."""
    return secrets.token_urlsafe(24)


async def get_active_questions(db: AsyncSession) -> list[Question]:
    result = await db.execute(
        select(Question).where(Question.active == True).order_by(Question.order)
    )
    return list(result.scalars().all())


async def start_session(
    db: AsyncSession,
    age_bracket: Optional[str] = None,
    situation: Optional[str] = None,
    location: Optional[str] = None,
) -> QuizSession:
    session = QuizSession(
        token=generate_session_token(),
        status=SessionStatus.IN_PROGRESS.value,
        age_bracket=age_bracket,
        situation=situation,
        location=location,
    )
    db.add(session)
    await db.commit()
    return session


async def get_session(db: AsyncSession, token: str) -> QuizSession:
    result = await db.execute(select(QuizSession).where(QuizSession.token == token))
    session = result.scalar_one_or_none()
    if session is None:
        raise NotFoundError("Quiz session not found")
    return session


async def submit_answer(
    db: AsyncSession,
    token: str,
    question_id: int,
    value: dict[str, Any],
    response_time_ms: Optional[int] = None,
) -> Answer:
    """Record an answer, replacing any previous answer to the same question.

    Raises:
        NotFoundError: unknown session token or question
        InvalidStateTransitionError: the session is already complete
        BadRequestError: the value does not fit the question type
    """
    session = await get_session(db, token)
    if session.status == SessionStatus.COMPLETE.value:
        raise InvalidStateTransitionError("Quiz session already completed")

    question = await db.get(Question, question_id)
    if question is None:
        raise NotFoundError(f"Question {question_id} not found")

    problem = answer_error(question.type, value)
    if problem:
        raise BadRequestError(problem, details={"question_id": question.id, "type": question.type})

    result = await db.execute(
        select(Answer).where(Answer.session_id == session.id, Answer.question_id == question_id)
    )
    answer = result.scalar_one_or_none()
    if answer is None:
        answer = Answer(session_id=session.id, question_id=question_id)
        db.add(answer)

    answer.value = value
    answer.response_time_ms = response_time_ms
    await db.commit()
    return answer


async def get_published_candidates(db: AsyncSession) -> list[Candidate]:
    result = await db.execute(
        select(Candidate).where(
            Candidate.active == True,
            Candidate.ingestion_status == IngestionStatus.PUBLISHED.value,
        )
    )
    return list(result.scalars().all())


async def _upsert_result(db: AsyncSession, session_id: int, match) -> None:
    result = await db.execute(
        select(MatchResult).where(
            MatchResult.session_id == session_id,
            MatchResult.candidate_id == match.candidate_id,
        )
    )
    row = result.scalar_one_or_none()
    if row is None:
        row = MatchResult(session_id=session_id, candidate_id=match.candidate_id)
        db.add(row)

    row.match_score = match.match_score
    row.axis_similarity = match.axis_similarity
    row.strengths = match.strengths
    row.divergences = match.divergences


def candidate_summary(candidate: Candidate) -> dict:
    return {
        "id": candidate.id,
        "slug": candidate.slug,
        "first_name": candidate.first_name,
        "last_name": candidate.last_name,
        "party": candidate.party,
        "photo_url": candidate.photo_url,
        "coherence_score": candidate.coherence_score,
    }


async def run_quiz_completion(db: AsyncSession, token: str) -> dict:
    """Score the session's answers and match them against published candidates.

    Returns:
        Dict with the profile label, the user's scores, axis labels and the
        per-candidate results sorted by descending match score

    Raises:
        NotFoundError: unknown session token
    """
    session = await get_session(db, token)

    rows = await db.execute(
        select(Question.type, Question.axis_weights, Question.citation_score, Answer.value)
        .join(Question, Answer.question_id == Question.id)
        .where(Answer.session_id == session.id)
    )
    answered = [
        AnsweredQuestion(
            type=qtype,
            axis_weights=axis_weights or {},
            value=value or {},
            citation_score=citation_score,
        )
        for qtype, axis_weights, citation_score, value in rows.all()
    ]
    user = calculate_user_scores(answered)
    profile = determine_profile(user.scores)

    candidates = await get_published_candidates(db)
    by_id = {c.id: c for c in candidates}
    matches = rank_candidates(
        user, [(c.id, AxisScores.from_candidate(c)) for c in candidates]
    )

    for match in matches:
        await _upsert_result(db, session.id, match)

    session.status = SessionStatus.COMPLETE.value
    session.completed_at = datetime.utcnow()
    session.profile = profile
    session.axis_scores = user.scores.to_dict()
    session.priorities = dict(user.priorities)
    await db.commit()

    logger.info(
        "Quiz session %s completed: %s, %d candidate(s) matched",
        session.id, profile, len(matches),
    )

    return {
        "profile": profile,
        "scores": user.scores.to_dict(),
        "priorities": dict(user.priorities),
        "axis_labels": AXIS_LABELS,
        "results": [
            {
                "candidate_id": m.candidate_id,
                "candidate": candidate_summary(by_id[m.candidate_id]),
                "match_score": m.match_score,
                "per_axis_similarity": m.axis_similarity,
                "strengths": m.strengths,
                "divergences": m.divergences,
            }
            for m in matches
        ],
        "sorted_descending": True,
    }


async def simulator_stats(db: AsyncSession) -> dict:
    """Session counts, completion rate and distribution of profiles."""
    total = (await db.execute(select(func.count(QuizSession.id)))).scalar_one()
    completed = (
        await db.execute(
            select(func.count(QuizSession.id)).where(
                QuizSession.status == SessionStatus.COMPLETE.value
            )
        )
    ).scalar_one()

    result = await db.execute(
        select(QuizSession.profile, func.count(QuizSession.id))
        .where(
            QuizSession.status == SessionStatus.COMPLETE.value,
            QuizSession.profile.is_not(None),
        )
        .group_by(QuizSession.profile)
    )
    profiles = sorted(
        ({"profile": profile, "count": count} for profile, count in result.all()),
        key=lambda p: p["count"],
        reverse=True,
    )

    return {
        "total_sessions": total,
        "completed_sessions": completed,
        "completion_rate": round(completed / total * 100) if total else 0,
        "profiles": profiles,
    }


async def get_session_results(db: AsyncSession, session: QuizSession) -> list[MatchResult]:
    result = await db.execute(
        select(MatchResult)
        .where(MatchResult.session_id == session.id)
        .order_by(MatchResult.match_score.desc())
    )
    return list(result.scalars().all())


async def count_answers(db: AsyncSession, session: QuizSession) -> int:
    result = await db.execute(
        select(func.count(Answer.id)).where(Answer.session_id == session.id)
    )
    return result.scalar_one()
