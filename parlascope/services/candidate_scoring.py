"""Compute and store a candidate's axis scores and coherence score.

Every run is recorded in ``IngestionLog``: started, then completed with a
snapshot of the result, or failed with the error message. Failures are
re-raised; the caller decides whether to retry. Partial writes are not
rolled back since a rerun recomputes everything from scratch.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parlascope.exceptions import NotFoundError
from parlascope.models import Candidate, IngestionLog, IngestionStatus, ScoreType
from parlascope.services.axes import AXES, AxisScores
from parlascope.services.axis_scorer import AxisScorer, fetch_ballot_votes
from parlascope.services.coherence import calculate_coherence, fetch_positions

logger = logging.getLogger(__name__)

SCORES_LOG_TYPE = "scores"


@dataclass
class CandidateScores:
    scores: AxisScores
    coherence_score: int
    score_type: ScoreType
    votes_analyzed: int

    def to_dict(self) -> dict:
        return {
            "scores": self.scores.to_dict(),
            "coherence_score": self.coherence_score,
            "score_type": self.score_type.value,
            "votes_analyzed": self.votes_analyzed,
        }


def apply_scores(candidate: Candidate, scores: AxisScores) -> None:
    for axis in AXES:
        setattr(candidate, f"score_{axis}", scores[axis])


async def _get_candidate(db: AsyncSession, candidate_id: int) -> Candidate:
    candidate = await db.get(Candidate, candidate_id)
    if candidate is None:
        raise NotFoundError(f"Candidate {candidate_id} not found")
    return candidate


async def compute_and_store_candidate_scores(
    db: AsyncSession, candidate_id: int, scorer: Optional[AxisScorer] = None
) -> CandidateScores:
    """Score a candidate from their votes, or their declared positions.

    Candidates linked to a legislator are scored from that legislator's
    votes; the others from their declared positions, which always yields
    an ``estimated`` score type.

    Raises:
        NotFoundError: if the candidate does not exist
    """
    scorer = scorer or AxisScorer()
    candidate = await _get_candidate(db, candidate_id)

    log = IngestionLog(
        candidate_id=candidate.id,
        type=SCORES_LOG_TYPE,
        status="started",
        started_at=datetime.utcnow(),
    )
    db.add(log)
    await db.commit()
    log_id = log.id

    try:
        if candidate.legislator_id is not None:
            votes = await fetch_ballot_votes(db, candidate.legislator_id)
            result = scorer.score_votes(votes)
            scores, votes_analyzed, score_type = (
                result.scores, result.votes_analyzed, result.score_type
            )
        else:
            scores = scorer.score_positions(await fetch_positions(db, candidate.id))
            votes_analyzed = 0
            score_type = ScoreType.ESTIMATED

        coherence = await calculate_coherence(db, candidate)

        apply_scores(candidate, scores)
        candidate.score_type = score_type.value
        candidate.coherence_score = coherence.score
        candidate.ingestion_status = IngestionStatus.READY.value

        log.status = "completed"
        log.completed_at = datetime.utcnow()
        log.details = {
            "scores": scores.to_dict(),
            "coherence": coherence.details(),
            "votes_analyzed": votes_analyzed,
        }
        await db.commit()

    except Exception as e:
        logger.exception("Scoring failed for candidate %s", candidate_id)
        await db.rollback()
        log = await db.get(IngestionLog, log_id)
        log.status = "failed"
        log.completed_at = datetime.utcnow()
        log.error = str(e) or type(e).__name__
        await db.commit()
        raise

    logger.info(
        "Scored candidate %s: %s, %d vote(s) analyzed, coherence %d",
        candidate.slug, score_type.value, votes_analyzed, coherence.score,
    )
    return CandidateScores(scores, coherence.score, score_type, votes_analyzed)


async def recalculate_all_candidates(db: AsyncSession) -> dict[str, int]:
    """Rescore every active candidate, continuing past individual failures."""
    result = await db.execute(select(Candidate.id).where(Candidate.active == True))
    candidate_ids = list(result.scalars().all())

    success = 0
    failed = 0
    for candidate_id in candidate_ids:
        try:
            await compute_and_store_candidate_scores(db, candidate_id)
            success += 1
        except Exception:
            # Already recorded in the candidate's ingestion log
            failed += 1

    return {"processed": len(candidate_ids), "success": success, "failed": failed}
