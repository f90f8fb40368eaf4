"""Unit tests for the keyword axis scorer."""

from datetime import date

import pytest

from parlascope.models import ScoreType
from parlascope.services.axes import AxisScores
from parlascope.services.axis_scorer import AxisScorer, BallotVote, fetch_ballot_votes
from parlascope.services.keyword_table import DEFAULT_KEYWORD_TABLE, KeywordAxisTable


SMALL_TABLE = KeywordAxisTable({
    "retraite": {"social": 40},
    "budget": {"economie": 20},
})


class TestKeywordAxisTable:
    """Tests for the keyword table."""

    def test_keywords_are_lower_cased(self):
        """Keywords should match regardless of case."""
        table = KeywordAxisTable({"Climat": {"ecologie": -70}})
        assert "climat" in table
        assert table.weights("CLIMAT") == {"ecologie": -70}

    def test_unknown_axis_rejected(self):
        """Weights on an unknown axis should raise ValueError."""
        with pytest.raises(ValueError):
            KeywordAxisTable({"musée": {"culture": 10}})

    def test_table_is_immutable(self):
        """Weights should not be writable after construction."""
        with pytest.raises(TypeError):
            SMALL_TABLE.weights("budget")["economie"] = 99

    def test_match_is_substring_and_case_insensitive(self):
        """'Réforme des RETRAITES' should match the 'retraite' keyword."""
        matches = SMALL_TABLE.match("Réforme des RETRAITES")
        assert [kw for kw, _ in matches] == ["retraite"]

    def test_default_table_covers_all_sections(self):
        """The default table should carry keywords for every axis."""
        axes = {axis for kw in DEFAULT_KEYWORD_TABLE for axis in DEFAULT_KEYWORD_TABLE.weights(kw)}
        assert axes == set(AxisScores().to_dict())


class TestScoreVotes:
    """Tests for AxisScorer.score_votes."""

    def test_for_and_against_votes(self):
        """A 'pour' on pensions and a 'contre' on the budget move two axes."""
        scorer = AxisScorer(SMALL_TABLE, verified_threshold=20)
        result = scorer.score_votes([
            BallotVote("Réforme des retraites", "pour"),
            BallotVote("Budget 2025", "contre"),
        ])

        assert result.scores.social == 40
        assert result.scores.economie == -20
        assert result.votes_analyzed == 2
        assert result.score_type == ScoreType.ESTIMATED

    def test_abstentions_and_absences_ignored(self):
        """Only 'pour' and 'contre' should contribute."""
        scorer = AxisScorer(SMALL_TABLE, verified_threshold=20)
        result = scorer.score_votes([
            BallotVote("Budget 2025", "abstention"),
            BallotVote("Budget 2026", "absent"),
        ])

        assert result.scores == AxisScores()
        assert result.votes_analyzed == 0

    def test_titles_without_keyword_not_counted(self):
        """Ballots matching no keyword should not count as analyzed."""
        scorer = AxisScorer(SMALL_TABLE, verified_threshold=20)
        result = scorer.score_votes([BallotVote("Motion de censure", "pour")])
        assert result.votes_analyzed == 0

    def test_verified_at_threshold(self):
        """20 analyzed votes should be verified, 19 estimated."""
        scorer = AxisScorer(SMALL_TABLE, verified_threshold=20)
        votes = [BallotVote(f"Budget rectificatif {i}", "pour") for i in range(20)]

        assert scorer.score_votes(votes).score_type == ScoreType.VERIFIED
        assert scorer.score_votes(votes[:19]).score_type == ScoreType.ESTIMATED

    def test_scoring_is_idempotent(self):
        """Scoring the same votes twice should give identical results."""
        scorer = AxisScorer(SMALL_TABLE, verified_threshold=20)
        votes = [BallotVote("Budget 2025", "pour"), BallotVote("Retraites", "contre")]
        assert scorer.score_votes(votes) == scorer.score_votes(votes)

    def test_scores_stay_within_bounds(self):
        """Heavy weights should be clamped to [-100, 100]."""
        table = KeywordAxisTable({"police": {"securite": 150}})
        result = AxisScorer(table, verified_threshold=20).score_votes(
            [BallotVote("Police municipale", "contre")]
        )
        assert result.scores.securite == -100


class TestScorePositions:
    """Tests for AxisScorer.score_positions."""

    def test_average_declared_scores(self):
        """Declared scores should be averaged per axis."""

        class Declared:
            def __init__(self, axis, score):
                self.axis = axis
                self.score = score

        scores = AxisScorer(SMALL_TABLE).score_positions([
            Declared("ecologie", -60),
            Declared("ecologie", -20),
            Declared("culture", 80),
        ])
        assert scores.ecologie == -40
        assert scores.economie == 0


class TestFetchBallotVotes:
    """Tests for loading votes from the database."""

    @pytest.mark.asyncio
    async def test_only_for_and_against_most_recent_first(
        self, make_legislator, make_ballot, make_vote, db_session
    ):
        """Abstentions should be skipped and recent ballots come first."""
        legislator = await make_legislator("dupont")
        old = await make_ballot("Budget 2023", vote_date=date(2023, 1, 5))
        new = await make_ballot("Budget 2024", vote_date=date(2024, 1, 5))
        skipped = await make_ballot("Retraites", vote_date=date(2024, 2, 5))
        await make_vote(legislator, old, "pour")
        await make_vote(legislator, new, "contre")
        await make_vote(legislator, skipped, "abstention")

        votes = await fetch_ballot_votes(db_session, legislator.id)

        assert votes == [
            BallotVote("Budget 2024", "contre"),
            BallotVote("Budget 2023", "pour"),
        ]
