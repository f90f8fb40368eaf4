"""Tests for dissent, cohesion, activity and controversy analytics."""

from datetime import date, timedelta

import pytest

from parlascope.services.analytics import (
    Period,
    controversial_ballots,
    controversy,
    find_dissidents,
    group_cohesion,
    most_active_legislators,
    period_start,
)


@pytest.fixture
def split_group(make_group, make_legislator, make_ballot, make_vote):
    """Three members on ten ballots; charlie votes against the others four times."""

    async def _make():
        group = await make_group()
        alpha = await make_legislator("alpha", group=group)
        bravo = await make_legislator("bravo", group=group)
        charlie = await make_legislator("charlie", group=group)
        for i in range(10):
            ballot = await make_ballot(f"Scrutin {i}", vote_date=date(2024, 1, 1) + timedelta(days=i))
            await make_vote(alpha, ballot, "pour")
            await make_vote(bravo, ballot, "pour")
            await make_vote(charlie, ballot, "contre" if i < 4 else "pour")
        return group, alpha, bravo, charlie

    return _make


class TestPeriodStart:
    """Tests for turning a period into the start of its window."""

    def test_all_has_no_start(self):
        assert period_start(Period.ALL, date(2024, 5, 1)) is None

    def test_month_end_is_clamped(self):
        """One month before March 31st is the last day of February."""
        assert period_start(Period.MONTH, date(2024, 3, 31)) == date(2024, 2, 29)

    def test_crosses_year(self):
        assert period_start(Period.QUARTER, date(2024, 1, 15)) == date(2023, 10, 15)
        assert period_start(Period.YEAR, date(2024, 2, 29)) == date(2023, 2, 28)


class TestDissidents:
    """Tests for find_dissidents."""

    @pytest.mark.asyncio
    async def test_ranked_by_dissent_rate(self, split_group, db_session):
        """Votes against the group majority are counted, busiest dissenter first."""
        _, alpha, bravo, charlie = await split_group()

        rows = await find_dissidents(db_session)

        assert [row.legislator.slug for row in rows] == ["charlie", "alpha", "bravo"]
        assert (rows[0].dissents, rows[0].total_votes, rows[0].rate) == (4, 10, 40)
        assert rows[1].rate == 0

    @pytest.mark.asyncio
    async def test_minimum_votes(self, split_group, db_session):
        """Legislators with too few comparable votes are left out."""
        await split_group()
        assert await find_dissidents(db_session, min_votes=11) == []

    @pytest.mark.asyncio
    async def test_period_window(self, split_group, db_session):
        """Only ballots inside the window count; charlie followed the group from the 5th on."""
        await split_group()

        rows = await find_dissidents(db_session, since=date(2024, 1, 5), min_votes=1)

        assert {row.legislator.slug: row.dissents for row in rows} == {
            "alpha": 0,
            "bravo": 0,
            "charlie": 0,
        }
        assert rows[0].total_votes == 6

    @pytest.mark.asyncio
    async def test_legislators_without_group_ignored(
        self, make_legislator, make_ballot, make_vote, db_session
    ):
        independent = await make_legislator("libre")
        await make_vote(independent, await make_ballot(), "contre")

        assert await find_dissidents(db_session, min_votes=1) == []


class TestGroupCohesion:
    """Tests for group_cohesion."""

    @pytest.mark.asyncio
    async def test_share_of_votes_following_majority(self, split_group, make_group, db_session):
        """26 of 30 votes follow the majority; an idle group reports zeros."""
        await split_group()
        await make_group(slug="eco", name="Verts")

        rows = await group_cohesion(db_session)

        assert [row.group.slug for row in rows] == ["soc", "eco"]
        assert (rows[0].members, rows[0].ballots, rows[0].votes, rows[0].aligned) == (3, 10, 30, 26)
        assert rows[0].cohesion == 87
        assert (rows[1].members, rows[1].votes, rows[1].cohesion) == (0, 0, 0)

    @pytest.mark.asyncio
    async def test_chamber_filter(self, split_group, make_group, db_session):
        await split_group()
        await make_group(slug="lr", chamber="senat", name="Les Républicains")

        rows = await group_cohesion(db_session, chamber="senat")

        assert [row.group.slug for row in rows] == ["lr"]


class TestMostActive:
    """Tests for most_active_legislators."""

    @pytest.mark.asyncio
    async def test_absences_not_counted(self, make_legislator, make_ballot, make_vote, db_session):
        busy = await make_legislator("busy")
        idle = await make_legislator("idle")
        first, second, third = [await make_ballot(f"Scrutin {i}") for i in range(3)]
        await make_vote(busy, first, "pour")
        await make_vote(busy, second, "abstention")
        await make_vote(busy, third, "absent")
        await make_vote(idle, first, "contre")

        rows = await most_active_legislators(db_session)

        assert [(legislator.slug, votes) for legislator, votes in rows] == [("busy", 2), ("idle", 1)]

    @pytest.mark.asyncio
    async def test_group_filter(self, split_group, make_legislator, make_ballot, make_vote, db_session):
        await split_group()
        outsider = await make_legislator("outsider")
        await make_vote(outsider, await make_ballot("Autre"), "pour")

        rows = await most_active_legislators(db_session, group_slug="soc", limit=2)

        assert [legislator.slug for legislator, _ in rows] == ["alpha", "bravo"]


class TestControversy:
    """Tests for close-ballot detection."""

    @pytest.mark.parametrize("for_count,against_count,expected", [
        (50, 50, 100),
        (60, 40, 80),
        (100, 0, 0),
        (0, 0, 0),
    ])
    def test_score(self, for_count, against_count, expected):
        assert controversy(for_count, against_count) == expected

    @pytest.mark.asyncio
    async def test_close_ballots_only(self, make_ballot, db_session):
        """One-sided and thinly attended ballots are filtered out."""
        await make_ballot("Serré", for_count=70, against_count=60, total_count=150)
        await make_ballot("Très serré", for_count=75, against_count=75, total_count=160)
        await make_ballot("Large", for_count=140, against_count=10, total_count=160)
        await make_ballot("Peu de votants", for_count=25, against_count=25, total_count=50)

        rows = await controversial_ballots(db_session)

        assert [(ballot.title, score) for ballot, score in rows] == [("Très serré", 100), ("Serré", 92)]
