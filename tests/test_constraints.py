import pytest

from conftest import make_competitors, matchup
from pairingengine.models import Competitor, ParticipationStatus, RankedCompetitor
from pairingengine.tournament.constraints import ConstraintTracker


@pytest.fixture
def tracker():
    roster = make_competitors(3, teams=["red", "red", "blue"])
    history = [matchup(1, 1, "p1", "p2", first_move="p2")]
    return ConstraintTracker.from_history(roster, history)


def test_history_records_opponents(tracker):
    assert tracker.have_played("p1", "p2")
    assert tracker.have_played("p2", "p1")
    assert not tracker.have_played("p1", "p3")


def test_sitting_out_a_paired_round_counts_as_bye(tracker):
    assert tracker.byes("p3") == 1
    assert tracker.byes("p1") == 0


def test_inactive_competitors_collect_no_byes():
    roster = make_competitors(2) + [
        Competitor("p3", "Player 3", status=ParticipationStatus.PAUSED)
    ]
    tracker = ConstraintTracker.from_history(roster, [matchup(1, 1, "p1", "p2")])
    assert tracker.byes("p3") == 0


def test_before_round_limits_history():
    roster = make_competitors(2)
    tracker = ConstraintTracker.from_history(
        roster, [matchup(2, 1, "p1", "p2")], before_round=2
    )
    assert not tracker.have_played("p1", "p2")


def test_teams(tracker):
    assert tracker.teams["red"] == frozenset({"p1", "p2"})
    assert tracker.team_of("p3") == "blue"
    assert tracker.same_team("p1", "p2")
    assert not tracker.same_team("p1", "p3")


def test_is_allowed(tracker):
    assert not tracker.is_allowed("p1", "p1")
    assert not tracker.is_allowed("p1", "p2")
    assert tracker.is_allowed("p1", "p2", avoid_rematches=False)
    assert not tracker.is_allowed("p1", "p2", avoid_rematches=False, avoid_same_team=True)
    assert tracker.is_allowed("p1", "p3", avoid_same_team=True)


def test_with_pairs_returns_a_new_tracker(tracker):
    extended = tracker.with_pairs([("p1", "p3")])
    assert extended.have_played("p1", "p3")
    assert not tracker.have_played("p1", "p3")
    assert extended.byes("p3") == 1


def _ranked(competitor_id, rank, starts, seconds=0, moved_first_last=None):
    return RankedCompetitor(
        Competitor(competitor_id, competitor_id),
        rank=rank,
        prior_starts=starts,
        prior_seconds=seconds,
        moved_first_last=moved_first_last,
    )


def test_fewer_prior_starts_moves_first():
    first = _ranked("a", 1, 2)
    second = _ranked("b", 2, 1)
    assert ConstraintTracker.assign_first_move(first, second, 1) == "b"
    assert ConstraintTracker.assign_first_move(second, first, 2) == "b"


def test_tie_at_odd_table_goes_to_player1():
    lower = _ranked("a", 4, 1)
    higher = _ranked("b", 2, 1)
    assert ConstraintTracker.assign_first_move(lower, higher, 3) == "a"


def test_tie_at_even_table_goes_to_higher_ranked():
    lower = _ranked("a", 4, 1)
    higher = _ranked("b", 2, 1)
    assert ConstraintTracker.assign_first_move(lower, higher, 2) == "b"
    assert ConstraintTracker.assign_first_move(higher, lower, 2) == "b"


def test_balance_counts_games_not_just_starts():
    # same number of starts, but "b" has also moved second twice
    rested = _ranked("a", 1, 1)
    busy = _ranked("b", 2, 1, seconds=2)
    assert ConstraintTracker.assign_first_move(rested, busy, 1) == "b"


def test_tie_goes_to_whoever_moved_second_last():
    first_last = _ranked("a", 1, 1, seconds=1, moved_first_last=True)
    second_last = _ranked("b", 2, 1, seconds=1, moved_first_last=False)
    newcomer = _ranked("c", 3, 0)
    for table in (1, 2):
        assert ConstraintTracker.assign_first_move(first_last, second_last, table) == "b"
        assert ConstraintTracker.assign_first_move(first_last, newcomer, table) == "c"
        assert ConstraintTracker.assign_first_move(newcomer, second_last, table) == "b"


def test_first_moves_compatible_only_rejects_equal_balances_at_the_limit():
    ahead = _ranked("a", 1, 2)
    also_ahead = _ranked("b", 2, 3, seconds=1)
    behind = _ranked("c", 3, 0, seconds=2)
    level = _ranked("d", 4, 1, seconds=1)
    assert not ConstraintTracker.first_moves_compatible(ahead, also_ahead)
    assert not ConstraintTracker.first_moves_compatible(behind, _ranked("e", 5, 1, 3))
    assert ConstraintTracker.first_moves_compatible(ahead, behind)
    assert ConstraintTracker.first_moves_compatible(ahead, level)
    assert ConstraintTracker.first_moves_compatible(level, _ranked("f", 6, 2, 2))
