import random
from collections import Counter

import pytest

from conftest import add_round, make_competitors, player1_wins
from pairingengine.exceptions import (
    InvalidConfigurationException,
    RoundLockedError,
    RoundNotFoundException,
    TournamentStateException,
)
from pairingengine.models import (
    Competitor,
    ParticipationStatus,
    Phase,
    ResultRecord,
    TournamentConfig,
    TournamentFormatConfig,
    TournamentSnapshot,
)
from pairingengine.tournament.round_manager import RoundManager


@pytest.fixture
def swiss_manager():
    return RoundManager(TournamentConfig("Club Swiss", num_rounds=3, seed=1))


@pytest.fixture
def snapshot(eight_players):
    return TournamentSnapshot.build(competitors=eight_players)


def test_three_swiss_rounds(swiss_manager, snapshot):
    first = swiss_manager.preview_round(snapshot, 1)
    assert first.pair_ids == [("p1", "p5"), ("p2", "p6"), ("p3", "p7"), ("p4", "p8")]
    snapshot = add_round(snapshot, first.matchups, player1_wins(first.matchups))

    second = swiss_manager.preview_round(snapshot, 2)
    assert second.pair_ids == [("p1", "p3"), ("p2", "p4"), ("p5", "p7"), ("p6", "p8")]
    snapshot = add_round(snapshot, second.matchups, player1_wins(second.matchups))

    third = swiss_manager.preview_round(snapshot, 3)
    # p1 and p2 both moved first twice, p7 and p8 both moved second twice
    assert third.pair_ids == [("p1", "p4"), ("p2", "p5"), ("p3", "p8"), ("p6", "p7")]
    assert third.strategy == "swiss"
    assert [p.id for p in third.standings[:2]] == ["p1", "p2"]


def test_round_outside_tournament(swiss_manager, snapshot):
    for round_number in (0, 4):
        with pytest.raises(RoundNotFoundException):
            swiss_manager.check_can_generate(snapshot, round_number)


def test_paired_round_is_locked(swiss_manager, snapshot):
    first = swiss_manager.preview_round(snapshot, 1)
    snapshot = add_round(snapshot, first.matchups)
    with pytest.raises(RoundLockedError):
        swiss_manager.preview_round(snapshot, 1)


def test_cannot_pair_behind_a_later_round(swiss_manager, snapshot):
    second = swiss_manager.preview_round(snapshot, 2)
    snapshot = add_round(snapshot, second.matchups)
    with pytest.raises(TournamentStateException):
        swiss_manager.check_can_generate(snapshot, 1)


def test_unlock_latest_round(swiss_manager, snapshot):
    first = swiss_manager.preview_round(snapshot, 1)
    snapshot = add_round(snapshot, first.matchups)
    assert swiss_manager.unlock_round(snapshot, 1) == ["1-1", "1-2", "1-3", "1-4"]


def test_unlock_preconditions(swiss_manager, snapshot):
    with pytest.raises(RoundNotFoundException):
        swiss_manager.check_can_unlock(snapshot, 1)

    first = swiss_manager.preview_round(snapshot, 1)
    snapshot = add_round(snapshot, first.matchups, player1_wins(first.matchups[:1]))
    with pytest.raises(RoundLockedError):
        swiss_manager.unlock_round(snapshot, 1)

    second = swiss_manager.preview_round(snapshot, 2)
    snapshot = add_round(snapshot, second.matchups)
    with pytest.raises(TournamentStateException):
        swiss_manager.check_can_unlock(snapshot, 1)
    swiss_manager.check_can_unlock(snapshot, 2)


def test_base_pairing_round_pairs_from_older_standings(snapshot):
    manager = RoundManager(
        TournamentConfig(
            "Ladder", num_rounds=3, pairing_system="king_of_the_hill", base_pairing_round=0
        )
    )
    first = manager.preview_round(snapshot, 1)
    # upsets everywhere: the second-seated competitor wins every table
    snapshot = add_round(snapshot, first.matchups, player1_wins(first.matchups, (0, 1)))

    second = manager.preview_round(snapshot, 2)
    assert second.pair_ids == first.pair_ids
    # the live standings do see the upsets
    assert manager.standings(snapshot)[0].id == "p5"


def test_base_pairing_round_must_precede_the_round(snapshot):
    manager = RoundManager(TournamentConfig("Ladder", num_rounds=3, base_pairing_round=2))
    with pytest.raises(InvalidConfigurationException):
        manager.preview_round(snapshot, 1)


def test_team_mode_keeps_team_mates_apart():
    roster = make_competitors(4, teams=["x", "x", "y", "y"])
    manager = RoundManager(
        TournamentConfig("Teams", num_rounds=1, pairing_system="fonte_swiss", team_mode=True)
    )
    preview = manager.preview_round(TournamentSnapshot.build(roster), 1)
    assert preview.pair_ids == [("p1", "p3"), ("p2", "p4")]


def test_manual_round(snapshot):
    manager = RoundManager(TournamentConfig("Manual", num_rounds=2, pairing_system="manual"))
    preview = manager.preview_round(snapshot, 1, manual_pairs=[("p8", "p1")])
    assert preview.pair_ids == [("p8", "p1")]
    assert preview.unpaired_ids == ["p2", "p3", "p4", "p5", "p6", "p7"]


def _play_out(manager, snapshot, rounds, rng):
    """Pair ``rounds`` rounds with random results; return the snapshot."""
    for round_number in range(1, rounds + 1):
        preview = manager.preview_round(snapshot, round_number)
        results = [
            ResultRecord(m.key, *rng.choice([(1, 0), (0, 1), (1, 1)]))
            for m in preview.matchups
        ]
        snapshot = add_round(snapshot, preview.matchups, results)
    return snapshot


@pytest.mark.parametrize("seed", range(20))
def test_swiss_finds_five_rematch_free_rounds(snapshot, seed):
    manager = RoundManager(TournamentConfig("Club Swiss", num_rounds=5, seed=seed))
    played = _play_out(manager, snapshot, 5, random.Random(seed))
    meetings = Counter(frozenset(m.ids) for m in played.matchups)
    assert len(played.matchups) == 20
    assert max(meetings.values()) == 1


@pytest.mark.parametrize("seed", range(10))
@pytest.mark.parametrize(
    "system, avoid_rematches",
    [("swiss", False), ("fonte_swiss", False), ("round_robin", True)],
)
def test_first_moves_stay_balanced(snapshot, seed, system, avoid_rematches):
    config = TournamentConfig(
        "Balance", num_rounds=7, pairing_system=system,
        avoid_rematches=avoid_rematches, seed=seed,
    )
    manager = RoundManager(config)
    played = _play_out(manager, snapshot, 7, random.Random(seed))

    starts = Counter(m.first_move_id for m in played.matchups)
    games = Counter(cid for m in played.matchups for cid in m.ids)
    for competitor in played.competitors:
        assert abs(starts[competitor.id] - games[competitor.id] / 2) <= 1


def test_paused_competitor_keeps_round_robin_seats(eight_players):
    manager = RoundManager(
        TournamentConfig("All play all", num_rounds=7, pairing_system="round_robin")
    )
    full = TournamentSnapshot.build(competitors=eight_players)
    resting = TournamentSnapshot.build(
        competitors=eight_players[:-1]
        + [Competitor("p8", "Player 8", rating=1920, status=ParticipationStatus.PAUSED)]
    )
    for round_number in (1, 2, 3):
        scheduled = manager.preview_round(full, round_number)
        preview = manager.preview_round(resting, round_number)
        assert preview.pair_ids == [p for p in scheduled.pair_ids if "p8" not in p]
        assert len(preview.unpaired_ids) == 1


SMALL = TournamentFormatConfig(
    total_entities=4,
    total_rounds=4,
    phase1_rounds=2,
    phase2_rounds=2,
    groups=2,
    entities_per_group=2,
)


@pytest.fixture
def group_manager():
    return RoundManager(
        TournamentConfig(
            "Triumvirate", num_rounds=4, pairing_system="group_phase",
            group_format=SMALL, seed=9,
        )
    )


@pytest.fixture
def team_snapshot():
    roster = [
        Competitor(f"{team}-{board}", f"{team} {board}", rating=1000 - board, team=team)
        for team in ("North", "South", "East", "West")
        for board in (1, 2)
    ]
    return TournamentSnapshot.build(competitors=roster)


def test_group_format_draws_groups_and_pairs_boards(group_manager, team_snapshot):
    preview = group_manager.preview_round(team_snapshot, 1)
    assert preview.group_phase is Phase.PHASE1
    assert len(preview.group_assignments) == 4
    assert sorted(a.group for a in preview.group_assignments) == ["A", "A", "B", "B"]
    assert len(preview.matchups) == 4
    assert [m.table_number for m in preview.matchups] == [1, 2, 3, 4]

    group_of = {a.team: a.group for a in preview.group_assignments}
    for m in preview.matchups:
        first, second = m.player1_id.split("-")[0], m.player2_id.split("-")[0]
        assert group_of[first] != group_of[second]
        # board 1 meets board 1, board 2 meets board 2
        assert m.player1_id[-1] == m.player2_id[-1]


def test_group_format_is_reproducible_with_a_seed(group_manager, team_snapshot):
    first = group_manager.preview_round(team_snapshot, 1)
    second = group_manager.preview_round(team_snapshot, 1)
    assert first.matchups == second.matchups
    assert first.group_assignments == second.group_assignments


def test_group_format_moves_to_phase_two(group_manager, team_snapshot):
    snapshot = team_snapshot
    for round_number in (1, 2):
        preview = group_manager.preview_round(snapshot, round_number)
        snapshot = add_round(snapshot, preview.matchups, player1_wins(preview.matchups))
        snapshot = snapshot.with_group_state(
            list(preview.group_assignments), preview.group_phase
        )

    third = group_manager.preview_round(snapshot, 3)
    assert third.group_phase is Phase.PHASE2
    assert {a.position for a in third.group_assignments} == {1, 2}
    group_of = {a.team: a.group for a in third.group_assignments}
    for m in third.matchups:
        assert group_of[m.player1_id.split("-")[0]] == group_of[m.player2_id.split("-")[0]]

    standings = group_manager.group_standings(snapshot)
    assert sorted(standings) == ["A", "B"]
    assert sum(r.matches_played for records in standings.values() for r in records) == 8
