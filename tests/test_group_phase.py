import random
from collections import Counter

import pytest

from conftest import matchup
from pairingengine.exceptions import (
    InvalidConfigurationException,
    TournamentStateException,
)
from pairingengine.models import (
    Competitor,
    GroupAssignment,
    Phase,
    RankedCompetitor,
    ResultRecord,
    TournamentFormatConfig,
)
from pairingengine.pairing.group_phase import (
    GroupPhaseScheduler,
    board_pairs,
    initialize_groups,
    team_pairs_from_matchups,
    team_records,
)

SMALL = TournamentFormatConfig(
    total_entities=4,
    total_rounds=4,
    phase1_rounds=2,
    phase2_rounds=2,
    groups=2,
    entities_per_group=2,
)


def _teams(count):
    return [f"T{i:02d}" for i in range(count)]


def _one_player_teams(teams):
    competitors = [Competitor(f"p-{team}", team, team=team) for team in teams]
    rosters = {
        c.team: [RankedCompetitor(c, rank=index)]
        for index, c in enumerate(competitors, start=1)
    }
    return competitors, rosters


def _small_scheduler():
    assignments = [
        GroupAssignment("T00", "A"),
        GroupAssignment("T01", "A"),
        GroupAssignment("T02", "B"),
        GroupAssignment("T03", "B"),
    ]
    return GroupPhaseScheduler(SMALL, assignments)


def test_initialize_groups_draws_contiguous_slices():
    teams = _teams(36)
    assignments = initialize_groups(teams, TournamentFormatConfig(), random.Random(3))
    assert sorted(a.team for a in assignments) == teams
    assert Counter(a.group for a in assignments) == {label: 6 for label in "ABCDEF"}
    assert [a.group for a in assignments] == [label for label in "ABCDEF" for _ in range(6)]
    assert all(a.position == 0 for a in assignments)


def test_initialize_groups_is_reproducible():
    teams = _teams(36)
    first = initialize_groups(teams, TournamentFormatConfig(), random.Random(5))
    second = initialize_groups(teams, TournamentFormatConfig(), random.Random(5))
    assert first == second


@pytest.mark.parametrize("teams", [_teams(35), _teams(35) + ["T00"]])
def test_initialize_groups_rejects_wrong_teams(teams):
    with pytest.raises(InvalidConfigurationException):
        initialize_groups(teams, TournamentFormatConfig(), random.Random(0))


def test_invalid_format_is_rejected():
    with pytest.raises(InvalidConfigurationException):
        TournamentFormatConfig(total_entities=30).validate()
    with pytest.raises(InvalidConfigurationException):
        TournamentFormatConfig(phase2_rounds=10).validate()


def test_phase_one_meets_other_groups_without_repeats():
    rng = random.Random(11)
    teams = _teams(36)
    scheduler = GroupPhaseScheduler.start(teams, TournamentFormatConfig(), rng)
    competitors, rosters = _one_player_teams(teams)

    history = []
    for round_number in range(1, 16):
        previous = team_pairs_from_matchups(history, competitors)
        result = scheduler.generate_round(round_number, rosters, previous, rng)
        assert len(result.matchups) == 18
        for m in result.matchups:
            first, second = m.player1_id[2:], m.player2_id[2:]
            assert scheduler.group_of(first) != scheduler.group_of(second)
            assert frozenset((first, second)) not in previous
        history.extend(result.matchups)

    assert len(team_pairs_from_matchups(history, competitors)) == 15 * 18


def test_transition_regroups_by_position():
    rng = random.Random(2)
    teams = _teams(36)
    scheduler = GroupPhaseScheduler.start(teams, TournamentFormatConfig(), rng)
    competitors, rosters = _one_player_teams(teams)

    history, results = [], []
    for round_number in range(1, 16):
        previous = team_pairs_from_matchups(history, competitors)
        result = scheduler.generate_round(round_number, rosters, previous, rng)
        history.extend(result.matchups)
        results.extend(
            ResultRecord(m.key, rng.randint(0, 3), rng.randint(0, 3))
            for m in result.matchups
        )

    records = team_records(scheduler.assignments, history, results, competitors)
    phase2 = scheduler.transition(15, history, results, competitors)
    assert phase2.phase is Phase.PHASE2
    assert scheduler.phase is Phase.PHASE1

    for label, members in scheduler.groups.items():
        best = sorted((records[t] for t in members), key=lambda r: r.sort_key())[0]
        assert phase2.group_of(best.team) == "A"

    new_groups = phase2.groups
    assert sorted(new_groups) == list("ABCDEF")
    assert sorted(t for members in new_groups.values() for t in members) == teams
    for members in new_groups.values():
        # one team from each original group
        assert sorted(scheduler.group_of(t) for t in members) == list("ABCDEF")
    assert {a.position for a in phase2.assignments} == set(range(1, 7))


def test_transition_preconditions():
    scheduler = _small_scheduler()
    with pytest.raises(TournamentStateException):
        scheduler.transition(1, [], [], [])
    phase2 = scheduler.transition(2, [], [], [])
    with pytest.raises(TournamentStateException):
        phase2.transition(2, [], [], [])


def test_rounds_must_match_the_phase():
    scheduler = _small_scheduler()
    competitors, rosters = _one_player_teams(scheduler.teams)
    with pytest.raises(TournamentStateException):
        scheduler.generate_round(3, rosters, set(), random.Random(0))
    phase2 = scheduler.transition(2, [], [], competitors)
    with pytest.raises(TournamentStateException):
        phase2.generate_round(1, rosters, set(), random.Random(0))
    with pytest.raises(TournamentStateException):
        phase2.generate_round(5, rosters, set(), random.Random(0))


def test_small_format_end_to_end():
    scheduler = _small_scheduler()
    competitors, rosters = _one_player_teams(scheduler.teams)
    rng = random.Random(4)

    history = []
    for round_number in (1, 2):
        previous = team_pairs_from_matchups(history, competitors)
        history.extend(scheduler.generate_round(round_number, rosters, previous, rng).matchups)
    assert {frozenset(m.ids) for m in history} == {
        frozenset(("p-T00", "p-T02")),
        frozenset(("p-T00", "p-T03")),
        frozenset(("p-T01", "p-T02")),
        frozenset(("p-T01", "p-T03")),
    }

    # the higher of the two in this order wins every board
    order = ["p-T00", "p-T02", "p-T01", "p-T03"]
    results = [
        ResultRecord(
            m.key,
            *((1, 0) if order.index(m.player1_id) < order.index(m.player2_id) else (0, 1))
        )
        for m in history
    ]
    phase2 = scheduler.transition(2, history, results, competitors)
    assert phase2.groups == {"A": ["T00", "T02"], "B": ["T01", "T03"]}

    third = phase2.generate_round(3, rosters, set(), rng)
    assert {frozenset(m.ids) for m in third.matchups} == {
        frozenset(("p-T00", "p-T02")),
        frozenset(("p-T01", "p-T03")),
    }
    assert [m.round_number for m in third.matchups] == [3, 3]


def test_team_records_majority_and_split():
    competitors = [
        Competitor("a1", "a1", team="A"),
        Competitor("a2", "a2", team="A"),
        Competitor("a3", "a3", team="A"),
        Competitor("b1", "b1", team="B"),
        Competitor("b2", "b2", team="B"),
        Competitor("b3", "b3", team="B"),
    ]
    assignments = [GroupAssignment("A", "A"), GroupAssignment("B", "B")]
    history = [
        matchup(1, 1, "a1", "b1"),
        matchup(1, 2, "a2", "b2"),
        matchup(1, 3, "a3", "b3"),
        matchup(2, 1, "a1", "b1"),
        matchup(2, 2, "a2", "b2"),
        matchup(2, 3, "a3", "b3"),
    ]
    results = [
        ResultRecord("1-1", 3, 1),
        ResultRecord("1-2", 2, 0),
        ResultRecord("1-3", 0, 1),
        ResultRecord("2-1", 1, 0),
        ResultRecord("2-2", 0, 1),
        ResultRecord("2-3", 1, 1),
    ]
    records = team_records(assignments, history, results, competitors)
    team_a, team_b = records["A"], records["B"]
    assert (team_a.wins, team_a.draws, team_a.losses) == (1, 1, 0)
    assert (team_b.wins, team_b.draws, team_b.losses) == (0, 1, 1)
    assert team_a.individual_wins == 3
    assert team_b.individual_wins == 2
    assert team_a.spread == 3
    assert team_b.spread == -3


def test_board_pairs_bench_the_longer_roster():
    players = {
        team: [RankedCompetitor(Competitor(f"{team}{i}", f"{team}{i}", team=team))
               for i in range(size)]
        for team, size in (("X", 3), ("Y", 2))
    }
    pairs, benched = board_pairs([("X", "Y")], players)
    assert [(a.id, b.id) for a, b in pairs] == [("X0", "Y0"), ("X1", "Y1")]
    assert benched == ["X2"]


def test_scheduler_rejects_incomplete_assignments():
    with pytest.raises(InvalidConfigurationException):
        GroupPhaseScheduler(SMALL, [GroupAssignment("T00", "A")])
