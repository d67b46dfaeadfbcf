"""Shared fixtures for the pairing engine tests."""

import pytest

from pairingengine.models import (
    Competitor,
    Matchup,
    ResultRecord,
    TournamentSnapshot,
)
from pairingengine.tournament.standings import StandingsCalculator


def make_competitors(count, teams=None, base_rating=2000):
    """Competitors p1..pN with strictly decreasing ratings, so rank i is p<i>."""
    return [
        Competitor(
            id=f"p{i}",
            name=f"Player {i}",
            rating=base_rating - 10 * i,
            team=teams[i - 1] if teams else None,
        )
        for i in range(1, count + 1)
    ]


def player1_wins(matchups, score=(1, 0)):
    """Results in which the first-seated competitor wins every table."""
    return [
        ResultRecord(matchup_id=m.key, player1_score=score[0], player2_score=score[1])
        for m in matchups
    ]


def add_round(snapshot, matchups, results=()):
    """Return a snapshot extended by one round of history."""
    return TournamentSnapshot.build(
        competitors=snapshot.competitors,
        matchups=list(snapshot.matchups) + list(matchups),
        results=list(snapshot.results) + list(results),
        group_assignments=snapshot.group_assignments,
        group_phase=snapshot.group_phase,
    )


def matchup(round_number, table, first, second, first_move=None):
    return Matchup(
        round_number=round_number,
        table_number=table,
        player1_id=first,
        player2_id=second,
        first_move_id=first_move or first,
    )


@pytest.fixture
def calculator():
    return StandingsCalculator()


@pytest.fixture
def eight_players():
    return make_competitors(8)


@pytest.fixture
def initial_standings(calculator):
    """Standings before round 1 for a given roster."""

    def _standings(competitors):
        return calculator.calculate(competitors, [], [], target_round=1)

    return _standings
