"""Pairing constraints derived from tournament history.

Tracks who has already met whom, team membership and byes, and decides who
moves first at a table. Trackers are immutable snapshots: adding pairs
returns a new tracker so one pairing computation can never observe
another's tentative pairs.
"""

# Pairing Engine
# Copyright (C) 2025  Pairing Engine developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

from collections import defaultdict
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Set, Tuple

from pairingengine.constants import MAX_FIRST_MOVE_IMBALANCE
from pairingengine.models import Competitor, Matchup, RankedCompetitor
from pairingengine.utils import setup_logger

logger = setup_logger(__name__)

_EMPTY: FrozenSet[str] = frozenset()

# moved second last time < no prior matchup < moved first last time
_LAST_ROLE_ORDER = {False: 0, None: 1, True: 2}


def _freeze(mapping: Mapping[str, Iterable[str]]) -> Mapping[str, FrozenSet[str]]:
    return MappingProxyType({key: frozenset(values) for key, values in mapping.items()})


class ConstraintTracker:
    """Immutable view of pairing constraints for one tournament.

    Attributes:
        opponents: Competitor ID -> IDs already faced. Every prior matchup
            counts, whether or not a result was recorded.
        teams: Team name -> member IDs
        bye_counts: Competitor ID -> paired rounds the competitor sat out
    """

    def __init__(
        self,
        opponents: Optional[Mapping[str, Iterable[str]]] = None,
        teams: Optional[Mapping[str, Iterable[str]]] = None,
        bye_counts: Optional[Mapping[str, int]] = None,
    ) -> None:
        self._opponents = _freeze(opponents or {})
        self._teams = _freeze(teams or {})
        self._team_of: Dict[str, str] = {
            member: team for team, members in self._teams.items() for member in members
        }
        self._byes = MappingProxyType(dict(bye_counts or {}))

    @classmethod
    def from_history(
        cls,
        competitors: Iterable[Competitor],
        matchups: Iterable[Matchup],
        before_round: Optional[int] = None,
    ) -> "ConstraintTracker":
        """Build a tracker from a roster and pairing history.

        Args:
            competitors: Roster snapshot (all statuses)
            matchups: Prior matchups
            before_round: If given, ignore matchups of this round and later

        Returns:
            A new tracker
        """
        roster = list(competitors)
        opponents: Dict[str, Set[str]] = defaultdict(set)
        appeared: Dict[int, Set[str]] = defaultdict(set)

        for matchup in matchups:
            if before_round is not None and matchup.round_number >= before_round:
                continue
            first, second = matchup.ids
            opponents[first].add(second)
            opponents[second].add(first)
            appeared[matchup.round_number].update(matchup.ids)

        teams: Dict[str, Set[str]] = defaultdict(set)
        for competitor in roster:
            if competitor.team:
                teams[competitor.team].add(competitor.id)

        bye_counts: Dict[str, int] = {}
        for competitor in roster:
            if not competitor.is_active:
                continue
            missed = sum(1 for ids in appeared.values() if competitor.id not in ids)
            if missed:
                bye_counts[competitor.id] = missed

        tracker = cls(opponents, teams, bye_counts)
        logger.debug(
            "Constraint tracker built from %d paired rounds", len(appeared)
        )
        return tracker

    # ========== Queries ==========

    @property
    def opponents(self) -> Mapping[str, FrozenSet[str]]:
        return self._opponents

    @property
    def teams(self) -> Mapping[str, FrozenSet[str]]:
        return self._teams

    def opponents_of(self, competitor_id: str) -> FrozenSet[str]:
        return self._opponents.get(competitor_id, _EMPTY)

    def team_of(self, competitor_id: str) -> Optional[str]:
        return self._team_of.get(competitor_id)

    def byes(self, competitor_id: str) -> int:
        return self._byes.get(competitor_id, 0)

    def have_played(self, first: str, second: str) -> bool:
        """Check if two competitors have previously been paired."""
        return second in self.opponents_of(first)

    def same_team(self, first: str, second: str) -> bool:
        team = self._team_of.get(first)
        return team is not None and team == self._team_of.get(second)

    def is_allowed(
        self,
        first: str,
        second: str,
        avoid_rematches: bool = True,
        avoid_same_team: bool = False,
    ) -> bool:
        """Check whether two competitors may be paired this round."""
        if first == second:
            return False
        if avoid_rematches and self.have_played(first, second):
            return False
        if avoid_same_team and self.same_team(first, second):
            return False
        return True

    # ========== Derivation ==========

    def with_pairs(self, pairs: Iterable[Tuple[str, str]]) -> "ConstraintTracker":
        """Return a new tracker that also counts ``pairs`` as faced."""
        opponents: Dict[str, Set[str]] = {
            key: set(values) for key, values in self._opponents.items()
        }
        for first, second in pairs:
            opponents.setdefault(first, set()).add(second)
            opponents.setdefault(second, set()).add(first)
        return ConstraintTracker(opponents, self._teams, self._byes)

    # ========== First Move ==========

    @staticmethod
    def assign_first_move(
        player1: RankedCompetitor, player2: RankedCompetitor, table_number: int
    ) -> str:
        """Pick who moves first at a table.

        1. The competitor with the lower first-move balance (prior starts minus
           prior seconds) moves first.
        2. On equal balance, whoever moved second in their most recent matchup
           moves first, ahead of a competitor without one, ahead of one who
           moved first.
        3. Otherwise player 1 moves first at odd tables and the higher-ranked
           competitor at even tables.

        Args:
            player1: First-seated competitor
            player2: Second-seated competitor
            table_number: Table number (1-indexed)

        Returns:
            ID of the competitor moving first
        """
        balance1 = player1.first_move_balance
        balance2 = player2.first_move_balance
        if balance1 != balance2:
            return player1.id if balance1 < balance2 else player2.id
        due1 = _LAST_ROLE_ORDER[player1.moved_first_last]
        due2 = _LAST_ROLE_ORDER[player2.moved_first_last]
        if due1 != due2:
            return player1.id if due1 < due2 else player2.id
        if table_number % 2 == 1:
            return player1.id
        higher = player1 if player1.rank <= player2.rank else player2
        return higher.id

    @staticmethod
    def first_moves_compatible(
        first: RankedCompetitor, second: RankedCompetitor
    ) -> bool:
        """Check that pairing two competitors keeps both first-move balances
        within ``MAX_FIRST_MOVE_IMBALANCE``.

        Only two competitors with the same balance at the limit clash: one of
        them has to take the role they already have too often.
        """
        balance = first.first_move_balance
        return not (
            balance == second.first_move_balance
            and abs(balance) >= MAX_FIRST_MOVE_IMBALANCE
        )
