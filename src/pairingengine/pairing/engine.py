"""Pairing engine dispatching to the individual pairing systems.

This module turns ranked standings and constraints into one round of
matchups, assigns tables, first moves and clinch flags, and verifies the
round before handing it back.
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

from typing import AbstractSet, Dict, List, Optional, Sequence, Set, Tuple

from pairingengine.constants import (
    PAIRING_FONTE_SWISS,
    PAIRING_KING_OF_THE_HILL,
    PAIRING_MANUAL,
    PAIRING_ROUND_ROBIN,
    PAIRING_SWISS,
)
from pairingengine.exceptions import (
    InvalidConfigurationException,
    PairingConstraintError,
)
from pairingengine.models import (
    Competitor,
    Matchup,
    PairingResult,
    RankedCompetitor,
)
from pairingengine.models.config import normalize_pairing_system
from pairingengine.pairing.round_robin import RoundRobinScheduler
from pairingengine.pairing.swiss import pair_adjacent, pair_score_brackets
from pairingengine.tournament.constraints import ConstraintTracker
from pairingengine.type_hints import PairIDs
from pairingengine.utils import setup_logger
from pairingengine.utils.validation import (
    validate_manual_pairs,
    validate_round_pairings,
)

logger = setup_logger(__name__)

RankedPair = Tuple[RankedCompetitor, RankedCompetitor]


def build_matchups(
    pairs: Sequence[RankedPair],
    round_number: int,
    first_table: int = 1,
    first_movers: Optional[AbstractSet[str]] = None,
) -> List[Matchup]:
    """Seat pairs at consecutive tables and assign first moves.

    Args:
        pairs: (player1, player2) in table order
        round_number: Round being paired
        first_table: Number of the first table
        first_movers: IDs already chosen to move first (round-robin
            schedules); other tables use ``ConstraintTracker.assign_first_move``

    Returns:
        One matchup per pair
    """
    first_movers = first_movers or frozenset()
    matchups = []
    for offset, (player1, player2) in enumerate(pairs):
        table_number = first_table + offset
        if player1.id in first_movers:
            first_move_id = player1.id
        elif player2.id in first_movers:
            first_move_id = player2.id
        else:
            first_move_id = ConstraintTracker.assign_first_move(
                player1, player2, table_number
            )
        matchup = Matchup(
            round_number=round_number,
            table_number=table_number,
            player1_id=player1.id,
            player2_id=player2.id,
            first_move_id=first_move_id,
            player1_clinched=player1.clinched,
            player2_clinched=player2.clinched,
        )
        logger.debug(
            "Table %d: %s vs %s", table_number, player1.name, player2.name
        )
        matchups.append(matchup)
    return matchups


class PairingEngine:
    """Generates one round of pairings with a chosen pairing system.

    Supported systems:
    - swiss: score brackets, fold pairing, greedy float-down
    - fonte_swiss: narrowest brackets, nearest available opponent
    - king_of_the_hill: 1 vs n, 2 vs n-1, ... (rematches allowed)
    - round_robin: circle method seeded by rating order
    - manual: validates pairs supplied by the director

    Swiss and Fonte-Swiss first look for a round in which no first-move
    balance goes past ``MAX_FIRST_MOVE_IMBALANCE`` and only drop that
    requirement when no such round exists. Round robin takes first moves
    from its schedule.

    The engine holds no tournament state; each call works only on its
    arguments.
    """

    def __init__(self, pairing_system: str = PAIRING_SWISS) -> None:
        self.pairing_system = normalize_pairing_system(pairing_system)
        self._systems = {
            PAIRING_SWISS: self._swiss,
            PAIRING_FONTE_SWISS: self._fonte_swiss,
            PAIRING_KING_OF_THE_HILL: self._king_of_the_hill,
        }
        if self.pairing_system not in self._systems and self.pairing_system not in (
            PAIRING_MANUAL,
            PAIRING_ROUND_ROBIN,
        ):
            raise InvalidConfigurationException(
                f"Pairing system {self.pairing_system!r} is not handled by the "
                "pairing engine"
            )

    def generate(
        self,
        ranked: Sequence[RankedCompetitor],
        constraints: ConstraintTracker,
        round_number: int,
        avoid_rematches: bool = True,
        avoid_same_team: bool = False,
        manual_pairs: Optional[Sequence[PairIDs]] = None,
        roster: Optional[Sequence[Competitor]] = None,
    ) -> PairingResult:
        """Generate pairings for a round.

        Args:
            ranked: Active competitors with standings
            constraints: Pairing history and team membership
            round_number: The round being paired (1-indexed)
            avoid_rematches: Refuse pairs that already met (bracket systems)
            avoid_same_team: Refuse pairs of team mates (bracket systems)
            manual_pairs: Director-supplied pairs for the manual system
            roster: Full roster, any status; seeds the round-robin schedule
                so that pausing a competitor does not move anyone's seat

        Returns:
            PairingResult with matchups, bye and any unpaired competitors

        Raises:
            InvalidConfigurationException: If fewer than two competitors are active
            PairingConstraintError: If constraints leave someone without a partner
            InvalidPairingException: If manual pairs are invalid
            PairingInvariantError: If the generated round is malformed
        """
        players = sorted(ranked, key=lambda p: p.rank)
        active_ids = {p.id for p in players}

        logger.info(
            "Pairing round %d with %s for %d competitors",
            round_number,
            self.pairing_system,
            len(players),
        )

        if self.pairing_system == PAIRING_MANUAL:
            return self._manual(players, round_number, manual_pairs or [])

        if len(players) < 2:
            raise InvalidConfigurationException(
                f"At least two active competitors are needed, got {len(players)}"
            )

        first_movers: Optional[Set[str]] = None
        unpaired: List[str] = []
        if self.pairing_system == PAIRING_ROUND_ROBIN:
            pairs, bye, unpaired = self._round_robin(players, round_number, roster)
            first_movers = {first.id for first, _ in pairs}
        else:
            pairs, bye = self._pair(
                players, constraints, round_number, avoid_rematches, avoid_same_team
            )

        # higher-ranked competitor takes seat 1, best pair takes table 1
        pairs = [(a, b) if a.rank <= b.rank else (b, a) for a, b in pairs]
        pairs.sort(key=lambda pair: pair[0].rank)
        matchups = build_matchups(pairs, round_number, first_movers=first_movers)

        validate_round_pairings(
            [m.ids for m in matchups],
            active_ids,
            expected_count=(len(players) - len(unpaired)) // 2,
        )
        if bye is not None:
            logger.info("Round %d bye: %s", round_number, bye.name)

        return PairingResult(
            matchups=matchups,
            bye_id=bye.id if bye is not None else None,
            unpaired_ids=unpaired,
            strategy=self.pairing_system,
        )

    def _pair(
        self,
        players: List[RankedCompetitor],
        constraints: ConstraintTracker,
        round_number: int,
        avoid_rematches: bool,
        avoid_same_team: bool,
    ) -> Tuple[List[RankedPair], Optional[RankedCompetitor]]:
        def is_allowed(first: RankedCompetitor, second: RankedCompetitor) -> bool:
            return constraints.is_allowed(
                first.id, second.id, avoid_rematches, avoid_same_team
            )

        def keeps_balance(first: RankedCompetitor, second: RankedCompetitor) -> bool:
            return is_allowed(
                first, second
            ) and ConstraintTracker.first_moves_compatible(first, second)

        system = self._systems[self.pairing_system]
        try:
            return system(players, constraints, round_number, keeps_balance)
        except PairingConstraintError:
            logger.info(
                "No round %d pairing keeps first moves balanced, pairing without it",
                round_number,
            )
        return system(players, constraints, round_number, is_allowed)

    # ========== Bye ==========

    @staticmethod
    def _select_bye(
        players: List[RankedCompetitor], constraints: ConstraintTracker
    ) -> Tuple[List[RankedCompetitor], Optional[RankedCompetitor]]:
        """Take out the lowest-ranked player among those with the fewest byes."""
        if len(players) % 2 == 0:
            return players, None
        bye = min(players, key=lambda p: (constraints.byes(p.id), -p.rank))
        return [p for p in players if p.id != bye.id], bye

    # ========== Pairing Systems ==========

    def _swiss(self, players, constraints, round_number, is_allowed):
        remaining, bye = self._select_bye(players, constraints)
        return pair_score_brackets(remaining, is_allowed), bye

    def _fonte_swiss(self, players, constraints, round_number, is_allowed):
        remaining, bye = self._select_bye(players, constraints)
        return pair_adjacent(remaining, is_allowed), bye

    def _king_of_the_hill(self, players, constraints, round_number, is_allowed):
        # rematch, team and first-move constraints are ignored on purpose
        remaining, bye = self._select_bye(players, constraints)
        count = len(remaining)
        pairs = [(remaining[i], remaining[count - 1 - i]) for i in range(count // 2)]
        return pairs, bye

    def _round_robin(
        self,
        players: List[RankedCompetitor],
        round_number: int,
        roster: Optional[Sequence[Competitor]],
    ) -> Tuple[List[RankedPair], Optional[RankedCompetitor], List[str]]:
        """One round of the circle-method schedule.

        The schedule is seeded by rating, then ID, so it stays fixed between
        rounds. With a ``roster`` every entrant keeps a seat whatever their
        status, and an active competitor whose scheduled opponent is paused or
        withdrawn sits the round out. Each pair lists its first mover first.

        Returns:
            (pairs, scheduled bye, IDs of active competitors without a game)
        """
        by_id: Dict[str, RankedCompetitor] = {p.id: p for p in players}
        entrants = list(roster) if roster is not None else players
        seeded = sorted(entrants, key=lambda c: (-c.rating, c.id))
        schedule = RoundRobinScheduler([c.id for c in seeded])

        pairs: List[RankedPair] = []
        idle: List[str] = []
        for first, second in schedule.get_round(round_number, cycle=True):
            if first in by_id and second in by_id:
                pairs.append((by_id[first], by_id[second]))
            else:
                idle.extend(i for i in (first, second) if i in by_id)
        seated = set(schedule.entities)
        idle.extend(p.id for p in players if p.id not in seated)
        if idle:
            logger.info(
                "Round %d: %d competitor(s) without a scheduled opponent",
                round_number,
                len(idle),
            )

        bye = by_id.get(schedule.get_bye(round_number, cycle=True))
        return pairs, bye, idle

    def _manual(
        self,
        players: List[RankedCompetitor],
        round_number: int,
        manual_pairs: Sequence[PairIDs],
    ) -> PairingResult:
        by_id = {p.id: p for p in players}
        validate_manual_pairs(list(manual_pairs), set(by_id))

        pairs = [(by_id[first], by_id[second]) for first, second in manual_pairs]
        matchups = build_matchups(pairs, round_number)
        # re-check the built round, not just the input
        validate_round_pairings([m.ids for m in matchups], set(by_id))

        paired = {competitor_id for pair in manual_pairs for competitor_id in pair}
        left_out = [p.id for p in players if p.id not in paired]
        bye_id = left_out[0] if len(left_out) == 1 else None
        unpaired = [] if bye_id is not None else left_out
        if unpaired:
            logger.warning(
                "Manual round %d leaves %d competitors unpaired",
                round_number,
                len(unpaired),
            )
        return PairingResult(
            matchups=matchups,
            bye_id=bye_id,
            unpaired_ids=unpaired,
            strategy=PAIRING_MANUAL,
        )
