"""Standings calculation for tournaments.

This module folds result history into ranked standings.
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

from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional

from pairingengine.constants import (
    OUTCOME_DRAW,
    OUTCOME_LOSS,
    OUTCOME_WIN,
    WIN_SCORE,
)
from pairingengine.models import Competitor, Matchup, RankedCompetitor, ResultRecord
from pairingengine.models.matchup import OUTCOME_POINTS
from pairingengine.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class _Tally:
    wins: int = 0
    losses: int = 0
    draws: int = 0
    points: float = 0.0
    spread: float = 0.0
    starts: int = 0
    seconds: int = 0
    last_round: int = 0
    moved_first_last: Optional[bool] = None

    def record_role(self, round_number: int, moved_first: bool) -> None:
        if moved_first:
            self.starts += 1
        else:
            self.seconds += 1
        if round_number >= self.last_round:
            self.last_round = round_number
            self.moved_first_last = moved_first


class StandingsCalculator:
    """Calculates ranked standings from matchup and result history.

    Ordering:
    1. Points (win 1, draw 0.5, loss 0), descending
    2. Cumulative spread, descending
    3. Rating, descending
    4. Competitor ID, ascending (keeps ranks distinct for identical records)

    Only active competitors are ranked. Results against paused or withdrawn
    opponents still count for the active side.
    """

    def calculate(
        self,
        competitors: Iterable[Competitor],
        matchups: Iterable[Matchup],
        results: Iterable[ResultRecord],
        target_round: int,
        total_rounds: Optional[int] = None,
        through_round: Optional[int] = None,
    ) -> List[RankedCompetitor]:
        """Compute standings going into ``target_round``.

        Args:
            competitors: Full roster snapshot
            matchups: Matchups of any rounds; only those before ``target_round``
                are used
            results: Recorded results, matched to matchups by key
            target_round: Round about to be paired (1-indexed)
            total_rounds: Length of the tournament, enables clinch detection
            through_round: Only count rounds up to and including this one
                (0 means ratings only)

        Returns:
            Ranked competitors, best first
        """
        last_round = target_round - 1
        if through_round is not None:
            last_round = min(last_round, through_round)

        roster = [c for c in competitors if c.is_active]
        tallies: Dict[str, _Tally] = {c.id: _Tally() for c in roster}
        results_by_key = {r.matchup_id: r for r in results}

        for matchup in matchups:
            if matchup.round_number >= target_round:
                continue
            # first moves are counted for every prior round, base round or not
            for competitor_id in matchup.ids:
                tally = tallies.get(competitor_id)
                if tally is not None:
                    tally.record_role(
                        matchup.round_number, competitor_id == matchup.first_move_id
                    )
            if matchup.round_number > last_round:
                continue
            result = results_by_key.get(matchup.key)
            if result is None:
                continue
            for competitor_id, is_player1 in (
                (matchup.player1_id, True),
                (matchup.player2_id, False),
            ):
                tally = tallies.get(competitor_id)
                if tally is not None:
                    self._apply_result(tally, result, is_player1)

        ranked = sorted(
            roster,
            key=lambda c: (
                -tallies[c.id].points,
                -tallies[c.id].spread,
                -c.rating,
                c.id,
            ),
        )
        standings = [
            RankedCompetitor(
                competitor=competitor,
                wins=tallies[competitor.id].wins,
                losses=tallies[competitor.id].losses,
                draws=tallies[competitor.id].draws,
                points=tallies[competitor.id].points,
                spread=tallies[competitor.id].spread,
                prior_starts=tallies[competitor.id].starts,
                prior_seconds=tallies[competitor.id].seconds,
                moved_first_last=tallies[competitor.id].moved_first_last,
                rank=index + 1,
            )
            for index, competitor in enumerate(ranked)
        ]

        if total_rounds is not None:
            remaining = max(total_rounds - (target_round - 1), 0)
            standings = self.mark_clinched(standings, remaining)

        logger.info(
            "Standings before round %d: %d ranked competitors", target_round, len(standings)
        )
        return standings

    @staticmethod
    def _apply_result(tally: _Tally, result: ResultRecord, is_player1: bool) -> None:
        outcome = result.outcome_for(is_player1)
        if outcome == OUTCOME_WIN:
            tally.wins += 1
        elif outcome == OUTCOME_LOSS:
            tally.losses += 1
        elif outcome == OUTCOME_DRAW:
            tally.draws += 1
        tally.points += OUTCOME_POINTS[outcome]
        tally.spread += result.spread_for(is_player1)

    @staticmethod
    def mark_clinched(
        standings: List[RankedCompetitor], remaining_rounds: int
    ) -> List[RankedCompetitor]:
        """Flag competitors whose final rank can no longer change.

        A rank is clinched when the points lead over the next competitor and
        the points deficit to the previous competitor both exceed what
        ``remaining_rounds`` can swing. Equal points are never clinched since
        spread can still change.

        Args:
            standings: Ranked competitors, best first
            remaining_rounds: Rounds still to be played, including the one
                being paired

        Returns:
            New list with ``clinched`` set
        """
        max_swing = remaining_rounds * WIN_SCORE
        marked = []
        for index, entry in enumerate(standings):
            safe_below = (
                index + 1 >= len(standings)
                or entry.points - standings[index + 1].points > max_swing
            )
            safe_above = (
                index == 0 or standings[index - 1].points - entry.points > max_swing
            )
            clinched = len(standings) > 1 and safe_below and safe_above
            if clinched:
                logger.debug("%s has clinched rank %d", entry.name, entry.rank)
            marked.append(replace(entry, clinched=clinched))
        return marked
