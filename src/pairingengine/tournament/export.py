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

"""Tabular projection of a round's pairings, one row per table."""

from dataclasses import astuple, dataclass
from typing import Iterable, List, Optional, Tuple

from pairingengine.constants import PAIRING_COLUMNS
from pairingengine.exceptions import PlayerNotFoundException
from pairingengine.models import Competitor, Matchup, RankedCompetitor


@dataclass(frozen=True)
class PairingRow:
    """One table of a round, in the column order of ``PAIRING_COLUMNS``."""

    table: int
    player1_name: str
    player1_rating: int
    player1_rank: Optional[int]
    player2_name: str
    player2_rating: int
    player2_rank: Optional[int]
    first_move_name: str

    def as_tuple(self) -> Tuple:
        return astuple(self)


def pairing_rows(
    matchups: Iterable[Matchup],
    standings: Iterable[RankedCompetitor],
    competitors: Iterable[Competitor] = (),
) -> List[PairingRow]:
    """Project matchups onto export rows, ordered by table.

    Args:
        matchups: Matchups of one round
        standings: Standings the round was paired from (name, rating, rank)
        competitors: Fallback roster for players missing from the standings,
            e.g. withdrawn since the pairing; their rank is left empty

    Raises:
        PlayerNotFoundException: If a matchup names an unknown competitor
    """
    ranked = {p.id: p for p in standings}
    roster = {c.id: c for c in competitors}

    def lookup(competitor_id: str) -> Tuple[str, int, Optional[int]]:
        if competitor_id in ranked:
            player = ranked[competitor_id]
            return player.name, player.rating, player.rank
        if competitor_id in roster:
            competitor = roster[competitor_id]
            return competitor.name, competitor.rating, None
        raise PlayerNotFoundException(f"Unknown competitor {competitor_id!r}")

    rows = []
    for matchup in sorted(matchups, key=lambda m: m.table_number):
        player1 = lookup(matchup.player1_id)
        player2 = lookup(matchup.player2_id)
        rows.append(
            PairingRow(
                matchup.table_number,
                *player1,
                *player2,
                lookup(matchup.first_move_id)[0],
            )
        )
    return rows


__all__ = ["PAIRING_COLUMNS", "PairingRow", "pairing_rows"]
