"""Matchup, result and pairing result data classes."""

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

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pairingengine.constants import (
    DRAW_SCORE,
    LOSS_SCORE,
    OUTCOME_DRAW,
    OUTCOME_LOSS,
    OUTCOME_WIN,
    WIN_SCORE,
)
from pairingengine.exceptions import InvalidResultException
from pairingengine.type_hints import Outcome
from pairingengine.utils import format_timestamp, parse_timestamp

OUTCOME_POINTS = {
    OUTCOME_WIN: WIN_SCORE,
    OUTCOME_DRAW: DRAW_SCORE,
    OUTCOME_LOSS: LOSS_SCORE,
}


@dataclass(frozen=True)
class Matchup:
    """A single pairing at one table in one round.

    Attributes
    ----------
    round_number : int
        Round number (1-indexed).
    table_number : int
        Table number within the round (1-indexed).
    player1_id : str
        The first-seated competitor, the higher ranked one for generated rounds.
    player2_id : str
        The second-seated competitor.
    first_move_id : str
        Competitor assigned the first move.
    player1_clinched, player2_clinched : bool
        Whether the competitor's final rank is already decided.
    id : str or None
        Row identifier once persisted.
    created_at : datetime or None
        Row creation time once persisted.
    """

    round_number: int
    table_number: int
    player1_id: str
    player2_id: str
    first_move_id: str
    player1_clinched: bool = False
    player2_clinched: bool = False
    id: Optional[str] = None
    created_at: Optional[datetime] = field(default=None, compare=False)

    @property
    def key(self) -> str:
        """Identifier used by results to reference this matchup."""
        return self.id or f"{self.round_number}-{self.table_number}"

    @property
    def ids(self) -> Tuple[str, str]:
        return (self.player1_id, self.player2_id)

    def involves(self, competitor_id: str) -> bool:
        return competitor_id in (self.player1_id, self.player2_id)

    def opponent_of(self, competitor_id: str) -> str:
        """Return the other competitor in this matchup.

        Raises:
            ValueError: If the competitor does not play in this matchup
        """
        if competitor_id == self.player1_id:
            return self.player2_id
        if competitor_id == self.player2_id:
            return self.player1_id
        raise ValueError(
            f"{competitor_id} does not play at table {self.table_number} "
            f"in round {self.round_number}"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize matchup to dictionary."""
        return {
            "id": self.id,
            "round_number": self.round_number,
            "table_number": self.table_number,
            "player1_id": self.player1_id,
            "player2_id": self.player2_id,
            "first_move_player_id": self.first_move_id,
            "player1_gibsonized": self.player1_clinched,
            "player2_gibsonized": self.player2_clinched,
            "created_at": format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Matchup":
        """Deserialize matchup from a pairing row."""
        return cls(
            round_number=int(data["round_number"]),
            table_number=int(data["table_number"]),
            player1_id=str(data["player1_id"]),
            player2_id=str(data["player2_id"]),
            first_move_id=str(data["first_move_player_id"]),
            player1_clinched=bool(data.get("player1_gibsonized") or False),
            player2_clinched=bool(data.get("player2_gibsonized") or False),
            id=data.get("id"),
            created_at=parse_timestamp(data.get("created_at")),
        )


@dataclass(frozen=True)
class ResultRecord:
    """Scores recorded for a matchup. Immutable once created."""

    matchup_id: str
    player1_score: float
    player2_score: float
    recorded_at: Optional[datetime] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.player1_score < 0 or self.player2_score < 0:
            raise InvalidResultException(
                f"Negative score in result for matchup {self.matchup_id}: "
                f"{self.player1_score}-{self.player2_score}"
            )

    def own_and_opponent(self, is_player1: bool) -> Tuple[float, float]:
        if is_player1:
            return self.player1_score, self.player2_score
        return self.player2_score, self.player1_score

    def outcome_for(self, is_player1: bool) -> Outcome:
        """Outcome from the point of view of one side of the matchup."""
        own, opp = self.own_and_opponent(is_player1)
        if own > opp:
            return OUTCOME_WIN
        if own < opp:
            return OUTCOME_LOSS
        return OUTCOME_DRAW

    def spread_for(self, is_player1: bool) -> float:
        own, opp = self.own_and_opponent(is_player1)
        return own - opp

    def to_dict(self) -> Dict[str, Any]:
        """Serialize result to dictionary."""
        return {
            "pairing_id": self.matchup_id,
            "player1_score": self.player1_score,
            "player2_score": self.player2_score,
            "recorded_at": format_timestamp(self.recorded_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResultRecord":
        """Deserialize result from a result row."""
        return cls(
            matchup_id=str(data["pairing_id"]),
            player1_score=float(data["player1_score"]),
            player2_score=float(data["player2_score"]),
            recorded_at=parse_timestamp(data.get("recorded_at")),
        )


@dataclass
class PairingResult:
    """Result of a pairing computation for a single round.

    Attributes
    ----------
    matchups : list of Matchup
        Generated matchups ordered by table number.
    bye_id : str or None
        Competitor left out because of an odd head count.
    unpaired_ids : list of str
        Competitors left without a matchup: extras of a manual round, or
        round-robin entrants whose scheduled opponent is not active.
    strategy : str
        Name of the pairing system that produced the round.
    """

    matchups: List[Matchup] = field(default_factory=list)
    bye_id: Optional[str] = None
    unpaired_ids: List[str] = field(default_factory=list)
    strategy: str = ""

    @property
    def pair_ids(self) -> List[Tuple[str, str]]:
        return [m.ids for m in self.matchups]

    def __len__(self) -> int:
        return len(self.matchups)


#  LocalWords:  PairingResult gibsonized
