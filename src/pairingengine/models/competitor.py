"""Competitor data classes."""

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

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from pairingengine.constants import STATUS_ACTIVE, STATUS_PAUSED, STATUS_WITHDRAWN


class ParticipationStatus(Enum):
    """Whether a competitor takes part in upcoming rounds."""

    ACTIVE = STATUS_ACTIVE
    PAUSED = STATUS_PAUSED
    WITHDRAWN = STATUS_WITHDRAWN


@dataclass(frozen=True)
class Competitor:
    """A player (or team entry) on a tournament roster.

    Attributes
    ----------
    id : str
        Identifier assigned by the roster store.
    name : str
        Display name.
    rating : int
        Strength rating, used as the final standings tie-break.
    team : str or None
        Team affiliation, used for same-team avoidance and group formats.
    status : ParticipationStatus
        Only active competitors are ranked or paired.
    """

    id: str
    name: str
    rating: int = 0
    team: Optional[str] = None
    status: ParticipationStatus = ParticipationStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status is ParticipationStatus.ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        """Serialize competitor to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "rating": self.rating,
            "team_name": self.team,
            "participation_status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Competitor":
        """Deserialize competitor from a roster row.

        Rows written before participation status existed carry no status
        column and are treated as active.
        """
        status = data.get("participation_status") or STATUS_ACTIVE
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            rating=int(data.get("rating") or 0),
            team=data.get("team_name") or None,
            status=ParticipationStatus(status),
        )

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class RankedCompetitor:
    """A competitor together with the record derived from prior rounds.

    Instances are rebuilt every time standings are requested and are never
    persisted.

    ``prior_starts`` and ``prior_seconds`` count the prior matchups in which
    the competitor moved first and second; ``moved_first_last`` is the role
    in the most recent one (None before the first matchup).
    """

    competitor: Competitor
    wins: int = 0
    losses: int = 0
    draws: int = 0
    points: float = 0.0
    spread: float = 0.0
    prior_starts: int = 0
    rank: int = 0
    clinched: bool = False
    prior_seconds: int = 0
    moved_first_last: Optional[bool] = None

    @property
    def id(self) -> str:
        return self.competitor.id

    @property
    def name(self) -> str:
        return self.competitor.name

    @property
    def rating(self) -> int:
        return self.competitor.rating

    @property
    def team(self) -> Optional[str]:
        return self.competitor.team

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.draws

    @property
    def first_move_balance(self) -> int:
        """Starts minus seconds; positive when owed the second move."""
        return self.prior_starts - self.prior_seconds

    def to_dict(self) -> Dict[str, Any]:
        """Serialize standings row to dictionary."""
        data = self.competitor.to_dict()
        data.update(
            {
                "rank": self.rank,
                "wins": self.wins,
                "losses": self.losses,
                "draws": self.draws,
                "points": self.points,
                "spread": self.spread,
                "previous_starts": self.prior_starts,
                "previous_seconds": self.prior_seconds,
                "clinched": self.clinched,
            }
        )
        return data

    def __str__(self) -> str:
        return f"#{self.rank} {self.name} ({self.points:g}, {self.spread:+g})"
