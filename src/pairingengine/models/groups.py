"""Data models for the two-phase group format."""

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
from typing import Any, Dict


class Phase(Enum):
    """Scheduling phase of the group format."""

    PHASE1 = 1
    PHASE2 = 2


@dataclass(frozen=True)
class GroupAssignment:
    """A team's group membership.

    Attributes
    ----------
    team : str
        Team name.
    group : str
        Group label ("A", "B", ...). Replaced once at the phase transition.
    position : int
        Rank inside the phase-1 group, 0 until phase 1 is finalized.
    """

    team: str
    group: str
    position: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize assignment to dictionary."""
        return {
            "team_name": self.team,
            "triumvirate_group": self.group,
            "triumvirate_position": self.position,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GroupAssignment":
        """Deserialize assignment from dictionary."""
        return cls(
            team=data["team_name"],
            group=data["triumvirate_group"],
            position=int(data.get("triumvirate_position") or 0),
        )


@dataclass
class TeamRecord:
    """Accumulated team-match record for one team."""

    team: str
    group: str = ""
    wins: int = 0
    draws: int = 0
    losses: int = 0
    spread: float = 0.0
    individual_wins: int = 0

    @property
    def matches_played(self) -> int:
        return self.wins + self.draws + self.losses

    def sort_key(self):
        """Key ordering teams best first inside a group."""
        return (-self.wins, -self.spread, -self.individual_wins, self.team)
