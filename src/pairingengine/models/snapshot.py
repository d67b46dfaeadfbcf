"""Tournament snapshot handed to the engine by the persistence layer."""

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
from typing import Any, Dict, List, Optional, Tuple

from pairingengine.models.competitor import Competitor
from pairingengine.models.groups import GroupAssignment, Phase
from pairingengine.models.matchup import Matchup, ResultRecord


@dataclass(frozen=True)
class TournamentSnapshot:
    """Read-only view of a tournament's roster and history.

    The engine never mutates a snapshot; every operation derives what it
    needs from it and returns new objects.
    """

    competitors: Tuple[Competitor, ...] = ()
    matchups: Tuple[Matchup, ...] = ()
    results: Tuple[ResultRecord, ...] = ()
    group_assignments: Tuple[GroupAssignment, ...] = ()
    group_phase: Phase = Phase.PHASE1

    @classmethod
    def build(
        cls,
        competitors=(),
        matchups=(),
        results=(),
        group_assignments=(),
        group_phase: Phase = Phase.PHASE1,
    ) -> "TournamentSnapshot":
        """Create a snapshot from any iterables."""
        return cls(
            competitors=tuple(competitors),
            matchups=tuple(matchups),
            results=tuple(results),
            group_assignments=tuple(group_assignments),
            group_phase=group_phase,
        )

    @property
    def active_competitors(self) -> List[Competitor]:
        return [c for c in self.competitors if c.is_active]

    @property
    def competitors_by_id(self) -> Dict[str, Competitor]:
        return {c.id: c for c in self.competitors}

    @property
    def results_by_matchup(self) -> Dict[str, ResultRecord]:
        return {r.matchup_id: r for r in self.results}

    @property
    def paired_rounds(self) -> List[int]:
        """Round numbers holding at least one matchup, ascending."""
        return sorted({m.round_number for m in self.matchups})

    @property
    def latest_paired_round(self) -> int:
        rounds = self.paired_rounds
        return rounds[-1] if rounds else 0

    def matchups_for_round(self, round_number: int) -> List[Matchup]:
        return sorted(
            (m for m in self.matchups if m.round_number == round_number),
            key=lambda m: m.table_number,
        )

    def has_results(self, round_number: int) -> bool:
        recorded = self.results_by_matchup
        return any(m.key in recorded for m in self.matchups_for_round(round_number))

    def with_group_state(
        self, assignments: List[GroupAssignment], phase: Phase
    ) -> "TournamentSnapshot":
        """Return a copy carrying new group assignments."""
        return TournamentSnapshot(
            competitors=self.competitors,
            matchups=self.matchups,
            results=self.results,
            group_assignments=tuple(assignments),
            group_phase=phase,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TournamentSnapshot":
        """Deserialize a snapshot from persistence rows."""
        phase: Optional[int] = data.get("current_phase")
        return cls.build(
            competitors=[Competitor.from_dict(row) for row in data.get("players", [])],
            matchups=[Matchup.from_dict(row) for row in data.get("pairings", [])],
            results=[ResultRecord.from_dict(row) for row in data.get("results", [])],
            group_assignments=[
                GroupAssignment.from_dict(row) for row in data.get("groups", [])
            ],
            group_phase=Phase(phase) if phase else Phase.PHASE1,
        )
