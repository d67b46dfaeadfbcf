"""Data models shared by the standings and pairing code."""

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

from pairingengine.models.competitor import (
    Competitor,
    ParticipationStatus,
    RankedCompetitor,
)
from pairingengine.models.config import (
    TournamentConfig,
    TournamentFormatConfig,
    normalize_pairing_system,
)
from pairingengine.models.groups import GroupAssignment, Phase, TeamRecord
from pairingengine.models.matchup import Matchup, PairingResult, ResultRecord
from pairingengine.models.snapshot import TournamentSnapshot

__all__ = [
    "Competitor",
    "ParticipationStatus",
    "RankedCompetitor",
    "TournamentConfig",
    "TournamentFormatConfig",
    "normalize_pairing_system",
    "GroupAssignment",
    "Phase",
    "TeamRecord",
    "Matchup",
    "PairingResult",
    "ResultRecord",
    "TournamentSnapshot",
]
