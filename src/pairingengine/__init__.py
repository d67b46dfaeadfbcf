"""Standings and pairing engine for competitive events."""

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

from pairingengine.models import (
    Competitor,
    Matchup,
    ResultRecord,
    TournamentConfig,
    TournamentFormatConfig,
    TournamentSnapshot,
)
from pairingengine.pairing import GroupPhaseScheduler, PairingEngine
from pairingengine.tournament import ConstraintTracker, StandingsCalculator
from pairingengine.tournament.round_manager import RoundManager, RoundPreview

__version__ = "0.1.0"

__all__ = [
    "Competitor",
    "ConstraintTracker",
    "GroupPhaseScheduler",
    "Matchup",
    "PairingEngine",
    "ResultRecord",
    "RoundManager",
    "RoundPreview",
    "StandingsCalculator",
    "TournamentConfig",
    "TournamentFormatConfig",
    "TournamentSnapshot",
]
