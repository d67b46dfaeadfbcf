"""Pairing systems: Swiss, Fonte-Swiss, king of the hill, round robin,
manual, and the two-phase group format."""

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

from pairingengine.pairing.engine import PairingEngine, build_matchups
from pairingengine.pairing.group_phase import (
    GroupPhaseScheduler,
    initialize_groups,
    team_pairs_from_matchups,
    team_records,
)
from pairingengine.pairing.matching import (
    find_perfect_matching,
    greedy_matching,
    search_matching,
)
from pairingengine.pairing.round_robin import BYE, RoundRobinScheduler

__all__ = [
    "BYE",
    "GroupPhaseScheduler",
    "PairingEngine",
    "RoundRobinScheduler",
    "build_matchups",
    "find_perfect_matching",
    "greedy_matching",
    "initialize_groups",
    "search_matching",
    "team_pairs_from_matchups",
    "team_records",
]
