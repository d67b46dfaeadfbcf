"""Standings, pairing constraints and round lifecycle.

`RoundManager` lives in `pairingengine.tournament.round_manager`; it is
not re-exported here because it depends on the pairing package, which in
turn depends on the constraint tracker.
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

from pairingengine.tournament.constraints import ConstraintTracker
from pairingengine.tournament.export import PairingRow, pairing_rows
from pairingengine.tournament.standings import StandingsCalculator

__all__ = [
    "ConstraintTracker",
    "PairingRow",
    "StandingsCalculator",
    "pairing_rows",
]
