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

import string

# Game outcome scores
WIN_SCORE = 1.0
DRAW_SCORE = 0.5
LOSS_SCORE = 0.0

# Outcome categories (for internal logic)
OUTCOME_WIN = "win"
OUTCOME_DRAW = "draw"
OUTCOME_LOSS = "loss"

# Participation status values
STATUS_ACTIVE = "active"
STATUS_PAUSED = "paused"
STATUS_WITHDRAWN = "withdrawn"

# Pairing systems
PAIRING_SWISS = "swiss"
PAIRING_FONTE_SWISS = "fonte_swiss"
PAIRING_KING_OF_THE_HILL = "king_of_the_hill"
PAIRING_ROUND_ROBIN = "round_robin"
PAIRING_MANUAL = "manual"
PAIRING_GROUP_PHASE = "group_phase"
DEFAULT_PAIRING_SYSTEM = PAIRING_SWISS

PAIRING_SYSTEM_NAMES = {
    PAIRING_SWISS: "Swiss",
    PAIRING_FONTE_SWISS: "Fonte-Swiss",
    PAIRING_KING_OF_THE_HILL: "King of the Hill",
    PAIRING_ROUND_ROBIN: "Round Robin",
    PAIRING_MANUAL: "Manual",
    PAIRING_GROUP_PHASE: "Triumvirate Groups",
}

# Names accepted from older saved configs
PAIRING_SYSTEM_ALIASES = {
    "fonte-swiss": PAIRING_FONTE_SWISS,
    "king-of-hill": PAIRING_KING_OF_THE_HILL,
    "king-of-the-hill": PAIRING_KING_OF_THE_HILL,
    "round-robin": PAIRING_ROUND_ROBIN,
    "triumvirate": PAIRING_GROUP_PHASE,
}

# Group labels: A, B, C, ...
GROUP_LABELS = tuple(string.ascii_uppercase)

# Default two-phase group format (36 teams, 6 groups of 6, 15 + 15 rounds)
DEFAULT_GROUP_TOTAL_ENTITIES = 36
DEFAULT_GROUP_TOTAL_ROUNDS = 30
DEFAULT_GROUP_PHASE1_ROUNDS = 15
DEFAULT_GROUP_PHASE2_ROUNDS = 15
DEFAULT_GROUP_COUNT = 6
DEFAULT_ENTITIES_PER_GROUP = 6

# Largest |starts - seconds| a competitor may reach
MAX_FIRST_MOVE_IMBALANCE = 2

# Matching search budgets
MATCHING_MAX_SHUFFLE_ATTEMPTS = 50
MATCHING_MAX_SEARCH_STEPS = 200_000

# Export column headers for a round's pairings
PAIRING_COLUMNS = (
    "Table",
    "Player 1",
    "Rating",
    "Rank",
    "Player 2",
    "Rating",
    "Rank",
    "First Move",
)
