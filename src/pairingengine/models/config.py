"""TournamentConfig and TournamentFormatConfig data classes."""

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
from typing import Any, Dict, Optional

from pairingengine.constants import (
    DEFAULT_ENTITIES_PER_GROUP,
    DEFAULT_GROUP_COUNT,
    DEFAULT_GROUP_PHASE1_ROUNDS,
    DEFAULT_GROUP_PHASE2_ROUNDS,
    DEFAULT_GROUP_TOTAL_ENTITIES,
    DEFAULT_GROUP_TOTAL_ROUNDS,
    DEFAULT_PAIRING_SYSTEM,
    GROUP_LABELS,
    PAIRING_GROUP_PHASE,
    PAIRING_SYSTEM_ALIASES,
    PAIRING_SYSTEM_NAMES,
)
from pairingengine.exceptions import InvalidConfigurationException


def normalize_pairing_system(name: str) -> str:
    """Map a stored pairing system name onto a known one.

    Raises:
        InvalidConfigurationException: If the name is not a known pairing system
    """
    key = PAIRING_SYSTEM_ALIASES.get(name, name)
    if key not in PAIRING_SYSTEM_NAMES:
        raise InvalidConfigurationException(f"Unknown pairing system: {name!r}")
    return key


@dataclass(frozen=True)
class TournamentFormatConfig:
    """Shape of the two-phase large-group format.

    Attributes
    ----------
    total_entities : int
        Number of teams taking part.
    total_rounds : int
        Rounds across both phases.
    phase1_rounds : int
        Cross-group rounds played before regrouping.
    phase2_rounds : int
        Within-group round-robin rounds after regrouping.
    groups : int
        Number of phase-1 groups.
    entities_per_group : int
        Teams in each phase-1 group.
    """

    total_entities: int = DEFAULT_GROUP_TOTAL_ENTITIES
    total_rounds: int = DEFAULT_GROUP_TOTAL_ROUNDS
    phase1_rounds: int = DEFAULT_GROUP_PHASE1_ROUNDS
    phase2_rounds: int = DEFAULT_GROUP_PHASE2_ROUNDS
    groups: int = DEFAULT_GROUP_COUNT
    entities_per_group: int = DEFAULT_ENTITIES_PER_GROUP

    def validate(self) -> None:
        """Check the format invariants.

        Raises:
            InvalidConfigurationException: If the numbers do not add up
        """
        if self.phase1_rounds < 1 or self.phase2_rounds < 0:
            raise InvalidConfigurationException(
                f"Invalid phase lengths: {self.phase1_rounds} + {self.phase2_rounds}"
            )
        if self.phase1_rounds + self.phase2_rounds != self.total_rounds:
            raise InvalidConfigurationException(
                f"Phase rounds ({self.phase1_rounds} + {self.phase2_rounds}) "
                f"must add up to total rounds ({self.total_rounds})"
            )
        if self.groups < 2 or self.entities_per_group < 2:
            raise InvalidConfigurationException(
                "Group format needs at least two groups of at least two teams, got "
                f"{self.groups} groups of {self.entities_per_group}"
            )
        if self.groups * self.entities_per_group != self.total_entities:
            raise InvalidConfigurationException(
                f"{self.total_entities} teams cannot be split into "
                f"{self.groups} groups of {self.entities_per_group}"
            )
        # phase 2 groups are named by within-group position
        if max(self.groups, self.entities_per_group) > len(GROUP_LABELS):
            raise InvalidConfigurationException(
                f"At most {len(GROUP_LABELS)} groups are supported"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize format configuration to dictionary."""
        return {
            "total_teams": self.total_entities,
            "total_rounds": self.total_rounds,
            "phase1_rounds": self.phase1_rounds,
            "phase2_rounds": self.phase2_rounds,
            "groups_per_phase": self.groups,
            "teams_per_group": self.entities_per_group,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TournamentFormatConfig":
        """Deserialize format configuration from dictionary."""
        return cls(
            total_entities=data.get("total_teams", DEFAULT_GROUP_TOTAL_ENTITIES),
            total_rounds=data.get("total_rounds", DEFAULT_GROUP_TOTAL_ROUNDS),
            phase1_rounds=data.get("phase1_rounds", DEFAULT_GROUP_PHASE1_ROUNDS),
            phase2_rounds=data.get("phase2_rounds", DEFAULT_GROUP_PHASE2_ROUNDS),
            groups=data.get("groups_per_phase", DEFAULT_GROUP_COUNT),
            entities_per_group=data.get("teams_per_group", DEFAULT_ENTITIES_PER_GROUP),
        )


@dataclass
class TournamentConfig:
    """Tournament configuration settings.

    Attributes
    ----------
    name : str
        Tournament name.
    num_rounds : int
        Number of rounds in the tournament.
    pairing_system : str
        Pairing system used for generating pairings. Supported values are
        "swiss", "fonte_swiss", "king_of_the_hill", "round_robin", "manual"
        and "group_phase".
    avoid_rematches : bool
        Whether score-bracket systems refuse pairs that already met.
    team_mode : bool
        Whether team mates must not be paired against each other.
    base_pairing_round : int or None
        Pair from the standings as they stood after this round
        (0 means ratings only). None uses all prior rounds.
    group_format : TournamentFormatConfig or None
        Shape of the two-phase group format, required for "group_phase".
    seed : int or None
        Seed for the randomized parts of pairing; None draws a fresh seed.
    """

    name: str
    num_rounds: int
    pairing_system: str = DEFAULT_PAIRING_SYSTEM
    avoid_rematches: bool = True
    team_mode: bool = False
    base_pairing_round: Optional[int] = None
    group_format: Optional[TournamentFormatConfig] = None
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        self.pairing_system = normalize_pairing_system(self.pairing_system)
        if self.num_rounds < 1:
            raise InvalidConfigurationException(
                f"A tournament needs at least one round, got {self.num_rounds}"
            )
        if self.pairing_system == PAIRING_GROUP_PHASE:
            if self.group_format is None:
                self.group_format = TournamentFormatConfig()
            self.group_format.validate()
            if self.group_format.total_rounds != self.num_rounds:
                raise InvalidConfigurationException(
                    f"Group format plays {self.group_format.total_rounds} rounds "
                    f"but the tournament has {self.num_rounds}"
                )

    @property
    def is_group_format(self) -> bool:
        return self.pairing_system == PAIRING_GROUP_PHASE

    def to_dict(self) -> Dict[str, Any]:
        """Serialize configuration to dictionary."""
        return {
            "name": self.name,
            "num_rounds": self.num_rounds,
            "pairing_system": self.pairing_system,
            "avoid_rematches": self.avoid_rematches,
            "team_mode": self.team_mode,
            "base_pairing_round": self.base_pairing_round,
            "group_format": (
                self.group_format.to_dict() if self.group_format is not None else None
            ),
            "seed": self.seed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TournamentConfig":
        """Deserialize configuration from dictionary."""
        group_format = data.get("group_format")
        return cls(
            name=data.get("name", "Untitled Tournament"),
            num_rounds=data["num_rounds"],
            pairing_system=data.get("pairing_system") or DEFAULT_PAIRING_SYSTEM,
            avoid_rematches=data.get("avoid_rematches", True),
            team_mode=data.get("team_mode", False),
            base_pairing_round=data.get("base_pairing_round"),
            group_format=(
                TournamentFormatConfig.from_dict(group_format)
                if group_format
                else None
            ),
            seed=data.get("seed"),
        )
