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

"""
Round Robin Scheduling

This module implements round-robin fixture tables using the circle method.
It works on any ordered list of hashable entities (competitor IDs, team
names) and handles odd counts with a bye sentinel.

The circle method ensures that:
- Each entity meets every other entity exactly once
- Even counts take N-1 rounds, odd counts take N rounds with one bye each
- The schedule depends only on the input order (no randomness)
- Each fixture lists the entity moving first first; after any number of
  rounds no entity has moved first more than once above or below half its
  games

Example:
    >>> rr = RoundRobinScheduler(["A", "B", "C", "D"])
    >>> rr.number_of_rounds
    3
    >>> rr.get_round(1)
    (('A', 'D'), ('B', 'C'))
"""

from typing import Dict, Hashable, Iterable, List, Optional, Tuple

from pairingengine.exceptions import InvalidConfigurationException, PairingException
from pairingengine.type_hints import Fixture, RoundSchedule
from pairingengine.utils import setup_logger

logger = setup_logger(__name__)


class _ByeSentinel:
    """Placeholder entity filling the empty seat of an odd-sized schedule."""

    def __repr__(self) -> str:
        return "BYE"


BYE = _ByeSentinel()


class RoundRobinScheduler:
    """
    A circle-method round-robin schedule.

    The first entity stays fixed and the rest rotate one seat per round. In
    each round seat i meets seat n-1-i, and the odd seat of the two moves
    first; the fixed entity alternates instead. For odd counts the bye
    sentinel takes the fixed seat.

    Attributes:
        entities: Immutable tuple of entities in seed order
        number_of_rounds: Total number of rounds in the schedule
        rounds: Fixtures of each round, bye fixtures removed
        byes: Entity resting in each round (None for even counts)

    Example:
        >>> rr = RoundRobinScheduler(["A", "B", "C"])
        >>> rr.number_of_rounds
        3
        >>> rr.get_bye(1)
        'C'
    """

    def __init__(self, entities: Iterable[Hashable]) -> None:
        """
        Build the full schedule.

        Args:
            entities: Entities in seed order

        Raises:
            InvalidConfigurationException: If fewer than two entities are given
                or an entity is listed twice
        """
        self.entities: Tuple[Hashable, ...] = tuple(entities)
        count = len(self.entities)

        if count < 2:
            logger.error("Invalid entity count for round robin: %d", count)
            raise InvalidConfigurationException(
                f"Round robin needs at least two entities, got {count}"
            )
        if len(set(self.entities)) != count:
            raise InvalidConfigurationException(
                "Round robin entities must be distinct"
            )

        self.rounds: List[RoundSchedule] = []
        self.byes: List[Optional[Hashable]] = []
        self._generate_all_rounds()

    @property
    def number_of_rounds(self) -> int:
        return len(self.rounds)

    @property
    def has_bye(self) -> bool:
        return len(self.entities) % 2 == 1

    def _generate_all_rounds(self) -> None:
        """Generate fixtures for all rounds."""
        seats: List[Hashable] = list(self.entities)
        if self.has_bye:
            # the bye holds the fixed seat, so every entity rotates
            seats.insert(0, BYE)

        total_rounds = len(seats) - 1
        half = len(seats) // 2

        for round_idx in range(total_rounds):
            fixtures: List[Fixture] = []
            bye_entity = None
            for i in range(half):
                first, second = seats[i], seats[len(seats) - 1 - i]
                if first is BYE or second is BYE:
                    bye_entity = second if first is BYE else first
                    continue
                # odd seats move first; rotating entities change parity each round
                if i > 0 and i % 2 == 0:
                    first, second = second, first
                fixtures.append((first, second))
            self.rounds.append(tuple(fixtures))
            self.byes.append(bye_entity)
            logger.debug("Round %d: %s, bye: %s", round_idx + 1, fixtures, bye_entity)

            # keep seat 0 fixed, move the last seat to seat 1
            if len(seats) > 2:
                seats.insert(1, seats.pop())

        logger.info(
            "Generated round robin of %d rounds for %d entities",
            len(self.rounds),
            len(self.entities),
        )

    def _round_index(self, round_number: int, cycle: bool) -> int:
        if round_number < 1:
            raise PairingException(f"Round {round_number} is not valid")
        if cycle:
            return (round_number - 1) % self.number_of_rounds
        if round_number > self.number_of_rounds:
            raise PairingException(
                f"Round {round_number} is not valid. Schedule has "
                f"{self.number_of_rounds} rounds (1-{self.number_of_rounds})"
            )
        return round_number - 1

    def get_round(self, round_number: int, cycle: bool = False) -> RoundSchedule:
        """
        Get fixtures for a specific round.

        Each fixture lists the entity moving first first. The fixed entity
        moves first in odd rounds and second in even rounds, counting cycled
        rounds too.

        Args:
            round_number: 1-indexed round number
            cycle: Wrap around when the round number exceeds the schedule

        Returns:
            Fixtures of that round

        Raises:
            PairingException: If round_number is outside the schedule and
                cycling is off
        """
        fixtures = self.rounds[self._round_index(round_number, cycle)]
        if self.has_bye or round_number % 2 == 1:
            return fixtures
        (fixed, opponent), *rest = fixtures
        return ((opponent, fixed), *rest)

    def get_bye(self, round_number: int, cycle: bool = False) -> Optional[Hashable]:
        """Get the entity resting in a round, or None for even counts."""
        return self.byes[self._round_index(round_number, cycle)]

    def get_entity_schedule(
        self, entity: Hashable
    ) -> List[Tuple[int, Optional[Hashable]]]:
        """
        Get the complete schedule for a specific entity.

        Returns:
            List of tuples (round_number, opponent), where opponent is None
            for bye rounds

        Raises:
            PairingException: If the entity is not in the schedule
        """
        if entity not in self.entities:
            raise PairingException(f"{entity!r} is not in this schedule")

        opponents: Dict[int, Optional[Hashable]] = {}
        for round_idx, fixtures in enumerate(self.rounds):
            opponents[round_idx + 1] = None
            for first, second in fixtures:
                if entity == first:
                    opponents[round_idx + 1] = second
                elif entity == second:
                    opponents[round_idx + 1] = first
        return sorted(opponents.items())

    def __repr__(self) -> str:
        return (
            f"RoundRobinScheduler(entities={len(self.entities)}, "
            f"rounds={self.number_of_rounds})"
        )


#  LocalWords:  RoundSchedule RoundRobinScheduler
