"""Type hints used in the pairing engine."""

from typing import Callable, Hashable, Literal, Tuple

# Outcome literals from one competitor's point of view
Outcome = Literal["win", "draw", "loss"]

# Pair of competitor ids, player 1 first
PairIDs = Tuple[str, str]
# A round-robin fixture between two scheduled entities
Fixture = Tuple[Hashable, Hashable]
# All fixtures of one round-robin round
RoundSchedule = Tuple[Fixture, ...]
# Predicate deciding whether two entities may meet
PairPredicate = Callable[[Hashable, Hashable], bool]

#  LocalWords:  RoundSchedule PairIDs
