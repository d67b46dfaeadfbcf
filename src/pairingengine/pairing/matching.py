"""Perfect matching search under pairwise constraints.

Used where a round must pair every entity and the only requirement is that
each pair satisfies a predicate (cross-group phase of the group format), and
to repair Swiss rounds that the greedy bracket passes could not complete.

The search first tries a bounded number of shuffle-and-greedy passes, each on
a fresh shuffle from the caller's random source. If all of them strand an
entity it falls back to an exhaustive backtracking search that always picks
the entity with the fewest remaining candidates, so a valid matching is found
whenever one exists within the step budget.
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

import random
from typing import Dict, Hashable, List, Optional, Sequence, Set, Tuple

from pairingengine.constants import (
    MATCHING_MAX_SEARCH_STEPS,
    MATCHING_MAX_SHUFFLE_ATTEMPTS,
)
from pairingengine.exceptions import (
    InvalidConfigurationException,
    PairingConstraintError,
)
from pairingengine.type_hints import Fixture, PairPredicate
from pairingengine.utils import setup_logger

logger = setup_logger(__name__)


def greedy_matching(
    items: Sequence[Hashable], is_allowed: PairPredicate
) -> Tuple[List[Fixture], List[Hashable]]:
    """Pair items in order, each with the first compatible unpaired item.

    Returns:
        (pairs, items left without a partner)
    """
    paired: Set[Hashable] = set()
    pairs: List[Fixture] = []
    stranded: List[Hashable] = []
    for index, first in enumerate(items):
        if first in paired:
            continue
        partner = next(
            (
                second
                for second in items[index + 1 :]
                if second not in paired and is_allowed(first, second)
            ),
            None,
        )
        if partner is None:
            stranded.append(first)
            continue
        pairs.append((first, partner))
        paired.update((first, partner))
    return pairs, stranded


class _SearchBudgetExceeded(Exception):
    pass


def _backtracking_matching(
    items: Sequence[Hashable], is_allowed: PairPredicate, max_steps: int
) -> Optional[List[Fixture]]:
    """Exhaustive perfect matching search, most constrained item first.

    Returns:
        The pairs, or None when no perfect matching exists

    Raises:
        _SearchBudgetExceeded: If the search takes more than ``max_steps``
    """
    candidates: Dict[Hashable, List[Hashable]] = {
        item: [other for other in items if other != item and is_allowed(item, other)]
        for item in items
    }
    unmatched: Set[Hashable] = set(items)
    order = {item: index for index, item in enumerate(items)}
    pairs: List[Fixture] = []
    steps = 0

    def solve() -> bool:
        nonlocal steps
        if not unmatched:
            return True
        steps += 1
        if steps > max_steps:
            raise _SearchBudgetExceeded()
        pivot = min(
            unmatched,
            key=lambda item: (
                sum(1 for other in candidates[item] if other in unmatched),
                order[item],
            ),
        )
        options = [other for other in candidates[pivot] if other in unmatched]
        unmatched.discard(pivot)
        for partner in options:
            unmatched.discard(partner)
            pairs.append((pivot, partner))
            if solve():
                return True
            pairs.pop()
            unmatched.add(partner)
        unmatched.add(pivot)
        return False

    return pairs if solve() else None


def search_matching(
    items: Sequence[Hashable],
    is_allowed: PairPredicate,
    max_steps: int = MATCHING_MAX_SEARCH_STEPS,
) -> Optional[List[Fixture]]:
    """Deterministic perfect matching search.

    Each step pairs the item with the fewest remaining candidates, trying its
    partners in the order of ``items``.

    Returns:
        Pairs covering every item, or None when no perfect matching exists or
        the step budget runs out
    """
    if len(items) % 2:
        return None
    try:
        return _backtracking_matching(items, is_allowed, max_steps)
    except _SearchBudgetExceeded:
        logger.warning("Matching search gave up after %d steps", max_steps)
        return None


def find_perfect_matching(
    items: Sequence[Hashable],
    is_allowed: PairPredicate,
    rng: random.Random,
    max_attempts: int = MATCHING_MAX_SHUFFLE_ATTEMPTS,
    max_steps: int = MATCHING_MAX_SEARCH_STEPS,
) -> List[Fixture]:
    """Pair every item with a compatible partner.

    Args:
        items: Entities to pair, even count
        is_allowed: Symmetric predicate, True when two entities may meet
        rng: Random source; drives the shuffles so results are reproducible
        max_attempts: Shuffle-and-greedy passes before falling back to search
        max_steps: Step budget for the backtracking search

    Returns:
        Pairs covering every item exactly once

    Raises:
        InvalidConfigurationException: If the item count is odd
        PairingConstraintError: If no perfect matching could be found; the
            error lists the items stranded by the best greedy pass
    """
    if len(items) % 2:
        raise InvalidConfigurationException(
            f"Cannot pair an odd number of entities ({len(items)})"
        )

    best_pairs: List[Fixture] = []
    best_stranded: List[Hashable] = list(items)
    for attempt in range(1, max_attempts + 1):
        shuffled = list(items)
        rng.shuffle(shuffled)
        pairs, stranded = greedy_matching(shuffled, is_allowed)
        if not stranded:
            logger.debug("Greedy matching succeeded on attempt %d", attempt)
            return pairs
        if len(stranded) < len(best_stranded):
            best_pairs, best_stranded = pairs, stranded

    logger.info(
        "Greedy matching failed %d times, falling back to exhaustive search",
        max_attempts,
    )
    shuffled = list(items)
    rng.shuffle(shuffled)
    pairs = search_matching(shuffled, is_allowed, max_steps)
    if pairs is not None:
        return pairs

    logger.warning("No perfect matching exists, stranded: %s", best_stranded)
    raise PairingConstraintError(
        "No valid pairing covers every entity",
        [str(item) for item in best_stranded],
        best_pairs,
    )
