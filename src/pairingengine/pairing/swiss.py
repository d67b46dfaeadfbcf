"""Score-bracket Swiss pairing and its narrow-bracket (Fonte) variant."""

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

from itertools import groupby
from typing import Callable, List, Optional, Sequence, Set, Tuple

from pairingengine.exceptions import PairingConstraintError
from pairingengine.models import RankedCompetitor
from pairingengine.pairing.matching import greedy_matching, search_matching
from pairingengine.utils import setup_logger

logger = setup_logger(__name__)

RankedPair = Tuple[RankedCompetitor, RankedCompetitor]
Allowed = Callable[[RankedCompetitor, RankedCompetitor], bool]


def _sort_by_rank(players: Sequence[RankedCompetitor]) -> List[RankedCompetitor]:
    return sorted(players, key=lambda p: p.rank)


def score_brackets(players: Sequence[RankedCompetitor]) -> List[List[RankedCompetitor]]:
    """Split ranked players into consecutive groups sharing a point total."""
    ordered = _sort_by_rank(players)
    return [list(group) for _, group in groupby(ordered, key=lambda p: p.points)]


def _pair_bracket(
    pool: List[RankedCompetitor], is_allowed: Allowed
) -> Tuple[List[RankedPair], List[RankedCompetitor]]:
    """Fold-pair one bracket.

    The top half meets the bottom half (1 vs h+1, 2 vs h+2, ...). When the
    fold partner is not allowed, the next bottom-half player in turn is
    tried. Players still unpaired after that are matched among themselves in
    rank order; whoever is left floats down.

    Returns:
        (pairs, downfloaters in rank order)
    """
    half = len(pool) // 2
    top, bottom = pool[:half], pool[half:]
    paired: Set[str] = set()
    pairs: List[RankedPair] = []

    for index, player in enumerate(top):
        for candidate in bottom[index:] + bottom[:index]:
            if candidate.id not in paired and is_allowed(player, candidate):
                pairs.append((player, candidate))
                paired.update((player.id, candidate.id))
                break
        else:
            logger.debug("No fold partner for %s in bracket", player.name)

    leftovers = [p for p in pool if p.id not in paired]
    extra, floaters = greedy_matching(leftovers, is_allowed)
    pairs.extend(extra)
    return pairs, list(floaters)


def _repair(
    pairs: List[RankedPair], stranded: Sequence[RankedCompetitor], is_allowed: Allowed
) -> Optional[List[RankedPair]]:
    """Re-pair stranded players together with the lowest pairs.

    The lowest pair is broken up first, then twice as many each time, until a
    perfect matching covers the stranded players and the broken-up pairs or
    every pair has been reopened.

    Returns:
        The repaired pairs, or None when no valid round exists
    """
    reopened = 1
    while True:
        reopened = min(reopened, len(pairs))
        split = len(pairs) - reopened
        kept = pairs[:split]
        pool = list(stranded) + [p for pair in pairs[split:] for p in pair]
        found = search_matching(_sort_by_rank(pool), is_allowed)
        if found is not None:
            logger.info(
                "Re-paired %d stranded player(s) by reopening %d pair(s)",
                len(stranded),
                reopened,
            )
            return kept + found
        if reopened == len(pairs):
            return None
        reopened *= 2


def pair_score_brackets(
    players: Sequence[RankedCompetitor], is_allowed: Allowed
) -> List[RankedPair]:
    """Swiss pairing over score brackets.

    Brackets are paired greedily from the top: a player without a valid
    partner in its bracket floats into the next bracket. Players still
    stranded after the last bracket are re-paired with a matching search over
    the lowest pairs (see ``_repair``).

    Raises:
        PairingConstraintError: If no valid pairing covers every player
    """
    pairs: List[RankedPair] = []
    floaters: List[RankedCompetitor] = []
    for bracket in score_brackets(players):
        pool = floaters + bracket
        if floaters:
            logger.debug(
                "%d player(s) float into the %g-point bracket",
                len(floaters),
                bracket[0].points,
            )
        bracket_pairs, floaters = _pair_bracket(pool, is_allowed)
        pairs.extend(bracket_pairs)

    if not floaters:
        return pairs
    repaired = _repair(pairs, floaters, is_allowed)
    if repaired is not None:
        return repaired
    logger.warning(
        "Swiss pairing left %d player(s) without a valid opponent", len(floaters)
    )
    raise PairingConstraintError(
        "No valid opponent left in the lowest bracket",
        [p.id for p in floaters],
        [(a.id, b.id) for a, b in pairs],
    )


def pair_adjacent(
    players: Sequence[RankedCompetitor], is_allowed: Allowed
) -> List[RankedPair]:
    """Fonte-Swiss pairing: narrowest possible brackets.

    Each player, in rank order, meets the nearest-ranked player below who is
    still available and allowed. Stranded players are re-paired as in
    ``pair_score_brackets``.

    Raises:
        PairingConstraintError: If no valid pairing covers every player
    """
    pairs, stranded = greedy_matching(_sort_by_rank(players), is_allowed)
    if not stranded:
        return pairs
    repaired = _repair(pairs, stranded, is_allowed)
    if repaired is not None:
        return repaired
    logger.warning(
        "Fonte-Swiss pairing left %d player(s) without a valid opponent",
        len(stranded),
    )
    raise PairingConstraintError(
        "No valid opponent left for some players",
        [p.id for p in stranded],
        [(a.id, b.id) for a, b in pairs],
    )
