"""Validation utilities for the pairing engine.

This module provides reusable validation functions with consistent error handling.
"""

from typing import Iterable, List, Optional, Sequence, Set, Tuple

from pairingengine.exceptions import InvalidPairingException, PairingInvariantError


class ValidationResult:
    """Result of a validation operation.

    Attributes:
        is_valid: Whether the validation passed
        error_message: Human-readable error message if invalid
        offending_ids: Competitor IDs involved in the failure
    """

    def __init__(
        self,
        is_valid: bool,
        error_message: Optional[str] = None,
        offending_ids: Optional[List[str]] = None,
    ):
        self.is_valid = is_valid
        self.error_message = error_message
        self.offending_ids = offending_ids or []

    def __bool__(self) -> bool:
        """Allow using result in boolean context: if result: ..."""
        return self.is_valid

    def __repr__(self) -> str:
        if self.is_valid:
            return "ValidationResult(VALID)"
        return f"ValidationResult(INVALID, {self.error_message!r})"


# ========== Round Validation ==========


def check_pairs(
    pairs: Iterable[Tuple[str, str]],
    allowed_ids: Optional[Set[str]] = None,
) -> ValidationResult:
    """Check a round's pairs for self-pairings and repeated competitors.

    Args:
        pairs: (player1_id, player2_id) tuples of one round
        allowed_ids: If given, every paired ID must be in this set

    Returns:
        ValidationResult with validation status

    Example:
        >>> check_pairs([("a", "b"), ("c", "a")]).offending_ids
        ['a']
    """
    seen: Set[str] = set()
    for first, second in pairs:
        if first == second:
            return ValidationResult(
                is_valid=False,
                error_message=f"{first} is paired against itself",
                offending_ids=[first],
            )
        for competitor_id in (first, second):
            if allowed_ids is not None and competitor_id not in allowed_ids:
                return ValidationResult(
                    is_valid=False,
                    error_message=f"{competitor_id} is not an active competitor",
                    offending_ids=[competitor_id],
                )
            if competitor_id in seen:
                return ValidationResult(
                    is_valid=False,
                    error_message=f"{competitor_id} appears in more than one pairing",
                    offending_ids=[competitor_id],
                )
            seen.add(competitor_id)
    return ValidationResult(is_valid=True)


def validate_round_pairings(
    pairs: Sequence[Tuple[str, str]],
    active_ids: Set[str],
    expected_count: Optional[int] = None,
) -> None:
    """Reject engine output that breaks a round invariant.

    Raises:
        PairingInvariantError: On self-pairing, duplicates, unknown IDs or a
            matchup count other than ``expected_count``
    """
    result = check_pairs(pairs, active_ids)
    if not result:
        raise PairingInvariantError(result.error_message)
    if expected_count is not None and len(pairs) != expected_count:
        raise PairingInvariantError(
            f"Expected {expected_count} pairings, generated {len(pairs)}"
        )


def validate_manual_pairs(
    pairs: Sequence[Tuple[str, str]], active_ids: Set[str]
) -> None:
    """Validate pairs supplied by a tournament director.

    Raises:
        InvalidPairingException: If a competitor is unknown, inactive, paired
            with itself or paired twice
    """
    result = check_pairs(pairs, active_ids)
    if not result:
        raise InvalidPairingException(result.error_message)
