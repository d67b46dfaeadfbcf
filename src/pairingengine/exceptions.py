"""Exceptions for use in the pairing engine"""

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

from typing import List, Optional, Sequence


# ========== Base Application Exception ==========


class PairingEngineException(Exception):
    """Base exception for all pairing engine errors.

    All custom exceptions in the engine inherit from this class.
    This enables catching all engine-specific errors with a single except clause.
    """

    pass


# ========== Pairing Exceptions ==========


class PairingException(PairingEngineException):
    """Base exception for pairing-related errors."""

    pass


class InvalidPairingException(PairingException):
    """Raised when externally supplied pairings are invalid."""

    pass


class PairingConstraintError(PairingException):
    """Raised when no valid partner exists for one or more competitors.

    Attributes:
        unmatched_ids: IDs of the competitors (or teams) left without a partner
        matchups: The partial pairings built before the search gave up
    """

    def __init__(
        self,
        message: str,
        unmatched_ids: Sequence[str],
        matchups: Optional[Sequence] = None,
    ):
        super().__init__(message)
        self.unmatched_ids: List[str] = list(unmatched_ids)
        self.matchups: List = list(matchups or [])

    def __str__(self) -> str:
        base = super().__str__()
        if not self.unmatched_ids:
            return base
        return f"{base} (unmatched: {', '.join(self.unmatched_ids)})"


class PairingInvariantError(PairingException):
    """Raised when generated pairings break a round invariant.

    A duplicate competitor or a self-pairing in engine output is a defect in
    the engine, never a caller error.
    """

    pass


# ========== Tournament Exceptions ==========


class TournamentException(PairingEngineException):
    """Base exception for tournament-related errors."""

    pass


class TournamentStateException(TournamentException):
    """Raised when tournament is in an invalid state for the requested operation."""

    pass


class RoundLockedError(TournamentStateException):
    """Raised when a locked round is regenerated or a round cannot be unlocked."""

    pass


class RoundNotFoundException(TournamentException):
    """Raised when a requested round does not exist."""

    pass


# ========== Player Exceptions ==========


class PlayerException(PairingEngineException):
    """Base exception for player-related errors."""

    pass


class PlayerNotFoundException(PlayerException):
    """Raised when a requested player cannot be found."""

    pass


# ========== Result Exceptions ==========


class ResultException(PairingEngineException):
    """Base exception for result recording errors."""

    pass


class InvalidResultException(ResultException):
    """Raised when a result is invalid (e.g., negative score)."""

    pass


# ========== Configuration Exceptions ==========


class ConfigurationException(PairingEngineException):
    """Base exception for configuration errors."""

    pass


class InvalidConfigurationException(ConfigurationException):
    """Raised when configuration data is invalid."""

    pass
