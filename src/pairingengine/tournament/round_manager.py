"""Round lifecycle for tournaments.

This module ties standings, constraints and the pairing systems together:
it checks whether a round may be paired or unpaired, and previews the
pairings of a round from a tournament snapshot. Nothing here persists; the
caller saves what the preview returns.
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
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from pairingengine.exceptions import (
    InvalidConfigurationException,
    RoundLockedError,
    RoundNotFoundException,
    TournamentStateException,
)
from pairingengine.models import (
    GroupAssignment,
    Matchup,
    PairingResult,
    Phase,
    RankedCompetitor,
    TeamRecord,
    TournamentConfig,
    TournamentSnapshot,
)
from pairingengine.pairing.engine import PairingEngine
from pairingengine.pairing.group_phase import (
    GroupPhaseScheduler,
    team_pairs_from_matchups,
    team_records,
)
from pairingengine.tournament.constraints import ConstraintTracker
from pairingengine.tournament.standings import StandingsCalculator
from pairingengine.type_hints import PairIDs
from pairingengine.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class RoundPreview:
    """Pairings proposed for one round.

    Attributes
    ----------
    round_number : int
        The round that was paired.
    matchups : list of Matchup
        Matchups in table order.
    standings : list of RankedCompetitor
        Standings the pairing was built from.
    bye_id : str or None
        Competitor sitting out, for odd counts.
    unpaired_ids : list of str
        Competitors left without a matchup for any other reason.
    strategy : str
        Pairing system used.
    group_assignments : tuple of GroupAssignment
        Group state to persist with the round (group format only).
    group_phase : Phase or None
        Phase the round belongs to (group format only).
    """

    round_number: int
    matchups: List[Matchup]
    standings: List[RankedCompetitor]
    bye_id: Optional[str] = None
    unpaired_ids: List[str] = field(default_factory=list)
    strategy: str = ""
    group_assignments: Tuple[GroupAssignment, ...] = ()
    group_phase: Optional[Phase] = None

    @property
    def pair_ids(self) -> List[PairIDs]:
        return [m.ids for m in self.matchups]


class RoundManager:
    """Checks round state and previews pairings for a tournament.

    This class is responsible for:
    - Refusing to pair a locked round, or to unpair one with results
    - Computing the standings a round is paired from
    - Dispatching to the pairing engine or the group-format scheduler

    It holds only the configuration; every call works on the snapshot it is
    given.
    """

    def __init__(self, config: TournamentConfig):
        self.config = config
        self.calculator = StandingsCalculator()
        self.engine = None if config.is_group_format else PairingEngine(
            config.pairing_system
        )

    # ========== Round State ==========

    def check_can_generate(self, snapshot: TournamentSnapshot, round_number: int) -> None:
        """Raise if ``round_number`` may not be paired now.

        Raises:
            RoundNotFoundException: If the round is outside the tournament
            RoundLockedError: If the round already holds pairings
            TournamentStateException: If a later round is already paired
        """
        if round_number < 1 or round_number > self.config.num_rounds:
            raise RoundNotFoundException(
                f"Round {round_number} is not part of this "
                f"{self.config.num_rounds}-round tournament"
            )
        if snapshot.matchups_for_round(round_number):
            raise RoundLockedError(
                f"Round {round_number} is already paired; unpair it first"
            )
        latest = snapshot.latest_paired_round
        if latest > round_number:
            raise TournamentStateException(
                f"Round {latest} is already paired, cannot pair round {round_number}"
            )

    def check_can_unlock(self, snapshot: TournamentSnapshot, round_number: int) -> None:
        """Raise if the pairings of ``round_number`` may not be deleted.

        Raises:
            RoundNotFoundException: If the round holds no pairings
            TournamentStateException: If a later round is paired
            RoundLockedError: If any result of the round is recorded
        """
        if not snapshot.matchups_for_round(round_number):
            raise RoundNotFoundException(f"Round {round_number} has no pairings")
        latest = snapshot.latest_paired_round
        if round_number != latest:
            raise TournamentStateException(
                f"Only the latest paired round ({latest}) can be unpaired"
            )
        if snapshot.has_results(round_number):
            raise RoundLockedError(
                f"Round {round_number} has recorded results and cannot be unpaired"
            )

    def unlock_round(self, snapshot: TournamentSnapshot, round_number: int) -> List[str]:
        """Return the keys of the matchups to delete to unpair a round."""
        self.check_can_unlock(snapshot, round_number)
        keys = [m.key for m in snapshot.matchups_for_round(round_number)]
        logger.info("Unpairing round %d (%d matchups)", round_number, len(keys))
        return keys

    # ========== Standings ==========

    def standings(
        self, snapshot: TournamentSnapshot, round_number: Optional[int] = None
    ) -> List[RankedCompetitor]:
        """Standings going into ``round_number`` (default: the next round)."""
        if round_number is None:
            round_number = snapshot.latest_paired_round + 1
        return self.calculator.calculate(
            snapshot.competitors,
            snapshot.matchups,
            snapshot.results,
            round_number,
            total_rounds=self.config.num_rounds,
        )

    def group_standings(self, snapshot: TournamentSnapshot) -> Dict[str, List[TeamRecord]]:
        """Team records per group, best first."""
        records = team_records(
            snapshot.group_assignments,
            snapshot.matchups,
            snapshot.results,
            snapshot.competitors,
        )
        grouped: Dict[str, List[TeamRecord]] = defaultdict(list)
        for record in sorted(records.values(), key=TeamRecord.sort_key):
            grouped[record.group].append(record)
        return dict(sorted(grouped.items()))

    # ========== Pairing ==========

    def _rng(self, round_number: int) -> random.Random:
        if self.config.seed is None:
            return random.Random()
        return random.Random(f"{self.config.seed}-{round_number}")

    def _pairing_standings(
        self, snapshot: TournamentSnapshot, round_number: int
    ) -> List[RankedCompetitor]:
        through = self.config.base_pairing_round
        if through is not None and not 0 <= through < round_number:
            raise InvalidConfigurationException(
                f"Cannot pair round {round_number} from the standings after "
                f"round {through}"
            )
        return self.calculator.calculate(
            snapshot.competitors,
            snapshot.matchups,
            snapshot.results,
            round_number,
            total_rounds=self.config.num_rounds,
            through_round=through,
        )

    def preview_round(
        self,
        snapshot: TournamentSnapshot,
        round_number: int,
        manual_pairs: Optional[Sequence[PairIDs]] = None,
    ) -> RoundPreview:
        """Propose pairings for a round.

        Args:
            snapshot: Roster and history of the tournament
            round_number: Round to pair (1-indexed)
            manual_pairs: Director-supplied pairs for the manual system

        Returns:
            RoundPreview; the caller persists it

        Raises:
            RoundNotFoundException, RoundLockedError, TournamentStateException:
                If the round may not be paired now
            PairingConstraintError: If constraints leave someone unpaired
            InvalidPairingException: If manual pairs are invalid
        """
        self.check_can_generate(snapshot, round_number)
        standings = self._pairing_standings(snapshot, round_number)
        rng = self._rng(round_number)

        if self.config.is_group_format:
            return self._preview_group_round(snapshot, round_number, standings, rng)

        constraints = ConstraintTracker.from_history(
            snapshot.competitors, snapshot.matchups, before_round=round_number
        )
        result = self.engine.generate(
            standings,
            constraints,
            round_number,
            avoid_rematches=self.config.avoid_rematches,
            avoid_same_team=self.config.team_mode,
            manual_pairs=manual_pairs,
            roster=snapshot.competitors,
        )
        return self._preview(round_number, result, standings)

    def _preview(
        self,
        round_number: int,
        result: PairingResult,
        standings: List[RankedCompetitor],
        extra_unpaired: Sequence[str] = (),
        scheduler: Optional[GroupPhaseScheduler] = None,
    ) -> RoundPreview:
        logger.info(
            "Round %d preview: %d matchups, bye %s",
            round_number,
            len(result),
            result.bye_id,
        )
        return RoundPreview(
            round_number=round_number,
            matchups=result.matchups,
            standings=standings,
            bye_id=result.bye_id,
            unpaired_ids=list(result.unpaired_ids) + list(extra_unpaired),
            strategy=result.strategy,
            group_assignments=scheduler.assignments if scheduler else (),
            group_phase=scheduler.phase if scheduler else None,
        )

    def _group_scheduler(
        self, snapshot: TournamentSnapshot, round_number: int, rng: random.Random
    ) -> GroupPhaseScheduler:
        format_config = self.config.group_format
        if snapshot.group_assignments:
            scheduler = GroupPhaseScheduler(
                format_config, snapshot.group_assignments, snapshot.group_phase
            )
        else:
            teams: List[str] = []
            for competitor in snapshot.competitors:
                if competitor.team and competitor.team not in teams:
                    teams.append(competitor.team)
            scheduler = GroupPhaseScheduler.start(teams, format_config, rng)

        if scheduler.is_ready_for_phase2(round_number - 1):
            scheduler = scheduler.transition(
                round_number - 1,
                snapshot.matchups,
                snapshot.results,
                snapshot.competitors,
            )
        return scheduler

    def _preview_group_round(
        self,
        snapshot: TournamentSnapshot,
        round_number: int,
        standings: List[RankedCompetitor],
        rng: random.Random,
    ) -> RoundPreview:
        scheduler = self._group_scheduler(snapshot, round_number, rng)
        known_teams = set(scheduler.teams)

        rosters: Dict[str, List[RankedCompetitor]] = defaultdict(list)
        teamless: List[str] = []
        for player in standings:
            if player.team in known_teams:
                rosters[player.team].append(player)
            else:
                teamless.append(player.id)
        if teamless:
            logger.warning(
                "%d competitor(s) belong to no scheduled team", len(teamless)
            )

        previous = team_pairs_from_matchups(
            (m for m in snapshot.matchups if m.round_number < round_number),
            snapshot.competitors,
        )
        result = scheduler.generate_round(round_number, rosters, previous, rng)
        return self._preview(round_number, result, standings, teamless, scheduler)
