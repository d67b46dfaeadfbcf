"""Two-phase large-group team format.

Phase 1: teams are drawn at random into equal groups and every round each
team meets a team from another group that it has not met yet.

Phase 2: teams are ranked inside their phase-1 group and regrouped by that
rank (all group winners form the new group A, all runners-up group B, ...).
Each new group then plays a round robin, cycled when phase 2 is longer than
one cycle.

In both phases the team fixtures are expanded into board pairings by
matching the two rosters position for position.
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
from typing import (
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
    Tuple,
)

from pairingengine.constants import GROUP_LABELS, PAIRING_GROUP_PHASE
from pairingengine.exceptions import (
    InvalidConfigurationException,
    TournamentStateException,
)
from pairingengine.models import (
    Competitor,
    GroupAssignment,
    Matchup,
    PairingResult,
    Phase,
    RankedCompetitor,
    ResultRecord,
    TeamRecord,
    TournamentFormatConfig,
)
from pairingengine.pairing.engine import build_matchups
from pairingengine.pairing.matching import find_perfect_matching
from pairingengine.pairing.round_robin import RoundRobinScheduler
from pairingengine.utils import setup_logger
from pairingengine.utils.validation import validate_round_pairings

logger = setup_logger(__name__)

TeamPair = FrozenSet[str]


def initialize_groups(
    teams: Sequence[str], format_config: TournamentFormatConfig, rng: random.Random
) -> List[GroupAssignment]:
    """Draw teams into phase-1 groups.

    One shuffle of the team order, then contiguous slices of
    ``entities_per_group`` teams labelled A, B, C, ...

    Raises:
        InvalidConfigurationException: If the team count does not fit the format
    """
    format_config.validate()
    if len(set(teams)) != len(teams):
        raise InvalidConfigurationException("Team names must be unique")
    if len(teams) != format_config.total_entities:
        raise InvalidConfigurationException(
            f"Format expects {format_config.total_entities} teams, got {len(teams)}"
        )

    shuffled = list(teams)
    rng.shuffle(shuffled)
    size = format_config.entities_per_group
    assignments = [
        GroupAssignment(team=team, group=GROUP_LABELS[index // size])
        for index, team in enumerate(shuffled)
    ]
    logger.info(
        "Drew %d teams into %d groups of %d",
        len(teams),
        format_config.groups,
        size,
    )
    return assignments


def team_pairs_from_matchups(
    matchups: Iterable[Matchup], competitors: Iterable[Competitor]
) -> Set[TeamPair]:
    """Team pairs that already met, derived from board matchups."""
    team_of = {c.id: c.team for c in competitors if c.team}
    pairs: Set[TeamPair] = set()
    for matchup in matchups:
        first = team_of.get(matchup.player1_id)
        second = team_of.get(matchup.player2_id)
        if first and second and first != second:
            pairs.add(frozenset((first, second)))
    return pairs


def team_records(
    assignments: Iterable[GroupAssignment],
    matchups: Iterable[Matchup],
    results: Iterable[ResultRecord],
    competitors: Iterable[Competitor],
    last_round: Optional[int] = None,
) -> Dict[str, TeamRecord]:
    """Accumulate team-match records.

    A team match is every board played between the same two teams in the
    same round. The team with more board wins takes the match; an even split
    is a drawn match and counts as a win for neither side. Spread and
    individual board wins are summed over all boards.

    Args:
        assignments: Current group assignments (defines the teams)
        matchups: Board matchups
        results: Board results
        competitors: Roster, used to map players to teams
        last_round: Ignore rounds after this one

    Returns:
        Team name -> TeamRecord
    """
    records = {a.team: TeamRecord(team=a.team, group=a.group) for a in assignments}
    team_of = {c.id: c.team for c in competitors if c.team}
    results_by_key = {r.matchup_id: r for r in results}
    board_wins: Dict[Tuple[int, TeamPair], Dict[str, int]] = defaultdict(
        lambda: defaultdict(int)
    )

    for matchup in matchups:
        if last_round is not None and matchup.round_number > last_round:
            continue
        result = results_by_key.get(matchup.key)
        if result is None:
            continue
        team1 = team_of.get(matchup.player1_id)
        team2 = team_of.get(matchup.player2_id)
        if team1 not in records or team2 not in records or team1 == team2:
            continue

        match_key = (matchup.round_number, frozenset((team1, team2)))
        tally = board_wins[match_key]
        tally[team1] += 0
        tally[team2] += 0
        for team, is_player1 in ((team1, True), (team2, False)):
            records[team].spread += result.spread_for(is_player1)
        if result.player1_score > result.player2_score:
            records[team1].individual_wins += 1
            tally[team1] += 1
        elif result.player2_score > result.player1_score:
            records[team2].individual_wins += 1
            tally[team2] += 1

    for tally in board_wins.values():
        (team1, wins1), (team2, wins2) = tally.items()
        if wins1 > wins2:
            records[team1].wins += 1
            records[team2].losses += 1
        elif wins2 > wins1:
            records[team2].wins += 1
            records[team1].losses += 1
        else:
            records[team1].draws += 1
            records[team2].draws += 1

    return records


def board_pairs(
    fixtures: Sequence[Tuple[str, str]],
    rosters: Mapping[str, Sequence[RankedCompetitor]],
) -> Tuple[List[Tuple[RankedCompetitor, RankedCompetitor]], List[str]]:
    """Expand team fixtures into board pairs.

    Board 1 meets board 1, board 2 meets board 2, and so on up to the
    shorter roster.

    Returns:
        (board pairs in table order, IDs of players without a board)
    """
    pairs = []
    benched: List[str] = []
    for team1, team2 in fixtures:
        roster1 = list(rosters.get(team1, ()))
        roster2 = list(rosters.get(team2, ()))
        boards = min(len(roster1), len(roster2))
        pairs.extend(zip(roster1[:boards], roster2[:boards]))
        benched.extend(p.id for p in roster1[boards:] + roster2[boards:])
    return pairs, benched


class GroupPhaseScheduler:
    """Schedules rounds of the two-phase group format.

    Instances are immutable: the phase transition returns a new scheduler.

    Attributes:
        format_config: Shape of the format
        assignments: Group membership per team
        phase: Current phase
    """

    def __init__(
        self,
        format_config: TournamentFormatConfig,
        assignments: Iterable[GroupAssignment],
        phase: Phase = Phase.PHASE1,
    ) -> None:
        format_config.validate()
        self.format_config = format_config
        self.assignments: Tuple[GroupAssignment, ...] = tuple(assignments)
        self.phase = phase
        self._group_of: Dict[str, str] = {a.team: a.group for a in self.assignments}
        if len(self._group_of) != len(self.assignments):
            raise InvalidConfigurationException("A team is assigned to two groups")
        if len(self.assignments) != format_config.total_entities:
            raise InvalidConfigurationException(
                f"Format expects {format_config.total_entities} teams, "
                f"{len(self.assignments)} are assigned"
            )

    @classmethod
    def start(
        cls,
        teams: Sequence[str],
        format_config: TournamentFormatConfig,
        rng: random.Random,
    ) -> "GroupPhaseScheduler":
        """Draw the phase-1 groups and return a scheduler in phase 1."""
        return cls(format_config, initialize_groups(teams, format_config, rng))

    @property
    def teams(self) -> List[str]:
        return [a.team for a in self.assignments]

    @property
    def groups(self) -> Dict[str, List[str]]:
        """Group label -> teams, labels in order."""
        grouped: Dict[str, List[str]] = defaultdict(list)
        for assignment in self.assignments:
            grouped[assignment.group].append(assignment.team)
        return dict(sorted(grouped.items()))

    def group_of(self, team: str) -> str:
        return self._group_of[team]

    def is_ready_for_phase2(self, completed_round: int) -> bool:
        return (
            self.phase is Phase.PHASE1
            and completed_round >= self.format_config.phase1_rounds
        )

    # ========== Round Generation ==========

    def generate_round(
        self,
        round_number: int,
        rosters: Mapping[str, Sequence[RankedCompetitor]],
        previous_team_pairs: Iterable[TeamPair],
        rng: random.Random,
    ) -> PairingResult:
        """Generate board pairings for one round.

        Args:
            round_number: Round being paired (1-indexed, counted across phases)
            rosters: Team name -> active players in board order
            previous_team_pairs: Team pairs that already met
            rng: Random source for the phase-1 matching

        Returns:
            PairingResult; players without a board are in ``unpaired_ids``

        Raises:
            TournamentStateException: If the round does not belong to the
                current phase
            PairingConstraintError: If no valid cross-group matching exists
        """
        fixtures = self.team_fixtures(round_number, previous_team_pairs, rng)
        pairs, benched = board_pairs(fixtures, rosters)
        matchups = build_matchups(pairs, round_number)

        roster_ids = {p.id for roster in rosters.values() for p in roster}
        validate_round_pairings([m.ids for m in matchups], roster_ids)
        if benched:
            logger.info(
                "Round %d: %d player(s) without a board", round_number, len(benched)
            )
        return PairingResult(
            matchups=matchups, unpaired_ids=benched, strategy=PAIRING_GROUP_PHASE
        )

    def team_fixtures(
        self,
        round_number: int,
        previous_team_pairs: Iterable[TeamPair],
        rng: random.Random,
    ) -> List[Tuple[str, str]]:
        """Team-level fixtures of a round."""
        phase1_rounds = self.format_config.phase1_rounds
        if round_number < 1 or round_number > self.format_config.total_rounds:
            raise TournamentStateException(
                f"Round {round_number} is outside the "
                f"{self.format_config.total_rounds}-round format"
            )
        if round_number <= phase1_rounds:
            if self.phase is not Phase.PHASE1:
                raise TournamentStateException(
                    f"Round {round_number} belongs to phase 1, which is over"
                )
            return self._cross_group_fixtures(previous_team_pairs, rng)
        if self.phase is not Phase.PHASE2:
            raise TournamentStateException(
                f"Round {round_number} belongs to phase 2; "
                "finish the phase transition first"
            )
        return self._within_group_fixtures(round_number - phase1_rounds)

    def _cross_group_fixtures(
        self, previous_team_pairs: Iterable[TeamPair], rng: random.Random
    ) -> List[Tuple[str, str]]:
        played = set(previous_team_pairs)

        def is_allowed(first: str, second: str) -> bool:
            return (
                self._group_of[first] != self._group_of[second]
                and frozenset((first, second)) not in played
            )

        fixtures = find_perfect_matching(self.teams, is_allowed, rng)
        logger.info("Phase 1: %d cross-group team matches", len(fixtures))
        return fixtures

    def _within_group_fixtures(self, phase2_round: int) -> List[Tuple[str, str]]:
        fixtures: List[Tuple[str, str]] = []
        for label, teams in self.groups.items():
            if len(teams) < 2:
                continue
            schedule = RoundRobinScheduler(teams)
            fixtures.extend(schedule.get_round(phase2_round, cycle=True))
            bye = schedule.get_bye(phase2_round, cycle=True)
            if bye is not None:
                logger.info("Group %s: %s rests in phase-2 round %d", label, bye, phase2_round)
        logger.info("Phase 2: %d within-group team matches", len(fixtures))
        return fixtures

    # ========== Phase Transition ==========

    def transition(
        self,
        completed_round: int,
        matchups: Iterable[Matchup],
        results: Iterable[ResultRecord],
        competitors: Iterable[Competitor],
    ) -> "GroupPhaseScheduler":
        """Rank teams inside their phase-1 groups and regroup them by rank.

        Teams are ordered by team-match wins, spread, then individual wins
        (team name last, for a total order). Position 1 teams of every group
        form new group A, position 2 teams new group B, and so on.

        Returns:
            A new scheduler in phase 2

        Raises:
            TournamentStateException: If phase 1 is already over or not yet
                complete
        """
        if self.phase is not Phase.PHASE1:
            raise TournamentStateException("The phase transition has already happened")
        if completed_round < self.format_config.phase1_rounds:
            raise TournamentStateException(
                f"Phase 1 runs {self.format_config.phase1_rounds} rounds, "
                f"only {completed_round} completed"
            )

        records = team_records(
            self.assignments,
            matchups,
            results,
            competitors,
            last_round=self.format_config.phase1_rounds,
        )
        regrouped: List[GroupAssignment] = []
        for label, teams in self.groups.items():
            ordered = sorted((records[team] for team in teams), key=TeamRecord.sort_key)
            for position, record in enumerate(ordered, start=1):
                regrouped.append(
                    GroupAssignment(
                        team=record.team,
                        group=GROUP_LABELS[position - 1],
                        position=position,
                    )
                )
                logger.debug(
                    "%s finished #%d in group %s (%d wins, %+g)",
                    record.team,
                    position,
                    label,
                    record.wins,
                    record.spread,
                )

        logger.info("Phase transition: %d teams regrouped", len(regrouped))
        return GroupPhaseScheduler(self.format_config, regrouped, Phase.PHASE2)
