"""Per-team statistics for one event, folded from match records.

Stats are always recomputed from the stored matches; nothing here is
persisted. Matches where the team did not show up only count as
no-shows, and matches that have not been officially scored yet are left
out entirely.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from .models import BridgeAttempt, EventIdentifier, Event, Match, PerformanceCount

logger = logging.getLogger(__name__)


def _ratio(numerator: float, denominator: int) -> float:
    if denominator == 0:
        return 0.0
    return numerator / denominator


@dataclass
class BridgeStats:
    attempt_count: int = 0
    success_count: int = 0

    def add(self, bridge: BridgeAttempt):
        if bridge.attempted:
            self.attempt_count += 1
        if bridge.succeeded:
            self.success_count += 1

    def attempt_rate(self, match_count: int) -> float:
        return _ratio(self.attempt_count, match_count)

    def success_rate(self) -> float:
        return _ratio(self.success_count, self.attempt_count)


@dataclass
class TeamEventStats:
    event: EventIdentifier
    team_number: int
    match_count: int = 0
    no_show_count: int = 0
    failure_count: int = 0
    total_points: int = 0
    coop_bridge: BridgeStats = field(default_factory=BridgeStats)
    team_bridge1: BridgeStats = field(default_factory=BridgeStats)
    team_bridge2: BridgeStats = field(default_factory=BridgeStats)
    autonomous: PerformanceCount = field(default_factory=PerformanceCount)
    teleoperated: PerformanceCount = field(default_factory=PerformanceCount)
    max_teleoperated_scored: int = 0
    max_teleoperated_shot: int = 0

    def average_score(self) -> float:
        return _ratio(self.total_points, self.match_count)

    def failure_rate(self) -> float:
        return _ratio(self.failure_count, self.match_count)

    def average_performance(self, phase: str) -> float:
        """Average balls scored per match in ``phase`` ('autonomous' or 'teleoperated')."""
        if phase not in ('autonomous', 'teleoperated'):
            raise ValueError(f'unknown phase {phase!r}')
        return _ratio(getattr(self, phase).total(), self.match_count)

    def average_autonomous_scored(self) -> float:
        return _ratio(self.autonomous.total(), self.match_count)

    def average_autonomous_shot(self) -> float:
        return _ratio(self.autonomous.shot(), self.match_count)

    def average_teleoperated_scored(self) -> float:
        return _ratio(self.teleoperated.total(), self.match_count)

    def average_teleoperated_shot(self) -> float:
        return _ratio(self.teleoperated.shot(), self.match_count)


def team_event_stats(event: EventIdentifier, team_number: int,
                     matches: Iterable[Match]) -> TeamEventStats:
    """Fold ``matches`` into a fresh ``TeamEventStats`` for one team."""
    stats = TeamEventStats(event=event, team_number=team_number)

    for match in matches:
        record = match.team_record(team_number)
        if record is None:
            logger.warning('Team %d not in %s match %d, skipping',
                           team_number, match.category.value, match.number)
            continue

        if record.no_show:
            stats.no_show_count += 1
            continue
        if not match.is_scored_for(record.alliance):
            continue

        stats.match_count += 1
        stats.total_points += record.score
        if record.failure:
            stats.failure_count += 1

        stats.autonomous.add(record.autonomous)
        stats.teleoperated.add(record.teleoperated)
        stats.max_teleoperated_scored = max(stats.max_teleoperated_scored,
                                            record.teleoperated.total())
        stats.max_teleoperated_shot = max(stats.max_teleoperated_shot,
                                          record.teleoperated.shot())

        stats.coop_bridge.add(record.coop_bridge)
        stats.team_bridge1.add(record.team_bridge1)
        stats.team_bridge2.add(record.team_bridge2)

    return stats


def event_team_stats(event: Event, matches: list[Match]) -> list[TeamEventStats]:
    """Stats for every team attending ``event``, in the event's team order."""
    results = []
    for team_number in event.teams:
        team_matches = [m for m in matches if m.team_record(team_number) is not None]
        results.append(team_event_stats(event.identifier, team_number, team_matches))
    return results
