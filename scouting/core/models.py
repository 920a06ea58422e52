"""Data models for the scouting system."""

import os
from dataclasses import dataclass, field
from enum import Enum


class MatchCategory(str, Enum):
    """Kind of match within an event, in the order they are played."""
    QUALIFICATION = 'qualification'
    QUARTER_FINAL = 'quarter'
    SEMI_FINAL = 'semifinal'
    FINAL = 'final'

    @property
    def display_name(self) -> str:
        return CATEGORY_DISPLAY_NAMES[self]

    @property
    def digit(self) -> str:
        """Single character used for this category inside a match tag."""
        return CATEGORY_DIGITS[self]

    @property
    def order(self) -> int:
        return CATEGORY_ORDER[self]

    def __lt__(self, other):
        if not isinstance(other, MatchCategory):
            return NotImplemented
        return self.order < other.order

    def __le__(self, other):
        if not isinstance(other, MatchCategory):
            return NotImplemented
        return self.order <= other.order

    def __gt__(self, other):
        if not isinstance(other, MatchCategory):
            return NotImplemented
        return self.order > other.order

    def __ge__(self, other):
        if not isinstance(other, MatchCategory):
            return NotImplemented
        return self.order >= other.order


CATEGORY_DISPLAY_NAMES = {
    MatchCategory.QUALIFICATION: 'Qualification',
    MatchCategory.QUARTER_FINAL: 'Quarter-Final',
    MatchCategory.SEMI_FINAL: 'Semi-Final',
    MatchCategory.FINAL: 'Final',
}
CATEGORY_DIGITS = {
    MatchCategory.QUALIFICATION: '0',
    MatchCategory.QUARTER_FINAL: '1',
    MatchCategory.SEMI_FINAL: '2',
    MatchCategory.FINAL: '3',
}
DIGIT_CATEGORIES = {digit: category for category, digit in CATEGORY_DIGITS.items()}
CATEGORY_ORDER = {
    MatchCategory.QUALIFICATION: 0,
    MatchCategory.QUARTER_FINAL: 1,
    MatchCategory.SEMI_FINAL: 2,
    MatchCategory.FINAL: 3,
}


class Alliance(str, Enum):
    RED = 'red'
    BLUE = 'blue'


def _is_location_code(s: str) -> bool:
    return bool(s) and all('a' <= ch <= 'z' for ch in s)


# --- Identifiers ---

@dataclass(frozen=True)
class EventIdentifier:
    """Identity of one competition: location code plus year."""
    location_code: str    # "sdc"
    year: int             # 2011

    def __post_init__(self):
        if not _is_location_code(self.location_code):
            raise ValueError(
                f'location code must be lowercase letters, got {self.location_code!r}')
        if self.year < 0:
            raise ValueError(f'year must not be negative, got {self.year}')


@dataclass(frozen=True)
class MatchIdentifier:
    event: EventIdentifier
    category: MatchCategory
    match_number: int

    def __post_init__(self):
        if not 0 <= self.match_number <= 999:
            raise ValueError(f'match number must be 0-999, got {self.match_number}')

    @property
    def location_code(self) -> str:
        return self.event.location_code

    @property
    def year(self) -> int:
        return self.event.year


@dataclass(frozen=True)
class MatchTeamIdentifier:
    match: MatchIdentifier
    team_number: int

    def __post_init__(self):
        if self.team_number < 0:
            raise ValueError(f'team number must not be negative, got {self.team_number}')

    @property
    def event(self) -> EventIdentifier:
        return self.match.event


# --- Per-match performance ---

@dataclass
class PerformanceCount:
    """Hoop counts for one phase of a match.

    ``missed`` is recorded for shot statistics only and never scores.
    """
    high: int = 0
    mid: int = 0
    low: int = 0
    missed: int = 0

    def __post_init__(self):
        for name in ('high', 'mid', 'low', 'missed'):
            if getattr(self, name) < 0:
                raise ValueError(f'{name} count must not be negative')

    def total(self) -> int:
        """Number of balls scored."""
        return self.high + self.mid + self.low

    def shot(self) -> int:
        """Number of balls shot, scored or not."""
        return self.total() + self.missed

    def add(self, other: 'PerformanceCount'):
        self.high += other.high
        self.mid += other.mid
        self.low += other.low
        self.missed += other.missed

    def to_dict(self) -> dict:
        return {'high': self.high, 'mid': self.mid, 'low': self.low,
                'missed': self.missed}

    @classmethod
    def from_dict(cls, d: dict | None) -> 'PerformanceCount':
        d = d or {}
        return cls(high=int(d.get('high', 0)), mid=int(d.get('mid', 0)),
                   low=int(d.get('low', 0)), missed=int(d.get('missed', 0)))


BRIDGE_FORM_VALUES = {
    'na': (False, False),
    'fail': (True, False),
    'success': (True, True),
}


@dataclass(frozen=True)
class BridgeAttempt:
    attempted: bool = False
    succeeded: bool = False

    def __post_init__(self):
        if self.succeeded and not self.attempted:
            raise ValueError('a bridge cannot succeed without being attempted')

    @classmethod
    def from_form(cls, value: str) -> 'BridgeAttempt':
        """Convert a form value ('na', 'fail' or 'success')."""
        try:
            attempted, succeeded = BRIDGE_FORM_VALUES[value]
        except KeyError:
            raise ValueError(f'unknown bridge value {value!r}') from None
        return cls(attempted, succeeded)

    @property
    def form_value(self) -> str:
        if self.succeeded:
            return 'success'
        if self.attempted:
            return 'fail'
        return 'na'

    def to_dict(self) -> dict:
        return {'attempted': self.attempted, 'succeeded': self.succeeded}

    @classmethod
    def from_dict(cls, d: dict | None) -> 'BridgeAttempt':
        d = d or {}
        return cls(bool(d.get('attempted', False)), bool(d.get('succeeded', False)))


@dataclass
class TeamEntry:
    """What a scout submits for one team in one match."""
    autonomous: PerformanceCount = field(default_factory=PerformanceCount)
    teleoperated: PerformanceCount = field(default_factory=PerformanceCount)
    coop_bridge: BridgeAttempt = field(default_factory=BridgeAttempt)
    team_bridge1: BridgeAttempt = field(default_factory=BridgeAttempt)
    team_bridge2: BridgeAttempt = field(default_factory=BridgeAttempt)
    scout_name: str = ''
    failure: bool = False
    no_show: bool = False


@dataclass
class TeamMatchRecord:
    """One team's slot in a match, with its scouted performance.

    ``score`` is derived from the performance fields by ``apply_entry``.
    """
    team: int
    alliance: Alliance
    autonomous: PerformanceCount = field(default_factory=PerformanceCount)
    teleoperated: PerformanceCount = field(default_factory=PerformanceCount)
    coop_bridge: BridgeAttempt = field(default_factory=BridgeAttempt)
    team_bridge1: BridgeAttempt = field(default_factory=BridgeAttempt)
    team_bridge2: BridgeAttempt = field(default_factory=BridgeAttempt)
    scout_name: str = ''
    failure: bool = False
    no_show: bool = False
    score: int = 0

    def apply_entry(self, entry: TeamEntry):
        """Overwrite the scouted fields with a submitted entry and rescore."""
        from .scoring import calculate_score

        self.autonomous = entry.autonomous
        self.teleoperated = entry.teleoperated
        self.coop_bridge = entry.coop_bridge
        self.team_bridge1 = entry.team_bridge1
        self.team_bridge2 = entry.team_bridge2
        self.scout_name = entry.scout_name
        self.failure = entry.failure
        self.no_show = entry.no_show
        self.score = calculate_score(self.autonomous, self.teleoperated,
                                     self.coop_bridge, self.team_bridge1,
                                     self.team_bridge2)

    def entry(self) -> TeamEntry:
        return TeamEntry(
            autonomous=self.autonomous,
            teleoperated=self.teleoperated,
            coop_bridge=self.coop_bridge,
            team_bridge1=self.team_bridge1,
            team_bridge2=self.team_bridge2,
            scout_name=self.scout_name,
            failure=self.failure,
            no_show=self.no_show,
        )

    def to_dict(self) -> dict:
        return {
            'team': self.team,
            'alliance': self.alliance.value,
            'autonomous': self.autonomous.to_dict(),
            'teleoperated': self.teleoperated.to_dict(),
            'coop_bridge': self.coop_bridge.to_dict(),
            'team_bridge1': self.team_bridge1.to_dict(),
            'team_bridge2': self.team_bridge2.to_dict(),
            'scout': self.scout_name,
            'failure': self.failure,
            'no_show': self.no_show,
            'score': self.score,
        }

    @classmethod
    def from_dict(cls, d: dict) -> 'TeamMatchRecord':
        return cls(
            team=int(d['team']),
            alliance=Alliance(d['alliance']),
            autonomous=PerformanceCount.from_dict(d.get('autonomous')),
            teleoperated=PerformanceCount.from_dict(d.get('teleoperated')),
            coop_bridge=BridgeAttempt.from_dict(d.get('coop_bridge')),
            team_bridge1=BridgeAttempt.from_dict(d.get('team_bridge1')),
            team_bridge2=BridgeAttempt.from_dict(d.get('team_bridge2')),
            scout_name=d.get('scout', ''),
            failure=bool(d.get('failure', False)),
            no_show=bool(d.get('no_show', False)),
            score=int(d.get('score', 0)),
        )


@dataclass
class Match:
    category: MatchCategory
    number: int
    teams: list[TeamMatchRecord] = field(default_factory=list)
    score: dict[Alliance, int] = field(default_factory=dict)   # empty until scored

    def identifier(self, event: EventIdentifier) -> MatchIdentifier:
        return MatchIdentifier(event, self.category, self.number)

    def team_record(self, team_number: int) -> TeamMatchRecord | None:
        for record in self.teams:
            if record.team == team_number:
                return record
        return None

    def alliance_records(self, alliance: Alliance) -> list[TeamMatchRecord]:
        return [r for r in self.teams if r.alliance == alliance]

    def is_scored_for(self, alliance: Alliance) -> bool:
        """True once the official score for ``alliance`` has been recorded."""
        return alliance in self.score

    def sort_key(self):
        return (self.category.order, self.number)


@dataclass
class Event:
    location_name: str        # "San Diego Regional"
    location_code: str        # "sdc"
    year: int
    month: int = 1
    day: int = 1
    teams: list[int] = field(default_factory=list)

    @property
    def identifier(self) -> EventIdentifier:
        return EventIdentifier(self.location_code, self.year)


@dataclass
class Team:
    number: int
    name: str = ''
    rookie_year: int | None = None


@dataclass
class ScoutingConfig:
    """Runtime configuration for the CLI and the web app."""
    db_path: str = 'scouting.db'
    image_dir: str = 'images'
    per_page: int = 50        # teams per listing page
    match_limit: int = 200    # most matches fetched for one event
    debug: bool = False
    host: str = '127.0.0.1'
    port: int = 8080

    @classmethod
    def from_env(cls) -> 'ScoutingConfig':
        """Defaults, overridden by SCOUTING_* environment variables."""
        return cls(
            db_path=os.environ.get('SCOUTING_DB', cls.db_path),
            image_dir=os.environ.get('SCOUTING_IMAGE_DIR', cls.image_dir),
            debug=os.environ.get('SCOUTING_DEBUG', '') not in ('', '0', 'false'),
            host=os.environ.get('SCOUTING_HOST', cls.host),
            port=int(os.environ.get('SCOUTING_PORT', cls.port)),
        )
