"""Compact tags for events, matches and match teams.

A tag is the fixed-width text form of an identifier. The same text is
printed as the barcode payload on scout forms, used in URLs, and accepted
by the jump search:

    Event       sdc2011          location code + 4-digit year
    Match       sdc20110042      event tag + category digit + 3-digit number
    MatchTeam   sdc20110042973   match tag + team number (no padding)

Parsing is strict: anything that would not be produced by the matching
``format_*`` function is rejected with a ``TagError`` subclass naming the
offending part of the input.
"""

from .models import (
    DIGIT_CATEGORIES, EventIdentifier, MatchIdentifier, MatchTeamIdentifier,
)

YEAR_WIDTH = 4
MATCH_NUMBER_WIDTH = 3
# Longest team number that still fits a 64-bit SQLite INTEGER
TEAM_NUMBER_MAX_WIDTH = 18

_DIGITS = '0123456789'


class TagError(ValueError):
    """A string is not a valid tag of the requested kind."""
    reason = 'invalid tag'

    def __init__(self, tag: str, bad_part: str = '', reason: str | None = None):
        self.tag = tag
        self.bad_part = bad_part
        if reason is not None:
            self.reason = reason
        super().__init__(str(self))

    def __str__(self):
        if self.bad_part:
            return f'invalid tag {self.tag!r}: {self.reason} (at {self.bad_part!r})'
        return f'invalid tag {self.tag!r}: {self.reason}'


class EmptyLocationCode(TagError):
    reason = 'tag must begin with a location code'


class InvalidLocationCode(TagError):
    reason = 'location code must be lowercase letters'


class MissingYear(TagError):
    reason = f'{YEAR_WIDTH}-digit year must follow location code'


class InvalidYear(TagError):
    reason = 'bad year'


class InvalidCategory(TagError):
    reason = 'match type must be 0, 1, 2, or 3'


class MissingMatchNumber(TagError):
    reason = f'missing {MATCH_NUMBER_WIDTH}-digit match number'


class InvalidMatchNumber(TagError):
    reason = f'match number must be {MATCH_NUMBER_WIDTH} digits'


class InvalidTeamNumber(TagError):
    reason = 'team number must follow match tag'


class TrailingData(TagError):
    reason = 'extra data at end of tag'


def _is_digits(s: str) -> bool:
    # str.isdigit() and int() accept non-ASCII digits, signs and underscores
    return bool(s) and all(ch in _DIGITS for ch in s)


# --- Formatting ---

def format_event_tag(event: EventIdentifier) -> str:
    """Event tag, e.g. ``sdc2011``. Years past 9999 widen the field."""
    return f'{event.location_code}{event.year:0{YEAR_WIDTH}d}'


def format_match_tag(match: MatchIdentifier) -> str:
    return (f'{format_event_tag(match.event)}{match.category.digit}'
            f'{match.match_number:0{MATCH_NUMBER_WIDTH}d}')


def format_match_team_tag(match_team: MatchTeamIdentifier) -> str:
    return f'{format_match_tag(match_team.match)}{match_team.team_number}'


def format_tag(identifier) -> str:
    """Format any identifier kind."""
    if isinstance(identifier, MatchTeamIdentifier):
        return format_match_team_tag(identifier)
    if isinstance(identifier, MatchIdentifier):
        return format_match_tag(identifier)
    if isinstance(identifier, EventIdentifier):
        return format_event_tag(identifier)
    raise TypeError(f'not an identifier: {identifier!r}')


# --- Parsing ---

def _parse_event(tag: str, s: str) -> tuple[EventIdentifier, str]:
    """Parse the event prefix of ``s``; return it with the unparsed rest."""
    index = 0
    while index < len(s) and s[index] not in _DIGITS:
        index += 1

    location_code = s[:index]
    if not location_code:
        raise EmptyLocationCode(tag)
    if not all('a' <= ch <= 'z' for ch in location_code):
        raise InvalidLocationCode(tag, location_code)
    remaining = s[index:]

    if len(remaining) < YEAR_WIDTH:
        raise MissingYear(tag, remaining)
    year_text = remaining[:YEAR_WIDTH]
    if not _is_digits(year_text):
        raise InvalidYear(tag, year_text)

    return EventIdentifier(location_code, int(year_text)), remaining[YEAR_WIDTH:]


def _parse_match(tag: str, s: str) -> tuple[MatchIdentifier, str]:
    event, remaining = _parse_event(tag, s)

    digit = remaining[:1]
    if digit not in DIGIT_CATEGORIES:
        raise InvalidCategory(tag, digit)
    category = DIGIT_CATEGORIES[digit]
    remaining = remaining[1:]

    if len(remaining) < MATCH_NUMBER_WIDTH:
        raise MissingMatchNumber(tag, remaining)
    number_text = remaining[:MATCH_NUMBER_WIDTH]
    if not _is_digits(number_text):
        raise InvalidMatchNumber(tag, number_text)

    return MatchIdentifier(event, category, int(number_text)), remaining[MATCH_NUMBER_WIDTH:]


def parse_event_tag(tag: str) -> EventIdentifier:
    """Parse an event tag such as ``sdc2011``.

    Raises:
        TagError: with the offending part of ``tag``.
    """
    event, remaining = _parse_event(tag, tag)
    if remaining:
        raise TrailingData(tag, remaining)
    return event


def parse_match_tag(tag: str) -> MatchIdentifier:
    """Parse a match tag such as ``sdc20110042``."""
    match, remaining = _parse_match(tag, tag)
    if remaining:
        raise TrailingData(tag, remaining)
    return match


def parse_match_team_tag(tag: str) -> MatchTeamIdentifier:
    """Parse a match team tag such as ``sdc20110042973``.

    The team number takes the rest of the string. Leading zeros are
    rejected so that every accepted tag formats back to itself.
    """
    match, remaining = _parse_match(tag, tag)
    if not _is_digits(remaining):
        raise InvalidTeamNumber(tag, remaining)
    if len(remaining) > 1 and remaining[0] == '0':
        raise InvalidTeamNumber(tag, remaining, 'team number must not be zero-padded')
    if len(remaining) > TEAM_NUMBER_MAX_WIDTH:
        raise InvalidTeamNumber(tag, remaining, 'team number too long')
    return MatchTeamIdentifier(match, int(remaining))


TAG_PARSERS = (parse_event_tag, parse_match_tag, parse_match_team_tag)


def parse_tag(tag: str):
    """Parse a tag of any kind, trying event, match, then match team.

    Raises the error of the last parser when no kind matches.
    """
    error = None
    for parser in TAG_PARSERS:
        try:
            return parser(tag)
        except TagError as e:
            error = e
    raise error
