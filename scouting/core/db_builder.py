"""Load imported teams and match schedules into the datastore."""

import datetime
import logging

from .models import Event, EventIdentifier, Match, Team, TeamEntry
from .store import Datastore, StoreNotFound
from .tags import parse_event_tag

logger = logging.getLogger(__name__)


def import_teams(store: Datastore, teams: list[Team]) -> int:
    """Upsert parsed teams. Returns the number written."""
    written = 0
    for team in teams:
        store.upsert_team(team)
        written += 1
    return written


def new_event(date: str, location_code: str, location_name: str) -> Event:
    """Build an event from a ``YYYY-MM-DD`` date and its location.

    Raises:
        ValueError: for a malformed date or location code.
    """
    try:
        d = datetime.date.fromisoformat(date)
    except ValueError:
        raise ValueError(f'DATE must be YYYY-MM-DD, got {date!r}') from None
    # Validates the location code
    EventIdentifier(location_code, d.year)
    return Event(location_name=location_name, location_code=location_code,
                 year=d.year, month=d.month, day=d.day)


def existing_event(store: Datastore, event_tag: str) -> Event:
    """Look up an already-imported event by its tag (e.g. ``sdc2011``)."""
    return store.fetch_event(parse_event_tag(event_tag))


def _has_results(match: Match) -> bool:
    """True once a match has an official score or any scouted entry."""
    blank = TeamEntry()
    return bool(match.score) or any(record.entry() != blank for record in match.teams)


def import_schedule(store: Datastore, event: Event, matches: list[Match]) -> Event:
    """Upsert scheduled matches and record every scheduled team on the event.

    The event's team list becomes the sorted union of the teams it already
    had and the teams in ``matches``. A stored match that already has a
    score or a scouted entry is kept as it is.
    """
    event_id = event.identifier
    team_set = set(event.teams)

    for match in matches:
        try:
            existing = store.fetch_match(match.identifier(event_id))
        except StoreNotFound:
            existing = None
        if existing is not None and _has_results(existing):
            # Keep recorded results when a schedule is re-imported
            logger.warning('Match %s %d already has results, keeping them',
                           match.category.value, match.number)
            match = existing
        store.upsert_match(event_id, match)
        team_set.update(record.team for record in match.teams)

    event.teams = sorted(team_set)
    store.upsert_event(event)
    return event
