"""SQLite datastore for teams, events and matches.

Events and matches are stored as documents: scalar key columns for
lookups plus JSON columns for nested data (match team records, alliance
scores, event team lists). Each operation opens its own connection.
"""

import json
import sqlite3

from .models import (
    Alliance, Event, EventIdentifier, Match, MatchCategory, MatchIdentifier,
    Team, TeamEntry, TeamMatchRecord,
)
from .stats import TeamEventStats, team_event_stats


class StoreNotFound(LookupError):
    """Not found in datastore."""


# Most matches fetched for one event; more than enough for a regional.
MATCH_LIMIT = 200

SQLITE_INTEGER_MIN = -2 ** 63
SQLITE_INTEGER_MAX = 2 ** 63 - 1


def _keys_fit(params) -> bool:
    """False if an integer key is outside SQLite's INTEGER range.

    Such a key cannot be stored, so it cannot match any row.
    """
    return all(not isinstance(value, int) or SQLITE_INTEGER_MIN <= value <= SQLITE_INTEGER_MAX
               for value in params)


class SqlPager:
    """Pager over a SELECT on one table, for use with Paginator."""

    def __init__(self, store: 'Datastore', table: str, where: str, params: tuple,
                 order_by: str, row_factory):
        self.store = store
        self.table = table
        self.where = where
        self.params = params
        self.order_by = order_by
        self.row_factory = row_factory

    def count(self) -> int:
        if not _keys_fit(self.params):
            return 0
        conn = self.store.connect()
        cur = conn.cursor()
        cur.execute(f'SELECT COUNT(*) FROM {self.table} {self.where}', self.params)
        count = cur.fetchone()[0]
        conn.close()
        return count

    def slice(self, offset: int, limit: int) -> list:
        if not _keys_fit(self.params):
            return []
        conn = self.store.connect()
        cur = conn.cursor()
        cur.execute(f'''SELECT * FROM {self.table} {self.where}
                        ORDER BY {self.order_by} LIMIT ? OFFSET ?''',
                    self.params + (limit, offset))
        rows = cur.fetchall()
        conn.close()
        return [self.row_factory(row) for row in rows]


# Category text does not sort in play order
_CATEGORY_ORDER_SQL = 'CASE category {} END'.format(
    ' '.join(f"WHEN '{category.value}' THEN {category.order}" for category in MatchCategory))


def _team_from_row(row) -> Team:
    return Team(number=row['number'], name=row['name'], rookie_year=row['rookie_year'])


def _event_from_row(row) -> Event:
    return Event(
        location_name=row['location_name'],
        location_code=row['location_code'],
        year=row['year'],
        month=row['month'],
        day=row['day'],
        teams=json.loads(row['teams_json']),
    )


def _match_from_row(row) -> Match:
    score = json.loads(row['score_json'])
    return Match(
        category=MatchCategory(row['category']),
        number=row['number'],
        teams=[TeamMatchRecord.from_dict(d) for d in json.loads(row['teams_json'])],
        score={Alliance(k): v for k, v in score.items()},
    )


def _match_teams_json(match: Match) -> str:
    return json.dumps([record.to_dict() for record in match.teams])


def _match_score_json(match: Match) -> str:
    return json.dumps({alliance.value: points for alliance, points in match.score.items()})


class Datastore:
    def __init__(self, db_path: str, match_limit: int = MATCH_LIMIT):
        self.db_path = db_path
        self.match_limit = match_limit

    def connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_schema(self):
        conn = self.connect()
        cur = conn.cursor()
        cur.execute('''CREATE TABLE IF NOT EXISTS teams (
            number INTEGER PRIMARY KEY,
            name TEXT NOT NULL DEFAULT '',
            rookie_year INTEGER
        )''')
        cur.execute('''CREATE TABLE IF NOT EXISTS events (
            location_code TEXT NOT NULL,
            year INTEGER NOT NULL,
            location_name TEXT NOT NULL DEFAULT '',
            month INTEGER NOT NULL DEFAULT 1,
            day INTEGER NOT NULL DEFAULT 1,
            teams_json TEXT NOT NULL DEFAULT '[]',
            PRIMARY KEY (location_code, year)
        )''')
        cur.execute('''CREATE TABLE IF NOT EXISTS matches (
            location_code TEXT NOT NULL,
            year INTEGER NOT NULL,
            category TEXT NOT NULL,
            number INTEGER NOT NULL,
            teams_json TEXT NOT NULL DEFAULT '[]',
            score_json TEXT NOT NULL DEFAULT '{}',
            PRIMARY KEY (location_code, year, category, number)
        )''')
        conn.commit()
        conn.close()

    # --- Listings ---

    def teams(self) -> SqlPager:
        return SqlPager(self, 'teams', '', (), 'number', _team_from_row)

    def events(self, year: int) -> SqlPager:
        return SqlPager(self, 'events', 'WHERE year = ?', (year,),
                        'month, day', _event_from_row)

    # --- Fetching ---

    def _fetch_one(self, sql: str, params: tuple):
        if not _keys_fit(params):
            raise StoreNotFound(f'not found: {params!r}')
        conn = self.connect()
        cur = conn.cursor()
        cur.execute(sql, params)
        row = cur.fetchone()
        conn.close()
        if row is None:
            raise StoreNotFound(f'not found: {params!r}')
        return row

    def fetch_team(self, number: int) -> Team:
        row = self._fetch_one('SELECT * FROM teams WHERE number = ?', (number,))
        return _team_from_row(row)

    def fetch_teams(self, numbers: list[int]) -> list[Team]:
        numbers = [n for n in numbers if _keys_fit((n,))]
        if not numbers:
            return []
        conn = self.connect()
        cur = conn.cursor()
        placeholders = ', '.join('?' for _ in numbers)
        cur.execute(f'''SELECT * FROM teams WHERE number IN ({placeholders})
                        ORDER BY number''', tuple(numbers))
        teams = [_team_from_row(row) for row in cur.fetchall()]
        conn.close()
        return teams

    def fetch_event(self, event_id: EventIdentifier) -> Event:
        row = self._fetch_one('''SELECT * FROM events
                                 WHERE location_code = ? AND year = ?''',
                              (event_id.location_code, event_id.year))
        return _event_from_row(row)

    def fetch_matches(self, event_id: EventIdentifier) -> list[Match]:
        """All matches of an event, qualifications first, then by number.

        Past ``match_limit``, the matches with the highest numbers are
        dropped first, so low-numbered eliminations are always kept.
        """
        if not _keys_fit((event_id.year,)):
            return []
        conn = self.connect()
        cur = conn.cursor()
        cur.execute(f'''SELECT * FROM matches
                        WHERE location_code = ? AND year = ?
                        ORDER BY number, {_CATEGORY_ORDER_SQL} LIMIT ?''',
                    (event_id.location_code, event_id.year, self.match_limit))
        matches = [_match_from_row(row) for row in cur.fetchall()]
        conn.close()
        matches.sort(key=Match.sort_key)
        return matches

    def fetch_match(self, match_id: MatchIdentifier) -> Match:
        row = self._fetch_one('''SELECT * FROM matches
                                 WHERE location_code = ? AND year = ?
                                   AND category = ? AND number = ?''',
                              (match_id.location_code, match_id.year,
                               match_id.category.value, match_id.match_number))
        return _match_from_row(row)

    def team_event_matches(self, event_id: EventIdentifier, team_number: int) -> list[Match]:
        return [m for m in self.fetch_matches(event_id)
                if m.team_record(team_number) is not None]

    def events_for_team(self, year: int, team_number: int) -> list[EventIdentifier]:
        if not _keys_fit((year,)):
            return []
        conn = self.connect()
        cur = conn.cursor()
        cur.execute('''SELECT location_code, year, teams_json FROM events
                       WHERE year = ? ORDER BY month, day''', (year,))
        rows = cur.fetchall()
        conn.close()
        return [EventIdentifier(row['location_code'], row['year'])
                for row in rows if team_number in json.loads(row['teams_json'])]

    def team_event_stats(self, event_id: EventIdentifier, team_number: int) -> TeamEventStats:
        return team_event_stats(event_id, team_number,
                                self.team_event_matches(event_id, team_number))

    # --- Writing ---

    def upsert_team(self, team: Team):
        conn = self.connect()
        conn.execute('''INSERT INTO teams (number, name, rookie_year) VALUES (?, ?, ?)
                        ON CONFLICT(number) DO UPDATE SET
                          name = excluded.name,
                          rookie_year = COALESCE(excluded.rookie_year, teams.rookie_year)''',
                     (team.number, team.name, team.rookie_year))
        conn.commit()
        conn.close()

    def upsert_event(self, event: Event):
        conn = self.connect()
        conn.execute('''INSERT INTO events
                          (location_code, year, location_name, month, day, teams_json)
                        VALUES (?, ?, ?, ?, ?, ?)
                        ON CONFLICT(location_code, year) DO UPDATE SET
                          location_name = excluded.location_name,
                          month = excluded.month,
                          day = excluded.day,
                          teams_json = excluded.teams_json''',
                     (event.location_code, event.year, event.location_name,
                      event.month, event.day, json.dumps(sorted(event.teams))))
        conn.commit()
        conn.close()

    def upsert_match(self, event_id: EventIdentifier, match: Match):
        conn = self.connect()
        conn.execute('''INSERT INTO matches
                          (location_code, year, category, number, teams_json, score_json)
                        VALUES (?, ?, ?, ?, ?, ?)
                        ON CONFLICT(location_code, year, category, number) DO UPDATE SET
                          teams_json = excluded.teams_json,
                          score_json = excluded.score_json''',
                     (event_id.location_code, event_id.year, match.category.value,
                      match.number, _match_teams_json(match), _match_score_json(match)))
        conn.commit()
        conn.close()

    def update_match_score(self, match_id: MatchIdentifier, red_score: int, blue_score: int):
        """Record the official alliance scores of a match."""
        if not _keys_fit((match_id.year,)):
            raise StoreNotFound(f'no match {match_id!r}')
        score = {Alliance.RED.value: red_score, Alliance.BLUE.value: blue_score}
        conn = self.connect()
        cur = conn.cursor()
        cur.execute('''UPDATE matches SET score_json = ?
                       WHERE location_code = ? AND year = ? AND category = ? AND number = ?''',
                    (json.dumps(score), match_id.location_code, match_id.year,
                     match_id.category.value, match_id.match_number))
        updated = cur.rowcount
        conn.commit()
        conn.close()
        if updated == 0:
            raise StoreNotFound(f'no match {match_id!r}')

    def update_match_team(self, match_id: MatchIdentifier, team_number: int,
                          entry: TeamEntry) -> TeamMatchRecord:
        """Overwrite one team's record in a match with a scout's entry.

        The record is rescored and written in one transaction, so readers
        never see a score that disagrees with the stored counts.
        """
        if not _keys_fit((match_id.year,)):
            raise StoreNotFound(f'no match {match_id!r}')
        conn = self.connect()
        try:
            conn.execute('BEGIN IMMEDIATE')
            cur = conn.cursor()
            cur.execute('''SELECT * FROM matches
                           WHERE location_code = ? AND year = ? AND category = ? AND number = ?''',
                        (match_id.location_code, match_id.year,
                         match_id.category.value, match_id.match_number))
            row = cur.fetchone()
            if row is None:
                raise StoreNotFound(f'no match {match_id!r}')
            match = _match_from_row(row)
            record = match.team_record(team_number)
            if record is None:
                raise StoreNotFound(f'team {team_number} not in match {match_id!r}')

            record.apply_entry(entry)
            cur.execute('''UPDATE matches SET teams_json = ?
                           WHERE location_code = ? AND year = ? AND category = ? AND number = ?''',
                        (_match_teams_json(match), match_id.location_code, match_id.year,
                         match_id.category.value, match_id.match_number))
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()
        return record
