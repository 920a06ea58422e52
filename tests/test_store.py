"""Tests for the SQLite datastore and schedule import."""

import os
import sys

import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from scouting.core.db_builder import (
    existing_event, import_schedule, import_teams, new_event,
)
from scouting.core.models import (
    Alliance, BridgeAttempt, Event, EventIdentifier, Match, MatchCategory,
    MatchIdentifier, PerformanceCount, Team, TeamEntry, TeamMatchRecord,
)
from scouting.core.paging import Paginator
from scouting.core.store import Datastore, StoreNotFound
from scouting.core.tags import TagError

SDC_2011 = EventIdentifier('sdc', 2011)


def _scheduled(category, number, red, blue):
    teams = ([TeamMatchRecord(team=t, alliance=Alliance.RED) for t in red]
             + [TeamMatchRecord(team=t, alliance=Alliance.BLUE) for t in blue])
    return Match(category=category, number=number, teams=teams)


@pytest.fixture
def store(tmp_path):
    s = Datastore(str(tmp_path / 'scouting.db'))
    s.init_schema()
    return s


@pytest.fixture
def event(store):
    event = new_event('2011-03-10', 'sdc', 'San Diego Regional')
    return import_schedule(store, event, [
        _scheduled(MatchCategory.FINAL, 1, [1, 2, 3], [4, 5, 6]),
        _scheduled(MatchCategory.QUALIFICATION, 2, [973, 2, 3], [4, 5, 6]),
        _scheduled(MatchCategory.QUALIFICATION, 1, [1, 973, 3], [4, 5, 254]),
        _scheduled(MatchCategory.SEMI_FINAL, 1, [1, 2, 3], [4, 5, 6]),
    ])


class TestTeams:
    def test_upsert_and_fetch(self, store):
        store.upsert_team(Team(973, 'Greybots', 2002))
        store.upsert_team(Team(973, 'Greybots Robotics'))
        team = store.fetch_team(973)
        assert team.name == 'Greybots Robotics'
        assert team.rookie_year == 2002

    def test_missing_team(self, store):
        with pytest.raises(StoreNotFound):
            store.fetch_team(1)

    def test_import_and_list(self, store):
        assert import_teams(store, [Team(n, f'Team {n}') for n in (30, 10, 20)]) == 3
        assert [t.number for t in store.fetch_teams([20, 10, 99])] == [10, 20]
        assert store.fetch_teams([]) == []

    def test_team_listing_pages(self, store):
        import_teams(store, [Team(n, f'Team {n}') for n in range(1, 6)])
        paginator = Paginator(store.teams(), 2)
        assert paginator.page_count() == 3
        assert [t.number for t in paginator.page(1).fetch()] == [1, 2]
        assert [t.number for t in paginator.page(3).fetch()] == [5]
        assert paginator.page(4) is None


class TestEvents:
    def test_new_event(self):
        event = new_event('2011-03-10', 'sdc', 'San Diego Regional')
        assert (event.year, event.month, event.day) == (2011, 3, 10)
        assert event.identifier == SDC_2011

    @pytest.mark.parametrize('date, code', [
        ('2011/03/10', 'sdc'),
        ('2011-13-01', 'sdc'),
        ('2011-03-10', 'SDC'),
    ])
    def test_new_event_rejects(self, date, code):
        with pytest.raises(ValueError):
            new_event(date, code, 'Somewhere')

    def test_schedule_records_teams(self, store, event):
        stored = store.fetch_event(SDC_2011)
        assert stored.teams == [1, 2, 3, 4, 5, 6, 254, 973]
        assert stored.location_name == 'San Diego Regional'

    def test_existing_event(self, store, event):
        assert existing_event(store, 'sdc2011').identifier == SDC_2011
        with pytest.raises(StoreNotFound):
            existing_event(store, 'lax2011')
        with pytest.raises(TagError):
            existing_event(store, 'sdc20110042')

    def test_events_by_year(self, store, event):
        store.upsert_event(Event('Los Angeles', 'lax', 2011, month=3, day=24))
        store.upsert_event(Event('Old', 'sdc', 2010, month=3, day=1))
        listed = store.events(2011).slice(0, 10)
        assert [e.location_code for e in listed] == ['sdc', 'lax']

    def test_events_for_team(self, store, event):
        store.upsert_event(Event('Los Angeles', 'lax', 2011, month=3, day=24, teams=[973]))
        assert store.events_for_team(2011, 973) == [SDC_2011, EventIdentifier('lax', 2011)]
        assert store.events_for_team(2011, 254) == [SDC_2011]
        assert store.events_for_team(2012, 973) == []


class TestMatches:
    def test_fetch_matches_ordering(self, store, event):
        matches = store.fetch_matches(SDC_2011)
        assert [(m.category, m.number) for m in matches] == [
            (MatchCategory.QUALIFICATION, 1),
            (MatchCategory.QUALIFICATION, 2),
            (MatchCategory.SEMI_FINAL, 1),
            (MatchCategory.FINAL, 1),
        ]

    def test_match_limit_drops_highest_numbers(self, event, store):
        limited = Datastore(store.db_path, match_limit=3)
        assert [(m.category, m.number) for m in limited.fetch_matches(SDC_2011)] == [
            (MatchCategory.QUALIFICATION, 1),
            (MatchCategory.SEMI_FINAL, 1),
            (MatchCategory.FINAL, 1),
        ]

    def test_match_limit_ties_in_play_order(self, event, store):
        limited = Datastore(store.db_path, match_limit=2)
        assert [(m.category, m.number) for m in limited.fetch_matches(SDC_2011)] == [
            (MatchCategory.QUALIFICATION, 1),
            (MatchCategory.SEMI_FINAL, 1),
        ]

    def test_fetch_match(self, store, event):
        match = store.fetch_match(MatchIdentifier(SDC_2011, MatchCategory.QUALIFICATION, 1))
        assert [r.team for r in match.alliance_records(Alliance.RED)] == [1, 973, 3]
        assert match.score == {}

    def test_missing_match(self, store, event):
        with pytest.raises(StoreNotFound):
            store.fetch_match(MatchIdentifier(SDC_2011, MatchCategory.FINAL, 9))

    def test_team_event_matches(self, store, event):
        matches = store.team_event_matches(SDC_2011, 973)
        assert [m.number for m in matches] == [1, 2]

    def test_update_score(self, store, event):
        match_id = MatchIdentifier(SDC_2011, MatchCategory.QUALIFICATION, 1)
        store.update_match_score(match_id, 40, 12)
        assert store.fetch_match(match_id).score == {Alliance.RED: 40, Alliance.BLUE: 12}

    def test_update_score_missing_match(self, store, event):
        with pytest.raises(StoreNotFound):
            store.update_match_score(MatchIdentifier(SDC_2011, MatchCategory.FINAL, 9), 1, 2)


class TestOutOfRangeKeys:
    HUGE = 10 ** 20

    def test_fetches_are_not_found(self, store, event):
        with pytest.raises(StoreNotFound):
            store.fetch_team(self.HUGE)
        with pytest.raises(StoreNotFound):
            store.fetch_event(EventIdentifier('sdc', self.HUGE))
        with pytest.raises(StoreNotFound):
            store.fetch_match(MatchIdentifier(EventIdentifier('sdc', self.HUGE),
                                              MatchCategory.FINAL, 1))

    def test_listings_are_empty(self, store, event):
        assert store.fetch_matches(EventIdentifier('sdc', self.HUGE)) == []
        assert store.events_for_team(self.HUGE, 973) == []
        assert store.fetch_teams([self.HUGE]) == []
        paginator = Paginator(store.events(self.HUGE), 10)
        assert paginator.page(1).fetch() == []

    def test_updates_are_not_found(self, store, event):
        match_id = MatchIdentifier(EventIdentifier('sdc', self.HUGE), MatchCategory.FINAL, 1)
        with pytest.raises(StoreNotFound):
            store.update_match_score(match_id, 1, 2)
        with pytest.raises(StoreNotFound):
            store.update_match_team(match_id, 1, TeamEntry())


class TestUpdateMatchTeam:
    MATCH = MatchIdentifier(SDC_2011, MatchCategory.QUALIFICATION, 1)

    def test_rescores_and_persists(self, store, event):
        entry = TeamEntry(autonomous=PerformanceCount(0, 1, 0),
                          teleoperated=PerformanceCount(1, 0, 2, 5),
                          team_bridge1=BridgeAttempt(True, True),
                          scout_name='Ann')
        record = store.update_match_team(self.MATCH, 973, entry)
        assert record.score == 5 + 5 + 10

        stored = store.fetch_match(self.MATCH).team_record(973)
        assert stored.score == 20
        assert stored.teleoperated == PerformanceCount(1, 0, 2, 5)
        assert stored.scout_name == 'Ann'
        assert stored.alliance == Alliance.RED

    def test_other_records_untouched(self, store, event):
        store.update_match_team(self.MATCH, 973, TeamEntry(failure=True))
        match = store.fetch_match(self.MATCH)
        assert not match.team_record(1).failure
        assert match.team_record(973).failure

    def test_team_not_in_match(self, store, event):
        with pytest.raises(StoreNotFound):
            store.update_match_team(self.MATCH, 2, TeamEntry())

    def test_missing_match(self, store, event):
        with pytest.raises(StoreNotFound):
            store.update_match_team(MatchIdentifier(SDC_2011, MatchCategory.FINAL, 9),
                                    1, TeamEntry())

    def test_stats_reflect_update(self, store, event):
        store.update_match_team(self.MATCH, 973,
                                TeamEntry(teleoperated=PerformanceCount(0, 0, 3)))
        assert store.team_event_stats(SDC_2011, 973).match_count == 0

        store.update_match_score(self.MATCH, 30, 20)
        stats = store.team_event_stats(SDC_2011, 973)
        assert stats.match_count == 1
        assert stats.total_points == 3


class TestScheduleReimport:
    def test_keeps_scored_matches(self, store, event):
        match_id = MatchIdentifier(SDC_2011, MatchCategory.QUALIFICATION, 1)
        store.update_match_team(match_id, 973, TeamEntry(teleoperated=PerformanceCount(1)))
        store.update_match_score(match_id, 10, 5)

        import_schedule(store, store.fetch_event(SDC_2011), [
            _scheduled(MatchCategory.QUALIFICATION, 1, [7, 8, 9], [10, 11, 12]),
            _scheduled(MatchCategory.QUALIFICATION, 3, [7, 8, 9], [10, 11, 12]),
        ])

        kept = store.fetch_match(match_id)
        assert kept.team_record(973).score == 3
        assert kept.team_record(7) is None
        assert len(store.fetch_matches(SDC_2011)) == 5
        assert 7 in store.fetch_event(SDC_2011).teams

    def test_keeps_scouted_unscored_matches(self, store, event):
        match_id = MatchIdentifier(SDC_2011, MatchCategory.QUALIFICATION, 2)
        store.update_match_team(match_id, 973, TeamEntry(teleoperated=PerformanceCount(0, 2),
                                                         scout_name='Ann'))

        import_schedule(store, store.fetch_event(SDC_2011), [
            _scheduled(MatchCategory.QUALIFICATION, 2, [7, 8, 9], [10, 11, 12]),
        ])

        kept = store.fetch_match(match_id)
        assert kept.score == {}
        assert kept.team_record(973).scout_name == 'Ann'
        assert kept.team_record(7) is None

    def test_replaces_unscored_matches(self, store, event):
        import_schedule(store, store.fetch_event(SDC_2011), [
            _scheduled(MatchCategory.QUALIFICATION, 2, [7, 8, 9], [10, 11, 12]),
        ])
        match = store.fetch_match(MatchIdentifier(SDC_2011, MatchCategory.QUALIFICATION, 2))
        assert [r.team for r in match.teams] == [7, 8, 9, 10, 11, 12]
