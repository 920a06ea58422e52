"""Tests for match entry scoring."""

import os
import sys

import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from scouting.core.models import (
    Alliance, BridgeAttempt, PerformanceCount, TeamEntry, TeamMatchRecord,
)
from scouting.core.scoring import calculate_score

NA = BridgeAttempt(False, False)
FAIL = BridgeAttempt(True, False)
SUCCESS = BridgeAttempt(True, True)
NONE = PerformanceCount(0, 0, 0)


class TestCalculateScore:
    def test_nothing(self):
        assert calculate_score(NONE, NONE, NA, NA, NA) == 0

    def test_teleop_low(self):
        assert calculate_score(NONE, PerformanceCount(0, 0, 1), NA, NA, NA) == 1

    def test_auto_low_gets_bonus(self):
        assert calculate_score(PerformanceCount(0, 0, 1), NONE, NA, NA, NA) == 4

    def test_hoop_weights(self):
        assert calculate_score(NONE, PerformanceCount(1, 1, 1), NA, NA, NA) == 6
        assert calculate_score(PerformanceCount(1, 1, 1), NONE, NA, NA, NA) == 15
        assert calculate_score(PerformanceCount(2, 0, 0), PerformanceCount(0, 3, 0),
                               NA, NA, NA) == 18

    def test_missed_never_scores(self):
        missed = PerformanceCount(0, 0, 0, missed=7)
        assert calculate_score(missed, missed, NA, NA, NA) == 0

    def test_bridge1_attempt_only(self):
        assert calculate_score(NONE, NONE, NA, FAIL, NA) == 0

    def test_bridge1_success(self):
        assert calculate_score(NONE, NONE, NA, SUCCESS, NA) == 10

    def test_only_bridge1_scores(self):
        assert calculate_score(NONE, NONE, NA, SUCCESS, SUCCESS) == 10
        assert calculate_score(NONE, NONE, SUCCESS, SUCCESS, SUCCESS) == 10
        assert calculate_score(NONE, NONE, SUCCESS, NA, SUCCESS) == 0


class TestBridgeAttempt:
    def test_success_requires_attempt(self):
        with pytest.raises(ValueError):
            BridgeAttempt(attempted=False, succeeded=True)

    def test_form_values(self):
        assert BridgeAttempt.from_form('na') == NA
        assert BridgeAttempt.from_form('fail') == FAIL
        assert BridgeAttempt.from_form('success') == SUCCESS
        assert SUCCESS.form_value == 'success'

    def test_unknown_form_value(self):
        with pytest.raises(ValueError):
            BridgeAttempt.from_form('maybe')


class TestApplyEntry:
    def test_rescores_record(self):
        record = TeamMatchRecord(team=973, alliance=Alliance.RED, score=99)
        record.apply_entry(TeamEntry(autonomous=PerformanceCount(1, 0, 0),
                                     teleoperated=PerformanceCount(0, 2, 0),
                                     team_bridge1=SUCCESS, scout_name='Ann'))
        assert record.score == 6 + 4 + 10
        assert record.scout_name == 'Ann'

    def test_entry_round_trip(self):
        record = TeamMatchRecord(team=1, alliance=Alliance.BLUE)
        entry = TeamEntry(teleoperated=PerformanceCount(1, 2, 3, 4), failure=True)
        record.apply_entry(entry)
        assert record.entry() == entry

    def test_negative_count_rejected(self):
        with pytest.raises(ValueError):
            PerformanceCount(high=-1)
