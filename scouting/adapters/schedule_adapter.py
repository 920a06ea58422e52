"""Adapter for match schedule CSV files.

Rows are ``time,type,num,red1,red2,red3,blue1,blue2,blue3`` where type is
one of qualification, quarter, semifinal or final.
"""

import csv
import logging

from ..core.models import Alliance, Match, MatchCategory, TeamMatchRecord
from .base import BaseAdapter

logger = logging.getLogger(__name__)

SCHEDULE_COLUMNS = 9
ALLIANCE_SLOTS = [Alliance.RED] * 3 + [Alliance.BLUE] * 3


class ScheduleAdapter(BaseAdapter):
    def parse(self, data_path: str) -> list[Match]:
        with open(data_path, 'r', newline='') as f:
            return self.parse_rows(csv.reader(f))

    def parse_rows(self, rows) -> list[Match]:
        matches = []
        for row in rows:
            if not row:
                continue
            if len(row) != SCHEDULE_COLUMNS:
                raise ValueError('Bad CSV file: must be '
                                 'time,type,num,red1,red2,red3,blue1,blue2,blue3')

            try:
                category = MatchCategory(row[1].strip())
            except ValueError:
                logger.warning('Bad match type %r: must be %s', row[1],
                               '/'.join(c.value for c in MatchCategory))
                continue

            try:
                nums = [int(cell) for cell in row[2:]]
            except ValueError as e:
                logger.warning('Bad cell in match %s %s: %s', row[1], row[2], e)
                continue
            if not 0 <= nums[0] <= 999:
                logger.warning('Match number %d out of range, skipping', nums[0])
                continue

            match = Match(category=category, number=nums[0])
            for team, alliance in zip(nums[1:], ALLIANCE_SLOTS):
                match.teams.append(TeamMatchRecord(team=team, alliance=alliance))
            matches.append(match)
        return matches
