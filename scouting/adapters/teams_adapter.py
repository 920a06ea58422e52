"""Adapter for team list CSV files (number,name)."""

import csv
import logging

from ..core.models import Team
from .base import BaseAdapter

logger = logging.getLogger(__name__)


class TeamsAdapter(BaseAdapter):
    """Parse a headerless CSV of ``number,name`` rows.

    Rows whose number is not an integer are logged and skipped. Any row
    with a different column count means the file is not a team list.
    """

    def parse(self, data_path: str) -> list[Team]:
        with open(data_path, 'r', newline='') as f:
            return self.parse_rows(csv.reader(f))

    def parse_rows(self, rows) -> list[Team]:
        teams = []
        for row in rows:
            if not row:
                continue
            if len(row) != 2:
                raise ValueError('Team CSV files must be number,name')
            try:
                number = int(row[0])
            except ValueError:
                logger.warning('Row found with bad number: %r', row[0])
                continue
            teams.append(Team(number=number, name=row[1].strip()))
        return teams
