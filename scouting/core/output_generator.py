"""Team spreadsheet (CSV) for an event.

One row per team, built from TeamEventStats. Columns are fixed by
SPREADSHEET_HEADER; downstream spreadsheets rely on the order.
"""

import csv
import io

from .stats import TeamEventStats

SPREADSHEET_HEADER = [
    'Team #',
    'Matches Played',
    'No-Shows',
    'Failures',
    'Average Score',
    'Average Teleop Scored',
    'Average Teleop Shot',
    'Average Auto Scored',
    'Average Auto Shot',
    'Max Teleop Scored',
    'Max Teleop Shot',
    'Coop Bridge Attempts',
    'Coop Bridge Successes',
    'Bridge 1 Attempts',
    'Bridge 1 Successes',
    'Bridge 2 Attempts',
    'Bridge 2 Successes',
    'Auto High',
    'Auto Mid',
    'Auto Low',
    'Auto Missed',
    'Teleop High',
    'Teleop Mid',
    'Teleop Low',
    'Teleop Missed',
]


def _format_float(value: float) -> str:
    """Shortest form: 2.0 -> '2', 2.5 -> '2.5'."""
    return format(value, '.15g')


def stats_row(stats: TeamEventStats) -> list[str]:
    """Spreadsheet cells for one team, aligned with SPREADSHEET_HEADER."""
    return [
        str(stats.team_number),
        str(stats.match_count),
        str(stats.no_show_count),
        str(stats.failure_count),
        _format_float(stats.average_score()),
        _format_float(stats.average_teleoperated_scored()),
        _format_float(stats.average_teleoperated_shot()),
        _format_float(stats.average_autonomous_scored()),
        _format_float(stats.average_autonomous_shot()),
        str(stats.max_teleoperated_scored),
        str(stats.max_teleoperated_shot),

        str(stats.coop_bridge.attempt_count),
        str(stats.coop_bridge.success_count),
        str(stats.team_bridge1.attempt_count),
        str(stats.team_bridge1.success_count),
        str(stats.team_bridge2.attempt_count),
        str(stats.team_bridge2.success_count),

        str(stats.autonomous.high),
        str(stats.autonomous.mid),
        str(stats.autonomous.low),
        str(stats.autonomous.missed),
        str(stats.teleoperated.high),
        str(stats.teleoperated.mid),
        str(stats.teleoperated.low),
        str(stats.teleoperated.missed),
    ]


def write_team_spreadsheet(f, stats_list: list[TeamEventStats]):
    """Write the header and one row per team to an open text file."""
    writer = csv.writer(f)
    writer.writerow(SPREADSHEET_HEADER)
    for stats in stats_list:
        writer.writerow(stats_row(stats))


def team_spreadsheet_text(stats_list: list[TeamEventStats]) -> str:
    buf = io.StringIO()
    write_team_spreadsheet(buf, stats_list)
    return buf.getvalue()


def generate_team_spreadsheet(stats_list: list[TeamEventStats], output_path: str):
    """Generate the team spreadsheet CSV at ``output_path``."""
    with open(output_path, 'w', newline='') as f:
        write_team_spreadsheet(f, stats_list)
