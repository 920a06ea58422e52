"""Printable PDF reports for an event.

Scout forms:
- Three forms per letter page, one per team per match
- Page break after each team's forms
- Match/team tag printed in Courier as the form's barcode payload
- Autonomous and Teleop high/mid/low fields, bridge attempt/success fields

Match sheet:
- One landscape page per match
- Red alliance across the top half, blue across the bottom
- Alliance-coloured frame with the team photo, then event stats
"""

import os

import fitz  # PyMuPDF

from .models import Alliance, Event, Match, MatchTeamIdentifier
from .stats import TeamEventStats
from .tags import format_match_team_tag

# --- Page layout constants (letter: 612 x 792 pt) ---
PAGE_W = 612
PAGE_H = 792
INCH = 72
MARGIN = 0.5 * INCH

SCOUT_FORMS_PER_PAGE = 3

# Colors
BLACK = (0, 0, 0)
RED_ALLIANCE = (0.69, 0.08, 0.15)
BLUE_ALLIANCE = (0.31, 0.34, 0.72)
ALLIANCE_COLORS = {Alliance.RED: RED_ALLIANCE, Alliance.BLUE: BLUE_ALLIANCE}

# Font sizes
MATCH_NUMBER_SIZE = 18
SCORE_SIZE = 14
TAG_SIZE = 12
STAT_SIZE = 8

FONT_REGULAR = 'Helvetica'
FONT_BOLD = 'Helvetica-Bold'
FONT_TAG = 'Courier'

FIELD_LEADING = 0.1 * INCH
FIELD_LINE_PADDING = 0.125 * INCH

IMAGE_NAME_FORMAT = '{}.jpg'


def scout_forms_document(event: Event, matches: list[Match]) -> fitz.Document:
    """Build the scout forms for every team's matches at ``event``."""
    size_x = PAGE_W - MARGIN * 2
    size_y = (PAGE_H - MARGIN * 2) / SCOUT_FORMS_PER_PAGE

    # Map of team to its matches, in schedule order
    team_matches: dict[int, list[Match]] = {}
    for match in matches:
        for record in match.teams:
            team_matches.setdefault(record.team, []).append(match)

    doc = fitz.open()
    for team in event.teams:
        slot = 0
        page = None
        for match in team_matches.get(team, []):
            if page is None:
                page = doc.new_page(width=PAGE_W, height=PAGE_H)
                slot = 0
            top = MARGIN + slot * size_y
            _draw_scout_form(page, fitz.Rect(MARGIN, top, MARGIN + size_x, top + size_y),
                             event, match, team)
            slot += 1
            if slot == SCOUT_FORMS_PER_PAGE:
                page = None
            else:
                # Divider between forms
                page.draw_line(fitz.Point(MARGIN, top + size_y),
                               fitz.Point(MARGIN + size_x, top + size_y),
                               color=BLACK, width=0.5, dashes='[3 3] 0')

    if doc.page_count == 0:
        doc.new_page(width=PAGE_W, height=PAGE_H)
    return doc


def generate_scout_forms_pdf(event: Event, matches: list[Match], output_path: str):
    """Generate scout forms PDF.

    Args:
        event: Event whose teams get forms, in event team order.
        matches: The event's matches, already in schedule order.
        output_path: Where to save the PDF.
    """
    doc = scout_forms_document(event, matches)
    doc.save(output_path)
    doc.close()


def match_sheet_document(event: Event, match: Match,
                         stats_by_team: dict[int, TeamEventStats],
                         image_dir: str | None = None) -> fitz.Document:
    """Build a one-page sheet summarizing the six teams of ``match``."""
    page_w, page_h = PAGE_H, PAGE_W     # landscape
    columns = 3
    entry_w = (page_w - MARGIN * 2) / columns

    doc = fitz.open()
    page = doc.new_page(width=page_w, height=page_h)

    halves = {
        Alliance.RED: (MARGIN, page_h / 2),
        Alliance.BLUE: (page_h / 2, page_h - MARGIN),
    }
    for alliance, (y0, y1) in halves.items():
        for i, record in enumerate(match.alliance_records(alliance)[:columns]):
            rect = fitz.Rect(MARGIN + i * entry_w, y0, MARGIN + (i + 1) * entry_w, y1)
            _draw_match_sheet_team(page, rect, record.team, alliance,
                                   stats_by_team.get(record.team), image_dir)

    title = f'{match.category.display_name} {match.number}'
    tw = fitz.get_text_length(title, fontname=FONT_BOLD, fontsize=MATCH_NUMBER_SIZE)
    page.insert_text(fitz.Point(page_w - MARGIN - tw, page_h - MARGIN / 2), title,
                     fontname=FONT_BOLD, fontsize=MATCH_NUMBER_SIZE, color=BLACK)
    page.insert_text(fitz.Point(MARGIN, page_h - MARGIN / 2), event.location_name,
                     fontname=FONT_REGULAR, fontsize=SCORE_SIZE, color=BLACK)
    return doc


def generate_match_sheet_pdf(event: Event, match: Match,
                             stats_by_team: dict[int, TeamEventStats],
                             output_path: str, image_dir: str | None = None):
    doc = match_sheet_document(event, match, stats_by_team, image_dir)
    doc.save(output_path)
    doc.close()


def team_image_path(image_dir: str | None, team: int) -> str | None:
    """Path of a team's photo, or None if there is none."""
    if not image_dir:
        return None
    path = os.path.join(image_dir, IMAGE_NAME_FORMAT.format(team))
    return path if os.path.isfile(path) else None


# --- Scout form drawing ---

def _draw_scout_form(page, rect, event: Event, match: Match, team: int):
    """Draw one scout form inside ``rect``."""
    x = rect.x0
    y = rect.y0 + MATCH_NUMBER_SIZE

    # Heading
    heading = f'{match.category.display_name} #{match.number} - {event.location_name}'
    page.insert_text(fitz.Point(x, y), heading,
                     fontname=FONT_BOLD, fontsize=MATCH_NUMBER_SIZE, color=BLACK)
    page.insert_text(fitz.Point(x, y + MATCH_NUMBER_SIZE * 1.2), f'Team {team}',
                     fontname=FONT_BOLD, fontsize=MATCH_NUMBER_SIZE, color=BLACK)

    # Barcode payload, right aligned
    payload = format_match_team_tag(
        MatchTeamIdentifier(match.identifier(event.identifier), team))
    tw = fitz.get_text_length(payload, fontname=FONT_TAG, fontsize=TAG_SIZE)
    page.insert_text(fitz.Point(rect.x1 - tw, rect.y0 + TAG_SIZE), payload,
                     fontname=FONT_TAG, fontsize=TAG_SIZE, color=BLACK)

    # Scores
    heading_y = y + MATCH_NUMBER_SIZE * 1.2 + 0.25 * INCH + SCORE_SIZE
    fields_y = heading_y + 0.1 * INCH + SCORE_SIZE
    x1, bottom = _draw_fields(page, fitz.Point(x, fields_y), 0.5 * INCH,
                              'High:', 'Mid:', 'Low:')
    x2, _ = _draw_fields(page, fitz.Point(x1 + 0.25 * INCH, fields_y), 0.5 * INCH,
                         'High:', 'Mid:', 'Low:')
    x3, _ = _draw_fields(page, fitz.Point(x2 + 0.5 * INCH, fields_y), 0.5 * INCH,
                         'Coop Attempt:', 'Bridge 1 Attempt:', 'Bridge 2 Attempt:')
    _draw_fields(page, fitz.Point(x3 + 0.25 * INCH, fields_y), 0.5 * INCH,
                 'Success:', 'Success:', 'Success:')

    page.insert_text(fitz.Point(x, heading_y), 'Autonomous',
                     fontname=FONT_BOLD, fontsize=SCORE_SIZE, color=BLACK)
    page.insert_text(fitz.Point(x1 + 0.25 * INCH, heading_y), 'Teleop',
                     fontname=FONT_BOLD, fontsize=SCORE_SIZE, color=BLACK)

    # Scout name and comments
    name_y = bottom + SCORE_SIZE + 0.4 * INCH
    _, name_bottom = _draw_fields(page, fitz.Point(x, name_y), 3.0 * INCH, 'Scout Name:')
    page.insert_text(fitz.Point(x, name_bottom + SCORE_SIZE + 0.05 * INCH), 'Comments:',
                     fontname=FONT_REGULAR, fontsize=SCORE_SIZE, color=BLACK)


def _draw_fields(page, pt, line_length, *labels):
    """Draw labels stacked at ``pt`` with a write-in line after each.

    Returns (x just past the lines, baseline of the last label).
    """
    leading = SCORE_SIZE + FIELD_LEADING
    right_side = max(
        fitz.get_text_length(label, fontname=FONT_REGULAR, fontsize=SCORE_SIZE)
        for label in labels
    )
    origin_x = pt.x + right_side + FIELD_LINE_PADDING

    baseline = pt.y
    for i, label in enumerate(labels):
        baseline = pt.y + leading * i
        page.insert_text(fitz.Point(pt.x, baseline), label,
                         fontname=FONT_REGULAR, fontsize=SCORE_SIZE, color=BLACK)
        page.draw_line(fitz.Point(origin_x, baseline),
                       fitz.Point(origin_x + line_length, baseline),
                       color=BLACK, width=0.75)
    return origin_x + line_length, baseline


# --- Match sheet drawing ---

def _draw_match_sheet_team(page, rect, team: int, alliance: Alliance,
                           stats: TeamEventStats | None, image_dir: str | None):
    padding = 0.0625 * INCH
    image_h = 2.5 * INCH
    rect = fitz.Rect(rect.x0 + padding, rect.y0 + padding,
                     rect.x1 - padding, rect.y1 - padding)

    # Image frame
    frame = fitz.Rect(rect.x0, rect.y0, rect.x1, min(rect.y0 + image_h, rect.y1))
    color = ALLIANCE_COLORS[alliance]
    page.draw_rect(frame, color=color, fill=color)

    image_path = team_image_path(image_dir, team)
    if image_path:
        page.insert_image(frame, filename=image_path, keep_proportion=True)

    # Stats
    lines = [f'Team {team}']
    if stats is not None:
        lines.append(f'Matches Played: {stats.match_count}')
        if stats.match_count != 0:
            lines.append(f'Avg Score: {stats.average_score():.1f}')
            lines.append(f'Avg Teleop Balls: {stats.average_teleoperated_scored():.1f}'
                         f' / {stats.average_teleoperated_shot():.1f}')
            lines.append(f'Avg Auto Balls: {stats.average_autonomous_scored():.1f}'
                         f' / {stats.average_autonomous_shot():.1f}')
            lines.append(f'Max Teleop Balls: {stats.max_teleoperated_scored}'
                         f' / {stats.max_teleoperated_shot}')
            lines.append(f'Bridge 1: {stats.team_bridge1.success_count}'
                         f' / {stats.team_bridge1.attempt_count}')
            lines.append(f'Coop Bridge: {stats.coop_bridge.success_count}'
                         f' / {stats.coop_bridge.attempt_count}')
        if stats.no_show_count:
            lines.append(f'No-Shows: {stats.no_show_count}')

    y = frame.y1 + STAT_SIZE + padding
    for line in lines:
        page.insert_text(fitz.Point(rect.x0, y), line,
                         fontname=FONT_REGULAR, fontsize=STAT_SIZE, color=BLACK)
        y += STAT_SIZE * 1.3
