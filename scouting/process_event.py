#!/usr/bin/env python3
"""CLI entry point for the scouting datastore.

Usage:
    python -m scouting.process_event teams --data teams.csv
    python -m scouting.process_event schedule --data schedule.csv \\
        --date 2011-03-10 --location sdc --name "San Diego Regional"
    python -m scouting.process_event schedule --data schedule.csv --event sdc2011
    python -m scouting.process_event spreadsheet --event sdc2011 --output ./output/
    python -m scouting.process_event scout-forms --event sdc2011 --output ./output/
    python -m scouting.process_event match-sheet --match sdc20110042 --output ./output/
    python -m scouting.process_event serve
"""

import argparse
import logging
import os
import sys

from .adapters.schedule_adapter import ScheduleAdapter
from .adapters.teams_adapter import TeamsAdapter
from .core.db_builder import existing_event, import_schedule, import_teams, new_event
from .core.models import ScoutingConfig
from .core.output_generator import generate_team_spreadsheet
from .core.pdf_generator import generate_match_sheet_pdf, generate_scout_forms_pdf
from .core.stats import event_team_stats
from .core.store import Datastore, StoreNotFound
from .core.tags import TagError, format_tag, parse_event_tag, parse_match_tag


def build_parser(defaults: ScoutingConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Manage robotics scouting data')
    parser.add_argument('--db', default=defaults.db_path,
                        help='Path to the SQLite database (default: $SCOUTING_DB or scouting.db)')
    parser.add_argument('--image-dir', default=defaults.image_dir,
                        help='Directory of team photos named <team>.jpg')
    parser.add_argument('--verbose', action='store_true', help='Log debug output')
    sub = parser.add_subparsers(dest='command', required=True)

    teams = sub.add_parser('teams', help='Import a number,name team CSV')
    teams.add_argument('--data', nargs='+', required=True, help='Team CSV file(s)')

    schedule = sub.add_parser('schedule', help='Import a match schedule CSV')
    schedule.add_argument('--data', required=True,
                          help='CSV of time,type,num,red1,red2,red3,blue1,blue2,blue3')
    schedule.add_argument('--event', help='Tag of an existing event (e.g. sdc2011)')
    schedule.add_argument('--date', help='Event date YYYY-MM-DD (new event)')
    schedule.add_argument('--location', help='Location code (new event)')
    schedule.add_argument('--name', help='Location name (new event)')

    spreadsheet = sub.add_parser('spreadsheet', help='Write the team stats CSV')
    spreadsheet.add_argument('--event', required=True, help='Event tag')
    spreadsheet.add_argument('--output', required=True, help='Output directory')

    forms = sub.add_parser('scout-forms', help='Write printable scout forms')
    forms.add_argument('--event', required=True, help='Event tag')
    forms.add_argument('--output', required=True, help='Output directory')

    sheet = sub.add_parser('match-sheet', help='Write a match sheet PDF')
    sheet.add_argument('--match', required=True, help='Match tag (e.g. sdc20110042)')
    sheet.add_argument('--output', required=True, help='Output directory')

    serve = sub.add_parser('serve', help='Run the web server')
    serve.add_argument('--host', default=defaults.host)
    serve.add_argument('--port', type=int, default=defaults.port)
    serve.add_argument('--debug', action='store_true', default=defaults.debug)

    return parser


def main(argv=None):
    defaults = ScoutingConfig.from_env()
    parser = build_parser(defaults)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(levelname)s %(name)s: %(message)s')

    config = ScoutingConfig(db_path=args.db, image_dir=args.image_dir,
                            per_page=defaults.per_page, match_limit=defaults.match_limit,
                            debug=defaults.debug, host=defaults.host, port=defaults.port)
    store = Datastore(config.db_path, match_limit=config.match_limit)
    store.init_schema()

    try:
        if args.command == 'teams':
            _import_teams(store, args)
        elif args.command == 'schedule':
            _import_schedule(store, args, parser)
        elif args.command == 'spreadsheet':
            _spreadsheet(store, args)
        elif args.command == 'scout-forms':
            _scout_forms(store, args)
        elif args.command == 'match-sheet':
            _match_sheet(store, args, config)
        elif args.command == 'serve':
            _serve(config, args)
    except TagError as e:
        print(e)
        sys.exit(1)
    except StoreNotFound as e:
        print(f'Not found in datastore: {e}')
        sys.exit(1)


def _import_teams(store: Datastore, args):
    adapter = TeamsAdapter()
    total = 0
    for data_path in args.data:
        print(f"Parsing {data_path}...")
        teams = adapter.parse(data_path)
        print(f"  -> {len(teams)} teams")
        total += import_teams(store, teams)
    print(f"Imported {total} teams")


def _import_schedule(store: Datastore, args, parser):
    if args.event:
        event = existing_event(store, args.event)
    elif args.date and args.location and args.name:
        try:
            event = new_event(args.date, args.location, args.name)
        except ValueError as e:
            parser.error(str(e))
    else:
        parser.error('schedule needs --event, or --date, --location and --name')

    print(f"Parsing {args.data}...")
    matches = ScheduleAdapter().parse(args.data)
    print(f"Parsed {len(matches)} matches")

    event = import_schedule(store, event, matches)
    print(f"Event {format_tag(event.identifier)}: {len(event.teams)} teams")


def _spreadsheet(store: Datastore, args):
    event_id = parse_event_tag(args.event)
    event = store.fetch_event(event_id)
    stats = event_team_stats(event, store.fetch_matches(event_id))

    os.makedirs(args.output, exist_ok=True)
    csv_path = os.path.join(args.output, f'{args.event}_teams.csv')
    generate_team_spreadsheet(stats, csv_path)
    print(f"Generated {csv_path}")


def _scout_forms(store: Datastore, args):
    event_id = parse_event_tag(args.event)
    event = store.fetch_event(event_id)

    os.makedirs(args.output, exist_ok=True)
    pdf_path = os.path.join(args.output, f'{args.event}_scout_forms.pdf')
    generate_scout_forms_pdf(event, store.fetch_matches(event_id), pdf_path)
    print(f"Generated {pdf_path}")


def _match_sheet(store: Datastore, args, config: ScoutingConfig):
    match_id = parse_match_tag(args.match)
    event = store.fetch_event(match_id.event)
    match = store.fetch_match(match_id)
    stats_by_team = {r.team: store.team_event_stats(match_id.event, r.team)
                     for r in match.teams}

    os.makedirs(args.output, exist_ok=True)
    pdf_path = os.path.join(args.output, f'{args.match}_match_sheet.pdf')
    generate_match_sheet_pdf(event, match, stats_by_team, pdf_path,
                             image_dir=config.image_dir)
    print(f"Generated {pdf_path}")


def _serve(config: ScoutingConfig, args):
    from .web import create_app

    config.host, config.port, config.debug = args.host, args.port, args.debug
    app = create_app(config)
    print(f"Listening on {config.host}:{config.port}")
    app.run(host=config.host, port=config.port, debug=config.debug)


if __name__ == '__main__':
    main()
