"""HTTP surface for the scouting datastore.

Routes take the same identifiers as the tag codec. ``/jump`` and
``/tag/<tag>`` accept tag text directly; everything else uses readable
path segments (year, location code, match category, number).
"""

import datetime
import logging

from flask import Flask, Response, abort, jsonify, redirect, request, url_for

from .core.models import (
    BridgeAttempt, EventIdentifier, MatchCategory, MatchIdentifier,
    MatchTeamIdentifier, PerformanceCount, ScoutingConfig, TeamEntry,
)
from .core.output_generator import team_spreadsheet_text
from .core.paging import Paginator, page_number_from_query
from .core.pdf_generator import match_sheet_document, scout_forms_document
from .core.stats import event_team_stats
from .core.store import Datastore, StoreNotFound
from .core.tags import TEAM_NUMBER_MAX_WIDTH, TagError, format_tag, parse_tag

logger = logging.getLogger(__name__)

PHASES = ('autonomous', 'teleoperated')
BRIDGES = ('coop_bridge', 'team_bridge1', 'team_bridge2')
FORM_NUMBER_MAX_WIDTH = 9


# --- Serialization ---

def _event_json(event) -> dict:
    return {
        'tag': format_tag(event.identifier),
        'location': {'name': event.location_name, 'code': event.location_code},
        'date': {'year': event.year, 'month': event.month, 'day': event.day},
        'teams': event.teams,
    }


def _match_json(event_id: EventIdentifier, match) -> dict:
    return {
        'tag': format_tag(match.identifier(event_id)),
        'type': match.category.value,
        'display_name': match.category.display_name,
        'number': match.number,
        'score': {alliance.value: points for alliance, points in match.score.items()},
        'teams': [record.to_dict() for record in match.teams],
    }


def _stats_json(stats) -> dict:
    return {
        'event': format_tag(stats.event),
        'team': stats.team_number,
        'matches_played': stats.match_count,
        'no_shows': stats.no_show_count,
        'failures': stats.failure_count,
        'total_points': stats.total_points,
        'average_score': stats.average_score(),
        'failure_rate': stats.failure_rate(),
        'average_autonomous': stats.average_performance('autonomous'),
        'average_teleoperated': stats.average_performance('teleoperated'),
        'bridges': {
            name: {
                'attempts': bridge.attempt_count,
                'successes': bridge.success_count,
                'attempt_rate': bridge.attempt_rate(stats.match_count),
                'success_rate': bridge.success_rate(),
            }
            for name, bridge in (('coop', stats.coop_bridge),
                                 ('bridge1', stats.team_bridge1),
                                 ('bridge2', stats.team_bridge2))
        },
    }


# --- Form parsing ---

def _form_int(form, name: str) -> int:
    value = form.get(name, '0').strip() or '0'
    # int() would also take signs, underscores and non-ASCII digits
    if not (value.isascii() and value.isdigit()):
        abort(400, description=f'{name} must be a whole number')
    if len(value) > FORM_NUMBER_MAX_WIDTH:
        abort(400, description=f'{name} is too large')
    return int(value)


def _form_bool(form, name: str) -> bool:
    return form.get(name, '').lower() in ('1', 'on', 'true', 'yes')


def parse_team_entry(form) -> TeamEntry:
    """Build a TeamEntry from submitted form fields.

    Counts are named like ``autonomous.high``; bridges take 'na', 'fail'
    or 'success'.
    """
    counts = {
        phase: PerformanceCount(*(_form_int(form, f'{phase}.{bucket}')
                                  for bucket in ('high', 'mid', 'low', 'missed')))
        for phase in PHASES
    }
    bridges = {}
    for name in BRIDGES:
        try:
            bridges[name] = BridgeAttempt.from_form(form.get(name, 'na'))
        except ValueError as e:
            abort(400, description=str(e))
    return TeamEntry(
        autonomous=counts['autonomous'],
        teleoperated=counts['teleoperated'],
        coop_bridge=bridges['coop_bridge'],
        team_bridge1=bridges['team_bridge1'],
        team_bridge2=bridges['team_bridge2'],
        scout_name=form.get('scout_name', '').strip(),
        failure=_form_bool(form, 'failure'),
        no_show=_form_bool(form, 'no_show'),
    )


def create_app(config: ScoutingConfig | None = None) -> Flask:
    config = config or ScoutingConfig.from_env()
    app = Flask(__name__)
    app.config['DEBUG'] = config.debug
    store = Datastore(config.db_path, match_limit=config.match_limit)
    store.init_schema()
    app.extensions['scouting_store'] = store

    def fetch_or_404(fetch, *args):
        try:
            return fetch(*args)
        except StoreNotFound:
            abort(404)

    def event_id_or_404(year: int, location: str) -> EventIdentifier:
        try:
            return EventIdentifier(location, year)
        except ValueError:
            abort(404)

    def match_id_or_404(year: int, location: str, match_type: str, number: int):
        try:
            category = MatchCategory(match_type)
            return MatchIdentifier(event_id_or_404(year, location), category, number)
        except ValueError:
            abort(404)

    def identifier_url(identifier) -> str:
        if isinstance(identifier, MatchTeamIdentifier):
            match_id = identifier.match
            return url_for('edit_match_team', year=match_id.year,
                           location=match_id.location_code,
                           match_type=match_id.category.value,
                           number=match_id.match_number,
                           team=identifier.team_number)
        if isinstance(identifier, MatchIdentifier):
            return url_for('view_match', year=identifier.year,
                           location=identifier.location_code,
                           match_type=identifier.category.value,
                           number=identifier.match_number)
        return url_for('view_event', year=identifier.year,
                       location=identifier.location_code)

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({'error': e.description}), 400

    @app.route('/')
    def index():
        return jsonify({'jump': url_for('jump'), 'teams': url_for('team_index'),
                        'events': url_for('event_index')})

    @app.route('/jump')
    def jump():
        """Go to a team number, event tag, match tag or match team tag."""
        query = request.args.get('q', '').strip()
        logger.info('Jump %r', query)
        if query:
            if (query.isascii() and query.isdigit()
                    and len(query) <= TEAM_NUMBER_MAX_WIDTH and int(query) > 0):
                return redirect(url_for('view_team', number=int(query)))
            try:
                identifier = parse_tag(query)
            except TagError as e:
                logger.info('Jump query not a tag: %s', e)
            else:
                return redirect(identifier_url(identifier))
        return jsonify({'error': 'No team or tag matches query', 'query': query}), 404

    @app.route('/tag/<tag>')
    def resolve_tag(tag):
        try:
            identifier = parse_tag(tag)
        except TagError:
            abort(404)
        return redirect(identifier_url(identifier))

    # --- Teams ---

    @app.route('/team/')
    def team_index():
        paginator = Paginator(store.teams(), config.per_page)
        page = paginator.page(page_number_from_query(request.args.get('page')))
        if page is None:
            abort(404)
        return jsonify({
            'teams': [{'number': t.number, 'name': t.name} for t in page.fetch()],
            'page': page.number,
            'page_count': paginator.page_count(),
            'has_next': page.has_next,
            'has_previous': page.has_previous,
        })

    @app.route('/team/<int(min=1):number>/')
    def view_team(number):
        team = fetch_or_404(store.fetch_team, number)
        year = datetime.date.today().year
        stats = [store.team_event_stats(event_id, number)
                 for event_id in store.events_for_team(year, number)]
        return jsonify({
            'number': team.number,
            'name': team.name,
            'rookie_year': team.rookie_year,
            'stats': [_stats_json(s) for s in stats],
        })

    # --- Events ---

    @app.route('/event/')
    def event_index():
        year = request.args.get('year', type=int) or datetime.date.today().year
        events = store.events(year).slice(0, 50)
        return jsonify({'year': year, 'events': [_event_json(e) for e in events]})

    @app.route('/event/<int:year>/<location>/')
    def view_event(year, location):
        event_id = event_id_or_404(year, location)
        event = fetch_or_404(store.fetch_event, event_id)
        matches = store.fetch_matches(event_id)
        teams = store.fetch_teams(event.teams)
        data = _event_json(event)
        data['matches'] = [_match_json(event_id, m) for m in matches]
        data['team_names'] = {t.number: t.name for t in teams}
        return jsonify(data)

    @app.route('/event/<int:year>/<location>/teams.csv')
    def event_spreadsheet(year, location):
        event_id = event_id_or_404(year, location)
        event = fetch_or_404(store.fetch_event, event_id)
        text = team_spreadsheet_text(event_team_stats(event, store.fetch_matches(event_id)))
        return Response(text, mimetype='text/csv',
                        headers={'Content-Disposition': 'attachment; filename=teams.csv'})

    @app.route('/event/<int:year>/<location>/scout-forms.pdf')
    def event_scout_forms(year, location):
        event_id = event_id_or_404(year, location)
        event = fetch_or_404(store.fetch_event, event_id)
        doc = scout_forms_document(event, store.fetch_matches(event_id))
        data = doc.tobytes()
        doc.close()
        return Response(data, mimetype='application/pdf')

    @app.route('/event/<int:year>/<location>/team/<int(min=1):number>/')
    def team_matches(year, location, number):
        event_id = event_id_or_404(year, location)
        event = fetch_or_404(store.fetch_event, event_id)
        if number not in event.teams:
            abort(404)
        matches = store.team_event_matches(event_id, number)
        return jsonify({
            'event': format_tag(event_id),
            'team': number,
            'matches': [_match_json(event_id, m) for m in matches],
            'stats': _stats_json(store.team_event_stats(event_id, number)),
        })

    # --- Matches ---

    @app.route('/event/<int:year>/<location>/match/<match_type>/<int:number>/')
    def view_match(year, location, match_type, number):
        match_id = match_id_or_404(year, location, match_type, number)
        fetch_or_404(store.fetch_event, match_id.event)
        match = fetch_or_404(store.fetch_match, match_id)
        return jsonify(_match_json(match_id.event, match))

    @app.route('/event/<int:year>/<location>/match/<match_type>/<int:number>/match-sheet.pdf')
    def match_sheet(year, location, match_type, number):
        match_id = match_id_or_404(year, location, match_type, number)
        event = fetch_or_404(store.fetch_event, match_id.event)
        match = fetch_or_404(store.fetch_match, match_id)
        stats_by_team = {r.team: store.team_event_stats(match_id.event, r.team)
                         for r in match.teams}
        doc = match_sheet_document(event, match, stats_by_team, config.image_dir)
        data = doc.tobytes()
        doc.close()
        return Response(data, mimetype='application/pdf')

    @app.route('/event/<int:year>/<location>/match/<match_type>/<int:number>/score',
               methods=['POST'])
    def score_match(year, location, match_type, number):
        match_id = match_id_or_404(year, location, match_type, number)
        fetch_or_404(store.fetch_match, match_id)
        red = _form_int(request.form, 'red_score')
        blue = _form_int(request.form, 'blue_score')
        store.update_match_score(match_id, red, blue)
        return redirect(url_for('view_match', year=year, location=location,
                                match_type=match_type, number=number))

    @app.route('/event/<int:year>/<location>/match/<match_type>/<int:number>/edit/<int:team>',
               methods=['GET', 'POST'])
    def edit_match_team(year, location, match_type, number, team):
        match_id = match_id_or_404(year, location, match_type, number)
        match = fetch_or_404(store.fetch_match, match_id)
        record = match.team_record(team)
        if record is None:
            abort(404)

        if request.method == 'POST':
            entry = parse_team_entry(request.form)
            fetch_or_404(store.update_match_team, match_id, team, entry)
            return redirect(url_for('view_match', year=year, location=location,
                                    match_type=match_type, number=number))

        return jsonify({
            'tag': format_tag(MatchTeamIdentifier(match_id, team)),
            'match': _match_json(match_id.event, match),
            'team': record.to_dict(),
        })

    return app
