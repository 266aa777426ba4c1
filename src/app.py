"""
Flask web application for the group tournament manager.
"""
import os
import csv
import io
import json
import yaml
from datetime import datetime, timedelta
from functools import wraps
from filelock import FileLock
from flask import Flask, request, jsonify, Response, session
from werkzeug.security import generate_password_hash, check_password_hash
from core.errors import TournamentError, UnknownCompetitor, UnknownMatch, StaleGeneration, InvalidImport
from core.scheduler import bye_rounds
from core.seeding import ALGORITHMS, DEFAULT_ALGORITHM
from core.state import TournamentState, GROUPS, match_id

app = Flask(__name__)


def _get_or_create_secret_key() -> bytes:
    """Get SECRET_KEY from env, or generate and persist to file."""
    env_key = os.environ.get('SECRET_KEY')
    if env_key:
        return env_key.encode() if isinstance(env_key, str) else env_key
    key_file = os.path.join(DATA_DIR, '.secret_key')
    if os.path.exists(key_file):
        with open(key_file, 'rb') as f:
            return f.read()
    key = os.urandom(24)
    os.makedirs(os.path.dirname(key_file), exist_ok=True)
    with open(key_file, 'wb') as f:
        f.write(key)
    return key


def _get_admin_password_hash():
    """Password hash guarding mutations, from ADMIN_PASSWORD_HASH or ADMIN_PASSWORD."""
    if os.environ.get('ADMIN_PASSWORD_HASH'):
        return os.environ['ADMIN_PASSWORD_HASH']
    if os.environ.get('ADMIN_PASSWORD'):
        return generate_password_hash(os.environ['ADMIN_PASSWORD'])
    return None


BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))

app.secret_key = _get_or_create_secret_key()
app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(days=30)

STATE_FILENAME = 'state.yaml'
SETTINGS_FILENAME = 'settings.yaml'
MAX_UPLOAD_SIZE = 1 * 1024 * 1024  # 1 MB

# None disables the password gate
ADMIN_PASSWORD_HASH = _get_admin_password_hash()
if ADMIN_PASSWORD_HASH is None:
    app.logger.warning('ADMIN_PASSWORD not set; editing is open to everyone')

SAMPLE_COMPETITORS = [
    'Marek Vaniš',
    'Dušan Maleček',
    'Pochy',
    'David Kapin',
    'Marek Schneider',
    'Šimon Opekar',
    'David Rys',
    'Jakub Mráček',
    'Ondřej Holboj',
    'Venca Fál',
    'Franta Fál',
    'Vláďa Tvrdek',
    'Martin Klanica',
]


def _file_path(filename: str) -> str:
    """Return full path to a data file."""
    return os.path.join(DATA_DIR, filename)


def _data_lock() -> FileLock:
    """Lock serialising read-modify-write cycles on the data directory."""
    os.makedirs(DATA_DIR, exist_ok=True)
    return FileLock(_file_path('.lock'), timeout=10)


def get_default_settings():
    """Return default settings."""
    return {
        'tournament_name': 'Max Open',
        'seeding_algorithm': DEFAULT_ALGORITHM,
    }


def load_settings():
    """Load settings from YAML file, merging with defaults."""
    defaults = get_default_settings()
    path = _file_path(SETTINGS_FILENAME)
    if not os.path.exists(path):
        return defaults
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        app.logger.warning(f'Failed to parse {path}: {e}')
        return defaults
    if not isinstance(data, dict):
        return defaults
    return {**defaults, **data}


def save_settings(settings):
    """Save settings to YAML file."""
    os.makedirs(DATA_DIR, exist_ok=True)
    with open(_file_path(SETTINGS_FILENAME), 'w', encoding='utf-8') as f:
        yaml.dump(settings, f, default_flow_style=False, allow_unicode=True)


def load_state() -> TournamentState:
    """Load tournament state from YAML file.

    Missing, empty or unreadable files yield an empty state.
    """
    path = _file_path(STATE_FILENAME)
    empty = TournamentState(algorithm=load_settings().get('seeding_algorithm', DEFAULT_ALGORITHM))
    if not os.path.exists(path):
        return empty
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        app.logger.warning(f'Failed to parse {path}: {e}')
        return empty
    if not data:
        return empty
    try:
        return TournamentState.from_dict(data)
    except InvalidImport as e:
        app.logger.warning(f'Ignoring malformed state in {path}: {e}')
        return empty


def save_state(state: TournamentState):
    """Save tournament state to YAML file."""
    os.makedirs(DATA_DIR, exist_ok=True)
    with open(_file_path(STATE_FILENAME), 'w', encoding='utf-8') as f:
        yaml.dump(state.to_dict(), f, default_flow_style=False, allow_unicode=True)


def update_state(action):
    """Apply action(state) under the data lock and persist the result.

    Returns (state, action's return value). Nothing is saved if action raises.
    """
    with _data_lock():
        state = load_state()
        value = action(state)
        save_state(state)
    return state, value


def _json_body():
    """Request JSON as a dict; {} when absent, None when it is not an object."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def admin_required(f):
    """Reject mutations unless the session passed the password gate."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if ADMIN_PASSWORD_HASH and not session.get('admin'):
            return jsonify({'error': 'Password required'}), 401
        return f(*args, **kwargs)
    return decorated_function


def _group_schedule_payload(state: TournamentState, group: str) -> list:
    rounds = []
    for rnd in state.schedule(group):
        matches = []
        for a, b in rnd.pairings:
            key = match_id(group, a, b)
            result = state.results[group].get(key)
            matches.append({
                'match_id': key,
                'a': a,
                'b': b,
                'ag': result.score_a if result else '',
                'bg': result.score_b if result else '',
            })
        rounds.append({'round': rnd.round_number, 'matches': matches})
    return rounds


def _schedule_payload(state: TournamentState) -> dict:
    return {
        'generation': state.generation,
        'groups': {group: _group_schedule_payload(state, group) for group in GROUPS},
        'byes': {group: bye_rounds(state.groups[group]) for group in GROUPS},
    }


def _standings_payload(state: TournamentState) -> dict:
    return {group: [row.to_dict() for row in state.standings(group)] for group in GROUPS}


def _bracket_payload(state: TournamentState) -> list:
    return [slot.to_dict() for slot in state.bracket()]


def _ranking_payload(state: TournamentState) -> list:
    return [c.to_dict() for c in state.ranking]


@app.errorhandler(TournamentError)
def handle_tournament_error(e):
    """Convert domain errors into JSON responses."""
    if isinstance(e, (UnknownMatch, UnknownCompetitor)):
        status = 404
    elif isinstance(e, StaleGeneration):
        status = 409
    else:
        status = 400
    return jsonify({'success': False, 'error': str(e)}), status


@app.route('/')
def index():
    """Tournament overview: ranking, groups, schedules, standings and bracket."""
    state = load_state()
    return jsonify({
        'settings': load_settings(),
        'algorithm': state.algorithm,
        'ranking': _ranking_payload(state),
        'groups': {group: [c.to_dict() for c in state.groups[group]] for group in GROUPS},
        'schedule': _schedule_payload(state),
        'standings': _standings_payload(state),
        'bracket': _bracket_payload(state),
        'can_edit': not ADMIN_PASSWORD_HASH or bool(session.get('admin')),
    })


@app.route('/login', methods=['POST'])
def login():
    """Unlock editing for this session."""
    data = request.get_json(silent=True)
    if data is None:
        data = request.form
    elif not isinstance(data, dict):
        return jsonify({'success': False, 'error': 'Request body must be a JSON object'}), 400
    password = data.get('password', '')
    if ADMIN_PASSWORD_HASH is None:
        return jsonify({'success': True})
    if check_password_hash(ADMIN_PASSWORD_HASH, password):
        session['admin'] = True
        session.permanent = True
        return jsonify({'success': True})
    app.logger.info('Rejected admin login attempt')
    return jsonify({'success': False, 'error': 'Invalid password'}), 401


@app.route('/logout', methods=['POST'])
def logout():
    """Lock editing again."""
    session.pop('admin', None)
    return jsonify({'success': True})


@app.route('/api/settings', methods=['GET'])
def api_settings():
    """Current tournament settings."""
    return jsonify(load_settings())


@app.route('/api/settings', methods=['POST'])
@admin_required
def api_update_settings():
    """Update tournament name or default seeding algorithm."""
    data = _json_body()
    if data is None:
        return jsonify({'success': False, 'error': 'Request body must be a JSON object'}), 400
    settings = load_settings()
    if 'tournament_name' in data:
        name = str(data['tournament_name']).strip()
        if not name:
            return jsonify({'success': False, 'error': 'Tournament name must not be empty'}), 400
        settings['tournament_name'] = name
    if 'seeding_algorithm' in data:
        if data['seeding_algorithm'] not in ALGORITHMS:
            return jsonify({'success': False, 'error': f"Seeding algorithm must be one of {', '.join(ALGORITHMS)}"}), 400
        settings['seeding_algorithm'] = data['seeding_algorithm']
    with _data_lock():
        save_settings(settings)
    return jsonify({'success': True, 'settings': settings})


@app.route('/api/ranking', methods=['GET'])
def api_ranking():
    """Current master ranking."""
    return jsonify(_ranking_payload(load_state()))


@app.route('/api/ranking/add', methods=['POST'])
@admin_required
def api_ranking_add():
    """Append a competitor at the bottom of the ranking."""
    data = _json_body()
    if data is None:
        return jsonify({'success': False, 'error': 'Request body must be a JSON object'}), 400
    try:
        state, competitor = update_state(lambda s: s.add_competitor(data.get('name')))
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    return jsonify({'success': True, 'competitor': competitor.to_dict(), 'ranking': _ranking_payload(state)})


@app.route('/api/ranking/edit', methods=['POST'])
@admin_required
def api_ranking_edit():
    """Rename a competitor in place."""
    data = _json_body()
    if data is None:
        return jsonify({'success': False, 'error': 'Request body must be a JSON object'}), 400
    old_name = (data.get('old_name') or '').strip()
    try:
        state, competitor = update_state(lambda s: s.rename_competitor(old_name, data.get('new_name')))
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    return jsonify({'success': True, 'competitor': competitor.to_dict(), 'ranking': _ranking_payload(state)})


@app.route('/api/ranking/remove', methods=['POST'])
@admin_required
def api_ranking_remove():
    """Remove a competitor from the ranking."""
    data = _json_body()
    if data is None:
        return jsonify({'success': False, 'error': 'Request body must be a JSON object'}), 400
    name = (data.get('name') or '').strip()
    state, _ = update_state(lambda s: s.remove_competitor(name))
    return jsonify({'success': True, 'ranking': _ranking_payload(state)})


@app.route('/api/ranking/reorder', methods=['POST'])
@admin_required
def api_ranking_reorder():
    """Move a competitor to another ranking position (drag and drop)."""
    data = _json_body()
    if data is None:
        return jsonify({'success': False, 'error': 'Request body must be a JSON object'}), 400
    try:
        from_index = int(data.get('from_index'))
        to_index = int(data.get('to_index'))
    except (TypeError, ValueError):
        return jsonify({'success': False, 'error': 'from_index and to_index must be integers'}), 400
    try:
        state, _ = update_state(lambda s: s.move_competitor(from_index, to_index))
    except IndexError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    return jsonify({'success': True, 'ranking': _ranking_payload(state)})


@app.route('/api/seeding/apply', methods=['POST'])
@admin_required
def api_apply_seeding():
    """Split the ranking into groups, regenerate schedules and clear all results."""
    data = _json_body()
    if data is None:
        return jsonify({'success': False, 'error': 'Request body must be a JSON object'}), 400
    algorithm = data.get('algorithm') or load_settings().get('seeding_algorithm')
    state, generation = update_state(lambda s: s.apply_seeding(algorithm))
    app.logger.info(f'Applied {state.algorithm} seeding, generation {generation}: '
                    f'{len(state.groups["A"])} in A, {len(state.groups["B"])} in B')
    return jsonify({
        'success': True,
        'generation': generation,
        'groups': {group: [c.to_dict() for c in state.groups[group]] for group in GROUPS},
        'schedule': _schedule_payload(state),
    })


@app.route('/api/schedule', methods=['GET'])
def api_schedule():
    """Schedules for both groups with current scores."""
    return jsonify(_schedule_payload(load_state()))


@app.route('/api/results/score', methods=['POST'])
@admin_required
def api_update_score():
    """Set one score field ('ag' or 'bg') of a group match."""
    data = _json_body()
    if data is None:
        return jsonify({'success': False, 'error': 'Request body must be a JSON object'}), 400
    group = data.get('group')
    key = data.get('match_id')
    field = data.get('field')
    if not group or not key or not field:
        return jsonify({'success': False, 'error': 'Missing group, match_id or field'}), 400
    generation = data.get('generation')
    if generation is not None:
        try:
            generation = int(generation)
        except (TypeError, ValueError):
            return jsonify({'success': False, 'error': 'generation must be an integer'}), 400
    try:
        state, result = update_state(
            lambda s: s.update_score(group, key, field, data.get('value', ''), generation))
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    return jsonify({
        'success': True,
        'match_id': key,
        'result': result.to_dict(),
        'standings': [row.to_dict() for row in state.standings(group)],
        'bracket': _bracket_payload(state),
    })


@app.route('/api/clear-result', methods=['POST'])
@admin_required
def api_clear_result():
    """Clear the scores of a single match."""
    data = _json_body()
    if data is None:
        return jsonify({'success': False, 'error': 'Request body must be a JSON object'}), 400
    group = data.get('group')
    key = data.get('match_id')
    if not group or not key:
        return jsonify({'success': False, 'error': 'Missing group or match_id'}), 400
    generation = data.get('generation')
    if generation is not None:
        try:
            generation = int(generation)
        except (TypeError, ValueError):
            return jsonify({'success': False, 'error': 'generation must be an integer'}), 400
    state, result = update_state(lambda s: s.clear_match(group, key, generation))
    return jsonify({
        'success': True,
        'result': result.to_dict(),
        'standings': [row.to_dict() for row in state.standings(group)],
    })


@app.route('/api/reset', methods=['POST'])
@admin_required
def api_reset_results():
    """Clear every match result, keeping groups and schedules."""
    update_state(lambda s: s.reset_results())
    app.logger.info('All results reset')
    return jsonify({'success': True})


@app.route('/api/standings', methods=['GET'])
def api_standings():
    """Standings tables for both groups."""
    return jsonify(_standings_payload(load_state()))


@app.route('/api/bracket', methods=['GET'])
def api_bracket():
    """Projected quarterfinal crossover bracket."""
    return jsonify(_bracket_payload(load_state()))


@app.route('/api/export/results')
def api_export_results():
    """Export match results as a downloadable JSON file."""
    payload = load_state().results_payload()
    content = json.dumps(payload, indent=2, ensure_ascii=False)
    return Response(
        content,
        mimetype='application/json',
        headers={'Content-Disposition': 'attachment; filename=tournament_results.json'},
    )


@app.route('/api/import/results', methods=['POST'])
@admin_required
def api_import_results():
    """Import match results from an uploaded JSON file or a JSON body.

    The payload must contain both group keys; otherwise the current
    results are kept.
    """
    file = request.files.get('file')
    if file is not None:
        if file.filename == '':
            return jsonify({'success': False, 'error': 'No file selected.'}), 400
        raw = file.read(MAX_UPLOAD_SIZE + 1)
        if len(raw) > MAX_UPLOAD_SIZE:
            return jsonify({'success': False, 'error': 'File is too large.'}), 400
        try:
            payload = json.loads(raw.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            app.logger.warning(f'Rejected results import: {e}')
            return jsonify({'success': False, 'error': 'File cannot be read.'}), 400
    else:
        payload = request.get_json(silent=True)
        if payload is None:
            return jsonify({'success': False, 'error': 'No results provided.'}), 400

    try:
        state, _ = update_state(lambda s: s.import_results(payload))
    except InvalidImport as e:
        app.logger.warning(f'Rejected results import: {e}')
        return jsonify({'success': False, 'error': 'File does not have the required format.'}), 400
    app.logger.info('Imported results for ' + ', '.join(
        f'{group}: {len(state.results[group])}' for group in GROUPS))
    return jsonify({'success': True, 'standings': _standings_payload(state)})


@app.route('/api/export/schedule-csv')
def api_export_schedule_csv():
    """Export both group schedules with scores as a downloadable CSV file."""
    state = load_state()
    if not any(state.schedule(group) for group in GROUPS):
        return jsonify({'success': False, 'error': 'No schedule found'}), 404

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(['Group', 'Round', 'Player 1', 'Player 2', 'Score 1', 'Score 2', 'Match ID'])

    for group in GROUPS:
        for rnd in _group_schedule_payload(state, group):
            for match in rnd['matches']:
                writer.writerow([
                    group,
                    rnd['round'],
                    match['a'],
                    match['b'],
                    match['ag'],
                    match['bg'],
                    match['match_id'],
                ])

    csv_content = output.getvalue()
    output.close()

    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    return Response(
        csv_content,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename=schedule_{timestamp}.csv'},
    )


@app.route('/api/test-data', methods=['POST'])
@admin_required
def api_load_test_data():
    """Load the sample ranking and seed it."""
    algorithm = load_settings().get('seeding_algorithm', DEFAULT_ALGORITHM)

    def load_sample(state):
        state.set_ranking(SAMPLE_COMPETITORS)
        return state.apply_seeding(algorithm)

    state, generation = update_state(load_sample)
    return jsonify({'success': True, 'generation': generation, 'ranking': _ranking_payload(state)})


if __name__ == '__main__':
    app.run(debug=os.environ.get('FLASK_DEBUG') == '1')
