from flask import Blueprint, request, jsonify, current_app
from registry import get_records, get_store, socketio
from registry.codec import encode_record
from registry.errors import RegistryError, StoreError, ValidationError

users = Blueprint('users', __name__)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@users.errorhandler(RegistryError)
def handle_registry_error(exc):
    if isinstance(exc, StoreError):
        current_app.logger.error(f"[store] {request.method} {request.path}: {exc.message}")
    return jsonify(exc.to_dict()), exc.status_code


@users.route('/')
def index():
    return jsonify({'message': 'Welcome to the player registry!'})


@users.route('/health')
def health():
    if get_store().ping():
        return jsonify({'status': 'ok'})
    return jsonify({'status': 'unavailable'}), 503


@users.route('/createUser', methods=['POST'])
def create_user():
    data = _json_body()
    result = get_records().create_if_absent(data.get('username'))
    message = 'User created successfully' if result.created else 'User already exists'
    return jsonify({'message': message, 'user': result.record.to_dict()})


@users.route('/getUser', methods=['GET'])
@users.route('/getUser/<string:username>', methods=['GET'])
def get_user(username=None):
    if username is None:
        username = request.args.get('username')
    record = get_records().fetch(username)
    return jsonify({'message': 'User details', 'user': record.to_dict()})


@users.route('/updateUser', methods=['PUT'])
def update_user():
    data = _json_body()
    record = get_records().update(data.get('username'), data.get('matchesWon'))
    # Tell leaderboard clients to re-fetch
    socketio.emit('sendUsers', namespace='/')
    return jsonify({'message': 'User updated successfully', 'user': record.to_dict()})


@users.route('/fetchUsers', methods=['GET'])
def fetch_users():
    limit = request.args.get('limit')
    if limit is not None:
        try:
            limit = int(limit)
        except ValueError:
            raise ValidationError('limit must be a positive integer')
    result = get_records().list_all(limit=limit, after=request.args.get('after'))
    body = {
        'message': 'List of all users',
        'data': [
            {'username': r.username, 'userData': encode_record(r)}
            for r in result.records
        ],
        'skipped': result.skipped,
    }
    if limit is not None:
        body['next_cursor'] = result.next_cursor
        body['has_more'] = result.has_more
    return jsonify(body)
