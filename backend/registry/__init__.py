from flask import Flask, current_app, jsonify
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.exceptions import HTTPException
import logging
from config import Config
from registry.services import RecordService
from registry.store import build_store

socketio = SocketIO(async_mode=None)

STORE_EXTENSION = 'registry.store'
RECORDS_EXTENSION = 'registry.records'


def create_app(config_class=Config, store=None):
    """Build the Flask app.

    ``store`` overrides the backend selected by ``STORE_BACKEND``. The store
    is created once here and shared by every request; release it with
    ``close_store`` on shutdown.
    """
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    logging.basicConfig(
        level=flask_app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    )

    origins = flask_app.config.get('CORS_ORIGINS') or ['*']
    if '*' in origins:
        origins = '*'
    CORS(flask_app, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    if store is None:
        # Raises ConfigError when the store cannot be configured
        store = build_store(flask_app.config)
    flask_app.extensions[STORE_EXTENSION] = store
    flask_app.extensions[RECORDS_EXTENSION] = RecordService(
        store, key_prefix=flask_app.config.get('RECORD_KEY_PREFIX', '')
    )

    from registry.routes import users
    flask_app.register_blueprint(users)

    from registry.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @flask_app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({'error': exc.description}), exc.code

    flask_app.logger.info(f"Registry ready (backend={type(store).__name__})")
    return flask_app


def get_records() -> RecordService:
    return current_app.extensions[RECORDS_EXTENSION]


def get_store():
    return current_app.extensions[STORE_EXTENSION]


def close_store(flask_app) -> None:
    store = flask_app.extensions.pop(STORE_EXTENSION, None)
    flask_app.extensions.pop(RECORDS_EXTENSION, None)
    if store is not None:
        store.close()
