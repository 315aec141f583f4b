"""
Flask application factory for the JellySubChanger JSON API.

The API is meant to be driven by an external front-end or script; it serves
JSON only.
"""

import logging
from flask import Flask, jsonify
import requests

from core.session_state import SessionState
from error_handling import (
    ConfigurationError,
    ErrorMessageFormatter,
    JellySubChangerError,
    NoServersFoundError,
    NotAuthenticatedError,
    EpisodeDataError,
)
from utils.config_manager import ConfigManager


def error_response(error, context=""):
    """Log an error and turn it into a JSON response with a fitting status."""
    logging.error(f"Error {context}: {error}")
    message = ErrorMessageFormatter.format_jellyfin_error(error, context)

    if isinstance(error, NoServersFoundError):
        status = 404
    elif isinstance(error, NotAuthenticatedError):
        status = 401
    elif isinstance(error, EpisodeDataError):
        status = 422
    elif isinstance(error, ConfigurationError):
        status = 500
    elif isinstance(error, requests.HTTPError) and error.response is not None:
        status = error.response.status_code
    elif isinstance(error, (requests.RequestException, JellySubChangerError)):
        status = 502
    else:
        status = 500

    return jsonify({'error': message}), status


def create_app(config_path=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)

    # App-level globals (single-user local app)
    app.state = SessionState()
    app.config['CONFIG_PATH'] = config_path

    from web.routes.auth import auth_bp
    from web.routes.library import library_bp
    from web.routes.tracks import tracks_bp
    from web.routes.settings import settings_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(library_bp)
    app.register_blueprint(tracks_bp)
    app.register_blueprint(settings_bp)

    @app.route('/')
    def index():
        client = app.state.client
        authenticated = client is not None and client.is_authenticated
        return jsonify({
            'status': 'authenticated' if authenticated else 'unauthenticated',
            'server': client.address if authenticated else None,
        })

    return app


def config_manager():
    """ConfigManager bound to the current app's config path."""
    from flask import current_app
    path = current_app.config.get('CONFIG_PATH')
    return ConfigManager(path) if path else ConfigManager()
