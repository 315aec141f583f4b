"""Settings routes."""

import logging
from flask import Blueprint, jsonify, request

from error_handling import ConfigurationError
from web import config_manager

settings_bp = Blueprint('settings', __name__)


@settings_bp.route('/settings')
def get_settings():
    """Get current settings as JSON."""
    try:
        settings = config_manager().load_settings()
    except ConfigurationError as e:
        return jsonify({'error': e.message}), 500
    return jsonify(settings)


@settings_bp.route('/settings', methods=['PUT'])
def update_settings():
    """Update settings."""
    config = config_manager()
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400
    defaults = config.get_default_settings()

    try:
        settings = {
            'server_url': data.get('server_url', defaults['server_url']),
            'username': data.get('username', defaults['username']),
            'client_name': data.get('client_name', defaults['client_name']),
            'device_name': data.get('device_name', defaults['device_name']),
            'device_id': data.get('device_id', defaults['device_id']),
            'discovery_timeout': int(data.get('discovery_timeout', defaults['discovery_timeout'])),
            'enable_debug_logging': bool(data.get('enable_debug_logging', defaults['enable_debug_logging'])),
            'web_host': data.get('web_host', defaults['web_host']),
            'web_port': int(data.get('web_port', defaults['web_port'])),
        }
        config.validate_settings(settings)
    except (TypeError, ValueError) as e:
        return jsonify({'error': f"Invalid setting: {e}"}), 400
    except ConfigurationError as e:
        return jsonify({'error': e.message}), 400

    try:
        config.save_settings(settings)

        # Apply debug logging change
        if settings['enable_debug_logging']:
            logging.getLogger().setLevel(logging.DEBUG)
        else:
            logging.getLogger().setLevel(logging.INFO)

        return jsonify({'status': 'ok'})
    except Exception as e:
        logging.error(f"Error saving settings: {e}")
        return jsonify({'error': str(e)}), 500


@settings_bp.route('/settings/reset', methods=['POST'])
def reset_settings():
    """Reset settings to defaults."""
    config = config_manager()
    defaults = config.get_default_settings()
    try:
        config.save_settings(defaults)
        return jsonify({'status': 'ok'})
    except Exception as e:
        return jsonify({'error': str(e)}), 500
