"""
Configuration manager for JellySubChanger.

This module provides centralized configuration management for loading and saving
application settings from config.ini file. Passwords are never written here.
"""

import configparser
import logging
import socket
import uuid
from typing import Dict, Any
from error_handling import ConfigurationError
from utils.constants import (
    CONFIG_FILE_PATH,
    CLIENT_NAME,
    DEVICE_NAME,
    DEFAULT_DISCOVERY_TIMEOUT,
    DEFAULT_WEB_HOST,
    DEFAULT_WEB_PORT,
)


def default_device_id():
    """Stable per-machine device id, so repeated logins show up as one device."""
    return uuid.uuid5(uuid.NAMESPACE_DNS, socket.gethostname()).hex


class ConfigManager:
    """Manages application configuration loading and saving."""

    # Default configuration values
    DEFAULTS = {
        'Server': {
            'url': '',
            'username': '',
        },
        'Client': {
            'client_name': CLIENT_NAME,
            'device_name': DEVICE_NAME,
            'device_id': '',
        },
        'Advanced': {
            'discovery_timeout': DEFAULT_DISCOVERY_TIMEOUT,
            'enable_debug_logging': False,
            'web_host': DEFAULT_WEB_HOST,
            'web_port': DEFAULT_WEB_PORT,
        }
    }

    def __init__(self, config_path: str = CONFIG_FILE_PATH):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file (defaults to CONFIG_FILE_PATH constant)
        """
        self.config_path = config_path
        self.config = configparser.ConfigParser()

    def _get_int(self, section: str, option: str) -> int:
        try:
            return self.config.getint(section, option, fallback=self.DEFAULTS[section][option])
        except ValueError as e:
            raise ConfigurationError(f"[{section}] {option} must be an integer", e)

    def _get_bool(self, section: str, option: str) -> bool:
        try:
            return self.config.getboolean(section, option, fallback=self.DEFAULTS[section][option])
        except ValueError as e:
            raise ConfigurationError(f"[{section}] {option} must be true or false", e)

    @staticmethod
    def validate_settings(settings: Dict[str, Any]) -> None:
        """Raise ConfigurationError for values that load_settings would reject."""
        if settings['discovery_timeout'] <= 0:
            raise ConfigurationError("[Advanced] discovery_timeout must be positive")
        if not 1 <= settings['web_port'] <= 65535:
            raise ConfigurationError("[Advanced] web_port must be between 1 and 65535")

    def load_settings(self) -> Dict[str, Any]:
        """
        Load application settings from config file.

        Returns:
            Dictionary containing all application settings with proper types
        """
        try:
            self.config.read(self.config_path)
        except configparser.Error as e:
            raise ConfigurationError(self.config_path, e)

        settings = {}

        # === Server Settings ===
        settings['server_url'] = self.config.get(
            'Server', 'url',
            fallback=self.DEFAULTS['Server']['url']
        )
        settings['username'] = self.config.get(
            'Server', 'username',
            fallback=self.DEFAULTS['Server']['username']
        )

        # === Client Settings ===
        settings['client_name'] = self.config.get(
            'Client', 'client_name',
            fallback=self.DEFAULTS['Client']['client_name']
        )
        settings['device_name'] = self.config.get(
            'Client', 'device_name',
            fallback=self.DEFAULTS['Client']['device_name']
        )
        settings['device_id'] = self.config.get(
            'Client', 'device_id',
            fallback=self.DEFAULTS['Client']['device_id']
        ) or default_device_id()

        # === Advanced Settings ===
        settings['discovery_timeout'] = self._get_int('Advanced', 'discovery_timeout')
        settings['enable_debug_logging'] = self._get_bool('Advanced', 'enable_debug_logging')
        settings['web_host'] = self.config.get(
            'Advanced', 'web_host',
            fallback=self.DEFAULTS['Advanced']['web_host']
        )
        settings['web_port'] = self._get_int('Advanced', 'web_port')
        self.validate_settings(settings)

        logging.debug(f"Loaded settings from {self.config_path}")
        return settings

    def save_settings(self, settings: Dict[str, Any]) -> None:
        """
        Save application settings to config file.

        Args:
            settings: Dictionary containing all application settings
        """
        # Read existing config to preserve other sections
        self.config.read(self.config_path)

        if not self.config.has_section('Server'):
            self.config.add_section('Server')
        self.config.set('Server', 'url', settings.get('server_url', ''))
        self.config.set('Server', 'username', settings.get('username', ''))

        if not self.config.has_section('Client'):
            self.config.add_section('Client')
        self.config.set('Client', 'client_name', settings.get('client_name', CLIENT_NAME))
        self.config.set('Client', 'device_name', settings.get('device_name', DEVICE_NAME))
        self.config.set('Client', 'device_id', settings.get('device_id', ''))

        if not self.config.has_section('Advanced'):
            self.config.add_section('Advanced')
        self.config.set('Advanced', 'discovery_timeout', str(settings['discovery_timeout']))
        self.config.set('Advanced', 'enable_debug_logging', str(settings['enable_debug_logging']))
        self.config.set('Advanced', 'web_host', settings['web_host'])
        self.config.set('Advanced', 'web_port', str(settings['web_port']))

        try:
            with open(self.config_path, 'w') as f:
                self.config.write(f)
            logging.debug(f"Saved settings to {self.config_path}")
        except (IOError, OSError) as e:
            logging.error(f"Failed to save settings to {self.config_path}: {e}")
            raise

    def get_default_settings(self) -> Dict[str, Any]:
        """
        Get default application settings.

        Returns:
            Dictionary containing default settings with proper types
        """
        settings = {
            'server_url': self.DEFAULTS['Server']['url'],
            'username': self.DEFAULTS['Server']['username'],
        }
        settings.update(self.DEFAULTS['Client'])
        settings.update(self.DEFAULTS['Advanced'])
        return settings
