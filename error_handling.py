#!/usr/bin/env python3
"""
Error Handling Framework for JellySubChanger
Provides custom exceptions, error messages, and crash reporting.

Nothing in here retries: failures from the Jellyfin server are surfaced to
the caller as they happened.
"""

import logging
import traceback
import time
import os
import sys
from datetime import datetime
from typing import Optional, Any, Dict
from pathlib import Path

import requests


# ==================== CUSTOM EXCEPTIONS ====================

class JellySubChangerError(Exception):
    """Base exception for all JellySubChanger errors."""

    def __init__(self, message: str, suggestion: Optional[str] = None, original_error: Optional[Exception] = None):
        self.message = message
        self.suggestion = suggestion
        self.original_error = original_error
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with suggestion."""
        msg = self.message
        if self.suggestion:
            msg += f"\n\nSuggestion: {self.suggestion}"
        if self.original_error:
            msg += f"\n\nOriginal error: {str(self.original_error)}"
        return msg


class NoServersFoundError(JellySubChangerError):
    """Raised when discovery finds no usable Jellyfin server for a URL."""

    def __init__(self, url: str = ""):
        self.url = url
        message = f"No available servers found{' at ' + url if url else ''}"
        suggestion = (
            "Check that:\n"
            "  1. Jellyfin is running\n"
            "  2. The server URL and port are correct\n"
            "  3. The server runs Jellyfin 10.8.0 or newer"
        )
        super().__init__(message, suggestion)


class NotAuthenticatedError(JellySubChangerError):
    """Raised when a user-scoped call is made on a client without credentials."""

    def __init__(self, operation: str = ""):
        message = f"Not authenticated{': cannot ' + operation if operation else ''}"
        suggestion = "Call authenticate(username, password) first and use the client it returns."
        super().__init__(message, suggestion)


class EpisodeDataError(JellySubChangerError):
    """Raised when an episode record lacks the fields the track updater needs."""

    def __init__(self, episode_id: str, field: str):
        self.episode_id = episode_id
        self.field = field
        message = f"Episode {episode_id} has no {field}"
        suggestion = "The item may not be a playable episode, or the library scan is incomplete."
        super().__init__(message, suggestion)


class ConfigurationError(JellySubChangerError):
    """Raised when configuration is invalid."""

    def __init__(self, setting: str = "", original_error: Optional[Exception] = None):
        message = f"Configuration error{': ' + setting if setting else ''}"
        suggestion = (
            "Try:\n"
            "  1. Check config.ini file syntax\n"
            "  2. Reset settings to defaults\n"
            "  3. Delete config.ini to regenerate"
        )
        super().__init__(message, suggestion, original_error)


# ==================== ERROR MESSAGE FORMATTER ====================

class ErrorMessageFormatter:
    """Formats user-friendly error messages with context and suggestions."""

    @staticmethod
    def format_jellyfin_error(error: Exception, context: str = "") -> str:
        """Format Jellyfin API and transport errors with helpful suggestions."""
        where = f": {context}" if context else ""

        if isinstance(error, JellySubChangerError):
            return f"{error.message}{where}.\n\nSuggestion: {error.suggestion}" if error.suggestion else f"{error.message}{where}."

        status = None
        if isinstance(error, requests.HTTPError) and error.response is not None:
            status = error.response.status_code

        if status in (401, 403):
            return (
                f"Authentication failed{where}.\n\n"
                "Suggestion: Check your Jellyfin username and password, and that the account is not disabled."
            )
        elif status == 404:
            return (
                f"Resource not found{where}.\n\n"
                "Suggestion: The item may have been deleted or moved. Check the ID and try again."
            )
        elif isinstance(error, requests.Timeout):
            return (
                f"Connection timeout{where}.\n\n"
                "Suggestion: Network is slow or server is unresponsive. Check your connection and try again."
            )
        elif isinstance(error, requests.ConnectionError):
            return (
                f"Network error{where}.\n\n"
                "Suggestion: Check your network connection and verify the server is online."
            )
        elif status is not None and status >= 500:
            return (
                f"Server error ({status}){where}.\n\n"
                "Suggestion: Check the Jellyfin server log for details."
            )
        else:
            return f"Error{where}: {error}"


# ==================== CRASH LOG SYSTEM ====================

class CrashReporter:
    """Handles crash reporting and error logging."""

    def __init__(self, crash_log_dir: str = "logs/crashes"):
        self.crash_log_dir = Path(crash_log_dir)

    def report_crash(self, error: Exception, context: Dict[str, Any] = None):
        """
        Report a crash with full traceback and context.

        Args:
            error: The exception that caused the crash
            context: Additional context information (e.g., current action)
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        crash_file = self.crash_log_dir / f"crash_{timestamp}.log"

        try:
            self.crash_log_dir.mkdir(parents=True, exist_ok=True)
            with open(crash_file, 'w', encoding='utf-8') as f:
                f.write("=" * 80 + "\n")
                f.write("JELLYSUBCHANGER CRASH REPORT\n")
                f.write(f"Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
                f.write("=" * 80 + "\n\n")

                f.write(f"Error Type: {type(error).__name__}\n")
                f.write(f"Error Message: {str(error)}\n\n")

                if context:
                    f.write("Context Information:\n")
                    for key, value in context.items():
                        f.write(f"  {key}: {value}\n")
                    f.write("\n")

                f.write("Full Traceback:\n")
                f.write("-" * 80 + "\n")
                f.write("".join(traceback.format_exception(type(error), error, error.__traceback__)))
                f.write("-" * 80 + "\n\n")

                f.write("System Information:\n")
                f.write(f"  Python Version: {sys.version}\n")
                f.write(f"  Platform: {sys.platform}\n")
                f.write(f"  Working Directory: {os.getcwd()}\n")

            logging.error(f"Crash report saved to: {crash_file}")
            return str(crash_file)

        except OSError as report_error:
            logging.error(f"Failed to write crash report: {report_error}")
            return None


# ==================== CONTEXT MANAGER FOR ERROR TRACKING ====================

class ErrorContext:
    """Context manager that logs an operation's outcome and never swallows errors."""

    def __init__(self, operation: str, crash_reporter: Optional[CrashReporter] = None):
        self.operation = operation
        self.crash_reporter = crash_reporter
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        logging.debug(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.time() - self.start_time

        if exc_type is None:
            logging.debug(f"Completed: {self.operation} ({duration:.2f}s)")
            return False

        logging.error(f"Failed: {self.operation} after {duration:.2f}s - {exc_val}")

        if self.crash_reporter:
            context = {
                "operation": self.operation,
                "duration_seconds": duration,
                "error_type": exc_type.__name__
            }
            self.crash_reporter.report_crash(exc_val, context)

        return False  # Re-raise exception
