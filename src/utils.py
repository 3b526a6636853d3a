# utils.py
#
# Description:
# This module contains utility functions used across the application,
# such as setting up logging, loading and saving JSON data, formatting
# durations and generating recipe ids.

import json
import logging
import os
import re
import uuid
from typing import Any, Dict

import config


class NoiseFilter(logging.Filter):
    """A filter to suppress common, noisy log messages from libraries."""

    def __init__(self, patterns_to_suppress):
        super().__init__()
        self.patterns = patterns_to_suppress

    def filter(self, record):
        message = record.getMessage()
        return not any(p in message for p in self.patterns)


def setup_logging(log_file: str | None = None):
    """Configures the logging for the application."""
    log_level = os.environ.get('LOG_LEVEL', 'INFO').upper()
    numeric_level = getattr(logging, log_level, logging.INFO)

    log_file = log_file or config.LOG_FILE_PATH
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(), logging.FileHandler(log_file, mode='a', encoding='utf-8')],
        force=True
    )

    patterns_to_silence = [
        "HTTP Request:", "Websocket", '"client":', '"event":',
        'lmstudio-greeting', "127.0.0.1:", "ws://", "Switching Protocols",
        "AFC is enabled", "AFC remote call", "Both GOOGLE_API_KEY and GEMINI_API_KEY are set"
    ]
    noise_filter = NoiseFilter(patterns_to_silence)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        handler.addFilter(noise_filter)

    logging.getLogger('google.genai').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)


def load_json(path: str) -> Dict[str, Any]:
    """Loads a JSON object from a file. Missing or broken files yield an empty dict."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        return {}
    if not isinstance(data, dict):
        logging.warning(f"Ignoring {path}: expected a JSON object, got {type(data).__name__}.")
        return {}
    return data


def save_json(data: Dict[str, Any], path: str) -> bool:
    """Saves data to a JSON file, creating the parent directory. Returns False on failure."""
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=4, ensure_ascii=False)
        return True
    except OSError as e:
        logging.error(f"Failed to save data to {path}: {e}")
        return False


_ISO_DURATION = re.compile(r"^PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?$")


def format_duration(duration: str | None) -> str:
    """
    Formats an ISO 8601 time duration for display.

    Examples:
        >>> format_duration("PT2H30M")
        '2h 30m'
        >>> format_duration("PT45S")
        '45s'
        >>> format_duration("about an hour")
        'about an hour'
    """
    if not duration:
        return ""

    match = _ISO_DURATION.match(duration.strip())
    if not match:
        return duration

    hours, minutes, seconds = (int(group) if group else 0 for group in match.groups())
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds and not hours and not minutes:
        parts.append(f"{seconds}s")
    return " ".join(parts) if parts else "0m"


def generate_id() -> str:
    return uuid.uuid4().hex
