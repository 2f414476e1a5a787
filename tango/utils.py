"""
Utility functions for the vocabulary study engine
"""

import json
import logging
import time
from typing import Any

logger = logging.getLogger(__name__)


def extract_json_safely(json_str: str | None) -> dict[str, Any]:
    """Safely extract a JSON object from string"""
    if not json_str:
        return {}

    try:
        data = json.loads(json_str)
    except (json.JSONDecodeError, TypeError):
        logger.warning(f"Failed to parse JSON: {json_str[:80]}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Expected JSON object, got {type(data).__name__}")
        return {}
    return data


def format_json_safely(data: Any) -> str:
    """Safely format data as JSON string"""
    try:
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError):
        logger.warning(f"Failed to serialize to JSON: {data}")
        return "{}"


def safe_int(value: Any, default: int = 0) -> int:
    """Safely convert value to integer"""
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def calculate_success_rate(correct: int, total: int) -> int:
    """Calculate success rate as a rounded percentage"""
    if total <= 0:
        return 0
    return round(correct / total * 100)


class Timer:
    """Simple timer for measuring duration"""

    def __init__(self):
        self.start_time = None
        self.end_time = None

    def start(self):
        """Start the timer"""
        self.start_time = time.monotonic()
        self.end_time = None

    def stop(self):
        """Stop the timer"""
        if self.start_time is not None:
            self.end_time = time.monotonic()

    def elapsed(self) -> float | None:
        """Get elapsed time in seconds"""
        if self.start_time is None:
            return None

        end = self.end_time or time.monotonic()
        return end - self.start_time

    def get_elapsed_time(self) -> float:
        """Get elapsed time in seconds, 0.0 when never started"""
        return self.elapsed() or 0.0
