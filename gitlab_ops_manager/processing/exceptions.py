"""Exceptions raised while loading change definitions."""

from typing import Any


class YAMLProcessingError(Exception):
    """Raised when a change YAML file cannot be parsed or fails validation."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        """Initializes the exception with every error collected from the change file."""
        super().__init__(f"{len(errors)} error(s) encountered while loading change YAML.")
        self.errors = errors
