"""Handles reading and validating change definitions from YAML files.

This module provides the ChangeYAMLProcessor class, which loads a change from a
YAML file and validates it against the Change schema. It supports field
renaming, logging extra fields, and collecting validation errors. All logging
is performed using structlog.
"""

from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError
from ruamel.yaml import YAML
from structlog.stdlib import BoundLogger

from gitlab_ops_manager.processing.exceptions import YAMLProcessingError
from gitlab_ops_manager.schemas.change import Change

logger: BoundLogger = structlog.get_logger(__name__)  # type: ignore

yaml = YAML(typ="safe")


class ChangeYAMLProcessor:
    """Loads and validates a change from a YAML file.

    The YAML file is expected to be a mapping of change fields, for example::

        title: Remove unused feature flag
        description: The flag has been enabled everywhere for a month.
        labels: [maintenance::refactor]
        reviewers: [alice]
    """

    def __init__(self, field_mapping: dict[str, str] | None = None, raise_on_error: bool = True) -> None:
        """Initialize ChangeYAMLProcessor with an optional field mapping.

        Args:
            field_mapping (dict[str, str] | None): Optional mapping from YAML field names to schema field names.
            raise_on_error (bool): Whether to raise a YAMLProcessingError on validation errors.
        """
        self.field_mapping = field_mapping
        self.raise_on_error = raise_on_error

    def load_change(self, yaml_path: str | Path) -> Change | None:
        """Load and validate a change from a YAML file.

        Returns None when the file is invalid and raise_on_error is disabled.
        """
        path = str(yaml_path)
        errors: list[dict[str, Any]] = []
        change: Change | None = None
        data = self._load_yaml_file(path, errors)
        if data is not None:
            mapped = self._apply_field_mapping(data, self.field_mapping)
            extra_fields = set(mapped.keys()) - set(Change.model_fields.keys())
            if extra_fields:
                logger.warning("Extra fields in change will be ignored", file=path, extra_fields=sorted(extra_fields))
            filtered = {k: v for k, v in mapped.items() if k in Change.model_fields}
            try:
                change = Change(**filtered)
            except ValidationError as ve:
                logger.error("Validation error for change", file=path, error=ve.errors())
                errors.append({"file": path, "error": ve.errors()})
        if errors:
            logger.error("One or more errors occurred during YAML processing", errors=errors)
            if self.raise_on_error:
                raise YAMLProcessingError(errors)
        return change

    def _load_yaml_file(self, path: str, errors: list[dict[str, Any]]) -> dict[str, Any] | None:
        try:
            with open(path, encoding="utf-8") as f:
                data: dict[str, Any] = yaml.load(f)  # type: ignore
            # If loaded data is not a dictionary, throw an error.
            if not isinstance(data, dict):
                logger.error("YAML file is not a dictionary", path=path)
                errors.append({"file": path, "error": "YAML file is not a dictionary"})
                return None
            return data
        except Exception as e:
            logger.error("Failed to parse YAML file", path=path, error=str(e))
            errors.append({"file": path, "error": str(e)})
            return None

    def _apply_field_mapping(self, change_dict: dict[str, Any], field_mapping: dict[str, str] | None) -> dict[str, Any]:
        """Apply a field mapping (renaming) to a dictionary representing a change.

        Args:
            change_dict (dict[str, Any]): The original change dictionary from YAML.
            field_mapping (dict[str, str] | None): Optional mapping from YAML field names to schema field names.

        Returns:
            dict[str, Any]: The change dictionary with fields renamed according to the mapping.
        """
        if not field_mapping:
            return change_dict
        return {field_mapping.get(k, k): v for k, v in change_dict.items()}
