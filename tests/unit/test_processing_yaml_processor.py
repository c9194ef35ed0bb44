"""Unit tests for the ChangeYAMLProcessor class."""

from pathlib import Path

import pytest
from _pytest.logging import LogCaptureFixture

from gitlab_ops_manager.processing.exceptions import YAMLProcessingError
from gitlab_ops_manager.processing.yaml_processor import ChangeYAMLProcessor
from gitlab_ops_manager.schemas.change import Change

VALID_YAML = """
title: Remove the ci_new_runner feature flag
description: |
  The flag has been enabled by default for a month.
labels: ["maintenance::removal", "feature flag"]
reviewers: [alice]
keep_name: Keeps::DeleteOldFeatureFlags
"""

YAML_EXTRA_FIELDS = """
title: Extra Field Change
description: Has extra
foo: bar
"""

YAML_FIELD_MAPPING = """
summary: Mapped Title
description: Field mapping works
"""

YAML_VALIDATION_ERROR = """
title: 12345
description: Title should be a string
"""

YAML_NOT_A_MAPPING = """
- title: In a list
"""


def write(tmp_path: Path, content: str) -> Path:
    """Write YAML content to a temporary file."""
    path = tmp_path / "change.yaml"
    path.write_text(content, encoding="utf-8")
    return path


def test_load_valid_change(tmp_path: Path) -> None:
    """Test loading a valid change."""
    change = ChangeYAMLProcessor().load_change(write(tmp_path, VALID_YAML))
    assert change == Change(
        title="Remove the ci_new_runner feature flag",
        description="The flag has been enabled by default for a month.\n",
        labels=("maintenance::removal", "feature flag"),
        reviewers=("alice",),
        keep_name="Keeps::DeleteOldFeatureFlags",
    )


def test_extra_fields_are_ignored(tmp_path: Path, caplog: LogCaptureFixture) -> None:
    """Test that extra fields are dropped with a warning."""
    change = ChangeYAMLProcessor().load_change(write(tmp_path, YAML_EXTRA_FIELDS))
    assert change is not None
    assert change.title == "Extra Field Change"
    assert "Extra fields in change will be ignored" in caplog.text


def test_field_mapping(tmp_path: Path) -> None:
    """Test that YAML field names can be mapped onto schema fields."""
    change = ChangeYAMLProcessor(field_mapping={"summary": "title"}).load_change(write(tmp_path, YAML_FIELD_MAPPING))
    assert change is not None
    assert change.title == "Mapped Title"


def test_validation_error_raises(tmp_path: Path) -> None:
    """Test that an invalid change raises YAMLProcessingError with the validation errors."""
    with pytest.raises(YAMLProcessingError) as exc_info:
        ChangeYAMLProcessor().load_change(write(tmp_path, YAML_VALIDATION_ERROR))
    assert len(exc_info.value.errors) == 1
    assert str(exc_info.value) == "1 error(s) encountered while loading change YAML."


def test_validation_error_without_raising(tmp_path: Path) -> None:
    """Test that an invalid change returns None when raising is disabled."""
    assert ChangeYAMLProcessor(raise_on_error=False).load_change(write(tmp_path, YAML_VALIDATION_ERROR)) is None


def test_not_a_mapping(tmp_path: Path) -> None:
    """Test that a YAML document that is not a mapping is rejected."""
    with pytest.raises(YAMLProcessingError) as exc_info:
        ChangeYAMLProcessor().load_change(write(tmp_path, YAML_NOT_A_MAPPING))
    assert exc_info.value.errors[0]["error"] == "YAML file is not a dictionary"


def test_malformed_yaml(tmp_path: Path, caplog: LogCaptureFixture) -> None:
    """Test that malformed YAML is reported as a processing error."""
    with pytest.raises(YAMLProcessingError):
        ChangeYAMLProcessor().load_change(write(tmp_path, "title: [unterminated"))
    assert "Failed to parse YAML file" in caplog.text


def test_missing_file(tmp_path: Path) -> None:
    """Test that a missing file is reported as a processing error."""
    with pytest.raises(YAMLProcessingError):
        ChangeYAMLProcessor().load_change(tmp_path / "missing.yaml")
