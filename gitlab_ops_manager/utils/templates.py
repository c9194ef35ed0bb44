"""Contains utilities for rendering merge request descriptions with Jinja2."""

from functools import lru_cache
from pathlib import Path

import jinja2
import structlog
from pydantic import BaseModel

from gitlab_ops_manager.utils.constants import DEFAULT_MERGE_REQUEST_DESCRIPTION_TEMPLATE

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

# Undefined template variables raise instead of rendering empty.
_environment = jinja2.Environment(undefined=jinja2.StrictUndefined)


def construct_jinja2_template_from_string(template_string: str) -> jinja2.Template:
    """Construct a Jinja2 template from a string."""
    return _environment.from_string(template_string)


def construct_jinja2_template_from_file(template_path: Path | str) -> jinja2.Template:
    """Construct a Jinja2 template from a file."""
    try:
        template_content = Path(template_path).read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.error("Jinja2 template not found", template_path=str(template_path))
        raise
    return construct_jinja2_template_from_string(template_content)


@lru_cache(maxsize=1)
def default_merge_request_description_template() -> jinja2.Template:
    """The template used for merge request descriptions unless another is given."""
    return construct_jinja2_template_from_string(DEFAULT_MERGE_REQUEST_DESCRIPTION_TEMPLATE)


def render_template_with_model(model: BaseModel, template: jinja2.Template) -> str:
    """Render a Jinja2 template against the fields of a Pydantic model."""
    try:
        return template.render(model.model_dump())
    except jinja2.UndefinedError as exc:
        logger.error("Failed to render template with model", model_type=type(model).__name__, error=str(exc))
        raise
