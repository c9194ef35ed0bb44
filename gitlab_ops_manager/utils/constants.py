"""Shared constants used across the application."""

import re

# GitLab API Constants
# --------------------

DEFAULT_GITLAB_API_URL = "https://gitlab.com/api/v4"
"""Default base URL of the GitLab REST API."""

DEFAULT_PER_PAGE = 100
"""Page size requested from paginated GitLab list endpoints."""

# System Note Patterns
# --------------------

TITLE_CHANGED_NOTE_PREFIX = "changed title from"
"""Prefix of the system note GitLab writes when a merge request title is edited."""

DESCRIPTION_CHANGED_NOTE = "changed the description"
"""Exact body of the system note GitLab writes when a description is edited."""

COMMITS_ADDED_NOTE_PATTERN = re.compile(r"added \d+ commit")
"""Pattern matching the system note GitLab writes when commits are pushed."""

REVIEWER_NOTE_FRAGMENTS = ("requested review from", "removed review request for")
"""Fragments of system notes GitLab writes when reviewers are changed."""

# Merge Request Description Constants
# -----------------------------------

DEFAULT_MERGE_REQUEST_DESCRIPTION_TEMPLATE = """{{ description }}
{%- if keep_name %}

This change was generated by
[gitlab-housekeeper](https://gitlab.com/gitlab-org/gitlab/-/tree/master/gems/gitlab-housekeeper)
using the {{ keep_name }} keep.

To provide feedback on your experience with `gitlab-housekeeper` please create an issue with the
label ~"GitLab Housekeeper" and consider pinging the author of this keep.
{%- endif %}"""
"""Jinja2 template used to render the merge request description of a change."""
