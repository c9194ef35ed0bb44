"""Contains models describing reconciliation decisions."""

from enum import Enum


class ChangeKind(str, Enum):
    """A facet of a merge request that someone other than the automation has changed."""

    TITLE = "title"
    DESCRIPTION = "description"
    CODE = "code"
    REVIEWERS = "reviewers"
    LABELS = "labels"


class ReconcileAction(str, Enum):
    """What reconciliation did with a merge request."""

    CREATE = "create"
    UPDATE = "update"
    NOOP = "noop"
