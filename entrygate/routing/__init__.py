"""Reviewer routing and review-assignment reporting."""

from .report import REPORT_MARKER, aggregate_reviewers, group_assignments, render_report
from .reviewers import ReviewerGroup, ReviewerRouter, ReviewerTable

__all__ = [
    "REPORT_MARKER",
    "ReviewerGroup",
    "ReviewerRouter",
    "ReviewerTable",
    "aggregate_reviewers",
    "group_assignments",
    "render_report",
]
