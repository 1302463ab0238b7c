"""Notification payload structures.

The assembler lives in ``server_notification.payload.assembler``; it is not
re-exported here because the collectors import these models.
"""

from server_notification.payload.models import (
    BuildDetails,
    CommitDetails,
    JobDetails,
    LogLine,
    NotificationPayload,
    PlanRef,
    TaskResultDetails,
    TestResultDetails,
    TestSummary,
    VcsChangeset,
    format_timestamp,
)

__all__ = [
    "BuildDetails",
    "CommitDetails",
    "JobDetails",
    "LogLine",
    "NotificationPayload",
    "PlanRef",
    "TaskResultDetails",
    "TestResultDetails",
    "TestSummary",
    "VcsChangeset",
    "format_timestamp",
]
