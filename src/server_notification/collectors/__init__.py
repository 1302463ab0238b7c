"""Collectors that read build data from external stores for the payload."""

from server_notification.collectors.artifacts import (
    ArtifactOutcome,
    ArtifactReportCollector,
    ArtifactStatus,
)
from server_notification.collectors.logs import LOG_ENTRY_TYPES, collect_logs
from server_notification.collectors.secret import (
    NO_GLOBAL_VARIABLES,
    SECRET_NOT_DEFINED,
    SECRET_VARIABLE_NAME,
    resolve_secret,
)
from server_notification.collectors.tasks import collect_tasks
from server_notification.collectors.tests import (
    JobTestResults,
    collect_job_tests,
    collect_test_results,
    collect_test_summary,
    truncate_error,
)

__all__ = [
    "ArtifactOutcome",
    "ArtifactReportCollector",
    "ArtifactStatus",
    "JobTestResults",
    "LOG_ENTRY_TYPES",
    "NO_GLOBAL_VARIABLES",
    "SECRET_NOT_DEFINED",
    "SECRET_VARIABLE_NAME",
    "collect_job_tests",
    "collect_logs",
    "collect_tasks",
    "collect_test_results",
    "collect_test_summary",
    "resolve_secret",
    "truncate_error",
]
