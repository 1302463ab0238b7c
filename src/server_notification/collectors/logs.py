"""Build log collection for jobs that ran no tests.

A job without any test results most likely failed to build, so its log is
the only useful diagnostic for the receiver.
"""

from __future__ import annotations

import logging

from server_notification.build_log import BuildAuditLog
from server_notification.config import DEFAULT_MAX_LOG_LINES
from server_notification.payload.models import LogLine
from server_notification.results import BuildLogFileAccessorFactory, LogEntryType, PlanResultKey

logger = logging.getLogger(__name__)

# Only lines produced by the build; the server's own lines are noise here.
LOG_ENTRY_TYPES: tuple[LogEntryType, ...] = (LogEntryType.BUILD_OUTPUT, LogEntryType.ERROR)


def collect_logs(
    accessor_factory: BuildLogFileAccessorFactory | None,
    plan_result_key: PlanResultKey,
    audit_log: BuildAuditLog,
    max_lines: int = DEFAULT_MAX_LOG_LINES,
) -> list[LogLine]:
    """Read the trailing build output and error lines of a job.

    Args:
        accessor_factory: Creates log accessors; None disables collection.
        plan_result_key: Key of the job result.
        audit_log: Build log for diagnostics.
        max_lines: Maximum number of lines returned.

    Returns:
        Log lines in log order; empty if the log cannot be read.
    """
    if accessor_factory is None or max_lines <= 0:
        return []

    try:
        accessor = accessor_factory.create_build_log_file_accessor(plan_result_key)
        entries = accessor.get_last_n_logs_of_type(max_lines, LOG_ENTRY_TYPES)
    except OSError as e:
        audit_log.error(f"Error while loading build log: {e}")
        logger.error(f"Error while loading build log for {plan_result_key}: {e}", exc_info=True)
        return []

    audit_log.info(f"Found: {len(entries)} LogEntries")
    return [LogLine(text=entry.log, timestamp=entry.date) for entry in entries[-max_lines:]]
