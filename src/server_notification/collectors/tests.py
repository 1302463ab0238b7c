"""Test summary and per-test detail collection.

Build-level counters come straight from the results summary. Per-test
details are only available from the results cache, filled when each job
finished; a cache miss drops the job's test fields but never the payload.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from server_notification.build_log import BuildAuditLog
from server_notification.collectors.tasks import collect_tasks
from server_notification.config import DEFAULT_MAX_ERROR_LENGTH
from server_notification.payload.models import TaskResultDetails, TestResultDetails, TestSummary
from server_notification.results import PlanResultKey, TestResults, TestResultsSummary
from server_notification.results_cache import ResultsCache

logger = logging.getLogger(__name__)


@dataclass
class JobTestResults:
    """Per-test details and task results of one job."""

    successful_tests: list[TestResultDetails]
    skipped_tests: list[TestResultDetails]
    failed_tests: list[TestResultDetails]
    tasks: list[TaskResultDetails]


def truncate_error(message: str | None, max_length: int = DEFAULT_MAX_ERROR_LENGTH) -> str | None:
    """Keep at most the first ``max_length`` characters of a failure message."""
    if message is not None and len(message) > max_length:
        return message[:max_length]
    return message


def collect_test_summary(summary: TestResultsSummary) -> TestSummary:
    """Map the build server's test counters onto the payload summary."""
    return TestSummary(
        description=summary.test_summary_description,
        total=summary.total_test_case_count,
        failed=summary.failed_test_case_count,
        existing_failed=summary.existing_failed_test_count,
        fixed=summary.fixed_test_case_count,
        new_failed=summary.new_failed_test_case_count,
        ignored=summary.ignored_test_case_count,
        quarantined=summary.quarantined_test_case_count,
        skipped=summary.skipped_test_case_count,
        successful=summary.successful_test_case_count,
        duration=summary.total_test_duration,
    )


def collect_test_results(
    tests: Iterable[TestResults],
    add_errors: bool,
    max_error_length: int = DEFAULT_MAX_ERROR_LENGTH,
) -> list[TestResultDetails]:
    """Convert test results into payload entries.

    Args:
        tests: Test results of one category.
        add_errors: Include (truncated) failure messages. Only set for
            failed tests.
        max_error_length: Characters kept per failure message.
    """
    details = []
    for test in tests:
        errors = None
        if add_errors:
            errors = [truncate_error(error.content, max_error_length) for error in test.errors]
        details.append(
            TestResultDetails(
                name=test.actual_method_name,
                method_name=test.method_name,
                class_name=test.class_name,
                errors=errors,
            )
        )
    return details


def collect_job_tests(
    cache: ResultsCache,
    plan_result_key: PlanResultKey,
    job_id: int,
    audit_log: BuildAuditLog,
    max_error_length: int = DEFAULT_MAX_ERROR_LENGTH,
) -> JobTestResults | None:
    """Take a job's cached test and task results out of the cache.

    Each job is reported once, in its chain's notification, so the entry
    is evicted as it is read.

    Args:
        cache: Results captured when the jobs finished.
        plan_result_key: Key of the job result.
        job_id: Job id, for diagnostics.
        audit_log: Build log for diagnostics.
        max_error_length: Characters kept per failure message.

    Returns:
        The job's results, or None on a cache miss.
    """
    audit_log.info(f"Loading cached test results for job {job_id}")
    container = cache.remove(plan_result_key)
    if container is None:
        audit_log.error("Could not load cached test results!")
        logger.warning(f"No cached test results for {plan_result_key} (job {job_id})")
        return None

    audit_log.info("Tests results found")
    return JobTestResults(
        successful_tests=collect_test_results(container.successful_tests, False),
        skipped_tests=collect_test_results(container.skipped_tests, False),
        failed_tests=collect_test_results(container.failed_tests, True, max_error_length),
        tasks=collect_tasks(container.task_results),
    )
