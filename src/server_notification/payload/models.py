"""Notification payload data structures.

The payload is the JSON document POSTed to the webhook. Each class holds
its data under Python attribute names and renders the wire format in
``to_dict``. Wire keys and their order are a stable contract with the
receiving system; do not rename them.

Example:
    >>> payload = NotificationPayload(
    ...     secret="s3cret",
    ...     notification_type="Build completed",
    ...     plan=PlanRef(key="PROJ-PLAN"),
    ... )
    >>> payload.to_dict()
    {'secret': 's3cret', 'notificationType': 'Build completed', 'plan': {'key': 'PROJ-PLAN'}}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


def format_timestamp(value: datetime) -> str:
    """Render a datetime as ISO 8601 with an explicit UTC offset.

    Naive datetimes are taken to be in the server's local time zone.
    """
    return value.astimezone().isoformat()


# =============================================================================
# Tests, Tasks and Logs
# =============================================================================


@dataclass
class TestResultDetails:
    """A single test case in the payload.

    Attributes:
        errors: Failure messages; None for tests that did not fail, in which
            case the key is left out.
    """

    __test__ = False

    name: str
    method_name: str
    class_name: str
    errors: list[str | None] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "methodName": self.method_name,
            "className": self.class_name,
        }
        if self.errors is not None:
            data["errors"] = list(self.errors)
        return data


@dataclass
class TaskResultDetails:
    """A task execution in the payload."""

    description: str
    plugin_key: str
    is_enabled: bool
    is_final: bool
    state: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "pluginKey": self.plugin_key,
            "isEnabled": self.is_enabled,
            "isFinal": self.is_final,
            "state": self.state,
        }


@dataclass
class LogLine:
    """One build log line in the payload."""

    text: str
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "log": self.text,
            "date": format_timestamp(self.timestamp),
        }


@dataclass
class TestSummary:
    """Aggregate test counters."""

    __test__ = False

    description: str = ""
    total: int = 0
    failed: int = 0
    existing_failed: int = 0
    fixed: int = 0
    new_failed: int = 0
    ignored: int = 0
    quarantined: int = 0
    skipped: int = 0
    successful: int = 0
    duration: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "totalCount": self.total,
            "failedCount": self.failed,
            "existingFailedCount": self.existing_failed,
            "fixedCount": self.fixed,
            "newFailedCount": self.new_failed,
            "ignoredCount": self.ignored,
            "quarantineCount": self.quarantined,
            "skippedCount": self.skipped,
            "successfulCount": self.successful,
            "duration": self.duration,
        }


# =============================================================================
# Version Control
# =============================================================================


@dataclass
class CommitDetails:
    id: str
    comment: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "comment": self.comment}


@dataclass
class VcsChangeset:
    id: str
    repository_name: str
    commits: list[CommitDetails] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "repositoryName": self.repository_name,
            "commits": [commit.to_dict() for commit in self.commits],
        }


# =============================================================================
# Jobs and Builds
# =============================================================================


@dataclass
class JobDetails:
    """Per-job section of a chain build.

    The test and task lists are None when the job's cached results were not
    found; their keys are then left out of the payload. Reports and logs are
    always emitted as arrays so receivers can parse them unconditionally.
    """

    id: int
    successful_tests: list[TestResultDetails] | None = None
    skipped_tests: list[TestResultDetails] | None = None
    failed_tests: list[TestResultDetails] | None = None
    tasks: list[TaskResultDetails] | None = None
    static_assessment_reports: list[dict[str, Any]] = field(default_factory=list)
    logs: list[LogLine] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id}
        if self.successful_tests is not None:
            data["successfulTests"] = [test.to_dict() for test in self.successful_tests]
        if self.skipped_tests is not None:
            data["skippedTests"] = [test.to_dict() for test in self.skipped_tests]
        if self.failed_tests is not None:
            data["failedTests"] = [test.to_dict() for test in self.failed_tests]
        if self.tasks is not None:
            data["tasks"] = [task.to_dict() for task in self.tasks]
        data["staticAssessmentReports"] = list(self.static_assessment_reports)
        data["logs"] = [line.to_dict() for line in self.logs]
        return data


@dataclass
class BuildDetails:
    """Build section of the payload.

    Attributes:
        jobs: Per-job details; None for single-job results, in which case
            neither ``jobs`` nor ``failedJobs`` is emitted.
        include_legacy_failed_jobs: Emit ``failedJobs`` as a copy of ``jobs``.
    """

    number: int
    reason: str
    successful: bool
    completed_at: datetime
    has_shared_artifact: bool
    test_summary: TestSummary = field(default_factory=TestSummary)
    vcs: list[VcsChangeset] = field(default_factory=list)
    jobs: list[JobDetails] | None = None
    include_legacy_failed_jobs: bool = True

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "number": self.number,
            "reason": self.reason,
            "successful": self.successful,
            "buildCompletedDate": format_timestamp(self.completed_at),
            "artifact": self.has_shared_artifact,
            "testSummary": self.test_summary.to_dict(),
            "vcs": [changeset.to_dict() for changeset in self.vcs],
        }
        if self.jobs is not None:
            jobs = [job.to_dict() for job in self.jobs]
            data["jobs"] = jobs
            if self.include_legacy_failed_jobs:
                # Older receivers read 'failedJobs'; drop once they are gone.
                data["failedJobs"] = [dict(job) for job in jobs]
        return data


# =============================================================================
# Root
# =============================================================================


@dataclass
class PlanRef:
    key: str

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key}


@dataclass
class NotificationPayload:
    """Root document POSTed to the webhook.

    ``secret`` and ``notification_type`` are only None when assembly failed
    before they were resolved; the keys are then left out.
    """

    secret: str | None = None
    notification_type: str | None = None
    plan: PlanRef | None = None
    build: BuildDetails | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert the payload to its JSON-serializable wire form."""
        data: dict[str, Any] = {}
        if self.secret is not None:
            data["secret"] = self.secret
        if self.notification_type is not None:
            data["notificationType"] = self.notification_type
        if self.plan is not None:
            data["plan"] = self.plan.to_dict()
        if self.build is not None:
            data["build"] = self.build.to_dict()
        return data
