"""Pytest configuration and fixtures for server-notification tests."""

from __future__ import annotations

from collections.abc import Collection, Generator
from datetime import datetime, timezone
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Any

import pytest

from server_notification.build_log import BuildAuditLog
from server_notification.parser.exceptions import MalformedReportError
from server_notification.results import (
    Artifact,
    ArtifactLink,
    BuildResultsSummary,
    ChainResultsSummary,
    ChainStageResult,
    Commit,
    DataProvider,
    ImmutablePlan,
    LogEntry,
    LogEntryType,
    Notification,
    PlanResultKey,
    RepositoryChangeset,
    ResultsSummary,
    TaskIdentifier,
    TaskResult,
    TaskState,
    TestCaseResultError,
    TestResults,
    TestResultsSummary,
    VariableDefinition,
)
from server_notification.results_cache import ResultsCache, ResultsContainer

COMPLETED_AT = datetime(2024, 5, 17, 14, 30, 0, tzinfo=timezone.utc)


# =============================================================================
# Fake Collaborators
# =============================================================================


class FakeVariableManager:
    """Global variable store backed by a list."""

    def __init__(self, variables: list[VariableDefinition] | None = None) -> None:
        self.variables = variables or []

    def get_global_variables(self) -> list[VariableDefinition]:
        return list(self.variables)


class RecordingBuildLogger:
    """Build logger that keeps every line in memory."""

    def __init__(self) -> None:
        self.entries: list[str] = []
        self.errors: list[str] = []

    def add_build_log_entry(self, message: str) -> None:
        self.entries.append(message)

    def add_error_log_entry(self, message: str) -> None:
        self.errors.append(message)


class RecordingBuildLoggerManager:
    """Returns one RecordingBuildLogger per plan key."""

    def __init__(self) -> None:
        self.loggers: dict[str, RecordingBuildLogger] = {}

    def get_logger(self, plan_key: str) -> RecordingBuildLogger:
        return self.loggers.setdefault(plan_key, RecordingBuildLogger())


class FakeLogAccessor:
    def __init__(self, entries: list[LogEntry], error: OSError | None = None) -> None:
        self.entries = entries
        self.error = error
        self.calls: list[tuple[int, tuple[LogEntryType, ...]]] = []

    def get_last_n_logs_of_type(self, n: int, types: Collection[LogEntryType]) -> list[LogEntry]:
        self.calls.append((n, tuple(types)))
        if self.error is not None:
            raise self.error
        return [entry for entry in self.entries if entry.type in types][-n:]


class FakeLogAccessorFactory:
    """Serves log entries keyed by plan-result key string."""

    def __init__(self) -> None:
        self.logs: dict[str, list[LogEntry]] = {}
        self.errors: dict[str, OSError] = {}
        self.accessors: dict[str, FakeLogAccessor] = {}

    def create_build_log_file_accessor(self, plan_result_key: PlanResultKey) -> FakeLogAccessor:
        key = str(plan_result_key)
        accessor = FakeLogAccessor(self.logs.get(key, []), self.errors.get(key))
        self.accessors[key] = accessor
        return accessor


class FakeArtifactLinkManager:
    """Maps artifact labels to data providers."""

    def __init__(self) -> None:
        self.providers: dict[str, DataProvider | None] = {}

    def get_artifact_link_data_provider(self, artifact: Artifact) -> DataProvider | None:
        return self.providers.get(artifact.label)


class FakeReportParser:
    """Returns canned reports per label; labels in ``failing`` raise."""

    def __init__(self) -> None:
        self.failing: set[str] = set()
        self.calls: list[tuple[Path, str]] = []

    def transform_to_json_report(self, file: Path, label: str) -> dict[str, Any]:
        self.calls.append((file, label))
        if label in self.failing:
            raise MalformedReportError(f"Could not read report {label}", file)
        return {"tool": label.upper(), "issues": []}


# =============================================================================
# Builders
# =============================================================================


def make_test(name: str, errors: list[str | None] | None = None) -> TestResults:
    return TestResults(
        actual_method_name=name,
        method_name=name,
        class_name="de.tum.in.www1.ExampleTest",
        errors=[TestCaseResultError(content=error) for error in errors or []],
    )


def make_job(
    job_id: int,
    plan_key: str = "PROJ-PLAN-JOB1",
    build_number: int = 42,
    total_tests: int = 0,
    artifact_labels: list[str] | None = None,
) -> BuildResultsSummary:
    return BuildResultsSummary(
        id=job_id,
        plan_result_key=PlanResultKey(plan_key, build_number),
        test_results_summary=TestResultsSummary(total_test_case_count=total_tests),
        produced_artifact_links=[
            ArtifactLink(Artifact(label)) for label in artifact_labels or []
        ],
    )


@pytest.fixture
def builders() -> Any:
    """Expose builder helpers to test modules."""

    class Builders:
        test = staticmethod(make_test)
        job = staticmethod(make_job)

    return Builders


# =============================================================================
# Directory Fixtures
# =============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# =============================================================================
# Collaborator Fixtures
# =============================================================================


@pytest.fixture
def variable_manager() -> FakeVariableManager:
    return FakeVariableManager([VariableDefinition("SERVER_PLUGIN_SECRET_PASSWORD", "s3cret")])


@pytest.fixture
def build_logger_manager() -> RecordingBuildLoggerManager:
    return RecordingBuildLoggerManager()


@pytest.fixture
def plan() -> ImmutablePlan:
    return ImmutablePlan(plan_key="PROJ-PLAN")


@pytest.fixture
def audit_log(build_logger_manager: RecordingBuildLoggerManager, plan: ImmutablePlan) -> BuildAuditLog:
    return BuildAuditLog(build_logger_manager, plan.plan_key)


@pytest.fixture
def build_logger(
    build_logger_manager: RecordingBuildLoggerManager, plan: ImmutablePlan
) -> RecordingBuildLogger:
    """The recording logger behind ``audit_log``."""
    return build_logger_manager.get_logger(plan.plan_key)


@pytest.fixture
def log_accessor_factory() -> FakeLogAccessorFactory:
    return FakeLogAccessorFactory()


@pytest.fixture
def artifact_link_manager() -> FakeArtifactLinkManager:
    return FakeArtifactLinkManager()


@pytest.fixture
def report_parser() -> FakeReportParser:
    return FakeReportParser()


@pytest.fixture
def results_cache() -> ResultsCache:
    return ResultsCache()


@pytest.fixture
def notification() -> Notification:
    return Notification(description="Build completed")


# =============================================================================
# Build Result Fixtures
# =============================================================================


@pytest.fixture
def single_job_summary() -> ResultsSummary:
    """A passed single-job build with three tests."""
    return ResultsSummary(
        build_number=42,
        short_reason_summary="Changes by Jane Doe",
        successful=True,
        build_completed_date=COMPLETED_AT,
        test_results_summary=TestResultsSummary(
            total_test_case_count=3,
            successful_test_case_count=3,
            total_test_duration=1250,
            test_summary_description="3 passed",
        ),
        repository_changesets=[
            RepositoryChangeset(
                changeset_id="abc123",
                repository_name="exercise",
                commits=[Commit("abc123", "Implement sorting")],
            )
        ],
    )


@pytest.fixture
def chain_summary() -> ChainResultsSummary:
    """A failed two-stage chain: one job without tests, one with two tests."""
    return ChainResultsSummary(
        build_number=7,
        short_reason_summary="Manual run",
        successful=False,
        build_completed_date=COMPLETED_AT,
        test_results_summary=TestResultsSummary(
            total_test_case_count=2,
            failed_test_case_count=1,
            successful_test_case_count=1,
        ),
        stage_results=[
            ChainStageResult("Build", [make_job(1, "PROJ-PLAN-BUILD", 7, total_tests=0)]),
            ChainStageResult("Test", [make_job(2, "PROJ-PLAN-TEST", 7, total_tests=2)]),
        ],
    )


@pytest.fixture
def job_container() -> ResultsContainer:
    """Cached results of a job with one passed and one failed test."""
    return ResultsContainer(
        successful_tests=[make_test("testSortAscending")],
        failed_tests=[make_test("testSortDescending", ["expected:<[3, 2, 1]> but was:<[1, 2, 3]>"])],
        task_results=[
            TaskResult(
                TaskIdentifier("Run tests", "com.atlassian.bamboo.plugins.maven:task.builder.mvn3"),
                TaskState.FAILED,
            )
        ],
    )


@pytest.fixture
def log_entries() -> list[LogEntry]:
    return [
        LogEntry(f"[ERROR] line {i}", COMPLETED_AT, LogEntryType.ERROR) for i in range(5)
    ]
