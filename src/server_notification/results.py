"""Build result data handed over by the build server.

This module defines the read-only view of a finished build that the
notification pipeline consumes:

- Plan and notification identity (ImmutablePlan, Notification)
- Results summaries for single jobs and chains (ResultsSummary,
  ChainResultsSummary, ChainStageResult, BuildResultsSummary)
- Test, task and log records (TestResults, TaskResult, LogEntry)
- Artifact links and the data providers that resolve them to files
- Protocols for the external stores queried while assembling a payload

Nothing in here is mutated by the pipeline. The build server (or a test)
constructs these objects and passes them in.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import ClassVar, Protocol

# =============================================================================
# Enums
# =============================================================================


class TaskState(str, Enum):
    """Terminal state of a task execution."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    ERROR = "ERROR"
    UNKNOWN = "UNKNOWN"


class LogEntryType(str, Enum):
    """Kind of a build log line.

    Attributes:
        BUILD_OUTPUT: Standard output of the build itself.
        ERROR: Error output of the build itself.
        INTERNAL: Lines written by the build server, not the build.
    """

    BUILD_OUTPUT = "build_output"
    ERROR = "error"
    INTERNAL = "internal"


class DataProviderKind(str, Enum):
    """Storage backend behind an artifact link."""

    FILE_SYSTEM = "file_system"
    UNSUPPORTED = "unsupported"


# =============================================================================
# Identity
# =============================================================================


@dataclass(frozen=True)
class PlanResultKey:
    """Identifies one job's result within one build.

    The string form (e.g. ``PROJ-PLAN-JOB1-42``) is the key used by the
    results cache and the log store.
    """

    plan_key: str
    build_number: int

    def __str__(self) -> str:
        return f"{self.plan_key}-{self.build_number}"


@dataclass
class ImmutablePlan:
    """Build plan reference."""

    plan_key: str


@dataclass
class Notification:
    """The event that triggered delivery."""

    description: str


@dataclass
class VariableDefinition:
    """A global key/value variable defined on the build server."""

    key: str
    value: str


# =============================================================================
# Version Control
# =============================================================================


@dataclass
class Commit:
    """A single commit within a changeset."""

    change_set_id: str
    comment: str = ""


@dataclass
class RepositoryChangeset:
    """Changes pulled from one repository for a build."""

    changeset_id: str
    repository_name: str
    commits: list[Commit] = field(default_factory=list)


# =============================================================================
# Tests and Tasks
# =============================================================================


@dataclass
class TestResultsSummary:
    """Aggregate test counters of a build or job.

    The counters overlap (quarantined and existing-failed tests are also
    counted as failed), so they are not expected to add up to the total.
    """

    __test__ = False

    total_test_case_count: int = 0
    failed_test_case_count: int = 0
    existing_failed_test_count: int = 0
    fixed_test_case_count: int = 0
    new_failed_test_case_count: int = 0
    ignored_test_case_count: int = 0
    quarantined_test_case_count: int = 0
    skipped_test_case_count: int = 0
    successful_test_case_count: int = 0
    total_test_duration: int = 0
    test_summary_description: str = ""


@dataclass
class TestCaseResultError:
    """Error output captured for one failed test case."""

    __test__ = False

    content: str | None


@dataclass
class TestResults:
    """Outcome of one test case."""

    __test__ = False

    actual_method_name: str
    method_name: str
    class_name: str
    errors: list[TestCaseResultError] = field(default_factory=list)


@dataclass
class TaskIdentifier:
    """Static configuration of a task within a job."""

    user_description: str | None = None
    plugin_key: str | None = None
    is_enabled: bool = True
    is_finalising: bool = False


@dataclass
class TaskResult:
    """Execution outcome of a configured task."""

    task_identifier: TaskIdentifier
    task_state: TaskState = TaskState.UNKNOWN


# =============================================================================
# Logs
# =============================================================================


@dataclass
class LogEntry:
    """One line of a job's build log."""

    log: str
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    type: LogEntryType = LogEntryType.BUILD_OUTPUT


# =============================================================================
# Artifacts and Data Providers
# =============================================================================


@dataclass
class Artifact:
    """An artifact produced by a job."""

    label: str


@dataclass
class ArtifactLink:
    """A job-level artifact definition, independent of storage."""

    artifact: Artifact


@dataclass(frozen=True)
class FileSystemDataProvider:
    """Artifact stored on the local server file system.

    Attributes:
        root_file: The artifact's file, or a directory when the artifact
            definition matched several files.
    """

    root_file: Path | None

    kind: ClassVar[DataProviderKind] = DataProviderKind.FILE_SYSTEM


@dataclass(frozen=True)
class UnsupportedDataProvider:
    """Artifact stored somewhere the pipeline cannot read from.

    Attributes:
        kind_tag: Name of the storage backend, used in diagnostics.
    """

    kind_tag: str

    kind: ClassVar[DataProviderKind] = DataProviderKind.UNSUPPORTED


DataProvider = FileSystemDataProvider | UnsupportedDataProvider


# =============================================================================
# Results Summaries
# =============================================================================


@dataclass
class BuildResultsSummary:
    """Result of a single job inside a chain."""

    id: int
    plan_result_key: PlanResultKey
    test_results_summary: TestResultsSummary = field(default_factory=TestResultsSummary)
    produced_artifact_links: list[ArtifactLink] = field(default_factory=list)


@dataclass
class ChainStageResult:
    """A stage of a chain and the job results it produced."""

    name: str
    build_results: list[BuildResultsSummary] = field(default_factory=list)


@dataclass
class ResultsSummary:
    """Authoritative record of one build execution.

    Attributes:
        build_number: Sequential build number.
        short_reason_summary: Why the build ran (e.g. "Changes by ...").
        successful: Whether the build passed.
        build_completed_date: When the build finished.
        test_results_summary: Build-wide test counters.
        artifact_links: Shared (plan-level) artifact links only.
        repository_changesets: Changes that went into this build.
    """

    build_number: int = 0
    short_reason_summary: str = ""
    successful: bool = False
    build_completed_date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    test_results_summary: TestResultsSummary = field(default_factory=TestResultsSummary)
    artifact_links: list[ArtifactLink] = field(default_factory=list)
    repository_changesets: list[RepositoryChangeset] = field(default_factory=list)


@dataclass
class ChainResultsSummary(ResultsSummary):
    """Results summary of a multi-stage build."""

    stage_results: list[ChainStageResult] = field(default_factory=list)


# =============================================================================
# External Stores
# =============================================================================


class VariableDefinitionManager(Protocol):
    """Store of global build server variables."""

    def get_global_variables(self) -> list[VariableDefinition]:
        """Return all global variables."""
        ...


class BuildLogFileAccessor(Protocol):
    """Read access to one job's build log."""

    def get_last_n_logs_of_type(
        self, n: int, types: Collection[LogEntryType]
    ) -> list[LogEntry]:
        """Return up to ``n`` trailing entries of the given kinds.

        Raises:
            OSError: If the log file cannot be read.
        """
        ...


class BuildLogFileAccessorFactory(Protocol):
    """Creates log accessors for job results."""

    def create_build_log_file_accessor(self, plan_result_key: PlanResultKey) -> BuildLogFileAccessor:
        """Return an accessor for the given job result."""
        ...


class ArtifactLinkManager(Protocol):
    """Resolves artifacts to the provider that stores them."""

    def get_artifact_link_data_provider(self, artifact: Artifact) -> DataProvider | None:
        """Return the data provider for ``artifact``, or None if unavailable."""
        ...
