"""Payload assembly - Builds the notification document from build results.

The assembler queries the collectors and the secret resolver and composes
their output into a NotificationPayload. Assembly degrades rather than
aborts: a section whose source data is broken is logged and left out, and
everything built so far is still delivered.

Example:
    >>> assembler = PayloadAssembler(
    ...     variable_manager=variables,
    ...     artifact_link_manager=artifacts,
    ...     report_parser=XmlReportParser(),
    ...     results_cache=cache,
    ...     log_accessor_factory=logs,
    ...     audit_log=BuildAuditLog(build_logger_manager, plan.plan_key),
    ... )
    >>> payload = assembler.assemble(notification, plan, results_summary)
    >>> payload.to_dict()["build"]["testSummary"]["totalCount"]
    3
"""

from __future__ import annotations

import logging

from server_notification.build_log import BuildAuditLog
from server_notification.collectors.artifacts import ArtifactReportCollector
from server_notification.collectors.logs import collect_logs
from server_notification.collectors.secret import resolve_secret
from server_notification.collectors.tests import collect_job_tests, collect_test_summary
from server_notification.config import NotificationConfig
from server_notification.parser.report_parser import ReportParser
from server_notification.payload.models import (
    BuildDetails,
    CommitDetails,
    JobDetails,
    LogLine,
    NotificationPayload,
    PlanRef,
    VcsChangeset,
)
from server_notification.results import (
    ArtifactLinkManager,
    BuildLogFileAccessorFactory,
    BuildResultsSummary,
    ChainResultsSummary,
    ImmutablePlan,
    Notification,
    RepositoryChangeset,
    ResultsSummary,
    VariableDefinitionManager,
)
from server_notification.results_cache import ResultsCache

logger = logging.getLogger(__name__)

# Errors raised by inconsistent build data while building a section.
CONSTRUCTION_ERRORS: tuple[type[Exception], ...] = (
    AttributeError,
    KeyError,
    TypeError,
    ValueError,
)


class PayloadAssembler:
    """Composes the notification payload for one build.

    All collaborators are injected. The assembler keeps no state between
    calls to ``assemble``.
    """

    def __init__(
        self,
        variable_manager: VariableDefinitionManager,
        artifact_link_manager: ArtifactLinkManager,
        report_parser: ReportParser,
        results_cache: ResultsCache,
        log_accessor_factory: BuildLogFileAccessorFactory | None = None,
        audit_log: BuildAuditLog | None = None,
        config: NotificationConfig | None = None,
    ):
        self.variable_manager = variable_manager
        self.results_cache = results_cache
        self.log_accessor_factory = log_accessor_factory
        self.audit_log = audit_log or BuildAuditLog(None, None)
        self.config = config or NotificationConfig()
        self.artifact_collector = ArtifactReportCollector(
            artifact_link_manager, report_parser, self.audit_log
        )

    def assemble(
        self,
        notification: Notification,
        plan: ImmutablePlan | None = None,
        results_summary: ResultsSummary | None = None,
    ) -> NotificationPayload:
        """Build the payload for a notification.

        Args:
            notification: The triggering event.
            plan: The build plan, if the event has one.
            results_summary: The build result, if the event has one.

        Returns:
            The payload. ``plan`` and ``build`` are None when their source
            is missing or could not be converted.
        """
        self.audit_log.info("Creating JSON object")
        payload = NotificationPayload()

        try:
            payload.secret = resolve_secret(self.variable_manager, self.audit_log)
            payload.notification_type = notification.description
        except CONSTRUCTION_ERRORS as e:
            self._construction_error("notification header", e)

        if plan is not None:
            try:
                payload.plan = PlanRef(key=plan.plan_key)
            except CONSTRUCTION_ERRORS as e:
                self._construction_error("plan details", e)

        if results_summary is not None:
            try:
                payload.build = self._build_details(results_summary)
            except CONSTRUCTION_ERRORS as e:
                self._construction_error("build details", e)

        self.audit_log.info("JSON object created")
        return payload

    # =========================================================================
    # Build Section
    # =========================================================================

    def _build_details(self, results_summary: ResultsSummary) -> BuildDetails:
        details = BuildDetails(
            number=results_summary.build_number,
            reason=results_summary.short_reason_summary,
            successful=results_summary.successful,
            completed_at=results_summary.build_completed_date,
            # Only shared artifacts are attached to the build-level summary.
            has_shared_artifact=bool(results_summary.artifact_links),
            test_summary=collect_test_summary(results_summary.test_results_summary),
            vcs=[self._changeset(changeset) for changeset in results_summary.repository_changesets],
            include_legacy_failed_jobs=self.config.include_legacy_failed_jobs,
        )
        # Fail here, inside the section, rather than later at serialization.
        details.to_dict()

        if isinstance(results_summary, ChainResultsSummary):
            details.jobs = self._jobs(results_summary)
        return details

    @staticmethod
    def _changeset(changeset: RepositoryChangeset) -> VcsChangeset:
        return VcsChangeset(
            id=changeset.changeset_id,
            repository_name=changeset.repository_name,
            commits=[
                CommitDetails(id=commit.change_set_id, comment=commit.comment)
                for commit in changeset.commits
            ],
        )

    # =========================================================================
    # Job Sections
    # =========================================================================

    def _jobs(self, chain: ChainResultsSummary) -> list[JobDetails]:
        """Build job details for every job of every stage, in order.

        A job whose data cannot be converted is left out; the other jobs
        are still reported.
        """
        jobs = []
        for stage in chain.stage_results:
            for job_result in stage.build_results:
                try:
                    job = self._job_details(job_result)
                    job.to_dict()
                except CONSTRUCTION_ERRORS as e:
                    self._construction_error(f"job {getattr(job_result, 'id', '?')}", e)
                    continue
                jobs.append(job)
        return jobs

    def _job_details(self, job_result: BuildResultsSummary) -> JobDetails:
        job = JobDetails(id=job_result.id)

        test_results = collect_job_tests(
            self.results_cache,
            job_result.plan_result_key,
            job_result.id,
            self.audit_log,
            self.config.max_error_length,
        )
        if test_results is not None:
            job.successful_tests = test_results.successful_tests
            job.skipped_tests = test_results.skipped_tests
            job.failed_tests = test_results.failed_tests
            job.tasks = test_results.tasks

        self.audit_log.info(f"Loading artifacts for job {job_result.id}")
        job.static_assessment_reports = self.artifact_collector.collect(
            job_result.produced_artifact_links, job_result.id
        )

        job.logs = self._job_logs(job_result)
        return job

    def _job_logs(self, job_result: BuildResultsSummary) -> list[LogLine]:
        """Collect logs only for jobs without tests, where they hint at a build error."""
        if job_result.test_results_summary.total_test_case_count != 0:
            return []
        return collect_logs(
            self.log_accessor_factory,
            job_result.plan_result_key,
            self.audit_log,
            self.config.max_log_lines,
        )

    def _construction_error(self, section: str, error: Exception) -> None:
        self.audit_log.error(f"JSON construction error in {section}: {error}")
        logger.error(f"JSON construction error in {section}: {error}", exc_info=True)
