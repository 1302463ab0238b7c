"""Notification recipient - Wires build events to the notification transport.

The build server calls the recipient twice per build:

1. ``on_job_completed`` after every job, while detailed test and task
   results are still available; they go into the results cache.
2. ``get_transports`` when the notification fires; the recipient builds a
   transport with all collaborators injected.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from server_notification.build_log import BuildAuditLog, BuildLoggerManager
from server_notification.config import NotificationConfig
from server_notification.parser.report_parser import ReportParser, XmlReportParser
from server_notification.payload.assembler import PayloadAssembler
from server_notification.results import (
    ArtifactLinkManager,
    BuildLogFileAccessorFactory,
    ImmutablePlan,
    PlanResultKey,
    ResultsSummary,
    VariableDefinitionManager,
)
from server_notification.results_cache import ResultsCache, ResultsContainer
from server_notification.transport import ServerNotificationTransport

logger = logging.getLogger(__name__)


class ServerNotificationRecipient:
    """Notification recipient posting build results to a webhook.

    Attributes:
        config: Notification settings, including the webhook URL.
        results_cache: Per-job results captured on job completion.
    """

    def __init__(
        self,
        config: NotificationConfig,
        variable_manager: VariableDefinitionManager,
        artifact_link_manager: ArtifactLinkManager,
        build_logger_manager: BuildLoggerManager | None = None,
        log_accessor_factory: BuildLogFileAccessorFactory | None = None,
        report_parser: ReportParser | None = None,
        results_cache: ResultsCache | None = None,
    ) -> None:
        self.config = config
        self.variable_manager = variable_manager
        self.artifact_link_manager = artifact_link_manager
        self.build_logger_manager = build_logger_manager
        self.log_accessor_factory = log_accessor_factory
        self.report_parser = report_parser or XmlReportParser()
        self.results_cache = results_cache or ResultsCache()

    def on_job_completed(self, plan_result_key: PlanResultKey, container: ResultsContainer) -> None:
        """Remember a finished job's detailed results for the chain notification."""
        logger.debug(
            f"Caching results for {plan_result_key}: "
            f"{len(container.successful_tests)} successful, "
            f"{len(container.failed_tests)} failed, "
            f"{len(container.skipped_tests)} skipped"
        )
        self.results_cache.put(plan_result_key, container)

    def get_transports(
        self,
        plan: ImmutablePlan | None,
        results_summary: ResultsSummary | None,
        variables: Mapping[str, str] | None = None,
    ) -> list[ServerNotificationTransport]:
        """Create the transport delivering this build's notification.

        Args:
            plan: The build plan, if any.
            results_summary: The build result, if any.
            variables: Values for ``${bamboo.*}`` placeholders in the URL.

        Returns:
            A single-element list; the caller sends and closes it.
        """
        audit_log = BuildAuditLog(
            self.build_logger_manager, plan.plan_key if plan is not None else None
        )
        assembler = PayloadAssembler(
            variable_manager=self.variable_manager,
            artifact_link_manager=self.artifact_link_manager,
            report_parser=self.report_parser,
            results_cache=self.results_cache,
            log_accessor_factory=self.log_accessor_factory,
            audit_log=audit_log,
            config=self.config,
        )
        transport = ServerNotificationTransport(
            webhook_url=self.config.resolve_webhook_url(variables or {}),
            assembler=assembler,
            plan=plan,
            results_summary=results_summary,
            audit_log=audit_log,
            config=self.config,
        )
        return [transport]

    def __repr__(self) -> str:
        return f"ServerNotificationRecipient(webhook_url={self.config.webhook_url!r})"
