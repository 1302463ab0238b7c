"""Static code analysis report collection from job artifacts.

Every artifact link of a job is resolved to its data provider and, when
the artifact is a single file on the local file system, handed to the
report parser. Each link yields an ArtifactOutcome, so skipped and failed
artifacts are explicit results rather than swallowed errors.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from server_notification.build_log import BuildAuditLog
from server_notification.parser.exceptions import ParserError
from server_notification.parser.report_parser import ReportParser
from server_notification.results import (
    ArtifactLink,
    ArtifactLinkManager,
    DataProvider,
    DataProviderKind,
)

logger = logging.getLogger(__name__)


class ArtifactStatus(str, Enum):
    """What happened to one artifact link."""

    PARSED = "parsed"
    NO_PROVIDER = "no_provider"
    DIRECTORY = "directory"
    UNSUPPORTED_PROVIDER = "unsupported_provider"
    PARSE_FAILED = "parse_failed"


@dataclass
class ArtifactOutcome:
    """Result of processing one artifact link.

    Attributes:
        label: Artifact definition label.
        status: Whether a report was produced, and if not, why.
        report: The parsed report when status is PARSED.
        error: Description of the failure when status is PARSE_FAILED.
    """

    label: str
    status: ArtifactStatus
    report: dict[str, Any] | None = None
    error: str | None = None

    @property
    def parsed(self) -> bool:
        return self.status == ArtifactStatus.PARSED


class ArtifactReportCollector:
    """Collects parsed reports for the artifact links of a job."""

    def __init__(
        self,
        artifact_link_manager: ArtifactLinkManager,
        report_parser: ReportParser,
        audit_log: BuildAuditLog,
    ):
        self.artifact_link_manager = artifact_link_manager
        self.report_parser = report_parser
        self.audit_log = audit_log

    def collect(self, artifact_links: Iterable[ArtifactLink], job_id: int) -> list[dict[str, Any]]:
        """Return the reports of all successfully parsed artifacts, in link order."""
        reports = []
        for outcome in self.process(artifact_links, job_id):
            if outcome.parsed and outcome.report is not None:
                reports.append(outcome.report)
        return reports

    def process(self, artifact_links: Iterable[ArtifactLink], job_id: int) -> list[ArtifactOutcome]:
        """Process each artifact link and report what happened to it."""
        return [self._process_link(link, job_id) for link in artifact_links]

    def _process_link(self, artifact_link: ArtifactLink, job_id: int) -> ArtifactOutcome:
        artifact = artifact_link.artifact
        label = artifact.label
        provider = self.artifact_link_manager.get_artifact_link_data_provider(artifact)

        if provider is None:
            logger.debug(f"No data provider for {label} in job {job_id}")
            self.audit_log.info(f"Could not retrieve data for artifact {label} in job {job_id}")
            return ArtifactOutcome(label=label, status=ArtifactStatus.NO_PROVIDER)

        if provider.kind == DataProviderKind.FILE_SYSTEM:
            return self._parse_file(provider, label, job_id)

        logger.debug(
            f"Unsupported data provider {_provider_name(provider)} encountered "
            f"for label {label} in job {job_id}"
        )
        self.audit_log.info(
            f"Unsupported artifact handler configuration encountered for artifact "
            f"{label} in job {job_id}"
        )
        return ArtifactOutcome(label=label, status=ArtifactStatus.UNSUPPORTED_PROVIDER)

    def _parse_file(self, provider: DataProvider, label: str, job_id: int) -> ArtifactOutcome:
        root_file = getattr(provider, "root_file", None)

        # A directory means the artifact definition matched several files.
        # TODO: Parse every report inside multi-file artifact directories.
        if root_file is None or root_file.is_dir():
            logger.debug(f"Artifact {label} in job {job_id} is not a single file")
            self.audit_log.info(
                f"Artifact {label} in job {job_id} matches multiple files, which is not yet supported"
            )
            return ArtifactOutcome(label=label, status=ArtifactStatus.DIRECTORY)

        self.audit_log.info(f"Creating artifact JSON object for artifact definition: {label}")
        try:
            report = self.report_parser.transform_to_json_report(root_file, label)
            if isinstance(report, str):
                report = json.loads(report)
            if not isinstance(report, dict):
                raise TypeError(f"expected a JSON object, got {type(report).__name__}")
            # Serialize now so an unencodable value fails this artifact only.
            report = json.loads(json.dumps(report, ensure_ascii=False))
        except ParserError as e:
            logger.error(f"Error parsing static code analysis report {label}", exc_info=True)
            self.audit_log.error(f"Error parsing static code analysis report {label}: {e}")
            return ArtifactOutcome(label=label, status=ArtifactStatus.PARSE_FAILED, error=str(e))
        except (TypeError, ValueError) as e:
            logger.error(
                f"Error constructing artifact JSON for artifact definition {label}", exc_info=True
            )
            self.audit_log.error(
                f"Error constructing artifact JSON for artifact definition {label}: {e}"
            )
            return ArtifactOutcome(label=label, status=ArtifactStatus.PARSE_FAILED, error=str(e))

        return ArtifactOutcome(label=label, status=ArtifactStatus.PARSED, report=report)


def _provider_name(provider: DataProvider) -> str:
    return getattr(provider, "kind_tag", None) or type(provider).__name__
