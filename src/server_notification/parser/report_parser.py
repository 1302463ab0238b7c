"""Report parser - Turns a static code analysis artifact into a report dict.

Usage:
    parser = XmlReportParser()
    report = parser.transform_to_json_report(Path("target/checkstyle-result.xml"), "checkstyle")
    report["tool"]  # "CHECKSTYLE"
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Protocol

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as SafeET

from server_notification.parser.exceptions import MalformedReportError, UnsupportedReportError
from server_notification.parser.models import Report
from server_notification.parser.strategies import STRATEGIES

logger = logging.getLogger(__name__)


class ReportParser(Protocol):
    """Converts one artifact file into a structured report."""

    def transform_to_json_report(self, file: Path, label: str) -> dict[str, Any]:
        """Parse ``file`` produced by the artifact definition ``label``.

        Raises:
            ParserError: If the file cannot be converted.
        """
        ...


def _strip_namespaces(root: ET.Element) -> None:
    """Drop XML namespaces so strategies can match plain tag names."""
    for element in root.iter():
        if isinstance(element.tag, str) and "}" in element.tag:
            element.tag = element.tag.split("}", 1)[1]


class XmlReportParser:
    """Parses checkstyle, PMD, SpotBugs and CPD XML reports.

    The tool is recognised from the document's root element, so artifact
    labels are free-form and only used in diagnostics.
    """

    def parse(self, file: Path, label: str) -> Report:
        """Parse a report file into a Report.

        Args:
            file: The report file.
            label: Artifact definition label, for error messages.

        Raises:
            MalformedReportError: If the file is unreadable, not XML, or uses
                entity declarations or external references.
            UnsupportedReportError: If no strategy handles the root element.
        """
        try:
            # Reports come from builds of untrusted code.
            tree = SafeET.parse(file)
        except (SafeET.ParseError, OSError) as e:
            raise MalformedReportError(f"Could not read report {label}: {e}", file) from e
        except DefusedXmlException as e:
            raise MalformedReportError(f"Rejected unsafe XML in report {label}: {e}", file) from e

        root = tree.getroot()
        _strip_namespaces(root)

        strategy = STRATEGIES.get(root.tag)
        if strategy is None:
            raise UnsupportedReportError(
                f"Unsupported report format <{root.tag}> for artifact {label}", file
            )

        tool, parse_issues = strategy
        issues = parse_issues(root)
        logger.debug(f"Parsed {len(issues)} {tool} issues from {file}")
        return Report(tool=tool, issues=issues)

    def transform_to_json_report(self, file: Path, label: str) -> dict[str, Any]:
        return self.parse(file, label).to_dict()
