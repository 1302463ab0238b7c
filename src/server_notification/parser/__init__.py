"""Static code analysis report parsing."""

from server_notification.parser.exceptions import (
    MalformedReportError,
    ParserError,
    UnsupportedReportError,
)
from server_notification.parser.models import Issue, Report, StaticCodeAnalysisTool
from server_notification.parser.report_parser import ReportParser, XmlReportParser

__all__ = [
    "Issue",
    "MalformedReportError",
    "ParserError",
    "Report",
    "ReportParser",
    "StaticCodeAnalysisTool",
    "UnsupportedReportError",
    "XmlReportParser",
]
