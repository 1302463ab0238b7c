"""Per-tool conversion of static code analysis XML into reports.

Each strategy receives the parsed XML root element and returns the
report's issues. The report parser picks the strategy from the root tag.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Callable

from server_notification.parser.models import Issue, StaticCodeAnalysisTool

CPD_CATEGORY = "Copy/Paste Detection"
CPD_RULE = "Duplication"


def relative_source_path(path: str) -> str:
    """Strip the build directory prefix from a source file path.

    Paths below an ``assignment/`` directory are made relative to it,
    otherwise everything before the first ``src/`` segment is dropped.
    """
    normalized = path.replace("\\", "/")
    if "/assignment/" in normalized:
        return normalized.rsplit("/assignment/", 1)[1]
    if normalized.startswith("src/"):
        return normalized
    index = normalized.find("/src/")
    if index >= 0:
        return normalized[index + 1 :]
    return normalized


def _int(value: str | None, default: int | None = None) -> int | None:
    """Parse an integer attribute, tolerating missing or garbage values."""
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _text(element: ET.Element | None) -> str:
    if element is None or element.text is None:
        return ""
    return " ".join(element.text.split())


# =============================================================================
# Checkstyle
# =============================================================================


def parse_checkstyle(root: ET.Element) -> list[Issue]:
    """Convert a checkstyle report.

    The rule is the check class name without its ``Check`` suffix and the
    category is the checkstyle package it lives in (e.g. ``javadoc``).
    """
    issues = []
    for file_element in root.iter("file"):
        file_path = relative_source_path(file_element.get("name", ""))
        for error in file_element.iter("error"):
            source = error.get("source", "")
            parts = source.split(".")
            rule = parts[-1]
            if rule.endswith("Check") and len(rule) > len("Check"):
                rule = rule[: -len("Check")]
            category = parts[-2] if len(parts) > 1 else "miscellaneous"
            line = _int(error.get("line"), 0)
            column = _int(error.get("column"))
            issues.append(
                Issue(
                    file_path=file_path,
                    start_line=line,
                    end_line=line,
                    start_column=column,
                    end_column=column,
                    rule=rule,
                    category=category,
                    message=error.get("message", ""),
                    priority=error.get("severity", ""),
                )
            )
    return issues


# =============================================================================
# PMD
# =============================================================================


def parse_pmd(root: ET.Element) -> list[Issue]:
    """Convert a PMD report; the ruleset becomes the category."""
    issues = []
    for file_element in root.iter("file"):
        file_path = relative_source_path(file_element.get("name", ""))
        for violation in file_element.iter("violation"):
            start_line = _int(violation.get("beginline"), 0)
            issues.append(
                Issue(
                    file_path=file_path,
                    start_line=start_line,
                    end_line=_int(violation.get("endline"), start_line),
                    start_column=_int(violation.get("begincolumn")),
                    end_column=_int(violation.get("endcolumn")),
                    rule=violation.get("rule", ""),
                    category=violation.get("ruleset", ""),
                    message=_text(violation),
                    priority=violation.get("priority", ""),
                )
            )
    return issues


# =============================================================================
# SpotBugs
# =============================================================================


def _primary_source_line(bug: ET.Element) -> ET.Element | None:
    """Pick the source line that locates a bug instance.

    A direct child SourceLine describes the bug itself; nested ones belong
    to the surrounding class or method and are only a fallback.
    """
    direct = bug.find("SourceLine")
    if direct is not None:
        return direct
    for source_line in bug.iter("SourceLine"):
        if source_line.get("primary") == "true":
            return source_line
    return next(bug.iter("SourceLine"), None)


def parse_spotbugs(root: ET.Element) -> list[Issue]:
    """Convert a SpotBugs report; the bug type becomes the rule."""
    issues = []
    for bug in root.iter("BugInstance"):
        source_line = _primary_source_line(bug)
        file_path = ""
        start_line = 0
        end_line = 0
        if source_line is not None:
            file_path = relative_source_path(source_line.get("sourcepath", ""))
            start_line = _int(source_line.get("start"), 0)
            end_line = _int(source_line.get("end"), start_line)

        message = _text(bug.find("LongMessage")) or _text(bug.find("ShortMessage"))
        issues.append(
            Issue(
                file_path=file_path,
                start_line=start_line,
                end_line=end_line,
                rule=bug.get("type", ""),
                category=bug.get("category", ""),
                message=message or bug.get("type", ""),
                priority=bug.get("priority", ""),
            )
        )
    return issues


# =============================================================================
# PMD Copy/Paste Detector
# =============================================================================


def parse_cpd(root: ET.Element) -> list[Issue]:
    """Convert a CPD report into one issue per duplication.

    The issue points at the first occurrence; the message lists all of them.
    """
    issues = []
    for duplication in root.iter("duplication"):
        files = duplication.findall("file")
        if not files:
            continue
        locations = []
        for file_element in files:
            path = relative_source_path(file_element.get("path", ""))
            start = _int(file_element.get("line"), 0)
            end = _int(file_element.get("endline"), start)
            locations.append(f"{path}: lines {start}-{end}")

        first = files[0]
        start_line = _int(first.get("line"), 0)
        issues.append(
            Issue(
                file_path=relative_source_path(first.get("path", "")),
                start_line=start_line,
                end_line=_int(first.get("endline"), start_line),
                start_column=_int(first.get("column")),
                end_column=_int(first.get("endcolumn")),
                rule=CPD_RULE,
                category=CPD_CATEGORY,
                message=(
                    f"Code duplication of {duplication.get('lines', '?')} lines in the "
                    f"following files: {'; '.join(locations)}"
                ),
                priority="N/A",
            )
        )
    return issues


STRATEGIES: dict[str, tuple[StaticCodeAnalysisTool, Callable[[ET.Element], list[Issue]]]] = {
    "checkstyle": (StaticCodeAnalysisTool.CHECKSTYLE, parse_checkstyle),
    "pmd": (StaticCodeAnalysisTool.PMD, parse_pmd),
    "BugCollection": (StaticCodeAnalysisTool.SPOTBUGS, parse_spotbugs),
    "pmd-cpd": (StaticCodeAnalysisTool.PMD_CPD, parse_cpd),
}
