"""Static code analysis report structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class StaticCodeAnalysisTool(str, Enum):
    """Tools whose reports can be parsed."""

    CHECKSTYLE = "CHECKSTYLE"
    PMD = "PMD"
    SPOTBUGS = "SPOTBUGS"
    PMD_CPD = "PMD_CPD"

    def __str__(self) -> str:
        return self.value


@dataclass
class Issue:
    """A single finding of a static code analysis tool.

    Attributes:
        file_path: Source file, relative to the source root where possible.
        start_line: First affected line (1-based).
        end_line: Last affected line; equals start_line for single lines.
        start_column: First affected column, if the tool reports one.
        end_column: Last affected column, if the tool reports one.
        rule: Name of the violated rule.
        category: Rule group (checkstyle package, PMD ruleset, bug category).
        message: Human-readable description.
        priority: Tool-specific severity.
    """

    file_path: str
    start_line: int
    end_line: int
    rule: str
    category: str
    message: str
    priority: str
    start_column: int | None = None
    end_column: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "filePath": self.file_path,
            "startLine": self.start_line,
            "endLine": self.end_line,
            "startColumn": self.start_column,
            "endColumn": self.end_column,
            "rule": self.rule,
            "category": self.category,
            "message": self.message,
            "priority": self.priority,
        }


@dataclass
class Report:
    """All findings of one tool run."""

    tool: StaticCodeAnalysisTool
    issues: list[Issue] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool": str(self.tool),
            "issues": [issue.to_dict() for issue in self.issues],
        }
