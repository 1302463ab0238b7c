"""Tests for static code analysis report parsing.

Tests cover:
- Checkstyle, PMD, SpotBugs and CPD reports
- Namespaced XML
- Source path shortening
- Unsupported and malformed documents
"""

from __future__ import annotations

from pathlib import Path

import pytest

from server_notification.parser import (
    MalformedReportError,
    ParserError,
    StaticCodeAnalysisTool,
    UnsupportedReportError,
    XmlReportParser,
)
from server_notification.parser.strategies import relative_source_path

CHECKSTYLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<checkstyle version="8.29">
  <file name="/opt/bamboo/xml-data/build-dir/PROJ-PLAN-JOB1/assignment/src/de/tum/Sort.java">
    <error line="12" column="5" severity="warning"
           message="Missing a Javadoc comment."
           source="com.puppycrawl.tools.checkstyle.checks.javadoc.MissingJavadocMethodCheck"/>
  </file>
  <file name="/opt/bamboo/xml-data/build-dir/PROJ-PLAN-JOB1/assignment/src/de/tum/Empty.java"/>
</checkstyle>
"""

PMD_XML = """<?xml version="1.0" encoding="UTF-8"?>
<pmd xmlns="http://pmd.sourceforge.net/report/2.0.0" version="6.21.0">
  <file name="/build/src/de/tum/Sort.java">
    <violation beginline="3" endline="5" begincolumn="9" endcolumn="20"
               rule="UnusedPrivateField" ruleset="Best Practices" priority="3">
      Avoid unused private fields such as 'count'.
    </violation>
  </file>
</pmd>
"""

SPOTBUGS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<BugCollection version="4.0.0">
  <BugInstance type="NP_NULL_ON_SOME_PATH" priority="1" category="CORRECTNESS">
    <ShortMessage>Possible null pointer dereference</ShortMessage>
    <LongMessage>Possible null pointer dereference of list in Sort.sort()</LongMessage>
    <Class classname="de.tum.Sort">
      <SourceLine classname="de.tum.Sort" start="1" end="80" sourcepath="de/tum/Sort.java"/>
    </Class>
    <SourceLine classname="de.tum.Sort" start="42" end="43" sourcepath="de/tum/Sort.java"
                primary="true"/>
  </BugInstance>
</BugCollection>
"""

CPD_XML = """<?xml version="1.0" encoding="UTF-8"?>
<pmd-cpd>
  <duplication lines="12" tokens="80">
    <file line="10" endline="21" column="3" endcolumn="4" path="/build/src/de/tum/A.java"/>
    <file line="30" endline="41" path="/build/src/de/tum/B.java"/>
    <codefragment><![CDATA[for (int i = 0; i < n; i++) {]]></codefragment>
  </duplication>
</pmd-cpd>
"""


@pytest.fixture
def parser() -> XmlReportParser:
    return XmlReportParser()


def write(temp_dir: Path, name: str, content: str) -> Path:
    path = temp_dir / name
    path.write_text(content, encoding="utf-8")
    return path


# =============================================================================
# Test: Tools
# =============================================================================


class TestCheckstyle:
    def test_parses_issues(self, parser, temp_dir) -> None:
        report = parser.transform_to_json_report(
            write(temp_dir, "checkstyle-result.xml", CHECKSTYLE_XML), "checkstyle"
        )

        assert report["tool"] == "CHECKSTYLE"
        assert report["issues"] == [
            {
                "filePath": "src/de/tum/Sort.java",
                "startLine": 12,
                "endLine": 12,
                "startColumn": 5,
                "endColumn": 5,
                "rule": "MissingJavadocMethod",
                "category": "javadoc",
                "message": "Missing a Javadoc comment.",
                "priority": "warning",
            }
        ]


class TestPmd:
    def test_parses_namespaced_report(self, parser, temp_dir) -> None:
        report = parser.parse(write(temp_dir, "pmd.xml", PMD_XML), "pmd")

        assert report.tool == StaticCodeAnalysisTool.PMD
        issue = report.issues[0]
        assert issue.file_path == "src/de/tum/Sort.java"
        assert (issue.start_line, issue.end_line) == (3, 5)
        assert (issue.start_column, issue.end_column) == (9, 20)
        assert issue.rule == "UnusedPrivateField"
        assert issue.category == "Best Practices"
        assert issue.priority == "3"
        assert issue.message == "Avoid unused private fields such as 'count'."


class TestSpotbugs:
    def test_uses_bug_level_source_line(self, parser, temp_dir) -> None:
        report = parser.parse(write(temp_dir, "spotbugsXml.xml", SPOTBUGS_XML), "spotbugs")

        assert report.tool == StaticCodeAnalysisTool.SPOTBUGS
        issue = report.issues[0]
        assert issue.file_path == "de/tum/Sort.java"
        assert (issue.start_line, issue.end_line) == (42, 43)
        assert issue.rule == "NP_NULL_ON_SOME_PATH"
        assert issue.category == "CORRECTNESS"
        assert issue.message == "Possible null pointer dereference of list in Sort.sort()"
        assert issue.priority == "1"


class TestCpd:
    def test_one_issue_per_duplication(self, parser, temp_dir) -> None:
        report = parser.parse(write(temp_dir, "cpd.xml", CPD_XML), "cpd")

        assert report.tool == StaticCodeAnalysisTool.PMD_CPD
        assert len(report.issues) == 1
        issue = report.issues[0]
        assert issue.file_path == "src/de/tum/A.java"
        assert (issue.start_line, issue.end_line) == (10, 21)
        assert issue.category == "Copy/Paste Detection"
        assert "src/de/tum/B.java: lines 30-41" in issue.message
        assert "12 lines" in issue.message


# =============================================================================
# Test: Errors
# =============================================================================


class TestParserErrors:
    def test_unknown_root_raises_unsupported(self, parser, temp_dir) -> None:
        path = write(temp_dir, "junit.xml", "<testsuite name='x'/>")

        with pytest.raises(UnsupportedReportError, match="testsuite"):
            parser.parse(path, "junit")

    def test_invalid_xml_raises_malformed(self, parser, temp_dir) -> None:
        path = write(temp_dir, "broken.xml", "<checkstyle><file>")

        with pytest.raises(MalformedReportError):
            parser.parse(path, "checkstyle")

    def test_entity_declarations_are_rejected(self, parser, temp_dir) -> None:
        path = write(
            temp_dir,
            "checkstyle-result.xml",
            '<?xml version="1.0"?>\n'
            '<!DOCTYPE checkstyle [<!ENTITY lol "lol"><!ENTITY lol2 "&lol;&lol;&lol;">]>\n'
            '<checkstyle><file name="&lol2;"/></checkstyle>\n',
        )

        with pytest.raises(MalformedReportError, match="unsafe XML"):
            parser.parse(path, "checkstyle")

    def test_external_entities_are_rejected(self, parser, temp_dir) -> None:
        path = write(
            temp_dir,
            "pmd.xml",
            '<?xml version="1.0"?>\n'
            '<!DOCTYPE pmd [<!ENTITY secret SYSTEM "file:///etc/passwd">]>\n'
            "<pmd><file name=\"&secret;\"/></pmd>\n",
        )

        with pytest.raises(MalformedReportError):
            parser.parse(path, "pmd")

    def test_missing_file_raises_malformed(self, parser, temp_dir) -> None:
        with pytest.raises(MalformedReportError):
            parser.parse(temp_dir / "missing.xml", "checkstyle")

    def test_errors_share_base_class(self) -> None:
        assert issubclass(UnsupportedReportError, ParserError)
        assert issubclass(MalformedReportError, ParserError)

    def test_error_string_includes_path(self) -> None:
        error = MalformedReportError("bad report", Path("/tmp/r.xml"))
        assert str(error) == "bad report (/tmp/r.xml)"


class TestRelativeSourcePath:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/build/PROJ/assignment/src/de/Sort.java", "src/de/Sort.java"),
            ("/build/PROJ/src/de/Sort.java", "src/de/Sort.java"),
            ("src/de/Sort.java", "src/de/Sort.java"),
            ("C:\\build\\src\\de\\Sort.java", "src/de/Sort.java"),
            ("de/tum/Sort.java", "de/tum/Sort.java"),
        ],
    )
    def test_paths(self, path: str, expected: str) -> None:
        assert relative_source_path(path) == expected
