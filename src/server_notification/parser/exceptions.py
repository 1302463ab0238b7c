"""Report Parser Exception Classes."""

from pathlib import Path


class ParserError(Exception):
    """Base exception for static code analysis report parsing."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


class UnsupportedReportError(ParserError):
    """Raised when no parser understands the report format."""

    pass


class MalformedReportError(ParserError):
    """Raised when the report file cannot be read or is not valid XML."""

    pass
