"""Notification configuration model with Pydantic validation.

This module defines the NotificationConfig model holding everything the
pipeline needs besides the build data itself:

- Destination webhook URL (may contain ``${bamboo.*}`` variables)
- HTTP timeout and SSL verification
- Payload size guards (log lines per job, failure message length)
- The legacy ``failedJobs`` compatibility switch

Example:
    >>> config = NotificationConfig(
    ...     webhook_url="https://artemis.example.com/api/programming-submissions",
    ...     timeout=10.0,
    ... )
    >>> config.resolve_webhook_url({})
    'https://artemis.example.com/api/programming-submissions'
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, field_validator

# =============================================================================
# Default Configuration Values
# =============================================================================

DEFAULT_TIMEOUT = 30.0  # seconds
DEFAULT_VERIFY_SSL = True
DEFAULT_MAX_LOG_LINES = 1000
DEFAULT_MAX_ERROR_LENGTH = 5000

VARIABLE_PATTERN = re.compile(r"\$\{bamboo\.([^}]+)\}")


# =============================================================================
# NotificationConfig Model
# =============================================================================


class NotificationConfig(BaseModel):
    """Configuration for result notifications.

    Attributes:
        webhook_url: Destination URL. Validated lazily by the transport, since
            a bad URL must be logged rather than raised.
        timeout: Request timeout in seconds (1-300).
        verify_ssl: Whether to verify SSL certificates.
        max_log_lines: Trailing log lines sent for jobs without tests.
        max_error_length: Characters kept of each test failure message.
        include_legacy_failed_jobs: Also emit ``failedJobs`` next to ``jobs``
            for receivers that still read the old field name.
        headers: Additional HTTP headers to include in requests.
    """

    webhook_url: str | None = Field(
        default=None,
        description="Destination webhook URL.",
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        ge=1.0,
        le=300.0,
        description="Request timeout in seconds (1-300).",
    )
    verify_ssl: bool = Field(
        default=DEFAULT_VERIFY_SSL,
        description="Whether to verify SSL certificates.",
    )
    max_log_lines: int = Field(
        default=DEFAULT_MAX_LOG_LINES,
        ge=0,
        description="Maximum number of trailing log lines per job.",
    )
    max_error_length: int = Field(
        default=DEFAULT_MAX_ERROR_LENGTH,
        ge=1,
        description="Maximum characters kept per test failure message.",
    )
    include_legacy_failed_jobs: bool = Field(
        default=True,
        description="Duplicate 'jobs' as 'failedJobs' for older receivers.",
    )
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Additional HTTP headers to include in requests.",
    )

    @field_validator("headers")
    @classmethod
    def validate_headers(cls, v: dict[str, str]) -> dict[str, str]:
        """Reject headers that would clash with the ones the transport sets.

        Raises:
            ValueError: If Content-Type or Authorization is overridden.
        """
        reserved = {"content-type", "authorization"}
        for key in v:
            if key.lower() in reserved:
                raise ValueError(f"Header {key} is set by the transport and cannot be overridden")
        return v

    def resolve_webhook_url(self, variables: Mapping[str, str]) -> str | None:
        """Substitute ``${bamboo.name}`` placeholders in the webhook URL.

        Unknown variables are left in place so the resulting URL fails
        validation visibly instead of pointing somewhere unexpected.

        Args:
            variables: Variable values keyed by name without the
                ``bamboo.`` prefix.

        Returns:
            The substituted URL, or None if no URL is configured.
        """
        if self.webhook_url is None:
            return None

        def _replace(match: re.Match[str]) -> str:
            return variables.get(match.group(1), match.group(0))

        return VARIABLE_PATTERN.sub(_replace, self.webhook_url)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NotificationConfig:
        """Create a NotificationConfig from a dictionary.

        Raises:
            ValidationError: If the data is invalid.
        """
        return cls(**data)

    def __repr__(self) -> str:
        return (
            f"NotificationConfig("
            f"webhook_url={self.webhook_url!r}, "
            f"timeout={self.timeout}, "
            f"verify_ssl={self.verify_ssl})"
        )


__all__ = [
    "NotificationConfig",
    "DEFAULT_TIMEOUT",
    "DEFAULT_VERIFY_SSL",
    "DEFAULT_MAX_LOG_LINES",
    "DEFAULT_MAX_ERROR_LENGTH",
]
