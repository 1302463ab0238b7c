"""Notification transport - Delivers the assembled payload to the webhook.

The transport POSTs the payload once, with the shared secret in the
Authorization header, and records the outcome in the build's audit log and
the system log. It never raises: a failed delivery is visible in the logs
and in the returned DeliveryResult, not to the caller's control flow.

Proxy routing:
    Proxies are taken from the standard ``http_proxy``/``https_proxy``/
    ``all_proxy`` environment variables for the webhook URL's scheme, unless
    the host is excluded through ``no_proxy``.

Example:
    >>> with ServerNotificationTransport(url, assembler, plan, summary) as transport:
    ...     result = transport.send(Notification("Build completed"))
    >>> result.attempt_count
    1
"""

from __future__ import annotations

import json
import logging
import time
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from server_notification.build_log import BuildAuditLog
from server_notification.config import VARIABLE_PATTERN, NotificationConfig
from server_notification.exceptions import InvalidWebhookUrlError
from server_notification.payload.assembler import CONSTRUCTION_ERRORS, PayloadAssembler
from server_notification.results import ImmutablePlan, Notification, ResultsSummary

logger = logging.getLogger(__name__)

# Delivery is best effort: one attempt, no retries. Re-notification is up to
# the build server.
MAX_ATTEMPTS = 1

HEADER_CONTENT_TYPE = "Content-Type"
HEADER_AUTHORIZATION = "Authorization"
CONTENT_TYPE_JSON = "application/json"


# =============================================================================
# Result Types
# =============================================================================


@dataclass
class DeliveryResult:
    """Outcome of one send.

    Attributes:
        success: Whether the webhook answered with a 2xx status.
        status_code: HTTP status code, if a response was received.
        response_body: Response body, if a response was received.
        delivery_time_ms: Time taken for delivery in milliseconds.
        attempt_count: Requests executed; 0 when no request could be made,
            never more than MAX_ATTEMPTS.
        error: Description of the failure.
    """

    success: bool
    status_code: int | None = None
    response_body: str | None = None
    delivery_time_ms: float = 0.0
    attempt_count: int = 0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging/serialization."""
        return {
            "success": self.success,
            "status_code": self.status_code,
            "delivery_time_ms": self.delivery_time_ms,
            "attempt_count": self.attempt_count,
            "error": self.error,
        }


# =============================================================================
# URL and Proxy Handling
# =============================================================================


def parse_webhook_url(url: str | None) -> httpx.URL:
    """Parse and validate the destination URL.

    Raises:
        InvalidWebhookUrlError: If the URL is missing or unparsable, still
            holds a ${bamboo.*} placeholder, is not http(s) or has no host.
    """
    if not url:
        raise InvalidWebhookUrlError(str(url), "no URL configured")
    if VARIABLE_PATTERN.search(url):
        raise InvalidWebhookUrlError(url, "unresolved build variable")
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise InvalidWebhookUrlError(url, str(e)) from e
    if parsed.scheme not in ("http", "https"):
        raise InvalidWebhookUrlError(url, f"unsupported scheme {parsed.scheme!r}")
    if not parsed.host:
        raise InvalidWebhookUrlError(url, "missing host")
    return parsed


def get_proxy_for_url(url: httpx.URL, proxies: Mapping[str, str] | None = None) -> str | None:
    """Return the proxy to route ``url`` through, if any.

    Args:
        url: The destination URL.
        proxies: Proxy mapping keyed by scheme (plus ``all`` and ``no``).
            Defaults to the proxies configured in the environment.

    Returns:
        The proxy URL, or None for a direct connection.
    """
    if proxies is None:
        proxies = urllib.request.getproxies_environment()
    proxies = dict(proxies)
    proxy = proxies.get(url.scheme) or proxies.get("all")
    if not proxy:
        return None
    if urllib.request.proxy_bypass_environment(url.host, proxies):
        return None
    return proxy


def redact_proxy(proxy: str) -> str:
    """Return the proxy's scheme, host and port without any credentials."""
    try:
        url = httpx.URL(proxy)
    except httpx.InvalidURL:
        return "<invalid proxy>"
    port = f":{url.port}" if url.port is not None else ""
    return f"{url.scheme}://{url.host}{port}"


# =============================================================================
# ServerNotificationTransport
# =============================================================================


class ServerNotificationTransport:
    """Sends notifications for one build result to the webhook.

    The HTTP client is created once and reused for every send of this
    transport. When the webhook URL is invalid the client stays unset and
    every send fails cleanly.

    Attributes:
        webhook_url: The destination URL as configured.
        url: The parsed URL, or None if it was invalid.
        proxy: Proxy the client routes through, if any.
        client: The HTTP client, or None if the URL was invalid.
    """

    def __init__(
        self,
        webhook_url: str | None,
        assembler: PayloadAssembler,
        plan: ImmutablePlan | None = None,
        results_summary: ResultsSummary | None = None,
        audit_log: BuildAuditLog | None = None,
        config: NotificationConfig | None = None,
        proxies: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the transport and its HTTP client.

        Args:
            webhook_url: Destination URL, already variable-substituted.
            assembler: Builds the payload for each notification.
            plan: The build plan, if any.
            results_summary: The build result, if any.
            audit_log: Build log for user-visible diagnostics.
            config: Timeout, SSL and header settings.
            proxies: Proxy mapping; defaults to the environment's.
        """
        self.webhook_url = webhook_url
        self.assembler = assembler
        self.plan = plan
        self.results_summary = results_summary
        self.audit_log = audit_log or BuildAuditLog(None, None)
        self.config = config or NotificationConfig()
        self.url: httpx.URL | None = None
        self.proxy: str | None = None
        self.client: httpx.Client | None = None

        try:
            self.url = parse_webhook_url(webhook_url)
        except InvalidWebhookUrlError as e:
            self.audit_log.error(f"Unable to set up proxy settings, invalid URI encountered: {e}")
            logger.error(f"Unable to set up proxy settings, invalid URI encountered: {e}")
            return

        self.proxy = get_proxy_for_url(self.url, proxies)
        timeout = httpx.Timeout(self.config.timeout)
        if self.proxy is not None:
            logger.debug(
                f"Routing notifications for {self.url.host} "
                f"through proxy {redact_proxy(self.proxy)}"
            )
            self.client = httpx.Client(
                proxy=self.proxy,
                timeout=timeout,
                verify=self.config.verify_ssl,
                trust_env=False,
            )
        else:
            self.client = httpx.Client(
                timeout=timeout,
                verify=self.config.verify_ssl,
                trust_env=False,
            )

    def send(self, notification: Notification) -> DeliveryResult:
        """Assemble and deliver the payload for ``notification``.

        Makes at most MAX_ATTEMPTS requests and never raises.

        Args:
            notification: The triggering event.

        Returns:
            DeliveryResult describing what happened.
        """
        self.audit_log.info("Sending notification")
        start_time = time.time()
        try:
            result = self._send(notification)
        except Exception as e:
            self.audit_log.error(f"Unexpected error while sending notification: {e}")
            logger.exception(f"Unexpected error while sending notification: {e}")
            result = DeliveryResult(success=False, error=str(e))
        result.delivery_time_ms = (time.time() - start_time) * 1000
        return result

    def _send(self, notification: Notification) -> DeliveryResult:
        if self.client is None or self.url is None:
            message = f"Error parsing webhook url: {self.webhook_url}"
            self.audit_log.error(message)
            logger.error(message)
            return DeliveryResult(success=False, error=message)

        headers = self._prepare_headers()
        data = self._payload_data(notification)

        secret = data.get("secret")
        if isinstance(secret, str):
            headers[HEADER_AUTHORIZATION] = secret
        else:
            self.audit_log.error("Error while getting secret from JSON object: no secret present")
            logger.error("Error while getting secret from JSON object: no secret present")

        return self._execute(self._serialize(data), headers)

    def _prepare_headers(self) -> dict[str, str]:
        return {
            **self.config.headers,
            HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON,
        }

    def _payload_data(self, notification: Notification) -> dict[str, Any]:
        payload = self.assembler.assemble(notification, self.plan, self.results_summary)
        try:
            return payload.to_dict()
        except CONSTRUCTION_ERRORS as e:
            self.audit_log.error(f"JSON construction error: {e}")
            logger.error(f"JSON construction error: {e}", exc_info=True)
            return {}

    def _serialize(self, data: dict[str, Any]) -> bytes:
        """Encode the payload as UTF-8 JSON.

        Values JSON cannot represent are sent as their string form rather
        than dropping the whole document.
        """
        try:
            text = json.dumps(data, ensure_ascii=False)
        except CONSTRUCTION_ERRORS as e:
            self.audit_log.error(f"JSON serialization error: {e}")
            logger.error(f"JSON serialization error: {e}", exc_info=True)
            text = json.dumps(data, ensure_ascii=False, default=str)
        return text.encode("utf-8")

    def _execute(self, body: bytes, headers: dict[str, str]) -> DeliveryResult:
        """Execute the single POST and log what came back."""
        assert self.client is not None
        url = str(self.url)

        try:
            self.audit_log.info(f"Executing call to {url}")
            logger.debug(f"POST {url} ({len(body)} bytes)")
            response = self.client.post(url, content=body, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            self.audit_log.error(f"Error while sending payload: {e}")
            logger.error(f"Error while sending payload to {url}: {e}", exc_info=True)
            return DeliveryResult(success=False, attempt_count=MAX_ATTEMPTS, error=str(e))

        self.audit_log.info("Call executed")
        self.audit_log.info(f"Response is: {response}")
        status_line = f"{response.http_version} {response.status_code} {response.reason_phrase}"
        self.audit_log.info(f"StatusLine is: {status_line}")
        self.audit_log.info(f"StatusCode is: {response.status_code}")

        response_body = response.text
        if response_body:
            self.audit_log.info(f"Response from entity is: {response_body}")
        else:
            self.audit_log.error("Response body is empty")

        success = 200 <= response.status_code < 300
        if success:
            logger.debug(f"Notification delivered to {url}: {status_line}")
        else:
            logger.warning(f"Notification to {url} answered with {status_line}")

        return DeliveryResult(
            success=success,
            status_code=response.status_code,
            response_body=response_body,
            attempt_count=MAX_ATTEMPTS,
            error=None if success else f"HTTP {response.status_code}",
        )

    def close(self) -> None:
        """Close the HTTP client."""
        if self.client is not None:
            self.client.close()

    def __enter__(self) -> ServerNotificationTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        proxy = redact_proxy(self.proxy) if self.proxy is not None else None
        return (
            f"ServerNotificationTransport(url={self.webhook_url!r}, "
            f"proxy={proxy!r}, "
            f"timeout={self.config.timeout})"
        )
