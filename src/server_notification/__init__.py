"""Server Notification - Posts build results to a webhook.

Collects a finished build's metadata, test results, task states, job logs
and static code analysis reports into one JSON document and POSTs it,
authenticated with a shared secret, to a configured webhook.

Usage:
    from server_notification import NotificationConfig, ServerNotificationRecipient

    recipient = ServerNotificationRecipient(
        config=NotificationConfig(webhook_url="https://example.com/api/results"),
        variable_manager=variable_manager,
        artifact_link_manager=artifact_link_manager,
    )
    for transport in recipient.get_transports(plan, results_summary):
        with transport:
            transport.send(notification)
"""

from server_notification.build_log import BuildAuditLog, FileBuildLoggerManager
from server_notification.config import NotificationConfig
from server_notification.config_loader import load_config
from server_notification.exceptions import InvalidWebhookUrlError, NotificationError
from server_notification.payload.assembler import PayloadAssembler
from server_notification.payload.models import NotificationPayload
from server_notification.recipient import ServerNotificationRecipient
from server_notification.results_cache import ResultsCache, ResultsContainer
from server_notification.transport import DeliveryResult, ServerNotificationTransport

__version__ = "1.0.0"

__all__ = [
    "BuildAuditLog",
    "DeliveryResult",
    "FileBuildLoggerManager",
    "InvalidWebhookUrlError",
    "NotificationConfig",
    "NotificationError",
    "NotificationPayload",
    "PayloadAssembler",
    "ResultsCache",
    "ResultsContainer",
    "ServerNotificationRecipient",
    "ServerNotificationTransport",
    "load_config",
    "__version__",
]
