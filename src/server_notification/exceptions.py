"""Server Notification Exception Classes - Errors raised inside the pipeline."""


class NotificationError(Exception):
    """Base exception for notification delivery."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidWebhookUrlError(NotificationError):
    """Raised when the destination URL cannot be parsed."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Invalid webhook URL {url!r}: {reason}")
        self.url = url
        self.reason = reason
