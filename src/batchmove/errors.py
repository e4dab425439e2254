"""Exceptions raised across batchmove."""


class BatchMoveError(Exception):
    """Base error for the project."""


class ConfigurationError(BatchMoveError):
    """Configuration document is missing, invalid or unresolvable."""


class NoMatchError(BatchMoveError):
    """File name does not have the expected dated shape."""


class NotificationError(BatchMoveError):
    """Notification could not be prepared for sending."""


class MailDeliveryError(BatchMoveError):
    """Mail transport failed to connect, authenticate or send."""


class EventLogError(BatchMoveError):
    """Structured-event sink rejected a registration or a write."""


def describe(exc: BaseException) -> str:
    """Join the messages of an exception and its causes.

    ``failed to move file 'a' to 'b': [Errno 13] Permission denied``
    """
    parts: list[str] = []
    current: BaseException | None = exc
    while current is not None:
        message = str(current) or type(current).__name__
        if not parts or message not in parts[-1]:
            parts.append(message)
        current = current.__cause__
    return ": ".join(parts)
