"""Mail port - interface for sending notifications."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..domain.models import MailMessage


class MailPort(ABC):
    """Interface for mail delivery."""

    @abstractmethod
    def send(self, message: "MailMessage") -> None:
        """Deliver a prepared message.

        Raises MailDeliveryError on any connect, authentication or send
        failure, with the underlying cause in the message.
        """
        pass
