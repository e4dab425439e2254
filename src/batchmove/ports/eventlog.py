"""Event log port - interface for the OS structured-event sink."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..domain.models import EventCode, Severity


class EventLogPort(ABC):
    """Interface for writing leveled events to a named channel."""

    @abstractmethod
    def ensure_channel(self, name: str, source: str) -> None:
        """Create channel and source registration if absent."""
        pass

    @abstractmethod
    def publish(
        self,
        name: str,
        source: str,
        severity: "Severity",
        code: "EventCode",
        message: str,
    ) -> None:
        pass
