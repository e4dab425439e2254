"""Domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from pathlib import Path


@dataclass(frozen=True)
class RenamePlan:
    """Canonical name computed from a dated source file name."""

    new_file_name: str
    year: str


@dataclass(frozen=True)
class ResultRecord:
    """Outcome of processing one source file."""

    timestamp: datetime
    source_folder: Path
    source_file_name: str
    new_file_name: str | None = None
    destination_folder: Path | None = None
    moved: bool = False
    error: str | None = None  # Human-readable diagnostic chain

    def __post_init__(self) -> None:
        if self.moved == (self.error is not None):
            raise ValueError(
                f"Result for {self.source_file_name} must be either moved or failed"
            )

    @property
    def success(self) -> bool:
        return self.moved

    def as_row(self) -> dict[str, object]:
        return {
            "DateTime": self.timestamp.isoformat(timespec="seconds"),
            "SourceFolder": str(self.source_folder),
            "SourceFileName": self.source_file_name,
            "DestinationFolder": str(self.destination_folder or ""),
            "NewFileName": self.new_file_name or "",
            "Moved": self.moved,
            "Error": self.error or "",
        }


@dataclass(frozen=True)
class SystemErrorRecord:
    """Batch-level failure not attributable to a single file."""

    timestamp: datetime
    message: str

    def as_row(self) -> dict[str, object]:
        return {
            "DateTime": self.timestamp.isoformat(timespec="seconds"),
            "Message": self.message,
        }


@dataclass
class RunReport:
    """Accumulated state of one batch.

    Results and system errors are append-only; stages read them through
    the tuple views.
    """

    started_at: datetime = field(default_factory=datetime.now)
    _results: list[ResultRecord] = field(default_factory=list, init=False, repr=False)
    _system_errors: list[SystemErrorRecord] = field(
        default_factory=list, init=False, repr=False
    )

    @property
    def results(self) -> tuple[ResultRecord, ...]:
        return tuple(self._results)

    @property
    def system_errors(self) -> tuple[SystemErrorRecord, ...]:
        return tuple(self._system_errors)

    @property
    def action_errors(self) -> tuple[ResultRecord, ...]:
        return tuple(r for r in self._results if r.error is not None)

    @property
    def moved_count(self) -> int:
        return sum(1 for r in self._results if r.moved)

    @property
    def action_error_count(self) -> int:
        return len(self.action_errors)

    @property
    def has_system_errors(self) -> bool:
        return len(self._system_errors) > 0

    @property
    def exit_code(self) -> int:
        return 1 if self.has_system_errors else 0

    def add_result(self, result: ResultRecord) -> None:
        self._results.append(result)

    def append_system_error(self, message: str) -> SystemErrorRecord:
        record = SystemErrorRecord(timestamp=datetime.now(), message=message)
        self._system_errors.append(record)
        return record


class Severity(str, Enum):
    """Event log entry level."""

    INFORMATION = "Information"
    WARNING = "Warning"
    ERROR = "Error"


class EventCode(IntEnum):
    """Fixed event id vocabulary."""

    SUCCESS = 1
    ERROR = 2
    WARNING = 3
    INFO = 4
    BATCH_START = 100
    BATCH_END = 199


@dataclass(frozen=True)
class EventLogEntry:
    severity: Severity
    code: EventCode
    message: str


class Priority(str, Enum):
    NORMAL = "Normal"
    HIGH = "High"


@dataclass(frozen=True)
class NotificationDecision:
    """Whether and what to send at the end of a batch."""

    should_send: bool
    subject: str
    body: str
    priority: Priority = Priority.NORMAL
    attachments: tuple[Path, ...] = ()


@dataclass(frozen=True)
class FileMetadata:
    size: int
    last_modified: datetime
    is_file: bool = True


@dataclass(frozen=True)
class SmtpCredential:
    user_name: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class MailMessage:
    """Fully prepared message handed to the mail port."""

    from_address: str
    subject: str
    html_body: str
    to: tuple[str, ...] = ()
    bcc: tuple[str, ...] = ()
    from_display_name: str | None = None
    attachments: tuple[Path, ...] = ()
    priority: Priority = Priority.NORMAL
    smtp_server_name: str = "localhost"
    smtp_port: int = 25
    connection_type: str = "StartTlsWhenAvailable"
    credential: SmtpCredential | None = None
