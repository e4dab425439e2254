"""Notification policy: whether to mail, what to say and what to attach."""

import logging
from collections.abc import Iterable
from dataclasses import replace
from html import escape
from pathlib import Path

from pydantic import validate_email

from ..config import SendMailConfig, SendWhen
from ..domain.models import (
    MailMessage,
    NotificationDecision,
    Priority,
    RunReport,
    SmtpCredential,
)
from ..errors import ConfigurationError, NotificationError
from ..ports.filesystem import FileSystemPort
from ..ports.mail import MailPort

logger = logging.getLogger(__name__)

TRUNCATION_NOTICE = (
    "<p><b>Attachments truncated:</b> the total size limit of {limit} bytes "
    "was reached, {skipped} file(s) not attached.</p>"
)


def pluralize(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def should_send(
    when: SendWhen | str,
    result_count: int,
    error_count: int,
    system_error_count: int,
) -> bool:
    """Evaluate the send policy.

    Raises ConfigurationError for an unknown mode.
    """
    has_errors = error_count > 0 or system_error_count > 0

    if when == SendWhen.NEVER:
        return False
    elif when == SendWhen.ALWAYS:
        return True
    elif when == SendWhen.ON_ERROR:
        return has_errors
    elif when == SendWhen.ON_ERROR_OR_ACTION:
        return has_errors or result_count > 0
    else:
        raise ConfigurationError(f"Unknown sendMail.when value: {when}")


def compose_subject(result_count: int, total_errors: int, suffix: str) -> str:
    """``3 actions, 1 error, <suffix>``; errors only when present."""
    parts = [pluralize(result_count, "action")]
    if total_errors:
        parts.append(pluralize(total_errors, "error"))
    if suffix:
        parts.append(suffix)
    return ", ".join(parts)


def decide(
    policy: SendMailConfig,
    result_count: int,
    error_count: int,
    system_error_count: int,
) -> NotificationDecision:
    """Decide whether to notify and build subject, body and priority."""
    total_errors = error_count + system_error_count

    body = (
        f"{policy.body}"
        f"<p>{pluralize(result_count, 'action')}, "
        f"{pluralize(error_count, 'action error')}, "
        f"{pluralize(system_error_count, 'system error')}.</p>"
    )

    return NotificationDecision(
        should_send=should_send(policy.when, result_count, error_count, system_error_count),
        subject=compose_subject(result_count, total_errors, policy.subject),
        body=body,
        priority=Priority.HIGH if total_errors else Priority.NORMAL,
    )


def render_report_html(report: RunReport) -> str:
    """HTML listing of the errors in a report, values escaped."""
    parts: list[str] = []

    if report.system_errors:
        parts.append("<h3>System errors</h3><ul>")
        for error in report.system_errors:
            parts.append(
                f"<li>{error.timestamp:%Y-%m-%d %H:%M:%S} - {escape(error.message)}</li>"
            )
        parts.append("</ul>")

    if report.action_errors:
        parts.append("<h3>Action errors</h3><table>")
        parts.append("<tr><th>Source folder</th><th>File</th><th>Error</th></tr>")
        for result in report.action_errors:
            parts.append(
                f"<tr><td>{escape(str(result.source_folder))}</td>"
                f"<td>{escape(result.source_file_name)}</td>"
                f"<td>{escape(result.error or '')}</td></tr>"
            )
        parts.append("</table>")

    return "".join(parts)


def assemble_attachments(
    decision: NotificationDecision,
    candidates: Iterable[Path],
    fs: FileSystemPort,
    max_total_bytes: int,
) -> NotificationDecision:
    """Attach candidates in sorted order within a total size budget.

    Folders and missing files are skipped with a warning. The first file
    that would make the total meet or exceed the budget stops assembly;
    the files attached so far are kept and a notice is added to the body.
    """
    sized: list[tuple[Path, int]] = []
    for path in sorted(set(candidates)):
        try:
            if not fs.exists(path):
                logger.warning(f"Attachment not found, skipped: {path}")
                continue
            metadata = fs.file_metadata(path)
        except OSError as e:
            logger.warning(f"Attachment not readable, skipped: {path}: {e}")
            continue

        if not metadata.is_file:
            logger.warning(f"Attachment is a folder, skipped: {path}")
            continue
        sized.append((path, metadata.size))

    selected: list[Path] = []
    total = 0
    for index, (path, size) in enumerate(sized):
        if total + size >= max_total_bytes:
            skipped = len(sized) - index
            logger.warning(
                f"Attachment size limit of {max_total_bytes} bytes reached at {path.name}, "
                f"{skipped} file(s) not attached"
            )
            notice = TRUNCATION_NOTICE.format(limit=max_total_bytes, skipped=skipped)
            return replace(decision, attachments=tuple(selected), body=decision.body + notice)

        selected.append(path)
        total += size

    return replace(decision, attachments=tuple(selected))


def _check_address(address: str) -> None:
    try:
        validate_email(address)
    except ValueError as e:
        raise NotificationError(f"Invalid email address '{address}': {e}") from e


def build_message(policy: SendMailConfig, decision: NotificationDecision) -> MailMessage:
    """Turn a positive decision into a deliverable message.

    Raises NotificationError when no recipient is configured or an
    address is malformed.
    """
    to = tuple(a.strip() for a in policy.to if a.strip())
    bcc = tuple(a.strip() for a in policy.bcc if a.strip())

    if not to and not bcc:
        raise NotificationError("No mail recipients configured: 'to' and 'bcc' are both empty")
    if not policy.from_address:
        raise NotificationError("No sender address configured: 'from' is empty")

    for address in (policy.from_address, *to, *bcc):
        _check_address(address)

    smtp = policy.smtp
    credential = None
    if smtp.user_name:
        credential = SmtpCredential(user_name=smtp.user_name, password=smtp.password or "")

    return MailMessage(
        from_address=policy.from_address,
        from_display_name=policy.from_display_name,
        to=to,
        bcc=bcc,
        subject=decision.subject,
        html_body=decision.body,
        attachments=decision.attachments,
        priority=decision.priority,
        smtp_server_name=smtp.server_name,
        smtp_port=smtp.port,
        connection_type=smtp.connection_type.value,
        credential=credential,
    )


def send_notification(
    policy: SendMailConfig,
    decision: NotificationDecision,
    mailer: MailPort,
) -> MailMessage | None:
    """Send the decision through the mail port when it says so."""
    if not decision.should_send:
        logger.info("No mail sent: send policy not met")
        return None

    message = build_message(policy, decision)
    mailer.send(message)
    logger.info(
        f"Mail sent to {', '.join(message.to + message.bcc)}: '{message.subject}'"
    )
    return message
