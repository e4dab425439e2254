"""Mail adapter using smtplib."""

import logging
import mimetypes
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr

from ...config import ConnectionType
from ...domain.models import MailMessage, Priority
from ...errors import MailDeliveryError
from ...ports.mail import MailPort

logger = logging.getLogger(__name__)

SMTP_TIMEOUT = 60.0  # seconds


def build_email(message: MailMessage) -> EmailMessage:
    """Build the MIME message; Bcc stays out of the headers."""
    email = EmailMessage()
    email["From"] = formataddr((message.from_display_name or "", message.from_address))
    if message.to:
        email["To"] = ", ".join(message.to)
    email["Subject"] = message.subject

    if message.priority == Priority.HIGH:
        email["X-Priority"] = "1"
        email["Importance"] = "High"

    email.set_content("This message requires an HTML capable mail client.")
    email.add_alternative(message.html_body, subtype="html")

    for path in message.attachments:
        ctype, encoding = mimetypes.guess_type(path.name)
        if ctype is None or encoding is not None:
            ctype = "application/octet-stream"
        maintype, subtype = ctype.split("/", 1)
        email.add_attachment(
            path.read_bytes(), maintype=maintype, subtype=subtype, filename=path.name
        )

    return email


class SmtpMailAdapter(MailPort):
    """Mail implementation using an SMTP relay."""

    def send(self, message: MailMessage) -> None:
        recipients = [*message.to, *message.bcc]
        connection = ConnectionType(message.connection_type)
        logger.info(
            f"Sending mail via {message.smtp_server_name}:{message.smtp_port} "
            f"({connection.value}) to {len(recipients)} recipient(s)"
        )

        try:
            email = build_email(message)
            with self._connect(message, connection) as smtp:
                if message.credential is not None:
                    smtp.login(message.credential.user_name, message.credential.password)
                smtp.send_message(email, to_addrs=recipients)
        except (OSError, ValueError, smtplib.SMTPException) as e:
            raise MailDeliveryError(
                f"Failed sending mail via '{message.smtp_server_name}:{message.smtp_port}' "
                f"to '{', '.join(recipients)}': {e}"
            ) from e

    def _connect(self, message: MailMessage, connection: ConnectionType) -> smtplib.SMTP:
        context = ssl.create_default_context()

        if connection == ConnectionType.SSL_ON_CONNECT or (
            connection == ConnectionType.AUTO and message.smtp_port == 465
        ):
            return smtplib.SMTP_SSL(
                message.smtp_server_name, message.smtp_port, timeout=SMTP_TIMEOUT, context=context
            )

        smtp = smtplib.SMTP(message.smtp_server_name, message.smtp_port, timeout=SMTP_TIMEOUT)
        try:
            smtp.ehlo()
            if connection == ConnectionType.START_TLS:
                smtp.starttls(context=context)
                smtp.ehlo()
            elif connection in (ConnectionType.AUTO, ConnectionType.START_TLS_WHEN_AVAILABLE):
                if smtp.has_extn("starttls"):
                    smtp.starttls(context=context)
                    smtp.ehlo()
        except Exception:
            smtp.close()
            raise
        return smtp
