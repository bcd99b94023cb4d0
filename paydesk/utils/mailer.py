"""Outbound email over SMTP."""

import logging
import smtplib
from email.message import EmailMessage

from paydesk.errors import DependencyError

logger = logging.getLogger("paydesk.mail")


class MailSession(object):
    """Opens one authenticated SMTP connection per message."""

    def __init__(self, host: str, port: int, username: str = "",
                 password: str = "", timeout: float = 10.0) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._timeout = timeout

    @property
    def sender(self) -> str:
        return self._username

    def _new_connection(self) -> smtplib.SMTP:
        return smtplib.SMTP(host=self._host, port=self._port,
                            timeout=self._timeout)

    def send_message(self, message: EmailMessage) -> None:
        try:
            with self._new_connection() as conn:
                conn.starttls()
                if self._username:
                    conn.login(self._username, self._password)
                conn.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.exception("Failed to send mail to %s", message["To"])
            raise DependencyError("Error sending email") from exc


def reset_message(sender: str, to: str, reset_link: str) -> EmailMessage:
    message = EmailMessage()
    message["From"] = sender
    message["To"] = to
    message["Subject"] = "Password Reset"
    message.set_content(f"Click the link to reset your password: {reset_link}")
    return message


def send_reset_email(mailer: MailSession, to: str, reset_link: str) -> None:
    mailer.send_message(reset_message(mailer.sender, to, reset_link))
    logger.info("Password reset mail sent to %s", to)
