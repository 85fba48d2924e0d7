"""
Status email notifications for submitting users.
"""

import logging
import smtplib
from email.message import EmailMessage
from typing import Dict

try:
    from config import SmtpSettings
    from errors import EmailDeliveryError
except ImportError:
    # Adjust path when imported as a package
    from submission_processor.config import SmtpSettings
    from submission_processor.errors import EmailDeliveryError

logger = logging.getLogger(__name__)


class RecipientDirectory:
    """Resolves user IDs to email addresses."""

    def __init__(
        self,
        mapping: Dict[str, str] = None,
        domain: str = None,
        default_recipient: str = None
    ):
        """Initialize the directory.

        Args:
            mapping: Explicit user ID -> address entries
            domain: Mail domain used to build "{user_id}@{domain}"
            default_recipient: Address used when nothing else resolves
        """
        self.mapping = dict(mapping or {})
        self.domain = domain
        self.default_recipient = default_recipient

    def resolve(self, user_id: str) -> str:
        if user_id in self.mapping:
            return self.mapping[user_id]

        if "@" in user_id:
            return user_id

        if self.domain:
            return f"{user_id}@{self.domain}"

        if self.default_recipient:
            return self.default_recipient

        raise EmailDeliveryError(f"No email address known for user {user_id}")


class EmailNotifier:
    """Sends plain-text status emails through an SMTP relay."""

    def __init__(self, settings: SmtpSettings, directory: RecipientDirectory):
        self.settings = settings
        self.directory = directory

    def build_message(self, recipient: str, subject: str, message: str) -> EmailMessage:
        email = EmailMessage()
        email["From"] = self.settings.from_address
        email["To"] = recipient
        email["Subject"] = subject
        email.set_content(message)
        return email

    def _connect(self) -> smtplib.SMTP:
        if self.settings.use_ssl:
            return smtplib.SMTP_SSL(self.settings.host, self.settings.port)
        return smtplib.SMTP(self.settings.host, self.settings.port)

    def send(self, user_id: str, subject: str, message: str) -> str:
        """Send one status email to the user.

        Args:
            user_id: Submitting user, resolved through the directory
            subject: Email subject
            message: Plain-text body

        Returns:
            The recipient address
        """
        recipient = self.directory.resolve(user_id)
        email = self.build_message(recipient, subject, message)

        try:
            with self._connect() as smtp:
                if self.settings.use_tls and not self.settings.use_ssl:
                    smtp.starttls()
                if self.settings.username:
                    smtp.login(self.settings.username, self.settings.password)
                smtp.send_message(email)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Error sending email to %s: %s", recipient, e)
            raise EmailDeliveryError(f"Failed to send email to {recipient}: {e}") from e

        logger.info("Email '%s' sent to %s", subject, recipient)
        return recipient
