"""
邮件通知渠道 - 通过 SMTP 发送预订通知
"""
import logging
import smtplib
from email.message import EmailMessage
from typing import Dict, Optional

from guesthouse_core.notification.channel import INotificationChannel

logger = logging.getLogger(__name__)


class EmailChannel(INotificationChannel):
    """SMTP 邮件通知渠道"""

    def __init__(
        self,
        smtp_host: str = "localhost",
        smtp_port: int = 587,
        smtp_user: str = "",
        smtp_password: str = "",
        sender_email: str = "",
        use_tls: bool = True,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.sender_email = sender_email or smtp_user
        self.use_tls = use_tls

    @classmethod
    def from_settings(cls, settings) -> "EmailChannel":
        """由应用配置构建"""
        return cls(
            smtp_host=settings.SMTP_HOST,
            smtp_port=settings.SMTP_PORT,
            smtp_user=settings.SMTP_USER,
            smtp_password=settings.SMTP_PASSWORD,
            sender_email=settings.MAIL_SENDER,
            use_tls=settings.SMTP_USE_TLS,
        )

    def build_message(self, recipient: str, subject: str, content: str,
                      extra: Optional[Dict] = None) -> EmailMessage:
        extra = extra or {}
        msg = EmailMessage()
        msg["From"] = self.sender_email
        msg["To"] = recipient
        msg["Subject"] = subject
        if extra.get("cc"):
            msg["Cc"] = extra["cc"]
        subtype = "html" if extra.get("content_type") == "html" else "plain"
        msg.set_content(content, subtype=subtype, charset="utf-8")
        return msg

    def send(
        self,
        recipient: str,
        subject: str,
        content: str,
        extra: Optional[Dict] = None,
    ) -> bool:
        """发送邮件，失败时返回 False"""
        if not recipient:
            logger.debug(f"Email skipped, no recipient: {subject}")
            return False
        try:
            msg = self.build_message(recipient, subject, content, extra)
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=10) as server:
                if self.use_tls:
                    server.starttls()
                if self.smtp_user:
                    server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg)
            logger.info(f"Email sent to {recipient}: {subject}")
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.warning(f"Failed to send email to {recipient}: {e}")
            return False

    def get_channel_type(self) -> str:
        return "email"
