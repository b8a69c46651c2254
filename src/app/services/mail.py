"""Outgoing e-mail over SMTP."""

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from html import escape

from starlette.concurrency import run_in_threadpool

from app.config import Settings, settings
from app.core.exceptions import InternalError

logger = logging.getLogger(__name__)

SENDER_NAME = "Suporte do Sistema"


class Mailer:
    """Sends messages through the configured SMTP server.

    smtplib is blocking, so each send runs in Starlette's threadpool and
    opens its own connection.
    """

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        use_ssl: bool = False,
        starttls: bool = True,
        timeout: int = 30,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.starttls = starttls
        self.timeout = timeout

    @classmethod
    def from_settings(cls, config: Settings) -> "Mailer":
        return cls(
            host=config.smtp_host,
            port=config.smtp_port,
            sender=config.email_from,
            username=config.smtp_user,
            password=config.smtp_password,
            use_ssl=config.smtp_ssl,
            starttls=config.smtp_starttls,
            timeout=config.smtp_timeout,
        )

    def build_message(self, to: str, subject: str, text: str, html: str | None = None) -> EmailMessage:
        message = EmailMessage()
        message["From"] = formataddr((SENDER_NAME, self.sender))
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid(domain=self.sender.rsplit("@", 1)[-1])
        message.set_content(text)
        if html:
            message.add_alternative(html, subtype="html")
        return message

    def _connect(self) -> smtplib.SMTP:
        if self.use_ssl:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        conn = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        if self.starttls:
            conn.starttls()
        return conn

    def _send_sync(self, message: EmailMessage) -> None:
        with self._connect() as conn:
            if self.username:
                conn.login(self.username, self.password or "")
            conn.send_message(message)

    async def send(self, to: str, subject: str, text: str, html: str | None = None) -> str:
        """Send a message and return its Message-ID.

        Raises:
            InternalError: MAIL_001 when the SMTP exchange fails
        """
        message = self.build_message(to, subject, text, html)
        try:
            await run_in_threadpool(self._send_sync, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(
                "Mail delivery failed",
                extra={"error_type": type(e).__name__, "smtp_host": self.host},
            )
            raise InternalError("MAIL_001") from e

        logger.info("Mail sent", extra={"subject": subject})
        return message["Message-ID"]


def password_reset_email(name: str, reset_url: str, expire_minutes: int) -> tuple[str, str, str]:
    """Subject, plain-text body and HTML body of the recovery e-mail."""
    subject = "Recuperação de Senha"
    text = (
        f"Olá, {name}.\n\n"
        "Você solicitou a recuperação de senha. Use o link abaixo para definir uma nova senha:\n"
        f"{reset_url}\n\n"
        f"O link expira em {expire_minutes} minutos. Se você não fez esta solicitação, ignore este e-mail.\n"
    )
    html = (
        "<h2>Recuperação de Senha</h2>"
        f"<p>Olá, {escape(name)}. Você solicitou a recuperação de senha.</p>"
        f'<p><a href="{reset_url}">Clique aqui para definir uma nova senha</a></p>'
        f"<p>O link expira em {expire_minutes} minutos. "
        "Se você não fez esta solicitação, ignore este e-mail.</p>"
    )
    return subject, text, html


def get_mailer() -> Mailer:
    return Mailer.from_settings(settings)
