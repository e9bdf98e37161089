import logging
import smtplib
from email.message import EmailMessage
from threading import Lock
from typing import Optional

from purdetall.services.errors import MailDeliveryError

logger = logging.getLogger(__name__)


class MailSender:
    def __init__(
        self,
        host: str,
        port: int = 587,
        user: str = "",
        password: str = "",
        from_address: str = "",
        timeout: float = 15.0,
    ) -> None:
        self._lock = Lock()
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.from_address = from_address or user
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.host)

    def send(self, to_address: str, subject: str, text_body: str, html_body: Optional[str] = None) -> None:
        if not self.enabled:
            logger.warning("Mail sender disabled: EMAIL_HOST not set")
            raise MailDeliveryError("Error al enviar el mensaje")

        try:
            message = EmailMessage()
            message["Subject"] = subject
            message["From"] = self.from_address
            message["To"] = to_address
            message.set_content(text_body)
            if html_body:
                message.add_alternative(html_body, subtype="html")
        except (ValueError, TypeError) as exc:
            logger.exception("Could not compose mail to %s", to_address)
            raise MailDeliveryError("Error al enviar el mensaje") from exc

        with self._lock:
            try:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                    server.ehlo()
                    if server.has_extn("starttls"):
                        server.starttls()
                        server.ehlo()
                    if self.user:
                        server.login(self.user, self.password)
                    server.send_message(message)
            except (smtplib.SMTPException, OSError) as exc:
                logger.exception("Mail send failed to %s", to_address)
                raise MailDeliveryError("Error al enviar el mensaje") from exc
        logger.info("Mail sent to %s", to_address)
