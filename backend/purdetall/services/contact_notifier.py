import html
import logging
from typing import Tuple

from purdetall.models import ContactRequest
from purdetall.services.config_store import DEFAULT_CONTACT_EMAIL, ConfigStore
from purdetall.services.errors import field_error, raise_if_errors
from purdetall.services.mail_sender import MailSender
from purdetall.services.validators import blank_to_none, is_valid_email

logger = logging.getLogger(__name__)

NO_SUBJECT = "Sin asunto"


def compose_contact_message(request: ContactRequest) -> Tuple[str, str, str]:
    """Return (subject, text body, html body) for a contact form submission."""
    subject_line = blank_to_none(request.subject) or NO_SUBJECT
    phone = blank_to_none(request.phone)

    text_lines = [
        "Nuevo mensaje de contacto - PurDetall",
        "",
        f"Nombre: {request.name.strip()}",
        f"Email: {request.email.strip()}",
    ]
    if phone:
        text_lines.append(f"Teléfono: {phone}")
    text_lines.extend([f"Asunto: {subject_line}", "", "Mensaje:", request.message.strip()])

    html_parts = [
        "<h2>Nuevo mensaje de contacto - PurDetall</h2>",
        f"<p><strong>Nombre:</strong> {html.escape(request.name.strip())}</p>",
        f"<p><strong>Email:</strong> {html.escape(request.email.strip())}</p>",
    ]
    if phone:
        html_parts.append(f"<p><strong>Teléfono:</strong> {html.escape(phone)}</p>")
    html_parts.extend(
        [
            f"<p><strong>Asunto:</strong> {html.escape(subject_line)}</p>",
            "<h3>Mensaje:</h3>",
            "<p>" + html.escape(request.message.strip()).replace("\n", "<br>") + "</p>",
            "<hr>",
            "<small>Este mensaje fue enviado desde el formulario de contacto de PurDetall</small>",
        ]
    )
    return f"Nuevo mensaje de contacto: {subject_line}", "\n".join(text_lines), "\n".join(html_parts)


class ContactNotifier:
    def __init__(self, config: ConfigStore, mail_sender: MailSender) -> None:
        self.config = config
        self.mail_sender = mail_sender

    def send(self, request: ContactRequest) -> str:
        errors = []
        if not request.name.strip():
            errors.append(field_error("name", "El nombre es requerido"))
        if not is_valid_email(request.email.strip()):
            errors.append(field_error("email", "Email válido requerido"))
        if not request.message.strip():
            errors.append(field_error("message", "El mensaje es requerido"))
        if request.subject and ("\r" in request.subject or "\n" in request.subject):
            errors.append(field_error("subject", "El asunto no puede contener saltos de línea"))
        raise_if_errors(errors)

        recipient = self.config.get_value("contact_email", DEFAULT_CONTACT_EMAIL)
        subject, text_body, html_body = compose_contact_message(request)
        # No retry; a failed dispatch surfaces as MailDeliveryError.
        self.mail_sender.send(recipient, subject, text_body, html_body=html_body)
        logger.info("Contact message forwarded to %s", recipient)
        return recipient
