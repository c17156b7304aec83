import base64
import binascii
import logging
import mimetypes
import smtplib
from contextlib import contextmanager
from email.message import EmailMessage
from email.utils import formatdate, make_msgid, parseaddr
from typing import Mapping, Optional

import requests

from .config import Credentials, GatewayConfig
from .constants import PRIORITY_HEADERS
from .errors import DeliveryError
from .models import ComposedMessage

logger = logging.getLogger(__name__)


def _split_content_type(content_type: str):
    maintype, _, subtype = (content_type or '').partition('/')
    if not maintype or not subtype:
        return 'application', 'octet-stream'
    return maintype.strip(), subtype.split(';')[0].strip()


def load_attachment(descriptor, timeout: float = 30.0):
    """Converte um descritor de anexo em (filename, bytes, content_type).

    Aceita ``content`` (texto ou base64 com ``encoding: base64``) ou ``path``/``href``
    apontando para uma URL http(s). Caminhos locais nunca são lidos.
    """
    if not isinstance(descriptor, Mapping):
        raise DeliveryError(f"Invalid attachment descriptor: {descriptor!r}")

    filename = descriptor.get('filename') or descriptor.get('name') or 'attachment'
    content_type = descriptor.get('contentType') or descriptor.get('content_type')
    content = descriptor.get('content')
    url = descriptor.get('path') or descriptor.get('href')

    if content is not None:
        if isinstance(content, bytes):
            data = content
        elif isinstance(content, str):
            if str(descriptor.get('encoding', '')).lower() == 'base64':
                try:
                    data = base64.b64decode(content, validate=True)
                except (binascii.Error, ValueError) as exc:
                    raise DeliveryError(f"Attachment '{filename}' is not valid base64: {exc}") from exc
            else:
                data = content.encode('utf-8')
        else:
            raise DeliveryError(f"Attachment '{filename}' has unsupported content type {type(content).__name__}")
    elif url:
        if not str(url).lower().startswith(('http://', 'https://')):
            raise DeliveryError(f"Attachment '{filename}' path must be an http(s) URL")
        try:
            resp = requests.get(url, timeout=timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise DeliveryError(f"Failed to download attachment '{filename}': {exc}") from exc
        data = resp.content
        content_type = content_type or resp.headers.get('Content-Type')
    else:
        raise DeliveryError(f"Attachment '{filename}' has neither content nor path")

    if not content_type:
        content_type = mimetypes.guess_type(filename)[0] or 'application/octet-stream'
    return filename, data, content_type


class SMTPMailer:
    """Mailer SMTP: uma sessão nova por envio, então envios concorrentes não se bloqueiam."""

    def __init__(self, config: GatewayConfig):
        self.credentials = config.credentials
        self.timeout = config.smtp_timeout_seconds

    @contextmanager
    def _session(self, credentials: Credentials):
        smtp_class = smtplib.SMTP_SSL if credentials.secure else smtplib.SMTP
        with smtp_class(credentials.host, credentials.port, timeout=self.timeout) as server:
            if not credentials.secure:
                server.ehlo()
                if server.has_extn('starttls'):
                    server.starttls()
                    server.ehlo()
            if credentials.user and credentials.password:
                server.login(credentials.user, credentials.password)
            yield server

    def build_message(self, message: ComposedMessage) -> EmailMessage:
        sender = message.credentials.sender or message.credentials.user
        if not sender:
            raise DeliveryError("No sender address configured")

        msg = EmailMessage()
        msg['From'] = sender
        msg['To'] = ', '.join(message.recipients)
        msg['Subject'] = message.subject
        msg['Date'] = formatdate(localtime=False)
        msg['Message-ID'] = make_msgid(domain=parseaddr(sender)[1].rpartition('@')[2] or None)
        msg['X-Event-Type'] = message.event_type.value
        for header, value in PRIORITY_HEADERS.get(message.priority, {}).items():
            msg[header] = value

        msg.set_content(message.text_body)
        msg.add_alternative(message.html_body, subtype='html')

        for descriptor in message.attachments:
            filename, data, content_type = load_attachment(descriptor, timeout=self.timeout)
            maintype, subtype = _split_content_type(content_type)
            msg.add_attachment(data, maintype=maintype, subtype=subtype, filename=filename)
        return msg

    def send(self, message: ComposedMessage) -> str:
        if not message.recipients:
            raise DeliveryError("No recipients defined for message")
        credentials = message.credentials
        if not credentials.host:
            raise DeliveryError("SMTP host is not configured")

        try:
            msg = self.build_message(message)
            with self._session(credentials) as server:
                server.send_message(msg, to_addrs=message.recipients)
        except ValueError as exc:
            # cabeçalho ou anexo que o pacote email recusa
            raise DeliveryError(f"Invalid message: {exc}") from exc
        except (smtplib.SMTPException, OSError) as exc:
            raise DeliveryError(f"SMTP delivery failed: {exc}") from exc

        logger.debug("SMTP accepted message %s for %d recipient(s)", msg['Message-ID'], len(message.recipients))
        return msg['Message-ID']

    def send_error_alert(self, message: ComposedMessage) -> str:
        return self.send(message)

    def send_warning(self, message: ComposedMessage) -> str:
        return self.send(message)

    def send_success_notification(self, message: ComposedMessage) -> str:
        return self.send(message)

    def send_info(self, message: ComposedMessage) -> str:
        return self.send(message)

    def verify_connection(self, credentials: Optional[Credentials] = None) -> bool:
        """Sonda de conectividade; exceções de conexão/autenticação são propagadas."""
        credentials = credentials or self.credentials
        if not credentials.host:
            logger.debug("SMTP host not configured, connection check skipped")
            return False
        with self._session(credentials) as server:
            code, _ = server.noop()
        return code == 250
