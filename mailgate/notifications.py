"""Variantes de notificação por severidade (ERROR, WARNING, SUCCESS, INFO).

Cada variante sabe montar a mensagem final a partir de um Event já validado e
qual método do Mailer deve ser usado para enviá-la. Para adicionar uma nova
severidade basta registrar uma nova subclasse com ``register_notification``.
"""
from datetime import datetime
from typing import Dict, Optional, Type

from .config import GatewayConfig
from .constants import EVENT_TEMPLATES, EventType
from .formatters import format_html_body, format_subject, format_text_body
from .models import ComposedMessage, Event
from .utils import split_addresses, utc_now

_REGISTRY: Dict[EventType, Type["Notification"]] = {}


def register_notification(event_type: EventType):
    def decorator(cls):
        cls.event_type = event_type
        _REGISTRY[event_type] = cls
        return cls
    return decorator


class Notification:
    event_type: EventType = EventType.INFO
    send_method: str = "send_info"

    def __init__(self, event: Event, config: GatewayConfig):
        self.event = event
        self.config = config

    @property
    def template(self) -> Dict:
        return EVENT_TEMPLATES[self.event_type]

    def recipients(self):
        recipients = split_addresses(self.event.to)
        if not recipients:
            recipients = split_addresses(self.config.default_recipient)
        return recipients

    def compose(self, timestamp: Optional[datetime] = None) -> ComposedMessage:
        timestamp = timestamp or utc_now()
        template = self.template
        return ComposedMessage(
            recipients=self.recipients(),
            subject=format_subject(self.event, template),
            text_body=format_text_body(self.event, template, timestamp),
            html_body=format_html_body(self.event, template, timestamp),
            credentials=self.config.credentials.with_override(self.event.custom_credentials),
            event_type=self.event_type,
            priority=template["priority"],
            attachments=list(self.event.attachments or []),
        )

    def send(self, mailer, message: ComposedMessage):
        return getattr(mailer, self.send_method)(message)


@register_notification(EventType.ERROR)
class ErrorNotification(Notification):
    send_method = "send_error_alert"


@register_notification(EventType.WARNING)
class WarningNotification(Notification):
    send_method = "send_warning"


@register_notification(EventType.SUCCESS)
class SuccessNotification(Notification):
    send_method = "send_success_notification"


@register_notification(EventType.INFO)
class InfoNotification(Notification):
    send_method = "send_info"


def notification_for(event: Event, config: GatewayConfig) -> Notification:
    cls = _REGISTRY.get(event.event_type, InfoNotification)
    return cls(event, config)


def compose(event: Event, config: GatewayConfig) -> ComposedMessage:
    return notification_for(event, config).compose()
