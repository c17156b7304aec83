from typing import Any, Mapping

from .constants import DEFAULT_EVENT_TYPE, EventType, ImpactLevel
from .errors import InvalidEnumError, MissingFieldError
from .models import Event


def _is_filled(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _parse_enum(enum_cls, value, field: str, label: str):
    if value is None or value == "":
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidEnumError(field, label, [member.value for member in enum_cls])


def classify(payload: Mapping[str, Any]) -> Event:
    """Valida o payload do webhook e devolve o Event normalizado.

    Levanta MissingFieldError quando subject/content faltam ou estão vazios e
    InvalidEnumError quando eventType/impactLevel não pertencem às enumerações.
    Só eventType recebe valor padrão (INFO); os demais campos passam intactos.
    """
    if not isinstance(payload, Mapping):
        raise MissingFieldError("Subject and content are required")

    subject = payload.get("subject")
    content = payload.get("content")
    if not _is_filled(subject) or not _is_filled(content):
        raise MissingFieldError("Subject and content are required")

    event_type = _parse_enum(EventType, payload.get("eventType"), "eventType", "Event type")
    impact_level = _parse_enum(ImpactLevel, payload.get("impactLevel"), "impactLevel", "Impact level")

    return Event(
        subject=subject,
        content=content,
        event_type=event_type or DEFAULT_EVENT_TYPE,
        to=payload.get("to"),
        impact_level=impact_level,
        source_application=payload.get("sourceApplication"),
        metadata=payload.get("metadata"),
        attachments=payload.get("attachments"),
        custom_credentials=payload.get("customCredentials"),
    )
