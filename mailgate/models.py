from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from .config import Credentials
from .constants import EventType, ImpactLevel


class DispatchState(str, Enum):
    RECEIVED = "RECEIVED"
    VALIDATED = "VALIDATED"
    ACKNOWLEDGED = "ACKNOWLEDGED"
    REJECTED = "REJECTED"
    ERRORED = "ERRORED"
    SCHEDULED = "SCHEDULED"
    SENDING = "SENDING"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class Event:
    subject: str
    content: str
    event_type: EventType = EventType.INFO
    to: Optional[Union[str, List[str]]] = None
    impact_level: Optional[ImpactLevel] = None
    source_application: Optional[str] = None
    metadata: Optional[Mapping[str, Any]] = None
    attachments: Optional[List[Any]] = None
    custom_credentials: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class ComposedMessage:
    recipients: List[str]
    subject: str
    text_body: str
    html_body: str
    credentials: Credentials
    event_type: EventType
    priority: str = "normal"
    attachments: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class AckResult:
    status_code: int
    body: Dict[str, Any]
    state: DispatchState
    event_type: Optional[EventType] = None

    @property
    def accepted(self) -> bool:
        return self.state == DispatchState.ACKNOWLEDGED
