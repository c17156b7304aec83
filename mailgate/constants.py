from enum import Enum


class EventType(str, Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    SUCCESS = "SUCCESS"
    INFO = "INFO"


class ImpactLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


DEFAULT_EVENT_TYPE = EventType.INFO
UNKNOWN_SOURCE = "Unknown Source"

ACCEPTED_MESSAGE = "Email will be sent in the background"

# Seções possíveis do corpo: impact, source, content, metadata
EVENT_TEMPLATES = {
    EventType.ERROR: {
        "tag": "[ERROR]",
        "emoji": "🚨",
        "headline": "Error Alert",
        "color": "#d32f2f",
        "priority": "high",
        "sections": ("impact", "source", "content", "metadata"),
    },
    EventType.WARNING: {
        "tag": "[WARNING]",
        "emoji": "⚠️",
        "headline": "Warning",
        "color": "#f57c00",
        "priority": "high",
        "sections": ("impact", "source", "content", "metadata"),
    },
    EventType.SUCCESS: {
        "tag": "[SUCCESS]",
        "emoji": "✅",
        "headline": "Success Notification",
        "color": "#388e3c",
        "priority": "normal",
        "sections": ("source", "content", "impact", "metadata"),
    },
    EventType.INFO: {
        "tag": "[INFO]",
        "emoji": "ℹ️",
        "headline": "Information",
        "color": "#1976d2",
        "priority": "low",
        "sections": ("source", "content", "metadata", "impact"),
    },
}

# Cabeçalhos de prioridade por nível (X-Priority / Importance)
PRIORITY_HEADERS = {
    "high": {"X-Priority": "1 (Highest)", "Importance": "high"},
    "normal": {"X-Priority": "3 (Normal)", "Importance": "normal"},
    "low": {"X-Priority": "5 (Lowest)", "Importance": "low"},
}
