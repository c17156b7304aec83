from datetime import datetime
from html import escape
from typing import Dict, List, Mapping, Optional, Tuple

from .constants import UNKNOWN_SOURCE
from .models import Event
from .utils import format_metadata_value, single_line


def format_subject(event: Event, template: Dict) -> str:
    return f"{template['tag']} {single_line(event.subject)}"


def format_impact(event: Event) -> Optional[str]:
    # Sem impactLevel a anotação é omitida por completo
    if event.impact_level is None:
        return None
    return f"Impact Level: {event.impact_level.value}"


def format_source(event: Event) -> str:
    source = event.source_application
    if source is None or str(source).strip() == "":
        source = UNKNOWN_SOURCE
    return f"Source: {source}"


def flatten_metadata(metadata) -> List[Tuple[str, str]]:
    if not isinstance(metadata, Mapping):
        return []
    return [(str(key), format_metadata_value(value)) for key, value in metadata.items()]


def _text_section(name: str, event: Event) -> List[str]:
    if name == "impact":
        impact = format_impact(event)
        return [impact] if impact else []
    if name == "source":
        return [format_source(event)]
    if name == "content":
        return ["", event.content, ""]
    if name == "metadata":
        items = flatten_metadata(event.metadata)
        if not items:
            return []
        lines = ["Metadata:"]
        lines.extend(f"- {key}: {value}" for key, value in items)
        return lines
    return []


def format_footer_timestamp(timestamp: datetime) -> str:
    return timestamp.strftime("%Y-%m-%d %H:%M:%S UTC")


def format_text_body(event: Event, template: Dict, timestamp: datetime) -> str:
    lines = [f"{template['emoji']} {template['headline']}: {event.subject}", "=" * 50, ""]
    for section in template["sections"]:
        lines.extend(_text_section(section, event))
    lines.extend([
        "",
        f"Timestamp: {format_footer_timestamp(timestamp)}",
        "This is an automated notification. Please do not reply.",
    ])
    return "\n".join(lines)


def _html_section(name: str, event: Event) -> str:
    if name == "impact":
        impact = format_impact(event)
        return f"<p><strong>{escape(impact)}</strong></p>" if impact else ""
    if name == "source":
        return f"<p>{escape(format_source(event))}</p>"
    if name == "content":
        return f"<div style=\"white-space: pre-wrap; margin: 16px 0;\">{escape(event.content)}</div>"
    if name == "metadata":
        items = flatten_metadata(event.metadata)
        if not items:
            return ""
        rows = "".join(
            f"<tr><td style=\"padding: 2px 8px;\"><strong>{escape(key)}</strong></td>"
            f"<td style=\"padding: 2px 8px;\">{escape(value)}</td></tr>"
            for key, value in items
        )
        return f"<h3>Metadata</h3><table>{rows}</table>"
    return ""


def format_html_body(event: Event, template: Dict, timestamp: datetime) -> str:
    parts = [
        "<html><body style=\"font-family: Arial, sans-serif;\">",
        f"<div style=\"border-left: 6px solid {template['color']}; padding: 8px 16px;\">",
        f"<h2 style=\"color: {template['color']};\">{template['emoji']} "
        f"{escape(template['headline'])}: {escape(event.subject)}</h2>",
    ]
    for section in template["sections"]:
        html = _html_section(section, event)
        if html:
            parts.append(html)
    parts.extend([
        f"<p style=\"color: #777; font-size: 12px;\">Timestamp: {format_footer_timestamp(timestamp)}</p>",
        "</div></body></html>",
    ])
    return "".join(parts)
