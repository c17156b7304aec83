import json
import re
from datetime import datetime, timezone

_LINE_BREAKS = re.compile(r'[\r\n]+')


def utc_now():
    return datetime.now(timezone.utc)


def utc_timestamp():
    return utc_now().isoformat().replace("+00:00", "Z")


def single_line(value):
    # cabeçalhos de e-mail não aceitam CR/LF
    return _LINE_BREAKS.sub(' ', str(value)).strip()


def split_addresses(value):
    """Aceita string (com vírgulas) ou lista de endereços e devolve lista limpa."""
    if value is None:
        return []
    if isinstance(value, str):
        candidates = value.split(',')
    elif isinstance(value, (list, tuple)):
        candidates = value
    else:
        candidates = [value]
    addresses = [single_line(c) for c in candidates if c is not None]
    return [a for a in addresses if a]


def format_metadata_value(value):
    if isinstance(value, str):
        return value
    # valores vindos do JSON (null, true, listas...) voltam na forma JSON
    try:
        return json.dumps(value, ensure_ascii=False, separators=(',', ':'), default=str)
    except (TypeError, ValueError):
        return str(value)
