import logging


class RequestIdFilter(logging.Filter):
    """Garante que request_id sempre exista no LogRecord."""

    def filter(self, record):
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return True


class RequestAdapter(logging.LoggerAdapter):
    """Anexa o request_id a todo registro, inclusive no trabalho em background."""

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("request_id", self.extra.get("request_id", "-"))
        kwargs["extra"] = extra
        return msg, kwargs


def resolve_level(level, debug=False):
    if debug:
        return "DEBUG"
    name = str(level or "").strip().upper()
    # nível desconhecido (ex.: LOG_LEVEL=verbose) cai para INFO
    if not isinstance(logging.getLevelName(name), int):
        return "INFO"
    return name


def setup_logging(level="INFO", debug=False):
    resolved = resolve_level(level, debug)
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s req=%(request_id)s %(name)s - %(message)s",
    )
    for handler in logging.getLogger().handlers:
        handler.addFilter(RequestIdFilter())
    if not debug and resolved != str(level or "").strip().upper():
        logging.getLogger(__name__).warning("Unknown LOG_LEVEL %r, falling back to %s", level, resolved)
    return resolved
