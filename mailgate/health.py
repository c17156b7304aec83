import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

OPERATIONAL = "operational"
UNAVAILABLE = "unavailable"
ERROR = "error"

_STATUS_CODES = {OPERATIONAL: 200, UNAVAILABLE: 503, ERROR: 500}


@dataclass(frozen=True)
class StatusReport:
    status: str
    message: str

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self.status]

    def to_dict(self):
        return {"status": self.status, "message": self.message}


def check_status(mailer) -> StatusReport:
    # Apenas reporta; o despacho continua tentando enviar independente do resultado
    try:
        connected = mailer.verify_connection()
    except Exception as exc:
        logger.warning("Email service connection check failed: %s", exc)
        return StatusReport(ERROR, str(exc))

    if connected:
        return StatusReport(OPERATIONAL, "Email service is connected and operational")
    return StatusReport(UNAVAILABLE, "Email service is not connected")
