import logging
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor, wait as wait_futures
from typing import Any, Optional

from .classifier import classify
from .config import GatewayConfig
from .constants import ACCEPTED_MESSAGE
from .errors import DeliveryError, ValidationError
from .logging_setup import RequestAdapter
from .models import AckResult, DispatchState, Event
from .notifications import notification_for

logger = logging.getLogger(__name__)


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]


def unexpected_error(exc: Exception) -> AckResult:
    return AckResult(
        status_code=500,
        body={"error": "Internal server error", "details": str(exc)},
        state=DispatchState.ERRORED,
    )


class DispatchEngine:
    """Valida o evento, responde de imediato e agenda composição + envio em background.

    O envio roda num ThreadPoolExecutor próprio; o chamador nunca observa o
    resultado (DELIVERED/FAILED), que só aparece nos logs.
    """

    def __init__(self, config: GatewayConfig, mailer, max_workers: Optional[int] = None):
        self.config = config
        self.mailer = mailer
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or config.dispatch_workers,
            thread_name_prefix="mailgate-dispatch",
        )
        self._pending = set()
        self._lock = threading.Lock()

    def dispatch(self, payload: Any, request_id: Optional[str] = None) -> AckResult:
        request_id = request_id or new_request_id()
        log = RequestAdapter(logger, {"request_id": request_id})
        log.debug("Webhook %s", DispatchState.RECEIVED.value)
        try:
            try:
                event = classify(payload)
            except ValidationError as exc:
                log.info("Webhook %s: %s (%s)", DispatchState.REJECTED.value, exc.kind, exc.details)
                return AckResult(status_code=400, body=exc.to_dict(), state=DispatchState.REJECTED)

            log.debug("Webhook %s as %s", DispatchState.VALIDATED.value, event.event_type.value)
            self.schedule(event, request_id)
            return AckResult(
                status_code=202,
                body={"message": ACCEPTED_MESSAGE, "eventType": event.event_type.value},
                state=DispatchState.ACKNOWLEDGED,
                event_type=event.event_type,
            )
        except Exception as exc:
            log.exception("Error processing email webhook")
            return unexpected_error(exc)

    def schedule(self, event: Event, request_id: str):
        future = self._executor.submit(self._deliver, event, request_id)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        RequestAdapter(logger, {"request_id": request_id}).debug("Email %s", DispatchState.SCHEDULED.value)
        return future

    def _forget(self, future):
        with self._lock:
            self._pending.discard(future)

    def _deliver(self, event: Event, request_id: str) -> DispatchState:
        log = RequestAdapter(logger, {"request_id": request_id})
        record = {
            "event_type": event.event_type.value,
            "subject": event.subject,
            "source_application": event.source_application,
        }
        try:
            notification = notification_for(event, self.config)
            message = notification.compose()
            record["recipients"] = list(message.recipients)
            log.debug("Email %s via %s", DispatchState.SENDING.value, notification.send_method)
            message_id = notification.send(self.mailer, message)
        except DeliveryError as exc:
            log.error("Background email sending failed: [%s] %s: %s",
                      event.event_type.value, event.subject, exc,
                      extra=dict(record, outcome=DispatchState.FAILED.value, reason=str(exc)))
            return DispatchState.FAILED
        except Exception as exc:
            log.exception("Background email sending failed: [%s] %s",
                          event.event_type.value, event.subject,
                          extra=dict(record, outcome=DispatchState.FAILED.value, reason=str(exc)))
            return DispatchState.FAILED

        log.info("Email sent successfully: [%s] %s", event.event_type.value, event.subject,
                 extra=dict(record, outcome=DispatchState.DELIVERED.value, message_id=message_id))
        return DispatchState.DELIVERED

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def join(self, timeout: Optional[float] = None) -> bool:
        """Aguarda os envios em andamento; devolve True se todos terminaram."""
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait_futures(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)
