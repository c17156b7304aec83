import threading

from mailgate.config import Credentials, GatewayConfig


def make_config(**overrides):
    params = dict(
        credentials=Credentials(host='smtp.test.local', port=587, user='mailer', password='secret',
                                sender='alerts@test.local'),
        default_recipient='ops@test.local',
        dispatch_workers=2,
    )
    params.update(overrides)
    return GatewayConfig(**params)


class RecordingMailer:
    """Dublê do Mailer que registra cada chamada de envio."""

    def __init__(self, connected=True, connect_error=None, send_error=None):
        self.connected = connected
        self.connect_error = connect_error
        self.send_error = send_error
        self.calls = []
        self._lock = threading.Lock()

    def _record(self, method, message):
        with self._lock:
            self.calls.append((method, message))
        if self.send_error is not None:
            raise self.send_error
        return f'<{len(self.calls)}@test.local>'

    def send_error_alert(self, message):
        return self._record('send_error_alert', message)

    def send_warning(self, message):
        return self._record('send_warning', message)

    def send_success_notification(self, message):
        return self._record('send_success_notification', message)

    def send_info(self, message):
        return self._record('send_info', message)

    def verify_connection(self):
        if self.connect_error is not None:
            raise self.connect_error
        return self.connected

    def methods(self):
        return [method for method, _ in self.calls]
