import os
from dataclasses import dataclass, field
from typing import Mapping, Optional


def _env_bool(environ: Mapping[str, str], name: str, default: str = "false") -> bool:
    return environ.get(name, default).strip().lower() == "true"


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = (environ.get(name) or "").strip()
    if not raw:
        return default
    return int(raw)


@dataclass(frozen=True)
class Credentials:
    """Credenciais de transporte SMTP (padrão do processo ou override por envio)."""

    host: Optional[str] = None
    port: int = 587
    secure: bool = False
    user: Optional[str] = None
    password: Optional[str] = None
    sender: Optional[str] = None

    def with_override(self, override: Optional[Mapping]) -> "Credentials":
        """Resolve as credenciais de um envio a partir de ``customCredentials``.

        Sem override (ou override inválido) valem as credenciais do processo.
        Com override, user/pass/from vêm só dele: o login e a senha globais
        nunca seguem para outro envio. Apenas host, port e secure herdam o
        padrão do processo quando ausentes.
        """
        if not isinstance(override, Mapping) or not override:
            return self

        port = self.port
        raw_port = override.get("port")
        if raw_port not in (None, ""):
            try:
                port = int(raw_port)
            except (TypeError, ValueError):
                port = self.port

        secure = self.secure
        if "secure" in override:
            raw_secure = override.get("secure")
            if isinstance(raw_secure, str):
                secure = raw_secure.strip().lower() == "true"
            else:
                secure = bool(raw_secure)

        user = override.get("user") or None
        password = override.get("pass") or override.get("password") or None

        return Credentials(
            host=override.get("host") or self.host,
            port=port,
            secure=secure,
            user=user,
            password=password,
            sender=override.get("from") or user,
        )


@dataclass(frozen=True)
class GatewayConfig:
    port: int = 3000
    debug: bool = False
    log_level: str = "INFO"
    credentials: Credentials = field(default_factory=Credentials)
    default_recipient: Optional[str] = None
    webhook_secret: Optional[str] = None
    secret_header: str = "X-Webhook-Secret"
    smtp_timeout_seconds: float = 30.0
    dispatch_workers: int = 4

    @property
    def auth_enabled(self) -> bool:
        return bool(self.webhook_secret)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GatewayConfig":
        env = os.environ if environ is None else environ

        credentials = Credentials(
            host=env.get("SMTP_HOST") or None,
            port=_env_int(env, "SMTP_PORT", 587),
            secure=_env_bool(env, "SMTP_SECURE"),
            user=env.get("SMTP_USER") or None,
            password=env.get("SMTP_PASS") or None,
            sender=env.get("EMAIL_FROM") or env.get("SMTP_USER") or None,
        )

        # APP_PORT tem precedência; PORT é aceito por compatibilidade
        port = _env_int(env, "APP_PORT", _env_int(env, "PORT", 3000))

        return cls(
            port=port,
            debug=_env_bool(env, "DEBUG_MODE"),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            credentials=credentials,
            default_recipient=env.get("DEFAULT_RECIPIENT") or None,
            webhook_secret=env.get("WEBHOOK_SECRET") or None,
            secret_header=env.get("WEBHOOK_SECRET_HEADER") or "X-Webhook-Secret",
            smtp_timeout_seconds=float(env.get("SMTP_TIMEOUT_SECONDS") or 30),
            dispatch_workers=max(1, _env_int(env, "DISPATCH_WORKERS", 4)),
        )


def load_config() -> GatewayConfig:
    return GatewayConfig.from_env()
