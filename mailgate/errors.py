from typing import Optional


class GatewayError(Exception):
    """Base de todos os erros conhecidos do gateway."""


class ValidationError(GatewayError):
    """Payload rejeitado na validação (sempre visível ao chamador, HTTP 400)."""

    kind = "Validation failed"

    def __init__(self, details: str, field: Optional[str] = None):
        super().__init__(details)
        self.details = details
        self.field = field

    def to_dict(self):
        return {"error": self.kind, "details": self.details}


class MissingFieldError(ValidationError):
    kind = "Missing required fields"


class InvalidEnumError(ValidationError):
    def __init__(self, field: str, label: str, allowed):
        self.allowed = tuple(allowed)
        details = f"{label} must be one of: {', '.join(self.allowed)}"
        super().__init__(details, field=field)
        self.kind = f"Invalid {field}"


class AuthError(GatewayError):
    pass


class DeliveryError(GatewayError):
    """Falha do Mailer; só é registrada em log, nunca devolvida ao chamador."""
