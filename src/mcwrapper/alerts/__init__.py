"""Optional e-mail alerts for failures that happen while nobody is watching."""

from .mailer import AlertMailer, AlertSettings

__all__ = ["AlertMailer", "AlertSettings"]
