"""E-mail alerts sent through SMTP with the envelope library.

Alerts are best effort: a delivery failure is logged and never turns into a
failed server action.
"""

import logging
import os
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from envelope import Envelope

VALID_SECURITY = ("starttls", "tls")


@dataclass(frozen=True)
class AlertSettings:
    """SMTP settings for alert mails."""

    sender: str
    recipient: str
    host: str
    port: int = 587
    user: str | None = None
    password: str | None = None
    password_env: str | None = None
    security: str = "starttls"
    gpg_key_id: str | None = None

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        for field_name in ("sender", "recipient", "host"):
            value = getattr(self, field_name)
            if not value or not str(value).strip():
                error_msg = f"Alert setting '{field_name}' cannot be empty"
                raise ValueError(error_msg)
        if self.security not in VALID_SECURITY:
            error_msg = (
                f"Alert setting 'security' must be one of {', '.join(VALID_SECURITY)}, "
                f"got '{self.security}'"
            )
            raise ValueError(error_msg)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AlertSettings":
        """Build settings from the ``alerts`` section of a configuration file.

        Raises:
            KeyError: If a required key is missing
            ValueError: If a value is invalid

        """
        known = {
            "sender",
            "recipient",
            "host",
            "port",
            "user",
            "password",
            "password_env",
            "security",
            "gpg_key_id",
        }
        unknown = sorted(set(data) - known)
        if unknown:
            error_msg = f"Unknown alert settings: {', '.join(unknown)}"
            raise ValueError(error_msg)
        return cls(
            sender=data["sender"],
            recipient=data["recipient"],
            host=data["host"],
            port=int(data.get("port", 587)),
            user=data.get("user"),
            password=data.get("password"),
            password_env=data.get("password_env"),
            security=data.get("security", "starttls"),
            gpg_key_id=data.get("gpg_key_id"),
        )

    def resolve_password(self) -> str | None:
        """Return the SMTP password, reading ``password_env`` when set."""
        if self.password:
            return self.password
        if self.password_env:
            return os.environ.get(self.password_env)
        return None


class AlertMailer:
    """Sends alert mails, encrypted with GPG when a key id is configured."""

    MAX_RETRY_ATTEMPTS = 3
    RETRY_DELAY_SECONDS = 2

    def __init__(
        self,
        logger: logging.Logger,
        settings: AlertSettings | None = None,
        source: str = "mcwrapper",
    ) -> None:
        """Initialize the mailer.

        Args:
            logger: Logger instance for logging operations
            settings: SMTP settings; ``None`` disables alerts
            source: Name prefixed to every subject line

        """
        self.logger = logger
        self.settings = settings
        self.source = source

    @property
    def enabled(self) -> bool:
        """Whether alert settings are configured."""
        return self.settings is not None

    def _build_envelope(self, subject: str, message: str) -> Envelope:
        if self.settings is None:
            error_msg = "Alert settings are not configured"
            raise ValueError(error_msg)

        email = Envelope(
            from_=self.settings.sender,
            to=self.settings.recipient,
            message=message,
        )
        email.subject(f"[{self.source}] {subject}", encrypted=False)
        email.smtp(
            host=self.settings.host,
            port=self.settings.port,
            user=self.settings.user,
            password=self.settings.resolve_password(),
            security=self.settings.security,
        )
        if self.settings.gpg_key_id:
            email.encryption(key=self.settings.gpg_key_id)
        return email

    def send_alert(self, subject: str, message: str) -> bool:
        """Send an alert, retrying a few times.

        Args:
            subject: Alert subject line
            message: Alert body

        Returns:
            True if the alert was delivered, False otherwise

        """
        if self.settings is None:
            self.logger.debug(f"Alerts disabled, not sending '{subject}'")
            return False

        if self.settings.user and not self.settings.resolve_password():
            self.logger.error(
                f"No SMTP password available for {self.settings.user}; alert '{subject}' dropped",
            )
            return False

        for attempt in range(1, self.MAX_RETRY_ATTEMPTS + 1):
            try:
                self._build_envelope(subject, message).send(sign=False)
            except Exception:
                self.logger.exception(f"Alert delivery attempt {attempt} failed")
                if attempt < self.MAX_RETRY_ATTEMPTS:
                    time.sleep(self.RETRY_DELAY_SECONDS)
            else:
                self.logger.info(
                    f"Alert '{subject}' sent to {self.settings.recipient}",
                )
                return True

        self.logger.warning(f"Giving up on alert '{subject}'")
        return False
