"""
Brevo transactional email client.

API:   POST {base_url}/smtp/email
Docs:  https://developers.brevo.com/reference/sendtransacemail
Auth:  ``api-key: <BREVO_API_KEY>`` header

Credential setup (.env, gitignored):
  BREVO_API_KEY=xkeysib-...

Request body (fields used here)::

    {
      "sender":      {"name": "MoneyHarbor", "email": "noreply@..."},
      "to":          [{"email": "user@example.com", "name": "Dana"}],
      "subject":     "...",
      "htmlContent": "<html>...</html>",
      "attachment":  [{"content": "<base64>", "name": "report.pdf"}]
    }

Response (201)::

    {"messageId": "<202603011200.123@smtp-relay.mailin.fr>"}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Optional, Sequence

import httpx

if TYPE_CHECKING:
    from money_harbor.config import EmailConfig

logger = logging.getLogger(__name__)


class EmailNotConfiguredError(RuntimeError):
    """Raised when no usable Brevo API key is available."""


@dataclass(frozen=True)
class EmailAttachment:
    """A base64-encoded file attached to an outgoing email."""

    name: str
    content_base64: str


class BrevoEmailClient:
    """Send HTML emails through the Brevo transactional API.

    Usage::

        client = BrevoEmailClient.from_config(config.email)
        message_id = client.send(
            to_email="user@example.com",
            to_name="Dana",
            subject="Your report",
            html_content=html,
        )
    """

    SEND_PATH: ClassVar[str] = "/smtp/email"

    def __init__(
        self,
        api_key: str,
        sender_email: str,
        sender_name: str = "MoneyHarbor",
        base_url: str = "https://api.brevo.com/v3",
        timeout_s: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        if not api_key:
            raise EmailNotConfiguredError("Brevo API key not configured.")
        self._api_key = api_key
        self.sender_email = sender_email
        self.sender_name = sender_name
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout_s)

    @classmethod
    def from_config(
        cls,
        config: "EmailConfig",
        http_client: Optional[httpx.Client] = None,
    ) -> "BrevoEmailClient":
        """Build a client from ``AppConfig.email``.

        Raises:
            EmailNotConfiguredError: If ``BREVO_API_KEY`` is missing or a placeholder.
        """
        if config.api_key is None:
            raise EmailNotConfiguredError(
                "Brevo API key not configured. Set BREVO_API_KEY in .env."
            )
        return cls(
            api_key=config.api_key.get_secret_value(),
            sender_email=config.sender_email,
            sender_name=config.sender_name,
            base_url=config.base_url,
            timeout_s=config.timeout_s,
            http_client=http_client,
        )

    def send(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        to_name: Optional[str] = None,
        attachments: Optional[Sequence[EmailAttachment]] = None,
    ) -> str:
        """Send one email.

        Args:
            to_email:     Recipient address.
            subject:      Subject line.
            html_content: Full HTML body.
            to_name:      Recipient display name; omitted when ``None``.
            attachments:  Optional base64 attachments.

        Returns:
            The Brevo ``messageId``, or ``"sent"`` if the API returned none.

        Raises:
            httpx.HTTPStatusError: On a non-2xx response.
        """
        recipient: dict[str, str] = {"email": to_email}
        if to_name:
            recipient["name"] = to_name

        payload: dict = {
            "sender": {"name": self.sender_name, "email": self.sender_email},
            "to": [recipient],
            "subject": subject,
            "htmlContent": html_content,
        }
        if attachments:
            payload["attachment"] = [
                {"content": a.content_base64, "name": a.name} for a in attachments
            ]

        resp = self._http.post(
            f"{self.base_url}{self.SEND_PATH}",
            json=payload,
            headers={"api-key": self._api_key, "accept": "application/json"},
        )
        resp.raise_for_status()

        message_id = "sent"
        if resp.content:
            message_id = resp.json().get("messageId") or "sent"
        logger.info("Email sent to %s (messageId=%s)", to_email, message_id)
        return message_id

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "BrevoEmailClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
