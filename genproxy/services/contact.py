"""Contact form delivery through the Resend email API."""

import asyncio
import html
import logging
from dataclasses import dataclass
from functools import partial
from typing import Optional

import requests

from genproxy.config import Settings, settings
from genproxy.errors import ConfigError, InputValidationError, SubmissionError

logger = logging.getLogger(__name__)


@dataclass
class ContactMessage:
    full_name: str
    email: str
    details: str

    def validate(self) -> None:
        for field, value in (("fullName", self.full_name), ("email", self.email), ("details", self.details)):
            if not value or not value.strip():
                raise InputValidationError("All fields are required", field=field)
        if "@" not in self.email:
            raise InputValidationError("A valid email address is required", field="email")


def render_message(message: ContactMessage) -> str:
    details = html.escape(message.details).replace("\n", "<br />")
    return f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <h2 style="color: #333;">New Contact Form Submission</h2>
            <hr style="border: 1px solid #eee;" />
            <p><strong>Name:</strong> {html.escape(message.full_name)}</p>
            <p><strong>Email:</strong> {html.escape(message.email)}</p>
            <p><strong>Message:</strong></p>
            <div style="background: #f9f9f9; padding: 15px; border-radius: 8px; margin-top: 10px;">
                {details}
            </div>
        </div>
    """


class ContactMailer:
    def __init__(self, config: Settings = settings, session: Optional[requests.Session] = None):
        self.config = config
        self._session = session or requests.Session()

    async def send(self, message: ContactMessage) -> Optional[str]:
        """Deliver ``message`` and return the provider's message id, if it sent one."""
        message.validate()
        if not self.config.resend_api_key:
            raise ConfigError("Email delivery is not configured")

        body = {
            "from": self.config.contact_from,
            "to": [self.config.contact_to],
            "reply_to": message.email,
            "subject": f"New Contact Form Submission from {message.full_name}",
            "html": render_message(message),
        }
        loop = asyncio.get_running_loop()
        call = partial(
            self._session.post,
            self.config.resend_api_url,
            json=body,
            headers={"Authorization": f"Bearer {self.config.resend_api_key}"},
            timeout=self.config.request_timeout_s,
        )
        try:
            response = await loop.run_in_executor(None, call)
        except requests.RequestException as exc:
            logger.error("Contact email delivery failed: %s", exc)
            raise SubmissionError("Failed to send email") from exc

        if not response.ok:
            logger.error("Resend error %s: %s", response.status_code, response.text)
            raise SubmissionError("Failed to send email", provider_status=response.status_code)

        try:
            reply = response.json()
        except ValueError:
            reply = None
        message_id = reply.get("id") if isinstance(reply, dict) else None
        if message_id is None:
            logger.warning("Resend accepted the message but returned no id: %s", response.text[:200])
        logger.info("Contact message from %s delivered as %s", message.email, message_id)
        return message_id
