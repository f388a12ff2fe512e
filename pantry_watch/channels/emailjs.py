"""Outbound email through the EmailJS REST API."""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)

EMAILJS_API_URL = "https://api.emailjs.com/api/v1.0/email/send"


class EmailJSSender:
    """Sends one email per call using an EmailJS template.

    The template is expected to use the ``to_email``, ``subject`` and
    ``message`` parameters.
    """

    def __init__(
        self,
        service_id: str,
        template_id: str,
        user_id: str,
        *,
        access_token: str = "",
        endpoint: str = EMAILJS_API_URL,
        timeout: float = 30.0,
    ) -> None:
        if not (service_id and template_id and user_id):
            raise ValueError(
                "EmailJS requires service_id, template_id and user_id "
                "(set them in [notify.emailjs] or EMAILJS_* environment variables)"
            )
        self._service_id = service_id
        self._template_id = template_id
        self._user_id = user_id
        self._access_token = access_token
        self._endpoint = endpoint
        self._timeout = timeout

    def _payload(self, address: str, subject: str, body: str) -> dict:
        payload = {
            "service_id": self._service_id,
            "template_id": self._template_id,
            "user_id": self._user_id,
            "template_params": {
                "to_email": address,
                "subject": subject,
                "message": body,
            },
        }
        if self._access_token:
            payload["accessToken"] = self._access_token
        return payload

    async def send(self, address: str, subject: str, body: str) -> bool:
        """Send an email. Returns False (and logs) instead of raising."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    self._endpoint,
                    json=self._payload(address, subject, body),
                    headers={"Content-Type": "application/json"},
                )
        except httpx.HTTPError as e:
            logger.error("EmailJS request to %s failed: %s", address, e)
            return False

        if resp.status_code >= 400:
            logger.error(
                "EmailJS rejected mail to %s (%d): %s",
                address,
                resp.status_code,
                resp.text,
            )
            return False

        logger.info("Email sent to %s: %s", address, subject)
        return True
