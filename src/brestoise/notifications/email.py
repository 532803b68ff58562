"""Transactional email through the Resend HTTP API, rendered from Jinja2 templates."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

if TYPE_CHECKING:
    from brestoise.config import EmailConfig

logger = logging.getLogger(__name__)

EMAIL_TEMPLATES = Path(__file__).resolve().parent.parent / "templates" / "emails"


class EmailError(Exception):
    """The email provider rejected a message or could not be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def create_template_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(EMAIL_TEMPLATES)),
        autoescape=select_autoescape(["html"]),
    )


class EmailSender:
    """Sends rendered templates to one or more recipients."""

    def __init__(
        self,
        config: EmailConfig,
        http: httpx.AsyncClient,
        templates: Environment | None = None,
    ) -> None:
        self._config = config
        self._http = http
        self._templates = templates or create_template_env()

    @property
    def is_configured(self) -> bool:
        return self._config.is_configured

    @property
    def owner_address(self) -> str:
        return self._config.owner_address

    def render(self, template_name: str, **context: Any) -> str:
        return self._templates.get_template(template_name).render(**context)

    async def send(self, to: str | list[str], subject: str, html: str) -> str | None:
        """Send one message and return the provider's message id."""
        if not self._config.api_key:
            raise EmailError("RESEND_API_KEY is not set")
        recipients = [to] if isinstance(to, str) else to
        try:
            response = await self._http.post(
                f"{self._config.api_url.rstrip('/')}/emails",
                json={
                    "from": self._config.from_address,
                    "to": recipients,
                    "subject": subject,
                    "html": html,
                },
                headers={"Authorization": f"Bearer {self._config.api_key}"},
            )
        except httpx.HTTPError as exc:
            raise EmailError(f"Email provider unreachable: {exc}") from exc
        if response.is_error:
            raise EmailError(
                f"Email provider {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        message_id = response.json().get("id")
        logger.info("Email sent subject=%r recipients=%d id=%s", subject, len(recipients), message_id)
        return message_id

    async def send_template(
        self,
        to: str | list[str],
        subject: str,
        template_name: str,
        **context: Any,
    ) -> str | None:
        return await self.send(to, subject, self.render(template_name, **context))
