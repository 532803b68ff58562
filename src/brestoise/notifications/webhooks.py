"""Best-effort outbound webhooks: lead forwarding and deploy triggers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel

if TYPE_CHECKING:
    from brestoise.config import WebhookConfig

logger = logging.getLogger(__name__)


class DeployResult(BaseModel):
    triggered: bool
    error: str | None = None


class WebhookError(Exception):
    """A webhook endpoint could not be reached or answered with an error."""


class Webhooks:
    def __init__(self, config: WebhookConfig, http: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http

    @property
    def lead_configured(self) -> bool:
        return bool(self._config.lead_url)

    async def forward_lead(self, event: str, payload: dict[str, Any]) -> None:
        """POST a lead to the generic webhook. Raises WebhookError on failure."""
        if not self._config.lead_url:
            raise WebhookError("LEAD_WEBHOOK_URL is not set")
        try:
            response = await self._http.post(
                self._config.lead_url,
                json={"event": event, "data": payload},
            )
        except httpx.HTTPError as exc:
            raise WebhookError(str(exc)) from exc
        if response.is_error:
            raise WebhookError(f"Lead webhook {response.status_code}: {response.text}")

    async def trigger_deploy(self) -> DeployResult:
        """Ask the hosting platform to rebuild the site; failures are reported, not raised."""
        if not self._config.deploy_hook_url:
            return DeployResult(triggered=False, error="Deploy hook non configuré")
        try:
            response = await self._http.post(self._config.deploy_hook_url)
        except httpx.HTTPError as exc:
            logger.warning("Deploy hook failed", exc_info=True)
            return DeployResult(triggered=False, error=str(exc) or "Deploy hook error")
        if response.is_error:
            logger.warning("Deploy hook rejected status=%d", response.status_code)
            return DeployResult(
                triggered=False,
                error=f"Deploy hook {response.status_code}: {response.text}",
            )
        logger.info("Deploy hook triggered")
        return DeployResult(triggered=True)
