"""Outbound integrations: transactional email and webhooks."""

from brestoise.notifications.email import EMAIL_TEMPLATES, EmailError, EmailSender
from brestoise.notifications.webhooks import DeployResult, WebhookError, Webhooks

__all__ = [
    "EMAIL_TEMPLATES",
    "DeployResult",
    "EmailError",
    "EmailSender",
    "WebhookError",
    "Webhooks",
]
