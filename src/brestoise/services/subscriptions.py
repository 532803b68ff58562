"""Newsletter signups: every step after validation is best effort."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from brestoise.errors import ValidationError
from brestoise.models.subscriber import LEDGER_COLUMNS, SUBSCRIBERS_KEY, SubscriberEntry
from brestoise.services.leads import is_valid_email
from brestoise.services.trail import DebugTrail

if TYPE_CHECKING:
    from brestoise.notifications import EmailSender, Webhooks
    from brestoise.store import ContentStoreClient

logger = logging.getLogger(__name__)


def _field(payload: dict[str, Any], key: str, limit: int = 300) -> str:
    value = payload.get(key)
    return value.strip()[:limit] if isinstance(value, str) else ""


def parse_subscription(
    payload: Any,
    *,
    ip: str = "",
    origin: str = "",
    user_agent: str = "",
) -> SubscriberEntry:
    """Build a ledger entry; the visitor's ``ua`` wins over the request header."""
    if not isinstance(payload, dict):
        raise ValidationError("Payload invalide", status_code=400)
    email = _field(payload, "email")
    if not is_valid_email(email):
        raise ValidationError("Email invalide", status_code=400)
    return SubscriberEntry(
        email=email,
        source=_field(payload, "source", 120) or "site",
        ip=ip,
        origin=origin,
        path=_field(payload, "path"),
        user_agent=_field(payload, "ua") or user_agent[:300],
    )


def append_line(current: str | None, line: str) -> str:
    """Concatenate ``line`` onto the ledger, starting it with a header row."""
    if not current:
        return ",".join(LEDGER_COLUMNS) + "\n" + line
    if not current.endswith("\n"):
        current += "\n"
    return current + line


async def append_subscriber(client: ContentStoreClient, entry: SubscriberEntry) -> str | None:
    _, revision = await client.update(
        SUBSCRIBERS_KEY,
        lambda current: append_line(current, entry.to_csv_line()),
        f"chore(newsletter): add subscriber from {entry.source}",
    )
    return revision


async def subscribe(
    entry: SubscriberEntry,
    *,
    client: ContentStoreClient,
    email_sender: EmailSender,
    webhooks: Webhooks,
) -> DebugTrail:
    """Run the signup side effects, recording each outcome without raising."""
    trail = DebugTrail()

    if webhooks.lead_configured:
        try:
            await webhooks.forward_lead("newsletter", entry.to_json())
            trail.ok("webhook")
        except Exception:  # noqa: BLE001
            trail.error("webhook")
    else:
        trail.skipped("webhook")

    try:
        await append_subscriber(client, entry)
        trail.ok("ledger")
    except Exception:  # noqa: BLE001
        trail.error("ledger")

    if email_sender.is_configured:
        try:
            await email_sender.send_template(
                email_sender.owner_address,
                f"Newsletter : {entry.email}",
                "subscribe_owner.html",
                entry=entry,
            )
            trail.ok("owner_email")
        except Exception:  # noqa: BLE001
            trail.error("owner_email")
        try:
            await email_sender.send_template(
                entry.email,
                "Bienvenue sur À la Brestoise",
                "subscribe_welcome.html",
                email=entry.email,
            )
            trail.ok("welcome_email")
        except Exception:  # noqa: BLE001
            trail.error("welcome_email")
    else:
        trail.skipped("owner_email")
        trail.skipped("welcome_email")

    logger.info("Subscription handled source=%s trail=%s", entry.source, trail.header_value())
    return trail
