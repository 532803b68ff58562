"""Newsletter subscriber ledger line."""

from __future__ import annotations

import csv
import io

from pydantic import Field

from brestoise.models.base import ContentModel, utcnow

SUBSCRIBERS_KEY = "data/subscribers.csv"
LEDGER_COLUMNS = ("timestamp", "email", "source", "ip", "origin", "path", "userAgent")


class SubscriberEntry(ContentModel):
    email: str
    source: str = ""
    ip: str = ""
    origin: str = ""
    path: str = ""
    user_agent: str = ""
    timestamp: str = Field(default_factory=lambda: utcnow().isoformat())

    def to_csv_line(self) -> str:
        """Render one ledger line (with trailing newline), quoting as CSV requires."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(
            [self.timestamp, self.email, self.source, self.ip, self.origin, self.path, self.user_agent]
        )
        return buffer.getvalue()
