"""About page content document."""

from __future__ import annotations

from pydantic import Field

from brestoise.models.base import ContentModel

ABOUT_KEY = "content/about/a-propos.json"


class AboutContent(ContentModel):
    about_title: str
    about_body: list[str]
    values_title: str
    values_items: list[str] = Field(default_factory=list)
    approach_title: str
    approach_body: str


DEFAULT_ABOUT_CONTENT = AboutContent(
    about_title="À propos",
    about_body=[
        "À la Brestoise raconte Brest, ses gens et ses lieux, au fil d'articles et de portraits.",
    ],
    values_title="Nos valeurs",
    values_items=["Curiosité", "Authenticité", "Proximité"],
    approach_title="Notre approche",
    approach_body="Écouter, observer, puis écrire avec soin.",
)
