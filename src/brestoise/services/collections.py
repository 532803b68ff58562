"""Helpers for JSON documents that hold a list of records."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, TypeVar

from brestoise.models.base import RecordBase

if TYPE_CHECKING:
    from collections.abc import Callable

    from brestoise.store import ContentStoreClient

RecordT = TypeVar("RecordT", bound=RecordBase)


def _parse(text: str | None, model_class: type[RecordT]) -> list[RecordT]:
    if not text:
        return []
    parsed = json.loads(text)
    if not isinstance(parsed, list):
        return []
    return [model_class.model_validate(entry) for entry in parsed]


def _dump(records: list[RecordT]) -> list[dict]:
    ordered = sorted(records, key=lambda record: record.created_at, reverse=True)
    return [record.to_json() for record in ordered]


async def read_collection(
    client: ContentStoreClient,
    key: str,
    model_class: type[RecordT],
) -> list[RecordT]:
    """Load every record of the collection at ``key``, newest first."""
    document = await client.read(key)
    records = _parse(document.text if document else None, model_class)
    return sorted(records, key=lambda record: record.created_at, reverse=True)


async def rewrite_collection(
    client: ContentStoreClient,
    key: str,
    model_class: type[RecordT],
    transform: Callable[[list[RecordT]], list[RecordT]],
    message: str,
) -> list[RecordT]:
    """Read the collection, apply ``transform`` and write the whole list back."""
    result: list[RecordT] = []

    def _apply(current: str | None) -> str:
        result.extend(transform(_parse(current, model_class)))
        return json.dumps(_dump(result), indent=2, ensure_ascii=False)

    await client.update(key, _apply, message)
    return result
