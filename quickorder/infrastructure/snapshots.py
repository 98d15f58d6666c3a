"""Result-set diffing shared by the document store adapters."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from quickorder.application.interfaces.document_store import (
    ChangeType,
    DocumentChange,
    DocumentSnapshot,
)


def diff_results(
    previous: Mapping[str, dict[str, Any]],
    current: Iterable[DocumentSnapshot],
) -> tuple[dict[str, dict[str, Any]], tuple[DocumentChange, ...]]:
    """Compare the last delivered result set with a fresh one.

    Returns the new id -> data map and the added/modified/removed changes
    (in that order). An empty change tuple means nothing needs delivering.
    """
    fresh: dict[str, dict[str, Any]] = {}
    changes: list[DocumentChange] = []
    for doc in current:
        fresh[doc.id] = doc.data
        if doc.id not in previous:
            changes.append(DocumentChange(ChangeType.ADDED, doc))
        elif previous[doc.id] != doc.data:
            changes.append(DocumentChange(ChangeType.MODIFIED, doc))
    for doc_id, data in previous.items():
        if doc_id not in fresh:
            changes.append(
                DocumentChange(ChangeType.REMOVED, DocumentSnapshot(id=doc_id, data=data))
            )
    return fresh, tuple(changes)
