from __future__ import annotations

import logging
from typing import Any, List

from greenhub.core.exceptions import CorruptPayloadError
from greenhub.services.storage import PersistenceAdapter

logger = logging.getLogger(__name__)

FAVORITES_KEY = "favorites"


def validate_favorites_payload(payload: Any) -> None:
    if not isinstance(payload, list) or not all(isinstance(i, str) for i in payload):
        raise CorruptPayloadError("favorites payload must be a list of record ids")


class FavoritesService:
    """
    Client-owned set of favourite record ids.

    Independent of datasets and sessions: ids are stored and restored
    verbatim, in the order they were added, and logging out keeps them.
    """

    def __init__(self, persistence: PersistenceAdapter):
        self._persistence = persistence
        self._ids: List[str] = []

    def restore(self) -> List[str]:
        payload = self._persistence.get(FAVORITES_KEY, validate=validate_favorites_payload)
        self._ids = list(dict.fromkeys(payload or []))
        return list(self._ids)

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def is_favorite(self, record_id: str) -> bool:
        return record_id in self._ids

    def toggle(self, record_id: str) -> bool:
        """
        Flip the favourite flag for `record_id` and persist the whole set.
        :return: True if the record is a favourite afterwards
        """
        if record_id in self._ids:
            self._ids.remove(record_id)
            now_favorite = False
        else:
            self._ids.append(record_id)
            now_favorite = True
        self._persistence.set(FAVORITES_KEY, self._ids)
        logger.debug("Favourite toggled", extra={"record_id": record_id, "favorite": now_favorite})
        return now_favorite

    def clear(self) -> None:
        self._ids = []
        self._persistence.remove(FAVORITES_KEY)
