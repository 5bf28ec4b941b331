# SPDX-License-Identifier: Apache-2.0

"""
In-memory planning repository for local development and tests.
"""

import copy
import logging
from typing import Any, Dict, List, Optional
from .repository import PlanningRepository, COLLECTIONS

logger = logging.getLogger(__name__)


class InMemoryPlanningRepository(PlanningRepository):
    """Keeps documents in process memory; data is lost on restart."""

    name = "memory"

    def __init__(self):
        self._store: Dict[str, Dict[str, Dict[str, Any]]] = {name: {} for name in COLLECTIONS}
        logger.info("Using in-memory planning repository")

    def _documents(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self._store.setdefault(collection, {})

    def _find(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        filters = filters or {}
        results = []
        for doc_id, document in self._documents(collection).items():
            if all(document.get(key) == value for key, value in filters.items()):
                found = copy.deepcopy(document)
                found["id"] = doc_id
                results.append(found)
        return results

    def _get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        document = self._documents(collection).get(doc_id)
        if document is None:
            return None
        found = copy.deepcopy(document)
        found["id"] = doc_id
        return found

    def _insert(self, collection: str, doc_id: str, document: Dict[str, Any]) -> None:
        self._documents(collection)[doc_id] = copy.deepcopy(document)

    def _update(self, collection: str, doc_id: str, updates: Dict[str, Any]) -> bool:
        document = self._documents(collection).get(doc_id)
        if document is None:
            return False
        document.update(copy.deepcopy(updates))
        return True

    def _delete(self, collection: str, doc_id: str) -> bool:
        return self._documents(collection).pop(doc_id, None) is not None

    def clear(self) -> None:
        for documents in self._store.values():
            documents.clear()
