# SPDX-License-Identifier: Apache-2.0

"""
Planning repository backed by the relational REST backend.

The backend exposes one resource per collection plus nested child listings
(e.g. /programs/{id}/actions). Filters that match a nested route use it;
anything else is fetched from the collection resource and filtered here.
"""

import logging
from typing import Any, Dict, List, Optional
import requests
from opentelemetry import trace
from .repository import (
    PlanningRepository, RepositoryError,
    ACTIONS, DELIVERABLES, EVIDENCES, INDICATORS, PROGRAMS, PROJECTS, RISKS
)

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

# (child collection, filter field) -> parent collection
NESTED_ROUTES = {
    (PROJECTS, "programId"): PROGRAMS,
    (ACTIONS, "programId"): PROGRAMS,
    (ACTIONS, "projectId"): PROJECTS,
    (INDICATORS, "programId"): PROGRAMS,
    (RISKS, "programId"): PROGRAMS,
    (DELIVERABLES, "actionId"): ACTIONS,
    (EVIDENCES, "actionId"): ACTIONS,
}


def _matches(document: Dict[str, Any], filters: Dict[str, Any]) -> bool:
    return all(document.get(key) == value for key, value in filters.items())


class RestPlanningRepository(PlanningRepository):
    """Planning repository talking JSON over HTTP."""

    name = "rest"

    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def _url(self, *parts: str) -> str:
        return "/".join([self.base_url, *parts])

    def _request(self, method: str, url: str, **kwargs) -> Optional[requests.Response]:
        """
        Send a request to the backend.

        Returns None for 404 responses; any other failure raises RepositoryError.
        """
        with tracer.start_as_current_span("rest.request") as span:
            span.set_attributes({"http.method": method, "http.url": url})
            try:
                response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            except requests.RequestException as e:
                logger.error(f"REST backend request failed: {method} {url}: {e}")
                raise RepositoryError(f"REST backend unavailable: {e}")

            span.set_attribute("http.status_code", response.status_code)

            if response.status_code == 404:
                return None

            try:
                response.raise_for_status()
            except requests.HTTPError as e:
                logger.error(f"REST backend returned an error: {method} {url}: {e}")
                raise RepositoryError(f"REST backend error: {response.status_code}")

            return response

    def _find(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        filters = dict(filters or {})
        url = self._url(collection)

        if len(filters) == 1:
            (field, value), = filters.items()
            parent = NESTED_ROUTES.get((collection, field))
            if parent:
                url = self._url(parent, str(value), collection)
                filters = {}

        response = self._request("GET", url)
        documents = response.json() if response is not None else []
        return [doc for doc in documents if _matches(doc, filters)]

    def _get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        response = self._request("GET", self._url(collection, doc_id))
        if response is None:
            return None
        document = response.json()
        document.setdefault("id", doc_id)
        return document

    def _insert(self, collection: str, doc_id: str, document: Dict[str, Any]) -> None:
        payload = dict(document)
        payload["id"] = doc_id
        self._request("POST", self._url(collection), json=payload)
        logger.info(f"Created document in {collection}: {doc_id}")

    def _update(self, collection: str, doc_id: str, updates: Dict[str, Any]) -> bool:
        response = self._request("PUT", self._url(collection, doc_id), json=updates)
        return response is not None

    def _delete(self, collection: str, doc_id: str) -> bool:
        response = self._request("DELETE", self._url(collection, doc_id))
        return response is not None

    def health_check(self) -> Dict[str, Any]:
        try:
            self._request("GET", self._url(PROGRAMS))
            return {"status": "healthy", "backend": self.name, "url": self.base_url}
        except RepositoryError as e:
            return {"status": "unhealthy", "backend": self.name, "error": e.message}
