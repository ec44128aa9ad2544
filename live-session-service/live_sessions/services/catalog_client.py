# live_sessions/services/catalog_client.py
"""
Catalog service client for validating related course / museum ids.

Validation is best-effort: only a definite 404 from the catalog rejects a
reference. Timeouts, connection errors and unexpected statuses are logged
and the reference is accepted, so a catalog outage never blocks scheduling.
"""
import logging
from typing import Optional

import httpx

from live_sessions.core.config import settings
from live_sessions.core.exceptions import InvalidReference

logger = logging.getLogger(__name__)

_RESOURCE_PATHS = {
    "course": "courses",
    "museum": "museums",
}


class CatalogClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = (base_url or settings.CATALOG_SERVICE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.INTERNAL_API_KEY
        self.timeout = timeout
        self._transport = transport

    def reference_exists(self, kind: str, resource_id: str) -> bool:
        """False only when the catalog answers 404 for the id."""
        url = f"{self.base_url}/internal/{_RESOURCE_PATHS[kind]}/{resource_id}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.get(url, headers={"x-api-key": self.api_key})
        except httpx.HTTPError as e:
            logger.warning(f"Catalog lookup for {kind} {resource_id} failed: {e}")
            return True

        if response.status_code == 404:
            return False
        if response.status_code != 200:
            logger.warning(
                f"Catalog lookup for {kind} {resource_id} returned {response.status_code}"
            )
        return True

    def validate_references(
        self,
        *,
        related_course_id: Optional[str] = None,
        related_museum_id: Optional[str] = None,
    ) -> None:
        if related_course_id and not self.reference_exists("course", related_course_id):
            raise InvalidReference(f"Course {related_course_id} does not exist")
        if related_museum_id and not self.reference_exists("museum", related_museum_id):
            raise InvalidReference(f"Museum {related_museum_id} does not exist")


catalog_client = CatalogClient()
