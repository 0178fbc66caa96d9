from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)


class NullAIClassifier:
    """Stands in for an unavailable AI service: never has an answer."""

    def classify(self, title: str, description: str) -> str | None:
        return None


class HttpAIClassifier:
    """Calls an external classification service over HTTP.

    POST {base_url}/api/classify with {"epic_title", "epic_description"};
    the service answers {"category": "..."}. Any failure yields None.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout)

    def classify(self, title: str, description: str) -> str | None:
        url = f"{self._base_url}/api/classify"
        try:
            response = self._client.post(
                url, json={"epic_title": title, "epic_description": description},
            )
        except httpx.HTTPError as e:
            logger.warning("AI classification request to %s failed: %s", url, e)
            return None

        if response.status_code == 404:
            return None
        if response.is_error:
            logger.warning(
                "AI classification service error %s: %s",
                response.status_code, response.text[:200],
            )
            return None

        try:
            payload = response.json()
        except ValueError:
            logger.warning("AI classification service returned non-JSON body")
            return None

        category = payload.get("category") if isinstance(payload, dict) else None
        if not isinstance(category, str) or not category.strip():
            return None
        return category

    def close(self) -> None:
        self._client.close()
