"""dev.to (Forem) article API client"""

from __future__ import annotations

import json
import logging
import shlex
from typing import Any, Mapping, Optional

import requests

from devsync.core.models import RemoteArticle


logger = logging.getLogger(__name__)


class DevtoError(RuntimeError):
    """Raised when a dev.to API call fails."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status

    def __str__(self) -> str:
        base = super().__str__()
        return f"HTTP {self.status}: {base}" if self.status else base

    @property
    def is_rate_limited(self) -> bool:
        return self.status == 429

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


def parse_error(status: int, raw: str) -> DevtoError:
    """Build a DevtoError from an error response body ({"error": ..., "status": ...} or plain text)."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        data = None
    if isinstance(data, dict) and data.get("error"):
        return DevtoError(str(data["error"]), status=status)
    return DevtoError(raw.strip() or f"unexpected status {status}", status=status)


def as_curl(method: str, url: str, body: Any = None) -> str:
    """Equivalent curl command line for a request, without credentials."""
    parts = ["curl", "-X", method, shlex.quote(url), "-H", shlex.quote("Api-Key: <redacted>")]
    if body is not None:
        parts += ["-d", shlex.quote(json.dumps(body, ensure_ascii=False))]
    return " ".join(parts)


class DevtoClient:
    """Minimal client for the dev.to article endpoints used by devsync."""

    BASE_URL = "https://dev.to"
    MAX_PER_PAGE = 1000

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Api-Key": api_key,
        })

    def list_my_unpublished(self, page: int = 1, per_page: int = MAX_PER_PAGE) -> list[RemoteArticle]:
        return self._list("/api/articles/me/unpublished", page, per_page)

    def list_my_published(self, page: int = 1, per_page: int = MAX_PER_PAGE) -> list[RemoteArticle]:
        return self._list("/api/articles/me/published", page, per_page)

    def get_article(self, article_id: int) -> RemoteArticle:
        """Fetch a published article by id; unpublished articles answer 404."""
        data = self._request("GET", f"/api/articles/{article_id}")
        return self._article(data)

    def update_article(self, article_id: int, body_markdown: str) -> RemoteArticle:
        """Replace the article body and return the platform's view of the article."""
        payload = {"article": {"body_markdown": body_markdown}}
        data = self._request("PUT", f"/api/articles/{article_id}", payload=payload)
        return self._article(data)

    def _list(self, path: str, page: int, per_page: int) -> list[RemoteArticle]:
        params = {"page": page, "per_page": min(per_page, self.MAX_PER_PAGE)}
        data = self._request("GET", path, params=params)
        if not isinstance(data, list):
            raise DevtoError(f"expected a list of articles from {path}, got {type(data).__name__}")
        return [self._article(item) for item in data]

    @staticmethod
    def _article(data: Any) -> RemoteArticle:
        if not isinstance(data, Mapping):
            raise DevtoError(f"expected an article object, got {type(data).__name__}")
        try:
            return RemoteArticle.model_validate(dict(data))
        except ValueError as exc:
            raise DevtoError(f"invalid article in response: {exc}") from exc

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        payload: Any = None,
    ) -> Any:
        url = f"{self._base_url}{path}"
        if params:
            query = "&".join(f"{k}={v}" for k, v in params.items())
            logger.debug("%s", as_curl(method, f"{url}?{query}", payload))
        else:
            logger.debug("%s", as_curl(method, url, payload))

        try:
            response = self._session.request(
                method, url, params=params, json=payload, timeout=self._timeout
            )
        except requests.RequestException as exc:
            raise DevtoError(f"while doing {method} {path}: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise parse_error(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as exc:
            raise DevtoError(
                f"while parsing JSON from the HTTP response for {method} {path}: {exc}"
            ) from exc
