"""Remote article listing and rate-limit aware updates"""

import logging
import time
from typing import Callable, Optional

from devsync.core.models import ArticleIndex, RemoteArticle
from devsync.remote.client import DevtoClient, DevtoError


logger = logging.getLogger(__name__)

# The update endpoint allows 30 requests per 30 seconds.
RETRY_DELAY = 1.0


class SyncError(RuntimeError):
    """An orchestration invariant was violated."""


def is_transient(exc: DevtoError) -> bool:
    """Only rate limiting is worth retrying."""
    return exc.is_rate_limited


class RemoteSync:
    """Fetch-all and update operations on top of the HTTP client."""

    def __init__(
        self,
        client: DevtoClient,
        per_page: int = DevtoClient.MAX_PER_PAGE,
        retry_delay: float = RETRY_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        ):
        self._client = client
        self._per_page = max(1, min(per_page, DevtoClient.MAX_PER_PAGE))
        self._retry_delay = retry_delay
        self._sleep = sleep
        self._pushed: set[int] = set()

    def _paginate(self, fetch: Callable[..., list[RemoteArticle]]) -> list[RemoteArticle]:
        """Request pages until a short page comes back."""
        articles: list[RemoteArticle] = []
        page = 1
        while True:
            batch = fetch(page=page, per_page=self._per_page)
            articles.extend(batch)
            if len(batch) < self._per_page:
                return articles
            page += 1

    def list_all(self) -> list[RemoteArticle]:
        """The user's unpublished articles followed by the published ones."""
        try:
            unpublished = self._paginate(self._client.list_my_unpublished)
        except DevtoError as e:
            raise DevtoError(f"fetching unpublished articles: {e.args[0]}", status=e.status) from e
        try:
            published = self._paginate(self._client.list_my_published)
        except DevtoError as e:
            raise DevtoError(f"fetching published articles: {e.args[0]}", status=e.status) from e
        return unpublished + published

    def fetch_index(self) -> ArticleIndex:
        return ArticleIndex(self.list_all())

    def get(self, article_id: int) -> Optional[RemoteArticle]:
        """A published article by id, or None when the platform does not know it."""
        try:
            return self._client.get_article(article_id)
        except DevtoError as e:
            if e.is_not_found:
                return None
            raise

    def update(self, article_id: int, body: str) -> RemoteArticle:
        """Push a new body, waiting and retrying for as long as the platform rate-limits us.

        Each article is pushed at most once per RemoteSync instance.
        """
        if article_id in self._pushed:
            raise SyncError(f"article {article_id} was already pushed during this run")
        attempt = 1
        while True:
            try:
                article = self._client.update_article(article_id, body)
            except DevtoError as e:
                if not is_transient(e):
                    raise
                logger.debug("updating article %d: rate limited (attempt %d), retrying in %.1fs",
                             article_id, attempt, self._retry_delay)
                self._sleep(self._retry_delay)
                attempt += 1
                continue
            self._pushed.add(article_id)
            return article
