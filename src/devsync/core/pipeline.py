"""Pipeline step functions: load posts, fetch remote articles, reconcile each post"""

from pathlib import Path
from typing import Iterator, Optional

from devsync.config import Settings
from devsync.core.anchors import make_parser
from devsync.core.content import Site, select_posts
from devsync.core.models import FieldNames, Mode, Outcome
from devsync.core.reconcile import ArticleReconciler
from devsync.core.sync import RemoteSync
from devsync.remote.client import DevtoClient


def field_names(settings: Settings) -> FieldNames:
    return FieldNames(
        id=settings.id_field,
        published=settings.published_field,
        skip=settings.skip_field,
        url=settings.url_field,
    )


def make_sync(settings: Settings, client: Optional[DevtoClient] = None) -> RemoteSync:
    """RemoteSync wired with the configured client, page size and backoff."""
    client = client or DevtoClient(settings.api_key, base_url=settings.api_url, timeout=settings.timeout)
    return RemoteSync(client, per_page=settings.per_page, retry_delay=settings.retry_delay)


def run_sync(
    settings: Settings,
    mode: Mode,
    post: Optional[str] = None,
    sync: Optional[RemoteSync] = None,
    ) -> Iterator[Outcome]:
    """Yield one Outcome per post, in content order.

    Content and listing failures (ContentError, DevtoError) are raised before
    the first post is reconciled; per-post problems become error outcomes.
    """
    site = Site.load(Path(settings.root_dir))
    posts = select_posts(site, post)
    sync = sync or make_sync(settings)
    index = sync.fetch_index()

    reconciler = ArticleReconciler(
        index,
        sync,
        abs_url=site.abs_url,
        anchor_fn=site.anchor_fn,
        mode=mode,
        fields=field_names(settings),
        record_url=settings.record_url,
        parser=make_parser(settings.parser_config),
    )
    for p in posts:
        yield reconciler.reconcile(p)
