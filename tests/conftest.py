"""Shared fixtures: a small static site tree and an in-memory dev.to account"""

import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from devsync.core.models import RemoteArticle, SourcePost
from devsync.remote.client import DevtoError


SITE_CONFIG = "baseURL: https://blog.example.com/\ntitle: Example\n"

POST_MD = """\
---
title: Debug k8s
description: Packets all the way down
date: 2020-05-01T10:30:00Z
keywords: [kubernetes, networking]
images: [debug-k8s/cover.png]
devtoId: 101
devtoPublished: true
---
# Intro

![wireshark](wireshark.png)

See [the intro](#intro).
"""


class FakeClient:
    """Stands in for DevtoClient; keeps articles in memory and records updates."""

    MAX_PER_PAGE = 1000

    def __init__(self, unpublished=(), published=(), update_errors=()):
        self.unpublished = list(unpublished)
        self.published = list(published)
        self.update_errors = list(update_errors)
        self.updates: list[tuple[int, str]] = []
        self.list_calls: list[tuple[str, int, int]] = []

    def _page(self, items, page, per_page):
        return items[(page - 1) * per_page: page * per_page]

    def list_my_unpublished(self, page=1, per_page=1000):
        self.list_calls.append(("unpublished", page, per_page))
        return self._page(self.unpublished, page, per_page)

    def list_my_published(self, page=1, per_page=1000):
        self.list_calls.append(("published", page, per_page))
        return self._page(self.published, page, per_page)

    def get_article(self, article_id):
        for art in self.published:
            if art.id == article_id:
                return art
        raise DevtoError("not found", status=404)

    def update_article(self, article_id, body_markdown):
        self.updates.append((article_id, body_markdown))
        if self.update_errors:
            raise self.update_errors.pop(0)
        for bucket in (self.unpublished, self.published):
            for i, art in enumerate(bucket):
                if art.id == article_id:
                    bucket[i] = art.model_copy(update={"body_markdown": body_markdown})
                    return bucket[i]
        raise DevtoError("not found", status=404)


@pytest.fixture(autouse=True)
def reset_devsync_logger():
    """Drop handlers installed by CLI runs so later tests log through caplog only."""
    yield
    logger = logging.getLogger("devsync")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture(name="site_root")
def site_root_fixture(tmp_path) -> Path:
    """A site with one bundled post at content/debug-k8s/index.md."""
    root = tmp_path / "site"
    post_dir = root / "content" / "debug-k8s"
    post_dir.mkdir(parents=True)
    (root / "config.yaml").write_text(SITE_CONFIG)
    (post_dir / "index.md").write_text(POST_MD)
    return root


@pytest.fixture(name="article")
def article_fixture() -> RemoteArticle:
    return RemoteArticle(
        id=101,
        title="Debug k8s",
        body_markdown="old body",
        published=True,
        url="https://dev.to/someone/debug-k8s-2588",
    )


@pytest.fixture(name="make_post")
def make_post_fixture(tmp_path):
    """Factory for SourcePost values with sensible defaults."""
    def _make(**overrides) -> SourcePost:
        values = dict(
            path=tmp_path / "content" / "post" / "index.md",
            title="Debug k8s",
            description="Packets all the way down",
            keywords=["kubernetes", "networking"],
            date=datetime(2020, 5, 1, 10, 30, tzinfo=timezone.utc),
            permalink="https://blog.example.com/debug-k8s/",
            body="Hello\n",
            params={"devtoId": 101, "devtoPublished": True},
        )
        values.update(overrides)
        return SourcePost(**values)
    return _make


@pytest.fixture(name="fake_client")
def fake_client_fixture():
    """Factory for FakeClient instances."""
    return FakeClient
