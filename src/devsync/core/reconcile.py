"""Per-post decision engine: validate the mapping, compose the dev.to document, act on it"""

import logging
from datetime import datetime
from typing import Callable, Optional

from markdown_it import MarkdownIt

from devsync.core.anchors import convert_anchor_ids, make_parser
from devsync.core.frontmatter import record_field
from devsync.core.models import (
    Absent,
    Action,
    ArticleIndex,
    FieldNames,
    Mode,
    Outcome,
    RemoteArticle,
    SourcePost,
    Value,
    WrongType,
    param,
    string_list_param,
)
from devsync.core.sync import RemoteSync, SyncError
from devsync.core.transform import transform_body
from devsync.core.utils.diff import diff_summary, unified_diff
from devsync.remote.client import DevtoError


logger = logging.getLogger(__name__)

DOCUMENT_HEADER = """\
---
title: "{title}"
description: "{description}"
published: {published}
tags: "{tags}"
date: {date}
series: "{series}"
canonical_url: "{canonical_url}"
cover_image: "{cover_image}"
---
"""


def format_date(d: datetime) -> str:
    """YYYYMMDDTHH:MMZ; zero-padded even for year 1."""
    return f"{d.year:04d}{d.month:02d}{d.day:02d}T{d.hour:02d}:{d.minute:02d}Z"


def compose_document(
    post: SourcePost,
    published: bool,
    cover_image: str,
    anchor_fn: Callable[[str], str],
    parser: Optional[MarkdownIt] = None,
    ) -> str:
    """Front matter followed by the transformed body, as stored on dev.to."""
    header = DOCUMENT_HEADER.format(
        title=post.title,
        description=post.description,
        published="true" if published else "false",
        tags=", ".join(post.keywords),
        date=format_date(post.date),
        series="",
        canonical_url=post.permalink,
        cover_image=cover_image,
    )
    body = transform_body(post.body, post.permalink)
    body = convert_anchor_ids(body, anchor_fn, source=str(post.path), parser=parser)
    return header + body


def _status(published: bool) -> str:
    return "published" if published else "unpublished"


class ArticleReconciler:
    """Decide and apply exactly one action per post."""

    def __init__(
        self,
        index: ArticleIndex,
        sync: RemoteSync,
        abs_url: Callable[[str], str],
        anchor_fn: Callable[[str], str],
        mode: Mode = Mode.status,
        fields: FieldNames = FieldNames(),
        record_url: bool = False,
        parser: Optional[MarkdownIt] = None,
        ):
        self.index = index
        self.sync = sync
        self.abs_url = abs_url
        self.anchor_fn = anchor_fn
        self.mode = mode
        self.fields = fields
        self.record_url = record_url
        self.parser = parser or make_parser()

    def _fail(self, post: SourcePost, action: Action, message: str) -> Outcome:
        logger.error("%s", message)
        return Outcome(post=post, action=action, message=message)

    def _wrong_type(self, post: SourcePost, name: str, expected: str, got: WrongType) -> Outcome:
        return self._fail(post, Action.error,
                          f"{post.path}: field {name} is expected to be {expected}, got '{got.kind}'")

    def _title_hint(self, post: SourcePost, published: bool, prefix: str) -> Outcome:
        """Missing or unknown id: suggest the article whose title matches, if any."""
        art = self.index.by_title.get(post.title)
        if art is None:
            return self._fail(post, Action.missing_mapping,
                              f"{prefix} and title cannot be found in your devto account")
        return self._fail(post, Action.missing_mapping,
                          f"{prefix}, but title matches {self.fields.id} {art.id}: {art.edit_url(published)}")

    def reconcile(self, post: SourcePost) -> Outcome:
        """Walk the decision sequence for one post; the first applicable rule wins."""
        f = self.fields

        draft = param(post.params, "draft", bool)
        if isinstance(draft, WrongType):
            return self._wrong_type(post, "draft", "a boolean", draft)
        if isinstance(draft, Value) and draft.value:
            return Outcome(post=post, action=Action.skip, message="draft")

        skip = param(post.params, f.skip, bool)
        if isinstance(skip, WrongType):
            return self._wrong_type(post, f.skip, "a boolean", skip)
        if isinstance(skip, Value) and skip.value:
            logger.debug("%s: field %s is true, skipping this post.", post.path, f.skip)
            return Outcome(post=post, action=Action.skip, message=f"{f.skip} is true")

        published_field = param(post.params, f.published, bool)
        if isinstance(published_field, Absent):
            return self._fail(post, Action.error, f"{post.path}: missing {f.published} field")
        if isinstance(published_field, WrongType):
            return self._wrong_type(post, f.published, "a boolean", published_field)
        published: bool = published_field.value

        id_field = param(post.params, f.id, int)
        if isinstance(id_field, Absent):
            return self._title_hint(post, published, f"{post.path}: missing {f.id} field in front matter")
        if isinstance(id_field, WrongType):
            return self._wrong_type(post, f.id, "an integer", id_field)
        article_id: int = id_field.value

        article = self.index.by_id.get(article_id)
        if article is None:
            return self._title_hint(post, published, f"{post.path}: {f.id} {article_id} is unknown")

        if article.title != post.title:
            return self._fail(post, Action.title_mismatch, (
                f"there seems to be a title mismatch in {post.path}.\n"
                f"--- dev.to title\n"
                f"+++ local title\n"
                f"- {article.title}\n"
                f"+ {post.title}\n"
                f"To fix the mismatch, go to: {article.edit_url(published)}"
            ))

        images = string_list_param(post.params, "images")
        if isinstance(images, WrongType):
            return self._wrong_type(post, "images", "an array of strings", images)
        cover_image = self.abs_url(images.value[0]) if isinstance(images, Value) and images.value else ""

        document = compose_document(post, published, cover_image, self.anchor_fn, self.parser)

        if self.mode == Mode.preview:
            return Outcome(post=post, action=Action.preview, document=document, article=article)

        if article.body_markdown == document:
            logger.info("%s: no change, skipping", post.path)
            return Outcome(post=post, action=Action.up_to_date, article=article)

        if self.mode == Mode.diff:
            changes = diff_summary(article.body_markdown, document)
            logger.info("%s: found differences (+%d/-%d lines)", post.path, changes["added"], changes["deleted"])
            lines = unified_diff(article.body_markdown, document,
                                 from_label=f"devto/{article.id}", to_label=str(post.path))
            return Outcome(post=post, action=Action.diff, document=document, diff=lines, article=article)

        if self.mode == Mode.status:
            return Outcome(post=post, action=Action.dry_run, document=document, article=article, message=(
                f"{post.path} will be pushed {_status(published)} to {article.edit_url(published)} "
                f"({f.id}: {article.id}, {f.published}: {str(published).lower()})"
            ))

        return self._push(post, article, document, published)

    def _push(self, post: SourcePost, article: RemoteArticle, document: str, published: bool) -> Outcome:
        try:
            updated = self.sync.update(article.id, document)
        except (DevtoError, SyncError) as e:
            return self._fail(post, Action.error, f"{post.path}: updating {self.fields.id} {article.id}: {e}")
        self.index.replace(updated)

        if self.record_url and updated.url:
            try:
                if record_field(post.path, self.fields.url, updated.url):
                    logger.debug("%s: recorded %s %s", post.path, self.fields.url, updated.url)
            except (OSError, ValueError) as e:
                logger.error("%s: could not record %s: %s", post.path, self.fields.url, e)

        return Outcome(post=post, action=Action.pushed, document=document, article=updated, message=(
            f"{post.path} pushed {_status(published)} to {updated.edit_url(published)} "
            f"({self.fields.id}: {updated.id}, {self.fields.published}: {str(published).lower()})"
        ))
