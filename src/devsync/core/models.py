"""Data models shared by the content reader, reconciler and remote sync"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, field_validator


class Action(str, Enum):
    skip            = "skip"
    missing_mapping = "missing_mapping"
    title_mismatch  = "title_mismatch"
    up_to_date      = "up_to_date"
    dry_run         = "dry_run"
    diff            = "diff"
    preview         = "preview"
    pushed          = "pushed"
    error           = "error"


ERROR_ACTIONS = {Action.missing_mapping, Action.title_mismatch, Action.error}


class Mode(str, Enum):
    status  = "status"      # dry run
    preview = "preview"
    diff    = "diff"
    push    = "push"


@dataclass(frozen=True)
class FieldNames:
    """Front-matter field names that map a post to a remote article."""
    id:        str = "devtoId"
    published: str = "devtoPublished"
    skip:      str = "devtoSkip"
    url:       str = "devtoUrl"


# --- typed front-matter access ---

@dataclass(frozen=True)
class Absent:
    pass


@dataclass(frozen=True)
class WrongType:
    kind: str       # type name of the value actually found


@dataclass(frozen=True)
class Value:
    value: Any


def _lookup(params: dict[str, Any], name: str) -> tuple[bool, Any]:
    """Case-insensitive key lookup; exact match first."""
    if name in params:
        return True, params[name]
    lowered = name.lower()
    for key, val in params.items():
        if isinstance(key, str) and key.lower() == lowered:
            return True, val
    return False, None


def param(params: dict[str, Any], name: str, expected: type) -> Absent | WrongType | Value:
    """Read a front-matter field, reporting absence and type mismatches explicitly.

    A null value counts as absent. bool is never accepted where int is expected.
    """
    found, val = _lookup(params, name)
    if not found or val is None:
        return Absent()
    if expected is int and isinstance(val, bool):
        return WrongType(type(val).__name__)
    if not isinstance(val, expected):
        return WrongType(type(val).__name__)
    return Value(val)


def string_list_param(params: dict[str, Any], name: str) -> Absent | WrongType | Value:
    """Like param() for a list of strings."""
    result = param(params, name, list)
    if not isinstance(result, Value):
        return result
    for item in result.value:
        if not isinstance(item, str):
            return WrongType(f"list containing {type(item).__name__}")
    return result


@dataclass
class SourcePost:
    """A post as produced by the content source; immutable for one run."""
    path:        Path
    title:       str
    description: str
    keywords:    list[str]
    date:        datetime           # UTC
    permalink:   str                # absolute URL, trailing slash
    body:        str                # raw markdown, front matter stripped
    params:      dict[str, Any] = field(default_factory=dict)


class RemoteArticle(BaseModel):
    """An article as returned by the remote platform."""
    id: int
    title: str = ""
    body_markdown: str = ""
    published: bool = False
    url: str = ""

    @field_validator("title", "body_markdown", "url", mode="before")
    @classmethod
    def _null_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    def edit_url(self, published: Optional[bool] = None) -> str:
        """Unpublished articles are only reachable through their /edit page."""
        published = self.published if published is None else published
        return self.url if published else f"{self.url}/edit"


class ArticleIndex:
    """Remote articles keyed by id and by title, built once per run."""

    def __init__(self, articles: list[RemoteArticle]):
        self.articles = list(articles)
        self.by_id: dict[int, RemoteArticle] = {}
        self.by_title: dict[str, RemoteArticle] = {}
        for art in self.articles:
            self.by_id[art.id] = art
            self.by_title[art.title] = art

    def __len__(self) -> int:
        return len(self.articles)

    def replace(self, article: RemoteArticle) -> None:
        """Store an update response as the new in-memory value."""
        self.articles = [article if a.id == article.id else a for a in self.articles]
        self.by_id[article.id] = article
        self.by_title[article.title] = article


@dataclass
class Outcome:
    """The single action taken for one post."""
    post:     SourcePost
    action:   Action
    message:  str = ""
    document: Optional[str] = None
    diff:     Optional[list[str]] = None
    article:  Optional[RemoteArticle] = None

    @property
    def is_error(self) -> bool:
        return self.action in ERROR_ACTIONS
