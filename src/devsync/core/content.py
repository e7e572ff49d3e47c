"""Read posts and site configuration from a static site tree"""

import tomllib
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

from devsync.core.frontmatter import split_frontmatter
from devsync.core.models import SourcePost, Value, param, string_list_param
from devsync.core.transform import is_absolute
from devsync.core.utils.slug import github_anchor


CONFIG_FILES = ('config.yaml', 'config.yml', 'hugo.yaml', 'hugo.yml', 'config.toml', 'hugo.toml')
CONTENT_DIR = 'content'
MD_EXTENSIONS = {'.md'}
SECTION_INDEX = '_index.md'
BUNDLE_INDEX = 'index.md'
ZERO_DATE = datetime(1, 1, 1, tzinfo=timezone.utc)


class ContentError(ValueError):
    """The site tree or one of its posts cannot be read."""


def load_site_config(root: Path) -> dict[str, Any]:
    """Load the first site configuration file found in root."""
    for name in CONFIG_FILES:
        p = root / name
        if not p.is_file():
            continue
        text = p.read_text(encoding='utf-8')
        try:
            data = tomllib.loads(text) if p.suffix == '.toml' else yaml.safe_load(text)
        except (yaml.YAMLError, tomllib.TOMLDecodeError) as e:
            raise ContentError(f"Invalid site configuration {p}: {e}") from e
        if not isinstance(data, dict):
            raise ContentError(f"Invalid site configuration {p}: expected a mapping")
        return data
    raise ContentError(f"no site configuration found in {root} (tried {', '.join(CONFIG_FILES)})")


def to_utc(value: Any) -> datetime:
    """Normalize a front-matter date to an aware UTC datetime; naive values are taken as UTC."""
    if value is None:
        return ZERO_DATE
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
        except ValueError as e:
            raise ContentError(f"invalid date {value!r}") from e
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    raise ContentError(f"invalid date of type {type(value).__name__}")


def _url_path(rel: Path, params: dict[str, Any]) -> str:
    """URL path of a post relative to the base URL, with leading and trailing slash."""
    url = param(params, 'url', str)
    if isinstance(url, Value):
        path = url.value
    else:
        parts = list(rel.parent.parts) if rel.name == BUNDLE_INDEX else [*rel.parent.parts, rel.stem]
        slug = param(params, 'slug', str)
        if isinstance(slug, Value) and parts:
            parts[-1] = slug.value
        path = '/'.join(parts)
    path = path.strip().strip('/').lower().replace(' ', '-')
    return f'/{path}/' if path else '/'


class Site:
    """A static site rooted at `root` with posts under root/content."""

    def __init__(self, root: Path, base_url: str, anchor_fn: Callable[[str], str] = github_anchor):
        self.root = root
        self.content_dir = root / CONTENT_DIR
        self.base_url = base_url.rstrip('/') + '/'
        self.anchor_fn = anchor_fn

    @classmethod
    def load(cls, root: Path) -> "Site":
        """Read the site configuration; raises ContentError when the root is unusable."""
        if not root.is_dir():
            raise ContentError(f"root directory {root} does not exist")
        config = load_site_config(root)
        base_url = next((v for k, v in config.items() if k.lower() == 'baseurl'), None)
        if not isinstance(base_url, str) or not base_url.strip():
            raise ContentError(f"baseURL is not set in the site configuration of {root}")
        return cls(root, base_url.strip())

    def abs_url(self, path: str) -> str:
        """Absolute URL for a path relative to the site root."""
        if is_absolute(path) and not path.startswith('/'):
            return path
        return self.base_url + path.lstrip('/')

    def permalink(self, rel: Path, params: dict[str, Any]) -> str:
        return self.base_url.rstrip('/') + _url_path(rel, params)

    def discover(self) -> list[Path]:
        """Sorted post files under the content directory.

        Section indexes are excluded, and so is any other Markdown file inside a
        leaf bundle (a directory holding index.md), which is a page resource.
        """
        if not self.content_dir.is_dir():
            raise ContentError(f"content directory {self.content_dir} does not exist")
        files = [
            p for p in self.content_dir.rglob('*')
            if p.suffix in MD_EXTENSIONS and p.name != SECTION_INDEX and p.is_file()
        ]
        bundles = {p.parent for p in files if p.name == BUNDLE_INDEX and p.parent != self.content_dir}
        return sorted(
            p for p in files
            if not bundles.intersection(p.parent.parents if p.name == BUNDLE_INDEX else p.parents)
        )

    def load_post(self, path: Path) -> SourcePost:
        """Parse one post file into a SourcePost."""
        try:
            rel = path.resolve().relative_to(self.content_dir.resolve())
        except ValueError as e:
            raise ContentError(f"{path} is not inside {self.content_dir}") from e
        try:
            params, body = split_frontmatter(path.read_text(encoding='utf-8'))
        except ValueError as e:
            raise ContentError(f"{path}: {e}") from e

        keywords = string_list_param(params, 'keywords')
        try:
            post_date = to_utc(params.get('date'))
        except ContentError as e:
            raise ContentError(f"{path}: {e}") from e
        return SourcePost(
            path=path,
            title=str(params.get('title') or ''),
            description=str(params.get('description') or ''),
            keywords=keywords.value if isinstance(keywords, Value) else [],
            date=post_date,
            permalink=self.permalink(rel, params),
            body=body,
            params=params,
        )

    def posts(self) -> list[SourcePost]:
        return [self.load_post(p) for p in self.discover()]

    def find_post(self, arg: str) -> SourcePost:
        """Find one post by file path or by URL path."""
        for candidate in (Path(arg), self.root / arg):
            if candidate.is_file():
                return self.load_post(candidate)

        url_path = arg.strip('/')
        as_file = self.content_dir / f"{url_path}.md"
        as_index = self.content_dir / url_path / BUNDLE_INDEX
        for candidate in (as_file, as_index):
            if candidate.is_file():
                return self.load_post(candidate)
        raise ContentError(
            f"wasn't able to find the source file for the URL path {arg}, tried:\n"
            f"  - as a Markdown file ({as_file})\n"
            f"  - as an index file ({as_index})"
        )


def select_posts(site: Site, arg: Optional[str]) -> list[SourcePost]:
    """All posts of the site, or only the one named by arg."""
    return [site.find_post(arg)] if arg else site.posts()
