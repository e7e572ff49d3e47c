"""Rewrite in-document anchor links from source-site heading IDs to dev.to heading IDs"""

import bisect
import difflib
import logging
import re
from typing import Callable, Optional

from markdown_it import MarkdownIt

from devsync.core.utils.slug import devto_anchor


logger = logging.getLogger(__name__)

ANCHOR_LINK_RE = re.compile(r'\[([^\]]*)\]\(#([^)]*)\)')
CODE_TOKENS = {'fence', 'code_block'}


def make_parser(preset: str = 'gfm-like') -> MarkdownIt:
    """Block-structure parser; bare URLs are never turned into links."""
    return MarkdownIt(preset).disable('linkify', ignoreInvalid=True)


def build_heading_index(
    tokens: list,
    anchor_fn: Callable[[str], str],
    source: str = '',
    ) -> dict[str, str]:
    """Map anchor_fn(heading) -> heading text for every single-line heading.

    The first heading registered for a slug wins.
    """
    index: dict[str, str] = {}
    for i, tok in enumerate(tokens):
        if tok.type != 'heading_open':
            continue
        inline = tokens[i + 1] if i + 1 < len(tokens) else None
        if inline is None or inline.type != 'inline':
            continue
        heading = inline.content
        if '\n' in heading:
            logger.error("%s: unexpected heading spanning several lines: %r", source, heading)
            continue
        index.setdefault(anchor_fn(heading), heading)
    return index


def _code_lines(tokens: list) -> set[int]:
    """Zero-based source lines covered by fenced or indented code blocks."""
    lines: set[int] = set()
    for tok in tokens:
        if tok.type in CODE_TOKENS and tok.map:
            start, end = tok.map
            lines.update(range(start, end))
    return lines


def closest_anchor(anchor: str, candidates: list[str]) -> Optional[str]:
    """Best fuzzy match for a broken anchor, or None when there is nothing to suggest."""
    matches = difflib.get_close_matches(anchor, sorted(candidates), n=1, cutoff=0.0)
    return matches[0] if matches else None


def convert_anchor_ids(
    markdown: str,
    anchor_fn: Callable[[str], str],
    source: str = '',
    parser: Optional[MarkdownIt] = None,
    ) -> str:
    """Replace every [text](#anchor) target with the dev.to ID of the same heading.

    Anchors that match no heading are logged with a suggestion and left as is.
    Links inside code blocks are not touched.
    """
    tokens = (parser or make_parser()).parse(markdown)
    index = build_heading_index(tokens, anchor_fn, source)
    skip_lines = _code_lines(tokens)
    line_starts = [0] + [m.end() for m in re.finditer(r'\n', markdown)]

    def _replace(m: re.Match) -> str:
        if skip_lines and bisect.bisect_right(line_starts, m.start()) - 1 in skip_lines:
            return m.group(0)
        text, anchor = m.group(1), m.group(2)
        heading = index.get(anchor)
        if heading is None:
            suggestion = closest_anchor(anchor, list(index))
            if suggestion is None:
                logger.error("%s: anchor %r in link %s doesn't exist in the document.",
                             source, anchor, m.group(0))
            else:
                logger.error("%s: anchor %r in link %s doesn't exist in the document. Did you mean %s?",
                             source, anchor, m.group(0), suggestion)
            return m.group(0)
        return f'[{text}](#{devto_anchor(heading)})'

    return ANCHOR_LINK_RE.sub(_replace, markdown)
