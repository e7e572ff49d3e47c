"""YAML front matter: split a source file and record fields back into it"""

import re
from pathlib import Path
from typing import Any

import yaml


# Opening delimiter, header lines, closing delimiter line; each delimiter owns one line ending.
HEADER_RE = re.compile(r'\A(---[ \t]*\r?\n)(.*?\r?\n)?(---[ \t]*(?:\r?\n|\Z))', re.DOTALL)


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body).

    The body starts right after the line ending of the closing delimiter, so
    blank lines that follow the header are kept.
    """
    m = HEADER_RE.match(text)
    if m is None:
        return {}, text
    try:
        fm = yaml.safe_load(m.group(2) or '')
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML frontmatter: {e}") from e
    if fm is None:
        fm = {}
    if not isinstance(fm, dict):
        raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
    return fm, text[m.end():]


def set_field(text: str, name: str, value: str) -> str:
    """Set `name: "value"` inside the front matter of text.

    An existing top-level field is replaced in place, otherwise the field is
    appended just before the closing delimiter. Text after the header is never
    touched, and the header keeps the line ending of its opening delimiter.
    """
    m = HEADER_RE.match(text)
    if m is None:
        raise ValueError("no front matter found")
    opening, header, closing = m.group(1), m.group(2) or '', m.group(3)
    eol = '\r\n' if opening.endswith('\r\n') else '\n'
    line = f'{name}: "{value}"'
    field_re = re.compile(rf'^{re.escape(name)}[ \t]*:[^\r\n]*', re.MULTILINE)
    if field_re.search(header):
        header = field_re.sub(lambda _: line, header, count=1)
    else:
        header += line + eol
    return opening + header + closing + text[m.end():]


def record_field(path: Path, name: str, value: str) -> bool:
    """Write a front-matter field into the file at path. Returns False when nothing changed."""
    with path.open(encoding='utf-8', newline='') as f:
        text = f.read()
    updated = set_field(text, name, value)
    if updated == text:
        return False
    with path.open('w', encoding='utf-8', newline='') as f:
        f.write(updated)
    return True
