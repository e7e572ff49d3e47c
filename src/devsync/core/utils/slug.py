"""Heading anchor slugs for the source site and for dev.to"""

import re


CODE_SPAN_RE   = re.compile(r'`([^`]*)`')
WHITESPACE_RE  = re.compile(r'\s+')
NON_ANCHOR_RE  = re.compile(r'[^-a-zA-Z0-9 ]')
DASHES_RE      = re.compile(r'-{2,}')


def github_anchor(heading: str) -> str:
    """GitHub-style heading ID, as generated by the source site.

    Letters and digits are lower-cased, '-' and '_' are kept, whitespace
    becomes '-', and everything else is dropped. Dashes are not collapsed.
    """
    out = []
    for ch in heading.strip():
        if ch.isalnum():
            out.append(ch.lower())
        elif ch in '-_':
            out.append(ch)
        elif ch.isspace():
            out.append('-')
    return ''.join(out)


def devto_anchor(heading: str) -> str:
    """dev.to heading ID for the raw heading text."""
    text = CODE_SPAN_RE.sub(r'-raw-\1-endraw-', heading)
    text = WHITESPACE_RE.sub('-', text)
    text = NON_ANCHOR_RE.sub('', text)
    text = DASHES_RE.sub('-', text)
    return text.lower()
