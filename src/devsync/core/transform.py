"""Line-scoped text rewrites from the source-site markdown dialect to dev.to markdown

Matches never span a line break, so multi-line shortcodes, images and <img>
tags are left unconverted.
"""

import re


SHORTCODE_RE = re.compile(r'\{\{< ([a-z]+) (.*?) >\}\}')
MD_IMAGE_RE  = re.compile(r'!\[([^\]\n]*?)\]\((\S*?)\)')
HTML_IMG_RE  = re.compile(r'src="([^"\n]*?(?:png|PNG|jpeg|JPG|jpg|gif|GIF|svg|SVG))"')
SCHEME_RE    = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.-]*:')


def is_absolute(path: str) -> bool:
    """True for root-relative paths and anything carrying a URL scheme."""
    return path.startswith('/') or bool(SCHEME_RE.match(path))


def convert_shortcodes(markdown: str) -> str:
    """{{< youtube 30a0WrfaS2A >}} -> {% youtube 30a0WrfaS2A %}"""
    return SHORTCODE_RE.sub(r'{% \1 \2 %}', markdown)


def absolutize_markdown_images(markdown: str, base_url: str) -> str:
    """Prefix relative ![alt](path) targets with the post URL (which ends with '/')."""
    def _replace(m: re.Match) -> str:
        alt, path = m.group(1), m.group(2)
        if is_absolute(path):
            return m.group(0)
        return f'![{alt}]({base_url}{path})'
    return MD_IMAGE_RE.sub(_replace, markdown)


def absolutize_html_images(markdown: str, base_url: str) -> str:
    """Prefix relative src="...png" attributes with the post URL, keeping the rest of the tag."""
    def _replace(m: re.Match) -> str:
        path = m.group(1)
        if is_absolute(path):
            return m.group(0)
        return f'src="{base_url}{path}"'
    return HTML_IMG_RE.sub(_replace, markdown)


def transform_body(markdown: str, base_url: str) -> str:
    """Apply the three rewrites in their fixed order."""
    markdown = convert_shortcodes(markdown)
    markdown = absolutize_markdown_images(markdown, base_url)
    return absolutize_html_images(markdown, base_url)
