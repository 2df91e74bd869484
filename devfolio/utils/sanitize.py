"""
HTML sanitization

Rendered blog posts are cleaned against an allow-list before they are
served; contact form fields are reduced to plain text.
"""

import re
from typing import Optional

from bleach.sanitizer import Cleaner

# Everything python-markdown emits for the enabled extensions
BLOG_TAGS = frozenset({
    'p', 'br', 'hr', 'strong', 'em', 'del', 'blockquote',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    'ul', 'ol', 'li', 'a', 'img', 'code', 'pre',
    'table', 'thead', 'tbody', 'tr', 'th', 'td', 'div', 'span',
})

BLOG_ATTRIBUTES = {
    'a': ['href', 'title', 'target', 'rel'],
    'img': ['src', 'alt', 'title', 'width', 'height'],
    'code': ['class'],
    'pre': ['class'],
    'div': ['class'],
    'span': ['class'],
    'th': ['align'],
    'td': ['align'],
    **{f'h{level}': ['id'] for level in range(1, 7)},
}

ALLOWED_PROTOCOLS = frozenset({'http', 'https', 'mailto'})

# Cleaners are not thread-safe; they are only used on the event loop thread
_blog_cleaner = Cleaner(
    tags=BLOG_TAGS,
    attributes=BLOG_ATTRIBUTES,
    protocols=ALLOWED_PROTOCOLS,
    strip=True,
)
_text_cleaner = Cleaner(tags=set(), strip=True)

_RUNS_OF_SPACES = re.compile(r'[ \t]+')


def sanitize_html(html: Optional[str], strip: bool = False) -> str:
    """
    Clean rendered HTML against the blog allow-list.

    Args:
        html: HTML to clean
        strip: Remove every tag and keep only the text

    Returns:
        Safe HTML (or text when strip is set)
    """
    if html is None:
        return ""
    if strip:
        return _text_cleaner.clean(html)
    return _blog_cleaner.clean(html)


def sanitize_plain_text(text: Optional[str]) -> str:
    """Strip all markup from a contact form field and collapse spaces."""
    if text is None:
        return ""
    return _RUNS_OF_SPACES.sub(' ', _text_cleaner.clean(text)).strip()
