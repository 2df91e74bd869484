"""
Markdown rendering for blog posts.

Markdown source is rendered with fenced code blocks (language class kept
for client-side highlighting), tables and heading anchors. Links to other
hosts open in a new tab. The result is sanitized before it leaves this
module.
"""

from urllib.parse import urlsplit

import markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from devfolio.config import settings
from devfolio.utils.sanitize import sanitize_html

MD_EXTENSIONS = ["fenced_code", "tables", "toc", "sane_lists"]
MD_EXTENSION_CONFIGS = {
    "toc": {"permalink": False},
}


class ExternalLinkTreeprocessor(Treeprocessor):
    def __init__(self, md, site_host: str = ""):
        super().__init__(md)
        self.site_host = site_host.lower()

    def run(self, root):
        for link in root.iter("a"):
            href = link.get("href", "")
            if not href.startswith(("http://", "https://")):
                continue
            if self.site_host and (urlsplit(href).hostname or "") == self.site_host:
                continue
            link.set("target", "_blank")
            link.set("rel", "noopener noreferrer")


class ExternalLinkExtension(Extension):
    def __init__(self, **kwargs):
        self.config = {"site_host": ["", "Host whose links stay in the same tab"]}
        super().__init__(**kwargs)

    def extendMarkdown(self, md):
        processor = ExternalLinkTreeprocessor(md, self.getConfig("site_host") or "")
        md.treeprocessors.register(processor, "external_links", 5)


def _markdown_renderer(site_host: str | None) -> markdown.Markdown:
    return markdown.Markdown(
        extensions=[*MD_EXTENSIONS, ExternalLinkExtension(site_host=site_host or "")],
        extension_configs=MD_EXTENSION_CONFIGS,
    )


def render_markdown(text: str | None, site_host: str | None = None) -> str:
    """Render markdown to sanitized HTML (site_host defaults to settings.site_host)."""
    if not text:
        return ""
    # Markdown instances carry per-document state (toc ids), so use a fresh one
    html = _markdown_renderer(site_host or settings.site_host).convert(text)
    return sanitize_html(html)
