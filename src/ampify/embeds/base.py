"""Common contract for provider embed handlers."""

from urllib.parse import urlparse

from ..hooks import FilterChain

OEMBED_HTML_EVENT = "embed_oembed_html"


class BaseEmbedHandler:
    """Rewrites one provider's oEmbed markup into its AMP custom element.

    Subclasses set ``name``, ``tag`` and ``hosts`` and implement
    ``transform``. Handlers hold configuration only; they keep no state
    between documents.
    """

    name: str = ""
    tag: str = ""
    # Provider domains; subdomains match too
    hosts: tuple[str, ...] = ()
    priority: float = 10

    def __init__(self, args: dict | None = None):
        self.args = dict(args or {})

    def matches(self, url: str) -> bool:
        """Return True if ``url`` is served from one of the provider's hosts."""
        if not url:
            return False
        try:
            parsed = urlparse(url.strip())
            host = parsed.hostname or ""
        except ValueError:
            return False
        if parsed.scheme.lower() not in ("http", "https"):
            return False
        return any(host == h or host.endswith(f".{h}") for h in self.hosts)

    def transform(self, html: str, url: str, attributes: dict) -> str:
        """Return AMP markup for ``html``, or ``html`` unchanged."""
        raise NotImplementedError

    def filter_embed_oembed_html(self, html: str, url: str, attributes: dict) -> str:
        if not self.matches(url):
            return html
        return self.transform(html, url, dict(attributes or {}))

    def register_embed(self, chain: FilterChain) -> None:
        chain.add_filter(
            OEMBED_HTML_EVENT, self.name, self.filter_embed_oembed_html, self.priority
        )

    def unregister_embed(self, chain: FilterChain) -> None:
        chain.remove_filter(OEMBED_HTML_EVENT, self.name)
