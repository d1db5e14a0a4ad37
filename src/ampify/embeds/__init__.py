"""Provider embed handlers and their per-session registration."""

from ..hooks import FilterChain
from .base import OEMBED_HTML_EVENT, BaseEmbedHandler
from .imgur import ImgurEmbedHandler

EMBED_HANDLERS: dict[str, type[BaseEmbedHandler]] = {
    ImgurEmbedHandler.name: ImgurEmbedHandler,
}


class EmbedSession:
    """Registers embed handlers on a filter chain for one processing session.

    Used as a context manager; on exit every handler it registered is
    removed again, leaving the chain as it found it.

    Args:
        names: Handler names to enable, in registration order
        chain: Filter chain to register on (a fresh one by default)
        args: Configuration passed to every handler
    """

    def __init__(
        self,
        names: list[str] | None = None,
        chain: FilterChain | None = None,
        args: dict | None = None,
    ):
        from ..logging import warning

        self.chain = chain if chain is not None else FilterChain()
        self.handlers: list[BaseEmbedHandler] = []
        for name in EMBED_HANDLERS if names is None else names:
            handler_cls = EMBED_HANDLERS.get(name)
            if handler_cls is None:
                warning(f"Unknown embed handler '{name}'")
                continue
            self.handlers.append(handler_cls(args))

    def register(self) -> None:
        for handler in self.handlers:
            handler.register_embed(self.chain)

    def unregister(self) -> None:
        for handler in self.handlers:
            handler.unregister_embed(self.chain)

    def render(self, url: str, html: str, attributes: dict | None = None) -> str:
        """Filter one oEmbed result through the registered handlers."""
        return self.chain.apply_filters(OEMBED_HTML_EVENT, html, url, attributes or {})

    def __enter__(self) -> "EmbedSession":
        self.register()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unregister()


__all__ = [
    "EMBED_HANDLERS",
    "OEMBED_HTML_EVENT",
    "BaseEmbedHandler",
    "EmbedSession",
    "ImgurEmbedHandler",
]
