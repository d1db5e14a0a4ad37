"""Running sanitizers and embed handlers over whole documents."""

import threading
from dataclasses import dataclass, field, replace
from pathlib import Path

from bs4 import BeautifulSoup

from .cache import DIMENSION_CACHE_FILE, DimensionCache
from .config import Config
from .dimensions import DimensionExtractor
from .dom import serialize
from .embeds import EmbedSession
from .errors import SanitizationCancelled
from .hooks import FilterChain
from .remote import RemoteGetRequest
from .sanitizers import DEFAULT_SANITIZERS, BaseSanitizer


@dataclass
class SanitizeResult:
    """Output of one sanitize pass."""

    html: str
    converted: int = 0
    removed: int = 0
    components: set[str] = field(default_factory=set)

    @property
    def modified(self) -> bool:
        return bool(self.converted or self.removed)


def build_extractor(
    config: Config,
    remote: RemoteGetRequest | None = None,
    fetch: bool = True,
) -> DimensionExtractor:
    """Create a dimension extractor from configuration.

    Args:
        config: Loaded configuration
        remote: GET collaborator override (tests pass a stub)
        fetch: If False, never touch the network

    Returns:
        Extractor with the per-URL cache attached when enabled
    """
    extractor_config = config.extractor
    if not fetch and extractor_config.enabled:
        extractor_config = replace(extractor_config, enabled=False)

    cache = None
    if extractor_config.cache:
        cache = DimensionCache(config.get_cache_dir() / DIMENSION_CACHE_FILE)

    return DimensionExtractor(remote=remote, config=extractor_config, cache=cache)


def sanitize_document(
    html: str,
    config: Config | None = None,
    extractor: DimensionExtractor | None = None,
    sanitizers: list[type[BaseSanitizer]] | None = None,
    cancel: threading.Event | None = None,
) -> SanitizeResult:
    """Convert the HTML of a document or fragment to AMP markup.

    Args:
        html: Document or fragment to process
        config: Configuration (defaults when omitted)
        extractor: Dimension extractor; without one, unsized images get the
            fallback size
        sanitizers: Sanitizer classes to run, in order
        cancel: Event the host sets to abandon the pass

    Returns:
        SanitizeResult with the serialized tree and pass statistics

    Raises:
        SanitizationCancelled: If ``cancel`` was set during the pass
    """
    from .logging import debug

    config = config or Config()
    soup = BeautifulSoup(html, "html.parser")
    result = SanitizeResult(html=html)

    for sanitizer_cls in sanitizers if sanitizers is not None else DEFAULT_SANITIZERS:
        if sanitizer_cls.needs_dimensions:
            sanitizer = sanitizer_cls(
                soup, config.sanitizer, extractor=extractor, cancel=cancel
            )
        else:
            sanitizer = sanitizer_cls(soup, config.sanitizer, cancel=cancel)
        try:
            sanitizer.sanitize()
        except SanitizationCancelled as e:
            e.partial_html = serialize(soup)
            raise

        result.converted += sanitizer.converted_count
        result.removed += sanitizer.removed_count
        result.components |= sanitizer.required_components
        if sanitizer.did_convert_elements or sanitizer.removed_count:
            debug(
                f"  <{sanitizer.tag}>: {sanitizer.converted_count} converted, "
                f"{sanitizer.removed_count} removed"
            )

    if result.modified:
        result.html = serialize(soup)
    return result


def sanitize_html(html: str, **kwargs) -> str:
    """Shorthand for ``sanitize_document(...).html``."""
    return sanitize_document(html, **kwargs).html


def process_html_file(
    html_file: Path,
    config: Config | None = None,
    extractor: DimensionExtractor | None = None,
    output: Path | None = None,
) -> bool:
    """Sanitize one HTML file.

    Args:
        html_file: File to read
        config: Configuration
        extractor: Dimension extractor
        output: Where to write; defaults to rewriting ``html_file``

    Returns:
        True if the file content changed, False otherwise (including errors)
    """
    from .logging import debug, error

    try:
        content = html_file.read_text(encoding="utf-8")
        result = sanitize_document(content, config=config, extractor=extractor)

        target = output or html_file
        if result.modified or output is not None:
            target.write_text(result.html, encoding="utf-8")

        if result.modified:
            components = (
                f", needs {', '.join(sorted(result.components))}"
                if result.components
                else ""
            )
            debug(
                f"  Sanitized: {html_file.name} ({result.converted} converted, "
                f"{result.removed} removed{components})"
            )
        return result.modified

    except (OSError, UnicodeDecodeError) as e:
        error(f"Processing {html_file}: {e}")
        return False


def render_embed(
    url: str,
    html: str,
    attributes: dict | None = None,
    config: Config | None = None,
    chain: FilterChain | None = None,
) -> str:
    """Run the enabled embed handlers over a single oEmbed result.

    Handlers are registered for the duration of the call only.
    """
    config = config or Config()
    with EmbedSession(config.embeds.enabled, chain=chain) as session:
        return session.render(url, html, attributes)
