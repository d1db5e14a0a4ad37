"""Base class for tag sanitizers."""

import threading

from bs4 import BeautifulSoup, Tag

from ..config import SanitizerConfig
from ..dom import attribute_value
from ..errors import SanitizationCancelled
from ..layout import normalize_layout

LAYOUT_HINT_ATTRIBUTE = "data-amp-layout"


class BaseSanitizer:
    """Rewrites one family of tags in a parsed document.

    Args:
        soup: Document being sanitized; mutated in place
        config: Sanitizer settings
        cancel: Event the host sets to stop the pass early
    """

    tag: str = ""
    needs_dimensions: bool = False

    def __init__(
        self,
        soup: BeautifulSoup,
        config: SanitizerConfig | None = None,
        cancel: threading.Event | None = None,
    ):
        self.soup = soup
        self.config = config or SanitizerConfig()
        self.cancel = cancel
        self.removed_count = 0
        self.converted_count = 0
        self.required_components: set[str] = set()

    def sanitize(self) -> None:
        raise NotImplementedError

    @property
    def did_convert_elements(self) -> bool:
        return self.converted_count > 0

    def remove_invalid_child(self, node: Tag) -> None:
        """Drop a node that cannot be converted."""
        from ..logging import debug

        debug(f"    Removed invalid <{node.name}>: {node.attrs!r}")
        node.decompose()
        self.removed_count += 1

    def get_data_amp_layout(self, node: Tag) -> str | None:
        """Return the author-declared layout for a node.

        The node's own ``data-amp-layout`` wins; otherwise a wrapping
        ``<figure data-amp-layout>`` applies. Values that are not AMP
        layouts are ignored.
        """
        layout = normalize_layout(attribute_value(node.get(LAYOUT_HINT_ATTRIBUTE)))
        if layout:
            return layout

        parent = node.parent
        if isinstance(parent, Tag) and parent.name == "figure":
            return normalize_layout(attribute_value(parent.get(LAYOUT_HINT_ATTRIBUTE)))
        return None

    def check_cancelled(self) -> None:
        if self.cancel is not None and self.cancel.is_set():
            raise SanitizationCancelled(
                f"<{self.tag}> sanitizing cancelled after {self.converted_count} nodes"
            )
