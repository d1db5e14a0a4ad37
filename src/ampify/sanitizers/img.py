"""Converts <img> tags to <amp-img> or <amp-anim>."""

import threading
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from ..attributes import IMG_FAMILY, filter_attributes, sanitize_dimension
from ..config import SanitizerConfig
from ..dimensions import DimensionExtractor, Dimensions
from ..dom import (
    add_or_append_attribute,
    attribute_value,
    create_node,
    get_node_attributes,
)
from ..layout import LAYOUT_FIXED_HEIGHT, synthesize_layout
from .base import LAYOUT_HINT_ATTRIBUTE, BaseSanitizer

UNKNOWN_SIZE_CLASS = "amp-wp-unknown-size"
UNKNOWN_WIDTH_CLASS = "amp-wp-unknown-width"
UNKNOWN_HEIGHT_CLASS = "amp-wp-unknown-height"
ENFORCED_SIZES_CLASS = "amp-wp-enforced-sizes"


class ImgSanitizer(BaseSanitizer):
    """Sanitize the <img> elements of a document.

    A pass scans every <img> in reverse document order. Images with a usable
    width and height are converted right away; the rest are grouped by src
    and sized with a single extractor batch, falling back to fixed defaults
    (flagged with ``amp-wp-unknown-*`` classes) when no size is found.
    """

    tag = "img"
    needs_dimensions = True

    def __init__(
        self,
        soup: BeautifulSoup,
        config: SanitizerConfig | None = None,
        extractor: DimensionExtractor | None = None,
        cancel: threading.Event | None = None,
    ):
        super().__init__(soup, config, cancel)
        self.extractor = extractor

    def sanitize(self) -> None:
        from ..logging import debug

        nodes = self.soup.find_all(self.tag)
        if not nodes:
            return

        need_dimensions: dict[str, list[Tag]] = {}

        for node in reversed(nodes):
            src = attribute_value(node.get("src")).strip()
            if not src:
                self.remove_invalid_child(node)
                continue

            width, height = self._node_dimensions(node)
            if width is None or height is None:
                need_dimensions.setdefault(src, []).append(node)
            else:
                self.adjust_and_replace_node(node)

        if not need_dimensions:
            return

        debug(f"  Sizing {len(need_dimensions)} image URLs")
        dimensions_by_url = self.determine_dimensions(need_dimensions)

        for url, node_list in need_dimensions.items():
            for node in node_list:
                attributes = self.apply_dimensions(node, dimensions_by_url.get(url))
                self.adjust_and_replace_node(node, attributes)

    def determine_dimensions(
        self, need_dimensions: dict[str, list[Tag]]
    ) -> dict[str, Dimensions]:
        """Look up every URL of the pass in one extractor batch."""
        if self.extractor is None:
            return {}
        return self.extractor.extract(list(need_dimensions), cancel=self.cancel)

    def apply_dimensions(self, node: Tag, dimensions: Dimensions | None) -> dict:
        """Return the node's attributes with missing dimensions filled in.

        Extracted sizes fill the missing sides (keeping the aspect ratio when
        the author gave one side). Whatever is still unknown gets the
        fallback treatment:

        - neither side: fallback width and height, ``amp-wp-unknown-size``
        - height only missing: fallback height, ``amp-wp-unknown-height``
        - width only missing: ``width="auto"`` for a ``fixed-height``
          layout (explicit or synthesized), the fallback width under any
          other explicit layout; ``amp-wp-unknown-width`` either way
        """
        from ..logging import debug

        attributes = get_node_attributes(node)
        width, height = self._node_dimensions(node)
        layout = self.get_data_amp_layout(node)

        if dimensions is not None and dimensions.is_complete:
            if width is None and height is None:
                width, height = dimensions.width, dimensions.height
            elif height is None:
                height = round(width * dimensions.height / dimensions.width)
            elif width is None:
                width = round(height * dimensions.width / dimensions.height)

        if width is None and height is None:
            width = self.config.fallback_width
            height = self.config.fallback_height
            tokens = [UNKNOWN_SIZE_CLASS]
        elif height is None:
            height = self.config.fallback_height
            tokens = [UNKNOWN_SIZE_CLASS, UNKNOWN_HEIGHT_CLASS]
        elif width is None:
            if layout and layout != LAYOUT_FIXED_HEIGHT:
                width = self.config.fallback_width
            tokens = [UNKNOWN_SIZE_CLASS, UNKNOWN_WIDTH_CLASS]
        else:
            tokens = []

        if width is not None:
            attributes["width"] = str(width)
        else:
            # Finalized as width="auto" with a fixed-height layout
            attributes.pop("width", None)
        attributes["height"] = str(height)

        for token in tokens:
            add_or_append_attribute(attributes, "class", token)
        if tokens:
            debug(f"    Unknown size for {attributes.get('src')}: {' '.join(tokens)}")

        return attributes

    def adjust_and_replace_node(self, node: Tag, attributes: dict | None = None) -> None:
        """Build the AMP element for a sized node and swap it into place."""
        self.check_cancelled()

        layout = self.get_data_amp_layout(node)
        old_attributes = dict(
            attributes if attributes is not None else get_node_attributes(node)
        )
        old_attributes.pop(LAYOUT_HINT_ATTRIBUTE, None)
        if layout:
            old_attributes[LAYOUT_HINT_ATTRIBUTE] = layout

        new_attributes = filter_attributes(
            IMG_FAMILY, old_attributes, self.config.content_max_width
        )
        new_attributes = synthesize_layout(new_attributes, bool(layout))
        if new_attributes.get("layout") == LAYOUT_FIXED_HEIGHT:
            new_attributes.setdefault("width", "auto")
        add_or_append_attribute(new_attributes, "class", ENFORCED_SIZES_CLASS)

        if self.is_anim_url(new_attributes["src"]):
            new_tag = "amp-anim"
            self.required_components.add(new_tag)
        else:
            new_tag = "amp-img"

        node.replace_with(create_node(self.soup, new_tag, new_attributes))
        self.converted_count += 1

    def is_anim_url(self, url: str) -> bool:
        """Return True if the URL path ends in an animation extension."""
        try:
            path = urlparse(url).path.lower()
        except ValueError:
            return False
        return any(path.endswith(ext) for ext in self.config.anim_extensions)

    def _node_dimensions(self, node: Tag) -> tuple[int | None, int | None]:
        max_width = self.config.content_max_width
        return (
            sanitize_dimension(node.get("width"), "width", max_width),
            sanitize_dimension(node.get("height"), "height", max_width),
        )
