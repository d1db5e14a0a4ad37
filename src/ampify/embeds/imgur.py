"""Imgur embeds -> <amp-imgur>."""

import re
from urllib.parse import urlparse

from ..attributes import IMGUR_FAMILY, filter_attributes
from ..dom import build_tag
from ..layout import synthesize_layout
from .base import BaseEmbedHandler

WIDTH_PATTERN = re.compile(r"""width=["']?(\d+)""")
HEIGHT_PATTERN = re.compile(r"""height=["']?(\d+)""")
ID_PATTERN = re.compile(r"/([A-Za-z0-9]+)")


class ImgurEmbedHandler(BaseEmbedHandler):
    """Handler for imgur.com galleries and single images."""

    name = "imgur"
    tag = "amp-imgur"
    hosts = ("imgur.com",)

    def transform(self, html: str, url: str, attributes: dict) -> str:
        attributes = dict(attributes)

        match = WIDTH_PATTERN.search(html or "")
        if match:
            attributes["width"] = match.group(1)
        match = HEIGHT_PATTERN.search(html or "")
        if match:
            attributes["height"] = match.group(1)

        if not attributes.get("height"):
            return html

        imgur_id = self.parse_id(url)
        if not imgur_id:
            return html

        out = {
            key: attributes[key]
            for key in ("width", "height")
            if attributes.get(key)
        }
        out = filter_attributes(IMGUR_FAMILY, out)
        if "height" not in out:
            return html
        out = synthesize_layout(out, has_explicit_layout=False, default_layout=None)
        out["data-imgur-id"] = imgur_id

        return build_tag(self.tag, out)

    @staticmethod
    def parse_id(url: str) -> str | None:
        """Return the gallery or image id from an Imgur URL path."""
        try:
            path = urlparse(url.strip()).path
        except ValueError:
            return None
        _, sep, rest = path.partition("/gallery/")
        if sep:
            return rest.strip("/").split("/")[0] or None
        match = ID_PATTERN.search(path)
        return match.group(1) if match else None
