"""Per-tag-family attribute allow-lists.

Each family declares which source attributes may reach the AMP element.
Everything else is dropped silently. ``width``/``height`` are normalized
to integer pixels and the author layout hint is renamed to ``layout``.
"""

import re
from dataclasses import dataclass, field

from .logging import debug

_PIXELS_RE = re.compile(r"^\s*(\d+)(\.\d+)?\s*(px)?\s*$", re.IGNORECASE)
_PERCENT_RE = re.compile(r"^\s*(\d+(\.\d+)?)\s*%\s*$")


@dataclass(frozen=True)
class TagFamily:
    """Allow-list and transform rules for one family of source tags."""

    name: str
    allowed: frozenset[str]
    dimension_keys: frozenset[str] = field(
        default_factory=lambda: frozenset({"width", "height"})
    )
    layout_hint_key: str | None = "data-amp-layout"


IMG_FAMILY = TagFamily(
    name="img",
    allowed=frozenset(
        {"src", "alt", "class", "srcset", "sizes", "on", "attribution"}
    ),
)

IMGUR_FAMILY = TagFamily(
    name="amp-imgur",
    allowed=frozenset({"layout", "data-imgur-id"}),
    layout_hint_key=None,
)

_families: dict[str, TagFamily] = {}


def register_tag_family(family: TagFamily) -> None:
    """Register (or replace) the allow-list for a tag family."""
    _families[family.name] = family


def unregister_tag_family(name: str) -> None:
    """Remove a tag family; unknown names are ignored."""
    _families.pop(name, None)


def get_tag_family(name: str) -> TagFamily | None:
    """Return the registered family, or None if it was never registered."""
    return _families.get(name)


register_tag_family(IMG_FAMILY)
register_tag_family(IMGUR_FAMILY)


def sanitize_dimension(
    value, name: str, content_max_width: int | None = None
) -> int | None:
    """Normalize a width/height value to integer pixels.

    Args:
        value: Raw attribute value (string or number)
        name: ``"width"`` or ``"height"``
        content_max_width: Container width used to resolve percentage widths

    Returns:
        Pixel value, or None if the value is not usable (treated as absent)
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return abs(int(value))

    value = str(value)
    if not value.strip():
        return None

    match = _PIXELS_RE.match(value)
    if match:
        return int(match.group(1))

    match = _PERCENT_RE.match(value)
    if match and name == "width" and content_max_width:
        return round(float(match.group(1)) / 100 * content_max_width)

    return None


def filter_attributes(
    family: TagFamily | str,
    attributes: dict[str, str],
    content_max_width: int | None = None,
) -> dict:
    """Reduce an attribute mapping to what the tag family allows.

    Args:
        family: A TagFamily or the name of a registered one
        attributes: Source attributes, in document order
        content_max_width: Container width used to resolve percentage widths

    Returns:
        New mapping. Dimensions are ints; the layout hint becomes ``layout``.
        An unknown family yields an empty mapping.
    """
    if isinstance(family, str):
        name = family
        family = get_tag_family(name)
        if family is None:
            debug(f"    No allow-list registered for '{name}', dropping all attributes")
            return {}

    out: dict = {}
    for name, value in attributes.items():
        if name in family.dimension_keys:
            dimension = sanitize_dimension(value, name, content_max_width)
            if dimension is not None:
                out[name] = dimension
        elif family.layout_hint_key and name == family.layout_hint_key:
            if value:
                out["layout"] = value
        elif name in family.allowed:
            out[name] = value
    return out
