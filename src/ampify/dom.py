"""Helpers for reading and building BeautifulSoup nodes."""

import re
from html import escape

from bs4 import BeautifulSoup, Tag
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

_NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


class SourceOrderFormatter(HTMLFormatter):
    """The "minimal" formatter, but attributes keep their insertion order."""

    def attributes(self, tag: Tag):
        if tag.attrs is None:
            return []
        return list(tag.attrs.items())


SOURCE_ORDER_FORMATTER = SourceOrderFormatter(
    entity_substitution=EntitySubstitution.substitute_xml
)


def serialize(soup: BeautifulSoup | Tag) -> str:
    """Render a tree with attributes in the order they were set."""
    return soup.decode(formatter=SOURCE_ORDER_FORMATTER)


def is_numeric(value) -> bool:
    """Return True for ints/floats and strings holding a plain number.

    ``"100"`` and ``"1.5"`` are numeric; ``"100px"``, ``"50%"`` and ``""``
    are not.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if not isinstance(value, str):
        return False
    return bool(_NUMERIC_RE.match(value))


def attribute_value(value) -> str:
    """Flatten a bs4 attribute value (multi-valued attrs come back as lists)."""
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return "" if value is None else str(value)


def get_node_attributes(node: Tag) -> dict[str, str]:
    """Return a node's attributes as an ordered name -> string mapping."""
    return {name: attribute_value(value) for name, value in node.attrs.items()}


def create_node(soup: BeautifulSoup, tag_name: str, attributes: dict) -> Tag:
    """Create a detached element with string-valued attributes."""
    return soup.new_tag(
        tag_name, attrs={name: str(value) for name, value in attributes.items()}
    )


def add_or_append_attribute(attributes: dict, key: str, value: str) -> None:
    """Add a space-separated token to an attribute, in place.

    Existing tokens are kept; the token is not duplicated. The attribute is
    moved to the end of the mapping so appended markers serialize last.
    """
    current = attributes.pop(key, "")
    tokens = attribute_value(current).split()
    if value not in tokens:
        tokens.append(value)
    attributes[key] = " ".join(tokens)


def build_tag(tag_name: str, attributes: dict, content: str = "") -> str:
    """Serialize an element from a tag name and attributes.

    Values are HTML-escaped; ``True`` renders a bare boolean attribute and
    ``None``/``False`` values are skipped.
    """
    parts = [tag_name]
    for name, value in attributes.items():
        if value is None or value is False:
            continue
        if value is True:
            parts.append(escape(name))
        else:
            parts.append(f'{escape(name)}="{escape(str(value))}"')
    return f"<{' '.join(parts)}>{content}</{tag_name}>"
