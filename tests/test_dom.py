"""Tests for DOM helpers."""

from bs4 import BeautifulSoup

from ampify.dom import (
    add_or_append_attribute,
    build_tag,
    create_node,
    get_node_attributes,
    is_numeric,
    serialize,
)


class TestIsNumeric:
    """Tests for is_numeric function."""

    def test_plain_numbers(self):
        assert is_numeric("100")
        assert is_numeric("1.5")
        assert is_numeric(" 42")
        assert is_numeric(7)

    def test_non_numbers(self):
        assert not is_numeric("100px")
        assert not is_numeric("50%")
        assert not is_numeric("")
        assert not is_numeric("auto")
        assert not is_numeric(None)
        assert not is_numeric(True)


class TestNodeAttributes:
    """Tests for reading and creating nodes."""

    def test_class_list_is_flattened(self):
        soup = BeautifulSoup('<img src="a.png" class="one two">', "html.parser")
        attrs = get_node_attributes(soup.img)
        assert attrs == {"src": "a.png", "class": "one two"}

    def test_create_node_stringifies_values(self):
        soup = BeautifulSoup("", "html.parser")
        node = create_node(soup, "amp-img", {"src": "a.png", "width": 10})
        assert str(node) == '<amp-img src="a.png" width="10"></amp-img>'


class TestAddOrAppendAttribute:
    """Tests for add_or_append_attribute function."""

    def test_adds_missing_attribute(self):
        attrs = {"src": "a.png"}
        add_or_append_attribute(attrs, "class", "marker")
        assert attrs == {"src": "a.png", "class": "marker"}

    def test_appends_and_moves_to_end(self):
        attrs = {"class": "existing", "src": "a.png"}
        add_or_append_attribute(attrs, "class", "marker")
        assert list(attrs) == ["src", "class"]
        assert attrs["class"] == "existing marker"

    def test_does_not_duplicate_token(self):
        attrs = {"class": "marker"}
        add_or_append_attribute(attrs, "class", "marker")
        assert attrs["class"] == "marker"


class TestBuildTag:
    """Tests for build_tag function."""

    def test_builds_element(self):
        html = build_tag("amp-imgur", {"width": 500, "data-imgur-id": "abc"})
        assert html == '<amp-imgur width="500" data-imgur-id="abc"></amp-imgur>'

    def test_escapes_values(self):
        html = build_tag("amp-img", {"alt": '"><script>'})
        assert "<script>" not in html
        assert "&quot;&gt;&lt;script&gt;" in html

    def test_boolean_and_none_values(self):
        html = build_tag("amp-img", {"noloading": True, "alt": None, "x": False})
        assert html == "<amp-img noloading></amp-img>"


class TestSerialize:
    """Tests for serialize function."""

    def test_attributes_keep_insertion_order(self):
        soup = BeautifulSoup('<p><img src="a.png" width="2" height="1"></p>', "html.parser")
        soup.img.replace_with(
            create_node(soup, "amp-img", {"src": "a.png", "width": 2, "layout": "fill"})
        )
        assert serialize(soup) == '<p><amp-img src="a.png" width="2" layout="fill"></amp-img></p>'

    def test_escapes_like_default_output(self):
        soup = BeautifulSoup('<p title="a &amp; &quot;b&quot;">x &lt; y</p>', "html.parser")
        assert serialize(soup) == str(soup)
