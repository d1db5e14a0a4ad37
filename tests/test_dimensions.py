"""Tests for image dimension extraction."""

import base64
import threading

import pytest

from ampify.cache import DimensionCache
from ampify.config import ExtractorConfig
from ampify.dimensions import (
    DimensionExtractor,
    Dimensions,
    decode_data_uri,
    measure_image,
    normalize_url,
    parse_dimensions_from_filename,
)
from ampify.errors import FailedToGetFromRemoteUrl, StubConfigurationError
from ampify.remote import Response, StubbedRemoteGetRequest


class TestNormalizeUrl:
    """Tests for normalize_url function."""

    def test_absolute_urls_unchanged(self):
        assert normalize_url("https://example.com/a.png") == "https://example.com/a.png"
        assert normalize_url(" http://example.com/a.png ") == "http://example.com/a.png"

    def test_protocol_relative(self):
        assert normalize_url("//cdn.example.com/a.png") == "https://cdn.example.com/a.png"

    def test_root_relative_needs_base_url(self):
        assert normalize_url("/uploads/a.png") is None
        assert (
            normalize_url("/uploads/a.png", "https://example.com/")
            == "https://example.com/uploads/a.png"
        )

    def test_unfetchable(self):
        assert normalize_url("") is None
        assert normalize_url("ftp://example.com/a.png") is None
        assert normalize_url("a.png") is None

    def test_data_uri_kept(self):
        assert normalize_url("data:image/png;base64,AAAA") == "data:image/png;base64,AAAA"

    def test_malformed_host(self):
        assert normalize_url("http://[bad/a.png") is None


class TestLocalExtraction:
    """Tests for extraction that never touches the network."""

    def test_thumbnail_filename(self):
        dims = parse_dimensions_from_filename("https://example.com/up/photo-300x200.jpg?v=2")
        assert dims == Dimensions(300, 200)

    def test_plain_filename(self):
        assert parse_dimensions_from_filename("https://example.com/photo.jpg") is None

    def test_zero_size_filename(self):
        assert parse_dimensions_from_filename("https://example.com/p-0x200.png") is None

    def test_malformed_url_filename(self):
        assert parse_dimensions_from_filename("https://[bad/p-10x10.png") is None

    def test_measure_image(self, image_bytes):
        assert measure_image(image_bytes(17, 9)) == Dimensions(17, 9)
        assert measure_image(image_bytes(5, 6, "GIF")) == Dimensions(5, 6)

    def test_measure_garbage(self):
        assert measure_image(b"not an image") is None
        assert measure_image(b"") is None

    def test_decode_data_uri(self, image_bytes):
        data = image_bytes(3, 4)
        uri = "data:image/png;base64," + base64.b64encode(data).decode()
        assert decode_data_uri(uri) == data
        assert decode_data_uri("data:text/plain,hello%20world") == b"hello world"
        assert decode_data_uri("data:nocomma") is None

    def test_dimensions_completeness(self):
        assert Dimensions(1, 2).is_complete
        assert not Dimensions(1, None).is_complete
        assert not Dimensions().is_complete


class TestDimensionExtractor:
    """Tests for DimensionExtractor.extract."""

    def test_fetches_and_measures(self, image_bytes):
        stub = StubbedRemoteGetRequest({"https://example.com/a.png": image_bytes(40, 30)})
        extractor = DimensionExtractor(remote=stub)

        result = extractor.extract(["https://example.com/a.png"])

        assert result == {"https://example.com/a.png": Dimensions(40, 30)}

    def test_failed_urls_are_omitted(self, image_bytes):
        stub = StubbedRemoteGetRequest(
            {
                "https://example.com/ok.png": image_bytes(10, 10),
                "https://example.com/down.png": FailedToGetFromRemoteUrl(
                    "https://example.com/down.png", reason="timeout"
                ),
                "https://example.com/404.png": Response(
                    url="https://example.com/404.png", status=404
                ),
                "https://example.com/text.png": b"<html>not an image</html>",
            }
        )
        extractor = DimensionExtractor(remote=stub)

        result = extractor.extract(
            [
                "https://example.com/down.png",
                "https://example.com/ok.png",
                "https://example.com/404.png",
                "https://example.com/text.png",
            ]
        )

        assert result == {"https://example.com/ok.png": Dimensions(10, 10)}

    def test_each_url_fetched_once(self, image_bytes):
        stub = StubbedRemoteGetRequest({"https://example.com/a.png": image_bytes(4, 4)})
        extractor = DimensionExtractor(remote=stub)

        result = extractor.extract(
            ["https://example.com/a.png", "https://example.com/a.png", "//example.com/a.png"]
        )

        assert stub.requested == ["https://example.com/a.png"]
        assert result["https://example.com/a.png"] == Dimensions(4, 4)
        assert result["//example.com/a.png"] == Dimensions(4, 4)

    def test_parallel_batch(self, image_bytes):
        urls = [f"https://example.com/{i}.png" for i in range(8)]
        stub = StubbedRemoteGetRequest({url: image_bytes(i + 1, 2) for i, url in enumerate(urls)})
        extractor = DimensionExtractor(remote=stub, config=ExtractorConfig(max_workers=4))

        result = extractor.extract(urls)

        assert sorted(stub.requested) == sorted(urls)
        assert result == {url: Dimensions(i + 1, 2) for i, url in enumerate(urls)}

    def test_local_sources_skip_network(self, image_bytes):
        data_uri = "data:image/png;base64," + base64.b64encode(image_bytes(6, 7)).decode()
        stub = StubbedRemoteGetRequest({})
        extractor = DimensionExtractor(remote=stub)

        result = extractor.extract([data_uri, "https://example.com/p-120x80.png"])

        assert stub.requested == []
        assert result == {
            data_uri: Dimensions(6, 7),
            "https://example.com/p-120x80.png": Dimensions(120, 80),
        }

    def test_unresolvable_urls_skipped(self):
        extractor = DimensionExtractor(remote=StubbedRemoteGetRequest({}))
        assert extractor.extract(["relative/a.png", "/root.png"]) == {}

    def test_base_url_resolves_root_relative(self, image_bytes):
        stub = StubbedRemoteGetRequest({"https://example.com/up/a.png": image_bytes(2, 3)})
        extractor = DimensionExtractor(
            remote=stub, config=ExtractorConfig(base_url="https://example.com")
        )
        assert extractor.extract(["/up/a.png"]) == {"/up/a.png": Dimensions(2, 3)}

    def test_disabled_extractor_does_not_fetch(self):
        stub = StubbedRemoteGetRequest({})
        extractor = DimensionExtractor(remote=stub, config=ExtractorConfig(enabled=False))
        assert extractor.extract(["https://example.com/a.png"]) == {}
        assert stub.requested == []

    def test_oversized_body_is_unresolved(self, image_bytes):
        stub = StubbedRemoteGetRequest({"https://example.com/a.png": image_bytes(50, 50)})
        extractor = DimensionExtractor(remote=stub, config=ExtractorConfig(max_bytes=10))
        assert extractor.extract(["https://example.com/a.png"]) == {}

    def test_unmapped_stub_url_raises(self):
        extractor = DimensionExtractor(remote=StubbedRemoteGetRequest({}))
        with pytest.raises(StubConfigurationError):
            extractor.extract(["https://example.com/unmapped.png"])

    def test_cache_is_used_and_filled(self, tmp_path, image_bytes):
        cache = DimensionCache(tmp_path / "dimensions.json")
        cache.set("https://example.com/cached.png", 11, 12)
        stub = StubbedRemoteGetRequest({"https://example.com/new.png": image_bytes(13, 14)})
        extractor = DimensionExtractor(remote=stub, cache=cache)

        result = extractor.extract(
            ["https://example.com/cached.png", "https://example.com/new.png"]
        )

        assert stub.requested == ["https://example.com/new.png"]
        assert result["https://example.com/cached.png"] == Dimensions(11, 12)
        reloaded = DimensionCache(tmp_path / "dimensions.json")
        assert reloaded.get("https://example.com/new.png") == (13, 14)

    @pytest.mark.parametrize("max_workers", [1, 4])
    def test_unexpected_remote_error_is_isolated(self, image_bytes, max_workers):
        stub = StubbedRemoteGetRequest(
            {
                "https://example.com/boom.png": RuntimeError("connection reset"),
                "https://example.com/ok.png": image_bytes(8, 9),
            }
        )
        extractor = DimensionExtractor(
            remote=stub, config=ExtractorConfig(max_workers=max_workers)
        )

        result = extractor.extract(
            ["https://example.com/boom.png", "https://example.com/ok.png"]
        )

        assert result == {"https://example.com/ok.png": Dimensions(8, 9)}

    def test_malformed_url_does_not_break_batch(self, image_bytes):
        stub = StubbedRemoteGetRequest({"https://example.com/a.png": image_bytes(3, 4)})
        extractor = DimensionExtractor(remote=stub)

        result = extractor.extract(["http://[bad/a.png", "https://example.com/a.png"])

        assert result == {"https://example.com/a.png": Dimensions(3, 4)}

    def test_cache_wins_over_thumbnail_filename(self, tmp_path):
        cache = DimensionCache(tmp_path / "dimensions.json")
        cache.set("https://example.com/p-120x80.png", 60, 40)
        extractor = DimensionExtractor(remote=StubbedRemoteGetRequest({}), cache=cache)

        result = extractor.extract(["https://example.com/p-120x80.png"])

        assert result == {"https://example.com/p-120x80.png": Dimensions(60, 40)}

    def test_cancelled_batch_returns_partial_result(self):
        cancel = threading.Event()
        cancel.set()
        stub = StubbedRemoteGetRequest({})
        extractor = DimensionExtractor(remote=stub, config=ExtractorConfig(max_workers=1))

        result = extractor.extract(
            ["https://example.com/a.png", "https://example.com/b.png"], cancel=cancel
        )

        assert result == {}
        assert stub.requested == []
