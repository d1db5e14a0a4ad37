"""Image dimension extraction.

Resolves the pixel size of images referenced without width/height. Lookups
are batched per sanitize pass: every distinct URL is resolved at most once,
from the cheapest source that knows the answer:

1. ``data:`` URIs are decoded and measured locally
2. the per-URL dimension cache
3. CMS thumbnail file names such as ``photo-300x200.jpg``
4. a GET of the image, measured with Pillow

URLs that cannot be resolved are left out of the result; callers apply
their own fallback size.
"""

import base64
import binascii
import re
import threading
from collections.abc import Iterable
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass
from io import BytesIO
from urllib.parse import unquote_to_bytes, urlparse

from PIL import Image, UnidentifiedImageError

from .cache import DimensionCache
from .config import ExtractorConfig
from .errors import FailedToGetFromRemoteUrl, StubConfigurationError
from .remote import RemoteGetRequest, RequestsRemoteGetRequest

# Thumbnail suffix added by WordPress-style media libraries
THUMBNAIL_PATTERN = re.compile(
    r"-(\d+)x(\d+)\.(?:jpe?g|png|gif|webp|bmp|avif)$", re.IGNORECASE
)

CANCEL_POLL_INTERVAL = 0.1


@dataclass(frozen=True)
class Dimensions:
    """Pixel size of an image; either side may be unknown."""

    width: int | None = None
    height: int | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.width) and bool(self.height)


def normalize_url(url: str, base_url: str = "") -> str | None:
    """Turn an image src into something fetchable.

    Protocol-relative URLs get ``https:``; root-relative paths are joined
    onto ``base_url`` when one is configured.

    Returns:
        The fetch URL, or None if the src cannot be resolved
    """
    url = url.strip()
    if not url:
        return None
    if url.startswith("data:"):
        return url
    if url.startswith("//"):
        return f"https:{url}"

    try:
        scheme = urlparse(url).scheme.lower()
    except ValueError:
        return None
    if scheme in ("http", "https"):
        return url
    if scheme:
        return None
    if url.startswith("/") and base_url:
        return f"{base_url.rstrip('/')}{url}"
    return None


def decode_data_uri(url: str) -> bytes | None:
    """Return the payload of a ``data:`` URI, or None if it is malformed."""
    header, sep, payload = url[len("data:") :].partition(",")
    if not sep:
        return None
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError):
            return None
    return unquote_to_bytes(payload)


def parse_dimensions_from_filename(url: str) -> Dimensions | None:
    """Read dimensions encoded in a thumbnail file name (``name-WxH.ext``)."""
    try:
        path = urlparse(url).path
    except ValueError:
        return None
    match = THUMBNAIL_PATTERN.search(path)
    if not match:
        return None
    width, height = int(match.group(1)), int(match.group(2))
    if not width or not height:
        return None
    return Dimensions(width, height)


def measure_image(data: bytes) -> Dimensions | None:
    """Measure image bytes with Pillow. Only the header is decoded."""
    if not data:
        return None
    try:
        with Image.open(BytesIO(data)) as im:
            width, height = im.size
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError):
        return None
    if not width or not height:
        return None
    return Dimensions(width, height)


class DimensionExtractor:
    """Batch resolver for image dimensions.

    Args:
        remote: GET collaborator; defaults to a ``requests`` session
        config: Extractor settings
        cache: Optional per-URL cache shared across passes
    """

    def __init__(
        self,
        remote: RemoteGetRequest | None = None,
        config: ExtractorConfig | None = None,
        cache: DimensionCache | None = None,
    ):
        self.config = config or ExtractorConfig()
        self.remote = remote or RequestsRemoteGetRequest(
            timeout=self.config.timeout,
            max_bytes=self.config.max_bytes,
            user_agent=self.config.user_agent,
        )
        self.cache = cache

    def extract(
        self, urls: Iterable[str], cancel: threading.Event | None = None
    ) -> dict[str, Dimensions]:
        """Resolve dimensions for a batch of image URLs.

        Args:
            urls: Image URLs as they appear in the document
            cancel: When set, pending fetches are abandoned

        Returns:
            Mapping from input URL to complete Dimensions. Unresolved URLs
            are absent.

        Raises:
            StubConfigurationError: If a stubbed remote is asked for an
                unmapped URL.
        """
        from .logging import debug

        # fetch URL -> document URLs that normalize to it
        targets: dict[str, list[str]] = {}
        for url in urls:
            fetch_url = normalize_url(url, self.config.base_url)
            if fetch_url is None:
                debug(f"    Cannot resolve image URL: {url}")
                continue
            originals = targets.setdefault(fetch_url, [])
            if url not in originals:
                originals.append(url)

        resolved: dict[str, Dimensions] = {}
        pending: list[str] = []
        for fetch_url in targets:
            dims = self._extract_locally(fetch_url)
            if dims:
                resolved[fetch_url] = dims
            else:
                pending.append(fetch_url)

        if pending and self.config.enabled:
            fetched = self._fetch_all(pending, cancel)
            for fetch_url, dims in fetched.items():
                resolved[fetch_url] = dims
                if self.cache is not None:
                    self.cache.set(fetch_url, dims.width, dims.height)
            if self.cache is not None:
                self.cache.save()

        result: dict[str, Dimensions] = {}
        for fetch_url, dims in resolved.items():
            for url in targets[fetch_url]:
                result[url] = dims
        return result

    def _extract_locally(self, url: str) -> Dimensions | None:
        if url.startswith("data:"):
            data = decode_data_uri(url)
            return measure_image(data) if data else None

        if self.cache is not None:
            cached = self.cache.get(url)
            if cached:
                return Dimensions(*cached)

        return parse_dimensions_from_filename(url)

    def _fetch_all(
        self, urls: list[str], cancel: threading.Event | None
    ) -> dict[str, Dimensions]:
        from .logging import debug

        results: dict[str, Dimensions] = {}

        if len(urls) == 1 or self.config.max_workers <= 1:
            for url in urls:
                if cancel is not None and cancel.is_set():
                    debug("    Dimension lookup cancelled")
                    break
                dims = self._fetch_one(url)
                if dims:
                    results[url] = dims
            return results

        executor = ThreadPoolExecutor(
            max_workers=min(self.config.max_workers, len(urls)),
            thread_name_prefix="ampify-fetch",
        )
        futures = {executor.submit(self._fetch_one, url): url for url in urls}
        not_done = set(futures)
        try:
            while not_done:
                if cancel is not None and cancel.is_set():
                    debug(f"    Dimension lookup cancelled, abandoning {len(not_done)} fetches")
                    break
                done, not_done = wait(
                    not_done, timeout=CANCEL_POLL_INTERVAL, return_when=FIRST_COMPLETED
                )
                for future in done:
                    dims = future.result()
                    if dims:
                        results[futures[future]] = dims
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return results

    def _fetch_one(self, url: str) -> Dimensions | None:
        from .logging import debug

        try:
            response = self.remote.get(url)
            if not 200 <= response.status < 300:
                debug(f"    Failed to fetch {url}: status {response.status}")
                return None
            if len(response.body) > self.config.max_bytes:
                debug(f"    Skipping {url}: larger than {self.config.max_bytes} bytes")
                return None
            dims = measure_image(response.body)
        except StubConfigurationError:
            raise
        except FailedToGetFromRemoteUrl as e:
            debug(f"    {e}")
            return None
        except Exception as e:
            debug(f"    Failed to size {url}: {type(e).__name__}: {e}")
            return None

        if dims is None:
            debug(f"    Could not read image size from {url}")
        return dims
