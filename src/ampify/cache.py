"""Per-URL image dimension cache for ampify."""

import json
from pathlib import Path

DIMENSION_CACHE_FILE = "dimensions.json"


def load_dimension_cache(cache_file: Path) -> dict[str, list[int]]:
    """Load cached dimensions.

    Args:
        cache_file: Path to the cache file

    Returns:
        Dictionary mapping URLs to ``[width, height]``; empty if the file is
        missing or unreadable
    """
    if cache_file.exists():
        try:
            with open(cache_file, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError):
            return {}
        if isinstance(data, dict):
            return {
                url: dims
                for url, dims in data.items()
                if isinstance(dims, list)
                and len(dims) == 2
                and all(isinstance(d, int) and d > 0 for d in dims)
            }
    return {}


def save_dimension_cache(cache_file: Path, cache_data: dict[str, list[int]]) -> None:
    """Save cached dimensions, creating the cache directory if needed."""
    cache_file.parent.mkdir(parents=True, exist_ok=True)
    with open(cache_file, "w", encoding="utf-8") as f:
        json.dump(cache_data, f, indent=0, sort_keys=True)


class DimensionCache:
    """JSON-file backed ``url -> (width, height)`` lookup.

    Entries are only ever written for fully resolved images, so a miss always
    means "unknown", never "known to be unsized".
    """

    def __init__(self, cache_file: Path):
        self.cache_file = cache_file
        self._data = load_dimension_cache(cache_file)
        self._dirty = False

    def get(self, url: str) -> tuple[int, int] | None:
        dims = self._data.get(url)
        return (dims[0], dims[1]) if dims else None

    def set(self, url: str, width: int, height: int) -> None:
        if self._data.get(url) != [width, height]:
            self._data[url] = [width, height]
            self._dirty = True

    def save(self) -> bool:
        """Write the cache if anything changed. Returns True if written."""
        if not self._dirty:
            return False
        save_dimension_cache(self.cache_file, self._data)
        self._dirty = False
        return True

    def __len__(self) -> int:
        return len(self._data)
