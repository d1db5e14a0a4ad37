"""Configuration loading and management for ampify."""

import tomllib
from dataclasses import dataclass, field, fields
from difflib import get_close_matches
from pathlib import Path
from typing import TypeVar

T = TypeVar("T")

DEFAULT_USER_AGENT = "ampify (+https://amp.dev)"


def _find_similar(key: str, valid_keys: set[str], threshold: float = 0.6) -> str | None:
    """Return the valid key closest to ``key``, or None if nothing is close."""
    by_lower = {valid.lower(): valid for valid in valid_keys}
    matches = get_close_matches(key.lower(), sorted(by_lower), n=1, cutoff=threshold)
    return by_lower[matches[0]] if matches else None


def _warn_unknown_keys(
    data: dict, valid_keys: set[str], section: str, config_path: Path | None = None
) -> None:
    """Log a warning for each key of a config section ampify does not know."""
    from .logging import warning

    location = f" in {config_path}" if config_path else ""
    for key in sorted(set(data) - valid_keys):
        msg = f"Unknown config key '{key}' in [{section}]{location}"
        similar = _find_similar(key, valid_keys)
        if similar:
            msg += f". Did you mean '{similar}'?"
        warning(msg)


def _load_dataclass(
    cls: type[T],
    data: dict,
    defaults: T,
    transforms: dict[str, callable] | None = None,
    section: str = "",
    config_path: Path | None = None,
) -> T:
    """Build a settings section from its TOML table.

    Missing keys keep the value from ``defaults``; ``transforms`` normalizes
    individual fields after loading.
    """
    valid_keys = {f.name for f in fields(cls)}
    _warn_unknown_keys(data, valid_keys, section, config_path)

    transforms = transforms or {}
    kwargs = {}
    for name in valid_keys:
        value = data.get(name, getattr(defaults, name))
        if name in transforms:
            value = transforms[name](value)
        kwargs[name] = value
    return cls(**kwargs)


def _normalize_extensions(values: list[str]) -> list[str]:
    """Lowercase extensions and make sure each starts with a dot."""
    return [v.lower() if v.startswith(".") else f".{v.lower()}" for v in values]


@dataclass
class SanitizerConfig:
    """Settings for the <img> sanitizer."""

    fallback_width: int = 600
    fallback_height: int = 400
    content_max_width: int | None = 600  # Resolves percentage widths
    anim_extensions: list[str] = field(default_factory=lambda: [".gif"])


@dataclass
class ExtractorConfig:
    """Settings for the image dimension extractor."""

    enabled: bool = True
    timeout: float = 15.0
    max_workers: int = 4
    max_bytes: int = 10 * 1024 * 1024
    user_agent: str = DEFAULT_USER_AGENT
    base_url: str = ""  # Root-relative image URLs are joined onto this
    cache: bool = True


@dataclass
class EmbedsConfig:
    """Settings for provider embed handlers."""

    enabled: list[str] = field(default_factory=lambda: ["imgur"])


@dataclass
class Config:
    """Main configuration container."""

    sanitizer: SanitizerConfig = field(default_factory=SanitizerConfig)
    extractor: ExtractorConfig = field(default_factory=ExtractorConfig)
    embeds: EmbedsConfig = field(default_factory=EmbedsConfig)

    # Computed paths (set after loading)
    project_path: Path | None = None
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path) -> "Config":
        """Load configuration from a TOML file.

        Args:
            config_path: Path to the config.toml file

        Returns:
            Loaded Config object with defaults merged
        """
        config = cls()
        config.config_path = config_path
        config.project_path = config_path.parent.parent  # .ampify/config.toml -> project

        if not config_path.exists():
            return config

        with open(config_path, "rb") as f:
            data = tomllib.load(f)

        _warn_unknown_keys(
            data, {"sanitizer", "extractor", "embeds"}, "top-level", config_path
        )

        if "sanitizer" in data:
            config.sanitizer = _load_dataclass(
                SanitizerConfig,
                data["sanitizer"],
                config.sanitizer,
                transforms={"anim_extensions": _normalize_extensions},
                section="sanitizer",
                config_path=config_path,
            )

        if "extractor" in data:
            config.extractor = _load_dataclass(
                ExtractorConfig,
                data["extractor"],
                config.extractor,
                transforms={"base_url": lambda v: v.rstrip("/")},
                section="extractor",
                config_path=config_path,
            )

        if "embeds" in data:
            config.embeds = _load_dataclass(
                EmbedsConfig,
                data["embeds"],
                config.embeds,
                section="embeds",
                config_path=config_path,
            )

        return config

    @classmethod
    def find_and_load(cls, start_path: Path | None = None) -> "Config":
        """Find and load config from .ampify/config.toml.

        Unlike a site generator, ampify works without a project: when no
        config file is found, defaults are returned.
        """
        if start_path is None:
            start_path = Path.cwd()

        config_path = cls.find_config(start_path)
        if config_path is None:
            return cls()

        return cls.load(config_path)

    @staticmethod
    def find_config(start_path: Path) -> Path | None:
        """Find .ampify/config.toml starting from start_path and walking up."""
        current = start_path.resolve()

        while True:
            config_path = current / ".ampify" / "config.toml"
            if config_path.exists():
                return config_path

            parent = current.parent
            if parent == current:
                return None
            current = parent

    def get_cache_dir(self) -> Path:
        """Get the cache directory."""
        if self.project_path:
            return self.project_path / ".ampify" / "cache"
        return Path.cwd() / ".ampify" / "cache"
