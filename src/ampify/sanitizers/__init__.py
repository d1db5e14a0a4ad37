"""Tag sanitizers."""

from .base import BaseSanitizer
from .img import (
    ENFORCED_SIZES_CLASS,
    UNKNOWN_HEIGHT_CLASS,
    UNKNOWN_SIZE_CLASS,
    UNKNOWN_WIDTH_CLASS,
    ImgSanitizer,
)

DEFAULT_SANITIZERS: list[type[BaseSanitizer]] = [ImgSanitizer]

__all__ = [
    "DEFAULT_SANITIZERS",
    "ENFORCED_SIZES_CLASS",
    "UNKNOWN_HEIGHT_CLASS",
    "UNKNOWN_SIZE_CLASS",
    "UNKNOWN_WIDTH_CLASS",
    "BaseSanitizer",
    "ImgSanitizer",
]
