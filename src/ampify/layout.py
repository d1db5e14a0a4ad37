"""AMP layout attribute synthesis.

AMP sized elements must declare ``width``/``height`` and a ``layout`` that
agrees with them. Given already-resolved dimensions this picks the layout.
"""

from .dom import is_numeric
from .errors import InternalInvariantViolation

LAYOUT_INTRINSIC = "intrinsic"
LAYOUT_FIXED_HEIGHT = "fixed-height"

AMP_LAYOUTS = frozenset(
    {
        "nodisplay",
        "fixed",
        "fixed-height",
        "responsive",
        "container",
        "fill",
        "flex-item",
        "intrinsic",
    }
)


def normalize_layout(value) -> str | None:
    """Return the canonical layout name, or None if it is not an AMP layout."""
    if not value:
        return None
    value = str(value).strip().lower()
    return value if value in AMP_LAYOUTS else None


def synthesize_layout(
    attributes: dict,
    has_explicit_layout: bool,
    default_layout: str | None = LAYOUT_INTRINSIC,
) -> dict:
    """Decide the ``layout``/``width``/``height`` combination.

    First match wins:

    1. An explicit author layout is kept as is.
    2. Numeric width and height: ``layout = default_layout`` (left unset
       when ``default_layout`` is None).
    3. Height only (width absent or ``auto``): ``fixed-height`` with
       ``width="auto"``.

    Args:
        attributes: Filtered attributes with resolved dimensions
        has_explicit_layout: Whether the author declared a layout
        default_layout: Layout to stamp when both dimensions are known

    Returns:
        New attribute mapping

    Raises:
        InternalInvariantViolation: If no dimension is known and no layout
            was declared.
    """
    out = dict(attributes)
    if has_explicit_layout and out.get("layout"):
        return out

    width = out.get("width")
    height = out.get("height")
    has_height = is_numeric(height)

    if is_numeric(width) and has_height:
        if default_layout:
            out["layout"] = default_layout
        return out

    if has_height and (width is None or width == "" or width == "auto"):
        out["layout"] = LAYOUT_FIXED_HEIGHT
        out["width"] = "auto"
        return out

    raise InternalInvariantViolation(
        f"Cannot synthesize layout without dimensions: width={width!r} height={height!r}"
    )
