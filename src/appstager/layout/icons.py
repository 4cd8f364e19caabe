"""Icon selection and placement under the staging tree.

Icon sources are plain paths. PNG files must encode their size in the
name, either 'name.32.png' or 'name.32x32.png'. SVG files are scalable and
ICO files are used only for Windows kinds.
"""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image
from pydantic import BaseModel, Field

from appstager.config.models import PackKind
from appstager.errors import IconFormatError

logger = logging.getLogger(__name__)

STANDARD_ICON_SIZES = (16, 24, 32, 48, 64, 96, 128, 256)

_ASSETS_DIR = Path(__file__).resolve().parent.parent / "assets"


def bundled_icons() -> list[str]:
    """Bundled icons used when a project declares none."""
    return [str(_ASSETS_DIR / "app.svg")]


def _suffix(path: str) -> str:
    return Path(path).suffix.lower()


def get_standard_png_size(path: str) -> int:
    """Return the size a PNG file name declares, or 0 for non-PNG files.

    Raises IconFormatError if a PNG name has no standard size.
    """
    if _suffix(path) != ".png":
        return 0

    name = Path(path).name
    # Interior extension, i.e. "32x32" in "name.32x32.png"
    inner = Path(Path(name).stem).suffix.lstrip(".")
    pos = inner.lower().find("x")
    if pos > 0:
        inner = inner[:pos]

    if inner.isdecimal() and int(inner) in STANDARD_ICON_SIZES:
        return int(inner)

    sizes = ",".join(str(s) for s in STANDARD_ICON_SIZES)
    raise IconFormatError(
        f"Icon {name} must be of form 'name.size.png', where size = {sizes} only"
    )


def select_prime_icon(kind: PackKind, candidates: list[str]) -> str | None:
    """Choose the single most representative icon.

    Windows: the first ICO. Otherwise the first SVG. Failing that, the
    largest standard PNG (first wins on ties). None if nothing matches.
    """
    if kind.is_windows:
        for item in candidates:
            if _suffix(item) == ".ico":
                return item
    else:
        for item in candidates:
            if _suffix(item) == ".svg":
                return item

    best = 0
    result = None
    for item in candidates:
        size = get_standard_png_size(item)
        if size > best:
            best = size
            result = item
    return result


def get_prime_icon_path(pack_root: Path, app_id: str, source: str | None) -> Path | None:
    """Staged location of the prime icon: '{pack_root}/{app_id}{ext}'."""
    if not source:
        return None
    return Path(pack_root) / f"{app_id}{Path(source).suffix}"


def map_icon(source: str, app_id: str, share_icons: Path) -> Path | None:
    """Destination under the hicolor theme, or None for unsupported types."""
    if _suffix(source) == ".svg":
        return share_icons / "hicolor" / "scalable" / "apps" / f"{app_id}.svg"

    size = get_standard_png_size(source)
    if size > 0:
        return share_icons / "hicolor" / f"{size}x{size}" / "apps" / f"{app_id}.png"
    return None


def build_icon_map(
    candidates: list[str], app_id: str, share_icons: Path | None
) -> dict[str, Path]:
    """Map icon sources to their staged paths. Empty when there is no share tree."""
    result: dict[str, Path] = {}
    if share_icons is None:
        return result

    for item in candidates:
        dest = map_icon(item, app_id, share_icons)
        if dest is not None:
            result.setdefault(item, dest)
    return result


class IconSet(BaseModel):
    """Resolved icons for one build."""

    prime_source: str | None = None
    prime_path: Path | None = None
    icon_map: dict[str, Path] = Field(default_factory=dict)

    model_config = {"frozen": True}


def resolve_icons(
    kind: PackKind,
    candidates: list[str],
    defaults: list[str],
    app_id: str,
    pack_root: Path,
    share_icons: Path | None,
) -> IconSet:
    """Select the prime icon and build the icon map.

    ``defaults`` replace an empty candidate list. On Linux kinds the map
    also falls back to ``defaults`` when none of the declared icons can be
    placed in the theme tree, so there is always at least one themed icon.
    """
    sources = list(candidates) or list(defaults)

    prime = select_prime_icon(kind, sources)
    icon_map = build_icon_map(sources, app_id, share_icons)

    if not icon_map and share_icons is not None and candidates:
        icon_map = build_icon_map(list(defaults), app_id, share_icons)

    logger.debug("Prime icon %s, %d themed icons", prime, len(icon_map))
    return IconSet(
        prime_source=prime,
        prime_path=get_prime_icon_path(pack_root, app_id, prime),
        icon_map=icon_map,
    )


def probe_png_size(path: Path | str) -> tuple[int, int] | None:
    """Pixel dimensions of an image file, or None if it cannot be decoded."""
    try:
        with Image.open(path) as img:
            return img.size
    except OSError as exc:
        logger.debug("Cannot probe image %s: %s", path, exc)
        return None
