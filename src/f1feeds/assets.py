"""Image asset naming, published URLs and headshot download."""

from __future__ import annotations

import io
import logging
import os
import tempfile
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from f1feeds._http import SyncTransport
from f1feeds.exceptions import AssetError, SourceError
from f1feeds.formatters import slugify

logger = logging.getLogger(__name__)

TEAMLOGOS_DIR = "teamlogos"
HEADSHOTS_DIR = "headshots"
DRIVER_NUMBERS_DIR = "driver-numbers"

F1_MEDIA_LOGO_URL = (
    "https://media.formula1.com/image/upload/c_fit,h_256/q_auto/common/f1/"
    "{season}/{slug}/{season}{slug}logocolor.webp"
)

# Ergast constructorId -> F1 media folder slug.
CONSTRUCTOR_MEDIA_SLUGS: dict[str, str] = {
    "red_bull": "redbullracing",
    "ferrari": "ferrari",
    "mercedes": "mercedes",
    "mclaren": "mclaren",
    "aston_martin": "astonmartin",
    "alpine": "alpine",
    "williams": "williams",
    "haas": "haas",
    "sauber": "sauber",
    "kick_sauber": "sauber",
    "alfa": "sauber",
    "audi": "audi",
    "rb": "rb",
    "cadillac": "cadillac",
}

# Constructor logos served from our own pages instead of the media CDN.
CONSTRUCTOR_LOGO_FILES: dict[str, str] = {
    "mercedes": "2025_mercedes_color_v2.png",
}


def headshot_filename(first_name: str | None, last_name: str | None) -> str | None:
    first, last = slugify(first_name), slugify(last_name)
    if not first or not last:
        return None
    return f"{first}-{last}.png"


def driver_number_filename(driver_number: int | None) -> str | None:
    if driver_number is None:
        return None
    return f"driver-number-{driver_number}.png"


class AssetLocator:
    """Deterministic URLs for the published image assets.

    *asset_root* is the checkout holding ``teamlogos/``, ``headshots/`` and
    ``driver-numbers/``; headshot URLs are only emitted for files present there.
    """

    def __init__(
        self,
        pages_base: str,
        asset_root: str | os.PathLike[str] = ".",
        cache_bust: str | None = None,
    ) -> None:
        self.pages_base = pages_base.rstrip("/")
        self.asset_root = Path(asset_root)
        self.cache_bust = cache_bust

    def with_cache_bust(self, url: str) -> str:
        if not self.cache_bust:
            return url
        sep = "&" if "?" in url else "?"
        return f"{url}{sep}v={self.cache_bust}"

    def pages_url(self, directory: str, filename: str) -> str:
        return f"{self.pages_base}/{directory}/{filename}"

    def team_logo_url(self, logo_file: str) -> str:
        return self.with_cache_bust(self.pages_url(TEAMLOGOS_DIR, logo_file))

    def constructor_logo_url(self, constructor_id: str | None, season: str | int | None) -> str | None:
        """Pages override first, else the F1 media CDN slug; None for unknown teams."""
        cid = (constructor_id or "").strip().lower()
        if cid in CONSTRUCTOR_LOGO_FILES:
            return self.team_logo_url(CONSTRUCTOR_LOGO_FILES[cid])
        slug = CONSTRUCTOR_MEDIA_SLUGS.get(cid)
        if not slug:
            return None
        season_tag = str(season) if season and str(season).isdigit() else "2025"
        return self.with_cache_bust(F1_MEDIA_LOGO_URL.format(season=season_tag, slug=slug))

    def driver_number_url(self, driver_number: int | None) -> str | None:
        filename = driver_number_filename(driver_number)
        return self.pages_url(DRIVER_NUMBERS_DIR, filename) if filename else None

    def headshot_path(self, first_name: str | None, last_name: str | None) -> Path | None:
        filename = headshot_filename(first_name, last_name)
        return self.asset_root / HEADSHOTS_DIR / filename if filename else None

    def headshot_url(self, first_name: str | None, last_name: str | None) -> str | None:
        path = self.headshot_path(first_name, last_name)
        if path is None or not path.is_file():
            return None
        return self.pages_url(HEADSHOTS_DIR, path.name)


def to_png(data: bytes) -> bytes:
    """Re-encode any image Pillow can read as PNG."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            mode = "RGBA" if image.mode in ("RGBA", "LA", "P") else "RGB"
            buffer = io.BytesIO()
            image.convert(mode).save(buffer, format="PNG", optimize=True)
    except (UnidentifiedImageError, OSError) as exc:
        raise AssetError(f"Not a readable image: {exc}") from exc
    return buffer.getvalue()


def fetch_png(transport: SyncTransport, url: str, dest: str | os.PathLike[str]) -> Path:
    """Download *url*, convert it to PNG and move it into *dest*."""
    try:
        data = transport.get_bytes(url)
    except SourceError as exc:
        raise AssetError(f"Download of {url} failed: {exc}") from exc
    png = to_png(data)

    target = Path(dest)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(png)
        os.replace(tmp_name, target)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    logger.info("Saved %s (%d bytes) from %s", target, len(png), url)
    return target
