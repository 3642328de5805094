"""Jinja2 templates and static asset URLs.

Route modules import ``templates`` from here. ``static_url`` is registered
as a template global so pages link assets with a content-hash query string;
``register_static_assets`` fills in the hashes when main.py mounts
``/static``.
"""

import hashlib
from pathlib import Path

from fastapi.templating import Jinja2Templates

API_DIR = Path(__file__).resolve().parent.parent
TEMPLATES_DIR = API_DIR / "templates"
STATIC_DIR = API_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

_static_hashes: dict[str, str] = {}


def _build_static_file_hashes(static_dir: Path) -> dict[str, str]:
    """Compute short content hashes for static files (cache-busting)."""
    hashes: dict[str, str] = {}
    if not static_dir.exists():
        return hashes
    for file_path in static_dir.rglob("*"):
        if file_path.is_file():
            rel = file_path.relative_to(static_dir).as_posix()
            digest = hashlib.md5(file_path.read_bytes(), usedforsecurity=False)
            hashes[rel] = digest.hexdigest()[:8]
    return hashes


def register_static_assets(static_dir: Path = STATIC_DIR) -> None:
    _static_hashes.clear()
    _static_hashes.update(_build_static_file_hashes(static_dir))


def static_url(path: str) -> str:
    """Return a cache-busted static URL, e.g. /static/css/styles.css?v=a1b2c3d4."""
    version = _static_hashes.get(path, "")
    if version:
        return f"/static/{path}?v={version}"
    return f"/static/{path}"


templates.env.globals["static_url"] = static_url
