"""Output paths and relative hrefs for the rendered routes."""

from __future__ import annotations

import os
from pathlib import Path

LISTING_FILE = "index.html"
NOT_FOUND_FILE = "404.html"
PAGES_DIR = "pages"
POST_DIR = "post"
ASSETS_DIR = "assets"


def relative_href(target: Path, base: Path) -> str:
    """Return a POSIX-style relative href from base to target."""

    return Path(os.path.relpath(target, base)).as_posix()


def relative_route(target: Path, base: Path, *, collapse_index: bool = True) -> str:
    """Return a pretty href to the target, collapsing index.html to a slash."""

    href = relative_href(target, base)
    if collapse_index and href.endswith("index.html"):
        href = href[: -len("index.html")]
        if not href:
            return "./"
        if not href.endswith("/"):
            href += "/"
    return href


def listing_path(out_root: Path) -> Path:
    return out_root / LISTING_FILE


def post_path(out_root: Path, uid: str) -> Path:
    if not uid or "/" in uid or uid in {".", ".."}:
        raise ValueError(f"Invalid post uid: {uid!r}")
    return out_root / POST_DIR / uid / "index.html"


def page_payload_path(out_root: Path, number: int) -> Path:
    """Path of the JSON payload for listing page ``number`` (2, 3, ...)."""

    if number < 2:
        raise ValueError("The first listing page is rendered into the HTML")
    return out_root / PAGES_DIR / f"{number}.json"


def not_found_path(out_root: Path) -> Path:
    return out_root / NOT_FOUND_FILE


def assets_path(out_root: Path) -> Path:
    return out_root / ASSETS_DIR


__all__ = [
    "assets_path",
    "listing_path",
    "not_found_path",
    "page_payload_path",
    "post_path",
    "relative_href",
    "relative_route",
]
