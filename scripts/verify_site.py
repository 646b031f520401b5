"""Verify a built blog: required pages, listing payloads and internal links."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Iterable
from urllib.parse import urlparse

from bs4 import BeautifulSoup


def _resolve_target(base_dir: Path, href: str) -> Path:
    target = base_dir / href
    if href.endswith("/") or href in {".", ""}:
        target = target / "index.html"
    return target


def _is_internal(href: str) -> bool:
    parsed = urlparse(href)
    return not parsed.scheme and not parsed.netloc and not href.startswith("#")


def _iter_page_links(html_path: Path) -> Iterable[str]:
    soup = BeautifulSoup(html_path.read_text(encoding="utf-8"), "html.parser")
    for link in soup.select("a[href]"):
        yield link["href"]
    for node in soup.select("[data-next-page]"):
        yield node["data-next-page"]
    for node in soup.select("link[href], script[src]"):
        yield node.get("href") or node.get("src")


def _verify_payloads(root: Path) -> list[str]:
    errors: list[str] = []
    pages_dir = root / "pages"
    if not pages_dir.exists():
        return errors

    for payload_path in sorted(pages_dir.glob("*.json")):
        try:
            payload = json.loads(payload_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            errors.append(f"{payload_path}: invalid JSON ({exc})")
            continue
        for post in payload.get("results", []):
            target = _resolve_target(root, post.get("href", ""))
            if not target.exists():
                errors.append(f"{payload_path}: post link missing: {post.get('href')} -> {target}")
        next_page = payload.get("next_page")
        if next_page and not (payload_path.parent / next_page).exists():
            errors.append(f"{payload_path}: next_page missing: {next_page}")
    return errors


def verify_site(root: Path) -> list[str]:
    errors: list[str] = []
    for required in (root / "index.html", root / "404.html"):
        if not required.exists():
            errors.append(f"Expected file missing: {required}")
    if errors:
        return errors

    for html_path in sorted(root.rglob("*.html")):
        for href in _iter_page_links(html_path):
            if not href or not _is_internal(href):
                continue
            if href.startswith("/"):
                errors.append(f"{html_path}: absolute href is not allowed: {href}")
                continue
            target = _resolve_target(html_path.parent, href)
            if not target.exists():
                errors.append(f"{html_path}: link target missing: {href} -> {target}")

    errors.extend(_verify_payloads(root))
    return errors


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Verify a built blog output directory.")
    parser.add_argument("--root", required=True, help="Build output root (e.g., public)")
    args = parser.parse_args(argv)

    root = Path(args.root)
    errors = verify_site(root)
    if errors:
        for message in errors:
            print(message, file=sys.stderr)
        return 1

    print(f"Verified site structure at {root}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
