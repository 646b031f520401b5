"""Render the listing, post and not-found pages into an output directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from pydantic import ValidationError

from .config import SiteConfig
from .dates import format_date, format_edited
from .errors import GatewayError, MalformedResponseError
from .gateway import ContentGateway
from .io_utils import ensure_dir, write_json_stable, write_text
from .models import NeighborPost, PostDetail, PostSummary
from .neighbors import Neighbors, find_adjacent
from .pagination import ListingState, collect_listing
from .reading_time import estimate_reading_minutes
from .richtext import as_html
from .routing import (
    assets_path,
    listing_path,
    not_found_path,
    page_payload_path,
    post_path,
    relative_href,
    relative_route,
)
from .shared_gen import generate_shared_assets

logger = logging.getLogger(__name__)

LOAD_MORE_LABEL = "Carregar mais posts"
LOAD_ERROR_MESSAGES = {
    "network-error": "Não foi possível carregar mais posts. Verifique sua conexão.",
    "rate-limited": "Muitas requisições. Tente novamente em instantes.",
    "malformed-response": "Resposta inesperada do servidor ao carregar mais posts.",
}
DEFAULT_LOAD_ERROR = "Não foi possível carregar mais posts."
TRUNCATED_MESSAGE = "Há mais posts publicados que não foram incluídos nesta versão do site."


@dataclass
class BuildContext:
    """Configuration and shared state for one build."""

    config: SiteConfig
    out_root: Path
    templates_dir: Path | None = None
    build_label: str | None = None
    _env: Environment | None = field(default=None, init=False, repr=False)
    _assets_written: bool = field(default=False, init=False, repr=False)

    @property
    def preview(self) -> bool:
        return self.config.preview

    @property
    def shared_templates_dir(self) -> Path:
        """Templates bundled with the package."""

        return Path(__file__).parent / "templates"

    def jinja_env(self) -> Environment:
        """Jinja environment, with override templates searched first."""

        if self._env is None:
            template_dirs = [self.shared_templates_dir]
            override = self.templates_dir or (
                Path(self.config.templates_dir) if self.config.templates_dir else None
            )
            if override:
                template_dirs.insert(0, override)
            self._env = Environment(
                loader=FileSystemLoader(template_dirs),
                autoescape=select_autoescape(["html", "jinja"]),
                trim_blocks=True,
                lstrip_blocks=True,
                undefined=StrictUndefined,
            )
        return self._env

    def ensure_assets(self) -> List[Path]:
        """Write shared assets once per build."""

        if self._assets_written:
            return []
        self._assets_written = True
        return generate_shared_assets(self.out_root)

    def page_context(self, out_file: Path, *, page_title: str) -> dict:
        """Values every template expects in ``page``."""

        base = out_file.parent
        assets = assets_path(self.out_root)
        return {
            "title": f"{page_title} | {self.config.site_title}" if page_title else self.config.site_title,
            "site_title": self.config.site_title,
            "home_href": relative_route(listing_path(self.out_root), base),
            "css_href": relative_href(assets / "common.css", base),
            "js_href": relative_href(assets / "load-more.js", base),
            "preview": self.preview,
        }

    def render(self, template_name: str, out_file: Path, **context) -> Path:
        template = self.jinja_env().get_template(template_name)
        rendered = template.render(**context)
        if self.build_label:
            rendered += f"\n<!-- blogsite build: {self.build_label} -->\n"
        return write_text(out_file, rendered)


@dataclass
class PostPageResult:
    """Outcome of rendering one post route."""

    slug: str
    status: str
    paths: List[Path] = field(default_factory=list)
    reading_minutes: Optional[int] = None


@dataclass
class BuildReport:
    """Everything written by :func:`build_site`."""

    written: List[Path] = field(default_factory=list)
    listing: ListingState | None = None
    posts: List[PostPageResult] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def truncated(self) -> bool:
        return self.listing is not None and self.listing.truncated

    @property
    def complete(self) -> bool:
        if self.failed or self.truncated:
            return False
        return self.listing is None or self.listing.error is None


def summary_view(ctx: BuildContext, post: PostSummary, base: Path) -> dict:
    """Summary fields as rendered on the listing and in page payloads."""

    published = post.first_publication_date
    return {
        "uid": post.uid,
        "href": relative_route(post_path(ctx.out_root, post.uid), base),
        "title": post.title,
        "subtitle": post.subtitle,
        "author": post.author,
        "date": format_date(published, ctx.config.timezone),
        "datetime": published.isoformat() if published else "",
    }


def _load_error_view(state: ListingState) -> dict | None:
    if state.error is None:
        return None
    return {
        "kind": state.error.kind,
        "message": LOAD_ERROR_MESSAGES.get(state.error.kind, DEFAULT_LOAD_ERROR),
    }


def _truncated_view(state: ListingState) -> dict | None:
    if not state.truncated:
        return None
    return {"kind": "truncated", "message": TRUNCATED_MESSAGE}


def build_listing_view_model(ctx: BuildContext, state: ListingState) -> dict:
    """View model for the listing page: first page plus the load-more control."""

    out_file = listing_path(ctx.out_root)
    base = out_file.parent
    pages = list(state.iter_pages())
    first_page = pages[0] if pages else ()

    next_href = ""
    if len(pages) > 1:
        next_href = relative_href(page_payload_path(ctx.out_root, 2), base)

    # With a single page there is no payload to carry the failure or the cut.
    error = _load_error_view(state) if len(pages) <= 1 else None
    notice = _truncated_view(state) if len(pages) <= 1 else None

    return {
        "posts": [summary_view(ctx, post, base) for post in first_page],
        "load_more": {
            "visible": bool(next_href),
            "href": next_href,
            "label": LOAD_MORE_LABEL,
            "error_message": DEFAULT_LOAD_ERROR,
        },
        "error": error,
        "notice": notice,
        "total": len(state.posts),
    }


def build_page_payloads(ctx: BuildContext, state: ListingState) -> List[Path]:
    """Write ``pages/<n>.json`` for every page after the first.

    Payloads keep the ``{results, next_page}`` shape of the CMS; ``next_page``
    is relative to the payload itself and ``href`` to the listing page. The
    last payload carries ``error`` when the walk stopped on a failed fetch and
    ``truncated`` when it stopped at the page limit with posts left unfetched.
    """

    base = listing_path(ctx.out_root).parent
    pages = list(state.iter_pages())
    written: List[Path] = []
    for number, posts in enumerate(pages[1:], start=2):
        target = page_payload_path(ctx.out_root, number)
        is_last = number == len(pages)
        payload: dict = {
            "page": number,
            "results": [summary_view(ctx, post, base) for post in posts],
            "next_page": None
            if is_last
            else relative_href(page_payload_path(ctx.out_root, number + 1), target.parent),
        }
        if is_last and state.error is not None:
            payload["error"] = _load_error_view(state)
        elif is_last and state.truncated:
            payload["truncated"] = _truncated_view(state)
        written.append(write_json_stable(target, payload))
    return written


def build_listing(ctx: BuildContext, state: ListingState) -> List[Path]:
    """Render ``index.html`` and the payloads behind "load more"."""

    written = ctx.ensure_assets()
    out_file = listing_path(ctx.out_root)
    view_model = build_listing_view_model(ctx, state)
    written.append(
        ctx.render(
            "listing.jinja",
            out_file,
            page=ctx.page_context(out_file, page_title="Home"),
            view_model=view_model,
        )
    )
    written.extend(build_page_payloads(ctx, state))
    return written


def _neighbor_view(ctx: BuildContext, neighbor: NeighborPost | None, base: Path) -> dict | None:
    if neighbor is None:
        return None
    return {
        "title": neighbor.title,
        "href": relative_route(post_path(ctx.out_root, neighbor.uid), base),
    }


def build_post_view_model(
    ctx: BuildContext, post: PostDetail, neighbors: Neighbors, base: Path
) -> dict:
    """View model for a post page."""

    tz = ctx.config.timezone
    return {
        "uid": post.uid,
        "title": post.title,
        "subtitle": post.subtitle,
        "author": post.author,
        "banner": {"url": post.banner.url or "", "alt": post.banner.alt or post.title},
        "date": format_date(post.first_publication_date, tz),
        "edited": format_edited(post.last_publication_date, tz) if post.was_edited else "",
        "reading_minutes": estimate_reading_minutes(
            post.content, ctx.config.words_per_minute
        ),
        "sections": [
            {"heading": section.heading or "", "html": as_html(section.body)}
            for section in post.content
        ],
        "previous": _neighbor_view(ctx, neighbors.previous, base),
        "next": _neighbor_view(ctx, neighbors.next, base),
    }


def build_not_found(ctx: BuildContext, *, slug: str = "") -> List[Path]:
    """Render the not-found page state into ``404.html``."""

    written = ctx.ensure_assets()
    out_file = not_found_path(ctx.out_root)
    written.append(
        ctx.render(
            "not_found.jinja",
            out_file,
            page=ctx.page_context(out_file, page_title="Post não encontrado"),
            slug=slug,
        )
    )
    return written


def build_post(ctx: BuildContext, gateway: ContentGateway, slug: str) -> PostPageResult:
    """Fetch and render ``post/<slug>/index.html``.

    An unknown slug renders the not-found page instead of failing. Gateway
    errors while fetching the post itself propagate.
    """

    document = gateway.get_by_uid(ctx.config.document_type, slug)
    if document is None:
        logger.warning("Post %r not found; rendering not-found page", slug)
        return PostPageResult(slug=slug, status="not_found", paths=build_not_found(ctx, slug=slug))

    try:
        post = document.to_detail()
    except ValidationError as exc:
        raise MalformedResponseError(f"Post {slug!r} is malformed: {exc}") from exc

    neighbors = find_adjacent(gateway, post, document_type=ctx.config.document_type)
    out_file = post_path(ctx.out_root, post.uid)
    view_model = build_post_view_model(ctx, post, neighbors, out_file.parent)

    written = ctx.ensure_assets()
    written.append(
        ctx.render(
            "post.jinja",
            out_file,
            page=ctx.page_context(out_file, page_title=post.title),
            post=view_model,
        )
    )
    return PostPageResult(
        slug=post.uid,
        status="ok",
        paths=written,
        reading_minutes=view_model["reading_minutes"],
    )


def build_site(
    ctx: BuildContext, gateway: ContentGateway, *, max_pages: Optional[int] = None
) -> BuildReport:
    """Build the listing, one page per listed post and the not-found page.

    Failures on the first listing page propagate. A failure while loading
    more pages or while rendering a single post is recorded in the report.
    """

    ensure_dir(ctx.out_root)
    report = BuildReport()
    state = collect_listing(
        gateway,
        document_type=ctx.config.document_type,
        page_size=ctx.config.page_size,
        max_pages=max_pages,
    )
    report.listing = state
    report.written.extend(build_listing(ctx, state))

    for uid in state.uids:
        try:
            result = build_post(ctx, gateway, uid)
        except GatewayError as exc:
            logger.error("Failed to build post %r (%s): %s", uid, exc.kind, exc)
            report.failed.append(uid)
            continue
        report.posts.append(result)
        report.written.extend(result.paths)

    report.written.extend(build_not_found(ctx))
    return report


__all__ = [
    "BuildContext",
    "BuildReport",
    "PostPageResult",
    "build_listing",
    "build_listing_view_model",
    "build_not_found",
    "build_page_payloads",
    "build_post",
    "build_post_view_model",
    "build_site",
    "summary_view",
]
