"""Cursor-based "load more" pagination of the post listing.

The listing is an explicit, immutable :class:`ListingState`. Each fetch goes
through one update cycle::

    state = begin_fetch(state)           # refuses overlapping fetches
    page = load_more(gateway, cursor)    # may raise GatewayError
    state = apply_page(state, page)      # or apply_error(state, exc)

:func:`advance` runs that cycle once and :func:`collect_listing` repeats it
until the cursor runs out, an error is recorded or a page limit is reached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterator, List, Optional, Tuple

from pydantic import ValidationError

from .errors import GatewayError, MalformedResponseError
from .gateway import ContentGateway, at
from .models import PostSummary, SearchResponse

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


class FetchInProgress(RuntimeError):
    """A second fetch was requested before the previous one completed."""


class ListingExhausted(RuntimeError):
    """A fetch was requested although the listing has no next cursor."""


@dataclass(frozen=True)
class ListingPage:
    """One page of summaries and the cursor that follows it."""

    posts: List[PostSummary]
    next_cursor: str = ""


@dataclass(frozen=True)
class LoadError:
    """Why the last "load more" failed; ``kind`` follows the gateway taxonomy."""

    kind: str
    message: str
    cursor: str


@dataclass(frozen=True)
class ListingState:
    """Listing view state; replaced, never mutated, by each update."""

    posts: Tuple[PostSummary, ...] = ()
    next_cursor: str = ""
    loading: bool = False
    error: Optional[LoadError] = None
    page_sizes: Tuple[int, ...] = ()

    @property
    def has_more(self) -> bool:
        return bool(self.next_cursor)

    @property
    def exhausted(self) -> bool:
        """True only when the listing ended normally."""

        return not self.next_cursor and self.error is None

    @property
    def truncated(self) -> bool:
        """True when the walk stopped with a cursor left unfollowed and no error."""

        return bool(self.next_cursor) and self.error is None and not self.loading

    @property
    def pages_loaded(self) -> int:
        return len(self.page_sizes)

    def iter_pages(self) -> Iterator[Tuple[PostSummary, ...]]:
        """Yield the posts appended by each applied page, in order."""

        offset = 0
        for size in self.page_sizes:
            yield self.posts[offset : offset + size]
            offset += size

    @property
    def uids(self) -> List[str]:
        return [post.uid for post in self.posts]


def _page_from_response(response: SearchResponse, url: str) -> ListingPage:
    try:
        posts = [document.to_summary() for document in response.results]
    except ValidationError as exc:
        raise MalformedResponseError(f"Invalid post summary: {exc}", url=url) from exc
    return ListingPage(posts=posts, next_cursor=response.next_page or "")


def summary_fields(document_type: str) -> List[str]:
    return [f"{document_type}.{name}" for name in ("title", "subtitle", "author")]


def load_initial_page(
    gateway: ContentGateway,
    *,
    document_type: str = "posts",
    page_size: int = DEFAULT_PAGE_SIZE,
) -> ListingPage:
    """Fetch the first listing page in the gateway's default order."""

    response = gateway.query(
        [at("document.type", document_type)],
        fetch=summary_fields(document_type),
        page_size=page_size,
    )
    page = _page_from_response(response, gateway.search_url)
    logger.info(
        "Loaded %d post(s) on the first page (more: %s)",
        len(page.posts),
        bool(page.next_cursor),
    )
    return page


def load_more(gateway: ContentGateway, cursor: str) -> ListingPage:
    """Fetch the page referenced by ``cursor`` and map it to summaries."""

    if not cursor:
        raise ValueError("load_more requires a non-empty cursor")
    response = gateway.fetch_page(cursor)
    return _page_from_response(response, cursor)


def initial_state(page: ListingPage) -> ListingState:
    return apply_page(ListingState(), page)


def begin_fetch(state: ListingState) -> ListingState:
    """Mark a fetch as in flight."""

    if state.loading:
        raise FetchInProgress("A page fetch is already in progress")
    if not state.next_cursor:
        raise ListingExhausted("The listing has no next page")
    return replace(state, loading=True)


def apply_page(state: ListingState, page: ListingPage) -> ListingState:
    """Append ``page`` to the listing, keeping order and skipping known uids."""

    seen = set(state.uids)
    appended: List[PostSummary] = []
    for post in page.posts:
        if post.uid in seen:
            logger.warning("Skipping duplicate post %r returned by the CMS", post.uid)
            continue
        seen.add(post.uid)
        appended.append(post)

    return replace(
        state,
        posts=state.posts + tuple(appended),
        next_cursor=page.next_cursor,
        loading=False,
        error=None,
        page_sizes=state.page_sizes + (len(appended),),
    )


def apply_error(state: ListingState, exc: GatewayError) -> ListingState:
    """Record a failed fetch; the cursor is kept so it can be retried."""

    return replace(
        state,
        loading=False,
        error=LoadError(kind=exc.kind, message=str(exc), cursor=state.next_cursor),
    )


def advance(state: ListingState, gateway: ContentGateway) -> ListingState:
    """Run one fetch cycle. Gateway failures end up in ``state.error``."""

    state = begin_fetch(state)
    try:
        page = load_more(gateway, state.next_cursor)
    except GatewayError as exc:
        logger.warning("Loading more posts failed (%s): %s", exc.kind, exc)
        return apply_error(state, exc)
    return apply_page(state, page)


def collect_listing(
    gateway: ContentGateway,
    *,
    document_type: str = "posts",
    page_size: int = DEFAULT_PAGE_SIZE,
    max_pages: Optional[int] = None,
) -> ListingState:
    """Load the first page and follow cursors.

    Errors on the first page propagate; later failures are recorded in the
    returned state and stop the walk. Stopping at ``max_pages`` keeps the
    cursor, so the result reports :attr:`ListingState.truncated`.
    """

    first = load_initial_page(gateway, document_type=document_type, page_size=page_size)
    state = initial_state(first)

    while state.has_more and state.error is None:
        if max_pages is not None and state.pages_loaded >= max_pages:
            logger.info("Stopping after %d page(s)", state.pages_loaded)
            break
        state = advance(state, gateway)

    return state


__all__ = [
    "FetchInProgress",
    "ListingExhausted",
    "ListingPage",
    "ListingState",
    "LoadError",
    "advance",
    "apply_error",
    "apply_page",
    "begin_fetch",
    "collect_listing",
    "initial_state",
    "load_initial_page",
    "load_more",
    "summary_fields",
]
