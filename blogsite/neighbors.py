"""Previous/next post lookup relative to a post's publication date.

Both neighbors are single-result queries positioned at the current document
with the ``after`` parameter:

- previous: ordered by first publication date descending, so the first
  result after the current document is the closest older post;
- next: ordered ascending, so the first result is the closest newer post.

A result is rejected when it is the current post or when its publication
date is not strictly on the expected side. Query failures degrade to
"no neighbor" so a post page never fails because of its navigation links.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from .errors import GatewayError
from .gateway import ORDER_BY_PUBLICATION_ASC, ORDER_BY_PUBLICATION_DESC, ContentGateway, at
from .models import NeighborPost, PostDetail, RawDocument

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Neighbors:
    previous: Optional[NeighborPost] = None
    next: Optional[NeighborPost] = None


def _is_on_side(candidate: RawDocument, post: PostDetail, *, older: bool) -> bool:
    current = post.first_publication_date
    other = candidate.first_publication_date
    if current is None or other is None:
        # Without dates the ordering cannot be checked; trust the query.
        return True
    return other < current if older else other > current


def _query_neighbor(
    gateway: ContentGateway,
    post: PostDetail,
    *,
    document_type: str,
    older: bool,
) -> Optional[NeighborPost]:
    side = "previous" if older else "next"
    try:
        response = gateway.query(
            [at("document.type", document_type)],
            fetch=[f"{document_type}.title"],
            page_size=1,
            orderings=ORDER_BY_PUBLICATION_DESC if older else ORDER_BY_PUBLICATION_ASC,
            after=post.id or None,
        )
    except GatewayError as exc:
        logger.warning("Could not resolve %s post for %r (%s): %s", side, post.uid, exc.kind, exc)
        return None

    if not response.results:
        return None
    candidate = response.results[0]
    if candidate.slug == post.uid or (post.id and candidate.id == post.id):
        return None
    if not _is_on_side(candidate, post, older=older):
        logger.debug("Discarding %s candidate %r: out of order", side, candidate.slug)
        return None
    try:
        return candidate.to_neighbor()
    except ValidationError:
        logger.warning("Ignoring malformed %s candidate for %r", side, post.uid)
        return None


def find_adjacent(
    gateway: ContentGateway, post: PostDetail, *, document_type: str = "posts"
) -> Neighbors:
    """Resolve the chronologically previous and next posts of ``post``."""

    if not post.id:
        logger.warning("Post %r has no document id; skipping neighbor lookup", post.uid)
        return Neighbors()
    return Neighbors(
        previous=_query_neighbor(gateway, post, document_type=document_type, older=True),
        next=_query_neighbor(gateway, post, document_type=document_type, older=False),
    )


def find_adjacent_by_uid(
    gateway: ContentGateway, slug: str, *, document_type: str = "posts"
) -> Neighbors:
    """Like :func:`find_adjacent`, starting from a uid."""

    try:
        document = gateway.get_by_uid(document_type, slug)
    except GatewayError as exc:
        logger.warning("Could not load %r for neighbor lookup (%s): %s", slug, exc.kind, exc)
        return Neighbors()
    if document is None:
        return Neighbors()
    try:
        post = document.to_detail()
    except ValidationError:
        logger.warning("Post %r is malformed; skipping neighbor lookup", slug)
        return Neighbors()
    return find_adjacent(gateway, post, document_type=document_type)


__all__ = ["Neighbors", "find_adjacent", "find_adjacent_by_uid"]
