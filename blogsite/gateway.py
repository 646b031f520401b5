"""HTTP client for the CMS REST API (``/api/v2`` and ``documents/search``).

Every request goes through :meth:`ContentGateway._get_json`, which maps
transport and payload problems onto the :mod:`blogsite.errors` taxonomy:

- connection errors, timeouts and 5xx answers raise ``NetworkError``;
- HTTP 429 raises ``RateLimitedError`` (with ``Retry-After`` when present);
- non-JSON bodies, payloads that fail validation and other non-2xx answers
  raise ``MalformedResponseError``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Optional, Sequence

import requests
from pydantic import ValidationError

from .config import SiteConfig
from .errors import MalformedResponseError, NetworkError, RateLimitedError
from .models import RawDocument, SearchResponse

logger = logging.getLogger(__name__)

USER_AGENT = "blogsite/0.1"

ORDER_BY_PUBLICATION_ASC = "[document.first_publication_date]"
ORDER_BY_PUBLICATION_DESC = "[document.first_publication_date desc]"


def at(path: str, value: str) -> str:
    """Build an ``at`` predicate, e.g. ``[at(document.type, "posts")]``."""

    return f"[at({path}, {json.dumps(value)})]"


def build_query(predicates: Iterable[str]) -> str:
    """Combine predicates into the ``q`` parameter."""

    return "[" + "".join(predicates) + "]"


def _retry_after(response: requests.Response) -> Optional[float]:
    raw = response.headers.get("Retry-After")
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


class ContentGateway:
    """Read-only client for a CMS repository.

    ``ref`` pins every query to a content version. When it is not given the
    repository's master ref is looked up once and cached; passing a preview
    ref makes all queries return draft content.
    """

    def __init__(
        self,
        api_endpoint: str,
        *,
        access_token: Optional[str] = None,
        ref: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_endpoint = api_endpoint.rstrip("/")
        self.access_token = access_token
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)
        self._ref = ref
        self.requests_made = 0

    @classmethod
    def from_config(
        cls, config: SiteConfig, *, session: Optional[requests.Session] = None
    ) -> "ContentGateway":
        return cls(
            config.api_endpoint,
            access_token=config.access_token,
            ref=config.preview_ref,
            timeout=config.request_timeout,
            session=session,
        )

    @property
    def search_url(self) -> str:
        return f"{self.api_endpoint}/documents/search"

    def _auth_params(self) -> dict[str, str]:
        return {"access_token": self.access_token} if self.access_token else {}

    def _get_json(self, url: str, params: Optional[dict[str, Any]] = None) -> Any:
        self.requests_made += 1
        logger.debug("GET %s params=%s", url, params)
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.Timeout as exc:
            raise NetworkError(f"Request timed out after {self.timeout}s", url=url) from exc
        except requests.RequestException as exc:
            raise NetworkError(f"Request failed: {exc}", url=url) from exc

        status = response.status_code
        if status == 429:
            raise RateLimitedError(
                "CMS rate limit reached", url=url, retry_after=_retry_after(response)
            )
        if status >= 500:
            raise NetworkError(f"CMS answered with HTTP {status}", url=url)
        if status >= 400:
            raise MalformedResponseError(f"CMS rejected the request with HTTP {status}", url=url)

        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError("CMS response is not valid JSON", url=url) from exc

    def master_ref(self) -> str:
        """Return the ref used for queries (preview ref or cached master ref)."""

        if self._ref:
            return self._ref

        payload = self._get_json(self.api_endpoint, params=self._auth_params() or None)
        refs = payload.get("refs") if isinstance(payload, dict) else None
        if not isinstance(refs, list):
            raise MalformedResponseError("API root has no refs list", url=self.api_endpoint)
        for entry in refs:
            if isinstance(entry, dict) and entry.get("isMasterRef") and entry.get("ref"):
                self._ref = str(entry["ref"])
                logger.debug("Using master ref %s", self._ref)
                return self._ref
        raise MalformedResponseError("API root has no master ref", url=self.api_endpoint)

    def _parse_search(self, payload: Any, url: str) -> SearchResponse:
        try:
            return SearchResponse.model_validate(payload)
        except ValidationError as exc:
            raise MalformedResponseError(f"Unexpected search payload: {exc}", url=url) from exc

    def query(
        self,
        predicates: Sequence[str],
        *,
        fetch: Optional[Sequence[str]] = None,
        page_size: int = 20,
        orderings: Optional[str] = None,
        after: Optional[str] = None,
    ) -> SearchResponse:
        """Run ``documents/search`` with the given predicates and options."""

        params: dict[str, Any] = {
            "ref": self.master_ref(),
            "q": build_query(predicates),
            "pageSize": page_size,
        }
        if fetch:
            params["fetch"] = ",".join(fetch)
        if orderings:
            params["orderings"] = orderings
        if after:
            params["after"] = after
        params.update(self._auth_params())

        payload = self._get_json(self.search_url, params=params)
        return self._parse_search(payload, self.search_url)

    def fetch_page(self, cursor: str) -> SearchResponse:
        """Fetch a result page from a fully-qualified ``next_page`` cursor URL."""

        payload = self._get_json(cursor)
        return self._parse_search(payload, cursor)

    def get_by_uid(self, document_type: str, uid: str) -> Optional[RawDocument]:
        """Return the document of ``document_type`` with ``uid``, or ``None``."""

        response = self.query([at(f"my.{document_type}.uid", uid)], page_size=1)
        if not response.results:
            logger.info("No %s document with uid %r", document_type, uid)
            return None
        return response.results[0]


__all__ = [
    "ContentGateway",
    "ORDER_BY_PUBLICATION_ASC",
    "ORDER_BY_PUBLICATION_DESC",
    "at",
    "build_query",
]
