"""Pydantic models for CMS payloads and the page view data built from them."""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .dates import parse_timestamp


def _parse_optional_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return parse_timestamp(value)


class RichTextSpan(BaseModel):
    """Inline formatting applied to a slice of a block's text."""

    start: int = Field(..., description="Start offset (inclusive) in the block text.")
    end: int = Field(..., description="End offset (exclusive) in the block text.")
    type: str = Field(..., description="Span kind such as strong, em or hyperlink.")
    data: Optional[dict[str, Any]] = Field(
        None, description="Span payload, e.g. the link target of a hyperlink."
    )


class RichTextBlock(BaseModel):
    """Single block of a rich text field (paragraph, heading, list item, ...)."""

    type: str = Field(..., description="Block kind as emitted by the CMS.")
    text: str = Field("", description="Plain text of the block.")
    spans: List[RichTextSpan] = Field(
        default_factory=list, description="Inline formatting for the text."
    )
    url: Optional[str] = Field(None, description="Source for image and embed blocks.")
    alt: Optional[str] = Field(None, description="Alternative text for image blocks.")

    model_config = ConfigDict(extra="allow")


class ContentSection(BaseModel):
    """A post section: an optional heading followed by rich text body blocks."""

    heading: Optional[str] = Field(None, description="Section heading, if any.")
    body: List[RichTextBlock] = Field(
        default_factory=list, description="Ordered rich text blocks."
    )


class Banner(BaseModel):
    """Banner image reference of a post."""

    url: Optional[str] = None
    alt: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class PostSummary(BaseModel):
    """Entry shown on the listing page."""

    uid: str = Field(..., description="Unique identifier (slug) of the post.")
    first_publication_date: Optional[datetime] = None
    title: str = ""
    subtitle: str = ""
    author: str = ""

    model_config = ConfigDict(frozen=True)

    @field_validator("first_publication_date", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> Optional[datetime]:
        return _parse_optional_timestamp(value)


class PostDetail(BaseModel):
    """Everything rendered on a post page."""

    id: str = Field("", description="CMS document id, used as a query cursor.")
    uid: str
    first_publication_date: Optional[datetime] = None
    last_publication_date: Optional[datetime] = None
    title: str = ""
    subtitle: str = ""
    banner: Banner = Field(default_factory=Banner)
    author: str = ""
    content: List[ContentSection] = Field(default_factory=list)

    @field_validator("first_publication_date", "last_publication_date", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> Optional[datetime]:
        return _parse_optional_timestamp(value)

    @property
    def was_edited(self) -> bool:
        if not self.first_publication_date or not self.last_publication_date:
            return False
        return self.last_publication_date > self.first_publication_date


class NeighborPost(BaseModel):
    """Link target for the previous or next post."""

    uid: str
    title: str = ""

    model_config = ConfigDict(frozen=True)


class RawDocument(BaseModel):
    """Document as returned by the CMS search endpoint."""

    id: str
    uid: Optional[str] = None
    type: str = ""
    first_publication_date: Optional[datetime] = None
    last_publication_date: Optional[datetime] = None
    data: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    @field_validator("first_publication_date", "last_publication_date", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> Optional[datetime]:
        return _parse_optional_timestamp(value)

    @field_validator("data", mode="before")
    @classmethod
    def default_data(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def slug(self) -> str:
        return self.uid or self.id

    def to_summary(self) -> PostSummary:
        return PostSummary(
            uid=self.slug,
            first_publication_date=self.first_publication_date,
            title=self.data.get("title") or "",
            subtitle=self.data.get("subtitle") or "",
            author=self.data.get("author") or "",
        )

    def to_neighbor(self) -> NeighborPost:
        return NeighborPost(uid=self.slug, title=self.data.get("title") or "")

    def to_detail(self) -> PostDetail:
        return PostDetail(
            id=self.id,
            uid=self.slug,
            first_publication_date=self.first_publication_date,
            last_publication_date=self.last_publication_date,
            title=self.data.get("title") or "",
            subtitle=self.data.get("subtitle") or "",
            banner=self.data.get("banner") or {},
            author=self.data.get("author") or "",
            content=self.data.get("content") or [],
        )


class SearchResponse(BaseModel):
    """Paginated result set returned by ``documents/search``."""

    page: int = 1
    results_per_page: Optional[int] = None
    results_size: Optional[int] = None
    total_results_size: Optional[int] = None
    total_pages: Optional[int] = None
    next_page: Optional[str] = Field(
        None, description="Cursor URL for the next page; null at the end."
    )
    prev_page: Optional[str] = None
    results: List[RawDocument] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


__all__ = [
    "Banner",
    "ContentSection",
    "NeighborPost",
    "PostDetail",
    "PostSummary",
    "RawDocument",
    "RichTextBlock",
    "RichTextSpan",
    "SearchResponse",
]
