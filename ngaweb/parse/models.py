"""Data models for scraped thread pages."""
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ANONYMOUS_AUTHOR = "匿名"


@dataclass(frozen=True)
class RequestKey:
    """Identity of one thread page, used by the page cache and the in-flight registry."""

    tid: str
    page: int

    def __str__(self) -> str:
        return f"{self.tid}#{self.page}"


@dataclass(frozen=True)
class RawDocument:
    """Unparsed HTML for one thread page, as returned by the transport."""

    key: RequestKey
    html: str

    @property
    def tid(self) -> str:
        return self.key.tid

    @property
    def page(self) -> int:
        return self.key.page


class Post(BaseModel):
    """One post extracted from a thread page."""

    model_config = ConfigDict(frozen=True)

    pid: Optional[str] = Field(default=None, description="Post id from the post container")
    floor: Optional[int] = Field(default=None, description="Floor number (#12 / 12楼)")
    author: str = Field(default=ANONYMOUS_AUTHOR, description="Author display name")
    time_text: Optional[str] = Field(default=None, description="Post time as displayed")
    html: str = Field(default="", description="Sanitized HTML, safe to render as is")


class ThreadPage(BaseModel):
    """All posts of one page of a thread, in document order."""

    model_config = ConfigDict(frozen=True)

    tid: str
    page: int
    posts: tuple[Post, ...] = ()
    # Best-effort hint derived from "next page" markers anywhere in the page
    has_next: bool = False

    @property
    def key(self) -> RequestKey:
        return RequestKey(self.tid, self.page)
