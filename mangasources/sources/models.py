"""Entities exchanged between sources and the host application."""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional
from urllib.parse import urlsplit


def url_without_domain(url: str) -> str:
    """Strip scheme and host from a URL, keeping path, query and fragment.

    Args:
        url: Absolute or relative URL

    Returns:
        Path-relative URL such as "/g/123/?page=2"
    """
    parts = urlsplit(url.strip())
    out = parts.path or "/"
    if parts.query:
        out += f"?{parts.query}"
    if parts.fragment:
        out += f"#{parts.fragment}"
    return out


class SeriesStatus(IntEnum):
    """Publication status of a series."""

    UNKNOWN = 0
    ONGOING = 1
    COMPLETED = 2
    LICENSED = 3
    PUBLISHING_FINISHED = 4
    CANCELLED = 5
    ON_HIATUS = 6


class UpdateStrategy(str, Enum):
    """How the host refreshes a series in its library."""

    ALWAYS_UPDATE = "always_update"
    ONLY_FETCH_ONCE = "only_fetch_once"


@dataclass
class Series:
    """A series (gallery, manga, photo set) as listed by a source."""

    url: str = ""  # Path without domain
    title: str = ""
    thumbnail_url: Optional[str] = None
    author: Optional[str] = None
    artist: Optional[str] = None
    description: Optional[str] = None
    genre: Optional[str] = None
    status: SeriesStatus = SeriesStatus.UNKNOWN
    update_strategy: UpdateStrategy = UpdateStrategy.ALWAYS_UPDATE
    initialized: bool = False

    def set_url_without_domain(self, url: str) -> None:
        self.url = url_without_domain(url)

    def genres(self) -> List[str]:
        """Split the comma separated genre string."""
        if not self.genre:
            return []
        return [g.strip() for g in self.genre.split(",") if g.strip()]


@dataclass
class Chapter:
    """A readable unit of a series."""

    url: str = ""
    name: str = ""
    scanlator: Optional[str] = None
    date_upload: int = 0  # Epoch milliseconds, 0 when unknown
    chapter_number: float = -1.0

    def set_url_without_domain(self, url: str) -> None:
        self.url = url_without_domain(url)


@dataclass
class Page:
    """One image of a chapter.

    Either image_url is known up front, or url points at an HTML page
    that resolves to the image through the source's image_url_parse.
    """

    index: int
    url: str = ""
    image_url: Optional[str] = None


@dataclass
class SeriesPage:
    """One page of a listing."""

    series: List[Series] = field(default_factory=list)
    has_next_page: bool = False
