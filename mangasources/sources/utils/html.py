"""HTML parsing helpers shared by selector-driven sources."""

from typing import Optional
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup, Comment, NavigableString, Tag


# Lazy-loading attributes checked before plain src, in priority order
IMAGE_ATTRIBUTES = ("data-cfsrc", "data-src", "data-lazy-src", "srcset")


def as_soup(response: httpx.Response) -> BeautifulSoup:
    """Parse a response body into a BeautifulSoup document."""
    return BeautifulSoup(response.text, "lxml")


def abs_url(base_url: str, value: Optional[str]) -> str:
    """Resolve a possibly relative URL against base_url.

    Returns an empty string for empty values, like a missing attribute.
    """
    if not value:
        return ""
    value = value.strip()
    if value.startswith("//"):
        return f"https:{value}"
    return urljoin(base_url.rstrip("/") + "/", value)


def attr(element: Optional[Tag], name: str) -> str:
    """Attribute value as a string, "" when the element or attribute is missing."""
    if element is None:
        return ""
    value = element.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def text(element: Optional[Tag]) -> str:
    """Whitespace-normalized text of an element and its descendants."""
    if element is None:
        return ""
    return " ".join(element.get_text().split())


def own_text(element: Optional[Tag]) -> str:
    """Whitespace-normalized text of the element's direct text nodes only."""
    if element is None:
        return ""
    parts = [
        str(child)
        for child in element.children
        if isinstance(child, NavigableString) and not isinstance(child, Comment)
    ]
    return " ".join("".join(parts).split())


def img_attr(element: Optional[Tag], base_url: str) -> Optional[str]:
    """Absolute image URL of an <img>, honouring lazy-loading attributes.

    Returns:
        Image URL, or None when element is None
    """
    if element is None:
        return None
    for name in IMAGE_ATTRIBUTES:
        if element.has_attr(name):
            value = attr(element, name)
            if name == "srcset":
                value = value.strip().split(" ")[0]
            return abs_url(base_url, value)
    return abs_url(base_url, attr(element, "src"))
