"""Pytest configuration and shared fixtures."""

from typing import Callable, Dict, List, Tuple, Union

import httpx
import pytest

from mangasources.sources.models import Page
from mangasources.sources.multisrc.galleryadults import GalleryAdults
from mangasources.sources.preferences import SourcePreferences
from mangasources.sources.utils.html import img_attr


GALLERY_BASE_URL = "https://gallery.test"

RouteValue = Union[str, httpx.Response, Callable[[httpx.Request], httpx.Response]]


class RouteTransport(httpx.MockTransport):
    """MockTransport answering from a URL -> response table.

    Values may be an HTML string (served as 200 text/html), a ready
    httpx.Response, or a callable taking the request. Unknown URLs get 404.
    Every request is recorded in `requests`.
    """

    def __init__(self, routes: Dict[str, RouteValue]):
        self.routes = dict(routes)
        self.requests: List[httpx.Request] = []
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, text="not found")
        if callable(route):
            return route(request)
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, text=route, headers={"content-type": "text/html; charset=utf-8"})

    def urls(self) -> List[str]:
        return [str(request.url) for request in self.requests]


class DemoGallery(GalleryAdults):
    """Minimal concrete gallery site used across tests."""

    def __init__(self, transport=None, preferences=None, series_lang=""):
        super().__init__(
            name="Demo Gallery",
            base_url=GALLERY_BASE_URL,
            lang="en",
            series_lang=series_lang,
            transport=transport,
            preferences=preferences if preferences is not None else SourcePreferences("demo"),
        )

    async def parse_pages_individually(self, document):
        gallery_id = self.input_id_value_of(document, self.gallery_id_selector)
        total = int(self.input_id_value_of(document, self.total_pages_selector))
        pages = []
        for index in range(1, total + 1):
            page = Page(index=index, url=f"{self.base_url}/{self.page_uri}/{gallery_id}/{index}/")
            page.image_url = await self.fetch_image_url(page)
            pages.append(page)
        return pages

    def image_url_from_document(self, document):
        return img_attr(document.select_one("#gimg"), self.base_url)


@pytest.fixture
def make_transport() -> Callable[[Dict[str, RouteValue]], RouteTransport]:
    """Build a RouteTransport from a route table."""
    return RouteTransport


@pytest.fixture
def memory_preferences() -> SourcePreferences:
    return SourcePreferences("test")


@pytest.fixture
def make_gallery() -> Callable[..., Tuple[DemoGallery, RouteTransport]]:
    """Build a DemoGallery wired to a RouteTransport serving the given routes."""

    def _make(routes: Dict[str, RouteValue], **kwargs) -> Tuple[DemoGallery, RouteTransport]:
        transport = RouteTransport(routes)
        return DemoGallery(transport=transport, **kwargs), transport

    return _make
