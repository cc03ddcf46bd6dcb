"""Base source interfaces.

All site-specific sources inherit from HttpSource, usually through
ParsedHttpSource, and implement the abstract request/parse hooks.
The fetch_* coroutines are the operations the host application calls.
"""

import hashlib
from abc import ABC, abstractmethod
from typing import List, Optional

import httpx
import structlog
from bs4 import BeautifulSoup, Tag

from mangasources.config import settings
from mangasources.core.exceptions import HttpError
from mangasources.sources.filters import FilterList
from mangasources.sources.models import Chapter, Page, Series, SeriesPage
from mangasources.sources.utils.html import abs_url, as_soup
from mangasources.sources.utils.rate_limiter import DomainRateLimiter
from mangasources.sources.utils.retry import http_retry


class HttpSource(ABC):
    """Abstract base class for sources backed by an HTTP site.

    Request builders return httpx.Request objects; the fetch_* coroutines
    send them through the source's client and hand the response to the
    matching *_parse hook.
    """

    name: str = ""  # Must be overridden in subclass (e.g., "Xinmeitulu")
    base_url: str = ""  # Must be overridden in subclass, without trailing slash
    lang: str = "all"
    supports_latest: bool = False
    version_id: int = 1

    # Requests per minute for this source's domain, None for the limiter default
    RATE_LIMIT_RPM: Optional[int] = None

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize the source with dependency injection points.

        Args:
            transport: Optional httpx transport used by the lazily built client
        """
        self.rate_limiter: Optional[DomainRateLimiter] = None  # Injected by factory
        self.logger = structlog.get_logger(__name__).bind(source=self.name)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._headers: Optional[httpx.Headers] = None

    @property
    def id(self) -> int:
        """Stable identifier derived from name, language and version."""
        key = f"{self.name.lower()}/{self.lang}/{self.version_id}"
        digest = hashlib.md5(key.encode("utf-8")).digest()
        return int.from_bytes(digest[:8], "big") & 0x7FFFFFFFFFFFFFFF

    @property
    def domain(self) -> str:
        return httpx.URL(self.base_url).host

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    def headers_builder(self) -> httpx.Headers:
        return httpx.Headers({"User-Agent": settings.DEFAULT_USER_AGENT})

    @property
    def headers(self) -> httpx.Headers:
        if self._headers is None:
            self._headers = self.headers_builder()
        return self._headers

    def client_options(self) -> dict:
        """Extra keyword arguments for httpx.AsyncClient (event hooks etc.)."""
        return {}

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=self.headers,
                timeout=settings.HTTP_TIMEOUT,
                follow_redirects=True,
                transport=self._transport,
                **self.client_options(),
            )
        return self._client

    def attach_rate_limiter(self, rate_limiter: DomainRateLimiter) -> None:
        """Use a shared limiter, registering this source's own limit on it."""
        self.rate_limiter = rate_limiter
        if self.RATE_LIMIT_RPM:
            rate_limiter.set_custom_limit(self.domain, self.RATE_LIMIT_RPM)

    def get(self, url: str, headers: Optional[httpx.Headers] = None) -> httpx.Request:
        """Build a GET request carrying the source headers."""
        return httpx.Request("GET", url, headers=headers if headers is not None else self.headers)

    @http_retry
    async def _send(self, request: httpx.Request) -> httpx.Response:
        """Send a request with rate limiting; transport errors are retried."""
        if self.rate_limiter:
            await self.rate_limiter.acquire(request.url.host)

        self.logger.debug("http_request", method=request.method, url=str(request.url))
        return await self.client.send(request)

    async def _execute(self, request: httpx.Request) -> httpx.Response:
        """Send a request and require a successful status code.

        Raises:
            HttpError: If the site answers with a non-2xx status
        """
        response = await self._send(request)
        if not response.is_success:
            self.logger.warning(
                "http_error_status",
                status_code=response.status_code,
                url=str(request.url),
            )
            raise HttpError(response.status_code, str(request.url))
        return response

    async def aclose(self) -> None:
        """Close the HTTP client if one was created."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpSource":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Host operations
    # ------------------------------------------------------------------

    async def fetch_popular_series(self, page: int) -> SeriesPage:
        response = await self._execute(self.popular_series_request(page))
        result = self.popular_series_parse(response)
        self.logger.info("fetched_popular", page=page, count=len(result.series))
        return result

    async def fetch_latest_updates(self, page: int) -> SeriesPage:
        response = await self._execute(self.latest_updates_request(page))
        result = self.latest_updates_parse(response)
        self.logger.info("fetched_latest", page=page, count=len(result.series))
        return result

    async def fetch_search_series(self, page: int, query: str, filters: FilterList) -> SeriesPage:
        response = await self._execute(self.search_series_request(page, query, filters))
        result = self.search_series_parse(response)
        self.logger.info("fetched_search", page=page, query=query, count=len(result.series))
        return result

    async def fetch_series_details(self, series: Series) -> Series:
        response = await self._execute(self.series_details_request(series))
        details = self.series_details_parse(response)
        details.initialized = True
        return details

    async def fetch_chapter_list(self, series: Series) -> List[Chapter]:
        response = await self._execute(self.chapter_list_request(series))
        return self.chapter_list_parse(response)

    async def fetch_page_list(self, chapter: Chapter) -> List[Page]:
        response = await self._execute(self.page_list_request(chapter))
        pages = self.page_list_parse(response)
        self.logger.info("fetched_pages", chapter=chapter.url, count=len(pages))
        return pages

    async def fetch_image_url(self, page: Page) -> str:
        response = await self._execute(self.image_url_request(page))
        return self.image_url_parse(response)

    async def fetch_image(self, page: Page) -> httpx.Response:
        return await self._execute(self.image_request(page))

    def get_filter_list(self) -> FilterList:
        return FilterList()

    # ------------------------------------------------------------------
    # Request builders
    # ------------------------------------------------------------------

    @abstractmethod
    def popular_series_request(self, page: int) -> httpx.Request:
        pass

    @abstractmethod
    def latest_updates_request(self, page: int) -> httpx.Request:
        pass

    @abstractmethod
    def search_series_request(self, page: int, query: str, filters: FilterList) -> httpx.Request:
        pass

    def series_details_request(self, series: Series) -> httpx.Request:
        return self.get(abs_url(self.base_url, series.url))

    def chapter_list_request(self, series: Series) -> httpx.Request:
        return self.series_details_request(series)

    def page_list_request(self, chapter: Chapter) -> httpx.Request:
        return self.get(abs_url(self.base_url, chapter.url))

    def image_url_request(self, page: Page) -> httpx.Request:
        return self.get(abs_url(self.base_url, page.url))

    def image_request(self, page: Page) -> httpx.Request:
        return self.get(page.image_url or "")

    # ------------------------------------------------------------------
    # Response parsers
    # ------------------------------------------------------------------

    @abstractmethod
    def popular_series_parse(self, response: httpx.Response) -> SeriesPage:
        pass

    @abstractmethod
    def latest_updates_parse(self, response: httpx.Response) -> SeriesPage:
        pass

    @abstractmethod
    def search_series_parse(self, response: httpx.Response) -> SeriesPage:
        pass

    @abstractmethod
    def series_details_parse(self, response: httpx.Response) -> Series:
        pass

    @abstractmethod
    def chapter_list_parse(self, response: httpx.Response) -> List[Chapter]:
        pass

    @abstractmethod
    def page_list_parse(self, response: httpx.Response) -> List[Page]:
        pass

    @abstractmethod
    def image_url_parse(self, response: httpx.Response) -> str:
        pass


class ParsedHttpSource(HttpSource):
    """HttpSource whose responses are HTML pages read through CSS selectors.

    Subclasses provide selectors and per-element hooks; listing parsing,
    pagination detection and document handling live here.
    """

    def _parse_listing(self, document: BeautifulSoup, selector: str, from_element, next_page_selector: Optional[str]) -> SeriesPage:
        series = [from_element(element) for element in document.select(selector)]
        has_next_page = bool(next_page_selector) and document.select_one(next_page_selector) is not None
        return SeriesPage(series=series, has_next_page=has_next_page)

    def popular_series_parse(self, response: httpx.Response) -> SeriesPage:
        return self._parse_listing(
            as_soup(response),
            self.popular_series_selector(),
            self.popular_series_from_element,
            self.popular_series_next_page_selector(),
        )

    def latest_updates_parse(self, response: httpx.Response) -> SeriesPage:
        return self._parse_listing(
            as_soup(response),
            self.latest_updates_selector(),
            self.latest_updates_from_element,
            self.latest_updates_next_page_selector(),
        )

    def search_series_parse(self, response: httpx.Response) -> SeriesPage:
        return self._parse_listing(
            as_soup(response),
            self.search_series_selector(),
            self.search_series_from_element,
            self.search_series_next_page_selector(),
        )

    def series_details_parse(self, response: httpx.Response) -> Series:
        return self.series_details_from_document(as_soup(response))

    def chapter_list_parse(self, response: httpx.Response) -> List[Chapter]:
        document = as_soup(response)
        return [self.chapter_from_element(element) for element in document.select(self.chapter_list_selector())]

    def page_list_parse(self, response: httpx.Response) -> List[Page]:
        return self.page_list_from_document(as_soup(response))

    def image_url_parse(self, response: httpx.Response) -> str:
        return self.image_url_from_document(as_soup(response))

    # Popular
    @abstractmethod
    def popular_series_selector(self) -> str:
        pass

    @abstractmethod
    def popular_series_from_element(self, element: Tag) -> Series:
        pass

    @abstractmethod
    def popular_series_next_page_selector(self) -> Optional[str]:
        pass

    # Latest
    @abstractmethod
    def latest_updates_selector(self) -> str:
        pass

    @abstractmethod
    def latest_updates_from_element(self, element: Tag) -> Series:
        pass

    @abstractmethod
    def latest_updates_next_page_selector(self) -> Optional[str]:
        pass

    # Search
    @abstractmethod
    def search_series_selector(self) -> str:
        pass

    @abstractmethod
    def search_series_from_element(self, element: Tag) -> Series:
        pass

    @abstractmethod
    def search_series_next_page_selector(self) -> Optional[str]:
        pass

    # Details, chapters, pages
    @abstractmethod
    def series_details_from_document(self, document: BeautifulSoup) -> Series:
        pass

    @abstractmethod
    def chapter_list_selector(self) -> str:
        pass

    @abstractmethod
    def chapter_from_element(self, element: Tag) -> Chapter:
        pass

    @abstractmethod
    def page_list_from_document(self, document: BeautifulSoup) -> List[Page]:
        pass

    @abstractmethod
    def image_url_from_document(self, document: BeautifulSoup) -> str:
        pass
