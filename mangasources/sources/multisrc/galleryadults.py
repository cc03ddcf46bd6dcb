"""Shared base for gallery sites built on the "Gallery Adults" theme.

Concrete sites subclass GalleryAdults, pass their name and base URL,
override the selector hooks that differ, and implement the two
page-by-page hooks (parse_pages_individually, image_url_from_document).
"""

import asyncio
import contextlib
import re
from abc import abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
from urllib.parse import quote, urlsplit

import httpx
from bs4 import BeautifulSoup, Tag

from mangasources.config import settings
from mangasources.core.exceptions import LoginRequiredError, ParseError
from mangasources.sources.base import ParsedHttpSource
from mangasources.sources.filters import (
    CheckBox,
    FilterList,
    Header,
    Separator,
    UriPartFilter,
)
from mangasources.sources.models import (
    Chapter,
    Page,
    Series,
    SeriesPage,
    SeriesStatus,
    UpdateStrategy,
)
from mangasources.sources.preferences import (
    ConfigurableSource,
    PreferenceScreen,
    SourcePreferences,
    SwitchPreference,
    get_source_preferences,
)
from mangasources.sources.utils.html import abs_url, as_soup, attr, img_attr, own_text, text
from mangasources.sources.utils.rate_limiter import DomainRateLimiter
from mangasources.sources.utils.user_agents import (
    add_random_ua_preference_to_screen,
    resolve_user_agent,
)


PREFIX_ID_SEARCH = "id:"
PREFIX_ID = "g"
PREF_PARSE_IMAGES = "pref_parse_images"

TAG_PAGES = 3
MAX_TAGS_FETCH_ATTEMPTS = 3

# any whitespace except right after a comma
SPACE_REGEX = re.compile(r"(?<!,)\s+")

# a bare query is a gallery id when it is a signed 32-bit integer
ID_QUERY_REGEX = re.compile(r"[+-]?[0-9]+")
ID_QUERY_MAX = 2**31 - 1


def is_gallery_id(query: str) -> bool:
    if not ID_QUERY_REGEX.fullmatch(query):
        return False
    return -ID_QUERY_MAX - 1 <= int(query) <= ID_QUERY_MAX


class GenreFilter(UriPartFilter):
    """Browse by one of the cached popular tags."""

    def __init__(self, genres: Sequence[Tuple[str, str]]):
        super().__init__("Browse tag", [("<select>", "---")] + list(genres))


class FavoriteFilter(CheckBox):
    def __init__(self):
        super().__init__("Show favorites only", False)


@dataclass(frozen=True)
class _ListedSeries:
    title: str
    url: str
    thumbnail: Optional[str]
    lang: str


class GalleryAdults(ParsedHttpSource, ConfigurableSource):
    """Abstract base class for gallery sites sharing one HTML theme.

    Provides:
    - Listing, search, tag browsing and favorites requests
    - Selector-driven listing and detail parsing
    - A popular-tag cache loaded in the background for the genre filter
    - Fast page list synthesis from the first thumbnail URL
    """

    supports_latest = False
    RATE_LIMIT_RPM = 240  # 4 requests per second

    favorite_path = "user"
    series_detail_info_selector = ".gallery_top"

    gallery_id_selector = "gallery_id"
    load_id_selector = "load_id"
    load_dir_selector = "load_dir"
    total_pages_selector = "load_pages"
    page_uri = "g"
    page_selector = ".gallery_thumb"

    def __init__(
        self,
        name: str,
        base_url: str,
        lang: str = "all",
        series_lang: str = "",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        preferences: Optional[SourcePreferences] = None,
    ):
        """Initialize a gallery source.

        Args:
            name: Display name of the site
            base_url: Site root without trailing slash
            lang: Language code reported to the host
            series_lang: Site language path ("english", ...); empty lists everything
            transport: Optional httpx transport for the client
            preferences: Preference store, defaults to source_<id>
        """
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.lang = lang
        self.series_lang = series_lang
        super().__init__(transport=transport)

        self.preferences = preferences if preferences is not None else get_source_preferences(self.id)
        self.attach_rate_limiter(DomainRateLimiter())

        self._genres: List[Tuple[str, str]] = []
        self._tags_fetch_attempt = 0
        self._genres_task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Preferences and client
    # ------------------------------------------------------------------

    @property
    def parse_images(self) -> bool:
        return self.preferences.get_bool(PREF_PARSE_IMAGES, False)

    def setup_preference_screen(self, screen: PreferenceScreen) -> None:
        screen.add_preference(
            SwitchPreference(
                key=PREF_PARSE_IMAGES,
                title="Parse for images' URL one by one (Might help if chapter failed to load some pages)",
                summary_off="Fast images' URL generator",
                summary_on="Slowly parsing images' URL",
                default_value=False,
            )
        )
        add_random_ua_preference_to_screen(screen)

    def headers_builder(self) -> httpx.Headers:
        user_agent = resolve_user_agent(
            self.preferences,
            default=settings.DEFAULT_USER_AGENT,
            filter_include=["chrome"],
        )
        return httpx.Headers({"User-Agent": user_agent})

    # ------------------------------------------------------------------
    # Element helpers
    # ------------------------------------------------------------------

    def series_title(self, element: Tag, selector: str = ".caption") -> Optional[str]:
        node = element.select_one(selector)
        return text(node) if node is not None else None

    def series_url(self, element: Tag) -> Optional[str]:
        node = element.select_one(".inner_thumb a")
        return abs_url(self.base_url, attr(node, "href")) if node is not None else None

    def series_thumbnail(self, element: Tag) -> Optional[str]:
        return img_attr(element.select_one(".inner_thumb img"), self.base_url)

    def series_lang_of(self, element: Tag) -> str:
        """Language of a listed item.

        Override to drop other languages from search results; the default
        returns series_lang so nothing is filtered.
        """
        return self.series_lang

    def _required(self, value: Optional[str], what: str) -> str:
        if value is None:
            raise ParseError(self.name, f"missing {what}")
        return value

    # ------------------------------------------------------------------
    # Popular / latest
    # ------------------------------------------------------------------

    def popular_series_request(self, page: int) -> httpx.Request:
        url = f"{self.base_url}/"
        if self.series_lang:
            url += f"language/{self.series_lang}/"
        request_url = httpx.URL(url)
        if page > 1:
            request_url = request_url.copy_add_param("page", str(page))
        return self.get(request_url)

    def popular_series_selector(self) -> str:
        return "div.thumb"

    def popular_series_from_element(self, element: Tag) -> Series:
        series = Series(
            title=self._required(self.series_title(element), "title"),
            thumbnail_url=self.series_thumbnail(element),
        )
        series.set_url_without_domain(self._required(self.series_url(element), "url"))
        return series

    def popular_series_next_page_selector(self) -> Optional[str]:
        return "li.active + li:not(.disabled), li.page-item:last-of-type:not(.disabled)"

    def latest_updates_request(self, page: int) -> httpx.Request:
        return self.popular_series_request(page)

    def latest_updates_parse(self, response: httpx.Response) -> SeriesPage:
        return self.popular_series_parse(response)

    def latest_updates_selector(self) -> str:
        return self.popular_series_selector()

    def latest_updates_from_element(self, element: Tag) -> Series:
        return self.popular_series_from_element(element)

    def latest_updates_next_page_selector(self) -> Optional[str]:
        return self.popular_series_next_page_selector()

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def fetch_search_series(self, page: int, query: str, filters: FilterList) -> SeriesPage:
        if query.startswith(PREFIX_ID_SEARCH):
            gallery_id = query[len(PREFIX_ID_SEARCH):]
            response = await self._execute(self.search_series_by_id_request(gallery_id))
            return self.search_series_by_id_parse(response, gallery_id)
        if is_gallery_id(query):
            response = await self._execute(self.search_series_by_id_request(query))
            return self.search_series_by_id_parse(response, query)
        return await super().fetch_search_series(page, query, filters)

    def search_series_by_id_request(self, gallery_id: str) -> httpx.Request:
        return self.get(f"{self.base_url}/{PREFIX_ID}/{gallery_id}/")

    def search_series_by_id_parse(self, response: httpx.Response, gallery_id: str) -> SeriesPage:
        details = self.series_details_parse(response)
        details.url = f"/{PREFIX_ID}/{gallery_id}/"
        return SeriesPage(series=[details], has_next_page=False)

    def search_series_request(self, page: int, query: str, filters: FilterList) -> httpx.Request:
        genre_filter = filters.first_of(GenreFilter)
        favorite_filter = filters.first_of(FavoriteFilter)

        if genre_filter is not None and genre_filter.state > 0:
            url = httpx.URL(f"{self.base_url}/tag/{quote(genre_filter.to_uri_part(), safe='')}/")
            return self.get(self.tag_page_uri(url, page))

        if favorite_filter is not None and favorite_filter.state:
            return self.get(f"{self.base_url}/{self.favorite_path}")

        if query.strip():
            keywords = SPACE_REGEX.sub("+", query).strip()
            url = f"{self.base_url}/search/?q={quote(keywords, safe='+,')}&sort=popular"
            if page > 1:
                url += f"&page={page}"
            return self.get(url)

        return self.popular_series_request(page)

    def tag_page_uri(self, url: httpx.URL, page: int) -> httpx.URL:
        return url.copy_add_param("page", str(page))

    def login_required(self, document: BeautifulSoup, url: str) -> bool:
        return "/login/" in url and document.select_one("input[value=Login]") is not None

    def search_series_parse(self, response: httpx.Response) -> SeriesPage:
        document = as_soup(response)
        if self.login_required(document, str(response.url)):
            raise LoginRequiredError("Log in via WebView to view favorites")

        listed = [
            _ListedSeries(
                title=self._required(self.series_title(element), "title"),
                url=self._required(self.series_url(element), "url"),
                thumbnail=self.series_thumbnail(element),
                lang=self.series_lang_of(element),
            )
            for element in document.select(self.search_series_selector())
        ]
        if self.series_lang:
            listed = [item for item in listed if item.lang == self.series_lang]

        series = []
        for item in listed:
            entry = Series(title=item.title, thumbnail_url=item.thumbnail)
            entry.set_url_without_domain(item.url)
            series.append(entry)

        has_next_page = document.select_one(self.search_series_next_page_selector()) is not None
        return SeriesPage(series=series, has_next_page=has_next_page)

    def search_series_selector(self) -> str:
        return self.popular_series_selector()

    def search_series_from_element(self, element: Tag) -> Series:
        return self.popular_series_from_element(element)

    def search_series_next_page_selector(self) -> Optional[str]:
        return self.popular_series_next_page_selector()

    # ------------------------------------------------------------------
    # Details
    # ------------------------------------------------------------------

    def series_cover(self, element: Tag) -> Optional[str]:
        return img_attr(element.select_one(".cover img"), self.base_url)

    def series_tag(self, element: Tag, tag: str) -> str:
        """Comma separated own text of the links under ul.<tag>."""
        return ", ".join(own_text(link) for link in element.select(f"ul.{tag.lower()} a"))

    def series_description(self, element: Tag) -> str:
        lines = []
        for tag in ("Parodies", "Characters", "Languages", "Categories"):
            value = self.series_tag(element, tag)
            if value:
                lines.append(f"{tag}: {value}")
        for pages in element.select(".pages"):
            if "pages:" in text(pages).lower():
                lines.append(own_text(pages))
                break
        return "\n".join(lines)

    def series_details_from_document(self, document: BeautifulSoup) -> Series:
        info = document.select_one(self.series_detail_info_selector)
        if info is None:
            raise ParseError(self.name, f"missing {self.series_detail_info_selector}")
        return Series(
            title=self._required(self.series_title(info, "h1"), "title"),
            thumbnail_url=self.series_cover(info),
            genre=self.series_tag(info, "Tags"),
            author=self.series_tag(info, "Artists"),
            description=self.series_description(info),
            status=SeriesStatus.COMPLETED,
            update_strategy=UpdateStrategy.ONLY_FETCH_ONCE,
        )

    # ------------------------------------------------------------------
    # Chapters
    # ------------------------------------------------------------------

    def chapter_list_parse(self, response: httpx.Response) -> List[Chapter]:
        document = as_soup(response)
        info = document.select_one(self.series_detail_info_selector)
        chapter = Chapter(
            name="Chapter",
            scanlator=self.series_tag(info, "Groups") if info is not None else None,
        )
        chapter.url = urlsplit(str(response.url)).path
        return [chapter]

    def chapter_list_selector(self) -> str:
        raise NotImplementedError

    def chapter_from_element(self, element: Tag) -> Chapter:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def input_id_value_of(self, document: BeautifulSoup, input_id: str) -> str:
        return attr(document.select_one(f'input[id="{input_id}"]'), "value")

    async def fetch_page_list(self, chapter: Chapter) -> List[Page]:
        if not self.parse_images:
            return await super().fetch_page_list(chapter)
        response = await self._execute(self.page_list_request(chapter))
        pages = await self.parse_pages_individually(as_soup(response))
        self.logger.info("fetched_pages_individually", chapter=chapter.url, count=len(pages))
        return pages

    def page_list_from_document(self, document: BeautifulSoup) -> List[Page]:
        """Synthesize page URLs from the first thumbnail and the page count."""
        gallery_id = self.input_id_value_of(document, self.gallery_id_selector)
        total_pages = self.input_id_value_of(document, self.total_pages_selector)
        page_url = f"{self.base_url}/{self.page_uri}/{gallery_id}"

        image_url = img_attr(document.select_one(f"{self.page_selector} img"), self.base_url)
        if not image_url:
            raise ParseError(self.name, f"missing {self.page_selector} img")
        try:
            total = int(total_pages)
        except ValueError:
            raise ParseError(self.name, f"invalid page count {total_pages!r}")

        image_url_prefix = image_url.rsplit("/", 1)[0]
        image_url_suffix = image_url.rsplit(".", 1)[-1]
        return [
            Page(
                index=index,
                image_url=f"{image_url_prefix}/{index}.{image_url_suffix}",
                url=f"{page_url}/{index}/",
            )
            for index in range(1, total + 1)
        ]

    @abstractmethod
    async def parse_pages_individually(self, document: BeautifulSoup) -> List[Page]:
        """Build the page list by visiting each page of the gallery."""
        pass

    # ------------------------------------------------------------------
    # Filters and tag cache
    # ------------------------------------------------------------------

    def tags_request(self, page: int) -> httpx.Request:
        return self.get(f"{self.base_url}/tags/popular/pag/{page}/")

    def tags_parser(self, document: BeautifulSoup) -> List[Tuple[str, str]]:
        tags = []
        for item in document.select(".list_tags .tag_item"):
            label = own_text(item.select_one("h3.list_tag"))
            href = attr(item.select_one("a"), "href").removesuffix("/")
            tags.append((label, href.rsplit("/", 1)[-1]))
        return tags

    @property
    def genres(self) -> List[Tuple[str, str]]:
        return list(self._genres)

    def get_genres(self) -> None:
        """Start a background tag load unless cached, exhausted or in flight."""
        if self._genres or self._tags_fetch_attempt >= MAX_TAGS_FETCH_ATTEMPTS:
            return
        if self._genres_task is not None and not self._genres_task.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.logger.debug("tags_fetch_skipped", reason="no_running_loop")
            return
        self._genres_task = loop.create_task(self._load_genres())

    async def wait_for_genres(self) -> List[Tuple[str, str]]:
        """Await the tag load started by get_filter_list, if any."""
        if self._genres_task is not None and not self._genres_task.cancelled():
            await self._genres_task
        return self.genres

    async def aclose(self) -> None:
        """Cancel an unfinished tag load, then close the client."""
        task, self._genres_task = self._genres_task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            self.logger.debug("tags_fetch_cancelled")
        await super().aclose()

    async def _load_genres(self) -> None:
        results = await asyncio.gather(
            *(self._fetch_tags_page(page) for page in range(1, TAG_PAGES + 1))
        )
        tags = [tag for page_tags in results for tag in page_tags]
        self._genres = sorted(tags, key=lambda tag: tag[0])
        self._tags_fetch_attempt += 1
        self.logger.info(
            "tags_loaded",
            count=len(self._genres),
            attempt=self._tags_fetch_attempt,
        )

    async def _fetch_tags_page(self, page: int) -> List[Tuple[str, str]]:
        try:
            response = await self._send(self.tags_request(page))
            return self.tags_parser(as_soup(response))
        except Exception as e:
            self.logger.warning("tags_page_fetch_failed", page=page, error=str(e))
            return []

    def get_filter_list(self) -> FilterList:
        self.get_genres()
        return FilterList(
            Header("Use search to look for title, tag, artist, group"),
            Separator(),
            GenreFilter(self._genres) if self._genres else Header("Press 'reset' to attempt to load tags"),
            Header("Note: will ignore search"),
            FavoriteFilter(),
        )
