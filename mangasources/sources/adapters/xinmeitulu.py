"""Xinmeitulu photo gallery source.

Scrapes photo sets from www.xinmeitulu.com. Every set is exposed as a
completed series with a single "Gallery" chapter.
"""

import locale
from typing import List, Optional

import httpx
from bs4 import BeautifulSoup, Tag

from mangasources.config import settings
from mangasources.core.exceptions import ParseError
from mangasources.sources.base import ParsedHttpSource
from mangasources.sources.filters import FilterList, UriPartFilter
from mangasources.sources.models import Chapter, Page, Series, SeriesPage, SeriesStatus
from mangasources.sources.utils.html import abs_url, as_soup, attr, text


PREFIX_SLUG_SEARCH = "SLUG:"

# Chinese label -> English label
TRANSLATIONS = {
    # Region
    "全部": "All",
    "中国大陆美女": "Chinese beauty",
    "泰国美女": "Thailand beauty",
    "日本美女": "Japanese beauty",
    "韩国美女": "Korean beauty",
    "台湾美女": "Taiwanese beauty",
    "欧美美女": "European & American beauty",
    # Descriptions
    "拍摄机构": "Studio",
    "相关编号": "Issue number",
    "图片数量": "Photos",
    "发行日期": "Release date",
    "出镜模特": "Model",
    "别名": "Alias",
    "生日": "Birthday",
    "身高": "Height",
    "三围": "Measurements",
    "罩杯": "Cup size",
    "杯": "cup",
    "匿名": "Unknown",
}

REGIONS = [
    (None, "全部"),
    ("zhongguodalumeinyu", "中国大陆美女"),
    ("taiguomeinyu", "泰国美女"),
    ("ribenmeinyu", "日本美女"),
    ("hanguomeinyu", "韩国美女"),
    ("taiwanmeinyu", "台湾美女"),
    ("oumeimeinyu", "欧美美女"),
]

# Labels at the start of a description field
INLINE_LABELS = ("拍摄机构", "相关编号", "图片数量", "发行日期", "出镜模特")
# Labels of model profile fields, moved to their own line
PROFILE_LABELS = ("别名", "生日", "身高", "三围", "罩杯")


class RegionFilter(UriPartFilter):
    def __init__(self, pairs):
        super().__init__("Region", pairs)


class XinmeituluAdapter(ParsedHttpSource):
    """Xinmeitulu source: listing, keyword/region search and slug lookup."""

    name = "Xinmeitulu"
    base_url = "https://www.xinmeitulu.com"
    lang = "all"
    supports_latest = False

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None, locale_name: Optional[str] = None):
        """Initialize Xinmeitulu source.

        Args:
            transport: Optional httpx transport for the client
            locale_name: Locale for labels, defaults to settings.LOCALE or the system locale
        """
        super().__init__(transport=transport)
        self.locale_name = locale_name or settings.LOCALE or (locale.getlocale()[0] or "")

    def client_options(self) -> dict:
        return {"event_hooks": {"response": [self._content_type_hook]}}

    @staticmethod
    async def _content_type_hook(response: httpx.Response) -> None:
        """Relabel any image response as JPEG; the site mislabels some formats."""
        if response.headers.get("content-type", "").startswith("image"):
            response.headers["content-type"] = "image/jpeg"

    def translate(self, label: str) -> str:
        if self.locale_name.lower().startswith("zh"):
            return label
        return TRANSLATIONS.get(label, label)

    # ------------------------------------------------------------------
    # Latest (unsupported)
    # ------------------------------------------------------------------

    def latest_updates_request(self, page: int) -> httpx.Request:
        raise NotImplementedError

    def latest_updates_selector(self) -> str:
        raise NotImplementedError

    def latest_updates_from_element(self, element: Tag) -> Series:
        raise NotImplementedError

    def latest_updates_next_page_selector(self) -> Optional[str]:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Popular
    # ------------------------------------------------------------------

    def popular_series_request(self, page: int) -> httpx.Request:
        return self.get(f"{self.base_url}/page/{page}")

    def popular_series_next_page_selector(self) -> Optional[str]:
        return ".next"

    def popular_series_selector(self) -> str:
        return ".container > .row > div:has(figure)"

    def popular_series_from_element(self, element: Tag) -> Series:
        series = Series(
            title=text(element.select_one("figcaption")),
            thumbnail_url=abs_url(self.base_url, attr(element.select_one("img"), "data-original")),
        )
        series.set_url_without_domain(abs_url(self.base_url, attr(element.select_one("figure > a"), "href")))

        categories = element.select("a[rel='tag category']")
        if categories:
            series.genre = self.translate(text(categories[-1]).removesuffix("写真"))
        return series

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search_series_from_element(self, element: Tag) -> Series:
        return self.popular_series_from_element(element)

    def search_series_next_page_selector(self) -> Optional[str]:
        return self.popular_series_next_page_selector()

    def search_series_selector(self) -> str:
        return self.popular_series_selector()

    def search_series_request(self, page: int, query: str, filters: FilterList) -> httpx.Request:
        filter_list = filters if filters else self.get_filter_list()

        path = ""
        for region in filter_list.of_type(RegionFilter):
            uri_part = region.to_uri_part()
            if uri_part is not None:
                path += f"/area/{uri_part}"

        url = httpx.URL(f"{self.base_url}{path}/page/{page}").copy_add_param("s", query)
        return self.get(url)

    async def fetch_search_series(self, page: int, query: str, filters: FilterList) -> SeriesPage:
        if query.startswith(PREFIX_SLUG_SEARCH):
            slug = query[len(PREFIX_SLUG_SEARCH):]
            response = await self._execute(self.get(f"{self.base_url}/photo/{slug}"))
            return SeriesPage(series=[self.series_details_parse(response)], has_next_page=False)
        return await super().fetch_search_series(page, query, filters)

    # ------------------------------------------------------------------
    # Details
    # ------------------------------------------------------------------

    def _canonical_url(self, document: BeautifulSoup) -> str:
        link = document.select_one("link[rel=canonical]")
        if link is None:
            raise ParseError(self.name, "missing canonical link")
        return abs_url(self.base_url, attr(link, "href"))

    def _localize_paragraph(self, paragraph: str) -> str:
        for label in INLINE_LABELS:
            paragraph = paragraph.replace(f"{label}：", f"{self.translate(label)}: ")
        for label in PROFILE_LABELS:
            paragraph = paragraph.replace(f"{label}：", f"\n{self.translate(label)}: ")
        return (
            paragraph.replace("杯", f"-{self.translate('杯')}")
            .replace("匿名", self.translate("匿名"))
            .replace("；", "")
            .strip()
        )

    def series_details_from_document(self, document: BeautifulSoup) -> Series:
        cover = document.select_one("figure img")
        if cover is None:
            raise ParseError(self.name, "missing cover image")

        series = Series(
            title=text(document.select_one(".container > h1")),
            status=SeriesStatus.COMPLETED,
            thumbnail_url=abs_url(self.base_url, attr(cover, "data-original")),
        )
        series.set_url_without_domain(self._canonical_url(document))

        lines = []
        for paragraph in document.select(".container > p"):
            value = text(paragraph)
            if "拍摄机构：" in value:
                series.author = value.replace("拍摄机构：", "").strip()
            lines.append(self._localize_paragraph(value))
        series.description = "\n".join(lines)
        return series

    # ------------------------------------------------------------------
    # Chapters and pages
    # ------------------------------------------------------------------

    def chapter_list_selector(self) -> str:
        return "html"

    def chapter_from_element(self, element: Tag) -> Chapter:
        link = element.select_one("link[rel=canonical]")
        if link is None:
            raise ParseError(self.name, "missing canonical link")
        chapter = Chapter(name="Gallery")
        chapter.set_url_without_domain(abs_url(self.base_url, attr(link, "href")))
        return chapter

    def page_list_from_document(self, document: BeautifulSoup) -> List[Page]:
        return [
            Page(index=index, image_url=abs_url(self.base_url, attr(image, "data-original")))
            for index, image in enumerate(document.select(".container > div > figure img"))
        ]

    def image_url_from_document(self, document: BeautifulSoup) -> str:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def get_filter_list(self) -> FilterList:
        return FilterList(
            RegionFilter([(self.translate(label), uri_part) for uri_part, label in REGIONS]),
        )
