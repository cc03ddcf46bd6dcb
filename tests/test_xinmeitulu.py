"""Tests for the Xinmeitulu photo gallery source."""

import httpx
import pytest

from mangasources.core.exceptions import HttpError, ParseError
from mangasources.sources.adapters import XinmeituluAdapter
from mangasources.sources.adapters.xinmeitulu import RegionFilter
from mangasources.sources.filters import FilterList
from mangasources.sources.models import Chapter, Page, Series, SeriesStatus


BASE = "https://www.xinmeitulu.com"

LISTING_HTML = """
<html><body>
<div class="container">
  <div class="row">
    <div class="col-6">
      <figure>
        <a href="https://www.xinmeitulu.com/photo/set-one"><img data-original="/uploads/set-one.jpg" src="/blank.gif"></a>
        <figcaption>Set  One</figcaption>
      </figure>
      <div class="meta">
        <a rel="tag category" href="/area/all">全部</a>
        <a rel="tag category" href="/area/ribenmeinyu">日本美女写真</a>
      </div>
    </div>
    <div class="col-6">
      <figure>
        <a href="/photo/set-two"><img data-original="https://img.xinmeitulu.com/set-two.jpg"></a>
        <figcaption>Set Two</figcaption>
      </figure>
    </div>
    <div class="col-12"><p>advert</p></div>
  </div>
</div>
<a class="next" href="/page/2">Next</a>
</body></html>
"""

LAST_PAGE_HTML = """
<html><body><div class="container"><div class="row">
  <div class="col-6"><figure><a href="/photo/set-nine"><img data-original="/nine.jpg"></a><figcaption>Set Nine</figcaption></figure></div>
</div></div></body></html>
"""

DETAILS_HTML = """
<html>
<head><link rel="canonical" href="https://www.xinmeitulu.com/photo/set-one"></head>
<body>
<div class="container">
  <h1>Set One</h1>
  <p>拍摄机构：XIUREN秀人网</p>
  <p>出镜模特：Alice；别名：A；身高：168；罩杯：D杯</p>
  <div>
    <figure><img data-original="https://img.xinmeitulu.com/set-one/1.jpg"></figure>
    <figure><img data-original="/uploads/set-one/2.jpg"></figure>
  </div>
</div>
</body>
</html>
"""


@pytest.fixture
def make_source(make_transport):
    def _make(routes, locale_name="en_US"):
        transport = make_transport(routes)
        return XinmeituluAdapter(transport=transport, locale_name=locale_name), transport

    return _make


class TestRequests:
    def test_popular_request(self):
        source = XinmeituluAdapter(locale_name="en_US")
        assert str(source.popular_series_request(3).url) == f"{BASE}/page/3"

    def test_search_without_filters_uses_defaults(self):
        source = XinmeituluAdapter(locale_name="en_US")
        request = source.search_series_request(2, "cosplay", FilterList())
        assert str(request.url) == f"{BASE}/page/2?s=cosplay"

    def test_search_with_region(self):
        source = XinmeituluAdapter(locale_name="en_US")
        filters = source.get_filter_list()
        filters.first_of(RegionFilter).state = 3

        request = source.search_series_request(1, "", filters)

        assert str(request.url) == f"{BASE}/area/ribenmeinyu/page/1?s="

    def test_latest_is_unsupported(self):
        source = XinmeituluAdapter(locale_name="en_US")
        assert source.supports_latest is False
        with pytest.raises(NotImplementedError):
            source.latest_updates_request(1)


class TestLocalization:
    def test_region_labels_translated(self):
        source = XinmeituluAdapter(locale_name="en_US")
        region = source.get_filter_list().first_of(RegionFilter)
        assert region.name == "Region"
        assert region.values[:4] == ["All", "Chinese beauty", "Thailand beauty", "Japanese beauty"]
        assert region.to_uri_part() is None

    def test_chinese_locale_keeps_labels(self):
        source = XinmeituluAdapter(locale_name="zh_CN")
        region = source.get_filter_list().first_of(RegionFilter)
        assert region.values[0] == "全部"
        assert source.translate("日本美女") == "日本美女"

    def test_unknown_label_passes_through(self):
        source = XinmeituluAdapter(locale_name="en_US")
        assert source.translate("其他") == "其他"


class TestListings:
    async def test_popular_listing(self, make_source):
        source, transport = make_source({f"{BASE}/page/1": LISTING_HTML})

        result = await source.fetch_popular_series(1)

        assert transport.urls() == [f"{BASE}/page/1"]
        assert [s.title for s in result.series] == ["Set One", "Set Two"]
        assert [s.url for s in result.series] == ["/photo/set-one", "/photo/set-two"]
        assert result.series[0].thumbnail_url == f"{BASE}/uploads/set-one.jpg"
        assert result.series[1].thumbnail_url == "https://img.xinmeitulu.com/set-two.jpg"
        assert result.series[0].genre == "Japanese beauty"
        assert result.series[1].genre is None
        assert result.has_next_page is True
        await source.aclose()

    async def test_genre_kept_in_chinese(self, make_source):
        source, _ = make_source({f"{BASE}/page/1": LISTING_HTML}, locale_name="zh_TW")

        result = await source.fetch_popular_series(1)

        assert result.series[0].genre == "日本美女"
        await source.aclose()

    async def test_last_page(self, make_source):
        source, _ = make_source({f"{BASE}/page/5": LAST_PAGE_HTML})

        result = await source.fetch_popular_series(5)

        assert len(result.series) == 1
        assert result.has_next_page is False
        await source.aclose()

    async def test_search_listing(self, make_source):
        source, _ = make_source({f"{BASE}/page/1?s=alice": LISTING_HTML})

        result = await source.fetch_search_series(1, "alice", FilterList())

        assert len(result.series) == 2
        await source.aclose()

    async def test_slug_search(self, make_source):
        source, transport = make_source({f"{BASE}/photo/set-one": DETAILS_HTML})

        result = await source.fetch_search_series(1, "SLUG:set-one", FilterList())

        assert transport.urls() == [f"{BASE}/photo/set-one"]
        assert result.has_next_page is False
        assert result.series[0].url == "/photo/set-one"
        assert result.series[0].title == "Set One"
        await source.aclose()

    async def test_error_status_raises(self, make_source):
        source, _ = make_source({})

        with pytest.raises(HttpError) as exc_info:
            await source.fetch_popular_series(1)

        assert exc_info.value.status_code == 404
        await source.aclose()


class TestDetails:
    async def test_series_details(self, make_source):
        source, _ = make_source({f"{BASE}/photo/set-one": DETAILS_HTML})

        details = await source.fetch_series_details(Series(url="/photo/set-one"))

        assert details.title == "Set One"
        assert details.url == "/photo/set-one"
        assert details.author == "XIUREN秀人网"
        assert details.status == SeriesStatus.COMPLETED
        assert details.thumbnail_url == "https://img.xinmeitulu.com/set-one/1.jpg"
        assert details.description == (
            "Studio: XIUREN秀人网\n"
            "Model: Alice\n"
            "Alias: A\n"
            "Height: 168\n"
            "Cup size: D-cup"
        )
        await source.aclose()

    async def test_details_without_cover(self, make_source):
        html = '<html><head><link rel="canonical" href="/photo/x"></head><body><h1>x</h1></body></html>'
        source, _ = make_source({f"{BASE}/photo/x": html})

        with pytest.raises(ParseError):
            await source.fetch_series_details(Series(url="/photo/x"))
        await source.aclose()

    async def test_single_gallery_chapter(self, make_source):
        source, _ = make_source({f"{BASE}/photo/set-one": DETAILS_HTML})

        chapters = await source.fetch_chapter_list(Series(url="/photo/set-one"))

        assert len(chapters) == 1
        assert chapters[0].name == "Gallery"
        assert chapters[0].url == "/photo/set-one"
        await source.aclose()

    async def test_page_list(self, make_source):
        source, _ = make_source({f"{BASE}/photo/set-one": DETAILS_HTML})

        pages = await source.fetch_page_list(Chapter(url="/photo/set-one"))

        assert [p.index for p in pages] == [0, 1]
        assert pages[0].image_url == "https://img.xinmeitulu.com/set-one/1.jpg"
        assert pages[1].image_url == f"{BASE}/uploads/set-one/2.jpg"
        await source.aclose()

    async def test_image_content_type_relabelled(self, make_source):
        image_url = "https://img.xinmeitulu.com/set-one/1.jpg"
        routes = {
            image_url: httpx.Response(200, content=b"RIFF....WEBP", headers={"content-type": "image/webp"}),
        }
        source, _ = make_source(routes)

        response = await source.fetch_image(Page(index=0, image_url=image_url))

        assert response.headers["content-type"] == "image/jpeg"
        assert response.content == b"RIFF....WEBP"
        await source.aclose()

    async def test_html_content_type_untouched(self, make_source):
        source, _ = make_source({f"{BASE}/page/1": LISTING_HTML})

        response = await source.fetch_image(Page(index=0, image_url=f"{BASE}/page/1"))

        assert response.headers["content-type"].startswith("text/html")
        await source.aclose()
