import json
from pathlib import Path

import pytest
import requests
from bs4 import BeautifulSoup

from blogsite.build import BuildContext, build_listing, build_post, build_site
from blogsite.config import SiteConfig
from blogsite.errors import NetworkError
from blogsite.gateway import ContentGateway
from blogsite.pagination import collect_listing
from tests.fakes import API, FakeCMS, make_doc, make_docs, paragraph, section


def _soup(path: Path) -> BeautifulSoup:
    return BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")


def test_listing_with_five_posts_and_no_cursor(build_ctx: BuildContext, gateway: ContentGateway):
    state = collect_listing(gateway)
    build_listing(build_ctx, state)

    soup = _soup(build_ctx.out_root / "index.html")
    links = soup.select("a.post-summary")
    assert len(links) == 5
    assert links[0]["href"] == "post/post-1/"
    assert links[0].h1.get_text() == "Post 1"
    assert links[0].time.get_text() == "01 mar 2021"
    assert soup.select("button.load-more") == []
    assert not (build_ctx.out_root / "pages").exists()
    assert soup.title.get_text() == "Home | Space Traveling"


def test_listing_writes_load_more_payloads(tmp_path: Path):
    config = SiteConfig(api_endpoint=API, page_size=2)
    ctx = BuildContext(config=config, out_root=tmp_path / "public")
    gateway = ContentGateway(API, session=FakeCMS(make_docs(5)))

    state = collect_listing(gateway, page_size=2)
    build_listing(ctx, state)

    soup = _soup(ctx.out_root / "index.html")
    assert len(soup.select("a.post-summary")) == 2
    button = soup.select_one("button.load-more")
    assert button.get_text() == "Carregar mais posts"
    assert button["data-next-page"] == "pages/2.json"
    assert soup.select_one("script[src]")["src"] == "assets/load-more.js"

    page2 = json.loads((ctx.out_root / "pages" / "2.json").read_text(encoding="utf-8"))
    page3 = json.loads((ctx.out_root / "pages" / "3.json").read_text(encoding="utf-8"))
    assert [post["uid"] for post in page2["results"]] == ["post-3", "post-4"]
    assert page2["next_page"] == "3.json"
    assert page2["results"][0]["href"] == "post/post-3/"
    assert [post["uid"] for post in page3["results"]] == ["post-5"]
    assert page3["next_page"] is None
    assert "error" not in page3
    assert (ctx.out_root / "assets" / "load-more.js").exists()


def test_failed_load_more_is_reported_in_last_payload(tmp_path: Path):
    cms = FakeCMS(make_docs(7))
    cms.failures[3] = requests.Timeout("slow")
    ctx = BuildContext(config=SiteConfig(api_endpoint=API), out_root=tmp_path / "public")
    gateway = ContentGateway(API, session=cms)

    state = collect_listing(gateway, page_size=2)
    build_listing(ctx, state)

    page2 = json.loads((ctx.out_root / "pages" / "2.json").read_text(encoding="utf-8"))
    assert page2["next_page"] is None
    assert page2["error"]["kind"] == "network-error"


def test_failed_second_page_is_shown_on_listing(tmp_path: Path):
    cms = FakeCMS(make_docs(5))
    cms.failures[2] = requests.ConnectionError("offline")
    ctx = BuildContext(config=SiteConfig(api_endpoint=API), out_root=tmp_path / "public")
    gateway = ContentGateway(API, session=cms)

    build_listing(ctx, collect_listing(gateway, page_size=2))

    soup = _soup(ctx.out_root / "index.html")
    status = soup.select_one("[data-load-status]")
    assert status["data-kind"] == "network-error"
    assert not status.has_attr("hidden")
    assert soup.select("button.load-more") == []


def test_post_page(build_ctx: BuildContext):
    body_words = " ".join(["palavra"] * 250)
    cms = FakeCMS(
        make_docs(2)
        + [
            make_doc(
                "post-3",
                "2021-03-03T12:00:00+0000",
                last="2021-03-05T15:49:00+0000",
                title="Criando um app CRA do zero",
                content=[
                    section("Proin et varius", body_words),
                    {"heading": None, "body": [paragraph("<b>escaped</b>")]},
                ],
            )
        ]
        + [make_doc("post-4", "2021-03-04T12:00:00+0000")]
    )
    gateway = ContentGateway(API, session=cms)

    result = build_post(build_ctx, gateway, "post-3")

    assert result.status == "ok"
    assert result.reading_minutes == 2
    page = build_ctx.out_root / "post" / "post-3" / "index.html"
    assert page in result.paths
    soup = _soup(page)
    assert soup.h1.get_text() == "Criando um app CRA do zero"
    assert soup.select_one(".reading-time").get_text() == "2 min"
    assert soup.select_one(".post-edited").get_text() == "* editado em 05 mar 2021, às 15:49"
    assert soup.select_one(".banner img")["src"] == "https://images.test/post-3.png"
    assert [h.get_text() for h in soup.select(".post-section h2")] == ["Proin et varius"]
    assert "<b>escaped</b>" in soup.select(".post-section")[1].get_text()
    assert soup.select_one("a.previous")["href"] == "../post-2/"
    assert soup.select_one("a.next")["href"] == "../post-4/"
    assert soup.select_one("link[rel=stylesheet]")["href"] == "../../assets/common.css"
    assert soup.select_one("a.logo")["href"] == "../../"


def test_unknown_post_renders_not_found(build_ctx: BuildContext, gateway: ContentGateway):
    result = build_post(build_ctx, gateway, "does-not-exist")

    assert result.status == "not_found"
    assert not (build_ctx.out_root / "post" / "does-not-exist").exists()
    soup = _soup(build_ctx.out_root / "404.html")
    assert soup.select_one("[data-not-found]")["data-slug"] == "does-not-exist"
    assert soup.h1.get_text() == "Post não encontrado"


def test_neighbor_failure_still_renders_post(build_ctx: BuildContext, cms: FakeCMS, gateway: ContentGateway):
    cms.neighbor_failure = requests.ConnectionError("offline")

    result = build_post(build_ctx, gateway, "post-2")

    assert result.status == "ok"
    soup = _soup(build_ctx.out_root / "post" / "post-2" / "index.html")
    assert soup.select(".post-navigation") == []


def test_preview_mode_shows_exit_link(tmp_path: Path, gateway: ContentGateway):
    config = SiteConfig(api_endpoint=API, preview_ref="preview-ref")
    ctx = BuildContext(config=config, out_root=tmp_path / "public")

    build_post(ctx, gateway, "post-1")

    soup = _soup(ctx.out_root / "post" / "post-1" / "index.html")
    assert soup.select_one("[data-preview-exit]").get_text() == "Sair do modo Preview"


def test_build_site(build_ctx: BuildContext, gateway: ContentGateway):
    report = build_site(build_ctx, gateway)

    assert report.complete
    assert [result.slug for result in report.posts] == [f"post-{i}" for i in range(1, 6)]
    for index in range(1, 6):
        assert (build_ctx.out_root / "post" / f"post-{index}" / "index.html").exists()
    assert (build_ctx.out_root / "404.html").exists()
    assert (build_ctx.out_root / "assets" / "common.css").exists()


def test_build_site_records_failed_posts(build_ctx: BuildContext):
    class _BrokenPostCMS(FakeCMS):
        def search(self, query):
            if 'my.posts.uid, "post-2"' in query.get("q", ""):
                raise requests.ConnectionError("offline")
            return super().search(query)

    gateway = ContentGateway(API, session=_BrokenPostCMS(make_docs(3)))

    report = build_site(build_ctx, gateway)

    assert report.failed == ["post-2"]
    assert not report.complete
    assert (build_ctx.out_root / "post" / "post-3" / "index.html").exists()


def test_build_site_fails_when_first_page_fails(build_ctx: BuildContext, cms: FakeCMS, gateway: ContentGateway):
    cms.failures[1] = requests.ConnectionError("offline")

    with pytest.raises(NetworkError):
        build_site(build_ctx, gateway)


def test_build_label_is_appended(tmp_path: Path, gateway: ContentGateway, site_config: SiteConfig):
    ctx = BuildContext(config=site_config, out_root=tmp_path / "public", build_label="ci-42")

    build_site(ctx, gateway)

    assert "<!-- blogsite build: ci-42 -->" in (ctx.out_root / "index.html").read_text(encoding="utf-8")


def test_page_limit_marks_last_payload_as_truncated(tmp_path: Path):
    ctx = BuildContext(config=SiteConfig(api_endpoint=API, page_size=2), out_root=tmp_path / "public")
    gateway = ContentGateway(API, session=FakeCMS(make_docs(9)))

    report = build_site(ctx, gateway, max_pages=2)

    page2 = json.loads((ctx.out_root / "pages" / "2.json").read_text(encoding="utf-8"))
    assert page2["next_page"] is None
    assert page2["truncated"]["kind"] == "truncated"
    assert "error" not in page2
    assert report.truncated
    assert not report.complete
    assert [result.slug for result in report.posts] == ["post-1", "post-2", "post-3", "post-4"]


def test_page_limit_on_first_page_is_shown_on_listing(tmp_path: Path):
    ctx = BuildContext(config=SiteConfig(api_endpoint=API, page_size=2), out_root=tmp_path / "public")
    gateway = ContentGateway(API, session=FakeCMS(make_docs(5)))

    build_site(ctx, gateway, max_pages=1)

    soup = _soup(ctx.out_root / "index.html")
    status = soup.select_one("[data-load-status]")
    assert status["data-kind"] == "truncated"
    assert not status.has_attr("hidden")
    assert soup.select("button.load-more") == []
