"""End-to-end tests for the capture orchestration."""

import asyncio

import pytest
from bs4 import BeautifulSoup

from page_capture.capture.capture import AssetLocalizer, CaptureError, PageCapture, failed_outcomes
from page_capture.capture.downloader import AssetDownloader
from page_capture.capture.models import SkipReason
from page_capture.utils.constants import EDITOR_TOAST_ID
from tests.fakes import FakeRenderer, FakeServer


PAGE = """
<html>
<head>
    <link rel="stylesheet" href="/static/site.css?v=2">
    <link rel="icon" href="https://ex.com/favicon">
    <script src="https://cdn.other.com/lib.js"></script>
    <script src="app.js"></script>
</head>
<body>
    <img src="img.png">
    <img src="/avatar">
    <img src="img.png">
    <img src="data:image/gif;base64,R0lGODlhAQABAAAAACw=">
    <a href="mailto:a@b.com">mail</a>
    <img src="http://[::1/broken.png">
    <video src="/media/intro"></video>
    <div id="editor-toast-notification">Editing enabled</div>
</body>
</html>
"""


def localize(tmp_path, html=PAGE, page_url="https://ex.com/blog/post", server=None, tokens=None):
    server = server or FakeServer()
    kwargs = {"token_factory": tokens} if tokens else {}
    localizer = AssetLocalizer(
        page_url,
        str(tmp_path),
        AssetDownloader(fetch=server.fetch),
        **kwargs
    )
    return asyncio.run(localizer.capture_document(html)), server


def srcs(html, tag, attr):
    soup = BeautifulSoup(html, "lxml")
    return [element[attr] for element in soup.find_all(tag) if element.has_attr(attr)]


def test_document_is_rewritten_to_local_paths(tmp_path):
    result, _ = localize(tmp_path)

    assert srcs(result.html, "img", "src")[:3] == ["img.png", "avatar.png", "img.png"]
    assert srcs(result.html, "script", "src") == ["https://cdn.other.com/lib.js", "app.js"]
    assert srcs(result.html, "link", "href") == ["static/site.css", "favicon.css"]
    assert srcs(result.html, "video", "src") == ["media/intro"]


def test_skipped_references_are_untouched(tmp_path):
    result, _ = localize(tmp_path)

    images = srcs(result.html, "img", "src")
    assert images[3].startswith("data:image/gif")
    assert images[4] == "http://[::1/broken.png"
    assert srcs(result.html, "a", "href") == ["mailto:a@b.com"]

    reasons = [asset.skip_reason for asset in result.assets if asset.skipped]
    assert sorted(reason.value for reason in reasons) == sorted([
        SkipReason.OUT_OF_SCOPE.value,
        SkipReason.NOT_FETCHABLE.value,
        SkipReason.UNPARSEABLE.value,
    ])


def test_out_of_scope_assets_are_not_downloaded(tmp_path):
    result, server = localize(tmp_path)

    assert "https://cdn.other.com/lib.js" not in server.requested
    assert all("cdn.other.com" not in outcome.url for outcome in result.outcomes)


def test_assets_are_written_where_the_document_points(tmp_path):
    result, _ = localize(tmp_path)

    for outcome in result.outcomes:
        assert outcome.success
        assert (tmp_path / outcome.local_path).is_file()

    assert (tmp_path / "static" / "site.css").read_bytes() == b"content of https://ex.com/static/site.css?v=2"
    assert (tmp_path / "app.js").exists()


def test_every_reference_schedules_its_own_download(tmp_path):
    result, server = localize(tmp_path)

    assert server.requested.count("https://ex.com/blog/img.png") == 2
    assert result.queued == 7
    assert result.succeeded == 7
    assert result.skipped == 3


def test_partial_failures_keep_every_rewrite(tmp_path):
    server = FakeServer(failing=["https://ex.com/avatar", "https://ex.com/blog/app.js"])
    result, _ = localize(tmp_path, server=server)

    assert result.queued == 7
    assert result.failed == 2
    assert {o.url for o in failed_outcomes(result)} == {
        "https://ex.com/avatar",
        "https://ex.com/blog/app.js",
    }
    # Broken local references are kept rather than reverted
    assert "avatar.png" in srcs(result.html, "img", "src")
    assert "app.js" in srcs(result.html, "script", "src")


def test_editor_markers_are_removed(tmp_path):
    result, _ = localize(tmp_path)
    assert EDITOR_TOAST_ID not in result.html


def test_root_reference_uses_injected_tokens(tmp_path, tokens):
    html = '<img src="/"><img src="https://ex.com/">'
    result, _ = localize(tmp_path, html=html, page_url="https://ex.com/index.html", tokens=tokens)

    assert srcs(result.html, "img", "src") == [
        "assets/resource_tok1.png",
        "assets/resource_tok1.png",
    ]
    assert (tmp_path / "assets" / "resource_tok1.png").exists()


def test_cross_domain_page_assets_keep_original_urls(tmp_path):
    html = '<script src="https://cdn.other.com/lib.js"></script>'
    result, server = localize(tmp_path, html=html, page_url="https://ex.com/index.html")

    assert srcs(result.html, "script", "src") == ["https://cdn.other.com/lib.js"]
    assert result.outcomes == []
    assert server.requested == []


def test_document_without_assets(tmp_path):
    result, server = localize(tmp_path, html="<p>nothing here</p>")
    assert result.outcomes == []
    assert server.requested == []
    assert "nothing here" in result.html


def test_page_capture_writes_index(tmp_path):
    server = FakeServer()
    renderer = FakeRenderer(PAGE, final_url="https://ex.com/blog/post")
    capture = PageCapture(
        "https://ex.com/start",
        "blog",
        output_root=str(tmp_path),
        renderer=renderer,
        fetch=server.fetch
    )

    result = asyncio.run(capture.run())

    index = tmp_path / "blog" / "index.html"
    assert result.index_path == str(index)
    assert index.read_text(encoding="utf-8") == result.html
    assert renderer.started and renderer.stopped
    # Assets resolve against the final navigated URL
    assert "https://ex.com/blog/img.png" in server.requested


def test_page_capture_runs_edit_hook(tmp_path):
    calls = []

    async def hook(page):
        calls.append(page)

    renderer = FakeRenderer("<p>edited</p>")
    capture = PageCapture(
        "https://ex.com/",
        "site",
        output_root=str(tmp_path),
        renderer=renderer,
        before_capture=hook,
        fetch=FakeServer().fetch
    )

    asyncio.run(capture.run())

    assert calls == [None]
    assert "edited" in (tmp_path / "site" / "index.html").read_text(encoding="utf-8")


def test_page_load_failure_is_fatal(tmp_path):
    renderer = FakeRenderer(None)
    capture = PageCapture("https://ex.com/", "site", output_root=str(tmp_path), renderer=renderer)

    with pytest.raises(CaptureError):
        asyncio.run(capture.run())

    assert renderer.stopped
    assert not (tmp_path / "site" / "index.html").exists()


@pytest.mark.parametrize("url, name", [
    ("", "site"),
    ("https://ex.com/", ""),
    ("   ", "site"),
    ("https://ex.com/", None),
])
def test_missing_inputs_are_fatal(tmp_path, url, name):
    with pytest.raises(CaptureError):
        PageCapture(url, name, output_root=str(tmp_path), renderer=FakeRenderer("<p></p>"))


def test_page_is_not_overwritten_by_self_referencing_asset(tmp_path):
    html = '<html><head><link rel="icon" href="index.html"></head><body><p>page</p></body></html>'
    server = FakeServer({"https://ex.com/docs/index.html": b"served copy"})
    renderer = FakeRenderer(html, final_url="https://ex.com/docs/index.html")
    capture = PageCapture(
        "https://ex.com/docs/index.html",
        "docs",
        output_root=str(tmp_path),
        renderer=renderer,
        fetch=server.fetch
    )

    result = asyncio.run(capture.run())

    index = tmp_path / "docs" / "index.html"
    assert index.read_text(encoding="utf-8") == result.html
    assert "<p>page</p>" in result.html
    [outcome] = result.outcomes
    assert outcome.local_path.startswith("assets/resource_")
    assert outcome.local_path.endswith(".html")
    assert srcs(result.html, "link", "href") == [outcome.local_path]


@pytest.mark.parametrize("name", ["../x", "a/b", "/abs", "..", "."])
def test_name_must_stay_inside_output_root(tmp_path, name):
    with pytest.raises(CaptureError):
        PageCapture("https://ex.com/", name, output_root=str(tmp_path), renderer=FakeRenderer("<p></p>"))
