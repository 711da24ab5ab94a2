"""Tests for asset reference discovery."""

from page_capture.capture.extractor import AssetExtractor, parse_document
from page_capture.capture.models import AssetReference, TagKind


PAGE = """
<html>
<head>
    <link rel="stylesheet" href="/css/site.css">
    <link rel="icon" href="/favicon.ico">
    <link rel="shortcut icon" href="/favicon-old.ico">
    <link rel="preconnect" href="https://fonts.example.com">
    <link rel="stylesheet icon" href="/both.css">
    <script src="/js/app.js"></script>
    <script>console.log("inline");</script>
</head>
<body>
    <img src="a.png">
    <img data-src="lazy.png">
    <img src="b.png">
    <video src="/media/clip.mp4" poster="poster.jpg">
        <source src="/media/clip.webm" type="video/webm">
    </video>
    <audio src="/media/sound.mp3"></audio>
    <a href="/about">About</a>
</body>
</html>
"""


def extract(html=PAGE):
    return AssetExtractor().extract(parse_document(html))


def test_groups_follow_fixed_order():
    references = extract()
    assert [(r.kind, r.raw) for r in references] == [
        (TagKind.IMAGE, "a.png"),
        (TagKind.IMAGE, "b.png"),
        (TagKind.SCRIPT, "/js/app.js"),
        (TagKind.STYLESHEET, "/css/site.css"),
        (TagKind.STYLESHEET, "/both.css"),
        (TagKind.ICON, "/favicon.ico"),
        (TagKind.ICON, "/favicon-old.ico"),
        (TagKind.MEDIA, "/media/clip.webm"),
        (TagKind.MEDIA, "/media/clip.mp4"),
        (TagKind.MEDIA, "/media/sound.mp3"),
    ]


def test_reference_points_at_element_attribute():
    reference = extract()[0]
    assert reference.element.name == "img"
    assert reference.attribute == "src"
    assert reference.element[reference.attribute] == reference.raw


def test_identity_is_element_not_url():
    references = extract('<img src="same.png"><img src="same.png">')
    assert len(references) == 2
    assert references[0] != references[1]
    assert len(set(references)) == 2


def test_equal_references_share_element_and_attribute():
    soup = parse_document('<img src="x.png">')
    img = soup.find("img")
    first = AssetReference(TagKind.IMAGE, img, "src", "x.png")
    second = AssetReference(TagKind.IMAGE, img, "src", "x.png")
    assert first == second
    assert hash(first) == hash(second)


def test_empty_document_has_no_references():
    assert extract("<html><body><p>hi</p></body></html>") == []
