# File: tests/test_extraction.py
from site_catalog.extraction.html import extract_from_html, parse_attributes
from site_catalog.extraction.models import MetadataSource
from site_catalog.extraction.opengraph import (
    extract_from_open_graph,
    parse_open_graph,
    pick_first_string,
)
from site_catalog.extraction.text import sanitize_text

BASE = "https://example.com/blog/post"

FULL_PAGE = """<!doctype html>
<html>
<head>
  <meta charset="utf-8">
  <title>
     Tom &amp; Jerry&nbsp;Blog
  </title>
  <meta property="og:title" content="OG Title">
  <meta name="twitter:title" content="Twitter Title">
  <meta content="Plain description" name="description">
  <meta property="og:description" content="OG description">
  <meta property="og:image" content="/images/cover.png">
  <meta name="twitter:image" content="https://cdn.example.com/tw.png">
  <link rel="stylesheet" href="/style.css">
  <link rel="shortcut icon" href="/static/favicon.ico">
  <link rel="apple-touch-icon" href="/apple.png">
</head>
<body><p>Hello</p></body>
</html>
"""


def test_sanitize_text():
    assert sanitize_text("  Tom &amp; Jerry  ") == "Tom & Jerry"
    assert sanitize_text("&quot;a&quot; &#39;b&#39; &lt;c&gt;") == "\"a\" 'b' <c>"
    assert sanitize_text("a&nbsp;&nbsp;b\n\t c") == "a b c"
    assert sanitize_text("   ") is None
    assert sanitize_text("&nbsp;") is None
    assert sanitize_text(None) is None
    assert sanitize_text(42) is None


def test_parse_attributes_handles_quoting_and_order():
    attrs = parse_attributes("""<meta content='x "y"' NAME=description data-x=1 />""")
    assert attrs == {"content": 'x "y"', "name": "description", "data-x": "1"}


def test_html_extraction_picks_fields_in_priority_order():
    candidate = extract_from_html(FULL_PAGE, BASE)

    assert candidate is not None
    assert candidate.source is MetadataSource.HTML
    assert candidate.url == BASE
    assert candidate.title == "Tom & Jerry Blog"
    # "description" outranks og:description even though it comes later in the list
    assert candidate.description == "Plain description"
    assert candidate.favicon_url == "https://example.com/static/favicon.ico"
    assert candidate.image_url == "https://example.com/images/cover.png"


def test_html_extraction_falls_back_to_lower_priority_keys():
    html = """
    <head>
      <meta property="twitter:description" content="From twitter">
      <meta name="twitter:image" content="//cdn.example.com/t.png">
    </head>
    """
    candidate = extract_from_html(html, BASE)
    assert candidate.description == "From twitter"
    assert candidate.image_url == "https://cdn.example.com/t.png"
    assert candidate.title is None
    assert candidate.favicon_url is None


def test_html_extraction_skips_unresolvable_icons():
    html = """
    <link rel="icon" href="data:image/png;base64,AAAA">
    <link rel="icon" href="/real.ico">
    """
    candidate = extract_from_html(html, BASE)
    assert candidate.favicon_url == "https://example.com/real.ico"


def test_html_extraction_with_nothing_usable_yields_no_candidate():
    assert extract_from_html("<html><body>No metadata here</body></html>", BASE) is None
    assert extract_from_html("<title>   </title><meta name='description' content=' '>", BASE) is None
    assert extract_from_html("", BASE) is None


def test_parse_open_graph_shapes():
    result = parse_open_graph(FULL_PAGE, BASE)

    assert result["request_url"] == BASE
    assert result["og_title"] == "OG Title"
    assert result["twitter_title"] == "Twitter Title"
    assert result["description"] == "Plain description"
    assert result["og_description"] == "OG description"
    assert result["og_image"] == [{"url": "/images/cover.png"}]
    assert result["twitter_image"] == [{"url": "https://cdn.example.com/tw.png"}]
    assert result["favicon"] == ["/static/favicon.ico", "/apple.png"]
    assert "Jerry" in result["title"]


def test_open_graph_extraction_prefers_og_fields():
    candidate = extract_from_open_graph(parse_open_graph(FULL_PAGE, BASE), BASE)

    assert candidate.source is MetadataSource.OPEN_GRAPH
    assert candidate.title == "OG Title"
    assert candidate.description == "OG description"
    assert candidate.favicon_url == "https://example.com/static/favicon.ico"
    assert candidate.image_url == "https://example.com/images/cover.png"


def test_open_graph_title_fallback_order():
    result = {"title": "  ", "og_site_name": "Example Site", "dc_description": "DC"}
    candidate = extract_from_open_graph(result, BASE)
    assert candidate.title == "Example Site"
    assert candidate.description == "DC"


def test_open_graph_accepts_mixed_value_shapes():
    result = {
        "og_title": ["", {"url": "  "}, ["Nested &amp; title"]],
        "favicon": [{"url": "javascript:void(0)"}, {"url": "/icon.svg"}],
        "og_image": {"url": "img/a.jpg"},
        "twitter_image": "https://cdn.example.com/b.jpg",
    }
    candidate = extract_from_open_graph(result, BASE)
    assert candidate.title == "Nested & title"
    assert candidate.favicon_url == "https://example.com/icon.svg"
    assert candidate.image_url == "https://example.com/blog/img/a.jpg"


def test_open_graph_image_falls_back_to_twitter():
    result = {"og_image": [{"url": "data:image/gif;base64,R0lG"}], "twitter_image": [{"url": "/t.png"}]}
    candidate = extract_from_open_graph(result, BASE)
    assert candidate.image_url == "https://example.com/t.png"


def test_open_graph_with_all_fields_empty_yields_no_candidate():
    assert extract_from_open_graph({}, BASE) is None
    assert extract_from_open_graph({"og_title": " ", "favicon": [], "og_image": [{"url": ""}]}, BASE) is None
    assert extract_from_open_graph(parse_open_graph("<html><body>hi</body></html>", BASE), BASE) is None


def test_pick_first_string_skips_non_text():
    assert pick_first_string([None, 3, {"href": "x"}, "ok"]) == "ok"
    assert pick_first_string([]) is None
