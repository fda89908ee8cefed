"""Tests for the rich-text sanitizer and the SanitizerEngine wrapper."""

from unittest.mock import patch

import pytest
from bs4 import BeautifulSoup

from aulaguard.engines.sanitizer_engine import (
    DEFAULT_RULES,
    SanitizationRules,
    SanitizerEngine,
    sanitize_html,
)


PNG_DATA_URI = "data:image/png;base64,iVBORw0KGgo="
JPEG_DATA_URI = "data:image/jpeg;base64,/9j/4AAQSkZJRgABAQ=="


# ---------------------------------------------------------------------------
# Reference scenarios
# ---------------------------------------------------------------------------

def test_script_removed_with_its_content():
    assert sanitize_html("<p>Hello <script>alert(1)</script>world</p>") == "<p>Hello world</p>"


def test_onerror_stripped_src_kept():
    assert sanitize_html('<img src="x.png" onerror="alert(1)">') == '<img src="x.png">'


def test_javascript_href_removed_link_text_kept():
    assert sanitize_html('<a href="javascript:alert(1)">click</a>') == "<a>click</a>"


def test_inline_png_survives_unchanged():
    html = f'<img src="{PNG_DATA_URI}">'
    assert sanitize_html(html) == html


def test_iframe_with_html_data_uri_loses_src_but_stays():
    out = sanitize_html('<iframe src="data:text/html,<script>alert(1)</script>">')
    assert out == "<iframe></iframe>"


def test_empty_string():
    assert sanitize_html("") == ""


def test_none_is_treated_as_empty():
    assert sanitize_html(None) == ""


# ---------------------------------------------------------------------------
# Script elements
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("html", [
    "<script>alert(1)</script>",
    "<SCRIPT type='text/javascript'>alert(1)</SCRIPT><p>after</p>",
    '<div><script>a()</script><p><script src="evil.js"></script>ok</p></div><script>b()</script>',
    "<table><tr><td><script>alert(1)</script></td></tr></table>",
    "<svg><script>alert(1)</script></svg>",
    "<noscript><script>alert(1)</script></noscript>",
])
def test_no_script_element_survives(html):
    assert "<script" not in sanitize_html(html).lower()


def test_text_around_multiple_scripts_is_kept():
    out = sanitize_html("<div>a<script>x()</script>b<script>y()</script>c</div>")
    assert out == "<div>abc</div>"


def test_script_markup_inside_attribute_value_is_escaped():
    out = sanitize_html('<img alt="<script>alert(1)</script>" src="a.png">')
    assert "<script" not in out
    assert 'src="a.png"' in out


def test_escaped_script_text_stays_text():
    html = "&lt;script&gt;alert(1)&lt;/script&gt;"
    assert sanitize_html(html) == html


# ---------------------------------------------------------------------------
# Event handler attributes
# ---------------------------------------------------------------------------

def test_event_handlers_removed_regardless_of_case():
    out = sanitize_html('<div ONCLICK="x()" onMouseOver="y()" class="box">t</div>')
    assert out == '<div class="box">t</div>'


def test_unlisted_event_names_are_removed_too():
    out = sanitize_html('<body onpageshow="a()"><p onpointerrawupdate="b()">t</p></body>')
    assert out == "<p>t</p>"


def test_on_prefix_is_matched_on_name_only():
    out = sanitize_html('<p title="online" data-note="onclick">t</p>')
    assert out == '<p title="online" data-note="onclick">t</p>'


def test_nested_elements_are_all_inspected():
    out = sanitize_html('<ul><li><span><b onclick="x()">deep</b></span></li></ul>')
    assert out == "<ul><li><span><b>deep</b></span></li></ul>"


# ---------------------------------------------------------------------------
# javascript: values
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("value", [
    "javascript:alert(1)",
    "  JavaScript:alert(1)",
    "JAVASCRIPT:void(0)  ",
    "\tjavascript:alert(1)\n",
    "&#106;avascript:alert(1)",
    "&#x6A;avascript:alert(1)",
])
def test_javascript_scheme_removed(value):
    assert sanitize_html(f'<a href="{value}">x</a>') == "<a>x</a>"


def test_javascript_scheme_removed_on_any_attribute():
    out = sanitize_html(
        '<form action="javascript:send()"><button formaction="javascript:x()">go</button></form>'
        '<div title="javascript:void(0)">t</div>'
    )
    assert "javascript" not in out.lower()
    assert "<button>go</button>" in out
    assert "<div>t</div>" in out


def test_regular_links_are_kept():
    html = '<a href="https://academia.example/info" target="_blank">info</a>'
    assert sanitize_html(html) == html


# ---------------------------------------------------------------------------
# data: values
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("uri", [PNG_DATA_URI, JPEG_DATA_URI, "data:image/gif;base64,R0lGODlhAQABAAAAACw="])
def test_image_data_uris_preserved(uri):
    html = f'<p><img src="{uri}" alt="logo"></p>'
    assert sanitize_html(html) == html


@pytest.mark.parametrize("uri", [
    "data:text/html,<b>hi</b>",
    "data:text/html;base64,PHNjcmlwdD5hbGVydCgxKTwvc2NyaXB0Pg==",
    "data:application/javascript,alert(1)",
    "  DATA:text/html,x",
])
def test_non_image_data_uris_removed(uri):
    assert sanitize_html(f'<a href="{uri}">x</a>') == "<a>x</a>"


def test_object_data_attribute_with_script_payload_removed():
    out = sanitize_html('<object data="data:application/javascript,alert(1)"></object>')
    assert out == "<object></object>"


# ---------------------------------------------------------------------------
# Pass-through behavior
# ---------------------------------------------------------------------------

def test_plain_text_passes_through():
    assert sanitize_html("Hola mundo, ¿qué tal?") == "Hola mundo, ¿qué tal?"


def test_ampersand_is_escaped_on_output():
    assert sanitize_html("Tom & Jerry") == "Tom &amp; Jerry"


def test_unclosed_tags_are_closed():
    assert sanitize_html("<p>unclosed <b>bold") == "<p>unclosed <b>bold</b></p>"


def test_other_elements_are_not_filtered():
    html = '<p>Video</p><iframe src="https://www.youtube.com/embed/abc"></iframe>'
    assert sanitize_html(html) == html


def test_style_in_body_is_kept():
    html = "<p>a</p><style>p > b { color: red; }</style>"
    assert sanitize_html(html) == html


def test_leading_head_elements_are_not_part_of_the_body():
    assert sanitize_html("<style>p{}</style><p>a</p>") == "<p>a</p>"


@pytest.mark.parametrize("html", [
    "<svg><style>&lt;img src=x onerror=alert(1)&gt;</style></svg>",
    "<math><style>&lt;img src=x onerror=alert(1)&gt;</style></math>",
    "<svg><iframe>&lt;img src=x onerror=alert(1)&gt;</iframe></svg>",
])
def test_foreign_content_text_stays_escaped(html):
    out = sanitize_html(html)
    assert "<img" not in out
    assert "&lt;img src=x onerror=alert(1)&gt;" in out
    assert "<img" not in sanitize_html(out)


def test_svg_style_round_trips_as_text():
    html = "<svg><style>&lt;img src=x onerror=alert(1)&gt;</style></svg>"
    assert sanitize_html(html) == html


def test_script_markup_inside_iframe_is_inert_text():
    # Iframe content is raw text for the parser, so it is written back as is.
    out = sanitize_html("<iframe><script>alert(1)</script></iframe>")
    assert out == "<iframe><script>alert(1)</script></iframe>"

    reparsed = BeautifulSoup(out, "html5lib")
    assert reparsed.find_all("script") == []
    assert reparsed.iframe.get_text() == "<script>alert(1)</script>"
    assert sanitize_html(out) == out


def test_table_structure_survives():
    out = sanitize_html("<table><tr><td>1</td><td>2</td></tr></table>")
    assert "<td>1</td><td>2</td>" in out
    assert out.startswith("<table>")


# ---------------------------------------------------------------------------
# Idempotence and failure handling
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("html", [
    "<p>Hello <script>alert(1)</script>world</p>",
    '<img src="x.png" onerror="alert(1)">',
    '<a href=" javascript:alert(1)" title="t">click</a>',
    f'<img src="{PNG_DATA_URI}"><b>bold <i>both</b> italic</i>',
    '<iframe src="data:text/html,<script>alert(1)</script>">',
    "<table><tr><td>1<td>2</table><p>x",
    "Tom & Jerry < 3",
    '<div class="a  b" data-x=\'"q"\'>t</div>',
    "<iframe>fallback &amp; <b>text</b></iframe>",
    "<xmp><b>literal</b> & more</xmp>",
    "<textarea>a &lt; b</textarea>",
    "<svg><style>&lt;img src=x onerror=alert(1)&gt;</style></svg>",
    "<math><style>&lt;img src=x onerror=alert(1)&gt;</style></math>",
    "<svg><iframe>&lt;img src=x onerror=alert(1)&gt;</iframe></svg>",
    "",
])
def test_sanitize_is_idempotent(html):
    once = sanitize_html(html)
    assert sanitize_html(once) == once


def test_parser_failure_fails_closed():
    with patch(
        "aulaguard.engines.sanitizer_engine.BeautifulSoup",
        side_effect=RuntimeError("parser crashed"),
    ):
        assert sanitize_html('<p onclick="x()">hi</p>') == ""


def test_attribute_check_failure_fails_closed():
    with patch(
        "aulaguard.engines.sanitizer_engine.SanitizationRules.is_dangerous",
        side_effect=ValueError("boom"),
    ):
        assert sanitize_html('<p class="c">hi</p>') == ""


# ---------------------------------------------------------------------------
# Custom rules
# ---------------------------------------------------------------------------

def test_default_rules_match_reference_policy():
    assert DEFAULT_RULES.removed_elements == ("script",)
    assert DEFAULT_RULES.event_handler_prefix == "on"
    assert DEFAULT_RULES.blocked_schemes == ("javascript:",)
    assert DEFAULT_RULES.allowed_data_prefixes == ("data:image",)


def test_custom_removed_elements():
    rules = SanitizationRules(removed_elements=("script", "iframe"))
    out = sanitize_html('<p>a</p><iframe src="https://x.example"></iframe>', rules)
    assert out == "<p>a</p>"


def test_no_allowed_data_prefixes_blocks_images():
    rules = SanitizationRules(allowed_data_prefixes=())
    assert sanitize_html(f'<img src="{PNG_DATA_URI}">', rules) == "<img>"


# ---------------------------------------------------------------------------
# SanitizerEngine
# ---------------------------------------------------------------------------

@pytest.fixture
def engine():
    return SanitizerEngine()


def test_engine_sanitize_uses_its_rules():
    engine = SanitizerEngine(rules=SanitizationRules(removed_elements=("script", "object")))
    assert engine.sanitize("<object></object><p>x</p>") == "<p>x</p>"


def test_strip_markup_keeps_text_only(engine):
    assert engine.strip_markup("<b>Hoja</b> de Matrícula") == "Hoja de Matrícula"


def test_strip_markup_escapes_leftovers(engine):
    out = engine.strip_markup("<script>alert(1)</script>Title & more")
    assert "<" not in out
    assert out.endswith("Title &amp; more")


def test_strip_markup_empty(engine):
    assert engine.strip_markup(None) == ""
    assert engine.strip_markup("") == ""


def test_strip_markup_with_allowlist():
    engine = SanitizerEngine(plain_tags=["b"])
    assert engine.strip_markup('<b onclick="x()">x</b><i>y</i>') == "<b>x</b>y"


def test_clean_payload_sanitizes_all_strings_by_default(engine):
    data = {"title": "<b onclick='x()'>Curso</b>", "places": 12}
    cleaned = engine.clean_payload(data)
    assert cleaned == {"title": "<b>Curso</b>", "places": 12}


def test_clean_payload_respects_fields_and_does_not_mutate(engine):
    data = {
        "title": "<script>x()</script>Landing",
        "description": '<p onclick="x()">Bienvenidos</p>',
    }
    cleaned = engine.clean_payload(data, ["description"])

    assert cleaned["title"] == "<script>x()</script>Landing"
    assert cleaned["description"] == "<p>Bienvenidos</p>"
    assert data["description"] == '<p onclick="x()">Bienvenidos</p>'


def test_clean_payload_recurses_into_nested_structures(engine):
    data = {
        "landing": {
            "description": "<p>Hi<script>x()</script></p>",
            "custom_fields": [
                {"label": "Alergias", "description": '<a href="javascript:x()">ver</a>'},
                {"label": "Talla", "description": None},
            ],
        },
        "tags": ["<i>new</i>", 3],
    }
    cleaned = engine.clean_payload(data, ["description"])

    assert cleaned["landing"]["description"] == "<p>Hi</p>"
    assert cleaned["landing"]["custom_fields"][0] == {"label": "Alergias", "description": "<a>ver</a>"}
    assert cleaned["landing"]["custom_fields"][1]["description"] is None
    assert cleaned["tags"] == ["<i>new</i>", 3]
    assert data["landing"]["custom_fields"][0]["description"] == '<a href="javascript:x()">ver</a>'
