import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
pytest.importorskip("bs4")

from wp_migrator.parsers.block_converter import convert_to_blocks


def test_heading_and_paragraph_are_wrapped_without_separator():
    html = "<h2>Title</h2><p>Text</p>"
    assert convert_to_blocks(html) == (
        '<!-- wp:heading {"level":2} --><h2>Title</h2><!-- /wp:heading -->'
        "<!-- wp:paragraph --><p>Text</p><!-- /wp:paragraph -->"
    )


def test_empty_input_gives_empty_output():
    assert convert_to_blocks("") == ""
    assert convert_to_blocks("   \n ") == ""


def test_unsupported_nodes_and_scripts_are_dropped():
    html = "<div>ignored</div><script>alert(1)</script><p>kept</p>loose text<table><tr><td>x</td></tr></table>"
    assert convert_to_blocks(html) == "<!-- wp:paragraph --><p>kept</p><!-- /wp:paragraph -->"


def test_lists_render_direct_items_only():
    html = "<ul><li>one</li><li>two</li></ul><ol><li>first</li></ol>"
    out = convert_to_blocks(html)
    assert out == (
        "<!-- wp:list --><ul><li>one</li><li>two</li></ul><!-- /wp:list -->"
        '<!-- wp:list {"ordered":true} --><ol><li>first</li></ol><!-- /wp:list -->'
    )


def test_image_attributes_are_copied_verbatim():
    html = '<img src="http://ex.com/a.jpg?x=1" alt="A picture">'
    assert convert_to_blocks(html) == (
        '<!-- wp:image --><figure><img src="http://ex.com/a.jpg?x=1" alt="A picture"></figure><!-- /wp:image -->'
    )


def test_heading_levels_are_preserved():
    out = convert_to_blocks("<h1>a</h1><h6>b</h6>")
    assert '<!-- wp:heading {"level":1} --><h1>a</h1>' in out
    assert '<!-- wp:heading {"level":6} --><h6>b</h6>' in out


def test_block_count_never_exceeds_top_level_nodes():
    html = "<p>a</p><p>b</p><span>c</span><h3>d</h3>"
    out = convert_to_blocks(html)
    assert out.count("<!-- wp:") == 3
