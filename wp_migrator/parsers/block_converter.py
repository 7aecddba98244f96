from __future__ import annotations

from typing import List

from bs4 import BeautifulSoup, Tag

HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}


def paragraph_block(text: str) -> str:
    return f"<!-- wp:paragraph --><p>{text}</p><!-- /wp:paragraph -->"


def heading_block(level: int, text: str) -> str:
    return (
        f'<!-- wp:heading {{"level":{level}}} -->'
        f"<h{level}>{text}</h{level}>"
        "<!-- /wp:heading -->"
    )


def list_block(tag: str, items: List[str]) -> str:
    opener = '<!-- wp:list {"ordered":true} -->' if tag == "ol" else "<!-- wp:list -->"
    inner = "".join(f"<li>{item}</li>" for item in items)
    return f"{opener}<{tag}>{inner}</{tag}><!-- /wp:list -->"


def image_block(src: str, alt: str) -> str:
    return f'<!-- wp:image --><figure><img src="{src}" alt="{alt}"></figure><!-- /wp:image -->'


def _attr(el: Tag, name: str) -> str:
    value = el.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value or ""


def convert_to_blocks(html: str) -> str:
    """
    Convert an HTML fragment to block markup.

    Only the top-level nodes of the fragment are considered:

    - ``p`` becomes a paragraph block holding the node's text
    - ``h1``-``h6`` become heading blocks tagged with their level
    - ``ul``/``ol`` become list blocks; only direct ``li`` children are
      rendered and nested lists are flattened into their item's text
    - ``img`` becomes an image block with ``src``/``alt`` copied verbatim

    Every other node, including bare text, is dropped.  Blocks are
    concatenated without separators.
    """
    if not html or not html.strip():
        return ""

    soup = BeautifulSoup(html, "html.parser")

    # Remove scripts/styles
    for bad in soup.find_all(["script", "style"]):
        bad.decompose()

    container = soup.body if soup.body else soup
    blocks: List[str] = []

    for node in container.children:
        if not isinstance(node, Tag):
            continue
        name = (node.name or "").lower()
        if name == "p":
            blocks.append(paragraph_block(node.get_text()))
        elif name in HEADING_TAGS:
            blocks.append(heading_block(int(name[1]), node.get_text()))
        elif name in {"ul", "ol"}:
            items = [li.get_text() for li in node.find_all("li", recursive=False)]
            blocks.append(list_block(name, items))
        elif name == "img":
            blocks.append(image_block(_attr(node, "src"), _attr(node, "alt")))

    return "".join(blocks)
