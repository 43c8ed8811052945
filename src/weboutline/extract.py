"""Extract a nested heading outline from a rendered page."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import quote

from playwright.sync_api import Page

# Characters encodeURIComponent leaves untouched
_URI_COMPONENT_SAFE = "-_.!~*'()"

# Runs in the page. Returns heading records in document order and makes sure
# every heading has an id plus a hidden link pointing at it, so the PDF export
# registers a destination for each one.
_COLLECT_HEADINGS_JS = """
(selector) => {
  const elements = Array.from(document.querySelectorAll(selector));
  const body = document.querySelector('body');
  const linkHolder = document.createElement('div');
  linkHolder.style.display = 'none';
  if (body) body.insertBefore(linkHolder, body.firstChild);

  let generated = 0;
  return elements.map((el) => {
    if (!el.id) {
      let id;
      do {
        id = `outline-heading-${++generated}`;
      } while (document.getElementById(id));
      el.id = id;
    }
    const link = document.createElement('a');
    link.href = `#${encodeURIComponent(el.id)}`;
    linkHolder.appendChild(link);

    const rect = el.getBoundingClientRect();
    return {
      tag: el.tagName.toLowerCase(),
      id: el.id,
      text: el.innerText || el.textContent || '',
      y: window.scrollY + rect.top,
    };
  });
}
"""


@dataclass
class RawHeading:
    tag: str
    id: str
    text: str
    y: float  # pixels from the top of the document


@dataclass
class HeadingNode:
    title: str
    destination: str
    y_position: float
    depth: int  # 0-based rank in the tag list
    children: list[HeadingNode] = field(default_factory=list)
    bold: bool = False
    italic: bool = False
    color: tuple[float, float, float] | None = None


def format_container_selector(selector: str) -> str:
    """Normalize a scoping selector so it can prefix a tag name.

    Whitespace runs collapse to one space and a trailing space is added;
    an empty selector stays empty.
    """
    if not selector:
        return ""
    parts = selector.split()
    if not parts:
        return ""
    return " ".join(parts) + " "


def _clean_title(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def build_forest(headings: list[RawHeading], tags: list[str]) -> list[HeadingNode]:
    """Nest headings (in document order) by their rank in ``tags``.

    Returns the top-level nodes. A heading becomes a child of the closest
    preceding heading with a strictly lower rank.
    """
    ranks = {t.lower(): i for i, t in enumerate(tags)}
    forest: list[HeadingNode] = []
    open_nodes: list[HeadingNode] = []

    for h in headings:
        depth = ranks.get(h.tag.lower())
        if depth is None:
            continue
        node = HeadingNode(
            title=_clean_title(h.text),
            destination=quote(h.id, safe=_URI_COMPONENT_SAFE),
            y_position=h.y,
            depth=depth,
        )
        while open_nodes and open_nodes[-1].depth >= depth:
            open_nodes.pop()
        if open_nodes:
            open_nodes[-1].children.append(node)
        else:
            forest.append(node)
        open_nodes.append(node)

    return forest


def get_outline(
    page: Page, tags: list[str], container_selector: str = ""
) -> list[HeadingNode]:
    """Collect the heading outline of a loaded page.

    ``tags`` lists heading tag names highest level first. When
    ``container_selector`` is given, only headings inside it are used.
    """
    if not tags:
        return []
    prefix = format_container_selector(container_selector)
    selector = ",".join(f"{prefix}{t}" for t in tags)
    records = page.evaluate(_COLLECT_HEADINGS_JS, selector)
    headings = [
        RawHeading(tag=r["tag"], id=r["id"], text=r["text"], y=float(r["y"]))
        for r in records
    ]
    return build_forest(headings, tags)


def format_outline(forest: list[HeadingNode]) -> str:
    """Format an outline as indented text, one heading per line."""
    lines: list[str] = []

    def walk(nodes: list[HeadingNode], level: int) -> None:
        for n in nodes:
            lines.append(f"{'  ' * level}{n.title}  (y={n.y_position:g})")
            walk(n.children, level + 1)

    walk(forest, 0)
    return "\n".join(lines) + "\n" if lines else ""
