"""Write a heading outline into a PDF as bookmarks (document outline)."""

from __future__ import annotations

import html
import re
from urllib.parse import unquote

import pymupdf

from .extract import HeadingNode
from .geometry import map_offset
from .observer import NullObserver, OutlineObserver, Progress
from .refs import DocumentAllocator, OutlineRef, add_refs, count_nodes


def pdf_text_string(text: str) -> str:
    """Encode text as a PDF hex string (UTF-16BE with byte order mark)."""
    return "<FEFF" + text.encode("utf-16-be").hex().upper() + ">"


def pdf_number(value: float) -> str:
    """Format a number for PDF source (plain decimal, no exponent)."""
    if float(value).is_integer():
        return str(int(value))
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def _ref(xref: int) -> str:
    return f"{xref} 0 R"


def _clamp_unit(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


def _outline_item(
    item: OutlineRef,
    prev: OutlineRef | None,
    next_: OutlineRef | None,
    doc: pymupdf.Document,
    page_height_px: float,
    page_height_pt: float,
) -> str:
    page_index, y = map_offset(item.y_position, page_height_px, len(doc), page_height_pt)
    # Explicit destination: [page /XYZ left top zoom], null zoom keeps the current one
    dest = f"[{_ref(doc.page_xref(page_index))} /XYZ 0 {pdf_number(y)} null]"

    entries = [
        f"/Title {pdf_text_string(html.unescape(item.title))}",
        f"/Dest {dest}",
        f"/Parent {_ref(item.parent_ref)}",
        f"/F {(1 if item.italic else 0) | (2 if item.bold else 0)}",
    ]
    if item.color is not None:
        rgb = " ".join(pdf_number(_clamp_unit(c)) for c in item.color)
        entries.append(f"/C [{rgb}]")
    if prev is not None:
        entries.append(f"/Prev {_ref(prev.ref)}")
    if next_ is not None:
        entries.append(f"/Next {_ref(next_.ref)}")
    if item.children:
        entries.append(f"/First {_ref(item.children[0].ref)}")
        entries.append(f"/Last {_ref(item.children[-1].ref)}")
        entries.append(f"/Count {count_nodes(item.children)}")
    return "<<" + " ".join(entries) + ">>"


def build_outline_objects(
    outline: list[OutlineRef] | tuple[OutlineRef, ...],
    doc: pymupdf.Document,
    page_height_px: float,
    page_height_pt: float,
    progress: Progress | None = None,
    observer: OutlineObserver | None = None,
) -> None:
    """Create one outline item object per node, in document order."""
    observer = observer or NullObserver()
    for i, item in enumerate(outline):
        if progress is not None:
            progress.step(observer)
        prev = outline[i - 1] if i > 0 else None
        next_ = outline[i + 1] if i + 1 < len(outline) else None
        doc.update_object(
            item.ref,
            _outline_item(item, prev, next_, doc, page_height_px, page_height_pt),
        )
        build_outline_objects(
            item.children, doc, page_height_px, page_height_pt, progress, observer
        )


# PDF object source tokens: dict/array delimiters, literal and hex strings,
# names, and any other bare word (numbers, R, null, true, false)
_PDF_TOKEN = re.compile(
    r"<<|>>|\[|\]|\((?:\\.|[^\\)])*\)|<[0-9A-Fa-f\s]*>|/[^\s/<>\[\]()%]*|[^\s/<>\[\]()%]+"
)


def pdf_dict_keys(source: str) -> list[str]:
    """Keys of a direct PDF dictionary given as object source, without the slash."""
    tokens = _PDF_TOKEN.findall(source.strip())
    if tokens[:1] != ["<<"] or tokens[-1:] != [">>"]:
        return []
    tokens = tokens[1:-1]

    objects: list[list[str]] = []
    i = 0
    while i < len(tokens):
        start = i
        if tokens[i] in ("<<", "["):
            depth = 0
            while i < len(tokens):
                if tokens[i] in ("<<", "["):
                    depth += 1
                elif tokens[i] in (">>", "]"):
                    depth -= 1
                i += 1
                if depth == 0:
                    break
        elif tokens[i + 2:i + 3] == ["R"]:
            i += 3  # indirect reference "n g R"
        else:
            i += 1
        objects.append(tokens[start:i])

    return [obj[0][1:] for obj in objects[0::2] if obj[0].startswith("/")]


def named_destinations(doc: pymupdf.Document) -> set[str]:
    """Names defined in the catalog Dests dictionary and the Dests name tree."""
    names: set[str] = set()
    kind, value = doc.xref_get_key(doc.pdf_catalog(), "Dests")
    if kind == "xref":
        dests_xref = int(value.split()[0])
        names.update(k.lstrip("/") for k in doc.xref_get_keys(dests_xref))
    elif kind == "dict":
        names.update(pdf_dict_keys(value))
    names.update(doc.resolve_names())
    return {unquote(n) for n in names}


def warn_missing_destinations(
    outline: list[HeadingNode] | list[OutlineRef],
    doc: pymupdf.Document,
    observer: OutlineObserver,
) -> int:
    """Warn about every node whose destination has no named destination.

    Returns the number of warnings. Nothing is checked when the document
    carries no named destinations at all.
    """
    valid = named_destinations(doc)
    if not valid:
        return 0

    missing = 0

    def walk(nodes) -> None:
        nonlocal missing
        for node in nodes:
            if node.destination and unquote(node.destination) not in valid:
                observer.on_warning(
                    f'Unable to find destination "{node.destination}" '
                    "while generating PDF outline."
                )
                missing += 1
            walk(node.children)

    walk(outline)
    return missing


def set_outline(
    doc: pymupdf.Document,
    outline: list[HeadingNode],
    page_height_px: float,
    page_height_pt: float,
    validate: bool = False,
    observer: OutlineObserver | None = None,
) -> pymupdf.Document:
    """Install ``outline`` as the document's bookmarks.

    ``page_height_px`` is the total height of the rendered document and
    ``page_height_pt`` the height of one PDF page. An empty outline leaves
    the document untouched.
    """
    if not outline:
        return doc
    observer = observer or NullObserver()

    allocator = DocumentAllocator(doc)
    root_ref = allocator.allocate()
    items = add_refs(outline, allocator, root_ref)
    total = count_nodes(items)

    build_outline_objects(
        items, doc, page_height_px, page_height_pt, Progress(total), observer
    )

    doc.update_object(
        root_ref,
        f"<</Type /Outlines /First {_ref(items[0].ref)} "
        f"/Last {_ref(items[-1].ref)} /Count {total}>>",
    )
    doc.xref_set_key(doc.pdf_catalog(), "Outlines", _ref(root_ref))

    if validate:
        warn_missing_destinations(items, doc, observer)
    return doc
