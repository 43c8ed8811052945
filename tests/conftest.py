from __future__ import annotations

import pymupdf
import pytest

from weboutline.extract import HeadingNode


class RecordingObserver:
    def __init__(self) -> None:
        self.progress: list[tuple[int, int, int]] = []
        self.warnings: list[str] = []

    def on_progress(self, processed: int, total: int, percent: int) -> None:
        self.progress.append((processed, total, percent))

    def on_warning(self, message: str) -> None:
        self.warnings.append(message)


class CountingAllocator:
    def __init__(self, start: int = 100) -> None:
        self.next = start

    def allocate(self) -> int:
        self.next += 1
        return self.next


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def make_doc():
    docs: list[pymupdf.Document] = []

    def _make(pages: int = 2, height: float = 792) -> pymupdf.Document:
        doc = pymupdf.open()
        for _ in range(pages):
            doc.new_page(width=612, height=height)
        docs.append(doc)
        return doc

    yield _make
    for d in docs:
        d.close()


def node(title: str, y: float, depth: int, *children: HeadingNode, **style) -> HeadingNode:
    return HeadingNode(
        title=title,
        destination=title.lower().replace(" ", "-"),
        y_position=y,
        depth=depth,
        children=list(children),
        **style,
    )


@pytest.fixture(scope="module")
def browser():
    sync_api = pytest.importorskip("playwright.sync_api")
    with sync_api.sync_playwright() as p:
        try:
            b = p.chromium.launch()
        except sync_api.Error as e:
            pytest.skip(f"Chromium not available: {e}")
        yield b
        b.close()


@pytest.fixture
def page(browser):
    p = browser.new_page()
    yield p
    p.close()
