"""Tests that need a real Chromium; skipped when it is not installed."""

import pymupdf
import pytest

from weboutline.extract import get_outline
from weboutline.generate import PDF, PDFExportError, PDFOptions, document_height


def test_simple_structure(page):
    page.set_content("""
      <body>
        <h1 id="intro">Introduction</h1>
        <h2 id="getting-started">Getting Started</h2>
        <h2 id="usage">Usage</h2>
      </body>
    """)
    outline = get_outline(page, ["h1", "h2"])
    assert len(outline) == 1
    assert (outline[0].title, outline[0].destination) == ("Introduction", "intro")
    assert [c.destination for c in outline[0].children] == ["getting-started", "usage"]
    assert outline[0].children[0].y_position > outline[0].y_position


def test_whitespace_trimmed(page):
    page.set_content('<h1 id="t">\n   Test with spaces\n  </h1>')
    assert get_outline(page, ["h1"])[0].title == "Test with spaces"


def test_container_selector(page):
    page.set_content("""
      <body>
        <nav><h1 id="nav-heading">Navigation</h1></nav>
        <main>
          <h1 id="main-heading">Main Content</h1>
          <h2 id="section">Section</h2>
        </main>
      </body>
    """)
    outline = get_outline(page, ["h1", "h2"], "  main ")
    assert [n.title for n in outline] == ["Main Content"]
    assert [c.title for c in outline[0].children] == ["Section"]


def test_no_headings(page):
    page.set_content("<p>No headings here</p>")
    assert get_outline(page, ["h1", "h2", "h3"]) == []
    assert get_outline(page, []) == []


def test_missing_ids_are_generated_and_linked(page):
    page.set_content("<body><h1>First</h1><h1>Second</h1></body>")
    outline = get_outline(page, ["h1"])
    dests = [n.destination for n in outline]
    assert dests[0] and dests[1] and dests[0] != dests[1]
    hrefs = page.evaluate(
        "() => Array.from(document.querySelectorAll('div a')).map(a => a.getAttribute('href'))"
    )
    assert hrefs == [f"#{d}" for d in dests]
    assert page.evaluate("(id) => !!document.getElementById(id)", dests[0])


def test_generate_writes_bookmarks(page, tmp_path):
    sections = "".join(
        f'<h1 id="c{i}">Chapter {i}</h1><h2 id="s{i}">Section {i}</h2>'
        f'<p style="height:1200px">text</p>'
        for i in range(3)
    )
    page.set_content(f"<body>{sections}</body>")
    assert document_height(page) > 3600

    out = PDF(PDFOptions(output_pdf_filename=tmp_path / "out.pdf")).generate(page)
    doc = pymupdf.open(out)
    try:
        toc = doc.get_toc()
        assert [t[:2] for t in toc] == [
            [1, "Chapter 0"], [2, "Section 0"],
            [1, "Chapter 1"], [2, "Section 1"],
            [1, "Chapter 2"], [2, "Section 2"],
        ]
        pages = [t[2] for t in toc]
        assert pages == sorted(pages)
        assert pages[-1] > 1
    finally:
        doc.close()


def test_export_failure_is_raised(page):
    options = PDFOptions(paper_format="NotAPaperSize")
    with pytest.raises(PDFExportError):
        PDF(options).export(page)
