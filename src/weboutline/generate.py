"""Export a rendered page to PDF and add its heading outline as bookmarks."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path

import pymupdf
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page

from .extract import format_outline, get_outline
from .observer import ConsoleObserver
from .refs import count_nodes
from .writer import set_outline

DEFAULT_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
EMPTY_TEMPLATE = "<span></span>"


class PDFExportError(RuntimeError):
    """The browser failed to export the page to PDF."""


@dataclass
class PDFOptions:
    output_pdf_filename: Path | str = "output.pdf"
    paper_format: str = "A4"
    pdf_margin: dict[str, str | int] = field(
        default_factory=lambda: {"top": 32, "right": 32, "bottom": 32, "left": 32}
    )
    header_template: str = ""
    footer_template: str = ""
    tags: list[str] = field(default_factory=lambda: list(DEFAULT_TAGS))
    container_selector: str = ""
    validate_outline: bool = True
    debug: bool = False


def document_height(page: Page) -> float:
    """Full scrollable height of the loaded document in pixels."""
    return float(page.evaluate("() => document.documentElement.scrollHeight"))


class PDF:
    def __init__(self, options: PDFOptions) -> None:
        self.options = options

    def _margin(self) -> dict[str, str]:
        # Playwright expects CSS lengths; bare numbers are pixels
        return {
            side: f"{value}px" if isinstance(value, (int, float)) else value
            for side, value in self.options.pdf_margin.items()
        }

    def pdf_arguments(self) -> dict:
        """Keyword arguments for ``Page.pdf``."""
        opts = self.options
        args = {
            "format": opts.paper_format,
            "margin": self._margin(),
            "print_background": True,
        }
        if opts.header_template or opts.footer_template:
            # An unset template would otherwise get Chromium's default one
            args.update(
                display_header_footer=True,
                header_template=opts.header_template or EMPTY_TEMPLATE,
                footer_template=opts.footer_template or EMPTY_TEMPLATE,
            )
        return args

    def export(self, page: Page) -> bytes:
        """Render the page to PDF bytes."""
        try:
            return page.pdf(**self.pdf_arguments())
        except PlaywrightError as e:
            raise PDFExportError(f"PDF export failed: {e}") from e

    def generate(self, page: Page) -> Path:
        """Write the page as a PDF with bookmarks and return the output path."""
        opts = self.options
        output = Path(opts.output_pdf_filename)

        outline = get_outline(page, opts.tags, opts.container_selector)
        if opts.debug:
            print(f"=== Outline ({count_nodes(outline)} headings) ===", file=sys.stderr)
            print(format_outline(outline), file=sys.stderr)

        height_px = document_height(page)
        data = self.export(page)

        doc = pymupdf.open(stream=data, filetype="pdf")
        try:
            page_height_pt = doc[0].rect.height
            observer = ConsoleObserver(progress=opts.debug)
            set_outline(
                doc, outline, height_px, page_height_pt,
                validate=opts.validate_outline, observer=observer,
            )
            doc.save(str(output), garbage=4, deflate=True)
        finally:
            doc.close()

        if opts.debug:
            print(f"Wrote {count_nodes(outline)} bookmarks → {output}", file=sys.stderr)
        return output
