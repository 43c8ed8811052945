"""Turn the headings of a rendered web page into PDF bookmarks."""

from .extract import HeadingNode, build_forest, format_outline, get_outline
from .writer import set_outline

__all__ = ["HeadingNode", "build_forest", "format_outline", "get_outline", "set_outline"]
