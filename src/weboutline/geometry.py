"""Map document pixel offsets to positions on paginated PDF output."""

from __future__ import annotations

import math


def map_offset(
    offset: float,
    total_height_px: float,
    page_count: int,
    page_height_pt: float,
) -> tuple[int, float]:
    """Return (page_index, y) for a pixel offset from the top of the document.

    The rendered document is one continuous flow measured downward in pixels;
    PDF pages measure upward from the bottom-left corner in points. Pages are
    assumed to share one height, so each page covers an equal pixel band.
    Out-of-range input is clamped instead of rejected.
    """
    if page_count <= 0 or total_height_px <= 0:
        return 0, float(page_height_pt)

    offset = min(max(offset, 0.0), float(total_height_px))
    page_index = math.floor(offset / total_height_px * page_count)
    page_index = max(0, min(page_index, page_count - 1))

    band = total_height_px / page_count
    local = min(max(offset - page_index * band, 0.0), band)
    y = page_height_pt - local * (page_height_pt / band)
    return page_index, y
