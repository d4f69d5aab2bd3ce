"""
Margin inference from text extents.

Left, right and bottom margins come straight from the extreme baseline
positions. The top margin uses a density test over text tops so an isolated
running header does not pass for the start of the main content.
"""

import logging
import math
from collections import Counter
from typing import Iterable, List, Optional, Tuple

from .config import MarginConfig
from .models import GlyphRun, MarginResult

logger = logging.getLogger(__name__)


def text_ascent(run: GlyphRun) -> float:
    """Ascent above the baseline in points; the font size when metrics are missing."""
    ascender = run.font.ascender
    if ascender is not None and ascender > 0:
        return ascender * run.font_size
    return run.font_size


class MarginInferencer:
    """Per-page observer. Construct one per page; do not reuse."""

    def __init__(self, page_size: Tuple[float, float], config: Optional[MarginConfig] = None):
        self.page_width, self.page_height = page_size
        self.config = config or MarginConfig()
        self.min_x = math.inf
        self.max_x = -math.inf
        self.min_y = math.inf
        self.max_text_top = -math.inf
        self.text_tops: List[float] = []
        self.count = 0

    def feed(self, run: GlyphRun) -> None:
        self.min_x = min(self.min_x, run.x)
        self.max_x = max(self.max_x, run.end_x)
        self.min_y = min(self.min_y, run.y)
        top = run.y + text_ascent(run)
        self.max_text_top = max(self.max_text_top, top)
        self.text_tops.append(top)
        self.count += 1

    def result(self) -> MarginResult:
        if self.count == 0:
            return MarginResult.no_text()
        try:
            return self._compute()
        except Exception as e:
            logger.warning("Margin computation failed: %s", e)
            return MarginResult.unavailable()

    def _compute(self) -> MarginResult:
        k = self.config.points_to_cm
        left = max(0.0, self.min_x * k)
        right = max(0.0, (self.page_width - self.max_x) * k)
        bottom = max(0.0, self.min_y * k)
        top = self._top_margin()
        return MarginResult(left=left, top=top, right=right, bottom=bottom)

    def _top_margin(self) -> float:
        k = self.config.points_to_cm
        main_top = self.main_content_top()
        top = (self.page_height - main_top) * k

        # Sanity check: fall back to the highest text when the result is implausible
        if top < 0 or top > self.config.max_top_margin:
            logger.warning("Calculated top margin %.2fcm seems unreasonable, using fallback", top)
            top = (self.page_height - self.max_text_top) * k
            top = min(max(top, 0.0), self.config.max_top_margin)

        logger.debug("Main content top: %.1f, page height: %.1f, top margin: %.2fcm",
                     main_top, self.page_height, top)
        return max(0.0, top)

    def main_content_top(self) -> float:
        """Highest text top belonging to a densely populated band."""
        tops = sorted(self.text_tops, reverse=True)
        if len(tops) <= 1:
            return tops[0]

        size = self.config.density_bucket

        def level(t):
            return math.floor(t / size + 0.5)

        counts = Counter(level(t) for t in tops)
        threshold = max(2, max(counts.values()) // 4)

        for t in tops:
            if counts[level(t)] >= threshold:
                return t

        # No dense band: skip the top 10% of the page
        header_limit = self.page_height * self.config.header_zone_ratio
        for t in tops:
            if t <= header_limit:
                return t

        return tops[0]


def infer_margins(glyph_runs: Iterable[GlyphRun], page_size: Tuple[float, float],
                  config: Optional[MarginConfig] = None) -> MarginResult:
    """Infer one page's margins; failures give MarginResult.unavailable()."""
    inferencer = MarginInferencer(page_size, config)
    try:
        for run in glyph_runs:
            inferencer.feed(run)
    except Exception as e:
        logger.warning("Margin analysis failed while reading text: %s", e)
        return MarginResult.unavailable()
    return inferencer.result()
