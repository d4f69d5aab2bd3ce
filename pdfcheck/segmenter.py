"""
Text-run segmentation.

Glyph runs arrive in content-stream order. They are put into reading order
(top to bottom, then left to right) and consecutive runs drawn with exactly
the same font are merged into one TextRun, with a synthetic space inserted
where the geometry suggests a word boundary.
"""

import math
import re
from typing import Iterable, List, Optional

from .config import LayoutConfig
from .models import GlyphRun, TextRun

PUNCTUATION = ".,;:!?"
_WS = re.compile(r"\s+")


def line_bucket(y: float, tolerance: float) -> int:
    """Bucket index of a baseline y; values rounding to the same bucket share a line."""
    return math.floor(y / tolerance + 0.5)


def reading_order(runs: Iterable[GlyphRun], tolerance: float = 2.0) -> List[GlyphRun]:
    """Sort by descending baseline bucket, then ascending start x (stable)."""
    return sorted(runs, key=lambda r: (-line_bucket(r.y, tolerance), r.x))


class TextRunSegmenter:
    """Per-page observer. Construct one per page; do not reuse."""

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()
        self._runs: List[GlyphRun] = []

    def feed(self, run: GlyphRun) -> None:
        # empty and whitespace-only fragments carry no font usage
        if run.text and run.text.strip():
            self._runs.append(run)

    def result(self) -> List[TextRun]:
        ordered = reading_order(self._runs, self.config.line_tolerance)
        text_runs = []
        current: Optional[GlyphRun] = None
        parts: List[str] = []

        for run in ordered:
            if current is None or run.font != current.font:
                if current is not None:
                    text_runs.append(self._emit(current, parts))
                parts = []
            elif self.should_add_space(current, run):
                parts.append(" ")
            parts.append(run.text)
            current = run

        if current is not None:
            text_runs.append(self._emit(current, parts))
        return text_runs

    def should_add_space(self, prev: GlyphRun, current: GlyphRun) -> bool:
        """Decide whether a word boundary separates two same-font fragments."""
        if prev.text.endswith(" ") or current.text.startswith(" "):
            return False

        if abs(prev.y - current.y) > self.config.line_break_gap:
            return True  # new line

        horizontal_gap = current.x - prev.end_x
        font_size = current.font_size
        if prev.text[-1:] in PUNCTUATION or current.text[:1] in PUNCTUATION:
            return horizontal_gap > font_size * self.config.punctuation_gap_ratio
        return horizontal_gap > font_size * self.config.word_gap_ratio

    @staticmethod
    def _emit(element: GlyphRun, parts: List[str]) -> TextRun:
        text = _WS.sub(" ", "".join(parts).strip())
        return TextRun(
            text=text,
            font_name=element.font.name,
            font_size=element.font.size,
            embedded=element.font.embedded,
        )


def segment(glyph_runs: Iterable[GlyphRun], config: Optional[LayoutConfig] = None) -> List[TextRun]:
    """Group a page's glyph runs into TextRuns."""
    segmenter = TextRunSegmenter(config)
    for run in glyph_runs:
        segmenter.feed(run)
    return segmenter.result()
