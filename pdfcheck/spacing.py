"""
Line and paragraph spacing classification.

Baselines are clustered into lines, lines into paragraphs (large gaps or
sentence-ending punctuation followed by a moderate gap), and each paragraph's
average baseline-to-baseline gap is compared against the configured minimum.
"""

import re
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import numpy as np

from .config import LayoutConfig, SpacingConfig
from .models import GlyphRun, ParagraphDetail, SpacingResult
from .segmenter import line_bucket

NUMBERED_ITEM = re.compile(r"\d+\.\s*$")


@dataclass
class Line:
    """Glyph runs sharing a baseline bucket."""
    y_positions: List[float] = field(default_factory=list)
    font_sizes: List[float] = field(default_factory=list)
    texts: List[str] = field(default_factory=list)

    @property
    def avg_y(self) -> float:
        return float(np.mean(self.y_positions))

    @property
    def avg_font_size(self) -> float:
        return float(np.mean(self.font_sizes))

    @property
    def combined_text(self) -> str:
        return "".join(self.texts)

    def ends_sentence(self) -> bool:
        text = self.combined_text.rstrip()
        return text.endswith((".", ":")) or bool(NUMBERED_ITEM.search(self.combined_text))


def group_into_lines(runs: Iterable[GlyphRun], tolerance: float = 2.0) -> List[Line]:
    """Cluster runs by baseline and return lines from the top of the page down."""
    lines = OrderedDict()
    for run in runs:
        key = line_bucket(run.y, tolerance)
        line = lines.setdefault(key, Line())
        line.y_positions.append(run.y)
        line.font_sizes.append(run.font_size)
        line.texts.append(run.text)
    ordered = sorted(lines.items(), key=lambda item: (-item[1].avg_y, -item[0]))
    return [line for _, line in ordered]


def split_paragraphs(lines: List[Line], config: Optional[SpacingConfig] = None) -> List[List[Line]]:
    """Split top-down lines into paragraphs at spacing or punctuation breaks."""
    config = config or SpacingConfig()
    paragraphs = []
    current = []
    for i, line in enumerate(lines):
        current.append(line)
        end_of_paragraph = i == len(lines) - 1
        if not end_of_paragraph:
            gap = line.avg_y - lines[i + 1].avg_y
            expected = line.avg_font_size
            if gap > expected * config.paragraph_break_factor:
                end_of_paragraph = True
            elif line.ends_sentence() and gap > expected * config.punctuation_break_factor:
                end_of_paragraph = True
        if end_of_paragraph:
            paragraphs.append(current)
            current = []
    return paragraphs


def measure_paragraph(lines: List[Line], number: int,
                      config: Optional[SpacingConfig] = None) -> Optional[ParagraphDetail]:
    """Spacing metrics for one paragraph, or None when it cannot be measured."""
    config = config or SpacingConfig()
    if len(lines) < 2:
        return None

    gaps = []
    for current, following in zip(lines, lines[1:]):
        gap = current.avg_y - following.avg_y
        if 0 < gap < config.max_plausible_gap:
            gaps.append(gap)
    if not gaps:
        return None

    avg_gap = float(np.mean(gaps))
    avg_font_size = float(np.mean([line.avg_font_size for line in lines]))
    ratio = avg_gap / avg_font_size if avg_font_size else 0.0

    sample = " ".join(line.combined_text for line in lines)
    if len(sample) > config.sample_text_length:
        sample = sample[:config.sample_text_length] + "..."

    return ParagraphDetail(
        paragraph_number=number,
        line_gap=avg_gap,
        average_font_size=avg_font_size,
        spacing_ratio=ratio,
        is_acceptable=avg_gap >= config.minimum_line_gap,
        is_single_line_spacing=ratio <= config.single_ratio_max,
        sample_text=sample,
        line_count=len(lines),
    )


class SpacingClassifier:
    """Per-page observer. Construct one per page; do not reuse."""

    def __init__(self, config: Optional[SpacingConfig] = None, layout: Optional[LayoutConfig] = None):
        self.config = config or SpacingConfig()
        self.layout = layout or LayoutConfig()
        self._runs: List[GlyphRun] = []

    def feed(self, run: GlyphRun) -> None:
        self._runs.append(run)

    def result(self) -> SpacingResult:
        if len(self._runs) < 2:
            return SpacingResult(0.0, "Unknown", 0.0, True)

        lines = group_into_lines(self._runs, self.layout.line_tolerance)
        details = []
        for paragraph in split_paragraphs(lines, self.config):
            detail = measure_paragraph(paragraph, len(details) + 1, self.config)
            if detail is not None:
                details.append(detail)

        if not details:
            return SpacingResult(0.0, "Single Line", 1.0, True)
        return self.classify(details)

    def classify(self, details: List[ParagraphDetail]) -> SpacingResult:
        cfg = self.config
        avg_gap = float(np.mean([d.line_gap for d in details]))
        avg_ratio = float(np.mean([d.spacing_ratio for d in details]))
        all_acceptable = all(d.is_acceptable for d in details)
        single_count = sum(1 for d in details if cfg.single_line_min <= d.line_gap < cfg.single_line_max)
        is_single = single_count >= len(details) / 2.0 and all_acceptable

        if all_acceptable:
            suffix = "(All Paragraphs - Acceptable)"
            if cfg.single_line_min <= avg_gap < cfg.single_line_max:
                spacing_type = f"Single Line {suffix}"
            elif cfg.single_line_max <= avg_gap < cfg.double_line_min:
                spacing_type = f"1.5x Line {suffix}"
            elif avg_gap >= cfg.double_line_min:
                spacing_type = f"Double+ Line {suffix}"
            else:
                spacing_type = f"Custom {avg_gap:.1f} pts Line {suffix}"
        else:
            too_tight = sum(1 for d in details if not d.is_acceptable)
            spacing_type = (f"Invalid Spacing ({too_tight}/{len(details)} paragraphs "
                            f"gap < {cfg.minimum_line_gap:g}pts)")

        return SpacingResult(
            average_line_gap=avg_gap,
            spacing_type=spacing_type,
            spacing_ratio=avg_ratio,
            is_single_line_spacing=is_single,
            paragraphs=tuple(details),
        )


def classify_spacing(glyph_runs: Iterable[GlyphRun], config: Optional[SpacingConfig] = None,
                     layout: Optional[LayoutConfig] = None) -> SpacingResult:
    """Classify one page's line spacing."""
    classifier = SpacingClassifier(config, layout)
    for run in glyph_runs:
        classifier.feed(run)
    return classifier.result()
