"""
Configuration management for pdfcheck.

Every heuristic threshold used by the layout engine is a named option here so
synthetic fixtures can exercise the engine without code changes.
"""

import yaml
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import List, Optional, Union


@dataclass
class SpacingConfig:
    """Line spacing thresholds (points)."""
    minimum_line_gap: float = 12.0
    single_line_min: float = 12.0
    single_line_max: float = 18.0
    double_line_min: float = 24.0
    single_ratio_max: float = 1.2  # paragraph is single spaced when gap/font <= this
    max_plausible_gap: float = 100.0
    paragraph_break_factor: float = 1.8
    punctuation_break_factor: float = 1.3
    sample_text_length: int = 100


@dataclass
class MarginConfig:
    """Margin minima (cm) and top-margin detector settings."""
    minimum_margin: float = 2.5
    left: float = 2.5
    top: float = 2.5
    right: float = 2.5
    bottom: float = 2.5
    points_to_cm: float = 0.03528
    density_bucket: float = 10.0  # points
    header_zone_ratio: float = 0.9
    max_top_margin: float = 10.0  # cm

    def minimum_for_side(self, side: Optional[str]) -> float:
        if side is None:
            return self.minimum_margin
        return {
            "left": self.left,
            "top": self.top,
            "right": self.right,
            "bottom": self.bottom,
        }.get(side.lower(), self.minimum_margin)


@dataclass
class LayoutConfig:
    """Reading-order and word-join tolerances (points / ratios of font size)."""
    line_tolerance: float = 2.0
    line_break_gap: float = 3.0
    word_gap_ratio: float = 0.5
    punctuation_gap_ratio: float = 0.25


@dataclass
class FontConfig:
    allowed_families: List[str] = field(default_factory=lambda: ["TimesNewRoman", "Times-Roman", "Times New Roman"])
    minimum_size: float = 12.0
    exclude_from_validation: List[str] = field(
        default_factory=lambda: ["OCR-Extracted-From-Image", "Image-Detected-No-Text"])


@dataclass
class OcrConfig:
    enabled: bool = True
    languages: str = "eng"
    tesseract_cmd: Optional[str] = None
    timeout: int = 30  # seconds per image
    min_image_width: int = 50  # pixels
    min_image_height: int = 20


@dataclass
class AnalyzerConfig:
    """Main configuration."""
    spacing: SpacingConfig = field(default_factory=SpacingConfig)
    margins: MarginConfig = field(default_factory=MarginConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    fonts: FontConfig = field(default_factory=FontConfig)
    ocr: OcrConfig = field(default_factory=OcrConfig)
    log_level: str = "INFO"
    log_file: Optional[str] = None


def _merge(section, data):
    """Return a copy of dataclass `section` with known keys from `data` applied."""
    if not isinstance(data, dict):
        return section
    known = {f.name for f in fields(section)}
    return replace(section, **{k: v for k, v in data.items() if k in known})


def load_config(config_path: Optional[Union[str, Path]] = None) -> AnalyzerConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to config.yaml; None or a missing file gives defaults

    Returns:
        AnalyzerConfig instance
    """
    if config_path is None:
        return AnalyzerConfig()
    config_path = Path(config_path)
    if not config_path.exists():
        return AnalyzerConfig()

    with open(config_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    config = AnalyzerConfig()
    return AnalyzerConfig(
        spacing=_merge(config.spacing, data.get('spacing')),
        margins=_merge(config.margins, data.get('margins')),
        layout=_merge(config.layout, data.get('layout')),
        fonts=_merge(config.fonts, data.get('fonts')),
        ocr=_merge(config.ocr, data.get('ocr')),
        log_level=data.get('log_level', config.log_level),
        log_file=data.get('log_file', config.log_file),
    )
