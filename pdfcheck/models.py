"""
Data model shared by the layout engine.

Coordinates follow PDF user space: origin at the bottom-left corner of the
rotation-adjusted page, y growing upward, units in points.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

NO_TEXT_SENTINEL = "[IMAGE DETECTED - NO TEXT]"
PROCESSING_ERROR_SENTINEL = "[IMAGE DETECTED - PROCESSING ERROR]"

OCR_FONT_NAME = "OCR-Extracted-From-Image"
NO_TEXT_FONT_NAME = "Image-Detected-No-Text"


@dataclass(frozen=True)
class FontId:
    """Font identity of a glyph run. Equality is exact: no size rounding."""
    name: str
    size: float
    embedded: bool
    ascender: Optional[float] = field(default=None, compare=False)  # ascender / unitsPerEm


@dataclass(frozen=True)
class GlyphRun:
    """One positioned fragment of text drawn with a single font."""
    text: str
    baseline_start: Tuple[float, float]
    baseline_end: Tuple[float, float]
    font: FontId

    @property
    def x(self) -> float:
        return self.baseline_start[0]

    @property
    def y(self) -> float:
        return self.baseline_start[1]

    @property
    def end_x(self) -> float:
        return self.baseline_end[0]

    @property
    def font_size(self) -> float:
        return self.font.size


@dataclass(frozen=True)
class ImageResource:
    """Raw raster image bytes found in a page's resources (no position)."""
    data: bytes
    width: int = 0
    height: int = 0
    name: str = ""
    ext: str = ""


@dataclass
class Page:
    number: int  # 1-based
    width: float
    height: float
    rotation: int = 0
    glyph_runs: List[GlyphRun] = field(default_factory=list)
    images: List[ImageResource] = field(default_factory=list)
    text: str = ""
    degraded: bool = False


@dataclass(frozen=True)
class TextRun:
    text: str
    font_name: str
    font_size: float
    embedded: bool

    def to_dict(self) -> Dict:
        return {
            "fontName": self.font_name,
            "fontSize": self.font_size,
            "embedded": self.embedded,
            "text": self.text,
        }


class MarginStatus(str, Enum):
    OK = "ok"
    NO_TEXT = "no_text"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class MarginResult:
    """Page margins in centimeters, tagged with how they were obtained."""
    left: float
    top: float
    right: float
    bottom: float
    status: MarginStatus = MarginStatus.OK

    @classmethod
    def no_text(cls) -> "MarginResult":
        return cls(0.0, 0.0, 0.0, 0.0, MarginStatus.NO_TEXT)

    @classmethod
    def unavailable(cls) -> "MarginResult":
        return cls(-1.0, -1.0, -1.0, -1.0, MarginStatus.UNAVAILABLE)

    @property
    def available(self) -> bool:
        return self.status is not MarginStatus.UNAVAILABLE

    def sides(self) -> Dict[str, float]:
        return {"left": self.left, "top": self.top, "right": self.right, "bottom": self.bottom}

    def to_dict(self) -> Dict:
        return {
            "leftMargin": self.left,
            "topMargin": self.top,
            "rightMargin": self.right,
            "bottomMargin": self.bottom,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class ParagraphDetail:
    paragraph_number: int
    line_gap: float
    average_font_size: float
    spacing_ratio: float
    is_acceptable: bool
    is_single_line_spacing: bool
    sample_text: str
    line_count: int

    def to_dict(self) -> Dict:
        return {
            "paragraphNumber": self.paragraph_number,
            "lineGap": self.line_gap,
            "averageFontSize": self.average_font_size,
            "spacingRatio": self.spacing_ratio,
            "acceptable": self.is_acceptable,
            "singleLineSpacing": self.is_single_line_spacing,
            "sampleText": self.sample_text,
            "lineCount": self.line_count,
        }


@dataclass(frozen=True)
class SpacingResult:
    average_line_gap: float
    spacing_type: str
    spacing_ratio: float
    is_single_line_spacing: bool
    paragraphs: Tuple[ParagraphDetail, ...] = ()

    @property
    def all_acceptable(self) -> bool:
        return all(p.is_acceptable for p in self.paragraphs)

    def to_dict(self) -> Dict:
        return {
            "lineSpacing": self.average_line_gap,
            "spacingType": self.spacing_type,
            "spacingRatio": self.spacing_ratio,
            "singleLineSpacing": self.is_single_line_spacing,
            "paragraphDetails": [p.to_dict() for p in self.paragraphs],
        }


@dataclass(frozen=True)
class ImageTextEntry:
    index: int  # 1-based, detection order on the page
    ocr_text: str

    @property
    def has_text(self) -> bool:
        return self.ocr_text not in (NO_TEXT_SENTINEL, PROCESSING_ERROR_SENTINEL) and bool(self.ocr_text.strip())


@dataclass(frozen=True)
class PageInfo:
    width: float
    height: float
    rotation: int = 0

    @property
    def page_size(self) -> str:
        return f"{self.width:.1f}x{self.height:.1f}"

    def to_dict(self) -> Dict:
        return {"width": self.width, "height": self.height, "rotation": self.rotation, "pageSize": self.page_size}


@dataclass(frozen=True)
class AnalysisResult:
    """Per-document result; every map is keyed by 1-based page number."""
    file_name: str
    page_count: int
    text_runs: Dict[int, List[TextRun]]
    margins: Dict[int, MarginResult]
    spacing: Dict[int, SpacingResult]
    page_sizes: Dict[int, PageInfo]
    page_text: Dict[int, str]
    combined_text: Dict[int, str]
    image_text: Dict[int, List[ImageTextEntry]]
    pdf_a_compliant: bool = False
    pdf_x_compliant: bool = False
    degraded_pages: Tuple[int, ...] = ()

    def to_dict(self) -> Dict:
        return {
            "fileName": self.file_name,
            "pages": self.page_count,
            "fontInfo": {str(k): [r.to_dict() for r in v] for k, v in self.text_runs.items()},
            "margins": {str(k): v.to_dict() for k, v in self.margins.items()},
            "pageSizes": {str(k): v.to_dict() for k, v in self.page_sizes.items()},
            "spacing": {str(k): v.to_dict() for k, v in self.spacing.items()},
            "pageText": {str(k): v for k, v in self.page_text.items()},
            "combinedText": {str(k): v for k, v in self.combined_text.items()},
            "imageText": {str(k): [e.ocr_text for e in v] for k, v in self.image_text.items()},
            "pdfACompliant": self.pdf_a_compliant,
            "pdfXCompliant": self.pdf_x_compliant,
            "degradedPages": list(self.degraded_pages),
        }
