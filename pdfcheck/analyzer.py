"""
Document analysis entry point.

Each page is interpreted once and its glyph runs are fed, in a single pass, to
three observers created fresh for that page: the text-run segmenter, the
margin inferencer and the spacing classifier. After the last page, image OCR
is fused into the page text and the compliance checks run.
"""

import logging
import os
from typing import Dict, List, Optional, Tuple

from .compliance import check_pdfa_compliance, check_pdfx_compliance
from .config import AnalyzerConfig
from .errors import PageResourceError
from .fusion import fuse, ocr_page_images
from .interpreter import open_document, read_page
from .margins import MarginInferencer
from .models import (AnalysisResult, ImageResource, ImageTextEntry, MarginResult, Page, PageInfo,
                     SpacingResult, TextRun)
from .ocr import shared_ocr
from .segmenter import TextRunSegmenter
from .spacing import SpacingClassifier

logger = logging.getLogger(__name__)

UNKNOWN_SPACING = SpacingResult(0.0, "Unknown", 0.0, True)


class DocumentAnalyzer:
    """
    Analyze PDF documents against the layout rules.

    Args:
        config: thresholds and options; defaults when omitted
        ocr: object with available() and extract_text(image); defaults to the
            process-wide Tesseract capability when OCR is enabled
        pdfa_validator: object with validate(doc, catalog_xref)
    """

    def __init__(self, config: Optional[AnalyzerConfig] = None, ocr=None, pdfa_validator=None):
        self.config = config or AnalyzerConfig()
        if ocr is None and self.config.ocr.enabled:
            ocr = shared_ocr(self.config.ocr)
        self.ocr = ocr
        self.pdfa_validator = pdfa_validator

    def analyze_file(self, path: str) -> AnalysisResult:
        with open(path, "rb") as f:
            data = f.read()
        return self.analyze(data, os.path.basename(path))

    def analyze(self, data: bytes, file_name: str = "") -> AnalysisResult:
        """Analyze PDF bytes. Raises DocumentParseError if the PDF cannot be opened."""
        text_runs: Dict[int, List[TextRun]] = {}
        margins: Dict[int, MarginResult] = {}
        spacing: Dict[int, SpacingResult] = {}
        page_sizes: Dict[int, PageInfo] = {}
        page_text: Dict[int, str] = {}
        page_images: Dict[int, List[ImageResource]] = {}
        degraded = []

        with open_document(data) as doc:
            logger.info("Analyzing %s (%d pages)", file_name or "document", doc.page_count)

            for index in range(doc.page_count):
                number = index + 1
                try:
                    page = read_page(doc, index)
                except PageResourceError as e:
                    logger.warning("%s", e)
                    text_runs[number] = []
                    margins[number] = MarginResult.unavailable()
                    spacing[number] = UNKNOWN_SPACING
                    page_sizes[number] = PageInfo(0.0, 0.0)
                    page_text[number] = ""
                    degraded.append(number)
                    continue

                runs, page_margins, page_spacing = self.analyze_page(page)
                text_runs[number] = runs
                margins[number] = page_margins
                spacing[number] = page_spacing
                page_sizes[number] = PageInfo(page.width, page.height, page.rotation)
                page_text[number] = page.text
                page_images[number] = page.images
                if page.degraded:
                    degraded.append(number)

            image_text = self.extract_image_text(page_images)
            combined_text, text_runs = fuse(page_text, text_runs, image_text)

            pdf_a = check_pdfa_compliance(doc, self.pdfa_validator)
            pdf_x = check_pdfx_compliance(doc)
            page_count = doc.page_count

        return AnalysisResult(
            file_name=file_name,
            page_count=page_count,
            text_runs=text_runs,
            margins=margins,
            spacing=spacing,
            page_sizes=page_sizes,
            page_text=page_text,
            combined_text=combined_text,
            image_text=image_text,
            pdf_a_compliant=pdf_a,
            pdf_x_compliant=pdf_x,
            degraded_pages=tuple(degraded),
        )

    def analyze_page(self, page: Page) -> Tuple[List[TextRun], MarginResult, SpacingResult]:
        """Run the three per-page observers over one pass of the page's glyph runs."""
        cfg = self.config
        segmenter = TextRunSegmenter(cfg.layout)
        inferencer = MarginInferencer((page.width, page.height), cfg.margins)
        classifier = SpacingClassifier(cfg.spacing, cfg.layout)
        margin_failed = page.degraded

        for run in page.glyph_runs:
            segmenter.feed(run)
            classifier.feed(run)
            if not margin_failed:
                try:
                    inferencer.feed(run)
                except Exception as e:
                    logger.warning("Page %d: margin analysis failed: %s", page.number, e)
                    margin_failed = True

        page_margins = MarginResult.unavailable() if margin_failed else inferencer.result()
        return segmenter.result(), page_margins, classifier.result()

    def extract_image_text(self, page_images: Dict[int, List[ImageResource]]) -> Dict[int, List[ImageTextEntry]]:
        image_text = {}
        for number in sorted(page_images):
            entries = ocr_page_images(page_images[number], self.ocr, number, self.config.ocr)
            if entries:
                image_text[number] = entries
        return image_text


def analyze(data: bytes, config: Optional[AnalyzerConfig] = None, ocr=None,
            file_name: str = "") -> AnalysisResult:
    """Analyze PDF bytes with a fresh DocumentAnalyzer."""
    return DocumentAnalyzer(config, ocr).analyze(data, file_name)
