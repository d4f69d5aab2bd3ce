"""
Fusion of page text with OCR text from the page's raster images.
"""

import logging
from typing import Dict, List, Optional

from .config import OcrConfig
from .models import (ImageResource, ImageTextEntry, NO_TEXT_FONT_NAME, NO_TEXT_SENTINEL, OCR_FONT_NAME,
                     PROCESSING_ERROR_SENTINEL, TextRun)
from .symbols import normalize_symbols

logger = logging.getLogger(__name__)

IMAGE_SECTION_SEPARATOR = "\n\n--- Text from Images ---\n"
DISPLAY_LENGTH = 100


def is_decorative(image: ImageResource, config: OcrConfig) -> bool:
    """Images under the size floor are assumed to hold no readable text."""
    return image.width < config.min_image_width or image.height < config.min_image_height


def ocr_page_images(images: List[ImageResource], ocr, page_number: int,
                    config: Optional[OcrConfig] = None) -> List[ImageTextEntry]:
    """
    OCR each image of a page in detection order.

    Returns an empty list when the OCR capability is unavailable; otherwise
    one entry per image, using the sentinels for skipped, textless and failed
    images.
    """
    config = config or OcrConfig()
    if not images or ocr is None or not ocr.available():
        return []

    entries = []
    for index, image in enumerate(images, 1):
        if is_decorative(image, config):
            logger.debug("Skipping small image '%s' on page %d: %dx%d",
                         image.name, page_number, image.width, image.height)
            entries.append(ImageTextEntry(index, NO_TEXT_SENTINEL))
            continue
        try:
            text = ocr.extract_text(image)
        except Exception as e:
            logger.warning("Error processing image '%s' on page %d: %s", image.name, page_number, e)
            entries.append(ImageTextEntry(index, PROCESSING_ERROR_SENTINEL))
            continue
        text = normalize_symbols(text.strip()) if text else ""
        entries.append(ImageTextEntry(index, text or NO_TEXT_SENTINEL))
    return entries


def image_text_runs(entries: List[ImageTextEntry]) -> List[TextRun]:
    """Font-info style entries for images, so 'no image' differs from 'image without text'."""
    runs = []
    for entry in entries:
        if entry.has_text:
            display = entry.ocr_text
            if len(display) > DISPLAY_LENGTH:
                display = display[:DISPLAY_LENGTH] + "..."
            runs.append(TextRun(f"[IMAGE {entry.index} OCR]: {display}", OCR_FONT_NAME, 12.0, False))
        else:
            runs.append(TextRun(f"[IMAGE {entry.index} DETECTED]: No readable text content",
                                NO_TEXT_FONT_NAME, 12.0, False))
    return runs


def combine_text(page_text: str, entries: List[ImageTextEntry]) -> str:
    if not entries:
        return page_text
    parts = [page_text]
    if page_text:
        parts.append(IMAGE_SECTION_SEPARATOR)
    parts.append("\n\n".join(f"Image {e.index}: {e.ocr_text}" for e in entries))
    return "".join(parts)


def fuse(page_text: Dict[int, str], text_runs: Dict[int, List[TextRun]],
         image_text: Dict[int, List[ImageTextEntry]]):
    """
    Merge OCR results into the per-page views.

    Returns (combined_text, text_runs) as new dicts; inputs are not modified.
    """
    combined = {}
    runs = {}
    for page_number in sorted(set(page_text) | set(text_runs) | set(image_text)):
        entries = image_text.get(page_number, [])
        combined[page_number] = combine_text(page_text.get(page_number, ""), entries)
        runs[page_number] = list(text_runs.get(page_number, [])) + image_text_runs(entries)
    return combined, runs
