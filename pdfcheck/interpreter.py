"""
Content-stream interpretation using PyMuPDF (MuPDF).

Turns each page into positioned glyph runs (PDF user space, y up) plus the raw
image resources it references. Span order is MuPDF's content-stream order;
nothing here tries to reconstruct reading order.
"""

import logging
import re
from typing import Dict, List

import fitz  # PyMuPDF

from .errors import DocumentParseError, PageResourceError
from .models import FontId, GlyphRun, ImageResource, Page

logger = logging.getLogger(__name__)

SUBSET_PREFIX = re.compile(r"^[A-Z]{6}\+")


def base_font_name(name: str) -> str:
    """Font name without the subset tag, e.g. 'ABCDEF+Times-Roman' -> 'Times-Roman'."""
    return SUBSET_PREFIX.sub("", name or "")


def open_document(data: bytes) -> fitz.Document:
    """Open PDF bytes, raising DocumentParseError when that is impossible."""
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise DocumentParseError(f"Cannot open PDF: {e}") from e
    if doc.needs_pass:
        doc.close()
        raise DocumentParseError("PDF is password protected")
    if not doc.is_pdf:
        doc.close()
        raise DocumentParseError("Not a PDF document")
    if doc.page_count == 0:
        doc.close()
        raise DocumentParseError("PDF has no pages")
    return doc


def font_embedding(page: fitz.Page) -> Dict[str, bool]:
    """Map base font name -> embedded flag for fonts in the page resources."""
    fonts = {}
    # (xref, ext, type, basefont, name, encoding, referencer); ext 'n/a' = no font program
    for f in page.get_fonts(full=True):
        if len(f) < 4:
            continue
        embedded = f[1] not in ("n/a", "", None)
        fonts[base_font_name(f[3])] = embedded
    return fonts


def extract_glyph_runs(page: fitz.Page) -> List[GlyphRun]:
    """Glyph runs for one page in content-stream order."""
    height = page.rect.height
    embedded = font_embedding(page)
    raw = page.get_text("dict", sort=False)
    runs = []

    for block in raw.get("blocks", []):
        if block.get("type") != 0:  # text block
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                text = span.get("text", "")
                if not text:
                    continue
                x, y = span["origin"]
                baseline = height - y
                end_x = span["bbox"][2]
                name = base_font_name(span.get("font", ""))
                ascender = span.get("ascender")
                runs.append(GlyphRun(
                    text=text,
                    baseline_start=(x, baseline),
                    baseline_end=(end_x, baseline),
                    font=FontId(
                        name=name,
                        size=span.get("size", 0.0),
                        embedded=embedded.get(name, False),
                        ascender=ascender if ascender and ascender > 0 else None,
                    ),
                ))
    return runs


def extract_images(doc: fitz.Document, page: fitz.Page) -> List[ImageResource]:
    """Raw image resources of a page, in resource order. Bad images are skipped."""
    images = []
    for img in page.get_images(full=True):
        xref = img[0]
        name = img[7] if len(img) > 7 else f"xref{xref}"
        try:
            info = doc.extract_image(xref)
        except Exception as e:
            logger.warning("Page %d: cannot extract image %s: %s", page.number + 1, name, e)
            continue
        if not info or not info.get("image"):
            logger.warning("Page %d: no image bytes for %s", page.number + 1, name)
            continue
        images.append(ImageResource(
            data=info["image"],
            width=info.get("width", 0),
            height=info.get("height", 0),
            name=name,
            ext=info.get("ext", ""),
        ))
    return images


def read_page(doc: fitz.Document, index: int) -> Page:
    """
    Interpret page `index` (0-based).

    A page that cannot be loaded raises PageResourceError. Text or image
    resources that fail to parse are recovered here: the page is returned
    with `degraded` set and whatever could be read.
    """
    try:
        page = doc[index]
        rect = page.rect  # rotation-adjusted
    except Exception as e:
        raise PageResourceError(index + 1, f"cannot load page: {e}") from e

    result = Page(number=index + 1, width=rect.width, height=rect.height, rotation=page.rotation)

    try:
        result.glyph_runs = extract_glyph_runs(page)
        result.text = page.get_text("text")
    except Exception as e:
        logger.warning("Page %d: text resources could not be parsed: %s", index + 1, e)
        result.glyph_runs = []
        result.degraded = True

    try:
        result.images = extract_images(doc, page)
    except Exception as e:
        logger.warning("Page %d: image resources could not be listed: %s", index + 1, e)

    return result
