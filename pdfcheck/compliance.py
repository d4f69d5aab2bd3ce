"""
PDF/A and PDF/X conformance checks.

PDF/A is delegated to a structural validator; PDF/X is a local heuristic
(XMP identifier, embedded fonts, CMYK/Gray color spaces). Both are advisory
and never raise: any failure means "not compliant".
"""

import logging
import re
from typing import List, Tuple

import fitz  # PyMuPDF

from .errors import ComplianceCheckError

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"<<|>>|\[|\]|/[^\s/\[\]<>()]*|\([^)]*\)|<[0-9A-Fa-f\s]*>|[^\s/\[\]<>()]+")
_INT = re.compile(r"^\d+$")


def pdf_dict_keys(text: str) -> List[str]:
    """
    Top-level key names of a PDF dictionary given in source form.

    Only simple string literals are tokenized correctly: a `(...)` string with
    nested or escaped parentheses ends at its first `)`. Resource dictionaries
    such as /ColorSpace hold names, arrays and references, so this is enough
    for them.
    """
    tokens = _TOKEN.findall(text or "")
    keys = []
    depth = 0
    expect_key = True
    i = 0
    while i < len(tokens):
        tok = tokens[i]
        if tok in ("<<", "["):
            depth += 1
            if depth == 2 and not expect_key:
                # nested value: skip to its end
                nested = 1
                while nested and i + 1 < len(tokens):
                    i += 1
                    if tokens[i] in ("<<", "["):
                        nested += 1
                    elif tokens[i] in (">>", "]"):
                        nested -= 1
                depth -= 1
                expect_key = True
        elif tok in (">>", "]"):
            depth -= 1
        elif depth == 1 and expect_key and tok.startswith("/"):
            keys.append(tok[1:])
            expect_key = False
        elif depth == 1 and not expect_key:
            if _INT.match(tok) and i + 2 < len(tokens) and _INT.match(tokens[i + 1]) and tokens[i + 2] == "R":
                i += 2  # indirect reference
            expect_key = True
        i += 1
    return keys


def resolve(doc: fitz.Document, kind: str, value: str) -> str:
    """Source text of an object value, following one indirect reference."""
    if kind == "xref":
        return doc.xref_object(int(value.split()[0]), compressed=True)
    return value


def xmp_metadata(doc: fitz.Document) -> str:
    try:
        return doc.get_xml_metadata() or ""
    except Exception:
        logger.debug("XMP metadata could not be read", exc_info=True)
        return ""


def unembedded_fonts(doc: fitz.Document) -> List[Tuple[int, str]]:
    """(page number, font name) for fonts without an embedded font program."""
    missing = []
    for page in doc:
        for f in page.get_fonts(full=True):
            if f[1] == "n/a":
                missing.append((page.number + 1, f[3]))
    return missing


def page_color_spaces(doc: fitz.Document, page: fitz.Page) -> List[Tuple[str, str]]:
    """(resource name, resolved definition) for each /ColorSpace resource of a page."""
    kind, value = doc.xref_get_key(page.xref, "Resources/ColorSpace")
    if kind in ("null", "none"):
        return []
    if kind == "xref":
        cs_xref = int(value.split()[0])
        entries = []
        for name in doc.xref_get_keys(cs_xref):
            sub_kind, sub_value = doc.xref_get_key(cs_xref, name)
            entries.append((name, resolve(doc, sub_kind, sub_value)))
        return entries
    entries = []
    for name in pdf_dict_keys(value):
        sub_kind, sub_value = doc.xref_get_key(page.xref, f"Resources/ColorSpace/{name}")
        entries.append((name, resolve(doc, sub_kind, sub_value)))
    return entries


def non_print_color_spaces(doc: fitz.Document) -> List[Tuple[int, str]]:
    bad = []
    for page in doc:
        for name, definition in page_color_spaces(doc, page):
            if "DeviceCMYK" not in definition and "DeviceGray" not in definition:
                bad.append((page.number + 1, f"{name}: {definition}"))
    return bad


class PdfA1bValidator:
    """
    Thin structural PDF/A-1b check.

    Raises ComplianceCheckError naming the first violated requirement.
    """

    def validate(self, doc: fitz.Document, catalog_xref: int) -> None:
        if doc.is_encrypted:
            raise ComplianceCheckError("Encryption is not permitted")

        kind, _ = doc.xref_get_key(catalog_xref, "Metadata")
        xmp = xmp_metadata(doc)
        if kind == "null" or not xmp:
            raise ComplianceCheckError("Missing XMP metadata stream")
        if "pdfaid:part" not in xmp:
            raise ComplianceCheckError("XMP metadata has no PDF/A identification")

        kind, _ = doc.xref_get_key(catalog_xref, "OutputIntents")
        if kind == "null":
            raise ComplianceCheckError("Missing OutputIntents")

        missing = unembedded_fonts(doc)
        if missing:
            page_no, name = missing[0]
            raise ComplianceCheckError(f"Font not embedded on page {page_no}: {name}")


def check_pdfa_compliance(doc: fitz.Document, validator=None) -> bool:
    """Run the structural validator against the catalog; any exception fails."""
    validator = validator or PdfA1bValidator()
    try:
        validator.validate(doc, doc.pdf_catalog())
    except Exception as e:
        logger.debug("PDF is NOT PDF/A compliant: %s", e)
        return False
    logger.debug("PDF is PDF/A compliant")
    return True


def check_pdfx_compliance(doc: fitz.Document) -> bool:
    """Heuristic PDF/X check: identifier in XMP, embedded fonts, CMYK/Gray only."""
    try:
        xmp = xmp_metadata(doc)
        if not xmp:
            logger.debug("No XMP metadata found in PDF")
            return False
        has_conformance = "PDF/X" in xmp or "pdfxid:part" in xmp
        missing_fonts = unembedded_fonts(doc)
        bad_spaces = non_print_color_spaces(doc)
    except Exception as e:
        logger.error("Error checking PDF/X compliance: %s", e)
        return False

    if has_conformance and not missing_fonts and not bad_spaces:
        logger.debug("PDF is PDF/X compliant")
        return True

    reasons = []
    if not has_conformance:
        reasons.append("Missing PDF/X metadata")
    if missing_fonts:
        reasons.append("Not all fonts are embedded")
    if bad_spaces:
        reasons.append(f"Invalid color spaces found ({bad_spaces[0][1]})")
    logger.debug("PDF is NOT PDF/X compliant: %s", "; ".join(reasons))
    return False
