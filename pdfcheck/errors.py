"""Exceptions raised by pdfcheck."""


class PdfCheckError(Exception):
    pass


class DocumentParseError(PdfCheckError):
    """The document cannot be opened or parsed at all."""


class PageResourceError(PdfCheckError):
    """One page's resources are malformed; the rest of the document continues."""

    def __init__(self, page_number, message):
        super().__init__(f"Page {page_number}: {message}")
        self.page_number = page_number


class OcrUnavailableError(PdfCheckError):
    """The OCR engine cannot be initialized in this process."""


class ComplianceCheckError(PdfCheckError):
    """A compliance validator rejected the document."""


class ImageDecodeError(PdfCheckError):
    """An image's raster data is corrupt or in an unsupported format."""
