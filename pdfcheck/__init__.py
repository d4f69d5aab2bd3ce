"""Layout reconstruction and compliance checks for paginated PDF documents."""

from .analyzer import DocumentAnalyzer, analyze
from .config import AnalyzerConfig, load_config
from .errors import (ComplianceCheckError, DocumentParseError, ImageDecodeError, OcrUnavailableError,
                     PageResourceError)
from .margins import infer_margins
from .segmenter import segment
from .spacing import classify_spacing

__version__ = "0.1.0"

__all__ = [
    "AnalyzerConfig",
    "ComplianceCheckError",
    "DocumentAnalyzer",
    "DocumentParseError",
    "ImageDecodeError",
    "OcrUnavailableError",
    "PageResourceError",
    "analyze",
    "classify_spacing",
    "infer_margins",
    "load_config",
    "segment",
]
