"""
OCR capability backed by Tesseract.

The Tesseract engine is treated as one stateful, non-reentrant resource per
process: every OCR call goes through SharedOcr's class-level lock, and a
failed initialization is remembered until SharedOcr.shutdown().
"""

import io
import logging
import threading
from typing import Optional

import pytesseract
from PIL import Image

from .config import OcrConfig
from .errors import ImageDecodeError, OcrUnavailableError
from .models import ImageResource

logger = logging.getLogger(__name__)


def tesseract_language(languages: str) -> str:
    """Chinese models are combined with English for mixed documents."""
    if languages in ("chi_sim", "chi_tra"):
        return f"{languages}+eng"
    return languages


class TesseractEngine:
    """Thin wrapper over pytesseract; decodes raster bytes with Pillow."""

    def __init__(self, config: Optional[OcrConfig] = None):
        self.config = config or OcrConfig()

    def check(self):
        """Raise if the tesseract binary cannot be used."""
        if self.config.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.config.tesseract_cmd
        version = pytesseract.get_tesseract_version()
        logger.info("Tesseract %s available - Language: %s", version, self.config.languages)

    def decode(self, image: ImageResource) -> Image.Image:
        """Fully decoded Pillow image. Corrupt or unknown data raises ImageDecodeError."""
        try:
            img = Image.open(io.BytesIO(image.data))
            img.load()
        except (OSError, SyntaxError) as e:
            raise ImageDecodeError(f"cannot decode image '{image.name}': {e}") from e
        if img.mode not in ("L", "RGB"):
            img = img.convert("RGB")
        return img

    def extract_text(self, image: ImageResource) -> Optional[str]:
        img = self.decode(image)
        try:
            text = pytesseract.image_to_string(
                img,
                lang=tesseract_language(self.config.languages),
                config="--psm 1 --oem 1",
                timeout=self.config.timeout,
            )
        finally:
            img.close()
        text = text.strip() if text else ""
        return text or None


class SharedOcr:
    """Process-wide, mutex-guarded OCR capability with lazy initialization."""

    _lock = threading.Lock()
    _initialized = False
    _failed = False

    def __init__(self, config: Optional[OcrConfig] = None, engine=None):
        self.config = config or OcrConfig()
        self.engine = engine or TesseractEngine(self.config)

    @classmethod
    def shutdown(cls):
        """Forget initialization state, including a cached failure."""
        with cls._lock:
            cls._initialized = False
            cls._failed = False
            logger.info("OCR service cleanup completed")

    def available(self) -> bool:
        return self.config.enabled and self.ensure_initialized()

    def ensure_initialized(self) -> bool:
        cls = type(self)
        if cls._initialized:
            return True
        if cls._failed:
            return False
        with cls._lock:
            if cls._initialized:
                return True
            if cls._failed:
                return False
            logger.info("Initializing Tesseract OCR for first use...")
            try:
                self.engine.check()
            except (pytesseract.TesseractNotFoundError, OSError) as e:
                logger.warning("Tesseract native dependency not found: %s", e)
                cls._failed = True
                return False
            except Exception as e:
                logger.warning("Failed to initialize Tesseract: %s", e)
                cls._failed = True
                return False
            cls._initialized = True
            return True

    def extract_text(self, image: ImageResource) -> Optional[str]:
        """
        OCR one image. Raises OcrUnavailableError once the engine is gone.

        ImageDecodeError and per-call Tesseract errors (pytesseract.TesseractError,
        timeouts) propagate and only fail this image; a missing binary or an OS
        level failure of the tesseract process disables OCR for the process.
        """
        if not self.available():
            raise OcrUnavailableError("Tesseract OCR is not available")
        cls = type(self)
        with cls._lock:
            try:
                return self.engine.extract_text(image)
            except (pytesseract.TesseractNotFoundError, OSError) as e:
                logger.error("Tesseract native failure, disabling OCR: %s", e)
                cls._failed = True
                cls._initialized = False
                raise OcrUnavailableError(str(e)) from e


_shared = None
_shared_lock = threading.Lock()


def shared_ocr(config: Optional[OcrConfig] = None) -> SharedOcr:
    """The process-wide OCR capability, created on first request."""
    global _shared
    with _shared_lock:
        if _shared is None:
            _shared = SharedOcr(config)
        return _shared
