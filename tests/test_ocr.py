"""Shared Tesseract capability: lazy init, cached failure, serialized calls."""

import io
import random
import threading
import time

import pytest
from PIL import Image

from pdfcheck.config import OcrConfig
from pdfcheck.errors import ImageDecodeError, OcrUnavailableError
from pdfcheck.fusion import ocr_page_images
from pdfcheck.models import ImageResource, PROCESSING_ERROR_SENTINEL
from pdfcheck.ocr import SharedOcr, TesseractEngine, tesseract_language


class FakeEngine:

    def __init__(self, fail_check=False, error=None, text="scanned"):
        self.fail_check = fail_check
        self.error = error
        self.text = text
        self.checks = 0
        self.active = 0
        self.max_active = 0
        self._counter = threading.Lock()

    def check(self):
        self.checks += 1
        if self.fail_check:
            raise OSError("libtesseract not found")

    def extract_text(self, image):
        with self._counter:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            time.sleep(0.005)
            if self.error is not None:
                raise self.error
            return self.text
        finally:
            with self._counter:
                self.active -= 1


IMAGE = ImageResource(b"raster", 200, 100, "Im0", "png")


@pytest.fixture(autouse=True)
def reset_shared_state():
    SharedOcr.shutdown()
    yield
    SharedOcr.shutdown()


class TestSharedOcr:

    def test_initializes_once(self):
        engine = FakeEngine()
        ocr = SharedOcr(OcrConfig(), engine)
        assert ocr.available()
        assert ocr.available()
        assert engine.checks == 1
        assert ocr.extract_text(IMAGE) == "scanned"

    def test_initialization_is_shared_across_instances(self):
        engine = FakeEngine()
        SharedOcr(OcrConfig(), engine).available()
        other = FakeEngine()
        assert SharedOcr(OcrConfig(), other).available()
        assert other.checks == 0

    def test_failed_initialization_is_cached(self):
        engine = FakeEngine(fail_check=True)
        ocr = SharedOcr(OcrConfig(), engine)
        assert not ocr.available()
        assert not ocr.available()
        assert engine.checks == 1
        with pytest.raises(OcrUnavailableError):
            ocr.extract_text(IMAGE)

    def test_shutdown_allows_retry(self):
        SharedOcr(OcrConfig(), FakeEngine(fail_check=True)).available()
        SharedOcr.shutdown()
        assert SharedOcr(OcrConfig(), FakeEngine()).available()

    def test_disabled_config_is_unavailable(self):
        engine = FakeEngine()
        assert not SharedOcr(OcrConfig(enabled=False), engine).available()
        assert engine.checks == 0

    def test_native_failure_disables_ocr(self):
        ocr = SharedOcr(OcrConfig(), FakeEngine(error=OSError("tesseract crashed")))
        with pytest.raises(OcrUnavailableError):
            ocr.extract_text(IMAGE)
        assert not ocr.available()

    def test_undecodable_image_fails_only_that_image(self):
        ocr = SharedOcr(OcrConfig(), FakeEngine(error=ImageDecodeError("cannot decode image 'Im0'")))
        entries = ocr_page_images([IMAGE], ocr, 1)
        assert entries[0].ocr_text == PROCESSING_ERROR_SENTINEL
        assert ocr.available()

    def test_calls_are_serialized(self):
        engine = FakeEngine()
        ocr = SharedOcr(OcrConfig(), engine)
        results = []

        def work():
            results.append(ocr.extract_text(IMAGE))

        threads = [threading.Thread(target=work) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results == ["scanned"] * 8
        assert engine.max_active == 1


@pytest.mark.parametrize("languages,expected", [
    ("eng", "eng"),
    ("chi_sim", "chi_sim+eng"),
    ("chi_tra", "chi_tra+eng"),
    ("deu+eng", "deu+eng"),
])
def test_tesseract_language(languages, expected):
    assert tesseract_language(languages) == expected


class OfflineTesseract(TesseractEngine):
    """Real decoding path; the binary check is skipped."""

    def check(self):
        pass


def truncated_png(width=300, height=100, cut=200):
    rng = random.Random(11)
    noise = bytes(rng.randrange(256) for _ in range(width * height * 3))
    buf = io.BytesIO()
    Image.frombytes("RGB", (width, height), noise).save(buf, format="PNG")
    return buf.getvalue()[:-cut]


class TestImageDecoding:

    def test_truncated_image_raises_decode_error(self):
        image = ImageResource(truncated_png(), 300, 100, "Im0", "png")
        with pytest.raises(ImageDecodeError):
            OfflineTesseract(OcrConfig()).decode(image)

    def test_corrupt_image_fails_only_that_image(self):
        ocr = SharedOcr(OcrConfig(), OfflineTesseract(OcrConfig()))
        images = [
            ImageResource(truncated_png(), 300, 100, "Im0", "png"),
            ImageResource(b"not an image at all", 300, 100, "Im1", "png"),
        ]

        entries = ocr_page_images(images, ocr, 1)

        assert [e.ocr_text for e in entries] == [PROCESSING_ERROR_SENTINEL, PROCESSING_ERROR_SENTINEL]
        assert ocr.available()
        assert SharedOcr(OcrConfig(), OfflineTesseract(OcrConfig())).available()
