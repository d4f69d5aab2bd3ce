"""Shared fixtures: synthetic glyph runs and a fake OCR capability."""

import pytest

from pdfcheck.models import FontId, GlyphRun


def make_run(text, x, y, size=12.0, font="TimesNewRomanPSMT", embedded=True, width=None, ascender=None):
    """A glyph run whose baseline ends `width` points after x (default 0.5em per char)."""
    if width is None:
        width = len(text) * size * 0.5
    return GlyphRun(
        text=text,
        baseline_start=(x, y),
        baseline_end=(x + width, y),
        font=FontId(font, size, embedded, ascender),
    )


class FakeOcr:
    """Records calls; returns canned text per image name."""

    def __init__(self, texts=None, available=True, fail_on=()):
        self.texts = texts or {}
        self._available = available
        self.fail_on = set(fail_on)
        self.calls = []

    def available(self):
        return self._available

    def extract_text(self, image):
        self.calls.append(image.name)
        if image.name in self.fail_on:
            raise RuntimeError("Tesseract process timeout")
        return self.texts.get(image.name)


@pytest.fixture
def run():
    return make_run


@pytest.fixture
def fake_ocr():
    return FakeOcr
