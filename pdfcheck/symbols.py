"""Readable replacements for symbol-font code points in extracted text."""

import unicodedata

SYMBOL_NAMES = {
    0x25CF: "[BULLET]",
    0x25A0: "[SQUARE]",
    0x25B2: "[TRIANGLE]",
    0x2713: "[CHECKMARK]",
    0x2717: "[X-MARK]",
    0x2192: "[RIGHT-ARROW]",
    0x2190: "[LEFT-ARROW]",
}

SYMBOL_RANGES = [
    (0x2700, 0x27BF),  # Dingbats
    (0x2600, 0x26FF),  # Miscellaneous Symbols
    (0x2190, 0x21FF),  # Arrows
    (0x25A0, 0x25FF),  # Geometric Shapes
    (0xF000, 0xF0FF),  # Private Use Area (Wingdings)
]

CJK_RANGES = [
    (0x4E00, 0x9FFF),
    (0x3400, 0x4DBF),
    (0x20000, 0x2A6DF),
]


def _in_ranges(cp, ranges):
    return any(lo <= cp <= hi for lo, hi in ranges)


def is_special_symbol(ch: str) -> bool:
    return _in_ranges(ord(ch), SYMBOL_RANGES)


def is_cjk(ch: str) -> bool:
    return _in_ranges(ord(ch), CJK_RANGES)


def describe_symbol(ch: str) -> str:
    cp = ord(ch)
    if cp in SYMBOL_NAMES:
        return SYMBOL_NAMES[cp]
    if 0xF000 <= cp <= 0xF0FF:
        return f"[WINGDING-{cp:X}]"
    return f"[SYMBOL-{cp:X}]"


def normalize_symbols(text):
    """Replace symbol glyphs with descriptors and control characters with spaces."""
    if not text:
        return text
    out = []
    for ch in text:
        if is_special_symbol(ch):
            out.append(describe_symbol(ch))
        elif is_cjk(ch):
            out.append(ch)
        elif unicodedata.category(ch) == "Cc":
            out.append(" ")
        else:
            out.append(ch)
    return "".join(out).strip()
