from pdfcheck.symbols import describe_symbol, is_cjk, is_special_symbol, normalize_symbols


def test_named_symbols():
    assert describe_symbol("●") == "[BULLET]"
    assert describe_symbol("✓") == "[CHECKMARK]"


def test_private_use_glyphs_are_wingdings():
    assert describe_symbol("\uf0a7") == "[WINGDING-F0A7]"


def test_unnamed_symbol_gets_code_point():
    assert describe_symbol("★") == "[SYMBOL-2605]"


def test_normalize_replaces_symbols_and_control_characters():
    text = "● Item one\x07done\n"
    assert normalize_symbols(text) == "[BULLET] Item one done"


def test_cjk_is_preserved():
    assert is_cjk("中")
    assert not is_special_symbol("中")
    assert normalize_symbols("中文 text") == "中文 text"


def test_empty_text_is_returned_unchanged():
    assert normalize_symbols("") == ""
    assert normalize_symbols(None) is None
