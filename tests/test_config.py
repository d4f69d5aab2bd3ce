from pdfcheck.config import AnalyzerConfig, MarginConfig, load_config


def test_defaults_without_file():
    config = load_config()
    assert config.spacing.minimum_line_gap == 12.0
    assert config.margins.density_bucket == 10.0
    assert config.layout.line_tolerance == 2.0
    assert config.ocr.enabled is True


def test_missing_file_gives_defaults(tmp_path):
    assert load_config(tmp_path / "absent.yaml") == AnalyzerConfig()


def test_yaml_overrides_known_keys(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "spacing:\n"
        "  minimum_line_gap: 10\n"
        "margins:\n"
        "  left: 3.0\n"
        "  unknown_option: 1\n"
        "fonts:\n"
        "  allowed_families: [Arial]\n"
        "ocr:\n"
        "  enabled: false\n"
        "  languages: chi_sim\n"
        "log_level: DEBUG\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.spacing.minimum_line_gap == 10
    assert config.spacing.single_line_max == 18.0
    assert config.margins.left == 3.0
    assert not hasattr(config.margins, "unknown_option")
    assert config.fonts.allowed_families == ["Arial"]
    assert config.ocr.enabled is False
    assert config.ocr.languages == "chi_sim"
    assert config.log_level == "DEBUG"


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == AnalyzerConfig()


def test_minimum_for_side():
    margins = MarginConfig(minimum_margin=2.0, left=3.5)
    assert margins.minimum_for_side("left") == 3.5
    assert margins.minimum_for_side("LEFT") == 3.5
    assert margins.minimum_for_side("top") == 2.5
    assert margins.minimum_for_side("gutter") == 2.0
    assert margins.minimum_for_side(None) == 2.0
