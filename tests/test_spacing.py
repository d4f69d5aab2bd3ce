"""Line clustering, paragraph segmentation and spacing classification."""

import pytest
from conftest import make_run

from pdfcheck.config import SpacingConfig
from pdfcheck.spacing import classify_spacing, group_into_lines, measure_paragraph, split_paragraphs


def paragraph(lines, gap, size=12.0, top=700.0, text="text"):
    return [make_run(text, 72, top - i * gap, size=size) for i in range(lines)]


class TestEdgeCases:

    def test_empty_page_is_unknown(self):
        result = classify_spacing([])
        assert result.spacing_type == "Unknown"
        assert result.spacing_ratio == 0
        assert result.is_single_line_spacing is True
        assert result.paragraphs == ()

    def test_single_run_is_unknown(self):
        assert classify_spacing([make_run("alone", 72, 700)]).spacing_type == "Unknown"

    def test_single_line_defaults_to_single_spacing(self):
        runs = [make_run("Hello", 72, 700), make_run("world", 110, 700)]
        result = classify_spacing(runs)
        assert result.spacing_type == "Single Line"
        assert result.spacing_ratio == 1.0
        assert result.paragraphs == ()


class TestScenarios:

    def test_fourteen_point_gap_is_acceptable_single_spacing(self):
        result = classify_spacing(paragraph(2, 14))
        detail = result.paragraphs[0]
        assert detail.spacing_ratio == pytest.approx(1.1667, abs=1e-3)
        assert detail.is_acceptable
        assert result.is_single_line_spacing
        assert "Single Line" in result.spacing_type
        assert "Acceptable" in result.spacing_type

    def test_six_point_gap_is_invalid(self):
        result = classify_spacing(paragraph(2, 6))
        assert result.paragraphs[0].is_acceptable is False
        assert "Invalid Spacing (1/1 paragraphs gap < 12pts)" in result.spacing_type
        assert result.is_single_line_spacing is False

    @pytest.mark.parametrize("gap,size", [(8, 10), (13, 12), (15, 12), (20, 12), (14, 10), (12, 12)])
    def test_uniform_paragraph_ratio(self, gap, size):
        result = classify_spacing(paragraph(4, gap, size=size))
        assert len(result.paragraphs) == 1
        detail = result.paragraphs[0]
        assert detail.spacing_ratio == pytest.approx(gap / size, abs=1e-3)
        assert detail.is_acceptable == (gap >= 12.0)
        assert detail.line_count == 4

    def test_one_and_a_half_spacing(self):
        result = classify_spacing(paragraph(3, 20))
        assert result.spacing_type == "1.5x Line (All Paragraphs - Acceptable)"
        assert result.is_single_line_spacing is False

    def test_double_spacing(self):
        result = classify_spacing(paragraph(3, 26, size=16))
        assert result.spacing_type.startswith("Double+ Line")

    def test_custom_gap_label(self):
        config = SpacingConfig(minimum_line_gap=10.0)
        result = classify_spacing(paragraph(3, 11, size=10), config)
        assert result.spacing_type == "Custom 11.0 pts Line (All Paragraphs - Acceptable)"


class TestParagraphs:

    def test_lines_are_sorted_top_down_and_merged_by_baseline(self):
        runs = [make_run("b", 72, 686), make_run("a1", 72, 700), make_run("a2", 90, 700.5)]
        lines = group_into_lines(runs)
        assert [line.combined_text for line in lines] == ["a1a2", "b"]
        assert lines[0].avg_y == pytest.approx(700.25)

    def test_large_gap_splits_paragraphs(self):
        runs = paragraph(3, 14) + paragraph(3, 14, top=630)
        result = classify_spacing(runs)
        assert len(result.paragraphs) == 2
        assert [p.paragraph_number for p in result.paragraphs] == [1, 2]

    def test_sentence_end_with_moderate_gap_splits(self):
        runs = [
            make_run("first line", 72, 700),
            make_run("ends here.", 72, 686),
            make_run("new paragraph", 72, 668),
            make_run("continues", 72, 654),
        ]
        result = classify_spacing(runs)
        assert [p.line_count for p in result.paragraphs] == [2, 2]

    def test_moderate_gap_without_punctuation_does_not_split(self):
        runs = [
            make_run("first line", 72, 700),
            make_run("no stop", 72, 686),
            make_run("same paragraph", 72, 668),
        ]
        lines = group_into_lines(runs)
        assert len(split_paragraphs(lines)) == 1

    def test_numbered_item_counts_as_sentence_end(self):
        runs = [make_run("Step 1.", 72, 700), make_run("Details", 72, 682)]
        lines = group_into_lines(runs)
        assert len(split_paragraphs(lines)) == 2

    def test_sample_text_is_truncated(self):
        runs = paragraph(2, 14, text="x" * 80)
        detail = classify_spacing(runs).paragraphs[0]
        assert detail.sample_text.endswith("...")
        assert len(detail.sample_text) == 103

    def test_majority_single_paragraphs(self):
        runs = paragraph(3, 14) + paragraph(3, 20, top=600)
        result = classify_spacing(runs)
        assert len(result.paragraphs) == 2
        assert result.is_single_line_spacing
        assert result.average_line_gap == pytest.approx(17.0)
        assert result.spacing_type.startswith("Single Line")


class TestPlausibleGaps:
    # 60pt type keeps lines up to 108pt apart in one paragraph

    def test_large_gap_below_limit_counts(self):
        result = classify_spacing(paragraph(2, 95, size=60))
        detail = result.paragraphs[0]
        assert detail.line_gap == pytest.approx(95)
        assert detail.spacing_ratio == pytest.approx(95 / 60, abs=1e-3)

    def test_implausible_gaps_are_left_out_of_the_average(self):
        runs = paragraph(2, 14) + [make_run("far", 72, 566)]
        detail = measure_paragraph(group_into_lines(runs), 1)
        assert detail.line_gap == pytest.approx(14)
        assert detail.line_count == 3

    @pytest.mark.parametrize("gap", [100, 105])
    def test_paragraph_without_plausible_gaps(self, gap):
        runs = paragraph(3, gap, size=60)
        lines = group_into_lines(runs)
        assert len(split_paragraphs(lines)) == 1
        assert measure_paragraph(lines, 1) is None

        result = classify_spacing(runs)
        assert result.paragraphs == ()
        assert result.spacing_type == "Single Line"
        assert result.spacing_ratio == 1.0
        assert result.is_single_line_spacing is True
