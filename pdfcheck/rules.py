"""
Evaluate an AnalysisResult against the configured submission rules.

Issues use the validator report shape: {"type": ..., "detail": ...}.
"""

from collections import defaultdict
from typing import Dict, List

from .config import AnalyzerConfig
from .models import AnalysisResult, MarginStatus


def check_margins(margins, config: AnalyzerConfig) -> List[Dict]:
    issues = []
    if margins.status is MarginStatus.UNAVAILABLE:
        return [{"type": "margin_unavailable", "detail": "Margins could not be computed for this page"}]
    if margins.status is MarginStatus.NO_TEXT:
        return issues
    for side, value in margins.sides().items():
        required = config.margins.minimum_for_side(side)
        if value < required:
            issues.append({
                "type": "margin_too_small",
                "detail": f"{side.capitalize()} margin {value:.2f}cm is below the required {required:.2f}cm",
            })
    return issues


def is_font_allowed(font_name: str, config: AnalyzerConfig) -> bool:
    if font_name in config.fonts.exclude_from_validation:
        return True
    return any(family in font_name for family in config.fonts.allowed_families)


def check_fonts(text_runs, config: AnalyzerConfig) -> List[Dict]:
    issues = []
    reported = set()
    for run in text_runs:
        if run.font_name in config.fonts.exclude_from_validation:
            continue
        sample = run.text[:50]
        if not is_font_allowed(run.font_name, config) and ("family", run.font_name) not in reported:
            reported.add(("family", run.font_name))
            issues.append({"type": "font_family_not_allowed",
                           "detail": f"Font '{run.font_name}' is not an allowed family: '{sample}'"})
        if run.font_size < config.fonts.minimum_size:
            issues.append({"type": "font_too_small",
                           "detail": f"{run.font_name} {run.font_size:.1f}pt < {config.fonts.minimum_size:g}pt: '{sample}'"})
        if not run.embedded and ("embedded", run.font_name) not in reported:
            reported.add(("embedded", run.font_name))
            issues.append({"type": "font_not_embedded", "detail": f"Font '{run.font_name}' is not embedded"})
    return issues


def check_spacing(spacing, config: AnalyzerConfig) -> List[Dict]:
    if spacing.paragraphs and not spacing.all_acceptable:
        return [{"type": "line_spacing_invalid", "detail": spacing.spacing_type}]
    return []


def evaluate(result: AnalysisResult, config: AnalyzerConfig = None) -> Dict[int, List[Dict]]:
    """Per-page issues; pages without issues are omitted."""
    config = config or AnalyzerConfig()
    issues = {}
    for page_number in sorted(result.margins):
        page_issues = []
        page_issues.extend(check_margins(result.margins[page_number], config))
        page_issues.extend(check_fonts(result.text_runs.get(page_number, []), config))
        if page_number in result.spacing:
            page_issues.extend(check_spacing(result.spacing[page_number], config))
        if page_issues:
            issues[page_number] = page_issues
    return issues


def document_issues(result: AnalysisResult) -> List[Dict]:
    issues = []
    if not result.pdf_a_compliant:
        issues.append({"type": "pdfa_noncompliant", "detail": "Document does not pass the PDF/A check"})
    if not result.pdf_x_compliant:
        issues.append({"type": "pdfx_noncompliant", "detail": "Document does not pass the PDF/X heuristic (advisory)"})
    return issues


def summarize(page_issues: Dict[int, List[Dict]], doc_issues: List[Dict]) -> Dict:
    total = len(doc_issues) + sum(len(v) for v in page_issues.values())
    breakdown = defaultdict(int)
    for issues in page_issues.values():
        for issue in issues:
            breakdown[issue["type"]] += 1
    for issue in doc_issues:
        breakdown[issue["type"]] += 1
    return {
        "total_issues": total,
        "document_issues": len(doc_issues),
        "pages_with_issues": len(page_issues),
        "ok": total == 0,
        "issue_breakdown": dict(breakdown),
    }
