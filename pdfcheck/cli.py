#!/usr/bin/env python3
"""
Document layout compliance checks using PyMuPDF (MuPDF):
- Page margins (left/right/bottom from text extents, density-based top)
- Font family, size and embedding per text run
- Paragraph line spacing classification
- Text from raster images via Tesseract OCR
- PDF/A and PDF/X conformance (advisory)

Usage:
  pdfcheck thesis.pdf --json thesis_report.json
  pdfcheck submissions/ --output-dir output
"""

import argparse
import glob
import json
import logging
import os
from datetime import datetime

from .analyzer import DocumentAnalyzer
from .config import load_config
from .errors import DocumentParseError
from .logger import setup_logger
from .rules import document_issues, evaluate, summarize

logger = logging.getLogger("pdfcheck")


def main(argv=None):
    ap = argparse.ArgumentParser(description="PDF layout compliance checker - margins, fonts, line spacing")
    ap.add_argument("pdf", help="Input PDF file or directory containing PDFs")
    ap.add_argument("--config", help="YAML configuration file")
    ap.add_argument("--json", help="Write JSON report here (ignored in batch mode)")
    ap.add_argument("--no-ocr", action="store_true", help="Disable OCR of embedded images")
    ap.add_argument("--batch", action="store_true", help="Batch mode: process all PDFs in specified directory")
    ap.add_argument("--output-dir", default="output", help="Output directory for batch mode (default: output)")
    args = ap.parse_args(argv)

    config = load_config(args.config)
    if args.no_ocr:
        config.ocr.enabled = False
    setup_logger("pdfcheck", config.log_file, config.log_level)

    analyzer = DocumentAnalyzer(config)

    if args.batch or os.path.isdir(args.pdf):
        return batch_process_pdfs(args, analyzer)
    report = process_single_pdf(args.pdf, analyzer, args.json)
    return 0 if report and report["summary"]["ok"] else 1


def build_report(result, config):
    page_issues = evaluate(result, config)
    doc_issues = document_issues(result)
    return {
        "file": result.file_name,
        "pages": result.page_count,
        "analysis": result.to_dict(),
        "issues": {str(k): v for k, v in page_issues.items()},
        "document_issues": doc_issues,
        "summary": summarize(page_issues, doc_issues),
    }


def process_single_pdf(path, analyzer, json_path=None, verbose=True):
    """Process a single PDF file. Returns the report, or None if the PDF cannot be opened."""
    try:
        result = analyzer.analyze_file(path)
    except DocumentParseError as e:
        logger.error("Cannot analyze %s: %s", path, e)
        if verbose:
            print(f"\n✗ {path}: {e}")
        return None

    report = build_report(result, analyzer.config)

    if json_path:
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)

    if verbose:
        print_report(report, result)
    return report


def print_report(report, result):
    summary = report["summary"]
    print(f"\n=== PDF Layout Report for {report['file']} ===")
    print(f"Pages: {report['pages']}")
    print(f"PDF/A compliant: {'yes' if result.pdf_a_compliant else 'no'}")
    print(f"PDF/X compliant: {'yes' if result.pdf_x_compliant else 'no'} (advisory)")

    for page_number in sorted(result.margins):
        m = result.margins[page_number]
        s = result.spacing[page_number]
        if m.available:
            margins = f"L {m.left:.2f} T {m.top:.2f} R {m.right:.2f} B {m.bottom:.2f} cm"
        else:
            margins = "unavailable"
        print(f"  Page {page_number}: margins {margins}; spacing {s.spacing_type}")

    if result.degraded_pages:
        print(f"Degraded pages: {', '.join(str(p) for p in result.degraded_pages)}")

    if summary["issue_breakdown"]:
        print("\nIssue breakdown:")
        for issue_type, count in sorted(summary["issue_breakdown"].items(), key=lambda x: x[1], reverse=True)[:10]:
            print(f"  {issue_type}: {count}")

    if summary["ok"]:
        print("\n✓ No issues found - PDF appears to meet the layout rules")
    else:
        print(f"\n⚠ {summary['total_issues']} issues found - see detailed report for specifics")


def batch_process_pdfs(args, analyzer):
    """Process all PDFs in a directory with organized output structure"""
    input_dir = args.pdf if os.path.isdir(args.pdf) else "."
    pdf_files = sorted(glob.glob(os.path.join(input_dir, "*.pdf")))

    if not pdf_files:
        print(f"No PDF files found in {input_dir}")
        return 1

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    batch_dir = os.path.join(args.output_dir, f"batch_{timestamp}")
    reports_dir = os.path.join(batch_dir, "reports")
    summary_dir = os.path.join(batch_dir, "summary")
    os.makedirs(reports_dir, exist_ok=True)
    os.makedirs(summary_dir, exist_ok=True)

    print(f"\n=== BATCH PDF LAYOUT CHECK ===")
    print(f"Input directory: {input_dir}")
    print(f"Output directory: {batch_dir}")
    print(f"Found {len(pdf_files)} PDF files")

    batch_summary = {
        "timestamp": timestamp,
        "input_directory": input_dir,
        "output_directory": batch_dir,
        "total_files": len(pdf_files),
        "processed_files": 0,
        "failed_files": 0,
        "total_issues": 0,
        "issue_breakdown": {},
        "files": []
    }

    for i, pdf_path in enumerate(pdf_files, 1):
        filename = os.path.basename(pdf_path)
        base_name = os.path.splitext(filename)[0]
        print(f"\n[{i}/{len(pdf_files)}] Processing: {filename}")

        json_path = os.path.join(reports_dir, f"{base_name}_report.json")
        report = process_single_pdf(pdf_path, analyzer, json_path, verbose=False)
        if report is None:
            batch_summary["failed_files"] += 1
            batch_summary["files"].append({"filename": filename, "status": "error", "error": "Cannot open PDF"})
            print("  ✗ Failed to analyze")
            continue

        summary = report["summary"]
        batch_summary["processed_files"] += 1
        batch_summary["total_issues"] += summary["total_issues"]
        for issue_type, count in summary["issue_breakdown"].items():
            batch_summary["issue_breakdown"][issue_type] = batch_summary["issue_breakdown"].get(issue_type, 0) + count
        batch_summary["files"].append({
            "filename": filename,
            "status": "success",
            "total_issues": summary["total_issues"],
            "pages": report["pages"],
            "pages_with_issues": summary["pages_with_issues"],
            "ok": summary["ok"],
            "issue_breakdown": summary["issue_breakdown"],
            "degraded_pages": report["analysis"]["degradedPages"],
        })
        status_icon = "✓" if summary["ok"] else "⚠"
        print(f"  {status_icon} {summary['total_issues']} issues found ({report['pages']} pages)")

    with open(os.path.join(summary_dir, "batch_summary.json"), "w", encoding="utf-8") as f:
        json.dump(batch_summary, f, indent=2)
    generate_batch_summary_text(batch_summary, os.path.join(summary_dir, "batch_summary.txt"))

    print(f"\n=== BATCH PROCESSING COMPLETE ===")
    print(f"Processed: {batch_summary['processed_files']}/{batch_summary['total_files']} files")
    print(f"Failed: {batch_summary['failed_files']} files")
    print(f"Total issues found: {batch_summary['total_issues']}")
    print(f"\nResults saved to: {batch_dir}")

    if batch_summary["failed_files"]:
        return 1
    return 0 if batch_summary["total_issues"] == 0 else 1


def generate_batch_summary_text(batch_summary, output_file):
    """Write the batch summary as text: totals, issue types, then one line per file."""
    lines = [
        "PDFCHECK BATCH SUMMARY",
        f"Run {batch_summary['timestamp']} on {batch_summary['input_directory']}",
        f"Reports in {batch_summary['output_directory']}",
        "",
        f"Files analyzed: {batch_summary['processed_files']}/{batch_summary['total_files']}"
        f" ({batch_summary['failed_files']} could not be opened)",
        f"Issues: {batch_summary['total_issues']}",
    ]

    breakdown = batch_summary.get("issue_breakdown", {})
    if breakdown:
        lines.append("")
        lines.append("Issues by type:")
        for issue_type, count in sorted(breakdown.items(), key=lambda x: (-x[1], x[0])):
            lines.append(f"  {issue_type:<28} {count}")

    lines.append("")
    lines.append("Files:")
    for file_info in batch_summary["files"]:
        filename = file_info["filename"]
        if file_info["status"] != "success":
            lines.append(f"  ERROR  {filename}: {file_info.get('error', 'Unknown error')}")
            continue
        if file_info["ok"]:
            lines.append(f"  PASS   {filename} ({file_info['pages']} pages)")
        else:
            lines.append(f"  FAIL   {filename}: {file_info['total_issues']} issues on "
                         f"{file_info['pages_with_issues']}/{file_info['pages']} pages")
        if file_info.get("degraded_pages"):
            pages = ", ".join(str(p) for p in file_info["degraded_pages"])
            lines.append(f"         degraded pages: {pages}")

    with open(output_file, "w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")


if __name__ == "__main__":
    raise SystemExit(main())
