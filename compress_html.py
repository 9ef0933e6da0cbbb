#!/usr/bin/env python3
"""
All-in-one HTML+CSS compressor.

  python compress_html.py input.html [--pdf] [--report]

Stages (each one finishes before the next starts):
  1. parse input.html
  2. replace inline styles with short generated classes (a, b, ..., aa, ...)
  3. minify the generated stylesheet and place it in <head>
  4. minify the HTML and write output.html next to the input
  5. optional: render output.pdf (fixed width, single page, auto height)
  6. optional: write compress_report.json

Options fall back to env (.env is loaded): INPUT_HTML_FILE, OUTPUT_HTML_FILE,
RENDER_PDF, PDF_WIDTH, PDF_TIMEOUT_S, WRITE_REPORT.
"""

import os
import sys
import json
import argparse
from pathlib import Path

from bs4 import BeautifulSoup
from dotenv import load_dotenv

from compress_tools.dedupe_styles import StyleDeduplicator, find_styled_tags
from compress_tools.minify_assets import inject_stylesheet, minify_css, minify_html_text
from compress_tools.render_pdf import DEFAULT_TIMEOUT_S, DEFAULT_WIDTH, render_html_to_pdf


def env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() == "true"


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Deduplicate inline styles into classes, minify HTML/CSS, optionally export PDF.")
    parser.add_argument("input", nargs="?", help="Input HTML file (fallback: env INPUT_HTML_FILE)")
    parser.add_argument("--output", help="Output HTML path (fallback: env OUTPUT_HTML_FILE, default: output.html beside input)")
    parser.add_argument("--pdf", action="store_true", help="Also render output.pdf (fallback: env RENDER_PDF=true)")
    parser.add_argument("--pdf-width", help=f"PDF page width (fallback: env PDF_WIDTH, default {DEFAULT_WIDTH})")
    parser.add_argument("--timeout", type=int, help=f"PDF page load timeout in seconds (fallback: env PDF_TIMEOUT_S, default {DEFAULT_TIMEOUT_S})")
    parser.add_argument("--report", action="store_true", help="Write compress_report.json beside the output (fallback: env WRITE_REPORT=true)")
    return parser.parse_args(argv)


def resolve_config(args) -> dict:
    # CLI > env > default
    input_file = args.input or os.getenv("INPUT_HTML_FILE")
    if not input_file:
        raise SystemExit("Missing input: pass input.html or set INPUT_HTML_FILE in .env")
    input_path = Path(input_file).resolve()

    output_file = args.output or os.getenv("OUTPUT_HTML_FILE")
    output_path = Path(output_file).resolve() if output_file else input_path.parent / "output.html"

    timeout = args.timeout
    if timeout is None:
        try:
            timeout = int(os.getenv("PDF_TIMEOUT_S", str(DEFAULT_TIMEOUT_S)))
        except ValueError:
            timeout = DEFAULT_TIMEOUT_S

    return {
        "input": input_path,
        "output": output_path,
        "pdf": args.pdf or env_flag("RENDER_PDF"),
        "pdf_width": args.pdf_width or os.getenv("PDF_WIDTH", DEFAULT_WIDTH),
        "timeout": timeout,
        "report": args.report or env_flag("WRITE_REPORT"),
    }


def compress_document(html: str):
    """Return (minified html, stats) for one document."""
    soup = BeautifulSoup(html, "html.parser")
    dedup = StyleDeduplicator()
    css, generated = dedup.run(find_styled_tags(soup))
    print(f"[DEDUPE] styled={dedup.scanned} shared={len(dedup.shared_class_for_decl)} generated={generated}")

    if css:
        css = minify_css(css)
    if css:
        inject_stylesheet(soup, css)
        print(f"[MINIFY] stylesheet: {len(css)} chars")

    out = minify_html_text(str(soup))
    stats = {
        "styled_elements": dedup.scanned,
        "emptied_styles": dedup.emptied,
        "shared_classes": len(dedup.shared_class_for_decl),
        "generated_classes": generated,
        "rules": dedup.rule_count(),
        "stylesheet_bytes": len(css.encode("utf-8")),
    }
    return out, stats


def write_report(cfg: dict, stats: dict, before: int, after: int, pdf_path=None) -> Path:
    report = {
        "input": str(cfg["input"]),
        "output": str(cfg["output"]),
        "input_bytes": before,
        "output_bytes": after,
        "reduction_percent": round((1 - after / before) * 100, 1) if before > 0 else 0,
        **stats,
        "pdf": str(pdf_path) if pdf_path else None,
    }
    out = cfg["output"].parent / "compress_report.json"
    out.write_text(json.dumps(report, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"[REPORT] {out}")
    return out


def run(cfg: dict) -> dict:
    input_path = cfg["input"]
    if not input_path.exists():
        raise SystemExit(f"Input not found: {input_path}")
    print(f"[LOG] Input: {input_path}")

    html = input_path.read_text(encoding="utf-8")
    out, stats = compress_document(html)

    output_path = cfg["output"]
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(out, encoding="utf-8")
    before = len(html.encode("utf-8"))
    after = len(out.encode("utf-8"))
    print(f"[DONE] Wrote: {output_path}")
    print(f"Generated {stats['generated_classes']} classes.")

    pdf_path = None
    if cfg["pdf"]:
        pdf_path = output_path.with_suffix(".pdf")
        render_html_to_pdf(output_path, pdf_path, cfg["pdf_width"], cfg["timeout"])
        print(f"[PDF] PDF generated: {pdf_path}")

    if cfg["report"]:
        write_report(cfg, stats, before, after, pdf_path)
    return stats


def main(argv=None):
    load_dotenv()
    cfg = resolve_config(parse_args(argv))
    try:
        run(cfg)
    except Exception as e:
        print(f"[ERROR] Fatal error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
