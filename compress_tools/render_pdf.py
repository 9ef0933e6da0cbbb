#!/usr/bin/env python3
"""
Render an HTML file to a single fixed-width PDF page whose height fits the content.

Floating (position: fixed / sticky) elements are removed before measuring,
so toolbars and overlays neither repeat nor stretch the page.
"""
from __future__ import annotations

import argparse
import asyncio
import math
from pathlib import Path

from playwright.async_api import async_playwright


DEFAULT_WIDTH = "210mm"
FALLBACK_HEIGHT = "297mm"
DEFAULT_TIMEOUT_S = 30

REMOVE_FLOATING_JS = """
() => {
  let removed = 0;
  for (const el of Array.from(document.querySelectorAll('*'))) {
    const pos = window.getComputedStyle(el).position;
    if ((pos === 'fixed' || pos === 'sticky') && el.parentNode) {
      el.parentNode.removeChild(el);
      removed++;
    }
  }
  return removed;
}
"""


def pdf_options(height_px: float, width: str = DEFAULT_WIDTH) -> dict:
    height = math.ceil(height_px or 0)
    return {
        "print_background": True,
        "width": width,
        "height": f"{height}px" if height > 0 else FALLBACK_HEIGHT,
        "margin": {"top": "0px", "right": "0px", "bottom": "0px", "left": "0px"},
        "page_ranges": "1",
        "prefer_css_page_size": False,
    }


async def render_html_to_pdf_async(
    html_path: Path,
    pdf_path: Path,
    width: str = DEFAULT_WIDTH,
    timeout_s: int = DEFAULT_TIMEOUT_S,
) -> Path:
    """Render `html_path` to `pdf_path` with headless Chromium."""
    async with async_playwright() as pw:
        browser = await pw.chromium.launch(headless=True)
        try:
            page = await browser.new_page()
            await page.goto(Path(html_path).resolve().as_uri(), timeout=timeout_s * 1000, wait_until="networkidle")
            removed = await page.evaluate(REMOVE_FLOATING_JS)
            if removed:
                print(f"[PDF] removed {removed} fixed/sticky elements")
            box = await page.locator("body").bounding_box()
            height = box["height"] if box else 0
            await page.pdf(path=str(pdf_path), **pdf_options(height, width))
        finally:
            await browser.close()
    return Path(pdf_path)


def render_html_to_pdf(
    html_path: Path,
    pdf_path: Path,
    width: str = DEFAULT_WIDTH,
    timeout_s: int = DEFAULT_TIMEOUT_S,
) -> Path:
    return asyncio.run(render_html_to_pdf_async(html_path, pdf_path, width, timeout_s))


def main():
    ap = argparse.ArgumentParser(description="Render an HTML file to a single-page PDF (fixed width, auto height)")
    ap.add_argument("--input", required=True)
    ap.add_argument("--output", help="Default: <input>.pdf")
    ap.add_argument("--width", default=DEFAULT_WIDTH)
    ap.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT_S, help="Navigation timeout (seconds)")
    args = ap.parse_args()

    html_path = Path(args.input)
    if not html_path.exists():
        raise SystemExit(f"{html_path} not found")
    pdf_path = Path(args.output) if args.output else html_path.with_suffix(".pdf")
    render_html_to_pdf(html_path, pdf_path, args.width, args.timeout)
    print(f"[PDF] PDF generated: {pdf_path}")


if __name__ == "__main__":
    main()
