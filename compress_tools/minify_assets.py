#!/usr/bin/env python3
"""
Minify generated CSS/HTML and place the stylesheet into <head>.

Uses the minify-html library for both CSS and HTML minification.
"""
from __future__ import annotations

import argparse
import re
from pathlib import Path

import minify_html
from bs4 import BeautifulSoup


# Generated CSS is minified in its own stage, so the HTML pass leaves it alone.
HTML_MINIFY_OPTIONS = {
    "minify_js": True,
    "minify_css": False,
    "keep_comments": False,
    "keep_closing_tags": False,
    "keep_html_and_head_opening_tags": False,
    "remove_processing_instructions": True,
}

STYLE_WRAP_RE = re.compile(r"^\s*<style[^>]*>(.*)</style>\s*$", re.S | re.I)


def minify_css(css: str) -> str:
    if not css.strip():
        return ""
    out = minify_html.minify(f"<style>{css}</style>", minify_css=True, keep_closing_tags=True)
    m = STYLE_WRAP_RE.match(out)
    return m.group(1) if m else css


def minify_html_text(html: str) -> str:
    return minify_html.minify(html, **HTML_MINIFY_OPTIONS)


def ensure_head(soup: BeautifulSoup):
    head = soup.find("head")
    if head is not None:
        return head
    head = soup.new_tag("head")
    # keep <head> ahead of <body>
    (soup.find("html") or soup).insert(0, head)
    return head


def inject_stylesheet(soup: BeautifulSoup, css: str):
    """Replace the <style> blocks of <head> with a single block holding `css`."""
    head = ensure_head(soup)
    for old in head.find_all("style"):
        old.decompose()
    style = soup.new_tag("style", attrs={"type": "text/css"})
    style.string = css
    head.insert(0, style)
    return style


def main():
    ap = argparse.ArgumentParser(description="Minify an HTML file (inline CSS/JS included) with minify-html")
    ap.add_argument("--input", required=True)
    ap.add_argument("--output", help="Default: overwrite input (a .minify.bak backup is kept)")
    args = ap.parse_args()

    src_path = Path(args.input)
    if not src_path.exists():
        raise SystemExit(f"{src_path} not found")
    src = src_path.read_text(encoding="utf-8")
    out = minify_html.minify(src, **{**HTML_MINIFY_OPTIONS, "minify_css": True})

    if args.output:
        out_path = Path(args.output)
    else:
        out_path = src_path
        bak = src_path.with_suffix(src_path.suffix + ".minify.bak")
        if not bak.exists():
            bak.write_text(src, encoding="utf-8")
    out_path.write_text(out, encoding="utf-8")

    before = len(src.encode("utf-8"))
    after = len(out.encode("utf-8"))
    reduction = (1 - after / before) * 100 if before > 0 else 0
    print(f"[MINIFY] {src_path.name}: {before} -> {after} bytes ({reduction:.1f}% reduction)")


if __name__ == "__main__":
    main()
