#!/usr/bin/env python3
"""
Deduplicate inline style="..." attributes into short generated classes.

Strategy:
 - Parse every inline style into a prop -> value map (last one wins)
 - Single declarations used by 2+ elements become shared classes (most frequent first)
 - Whatever remains on an element is canonicalized (sorted by prop) and mapped to one
   class per distinct declaration set
 - style attributes are replaced by class="<shared...> <per-element>"

The tree is mutated in place; the stylesheet text is returned unminified.
"""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict, List, Tuple

from bs4 import BeautifulSoup, Tag

from compress_tools.classnames import ClassNameGenerator
from compress_tools.minify_assets import inject_stylesheet


SHARED_THRESHOLD = 2


def parse_style(style_text: str) -> List[Tuple[str, str]]:
    decls = []
    for part in style_text.split(";"):
        part = part.strip()
        if not part or ":" not in part:
            continue
        k, v = part.split(":", 1)
        k = k.strip().lower()
        v = v.strip()
        # drop empty values (common in some toolchains) and prop-less fragments
        if not k or not v:
            continue
        decls.append((k, v))
    return decls


def decl_key(prop: str, val: str) -> str:
    return f"{prop}:{val}"


def signature(props: Dict[str, str]) -> str:
    items = sorted(props.items(), key=lambda kv: kv[0])
    return ";".join([decl_key(k, v) for k, v in items])


def find_styled_tags(soup: BeautifulSoup) -> List[Tag]:
    return [tag for tag in soup.find_all(True) if tag.has_attr("style")]


class StyledElement:
    """An element whose inline style survived parsing."""

    def __init__(self, tag: Tag, props: Dict[str, str]):
        self.tag = tag
        self.props = props
        self.shared: List[str] = []
        self.own_class: str | None = None

    def class_list(self) -> List[str]:
        classes = list(self.shared)
        if self.own_class:
            classes.append(self.own_class)
        return classes

    def __repr__(self):
        return f"<{self.tag.name} props={len(self.props)} shared={self.shared} own={self.own_class}>"


class StyleDeduplicator:
    """Turns repeated inline styles into a compact class-based stylesheet."""

    def __init__(self, names: ClassNameGenerator | None = None):
        self.names = names or ClassNameGenerator()
        self.elements: List[StyledElement] = []
        self.decl_count: Dict[str, int] = {}
        self.shared_class_for_decl: Dict[str, str] = {}
        self.declset_to_class: Dict[str, str] = {}
        self.body_to_selectors: Dict[str, List[str]] = {}
        self.scanned = 0
        self.emptied = 0

    @property
    def generated(self) -> int:
        return len(self.declset_to_class)

    def scan(self, tags: List[Tag]):
        for tag in tags:
            self.scanned += 1
            parsed = parse_style(tag.get("style") or "")
            if not parsed:
                del tag["style"]
                self.emptied += 1
                continue
            props: Dict[str, str] = {}
            for k, v in parsed:
                props[k] = v
            for k, v in props.items():
                key = decl_key(k, v)
                self.decl_count[key] = self.decl_count.get(key, 0) + 1
            self.elements.append(StyledElement(tag, props))

    def select_shared(self) -> List[Tuple[str, str]]:
        # sorted() is stable: ties keep discovery order
        ranked = sorted(
            [(d, c) for d, c in self.decl_count.items() if c >= SHARED_THRESHOLD],
            key=lambda dc: -dc[1],
        )
        shared = []
        for decl, _count in ranked:
            self.shared_class_for_decl[decl] = self.names.next_name()
            prop, val = decl.split(":", 1)
            shared.append((prop, val))
        return shared

    def strip_shared(self, shared: List[Tuple[str, str]]):
        for item in self.elements:
            for prop, val in shared:
                if item.props.get(prop) == val:
                    del item.props[prop]
                    item.shared.append(self.shared_class_for_decl[decl_key(prop, val)])

    def assign_own_classes(self):
        for item in self.elements:
            body = signature(item.props)
            if not body:
                continue
            cls = self.declset_to_class.get(body)
            if cls is None:
                cls = self.names.next_name()
                self.declset_to_class[body] = cls
                self.body_to_selectors.setdefault(body, []).append(f".{cls}")
            item.own_class = cls

    def apply(self):
        for item in self.elements:
            classes = item.class_list()
            if classes:
                item.tag["class"] = classes
            del item.tag["style"]

    def stylesheet(self) -> str:
        bodies: Dict[str, List[str]] = {}
        for decl, cls in self.shared_class_for_decl.items():
            bodies.setdefault(decl, []).append(f".{cls}")
        for body, selectors in self.body_to_selectors.items():
            bodies.setdefault(body, []).extend(selectors)
        return "".join([f"{','.join(sels)}{{{body}}}" for body, sels in bodies.items()])

    def rule_count(self) -> int:
        return len(set(self.shared_class_for_decl) | set(self.body_to_selectors))

    def run(self, tags: List[Tag]) -> Tuple[str, int]:
        self.scan(tags)
        shared = self.select_shared()
        self.strip_shared(shared)
        self.assign_own_classes()
        self.apply()
        return self.stylesheet(), self.generated


def dedupe_inline_styles(soup: BeautifulSoup, names: ClassNameGenerator | None = None) -> Tuple[str, int]:
    """Rewrite every styled element of `soup`; return (stylesheet, generated class count)."""
    return StyleDeduplicator(names).run(find_styled_tags(soup))


def main():
    ap = argparse.ArgumentParser(description="Replace inline styles with generated classes (no minification)")
    ap.add_argument("--input", required=True, help="HTML file to rewrite")
    ap.add_argument("--output", help="Where to write the rewritten HTML (default: <input>.dedupe.html)")
    ap.add_argument("--dry-run", action="store_true")
    args = ap.parse_args()

    html_path = Path(args.input)
    if not html_path.exists():
        raise SystemExit(f"{html_path} not found")

    soup = BeautifulSoup(html_path.read_text(encoding="utf-8"), "html.parser")
    dedup = StyleDeduplicator()
    css, generated = dedup.run(find_styled_tags(soup))
    summary = f"scanned={dedup.scanned} shared={len(dedup.shared_class_for_decl)} generated={generated} rules={dedup.rule_count()}"
    if args.dry_run:
        print(f"[DEDUPE] {summary}")
        return
    out = Path(args.output) if args.output else html_path.with_suffix(".dedupe.html")
    if css:
        inject_stylesheet(soup, css)
    out.write_text(str(soup), encoding="utf-8")
    print(f"[DEDUPE] {summary}; wrote {out}")


if __name__ == "__main__":
    main()
