"""Tests for inline style deduplication."""

import re

from bs4 import BeautifulSoup

from compress_tools.classnames import ClassNameGenerator
from compress_tools.dedupe_styles import (
    SHARED_THRESHOLD,
    StyleDeduplicator,
    dedupe_inline_styles,
    find_styled_tags,
    parse_style,
    signature,
)


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _classes(tag) -> list:
    return list(tag.get("class") or [])


def _rules(css: str) -> dict:
    """Map rule body -> selector list."""
    return {body: sels.split(",") for sels, body in re.findall(r"([^{}]+)\{([^{}]*)\}", css)}


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParseStyle:
    def test_drops_empty_fragments(self) -> None:
        assert parse_style("color:red;;  margin:0 ;") == [("color", "red"), ("margin", "0")]

    def test_lowercases_property_not_value(self) -> None:
        assert parse_style(" Color : Red ") == [("color", "Red")]

    def test_splits_on_first_colon(self) -> None:
        assert parse_style("background:url(http://x/y.png)") == [
            ("background", "url(http://x/y.png)")
        ]

    def test_drops_empty_values_and_garbage(self) -> None:
        assert parse_style("color:;margin: ;nonsense;:red") == []

    def test_keeps_duplicates_in_order(self) -> None:
        assert parse_style("color:red;color:blue") == [("color", "red"), ("color", "blue")]

    def test_empty(self) -> None:
        assert parse_style("") == []
        assert parse_style("   ") == []


class TestSignature:
    def test_sorted_by_property(self) -> None:
        assert signature({"z-index": "1", "color": "red"}) == "color:red;z-index:1"

    def test_empty(self) -> None:
        assert signature({}) == ""


# ---------------------------------------------------------------------------
# Deduplication
# ---------------------------------------------------------------------------


class TestEndToEnd:
    HTML = (
        '<div style="color:red;font-size:12px">1</div>'
        '<div style="color:red;font-size:12px">2</div>'
        '<div style="color:red">3</div>'
    )

    def test_classes(self) -> None:
        soup = _soup(self.HTML)
        dedupe_inline_styles(soup)
        divs = soup.find_all("div")
        assert _classes(divs[0]) == ["a", "b"]
        assert _classes(divs[1]) == ["a", "b"]
        assert _classes(divs[2]) == ["a"]

    def test_styles_removed(self) -> None:
        soup = _soup(self.HTML)
        dedupe_inline_styles(soup)
        assert not any(div.has_attr("style") for div in soup.find_all("div"))

    def test_stylesheet(self) -> None:
        css, _ = dedupe_inline_styles(_soup(self.HTML))
        assert css == ".a{color:red}.b{font-size:12px}"

    def test_generated_counts_declaration_sets_only(self) -> None:
        # both declarations are shared, nothing is left per element
        _, generated = dedupe_inline_styles(_soup(self.HTML))
        assert generated == 0


class TestSharedSelection:
    def test_threshold_constant(self) -> None:
        assert SHARED_THRESHOLD == 2

    def test_single_use_declaration_not_shared(self) -> None:
        soup = _soup('<p style="color:red">x</p><p style="margin:0">y</p>')
        css, generated = dedupe_inline_styles(soup)
        dedup_rules = _rules(css)
        assert dedup_rules == {"color:red": [".a"], "margin:0": [".b"]}
        assert generated == 2

    def test_two_uses_always_shared(self) -> None:
        soup = _soup('<p style="color:red;top:0">x</p><p style="color:red;left:0">y</p>')
        dedup = StyleDeduplicator()
        dedup.run(find_styled_tags(soup))
        assert list(dedup.shared_class_for_decl) == ["color:red"]
        ps = soup.find_all("p")
        assert _classes(ps[0]) == ["a", "b"]
        assert _classes(ps[1]) == ["a", "c"]

    def test_descending_frequency(self) -> None:
        soup = _soup(
            '<p style="margin:0;color:red">1</p>'
            '<p style="margin:0;color:red">2</p>'
            '<p style="color:red">3</p>'
        )
        css, _ = dedupe_inline_styles(soup)
        assert css == ".a{color:red}.b{margin:0}"
        ps = soup.find_all("p")
        assert _classes(ps[0]) == ["a", "b"]
        assert _classes(ps[2]) == ["a"]

    def test_ties_keep_discovery_order(self) -> None:
        soup = _soup('<p style="margin:0;color:red">1</p><p style="color:red;margin:0">2</p>')
        css, _ = dedupe_inline_styles(soup)
        assert css == ".a{margin:0}.b{color:red}"

    def test_duplicate_property_counted_once_per_element(self) -> None:
        soup = _soup('<p style="color:red;color:red">1</p><p style="margin:0">2</p>')
        dedup = StyleDeduplicator()
        dedup.run(find_styled_tags(soup))
        assert dedup.decl_count["color:red"] == 1
        assert dedup.shared_class_for_decl == {}

    def test_last_value_wins(self) -> None:
        soup = _soup('<p style="color:red;color:blue">1</p>')
        css, _ = dedupe_inline_styles(soup)
        assert css == ".a{color:blue}"


class TestPerElementClasses:
    def test_body_sorted_by_property(self) -> None:
        soup = _soup('<p style="z-index:1;color:red">1</p>')
        css, generated = dedupe_inline_styles(soup)
        assert css == ".a{color:red;z-index:1}"
        assert generated == 1

    def test_shared_then_own_class(self) -> None:
        soup = _soup(
            '<p style="width:10px;color:red">1</p>'
            '<p style="color:red;height:5px">2</p>'
        )
        css, generated = dedupe_inline_styles(soup)
        ps = soup.find_all("p")
        assert _classes(ps[0]) == ["a", "b"]
        assert _classes(ps[1]) == ["a", "c"]
        assert css == ".a{color:red}.b{width:10px}.c{height:5px}"
        assert generated == 2

    def test_existing_class_is_replaced(self) -> None:
        soup = _soup('<p class="old" style="color:red">1</p>')
        dedupe_inline_styles(soup)
        assert _classes(soup.p) == ["a"]


class TestEmptyStyles:
    def test_empty_and_unusable_styles(self) -> None:
        soup = _soup(
            '<div style="">1</div>'
            '<div style=" ; ;">2</div>'
            '<div style="color:">3</div>'
        )
        css, generated = dedupe_inline_styles(soup)
        assert css == ""
        assert generated == 0
        for div in soup.find_all("div"):
            assert not div.has_attr("style")
            assert not div.has_attr("class")

    def test_empty_style_does_not_consume_names(self) -> None:
        soup = _soup('<div style="">1</div><div style="color:red">2</div>')
        dedup = StyleDeduplicator()
        dedup.run(find_styled_tags(soup))
        assert dedup.emptied == 1
        assert _classes(soup.find_all("div")[1]) == ["a"]

    def test_untouched_without_style(self) -> None:
        soup = _soup('<div class="keep">1</div>')
        css, _ = dedupe_inline_styles(soup)
        assert css == ""
        assert _classes(soup.div) == ["keep"]


class TestInvariants:
    HTML = (
        '<div style="color:red;margin:0;padding:1px">1</div>'
        '<span style="margin:0;COLOR: red">2</span>'
        '<p style="padding:2px;border:0">3</p>'
        '<p style="border:0;padding:2px;top:1px">4</p>'
        '<em style="font-weight:bold">5</em>'
        '<b style="color:blue;margin:0">6</b>'
    )

    def test_class_names_unique(self) -> None:
        dedup = StyleDeduplicator()
        dedup.run(find_styled_tags(_soup(self.HTML)))
        names = list(dedup.shared_class_for_decl.values()) + list(dedup.declset_to_class.values())
        assert len(names) == len(set(names))

    def test_deterministic(self) -> None:
        names = ClassNameGenerator()
        soup1 = _soup(self.HTML)
        css1, gen1 = dedupe_inline_styles(soup1, names)
        names.reset()
        soup2 = _soup(self.HTML)
        css2, gen2 = dedupe_inline_styles(soup2, names)
        assert css1 == css2
        assert gen1 == gen2
        assert str(soup1) == str(soup2)

    def test_every_declaration_covered_once(self) -> None:
        original = _soup(self.HTML)
        expected = [dict(parse_style(tag["style"])) for tag in find_styled_tags(original)]

        soup = _soup(self.HTML)
        css, _ = dedupe_inline_styles(soup)
        rules = {sel.lstrip("."): body for body, sels in _rules(css).items() for sel in sels}
        styled = [tag for tag in soup.find_all(True) if tag.has_attr("class")]
        assert len(styled) == len(expected)
        for tag, props in zip(styled, expected):
            seen = []
            for cls in _classes(tag):
                for decl in rules[cls].split(";"):
                    seen.append(tuple(decl.split(":", 1)))
            assert sorted(seen) == sorted(props.items())

    def test_one_rule_per_body(self) -> None:
        css, _ = dedupe_inline_styles(_soup(self.HTML))
        bodies = re.findall(r"\{([^{}]*)\}", css)
        assert len(bodies) == len(set(bodies))

    def test_rule_count_matches_stylesheet(self) -> None:
        dedup = StyleDeduplicator()
        css, _ = dedup.run(find_styled_tags(_soup(self.HTML)))
        assert dedup.rule_count() == css.count("{")
