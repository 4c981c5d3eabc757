"""Tests for perch.fragments — per-frame fragment templates."""

import pytest

from perch.config import FrameConfig
from perch.errors import GenerationError
from perch.fragments import (
    assign_fragment_names,
    fragment_key,
    fragment_name,
    render_fragment,
    sanitize_for_file_name,
    view_name,
)
from perch.parsing.scanner import scan

from _factories import make_document, make_region


class TestViewName:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("index.html", "index"),
            ("cart/index.html", "cart_index"),
            ("admin/users/list.html", "admin_users_list"),
            ("cart\\index.html", "cart_index"),
        ],
    )
    def test_flattening(self, name: str, expected: str) -> None:
        assert view_name(name) == expected


class TestSanitize:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("cart-items", "cart-items"),
            ("item_", "item_"),
            ("cart:items/total", "cart_items_total"),
            ("a b.c!", "abc"),
            ("", "frame"),
            ("!!!", "frame"),
        ],
    )
    def test_cases(self, value: str, expected: str) -> None:
        assert sanitize_for_file_name(value) == expected


class TestFragmentName:
    def test_static(self) -> None:
        doc = make_document("cart/index.html", make_region("cart-items"))
        assert fragment_name(doc, doc.regions[0]) == "cart_index.cart-items.html"

    def test_dynamic_uses_prefix(self) -> None:
        doc = make_document("products/list.html", make_region("item_@x", "item_"))
        assert fragment_name(doc, doc.regions[0]) == "products_list.item__.html"

    def test_dynamic_without_prefix_raises(self) -> None:
        doc = make_document("a.html", make_region("item_@x"))
        with pytest.raises(GenerationError, match="no prefix"):
            fragment_name(doc, doc.regions[0])


class TestRenderFragment:
    def test_static_fragment(self) -> None:
        region = scan('<turbo-frame id="cart-items">\n  <p>Cart</p>\n</turbo-frame>').regions[0]
        text = render_fragment(region, source_name="cart/index.html")
        assert "{# Generated by perch from cart/index.html:1. Do not edit. #}" in text
        assert '<turbo-frame id="cart-items">' in text
        assert "<p>Cart</p>" in text
        assert "</turbo-frame>" in text

    def test_dynamic_fragment_takes_id_from_variable(self) -> None:
        html = '<turbo-frame id="item_@Model.Id" frame-prefix="item_">x</turbo-frame>'
        text = render_fragment(scan(html).regions[0])
        assert '<turbo-frame id="{{ frame_id }}">' in text
        assert "@Model.Id" not in text

    def test_template_syntax_in_content_is_kept_verbatim(self) -> None:
        html = '<turbo-frame id="user">{{ user.name }} {% if admin %}!{% end %}</turbo-frame>'
        text = render_fragment(scan(html).regions[0])
        assert "{{ user.name }} {% if admin %}!{% end %}" in text

    def test_markup_is_not_escaped(self) -> None:
        text = render_fragment(scan('<turbo-frame id="a"><b>&amp;</b></turbo-frame>').regions[0])
        assert "<b>&amp;</b>" in text

    def test_custom_tag(self) -> None:
        config = FrameConfig(tag_name="frame", prefix_attribute="prefix")
        region = scan('<frame id="a">x</frame>', config).regions[0]
        text = render_fragment(region, config)
        assert '<frame id="a">' in text
        assert "</frame>" in text

    def test_dynamic_without_prefix_raises(self) -> None:
        with pytest.raises(GenerationError):
            render_fragment(make_region("item_@x"))


class TestAssignFragmentNames:
    def test_unique_names_stay_plain(self) -> None:
        doc = make_document(
            "cart/index.html",
            make_region("cart-items"),
            make_region("item_@x", "item_"),
        )
        names = assign_fragment_names([doc])
        assert names == {
            ("cart/index.html", "exact", "cart-items"): "cart_index.cart-items.html",
            ("cart/index.html", "prefix", "item_"): "cart_index.item__.html",
        }

    def test_colliding_names_are_disambiguated(self) -> None:
        doc = make_document("index.html", make_region("cart.items"), make_region("cartitems"))
        names = assign_fragment_names([doc])
        dotted = names[fragment_key(doc, doc.regions[0])]
        plain = names[fragment_key(doc, doc.regions[1])]
        assert dotted != plain
        assert dotted.startswith("index.cartitems.")
        assert dotted.endswith(".html")

    def test_case_only_difference_collides(self) -> None:
        doc = make_document("index.html", make_region("Cart"), make_region("cart"))
        names = assign_fragment_names([doc])
        assert len({name.casefold() for name in names.values()}) == 2

    def test_names_do_not_depend_on_order(self) -> None:
        first = make_document("index.html", make_region("a.b"), make_region("ab"))
        second = make_document("index.html", make_region("ab"), make_region("a.b"))
        assert assign_fragment_names([first]) == assign_fragment_names([second])

    def test_same_id_twice_in_one_document_shares_a_name(self) -> None:
        doc = make_document("index.html", make_region("dup"), make_region("dup"))
        assert assign_fragment_names([doc]) == {("index.html", "exact", "dup"): "index.dup.html"}

    def test_unroutable_regions_are_skipped(self) -> None:
        doc = make_document("index.html", make_region("item_@x"))
        assert assign_fragment_names([doc]) == {}
