"""Tests for perch.pipeline — full builds and written outputs."""

import json
import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from perch.config import FrameConfig
from perch.diagnostics import DiagnosticKind
from perch.discovery import TemplateSource
from perch.errors import ConfigurationError
from perch.pipeline import build, scan_documents, write_outputs
from perch.routing.table import RoutingTable

CART = """\
<div class="cart">
  <turbo-frame id="cart-items">
    <ul>{% for item in items %}<li>{{ item }}</li>{% end %}</ul>
  </turbo-frame>
</div>
"""

PRODUCTS = """\
{% for product in products %}
<turbo-frame id="item_@product.id" frame-prefix="item_">
  {{ product.name }}
</turbo-frame>
{% end %}
"""

BROKEN = """\
<turbo-frame id="row_@row.id">row</turbo-frame>
"""


def _source(name: str, text: str) -> TemplateSource:
    return TemplateSource(path=f"/virtual/{name}", name=name, text=text)


class TestEndToEnd:
    """Tag and attribute names set to ``frame`` / ``prefix``."""

    config = FrameConfig(tag_name="frame", prefix_attribute="prefix")

    def test_static_frame_routes_exactly(self) -> None:
        result = build(self.config, [_source("cart.html", '<frame id="cart-items">...</frame>')])
        assert len(result.documents[0].regions) == 1
        assert dict(result.table.exact) == {"cart-items": "cart.html"}
        assert result.table.resolve("cart-items") == "cart.html"
        assert result.ok

    def test_dynamic_frame_routes_by_prefix(self) -> None:
        html = '<frame id="item_@Model.Id" prefix="item_">...</frame>'
        result = build(self.config, [_source("list.html", html)])
        region = result.documents[0].regions[0]
        assert region.is_dynamic
        assert result.report.diagnostics == []
        assert result.table.prefixes == (("item_", "list.html"),)
        assert result.table.resolve("item_42") == "list.html"

    def test_dynamic_frame_without_prefix_is_unroutable(self) -> None:
        result = build(self.config, [_source("list.html", '<frame id="item_@Model.Id">...</frame>')])
        assert [d.kind for d in result.report.diagnostics] == [DiagnosticKind.MISSING_PREFIX]
        assert not result.ok
        assert len(result.table) == 0
        assert result.table.resolve("item_42") is None


class TestBuild:
    def test_from_directory(
        self, template_dir: Path, write_template: Callable[[str, str], Path]
    ) -> None:
        write_template("cart/index.html", CART)
        write_template("products/list.html", PRODUCTS)
        result = build(FrameConfig(template_dir=template_dir))
        assert result.ok
        assert result.report.documents_scanned == 2
        assert result.table.resolve("cart-items") == "cart/index.html"
        assert result.table.resolve("item_9") == "products/list.html"

    def test_errors_do_not_stop_the_build(self) -> None:
        result = build(sources=[_source("a.html", CART), _source("b.html", BROKEN)])
        assert not result.ok
        assert result.table.resolve("cart-items") == "a.html"
        assert result.table.resolve("row_1") is None

    def test_invalid_config(self) -> None:
        with pytest.raises(ConfigurationError):
            build(FrameConfig(expression_marker="@@"), [])

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            build(FrameConfig(template_dir=tmp_path / "missing"))

    def test_route_to_fragments(self, tmp_path: Path) -> None:
        config = FrameConfig(fragments_dir=tmp_path / "fragments", route_to_fragments=True)
        result = build(config, [_source("cart/index.html", CART), _source("products/list.html", PRODUCTS)])
        assert result.table.resolve("cart-items") == "cart_index.cart-items.html"
        assert result.table.resolve("item_1") == "products_list.item__.html"

    def test_build_logs_summary(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="perch.build"):
            build(sources=[_source("a.html", CART)])
        assert "Scanned 1 templates" in caplog.text

    def test_parse_notes_are_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="perch.build"):
            build(sources=[_source("a.html", '<turbo-frame id="open">')])
        assert "never closed" in caplog.text


class TestScanDocuments:
    def test_parallel_matches_serial(self) -> None:
        sources = [_source(f"page{i:02d}.html", f'<turbo-frame id="f{i}">x</turbo-frame>') for i in range(20)]
        serial = scan_documents(sources, FrameConfig(workers=1))
        parallel = scan_documents(sources, FrameConfig(workers=8))
        assert serial == parallel
        assert [d.name for d in parallel] == [s.name for s in sources]

    def test_table_is_deterministic(self) -> None:
        sources = [_source("a.html", CART), _source("b.html", PRODUCTS)]
        first = build(FrameConfig(workers=4), sources)
        second = build(FrameConfig(workers=1), sources)
        assert first.table.to_dict() == second.table.to_dict()


class TestWriteOutputs:
    def test_nothing_configured(self) -> None:
        result = build(sources=[_source("a.html", CART)])
        assert write_outputs(result, FrameConfig()) == []

    def test_writes_module_and_json(self, tmp_path: Path) -> None:
        config = FrameConfig(
            output_path=tmp_path / "gen" / "frame_routes.py",
            json_path=tmp_path / "gen" / "frames.json",
        )
        result = build(config, [_source("a.html", CART)])
        written = write_outputs(result, config)
        assert written == [config.output_path, config.json_path]
        assert "EXACT_FRAMES" in (tmp_path / "gen" / "frame_routes.py").read_text(encoding="utf-8")
        data = json.loads((tmp_path / "gen" / "frames.json").read_text(encoding="utf-8"))
        assert data["exact"] == {"cart-items": "a.html"}

    def test_writes_fragments(self, tmp_path: Path) -> None:
        fragments = tmp_path / "fragments"
        config = FrameConfig(fragments_dir=fragments)
        sources = [
            _source("cart/index.html", CART),
            _source("products/list.html", PRODUCTS),
            _source("broken.html", BROKEN),
        ]
        result = build(config, sources)
        written = write_outputs(result, config)
        assert [p.name for p in written] == [
            "cart_index.cart-items.html",
            "products_list.item__.html",
        ]
        dynamic = (fragments / "products_list.item__.html").read_text(encoding="utf-8")
        assert '<turbo-frame id="{{ frame_id }}">' in dynamic
        assert "{{ product.name }}" in dynamic

    def test_outputs_are_reproducible(self, tmp_path: Path) -> None:
        sources = [_source("a.html", CART), _source("b.html", PRODUCTS)]
        first = FrameConfig(output_path=tmp_path / "one.py")
        second = FrameConfig(output_path=tmp_path / "two.py")
        write_outputs(build(first, sources), first)
        write_outputs(build(second, sources), second)
        assert (tmp_path / "one.py").read_bytes() == (tmp_path / "two.py").read_bytes()


class TestFragmentNameCollisions:
    def _build(self, tmp_path: Path, html: str) -> tuple[RoutingTable, Path]:
        fragments = tmp_path / "fragments"
        config = FrameConfig(fragments_dir=fragments, route_to_fragments=True)
        result = build(config, [_source("index.html", html)])
        write_outputs(result, config)
        return result.table, fragments

    def test_ids_that_sanitize_alike_get_their_own_fragments(self, tmp_path: Path) -> None:
        html = (
            '<turbo-frame id="cart.items">CART-DOTTED</turbo-frame>\n'
            '<turbo-frame id="cartitems">CART-PLAIN</turbo-frame>\n'
        )
        table, fragments = self._build(tmp_path, html)
        dotted = table.resolve("cart.items")
        plain = table.resolve("cartitems")
        assert dotted is not None and plain is not None
        assert dotted != plain
        assert "CART-DOTTED" in (fragments / dotted).read_text(encoding="utf-8")
        assert "CART-PLAIN" in (fragments / plain).read_text(encoding="utf-8")
        assert "CART-PLAIN" not in (fragments / dotted).read_text(encoding="utf-8")

    def test_static_id_and_prefix_with_same_name(self, tmp_path: Path) -> None:
        html = (
            '<turbo-frame id="item__">STATIC</turbo-frame>\n'
            '<turbo-frame id="item_@x" frame-prefix="item_">DYNAMIC</turbo-frame>\n'
        )
        table, fragments = self._build(tmp_path, html)
        static = table.resolve("item__")
        dynamic = table.resolve("item_42")
        assert static is not None and dynamic is not None
        assert static != dynamic
        assert "STATIC" in (fragments / static).read_text(encoding="utf-8")
        assert "DYNAMIC" in (fragments / dynamic).read_text(encoding="utf-8")

    def test_every_referenced_fragment_is_written(self, tmp_path: Path) -> None:
        html = (
            '<turbo-frame id="Cart">UPPER</turbo-frame>\n'
            '<turbo-frame id="cart">LOWER</turbo-frame>\n'
            '<turbo-frame id="row_@r" frame-prefix="row_">ROW</turbo-frame>\n'
        )
        table, fragments = self._build(tmp_path, html)
        references = {*table.exact.values(), *(ref for _, ref in table.prefixes)}
        written = {p.name for p in fragments.iterdir()}
        assert references == written
        assert len(written) == 3
