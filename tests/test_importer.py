"""
Tests for the SVG document importer.
"""
import logging

import pytest

from vsvg.config import GroupPolicy, VsvgConfig
from vsvg.errors import SvgImportError
from vsvg.importer.svg_importer import SvgImporter, import_svg
from vsvg.model.color import TRANSPARENT, Color
from vsvg.model.document import PageSize
from vsvg.model.geometry_primitives import CubicBezier, EllipticalArc, Point


def _svg(body: str, attributes: str = "") -> str:
    return (
        '<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" '
        'xmlns:inkscape="http://www.inkscape.org/namespaces/inkscape" '
        'xmlns:sodipodi="http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd" '
        f"{attributes}>{body}</svg>"
    )


def _all_paths(result):
    return list(result.document.paths())


def _end_points(path):
    return path.start_point().xy, path.end_point().xy


class TestScenarios:
    def test_cubic_round_trip(self):
        """A single cubic path is retained exactly and flattens with fixed end points."""
        result = import_svg(_svg('<path d="M0,0 C0,100 100,100 100,0"/>'))
        paths = _all_paths(result)
        assert len(paths) == 1
        assert paths[0].primitives == (
            CubicBezier(Point(0.0, 0.0), Point(0.0, 100.0), Point(100.0, 100.0), Point(100.0, 0.0)),
        )

        coarse = result.document.flatten(1.0)
        fine = result.document.flatten(0.01)
        coarse_points = next(coarse.polylines()).points
        fine_points = next(fine.polylines()).points
        assert len(fine_points) > len(coarse_points)
        for points in (coarse_points, fine_points):
            assert points[0].tolist() == [0.0, 0.0]
            assert points[-1].tolist() == [100.0, 0.0]

    def test_invalid_path_is_skipped(self):
        """One bad 'd' among three paths yields two Paths and one PathSkipped."""
        body = (
            '<path d="M0 0 L10 10"/>'
            '<path id="broken" d="M0 0 L10"/>'
            '<path d="M5 5 L20 5"/>'
        )
        result = import_svg(_svg(body))
        assert result.document.path_count == 2
        assert len(result.skipped) == 1
        skipped = result.skipped[0]
        assert skipped.tag == "path"
        assert skipped.element_id == "broken"

    def test_skip_is_logged(self, caplog):
        """Skipped elements are reported through the logger."""
        with caplog.at_level(logging.WARNING, logger="vsvg"):
            import_svg(_svg('<path d="Q"/>'))
        assert any("skipped" in record.message for record in caplog.records)


class TestDocumentErrors:
    def test_not_xml(self):
        """Malformed XML is fatal."""
        with pytest.raises(SvgImportError):
            import_svg("<svg><path></svg>")

    def test_not_svg(self):
        """A well-formed non-SVG document is fatal."""
        with pytest.raises(SvgImportError):
            import_svg("<html><body/></html>")

    def test_svg_in_wrong_namespace(self):
        """The root must be an SVG <svg> element."""
        with pytest.raises(SvgImportError):
            import_svg('<svg xmlns="http://example.com/other"/>')

    def test_malformed_viewbox_is_fatal(self):
        """An unparsable root viewBox aborts the import."""
        with pytest.raises(SvgImportError):
            import_svg(_svg('<path d="M0 0 L1 1"/>', 'viewBox="0 0 abc 10"'))

    def test_bad_root_size_is_fatal(self):
        """Unknown units on the root width abort the import."""
        with pytest.raises(SvgImportError):
            import_svg(_svg("", 'width="10furlongs" height="10"'))

    def test_overflowing_root_transform_is_fatal(self):
        """A non-finite angle in the root transform aborts the import."""
        with pytest.raises(SvgImportError):
            import_svg(_svg('<path d="M0 0 L1 1"/>', 'transform="rotate(1e999)"'))

    def test_wrong_source_type(self):
        """Only str and bytes are accepted."""
        with pytest.raises(TypeError):
            import_svg(42)

    def test_bytes_input(self):
        """Encoded documents are accepted as bytes."""
        data = ('<?xml version="1.0" encoding="UTF-8"?>' + _svg('<path d="M0 0 L1 1"/>')).encode("utf-8")
        assert import_svg(data).document.path_count == 1


class TestViewport:
    def test_viewbox_with_physical_size(self):
        """A millimetre page maps viewBox units onto CSS px."""
        result = import_svg(
            _svg('<path d="M0 0 L100 50"/>', 'width="100mm" height="50mm" viewBox="0 0 100 50"')
        )
        px_per_mm = 96.0 / 25.4
        doc = result.document
        assert doc.page_size.width == pytest.approx(100.0 * px_per_mm)
        assert doc.page_size.height == pytest.approx(50.0 * px_per_mm)
        end = _all_paths(result)[0].end_point()
        assert end.x == pytest.approx(100.0 * px_per_mm)
        assert end.y == pytest.approx(50.0 * px_per_mm)
        assert doc.source_transform.mean_scale == pytest.approx(px_per_mm)

    def test_page_size_without_viewbox(self):
        """width and height alone give the page size at scale 1."""
        doc = import_svg(_svg("", 'width="200" height="100"')).document
        assert doc.page_size == PageSize(200.0, 100.0)
        assert doc.source_transform.is_identity

    def test_no_size_information(self):
        """Without size attributes there is no page size."""
        assert import_svg(_svg("")).document.page_size is None

    def test_nested_svg(self):
        """Nested <svg> elements establish their own viewport."""
        body = '<svg x="10" y="10" width="20" height="20" viewBox="0 0 10 10"><path d="M0 0 L10 10"/></svg>'
        path = _all_paths(import_svg(_svg(body)))[0]
        assert _end_points(path) == ((10.0, 10.0), (30.0, 30.0))


class TestTransformsAndStyles:
    def test_nested_group_transforms(self):
        """Transforms compose from the outermost group inwards."""
        body = '<g transform="translate(10,0)"><g transform="scale(2)"><path d="M1 1 L2 2"/></g></g>'
        path = _all_paths(import_svg(_svg(body)))[0]
        assert _end_points(path) == ((12.0, 2.0), (14.0, 4.0))

    def test_stroke_width_follows_transform(self):
        """Stroke widths are scaled into document units."""
        body = '<g transform="scale(3)"><path stroke-width="2" d="M0 0 L1 0"/></g>'
        path = _all_paths(import_svg(_svg(body)))[0]
        assert path.stroke_width == pytest.approx(6.0)

    def test_stroke_colour(self):
        """Stroke colours are inherited from groups."""
        body = '<g stroke="#ff0000"><path d="M0 0 L1 0"/></g>'
        path = _all_paths(import_svg(_svg(body)))[0]
        assert path.color == Color(255, 0, 0)

    def test_stroke_none_keeps_geometry(self):
        """stroke='none' imports the path with a transparent colour."""
        path = _all_paths(import_svg(_svg('<path stroke="none" d="M0 0 L1 0"/>')))[0]
        assert path.color == TRANSPARENT

    def test_invalid_transform_skips_element(self):
        """A broken transform skips that element only."""
        body = '<path transform="rotate(" d="M0 0 L1 0"/><path d="M0 0 L2 0"/>'
        result = import_svg(_svg(body))
        assert result.document.path_count == 1
        assert len(result.skipped) == 1

    @pytest.mark.parametrize("transform", ["rotate(1e999)", "skewX(1e999)", "skewY(-1e999)"])
    def test_overflowing_angle_skips_element(self, transform):
        """An angle that overflows to infinity skips that element only."""
        body = (
            '<path d="M0 0 L10 0"/>'
            f'<path id="spun" transform="{transform}" d="M0 0 L5 5"/>'
            '<path d="M0 5 L10 5"/>'
        )
        result = import_svg(_svg(body))
        assert result.document.path_count == 2
        assert len(result.skipped) == 1
        assert result.skipped[0].element_id == "spun"

    def test_display_none_is_skipped(self):
        """display:none elements are dropped unless configured otherwise."""
        body = '<path style="display:none" d="M0 0 L1 0"/><path d="M0 0 L2 0"/>'
        assert import_svg(_svg(body)).document.path_count == 1
        keep = VsvgConfig(skip_hidden=False)
        assert import_svg(_svg(body), keep).document.path_count == 2

    def test_shapes_are_imported(self):
        """Basic shapes become exact paths."""
        body = '<circle cx="0" cy="0" r="5"/><rect width="4" height="2"/><line x2="3"/>'
        paths = _all_paths(import_svg(_svg(body)))
        assert len(paths) == 3
        assert all(isinstance(p, EllipticalArc) for p in paths[0].primitives)

    def test_invalid_shape_is_skipped(self):
        """A negative radius is a per-element failure."""
        result = import_svg(_svg('<circle r="-1"/><circle r="1"/>'))
        assert result.document.path_count == 1
        assert result.skipped[0].tag == "circle"


class TestGroupPolicies:
    BODY = (
        '<g id="outline" inkscape:groupmode="layer" inkscape:label="Outline"><path d="M0 0 L1 0"/></g>'
        '<g id="detail"><path d="M0 0 L2 0"/><path d="M0 0 L3 0"/></g>'
        '<path d="M0 0 L4 0"/>'
    )

    def test_top_level_groups_become_layers(self):
        """Every top-level <g> is a layer; loose content goes to a default layer."""
        doc = import_svg(_svg(self.BODY)).document
        assert len(doc) == 3
        assert [len(layer) for layer in doc] == [1, 2, 1]
        assert doc.layer(0).name == "Outline"
        assert doc.layer(1).name == "detail"
        assert doc.layer(1).metadata["id"] == "detail"

    def test_single_layer(self):
        """The single policy collects everything in one layer."""
        doc = import_svg(_svg(self.BODY), VsvgConfig(group_policy=GroupPolicy.SINGLE)).document
        assert len(doc) == 1
        assert doc.path_count == 4

    def test_inkscape_layers(self):
        """Only inkscape layer groups become layers."""
        doc = import_svg(_svg(self.BODY), VsvgConfig(group_policy="inkscape")).document
        assert len(doc) == 2
        assert doc.layer(0).name == "Outline"
        assert len(doc.layer(1)) == 3

    def test_hidden_layer_is_kept_invisible(self):
        """A hidden top-level group keeps its geometry but is not visible."""
        body = '<g style="display:none"><path d="M0 0 L100 0"/></g><g><path d="M0 0 L1 1"/></g>'
        doc = import_svg(_svg(body)).document
        assert not doc.layer(0).visible
        assert len(doc.layer(0)) == 1
        assert doc.bounding_box().to_tuple() == (0.0, 0.0, 1.0, 1.0)

    def test_title_is_stored(self):
        """The document title lands in the metadata and is shared with layers."""
        doc = import_svg(_svg("<title> Floor plan </title><g><path d='M0 0 L1 1'/></g>")).document
        assert doc.metadata["title"] == "Floor plan"
        assert doc.layer(0).metadata["title"] == "Floor plan"


class TestReferences:
    def test_use_instantiates_referenced_element(self):
        """<use> places a copy translated by x/y."""
        body = '<defs><path id="p" d="M0 0 L1 0"/></defs><use href="#p" x="5" y="5"/>'
        paths = _all_paths(import_svg(_svg(body)))
        assert len(paths) == 1
        assert _end_points(paths[0]) == ((5.0, 5.0), (6.0, 5.0))

    def test_xlink_href(self):
        """The legacy xlink:href attribute is honoured."""
        body = '<defs><path id="p" d="M0 0 L1 0"/></defs><use xlink:href="#p"/><use xlink:href="#p" x="2"/>'
        assert import_svg(_svg(body)).document.path_count == 2

    def test_symbol_viewbox(self):
        """A symbol's viewBox maps onto the use element's size."""
        body = (
            '<defs><symbol id="s" viewBox="0 0 10 10"><path d="M0 0 L10 10"/></symbol></defs>'
            '<use href="#s" width="20" height="20"/>'
        )
        path = _all_paths(import_svg(_svg(body)))[0]
        assert _end_points(path) == ((0.0, 0.0), (20.0, 20.0))

    def test_circular_reference(self):
        """A <use> that references its own ancestor is skipped, not followed forever."""
        result = import_svg(_svg('<g id="a"><path d="M0 0 L1 0"/><use href="#a"/></g>'))
        assert len(result.skipped) == 1
        assert result.document.path_count == 2

    def test_unknown_reference(self):
        """An unresolved reference is a warning."""
        result = import_svg(_svg('<use href="#missing"/>'))
        assert result.document.path_count == 0
        assert any("missing" in w for w in result.warnings)


class TestUnsupportedContent:
    def test_unsupported_elements_warn(self):
        """Text and images are reported and ignored."""
        result = import_svg(_svg('<text>hi</text><image href="a.png"/><path d="M0 0 L1 1"/>'))
        assert result.document.path_count == 1
        assert len(result.warnings) == 2

    def test_foreign_namespaces_are_silent(self):
        """Editor metadata in other namespaces is ignored without warnings."""
        result = import_svg(_svg('<sodipodi:namedview id="nv"/><path d="M0 0 L1 1"/>'))
        assert result.warnings == []
        assert result.document.path_count == 1

    def test_switch_uses_first_child(self):
        """Only the first child of <switch> is rendered."""
        body = '<switch><path d="M0 0 L1 0"/><path d="M0 0 L2 0"/></switch>'
        assert import_svg(_svg(body)).document.path_count == 1

    def test_empty_document(self):
        """An empty <svg> yields an empty Document."""
        result = SvgImporter().import_svg(_svg(""))
        assert len(result.document) == 0
        assert result.skipped == [] and result.warnings == []
