"""
Tests for the capability graph and format table.

Verifies:
- Every catalog pair is routable without revisiting a format
- Via entries chain two direct hops
- Copy and unsupported paths
- Fixed default targets
- Construction-time validation
"""

import pytest

from convertcore.capabilities import (
    CapabilityGraph,
    CapabilityEntry,
    CapabilityGraphError,
    FormatFamily,
    PathKind,
    SPREADSHEET_PATHWAY,
    format_from_filename,
    mime_type_for,
    normalize_format,
)
from convertcore.capabilities.formats import FORMAT_FAMILIES
from convertcore.capabilities.graph import DIRECT, via


class TestCatalogRoutes:
    """Every entry in the shipped catalog is well-formed."""

    def test_every_pair_is_direct_or_via(self, graph):
        for source, target in graph.pairs():
            path = graph.resolve_path(source, target)
            assert path.kind in (PathKind.DIRECT, PathKind.VIA), f"{source}->{target}: {path}"

    def test_no_route_revisits_a_format(self, graph):
        for source, target in graph.pairs():
            for entry in graph.paths(source, target):
                if entry.path.kind == PathKind.VIA:
                    assert entry.path.intermediate not in (source, target)

    def test_via_hops_are_direct(self, graph):
        for source, target in graph.pairs():
            for entry in graph.paths(source, target):
                if entry.path.kind != PathKind.VIA:
                    continue
                hop = entry.path.intermediate
                assert graph.direct_entry(source, hop) is not None
                assert graph.direct_entry(hop, target) is not None

    def test_iso_to_dmg_goes_via_bin(self, graph):
        path = graph.resolve_path("iso", "dmg")
        assert path.kind == PathKind.VIA
        assert path.intermediate == "bin"
        assert str(path) == "via(bin)"

    def test_iso_to_dmg_alternate_via_img(self, graph):
        entries = graph.paths("iso", "dmg")
        assert [e.path.intermediate for e in entries] == ["bin", "img"]
        assert [e.preference for e in entries] == [0, 1]

    def test_mp4_to_gif_is_direct_video_hop(self, graph):
        entry = graph.direct_entry("mp4", "gif")
        assert entry is not None
        assert entry.family == FormatFamily.VIDEO

    def test_other_videos_to_gif_go_via_mp4(self, graph):
        for source in ("avi", "mov", "mkv", "webm"):
            path = graph.resolve_path(source, "gif")
            assert path.kind == PathKind.VIA
            assert path.intermediate == "mp4"

    def test_video_to_audio_handled_by_audio_family(self, graph):
        assert graph.direct_entry("mp4", "mp3").family == FormatFamily.AUDIO

    def test_docx_to_png_via_pdf(self, graph):
        path = graph.resolve_path("docx", "png")
        assert path.kind == PathKind.VIA
        assert path.intermediate == "pdf"

    def test_rar_is_source_only(self, graph):
        assert graph.reachable_targets("rar")
        for source in graph.known_formats:
            assert "rar" not in graph.reachable_targets(source)

    def test_drawings_rasterize_via_svg(self, graph):
        path = graph.resolve_path("dwg", "png")
        assert path.kind == PathKind.VIA
        assert path.intermediate == "svg"
        assert graph.direct_entry("dwg", "svg").family == FormatFamily.CAD
        assert graph.direct_entry("svg", "png").family == FormatFamily.VECTOR

    def test_meshes_convert_directly(self, graph):
        entry = graph.direct_entry("stl", "obj")
        assert entry.family == FormatFamily.CAD
        assert graph.resolve_path("stp", "stl").kind == PathKind.DIRECT

    def test_pdf_rasterization_stays_with_documents(self, graph):
        assert graph.direct_entry("pdf", "png").family == FormatFamily.DOCUMENT
        assert graph.direct_entry("pdf", "svg").family == FormatFamily.VECTOR

    def test_dicom_to_pdf_via_png(self, graph):
        assert graph.direct_entry("dcm", "png").family == FormatFamily.SPECIALIZED
        path = graph.resolve_path("dicom", "pdf")
        assert path.kind == PathKind.VIA
        assert path.intermediate == "png"

    def test_subtitles_convert_both_ways(self, graph):
        assert graph.direct_entry("srt", "vtt").family == FormatFamily.SPECIALIZED
        assert graph.direct_entry("vtt", "srt").family == FormatFamily.SPECIALIZED
        assert graph.direct_entry("txt", "srt").family == FormatFamily.SPECIALIZED


class TestResolvePath:

    def test_same_format_is_copy(self, graph):
        assert graph.resolve_path("png", "png").kind == PathKind.COPY

    def test_aliases_normalize_before_copy(self, graph):
        assert graph.resolve_path("jpeg", "JPG").kind == PathKind.COPY

    def test_unknown_format_is_unsupported(self, graph):
        assert graph.resolve_path("xyz", "png").kind == PathKind.UNSUPPORTED
        assert graph.resolve_path("png", "xyz").kind == PathKind.UNSUPPORTED

    def test_pair_without_entry_is_unsupported(self, graph):
        assert graph.resolve_path("mp3", "pdf").kind == PathKind.UNSUPPORTED
        assert graph.paths("mp3", "pdf") == ()

    def test_reachable_targets_of_unknown_source_is_empty(self, graph):
        assert graph.reachable_targets("xyz") == frozenset()


class TestDefaults:

    @pytest.mark.parametrize("source,expected", [
        ("jpg", "png"),
        ("png", "jpg"),
        ("heic", "jpg"),
        ("xlsx", "pdf"),
        ("csv", "json"),
        ("iso", "bin"),
        ("zip", "tar.gz"),
        ("wav", "mp3"),
        ("mkv", "mp4"),
        ("eot", "ttf"),
        ("stl", "obj"),
        ("dwg", "pdf"),
        ("svg", "png"),
        ("cdr", "svg"),
        ("dicom", "png"),
        ("gpx", "kml"),
        ("kml", "gpx"),
        ("srt", "vtt"),
        ("vtt", "srt"),
    ])
    def test_default_target(self, graph, source, expected):
        assert graph.default_target(source) == expected

    def test_every_default_is_reachable(self, graph):
        for source in graph.known_formats:
            default = graph.default_target(source)
            if default is not None:
                assert default in graph.reachable_targets(source)

    def test_spreadsheets_belong_to_spreadsheet_pathway(self, graph):
        assert graph.pathway_of("xls") == SPREADSHEET_PATHWAY
        assert graph.pathway_of("XLSX") == SPREADSHEET_PATHWAY
        assert graph.pathway_of("csv") is None


class TestGraphValidation:
    """Inconsistent tables fail at construction, not at resolution."""

    def _build(self, entries, defaults=None):
        return CapabilityGraph(entries, FORMAT_FAMILIES, defaults or {})

    def test_unknown_format_rejected(self):
        with pytest.raises(CapabilityGraphError, match="Unknown format"):
            self._build([CapabilityEntry("png", "xyz", DIRECT, FormatFamily.IMAGE)])

    def test_self_entry_rejected(self):
        with pytest.raises(CapabilityGraphError, match="Self-conversion"):
            self._build([CapabilityEntry("png", "png", DIRECT, FormatFamily.IMAGE)])

    def test_direct_without_family_rejected(self):
        with pytest.raises(CapabilityGraphError, match="no codec family"):
            self._build([CapabilityEntry("png", "jpg", DIRECT)])

    def test_via_revisiting_endpoint_rejected(self):
        with pytest.raises(CapabilityGraphError, match="revisits"):
            self._build([CapabilityEntry("png", "jpg", via("png"))])

    def test_via_missing_hop_rejected(self):
        entries = [
            CapabilityEntry("heic", "png", DIRECT, FormatFamily.IMAGE),
            CapabilityEntry("heic", "gif", via("png")),
        ]
        with pytest.raises(CapabilityGraphError, match="no direct hop png->gif"):
            self._build(entries)

    def test_unreachable_default_rejected(self):
        entries = [CapabilityEntry("png", "jpg", DIRECT, FormatFamily.IMAGE)]
        with pytest.raises(CapabilityGraphError, match="not reachable"):
            self._build(entries, defaults={"png": "gif"})

    def test_graph_is_read_only(self, graph):
        with pytest.raises(TypeError):
            graph._entries[("png", "xyz")] = ()


class TestFormatHelpers:

    def test_compound_extension(self):
        assert format_from_filename("backup.TAR.GZ") == "tar.gz"
        assert format_from_filename("photos.tgz") == "tar.gz"

    def test_alias_extension(self):
        assert format_from_filename("IMG_0001.JPEG") == "jpg"
        assert format_from_filename("bracket.STP") == "step"
        assert format_from_filename("scan.dcm") == "dicom"

    def test_no_extension(self):
        assert format_from_filename("README") is None

    def test_normalize_strips_dot_and_case(self):
        assert normalize_format(" .PNG ") == "png"

    def test_mime_types(self):
        assert mime_type_for("png") == "image/png"
        assert mime_type_for("svg") == "image/svg+xml"
        assert mime_type_for("vtt") == "text/vtt"
        assert mime_type_for("xyz") == "application/octet-stream"
