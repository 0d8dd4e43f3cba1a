"""
Default capability catalog.

The static conversion table shipped with the service. Routes follow what the
codec tools behind each family can actually do; chained routes are listed
explicitly so that every two-hop conversion is visible here.
"""

from functools import lru_cache
from typing import Dict, Iterable, List, Sequence

from .formats import FORMAT_FAMILIES, FormatFamily
from .graph import DIRECT, CapabilityEntry, CapabilityGraph, via


SPREADSHEET_PATHWAY = "spreadsheet"


def _direct(family: FormatFamily, sources: Iterable[str], targets: Sequence[str]) -> List[CapabilityEntry]:
    """Direct entries from every source to every other target."""
    return [
        CapabilityEntry(source, target, DIRECT, family)
        for source in sources
        for target in targets
        if source != target
    ]


def _via(intermediate: str, sources: Iterable[str], targets: Sequence[str], preference: int = 0) -> List[CapabilityEntry]:
    return [
        CapabilityEntry(source, target, via(intermediate), None, preference)
        for source in sources
        for target in targets
        if source != target
    ]


IMAGE = FormatFamily.IMAGE
AUDIO = FormatFamily.AUDIO
VIDEO = FormatFamily.VIDEO
FONT = FormatFamily.FONT
DOCUMENT = FormatFamily.DOCUMENT
DATA = FormatFamily.DATA
ARCHIVE = FormatFamily.ARCHIVE
DISK_IMAGE = FormatFamily.DISK_IMAGE
EBOOK = FormatFamily.EBOOK
CAD = FormatFamily.CAD
VECTOR = FormatFamily.VECTOR
SPECIALIZED = FormatFamily.SPECIALIZED

_AUDIO_OUT = ("mp3", "wav", "flac", "aac", "ogg", "m4a")
_VIDEO_OUT = ("mp4", "avi", "mov", "mkv", "webm")
_LEGACY_VIDEO = ("flv", "wmv", "3gp")
_ARCHIVE_OUT = ("zip", "tar", "tar.gz", "tar.bz2", "7z")
_TABULAR = ("csv", "json", "xml", "yaml")
_MESH = ("stl", "obj", "step", "3ds", "dae", "fbx", "ply", "wrl", "x3d")
_DRAWING = ("dwg", "dxf")


def default_entries() -> List[CapabilityEntry]:
    entries: List[CapabilityEntry] = []

    # Images
    entries += _direct(IMAGE, ("jpg", "png"), ("jpg", "png", "gif", "webp", "bmp", "tiff", "pdf"))
    entries += _direct(IMAGE, ("gif", "webp"), ("png", "jpg", "gif", "webp"))
    entries += _direct(IMAGE, ("bmp",), ("png", "jpg", "gif", "webp"))
    entries += _direct(IMAGE, ("tiff",), ("png", "jpg", "gif", "webp", "pdf"))
    entries += _direct(IMAGE, ("heic",), ("jpg", "png", "webp"))
    entries += _via("png", ("heic",), ("gif", "tiff"))
    # HEIC decoders are fragile; decoding to png first is the declared fallback
    entries += _via("png", ("heic",), ("jpg",), preference=1)

    # Documents (the document family also rasterizes pdf pages)
    entries += _direct(DOCUMENT, ("pdf",), ("docx", "txt", "rtf", "jpg", "png"))
    entries += _direct(DOCUMENT, ("doc",), ("pdf", "txt", "rtf", "docx"))
    entries += _direct(DOCUMENT, ("docx",), ("pdf", "txt", "rtf", "odt"))
    entries += _direct(DOCUMENT, ("txt",), ("pdf", "docx", "rtf"))
    entries += _direct(DOCUMENT, ("rtf",), ("pdf", "docx", "txt"))
    entries += _direct(DOCUMENT, ("odt",), ("docx", "pdf", "txt"))
    entries += _direct(DOCUMENT, ("ppt", "pptx"), ("pdf", "jpg", "png"))
    entries += _via("pdf", ("doc", "docx", "odt", "rtf"), ("jpg", "png"))
    entries += _via("docx", ("odt",), ("rtf",))

    # Data and spreadsheets
    entries += _direct(DATA, _TABULAR, _TABULAR + ("xls", "xlsx"))
    entries += _direct(DATA, ("xls",), ("csv", "json", "xlsx", "pdf"))
    entries += _direct(DATA, ("xlsx",), ("csv", "json", "xls", "pdf"))
    entries += _via("csv", ("xls", "xlsx"), ("xml",))
    entries += _via("json", ("xls", "xlsx"), ("yaml",))

    # Ebooks
    entries += _direct(EBOOK, ("epub",), ("mobi", "azw3", "pdf", "docx"))
    entries += _direct(EBOOK, ("mobi",), ("epub", "azw3", "pdf"))
    entries += _direct(EBOOK, ("azw3",), ("epub", "mobi", "pdf"))
    entries += _direct(EBOOK, ("pdf", "docx"), ("epub",))
    entries += _via("epub", ("mobi", "azw3"), ("docx",))
    entries += _via("epub", ("pdf", "docx"), ("mobi", "azw3"))

    # Archives (rar is read-only: no free encoder)
    entries += _direct(ARCHIVE, _ARCHIVE_OUT + ("rar",), _ARCHIVE_OUT)

    # Fonts
    entries += _direct(FONT, ("ttf", "otf", "woff", "woff2"), ("ttf", "otf", "woff", "woff2", "eot"))
    entries += _direct(FONT, ("eot",), ("ttf", "otf", "woff"))
    entries += _via("ttf", ("eot",), ("woff2",))

    # Audio
    entries += _direct(AUDIO, _AUDIO_OUT + ("wma", "aiff"), _AUDIO_OUT)

    # Video, plus audio extraction handled by the audio family
    entries += _direct(VIDEO, _VIDEO_OUT, _VIDEO_OUT)
    entries += _direct(VIDEO, _LEGACY_VIDEO, ("mp4", "avi", "mov"))
    entries += _direct(AUDIO, _VIDEO_OUT + _LEGACY_VIDEO, _AUDIO_OUT)
    entries += _direct(VIDEO, ("mp4",), ("gif",))
    entries += _via("mp4", ("avi", "mov", "mkv", "webm") + _LEGACY_VIDEO, ("gif",))

    # Disk images: iso and dmg only meet through a raw image
    entries += _direct(DISK_IMAGE, ("iso",), ("bin", "img"))
    entries += _direct(DISK_IMAGE, ("bin", "img"), ("iso", "bin", "img", "dmg"))
    entries += _direct(DISK_IMAGE, ("dmg",), ("bin", "img"))
    entries += _via("bin", ("iso",), ("dmg",))
    entries += _via("bin", ("dmg",), ("iso",))
    entries += _via("img", ("iso",), ("dmg",), preference=1)
    entries += _via("img", ("dmg",), ("iso",), preference=1)

    # CAD: meshes convert among themselves, drawings export to pdf/svg
    entries += _direct(CAD, _MESH, _MESH)
    entries += _direct(CAD, _DRAWING, _DRAWING + ("pdf", "svg"))
    # Drawings are rasterized from their svg export
    entries += _via("svg", _DRAWING, ("png", "jpg"))

    # Vector graphics (pdf rasterization stays with the document family)
    entries += _direct(VECTOR, ("ai",), ("pdf", "svg", "png", "jpg", "eps"))
    entries += _direct(VECTOR, ("cdr",), ("svg", "png", "pdf", "eps"))
    entries += _direct(VECTOR, ("eps",), ("pdf", "svg", "png", "jpg", "ai"))
    entries += _direct(VECTOR, ("svg",), ("pdf", "png", "jpg", "eps", "ai"))
    entries += _direct(VECTOR, ("pdf",), ("svg", "eps", "ai"))
    entries += _via("png", ("cdr",), ("jpg",))

    # Specialized: medical imaging, GPS tracks, subtitles
    entries += _direct(SPECIALIZED, ("dicom",), ("png", "jpg"))
    entries += _direct(SPECIALIZED, ("gpx",), ("kml", "csv"))
    entries += _direct(SPECIALIZED, ("kml",), ("gpx", "csv"))
    entries += _direct(SPECIALIZED, ("srt", "vtt", "txt"), ("srt", "vtt", "txt"))
    entries += _via("png", ("dicom",), ("pdf",))

    return entries


DEFAULT_TARGETS: Dict[str, str] = {
    # Images
    "jpg": "png",
    "png": "jpg",
    "gif": "png",
    "webp": "jpg",
    "bmp": "png",
    "tiff": "jpg",
    "heic": "jpg",
    # Documents
    "pdf": "docx",
    "doc": "pdf",
    "docx": "pdf",
    "txt": "pdf",
    "rtf": "docx",
    "odt": "docx",
    "ppt": "pdf",
    "pptx": "pdf",
    # Data
    "xls": "pdf",
    "xlsx": "pdf",
    "csv": "json",
    "json": "csv",
    "xml": "json",
    "yaml": "json",
    # Disk images
    "iso": "bin",
    "bin": "iso",
    "img": "iso",
    "dmg": "iso",
    # Ebooks
    "epub": "mobi",
    "mobi": "epub",
    "azw3": "epub",
    # Archives
    "zip": "tar.gz",
    "rar": "zip",
    "tar": "zip",
    "tar.gz": "zip",
    "tar.bz2": "zip",
    "7z": "zip",
    # Fonts
    "ttf": "otf",
    "otf": "ttf",
    "woff": "woff2",
    "woff2": "woff",
    "eot": "ttf",
    # CAD
    "stl": "obj",
    "obj": "stl",
    "step": "stl",
    "3ds": "obj",
    "dae": "obj",
    "fbx": "obj",
    "ply": "stl",
    "wrl": "obj",
    "x3d": "obj",
    "dwg": "pdf",
    "dxf": "pdf",
    # Vector graphics
    "svg": "png",
    "ai": "pdf",
    "cdr": "svg",
    "eps": "pdf",
    # Specialized
    "dicom": "png",
    "gpx": "kml",
    "kml": "gpx",
    "srt": "vtt",
    "vtt": "srt",
    # Audio
    "mp3": "wav",
    "wav": "mp3",
    "flac": "mp3",
    "aac": "mp3",
    "ogg": "mp3",
    "m4a": "wav",
    "wma": "mp3",
    "aiff": "mp3",
    # Video
    "mp4": "avi",
    "avi": "mp4",
    "mov": "mp4",
    "mkv": "mp4",
    "webm": "mp4",
    "flv": "mp4",
    "wmv": "mp4",
    "3gp": "mp4",
}

DEFAULT_PATHWAYS: Dict[str, str] = {
    "xls": SPREADSHEET_PATHWAY,
    "xlsx": SPREADSHEET_PATHWAY,
}


@lru_cache(maxsize=1)
def build_default_graph() -> CapabilityGraph:
    """Process-wide default graph (built and validated once)."""
    return CapabilityGraph(
        entries=default_entries(),
        families=FORMAT_FAMILIES,
        defaults=DEFAULT_TARGETS,
        pathways=DEFAULT_PATHWAYS,
    )
