"""
Format table: extensions, families and MIME types.

Pure data. Formats are identified by their lowercase extension without the
leading dot ("jpg", "tar.gz"). Aliases such as "jpeg" and "tif" are folded
onto one canonical name before any lookup.
"""

from enum import Enum
from pathlib import PurePath
from types import MappingProxyType
from typing import Dict, Mapping, Optional


class FormatFamily(str, Enum):
    """
    Codec families.

    Each family is served by exactly one Codec Provider.
    """

    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    FONT = "font"
    DOCUMENT = "document"
    DATA = "data"
    ARCHIVE = "archive"
    DISK_IMAGE = "disk_image"
    EBOOK = "ebook"
    CAD = "cad"
    VECTOR = "vector"
    SPECIALIZED = "specialized"


_ALIASES: Dict[str, str] = {
    "jpeg": "jpg",
    "tif": "tiff",
    "heif": "heic",
    "yml": "yaml",
    "tgz": "tar.gz",
    "tbz2": "tar.bz2",
    "aif": "aiff",
    "stp": "step",
    "dcm": "dicom",
}

# Extensions made of two suffixes; checked before the single-suffix fallback
_COMPOUND_EXTENSIONS = ("tar.gz", "tar.bz2")

_FAMILY_FORMATS: Dict[FormatFamily, tuple] = {
    FormatFamily.IMAGE: ("jpg", "png", "gif", "webp", "bmp", "tiff", "heic"),
    FormatFamily.AUDIO: ("mp3", "wav", "flac", "aac", "ogg", "m4a", "wma", "aiff"),
    FormatFamily.VIDEO: ("mp4", "avi", "mov", "mkv", "webm", "flv", "wmv", "3gp"),
    FormatFamily.FONT: ("ttf", "otf", "woff", "woff2", "eot"),
    FormatFamily.DOCUMENT: ("pdf", "doc", "docx", "txt", "rtf", "odt", "ppt", "pptx"),
    FormatFamily.DATA: ("csv", "xls", "xlsx", "json", "xml", "yaml"),
    FormatFamily.ARCHIVE: ("zip", "rar", "tar", "tar.gz", "tar.bz2", "7z"),
    FormatFamily.DISK_IMAGE: ("iso", "bin", "img", "dmg"),
    FormatFamily.EBOOK: ("epub", "mobi", "azw3"),
    FormatFamily.CAD: ("stl", "obj", "step", "3ds", "dae", "fbx", "ply", "wrl", "x3d", "dwg", "dxf"),
    FormatFamily.VECTOR: ("svg", "ai", "cdr", "eps"),
    FormatFamily.SPECIALIZED: ("dicom", "gpx", "kml", "srt", "vtt"),
}

FORMAT_FAMILIES: Mapping[str, FormatFamily] = MappingProxyType({
    fmt: family
    for family, formats in _FAMILY_FORMATS.items()
    for fmt in formats
})

MIME_TYPES: Mapping[str, str] = MappingProxyType({
    # Images
    "jpg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "bmp": "image/bmp",
    "tiff": "image/tiff",
    "heic": "image/heic",
    # Audio
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "flac": "audio/flac",
    "aac": "audio/aac",
    "ogg": "audio/ogg",
    "m4a": "audio/mp4",
    "wma": "audio/x-ms-wma",
    "aiff": "audio/aiff",
    # Video
    "mp4": "video/mp4",
    "avi": "video/avi",
    "mov": "video/quicktime",
    "mkv": "video/x-matroska",
    "webm": "video/webm",
    "flv": "video/x-flv",
    "wmv": "video/x-ms-wmv",
    "3gp": "video/3gpp",
    # Fonts
    "ttf": "font/ttf",
    "otf": "font/otf",
    "woff": "font/woff",
    "woff2": "font/woff2",
    "eot": "application/vnd.ms-fontobject",
    # Documents
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "txt": "text/plain",
    "rtf": "application/rtf",
    "odt": "application/vnd.oasis.opendocument.text",
    "ppt": "application/vnd.ms-powerpoint",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    # Data
    "csv": "text/csv",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "json": "application/json",
    "xml": "application/xml",
    "yaml": "text/yaml",
    # Archives
    "zip": "application/zip",
    "rar": "application/vnd.rar",
    "tar": "application/x-tar",
    "tar.gz": "application/gzip",
    "tar.bz2": "application/x-bzip2",
    "7z": "application/x-7z-compressed",
    # Disk images
    "iso": "application/x-iso9660-image",
    "bin": "application/octet-stream",
    "img": "application/octet-stream",
    "dmg": "application/x-apple-diskimage",
    # Ebooks
    "epub": "application/epub+zip",
    "mobi": "application/x-mobipocket-ebook",
    "azw3": "application/vnd.amazon.ebook",
    # CAD and 3D models
    "stl": "application/sla",
    "obj": "model/obj",
    "step": "application/step",
    "3ds": "application/x-3ds",
    "dae": "model/vnd.collada+xml",
    "fbx": "application/octet-stream",
    "ply": "application/octet-stream",
    "wrl": "model/vrml",
    "x3d": "model/x3d+xml",
    "dwg": "application/acad",
    "dxf": "application/dxf",
    # Vector graphics
    "svg": "image/svg+xml",
    "ai": "application/postscript",
    "cdr": "application/x-coreldraw",
    "eps": "application/postscript",
    # Specialized
    "dicom": "application/dicom",
    "gpx": "application/gpx+xml",
    "kml": "application/vnd.google-earth.kml+xml",
    "srt": "application/x-subrip",
    "vtt": "text/vtt",
})

DEFAULT_MIME_TYPE = "application/octet-stream"


def normalize_format(fmt: str) -> str:
    """
    Canonicalize a format name.

    Strips whitespace and a leading dot, lowercases, and folds aliases.
    """
    name = fmt.strip().lower().lstrip(".")
    return _ALIASES.get(name, name)


def format_from_filename(filename: str) -> Optional[str]:
    """
    Derive the canonical format from a filename's extension.

    Compound extensions ("archive.tar.gz") win over the last suffix.

    Returns:
        The canonical format, or None if the name has no extension
    """
    name = PurePath(filename).name.lower()
    for compound in _COMPOUND_EXTENSIONS:
        if name.endswith("." + compound):
            return compound
    suffix = PurePath(name).suffix
    if not suffix:
        return None
    return normalize_format(suffix)


def family_of(fmt: str) -> Optional[FormatFamily]:
    """Return the family owning a format, or None if unknown."""
    return FORMAT_FAMILIES.get(normalize_format(fmt))


def mime_type_for(fmt: str) -> str:
    """Return the MIME type for a format (octet-stream when unknown)."""
    return MIME_TYPES.get(normalize_format(fmt), DEFAULT_MIME_TYPE)


def is_known_format(fmt: str) -> bool:
    return normalize_format(fmt) in FORMAT_FAMILIES
