"""
Typed option sets per format family.

Each plan step carries exactly one option model. Models are frozen, reject
unknown fields and declare explicit defaults, so an option either applies to
a step or the step is rejected. Nothing is passed through unchecked.

Option profiles:
- image family                         -> ImageOptions
- video family producing gif/webp      -> AnimatedImageOptions
- video family producing video         -> VideoOptions
- audio family (including extraction)  -> AudioOptions
- document / data / ebook / archive / font / disk image -> one model each
- cad, vector and specialized families -> CadOptions, VectorOptions,
  SpecializedOptions
"""

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidOptionsError
from .formats import FormatFamily, normalize_format


# Formats a video-family step may produce as an animated image
ANIMATED_IMAGE_FORMATS = frozenset({"gif", "webp"})


class QualityTier(str, Enum):
    """Coarse quality tier; providers interpret per codec."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class StepOptions(BaseModel):
    """Base class for all option profiles."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    def to_dict(self) -> Dict[str, Any]:
        """Options that differ from the profile defaults."""
        return self.model_dump(exclude_defaults=True, mode="json")


class ImageOptions(StepOptions):
    quality: int = Field(default=90, ge=1, le=100)
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)
    scale: Optional[float] = Field(default=None, gt=0)


class AnimatedImageOptions(StepOptions):
    """Options for the hop that turns video into an animated image."""

    fps: int = Field(default=10, gt=0, le=60)
    scale: float = Field(default=1.0, gt=0)
    width: Optional[int] = Field(default=None, gt=0)
    loop: int = Field(default=0, ge=0)


class VideoOptions(StepOptions):
    quality: QualityTier = QualityTier.HIGH
    fps: Optional[int] = Field(default=None, gt=0, le=240)
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)
    bitrate: Optional[str] = None
    audio_bitrate: Optional[str] = None


class AudioOptions(StepOptions):
    bitrate: str = "192k"
    sample_rate: Optional[int] = Field(default=None, gt=0)
    channels: Optional[int] = Field(default=None, ge=1, le=8)
    quality: Optional[QualityTier] = None


class DocumentOptions(StepOptions):
    dpi: int = Field(default=150, ge=36, le=1200)
    page: Optional[int] = Field(default=None, ge=1)


class DataOptions(StepOptions):
    sheet_name: Optional[str] = None
    indent: int = Field(default=2, ge=0, le=8)
    delimiter: str = Field(default=",", min_length=1, max_length=1)


class EbookOptions(StepOptions):
    title: Optional[str] = None
    author: Optional[str] = None


class ArchiveOptions(StepOptions):
    compression_level: int = Field(default=6, ge=0, le=9)


class FontOptions(StepOptions):
    subset: bool = False


class DiskImageOptions(StepOptions):
    volume_label: Optional[str] = Field(default=None, max_length=32)


class CadOptions(StepOptions):
    scale: float = Field(default=1.0, gt=0)
    units: Optional[str] = None
    # stl and ply have both ascii and binary encodings
    binary: bool = False


class VectorOptions(StepOptions):
    dpi: int = Field(default=300, ge=36, le=2400)
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)


class SpecializedOptions(StepOptions):
    """Text encoding for subtitle and track formats, frame index for dicom."""

    encoding: str = "utf-8"
    frame: Optional[int] = Field(default=None, ge=0)


_FAMILY_PROFILES: Mapping[FormatFamily, Type[StepOptions]] = {
    FormatFamily.IMAGE: ImageOptions,
    FormatFamily.VIDEO: VideoOptions,
    FormatFamily.AUDIO: AudioOptions,
    FormatFamily.DOCUMENT: DocumentOptions,
    FormatFamily.DATA: DataOptions,
    FormatFamily.EBOOK: EbookOptions,
    FormatFamily.ARCHIVE: ArchiveOptions,
    FormatFamily.FONT: FontOptions,
    FormatFamily.DISK_IMAGE: DiskImageOptions,
    FormatFamily.CAD: CadOptions,
    FormatFamily.VECTOR: VectorOptions,
    FormatFamily.SPECIALIZED: SpecializedOptions,
}


def option_model_for(family: FormatFamily, target_format: str) -> Type[StepOptions]:
    """
    Pick the option profile for a step.

    The profile depends on what the step produces, not only on the family:
    a video-family step producing a gif takes frame-rate and loop options,
    a video-family step producing mp4 does not take a loop count.
    """
    if family == FormatFamily.VIDEO and normalize_format(target_format) in ANIMATED_IMAGE_FORMATS:
        return AnimatedImageOptions
    return _FAMILY_PROFILES[family]


def parse_options(
    family: FormatFamily,
    target_format: str,
    raw: Optional[Mapping[str, Any]],
    step_label: str,
) -> StepOptions:
    """
    Validate raw options against the profile of one step.

    Args:
        family: Family performing the step
        target_format: Format the step produces
        raw: Caller-supplied options (None or empty means defaults)
        step_label: Human-readable step name used in error messages

    Returns:
        The typed, frozen option set

    Raises:
        InvalidOptionsError: On unknown keys or invalid values
    """
    model = option_model_for(family, target_format)
    try:
        return model(**dict(raw or {}))
    except ValidationError as e:
        problems = []
        for err in e.errors():
            loc = ".".join(str(part) for part in err["loc"]) or "options"
            if err["type"] == "extra_forbidden":
                problems.append(f"'{loc}' is not recognized by {model.__name__}")
            else:
                problems.append(f"'{loc}': {err['msg']}")
        raise InvalidOptionsError(step_label, "; ".join(problems)) from e


def recognizes(family: FormatFamily, target_format: str, key: str) -> bool:
    """Return True if the step profile declares the option key."""
    return key in option_model_for(family, target_format).model_fields
