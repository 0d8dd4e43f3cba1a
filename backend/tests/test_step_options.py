"""
Tests for typed option profiles.
"""

import pytest
from pydantic import ValidationError

from convertcore.capabilities import FormatFamily, InvalidOptionsError, QualityTier, StepOptions, option_model_for, parse_options
from convertcore.capabilities.options import (
    AnimatedImageOptions,
    AudioOptions,
    CadOptions,
    ImageOptions,
    SpecializedOptions,
    VectorOptions,
    VideoOptions,
)


class TestProfileSelection:

    def test_video_to_gif_uses_animated_profile(self):
        assert option_model_for(FormatFamily.VIDEO, "gif") is AnimatedImageOptions

    def test_video_to_video_uses_video_profile(self):
        assert option_model_for(FormatFamily.VIDEO, "mp4") is VideoOptions

    def test_audio_family(self):
        assert option_model_for(FormatFamily.AUDIO, "mp3") is AudioOptions

    def test_cad_vector_and_specialized_families(self):
        assert option_model_for(FormatFamily.CAD, "obj") is CadOptions
        assert option_model_for(FormatFamily.VECTOR, "png") is VectorOptions
        assert option_model_for(FormatFamily.SPECIALIZED, "vtt") is SpecializedOptions

    def test_every_family_has_a_profile(self):
        for family in FormatFamily:
            assert issubclass(option_model_for(family, "bin"), StepOptions)


class TestParseOptions:

    def test_defaults_when_empty(self):
        options = parse_options(FormatFamily.IMAGE, "jpg", None, "png -> jpg")
        assert isinstance(options, ImageOptions)
        assert options.quality == 90
        assert options.to_dict() == {}

    def test_explicit_values_kept(self):
        options = parse_options(FormatFamily.VIDEO, "gif", {"fps": 15, "scale": 0.5}, "mp4 -> gif")
        assert options.fps == 15
        assert options.scale == 0.5
        assert options.to_dict() == {"fps": 15, "scale": 0.5}

    def test_quality_tier_enum(self):
        options = parse_options(FormatFamily.VIDEO, "mp4", {"quality": "low"}, "mkv -> mp4")
        assert options.quality == QualityTier.LOW

    def test_unknown_key_rejected(self):
        with pytest.raises(InvalidOptionsError) as exc:
            parse_options(FormatFamily.IMAGE, "jpg", {"fps": 10}, "png -> jpg")
        assert "'fps' is not recognized by ImageOptions" in str(exc.value)
        assert exc.value.step == "png -> jpg"
        assert exc.value.kind == "invalid_options"

    def test_out_of_range_rejected(self):
        with pytest.raises(InvalidOptionsError, match="quality"):
            parse_options(FormatFamily.IMAGE, "jpg", {"quality": 0}, "png -> jpg")

    def test_options_are_frozen(self):
        options = parse_options(FormatFamily.IMAGE, "jpg", {}, "png -> jpg")
        with pytest.raises(ValidationError):
            options.quality = 10
