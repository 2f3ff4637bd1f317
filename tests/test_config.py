"""Tests for configuration loading."""

import os

import pytest
import yaml

from arcspline.config import PipelineConfig, ProcessingInput, load_config, save_default_config


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_file(self):
        config = load_config(None)

        assert config.processing.corners.t_step == 1.0
        assert config.processing.segments.max_mean_error_at_reference_length == 2.5
        assert config.processing.biarcs.num_biarc_ratio_samples == 9
        assert config.polyline.half_smoothing_spread == 10.0

    def test_missing_file_uses_defaults(self, temp_dir):
        config = load_config(os.path.join(temp_dir, "nope.yaml"))

        assert config == PipelineConfig()

    def test_partial_override(self, temp_dir):
        path = os.path.join(temp_dir, "config.yaml")
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump({
                "processing": {
                    "biarcs": {"max_mean_error": 4, "allow_half_arc_at_section_end": False},
                    "corners": {"inner_min_angle_in_deg": 60.0},
                },
                "stroke": {"color": "#333333"},
                "unknown_section": {"x": 1},
            }, f)

        config = load_config(path)

        assert config.processing.biarcs.max_mean_error == 4.0
        assert isinstance(config.processing.biarcs.max_mean_error, float)
        assert config.processing.biarcs.allow_half_arc_at_section_end is False
        assert config.processing.corners.inner_min_angle_in_deg == 60.0
        assert config.processing.biarcs.t_step == 15.0
        assert config.stroke.color == "#333333"

    def test_wrong_type_raises(self, temp_dir):
        path = os.path.join(temp_dir, "config.yaml")
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump({"processing": {"segments": {"t_step": "fast"}}}, f)

        with pytest.raises(ValueError, match="processing.segments.t_step"):
            load_config(path)

    def test_section_must_be_mapping(self, temp_dir):
        path = os.path.join(temp_dir, "config.yaml")
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump({"polyline": [1, 2]}, f)

        with pytest.raises(ValueError, match="mapping"):
            load_config(path)

    def test_save_default_round_trip(self, temp_dir):
        path = os.path.join(temp_dir, "default.yaml")

        save_default_config(path)
        config = load_config(path)

        assert config.processing == ProcessingInput()
        assert config.polyline == PipelineConfig().polyline


class TestProcessingInput:
    """Tests for ProcessingInput."""

    def test_copy_is_independent(self):
        original = ProcessingInput()
        copy = original.copy()
        copy.biarcs.max_mean_error = 1.0

        assert original.biarcs.max_mean_error == 10.0

    def test_validate_returns_self(self):
        processing_input = ProcessingInput()

        assert processing_input.validate() is processing_input

    def test_validate_rejects_bad_step(self):
        processing_input = ProcessingInput()
        processing_input.segments.t_step = 0.0

        with pytest.raises(AssertionError):
            processing_input.validate()
