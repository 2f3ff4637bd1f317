"""
Configuration management for ArcSpline.

Loads YAML configuration with sensible defaults for every fitting stage.
The three ProcessingInput groups (corners, segments, biarcs) are the knobs
an external tuning tool edits between fits.
"""

import copy
import os
from dataclasses import asdict, dataclass, field

import yaml


@dataclass
class CornersConfig:
    """Thresholds deciding which points of a line qualify as corners."""
    # Distance between consecutive tested points
    t_step: float = 1.0
    # Approximate minimum angle to qualify as a corner
    inner_min_angle_in_deg: float = 45.0
    # Maximum angle change measured on each of the corner's arms
    outer_max_angle_in_deg: float = 25.0
    # Required run of positive tests; large values miss sharp corners
    min_number_test_positives_in_series: int = 2
    # Close corner runs are merged; increase if double corners show up
    max_dist_between_corners_to_merge: int = 4
    # Distance factors (times half_smoothing_spread) for angle measurement points
    inner_inter_measurement_factor: float = 1.0
    outer_inter_measurement_factor: float = 2.0


@dataclass
class SegmentsConfig:
    """Thresholds deciding whether a line section is a straight segment."""
    t_step: float = 15.0
    # Scaled by chord_length / reference_segment_length when assessing error
    max_mean_error_at_reference_length: float = 2.5
    reference_segment_length: float = 20.0


@dataclass
class BiarcsConfig:
    """Thresholds for fitting biarc splines to line sections."""
    t_step: float = 15.0
    # Maximum mean squared error allowed for any biarc
    max_mean_error: float = 10.0
    # Range and count of d0/d1 ratios tried per candidate end point
    max_biarc_ratio: float = 5.0
    min_biarc_ratio: float = 0.2
    num_biarc_ratio_samples: int = 9
    # A longer biarc may exceed the current best error by at most this factor
    dist_to_error_threshold: float = 1.01
    # Errors below this count as equal when balancing (sub-pixel noise)
    min_balanced_error: float = 0.25
    # Balancing is off once a trial ends within this many steps of the section end
    end_of_line_okay_factor: float = 0.0
    # Allow a degenerate single arc as the last biarc of a section
    allow_half_arc_at_section_end: bool = True
    # Tangent tolerance (degrees) at the section end for a final single arc
    end_angle_tolerance: float = 15.0
    allow_extra_tolerance_for_single_arc_sections: bool = False
    end_angle_tolerance_for_single_arc_section: float = 45.0
    # Reject biarcs whose mid point drifts farther than this from the line
    max_dist_to_mid_point: float = 5.0
    mid_point_t_step: float = 1.0


@dataclass
class ProcessingInput:
    """Combined fitting configuration. Not modified during a fit."""
    corners: CornersConfig = field(default_factory=CornersConfig)
    segments: SegmentsConfig = field(default_factory=SegmentsConfig)
    biarcs: BiarcsConfig = field(default_factory=BiarcsConfig)

    def copy(self):
        """Independent copy for tuning without touching shared holders."""
        return copy.deepcopy(self)

    def validate(self):
        """Assert the configuration can drive a fit."""
        assert self.corners.t_step > 0.0
        assert self.corners.inner_min_angle_in_deg > 0.0
        assert self.segments.t_step > 0.0
        assert self.segments.reference_segment_length > 0.0
        assert self.biarcs.t_step > 0.0
        assert self.biarcs.mid_point_t_step > 0.0
        assert 0.0 < self.biarcs.min_biarc_ratio <= self.biarcs.max_biarc_ratio
        assert self.biarcs.num_biarc_ratio_samples >= 1
        assert self.biarcs.dist_to_error_threshold >= 1.0
        return self


@dataclass
class PolylineConfig:
    """Defaults for strokes created or loaded by a session."""
    half_smoothing_spread: float = 10.0


@dataclass
class StrokeConfig:
    """Configuration for SVG export."""
    width: float = 2.0
    color: str = "black"
    source_color: str = "#bbbbbb"
    corner_radius: float = 3.0


@dataclass
class TracingConfig:
    """Tracing defaults; command-line trace flags take precedence."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class PipelineConfig:
    """Complete configuration."""
    processing: ProcessingInput = field(default_factory=ProcessingInput)
    polyline: PolylineConfig = field(default_factory=PolylineConfig)
    stroke: StrokeConfig = field(default_factory=StrokeConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)


def load_config(config_path=None):
    """
    Load configuration from YAML file.

    Falls back to defaults for any missing values.
    """
    config = PipelineConfig()

    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        config = _merge_config(config, yaml_data)

    return config


def _merge_section(target, values, section_name):
    """Copy known keys of a YAML mapping onto a config dataclass."""
    if not isinstance(values, dict):
        raise ValueError(f"Config section '{section_name}' must be a mapping")

    for key, value in values.items():
        if not hasattr(target, key):
            continue
        current = getattr(target, key)
        if isinstance(current, bool):
            if not isinstance(value, bool):
                raise ValueError(f"Config value {section_name}.{key} must be true or false")
        elif isinstance(current, (int, float)):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Config value {section_name}.{key} must be a number")
            value = type(current)(value)
        setattr(target, key, value)


def _merge_config(config, yaml_data):
    """Merge YAML data into config dataclass."""
    processing = yaml_data.get("processing") or {}

    for group in ("corners", "segments", "biarcs"):
        if group in processing:
            _merge_section(getattr(config.processing, group), processing[group], f"processing.{group}")

    if "polyline" in yaml_data:
        _merge_section(config.polyline, yaml_data["polyline"], "polyline")

    if "stroke" in yaml_data:
        _merge_section(config.stroke, yaml_data["stroke"], "stroke")

    if "tracing" in yaml_data:
        _merge_section(config.tracing, yaml_data["tracing"], "tracing")

    return config


def save_default_config(path):
    """Save default configuration to YAML file for reference."""
    config = PipelineConfig()

    yaml_data = {
        "processing": {
            "corners": asdict(config.processing.corners),
            "segments": asdict(config.processing.segments),
            "biarcs": asdict(config.processing.biarcs),
        },
        "polyline": asdict(config.polyline),
        "stroke": asdict(config.stroke),
        "tracing": {
            "enabled": config.tracing.enabled,
            "level": config.tracing.level,
        },
    }

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
