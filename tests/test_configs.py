"""Test configuration models and YAML loaders.

Tests:
    - Shipped defaults load and validate
    - camelCase keys accepted alongside snake_case
    - Models are frozen and reject unknown keys
    - Pen command validation (stripped, single line, distinct)
    - Loader error paths: missing file, empty file, non-mapping root, bad values
    - Tracer tolerance falls back to the machine setting
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from raster_plotter.configs.loader import (
    ConfigError,
    MachineConfig,
    TraceMode,
    TracerConfig,
    load_machine_config,
    load_tracer_config,
)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_machine_yaml_matches_model_defaults(self) -> None:
        cfg = load_machine_config()
        assert cfg == MachineConfig()
        assert cfg.bed_width == 914
        assert cfg.bed_height == 610
        assert cfg.pen_up_cmd == "G0 Z5"
        assert cfg.pen_down_cmd == "G1 Z0"
        assert cfg.mm_per_px == pytest.approx(1.1425)

    def test_tracer_yaml_matches_model_defaults(self) -> None:
        cfg = load_tracer_config()
        assert cfg == TracerConfig()
        assert cfg.mode is TraceMode.SKELETON
        assert cfg.edge_threshold == 40
        assert cfg.simplify_tolerance_px == 1.5
        assert cfg.debug.save_intermediates is False


# ---------------------------------------------------------------------------
# Model validation
# ---------------------------------------------------------------------------


class TestMachineConfig:
    def test_camel_case_accepted(self) -> None:
        cfg = MachineConfig.model_validate({"bedWidth": 300, "penUpCmd": "M5 S0", "penDownCmd": "M3 S90"})
        assert cfg.bed_width == 300
        assert cfg.pen_up_cmd == "M5 S0"

    def test_frozen(self) -> None:
        cfg = MachineConfig()
        with pytest.raises(ValidationError):
            cfg.bed_width = 10

    def test_extra_keys_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            MachineConfig(bed_depth=10)

    def test_commands_stripped(self) -> None:
        cfg = MachineConfig(pen_up_cmd="  G0 Z5 \t")
        assert cfg.pen_up_cmd == "G0 Z5"

    @pytest.mark.parametrize("cmd", ["", "   ", "G0 Z5\nM2", "G0 Z5\rG1 Z0"])
    def test_bad_commands_rejected(self, cmd: str) -> None:
        with pytest.raises(ValidationError):
            MachineConfig(pen_up_cmd=cmd)

    def test_identical_commands_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must differ"):
            MachineConfig(pen_up_cmd="G1 Z0", pen_down_cmd="G1 Z0")

    @pytest.mark.parametrize("field", ["bed_width", "feed_rate", "travel_rate", "canvas_width_px"])
    def test_non_positive_rejected(self, field: str) -> None:
        with pytest.raises(ValidationError):
            MachineConfig(**{field: 0})

    def test_curve_resolution_bounds(self) -> None:
        with pytest.raises(ValidationError):
            MachineConfig(curve_resolution=0)
        assert MachineConfig(curve_resolution=1).curve_resolution == 1

    def test_mm_per_px(self) -> None:
        assert MachineConfig(bed_width=400, canvas_width_px=800).mm_per_px == 0.5


class TestTracerConfig:
    def test_mode_from_string(self) -> None:
        assert TracerConfig(mode="raw_edge").mode is TraceMode.RAW_EDGE

    def test_unknown_mode_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TracerConfig(mode="potrace")

    def test_resolve_tolerance_own_value(self) -> None:
        assert TracerConfig().resolve_tolerance(MachineConfig()) == 1.5

    def test_resolve_tolerance_falls_back(self) -> None:
        cfg = TracerConfig(simplify_tolerance_px=None)
        assert cfg.resolve_tolerance(MachineConfig()) == 2.0
        assert cfg.resolve_tolerance(MachineConfig(simplify_tolerance=0.5)) == 0.5

    def test_nested_debug_camel_case(self) -> None:
        cfg = TracerConfig.model_validate({"debug": {"saveIntermediates": True, "outputDir": "/tmp/x"}})
        assert cfg.debug.save_intermediates is True
        assert cfg.debug.output_dir == "/tmp/x"


# ---------------------------------------------------------------------------
# Loading from disk
# ---------------------------------------------------------------------------


class TestLoading:
    def test_explicit_path(self, tmp_path) -> None:
        path = tmp_path / "machine.yaml"
        path.write_text("bed_width: 300\nbed_height: 200\n")
        cfg = load_machine_config(path)
        assert cfg.bed_width == 300
        assert cfg.feed_rate == 3000

    def test_camel_case_file(self, tmp_path) -> None:
        path = tmp_path / "machine.yaml"
        path.write_text("bedWidth: 500\nfeedRate: 1200\n")
        cfg = load_machine_config(str(path))
        assert cfg.bed_width == 500
        assert cfg.feed_rate == 1200

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_machine_config(tmp_path / "absent.yaml")

    def test_invalid_value(self, tmp_path) -> None:
        path = tmp_path / "machine.yaml"
        path.write_text("bed_width: -5\n")
        with pytest.raises(ConfigError, match="MachineConfig validation failed"):
            load_machine_config(path)

    def test_empty_file(self, tmp_path) -> None:
        path = tmp_path / "tracer.yaml"
        path.write_text("")
        with pytest.raises(ConfigError, match="Empty"):
            load_tracer_config(path)

    def test_non_mapping_root(self, tmp_path) -> None:
        path = tmp_path / "tracer.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_tracer_config(path)

    def test_null_tolerance_in_file(self, tmp_path) -> None:
        path = tmp_path / "tracer.yaml"
        path.write_text("simplify_tolerance_px: null\nmode: raw_edge\n")
        cfg = load_tracer_config(path)
        assert cfg.simplify_tolerance_px is None
        assert cfg.mode is TraceMode.RAW_EDGE
