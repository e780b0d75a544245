"""Configuration models and loaders.

Loads and validates ``machine.yaml`` and ``tracer.yaml`` into frozen
pydantic models.  Both files ship alongside this module; callers pass an
explicit path to override them.

Feed rates are stored in **mm/min** throughout, matching the G-code ``F``
parameter, so the motion program writes them unchanged.

The machine settings collaborator stores its keys in camelCase
(``bedWidth``, ``penUpCmd``...).  Models accept either spelling::

    MachineConfig(bed_width=300)
    MachineConfig.model_validate({"bedWidth": 300})

Usage::

    from raster_plotter.configs.loader import load_machine_config
    cfg = load_machine_config()                       # shipped default
    cfg = load_machine_config("/custom/machine.yaml") # explicit path
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from raster_plotter.utils.fs import load_yaml

logger = logging.getLogger(__name__)

_CONFIG_DIR = Path(__file__).parent


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ---------------------------------------------------------------------------
# Machine
# ---------------------------------------------------------------------------


class MachineConfig(_FrozenModel):
    """Machine settings for one trace-to-program run.

    Parameters
    ----------
    bed_width, bed_height : float
        Work area in mm.
    feed_rate : float
        Drawing feed (mm/min) for pen-down moves.
    travel_rate : float
        Rapid feed (mm/min) for pen-up moves.
    pen_up_cmd, pen_down_cmd : str
        Literal G-code lines that raise / lower the pen.
    curve_resolution : int
        Straight segments per curve when flattening.
    simplify_tolerance : float
        Douglas-Peucker tolerance used when the tracer has none of its own.
    canvas_width_px : float
        Canvas width that maps onto ``bed_width``.  Both axes share the
        resulting ``mm_per_px`` scale.
    """

    bed_width: float = Field(914.0, gt=0, description="Bed width (mm)")
    bed_height: float = Field(610.0, gt=0, description="Bed height (mm)")
    feed_rate: float = Field(3000.0, gt=0, description="Draw feed (mm/min)")
    travel_rate: float = Field(6000.0, gt=0, description="Travel feed (mm/min)")
    pen_up_cmd: str = Field("G0 Z5", description="Pen up command line")
    pen_down_cmd: str = Field("G1 Z0", description="Pen down command line")
    curve_resolution: int = Field(10, ge=1, le=1000, description="Segments per curve")
    simplify_tolerance: float = Field(2.0, ge=0, description="Simplification tolerance")
    canvas_width_px: float = Field(800.0, gt=0, description="Canvas width mapped to bed_width (px)")

    @field_validator('pen_up_cmd', 'pen_down_cmd')
    @classmethod
    def validate_command(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("pen command must not be empty")
        if "\n" in v or "\r" in v:
            raise ValueError(f"pen command must be a single line, got {v!r}")
        return v

    @model_validator(mode='after')
    def validate_pen_commands_differ(self) -> MachineConfig:
        if self.pen_up_cmd == self.pen_down_cmd:
            raise ValueError(
                f"pen_up_cmd and pen_down_cmd must differ, both are {self.pen_up_cmd!r}"
            )
        return self

    @property
    def mm_per_px(self) -> float:
        """Canvas-to-bed linear scale (mm per pixel)."""
        return self.bed_width / self.canvas_width_px


# ---------------------------------------------------------------------------
# Tracer
# ---------------------------------------------------------------------------


class TraceMode(str, Enum):
    """Tracing strategy.

    ``SKELETON`` thins the edge map first and is the canonical mode.
    ``RAW_EDGE`` walks the unthinned edge map with a direction bias.
    """

    SKELETON = "skeleton"
    RAW_EDGE = "raw_edge"


class TracerDebug(_FrozenModel):
    """Intermediate raster dumps."""

    save_intermediates: bool = Field(False, description="Write gray/edge/skeleton PNGs")
    output_dir: str = Field("outputs/debug", description="Directory for debug PNGs")


class TracerConfig(_FrozenModel):
    """Raster-to-path settings."""

    max_size_px: int = Field(1000, ge=16, le=8192, description="Cap on max(width, height)")
    edge_threshold: int = Field(40, ge=0, le=254, description="Sobel magnitude cutoff")
    mode: TraceMode = Field(TraceMode.SKELETON, description="Tracing strategy")
    max_thin_iterations: int = Field(100, ge=1, description="Thinning iteration cap")
    min_skeleton_path_len: int = Field(5, ge=1, description="Min points, skeleton mode")
    min_edge_path_len: int = Field(10, ge=1, description="Min points, raw-edge mode")
    skeleton_step_cap: int = Field(10_000, ge=1, description="Per-path step cap, skeleton mode")
    edge_step_cap: int = Field(5_000, ge=1, description="Per-path step cap, raw-edge mode")
    simplify_tolerance_px: float | None = Field(
        1.5, ge=0, description="Trace simplification tolerance, null uses the machine setting"
    )
    debug: TracerDebug = Field(default_factory=TracerDebug)

    def resolve_tolerance(self, machine_cfg: MachineConfig) -> float:
        """Tolerance the tracer should simplify with."""
        if self.simplify_tolerance_px is not None:
            return self.simplify_tolerance_px
        return machine_cfg.simplify_tolerance


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _load(model: type[_FrozenModel], path: str | Path | None, default_name: str) -> Any:
    path = _CONFIG_DIR / default_name if path is None else Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading configuration from %s", path)

    data = load_yaml(path)
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"{model.__name__} validation failed at {path}: {e}") from e


def load_machine_config(path: str | Path | None = None) -> MachineConfig:
    """Load and validate machine configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to ``machine.yaml``.  ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    MachineConfig
        Validated, frozen configuration.

    Raises
    ------
    ConfigError
        If any field fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    return _load(MachineConfig, path, "machine.yaml")


def load_tracer_config(path: str | Path | None = None) -> TracerConfig:
    """Load and validate tracer configuration from YAML (see load_machine_config)."""
    return _load(TracerConfig, path, "tracer.yaml")
