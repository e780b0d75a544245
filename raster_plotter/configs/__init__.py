"""Machine and tracer configuration loading and validation."""

from raster_plotter.configs.loader import (
    ConfigError,
    MachineConfig,
    TraceMode,
    TracerConfig,
    TracerDebug,
    load_machine_config,
    load_tracer_config,
)

__all__ = [
    "ConfigError",
    "MachineConfig",
    "TraceMode",
    "TracerConfig",
    "TracerDebug",
    "load_machine_config",
    "load_tracer_config",
]
