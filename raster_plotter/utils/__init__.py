"""Shared helpers below every other layer.

- ``fs``: atomic program/metadata writes, YAML, debug raster dumps
- ``hashing``: SHA-256 digests for run metadata
- ``logging_config``: root logger setup for the CLIs

Nothing here imports from raster, tracing, gcode or pipeline.
"""

from . import fs, hashing, logging_config
from .logging_config import get_logger, push_context, setup_logging

__all__ = ['fs', 'hashing', 'logging_config', 'get_logger', 'push_context', 'setup_logging']
