"""Command-line entry points (``raster-plotter-trace``, ``raster-plotter-preview``)."""
