"""Utility package to contain all utility modules."""

import logging

from . import log
from .benchmark import TimingStatistics, benchmark
from .custom_log_formatter import CustomLogFormatter
from .log import use_logging
from .log_decorator import log_decorator
from .vis_utils import (
    VisualizationError,
    plot_estimate_spread,
    plot_trajectories,
    plot_weights,
)

# Fetching the global logger called sirbench
logger = logging.getLogger("sirbench")

__all__ = [
    "log",
    "use_logging",
    "log_decorator",
    "CustomLogFormatter",
    "logger",
    "TimingStatistics",
    "benchmark",
    "VisualizationError",
    "plot_trajectories",
    "plot_weights",
    "plot_estimate_spread",
]
