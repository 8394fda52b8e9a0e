"""Sizing package: measurement primitives, fit engine, configurator session."""
from .engine import FitState, SizingEngine, SizingLimits
from .measure import PillowMeasurer, ReportLabMeasurer, TextMeasurer
from .session import SizingSession

__all__ = [
    "FitState",
    "SizingEngine",
    "SizingLimits",
    "PillowMeasurer",
    "ReportLabMeasurer",
    "TextMeasurer",
    "SizingSession",
]
