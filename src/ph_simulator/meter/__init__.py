"""
Meter Package
=============

Instruments that read the beaker scene.

Available Instruments:
- PHMeter: Ideal pH meter with a draggable probe

Date: October 2026
License: MIT
"""

__version__ = "1.0.0"

from .ph_meter import (
    PHMeter,
    MeterReading,
    NO_READING_TEXT,
    format_ph,
    jump_positions,
    validate_meter,
)

__all__ = [
    "PHMeter",
    "MeterReading",
    "NO_READING_TEXT",
    "format_ph",
    "jump_positions",
    "validate_meter",
]
