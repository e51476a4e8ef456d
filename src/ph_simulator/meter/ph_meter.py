"""
pH Meter Module
===============

Ideal pH meter with a movable probe.

The meter reports exactly what the probe tip touches, as resolved by
core.probe.ProbeContactResolver. There is no noise, drift, lag or
calibration: the reading is the model pH, rounded only for display.

Probe:
- Position in view coordinates (y grows downward)
- Clamped to the drag bounds on construction and on every move
- Jump positions place the probe inside the beaker or under a spout

Display:
- pH to 2 decimal places, e.g. "7.00"
- "no reading" when the probe touches nothing or the beaker is empty

Readings are kept in a bounded history (deque) for later inspection.

Date: October 2026
License: MIT
"""

import numpy as np
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional
from collections import deque
import logging

from ..core.conversion import PH_DECIMAL_PLACES, is_equivalent_to_water
from ..core.probe import FluidKind, Point, Region

logger = logging.getLogger(__name__)

NO_READING_TEXT = "no reading"

# Screen layout bounds, view units
DEFAULT_DRAG_BOUNDS = Region(0.0, 0.0, 1100.0, 700.0)
DEFAULT_PROBE_POSITION: Point = (300.0, 580.0)
DEFAULT_BODY_POSITION: Point = (150.0, 75.0)


def format_ph(pH: Optional[float]) -> str:
    """
    Display text for a pH value.

    Args:
        pH: pH value, or None for no reading

    Returns:
        Text rounded to 2 decimal places, or "no reading"
    """
    if pH is None:
        return NO_READING_TEXT
    return f"{pH:.{PH_DECIMAL_PLACES}f}"


@dataclass
class MeterReading:
    """
    Single meter reading with metadata.

    Immutable data class representing one measurement.
    """

    timestamp: float  # [s]
    fluid: FluidKind
    pH: Optional[float]
    display: str
    neutral: bool = False  # displayed value equals 7.00

    def __post_init__(self):
        """Validate reading values."""
        if self.timestamp < 0:
            raise ValueError(f"Timestamp must be positive, got {self.timestamp}")
        if self.pH is not None and not np.isfinite(self.pH):
            raise ValueError(f"pH reading must be finite, got {self.pH}")


class PHMeter:
    """
    pH meter whose probe can be dragged around the scene.

    Typical Use:
    >>> meter = PHMeter()
    >>> meter.move_probe((750.0, 550.0))
    >>> reading = meter.read(scene)
    >>> print(f"{reading.fluid.value}: {reading.display}")
    """

    def __init__(
        self,
        probe_position: Point = DEFAULT_PROBE_POSITION,
        drag_bounds: Region = DEFAULT_DRAG_BOUNDS,
        body_position: Point = DEFAULT_BODY_POSITION,
        max_history_length: int = 1000,
    ):
        """
        Initialize pH meter.

        Args:
            probe_position: Initial probe tip position
            drag_bounds: Region the probe is confined to
            body_position: Meter body position (display only)
            max_history_length: Maximum readings to store
        """
        if max_history_length < 1:
            raise ValueError(
                f"History length must be positive, got {max_history_length}"
            )

        self.drag_bounds = drag_bounds
        self.body_position = body_position
        self._initial_probe_position = drag_bounds.clamp(probe_position)
        self.probe_position = self._initial_probe_position

        self.reading_history: Deque[MeterReading] = deque(maxlen=max_history_length)

    def move_probe(self, position: Point) -> Point:
        """
        Move the probe, clamped to the drag bounds.

        Returns:
            The position actually applied
        """
        clamped = self.drag_bounds.clamp(position)
        if clamped != tuple(position):
            logger.debug(f"Probe position {position} clamped to {clamped}")
        self.probe_position = clamped
        return clamped

    def jump_to(self, scene, target: str) -> Point:
        """
        Move the probe to a named jump position.

        Args:
            scene: BeakerScene providing the positions
            target: One of jump_positions(scene)

        Raises:
            ValueError: If the target is unknown
        """
        positions = jump_positions(scene, self._initial_probe_position)
        if target not in positions:
            raise ValueError(
                f"Unknown jump position '{target}'. "
                f"Choose from: {', '.join(positions)}"
            )
        return self.move_probe(positions[target])

    def read(self, scene, current_time: Optional[float] = None) -> MeterReading:
        """
        Take a reading at the current probe position.

        Args:
            scene: BeakerScene to read
            current_time: Timestamp [s], defaults to scene time

        Returns:
            MeterReading with display text
        """
        if current_time is None:
            current_time = scene.time

        probe = scene.read_probe(self.probe_position)
        reading = MeterReading(
            timestamp=current_time,
            fluid=probe.fluid,
            pH=probe.pH,
            display=format_ph(probe.pH),
            neutral=is_equivalent_to_water(probe.pH),
        )
        self.reading_history.append(reading)
        return reading

    def get_recent_readings(self, window_seconds: float) -> List[MeterReading]:
        """
        Get readings from recent time window.

        Args:
            window_seconds: Time window to retrieve [s]

        Returns:
            List of readings within window (newest first)
        """
        if not self.reading_history:
            return []

        cutoff_time = self.reading_history[-1].timestamp - window_seconds
        return [
            r for r in reversed(self.reading_history) if r.timestamp >= cutoff_time
        ]

    def get_statistics(self, window_seconds: float = 60.0) -> Dict[str, float]:
        """
        Statistics over recent readings that have a pH.

        Returns:
            Dictionary with mean, min, max, count, no_reading_rate
        """
        recent = self.get_recent_readings(window_seconds)
        values = np.array([r.pH for r in recent if r.pH is not None], dtype=float)

        if len(values) == 0:
            return {
                "mean": np.nan,
                "min": np.nan,
                "max": np.nan,
                "count": len(recent),
                "no_reading_rate": 1.0 if recent else 0.0,
            }

        return {
            "mean": float(np.mean(values)),
            "min": float(np.min(values)),
            "max": float(np.max(values)),
            "count": len(recent),
            "no_reading_rate": (len(recent) - len(values)) / len(recent),
        }

    def reset(self) -> None:
        """Return the probe to its initial position and clear history."""
        self.probe_position = self._initial_probe_position
        self.reading_history.clear()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(probe={self.probe_position})"


def jump_positions(
    scene, probe_home: Point = DEFAULT_PROBE_POSITION
) -> Dict[str, Point]:
    """
    Named probe positions for a scene.

    - beaker: bottom centre, just inside the solution
    - water_faucet, dropper, drain_faucet: just below the outlet
    - outside: the probe's home position
    """
    x, y = scene.geometry.position
    return {
        "beaker": (x, y - 0.0001),
        "water_faucet": _below(scene.water_faucet.position),
        "dropper": _below(scene.dropper.position),
        "drain_faucet": _below(scene.drain_faucet.position),
        "outside": probe_home,
    }


def _below(position: Point, offset: float = 10.0) -> Point:
    return (position[0], position[1] + offset)


def validate_meter():
    """Validation of the pH meter against a scene."""
    from ..core.scene import BeakerScene, SceneConfiguration
    from ..core.solutes import COFFEE

    scene = BeakerScene(SceneConfiguration(autofill_enabled=False))
    scene.select_solute(COFFEE)
    meter = PHMeter(max_history_length=10)

    # Test 1: Probe outside reads nothing
    reading = meter.read(scene, current_time=0.0)
    assert reading.fluid is FluidKind.NONE and reading.display == NO_READING_TEXT

    # Test 2: Clamped moves
    assert meter.move_probe((-50.0, 5000.0)) == (0.0, 700.0), "Probe not clamped"

    # Test 3: Dropper stream reads stock pH
    scene.set_dropper_dispensing(True)
    scene.step(1.0)
    meter.jump_to(scene, "dropper")
    reading = meter.read(scene)
    assert reading.fluid is FluidKind.DROPPER_STREAM, "Expected dropper stream"
    assert reading.display == "5.00", f"Unexpected display {reading.display}"

    # Test 4: History is bounded
    for _ in range(20):
        meter.read(scene)
    assert len(meter.reading_history) == 10, "History not bounded"

    print("✓ All meter validations passed")


if __name__ == "__main__":
    validate_meter()
