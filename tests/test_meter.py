"""
Tests for the pH meter: display formatting, probe movement, readings.
"""

import numpy as np
import pytest

from ph_simulator.core.probe import FluidKind, Region
from ph_simulator.core.scene import BeakerScene, SceneConfiguration
from ph_simulator.core.solutes import BATTERY_ACID, WATER
from ph_simulator.meter import (
    NO_READING_TEXT,
    MeterReading,
    PHMeter,
    format_ph,
    jump_positions,
    validate_meter,
)


@pytest.fixture
def scene() -> BeakerScene:
    """Scene holding 0.2 L battery acid and 1.0 L water."""
    scene = BeakerScene(SceneConfiguration(autofill_enabled=False))
    scene.select_solute(BATTERY_ACID)
    scene.set_dropper_dispensing(True)
    for _ in range(4):
        scene.step(1.0)
    scene.set_dropper_dispensing(False)
    scene.set_water_flow_rate(0.25)
    for _ in range(4):
        scene.step(1.0)
    return scene


# =============================================================================
# Display
# =============================================================================

class TestFormat:

    @pytest.mark.parametrize(
        "pH, text",
        [(7.0, "7.00"), (2.77812, "2.78"), (13.0, "13.00"), (-0.5, "-0.50")],
    )
    def test_two_decimals(self, pH, text):
        assert format_ph(pH) == text

    def test_no_reading(self):
        assert format_ph(None) == NO_READING_TEXT == "no reading"


class TestMeterReading:

    def test_negative_timestamp_rejected(self):
        with pytest.raises(ValueError):
            MeterReading(-1.0, FluidKind.NONE, None, NO_READING_TEXT)

    def test_non_finite_ph_rejected(self):
        with pytest.raises(ValueError):
            MeterReading(0.0, FluidKind.SOLUTION, float("nan"), "nan")


# =============================================================================
# Probe
# =============================================================================

class TestProbe:

    def test_initial_position_is_clamped(self):
        meter = PHMeter(probe_position=(-10.0, 10.0), drag_bounds=Region(0, 0, 5, 5))
        assert meter.probe_position == (0.0, 5.0)

    def test_move_is_clamped(self):
        meter = PHMeter()
        assert meter.move_probe((2000.0, -5.0)) == (1100.0, 0.0)
        assert meter.move_probe((750.0, 500.0)) == (750.0, 500.0)

    def test_jump_positions(self, scene):
        positions = jump_positions(scene)
        assert set(positions) == {
            "beaker",
            "water_faucet",
            "dropper",
            "drain_faucet",
            "outside",
        }
        assert positions["dropper"] == (700.0, 275.0)

    @pytest.mark.parametrize(
        "target", ["beaker", "water_faucet", "dropper", "drain_faucet", "outside"]
    )
    def test_jump_positions_lie_inside_drag_bounds(self, scene, target):
        meter = PHMeter()
        assert meter.jump_to(scene, target) == jump_positions(scene)[target]

    def test_unknown_jump_rejected(self, scene):
        with pytest.raises(ValueError, match="Unknown jump position"):
            PHMeter().jump_to(scene, "ceiling")

    def test_reset(self, scene):
        meter = PHMeter()
        home = meter.probe_position
        meter.move_probe((1.0, 1.0))
        meter.read(scene)
        meter.reset()
        assert meter.probe_position == home
        assert len(meter.reading_history) == 0

    def test_history_length_must_be_positive(self):
        with pytest.raises(ValueError):
            PHMeter(max_history_length=0)


# =============================================================================
# Readings
# =============================================================================

class TestReadings:

    def test_outside_reads_nothing(self, scene):
        reading = PHMeter().read(scene)
        assert reading.fluid is FluidKind.NONE
        assert reading.pH is None
        assert reading.display == "no reading"
        assert not reading.neutral

    def test_beaker_reads_mixed_ph(self, scene):
        meter = PHMeter()
        meter.jump_to(scene, "beaker")
        reading = meter.read(scene)
        assert reading.fluid is FluidKind.SOLUTION
        assert reading.pH == scene.solution.pH
        assert reading.display == format_ph(scene.solution.pH)
        assert reading.timestamp == scene.time

    def test_drain_stream_reads_mixed_ph(self, scene):
        scene.set_drain_flow_rate(0.25)
        scene.step(0.1)
        meter = PHMeter()
        meter.jump_to(scene, "drain_faucet")
        reading = meter.read(scene)
        assert reading.fluid is FluidKind.DRAIN_STREAM
        assert reading.pH == scene.solution.pH

    def test_water_stream_is_neutral(self):
        scene = BeakerScene(SceneConfiguration(autofill_enabled=False))
        scene.select_solute(BATTERY_ACID)
        scene.set_water_flow_rate(0.25)
        scene.step(0.5)
        meter = PHMeter()
        meter.jump_to(scene, "water_faucet")
        reading = meter.read(scene)
        assert reading.fluid is FluidKind.WATER_STREAM
        assert reading.display == "7.00"
        assert reading.neutral

    def test_pure_water_is_neutral(self):
        scene = BeakerScene(SceneConfiguration(initial_solute=WATER))
        for _ in range(10):
            scene.step(0.1)
        meter = PHMeter()
        meter.jump_to(scene, "beaker")
        assert meter.read(scene).neutral

    def test_statistics(self, scene):
        meter = PHMeter()
        meter.read(scene, current_time=0.0)
        meter.jump_to(scene, "beaker")
        meter.read(scene, current_time=1.0)
        meter.read(scene, current_time=2.0)

        stats = meter.get_statistics(window_seconds=10.0)
        assert stats["count"] == 3
        assert stats["mean"] == pytest.approx(scene.solution.pH)
        assert stats["no_reading_rate"] == pytest.approx(1 / 3)

        recent = meter.get_recent_readings(window_seconds=1.0)
        assert [r.timestamp for r in recent] == [2.0, 1.0]

    def test_statistics_without_readings(self):
        stats = PHMeter().get_statistics()
        assert stats["count"] == 0
        assert np.isnan(stats["mean"])

    def test_history_is_bounded(self, scene):
        meter = PHMeter(max_history_length=5)
        for _ in range(12):
            meter.read(scene)
        assert len(meter.reading_history) == 5


def test_validate_meter_passes():
    validate_meter()
