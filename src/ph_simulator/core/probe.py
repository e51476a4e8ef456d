"""
Probe Contact Module
====================

Geometric abstractions for the fluid bodies a pH probe can touch, and the
resolver that decides which single fluid the probe is sampling.

GEOMETRY
========

Coordinates are view coordinates: x grows to the right, y grows downward.
Every fluid body is an axis-aligned rectangle:

- Solution:       beaker interior, height ∝ V_total / V_max, resting on the
                  beaker bottom
- Water stream:   below the water-faucet spout down to the solution
                  surface, width ∝ Q / Q_max × spout width
- Dropper stream: below the dropper tip down to the solution surface,
                  fixed width
- Drain stream:   below the drain-faucet spout for a fixed length, width
                  ∝ Q / Q_max × spout width

A stream region exists only while its source is flowing; the solution
region only while the beaker is not empty.

CONTACT PRIORITY
================

Point-in-rectangle containment, first match wins:

1. Solution       → mixed pH of the solution
2. Drain stream   → mixed pH of the solution (draining preserves pH)
3. Dropper stream → stock pH of the solute (not yet mixed)
4. Water stream   → 7 (not yet mixed)
5. Nothing        → None

The resolver is a pure function of its inputs: no state, no hysteresis.

Date: October 2026
License: MIT
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .conversion import PH_NEUTRAL
from .solution import Solution

Point = Tuple[float, float]


class FluidKind(Enum):
    """Fluid body the probe is in contact with."""

    SOLUTION = "solution"
    DRAIN_STREAM = "drain_stream"
    DROPPER_STREAM = "dropper_stream"
    WATER_STREAM = "water_stream"
    NONE = "none"


@dataclass(frozen=True)
class Region:
    """
    Axis-aligned rectangle, bounds inclusive.

    Attributes:
        min_x, min_y: Top-left corner
        max_x, max_y: Bottom-right corner
    """

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def __post_init__(self):
        """Validate bounds."""
        if self.min_x > self.max_x or self.min_y > self.max_y:
            raise ValueError(
                f"Inverted region bounds: ({self.min_x}, {self.min_y}) → "
                f"({self.max_x}, {self.max_y})"
            )

    @classmethod
    def from_top_center(
        cls, center_x: float, top: float, width: float, height: float
    ) -> "Region":
        """Rectangle hanging below a point, e.g. a stream below a spout."""
        return cls(center_x - width / 2, top, center_x + width / 2, top + height)

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def contains(self, point: Point) -> bool:
        x, y = point
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def clamp(self, point: Point) -> Point:
        """Nearest point inside the region."""
        x, y = point
        return (
            min(max(x, self.min_x), self.max_x),
            min(max(y, self.min_y), self.max_y),
        )


@dataclass(frozen=True)
class FluidRegions:
    """Current extents of each fluid body, None where the body is absent."""

    solution: Optional[Region] = None
    drain_stream: Optional[Region] = None
    dropper_stream: Optional[Region] = None
    water_stream: Optional[Region] = None


@dataclass(frozen=True)
class ProbeReading:
    """What the probe is touching, and the pH it reads there."""

    fluid: FluidKind
    pH: Optional[float]


@dataclass
class BeakerGeometry:
    """
    Beaker placement and the stream dimensions derived from it.

    Attributes:
        position: Bottom-centre of the beaker
        size: (width, height) of the beaker interior
        dropper_stream_width: Width of the falling solute stream
        drain_stream_length: Length of the stream below the drain spout
    """

    position: Point = (750.0, 580.0)
    size: Tuple[float, float] = (450.0, 300.0)
    dropper_stream_width: float = 15.0
    drain_stream_length: float = 1000.0

    def validate(self) -> None:
        """Validate geometry."""
        width, height = self.size
        if width <= 0 or height <= 0:
            raise ValueError(f"Beaker size must be positive: {self.size}")
        if self.dropper_stream_width < 0 or self.drain_stream_length < 0:
            raise ValueError("Stream dimensions cannot be negative")

    @property
    def left(self) -> float:
        return self.position[0] - self.size[0] / 2

    @property
    def right(self) -> float:
        return self.position[0] + self.size[0] / 2

    @property
    def bottom(self) -> float:
        return self.position[1]

    @property
    def top(self) -> float:
        return self.position[1] - self.size[1]

    def solution_surface(self, solution: Solution) -> float:
        """y of the solution surface; the beaker bottom when empty."""
        fill = min(solution.total_volume / solution.capacity, 1.0)
        return self.bottom - fill * self.size[1]

    def compute_regions(
        self, solution, dropper, water_faucet, drain_faucet
    ) -> FluidRegions:
        """
        Build fluid regions for the current volume and flow rates.

        Args:
            solution: Solution in the beaker
            dropper: Dropper (position is its tip)
            water_faucet: Water faucet (position is its spout)
            drain_faucet: Drain faucet (position is its spout)

        Returns:
            FluidRegions for this instant
        """
        surface = self.solution_surface(solution)

        solution_region = None
        if solution.total_volume > 0:
            solution_region = Region(self.left, surface, self.right, self.bottom)

        dropper_region = None
        if dropper.is_flowing:
            x, tip = dropper.position
            dropper_region = Region.from_top_center(
                x, tip, self.dropper_stream_width, max(0.0, surface - tip)
            )

        water_region = None
        if water_faucet.is_flowing:
            x, spout = water_faucet.position
            width = _stream_width(water_faucet)
            water_region = Region.from_top_center(
                x, spout, width, max(0.0, surface - spout)
            )

        drain_region = None
        if drain_faucet.is_flowing:
            x, spout = drain_faucet.position
            width = _stream_width(drain_faucet)
            drain_region = Region.from_top_center(
                x, spout, width, self.drain_stream_length
            )

        return FluidRegions(
            solution=solution_region,
            drain_stream=drain_region,
            dropper_stream=dropper_region,
            water_stream=water_region,
        )


def _stream_width(faucet) -> float:
    if faucet.max_flow_rate == 0:
        return 0.0
    return faucet.spout_width * faucet.flow_rate / faucet.max_flow_rate


class ProbeContactResolver:
    """
    Decides which fluid a probe is sampling and what pH it reads.

    Typical Use:
    >>> resolver = ProbeContactResolver()
    >>> reading = resolver.resolve(probe_position, scene.regions, scene.solution)
    >>> reading.fluid, reading.pH
    """

    def resolve(
        self, position: Point, regions: FluidRegions, solution: Solution
    ) -> ProbeReading:
        """
        Resolve a probe position against the fluid regions.

        Args:
            position: Probe tip position
            regions: Current fluid extents
            solution: Solution in the beaker (supplies mixed and stock pH)

        Returns:
            ProbeReading for the highest-priority fluid containing the point
        """
        if _inside(regions.solution, position):
            return ProbeReading(FluidKind.SOLUTION, solution.pH)
        if _inside(regions.drain_stream, position):
            return ProbeReading(FluidKind.DRAIN_STREAM, solution.pH)
        if _inside(regions.dropper_stream, position):
            return ProbeReading(FluidKind.DROPPER_STREAM, solution.solute.pH)
        if _inside(regions.water_stream, position):
            return ProbeReading(FluidKind.WATER_STREAM, PH_NEUTRAL)
        return ProbeReading(FluidKind.NONE, None)


def _inside(region: Optional[Region], position: Point) -> bool:
    return region is not None and region.contains(position)


def validate_probe() -> None:
    """
    Validation of probe contact resolution.

    Tests:
    1. Solution outranks an overlapping drain stream
    2. Streams report unmixed chemistry
    3. Empty space reads nothing
    """
    from .solutes import BATTERY_ACID

    solution = Solution(BATTERY_ACID, 0.1, 0.9)
    resolver = ProbeContactResolver()
    box = Region(0.0, 0.0, 10.0, 10.0)
    point = (5.0, 5.0)

    # Test 1: Priority
    regions = FluidRegions(solution=box, drain_stream=box)
    reading = resolver.resolve(point, regions, solution)
    assert reading.fluid is FluidKind.SOLUTION, "Solution must win over drain"
    assert reading.pH == solution.pH, "Solution reading must be mixed pH"

    # Test 2: Streams
    reading = resolver.resolve(
        point, FluidRegions(dropper_stream=box, water_stream=box), solution
    )
    assert reading.fluid is FluidKind.DROPPER_STREAM, "Dropper must win over water"
    assert reading.pH == BATTERY_ACID.pH, "Dropper reads stock pH"
    reading = resolver.resolve(point, FluidRegions(water_stream=box), solution)
    assert reading.pH == PH_NEUTRAL, "Water stream reads neutral"

    # Test 3: Nothing
    reading = resolver.resolve((50.0, 50.0), FluidRegions(solution=box), solution)
    assert reading == ProbeReading(FluidKind.NONE, None), "Outside must read nothing"

    print("✓ All probe validations passed")


if __name__ == "__main__":
    validate_probe()
