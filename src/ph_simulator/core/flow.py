"""
Flow Module
===========

Flow sources (dropper, water faucet, drain faucet) and the integrator that
advances the solution's volumes over a time step.

TICK ALGORITHM
==============

For a time step Δt [s]:

1. Add solute:   ΔV_s = Q_dropper · Δt
2. Add solvent:  ΔV_w = Q_water · Δt
   Each addition is limited to the free volume at the time it is applied,
   so overflow of the most recently added component is rejected, never
   spilled:  ΔV_applied = min(ΔV, V_max - V_total)
3. Drain:        ΔV_d = Q_drain · Δt
   - ΔV_d >= V_total: the beaker is emptied
   - otherwise both components are removed in proportion to their share of
     the post-addition volume:
         ΔV_s,out = ΔV_d · V_s / V_total
         ΔV_w,out = ΔV_d · V_w / V_total
     so the solute:solvent ratio, and hence pH, is unchanged by draining.
4. Enablement (recomputed every tick):
   water faucet:  V_total < V_max
   drain faucet:  V_total > 0
   dropper:       not empty AND V_total < V_max
   where "V_total < V_max" means short of V_max by more than
   CAPACITY_TOLERANCE · V_max.

CONSERVATION
============

Away from the capacity and empty boundaries:
   V_total(t + Δt) = V_total(t) + ΔV_s + ΔV_w - ΔV_d

All operations are finite arithmetic; out-of-range requests are clamped.
Given identical Δt sequences and inputs the trajectory is reproducible
bit for bit.

Date: October 2026
License: MIT
"""

import numpy as np
from dataclasses import dataclass
from typing import Tuple
import logging

from .solution import Solution
from .solutes import SoluteKind

logger = logging.getLogger(__name__)

# Relative distance from capacity treated as full after an addition
CAPACITY_TOLERANCE = 1e-12


class FlowSource:
    """
    A source or sink of liquid with a bounded, non-negative flow rate.

    The enabled flag is derived by the integrator from the solution volume;
    a source that becomes disabled is turned off.
    """

    def __init__(self, name: str, max_flow_rate: float, flow_rate: float = 0.0):
        """
        Initialize flow source.

        Args:
            name: Source identifier
            max_flow_rate: Maximum flow rate [L/s]
            flow_rate: Initial flow rate [L/s]
        """
        if max_flow_rate < 0:
            raise ValueError(f"Max flow rate cannot be negative: {max_flow_rate}")

        self.name = name
        self.max_flow_rate = max_flow_rate
        self._initial_flow_rate = self._clamp(flow_rate)
        self._flow_rate = self._initial_flow_rate
        self._enabled = True

    def _clamp(self, flow_rate: float) -> float:
        if flow_rate != flow_rate:  # NaN
            return 0.0
        return max(0.0, min(float(flow_rate), self.max_flow_rate))

    @property
    def flow_rate(self) -> float:
        """Current flow rate [L/s]."""
        return self._flow_rate

    def set_flow_rate(self, flow_rate: float) -> float:
        """
        Request a flow rate, clamped to [0, max_flow_rate].

        Requests to a disabled source are ignored.

        Returns:
            The flow rate actually applied [L/s]
        """
        if not self._enabled:
            return self._flow_rate

        clamped = self._clamp(flow_rate)
        if clamped != flow_rate:
            logger.warning(
                f"{self.name}: flow rate {flow_rate} clamped to {clamped} L/s"
            )
        self._flow_rate = clamped
        return clamped

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _set_enabled(self, enabled: bool) -> None:
        if self._enabled and not enabled:
            logger.debug(f"{self.name} disabled")
            self._flow_rate = 0.0
        self._enabled = enabled

    @property
    def is_flowing(self) -> bool:
        return self._flow_rate > 0

    def reset(self) -> None:
        self._flow_rate = self._initial_flow_rate
        self._enabled = True

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.name}, flow_rate={self._flow_rate}, "
            f"enabled={self._enabled})"
        )


class Faucet(FlowSource):
    """Water faucet or drain faucet, with a spout of fixed width."""

    def __init__(
        self,
        name: str,
        max_flow_rate: float = 0.25,
        spout_width: float = 45.0,
        position: tuple = (0.0, 0.0),
    ):
        """
        Args:
            name: Faucet identifier
            max_flow_rate: Fully-open flow rate [L/s]
            spout_width: Width of the outlet, view units
            position: Centre of the spout outlet, view units
        """
        super().__init__(name, max_flow_rate)
        self.spout_width = spout_width
        self.position = position


class Dropper(FlowSource):
    """
    Dropper holding stock solute.

    Dispenses at exactly max_flow_rate while dispensing, otherwise 0.
    """

    def __init__(
        self,
        solute: SoluteKind,
        max_flow_rate: float = 0.05,
        position: tuple = (0.0, 0.0),
    ):
        """
        Args:
            solute: Solute held by the dropper
            max_flow_rate: Dispensing rate [L/s]
            position: Tip of the dropper, view units
        """
        super().__init__("dropper", max_flow_rate)
        self.solute = solute
        self.position = position
        self.empty = False

    @property
    def dispensing(self) -> bool:
        return self._flow_rate > 0

    def set_dispensing(self, dispensing: bool) -> None:
        """Turn the dropper on or off."""
        self.set_flow_rate(self.max_flow_rate if dispensing else 0.0)

    def set_flow_rate(self, flow_rate: float) -> float:
        # A dropper is either on or off
        return super().set_flow_rate(self.max_flow_rate if flow_rate > 0 else 0.0)

    def reset(self) -> None:
        super().reset()
        self.empty = False


@dataclass
class FlowStepResult:
    """Volumes moved during one integrator tick."""

    dt: float = 0.0  # [s]
    solute_added: float = 0.0  # [L]
    solvent_added: float = 0.0  # [L]
    drained: float = 0.0  # [L]
    overflow_rejected: float = 0.0  # [L] requested but not applied
    emptied: bool = False

    @property
    def net_volume_change(self) -> float:
        return self.solute_added + self.solvent_added - self.drained


class FlowIntegrator:
    """
    Applies dropper, water-faucet and drain flows to a solution.

    Pure arithmetic over the current flow rates. No exceptions for boundary
    inputs: overflow is rejected, over-draining empties the beaker.
    """

    def __init__(
        self,
        solution: Solution,
        dropper: Dropper,
        water_faucet: FlowSource,
        drain_faucet: FlowSource,
    ):
        """
        Args:
            solution: Solution to integrate
            dropper: Solute source
            water_faucet: Water source
            drain_faucet: Drain sink
        """
        self.solution = solution
        self.dropper = dropper
        self.water_faucet = water_faucet
        self.drain_faucet = drain_faucet

        self.update_enabled()

    def step(self, dt: float) -> FlowStepResult:
        """
        Advance volumes by dt.

        Args:
            dt: Time step [s], >= 0. Non-positive steps only refresh enablement.

        Returns:
            Volumes moved during the step
        """
        result = FlowStepResult(dt=dt)

        if not dt > 0:
            if dt < 0:
                logger.warning(f"Negative time step {dt}s ignored")
            self.update_enabled()
            return result

        # 1-2. Additions, each limited to the free volume at that point
        result.solute_added, rejected_solute = self._add(
            self.dropper.flow_rate * dt, solute=True
        )
        result.solvent_added, rejected_solvent = self._add(
            self.water_faucet.flow_rate * dt, solute=False
        )
        result.overflow_rejected = rejected_solute + rejected_solvent

        # 3. Drain from the post-addition volume
        result.drained, result.emptied = self._drain(self.drain_faucet.flow_rate * dt)

        # 4. Enablement
        self.update_enabled()

        logger.debug(
            f"dt={dt:.3f}s +solute={result.solute_added:.4f}L "
            f"+water={result.solvent_added:.4f}L -drain={result.drained:.4f}L "
            f"V={self.solution.total_volume:.4f}L"
        )

        return result

    def _add(self, requested: float, solute: bool) -> Tuple[float, float]:
        """Apply an addition limited to the free volume. Returns (applied, rejected)."""
        if not requested > 0:
            return 0.0, 0.0

        solution = self.solution
        if self.is_full():
            return 0.0, requested

        free = solution.capacity - solution.total_volume
        applied = max(0.0, min(requested, free))

        if solute:
            solution.apply_volume_delta(applied, 0.0)
        else:
            solution.apply_volume_delta(0.0, applied)

        # Round-off near the brim snaps to capacity
        if requested >= free or self.is_full():
            self._fill_to_capacity(solute)

        return applied, requested - applied

    def _fill_to_capacity(self, solute: bool) -> None:
        """Set the added component so the total equals capacity exactly."""
        solution = self.solution
        if solute:
            added, other = exact_fill(solution.capacity, solution.solvent_volume)
            solution.solute_volume = added
            solution.solvent_volume = other
        else:
            added, other = exact_fill(solution.capacity, solution.solute_volume)
            solution.solvent_volume = added
            solution.solute_volume = other

    def is_full(self) -> bool:
        """True when the volume is at capacity, within CAPACITY_TOLERANCE."""
        solution = self.solution
        gap = solution.capacity - solution.total_volume
        return gap <= CAPACITY_TOLERANCE * solution.capacity

    def _drain(self, requested: float) -> Tuple[float, bool]:
        """Remove solution proportionally. Returns (drained, emptied)."""
        solution = self.solution
        total_volume = solution.total_volume

        if not (requested > 0 and total_volume > 0):
            return 0.0, False

        if requested >= total_volume:
            solution.solute_volume = 0.0
            solution.solvent_volume = 0.0
            logger.debug("Beaker drained empty")
            return total_volume, True

        # Both shares are computed from the same base before either is applied
        solute_removed = requested * solution.solute_volume / total_volume
        solvent_removed = requested * solution.solvent_volume / total_volume
        solution.apply_volume_delta(-solute_removed, -solvent_removed)

        return requested, False

    def update_enabled(self) -> None:
        """Derive source enablement from the current volume."""
        full = self.is_full()

        self.water_faucet._set_enabled(not full)
        self.drain_faucet._set_enabled(self.solution.total_volume > 0)
        self.dropper._set_enabled(not self.dropper.empty and not full)


def exact_fill(
    capacity: float, other: float, max_attempts: int = 8
) -> Tuple[float, float]:
    """
    Split capacity into (added, other') with added + other' == capacity.

    capacity - other does not always sum back to capacity: when the exact sum
    falls on a rounding tie, no value of the added component lands on it.
    Each attempt tries the nearest candidates for the added component and,
    failing that, moves the other component down one ulp.

    Returns:
        (added, other), never summing above capacity
    """
    best = (0.0, min(other, capacity))
    for _ in range(max_attempts):
        base = max(0.0, capacity - other)
        for added in (
            base,
            float(np.nextafter(base, np.inf)),
            float(np.nextafter(base, -np.inf)),
        ):
            if added < 0:
                continue
            total = added + other
            if total == capacity:
                return added, other
            if total < capacity and added > best[0]:
                best = (added, other)
        if other <= 0:
            break
        other = float(np.nextafter(other, -np.inf))
    return best


def validate_flow() -> None:
    """
    Validation of the flow integrator.

    Tests:
    1. Volume conservation away from boundaries
    2. Draining preserves pH
    3. Capacity clamp is exact
    4. Over-draining empties the beaker
    5. Exact fill on a rounding tie
    """
    from .solutes import BATTERY_ACID

    solution = Solution(BATTERY_ACID, 0.2, 0.2, capacity=1.2)
    dropper = Dropper(BATTERY_ACID)
    water = Faucet("water_faucet")
    drain = Faucet("drain_faucet")
    integrator = FlowIntegrator(solution, dropper, water, drain)

    # Test 1: Conservation
    water.set_flow_rate(0.1)
    drain.set_flow_rate(0.05)
    start = solution.total_volume
    net = 0.0
    for _ in range(5):
        net += integrator.step(0.5).net_volume_change
    assert abs(solution.total_volume - (start + net)) < 1e-12, "Volume not conserved"
    assert abs(net - 5 * 0.5 * (0.1 - 0.05)) < 1e-12, "Unexpected net volume"

    # Test 2: Drain preserves pH
    water.set_flow_rate(0.0)
    pH_before = solution.pH
    integrator.step(1.0)
    assert abs(solution.pH - pH_before) < 1e-9, "Draining changed pH"

    # Test 3: Capacity clamp
    drain.set_flow_rate(0.0)
    water.set_flow_rate(0.25)
    for _ in range(10):
        integrator.step(1.0)
    assert solution.total_volume == solution.capacity, "Capacity clamp not exact"
    assert not water.enabled, "Water faucet should be disabled when full"

    # Test 4: Empty
    drain.set_flow_rate(0.25)
    integrator.step(100.0)
    assert solution.total_volume == 0 and solution.pH is None, "Should be empty"
    assert not drain.enabled, "Drain should be disabled when empty"

    # Test 5: Fill on a rounding tie
    added, other = exact_fill(1.2, 0.13)
    assert added + other == 1.2, "Exact fill missed capacity"

    print("✓ All flow validations passed")


if __name__ == "__main__":
    validate_flow()
