"""
Beaker Scene
============

Integrates all engine components into one simulated scene:
- Solution (volumes and derived chemistry)
- Flow sources (dropper, water faucet, drain faucet)
- Flow integrator (volume bookkeeping per tick)
- Fluid regions and probe contact resolution

STEP ORDER
==========

Each call to step(dt):

1. If autofilling, add solute toward the autofill volume; user flows are
   ignored and both faucets stay disabled.
2. Otherwise run the flow integrator (add solute, add water, drain,
   derive enablement).
3. Recompute fluid regions from the new volume and flow rates.

The probe can be resolved at any time between steps; it only reads state.

SOLUTE SELECTION POLICY
=======================

Selecting a solute empties the beaker and, when autofill is enabled,
dispenses autofill_volume of the new solute at autofill_flow_rate. Autofill
stops exactly at autofill_volume, after which enablement is recomputed.

Date: October 2026
License: MIT
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
import logging

from .conversion import Species
from .flow import Dropper, Faucet, FlowIntegrator, FlowStepResult
from .probe import (
    BeakerGeometry,
    FluidRegions,
    Point,
    ProbeContactResolver,
    ProbeReading,
)
from .solutes import WATER, SoluteKind
from .solution import Solution, SolutionSnapshot

logger = logging.getLogger(__name__)


@dataclass
class SceneConfiguration:
    """
    Complete configuration for a beaker scene.

    Combines beaker geometry, flow limits and the autofill policy.
    """

    # Beaker
    capacity: float = 1.2  # [L]
    beaker_position: Point = (750.0, 580.0)  # bottom-centre, view units
    beaker_size: Tuple[float, float] = (450.0, 300.0)  # view units

    # Flow limits
    dropper_max_flow_rate: float = 0.05  # [L/s]
    faucet_max_flow_rate: float = 0.25  # [L/s]
    drain_max_flow_rate: float = 0.25  # [L/s]
    faucet_spout_width: float = 45.0  # view units

    # Solute
    initial_solute: SoluteKind = WATER

    # Autofill
    autofill_enabled: bool = True
    autofill_volume: float = 0.5  # [L]
    autofill_flow_rate: float = 0.75  # [L/s]

    def validate(self) -> None:
        """Validate configuration consistency."""
        if self.capacity <= 0:
            raise ValueError(f"Capacity must be positive: {self.capacity}")
        if not 0 <= self.autofill_volume <= self.capacity:
            raise ValueError(
                f"Autofill volume {self.autofill_volume}L outside "
                f"[0, {self.capacity}]L"
            )
        rates = {
            "dropper_max_flow_rate": self.dropper_max_flow_rate,
            "faucet_max_flow_rate": self.faucet_max_flow_rate,
            "drain_max_flow_rate": self.drain_max_flow_rate,
            "autofill_flow_rate": self.autofill_flow_rate,
        }
        for name, rate in rates.items():
            if rate < 0:
                raise ValueError(f"{name} cannot be negative: {rate}")
        if (
            self.autofill_enabled
            and self.autofill_volume > 0
            and not self.autofill_flow_rate > 0
        ):
            raise ValueError(
                f"Autofill flow rate must be positive: {self.autofill_flow_rate}"
            )
        if self.beaker_size[0] <= 0 or self.beaker_size[1] <= 0:
            raise ValueError(f"Beaker size must be positive: {self.beaker_size}")


@dataclass
class SceneState:
    """Summary of the scene after a step, for logging and plotting."""

    time: float = 0.0  # [s]
    solute: str = WATER.key
    solute_volume: float = 0.0  # [L]
    solvent_volume: float = 0.0  # [L]
    pH: Optional[float] = None
    concentrations: Dict[str, Optional[float]] = field(default_factory=dict)
    quantities: Dict[str, Optional[float]] = field(default_factory=dict)

    @property
    def total_volume(self) -> float:
        return self.solute_volume + self.solvent_volume


class BeakerScene:
    """
    One beaker with a dropper, a water faucet and a drain faucet.

    Single-threaded: the scene is stepped from one driving loop and only
    this scene mutates its solution and flow sources.
    """

    def __init__(self, config: Optional[SceneConfiguration] = None):
        """
        Initialize scene.

        Args:
            config: Scene configuration, defaults if omitted
        """
        if config is None:
            config = SceneConfiguration()
        config.validate()
        self.config = config

        self._initialize_components()

        self.time = 0.0
        self.is_autofilling = False
        self.regions = FluidRegions()

        self.select_solute(config.initial_solute)

        logger.info(
            f"Scene initialized: V_max={config.capacity}L, "
            f"solute={self.solution.solute.key}, autofill={config.autofill_enabled}"
        )

    def _initialize_components(self):
        """Create solution, flow sources, integrator and geometry."""
        config = self.config

        self.geometry = BeakerGeometry(
            position=config.beaker_position, size=config.beaker_size
        )
        self.geometry.validate()

        self.solution = Solution(config.initial_solute, capacity=config.capacity)

        # Placement relative to the beaker
        x, y = config.beaker_position
        height = config.beaker_size[1]

        self.dropper = Dropper(
            config.initial_solute,
            max_flow_rate=config.dropper_max_flow_rate,
            position=(x - 50.0, y - height - 15.0),
        )
        self.water_faucet = Faucet(
            "water_faucet",
            max_flow_rate=config.faucet_max_flow_rate,
            spout_width=config.faucet_spout_width,
            position=(self.geometry.right - 50.0, y - height - 45.0),
        )
        self.drain_faucet = Faucet(
            "drain_faucet",
            max_flow_rate=config.drain_max_flow_rate,
            spout_width=config.faucet_spout_width,
            position=(self.geometry.left - 75.0, y + 43.0),
        )

        self.integrator = FlowIntegrator(
            self.solution, self.dropper, self.water_faucet, self.drain_faucet
        )
        self.resolver = ProbeContactResolver()

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def select_solute(self, solute: SoluteKind) -> None:
        """
        Change the solute in the dropper and the beaker.

        The beaker is emptied and, if enabled, autofilled with the new solute.

        Args:
            solute: Catalog or custom solute
        """
        self.dropper.solute = solute
        self.solution.set_solute(solute)
        self.solution.solute_volume = 0.0
        self.solution.solvent_volume = 0.0

        logger.info(f"Solute selected: {solute.name} (pH {solute.pH})")
        self._start_autofill()

    def set_dropper_dispensing(self, dispensing: bool) -> None:
        if not self.is_autofilling:
            self.dropper.set_dispensing(dispensing)

    def set_water_flow_rate(self, flow_rate: float) -> float:
        if self.is_autofilling:
            return self.water_faucet.flow_rate
        return self.water_faucet.set_flow_rate(flow_rate)

    def set_drain_flow_rate(self, flow_rate: float) -> float:
        if self.is_autofilling:
            return self.drain_faucet.flow_rate
        return self.drain_faucet.set_flow_rate(flow_rate)

    # ------------------------------------------------------------------
    # Time
    # ------------------------------------------------------------------

    def step(self, dt: float) -> FlowStepResult:
        """
        Advance the scene by dt.

        Args:
            dt: Time step [s]

        Returns:
            Volumes moved during the step
        """
        if self.is_autofilling:
            result = self._step_autofill(dt)
        else:
            result = self.integrator.step(dt)

        if dt > 0:
            self.time += dt

        self.regions = self.geometry.compute_regions(
            self.solution, self.dropper, self.water_faucet, self.drain_faucet
        )
        return result

    def _start_autofill(self) -> None:
        config = self.config
        self.integrator.update_enabled()
        if config.autofill_enabled and config.autofill_volume > 0:
            self.is_autofilling = True
            # Cancel any faucet interaction in progress
            self.water_faucet._set_enabled(False)
            self.drain_faucet._set_enabled(False)
            self.dropper.set_dispensing(True)
            logger.info(f"Autofill started: {config.autofill_volume}L")
        else:
            self.dropper.set_dispensing(False)

        self.regions = self.geometry.compute_regions(
            self.solution, self.dropper, self.water_faucet, self.drain_faucet
        )

    def _step_autofill(self, dt: float) -> FlowStepResult:
        result = FlowStepResult(dt=dt)
        if not dt > 0:
            return result

        target = self.config.autofill_volume
        remaining = target - self.solution.total_volume
        requested = self.config.autofill_flow_rate * dt

        if requested >= remaining:
            result.solute_added = max(0.0, remaining)
            self.solution.solute_volume = target - self.solution.solvent_volume
            self._stop_autofill()
        else:
            result.solute_added = requested
            self.solution.apply_volume_delta(requested, 0.0)

        return result

    def _stop_autofill(self) -> None:
        self.is_autofilling = False
        self.dropper.set_dispensing(False)
        self.water_faucet._set_enabled(True)
        self.drain_faucet._set_enabled(True)
        self.integrator.update_enabled()
        logger.info(f"Autofill complete: V={self.solution.total_volume:.3f}L")

    # ------------------------------------------------------------------
    # Readout
    # ------------------------------------------------------------------

    def read_probe(self, position: Point) -> ProbeReading:
        """Resolve what a probe at position is sampling."""
        return self.resolver.resolve(position, self.regions, self.solution)

    def get_state(self) -> SceneState:
        """Current state summary."""
        solution = self.solution
        return SceneState(
            time=self.time,
            solute=solution.solute.key,
            solute_volume=solution.solute_volume,
            solvent_volume=solution.solvent_volume,
            pH=solution.pH,
            concentrations={
                s.value: solution.get_concentration(s) for s in Species
            },
            quantities={s.value: solution.get_quantity(s) for s in Species},
        )

    def snapshot(self) -> SolutionSnapshot:
        return self.solution.snapshot()

    def restore(self, snapshot: SolutionSnapshot) -> None:
        """Restore solution state without triggering autofill."""
        self.is_autofilling = False
        self.dropper.set_dispensing(False)
        self.dropper.solute = snapshot.solute
        self.solution.restore(snapshot)
        self.water_faucet._set_enabled(True)
        self.drain_faucet._set_enabled(True)
        self.integrator.update_enabled()
        self.regions = self.geometry.compute_regions(
            self.solution, self.dropper, self.water_faucet, self.drain_faucet
        )

    def reset(self) -> None:
        """Return the scene to its initial configuration."""
        self.time = 0.0
        self.is_autofilling = False
        self.dropper.reset()
        self.water_faucet.reset()
        self.drain_faucet.reset()
        self.solution.reset()
        self.select_solute(self.config.initial_solute)
        logger.info("Scene reset")

    def print_diagnostics(self):
        """Print scene diagnostics."""
        state = self.get_state()
        solution = self.solution

        print("\n" + "=" * 70)
        print("BEAKER DIAGNOSTICS")
        print("=" * 70)

        print(f"\nTime: {state.time:.1f} s")
        print(f"Solute: {solution.solute.name} (stock pH {solution.solute.pH})")
        print(
            f"Volume: {state.total_volume:.3f} L "
            f"(solute {state.solute_volume:.3f} L, water {state.solvent_volume:.3f} L)"
        )
        print(f"pH: {'no reading' if state.pH is None else f'{state.pH:.2f}'}")

        print(f"\n{'Species':<8} {'Conc. (mol/L)':<16} {'Quantity (mol)':<16}")
        print("-" * 42)
        for species in Species:
            c = state.concentrations[species.value]
            n = state.quantities[species.value]
            c_text = "-" if c is None else f"{c:.3e}"
            n_text = "-" if n is None else f"{n:.3e}"
            print(f"{species.value:<8} {c_text:<16} {n_text:<16}")

        print("\nSources:")
        for source in (self.dropper, self.water_faucet, self.drain_faucet):
            print(
                f"  {source.name:<14} Q={source.flow_rate:.3f} L/s "
                f"enabled={source.enabled}"
            )

        print("=" * 70 + "\n")


def validate_scene():
    """Comprehensive validation of the scene, using the reference scenario."""
    from .solutes import custom_solute

    scene = BeakerScene(SceneConfiguration(autofill_enabled=False))
    scene.select_solute(custom_solute(2.0))

    # Test 1: Dropper alone keeps the stock pH
    scene.set_dropper_dispensing(True)
    for _ in range(4):
        scene.step(1.0)
    scene.set_dropper_dispensing(False)
    assert np.isclose(scene.solution.solute_volume, 0.2), "Solute volume"
    assert scene.solution.pH == 2.0, "Pure stock must keep its pH"

    # Test 2: Water fills to capacity and dilutes
    scene.set_water_flow_rate(0.25)
    for _ in range(4):
        scene.step(1.0)
    assert scene.solution.total_volume == scene.config.capacity, "Capacity"
    assert 2.0 < scene.solution.pH < 7.0, "Dilution"
    pH_full = scene.solution.pH

    # Test 3: Draining preserves pH
    scene.set_drain_flow_rate(0.25)
    scene.step(1.0)
    assert np.isclose(scene.solution.total_volume, 0.95), "Drain volume"
    assert np.isclose(scene.solution.pH, pH_full, atol=1e-9), "Drain changed pH"

    # Test 4: Autofill on solute change
    autofill = BeakerScene()
    for _ in range(10):
        autofill.step(0.1)
    assert autofill.solution.total_volume == autofill.config.autofill_volume
    assert not autofill.is_autofilling, "Autofill should stop"

    print("✓ All scene validations passed")


if __name__ == "__main__":
    """
    Demonstration of the beaker scene: fill, dilute, drain.
    """
    import matplotlib.pyplot as plt
    from .solutes import SODA

    scene = BeakerScene(SceneConfiguration(autofill_enabled=False))
    scene.select_solute(SODA)

    dt = 0.1
    times, volumes, pHs = [], [], []

    for step in range(int(16.0 / dt)):
        t = step * dt
        scene.set_dropper_dispensing(t < 4.0)
        scene.set_water_flow_rate(0.25 if 4.0 <= t < 8.0 else 0.0)
        scene.set_drain_flow_rate(0.1 if t >= 10.0 else 0.0)
        scene.step(dt)

        times.append(scene.time)
        volumes.append(scene.solution.total_volume)
        pHs.append(np.nan if scene.solution.pH is None else scene.solution.pH)

    scene.print_diagnostics()

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(10, 7), sharex=True)
    ax1.plot(times, volumes, linewidth=2)
    ax1.axhline(scene.config.capacity, color="red", linestyle=":", alpha=0.7)
    ax1.set_ylabel("Volume [L]")
    ax1.grid(True, alpha=0.3)
    ax2.plot(times, pHs, linewidth=2)
    ax2.set_xlabel("Time [s]")
    ax2.set_ylabel("pH")
    ax2.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig("beaker_scene_demo.png", dpi=150)
    print("Plot saved to beaker_scene_demo.png")

    validate_scene()
