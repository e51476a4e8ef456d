"""
Beaker Simulation Runner
========================

Command-line entry point for the beaker pH simulation.

Runs a scripted scenario against one beaker:

1. Select a solute (autofill if enabled)
2. Dispense solute with the dropper
3. Dilute with the water faucet
4. Drain through the drain faucet

and logs volume, pH and concentrations along the way. The pH meter probe
sits in the beaker so the logged reading is what a user would see.

Date: October 2026
License: MIT
"""

import argparse
import time
import logging
import signal
import sys
from typing import Dict, List, Optional

from .core import BeakerScene, SceneConfiguration, Species, get_solute, custom_solute
from .core.solutes import SOLUTES, SoluteKind
from .meter import PHMeter, format_ph

logger = logging.getLogger(__name__)

# Global running flag for graceful shutdown
running = True


def signal_handler(sig, frame):
    """Handle Ctrl+C for clean shutdown."""
    global running
    logger.info("Shutdown signal received. Stopping simulation...")
    running = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ph-simulator", description="Beaker pH Simulation"
    )
    solute_group = parser.add_mutually_exclusive_group()
    solute_group.add_argument(
        "--solute",
        type=str,
        default="batteryAcid",
        help=f"Catalog solute ({', '.join(s.key for s in SOLUTES)})",
    )
    solute_group.add_argument(
        "--custom-ph", type=float, default=None, help="Custom solute stock pH"
    )
    parser.add_argument(
        "--dt", type=float, default=0.1, help="Simulation timestep [seconds]"
    )
    parser.add_argument(
        "--dropper-seconds", type=float, default=4.0, help="Dropper phase [seconds]"
    )
    parser.add_argument(
        "--water-seconds", type=float, default=4.0, help="Water phase [seconds]"
    )
    parser.add_argument(
        "--drain-seconds", type=float, default=1.0, help="Drain phase [seconds]"
    )
    parser.add_argument(
        "--no-autofill",
        action="store_true",
        help="Start from an empty beaker instead of autofilling",
    )
    parser.add_argument(
        "--realtime", action="store_true", help="Pace steps to wall-clock time"
    )
    parser.add_argument(
        "--plot",
        type=str,
        default=None,
        metavar="FILE",
        help="Save volume/pH trajectory plot (requires matplotlib)",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def resolve_solute(args) -> SoluteKind:
    """Solute from --custom-ph or --solute. Raises ValueError if invalid."""
    if args.custom_ph is not None:
        return custom_solute(args.custom_ph)
    return get_solute(args.solute)


def log_state(scene: BeakerScene, meter: PHMeter, label: str) -> None:
    """Log volume, meter reading and concentrations."""
    state = scene.get_state()
    reading = meter.read(scene)

    def fmt(value: Optional[float]) -> str:
        return "-" if value is None else f"{value:.3e}"

    logger.info(
        f"{label} t={state.time:.1f}s | "
        f"V={state.total_volume:.3f}L "
        f"(solute={state.solute_volume:.3f}, water={state.solvent_volume:.3f}) | "
        f"pH={reading.display}"
    )
    logger.info(
        f"{label} [H3O+]={fmt(state.concentrations[Species.H3O.value])} | "
        f"[OH-]={fmt(state.concentrations[Species.OH.value])} mol/L"
    )


def run_phase(
    scene: BeakerScene,
    meter: PHMeter,
    name: str,
    duration: float,
    dt: float,
    realtime: bool,
    trajectory: Dict[str, List[float]],
) -> None:
    """Step the scene for duration seconds, recording the trajectory."""
    n_steps = int(round(duration / dt))
    logger.info(f"[{name}] {n_steps} steps of {dt}s")

    for _ in range(n_steps):
        if not running:
            break

        step_start = time.monotonic()

        scene.step(dt)
        reading = meter.read(scene)

        trajectory["time"].append(scene.time)
        trajectory["volume"].append(scene.solution.total_volume)
        trajectory["pH"].append(float("nan") if reading.pH is None else reading.pH)

        # --- Real-time pacing ---
        if realtime:
            elapsed = time.monotonic() - step_start
            sleep_time = max(0.0, dt - elapsed)
            if sleep_time > 0:
                time.sleep(sleep_time)

    log_state(scene, meter, f"[{name}]")


def run_autofill(scene: BeakerScene, meter: PHMeter, dt: float, trajectory) -> None:
    """Step until autofill completes."""
    while running and scene.is_autofilling:
        scene.step(dt)
        reading = meter.read(scene)
        trajectory["time"].append(scene.time)
        trajectory["volume"].append(scene.solution.total_volume)
        trajectory["pH"].append(float("nan") if reading.pH is None else reading.pH)
    log_state(scene, meter, "[AUTOFILL]")


def save_plot(trajectory: Dict[str, List[float]], capacity: float, path: str) -> None:
    """Plot volume and pH against time."""
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(10, 7), sharex=True)

    ax1.plot(trajectory["time"], trajectory["volume"], linewidth=2)
    ax1.axhline(capacity, color="red", linestyle=":", alpha=0.7, label="Capacity")
    ax1.set_ylabel("Volume [L]")
    ax1.legend()
    ax1.grid(True, alpha=0.3)

    ax2.plot(trajectory["time"], trajectory["pH"], linewidth=2, color="purple")
    ax2.axhline(7.0, color="gray", linestyle="--", alpha=0.5, label="Neutral")
    ax2.set_xlabel("Time [s]")
    ax2.set_ylabel("pH")
    ax2.legend()
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(path, dpi=150)
    plt.close(fig)
    logger.info(f"Plot saved to {path}")


def main(argv: Optional[List[str]] = None) -> None:
    global running
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logger.info("=" * 70)
    logger.info("BEAKER pH SIMULATION")
    logger.info("=" * 70)

    # ========================================================================
    # PHASE 1: Initialize Scene
    # ========================================================================
    logger.info("[PHASE 1] Initializing scene...")

    try:
        if not args.dt > 0:
            raise ValueError(f"Time step must be positive: {args.dt}")
        solute = resolve_solute(args)
        config = SceneConfiguration(
            initial_solute=solute, autofill_enabled=not args.no_autofill
        )
        scene = BeakerScene(config)
        meter = PHMeter()
        meter.jump_to(scene, "beaker")
        logger.info(f"✓ Scene initialized with {solute.name} (pH {solute.pH})")

    except ValueError as e:
        logger.error(f"Scene initialization failed: {e}")
        sys.exit(1)

    trajectory: Dict[str, List[float]] = {"time": [], "volume": [], "pH": []}

    running = True
    previous_handlers = {
        sig: signal.signal(sig, signal_handler)
        for sig in (signal.SIGINT, signal.SIGTERM)
    }

    # ========================================================================
    # PHASE 2: Scenario
    # ========================================================================
    logger.info("[PHASE 2] Running scenario...")
    logger.info("Press Ctrl+C to stop gracefully")

    try:
        run_autofill(scene, meter, args.dt, trajectory)

        scene.set_dropper_dispensing(True)
        run_phase(
            scene, meter, "DROPPER", args.dropper_seconds, args.dt,
            args.realtime, trajectory,
        )
        scene.set_dropper_dispensing(False)

        scene.set_water_flow_rate(scene.water_faucet.max_flow_rate)
        run_phase(
            scene, meter, "WATER", args.water_seconds, args.dt,
            args.realtime, trajectory,
        )
        scene.set_water_flow_rate(0.0)

        scene.set_drain_flow_rate(scene.drain_faucet.max_flow_rate)
        run_phase(
            scene, meter, "DRAIN", args.drain_seconds, args.dt,
            args.realtime, trajectory,
        )
        scene.set_drain_flow_rate(0.0)

    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")

    finally:
        logger.info(f"Final pH: {format_ph(scene.solution.pH)}")
        for sig, handler in previous_handlers.items():
            if handler is not None:
                signal.signal(sig, handler)
        if args.verbose:
            scene.print_diagnostics()

    if args.plot:
        save_plot(trajectory, config.capacity, args.plot)

    logger.info("Simulation stopped cleanly")


if __name__ == "__main__":
    main()
