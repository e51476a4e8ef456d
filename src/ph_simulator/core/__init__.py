"""
pH Engine Core Package
======================

Volumetric pH simulation of a single beaker.

This package provides:
- Conversion: pH ⇄ concentration ⇄ quantity, and the dilution rule
- Solutes: catalog of stock liquids and custom solutes
- Solution: volumes in the beaker with derived chemistry
- Flow: dropper, water faucet, drain faucet and the tick integrator
- Probe: fluid regions and probe contact resolution
- Scene: integrated beaker with autofill

USAGE EXAMPLE
============

```python
from ph_simulator.core import BeakerScene, SceneConfiguration, ORANGE_JUICE

scene = BeakerScene(SceneConfiguration(autofill_enabled=False))
scene.select_solute(ORANGE_JUICE)

# Dispense solute for 4 s, then dilute for 4 s
scene.set_dropper_dispensing(True)
for _ in range(40):
    scene.step(dt=0.1)
scene.set_dropper_dispensing(False)

scene.set_water_flow_rate(0.25)
for _ in range(40):
    scene.step(dt=0.1)

scene.solution.pH                                  # mixed pH
scene.read_probe((750.0, 500.0)).fluid             # FluidKind.SOLUTION
```

MODEL SCOPE
===========

WHAT THIS PACKAGE DOES:
- Tracks solute and water volumes under bounded flows
- Derives pH, [H₃O⁺], [OH⁻], [H₂O], moles and particle counts on demand
- Resolves which fluid a probe tip is touching

WHAT THIS PACKAGE DOES NOT DO:
- NO rendering or user interface
- NO weak acid/base equilibria or buffering
- NO temperature dependence (Kw fixed at 25°C)
- NO mixing of different solutes in one beaker

EDGE CASES
==========

1. **Empty beaker:** pH, concentrations and quantities are None; particle
   counts are 0.
2. **Full beaker:** additions beyond capacity are rejected; the total is
   exactly the capacity.
3. **Over-draining:** the beaker is emptied, never negative.
4. **Out-of-range flow requests:** clamped to [0, max] with a warning.

Run validation: call `run_all_validations()`

Date: October 2026
License: MIT
"""

# Version
__version__ = "1.0.0"

# Conversions
from .conversion import (
    KW,
    PKW,
    PH_NEUTRAL,
    WATER_CONCENTRATION,
    AVOGADRO,
    Species,
    ph_to_concentration,
    ph_from_concentration,
    ph_from_quantity,
    compute_mixed_ph,
    is_equivalent_to_water,
    validate_conversion,
)

# Solutes
from .solutes import (
    SoluteKind,
    SOLUTES,
    BATTERY_ACID,
    BLOOD,
    CHICKEN_SOUP,
    COFFEE,
    DRAIN_CLEANER,
    HAND_SOAP,
    MILK,
    ORANGE_JUICE,
    SODA,
    SPIT,
    VOMIT,
    WATER,
    get_solute,
    custom_solute,
    validate_solutes,
)

# Solution
from .solution import Solution, SolutionSnapshot, validate_solution

# Flow
from .flow import (
    FlowSource,
    Faucet,
    Dropper,
    FlowIntegrator,
    FlowStepResult,
    validate_flow,
)

# Probe
from .probe import (
    FluidKind,
    Region,
    FluidRegions,
    ProbeReading,
    BeakerGeometry,
    ProbeContactResolver,
    validate_probe,
)

# Integrated scene
from .scene import BeakerScene, SceneConfiguration, SceneState, validate_scene

__all__ = [
    # Main scene class
    "BeakerScene",
    "SceneConfiguration",
    "SceneState",
    # Conversion
    "KW",
    "PKW",
    "PH_NEUTRAL",
    "WATER_CONCENTRATION",
    "AVOGADRO",
    "Species",
    "ph_to_concentration",
    "ph_from_concentration",
    "ph_from_quantity",
    "compute_mixed_ph",
    "is_equivalent_to_water",
    # Solutes
    "SoluteKind",
    "SOLUTES",
    "BATTERY_ACID",
    "BLOOD",
    "CHICKEN_SOUP",
    "COFFEE",
    "DRAIN_CLEANER",
    "HAND_SOAP",
    "MILK",
    "ORANGE_JUICE",
    "SODA",
    "SPIT",
    "VOMIT",
    "WATER",
    "get_solute",
    "custom_solute",
    # Solution
    "Solution",
    "SolutionSnapshot",
    # Flow
    "FlowSource",
    "Faucet",
    "Dropper",
    "FlowIntegrator",
    "FlowStepResult",
    # Probe
    "FluidKind",
    "Region",
    "FluidRegions",
    "ProbeReading",
    "BeakerGeometry",
    "ProbeContactResolver",
    # Validation functions
    "validate_conversion",
    "validate_solutes",
    "validate_solution",
    "validate_flow",
    "validate_probe",
    "validate_scene",
]


def run_all_validations():
    """
    Run all engine validation tests.

    This should be run after any code changes to ensure
    the volume bookkeeping and chemistry stay correct.
    """
    print("Running pH Engine Validation Suite")
    print("=" * 70)

    print("\n1. Conversion...")
    validate_conversion()

    print("\n2. Solutes...")
    validate_solutes()

    print("\n3. Solution...")
    validate_solution()

    print("\n4. Flow...")
    validate_flow()

    print("\n5. Probe...")
    validate_probe()

    print("\n6. Scene...")
    validate_scene()

    print("\n" + "=" * 70)
    print("ALL VALIDATIONS PASSED ✓")
    print("pH engine verified for correctness.")
    print("=" * 70)


if __name__ == "__main__":
    """Run all validations when package is executed."""
    run_all_validations()
