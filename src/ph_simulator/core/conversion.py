"""
pH Conversion Module
====================

Stateless conversions between pH, molar concentration and molar quantity
for the three species tracked in the beaker: H₃O⁺, OH⁻ and H₂O.

THEORETICAL FOUNDATION
=====================

1. Water autoionization at 25°C:
   [H₃O⁺] · [OH⁻] = Kw = 1.0e-14 [mol²/L²]

2. Log-scale definitions:
   pH  = -log₁₀[H₃O⁺]
   pOH = -log₁₀[OH⁻] = 14 - pH

3. Quantity (moles) and particle count:
   n = C · V
   N = C · V · N_A

4. Water concentration:
   [H₂O] ≈ 55.6 mol/L, held constant. Dissolved solute does not perturb it
   at the scale modelled here.

5. Dilution of a stock solute with neutral water (strong acid/base model):
   The stock's excess over the neutral baseline is diluted by volume,

   [H₃O⁺]_mix = [H₃O⁺]_w + ([H₃O⁺]_s - [H₃O⁺]_w) · V_s / (V_s + V_w)   (acid)
   [OH⁻]_mix  = [OH⁻]_w  + ([OH⁻]_s  - [OH⁻]_w)  · V_s / (V_s + V_w)   (base)

   which is the volume-weighted mean of the two concentrations. Combining
   acids with bases is not modelled.

DOMAIN
======

These functions are total on their mathematically valid domain. Callers
guard volume == 0 and concentration <= 0; "no solution" is represented
upstream as pH = None.

References:
- Atkins & de Paula "Physical Chemistry" (9th ed.), ch. 7
- Harris "Quantitative Chemical Analysis" (8th ed.), ch. 6

Date: October 2026
License: MIT
"""

import numpy as np
from enum import Enum
from typing import Optional


# Physical constants (25°C)
KW = 1.0e-14  # [mol²/L²] Ion product of water
PKW = 14.0  # -log₁₀(Kw)
PH_NEUTRAL = 7.0  # pH of pure water
WATER_CONCENTRATION = 55.6  # [mol/L] Molarity of pure water
AVOGADRO = 6.02214076e23  # [1/mol]

# pH range accepted for solutes (stock solutions may exceed 0-14)
PH_MIN = -1.0
PH_MAX = 15.0

# Meter display precision, used by the neutral indicator
PH_DECIMAL_PLACES = 2


class Species(Enum):
    """Molecular species reported by the solution."""

    H3O = "H3O+"
    OH = "OH-"
    H2O = "H2O"


def ph_to_concentration_h3o(pH: float) -> float:
    """
    Convert pH to hydronium concentration.

    Args:
        pH: pH value

    Returns:
        [H₃O⁺] in mol/L
    """
    return float(10.0 ** (-pH))


def ph_to_concentration_oh(pH: float) -> float:
    """
    Convert pH to hydroxide concentration.

    Args:
        pH: pH value

    Returns:
        [OH⁻] in mol/L
    """
    return float(10.0 ** (pH - PKW))


def concentration_h3o_to_ph(concentration: float) -> float:
    """
    Convert hydronium concentration to pH.

    Args:
        concentration: [H₃O⁺] in mol/L, must be > 0

    Returns:
        pH value
    """
    return float(-np.log10(concentration))


def concentration_oh_to_ph(concentration: float) -> float:
    """
    Convert hydroxide concentration to pH.

    Args:
        concentration: [OH⁻] in mol/L, must be > 0

    Returns:
        pH value
    """
    return float(PKW + np.log10(concentration))


def moles_h3o_to_ph(moles: float, volume: float) -> float:
    """pH from moles of H₃O⁺ dissolved in volume [L]. volume must be > 0."""
    return concentration_h3o_to_ph(moles / volume)


def moles_oh_to_ph(moles: float, volume: float) -> float:
    """pH from moles of OH⁻ dissolved in volume [L]. volume must be > 0."""
    return concentration_oh_to_ph(moles / volume)


def ph_to_concentration(species: Species, pH: float) -> float:
    """
    Concentration of any tracked species at the given pH.

    H₂O is the constant pure-water molarity.

    Args:
        species: Species to convert to
        pH: pH value

    Returns:
        Concentration in mol/L
    """
    if species is Species.H3O:
        return ph_to_concentration_h3o(pH)
    elif species is Species.OH:
        return ph_to_concentration_oh(pH)
    elif species is Species.H2O:
        return WATER_CONCENTRATION
    else:
        raise ValueError(f"Unknown species: {species}")


def ph_from_concentration(species: Species, concentration: float) -> float:
    """
    Invert a concentration back to pH.

    Args:
        species: Species.H3O or Species.OH
        concentration: Concentration in mol/L, must be > 0

    Returns:
        pH value

    Raises:
        ValueError: For H₂O, whose concentration does not depend on pH
    """
    if species is Species.H3O:
        return concentration_h3o_to_ph(concentration)
    elif species is Species.OH:
        return concentration_oh_to_ph(concentration)
    raise ValueError(f"pH cannot be derived from {species.value} concentration")


def ph_from_quantity(species: Species, moles: float, volume: float) -> float:
    """Invert a molar quantity in volume [L] back to pH. See ph_from_concentration."""
    return ph_from_concentration(species, moles / volume)


def compute_moles(concentration: float, volume: float) -> float:
    """Moles of a species: n = C · V."""
    return concentration * volume


def compute_particle_count(concentration: float, volume: float) -> float:
    """Number of particles of a species: N = C · V · N_A."""
    return concentration * volume * AVOGADRO


def compute_mixed_ph(
    solute_pH: float, solute_volume: float, solvent_volume: float
) -> Optional[float]:
    """
    pH of a stock solute diluted with neutral water.

    The concentrate's excess [H₃O⁺] (acids) or [OH⁻] (bases) over the neutral
    baseline is diluted across the total volume, recombined with the baseline
    and inverted back to pH.

    Pure concentrate and pure solvent short-circuit so that the stock pH and
    neutral pH are reproduced exactly, without log₁₀ round-off.

    Args:
        solute_pH: pH of the undiluted solute
        solute_volume: Volume of solute [L], >= 0
        solvent_volume: Volume of water [L], >= 0

    Returns:
        pH of the mixture, None if the total volume is zero

    Example:
        >>> compute_mixed_ph(2.0, 0.2, 0.0)
        2.0
        >>> compute_mixed_ph(2.0, 0.0, 1.0)
        7.0
        >>> 2.0 < compute_mixed_ph(2.0, 0.2, 1.0) < 7.0
        True
    """
    total_volume = solute_volume + solvent_volume

    if total_volume == 0:
        return None
    if solvent_volume == 0:
        return solute_pH
    if solute_volume == 0 or solute_pH == PH_NEUTRAL:
        return PH_NEUTRAL

    dilution = solute_volume / total_volume

    if solute_pH < PH_NEUTRAL:
        baseline = ph_to_concentration_h3o(PH_NEUTRAL)
        excess = ph_to_concentration_h3o(solute_pH) - baseline
        pH = concentration_h3o_to_ph(baseline + excess * dilution)
        # Round-off must not push a diluted acid past neutral
        return min(pH, PH_NEUTRAL)
    else:
        baseline = ph_to_concentration_oh(PH_NEUTRAL)
        excess = ph_to_concentration_oh(solute_pH) - baseline
        pH = concentration_oh_to_ph(baseline + excess * dilution)
        return max(pH, PH_NEUTRAL)


def is_equivalent_to_water(pH: Optional[float]) -> bool:
    """
    True if pH, as displayed by the meter, reads exactly neutral ('7.00').

    Args:
        pH: pH value, None means no value

    Returns:
        Whether the displayed value equals the pH of water
    """
    return pH is not None and round(pH, PH_DECIMAL_PLACES) == PH_NEUTRAL


def validate_conversion() -> None:
    """
    Validation of the conversion functions.

    Tests:
    1. pH → [H₃O⁺] → pH round trip over the full range
    2. Kw invariant [H₃O⁺][OH⁻] = 1e-14
    3. Mixing boundary conditions
    4. Monotonic dilution toward neutral
    """
    # Test 1: Round trip
    for pH in np.linspace(PH_MIN, PH_MAX, 161):
        recovered = concentration_h3o_to_ph(ph_to_concentration_h3o(pH))
        assert abs(recovered - pH) < 1e-9, f"Round trip failed at pH={pH}"
        recovered = concentration_oh_to_ph(ph_to_concentration_oh(pH))
        assert abs(recovered - pH) < 1e-9, f"OH round trip failed at pH={pH}"

    # Test 2: Ion product
    for pH in np.linspace(PH_MIN, PH_MAX, 161):
        product = ph_to_concentration_h3o(pH) * ph_to_concentration_oh(pH)
        assert abs(product - KW) / KW < 1e-9, f"Kw violated at pH={pH}"

    # Test 3: Boundaries
    assert compute_mixed_ph(2.0, 0.5, 0.0) == 2.0, "Pure solute must keep stock pH"
    assert compute_mixed_ph(13.0, 0.0, 0.5) == PH_NEUTRAL, "Pure water is neutral"
    assert compute_mixed_ph(4.0, 0.0, 0.0) is None, "Empty mixture has no pH"

    # Test 4: Monotonic dilution
    for solute_pH in (1.0, 13.0):
        previous = solute_pH
        for solvent in np.linspace(0.0, 1.0, 21):
            pH = compute_mixed_ph(solute_pH, 0.1, solvent)
            assert abs(pH - PH_NEUTRAL) <= abs(previous - PH_NEUTRAL), "Not monotonic"
            previous = pH

    print("✓ All conversion validations passed")


if __name__ == "__main__":
    print("pH Conversion Demonstration")
    print("=" * 60)
    print(f"{'pH':<8} {'[H3O+] (mol/L)':<18} {'[OH-] (mol/L)':<18}")
    print("-" * 60)
    for pH in np.arange(0.0, 15.0, 2.0):
        print(
            f"{pH:<8.1f} {ph_to_concentration_h3o(pH):<18.3e} "
            f"{ph_to_concentration_oh(pH):<18.3e}"
        )
    print()

    validate_conversion()
