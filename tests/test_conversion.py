"""
Tests for pH ⇄ concentration ⇄ quantity conversions and the dilution rule.
"""

import numpy as np
import pytest

from ph_simulator.core.conversion import (
    AVOGADRO,
    KW,
    PH_MAX,
    PH_MIN,
    PH_NEUTRAL,
    WATER_CONCENTRATION,
    Species,
    compute_mixed_ph,
    compute_moles,
    compute_particle_count,
    concentration_h3o_to_ph,
    concentration_oh_to_ph,
    is_equivalent_to_water,
    moles_h3o_to_ph,
    moles_oh_to_ph,
    ph_from_concentration,
    ph_from_quantity,
    ph_to_concentration,
    ph_to_concentration_h3o,
    ph_to_concentration_oh,
    validate_conversion,
)

PH_SWEEP = np.linspace(PH_MIN, PH_MAX, 161)


# =============================================================================
# Basic conversions
# =============================================================================

class TestConversions:
    """Forward and inverse conversions."""

    def test_neutral_concentrations(self):
        """Pure water has [H3O+] = [OH-] = 1e-7."""
        assert ph_to_concentration_h3o(7.0) == pytest.approx(1e-7, rel=1e-12)
        assert ph_to_concentration_oh(7.0) == pytest.approx(1e-7, rel=1e-12)

    def test_strong_acid_and_base(self):
        assert ph_to_concentration_h3o(1.0) == pytest.approx(0.1)
        assert ph_to_concentration_oh(13.0) == pytest.approx(0.1)

    @pytest.mark.parametrize("pH", PH_SWEEP)
    def test_h3o_round_trip(self, pH):
        """pH → [H3O+] → pH is the identity within 1e-9."""
        assert abs(concentration_h3o_to_ph(ph_to_concentration_h3o(pH)) - pH) < 1e-9

    @pytest.mark.parametrize("pH", PH_SWEEP)
    def test_oh_round_trip(self, pH):
        assert abs(concentration_oh_to_ph(ph_to_concentration_oh(pH)) - pH) < 1e-9

    @pytest.mark.parametrize("pH", PH_SWEEP)
    def test_ion_product(self, pH):
        """[H3O+][OH-] = Kw everywhere on the accepted range."""
        product = ph_to_concentration_h3o(pH) * ph_to_concentration_oh(pH)
        assert product == pytest.approx(KW, rel=1e-9)

    def test_moles_to_ph(self):
        assert moles_h3o_to_ph(0.001, 1.0) == pytest.approx(3.0)
        assert moles_oh_to_ph(0.001, 0.5) == pytest.approx(14.0 + np.log10(0.002))

    def test_species_dispatch(self):
        assert ph_to_concentration(Species.H3O, 3.0) == pytest.approx(1e-3)
        assert ph_to_concentration(Species.OH, 11.0) == pytest.approx(1e-3)
        assert ph_to_concentration(Species.H2O, 3.0) == WATER_CONCENTRATION
        assert ph_to_concentration(Species.H2O, 12.0) == WATER_CONCENTRATION

    def test_inverse_helpers(self):
        assert ph_from_concentration(Species.H3O, 1e-4) == pytest.approx(4.0)
        assert ph_from_concentration(Species.OH, 1e-4) == pytest.approx(10.0)
        assert ph_from_quantity(Species.H3O, 2e-4, 2.0) == pytest.approx(4.0)

    def test_inverse_rejects_water(self):
        """H2O concentration carries no pH information."""
        with pytest.raises(ValueError):
            ph_from_concentration(Species.H2O, WATER_CONCENTRATION)

    def test_quantities(self):
        assert compute_moles(0.1, 0.5) == pytest.approx(0.05)
        assert compute_particle_count(1.0, 1.0) == pytest.approx(AVOGADRO)


# =============================================================================
# Dilution rule
# =============================================================================

class TestMixedPH:
    """compute_mixed_ph boundary behaviour and monotonicity."""

    def test_empty_is_none(self):
        assert compute_mixed_ph(2.0, 0.0, 0.0) is None

    @pytest.mark.parametrize("solute_pH", [-1.0, 1.0, 2.5, 7.4, 13.0, 15.0])
    def test_pure_solute_is_exact(self, solute_pH):
        assert compute_mixed_ph(solute_pH, 0.3, 0.0) == solute_pH

    @pytest.mark.parametrize("solute_pH", [-1.0, 1.0, 13.0, 15.0])
    def test_pure_water_is_exactly_neutral(self, solute_pH):
        assert compute_mixed_ph(solute_pH, 0.0, 0.3) == PH_NEUTRAL

    def test_neutral_solute_stays_neutral(self):
        assert compute_mixed_ph(7.0, 0.2, 0.8) == PH_NEUTRAL

    def test_acid_dilution_value(self):
        """0.2 L of pH 2 in 1.2 L total."""
        expected = -np.log10(1e-7 + (1e-2 - 1e-7) * 0.2 / 1.2)
        assert compute_mixed_ph(2.0, 0.2, 1.0) == pytest.approx(expected, abs=1e-12)

    def test_base_dilution_value(self):
        expected = 14.0 + np.log10(1e-7 + (1e-1 - 1e-7) * 0.5)
        assert compute_mixed_ph(13.0, 0.5, 0.5) == pytest.approx(expected, abs=1e-12)

    @pytest.mark.parametrize("solute_pH", [0.0, 2.0, 5.8, 8.0, 10.0, 14.0])
    def test_dilution_is_monotonic_toward_neutral(self, solute_pH):
        distances = [
            abs(compute_mixed_ph(solute_pH, 0.1, solvent) - PH_NEUTRAL)
            for solvent in np.linspace(0.0, 1.1, 45)
        ]
        assert all(b <= a for a, b in zip(distances, distances[1:]))

    @pytest.mark.parametrize("solute_pH", [1.0, 13.0])
    def test_dilution_never_crosses_neutral(self, solute_pH):
        for solvent in np.logspace(-3, 6, 30):
            pH = compute_mixed_ph(solute_pH, 1e-9, solvent)
            if solute_pH < 7:
                assert pH <= PH_NEUTRAL
            else:
                assert pH >= PH_NEUTRAL


# =============================================================================
# Neutral indicator
# =============================================================================

class TestEquivalentToWater:

    def test_none_is_not_water(self):
        assert not is_equivalent_to_water(None)

    def test_rounds_to_meter_precision(self):
        assert is_equivalent_to_water(7.0)
        assert is_equivalent_to_water(7.004)
        assert is_equivalent_to_water(6.996)
        assert not is_equivalent_to_water(7.01)
        assert not is_equivalent_to_water(6.98)


def test_validate_conversion_passes():
    validate_conversion()
