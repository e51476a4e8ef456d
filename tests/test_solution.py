"""
Tests for the beaker solution: construction, derived chemistry, state.
"""

import numpy as np
import pytest

from ph_simulator.core.conversion import AVOGADRO, KW, PH_NEUTRAL, Species
from ph_simulator.core.solutes import (
    BATTERY_ACID,
    COFFEE,
    DRAIN_CLEANER,
    WATER,
    WATER_COLOR,
)
from ph_simulator.core.solution import Solution, validate_solution


@pytest.fixture
def diluted_acid() -> Solution:
    """0.1 L battery acid diluted with 0.9 L water."""
    return Solution(BATTERY_ACID, 0.1, 0.9, capacity=1.2)


# =============================================================================
# Construction
# =============================================================================

class TestConstruction:

    def test_defaults(self):
        solution = Solution()
        assert solution.solute is WATER
        assert solution.total_volume == 0.0
        assert solution.capacity == 1.2

    @pytest.mark.parametrize("capacity", [0.0, -1.0])
    def test_non_positive_capacity_rejected(self, capacity):
        with pytest.raises(ValueError):
            Solution(capacity=capacity)

    def test_negative_volume_rejected(self):
        with pytest.raises(ValueError):
            Solution(COFFEE, -0.1, 0.2)
        with pytest.raises(ValueError):
            Solution(COFFEE, 0.1, -0.2)

    def test_over_capacity_rejected(self):
        with pytest.raises(ValueError, match="exceeds"):
            Solution(COFFEE, 0.7, 0.6, capacity=1.2)


# =============================================================================
# Empty state
# =============================================================================

class TestEmpty:

    def test_no_values_when_empty(self):
        solution = Solution(BATTERY_ACID)
        assert solution.is_empty()
        assert solution.pH is None
        assert solution.get_ph() is None
        for species in Species:
            assert solution.get_concentration(species) is None
            assert solution.get_quantity(species) is None
            assert solution.get_particle_count(species) == 0.0

    def test_empty_color_is_water(self):
        assert Solution(COFFEE).color == WATER_COLOR


# =============================================================================
# Derived chemistry
# =============================================================================

class TestChemistry:

    def test_pure_stock_ph(self):
        assert Solution(DRAIN_CLEANER, 0.3, 0.0).pH == DRAIN_CLEANER.pH

    def test_pure_water_ph(self):
        assert Solution(DRAIN_CLEANER, 0.0, 0.3).pH == PH_NEUTRAL

    def test_diluted_between_stock_and_neutral(self, diluted_acid):
        assert BATTERY_ACID.pH < diluted_acid.pH < PH_NEUTRAL

    def test_ion_product(self, diluted_acid):
        c_h3o = diluted_acid.get_concentration(Species.H3O)
        c_oh = diluted_acid.get_concentration(Species.OH)
        assert c_h3o * c_oh == pytest.approx(KW, rel=1e-9)

    def test_quantity_is_concentration_times_volume(self, diluted_acid):
        for species in Species:
            expected = diluted_acid.get_concentration(species) * 1.0
            assert diluted_acid.get_quantity(species) == pytest.approx(expected)

    def test_particle_count(self):
        water = Solution(WATER, 0.0, 1.0)
        assert water.get_particle_count(Species.H3O) == pytest.approx(1e-7 * AVOGADRO)
        assert water.get_particle_count(Species.H2O) == pytest.approx(55.6 * AVOGADRO)

    def test_ph_is_recomputed_on_demand(self, diluted_acid):
        before = diluted_acid.pH
        diluted_acid.apply_volume_delta(0.0, 0.2)
        assert diluted_acid.pH > before

    def test_color_follows_dilution(self):
        solution = Solution(COFFEE, 0.6, 0.0)
        assert solution.color == COFFEE.stock_color
        solution.apply_volume_delta(0.0, 0.6)
        assert solution.color == COFFEE.compute_color(0.5)

    def test_kw_over_mixtures(self):
        for solvent in np.linspace(0.0, 1.0, 11):
            solution = Solution(DRAIN_CLEANER, 0.2, solvent)
            product = solution.get_concentration(
                Species.H3O
            ) * solution.get_concentration(Species.OH)
            assert product == pytest.approx(KW, rel=1e-9)


# =============================================================================
# Volumes and state
# =============================================================================

class TestVolumeAndState:

    def test_free_volume_and_full(self):
        solution = Solution(COFFEE, 0.2, 1.0, capacity=1.2)
        assert solution.is_full()
        assert solution.free_volume == 0.0

    def test_delta_clamps_at_zero(self, diluted_acid):
        diluted_acid.apply_volume_delta(-5.0, -0.4)
        assert diluted_acid.solute_volume == 0.0
        assert diluted_acid.solvent_volume == pytest.approx(0.5)

    def test_set_solute_keeps_volumes(self, diluted_acid):
        diluted_acid.set_solute(DRAIN_CLEANER)
        assert diluted_acid.solute is DRAIN_CLEANER
        assert diluted_acid.total_volume == pytest.approx(1.0)

    def test_snapshot_restore(self, diluted_acid):
        snapshot = diluted_acid.snapshot()
        diluted_acid.set_solute(COFFEE)
        diluted_acid.apply_volume_delta(0.1, -0.5)
        diluted_acid.restore(snapshot)
        assert diluted_acid.snapshot() == snapshot

    def test_reset(self, diluted_acid):
        diluted_acid.apply_volume_delta(0.1, 0.1)
        diluted_acid.set_solute(WATER)
        diluted_acid.reset()
        assert diluted_acid.solute is BATTERY_ACID
        assert diluted_acid.solute_volume == 0.1
        assert diluted_acid.solvent_volume == 0.9

    def test_repr(self, diluted_acid):
        assert "batteryAcid" in repr(diluted_acid)


# =============================================================================
# Setting pH, concentration and quantity
# =============================================================================

class TestSetters:

    def test_set_ph_keeps_volume(self, diluted_acid):
        diluted_acid.set_ph(4.0)
        assert diluted_acid.pH == 4.0
        assert diluted_acid.total_volume == pytest.approx(1.0)
        assert diluted_acid.solute.key == "custom"
        assert diluted_acid.solvent_volume == 0.0

    def test_set_ph_out_of_range(self, diluted_acid):
        with pytest.raises(ValueError):
            diluted_acid.set_ph(16.0)
        assert diluted_acid.solute is BATTERY_ACID

    @pytest.mark.parametrize(
        "species, concentration, expected",
        [(Species.H3O, 1e-4, 4.0), (Species.OH, 1e-4, 10.0), (Species.H3O, 1.0, 0.0)],
    )
    def test_set_concentration(self, diluted_acid, species, concentration, expected):
        diluted_acid.set_concentration(species, concentration)
        assert diluted_acid.pH == pytest.approx(expected)
        assert diluted_acid.get_concentration(species) == pytest.approx(
            concentration, rel=1e-12
        )

    def test_set_quantity(self, diluted_acid):
        diluted_acid.set_quantity(Species.OH, 1e-3)
        assert diluted_acid.pH == pytest.approx(11.0)
        assert diluted_acid.get_quantity(Species.OH) == pytest.approx(1e-3, rel=1e-12)

    @pytest.mark.parametrize("concentration", [0.0, -1e-3])
    def test_non_positive_concentration_rejected(self, diluted_acid, concentration):
        with pytest.raises(ValueError):
            diluted_acid.set_concentration(Species.H3O, concentration)

    def test_water_concentration_cannot_be_set(self, diluted_acid):
        with pytest.raises(ValueError):
            diluted_acid.set_concentration(Species.H2O, 55.6)

    def test_quantity_in_empty_beaker_rejected(self):
        with pytest.raises(ValueError, match="empty"):
            Solution(COFFEE, 0.0, 0.0).set_quantity(Species.H3O, 1e-5)


def test_validate_solution_passes():
    validate_solution()
