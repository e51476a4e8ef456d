"""
Solution Module
===============

The solution held in the beaker: a volume of stock solute diluted with a
volume of neutral water.

STATE
=====

Primary (stored):
- solute: SoluteKind currently selected
- solute_volume [L] >= 0
- solvent_volume [L] >= 0
- capacity [L], constant

Derived (computed on demand, never stored):
- total_volume = solute_volume + solvent_volume
- pH (mixing rule in conversion.compute_mixed_ph), None when empty
- concentration, quantity and particle count of H₃O⁺, OH⁻, H₂O

Setting pH, concentration or quantity directly swaps in a custom solute of
the resulting pH and keeps the total volume.

The capacity invariant 0 <= total_volume <= capacity is enforced by the
flow integrator, not here. The solution only clamps each component at zero.

Date: October 2026
License: MIT
"""

from dataclasses import dataclass
from typing import Optional
import logging

from .conversion import (
    Species,
    compute_mixed_ph,
    compute_moles,
    compute_particle_count,
    ph_from_concentration,
    ph_from_quantity,
    ph_to_concentration,
)
from .solutes import WATER, WATER_COLOR, Color, SoluteKind, custom_solute

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolutionSnapshot:
    """Restorable state of a solution."""

    solute: SoluteKind
    solute_volume: float  # [L]
    solvent_volume: float  # [L]


class Solution:
    """
    Solute diluted in water, with pull-based derived chemistry.

    Typical Use:
    >>> solution = Solution(BATTERY_ACID, solute_volume=0.2, capacity=1.2)
    >>> solution.pH
    1.0
    >>> solution.get_concentration(Species.H3O)
    0.1
    """

    def __init__(
        self,
        solute: SoluteKind = WATER,
        solute_volume: float = 0.0,
        solvent_volume: float = 0.0,
        capacity: float = 1.2,
    ):
        """
        Initialize solution.

        Args:
            solute: Initial solute
            solute_volume: Initial solute volume [L]
            solvent_volume: Initial water volume [L]
            capacity: Maximum total volume [L]

        Raises:
            ValueError: If volumes are negative or exceed capacity
        """
        if capacity <= 0:
            raise ValueError(f"Capacity must be positive: {capacity}")
        if solute_volume < 0 or solvent_volume < 0:
            raise ValueError(
                f"Volumes cannot be negative: solute={solute_volume}, "
                f"solvent={solvent_volume}"
            )
        if solute_volume + solvent_volume > capacity:
            raise ValueError(
                f"Initial volume {solute_volume + solvent_volume}L exceeds "
                f"capacity {capacity}L"
            )

        self.capacity = capacity
        self.solute = solute
        self.solute_volume = solute_volume
        self.solvent_volume = solvent_volume

        self._initial = self.snapshot()

    # ------------------------------------------------------------------
    # Volume
    # ------------------------------------------------------------------

    @property
    def total_volume(self) -> float:
        """Total volume [L]."""
        return self.solute_volume + self.solvent_volume

    @property
    def free_volume(self) -> float:
        """Volume that can still be added before reaching capacity [L]."""
        return max(0.0, self.capacity - self.total_volume)

    def is_empty(self) -> bool:
        return self.total_volume == 0

    def is_full(self) -> bool:
        return self.total_volume >= self.capacity

    def apply_volume_delta(self, solute_delta: float, solvent_delta: float) -> None:
        """
        Add signed volume deltas to the solute and solvent.

        Each resulting component is clamped at zero. Keeping the sum within
        capacity is the caller's responsibility.

        Args:
            solute_delta: Change in solute volume [L]
            solvent_delta: Change in water volume [L]
        """
        self.solute_volume = max(0.0, self.solute_volume + solute_delta)
        self.solvent_volume = max(0.0, self.solvent_volume + solvent_delta)

    def set_solute(self, solute: SoluteKind) -> None:
        """
        Replace the active solute. Volumes are left unchanged.

        Args:
            solute: New solute
        """
        if solute is not self.solute:
            logger.debug(f"Solute changed: {self.solute.key} → {solute.key}")
        self.solute = solute

    def set_ph(self, pH: float) -> None:
        """
        Set the pH of the mixture directly.

        The contents become a custom solute of that pH, with the total volume
        unchanged and held entirely as solute, so the mixture reads exactly pH.

        Args:
            pH: New pH, in [-1, 15]

        Raises:
            ValueError: If pH is outside the accepted range
        """
        solute = custom_solute(pH)
        volume = self.total_volume
        self.solute = solute
        self.solute_volume = volume
        self.solvent_volume = 0.0
        logger.debug(f"pH set to {solute.pH} at V={volume:.4f}L")

    def set_concentration(self, species: Species, concentration: float) -> None:
        """
        Set the concentration of H₃O⁺ or OH⁻ [mol/L].

        Raises:
            ValueError: For H₂O, a non-positive concentration or a pH out of range
        """
        if not concentration > 0:
            raise ValueError(f"Concentration must be positive: {concentration}")
        self.set_ph(ph_from_concentration(species, concentration))

    def set_quantity(self, species: Species, moles: float) -> None:
        """
        Set the amount of H₃O⁺ or OH⁻ [mol] in the current volume.

        Raises:
            ValueError: When the beaker is empty, for H₂O, or for non-positive moles
        """
        if self.is_empty():
            raise ValueError("Cannot set a quantity in an empty beaker")
        if not moles > 0:
            raise ValueError(f"Quantity must be positive: {moles}")
        self.set_ph(ph_from_quantity(species, moles, self.total_volume))

    # ------------------------------------------------------------------
    # Chemistry
    # ------------------------------------------------------------------

    @property
    def pH(self) -> Optional[float]:
        """pH of the mixture, None when the beaker is empty."""
        return compute_mixed_ph(self.solute.pH, self.solute_volume, self.solvent_volume)

    def get_ph(self) -> Optional[float]:
        return self.pH

    def get_concentration(self, species: Species) -> Optional[float]:
        """
        Concentration of a species.

        Args:
            species: H3O, OH or H2O

        Returns:
            Concentration [mol/L], None when the beaker is empty
        """
        pH = self.pH
        if pH is None:
            return None
        return ph_to_concentration(species, pH)

    def get_quantity(self, species: Species) -> Optional[float]:
        """
        Amount of a species in the beaker.

        Args:
            species: H3O, OH or H2O

        Returns:
            Quantity [mol], None when the beaker is empty
        """
        concentration = self.get_concentration(species)
        if concentration is None:
            return None
        return compute_moles(concentration, self.total_volume)

    def get_particle_count(self, species: Species) -> float:
        """Number of particles of a species, 0 when the beaker is empty."""
        concentration = self.get_concentration(species)
        if concentration is None:
            return 0.0
        return compute_particle_count(concentration, self.total_volume)

    @property
    def color(self) -> Color:
        """Display colour of the mixture."""
        if self.is_empty() or self.solute_volume == 0:
            return WATER_COLOR
        return self.solute.compute_color(self.solute_volume / self.total_volume)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def snapshot(self) -> SolutionSnapshot:
        """Capture solute and volumes."""
        return SolutionSnapshot(self.solute, self.solute_volume, self.solvent_volume)

    def restore(self, snapshot: SolutionSnapshot) -> None:
        """Restore solute and volumes verbatim."""
        self.solute = snapshot.solute
        self.solute_volume = snapshot.solute_volume
        self.solvent_volume = snapshot.solvent_volume

    def reset(self) -> None:
        """Return to the state the solution was constructed with."""
        self.restore(self._initial)

    def __repr__(self) -> str:
        return (
            f"Solution(solute={self.solute.key}, "
            f"solute_volume={self.solute_volume:.4f}, "
            f"solvent_volume={self.solvent_volume:.4f}, pH={self.pH})"
        )


def validate_solution() -> None:
    """
    Validation of the solution model.

    Tests:
    1. Empty solution reports no values
    2. Pure stock keeps the stock pH, pure water is neutral
    3. Kw holds for derived concentrations
    4. Quantity = concentration × volume
    """
    from .solutes import BATTERY_ACID, DRAIN_CLEANER
    from .conversion import KW, PH_NEUTRAL

    # Test 1: Empty
    empty = Solution(BATTERY_ACID, 0.0, 0.0)
    assert empty.pH is None, "Empty solution must have no pH"
    for species in Species:
        assert empty.get_concentration(species) is None, "Empty concentration"
        assert empty.get_quantity(species) is None, "Empty quantity"

    # Test 2: Boundaries
    assert Solution(DRAIN_CLEANER, 0.3, 0.0).pH == DRAIN_CLEANER.pH, "Stock pH"
    assert Solution(DRAIN_CLEANER, 0.0, 0.3).pH == PH_NEUTRAL, "Water pH"

    # Test 3: Ion product
    mixed = Solution(BATTERY_ACID, 0.1, 0.9)
    c_h3o = mixed.get_concentration(Species.H3O)
    c_oh = mixed.get_concentration(Species.OH)
    product = c_h3o * c_oh
    assert abs(product - KW) / KW < 1e-9, "Kw violated"

    # Test 4: Quantity
    quantity = mixed.get_quantity(Species.H3O)
    expected = mixed.get_concentration(Species.H3O) * mixed.total_volume
    assert abs(quantity - expected) < 1e-15, "Quantity mismatch"

    print("✓ All solution validations passed")


if __name__ == "__main__":
    validate_solution()
