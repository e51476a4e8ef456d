"""
Solute Catalog Module
=====================

Immutable descriptors for the stock liquids that can be dispensed by the
dropper, plus a factory for custom solutes of arbitrary pH.

Each solute is a strong acid or base in "stock" (undiluted) form. Its
colour fades toward the diluted colour (water by default) as the stock is
diluted, optionally passing through an intermediate colour stop to smooth
transitions for strongly coloured liquids:

    ratio = V_solute / V_total          (0 = no solute, 1 = all solute)

    ratio ≤ r_stop:  diluted → stop     over [0, r_stop]
    ratio > r_stop:  stop    → stock    over (r_stop, 1]

Catalog values are the common household/laboratory pH references used by
classroom pH scales.

Date: October 2026
License: MIT
"""

import numpy as np
from dataclasses import dataclass
from typing import Dict, Optional, Tuple
import logging
from scipy.interpolate import interp1d

from .conversion import PH_MAX, PH_MIN, PH_NEUTRAL

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]

# Display colours (RGB)
WATER_COLOR: Color = (224, 255, 255)
ACIDIC_COLOR: Color = (249, 106, 102)
BASIC_COLOR: Color = (106, 126, 195)
NEUTRAL_COLOR: Color = (164, 58, 149)


@dataclass(frozen=True)
class SoluteKind:
    """
    A stock liquid with an intrinsic pH.

    Instances are shared by reference across solutions and the dropper and
    are never mutated after construction.

    Attributes:
        key: Stable identifier used for catalog lookup and snapshots
        name: Display name
        pH: pH of the undiluted stock, in [-1, 15]
        stock_color: Colour of the undiluted stock
        diluted_color: Colour when barely present in solution
        color_stop_color: Optional intermediate colour
        color_stop_ratio: Dilution ratio of the intermediate colour, in (0, 1)
    """

    key: str
    name: str
    pH: float
    stock_color: Color
    diluted_color: Color = WATER_COLOR
    color_stop_color: Optional[Color] = None
    color_stop_ratio: float = 0.25

    def __post_init__(self):
        """Validate solute parameters."""
        if not PH_MIN <= self.pH <= PH_MAX:
            raise ValueError(
                f"Solute pH {self.pH} outside [{PH_MIN}, {PH_MAX}] for '{self.key}'"
            )
        if not 0.0 < self.color_stop_ratio < 1.0:
            raise ValueError(
                f"Color stop ratio must be in (0, 1): {self.color_stop_ratio}"
            )

    @property
    def is_acid(self) -> bool:
        return self.pH < PH_NEUTRAL

    @property
    def is_base(self) -> bool:
        return self.pH > PH_NEUTRAL

    def compute_color(self, ratio: float) -> Color:
        """
        Colour of a dilution of this solute.

        Args:
            ratio: Solute fraction of the total volume, [0, 1] (clamped)

        Returns:
            RGB colour

        Example:
            >>> COFFEE.compute_color(1.0) == COFFEE.stock_color
            True
            >>> COFFEE.compute_color(0.0) == COFFEE.diluted_color
            True
        """
        ratio = float(np.clip(ratio, 0.0, 1.0))

        if self.color_stop_color is not None:
            stops = [0.0, self.color_stop_ratio, 1.0]
            colors = [self.diluted_color, self.color_stop_color, self.stock_color]
        else:
            stops = [0.0, 1.0]
            colors = [self.diluted_color, self.stock_color]

        interpolator = interp1d(stops, np.array(colors, dtype=float), axis=0)
        rgb = interpolator(ratio)

        return tuple(int(round(c)) for c in rgb)


BATTERY_ACID = SoluteKind(
    "batteryAcid", "Battery Acid", 1.0, (255, 255, 0),
    color_stop_color=(255, 224, 204),
)
BLOOD = SoluteKind(
    "blood", "Blood", 7.4, (211, 79, 68), color_stop_color=(255, 207, 204)
)
CHICKEN_SOUP = SoluteKind(
    "chickenSoup", "Chicken Soup", 5.8, (255, 240, 104),
    color_stop_color=(255, 250, 204),
)
COFFEE = SoluteKind(
    "coffee", "Coffee", 5.0, (164, 99, 7), color_stop_color=(255, 240, 204)
)
DRAIN_CLEANER = SoluteKind(
    "drainCleaner", "Drain Cleaner", 13.0, (255, 255, 0),
    color_stop_color=(255, 255, 204),
)
HAND_SOAP = SoluteKind(
    "handSoap", "Hand Soap", 10.0, (224, 141, 242),
    color_stop_color=(232, 204, 255),
)
MILK = SoluteKind("milk", "Milk", 6.5, (250, 250, 250))
ORANGE_JUICE = SoluteKind(
    "orangeJuice", "Orange Juice", 3.5, (255, 180, 0),
    color_stop_color=(255, 242, 204),
)
SODA = SoluteKind(
    "soda", "Soda Pop", 2.5, (204, 255, 102), color_stop_color=(238, 255, 204)
)
SPIT = SoluteKind("spit", "Spit", 7.4, (202, 240, 239))
VOMIT = SoluteKind(
    "vomit", "Vomit", 2.0, (255, 171, 120), color_stop_color=(255, 224, 204)
)
WATER = SoluteKind("water", "Water", PH_NEUTRAL, WATER_COLOR)

# Selection order, alphabetical by display name
SOLUTES: Tuple[SoluteKind, ...] = (
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
)

_REGISTRY: Dict[str, SoluteKind] = {solute.key: solute for solute in SOLUTES}


def get_solute(key: str) -> SoluteKind:
    """
    Look up a catalog solute by key.

    Raises:
        ValueError: If the key is not in the catalog
    """
    try:
        return _REGISTRY[key]
    except KeyError:
        raise ValueError(
            f"Unknown solute '{key}'. Choose from: {', '.join(sorted(_REGISTRY))}"
        ) from None


def custom_solute(pH: float, name: str = "Custom") -> SoluteKind:
    """
    Create a solute with a caller-supplied pH.

    The stock colour follows the acidic/neutral/basic palette.

    Args:
        pH: Stock pH, in [-1, 15]
        name: Display name

    Returns:
        New immutable SoluteKind

    Raises:
        ValueError: If pH is outside [-1, 15]
    """
    if not PH_MIN <= pH <= PH_MAX:
        logger.warning(f"Custom pH {pH} outside [{PH_MIN}, {PH_MAX}] rejected")

    if pH < PH_NEUTRAL:
        color = ACIDIC_COLOR
    elif pH > PH_NEUTRAL:
        color = BASIC_COLOR
    else:
        color = NEUTRAL_COLOR
    return SoluteKind("custom", name, float(pH), color)


def validate_solutes() -> None:
    """
    Validation of the solute catalog.

    Tests:
    1. Every catalog pH lies in the accepted range
    2. Keys are unique and resolvable
    3. Colour endpoints match stock and diluted colours
    4. Out-of-range custom pH is rejected
    """
    keys = [solute.key for solute in SOLUTES]
    assert len(keys) == len(set(keys)), "Duplicate solute keys"

    for solute in SOLUTES:
        assert PH_MIN <= solute.pH <= PH_MAX, f"{solute.key} pH out of range"
        assert get_solute(solute.key) is solute, f"{solute.key} not registered"
        assert solute.compute_color(1.0) == solute.stock_color, "Stock colour"
        assert solute.compute_color(0.0) == solute.diluted_color, "Diluted colour"

    try:
        custom_solute(16.0)
    except ValueError:
        pass
    else:
        raise AssertionError("Custom pH 16 should be rejected")

    print("✓ All solute validations passed")


if __name__ == "__main__":
    print("Solute Catalog")
    print("=" * 60)
    print(f"{'Solute':<16} {'pH':<6} {'Stock colour':<18} {'50% colour':<18}")
    print("-" * 60)
    for solute in SOLUTES:
        print(
            f"{solute.name:<16} {solute.pH:<6.1f} {str(solute.stock_color):<18} "
            f"{str(solute.compute_color(0.5)):<18}"
        )
    print()

    validate_solutes()
