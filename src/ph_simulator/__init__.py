"""
pH Simulator
============

Volumetric pH simulation of one beaker fed by a dropper of stock solute
and a water faucet, and emptied through a drain faucet.

Packages:
- core: conversions, solutes, solution, flow integration, probe contact,
  integrated scene
- meter: pH meter with a draggable probe

Run the scripted scenario: `python -m ph_simulator --help`

Date: October 2026
License: MIT
"""

__version__ = "1.0.0"
