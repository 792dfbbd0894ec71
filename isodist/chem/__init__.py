"""
Chemistry
=========

Provides:

1. A Formula object to compute the exact mass and isotopic distribution of molecular formulas.
2. A PeriodicTable with element and isotope information.
3. Functions to convert between mass and m/z values.

Objects
-------
- Element
- Isotope
- PeriodicTable
- Formula

Functions
---------
- get_periodic_table
- load_periodic_table
- mz_from_mass
- mass_from_mz

"""

from .atoms import Element, Isotope, PeriodicTable, TableValidationResult
from .atoms import get_periodic_table, load_periodic_table
from .formula import Formula, filter_by_hydrogen_carbon_ratio, is_valid_formula
from .mass import compare_masses, mass_equals, mass_from_mz, mz_from_mass, to_mass, to_mz
