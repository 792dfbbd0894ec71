"""
isodist
=======

A package to compute isotopic distributions of chemical formulas.

Provides
    1. The Formula object to parse, combine and format chemical formulas.
    2. The PeriodicTable object with element and isotope reference data.
    3. Isotopic distribution prediction with resolution based peak merging.

"""

__version__ = "0.1.0"

from . import chem
from . import exceptions
from .chem import Formula, PeriodicTable, get_periodic_table
