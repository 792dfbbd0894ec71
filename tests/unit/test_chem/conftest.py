from isodist.chem import Element, PeriodicTable
import pytest


# (symbol, z, average mass, [(a, m, abundance), ...])
ELEMENT_DATA = [
    ("H", 1, 1.007975, [(1, 1.00782503223, 0.999885), (2, 2.01410177812, 0.000115)]),
    ("C", 6, 12.0106, [(12, 12.0, 0.9893), (13, 13.00335483507, 0.0107)]),
    ("N", 7, 14.006855, [(14, 14.00307400443, 0.99636), (15, 15.00010889888, 0.00364)]),
    (
        "O", 8, 15.9994,
        [(16, 15.99491461957, 0.99757), (17, 16.99913175650, 0.00038), (18, 17.99915961286, 0.00205)]
    ),
    ("Al", 13, 26.9815385, [(27, 26.98153853, 1.0)]),
    ("Fe", 26, 55.845, [(56, 55.93493633, 0.91754)]),
    ("Br", 35, 79.904, [(79, 78.9183376, 0.5069)]),
]


@pytest.fixture
def partial_table() -> PeriodicTable:
    """A table where some elements are missing isotopes."""
    ptable = PeriodicTable()
    for symbol, z, average_mass, isotopes in ELEMENT_DATA:
        element = Element(symbol, z, average_mass)
        ptable.add(element)
        for a, m, abundance in isotopes:
            element.add_isotope(a, m, abundance)
    return ptable


@pytest.fixture
def complete_table(partial_table) -> PeriodicTable:
    """A table with only the elements with complete isotope data."""
    ptable = PeriodicTable()
    for element in partial_table:
        if element.symbol in ["H", "C", "N", "O", "Al"]:
            ptable.add(element)
    return ptable
