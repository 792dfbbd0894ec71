from isodist.chem import atoms
from isodist import exceptions
import numpy as np
import pytest


def test_PeriodicTable_get_element_from_symbol():
    ptable = atoms.get_periodic_table()
    c = ptable.get_element("C")
    assert c.z == 6
    assert c.symbol == "C"


def test_PeriodicTable_get_element_from_z():
    ptable = atoms.get_periodic_table()
    p = ptable.get_element(15)
    assert p.symbol == "P"
    assert p.z == 15


@pytest.mark.parametrize("element", ["Faa", "c", 200, ""])
def test_PeriodicTable_get_element_invalid_element(element):
    ptable = atoms.get_periodic_table()
    with pytest.raises(exceptions.ElementNotFound):
        ptable.get_element(element)


def test_PeriodicTable_get_isotope_from_symbol():
    ptable = atoms.get_periodic_table()
    cl37 = ptable.get_isotope("37Cl")
    assert cl37.a == 37
    assert cl37.symbol == "Cl"


def test_PeriodicTable_get_isotope_from_mass_number():
    ptable = atoms.get_periodic_table()
    c13 = ptable.get_isotope("C", 13)
    assert c13 is ptable.get_isotope("13C")


def test_PeriodicTable_get_isotope_without_mass_number_returns_principal_isotope():
    ptable = atoms.get_periodic_table()
    cl = ptable.get_isotope("Cl")
    assert cl.a == 35
    assert cl.is_principal


@pytest.mark.parametrize("isotope_str", ["14C", "3H", "100C"])
def test_PeriodicTable_get_isotope_invalid_mass_number(isotope_str):
    ptable = atoms.get_periodic_table()
    with pytest.raises(exceptions.IsotopeNotFound):
        ptable.get_isotope(isotope_str)


def test_PeriodicTable_get_isotope_invalid_symbol():
    ptable = atoms.get_periodic_table()
    with pytest.raises(exceptions.ElementNotFound):
        ptable.get_isotope("12Faa")


def test_get_periodic_table_returns_the_same_frozen_table():
    ptable = atoms.get_periodic_table()
    assert ptable is atoms.get_periodic_table()
    assert ptable.is_frozen


def test_PeriodicTable_frozen_table_rejects_new_elements():
    ptable = atoms.get_periodic_table()
    with pytest.raises(exceptions.PeriodicTableFrozen):
        ptable.add(atoms.Element("Xx", 150, 300.0))


def test_load_periodic_table_returns_a_new_table():
    ptable = atoms.load_periodic_table()
    assert ptable is not atoms.get_periodic_table()
    assert not ptable.is_frozen
    assert len(ptable) == len(atoms.get_periodic_table())


def test_PeriodicTable_add(partial_table):
    element = atoms.Element("S", 16, 32.065)
    partial_table.add(element)
    assert partial_table.get_element("S") is element
    assert partial_table.get_element(16) is element
    assert "S" in partial_table


@pytest.mark.parametrize(
    "symbol,z",
    [
        ["C", 100],     # existing symbol
        ["Xx", 6],      # existing atomic number
    ]
)
def test_PeriodicTable_add_duplicate_element(partial_table, symbol, z):
    n_elements = len(partial_table)
    with pytest.raises(exceptions.ElementAlreadyRegistered):
        partial_table.add(atoms.Element(symbol, z, 12.0))
    assert len(partial_table) == n_elements


def test_PeriodicTable_add_none(partial_table):
    with pytest.raises(exceptions.InvalidParameter):
        partial_table.add(None)


def test_PeriodicTable_iterates_in_registration_order(partial_table):
    symbols = [x.symbol for x in partial_table]
    assert symbols == ["H", "C", "N", "O", "Al", "Fe", "Br"]


def test_PeriodicTable_validate_abundances_passed(complete_table):
    result = complete_table.validate_abundances(1e-10)
    assert result.passed
    assert result.message == "Validation passed"


def test_PeriodicTable_validate_abundances_failed(partial_table):
    result = partial_table.validate_abundances(1e-3)
    assert not result.passed
    assert "Fe" in result.message


def test_PeriodicTable_validate_average_masses_passed(complete_table):
    result = complete_table.validate_average_masses(1e-4)
    assert result.passed


def test_PeriodicTable_validate_average_masses_failed(partial_table):
    result = partial_table.validate_average_masses(1e-4)
    assert not result.passed
    assert "Fe" in result.message


def test_PeriodicTable_validate_average_masses_fails_on_first_element(partial_table):
    # hydrogen reference average mass differs from the weighted mass by ~3e-5
    result = partial_table.validate_average_masses(1e-6)
    assert not result.passed
    assert result.message.startswith("Average mass of H")


def test_PeriodicTable_validate_element_without_isotopes():
    ptable = atoms.PeriodicTable()
    ptable.add(atoms.Element("Xx", 150, 300.0))
    assert not ptable.validate_abundances(0.1).passed
    assert not ptable.validate_average_masses(0.1).passed


def test_default_table_reference_data_is_consistent():
    ptable = atoms.get_periodic_table()
    assert ptable.validate_abundances(1e-6).passed
    assert ptable.validate_average_masses(1e-3).passed


def test_Element_add_isotope():
    element = atoms.Element("C", 6, 12.0107)
    isotope = element.add_isotope(13, 13.00335483507, 0.0107)
    assert element.get_isotope(13) is isotope
    assert isotope.z == 6
    assert isotope.n == 7
    assert isotope.symbol == "C"
    assert str(isotope) == "13C"


def test_Element_add_isotope_duplicate_mass_number():
    element = atoms.Element("C", 6, 12.0107)
    element.add_isotope(12, 12.0, 0.9893)
    with pytest.raises(exceptions.IsotopeAlreadyRegistered):
        element.add_isotope(12, 12.0, 0.5)


def test_Element_principal_isotope_is_updated_on_add():
    element = atoms.Element("C", 6, 12.0107)
    c13 = element.add_isotope(13, 13.00335483507, 0.0107)
    assert element.get_monoisotope() is c13
    c12 = element.add_isotope(12, 12.0, 0.9893)
    assert element.get_monoisotope() is c12
    assert c12.is_principal
    assert not c13.is_principal
    assert element.nominal_mass == 12
    assert element.monoisotopic_mass == 12.0


def test_Element_principal_isotope_ties_keep_first_isotope():
    element = atoms.Element("Xx", 150, 300.0)
    first = element.add_isotope(300, 300.0, 0.5)
    element.add_isotope(301, 301.0, 0.5)
    assert element.get_monoisotope() is first


def test_Element_get_monoisotope_without_isotopes():
    element = atoms.Element("Xx", 150, 300.0)
    with pytest.raises(exceptions.IsotopeNotFound):
        element.get_monoisotope()


def test_Element_get_monoisotope():
    element = atoms.get_periodic_table().get_element("B")
    monoisotope = element.get_monoisotope()
    assert monoisotope.a == 11


def test_Element_get_abundances():
    element = atoms.get_periodic_table().get_element("O")
    m, M, p = element.get_abundances()
    assert m.tolist() == [16, 17, 18]
    assert M.size == 3
    assert p.sum() == pytest.approx(1.0)


def test_PeriodicTable_get_element_from_numpy_integer():
    ptable = atoms.get_periodic_table()
    assert ptable.get_element(np.int64(6)).symbol == "C"


@pytest.mark.parametrize("element", [True, False, 6.0])
def test_PeriodicTable_get_element_non_integer_atomic_number(element):
    ptable = atoms.get_periodic_table()
    with pytest.raises(exceptions.ElementNotFound):
        ptable.get_element(element)
