"""
Tools for working with chemical formulas

Objects
-------

- Formula

Functions
---------

- is_valid_formula
- filter_by_hydrogen_carbon_ratio

"""

import math
import re
import numpy as np
from collections import Counter
from numbers import Integral
from typing import Iterable, Iterator, List, Optional, Tuple, Union
from .atoms import Element, Isotope, PeriodicTable, get_periodic_table
from ._isotope_distributions import find_isotopic_distribution
from .. import _constants as c
from ..exceptions import InvalidFormula, InvalidParameter, NeutronCountUndefined

# a formula is a sequence of tokens such as C2, C{13}3, H-2 or O
_TOKEN_PATTERN = r"\s*([A-Z][a-z]*)(?:\{([0-9]+)\})?(-)?([0-9]+)?"
_TOKEN_REGEX = re.compile(_TOKEN_PATTERN)
_FORMULA_REGEX = re.compile(r"(?:{})+\s*".format(_TOKEN_PATTERN))


class Formula:
    """
    Represents a chemical formula as a mapping from elements and isotopes to
    formula coefficients.

    Elements are atoms with natural isotopic abundance. Isotopes are atoms
    with a fixed mass number. Coefficients may be negative, which allows to
    represent formula differences, but zero coefficients are never stored.

    Attributes
    ----------
    elements: Counter
        A mapping of Elements to formula coefficients.
    isotopes: Counter
        A mapping of Isotopes to formula coefficients.

    Methods
    -------
    add()
    remove()
    get_monoisotopic_mass()
    get_average_mass()
    get_hill_notation()
    get_isotopic_distribution()

    Examples
    --------
    >>> Formula("H2O")
    Formula(H2O)
    >>> Formula("C{13}O2")
    Formula(C{13}O2)
    >>> Formula("CH3CH2CH3")
    Formula(C3H8)
    >>> Formula("C2H6O H-2")
    Formula(C2H4O)

    """

    def __init__(self, formula=None, ptable: Optional[PeriodicTable] = None):
        """
        Parameters
        ----------
        formula : str, Formula, object with a formula attribute or None
            A formula string is parsed. A Formula is copied. If ``None``,
            an empty formula is created.
        ptable : PeriodicTable or None, default=None
            Table used to resolve element symbols. If ``None``, the default
            table is used.

        Raises
        ------
        InvalidFormula
            If the formula string is not valid.
        ElementNotFound
            If a symbol in the formula string is not in the periodic table.
        IsotopeNotFound
            If an isotope in the formula string is not in the periodic table.

        """
        self._ptable = get_periodic_table() if ptable is None else ptable
        if formula is None:
            elements, isotopes = Counter(), Counter()
        elif isinstance(formula, str):
            elements, isotopes = _parse_formula(formula, self._ptable)
        else:
            other = _get_formula(formula)
            elements, isotopes = Counter(other.elements), Counter(other.isotopes)
            if ptable is None:
                self._ptable = other._ptable
        self.elements = elements
        self.isotopes = isotopes

    @classmethod
    def combine(cls, items: Iterable, ptable: Optional[PeriodicTable] = None) -> "Formula":
        """
        Creates a formula equal to the sum of the formula of each item.

        Parameters
        ----------
        items : Iterable
            Formulas or objects with a formula attribute.
        ptable : PeriodicTable or None, default=None

        """
        result = cls(ptable=ptable)
        for item in items:
            result.add(item)
        return result

    def copy(self) -> "Formula":
        return Formula(self)

    # add and remove

    def add(self, item, count: int = 1):
        """
        Adds atoms to the formula.

        Parameters
        ----------
        item : Element, Isotope, str, Formula or object with a formula attribute
            A string is interpreted as an element symbol. Formulas are added
            `count` times.
        count : int, default=1
            Number of atoms to add. Negative values remove atoms.

        """
        if count == 0:
            return
        if isinstance(item, Element):
            _update(self.elements, item, count)
        elif isinstance(item, Isotope):
            _update(self.isotopes, item, count)
        elif isinstance(item, str):
            _update(self.elements, self._ptable.get_element(item), count)
        else:
            other = _get_formula(item)
            # iterate over copies to support adding a formula to itself
            for element, coeff in list(other.elements.items()):
                _update(self.elements, element, coeff * count)
            for isotope, coeff in list(other.isotopes.items()):
                _update(self.isotopes, isotope, coeff * count)

    def remove(self, item, count: int = 1):
        """
        Removes atoms from the formula. Accepts the same arguments as `add`.

        """
        self.add(item, -count)

    def add_principal_isotopes_of(self, symbol: str, count: int):
        """Adds the principal isotope of an element as a fixed isotope."""
        isotope = self._ptable.get_element(symbol).get_monoisotope()
        self.add(isotope, count)

    def remove_isotope(self, isotope: Isotope) -> int:
        """
        Removes all atoms of a fixed isotope.

        Returns
        -------
        int
            Number of removed atoms.

        """
        return self.isotopes.pop(isotope, 0)

    def remove_isotopes_of(self, element: Union[Element, str]) -> int:
        """
        Removes all atoms of an element, including its fixed isotopes.

        Returns
        -------
        int
            Number of removed atoms with natural abundance.

        """
        element = self._resolve_element(element)
        count = self.elements.pop(element, 0)
        for isotope in [x for x in self.isotopes if x.z == element.z]:
            del self.isotopes[isotope]
        return count

    def replace(self, old: Isotope, new: Isotope):
        """Replaces all atoms of a fixed isotope with atoms of another isotope."""
        count = self.remove_isotope(old)
        self.add(new, count)

    def clear(self):
        self.elements = Counter()
        self.isotopes = Counter()

    # count and contains

    def count_specific_isotopes(self, isotope: Isotope) -> int:
        """Number of atoms of a fixed isotope."""
        return self.isotopes.get(isotope, 0)

    def count_with_isotopes(self, element: Union[Element, str]) -> int:
        """Number of atoms of an element, including fixed isotopes."""
        element = self._resolve_element(element)
        isotope_count = sum(v for k, v in self.isotopes.items() if k.z == element.z)
        return isotope_count + self.elements.get(element, 0)

    def contains_specific_isotope(self, isotope: Isotope) -> bool:
        return self.count_specific_isotopes(isotope) != 0

    def contains_isotopes_of(self, element: Union[Element, str]) -> bool:
        return self.count_with_isotopes(element) != 0

    def is_superset_of(self, other: "Formula") -> bool:
        """
        Checks if the formula contains at least the atoms in `other`.

        Elements and fixed isotopes are compared independently, i.e., carbon
        atoms with natural abundance do not contain a C{12} atom.

        """
        other = _get_formula(other)
        for element, count in other.elements.items():
            if count > 0 and self.elements.get(element, 0) < count:
                return False
        for isotope, count in other.isotopes.items():
            if count > 0 and self.isotopes.get(isotope, 0) < count:
                return False
        return True

    def is_subset_of(self, other: "Formula") -> bool:
        return _get_formula(other).is_superset_of(self)

    def get_hydrogen_carbon_ratio(self) -> float:
        """
        Ratio between the number of hydrogen and carbon atoms, including fixed
        isotopes.

        """
        n_carbon = self.count_with_isotopes(c.CARBON)
        n_hydrogen = self.count_with_isotopes(c.HYDROGEN)
        if n_carbon == 0:
            return math.nan if n_hydrogen == 0 else math.copysign(math.inf, n_hydrogen)
        return n_hydrogen / n_carbon

    # derived values

    def get_monoisotopic_mass(self) -> float:
        """
        Computes the monoisotopic mass of the formula, using the principal
        isotope of each element.

        Examples
        --------
        >>> f = Formula("H2O")
        >>> round(f.get_monoisotopic_mass(), 6)
        18.010565

        """
        isotopes_mass = sum(x.m * k for x, k in self.isotopes.items())
        elements_mass = sum(x.monoisotopic_mass * k for x, k in self.elements.items())
        return isotopes_mass + elements_mass

    def get_average_mass(self) -> float:
        """
        Computes the average mass of the formula. Fixed isotopes contribute
        with their exact mass.

        """
        isotopes_mass = sum(x.m * k for x, k in self.isotopes.items())
        elements_mass = sum(x.average_mass * k for x, k in self.elements.items())
        return isotopes_mass + elements_mass

    def get_nominal_mass(self) -> int:
        """
        Computes the nominal mass of the formula.

        Examples
        --------
        >>> Formula("H2O").get_nominal_mass()
        18

        """
        isotopes_mass = sum(x.a * k for x, k in self.isotopes.items())
        elements_mass = sum(x.nominal_mass * k for x, k in self.elements.items())
        return isotopes_mass + elements_mass

    def get_atom_count(self) -> int:
        return sum(self.isotopes.values()) + sum(self.elements.values())

    def get_n_elements(self) -> int:
        """Number of distinct elements, counting fixed isotopes by atomic number."""
        z = {x.z for x in self.elements}
        z.update(x.z for x in self.isotopes)
        return len(z)

    def get_n_isotopes(self) -> int:
        """Number of distinct fixed isotopes."""
        return len(self.isotopes)

    def get_proton_count(self) -> int:
        isotopes_count = sum(x.z * k for x, k in self.isotopes.items())
        elements_count = sum(x.z * k for x, k in self.elements.items())
        return isotopes_count + elements_count

    def get_neutron_count(self) -> int:
        """
        Computes the number of neutrons in the formula.

        Raises
        ------
        NeutronCountUndefined
            If the formula contains atoms with natural abundance.

        """
        if self.elements:
            msg = "The neutron count is only defined for formulas where all atoms are fixed isotopes."
            raise NeutronCountUndefined(msg)
        return sum(x.n * k for x, k in self.isotopes.items())

    def get_hill_notation(self, delimiter: str = "") -> str:
        """
        Creates a formula string using the Hill notation.

        Carbon is written first, then hydrogen and then the rest of the
        elements in alphabetic order. Fixed isotopes are written after the
        element using the mass number between braces.

        Parameters
        ----------
        delimiter : str, default=""
            String used to separate each element.

        Examples
        --------
        >>> Formula("H3NC2C{13}2O").get_hill_notation()
        'C2C{13}2H3NO'
        >>> Formula("H2O").get_hill_notation(" ")
        'H2 O'

        """
        return delimiter.join(_get_formula_tokens(self.elements, self.isotopes))

    def get_isotopic_distribution(
        self,
        resolution: float = c.DEFAULT_RESOLUTION,
        min_intensity: float = c.DEFAULT_MIN_INTENSITY,
        min_p: float = c.DEFAULT_MIN_P,
        n_jobs: Optional[int] = None,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Computes the isotopic distribution of the formula.

        The natural abundance is assumed for each element. Fixed isotopes
        shift the mass of the distribution. See the examples for a
        clarification of this.

        Parameters
        ----------
        resolution : float, default=0.01
            Peaks with a mass difference lower than this value are merged into
            a single peak, with the abundance-weighted mean mass.
        min_intensity : float, default=1e-10
            Number in the interval (0, 1]. Peaks with an abundance lower than
            this fraction of the most abundant peak are discarded while the
            distribution is computed.
        min_p : float, default=0.0
            Number in the interval [0, 1). Peaks with a normalized abundance
            lower than this value are removed from the result.
        n_jobs : int or None, default=None
            Number of jobs used to compute the distribution of each element.

        Returns
        -------
        M : numpy.ndarray
            Exact mass of each peak, sorted in ascending order.
        p : numpy.ndarray
            Abundance of each peak. The abundances sum to one.

        Raises
        ------
        InvalidParameter
            If the parameters have invalid values.
        NegativeAtomCount
            If the formula has negative coefficients.

        Notes
        -----
        Peaks are merged with their neighbours after each convolution, so a
        low intensity peak may join two peaks that are more than `resolution`
        apart into a single group. If a larger `min_intensity` removes that
        peak, its neighbours are reported as separate peaks. Because of this,
        increasing `min_intensity` or `resolution` reduces the number of peaks
        in most cases, but it may increase it for large formulas.

        Examples
        --------
        If no isotopes are specified in the formula, the natural abundance is
        assumed:

        >>> f = Formula("CO")
        >>> M, p = f.get_isotopic_distribution(resolution=1e-3, min_intensity=1e-5)
        >>> M.size
        4

        Fixed isotopes have a single mass:

        >>> f = Formula("C{13}O{16}")
        >>> M, p = f.get_isotopic_distribution()
        >>> p
        array([1.])

        """
        return find_isotopic_distribution(
            self.elements,
            self.isotopes,
            resolution=resolution,
            min_intensity=min_intensity,
            min_p=min_p,
            n_jobs=n_jobs,
        )

    def _resolve_element(self, element: Union[Element, str]) -> Element:
        if isinstance(element, Element):
            return element
        return self._ptable.get_element(element)

    # formula algebra

    def __add__(self, other: "Formula") -> "Formula":
        if not isinstance(other, Formula):
            return NotImplemented
        result = Formula(self)
        result.add(other)
        return result

    def __sub__(self, other: "Formula") -> "Formula":
        if not isinstance(other, Formula):
            return NotImplemented
        result = Formula(self)
        result.remove(other)
        return result

    def __mul__(self, n: int) -> "Formula":
        if not isinstance(n, Integral) or isinstance(n, bool):
            return NotImplemented
        result = Formula(ptable=self._ptable)
        result.add(self, int(n))
        return result

    __rmul__ = __mul__

    def __eq__(self, other) -> bool:
        if not isinstance(other, Formula):
            return NotImplemented
        return (self.elements == other.elements) and (self.isotopes == other.isotopes)

    # mutable object
    __hash__ = None

    def __repr__(self):
        return "Formula({})".format(str(self))

    def __str__(self):
        return self.get_hill_notation()


def is_valid_formula(formula: str) -> bool:
    """
    Checks if a string is a valid formula.

    Examples
    --------
    >>> is_valid_formula("C2 H3 N O")
    True
    >>> is_valid_formula("C2H3NO#")
    False

    """
    return _FORMULA_REGEX.fullmatch(formula) is not None


def filter_by_hydrogen_carbon_ratio(
    items: Iterable, min_ratio: float = 0.5, max_ratio: float = 2.0
) -> Iterator:
    """
    Yields the items with a hydrogen to carbon ratio within the given bounds.

    Parameters
    ----------
    items : Iterable
        Formulas or objects with a formula attribute.
    min_ratio : float, default=0.5
    max_ratio : float, default=2.0

    """
    if min_ratio > max_ratio:
        raise InvalidParameter("min_ratio must be lower or equal than max_ratio.")
    for item in items:
        ratio = _get_formula(item).get_hydrogen_carbon_ratio()
        if min_ratio <= ratio <= max_ratio:
            yield item


def _get_formula(item) -> Formula:
    """Returns the Formula of a formula or of an object with a formula attribute."""
    if isinstance(item, Formula):
        return item
    formula = getattr(item, "formula", None)
    if isinstance(formula, Formula):
        return formula
    msg = "Expected a Formula or an object with a formula attribute, got {}.".format(type(item))
    raise InvalidParameter(msg)


def _update(counter: Counter, key, count: int):
    """Adds count to a key, removing the key if the result is zero."""
    new_count = counter.get(key, 0) + count
    if new_count == 0:
        counter.pop(key, None)
    else:
        counter[key] = new_count


def _parse_formula(formula: str, ptable: PeriodicTable) -> Tuple[Counter, Counter]:
    """
    Parse a formula string into Counters that maps elements and isotopes to
    formula coefficients.
    """
    elements = Counter()
    isotopes = Counter()
    if not formula:
        return elements, isotopes

    if not is_valid_formula(formula):
        msg = "{} is not a valid formula string.".format(formula)
        raise InvalidFormula(msg)

    for match in _TOKEN_REGEX.finditer(formula):
        symbol, mass_number, minus, coefficient = match.groups()
        element = ptable.get_element(symbol)
        coefficient = 1 if coefficient is None else int(coefficient)
        if minus is not None:
            coefficient = -coefficient
        if mass_number is None:
            _update(elements, element, coefficient)
        else:
            _update(isotopes, element.get_isotope(int(mass_number)), coefficient)
    return elements, isotopes


# functions to get a formula string from a Formula


def _coefficient_to_str(coefficient: int) -> str:
    return "" if coefficient == 1 else str(coefficient)


def _element_to_str(element: Element, coefficient: int) -> str:
    return "{}{}".format(element.symbol, _coefficient_to_str(coefficient))


def _isotope_to_str(isotope: Isotope, coefficient: int) -> str:
    return "{}{{{}}}{}".format(isotope.symbol, isotope.a, _coefficient_to_str(coefficient))


def _get_formula_tokens(elements: Counter, isotopes: Counter) -> List[str]:
    tokens = list()
    # C and H first, each element followed by its isotopes
    for symbol in [c.CARBON, c.HYDROGEN]:
        for element, coefficient in elements.items():
            if element.symbol == symbol:
                tokens.append(_element_to_str(element, coefficient))
        symbol_isotopes = sorted((x for x in isotopes if x.symbol == symbol), key=lambda x: x.a)
        for isotope in symbol_isotopes:
            tokens.append(_isotope_to_str(isotope, isotopes[isotope]))

    # add other elements, sorted alphabetically
    other = [
        _element_to_str(k, v) for k, v in elements.items()
        if k.symbol not in (c.CARBON, c.HYDROGEN)
    ]
    other.extend(
        _isotope_to_str(k, v) for k, v in isotopes.items()
        if k.symbol not in (c.CARBON, c.HYDROGEN)
    )
    tokens.extend(sorted(other))
    return tokens
