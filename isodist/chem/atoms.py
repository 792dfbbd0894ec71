"""
Tools for working with Isotopes and Elements.

Objects
-------
- Element
- Isotope
- PeriodicTable
- TableValidationResult

Functions
---------
- get_periodic_table
- load_periodic_table

"""
import json
import logging
import numpy as np
import os.path
import threading
from numbers import Integral
from string import digits
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple, Union
from .. import _constants as c
from ..exceptions import (
    ElementAlreadyRegistered,
    ElementNotFound,
    InvalidParameter,
    IsotopeAlreadyRegistered,
    IsotopeNotFound,
    PeriodicTableFrozen,
)


logger = logging.getLogger(__name__)


class Isotope:
    """
    Representation of an Isotope.

    Isotopes are created by :py:meth:`Element.add_isotope` and refer to their
    element by symbol and atomic number only.

    Attributes
    ----------
    z: int
        Atomic number
    n: int
        Neutron number
    a: int
        Mass number
    m: float
        Exact mass.
    defect: float
        Difference between the exact mass and mass number.
    abundance: float
        Relative abundance of the isotope.
    symbol: str
        Symbol of the element.
    is_principal: bool
        True if the isotope is the most abundant isotope of the element.

    """

    __slots__ = ("z", "n", "a", "m", "defect", "abundance", "symbol", "is_principal")

    def __init__(self, z: int, a: int, m: float, abundance: float, symbol: str):
        self.z = z
        self.n = a - z
        self.a = a
        self.m = m
        self.defect = m - a
        self.abundance = abundance
        self.symbol = symbol
        self.is_principal = False

    def __str__(self):
        return "{}{}".format(self.a, self.symbol)

    def __repr__(self):
        return "Isotope({})".format(str(self))


class Element:
    """
    Representation of a chemical element.

    Attributes
    ----------
    symbol : str
        Element symbol
    z : int
        Atomic number.
    average_mass : float
        Reference average mass of the element.
    name : str or None
        Element name.
    isotopes : Dict[int, Isotope]
        Mapping from mass number to an isotope, in registration order.

    """

    def __init__(self, symbol: str, z: int, average_mass: float, name: Optional[str] = None):
        self.symbol = symbol
        self.z = z
        self.average_mass = average_mass
        self.name = name
        self.isotopes: Dict[int, Isotope] = dict()
        self._monoisotope: Optional[Isotope] = None

    def __repr__(self):
        return "Element({})".format(self.symbol)

    def __str__(self):  # pragma: no cover
        return self.symbol

    @property
    def nominal_mass(self) -> int:
        """Mass number of the most abundant isotope."""
        return self.get_monoisotope().a

    @property
    def monoisotopic_mass(self) -> float:
        """Exact mass of the most abundant isotope."""
        return self.get_monoisotope().m

    def add_isotope(self, a: int, m: float, abundance: float) -> Isotope:
        """
        Creates a new isotope of the element.

        The principal isotope is updated if the new isotope is more abundant
        than the current one. On ties, the isotope added first is kept.

        Parameters
        ----------
        a : int
            Mass number.
        m : float
            Exact mass.
        abundance : float
            Natural relative abundance.

        Returns
        -------
        Isotope

        Raises
        ------
        IsotopeAlreadyRegistered
            If an isotope with the same mass number was already added.

        """
        if a in self.isotopes:
            msg = "Isotope with mass number {} already exists for {}.".format(a, self.symbol)
            raise IsotopeAlreadyRegistered(msg)
        isotope = Isotope(self.z, a, m, abundance, self.symbol)
        self.isotopes[a] = isotope
        if (self._monoisotope is None) or (abundance > self._monoisotope.abundance):
            if self._monoisotope is not None:
                self._monoisotope.is_principal = False
            isotope.is_principal = True
            self._monoisotope = isotope
        return isotope

    def get_isotope(self, a: int) -> Isotope:
        """
        Returns the isotope with mass number `a`.

        Raises
        ------
        IsotopeNotFound

        """
        try:
            return self.isotopes[a]
        except KeyError as e:
            msg = "{} does not have an isotope with mass number {}.".format(self.symbol, a)
            raise IsotopeNotFound(msg) from e

    def get_abundances(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Returns the Mass number, exact mass and abundance of each Isotope.

        Returns
        -------
        m: array[int]
            Mass number of each isotope.
        M: array[float]
            Exact mass of each isotope.
        p: array[float]
            Abundance of each isotope.

        """
        isotopes = list(self.isotopes.values())
        m = np.array([x.a for x in isotopes], dtype=int)
        M = np.array([x.m for x in isotopes], dtype=float)
        p = np.array([x.abundance for x in isotopes], dtype=float)
        return m, M, p

    def get_monoisotope(self) -> Isotope:
        """
        Returns the most abundant isotope.

        Raises
        ------
        IsotopeNotFound
            If the element does not have isotopes.

        """
        if self._monoisotope is None:
            msg = "{} does not have isotopes.".format(self.symbol)
            raise IsotopeNotFound(msg)
        return self._monoisotope


class TableValidationResult(NamedTuple):
    """Report created by the PeriodicTable validation methods."""

    passed: bool
    message: str


class PeriodicTable:
    """
    Registry of elements, indexed by symbol and atomic number.

    Tables are populated once by a sequence of :py:meth:`add` calls and are
    read-only afterwards. :py:meth:`freeze` enforces this contract: a frozen
    table rejects new elements. Reading a table from multiple threads is safe
    once it is fully populated.

    Methods
    -------
    add
    freeze
    get_element
    get_isotope
    validate_abundances
    validate_average_masses

    Examples
    --------
    >>> from isodist.chem import Element, PeriodicTable
    >>> ptable = PeriodicTable()
    >>> h = Element("H", 1, 1.00794)
    >>> ptable.add(h)
    >>> _ = h.add_isotope(1, 1.00782503223, 0.999885)
    >>> _ = h.add_isotope(2, 2.01410177812, 0.000115)
    >>> ptable.get_element(1)
    Element(H)

    """

    def __init__(self):
        self._symbol_to_element: Dict[str, Element] = dict()
        self._z_to_element: Dict[int, Element] = dict()
        self._frozen = False

    def __len__(self) -> int:
        return len(self._symbol_to_element)

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._symbol_to_element

    def __iter__(self) -> Iterator[Element]:
        return iter(self._symbol_to_element.values())

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def freeze(self):
        """Forbids adding new elements to the table."""
        self._frozen = True

    def add(self, element: Element):
        """
        Register an element.

        Raises
        ------
        InvalidParameter
            If `element` is ``None``.
        ElementAlreadyRegistered
            If the symbol or the atomic number is already in the table.
        PeriodicTableFrozen
            If the table is frozen.

        """
        if element is None:
            raise InvalidParameter("element must be an Element, got None.")
        if self._frozen:
            raise PeriodicTableFrozen("Cannot add {} to a frozen table.".format(element.symbol))
        if element.symbol in self._symbol_to_element:
            msg = "An element with symbol {} is already registered.".format(element.symbol)
            raise ElementAlreadyRegistered(msg)
        if element.z in self._z_to_element:
            msg = "An element with atomic number {} is already registered.".format(element.z)
            raise ElementAlreadyRegistered(msg)
        self._symbol_to_element[element.symbol] = element
        self._z_to_element[element.z] = element

    def get_element(self, element: Union[str, int]) -> Element:
        """
        Returns an Element object using its symbol or atomic number.

        Parameters
        ----------
        element : str or int
            element symbol or atomic number.

        Returns
        -------
        Element

        Raises
        ------
        ElementNotFound

        Examples
        --------
        >>> from isodist.chem import get_periodic_table
        >>> ptable = get_periodic_table()
        >>> h = ptable.get_element("H")
        >>> c = ptable.get_element(6)

        """
        try:
            if isinstance(element, Integral) and not isinstance(element, bool):
                return self._z_to_element[int(element)]
            else:
                return self._symbol_to_element[element]
        except KeyError as e:
            raise ElementNotFound("{} is not a registered element.".format(element)) from e

    def get_isotope(self, x: str, a: Optional[int] = None) -> Isotope:
        """
        Returns an isotope object from a string representation.

        Parameters
        ----------
        x : str
            A string representation of an isotope, e.g. ``"13C"``. If only the
            symbol is provided in the string, the principal isotope is
            returned.
        a : int or None, default=None
            Mass number. If provided, `x` must be an element symbol.

        Returns
        -------
        Isotope

        Raises
        ------
        ElementNotFound
        IsotopeNotFound

        Examples
        --------
        >>> from isodist.chem import get_periodic_table
        >>> ptable = get_periodic_table()
        >>> d = ptable.get_isotope("2H")
        >>> cl35 = ptable.get_isotope("Cl")
        >>> c13 = ptable.get_isotope("C", 13)

        """
        if a is None and x and (x[0] in digits):
            symbol = x.lstrip(digits)
            a = int(x[:len(x) - len(symbol)])
        else:
            symbol = x
        element = self.get_element(symbol)
        if a is None:
            return element.get_monoisotope()
        return element.get_isotope(a)

    def validate_abundances(self, epsilon: float) -> TableValidationResult:
        """
        Checks that the abundances of each element sum to one.

        Parameters
        ----------
        epsilon : float
            Maximum absolute difference between the sum and one.

        Returns
        -------
        TableValidationResult
            Report with the first element that fails the check.

        """
        for element in self:
            _, _, p = element.get_abundances()
            total = p.sum()
            if abs(total - 1.0) > epsilon:
                msg = "Abundances of {} sum to {} instead of 1.".format(element.symbol, total)
                return TableValidationResult(False, msg)
        return TableValidationResult(True, c.VALIDATION_PASSED)

    def validate_average_masses(self, epsilon: float) -> TableValidationResult:
        """
        Checks that the abundance-weighted mass of each element agrees with
        its reference average mass.

        Parameters
        ----------
        epsilon : float
            Maximum relative error allowed.

        Returns
        -------
        TableValidationResult
            Report with the first element that fails the check.

        """
        for element in self:
            _, M, p = element.get_abundances()
            total = p.sum()
            if total <= 0.0:
                msg = "{} does not have isotopes with non-zero abundance.".format(element.symbol)
                return TableValidationResult(False, msg)
            weighted_mass = (M * p).sum() / total
            error = abs(weighted_mass - element.average_mass) / element.average_mass
            if error > epsilon:
                msg = "Average mass of {} is {} instead of {}.".format(
                    element.symbol, weighted_mass, element.average_mass
                )
                return TableValidationResult(False, msg)
        return TableValidationResult(True, c.VALIDATION_PASSED)


_default_table: Optional[PeriodicTable] = None
_default_table_lock = threading.Lock()


def get_periodic_table() -> PeriodicTable:
    """
    Reference the process-wide PeriodicTable.

    The table is loaded from the packaged reference data on first use and
    frozen.

    Examples
    --------
    >>> from isodist.chem import get_periodic_table
    >>> ptable = get_periodic_table()

    """
    global _default_table
    if _default_table is None:
        with _default_table_lock:
            if _default_table is None:
                table = load_periodic_table()
                table.freeze()
                _default_table = table
    return _default_table


def load_periodic_table(path: Optional[str] = None) -> PeriodicTable:
    """
    Creates a new PeriodicTable from a JSON file.

    Parameters
    ----------
    path : str or None, default=None
        Path to a JSON file mapping element symbols to an object with the
        fields ``name``, ``z``, ``average_mass`` and ``isotopes``. Each
        isotope has the fields ``a``, ``m`` and ``abundance``. If ``None``,
        the packaged reference data is used.

    Returns
    -------
    PeriodicTable
        A new table, not frozen.

    """
    if path is None:
        this_dir, _ = os.path.split(__file__)
        path = os.path.join(this_dir, c.ELEMENTS_FILENAME)
    with open(path, "r") as fin:
        element_data = json.load(fin)

    ptable = PeriodicTable()
    for symbol, data in element_data.items():
        element = Element(symbol, data["z"], data["average_mass"], data.get("name"))
        ptable.add(element)
        isotopes: List[dict] = data["isotopes"]
        for isotope in isotopes:
            element.add_isotope(isotope["a"], isotope["m"], isotope["abundance"])
    logger.info("Loaded %d elements from %s.", len(ptable), path)
    return ptable
