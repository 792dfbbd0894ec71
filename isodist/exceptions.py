"""isodist custom exceptions."""


class ElementNotFound(LookupError):
    """Exception raised when an element symbol or atomic number is not registered."""


class IsotopeNotFound(LookupError):
    """Exception raised when an element does not have an isotope with the requested mass number."""


class InvalidFormula(ValueError):
    """Exception raised when a formula string does not match the formula grammar."""


class ElementAlreadyRegistered(ValueError):
    """Exception raised when adding an element with an existing symbol or atomic number."""


class IsotopeAlreadyRegistered(ValueError):
    """Exception raised when adding an isotope with an existing mass number to an element."""


class InvalidParameter(ValueError):
    """Exception raised when a parameter value is not valid."""


class NeutronCountUndefined(ValueError):
    """Exception raised when computing the neutron count of a formula with natural abundance elements."""


class NegativeAtomCount(ValueError):
    """Exception raised when computing an isotopic distribution of a formula with negative coefficients."""


class PeriodicTableFrozen(RuntimeError):
    """Exception raised when trying to add elements to a frozen periodic table."""
