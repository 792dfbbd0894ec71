"""
Mass to m/z conversion and mass comparison.

Functions
---------
- mz_from_mass
- mass_from_mz
- to_mz
- to_mass
- mass_equals
- compare_masses

"""

import math
from numbers import Real
from typing import Union
from .. import _constants as c
from ..exceptions import InvalidParameter


def mz_from_mass(mass: float, charge: int) -> float:
    """
    Computes the m/z of a mass, assuming that the charge comes from gaining
    or losing protons.

    Raises
    ------
    InvalidParameter
        If `charge` is zero.

    """
    _check_charge(charge)
    return mass / abs(charge) + math.copysign(c.PROTON, charge)


def mass_from_mz(mz: float, charge: int) -> float:
    """
    Computes the neutral mass from a m/z value, assuming that the charge comes
    from gaining or losing protons.

    Raises
    ------
    InvalidParameter
        If `charge` is zero.

    """
    _check_charge(charge)
    return abs(charge) * mz - charge * c.PROTON


def to_mz(x, charge: int) -> float:
    """
    Computes the m/z of a mass or of an object with a monoisotopic mass.

    Parameters
    ----------
    x : float or object
        A mass value or an object with a ``get_monoisotopic_mass`` method,
        e.g. a Formula.
    charge : int

    """
    return mz_from_mass(_get_mass(x), charge)


def to_mass(x, charge: int) -> float:
    """
    Computes the neutral mass of a m/z value or of an object with a
    monoisotopic mass.

    """
    return mass_from_mz(_get_mass(x), charge)


def mass_equals(x, y, epsilon: float = c.MASS_EQUALITY_EPSILON) -> bool:
    """
    Checks if two masses are equal within a tolerance.

    Parameters
    ----------
    x, y : float or object
        Mass values or objects with a ``get_monoisotopic_mass`` method.
    epsilon : float
        Masses are equal if the absolute difference is lower than this value.

    """
    if x is None or y is None:
        return False
    return abs(_get_mass(x) - _get_mass(y)) < epsilon


def compare_masses(x, y, epsilon: float = c.MASS_EQUALITY_EPSILON) -> int:
    """
    Compares two masses within a tolerance.

    Returns
    -------
    int
        -1 if `x` is lower than `y`, 1 if `x` is greater than `y` and 0 if
        they are equal within `epsilon`.

    """
    difference = _get_mass(x) - _get_mass(y)
    if difference < -epsilon:
        return -1
    return 1 if difference > epsilon else 0


def _get_mass(x: Union[float, object]) -> float:
    if isinstance(x, Real):
        return float(x)
    try:
        return x.get_monoisotopic_mass()
    except AttributeError as e:
        msg = "Expected a number or an object with a monoisotopic mass, got {}.".format(type(x))
        raise InvalidParameter(msg) from e


def _check_charge(charge: int):
    if charge == 0:
        raise InvalidParameter("Charge cannot be zero.")
