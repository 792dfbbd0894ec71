# -*- coding: utf-8 -*-
"""
tools to compute isotopic distributions

The distribution of a formula is built by convolution of the distributions
of its elements. After each convolution, peaks closer than a mass resolution
are merged and peaks with low intensity are removed, which bounds the number
of peaks that are carried to the next step.

"""

import logging
import numpy as np
from joblib import Parallel, delayed
from typing import Dict, Optional, Tuple
from .atoms import Element, Isotope
from .. import _constants as c
from ..exceptions import IsotopeNotFound, NegativeAtomCount
from ..validation import validate_distribution_params


logger = logging.getLogger(__name__)


def find_isotopic_distribution(
    elements: Dict[Element, int],
    isotopes: Dict[Isotope, int],
    resolution: float = c.DEFAULT_RESOLUTION,
    min_intensity: float = c.DEFAULT_MIN_INTENSITY,
    min_p: float = c.DEFAULT_MIN_P,
    n_jobs: Optional[int] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Computes the isotopic distribution of a formula composition.

    Parameters
    ----------
    elements : Dict[Element, int]
        Number of atoms with natural isotopic abundance for each element.
    isotopes : Dict[Isotope, int]
        Number of atoms of isotopes with a fixed mass.
    resolution : float
        Peaks with a mass difference lower than this value are merged.
    min_intensity : float
        After each convolution, peaks with an abundance lower than this
        fraction of the maximum abundance are removed.
    min_p : float
        Peaks with a normalized abundance lower than this value are removed
        from the result.
    n_jobs : int or None, default=None
        Number of jobs used to compute the distribution of each element. If
        ``None``, elements are processed sequentially.

    Returns
    -------
    M : array
        Exact mass of each peak, sorted in ascending order.
    p : array
        Abundance of each peak. Abundances sum to one.

    Raises
    ------
    InvalidParameter
        If the tuning parameters have invalid values.
    NegativeAtomCount
        If any atom count is negative.

    Notes
    -----
    Peaks are grouped by chaining neighbours closer than `resolution`. Peaks
    removed in earlier steps no longer link their neighbours, so the number
    of peaks is not guaranteed to decrease with larger `resolution` or
    `min_intensity` values. See
    :py:meth:`isodist.chem.Formula.get_isotopic_distribution`.

    """
    validate_distribution_params(resolution, min_intensity, min_p, n_jobs)
    _check_non_negative(elements)
    _check_non_negative(isotopes)
    logger.debug(
        "Computing isotopic distribution with resolution=%s, min_intensity=%s, min_p=%s.",
        resolution, min_intensity, min_p
    )

    sorted_elements = sorted(elements, key=lambda x: x.z)
    element_args = list()
    for element in sorted_elements:
        _, Me, pe = element.get_abundances()
        if not (pe > 0.0).any():
            msg = "{} does not have isotopes with non-zero abundance.".format(element.symbol)
            raise IsotopeNotFound(msg)
        element_args.append((Me, pe, elements[element]))

    if n_jobs is None:
        element_distributions = [
            _get_n_atoms_distribution(Me, pe, n, resolution, min_intensity)
            for Me, pe, n in element_args
        ]
    else:
        element_distributions = Parallel(n_jobs=n_jobs)(
            delayed(_get_n_atoms_distribution)(Me, pe, n, resolution, min_intensity)
            for Me, pe, n in element_args
        )

    # empty formula: a single peak with zero mass
    M = np.zeros(1, dtype=float)
    p = np.ones(1, dtype=float)
    for Me, pe in element_distributions:
        M, p = _convolve(M, p, Me, pe, resolution, min_intensity)

    # fixed isotopes shift the distribution
    M = M + _get_isotopes_mass(isotopes)

    M, p = _normalize(M, p, min_p)
    logger.debug("Isotopic distribution computed with %d peaks.", M.size)
    return M, p


def _check_non_negative(counts: Dict):
    negative = [str(k) for k, v in counts.items() if v < 0]
    if negative:
        msg = "Isotopic distributions are not defined for negative coefficients: {}."
        raise NegativeAtomCount(msg.format(", ".join(negative)))


def _get_isotopes_mass(isotopes: Dict[Isotope, int]) -> float:
    return sum(isotope.m * count for isotope, count in isotopes.items())


def _get_n_atoms_distribution(
    M: np.ndarray,
    p: np.ndarray,
    n: int,
    resolution: float,
    min_intensity: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Computes the distribution of `n` atoms of an element by repeated squaring
    of the single atom distribution.

    Parameters
    ----------
    M : array
        Exact mass of each isotope.
    p : array
        Abundance of each isotope.
    n : int
        Number of atoms.
    resolution : float
    min_intensity : float

    Returns
    -------
    M : array
    p : array

    """
    base_M, base_p = _coalesce(M, p, resolution, min_intensity)
    res_M = np.zeros(1, dtype=float)
    res_p = np.ones(1, dtype=float)
    while n > 0:
        if n & 1:
            res_M, res_p = _convolve(res_M, res_p, base_M, base_p, resolution, min_intensity)
        n >>= 1
        if n:
            base_M, base_p = _convolve(base_M, base_p, base_M, base_p, resolution, min_intensity)
    return res_M, res_p


def _convolve(
    M1: np.ndarray,
    p1: np.ndarray,
    M2: np.ndarray,
    p2: np.ndarray,
    resolution: float,
    min_intensity: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Combines two independent distributions: masses of each pair of peaks are
    added and abundances are multiplied. The result is coalesced.

    """
    M = np.add.outer(M1, M2).ravel()
    p = np.multiply.outer(p1, p2).ravel()
    return _coalesce(M, p, resolution, min_intensity)


def _coalesce(
    M: np.ndarray,
    p: np.ndarray,
    resolution: float,
    min_intensity: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Merges consecutive peaks with a mass difference lower than `resolution`
    and removes peaks with abundance lower than `min_intensity` times the
    maximum abundance.

    The mass of a merged peak is the abundance-weighted mean of the masses of
    the merged peaks and its abundance is the sum of their abundances.

    Returns
    -------
    M : array
        Sorted masses.
    p : array

    """
    positive = p > 0.0
    M = M[positive]
    p = p[positive]
    if not M.size:
        return M, p

    sorted_index = np.argsort(M, kind="stable")
    M = M[sorted_index]
    p = p[sorted_index]

    # index where each group of close peaks starts
    is_new_group = np.diff(M) >= resolution
    start = np.flatnonzero(np.hstack((True, is_new_group)))
    p_merged = np.add.reduceat(p, start)
    M_merged = np.add.reduceat(M * p, start) / p_merged

    keep = p_merged >= min_intensity * p_merged.max()
    return M_merged[keep], p_merged[keep]


def _normalize(M: np.ndarray, p: np.ndarray, min_p: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Scales abundances to sum one, removes peaks lower than `min_p` and scales
    the remaining peaks again.

    """
    p = p / p.sum()
    if min_p > 0.0:
        keep = p >= min_p
        M = M[keep]
        p = p[keep]
        if p.size:
            p = p / p.sum()
    return M, p